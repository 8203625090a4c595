# src/cfn_digest/core/graph.py
"""
Grafo de dependências entre recursos CloudFormation.

Este módulo constrói o grafo dirigido `G = (V, E)` em que `V` são os
logical ids do template e `(u, v) ∈ E` significa que o recurso `u`
depende de (referencia) `v`, e produz a ordem topológica usada pelo
cálculo de digests.

Componentes principais:
    - build_dependency_graph → adjacências direta e reversa de um template
    - topological_order      → ordenação de Kahn por eliminação de grau
    - ResourceGraph          → grafo imutável (um template ou várias stacks)

Princípios fundamentais:
    - O grafo é construído do zero a cada chamada, sem persistência
    - A construção é funcional: lista de arestas → índices direto e reverso
    - Referências externas (ids fora de `Resources`) são descartadas
    - Auto-referências são descartadas

Decisões arquiteturais:
    - A ordem de vizinhos preserva a ordem de descoberta das referências
    - O grafo é assumido acíclico (regra do próprio CloudFormation); a
      ordenação não valida ciclos, apenas deixa de emitir os nós afetados
    - `unresolved_nodes` expõe os nós que ficaram fora da ordem

Limites explícitos:
    - Não calcula digests
    - Não decide a política para ciclos (responsabilidade de `digest`)
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from .references import DEPENDS_ON, GET_ATT, IMPORT_VALUE, REF, find_dependencies, get_att_target


class UnknownNodeError(ValueError):
    """
    Exceção levantada quando um nó inexistente é consultado no grafo.

    Invariantes:
        - Apenas ids presentes no grafo possuem vizinhança definida
    """


class CycleDetectedError(ValueError):
    """
    Exceção levantada quando o grafo de recursos contém um ciclo.

    CloudFormation não aceita ciclos de referência entre recursos; esta
    exceção só é levantada quando a política `graph.on_cycle` é `raise`.

    Atributos:
        nodes (Tuple[str, ...]): Ids que não puderam ser ordenados.
    """

    def __init__(self, message: str, nodes: Iterable[str] = ()):
        super().__init__(message)
        self.nodes: Tuple[str, ...] = tuple(nodes)


Edge = Tuple[str, str]
Adjacency = Dict[str, Tuple[str, ...]]


def _fold_edges(nodes: Sequence[str], edges: Iterable[Edge]) -> Tuple[Adjacency, Adjacency]:
    """Dobra uma lista de arestas nos índices direto e reverso (sem duplicatas)."""
    forward: Dict[str, Dict[str, None]] = {n: {} for n in nodes}
    backward: Dict[str, Dict[str, None]] = {n: {} for n in nodes}
    for source, target in edges:
        forward[source][target] = None
        backward[target][source] = None
    return (
        {n: tuple(targets) for n, targets in forward.items()},
        {n: tuple(sources) for n, sources in backward.items()},
    )


def _resource_edges(resources: Mapping[str, Any]) -> List[Edge]:
    edges: List[Edge] = []
    for rid, resource in resources.items():
        for dep in find_dependencies(resource or {}):
            if isinstance(dep, str) and dep in resources and dep != rid:
                edges.append((rid, dep))
    return edges


def topological_order(
    graph: Mapping[str, Iterable[str]],
    reverse_graph: Mapping[str, Iterable[str]],
) -> List[str]:
    """
    Ordena os nós de forma que cada um apareça depois de todas as suas dependências.

    Algoritmo de Kahn orientado a dependências:
        1. grau de saída de cada nó = número de dependências (`len(graph[id])`)
        2. a fila inicia com os nós de grau 0 (folhas)
        3. cada nó retirado da fila é emitido e decrementa o grau dos nós
           que dependem dele (`reverse_graph[id]`); grau 0 → entra na fila

    Nós presos em um ciclo nunca atingem grau 0 e ficam fora do resultado.

    Args:
        graph (Mapping[str, Iterable[str]]): id → ids dos quais depende.
        reverse_graph (Mapping[str, Iterable[str]]): id → ids que dependem dele.

    Returns:
        List[str]: Ids em ordem topológica (dependências primeiro).
    """
    out_degree: Dict[str, int] = {node: len(list(deps)) for node, deps in graph.items()}
    queue: List[str] = [node for node, degree in out_degree.items() if degree == 0]
    order: List[str] = []

    while queue:
        node = queue.pop(0)
        order.append(node)
        for dependant in reverse_graph.get(node, ()):
            out_degree[dependant] -= 1
            if out_degree[dependant] == 0:
                queue.append(dependant)

    return order


def collect_exports(stacks: Iterable[Any]) -> Dict[str, Dict[str, Any]]:
    """
    Indexa os exports (`Outputs.*.Export.Name`) de um conjunto de stacks.

    Returns:
        Dict[str, Dict[str, Any]]: nome do export → {"stack_name", "value"}.
    """
    exports: Dict[str, Dict[str, Any]] = {}
    for stack in stacks:
        outputs = (stack.template or {}).get("Outputs") or {}
        for output in outputs.values():
            if not isinstance(output, dict):
                continue
            export = output.get("Export")
            name = export.get("Name") if isinstance(export, dict) else None
            if isinstance(name, str):
                exports[name] = {"stack_name": stack.stack_name, "value": output.get("Value")}
    return exports


def _find_stack_dependencies(stack_name: str, value: Any, exports: Mapping[str, Dict[str, Any]]) -> List[str]:
    """
    Variante multi-stack do extrator de referências.

    Ids são qualificados como `<Stack>.<LogicalId>`; `Fn::ImportValue`
    resolve para o recurso da stack exportadora. Aqui `DependsOn` não é
    terminal: as demais chaves do mesmo nó continuam sendo visitadas.
    """
    if isinstance(value, (list, tuple)):
        found: List[str] = []
        for item in value:
            found.extend(_find_stack_dependencies(stack_name, item, exports))
        return found

    if not isinstance(value, dict):
        return []

    if REF in value:
        return [f"{stack_name}.{value[REF]}"]

    if GET_ATT in value:
        target = get_att_target(value[GET_ATT])
        return [] if target is None else [f"{stack_name}.{target}"]

    if IMPORT_VALUE in value:
        name = value[IMPORT_VALUE]
        exported = exports.get(name) if isinstance(name, str) else None
        if exported is None:
            return []
        producer = exported["stack_name"]
        v = exported["value"]
        if isinstance(v, dict):
            if GET_ATT in v:
                target = get_att_target(v[GET_ATT])
                return [] if target is None else [f"{producer}.{target}"]
            if REF in v:
                return [f"{producer}.{v[REF]}"]
            return []
        return [f"{producer}.{v}"]

    found = []
    if DEPENDS_ON in value:
        deps = value[DEPENDS_ON]
        for dep in deps if isinstance(deps, (list, tuple)) else [deps]:
            found.append(f"{stack_name}.{dep}")
    for child in value.values():
        found.extend(_find_stack_dependencies(stack_name, child, exports))
    return found


class ResourceGraph:
    """
    Grafo dirigido e imutável de recursos.

    `edges[u]` contém os nós dos quais `u` depende; `reverse_edges[v]`
    contém os nós que dependem de `v`. Instâncias não são mutadas após a
    construção; `opposite()` devolve um novo grafo com as arestas invertidas.
    """

    def __init__(self, edges: Adjacency, reverse_edges: Adjacency):
        self._edges: Adjacency = dict(edges)
        self._reverse_edges: Adjacency = dict(reverse_edges)

    @classmethod
    def from_edges(cls, nodes: Sequence[str], edges: Iterable[Edge]) -> "ResourceGraph":
        forward, backward = _fold_edges(nodes, edges)
        return cls(forward, backward)

    @classmethod
    def from_resources(cls, resources: Mapping[str, Any]) -> "ResourceGraph":
        """Grafo de um único template (ids não qualificados)."""
        return cls.from_edges(list(resources.keys()), _resource_edges(resources))

    @classmethod
    def from_stacks(cls, stacks: Sequence[Any], exports: Optional[Mapping[str, Dict[str, Any]]] = None) -> "ResourceGraph":
        """
        Grafo de várias stacks, com nós qualificados como `<Stack>.<LogicalId>`.

        Referências cruzadas entre stacks são resolvidas via `Fn::ImportValue`
        sobre os exports das próprias stacks.
        """
        if exports is None:
            exports = collect_exports(stacks)

        resources: Dict[str, Tuple[str, Any]] = {}
        for stack in stacks:
            for logical_id, resource in stack.resources.items():
                resources[f"{stack.stack_name}.{logical_id}"] = (stack.stack_name, resource)

        edges: List[Edge] = []
        for node, (stack_name, resource) in resources.items():
            for dep in _find_stack_dependencies(stack_name, resource or {}, exports):
                if dep in resources and dep != node:
                    edges.append((node, dep))

        return cls.from_edges(list(resources.keys()), edges)

    @property
    def nodes(self) -> List[str]:
        return list(self._edges.keys())

    @property
    def edges(self) -> Adjacency:
        """Cópia do índice direto: nó → nós dos quais depende."""
        return dict(self._edges)

    @property
    def reverse_edges(self) -> Adjacency:
        """Cópia do índice reverso: nó → nós que dependem dele."""
        return dict(self._reverse_edges)

    def __contains__(self, node: object) -> bool:
        return node in self._edges

    def __len__(self) -> int:
        return len(self._edges)

    def _require(self, node: str) -> None:
        if node not in self._edges:
            raise UnknownNodeError(f"Node {node} not found in the graph")

    def out_neighbors(self, node: str) -> List[str]:
        """Nós dos quais `node` depende, na ordem de descoberta."""
        self._require(node)
        return list(self._edges[node])

    def in_neighbors(self, node: str) -> List[str]:
        """Nós que dependem de `node`."""
        self._require(node)
        return list(self._reverse_edges[node])

    def sorted_nodes(self) -> List[str]:
        return topological_order(self._edges, self._reverse_edges)

    def unresolved_nodes(self) -> List[str]:
        """Nós que não entram na ordem topológica (pertencem ou dependem de um ciclo)."""
        ordered = set(self.sorted_nodes())
        return [n for n in self._edges if n not in ordered]

    def opposite(self) -> "ResourceGraph":
        """Mesmo conjunto de nós, com as arestas invertidas."""
        return ResourceGraph(self._reverse_edges, self._edges)

    def as_sets(self) -> Tuple[Dict[str, Set[str]], Dict[str, Set[str]]]:
        return (
            {n: set(targets) for n, targets in self._edges.items()},
            {n: set(sources) for n, sources in self._reverse_edges.items()},
        )


def build_dependency_graph(resources: Mapping[str, Any]) -> Tuple[Dict[str, Set[str]], Dict[str, Set[str]]]:
    """
    Constrói as adjacências direta e reversa dos recursos de um template.

    Para cada recurso, o Reference Extractor percorre o corpo inteiro do
    recurso (não apenas `Properties`). Uma aresta `id → alvo` só é incluída
    quando o alvo é uma chave de `resources` e difere do próprio `id`.

    Args:
        resources (Mapping[str, Any]): Seção `Resources` do template.

    Returns:
        Tuple[Dict[str, Set[str]], Dict[str, Set[str]]]:
            (`graph`, `reverse_graph`), ambos cobrindo todos os ids.
    """
    return ResourceGraph.from_resources(resources).as_sets()
