# src/cfn_digest/core/digest.py
"""
Cálculo de digests de recursos CloudFormation (Topological Digest Calculator).

Conceitualmente, o digest de um recurso é:

    digest(recurso) = sha256(Type + hash(corpo sem referências) + digests das dependências)

Ou seja, combina o tipo do recurso, suas próprias propriedades (com os
alvos de `Ref`/`Fn::GetAtt`/`DependsOn` apagados) e os digests já
calculados de cada dependência. Definido recursivamente dessa forma, o
digest permanece estável quando uma dependência é renomeada e muda
quando qualquer conteúdo real do fecho de dependências muda. Como os
recursos de um template formam um DAG, a definição é bem fundada: basta
processá-los em ordem topológica (dependências primeiro).

Componentes principais:
    - compute_resource_digests → digests de um template
    - compute_stack_digests    → digests de várias stacks (`<Stack>.<LogicalId>`)

Decisões arquiteturais:
    - Os digests das dependências são concatenados em ordem lexicográfica
      de id (`digest.dependency_order: sorted`), ou na ordem de descoberta
      das referências (`insertion`)
    - Recursos presos em ciclo são omitidos (`graph.on_cycle: omit`, com
      warning no contexto) ou provocam `CycleDetectedError` (`raise`)
    - `Metadata["aws:cdk:path"]` não participa do hash

Invariantes:
    - A saída cobre todos os recursos do template (na ausência de ciclos)
    - Cada digest é hexadecimal minúsculo (64 caracteres para SHA-256)
    - Nenhuma mutação ocorre sobre o template

Limites explícitos:
    - Não acessa APIs da AWS nem arquivos
    - Não compara templates (responsabilidade de `refactoring`)
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from .cloudformation import CloudFormationStack
from .config import resolve_config
from .context import DigestContext
from .exceptions import InvalidTemplateError
from .graph import CycleDetectedError, ResourceGraph, collect_exports
from .hashing import hash_object, hash_text
from .references import strip_construct_path, strip_references

DIRECTIONS = ("direct", "opposite")

STEP_ID = "digest"


def _resources_of(template: Any) -> Dict[str, Any]:
    if not isinstance(template, dict):
        raise InvalidTemplateError(
            message="Template deve ser um mapeamento",
            details={"received": type(template).__name__},
        )
    resources = template.get("Resources")
    if resources is None:
        return {}
    if not isinstance(resources, dict):
        raise InvalidTemplateError(
            message="Seção Resources deve ser um mapeamento",
            details={"received": type(resources).__name__},
        )
    return resources


def _handle_cycles(
    graph: ResourceGraph,
    order: List[str],
    cfg: Dict[str, Any],
    ctx: Optional[DigestContext],
) -> None:
    ordered = set(order)
    unresolved = [n for n in graph.nodes if n not in ordered]
    if not unresolved:
        return

    if cfg["graph"]["on_cycle"] == "raise":
        if ctx is not None:
            ctx.log(step_id=STEP_ID, level="ERROR", message="cycle detected", nodes=unresolved)
        raise CycleDetectedError(
            f"Cycle detected in resource dependency graph: {', '.join(sorted(unresolved))}",
            nodes=unresolved,
        )

    if ctx is not None:
        ctx.add_warning(
            step_id=STEP_ID,
            message=f"{len(unresolved)} resource(s) omitted due to dependency cycle: {', '.join(sorted(unresolved))}",
        )


def _compute_digests(
    resources: Mapping[str, Any],
    graph: ResourceGraph,
    *,
    cfg: Dict[str, Any],
    ctx: Optional[DigestContext],
    exports: Optional[Mapping[str, Dict[str, Any]]] = None,
) -> Dict[str, str]:
    algorithm = cfg["digest"]["algorithm"]
    sort_dependencies = cfg["digest"]["dependency_order"] == "sorted"
    strip_keys = cfg["metadata"]["strip_keys"]

    if ctx is not None:
        ctx.log(step_id=STEP_ID, level="INFO", message="digest started", resources=len(resources))

    order = graph.sorted_nodes()
    _handle_cycles(graph, order, cfg, ctx)

    result: Dict[str, str] = {}
    for rid in order:
        if rid not in resources:
            continue
        resource = resources[rid]
        if not isinstance(resource, dict):
            resource = {}

        deps = graph.out_neighbors(rid)
        if sort_dependencies:
            deps = sorted(deps)
        dep_digests = [result[d] for d in deps if d in result]

        props_hash = hash_object(
            strip_references(strip_construct_path(resource, strip_keys), exports),
            algorithm=algorithm,
        )
        resource_type = resource.get("Type")
        to_hash = ("" if resource_type is None else str(resource_type)) + props_hash + "".join(dep_digests)
        result[rid] = hash_text(to_hash, algorithm=algorithm)

        if ctx is not None:
            ctx.log(
                step_id=STEP_ID,
                level="DEBUG",
                message="resource digested",
                resource=rid,
                dependencies=len(dep_digests),
            )

    if ctx is not None:
        ctx.log(step_id=STEP_ID, level="INFO", message="digest finished", digests=len(result))

    return result


def compute_resource_digests(
    template: Dict[str, Any],
    *,
    config: Optional[Dict[str, Any]] = None,
    ctx: Optional[DigestContext] = None,
) -> Dict[str, str]:
    """
    Calcula o digest de cada recurso da seção `Resources` de um template.

    Etapas:
        1. constrói o grafo de dependências (`Ref`, `Fn::GetAtt`, `DependsOn`)
        2. ordena os recursos pelo algoritmo de Kahn (dependências primeiro)
        3. para cada recurso, nessa ordem:
           `sha256(Type + hash_object(strip_references(strip_construct_path(r))) + digests das dependências)`

    Args:
        template (Dict[str, Any]): Template CloudFormation em memória.
        config (Optional[Dict[str, Any]]): Overrides de configuração
            (aplicados sobre `DEFAULT_CONFIG`).
        ctx (Optional[DigestContext]): Contexto para eventos estruturados.

    Returns:
        Dict[str, str]: logical id → digest hexadecimal.

    Raises:
        InvalidTemplateError: Se o template ou `Resources` não forem mapeamentos.
        CycleDetectedError: Apenas com `graph.on_cycle: raise`.
    """
    cfg = resolve_config(config)
    resources = _resources_of(template)
    graph = ResourceGraph.from_resources(resources)
    return _compute_digests(resources, graph, cfg=cfg, ctx=ctx)


def compute_stack_digests(
    stacks: Sequence[CloudFormationStack],
    direction: str = "direct",
    *,
    config: Optional[Dict[str, Any]] = None,
    ctx: Optional[DigestContext] = None,
) -> Dict[str, str]:
    """
    Calcula digests sobre várias stacks, com chaves `<Stack>.<LogicalId>`.

    Diferenças em relação a `compute_resource_digests`:
        - referências via `Fn::ImportValue` ligam recursos entre stacks e,
          quando o export aponta para um `Ref`/`Fn::GetAtt`, são apagadas
          do hash como qualquer referência
        - recursos de tipos em `resources.exclude_types`
          (padrão: `AWS::CDK::Metadata`) não recebem digest
        - `direction="opposite"` inverte o grafo: cada recurso combina os
          digests de quem depende dele, em vez de suas dependências

    Raises:
        ValueError: Se `direction` não for `direct` nem `opposite`.
        CycleDetectedError: Apenas com `graph.on_cycle: raise`.
    """
    if direction not in DIRECTIONS:
        raise ValueError(f"direction deve ser um de {DIRECTIONS}, recebido: {direction!r}")

    cfg = resolve_config(config)
    excluded = set(cfg["resources"]["exclude_types"])

    resources: Dict[str, Any] = {}
    for stack in stacks:
        for logical_id, resource in _resources_of(stack.template).items():
            if isinstance(resource, dict) and resource.get("Type") in excluded:
                continue
            resources[f"{stack.stack_name}.{logical_id}"] = resource

    exports = collect_exports(stacks)
    graph = ResourceGraph.from_stacks(stacks, exports)
    if direction == "opposite":
        graph = graph.opposite()

    return _compute_digests(resources, graph, cfg=cfg, ctx=ctx, exports=exports)
