# src/cfn_digest/refactoring/context.py
"""
Detecção de movimentações de recursos entre dois conjuntos de stacks.

Dados os templates implantados (`deployed`) e os templates locais
(`local`), recursos com o mesmo digest são o "mesmo" recurso; se a
localização (`<Stack>.<LogicalId>`) mudou, houve uma movimentação
(rename ou troca de stack).

Conceitos:
    - Move: par (localizações antes, localizações depois) de um digest
    - Ambíguo: ambos os lados não vazios e algum lado com mais de uma localização
    - Mapping: move resolvido 1-para-1 com localizações diferentes

Decisões arquiteturais:
    - Um refactor não pode adicionar, remover ou alterar recursos: os dois
      lados precisam ser isomórficos (mesmos digests, mesma contagem por
      digest), salvo com `ignore_modifications`
    - Ambiguidades são resolvidas por overrides explícitos e, em seguida,
      por overrides estruturais calculados sobre o grafo invertido

Exemplo do grafo invertido:

    A --> B
    C --> D

Se B e D são idênticos, digest(B) = digest(D), e mover ambos é ambíguo.
Invertendo as arestas (A <-- B, C <-- D), digest(B) ≠ digest(D), pois
passam a depender de A e C, que diferem.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from ..core.cloudformation import CloudFormationStack, ResourceLocation, ResourceMapping, stack_names
from ..core.context import DigestContext
from ..core.digest import compute_stack_digests
from ..core.exceptions import RefactorModificationError

ResourceMove = Tuple[List[ResourceLocation], List[ResourceLocation]]

STEP_ID = "refactoring"


def resource_digests(
    stacks: Sequence[CloudFormationStack],
    direction: str = "direct",
    *,
    config: Optional[dict] = None,
) -> Dict[str, List[ResourceLocation]]:
    """Agrupa as localizações dos recursos por digest."""
    grouped: Dict[str, List[ResourceLocation]] = {}
    for path, digest in compute_stack_digests(stacks, direction, config=config).items():
        grouped.setdefault(digest, []).append(ResourceLocation.from_path(path))
    return grouped


def isomorphic(a: Dict[str, List[ResourceLocation]], b: Dict[str, List[ResourceLocation]]) -> bool:
    """Mesmos digests, cada um com o mesmo número de localizações (que podem diferir)."""
    if set(a) != set(b):
        return False
    return all(len(locations) == len(b[digest]) for digest, locations in a.items())


def _zip(
    before: Dict[str, List[ResourceLocation]],
    after: Dict[str, List[ResourceLocation]],
) -> Dict[str, ResourceMove]:
    result: Dict[str, ResourceMove] = {}
    for digest, locations in before.items():
        result[digest] = (list(locations), list(after.get(digest, [])))
    for digest, locations in after.items():
        if digest not in before:
            result[digest] = ([], list(locations))
    return result


def _remove_unmoved(moves: Dict[str, ResourceMove]) -> Dict[str, ResourceMove]:
    result: Dict[str, ResourceMove] = {}
    for digest, (pre, post) in moves.items():
        common = [loc for loc in pre if loc in post]
        result[digest] = (
            [loc for loc in pre if loc not in common],
            [loc for loc in post if loc not in common],
        )
    return result


def resource_moves(
    before: Sequence[CloudFormationStack],
    after: Sequence[CloudFormationStack],
    direction: str = "direct",
    ignore_modifications: bool = False,
    *,
    config: Optional[dict] = None,
) -> List[ResourceMove]:
    """
    Calcula as movimentações entre `before` e `after`.

    Raises:
        RefactorModificationError: Se os lados não forem isomórficos e
            `ignore_modifications` for falso.
    """
    digests_before = resource_digests(before, direction, config=config)
    digests_after = resource_digests(after, direction, config=config)

    if not (ignore_modifications or isomorphic(digests_before, digests_after)):
        raise RefactorModificationError(
            message=(
                "A refactor operation cannot add, remove or update resources. "
                "Only resource moves and renames are allowed."
            ),
            details={
                "deployed_stacks": stack_names(before),
                "local_stacks": stack_names(after),
            },
            hint="Compare the local templates to the deployed stacks before refactoring.",
        )

    return list(_remove_unmoved(_zip(digests_before, digests_after)).values())


def is_ambiguous_move(move: ResourceMove) -> bool:
    pre, post = move
    return len(pre) > 0 and len(post) > 0 and (len(pre) > 1 or len(post) > 1)


def resource_mappings(moves: Sequence[ResourceMove]) -> List[ResourceMapping]:
    return [
        ResourceMapping(source=pre[0], destination=post[0])
        for pre, post in moves
        if len(pre) == 1 and len(post) == 1 and pre[0] != post[0]
    ]


def partition_by_ambiguity(
    overrides: Sequence[ResourceMapping],
    moves: Sequence[ResourceMove],
) -> Tuple[List[ResourceMove], List[ResourceMove]]:
    """
    Separa movimentações em (não ambíguas, ambíguas).

    Cada override cujo `source` está no lado anterior e `destination` no
    posterior de um move ambíguo vira um move 1-para-1 e é removido do
    move original, que ainda pode deixar de ser ambíguo.
    """
    non_ambiguous: List[ResourceMove] = []
    ambiguous: List[ResourceMove] = []

    for move in moves:
        if not is_ambiguous_move(move):
            non_ambiguous.append(move)
            continue

        pre, post = move
        for override in overrides:
            if override.source in pre and override.destination in post:
                non_ambiguous.append(([override.source], [override.destination]))
                pre = [loc for loc in pre if loc != override.source]
                post = [loc for loc in post if loc != override.destination]

        if is_ambiguous_move((pre, post)):
            ambiguous.append((pre, post))
        else:
            non_ambiguous.append((pre, post))

    return non_ambiguous, ambiguous


def structural_overrides(
    deployed: Sequence[CloudFormationStack],
    local: Sequence[CloudFormationStack],
    *,
    config: Optional[dict] = None,
) -> List[ResourceMapping]:
    """Mappings não ambíguos calculados sobre o grafo invertido."""
    moves = resource_moves(deployed, local, "opposite", True, config=config)
    non_ambiguous, _ = partition_by_ambiguity([], moves)
    return resource_mappings(non_ambiguous)


class RefactoringContext:
    """
    Movimentações de recursos de um ambiente (conjunto de stacks).

    Atributos:
        mappings: movimentações resolvidas 1-para-1
        ambiguous_paths: pares de listas de caminhos que não puderam ser resolvidos
    """

    def __init__(
        self,
        *,
        deployed_stacks: Sequence[CloudFormationStack],
        local_stacks: Sequence[CloudFormationStack],
        overrides: Optional[Sequence[ResourceMapping]] = None,
        ignore_modifications: bool = False,
        config: Optional[dict] = None,
        ctx: Optional[DigestContext] = None,
    ):
        moves = resource_moves(deployed_stacks, local_stacks, "direct", ignore_modifications, config=config)
        all_overrides = list(overrides or []) + structural_overrides(deployed_stacks, local_stacks, config=config)
        non_ambiguous, ambiguous = partition_by_ambiguity(all_overrides, moves)

        self._ambiguous_moves: List[ResourceMove] = ambiguous
        self._mappings: List[ResourceMapping] = resource_mappings(non_ambiguous)

        if ctx is not None:
            ctx.log(
                step_id=STEP_ID,
                level="INFO",
                message="refactoring moves computed",
                mappings=len(self._mappings),
                ambiguous=len(self._ambiguous_moves),
            )
            for pre, post in self._ambiguous_moves:
                ctx.add_warning(
                    step_id=STEP_ID,
                    message=(
                        "ambiguous move: "
                        f"{', '.join(loc.to_path() for loc in pre)} -> {', '.join(loc.to_path() for loc in post)}"
                    ),
                )

    @property
    def mappings(self) -> List[ResourceMapping]:
        return list(self._mappings)

    @property
    def ambiguous_paths(self) -> List[Tuple[List[str], List[str]]]:
        return [([loc.to_path() for loc in pre], [loc.to_path() for loc in post]) for pre, post in self._ambiguous_moves]
