# src/cfn_digest/core/cloudformation.py
"""
Tipos mínimos de CloudFormation usados pelo engine.

Componentes:
    - CloudFormationStack → nome da stack + template em memória
    - ResourceLocation    → (stack, logical id) de um recurso
    - ResourceMapping     → movimentação de um recurso entre localizações

Os templates são apenas lidos; nenhum tipo deste módulo os copia ou valida.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List


@dataclass(frozen=True)
class CloudFormationStack:
    stack_name: str
    template: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def resources(self) -> Dict[str, Any]:
        return (self.template or {}).get("Resources") or {}


@dataclass(frozen=True)
class ResourceLocation:
    """Localização de um recurso: stack + logical id."""

    stack_name: str
    logical_id: str

    @classmethod
    def from_path(cls, path: str) -> "ResourceLocation":
        """Interpreta `<Stack>.<LogicalId>`; logical ids não contêm ponto."""
        stack_name, _, logical_id = path.rpartition(".")
        if not stack_name or not logical_id:
            raise ValueError(f"Localização inválida: {path!r}")
        return cls(stack_name=stack_name, logical_id=logical_id)

    def to_path(self) -> str:
        return f"{self.stack_name}.{self.logical_id}"


@dataclass(frozen=True)
class ResourceMapping:
    source: ResourceLocation
    destination: ResourceLocation

    def to_dict(self) -> Dict[str, str]:
        return {"source": self.source.to_path(), "destination": self.destination.to_path()}


def stack_names(stacks: Iterable[CloudFormationStack]) -> List[str]:
    return sorted(s.stack_name for s in stacks)
