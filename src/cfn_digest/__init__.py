# src/cfn_digest/__init__.py
"""
cfn-digest — identidade estável de recursos CloudFormation.

Calcula, para cada recurso de um template, um digest derivado do tipo,
das propriedades (sem os alvos das referências) e dos digests das suas
dependências. O digest não depende do logical id: renomear um recurso
não o altera, mas qualquer mudança real de conteúdo no fecho de
dependências, sim.

Arquitetura em alto nível:
    - core.hashing / core.references / core.graph / core.digest → engine
    - core.config       → configuração declarativa (YAML/JSON)
    - core.context      → eventos estruturados
    - core.traceability → Manifest
    - refactoring       → detecção de renomeações e movimentações
"""

from ._version import __version__
from .core.cloudformation import CloudFormationStack, ResourceLocation, ResourceMapping
from .core.context import DigestContext, new_context
from .core.digest import compute_resource_digests, compute_stack_digests
from .core.engine import DigestEngine, DigestRunResult
from .core.graph import CycleDetectedError, ResourceGraph, UnknownNodeError, build_dependency_graph, topological_order
from .core.hashing import hash_object
from .core.references import find_dependencies, strip_construct_path, strip_references
from .refactoring import RefactoringContext

__all__ = [
    "__version__",
    "CloudFormationStack",
    "CycleDetectedError",
    "DigestContext",
    "DigestEngine",
    "DigestRunResult",
    "RefactoringContext",
    "ResourceGraph",
    "ResourceLocation",
    "ResourceMapping",
    "UnknownNodeError",
    "build_dependency_graph",
    "compute_resource_digests",
    "compute_stack_digests",
    "find_dependencies",
    "hash_object",
    "new_context",
    "strip_construct_path",
    "strip_references",
    "topological_order",
]
