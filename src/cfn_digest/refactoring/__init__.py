# src/cfn_digest/refactoring/__init__.py
"""
Refactoring de recursos guiado por digests.

Compara stacks implantadas e locais e identifica recursos que apenas
mudaram de nome ou de stack, usando o digest como identidade.
"""

from .context import (
    RefactoringContext,
    is_ambiguous_move,
    isomorphic,
    partition_by_ambiguity,
    resource_digests,
    resource_mappings,
    resource_moves,
    structural_overrides,
)

__all__ = [
    "RefactoringContext",
    "is_ambiguous_move",
    "isomorphic",
    "partition_by_ambiguity",
    "resource_digests",
    "resource_mappings",
    "resource_moves",
    "structural_overrides",
]
