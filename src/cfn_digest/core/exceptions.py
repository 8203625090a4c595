"""
cfn-digest — Canonical Exceptions (v1)

Este módulo define exceções tipadas de domínio do cfn-digest.

Objetivo:
- Permitir que o engine e a camada de refactoring levantem exceções
  semânticas com dados estruturados
- Facilitar o mapeamento determinístico para DigestErrorPayload

Regras:
- Exceções carregam apenas dados serializáveis em `details`
- Erros estruturais do grafo (ciclo, nó desconhecido) ficam em `core.graph`
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CfnDigestException(Exception):
    """Base class para exceções de domínio do cfn-digest.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


@dataclass(frozen=True)
class InvalidTemplateError(CfnDigestException):
    """Template (ou sua seção `Resources`) não é um mapeamento."""


@dataclass(frozen=True)
class RefactorModificationError(CfnDigestException):
    """Templates comparados diferem em conteúdo, não apenas em nomes/localização."""
