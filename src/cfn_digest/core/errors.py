"""
cfn-digest — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do cfn-digest.
Erros são artefatos serializáveis, registráveis no Manifest e no
contexto de execução, devendo ser:

- explícitos
- serializáveis
- acionáveis
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from .config.errors import ConfigError
from .exceptions import CfnDigestException, InvalidTemplateError, RefactorModificationError
from .graph import CycleDetectedError, UnknownNodeError


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DigestErrorPayload:
    """
    Payload canônico de erro do cfn-digest.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Template / grafo
TEMPLATE_INVALID = "TEMPLATE_INVALID"
GRAPH_CYCLE_DETECTED = "GRAPH_CYCLE_DETECTED"
GRAPH_UNKNOWN_NODE = "GRAPH_UNKNOWN_NODE"

# Refactoring
REFACTOR_MODIFICATION_DETECTED = "REFACTOR_MODIFICATION_DETECTED"

# Configuração / execução
CONFIG_INVALID = "CONFIG_INVALID"
DIGEST_EXECUTION_ERROR = "DIGEST_EXECUTION_ERROR"

_DOMAIN_ERROR_TYPES = {
    InvalidTemplateError: TEMPLATE_INVALID,
    RefactorModificationError: REFACTOR_MODIFICATION_DETECTED,
}


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def graph_cycle_detected(
    *,
    nodes: List[str],
    hint: str = "Remova a referência circular entre os recursos listados ou use graph.on_cycle=omit.",
) -> DigestErrorPayload:
    return DigestErrorPayload(
        type=GRAPH_CYCLE_DETECTED,
        message="Ciclo de dependências entre recursos",
        details={"nodes": sorted(nodes)},
        hint=hint,
    )


# ---------------------------------------------------------------------------
# Exceção -> payload
# ---------------------------------------------------------------------------

def exception_to_payload(exc: BaseException) -> DigestErrorPayload:
    """Converte uma exceção em DigestErrorPayload (serializável, acionável).

    Regras:
    - CycleDetectedError / UnknownNodeError: códigos estáveis do grafo.
    - CfnDigestException: já vem com message/details/hint; o código vem do
      catálogo, ou do nome da classe para exceções fora dele.
    - ConfigError: CONFIG_INVALID.
    - Outras exceções: DIGEST_EXECUTION_ERROR sem expor stack trace.
    """
    if isinstance(exc, CycleDetectedError):
        return graph_cycle_detected(nodes=list(exc.nodes))

    if isinstance(exc, UnknownNodeError):
        return DigestErrorPayload(
            type=GRAPH_UNKNOWN_NODE,
            message=str(exc),
            details={},
        )

    if isinstance(exc, CfnDigestException):
        return DigestErrorPayload(
            type=_DOMAIN_ERROR_TYPES.get(type(exc), exc.__class__.__name__),
            message=str(exc) or "Erro de domínio",
            details=dict(exc.details or {}),
            hint=exc.hint,
        )

    if isinstance(exc, ConfigError):
        return DigestErrorPayload(
            type=CONFIG_INVALID,
            message=str(exc) or "Configuração inválida",
            details={"exception_class": exc.__class__.__name__},
            hint="Revise o arquivo de configuração e os valores permitidos.",
        )

    return DigestErrorPayload(
        type=DIGEST_EXECUTION_ERROR,
        message=str(exc) or "Erro inesperado durante o cálculo de digests",
        details={"exception_class": exc.__class__.__name__},
    )
