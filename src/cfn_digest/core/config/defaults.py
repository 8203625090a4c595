# src/cfn_digest/core/config/defaults.py
"""
Configuração padrão e validação estrutural do cfn-digest.

Este módulo define `DEFAULT_CONFIG`, a base sobre a qual todo override
(arquivo ou dicionário) é aplicado, e a validação de domínio dos valores
resolvidos.

Chaves suportadas (v1):
    - digest.algorithm        → algoritmo de `hashlib` (padrão: sha256)
    - digest.dependency_order → `sorted` | `insertion`
    - graph.on_cycle          → `omit` | `raise`
    - resources.exclude_types → tipos ignorados no modo multi-stack
    - metadata.strip_keys     → chaves de `Metadata` fora do hash

Decisões arquiteturais:
    - Dependências são combinadas em ordem lexicográfica de id por padrão,
      garantindo digests independentes da ordem de declaração
    - Ciclos são omitidos do resultado por padrão (com warning no contexto),
      preservando o comportamento histórico de saída parcial

Invariantes:
    - `resolve_config` sempre retorna um novo dicionário validado
    - `DEFAULT_CONFIG` nunca é mutado
"""

from __future__ import annotations

import hashlib
from copy import deepcopy
from typing import Any, Dict, Optional

from .errors import InvalidConfigValueError
from .merge import deep_merge

DEPENDENCY_ORDERS = ("sorted", "insertion")
CYCLE_POLICIES = ("omit", "raise")

DEFAULT_CONFIG: Dict[str, Any] = {
    "digest": {
        "algorithm": "sha256",
        "dependency_order": "sorted",
    },
    "graph": {
        "on_cycle": "omit",
    },
    "resources": {
        "exclude_types": ["AWS::CDK::Metadata"],
    },
    "metadata": {
        "strip_keys": ["aws:cdk:path"],
    },
}


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = config.get(name)
    if not isinstance(value, dict):
        raise InvalidConfigValueError(f"Seção '{name}' deve ser dict, recebido: {type(value).__name__}")
    return value


def _string_list(section: Dict[str, Any], key: str, where: str) -> None:
    value = section.get(key)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InvalidConfigValueError(f"'{where}' deve ser uma lista de strings")


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Valida o domínio dos valores de uma configuração já resolvida.

    Args:
        config (Dict[str, Any]): Configuração efetiva (defaults + overrides).

    Returns:
        Dict[str, Any]: A própria configuração, quando válida.

    Raises:
        InvalidConfigValueError: Se algum valor estiver fora do domínio.
    """
    digest = _section(config, "digest")
    algorithm = digest.get("algorithm")
    if not isinstance(algorithm, str) or algorithm not in hashlib.algorithms_available:
        raise InvalidConfigValueError(f"Algoritmo de hash não suportado: {algorithm!r}")
    if algorithm.startswith("shake_"):
        # shake_* exige comprimento explícito em hexdigest()
        raise InvalidConfigValueError(f"Algoritmo de tamanho variável não suportado: {algorithm!r}")

    if digest.get("dependency_order") not in DEPENDENCY_ORDERS:
        raise InvalidConfigValueError(
            f"digest.dependency_order deve ser um de {DEPENDENCY_ORDERS}, "
            f"recebido: {digest.get('dependency_order')!r}"
        )

    graph = _section(config, "graph")
    if graph.get("on_cycle") not in CYCLE_POLICIES:
        raise InvalidConfigValueError(
            f"graph.on_cycle deve ser um de {CYCLE_POLICIES}, recebido: {graph.get('on_cycle')!r}"
        )

    _string_list(_section(config, "resources"), "exclude_types", "resources.exclude_types")
    _string_list(_section(config, "metadata"), "strip_keys", "metadata.strip_keys")

    return config


def resolve_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Aplica overrides sobre `DEFAULT_CONFIG` e valida o resultado.

    Raises:
        ConfigTypeConflictError: Se um override mudar o tipo de uma chave.
        InvalidConfigValueError: Se o resultado violar o domínio permitido.
    """
    if not overrides:
        return validate_config(deepcopy(DEFAULT_CONFIG))
    return validate_config(deep_merge(DEFAULT_CONFIG, overrides))
