# src/cfn_digest/core/config/__init__.py

"""
Camada de configuração do cfn-digest.

Este pacote carrega, mescla, valida e identifica a configuração que
governa o cálculo de digests de recursos.

Responsabilidades do pacote:
    - Defaults embutidos (`DEFAULT_CONFIG`) e validação de domínio
    - Carregamento de arquivos YAML/JSON (defaults do projeto + local)
    - Deep-merge determinístico
    - Hash canônico da configuração para rastreabilidade

Limites explícitos:
    - Não calcula digests
    - Não lê templates
"""

from .defaults import CYCLE_POLICIES, DEFAULT_CONFIG, DEPENDENCY_ORDERS, resolve_config, validate_config
from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import load_config
from .merge import deep_merge

__all__ = [
    "CYCLE_POLICIES",
    "DEFAULT_CONFIG",
    "DEPENDENCY_ORDERS",
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidConfigValueError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "deep_merge",
    "load_config",
    "resolve_config",
    "validate_config",
]
