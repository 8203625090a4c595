# src/cfn_digest/core/config/merge.py
"""
Deep-merge determinístico de configuração.

Política de merge (v1):
    - dict + dict → merge recursivo por chave
    - list        → sobrescrita total (ex.: `resources.exclude_types`)
    - escalar     → sobrescrita direta
    - conflito de tipos → `ConfigTypeConflictError`

Invariantes:
    - Nenhum input é mutado
    - A mesma entrada sempre produz a mesma saída
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def _same_kind(a: Any, b: Any) -> bool:
    # int e float são intercambiáveis em YAML/JSON
    numeric = (int, float)
    if isinstance(a, numeric) and isinstance(b, numeric) and not isinstance(a, bool) and not isinstance(b, bool):
        return True
    return type(a) is type(b)


def deep_merge(base: Dict[str, Any], override: Dict[str, Any], *, _path: str = "") -> Dict[str, Any]:
    """
    Combina `override` sobre `base`, produzindo um novo dicionário.

    Chaves ausentes no override são preservadas da base; listas são
    substituídas por inteiro; um valor `None` na base aceita qualquer tipo.

    Args:
        base (Dict[str, Any]): Configuração base (ex.: `DEFAULT_CONFIG`).
        override (Dict[str, Any]): Overrides explícitos.

    Returns:
        Dict[str, Any]: Nova configuração resultante.

    Raises:
        ConfigTypeConflictError: Se uma chave mudar de tipo entre base e override.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        where = f"{_path}.{key}" if _path else str(key)

        if key not in result or result[key] is None:
            result[key] = deepcopy(override_value)
            continue

        base_value = result[key]

        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value, _path=where)
            continue

        if isinstance(base_value, list) and isinstance(override_value, list):
            result[key] = deepcopy(override_value)
            continue

        if not _same_kind(base_value, override_value):
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{where}': "
                f"{type(base_value).__name__} vs {type(override_value).__name__}"
            )

        result[key] = deepcopy(override_value)

    return result
