# src/cfn_digest/core/config/hashing.py
"""
Hash canônico da configuração efetiva.

O hash identifica a configuração usada em um cálculo de digests e é
registrado no Manifest: dois conjuntos de digests só são comparáveis
quando produzidos sob a mesma configuração (algoritmo, ordem de
dependências, tipos excluídos).

Política (v1): SHA-256 sobre JSON canônico (`sort_keys`, separadores
compactos, UTF-8).
"""

import hashlib
import json
from typing import Any, Dict


def canonical_json(data: Any) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera o SHA-256 hexadecimal (64 caracteres) do JSON canônico da configuração.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    return hashlib.sha256(canonical_json(config).encode("utf-8")).hexdigest()
