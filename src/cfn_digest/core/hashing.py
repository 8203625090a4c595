# src/cfn_digest/core/hashing.py
"""
Hashing canônico de valores JSON-like do cfn-digest.

Este módulo implementa o **Canonical Object Hasher**, a primitiva de hashing
sobre a qual o cálculo de digests de recursos CloudFormation é construído.

O hash gerado representa a **identidade estrutural** de um valor arbitrário
(mapas, listas e primitivos) e é utilizado para:
    - compor o digest de cada recurso do template
    - comparar corpos de recursos independentemente da ordem das chaves

Política de hashing (v1):
    - None → tratado como a string literal "null"
    - list/tuple → visitados elemento a elemento, na ordem (a ordem importa)
    - dict → chaves ordenadas lexicograficamente; a chave e o valor
      (recursivamente) alimentam o mesmo hash
    - primitivos → tag de tipo + forma textual (evita colisão entre 1 e "1")

Decisões arquiteturais:
    - O hash é alimentado incrementalmente (sem serialização intermediária)
    - As tags de tipo seguem o modelo JSON: "boolean", "number", "string"
    - Números inteiros representados como float (ex.: 1.0) são equivalentes
      ao inteiro correspondente, como em JSON

Invariantes:
    - Valores estruturalmente equivalentes produzem o mesmo hash
    - Nenhuma entrada JSON-like válida provoca exceção
    - Nenhuma mutação ocorre sobre o input

Limites explícitos:
    - Não conhece semântica de CloudFormation
    - Não remove referências (responsabilidade de `references`)
    - Não persiste hashes
"""

from __future__ import annotations

import hashlib
import math
from typing import Any

DEFAULT_ALGORITHM = "sha256"


def _number_text(value: Any) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    return str(value)


def _primitive_text(value: Any) -> str:
    """
    Retorna a representação `tag de tipo + forma textual` de um primitivo.

    `bool` é verificado antes de `int`, pois em Python `True` também é um `int`.
    Tipos fora do modelo JSON usam o nome da classe como tag.
    """
    if isinstance(value, bool):
        return "boolean" + ("true" if value else "false")
    if isinstance(value, (int, float)):
        return "number" + _number_text(value)
    if isinstance(value, str):
        return "string" + value
    return type(value).__name__ + str(value)


def hash_object(value: Any, *, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """
    Gera um hash determinístico e independente da ordem de chaves de um valor JSON-like.

    Esta função percorre recursivamente o valor fornecido, alimentando um
    único objeto de hash com a forma canônica de cada nó. Mapas têm suas
    chaves ordenadas antes da visita, de modo que `{"a": 1, "b": 2}` e
    `{"b": 2, "a": 1}` produzem o mesmo hash, enquanto `{"a": 1}` e
    `{"a": 2}` produzem hashes distintos.

    Invariantes:
        - O valor retornado é uma string hexadecimal minúscula
        - Para SHA-256, o comprimento é sempre 64 caracteres
        - `None`, dicionários vazios e listas vazias são aceitos

    Args:
        value (Any): Valor JSON-like (None, bool, número, str, lista ou dict).
        algorithm (str): Nome do algoritmo em `hashlib` (padrão: sha256).

    Returns:
        str: Digest hexadecimal do valor.
    """
    h = hashlib.new(algorithm)

    def _feed(node: Any) -> None:
        if node is None:
            _feed("null")
        elif isinstance(node, dict):
            for key in sorted(node.keys(), key=str):
                h.update(str(key).encode("utf-8"))
                _feed(node[key])
        elif isinstance(node, (list, tuple)):
            for item in node:
                _feed(item)
        else:
            h.update(_primitive_text(node).encode("utf-8"))

    _feed(value)
    return h.hexdigest()


def hash_text(text: str, *, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Digest hexadecimal de uma string UTF-8."""
    return hashlib.new(algorithm, text.encode("utf-8")).hexdigest()
