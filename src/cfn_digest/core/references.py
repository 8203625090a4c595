# src/cfn_digest/core/references.py
"""
Extração e remoção de referências entre recursos CloudFormation.

Este módulo reúne as operações que reconhecem expressões de referência
dentro do corpo de um recurso:

    - {"Ref": "<LogicalId>"}
    - {"Fn::GetAtt": "<LogicalId>.<Atributo>"} ou {"Fn::GetAtt": ["<LogicalId>", "<Atributo>"]}
    - {"DependsOn": "<LogicalId>"} ou {"DependsOn": ["<LogicalId>", ...]}

Responsabilidades do módulo:
    - Reference Extractor: listar os ids referenciados por um valor
    - Remover referências preservando a estrutura (para hashing)
    - Remover a anotação de construct path da CDK (`aws:cdk:path`)

Decisões arquiteturais:
    - A verificação das chaves especiais ocorre antes da recursão genérica
    - Um nó que contém `Ref`, `Fn::GetAtt` ou `DependsOn` é terminal:
      suas demais chaves não são visitadas
    - Formatos malformados são tolerados; o id resultante simplesmente
      não corresponde a nenhum recurso e é descartado pelo grafo

Invariantes:
    - Nenhuma função deste módulo muta o input
    - Folhas (str, números, bool, None) não produzem referências

Limites explícitos:
    - Não verifica se o id referenciado existe no template
    - Não constrói o grafo de dependências
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, Iterable, List, Mapping, Optional

REF = "Ref"
GET_ATT = "Fn::GetAtt"
DEPENDS_ON = "DependsOn"
IMPORT_VALUE = "Fn::ImportValue"

# Ordem de precedência na detecção
REFERENCE_KEYS = (REF, GET_ATT, DEPENDS_ON)

REF_PLACEHOLDER_KEY = "__cloud_ref__"
CONSTRUCT_PATH_KEY = "aws:cdk:path"


def get_att_target(value: Any) -> Optional[Any]:
    """
    Extrai o id do recurso alvo de um argumento de `Fn::GetAtt`.

    Lista → elemento 0; string → trecho antes do primeiro ponto.
    Lista vazia retorna None.
    """
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    if isinstance(value, str):
        return value.split(".")[0]
    return value


def _depends_on_targets(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def find_dependencies(value: Any) -> List[Any]:
    """
    Lista os ids de recursos referenciados por um valor JSON-like.

    Regras, na ordem de precedência:
        1. lista → recursão em cada elemento, resultados concatenados
        2. dict com `Ref` → emite o valor de `Ref` (terminal)
        3. dict com `Fn::GetAtt` → emite o alvo (elemento 0 ou prefixo antes do ponto)
        4. dict com `DependsOn` → emite o(s) id(s) declarado(s) (terminal)
        5. demais dicts → recursão nos valores
        6. folhas → nenhuma referência

    Duplicatas são preservadas; a deduplicação é responsabilidade do chamador.

    Args:
        value (Any): Valor arbitrário (tipicamente o corpo de um recurso).

    Returns:
        List[Any]: Ids referenciados, na ordem de descoberta.
    """
    if isinstance(value, (list, tuple)):
        found: List[Any] = []
        for item in value:
            found.extend(find_dependencies(item))
        return found

    if not isinstance(value, dict):
        return []

    if REF in value:
        return [value[REF]]

    if GET_ATT in value:
        target = get_att_target(value[GET_ATT])
        return [] if target is None else [target]

    if DEPENDS_ON in value:
        return _depends_on_targets(value[DEPENDS_ON])

    found = []
    for child in value.values():
        found.extend(find_dependencies(child))
    return found


def strip_references(value: Any, exports: Optional[Mapping[str, Dict[str, Any]]] = None) -> Any:
    """
    Substitui sub-objetos de referência por um placeholder fixo.

    Qualquer dict contendo `Ref`, `Fn::GetAtt` ou `DependsOn` é trocado por
    `{"__cloud_ref__": "<chave encontrada>"}`. A estrutura ao redor é
    preservada, mas o id alvo desaparece: renomear uma dependência não
    altera o hash do recurso que a referencia.

    Quando `exports` é informado, `Fn::ImportValue` de um export cujo valor
    é um `Ref`/`Fn::GetAtt` também é tratado como referência.

    Args:
        value (Any): Valor a ser normalizado.
        exports (Optional[Mapping[str, Dict[str, Any]]]): Exports por nome,
            no formato `{"stack_name": ..., "value": ...}`.

    Returns:
        Any: Nova estrutura, sem referências concretas.
    """
    if isinstance(value, (list, tuple)):
        return [strip_references(item, exports) for item in value]

    if not isinstance(value, dict):
        return value

    for key in REFERENCE_KEYS:
        if key in value:
            return {REF_PLACEHOLDER_KEY: key}

    if exports is not None and IMPORT_VALUE in value:
        name = value[IMPORT_VALUE]
        exported = exports.get(name) if isinstance(name, str) else None
        exported_value = exported.get("value") if exported else None
        if isinstance(exported_value, dict):
            for key in (REF, GET_ATT):
                if key in exported_value:
                    return {REF_PLACEHOLDER_KEY: key}

    return {k: strip_references(v, exports) for k, v in value.items()}


def strip_construct_path(resource: Any, keys: Iterable[str] = (CONSTRUCT_PATH_KEY,)) -> Any:
    """
    Remove anotações internas da CDK de `Metadata`, operando sobre uma cópia.

    Se nenhuma das chaves estiver presente, o próprio recurso é retornado.
    """
    if not isinstance(resource, dict):
        return resource

    metadata = resource.get("Metadata")
    if not isinstance(metadata, dict):
        return resource

    present = [k for k in keys if k in metadata]
    if not present:
        return resource

    copy = deepcopy(resource)
    for k in present:
        del copy["Metadata"][k]
    # Metadata que só continha a anotação equivale a não ter Metadata
    if not copy["Metadata"]:
        del copy["Metadata"]
    return copy
