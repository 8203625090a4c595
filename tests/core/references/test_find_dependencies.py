# tests/core/references/test_find_dependencies.py
"""
Testes do Reference Extractor (`find_dependencies`).

Os testes asseguram que:
- `Ref`, `Fn::GetAtt` (lista e string pontuada) e `DependsOn` são reconhecidos
- a verificação das chaves especiais ocorre antes da recursão genérica
- um nó com chave especial é terminal
- listas são percorridas e resultados concatenados (duplicatas preservadas)
- formatos malformados não provocam exceção

Limites explícitos:
    - Não valida existência dos ids no template
"""

import pytest

try:
    from cfn_digest.core.references import find_dependencies
except Exception as e:  # noqa: BLE001
    find_dependencies = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing reference extractor (find_dependencies). Import error: {_IMPORT_ERR}")


def test_ref_is_emitted():
    _require_imports()
    assert find_dependencies({"Ref": "Bucket"}) == ["Bucket"]


def test_get_att_list_form_uses_first_element():
    _require_imports()
    assert find_dependencies({"Fn::GetAtt": ["Bucket", "Arn"]}) == ["Bucket"]


def test_get_att_string_form_uses_prefix_before_first_dot():
    _require_imports()
    assert find_dependencies({"Fn::GetAtt": "Bucket.Arn"}) == ["Bucket"]
    assert find_dependencies({"Fn::GetAtt": "Db.Endpoint.Address"}) == ["Db"]


def test_depends_on_string_and_list():
    _require_imports()
    assert find_dependencies({"DependsOn": "Queue"}) == ["Queue"]
    assert find_dependencies({"DependsOn": ["B", "A"]}) == ["B", "A"]


def test_special_key_node_is_terminal():
    """
    Um nó com `Ref` não é percorrido: referências em chaves irmãs são ignoradas.
    """
    _require_imports()
    node = {"Ref": "A", "Other": {"Ref": "B"}}
    assert find_dependencies(node) == ["A"]


def test_ref_takes_precedence_over_get_att():
    _require_imports()
    assert find_dependencies({"Fn::GetAtt": ["B", "Arn"], "Ref": "A"}) == ["A"]


def test_resource_level_depends_on_is_terminal():
    _require_imports()
    resource = {
        "Type": "AWS::Lambda::Function",
        "DependsOn": "Role",
        "Properties": {"Code": {"Ref": "Bucket"}},
    }
    assert find_dependencies(resource) == ["Role"]


def test_nested_lists_and_maps_are_concatenated():
    _require_imports()
    value = {
        "Properties": {
            "A": [{"Ref": "X"}, {"Fn::GetAtt": "Y.Arn"}],
            "B": {"C": {"Ref": "X"}},
        }
    }
    assert sorted(find_dependencies(value)) == ["X", "X", "Y"]


def test_leaves_yield_nothing():
    _require_imports()
    for leaf in ("Ref", 1, 1.5, True, None):
        assert find_dependencies(leaf) == []


def test_malformed_get_att_is_tolerated():
    _require_imports()
    assert find_dependencies({"Fn::GetAtt": []}) == []
    assert find_dependencies({"Fn::GetAtt": "NoDot"}) == ["NoDot"]
