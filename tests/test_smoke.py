# tests/test_smoke.py
"""
Testes de sanidade estrutural (smoke tests) do cfn-digest.

Garantem apenas que o pacote é importável e expõe sua API pública.
Não validam comportamento do engine.
"""


def test_smoke():
    """
    O pacote importa e expõe a função principal e a versão.
    """
    import cfn_digest

    assert callable(cfn_digest.compute_resource_digests)
    assert isinstance(cfn_digest.__version__, str)
