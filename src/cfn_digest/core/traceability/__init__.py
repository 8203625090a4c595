# src/cfn_digest/core/traceability/__init__.py
"""
Rastreabilidade do cfn-digest.

Este pacote contém o Manifest v1: registro serializável de um cálculo
de digests (entradas, saídas, eventos e erros).
"""
