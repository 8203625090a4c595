# src/cfn_digest/core/__init__.py
"""
Core do cfn-digest.

Este pacote contém o engine de digests de recursos CloudFormation e as
camadas que o acompanham.

Componentes principais:
    - hashing      → hash canônico de valores JSON-like
    - references   → extração e remoção de `Ref`/`Fn::GetAtt`/`DependsOn`
    - graph        → grafo de dependências e ordenação topológica
    - digest       → cálculo de digests (um template ou várias stacks)
    - config       → defaults, carregamento, merge e hash de configuração
    - context      → eventos estruturados de execução
    - traceability → Manifest v1
    - engine       → execução rastreável com conversão de erros

Limites explícitos:
    - Não acessa APIs da AWS
    - Não lê templates do disco
"""
