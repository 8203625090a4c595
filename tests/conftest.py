# tests/conftest.py
"""
Fixtures compartilhados para testes do cfn-digest.

Este módulo define fixtures reutilizáveis que fornecem:
- templates CloudFormation mínimos e determinísticos
- fábricas de stacks para o modo multi-stack e refactoring
- contexto de execução controlado (DigestContext)
- conteúdo YAML de configuração (defaults + local)

Decisões arquiteturais:
    - Templates são dicionários em memória (nenhum I/O)
    - Imports do core são realizados de forma lazy para melhorar
      a clareza de erros durante falhas

Invariantes:
    - Cada fixture retorna uma estrutura nova (testes podem mutá-la)
    - Nenhuma fixture contém lógica de cálculo de digest
"""

from copy import deepcopy
from datetime import datetime, timezone

import pytest


# =====================================================
# Templates
# =====================================================

@pytest.fixture
def bucket_role_template() -> dict:
    """
    Template com um bucket e uma role que referencia o bucket via `Ref`.

    Usado pelos testes de estabilidade sob renomeação (exemplo fim-a-fim).
    """
    return {
        "Resources": {
            "BucketA": {"Type": "AWS::S3::Bucket", "Properties": {}},
            "RoleB": {
                "Type": "AWS::IAM::Role",
                "Properties": {
                    "AssumeRolePolicyDocument": {
                        "Statement": [{"Resource": {"Ref": "BucketA"}}],
                    },
                },
            },
        }
    }


@pytest.fixture
def chain_template() -> dict:
    """
    Template com cadeia de dependências e um recurso isolado.

        Func --> Role --> Bucket --> Key
        Topic (isolado)
    """
    return {
        "Resources": {
            "Key": {"Type": "AWS::KMS::Key", "Properties": {"Description": "key"}},
            "Bucket": {
                "Type": "AWS::S3::Bucket",
                "Properties": {
                    "BucketName": "data",
                    "KmsKeyId": {"Fn::GetAtt": ["Key", "Arn"]},
                },
            },
            "Role": {
                "Type": "AWS::IAM::Role",
                "Properties": {"Policies": [{"Resource": {"Fn::GetAtt": "Bucket.Arn"}}]},
            },
            "Func": {
                "Type": "AWS::Lambda::Function",
                "Properties": {"Role": {"Ref": "Role"}, "Runtime": "python3.12"},
            },
            "Topic": {"Type": "AWS::SNS::Topic", "Properties": {"TopicName": "alerts"}},
        }
    }


@pytest.fixture
def rename_resource():
    """
    Fábrica que renomeia um logical id em um template, atualizando
    `Ref`, `Fn::GetAtt` e `DependsOn` que apontam para ele.
    """

    def _rewrite(value, old, new):
        if isinstance(value, list):
            return [_rewrite(v, old, new) for v in value]
        if not isinstance(value, dict):
            return value
        out = {}
        for k, v in value.items():
            if k == "Ref" and v == old:
                out[k] = new
            elif k == "Fn::GetAtt" and isinstance(v, list) and v and v[0] == old:
                out[k] = [new] + v[1:]
            elif k == "Fn::GetAtt" and isinstance(v, str) and v.split(".")[0] == old:
                out[k] = new + v[len(old):]
            elif k == "DependsOn" and v == old:
                out[k] = new
            elif k == "DependsOn" and isinstance(v, list):
                out[k] = [new if x == old else x for x in v]
            else:
                out[k] = _rewrite(v, old, new)
        return out

    def _rename(template: dict, old: str, new: str) -> dict:
        t = deepcopy(template)
        resources = {}
        for rid, res in t["Resources"].items():
            resources[new if rid == old else rid] = _rewrite(res, old, new)
        t["Resources"] = resources
        return t

    return _rename


# =====================================================
# Stacks
# =====================================================

@pytest.fixture
def make_stack():
    """Fábrica de `CloudFormationStack` a partir de um dict de recursos."""
    from cfn_digest.core.cloudformation import CloudFormationStack

    def _make(name: str, resources: dict, outputs: dict = None) -> CloudFormationStack:
        template = {"Resources": deepcopy(resources)}
        if outputs is not None:
            template["Outputs"] = deepcopy(outputs)
        return CloudFormationStack(stack_name=name, template=template)

    return _make


# =====================================================
# Contexto e configuração
# =====================================================

@pytest.fixture
def dummy_ctx():
    """
    DigestContext determinístico (run_id e created_at fixos).
    """
    from cfn_digest.core.context import DigestContext

    return DigestContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config={},
        meta={"source": "pytest"},
    )


@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de defaults de projeto, semelhante a um `cfn-digest.defaults.yaml`.
    """
    return """\
digest:
  algorithm: sha256
  dependency_order: sorted
graph:
  on_cycle: omit
resources:
  exclude_types:
    - AWS::CDK::Metadata
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """
    YAML de overrides locais: muda a política de ciclos e a ordem de dependências.
    """
    return """\
digest:
  dependency_order: insertion
graph:
  on_cycle: raise
"""
