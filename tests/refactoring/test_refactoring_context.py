# tests/refactoring/test_refactoring_context.py
"""
Testes de detecção de movimentações de recursos (RefactoringContext).

Este módulo valida o uso do digest como identidade de recurso para
detectar renomeações e trocas de stack entre stacks implantadas e locais.

Os testes asseguram que:
- renomeações e movimentações entre stacks geram mappings 1-para-1
- recursos que não se moveram não geram mappings
- adicionar, remover ou alterar recursos é rejeitado (salvo `ignore_modifications`)
- movimentações ambíguas são reportadas, resolvidas por overrides explícitos
  ou por overrides estruturais (grafo invertido)

Limites explícitos:
    - Não executa refactor algum; apenas calcula mappings
"""

import pytest

try:
    from cfn_digest.core.cloudformation import ResourceLocation, ResourceMapping
    from cfn_digest.core.exceptions import RefactorModificationError
    from cfn_digest.refactoring import RefactoringContext
except Exception as e:  # noqa: BLE001
    RefactoringContext = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"""Missing refactoring API. Implement:
- cfn_digest.refactoring.RefactoringContext
- cfn_digest.core.cloudformation.ResourceLocation / ResourceMapping
Import error: {_IMPORT_ERR}
""")


def _mapping(source: str, destination: str):
    return ResourceMapping(ResourceLocation.from_path(source), ResourceLocation.from_path(destination))


BUCKET = {"Type": "AWS::S3::Bucket", "Properties": {"BucketName": "data"}}
TOPIC = {"Type": "AWS::SNS::Topic", "Properties": {"TopicName": "alerts"}}
QUEUE = {"Type": "AWS::SQS::Queue"}


def test_rename_produces_single_mapping(make_stack):
    _require_imports()
    deployed = [make_stack("Main", {"Bucket": BUCKET, "Topic": TOPIC})]
    local = [make_stack("Main", {"DataBucket": BUCKET, "Topic": TOPIC})]

    ctx = RefactoringContext(deployed_stacks=deployed, local_stacks=local)

    assert ctx.mappings == [_mapping("Main.Bucket", "Main.DataBucket")]
    assert ctx.ambiguous_paths == []


def test_cross_stack_move(make_stack):
    _require_imports()
    deployed = [make_stack("Producer", {"Bucket": BUCKET}), make_stack("Consumer", {"Topic": TOPIC})]
    local = [make_stack("Producer", {}), make_stack("Consumer", {"Topic": TOPIC, "Bucket": BUCKET})]

    ctx = RefactoringContext(deployed_stacks=deployed, local_stacks=local)

    assert [m.to_dict() for m in ctx.mappings] == [
        {"source": "Producer.Bucket", "destination": "Consumer.Bucket"}
    ]


def test_identical_environments_have_no_mappings(make_stack):
    _require_imports()
    stacks = [make_stack("Main", {"Bucket": BUCKET, "Topic": TOPIC})]
    ctx = RefactoringContext(deployed_stacks=stacks, local_stacks=stacks)
    assert ctx.mappings == []
    assert ctx.ambiguous_paths == []


def test_modification_is_rejected(make_stack):
    _require_imports()
    deployed = [make_stack("Main", {"Bucket": BUCKET})]
    changed = {"Type": "AWS::S3::Bucket", "Properties": {"BucketName": "other"}}
    local = [make_stack("Main", {"Bucket": changed})]

    with pytest.raises(RefactorModificationError) as exc:
        RefactoringContext(deployed_stacks=deployed, local_stacks=local)

    assert exc.value.details == {"deployed_stacks": ["Main"], "local_stacks": ["Main"]}
    assert "Only resource moves and renames are allowed" in str(exc.value)


def test_added_resource_is_rejected(make_stack):
    _require_imports()
    deployed = [make_stack("Main", {"Bucket": BUCKET})]
    local = [make_stack("Main", {"Bucket": BUCKET, "Topic": TOPIC})]
    with pytest.raises(RefactorModificationError):
        RefactoringContext(deployed_stacks=deployed, local_stacks=local)


def test_ignore_modifications(make_stack):
    _require_imports()
    changed = {"Type": "AWS::S3::Bucket", "Properties": {"BucketName": "other"}}
    deployed = [make_stack("Main", {"Bucket": BUCKET, "Topic": TOPIC})]
    local = [make_stack("Main", {"Bucket": changed, "Alerts": TOPIC})]

    ctx = RefactoringContext(deployed_stacks=deployed, local_stacks=local, ignore_modifications=True)

    assert ctx.mappings == [_mapping("Main.Topic", "Main.Alerts")]


def test_ambiguous_move_is_reported(make_stack, dummy_ctx):
    """
    Dois recursos idênticos renomeados ao mesmo tempo não podem ser pareados.
    """
    _require_imports()
    deployed = [make_stack("Main", {"Q1": QUEUE, "Q2": QUEUE})]
    local = [make_stack("Main", {"Q3": QUEUE, "Q4": QUEUE})]

    ctx = RefactoringContext(deployed_stacks=deployed, local_stacks=local, ctx=dummy_ctx)

    assert ctx.mappings == []
    assert ctx.ambiguous_paths == [(["Main.Q1", "Main.Q2"], ["Main.Q3", "Main.Q4"])]
    assert dummy_ctx.warnings["refactoring"] == ["ambiguous move: Main.Q1, Main.Q2 -> Main.Q3, Main.Q4"]
    info = dummy_ctx.events_for("refactoring")[0]
    assert info["mappings"] == 0
    assert info["ambiguous"] == 1


def test_overrides_resolve_ambiguity(make_stack):
    _require_imports()
    deployed = [make_stack("Main", {"Q1": QUEUE, "Q2": QUEUE})]
    local = [make_stack("Main", {"Q3": QUEUE, "Q4": QUEUE})]

    ctx = RefactoringContext(
        deployed_stacks=deployed,
        local_stacks=local,
        overrides=[_mapping("Main.Q1", "Main.Q4")],
    )

    assert set(ctx.mappings) == {_mapping("Main.Q1", "Main.Q4"), _mapping("Main.Q2", "Main.Q3")}
    assert ctx.ambiguous_paths == []


def test_structural_overrides_resolve_ambiguity(make_stack):
    """
    A --> B e C --> D, com B e D idênticos: renomear B e D é ambíguo no grafo
    direto, mas o grafo invertido distingue B (dependência de A) de D
    (dependência de C).
    """
    _require_imports()

    def _resources(b_id, d_id):
        return {
            "A": {"Type": "AWS::Lambda::Function", "Properties": {"Memory": 128, "Role": {"Ref": b_id}}},
            b_id: {"Type": "AWS::IAM::Role"},
            "C": {"Type": "AWS::Lambda::Function", "Properties": {"Memory": 256, "Role": {"Ref": d_id}}},
            d_id: {"Type": "AWS::IAM::Role"},
        }

    deployed = [make_stack("Main", _resources("B", "D"))]
    local = [make_stack("Main", _resources("RoleB", "RoleD"))]

    ctx = RefactoringContext(deployed_stacks=deployed, local_stacks=local)

    assert set(ctx.mappings) == {_mapping("Main.B", "Main.RoleB"), _mapping("Main.D", "Main.RoleD")}
    assert ctx.ambiguous_paths == []
