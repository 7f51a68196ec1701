from __future__ import annotations

"""
Unit tests for Domain Models.

Verifies:
1. Path and logical id derivation of construct nodes.
2. Reference rendering for resources and data sources.
3. Immutability and plain-dict export of synthesized documents.
4. Error payloads.
"""

import hashlib
from types import MappingProxyType

import pytest

from tfsynth.domain.construct_models import ConstructNode, Reference, Stack, StackState
from tfsynth.domain.document_models import SynthesizedDocument, freeze, thaw
from tfsynth.domain.errors import (
    DuplicateIdError,
    ErrorCode,
    InvalidPropertyError,
    TfSynthError,
)


def _tree():
    stack = Stack(node_id="stack")
    group = ConstructNode(node_id="app")
    stack.attach(group)
    image = ConstructNode(node_id="image", kind="resource", type_tag="docker_image")
    group.attach(image)
    return stack, group, image


def test_node_paths_and_root():
    """Paths include the stack id; scope paths do not."""
    stack, group, image = _tree()

    assert image.root is stack
    assert image.path == "stack/app/image"
    assert image.scope_path == ["app", "image"]
    assert stack.path == "stack"
    assert group.is_construct is True
    assert image.is_construct is False


def test_logical_id_top_level_keeps_id():
    stack = Stack(node_id="stack")
    node = ConstructNode(node_id="resource-image", kind="resource", type_tag="docker_image")
    stack.attach(node)

    assert node.logical_id == "resource-image"


def test_logical_id_nested_has_hash_suffix():
    """Nested ids join the scope path and append a stable md5 suffix."""
    _, _, image = _tree()
    suffix = hashlib.md5(b"app/image").hexdigest()[:8].upper()

    assert image.logical_id == f"app_image_{suffix}"


def test_logical_id_distinguishes_ambiguous_joins():
    """'a/b_c' and 'a_b/c' join to the same text but differ in suffix."""
    stack = Stack(node_id="s")
    a = ConstructNode(node_id="a")
    a_b = ConstructNode(node_id="a_b")
    stack.attach(a)
    stack.attach(a_b)
    first = ConstructNode(node_id="b_c", kind="resource", type_tag="t")
    second = ConstructNode(node_id="c", kind="resource", type_tag="t")
    a.attach(first)
    a_b.attach(second)

    assert first.logical_id != second.logical_id


def test_walk_is_preorder_in_insertion_order():
    stack, group, image = _tree()
    late = ConstructNode(node_id="late", kind="resource", type_tag="t")
    stack.attach(late)

    assert [n.node_id for n in stack.walk()] == ["stack", "app", "image", "late"]


def test_reference_render_resource_and_data():
    stack = Stack(node_id="stack")
    res = ConstructNode(node_id="web", kind="resource", type_tag="docker_image")
    data = ConstructNode(node_id="remote", kind="data", type_tag="docker_registry_image")
    stack.attach(res)
    stack.attach(data)

    assert res.ref("name").render() == "${docker_image.web.name}"
    assert data.ref("sha256_digest").render() == "${data.docker_registry_image.remote.sha256_digest}"


def test_reference_rejects_non_referenceable_nodes():
    stack = Stack(node_id="stack")
    provider = ConstructNode(node_id="docker", kind="provider", type_tag="docker")
    stack.attach(provider)

    with pytest.raises(InvalidPropertyError):
        provider.ref("host")
    with pytest.raises(InvalidPropertyError):
        ConstructNode(node_id="x", kind="resource", type_tag="t").ref("  ")


def test_reference_is_hashable_and_compares_by_target():
    node = ConstructNode(node_id="x", kind="resource", type_tag="t")

    assert Reference(node, "id") == Reference(node, "id")
    assert len({Reference(node, "id"), Reference(node, "id")}) == 1


def test_stack_defaults():
    stack = Stack(node_id="stack")
    assert stack.name == "stack"
    assert stack.state is StackState.EMPTY
    assert stack.is_locked is False


def test_document_is_read_only():
    doc = SynthesizedDocument(
        stack_name="s",
        blocks=freeze({"resource": {"t": {"a": {"tags": ["x"]}}}}),
    )

    with pytest.raises(TypeError):
        doc.resources["t"] = {}  # type: ignore[index]
    assert isinstance(doc.resources, MappingProxyType)
    assert doc.resources["t"]["a"]["tags"] == ("x",)


def test_document_to_dict_is_plain_and_skips_empty_blocks():
    doc = SynthesizedDocument(
        stack_name="s",
        blocks=freeze({"resource": {"t": {"a": {"tags": ["x"]}}}, "data": {}}),
        metadata=freeze({"metadata": {"stackName": "s"}}),
    )
    out = doc.to_dict()

    assert out == {
        "//": {"metadata": {"stackName": "s"}},
        "resource": {"t": {"a": {"tags": ["x"]}}},
    }
    assert isinstance(out["resource"]["t"]["a"]["tags"], list)


def test_empty_document():
    doc = SynthesizedDocument(stack_name="s")
    assert doc.is_empty is True
    assert dict(doc.resources) == {}
    assert doc.to_dict() == {}


def test_freeze_thaw_inverse():
    value = {"a": [1, {"b": (2, 3)}], "c": None}
    assert thaw(freeze(value)) == {"a": [1, {"b": [2, 3]}], "c": None}


def test_error_to_dict_carries_code_and_details():
    err = DuplicateIdError("dup", {"id": "x"})

    assert isinstance(err, TfSynthError)
    assert err.to_dict() == {"errorCode": ErrorCode.DUPLICATE_ID, "message": "dup", "id": "x"}
    assert str(err) == "dup"


def test_document_is_unhashable_but_comparable():
    doc = SynthesizedDocument(stack_name="s", blocks=freeze({"resource": {}}))

    with pytest.raises(TypeError):
        hash(doc)
    assert doc == SynthesizedDocument(stack_name="s", blocks=freeze({"resource": {}}))
