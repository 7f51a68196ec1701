from __future__ import annotations

"""
Unit tests for the Testing facade.

Mirrors how infrastructure unit tests drive the harness: build a stack,
synthesize it to JSON text and assert on resources.
"""

import json
import os

from tfsynth import Testing, add_data_source, add_provider, add_resource, create_stack


def test_check_if_resource_exists() -> None:
    """TC-01: The reference docker scenario through the facade."""
    stack = create_stack(Testing.app(), "stack")
    add_resource(stack, "docker_image", "resource-image", {"name": "ubuntu:latest"})
    add_resource(stack, "docker_container", "resource-container", {"image": "resource-image"})

    synthesized = Testing.synth(stack)

    assert isinstance(synthesized, str)
    assert Testing.to_have_resource(synthesized, "docker_container")
    assert Testing.to_have_resource_with_properties(synthesized, "docker_image", {"name": "ubuntu:latest"})
    assert not Testing.to_have_resource_with_properties(synthesized, "docker_image", {"name": "debian:latest"})


def test_synth_scope_builds_throwaway_stack() -> None:
    def build(scope):
        add_resource(scope, "docker_image", "image", {"name": "nginx:latest"})

    synthesized = Testing.synth_scope(build)

    assert json.loads(synthesized)["//"]["metadata"]["stackName"] == "stack"
    assert Testing.to_have_resource_with_properties(synthesized, "docker_image", {"name": "nginx:latest"})


def test_synth_without_metadata() -> None:
    stack = create_stack(Testing.app(), "stack")
    assert json.loads(Testing.synth(stack, emit_metadata=False)) == {}


def test_data_and_provider_assertions() -> None:
    stack = create_stack(Testing.app(), "stack")
    add_provider(stack, "docker", "docker", {"host": "unix:///var/run/docker.sock"})
    add_data_source(stack, "docker_registry_image", "ubuntu", {"name": "ubuntu:latest"})
    synthesized = Testing.synth(stack)

    assert Testing.to_have_provider(synthesized, "docker")
    assert Testing.to_have_provider_with_properties(synthesized, "docker", {"host": "unix:///var/run/docker.sock"})
    assert Testing.to_have_data_source(synthesized, "docker_registry_image")
    assert Testing.to_have_data_source_with_properties(
        synthesized, "docker_registry_image", {"name": "ubuntu:latest"}
    )
    assert not Testing.to_have_data_source(synthesized, "docker_image")


def test_full_synth_writes_to_disk(tmp_path) -> None:
    """TC-02: full_synth returns the stack directory holding cdk.tf.json."""
    stack = create_stack(Testing.app(str(tmp_path)), "stack")
    add_resource(stack, "docker_image", "image", {"name": "ubuntu:latest"})

    stack_dir = Testing.full_synth(stack)

    assert stack_dir == os.path.join(os.path.abspath(str(tmp_path)), "stacks", "stack")
    document = os.path.join(stack_dir, "cdk.tf.json")
    with open(document, encoding="utf-8") as f:
        text = f.read()
    assert Testing.to_have_resource(text, "docker_image")


def test_full_synth_explicit_out_dir(tmp_path) -> None:
    stack = create_stack(Testing.app(), "other")
    stack_dir = Testing.full_synth(stack, str(tmp_path / "out"))
    assert os.path.isfile(os.path.join(stack_dir, "cdk.tf.json"))


def test_app_uses_temporary_outdir() -> None:
    app = Testing.app()
    assert os.path.isdir(app.outdir)
    assert Testing.app().outdir != app.outdir
