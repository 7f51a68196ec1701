from __future__ import annotations

"""
Unit Testing Facade.

Bundles the builder, synthesizer and query layer behind the small static
API that infrastructure unit tests use:

    stack = create_stack(Testing.app(), "stack")
    add_resource(stack, "docker_image", "image", {"name": "ubuntu:latest"})
    synthesized = Testing.synth(stack)
    assert Testing.to_have_resource_with_properties(
        synthesized, "docker_image", {"name": "ubuntu:latest"}
    )
"""

import os
import tempfile
from typing import Any, Callable, Mapping, Optional

from tfsynth.core import query
from tfsynth.core.builder import create_app, create_stack
from tfsynth.core.query import DocumentLike
from tfsynth.core.synthesizer import synthesize, to_json, write_document
from tfsynth.domain.construct_models import App, Stack


class Testing:
    """Static helpers mirroring the assertions of infrastructure unit tests."""

    @staticmethod
    def app(outdir: Optional[str] = None) -> App:
        """
        Create a fresh app for one test.

        Without an explicit outdir, full synthesis goes to a new temporary
        directory so tests never write into the working tree.
        """
        return create_app(outdir or tempfile.mkdtemp(prefix="tfsynth-"))

    @staticmethod
    def synth(stack: Stack, *, emit_metadata: bool = True, indent: int = 2) -> str:
        """Synthesize a stack and return its Terraform JSON text."""
        return to_json(synthesize(stack, emit_metadata=emit_metadata), indent=indent)

    @staticmethod
    def synth_scope(build: Callable[[Stack], Any], stack_name: str = "stack") -> str:
        """
        Run build() against a throwaway stack and return the synthesized JSON.

        Useful to test a single construct without declaring a stack by hand.
        """
        stack = create_stack(Testing.app(), stack_name)
        build(stack)
        return Testing.synth(stack)

    @staticmethod
    def full_synth(stack: Stack, out_dir: Optional[str] = None) -> str:
        """
        Synthesize a stack to disk and return its output directory.

        Args:
            stack: Stack to synthesize.
            out_dir: Base output directory; defaults to the app's outdir.

        Returns:
            str: Directory containing the stack's cdk.tf.json.
        """
        base = out_dir or (stack.app.outdir if stack.app else None) or tempfile.mkdtemp(prefix="tfsynth-")
        path = write_document(synthesize(stack), base)
        return os.path.dirname(path)

    # -------------------------------------------------------------------------
    # ASSERTIONS
    # -------------------------------------------------------------------------

    @staticmethod
    def to_have_resource(received: DocumentLike, type_tag: str) -> bool:
        return query.has_resource_of_type(received, type_tag)

    @staticmethod
    def to_have_resource_with_properties(
            received: DocumentLike,
            type_tag: str,
            properties: Mapping[str, Any],
    ) -> bool:
        return query.has_resource_with_properties(received, type_tag, properties)

    @staticmethod
    def to_have_data_source(received: DocumentLike, type_tag: str) -> bool:
        return query.has_data_source_of_type(received, type_tag)

    @staticmethod
    def to_have_data_source_with_properties(
            received: DocumentLike,
            type_tag: str,
            properties: Mapping[str, Any],
    ) -> bool:
        return query.has_data_source_with_properties(received, type_tag, properties)

    @staticmethod
    def to_have_provider(received: DocumentLike, type_tag: str) -> bool:
        return query.has_provider(received, type_tag)

    @staticmethod
    def to_have_provider_with_properties(
            received: DocumentLike,
            type_tag: str,
            properties: Mapping[str, Any],
    ) -> bool:
        return query.has_provider_with_properties(received, type_tag, properties)
