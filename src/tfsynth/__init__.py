from __future__ import annotations

from tfsynth.core.builder import (
    add_construct,
    add_data_source,
    add_output,
    add_override,
    add_provider,
    add_resource,
    create_app,
    create_stack,
    set_property,
)
from tfsynth.core.query import (
    count_resources,
    find_resources,
    has_data_source_of_type,
    has_data_source_with_properties,
    has_provider,
    has_provider_with_properties,
    has_resource_of_type,
    has_resource_with_properties,
    load_document,
    resource_types,
)
from tfsynth.core.synthesizer import synthesize, synthesize_app, to_json, write_document
from tfsynth.domain.constants import VERSION as __version__
from tfsynth.domain.construct_models import App, ConstructNode, Reference, Stack, StackState
from tfsynth.domain.document_models import SynthesizedDocument
from tfsynth.domain.errors import (
    DuplicateIdError,
    DuplicateNameError,
    InvalidIdError,
    InvalidPropertyError,
    MalformedDocumentError,
    StackLockedError,
    SynthesisError,
    TfSynthError,
)
from tfsynth.testing import Testing

__all__ = [
    "App",
    "ConstructNode",
    "DuplicateIdError",
    "DuplicateNameError",
    "InvalidIdError",
    "InvalidPropertyError",
    "MalformedDocumentError",
    "Reference",
    "Stack",
    "StackLockedError",
    "StackState",
    "SynthesisError",
    "SynthesizedDocument",
    "Testing",
    "TfSynthError",
    "add_construct",
    "add_data_source",
    "add_output",
    "add_override",
    "add_provider",
    "add_resource",
    "count_resources",
    "create_app",
    "create_stack",
    "find_resources",
    "has_data_source_of_type",
    "has_data_source_with_properties",
    "has_provider",
    "has_provider_with_properties",
    "has_resource_of_type",
    "has_resource_with_properties",
    "load_document",
    "resource_types",
    "set_property",
    "synthesize",
    "synthesize_app",
    "to_json",
    "write_document",
]
