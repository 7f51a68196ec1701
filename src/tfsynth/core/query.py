from __future__ import annotations

"""
Document Query Layer.

Answers existence and property questions about synthesized documents. All
functions are pure and total: absence is reported as False (or an empty
result), and only input that is not a synthesized document raises
MalformedDocumentError. Documents can be passed as SynthesizedDocument
objects, as Terraform JSON text or as the equivalent plain mapping.
"""

import json
import logging
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from tfsynth.domain.constants import (
    BLOCK_DATA,
    BLOCK_KINDS,
    BLOCK_OUTPUT,
    BLOCK_PROVIDER,
    BLOCK_RESOURCE,
    METADATA_KEY,
)
from tfsynth.domain.construct_models import Reference
from tfsynth.domain.document_models import SynthesizedDocument, freeze
from tfsynth.domain.errors import MalformedDocumentError

logger = logging.getLogger(__name__)

DocumentLike = Union[SynthesizedDocument, str, bytes, Mapping[str, Any]]

# -----------------------------------------------------------------------------
# RESOURCES (CORE QUERIES)
# -----------------------------------------------------------------------------

def has_resource_of_type(document: DocumentLike, type_tag: str) -> bool:
    """
    True iff the document declares at least one resource of type_tag.

    The comparison is case-sensitive and exact.
    """
    doc = load_document(document)
    return bool(doc.resources.get(type_tag)) if isinstance(type_tag, str) else False


def has_resource_with_properties(
        document: DocumentLike,
        type_tag: str,
        predicate: Mapping[str, Any],
) -> bool:
    """
    True iff some resource of type_tag matches the property predicate.

    Every key of the predicate must be present with an equal value; keys not
    listed are ignored. Nested mappings follow the same subset rule.

    Raises:
        MalformedDocumentError: If document is not a synthesized document.
        TypeError: If predicate is not a mapping.
    """
    doc = load_document(document)
    return _any_match(_instances(doc.resources, type_tag), predicate)


def count_resources(document: DocumentLike, type_tag: str) -> int:
    """Number of resources of type_tag in the document."""
    doc = load_document(document)
    return len(_instances(doc.resources, type_tag))


def find_resources(
        document: DocumentLike,
        type_tag: str,
        predicate: Optional[Mapping[str, Any]] = None,
) -> List[Tuple[str, Mapping[str, Any]]]:
    """
    List the (logical id, properties) pairs of matching resources.

    Args:
        document: Document to inspect.
        type_tag: Resource type to select.
        predicate: Optional property predicate; None selects all.

    Returns:
        List[Tuple[str, Mapping[str, Any]]]: Matches in document order.
    """
    doc = load_document(document)
    by_id = doc.resources.get(type_tag, {}) if isinstance(type_tag, str) else {}
    if predicate is None:
        return list(by_id.items())
    _check_predicate(predicate)
    return [(rid, props) for rid, props in by_id.items() if matches_predicate(props, predicate)]


def resource_types(document: DocumentLike) -> List[str]:
    """Resource types present in the document, in document order."""
    doc = load_document(document)
    return [t for t, by_id in doc.resources.items() if by_id]

# -----------------------------------------------------------------------------
# DATA SOURCES AND PROVIDERS
# -----------------------------------------------------------------------------

def has_data_source_of_type(document: DocumentLike, type_tag: str) -> bool:
    doc = load_document(document)
    return bool(doc.data_sources.get(type_tag)) if isinstance(type_tag, str) else False


def has_data_source_with_properties(
        document: DocumentLike,
        type_tag: str,
        predicate: Mapping[str, Any],
) -> bool:
    doc = load_document(document)
    return _any_match(_instances(doc.data_sources, type_tag), predicate)


def has_provider(document: DocumentLike, type_tag: str) -> bool:
    doc = load_document(document)
    return bool(doc.providers.get(type_tag)) if isinstance(type_tag, str) else False


def has_provider_with_properties(
        document: DocumentLike,
        type_tag: str,
        predicate: Mapping[str, Any],
) -> bool:
    doc = load_document(document)
    configs = doc.providers.get(type_tag, ()) if isinstance(type_tag, str) else ()
    return _any_match(list(configs), predicate)

# -----------------------------------------------------------------------------
# PREDICATE MATCHING
# -----------------------------------------------------------------------------

def matches_predicate(actual: Any, expected: Any) -> bool:
    """
    Recursive subset comparison used by all property queries.

    - Mappings: every expected key present in actual with a matching value.
    - Lists: same length, element-wise match.
    - References: compared through their rendered token.
    - Scalars: equality, without treating booleans as integers.
    """
    if isinstance(expected, Reference):
        expected = expected.render()

    if isinstance(expected, Mapping):
        if not isinstance(actual, Mapping):
            return False
        return all(
            key in actual and matches_predicate(actual[key], value)
            for key, value in expected.items()
        )

    if isinstance(expected, (list, tuple)):
        if not isinstance(actual, (list, tuple)) or len(actual) != len(expected):
            return False
        return all(matches_predicate(a, e) for a, e in zip(actual, expected))

    if isinstance(expected, bool) or isinstance(actual, bool):
        return isinstance(expected, bool) and isinstance(actual, bool) and actual == expected

    if isinstance(actual, (Mapping, list, tuple)):
        return False
    return actual == expected

# -----------------------------------------------------------------------------
# DOCUMENT LOADING
# -----------------------------------------------------------------------------

def load_document(document: DocumentLike) -> SynthesizedDocument:
    """
    Accept a document in any supported form and return the frozen model.

    Raises:
        MalformedDocumentError: If the input does not have the shape the
            synthesizer produces.
    """
    if isinstance(document, SynthesizedDocument):
        return document

    if isinstance(document, (str, bytes)):
        try:
            document = json.loads(document)
        except (ValueError, UnicodeDecodeError) as e:
            raise MalformedDocumentError(f"Document is not valid JSON: {e}") from e

    if not isinstance(document, Mapping):
        raise MalformedDocumentError(
            f"Expected a synthesized document, got {type(document).__name__}."
        )

    allowed = set(BLOCK_KINDS) | {METADATA_KEY}
    unknown = [k for k in document if k not in allowed]
    if unknown:
        raise MalformedDocumentError(
            f"Unknown top-level block(s): {', '.join(map(str, unknown))}.",
            {"blocks": [str(k) for k in unknown]},
        )

    metadata = document.get(METADATA_KEY, {})
    _require_mapping(metadata, METADATA_KEY)

    blocks = {}
    for kind in BLOCK_KINDS:
        if kind not in document:
            continue
        section = document[kind]
        _require_mapping(section, kind)
        if kind in (BLOCK_RESOURCE, BLOCK_DATA):
            _check_typed_section(section, kind)
        elif kind == BLOCK_PROVIDER:
            _check_provider_section(section)
        elif kind == BLOCK_OUTPUT:
            _check_output_section(section)
        blocks[kind] = section
    blocks.setdefault(BLOCK_RESOURCE, {})

    stack_name = ""
    meta_inner = metadata.get("metadata")
    if isinstance(meta_inner, Mapping):
        stack_name = str(meta_inner.get("stackName", ""))

    logger.debug(f"Loaded external document (stack='{stack_name}', blocks={list(blocks)})")
    return SynthesizedDocument(
        stack_name=stack_name,
        blocks=freeze(blocks),
        metadata=freeze(metadata),
    )

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _instances(section: Mapping[str, Mapping[str, Any]], type_tag: Any) -> List[Mapping[str, Any]]:
    if not isinstance(type_tag, str):
        return []
    return list(section.get(type_tag, {}).values())


def _any_match(candidates: Iterable[Mapping[str, Any]], predicate: Mapping[str, Any]) -> bool:
    _check_predicate(predicate)
    return any(matches_predicate(props, predicate) for props in candidates)


def _check_predicate(predicate: Any) -> None:
    if not isinstance(predicate, Mapping):
        raise TypeError(
            f"Property predicate must be a mapping, got {type(predicate).__name__}."
        )


def _require_mapping(value: Any, where: str) -> None:
    if not isinstance(value, Mapping):
        raise MalformedDocumentError(
            f"Block '{where}' must be an object, got {type(value).__name__}.",
            {"block": where},
        )


def _check_typed_section(section: Mapping[str, Any], kind: str) -> None:
    """Validate type -> id -> properties nesting."""
    for type_tag, by_id in section.items():
        _require_mapping(by_id, f"{kind}.{type_tag}")
        for instance_id, props in by_id.items():
            _require_mapping(props, f"{kind}.{type_tag}.{instance_id}")


def _check_provider_section(section: Mapping[str, Any]) -> None:
    """Validate type -> list of configurations."""
    for type_tag, configs in section.items():
        if not isinstance(configs, (list, tuple)):
            raise MalformedDocumentError(
                f"Provider '{type_tag}' must hold a list of configurations.",
                {"block": f"{BLOCK_PROVIDER}.{type_tag}"},
            )
        for i, config in enumerate(configs):
            _require_mapping(config, f"{BLOCK_PROVIDER}.{type_tag}[{i}]")


def _check_output_section(section: Mapping[str, Any]) -> None:
    for output_id, body in section.items():
        _require_mapping(body, f"{BLOCK_OUTPUT}.{output_id}")
        if "value" not in body:
            raise MalformedDocumentError(
                f"Output '{output_id}' has no value.",
                {"block": f"{BLOCK_OUTPUT}.{output_id}"},
            )
