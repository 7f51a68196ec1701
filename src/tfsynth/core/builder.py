from __future__ import annotations

"""
Construct Graph Builder.

Accumulates declared stacks, grouping constructs and typed blocks into the
in-memory construct tree. All validation happens here, at construction time:
names and ids must be unique within their scope, property values must belong
to the supported value types, and synthesized stacks are closed for changes.
"""

import logging
from typing import Any, Mapping, Optional

from tfsynth.core.properties import (
    split_override_path,
    validate_key,
    validate_properties,
    validate_value,
)
from tfsynth.domain.constants import (
    BLOCK_DATA,
    BLOCK_OUTPUT,
    BLOCK_PROVIDER,
    BLOCK_RESOURCE,
    DEFAULT_OUTPUT_DIR,
    PATH_SEPARATOR,
)
from tfsynth.domain.construct_models import App, ConstructNode, Stack, StackState
from tfsynth.domain.errors import (
    DuplicateIdError,
    DuplicateNameError,
    InvalidIdError,
    InvalidPropertyError,
    StackLockedError,
)

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# APP AND STACK FACTORIES
# -----------------------------------------------------------------------------

def create_app(outdir: str = DEFAULT_OUTPUT_DIR) -> App:
    """
    Create an isolated application context.

    Args:
        outdir: Base directory used when documents are written to disk.

    Returns:
        App: A new app without stacks.
    """
    return App(outdir=outdir or DEFAULT_OUTPUT_DIR)


def create_stack(app: App, name: str) -> Stack:
    """
    Register a new, empty stack in the app.

    Raises:
        InvalidIdError: If name is empty or contains a path separator.
        DuplicateNameError: If the app already has a stack with this name.
    """
    _check_identifier(name, "stack name")
    if name in app.stacks:
        raise DuplicateNameError(
            f"Stack name '{name}' is already used in this app.",
            {"stackName": name},
        )

    stack = Stack(node_id=name, app=app)
    app.stacks[name] = stack
    logger.debug(f"Stack created: {name}")
    return stack

# -----------------------------------------------------------------------------
# NODE FACTORIES
# -----------------------------------------------------------------------------

def add_construct(parent: ConstructNode, node_id: str) -> ConstructNode:
    """
    Add a grouping construct that only scopes its children.

    Grouping constructs emit nothing themselves; the ids of their
    descendants are derived from the full scope path.
    """
    return _attach(parent, ConstructNode(node_id=node_id))


def add_resource(
        parent: ConstructNode,
        type_tag: str,
        node_id: str,
        properties: Optional[Mapping[str, Any]] = None,
) -> ConstructNode:
    """
    Declare a managed resource under parent.

    Args:
        parent: Stack or construct owning the resource.
        type_tag: Resource kind, e.g. 'docker_container'.
        node_id: Identifier unique among the parent's children.
        properties: Resource arguments.

    Returns:
        ConstructNode: The attached resource node.

    Raises:
        DuplicateIdError: If node_id is already used under parent.
        InvalidPropertyError: If properties hold unsupported values.
        StackLockedError: If the owning stack was already synthesized.
    """
    return _add_block(parent, BLOCK_RESOURCE, type_tag, node_id, properties)


def add_data_source(
        parent: ConstructNode,
        type_tag: str,
        node_id: str,
        properties: Optional[Mapping[str, Any]] = None,
) -> ConstructNode:
    """Declare a data source under parent (same rules as add_resource)."""
    return _add_block(parent, BLOCK_DATA, type_tag, node_id, properties)


def add_provider(
        parent: ConstructNode,
        type_tag: str,
        node_id: str,
        properties: Optional[Mapping[str, Any]] = None,
) -> ConstructNode:
    """
    Declare a provider configuration under parent.

    Several configurations of the same provider type must be told apart by
    an 'alias' property; the synthesizer rejects ambiguous duplicates.
    """
    return _add_block(parent, BLOCK_PROVIDER, type_tag, node_id, properties)


def add_output(
        parent: ConstructNode,
        node_id: str,
        value: Any,
        description: Optional[str] = None,
        sensitive: Optional[bool] = None,
) -> ConstructNode:
    """Declare a stack output whose value may be a reference."""
    body = {"value": value}
    if description is not None:
        body["description"] = description
    if sensitive is not None:
        body["sensitive"] = sensitive
    return _add_block(parent, BLOCK_OUTPUT, None, node_id, body)

# -----------------------------------------------------------------------------
# MUTATION (ESCAPE HATCHES)
# -----------------------------------------------------------------------------

def set_property(node: ConstructNode, key: str, value: Any) -> None:
    """
    Set or replace one top-level property of a node.

    Raises:
        InvalidPropertyError: On invalid key/value or grouping constructs.
        StackLockedError: If the owning stack was already synthesized.
    """
    _ensure_mutable(node)
    _ensure_block(node)
    validate_key(key, node.path)
    validate_value(value, f"{node.path}.{key}")
    node.properties[key] = value
    _mark_building(node)


def add_override(node: ConstructNode, path: str, value: Any) -> None:
    """
    Set a nested property addressed by a dot separated path.

    Mappings along the path are copied before being written, so nested data
    shared with the caller or with other nodes is never modified. A
    non-mapping value in the way is replaced by a new mapping.

    Example:
        add_override(container, "ports.internal", 80)
    """
    _ensure_mutable(node)
    _ensure_block(node)
    segments = split_override_path(path)
    validate_value(value, f"{node.path}.{path}")

    current = node.properties
    for segment in segments[:-1]:
        nxt = current.get(segment)
        nxt = dict(nxt) if isinstance(nxt, Mapping) else {}
        current[segment] = nxt
        current = nxt
    current[segments[-1]] = value
    _mark_building(node)

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _add_block(
        parent: ConstructNode,
        kind: str,
        type_tag: Optional[str],
        node_id: str,
        properties: Optional[Mapping[str, Any]],
) -> ConstructNode:
    """Validate and attach a node that emits a document block."""
    if type_tag is not None:
        _check_identifier(type_tag, "type tag")
    _check_identifier(node_id, "construct id")

    where = f"{parent.path}{PATH_SEPARATOR}{node_id}"
    validated = validate_properties(properties, where)
    node = ConstructNode(node_id=node_id, kind=kind, type_tag=type_tag, properties=validated)
    return _attach(parent, node)


def _attach(parent: ConstructNode, node: ConstructNode) -> ConstructNode:
    """Enforce lock and uniqueness rules, then link node under parent."""
    _ensure_mutable(parent)
    _check_identifier(node.node_id, "construct id")

    if parent.find_child(node.node_id) is not None:
        raise DuplicateIdError(
            f"There is already a construct with id '{node.node_id}' in '{parent.path}'.",
            {"id": node.node_id, "parent": parent.path},
        )

    parent.attach(node)
    _mark_building(parent)
    logger.debug(f"Construct added: {node.path} ({node.kind or 'construct'})")
    return node


def _check_identifier(value: Any, label: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise InvalidIdError(f"Invalid {label} {value!r}: expected a non-empty string.")
    if PATH_SEPARATOR in value:
        raise InvalidIdError(
            f"Invalid {label} '{value}': must not contain '{PATH_SEPARATOR}'."
        )


def _ensure_mutable(node: ConstructNode) -> None:
    root = node.root
    if isinstance(root, Stack) and root.is_locked:
        raise StackLockedError(
            f"Stack '{root.name}' has been synthesized and can no longer be modified.",
            {"stackName": root.name},
        )


def _ensure_block(node: ConstructNode) -> None:
    if node.is_construct:
        raise InvalidPropertyError(
            f"'{node.path}' is a grouping construct and has no properties.",
            {"path": node.path},
        )


def _mark_building(node: ConstructNode) -> None:
    root = node.root
    if isinstance(root, Stack) and root.state is StackState.EMPTY:
        root.state = StackState.BUILDING
