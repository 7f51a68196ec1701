from __future__ import annotations

"""
Stack Synthesizer.

Walks a stack's construct tree in pre-order (insertion order, never sorted)
and emits an immutable Terraform JSON document. References are rendered to
interpolation tokens. Cyclic property values, reference cycles between nodes
and references that leave the stack are rejected. The stack is locked as soon
as synthesis begins.
"""

import json
import logging
import math
import os
from typing import Any, Dict, List, Mapping, Set

from tfsynth.core.properties import SCALAR_TYPES
from tfsynth.domain.constants import (
    BLOCK_DATA,
    BLOCK_KINDS,
    BLOCK_OUTPUT,
    BLOCK_PROVIDER,
    BLOCK_RESOURCE,
    METADATA_BACKEND,
    VERSION,
)
from tfsynth.domain.construct_models import App, ConstructNode, Reference, Stack, StackState
from tfsynth.domain.document_models import SynthesizedDocument, freeze
from tfsynth.domain.errors import SynthesisError
from tfsynth.infra.fs import get_document_path, write_text_file

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def synthesize(stack: Stack, *, emit_metadata: bool = True) -> SynthesizedDocument:
    """
    Convert a stack into an immutable synthesized document.

    Synthesizing the same stack again yields a structurally equal document.
    An empty stack yields a document with an empty resource mapping.

    Args:
        stack: Root of the construct tree to synthesize.
        emit_metadata: Whether to fill the '//' metadata block.

    Returns:
        SynthesizedDocument: The frozen document.

    Raises:
        SynthesisError: On cyclic property values, reference cycles,
            unresolved references, unsupported values or two nodes claiming
            the same document slot.
    """
    if not isinstance(stack, Stack):
        raise SynthesisError(
            f"Only stacks can be synthesized, got {type(stack).__name__}."
        )

    # Immutable from here on, even if synthesis fails
    stack.state = StackState.SYNTHESIZED

    blocks: Dict[str, Dict[str, Any]] = {kind: {} for kind in BLOCK_KINDS}
    edges: Dict[ConstructNode, List[ConstructNode]] = {}
    count = 0
    for node in stack.walk():
        if node.is_construct:
            continue
        targets: List[ConstructNode] = []
        body = _resolve(node.properties, node.path, stack, set(), targets)
        edges[node] = targets
        _place(blocks, node, body)
        count += 1

    _check_reference_cycles(edges)

    emitted = {kind: blocks[kind] for kind in BLOCK_KINDS if blocks[kind]}
    emitted.setdefault(BLOCK_RESOURCE, {})

    metadata: Dict[str, Any] = {}
    if emit_metadata:
        metadata = {
            "metadata": {
                "backend": METADATA_BACKEND,
                "stackName": stack.name,
                "version": VERSION,
            }
        }

    logger.info(f"Synthesized stack '{stack.name}' ({count} blocks)")
    return SynthesizedDocument(
        stack_name=stack.name,
        blocks=freeze(emitted),
        metadata=freeze(metadata),
    )


def synthesize_app(app: App, *, emit_metadata: bool = True) -> Dict[str, SynthesizedDocument]:
    """Synthesize every stack of the app, in creation order."""
    return {
        name: synthesize(stack, emit_metadata=emit_metadata)
        for name, stack in app.stacks.items()
    }


def to_json(document: SynthesizedDocument, indent: int = 2) -> str:
    """Serialize a document into Terraform JSON text."""
    return json.dumps(document.to_dict(), indent=indent or None, ensure_ascii=False)


def write_document(document: SynthesizedDocument, out_dir: str, indent: int = 2) -> str:
    """
    Persist a document as '<out_dir>/stacks/<stack>/cdk.tf.json'.

    Returns:
        str: Absolute path of the written file.

    Raises:
        OSError: If the file cannot be written.
    """
    path = os.path.abspath(get_document_path(out_dir, document.stack_name))
    write_text_file(path, to_json(document, indent=indent) + "\n")
    logger.info(f"Document written: {path}")
    return path

# -----------------------------------------------------------------------------
# VALUE RESOLUTION
# -----------------------------------------------------------------------------

def _resolve(
        value: Any,
        where: str,
        stack: Stack,
        active: Set[int],
        targets: List[ConstructNode],
) -> Any:
    """
    Deep copy a property value, rendering references on the way.

    'active' holds the ids of the containers on the current descent path;
    meeting one of them again means the value contains itself. Every rendered
    reference appends its target node to 'targets'.
    """
    if isinstance(value, Reference):
        rendered = _render_reference(value, where, stack)
        targets.append(value.target)
        return rendered

    if isinstance(value, SCALAR_TYPES):
        if isinstance(value, float) and not math.isfinite(value):
            raise SynthesisError(f"Non-finite float at '{where}'.", {"path": where})
        return value

    if isinstance(value, (Mapping, list, tuple)):
        marker = id(value)
        if marker in active:
            raise SynthesisError(
                f"Self-referential property value at '{where}'.",
                {"path": where},
            )
        active.add(marker)
        try:
            if isinstance(value, Mapping):
                return {
                    k: _resolve(v, f"{where}.{k}", stack, active, targets)
                    for k, v in value.items()
                }
            return [
                _resolve(v, f"{where}[{i}]", stack, active, targets)
                for i, v in enumerate(value)
            ]
        finally:
            active.discard(marker)

    raise SynthesisError(
        f"Unsupported value type '{type(value).__name__}' at '{where}'.",
        {"path": where, "type": type(value).__name__},
    )


def _render_reference(ref: Reference, where: str, stack: Stack) -> str:
    """Render a reference, requiring its target to live in the same stack."""
    if ref.target.root is not stack:
        raise SynthesisError(
            f"Unresolved reference at '{where}': '{ref.target.path}' "
            f"is not part of stack '{stack.name}'.",
            {"path": where, "target": ref.target.path},
        )
    return ref.render()


def _check_reference_cycles(edges: Dict[ConstructNode, List[ConstructNode]]) -> None:
    """
    Reject reference chains that lead back to where they started.

    Depth-first search with white/grey/black marking; a grey node met again
    closes a cycle. A node referencing itself is a cycle of length one.

    Raises:
        SynthesisError: With the node paths of the cycle in details['cycle'].
    """
    done: Set[ConstructNode] = set()
    on_path: List[ConstructNode] = []
    on_path_set: Set[ConstructNode] = set()

    def visit(node: ConstructNode) -> None:
        on_path.append(node)
        on_path_set.add(node)
        for target in edges.get(node, ()):
            if target in on_path_set:
                cycle = on_path[on_path.index(target):] + [target]
                paths = [n.path for n in cycle]
                raise SynthesisError(
                    f"Cyclic reference: {' -> '.join(paths)}.",
                    {"cycle": paths},
                )
            if target not in done:
                visit(target)
        on_path.pop()
        on_path_set.discard(node)
        done.add(node)

    for node in edges:
        if node not in done:
            visit(node)

# -----------------------------------------------------------------------------
# BLOCK PLACEMENT
# -----------------------------------------------------------------------------

def _place(blocks: Dict[str, Dict[str, Any]], node: ConstructNode, body: Dict[str, Any]) -> None:
    """Insert the resolved body of node into its document slot."""
    kind = node.kind

    if kind in (BLOCK_RESOURCE, BLOCK_DATA):
        by_type = blocks[kind].setdefault(node.type_tag, {})
        _claim(by_type, node.logical_id, node, body)
        return

    if kind == BLOCK_OUTPUT:
        _claim(blocks[kind], node.logical_id, node, body)
        return

    if kind == BLOCK_PROVIDER:
        configs: List[Dict[str, Any]] = blocks[kind].setdefault(node.type_tag, [])
        alias = body.get("alias")
        if any(c.get("alias") == alias for c in configs):
            raise SynthesisError(
                f"Provider '{node.type_tag}' is configured twice with alias {alias!r} "
                f"(second at '{node.path}').",
                {"path": node.path, "type": node.type_tag},
            )
        configs.append(body)
        return

    raise SynthesisError(f"Unknown block kind '{kind}' at '{node.path}'.", {"path": node.path})


def _claim(slot: Dict[str, Any], logical_id: str, node: ConstructNode, body: Dict[str, Any]) -> None:
    if logical_id in slot:
        raise SynthesisError(
            f"Two constructs resolve to the same id '{logical_id}' "
            f"(second at '{node.path}').",
            {"path": node.path, "id": logical_id},
        )
    slot[logical_id] = body
