from __future__ import annotations

"""
Synthesized Document Data Models.

Defines the immutable snapshot produced by synthesis. Nested mappings are
wrapped in read-only proxies and lists become tuples, so a document can be
shared between any number of readers without copying.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple

from tfsynth.domain.constants import (
    BLOCK_DATA,
    BLOCK_KINDS,
    BLOCK_OUTPUT,
    BLOCK_PROVIDER,
    BLOCK_RESOURCE,
    METADATA_KEY,
)

_EMPTY: Mapping[str, Any] = MappingProxyType({})

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SynthesizedDocument:
    """
    Immutable Terraform JSON configuration of a single stack.

    Structural equality: two documents are equal when their stack names,
    blocks and metadata are equal. Documents are not hashable, since their
    read-only mappings are not.

    Attributes:
        stack_name: Name of the synthesized stack.
        blocks: Block kind -> type -> instance id -> properties. Providers map
            type -> tuple of configurations; outputs map id -> body.
        metadata: Content of the '//' block (may be empty).
    """
    stack_name: str
    blocks: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)
    metadata: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)

    __hash__ = None  # type: ignore[assignment]

    @property
    def resources(self) -> Mapping[str, Mapping[str, Any]]:
        """Resource type -> instance id -> properties."""
        return self.blocks.get(BLOCK_RESOURCE, _EMPTY)

    @property
    def data_sources(self) -> Mapping[str, Mapping[str, Any]]:
        return self.blocks.get(BLOCK_DATA, _EMPTY)

    @property
    def providers(self) -> Mapping[str, Tuple[Mapping[str, Any], ...]]:
        return self.blocks.get(BLOCK_PROVIDER, _EMPTY)

    @property
    def outputs(self) -> Mapping[str, Mapping[str, Any]]:
        return self.blocks.get(BLOCK_OUTPUT, _EMPTY)

    @property
    def is_empty(self) -> bool:
        return not any(self.blocks.get(kind) for kind in BLOCK_KINDS)

    def to_dict(self) -> Dict[str, Any]:
        """Return a mutable deep copy in Terraform JSON shape."""
        out: Dict[str, Any] = {}
        if self.metadata:
            out[METADATA_KEY] = thaw(self.metadata)
        for kind in BLOCK_KINDS:
            if self.blocks.get(kind):
                out[kind] = thaw(self.blocks[kind])
        return out

# -----------------------------------------------------------------------------
# FREEZING HELPERS
# -----------------------------------------------------------------------------

def freeze(value: Any) -> Any:
    """Recursively convert dicts to read-only proxies and lists to tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of freeze(): plain dicts and lists, safe to serialize."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        out: List[Any] = [thaw(v) for v in value]
        return out
    return value
