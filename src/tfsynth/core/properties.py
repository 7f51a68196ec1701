from __future__ import annotations

"""
Property Value Validation.

Checks that values handed to the builder belong to the recursive property
type: scalars, lists, string-keyed mappings of the same, or references.
Containers are validated in place and not copied, so a container that
contains itself is tolerated here and rejected later by the synthesizer.
"""

import math
from typing import Any, List, Mapping, Optional, Set

from tfsynth.domain.construct_models import Properties, Reference
from tfsynth.domain.errors import InvalidPropertyError

SCALAR_TYPES = (str, bool, int, float, type(None))

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_properties(properties: Optional[Mapping[str, Any]], where: str) -> Properties:
    """
    Validate a property mapping and return the node's own top-level copy.

    Nested containers are shared with the caller; only the first level is
    copied so that later set_property() calls never touch caller data.

    Args:
        properties: Raw mapping supplied by the caller (None means empty).
        where: Node path used in error messages.

    Returns:
        Properties: A new dict holding the validated entries in order.

    Raises:
        InvalidPropertyError: On non-string keys or unsupported value types.
    """
    if properties is None:
        return {}
    if not isinstance(properties, Mapping):
        raise InvalidPropertyError(
            f"Properties of '{where}' must be a mapping, got {type(properties).__name__}.",
            {"path": where},
        )

    out: Properties = {}
    for key, value in properties.items():
        validate_key(key, where)
        validate_value(value, f"{where}.{key}")
        out[key] = value
    return out


def validate_key(key: Any, where: str) -> None:
    """Reject empty and non-string property keys."""
    if not isinstance(key, str) or not key:
        raise InvalidPropertyError(
            f"Invalid property key {key!r} in '{where}': keys must be non-empty strings.",
            {"path": where},
        )


def validate_value(value: Any, where: str) -> None:
    """
    Validate one property value recursively.

    Raises:
        InvalidPropertyError: If any nested value is unsupported.
    """
    _check(value, where, set())

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _check(value: Any, where: str, active: Set[int]) -> None:
    """Depth-first validation; containers already on the path are skipped."""
    if isinstance(value, Reference):
        return

    if isinstance(value, SCALAR_TYPES):
        if isinstance(value, float) and not math.isfinite(value):
            raise InvalidPropertyError(
                f"Invalid value at '{where}': non-finite float {value!r}.",
                {"path": where},
            )
        return

    if isinstance(value, (Mapping, list, tuple)):
        marker = id(value)
        if marker in active:
            return
        active.add(marker)
        try:
            if isinstance(value, Mapping):
                for key, item in value.items():
                    validate_key(key, where)
                    _check(item, f"{where}.{key}", active)
            else:
                for i, item in enumerate(value):
                    _check(item, f"{where}[{i}]", active)
        finally:
            active.discard(marker)
        return

    raise InvalidPropertyError(
        f"Unsupported value type '{type(value).__name__}' at '{where}'. "
        "Expected a scalar, list, mapping or reference.",
        {"path": where, "type": type(value).__name__},
    )


def split_override_path(path: str) -> List[str]:
    """Split a dot separated override path into non-empty segments."""
    if not isinstance(path, str):
        raise InvalidPropertyError(f"Override path must be a string, got {type(path).__name__}.")
    segments = path.split(".")
    if not path or any(not s for s in segments):
        raise InvalidPropertyError(f"Invalid override path '{path}'.", {"override": path})
    return segments
