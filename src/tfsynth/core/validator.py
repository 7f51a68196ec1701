from __future__ import annotations

"""
Configuration Validation Service.

Ensures that the configuration dictionary conforms to the expected schema
before it reaches the synthesizer or the logging bootstrap. Handles type
coercion of loosely typed inputs (JSON, CLI strings) and default injection.
"""

import logging
from typing import Any, Dict, List, Tuple

from tfsynth.domain.config import get_default_config
from tfsynth.infra.logging.config import _LEVEL_MAP

logger = logging.getLogger(__name__)

MAX_INDENT = 8
MAX_LOG_BYTES = 100 * 1024 * 1024
MAX_LOG_BACKUPS = 50

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on type mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and
                                          a list of warnings.

    Raises:
        TypeError: In strict mode, on a value of the wrong type.
        ValueError: In strict mode, on an out-of-range value.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update({k: v for k, v in config.items() if k in defaults})

    for key in config:
        if key not in defaults:
            msg = f"Unknown field '{key}'."
            if strict:
                raise ValueError(msg)
            warnings.append(f"{msg} Ignored.")

    merged["output_dir"] = _as_str(merged.get("output_dir"), defaults["output_dir"], "output_dir", warnings, strict)
    merged["log_file"] = _as_str(merged.get("log_file"), "", "log_file", warnings, strict, allow_empty=True)
    merged["emit_metadata"] = _as_bool(merged.get("emit_metadata"), defaults["emit_metadata"], "emit_metadata", warnings, strict)
    merged["indent"] = _as_int(merged.get("indent"), defaults["indent"], "indent", 0, MAX_INDENT, warnings, strict)
    merged["log_max_bytes"] = _as_int(
        merged.get("log_max_bytes"), defaults["log_max_bytes"], "log_max_bytes", 1, MAX_LOG_BYTES, warnings, strict
    )
    merged["log_backup_count"] = _as_int(
        merged.get("log_backup_count"), defaults["log_backup_count"], "log_backup_count", 0, MAX_LOG_BACKUPS, warnings, strict
    )
    merged["log_level"] = _as_level(merged.get("log_level"), defaults["log_level"], warnings, strict)

    return merged, warnings

# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(
        value: Any,
        fallback: str,
        field: str,
        warnings: List[str],
        strict: bool,
        allow_empty: bool = False,
) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if (v or allow_empty) else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_int(
        value: Any,
        fallback: int,
        field: str,
        low: int,
        high: int,
        warnings: List[str],
        strict: bool,
) -> int:
    """Accept integers in [low, high]; numeric strings are coerced."""
    if value is None:
        return fallback

    if isinstance(value, str) and not strict and value.strip().isdigit():
        warnings.append(f"Field '{field}' converted from '{value}' to int.")
        value = int(value.strip())

    if isinstance(value, int) and not isinstance(value, bool):
        if low <= value <= high:
            return value
        msg = f"Invalid field '{field}': {value} is outside {low}..{high}."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    msg = f"Invalid field '{field}': expected int, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_level(value: Any, fallback: str, warnings: List[str], strict: bool) -> str:
    """Normalize a logging level name to upper case."""
    if value is None:
        return fallback
    if not isinstance(value, str):
        msg = f"Invalid field 'log_level': expected str, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    level = value.strip().upper()
    if level in _LEVEL_MAP:
        return level

    msg = f"Invalid field 'log_level': unknown level '{value}'."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback
