from __future__ import annotations

"""
Configuration Domain Management.

Handles the project configuration file (tfsynth.json) using JSON. Missing
or corrupted files fall back to defaults; unknown keys are dropped on load.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from tfsynth.domain.constants import (
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_LOG_BACKUP_COUNT,
    DEFAULT_LOG_MAX_BYTES,
    DEFAULT_OUTPUT_DIR,
)

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default project configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Synthesis output
        "output_dir": DEFAULT_OUTPUT_DIR,
        "indent": 2,
        "emit_metadata": True,

        # Diagnostics
        "log_level": "INFO",
        "log_file": "",
        "log_max_bytes": DEFAULT_LOG_MAX_BYTES,
        "log_backup_count": DEFAULT_LOG_BACKUP_COUNT,
    }


def get_config_path(path: Optional[str] = None) -> str:
    """Resolve the config file location (default: ./tfsynth.json)."""
    return os.path.abspath(path or os.path.join(os.getcwd(), DEFAULT_CONFIG_FILENAME))

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the project configuration merged over the defaults.

    Args:
        path: Config file location; defaults to tfsynth.json in the cwd.

    Returns:
        Dict[str, Any]: The loaded configuration or the defaults on failure.
    """
    config = get_default_config()
    config_path = get_config_path(path)

    if not os.path.exists(config_path):
        logger.debug(f"Config file not found at {config_path}. Using defaults.")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load config '{config_path}': {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Using defaults.")
        return config

    unknown = sorted(k for k in data if k not in config)
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")

    config.update({k: v for k, v in data.items() if k in config})
    return config


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> str:
    """
    Persist the configuration to disk.

    Returns:
        str: The path written to.

    Raises:
        OSError: If the file cannot be written.
    """
    config_path = get_config_path(path)
    os.makedirs(os.path.dirname(config_path), exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config, f, ensure_ascii=False, indent=4)
    logger.debug(f"Configuration saved to {config_path}")
    return config_path
