from __future__ import annotations

"""
Domain Constants.

Centralizes the block kinds of the Terraform JSON configuration format,
output layout conventions and the tool version stamped into synthesized
documents.
"""

from typing import Tuple

VERSION = "0.1.0"

# -----------------------------------------------------------------------------
# DOCUMENT BLOCK KINDS
# -----------------------------------------------------------------------------
BLOCK_RESOURCE = "resource"
BLOCK_DATA = "data"
BLOCK_PROVIDER = "provider"
BLOCK_OUTPUT = "output"

# Emission order of the top-level blocks
BLOCK_KINDS: Tuple[str, ...] = (
    BLOCK_PROVIDER,
    BLOCK_DATA,
    BLOCK_RESOURCE,
    BLOCK_OUTPUT,
)

# Kinds whose nodes can be the target of a reference
REFERENCEABLE_KINDS: Tuple[str, ...] = (BLOCK_RESOURCE, BLOCK_DATA)

METADATA_KEY = "//"
METADATA_BACKEND = "local"

# -----------------------------------------------------------------------------
# OUTPUT LAYOUT
# -----------------------------------------------------------------------------
DEFAULT_OUTPUT_DIR = "cdktf.out"
STACKS_SUBDIR = "stacks"
SYNTH_FILENAME = "cdk.tf.json"
DEFAULT_CONFIG_FILENAME = "tfsynth.json"

PATH_SEPARATOR = "/"
LOGICAL_ID_SEPARATOR = "_"
LOGICAL_ID_HASH_LENGTH = 8

# -----------------------------------------------------------------------------
# LOG ROTATION
# -----------------------------------------------------------------------------
DEFAULT_LOG_MAX_BYTES = 1024 * 1024
DEFAULT_LOG_BACKUP_COUNT = 2
