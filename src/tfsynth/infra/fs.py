from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Resolves the on-disk layout of synthesized output and wraps the few
filesystem operations the harness needs (directory creation, text
persistence and loading) behind uniform helpers.
"""

import os
from typing import List, Optional, Tuple

from tfsynth.domain.constants import DEFAULT_OUTPUT_DIR, STACKS_SUBDIR, SYNTH_FILENAME

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Expands environment variables and '~'. Reverts to fallback if the input
    is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use when path is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def get_stack_output_dir(out_dir: str, stack_name: str) -> str:
    """Directory holding the artifacts of one stack: '<out>/stacks/<name>'."""
    base = (out_dir or "").strip() or DEFAULT_OUTPUT_DIR
    return os.path.join(base, STACKS_SUBDIR, stack_name)


def get_document_path(out_dir: str, stack_name: str) -> str:
    """Location of the synthesized JSON document of one stack."""
    return os.path.join(get_stack_output_dir(out_dir, stack_name), SYNTH_FILENAME)


def list_synthesized_stacks(out_dir: str) -> List[str]:
    """
    Names of the stacks that have a synthesized document under out_dir.

    Returns:
        List[str]: Sorted stack names; empty if nothing was synthesized.
    """
    stacks_dir = os.path.join(out_dir, STACKS_SUBDIR)
    if not os.path.isdir(stacks_dir):
        return []
    return sorted(
        name for name in os.listdir(stacks_dir)
        if os.path.isfile(os.path.join(stacks_dir, name, SYNTH_FILENAME))
    )

# -----------------------------------------------------------------------------
# FILE OPERATIONS
# -----------------------------------------------------------------------------

def safe_mkdir(path: str) -> Tuple[bool, Optional[str]]:
    """
    Attempt to recursively create a directory structure.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
    """
    try:
        os.makedirs(path, exist_ok=True)
        return True, None
    except OSError as e:
        return False, str(e)


def write_text_file(path: str, content: str) -> None:
    """
    Write UTF-8 text, creating parent directories first.

    Raises:
        OSError: If the directory cannot be created or the file written.
    """
    parent = os.path.dirname(os.path.abspath(path))
    ok, err = safe_mkdir(parent)
    if not ok:
        raise OSError(f"Cannot create directory '{parent}': {err}")
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def read_text_file(path: str) -> str:
    """Read a UTF-8 text file (raises OSError when unreadable)."""
    with open(path, "r", encoding="utf-8") as f:
        return f.read()
