from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema of the document inspector and translates
the parsed namespace into configuration overrides.
"""

import argparse
from typing import Any, Dict

from tfsynth.domain.constants import BLOCK_DATA, BLOCK_PROVIDER, BLOCK_RESOURCE, VERSION

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the tfsynth CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="tfsynth",
        description="Synthesize construct trees and inspect Terraform JSON documents.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path of the project config file (default: ./tfsynth.json).",
    )
    p.add_argument(
        "-o", "--output-dir",
        dest="output_dir",
        default=None,
        help="Base directory of synthesized stacks (overrides config).",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration and exit.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print machine-readable JSON instead of text.",
    )

    sub = p.add_subparsers(dest="command")

    # --- summary ---
    summary = sub.add_parser("summary", help="List the blocks of a synthesized document.")
    _add_document_source(summary)

    # --- check ---
    check = sub.add_parser("check", help="Assert that a block exists, optionally with properties.")
    _add_document_source(check)
    check.add_argument(
        "-t", "--type",
        dest="type_tag",
        required=True,
        help="Type tag to look for, e.g. docker_container.",
    )
    check.add_argument(
        "-k", "--kind",
        choices=[BLOCK_RESOURCE, BLOCK_DATA, BLOCK_PROVIDER],
        default=BLOCK_RESOURCE,
        help="Block kind to search (default: resource).",
    )
    check.add_argument(
        "-p", "--properties",
        default=None,
        help="JSON object that the block properties must contain.",
    )

    # --- synth ---
    synth = sub.add_parser("synth", help="Build an app from Python code and write its documents.")
    synth.add_argument(
        "target",
        help="Builder callable as 'module:function'; it receives the App to populate.",
    )

    return p


def _add_document_source(parser: argparse.ArgumentParser) -> None:
    """Positional file or --stack lookup under the output directory."""
    parser.add_argument(
        "file",
        nargs="?",
        default=None,
        help="Path of a cdk.tf.json document.",
    )
    parser.add_argument(
        "-s", "--stack",
        default=None,
        help="Stack name to resolve under '<output-dir>/stacks/'.",
    )

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Overrides; None values mean "keep the config value".
    """
    overrides: Dict[str, Any] = {}
    overrides["output_dir"] = args.output_dir
    if args.debug:
        overrides["log_level"] = "DEBUG"
    return overrides
