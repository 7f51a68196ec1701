from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: configuration loading and merging (defaults,
project file, command-line overrides), logging bootstrap, command dispatch
and result rendering.

Exit codes:
    0: success / the checked block matched.
    1: the checked block did not match, or synthesis failed.
    2: usage error, missing or malformed document.
"""

import argparse
import importlib
import json
import os
import sys
from typing import Any, Callable, Dict, List, Optional

from tfsynth.core import query
from tfsynth.core.builder import create_app
from tfsynth.core.synthesizer import synthesize_app, write_document
from tfsynth.core.validator import validate_config
from tfsynth.domain.config import load_config
from tfsynth.domain.constants import (
    BLOCK_DATA,
    BLOCK_KINDS,
    BLOCK_OUTPUT,
    BLOCK_PROVIDER,
    DEFAULT_OUTPUT_DIR,
)
from tfsynth.domain.document_models import SynthesizedDocument
from tfsynth.domain.errors import MalformedDocumentError, TfSynthError
from tfsynth.infra.fs import (
    get_document_path,
    list_synthesized_stacks,
    normalize_path,
    read_text_file,
)
from tfsynth.infra.logging import LoggingConfig, configure_logging, get_logger
from tfsynth.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_NO_MATCH = 1
EXIT_USAGE = 2

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code.
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 1. Resolve configuration hierarchy
    base_conf = load_config(args.config_path)
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))
    conf, warnings = validate_config(raw_conf, strict=False)
    conf["output_dir"] = normalize_path(conf["output_dir"], DEFAULT_OUTPUT_DIR)
    if conf["log_file"]:
        conf["log_file"] = normalize_path(conf["log_file"], "")

    # 2. Logging bootstrap (console on stderr, optional file)
    configure_logging(LoggingConfig.from_config(conf))
    for w in warnings:
        logger.warning(f"Configuration constraint: {w}")

    if args.dump_config:
        print(json.dumps(conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    handlers: Dict[str, Callable[[argparse.Namespace, Dict[str, Any]], int]] = {
        "summary": _run_summary,
        "check": _run_check,
        "synth": _run_synth,
    }
    handler = handlers.get(args.command or "")
    if handler is None:
        parser.print_help(sys.stderr)
        return EXIT_USAGE

    try:
        return handler(args, conf)
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130

# -----------------------------------------------------------------------------
# COMMANDS
# -----------------------------------------------------------------------------

def _run_summary(args: argparse.Namespace, conf: Dict[str, Any]) -> int:
    doc = _load_document_or_none(args, conf)
    if doc is None:
        return EXIT_USAGE

    summary = summarize_document(doc)
    if args.json_output:
        print(json.dumps(summary, ensure_ascii=False, indent=conf["indent"] or None))
    else:
        _print_human_summary(summary)
    return EXIT_OK


def _run_check(args: argparse.Namespace, conf: Dict[str, Any]) -> int:
    predicate = None
    if args.properties:
        try:
            predicate = json.loads(args.properties)
        except ValueError as e:
            return _fail(f"--properties is not valid JSON: {e}", EXIT_USAGE)
        if not isinstance(predicate, dict):
            return _fail("--properties must be a JSON object.", EXIT_USAGE)

    doc = _load_document_or_none(args, conf)
    if doc is None:
        return EXIT_USAGE

    matched = _check_block(doc, args.kind, args.type_tag, predicate)
    logger.debug(f"check kind={args.kind} type={args.type_tag} predicate={predicate} -> {matched}")

    if args.json_output:
        print(json.dumps({
            "kind": args.kind,
            "type": args.type_tag,
            "properties": predicate,
            "matched": matched,
        }, ensure_ascii=False))
    else:
        label = "MATCH" if matched else "NO MATCH"
        print(f"{label}: {args.kind} '{args.type_tag}'")
    return EXIT_OK if matched else EXIT_NO_MATCH


def _run_synth(args: argparse.Namespace, conf: Dict[str, Any]) -> int:
    try:
        build = _import_target(args.target)
    except (ImportError, AttributeError, ValueError) as e:
        return _fail(f"Cannot load builder '{args.target}': {e}", EXIT_USAGE)

    app = create_app(conf["output_dir"])
    try:
        build(app)
        documents = synthesize_app(app, emit_metadata=conf["emit_metadata"])
    except TfSynthError as e:
        logger.error(f"Synthesis failed: {e.message}")
        if args.json_output:
            print(json.dumps(e.to_dict(), ensure_ascii=False))
        return EXIT_NO_MATCH

    written = {
        name: write_document(doc, app.outdir, indent=conf["indent"])
        for name, doc in documents.items()
    }

    if args.json_output:
        print(json.dumps({"stacks": written}, ensure_ascii=False, indent=conf["indent"] or None))
    else:
        if not written:
            print("No stacks declared.")
        for name, path in written.items():
            print(f"  - {name}: {path}")
    return EXIT_OK

# -----------------------------------------------------------------------------
# DOCUMENT HELPERS
# -----------------------------------------------------------------------------

def summarize_document(doc: SynthesizedDocument) -> Dict[str, Any]:
    """
    Count the instances of every block kind and type.

    Returns:
        Dict[str, Any]: {'stack': name, 'blocks': {kind: {type: count}}}.
    """
    blocks: Dict[str, Dict[str, int]] = {}
    for kind in BLOCK_KINDS:
        section = doc.blocks.get(kind)
        if not section:
            continue
        if kind == BLOCK_OUTPUT:
            blocks[kind] = {output_id: 1 for output_id in section}
        else:
            blocks[kind] = {type_tag: len(entries) for type_tag, entries in section.items()}
    return {"stack": doc.stack_name, "blocks": blocks}


def _check_block(
        doc: SynthesizedDocument,
        kind: str,
        type_tag: str,
        predicate: Optional[Dict[str, Any]],
) -> bool:
    if kind == BLOCK_PROVIDER:
        if predicate is None:
            return query.has_provider(doc, type_tag)
        return query.has_provider_with_properties(doc, type_tag, predicate)
    if kind == BLOCK_DATA:
        if predicate is None:
            return query.has_data_source_of_type(doc, type_tag)
        return query.has_data_source_with_properties(doc, type_tag, predicate)
    if predicate is None:
        return query.has_resource_of_type(doc, type_tag)
    return query.has_resource_with_properties(doc, type_tag, predicate)


def _resolve_document_path(args: argparse.Namespace, conf: Dict[str, Any]) -> Optional[str]:
    """Explicit file, then --stack, then the single stack under output_dir."""
    if args.file:
        return normalize_path(args.file, "")
    if args.stack:
        return get_document_path(conf["output_dir"], args.stack)

    stacks = list_synthesized_stacks(conf["output_dir"])
    if len(stacks) == 1:
        return get_document_path(conf["output_dir"], stacks[0])
    if not stacks:
        _fail(f"No synthesized stacks found under '{conf['output_dir']}'.", EXIT_USAGE)
    else:
        _fail(f"Several stacks found ({', '.join(stacks)}); use --stack.", EXIT_USAGE)
    return None


def _load_document_or_none(args: argparse.Namespace, conf: Dict[str, Any]) -> Optional[SynthesizedDocument]:
    path = _resolve_document_path(args, conf)
    if path is None:
        return None

    try:
        text = read_text_file(path)
    except OSError as e:
        _fail(f"Cannot read document '{path}': {e}", EXIT_USAGE)
        return None

    try:
        return query.load_document(text)
    except MalformedDocumentError as e:
        _fail(f"Malformed document '{path}': {e.message}", EXIT_USAGE)
        return None


def _import_target(target: str) -> Callable[[Any], Any]:
    """Resolve 'module:function' relative to the working directory."""
    module_name, sep, func_name = target.partition(":")
    if not sep or not module_name or not func_name:
        raise ValueError("expected 'module:function'")

    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    module = importlib.import_module(module_name)
    build = getattr(module, func_name)
    if not callable(build):
        raise ValueError(f"'{func_name}' is not callable")
    return build

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow merge of non-None overrides for known keys only."""
    out = dict(base)
    for k, v in overrides.items():
        if k in out and v is not None:
            out[k] = v
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _print_human_summary(summary: Dict[str, Any]) -> None:
    print(f"Stack: {summary['stack'] or '(unknown)'}")
    blocks = summary["blocks"]
    if not blocks:
        print("  (no blocks)")
        return
    for kind, types in blocks.items():
        print(f"{kind}:")
        for type_tag, count in types.items():
            print(f"  - {type_tag}: {count}")


def _fail(message: str, code: int) -> int:
    logger.error(message)
    print(f"ERROR: {message}", file=sys.stderr)
    return code


if __name__ == "__main__":
    sys.exit(main())
