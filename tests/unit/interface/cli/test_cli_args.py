from __future__ import annotations

"""
Unit tests for CLI argument parsing and the in-process controller.

Verifies the argument schema, override mapping and command dispatch
without spawning a subprocess (see tests/e2e for that).
"""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from tfsynth.core.synthesizer import synthesize, write_document
from tfsynth.interface.cli import app as cli_app
from tfsynth.interface.cli.args import args_to_overrides, build_parser


@pytest.fixture(autouse=True)
def no_logging_bootstrap():
    """Keep the root logger untouched by in-process CLI runs."""
    with patch("tfsynth.interface.cli.app.configure_logging") as mocked:
        yield mocked


@pytest.fixture
def doc_file(docker_stack, tmp_path: Path) -> str:
    return write_document(synthesize(docker_stack), str(tmp_path / "cdktf.out"))


# -----------------------------------------------------------------------------
# PARSER
# -----------------------------------------------------------------------------

def test_parser_check_command() -> None:
    """TC-01: check options map to their destinations."""
    args = build_parser().parse_args([
        "--json", "check", "doc.json", "-t", "docker_image", "-k", "data", "-p", '{"a": 1}',
    ])

    assert args.command == "check"
    assert args.file == "doc.json"
    assert args.type_tag == "docker_image"
    assert args.kind == "data"
    assert args.properties == '{"a": 1}'
    assert args.json_output is True


def test_parser_check_requires_type() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["check", "doc.json"])


def test_parser_rejects_unknown_kind() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["check", "-t", "x", "-k", "output"])


def test_args_to_overrides() -> None:
    args = build_parser().parse_args(["-o", "build", "--debug", "summary"])
    assert args_to_overrides(args) == {"output_dir": "build", "log_level": "DEBUG"}

    args = build_parser().parse_args(["summary"])
    assert args_to_overrides(args) == {"output_dir": None}


# -----------------------------------------------------------------------------
# CONTROLLER
# -----------------------------------------------------------------------------

def test_check_match_and_no_match(doc_file: str, capsys) -> None:
    """TC-02: Exit code 0 on match, 1 otherwise."""
    code = cli_app.main(["check", doc_file, "-t", "docker_image", "-p", '{"name": "ubuntu:latest"}'])
    assert code == cli_app.EXIT_OK
    assert "MATCH: resource 'docker_image'" in capsys.readouterr().out

    code = cli_app.main(["check", doc_file, "-t", "docker_image", "-p", '{"name": "debian:latest"}'])
    assert code == cli_app.EXIT_NO_MATCH
    assert "NO MATCH" in capsys.readouterr().out


def test_check_invalid_predicate(doc_file: str, capsys) -> None:
    assert cli_app.main(["check", doc_file, "-t", "x", "-p", "{oops"]) == cli_app.EXIT_USAGE
    assert cli_app.main(["check", doc_file, "-t", "x", "-p", "[1]"]) == cli_app.EXIT_USAGE
    assert "ERROR" in capsys.readouterr().err


def test_check_resolves_single_stack_from_output_dir(doc_file: str, tmp_path: Path, capsys) -> None:
    out_dir = str(tmp_path / "cdktf.out")
    code = cli_app.main(["--json", "-o", out_dir, "check", "-t", "docker_container"])

    assert code == cli_app.EXIT_OK
    payload = json.loads(capsys.readouterr().out)
    assert payload["matched"] is True


def test_summary_json(doc_file: str, capsys) -> None:
    assert cli_app.main(["--json", "summary", doc_file]) == cli_app.EXIT_OK
    summary = json.loads(capsys.readouterr().out)
    assert summary == {
        "stack": "stack",
        "blocks": {"resource": {"docker_image": 1, "docker_container": 1}},
    }


def test_missing_document_is_usage_error(tmp_path: Path) -> None:
    assert cli_app.main(["summary", str(tmp_path / "nope.json")]) == cli_app.EXIT_USAGE
    assert cli_app.main(["-o", str(tmp_path / "empty"), "summary"]) == cli_app.EXIT_USAGE


def test_no_command_prints_help(capsys) -> None:
    assert cli_app.main([]) == cli_app.EXIT_USAGE
    assert "usage" in capsys.readouterr().err.lower()


def test_dump_config(tmp_path: Path, capsys) -> None:
    config = tmp_path / "tfsynth.json"
    config.write_text(json.dumps({"indent": 4}), encoding="utf-8")

    code = cli_app.main(["--config", str(config), "--debug", "--dump-config"])

    assert code == cli_app.EXIT_OK
    dumped = json.loads(capsys.readouterr().out)
    assert dumped["indent"] == 4
    assert dumped["log_level"] == "DEBUG"


def test_logging_configured_from_merged_config(no_logging_bootstrap, tmp_path: Path) -> None:
    cli_app.main(["--config", str(tmp_path / "none.json"), "--debug", "--dump-config"])

    cfg = no_logging_bootstrap.call_args[0][0]
    assert cfg.level == "DEBUG"
    assert cfg.log_file is None


def test_paths_are_normalized(doc_file: str, tmp_path: Path, monkeypatch, capsys) -> None:
    """TC-03: Relative and '~' paths resolve against the cwd and home."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))

    assert cli_app.main(["-o", "~/cdktf.out", "--dump-config"]) == cli_app.EXIT_OK
    assert json.loads(capsys.readouterr().out)["output_dir"] == str(tmp_path / "cdktf.out")

    relative = os.path.relpath(doc_file, str(tmp_path))
    assert cli_app.main(["check", relative, "-t", "docker_image"]) == cli_app.EXIT_OK


def test_logging_rotation_settings_come_from_config(no_logging_bootstrap, tmp_path: Path) -> None:
    config = tmp_path / "tfsynth.json"
    config.write_text(json.dumps({
        "log_file": str(tmp_path / "tfsynth.log"),
        "log_max_bytes": 2048,
        "log_backup_count": 5,
    }), encoding="utf-8")

    cli_app.main(["--config", str(config), "--dump-config"])

    cfg = no_logging_bootstrap.call_args[0][0]
    assert cfg.log_file == str(tmp_path / "tfsynth.log")
    assert cfg.max_bytes == 2048
    assert cfg.backup_count == 5


def test_summarize_document(application_stack) -> None:
    summary = cli_app.summarize_document(synthesize(application_stack))
    assert summary["blocks"]["resource"] == {"docker_image": 1, "docker_container": 1}
