from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the asynchronous QueueListener architecture, idempotency
of configuration, and log file output.
"""

import logging
import time
from pathlib import Path

import pytest

from tfsynth.infra.logging import (
    _CONFIGURED_FLAG_ATTR,
    _HANDLER_TAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    LoggingConfig,
    configure_logging,
    get_logger,
    shutdown_logging,
)


@pytest.fixture(autouse=True)
def reset_logging():
    """Detach tfsynth handlers before and after each test."""
    shutdown_logging()
    yield
    shutdown_logging()


def _our_handlers() -> list:
    return [h for h in logging.getLogger().handlers if getattr(h, _HANDLER_TAG_ATTR, False)]


def test_logging_idempotency() -> None:
    """TC-01: Multiple config calls do not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    first = _our_handlers()
    configure_logging(cfg)

    assert len(first) == 1
    assert _our_handlers() == first
    assert getattr(logging.getLogger(), _CONFIGURED_FLAG_ATTR) is True


def test_force_reconfigures() -> None:
    """TC-02: force=True replaces the handler and the listener thread."""
    configure_logging(LoggingConfig(level="INFO"))
    root = logging.getLogger()
    old_listener = getattr(root, _QUEUE_LISTENER_ATTR)

    configure_logging(LoggingConfig(level="DEBUG"), force=True)

    assert getattr(root, _QUEUE_LISTENER_ATTR) is not old_listener
    assert root.level == logging.DEBUG
    assert len(_our_handlers()) == 1


def test_file_output(tmp_path: Path) -> None:
    """TC-03: Records reach the log file through the queue listener."""
    log_file = tmp_path / "logs" / "tfsynth.log"
    configure_logging(LoggingConfig(level="DEBUG", console=False, log_file=str(log_file)))

    get_logger("tfsynth.test").info("synthesized stack 'stack'")

    shutdown_logging()
    time.sleep(0.1)
    content = log_file.read_text(encoding="utf-8")
    assert "synthesized stack 'stack'" in content
    assert "tfsynth.test" in content


def test_unknown_level_defaults_to_info() -> None:
    configure_logging(LoggingConfig(level="chatty"))
    assert logging.getLogger().level == logging.INFO


def test_no_outputs_marks_configured_without_handlers() -> None:
    configure_logging(LoggingConfig(console=False, log_file=None))
    assert _our_handlers() == []
    assert getattr(logging.getLogger(), _CONFIGURED_FLAG_ATTR) is True


def test_shutdown_keeps_foreign_handlers() -> None:
    root = logging.getLogger()
    foreign = logging.NullHandler()
    root.addHandler(foreign)
    try:
        configure_logging(LoggingConfig())
        shutdown_logging()
        assert foreign in root.handlers
        assert _our_handlers() == []
    finally:
        root.removeHandler(foreign)


def test_config_from_project_settings() -> None:
    """TC-04: Project configuration keys map onto LoggingConfig."""
    cfg = LoggingConfig.from_config({
        "log_level": "WARNING",
        "log_file": "",
        "log_max_bytes": 512,
        "log_backup_count": 0,
    }, console=False)

    assert cfg.level == "WARNING"
    assert cfg.log_file is None
    assert cfg.console is False
    assert (cfg.max_bytes, cfg.backup_count) == (512, 0)
    assert LoggingConfig.from_config({}) == LoggingConfig()
