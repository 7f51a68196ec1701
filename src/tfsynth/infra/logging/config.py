from __future__ import annotations

"""
Logging Configuration Models.

LoggingConfig is derived from the project configuration (tfsynth.json keys
'log_level', 'log_file', 'log_max_bytes' and 'log_backup_count') so that the
CLI and tests share one source of defaults.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from tfsynth.domain.constants import DEFAULT_LOG_BACKUP_COUNT, DEFAULT_LOG_MAX_BYTES

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Settings consumed by configure_logging().

    Attributes:
        level: Minimum severity to capture.
        console: Emit records to stderr.
        log_file: Optional path of a rotating log file.
        max_bytes: Size threshold that triggers file rotation.
        backup_count: Number of rotated files to keep.
        console_fmt: Format of stderr lines.
        file_fmt: Format of log file lines.
        datefmt: Timestamp format of log file lines.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = DEFAULT_LOG_MAX_BYTES
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT

    console_fmt: str = "tfsynth %(levelname)s %(name)s: %(message)s"
    file_fmt: str = "%(asctime)s %(levelname)-8s %(name)s [%(threadName)s] %(message)s"
    datefmt: str = "%Y-%m-%dT%H:%M:%S"

    @classmethod
    def from_config(cls, conf: Mapping[str, Any], *, console: bool = True) -> LoggingConfig:
        """
        Build the logging settings from a validated project configuration.

        Missing keys keep the dataclass defaults; an empty 'log_file'
        disables file output.
        """
        return cls(
            level=conf.get("log_level") or "INFO",
            console=console,
            log_file=conf.get("log_file") or None,
            max_bytes=conf.get("log_max_bytes", DEFAULT_LOG_MAX_BYTES),
            backup_count=conf.get("log_backup_count", DEFAULT_LOG_BACKUP_COUNT),
        )
