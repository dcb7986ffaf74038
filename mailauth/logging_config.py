"""
Logging setup: UTC timestamps and bracketed lowercase level tags.
"""
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


class BracketLevelFormatter(logging.Formatter):
    """Formatter producing ``2024-01-01T00:00:00Z [info] name: message`` lines."""

    _TAGS = {
        logging.DEBUG: "[debug]",
        logging.INFO: "[info]",
        logging.WARNING: "[warn]",
        logging.ERROR: "[error]",
        logging.CRITICAL: "[crit]",
    }

    def formatTime(self, record, datefmt=None):
        return datetime.fromtimestamp(record.created, timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    def format(self, record):
        record.level_tag = self._TAGS.get(record.levelno, f"[lvl{record.levelno}]")
        return super().format(record)


def init_logging(level: str = "info", log_file: Optional[str] = None, stderr: bool = True):
    """Configure the root logger.

    Args:
        level: debug, info, warn, error or critical (unknown values mean info)
        log_file: Optional path of a file that receives the same records
        stderr: Whether to log to stderr
    """
    formatter = BracketLevelFormatter(fmt="%(asctime)s %(level_tag)s %(name)s: %(message)s")

    root = logging.getLogger()
    root.setLevel(_LEVELS.get(str(level).lower(), logging.INFO))

    for handler in list(root.handlers):
        root.removeHandler(handler)

    if stderr:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(formatter)
        root.addHandler(stderr_handler)

    if log_file and log_file.strip():
        path = os.path.abspath(os.path.expanduser(log_file.strip()))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    logging.captureWarnings(True)
