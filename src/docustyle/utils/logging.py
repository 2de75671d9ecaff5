"""Rotating-file logging for the docustyle command line."""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path

__all__ = ["LOG_FILE_NAME", "configure", "log_directory"]

LOG_FILE_NAME = "docustyle.log"

_DEFAULT_LOG_DIR = Path.home() / ".docustyle" / "logs"
_FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
# Request-level chatter from the HTTP stack; kept at WARNING even in debug runs.
_TRANSPORT_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "openai")


def log_directory(override: Path | str | None = None) -> Path:
    """Return where the log file lives; ``DOCUSTYLE_LOG_DIR`` beats the default."""

    return Path(override or os.environ.get("DOCUSTYLE_LOG_DIR") or _DEFAULT_LOG_DIR).expanduser()


def configure(
    debug: bool = False,
    *,
    log_dir: Path | str | None = None,
    max_bytes: int = 512_000,
    backup_count: int = 2,
) -> Path:
    """(Re)install the root handlers and return the log file path.

    The file always receives records at INFO (DEBUG when ``debug``); the
    stderr console handler is only attached in debug mode so command output
    stays clean. Calling this again replaces the previous handlers.
    """

    level = logging.DEBUG if debug else logging.INFO
    directory = log_directory(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / LOG_FILE_NAME

    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handlers: list[logging.Handler] = [file_handler]
    if debug:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        handlers.append(console)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return log_path
