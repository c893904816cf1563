"""
Application logging: one "tutor_chat" logger shared by the API, the relay and the client,
writing to a rotating file and to stderr. Records carry the id of the HTTP request that
produced them.
"""

from __future__ import annotations

import copy
import logging
import os
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator, Optional

LOGGER_NAME = "tutor_chat"
LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(request_id)s] %(module)s:%(lineno)d %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 5

_request_id: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    """Stamp every record with the current request id ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.request_id = _request_id.get()
        return True


class LevelColorFormatter(logging.Formatter):
    """Colors the level name on terminals; plain text everywhere else."""

    _RESET = "\x1b[0m"
    _COLORS = {
        logging.DEBUG: "\x1b[36m",
        logging.INFO: "\x1b[32m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[35m",
    }

    def __init__(self, *args, color: bool = True, **kwargs):
        super().__init__(*args, **kwargs)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        if not self.color:
            return super().format(record)
        # Handlers share the record; color a copy so the file stays plain.
        colored = copy.copy(record)
        colored.levelname = f"{self._COLORS.get(record.levelno, '')}{record.levelname}{self._RESET}"
        return super().format(colored)


def _use_color(stream) -> bool:
    if os.getenv("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _file_handler(log_dir: Path, log_file: str) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / log_file,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    return handler


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(LevelColorFormatter(LOG_FORMAT, DATE_FORMAT, color=_use_color(sys.stderr)))
    return handler


def configure_logging(
    *,
    log_dir: str | Path | None = None,
    log_file: str = "tutor-chat.log",
    level: str | None = None,
) -> logging.Logger:
    """
    Return the shared application logger, installing its handlers on first call.

    log_dir and level fall back to LOG_DIR and LOG_LEVEL. Later calls return the
    already configured logger unchanged, so modules call this at import time.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    logger.setLevel(logging.getLevelNamesMapping().get(level_name, logging.INFO))
    logger.propagate = False

    request_ids = RequestIdFilter()
    for handler in (
        _file_handler(Path(log_dir or os.getenv("LOG_DIR") or "logs"), log_file),
        _console_handler(),
    ):
        handler.addFilter(request_ids)
        logger.addHandler(handler)
    return logger


def set_request_id(request_id: Optional[str] = None) -> str:
    """Bind a request id (generated when not given) to the current context."""
    rid = request_id or uuid.uuid4().hex
    _request_id.set(rid)
    return rid


def clear_request_id() -> None:
    _request_id.set("-")


@contextmanager
def log_request(logger: logging.Logger, name: str) -> Iterator[None]:
    """Log how long the block took and whether it raised. Exceptions propagate."""
    started = time.monotonic()
    try:
        yield
    except Exception as e:
        logger.warning("%s failed duration_ms=%d error=%s", name, (time.monotonic() - started) * 1000, e)
        raise
    logger.info("%s done duration_ms=%d", name, (time.monotonic() - started) * 1000)
