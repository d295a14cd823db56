"""
Structured JSON Logging Module.

Every component (database, local store, repositories, services, views)
receives a ``StructuredLogger`` through its constructor.  Each record is one
JSON object per line, written to stdout and to a size-rotated log file, so
pricing warnings (clamped discounts, skipped master-data rows, offline
fallbacks) and master-data audit events can be grepped or shipped as-is.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO, Union

LevelLike = Union[int, str]


class JSONFormatter(logging.Formatter):
    """Render a ``LogRecord`` as a single-line JSON object.

    Keys: ``timestamp`` (ISO-8601 UTC), ``level``, ``logger_name``,
    ``message``, plus ``extra`` for fields passed through ``extra=`` and
    ``exception`` when a traceback is attached.  Extra values keep their
    JSON type; anything else (``Decimal``, enums, datetimes) is rendered
    with ``str``.
    """

    _RESERVED: frozenset[str] = frozenset(
        vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
    ) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
        }

        extra = {k: v for k, v in vars(record).items() if k not in self._RESERVED}
        if extra:
            entry["extra"] = extra

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        return json.dumps(entry, ensure_ascii=False, default=str)


def _resolve_level(level: LevelLike) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


class StructuredLogger:
    """Injectable JSON logger.

    Wraps a named ``logging.Logger``; handlers are attached once per name,
    so constructing the same name twice shares the handlers.  Unset
    arguments fall back to ``AppConfig`` (``LOG_LEVEL``, ``LOG_FILE``,
    ``LOG_MAX_BYTES``, ``LOG_BACKUP_COUNT``).

    Usage::

        log = StructuredLogger(name="pricing")
        log.warning("Discount clamped", extra={"formula_id": "f-12"})
    """

    def __init__(
        self,
        name: str = "marketplace_console",
        level: Optional[LevelLike] = None,
        stream: Optional[TextIO] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        # Lazy: importing this module must not read .env.
        from marketplace_console.config import get_config
        cfg = get_config()

        resolved_level = _resolve_level(level if level is not None else cfg.LOG_LEVEL)
        self._logger: logging.Logger = logging.getLogger(name)
        self._logger.setLevel(resolved_level)

        if self._logger.handlers:
            return

        formatter = JSONFormatter()
        console = logging.StreamHandler(stream or sys.stdout)
        console.setFormatter(formatter)
        self._logger.addHandler(console)

        path = Path(log_file or cfg.LOG_FILE)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            rotating = RotatingFileHandler(
                filename=str(path),
                maxBytes=max_bytes if max_bytes is not None else cfg.LOG_MAX_BYTES,
                backupCount=backup_count if backup_count is not None else cfg.LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except OSError as exc:
            self._logger.warning(
                "Log file %s unavailable (%s); logging to the console only.", path, exc,
            )
            return
        rotating.setFormatter(formatter)
        self._logger.addHandler(rotating)

    @property
    def logger(self) -> logging.Logger:
        """The wrapped ``logging.Logger``."""
        return self._logger

    def debug(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.critical(msg, *args, **kwargs)


def get_logger(name: str = "marketplace_console") -> StructuredLogger:
    """Return a ``StructuredLogger`` for *name* configured from ``AppConfig``."""
    return StructuredLogger(name=name)
