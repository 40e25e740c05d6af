"""
Structured JSON Logging Module.

Every registration decision is written as one JSON line.  Decisions made
for a login carry a nested ``login`` object (subject, context, outcome,
matched user) so the trail can be filtered per subject without parsing
messages.  Anything else passed through ``extra`` lands under ``extra``.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional, TextIO

from claimlink.config import get_config

# Record attributes lifted into the "login" object of a log line.
LOGIN_EVENT_FIELDS: tuple[str, ...] = (
    "subject",
    "context_id",
    "outcome",
    "user_id",
    "match_source",
)

_RESERVED_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord(
        name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
    ).__dict__.keys()
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Renders a record as ``{timestamp, level, logger_name, message, login?, extra?, exception?}``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
        }

        login: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            if key in LOGIN_EVENT_FIELDS:
                if value is not None:
                    login[key] = value
            else:
                extra[key] = value
        if login:
            entry["login"] = login
        if extra:
            entry["extra"] = extra

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        return json.dumps(entry, ensure_ascii=False, default=str)


class StructuredLogger:
    """Injectable wrapper around a JSON-formatted ``logging.Logger``.

    Usage::

        log = StructuredLogger(name="claimlink")
        log.login_event(
            "linked", "Subject matched", subject="sub-1", context_id="0DB000000000001",
        )
    """

    def __init__(
        self,
        name: str = "claimlink",
        level: int = logging.INFO,
        stream: Optional[TextIO] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        self._logger: logging.Logger = logging.getLogger(name)
        self._logger.setLevel(level)
        # Loggers are process-wide; configure handlers only once per name.
        if not self._logger.handlers:
            self._attach_handlers(level, stream, log_file, max_bytes, backup_count)

    def _attach_handlers(
        self,
        level: int,
        stream: Optional[TextIO],
        log_file: Optional[str],
        max_bytes: Optional[int],
        backup_count: Optional[int],
    ) -> None:
        cfg = get_config()
        formatter = JSONFormatter()

        stream_handler = logging.StreamHandler(stream or sys.stdout)
        stream_handler.setLevel(level)
        stream_handler.setFormatter(formatter)
        self._logger.addHandler(stream_handler)

        path = Path(log_file or cfg.LOG_FILE)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=str(path),
                maxBytes=max_bytes if max_bytes is not None else cfg.LOG_MAX_BYTES,
                backupCount=backup_count if backup_count is not None else cfg.LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except OSError as exc:
            self._logger.warning(
                "Could not open log file '%s': %s. Logging to the console only.", path, exc,
            )
            return
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        self._logger.addHandler(file_handler)

    @property
    def logger(self) -> logging.Logger:
        """The underlying ``logging.Logger``."""
        return self._logger

    def login_event(
        self,
        outcome: str,
        msg: str,
        *args: object,
        subject: Optional[str],
        context_id: Optional[str] = None,
        user_id: Optional[str] = None,
        match_source: Optional[str] = None,
        level: int = logging.INFO,
        **kwargs: Any,
    ) -> None:
        """Log the outcome of a registration decision for one login."""
        extra = dict(kwargs.pop("extra", None) or {})
        extra.update(
            subject=subject,
            context_id=context_id,
            outcome=outcome,
            user_id=user_id,
            match_source=str(match_source) if match_source is not None else None,
        )
        self._logger.log(level, msg, *args, extra=extra, **kwargs)

    def debug(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.critical(msg, *args, **kwargs)


def get_logger(name: str = "claimlink") -> StructuredLogger:
    return StructuredLogger(name=name)
