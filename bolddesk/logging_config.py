"""Log formatting for the ``bolddesk`` logger hierarchy.

The SDK only logs through ``logging.getLogger(__name__)``; applications that
want its output formatted call :func:`setup_logging` once at startup.
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import datetime, timezone

from bolddesk.config import settings
from bolddesk.services.request_context import get_request_id

SDK_LOGGER = "bolddesk"

# Every LogRecord has these; anything else arrived through ``extra=``.
_RECORD_FIELDS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


def _utc(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


def _exception_text(record: logging.LogRecord) -> str | None:
    if not record.exc_info or record.exc_info[0] is None:
        return None
    return "".join(traceback.format_exception(*record.exc_info))


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with the current request ID and extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict = {
            "timestamp": _utc(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id
        entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_FIELDS and not key.startswith("_")
        )
        exception = _exception_text(record)
        if exception:
            entry["exception"] = exception
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """``<utc time> <LEVEL> [<request id>] <logger> - <message>``"""

    def format(self, record: logging.LogRecord) -> str:
        request_id = get_request_id()
        parts = [_utc(record).strftime("%Y-%m-%d %H:%M:%S"), f"{record.levelname:<8}"]
        if request_id:
            parts.append(f"[{request_id[:12]}]")
        parts.append(f"{record.name} - {record.getMessage()}")
        line = " ".join(parts)
        exception = _exception_text(record)
        if exception:
            line += "\n" + exception
        return line


def setup_logging(
    log_level: str | None = None,
    log_format: str | None = None,
) -> logging.Logger:
    """Install a stderr handler on the SDK logger and return it.

    Defaults come from ``BOLDDESK_LOG_LEVEL`` / ``BOLDDESK_LOG_FORMAT``.
    Calling it again replaces the handler rather than adding another; the
    root logger is left alone.
    """
    level_name = (log_level or settings.log_level).upper()
    fmt = (log_format or settings.log_format).lower()

    logger = logging.getLogger(SDK_LOGGER)
    logger.setLevel(getattr(logging, level_name, logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())
    logger.addHandler(handler)
    return logger
