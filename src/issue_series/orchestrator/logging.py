"""Structured logging configuration.

Two output modes share the same `logger.info(..., extra={...})` call sites:

- JSON lines (local runs): one JSON object per record.
- GitHub Actions workflow commands: warnings and errors become `::warning::` /
  `::error::` annotations on the run, debug records become `::debug::` lines (shown
  only when step debugging is on), info records are plain log lines.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

_RESERVED_LOG_RECORD_ATTRS: set[str] = {
    "args",
    "asctime",
    "created",
    "exc_info",
    "exc_text",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "msg",
    "name",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "taskName",
    "thread",
    "threadName",
}


def record_extra(record: logging.LogRecord) -> dict[str, Any]:
    """Return the fields a call site passed through `extra=`."""

    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_LOG_RECORD_ATTRS and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per log record; `extra=` fields are nested under "extra"."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = record_extra(record)
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def escape_command_data(value: str) -> str:
    """Escape a workflow command message so it stays on one line."""

    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ActionsFormatter(logging.Formatter):
    """Render records as GitHub Actions workflow commands.

    WARNING -> ::warning::, ERROR and above -> ::error::, DEBUG -> ::debug::.
    INFO records are written as plain lines. `extra=` fields are appended as compact JSON.
    """

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        message = record.getMessage()
        extra = record_extra(record)
        if extra:
            message = f"{message} {json.dumps(extra, ensure_ascii=False, default=str)}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        if record.levelno >= logging.ERROR:
            command = "error"
        elif record.levelno >= logging.WARNING:
            command = "warning"
        elif record.levelno < logging.INFO:
            command = "debug"
        else:
            return message
        return f"::{command}::{escape_command_data(message)}"


def configure_logging(level: str, *, actions: bool = False) -> None:
    """Configure root logging on stdout, as workflow commands when `actions` is set."""

    root = logging.getLogger()

    # Re-configuring must not duplicate output.
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(ActionsFormatter() if actions else JsonFormatter())

    root.addHandler(handler)
    root.setLevel(level.upper())

    # PyGithub and urllib3 are chatty at DEBUG.
    for name in ("github", "urllib3"):
        logging.getLogger(name).setLevel(max(root.level, logging.INFO))
