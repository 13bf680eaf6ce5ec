"""
Structured logging for loam-iiif.

Every record is written as one JSON object per line. Attributes passed via
``extra=`` become top-level keys, so ``request_id``, ``url`` and friends
can be filtered with ``jq``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


ROOT_LOGGER = "loam_iiif"

# attributes every LogRecord carries; anything else came from extra=
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render a record and its ``extra=`` fields as a JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(_extra_fields(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    fields = {}
    for key, value in vars(record).items():
        if key in _STANDARD_ATTRS or key.startswith("_"):
            continue
        try:
            json.dumps(value)
        except (TypeError, ValueError):
            value = repr(value)
        fields[key] = value
    return fields


def setup_logging(level: str, *, log_file: Path | None = None, stderr: bool = True) -> logging.Logger:
    """
    Configure the ``loam_iiif`` logger.

    The TUI owns the terminal, so it passes ``stderr=False``; records then
    go to ``log_file`` only, or nowhere.

    Parameters:
        level: Level name, case-insensitive; unknown names fall back to INFO
        log_file: Append JSON lines to this file
        stderr: Also write to standard error

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    handlers: list[logging.Handler] = []
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    if stderr:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setFormatter(JsonFormatter())
    logger.handlers[:] = handlers or [logging.NullHandler()]
    logger.propagate = False
    return logger
