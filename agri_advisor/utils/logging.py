"""
Root-logger setup for the CLI and the dashboard, driven by ``[logging]``.

    level        DEBUG | INFO | WARNING | ERROR | CRITICAL
    log_file     optional path; parent directories are created
    json_format  one JSON object per line instead of plain text

Log lines go to stderr so that CLI reports on stdout can be piped. Library
modules only ever call ``logging.getLogger(__name__)``.

A JSON line looks like::

    {"ts": "2026-10-19T09:00:00Z", "level": "INFO",
     "logger": "agri_advisor.ingestion.market_client",
     "msg": "Market feed: 6 record(s) ...", "district": "Ludhiana"}
"""

from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from agri_advisor.config import LoggingConfig

_TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"
_UTC_SECONDS = "%Y-%m-%dT%H:%M:%SZ"

# httpx logs every request at INFO, including the api-key query string.
_QUIET_LOGGERS = ("httpx", "httpcore")

_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class _UtcFormatter(logging.Formatter):
    converter = time.gmtime


class _JsonFormatter(_UtcFormatter):
    """One JSON object per record: ts, level, logger, msg, then any ``extra=`` keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, _UTC_SECONDS),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        payload.update(
            (k, v) for k, v in vars(record).items()
            if k not in _RECORD_ATTRS and not k.startswith("_")
        )
        return json.dumps(payload, default=str, ensure_ascii=False)


def _formatter_for(config: "LoggingConfig") -> logging.Formatter:
    if config.json_format:
        return _JsonFormatter()
    return _UtcFormatter(_TEXT_FORMAT, datefmt=_UTC_SECONDS)


def configure_logging(config: "LoggingConfig") -> None:
    """Replace the root logger's handlers according to ``config``.

    Safe to call more than once; ``basicConfig(force=True)`` drops the
    previous handlers.
    """
    formatter = _formatter_for(config)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        path = Path(config.log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=config.level, handlers=handlers, force=True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
