from __future__ import annotations

"""
Process-wide logging for the camera finder.

Modules log through `logging.getLogger(__name__)`; the first
CameraDiscoveryService (or an explicit setup_logging call) installs one stdout
handler on the root logger. Records may carry `cam_id` / `key` via `extra=`,
and both formatters surface them.
"""

import json
import logging
import os
import sys
from typing import Optional, TextIO


CONTEXT_FIELDS = ("cam_id", "key", "url")
TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_HANDLER_FLAG = "_camfinder_handler"


def _context(record: logging.LogRecord) -> dict:
    return {f: getattr(record, f) for f in CONTEXT_FIELDS if getattr(record, f, None) is not None}


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line:
      { "t": 1700000000000, "lvl": "WARNING", "name": "discovery.fetcher",
        "msg": "Relay returned HTTP 502", "cam_id": "A1" }
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "t": int(record.created * 1000),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        payload.update(_context(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines with the context fields appended as k=v."""

    def __init__(self) -> None:
        super().__init__(TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        line = super().format(record)
        ctx = _context(record)
        if ctx:
            line += " " + " ".join(f"{k}={v}" for k, v in ctx.items())
        return line


def _level(name: Optional[str]) -> int:
    lvl = logging.getLevelName((name or os.environ.get("LOG_LEVEL") or "INFO").upper())
    return lvl if isinstance(lvl, int) else logging.INFO


def setup_logging(
    level: Optional[str] = None,
    fmt: Optional[str] = None,
    stream: Optional[TextIO] = None,
    force: bool = False,
) -> logging.Handler:
    """
    Install the camera-finder handler on the root logger, once.

    Level: `level` arg, else env LOG_LEVEL, else INFO.
    Format: `fmt` ("json" or "text"), else env LOG_FORMAT, else json.
    Handlers installed by others (pytest, an embedding app) are left alone.
    Later calls return the existing handler unless `force` replaces it.
    """
    root = logging.getLogger()
    for h in list(root.handlers):
        if getattr(h, _HANDLER_FLAG, False):
            if not force:
                return h
            root.removeHandler(h)

    kind = (fmt or os.environ.get("LOG_FORMAT") or "json").lower()
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(TextFormatter() if kind == "text" else JsonFormatter())
    setattr(handler, _HANDLER_FLAG, True)

    root.addHandler(handler)
    root.setLevel(_level(level))
    return handler


def get_logger(name: str) -> logging.Logger:
    """Module logger with the root handler in place (scripts and live checks)."""
    setup_logging()
    return logging.getLogger(name)
