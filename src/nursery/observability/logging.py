"""Stdlib logging setup for the ``nursery`` logger hierarchy.

Runtime modules log through ``logging.getLogger("nursery.<module>")`` and
never configure handlers themselves. Applications that want the output call
configure_logging() once at startup; defaults come from NurserySettings.

Example:
    >>> configure_logging(level="DEBUG", format="json")
"""

from __future__ import annotations

import logging
import sys
from typing import Literal, TextIO

import orjson

from nursery.foundation.config import get_settings

__all__ = ["JsonFormatter", "configure_logging", "ROOT_LOGGER"]

ROOT_LOGGER = "nursery"
_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(threadName)s): %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for machine consumption."""
    
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": self.formatTime(record),
            "level": record.levelname.lower(),
            "logger": record.name,
            "thread": record.threadName,
            "event": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(entry, default=str, option=orjson.OPT_NON_STR_KEYS).decode()


def configure_logging(
    level: str | None = None,
    format: Literal["json", "text"] | None = None,  # noqa: A002 - matches settings field
    *,
    output: TextIO | None = None,
) -> logging.Handler:
    """Attach a single stream handler to the nursery logger.
    
    Calling again replaces the handler installed by the previous call.
    """
    settings = get_settings().logging
    level = (level or settings.level).upper()
    match format or settings.format:
        case "text": formatter: logging.Formatter = logging.Formatter(_TEXT_FORMAT)
        case "json": formatter = JsonFormatter()
        case other: raise ValueError(f"Unknown format: {other}. Use 'text' or 'json'")
    
    root = logging.getLogger(ROOT_LOGGER)
    for handler in [h for h in root.handlers if getattr(h, "_nursery_managed", False)]:
        root.removeHandler(handler)
    
    handler = logging.StreamHandler(output or sys.stderr)
    handler.setFormatter(formatter)
    handler._nursery_managed = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(getattr(logging, level, logging.WARNING))
    return handler
