from __future__ import annotations

import logging
import os
from typing import Optional, Union

from pythonjsonlogger import jsonlogger

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(
        level: Union[int, str, None] = None,
        force_format: Optional[str] = None,
) -> logging.Handler:
    """
    Configure the root logger for GreenHub.

    Format, first match wins:
        1) force_format ("json" or "plain")
        2) GREENHUB_LOG_FORMAT
        3) "json"

    Level, first match wins: `level`, GREENHUB_LOG_LEVEL, INFO.

    Structured `extra={...}` fields become top-level keys in JSON mode.
    Returns the installed handler.
    """
    format_mode = (force_format or os.getenv("GREENHUB_LOG_FORMAT", "json")).lower()
    if level is None:
        level = os.getenv("GREENHUB_LOG_LEVEL", "INFO").upper()

    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler()
    if format_mode == "plain":
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    else:
        handler.setFormatter(jsonlogger.JsonFormatter(JSON_FORMAT))

    # Replace any existing handlers to avoid duplicate logs
    root.handlers.clear()
    root.addHandler(handler)
    return handler
