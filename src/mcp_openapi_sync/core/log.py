from __future__ import annotations

import logging
import sys
from typing import Optional

from colorlog import ColoredFormatter

LOGGER_NAME = "mcp_openapi_sync"

_HANDLER_MARKER = "_mcp_openapi_sync_handler"


def resolve_log_level(level_name: Optional[str]) -> int:
    value = (level_name or "INFO").strip().upper()
    level = getattr(logging, value, None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level_name: Optional[str] = None) -> logging.Logger:
    """Attach one colored stderr handler to the package logger."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_log_level(level_name))

    if any(getattr(h, _HANDLER_MARKER, False) for h in logger.handlers):
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ColoredFormatter(
            "%(log_color)s%(levelname)s:%(name)s:%(message)s",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
    )
    setattr(handler, _HANDLER_MARKER, True)
    logger.addHandler(handler)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if not name:
        return logging.getLogger(LOGGER_NAME)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
