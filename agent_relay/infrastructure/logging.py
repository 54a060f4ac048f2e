"""
Structured Logging Configuration.

Supports:
- Color output for development (colorlog)
- JSON output for production (structlog)
"""

import logging
import os
import sys
from typing import Literal

import colorlog
import structlog

LogFormat = Literal["color", "json"]

# Libraries that log every request/frame at INFO level.
_NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "langchain",
    "langsmith",
    "openai",
    "uvicorn.access",
    "websockets",
)


def setup_logging(
    level: int | str = logging.INFO,
    format_type: LogFormat | None = None,
    json_indent: int | None = None,
) -> logging.Logger:
    """
    Configure logging for the relay process.

    Args:
        level: Logging level name or number
        format_type: "color" for a terminal, "json" for log shippers.
                    If None, reads LOG_FORMAT (defaults to "color")
        json_indent: Indentation for JSON output (None for compact)

    Returns:
        Configured root logger
    """
    if format_type is None:
        format_type = os.getenv("LOG_FORMAT", "color").lower()
    if format_type not in ("color", "json"):
        format_type = "color"

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if format_type == "color":
        handler.setFormatter(_create_color_formatter())
    else:
        handler.setFormatter(_create_json_formatter(json_indent))
    root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger


def _create_color_formatter() -> logging.Formatter:
    return colorlog.ColoredFormatter(
        fmt="%(log_color)s%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        log_colors={
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        },
        style="%",
    )


def _create_json_formatter(indent: int | None = None) -> logging.Formatter:
    """Render stdlib records as JSON lines through structlog's processor chain."""
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(indent=indent),
        ],
    )


class LoggerMixin:
    """Mixin class to add logging capability to any class."""

    @property
    def logger(self) -> logging.Logger:
        if not hasattr(self, "_logger"):
            self._logger = logging.getLogger(
                f"{self.__class__.__module__}.{self.__class__.__name__}"
            )
        return self._logger
