"""Logging setup based on loguru.

Flask and Werkzeug log through the standard library; an intercept handler
forwards those records into loguru so the console output stays uniform.
"""
from __future__ import annotations

import logging
import sys

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

_configured = False


class InterceptHandler(logging.Handler):
    """Redirect standard logging records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        if record.name.startswith(("httpx", "httpcore")):
            return

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(level: str = "INFO") -> None:
    global _configured

    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level.upper(), colorize=True)

    if not _configured:
        logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
        _configured = True


def get_logger(name: str | None = None):
    return logger.bind(module=name) if name else logger
