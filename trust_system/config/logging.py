"""loguru setup for the pipeline stages, scoring and retention.

A TTY with ``TRUST_LOG_FORMAT=console`` gets coloured one-line records on
stderr; anything else (containers, cron, CI) gets one JSON object per line on
stdout. Every record carries ``extra.component``.
"""

import sys
from typing import Optional

from loguru import logger

from trust_system.config.settings import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> <level>{level: <7}</level> "
    "<cyan>{extra[component]: <22}</cyan> {message}"
)


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """(Re)install the loguru sinks. Defaults come from settings."""
    level = (level or settings.log_level).upper()
    fmt = (fmt or settings.log_format).lower()

    logger.remove()
    logger.configure(extra={"component": "trust_system"})

    if fmt == "console" and sys.stderr.isatty():
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)
    else:
        logger.add(sys.stdout, format="{message}", level=level, serialize=True, diagnose=False)


def get_logger(component: str):
    return logger.bind(component=component)


configure_logging()

__all__ = ["CONSOLE_FORMAT", "configure_logging", "get_logger", "logger"]
