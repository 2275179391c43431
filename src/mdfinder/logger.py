"""Logging setup shared by every mdfinder module."""

import sys
from typing import Optional
from loguru import logger as _logger

from .home import Home

_logger_configured: bool = False


def get_logger(component: Optional[str] = None):
    """Get a logger bound to the given component."""
    global _logger_configured

    if not _logger_configured:
        _logger.remove()

        home = Home.current()

        # Stderr handler - only ERROR and above, the TUI owns the screen
        _logger.add(
            sys.stderr,
            level="ERROR",
            format="<red>{time:HH:mm:ss}</red> | <level>{level: <8}</level> | <cyan>{extra[component]}</cyan> | <level>{message}</level>",
            colorize=True,
        )

        _logger.add(
            home.log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[component]} | {message}",
            rotation="10 MB",
            retention="14 days",
            compression="zip",
            enqueue=True,
        )

        _logger.configure(patcher=_add_context)
        _logger_configured = True

    if component:
        return _logger.bind(component=component)
    return _logger


def _add_context(record):
    """Fill the component field for records logged without one."""
    if "component" not in record["extra"]:
        record["extra"]["component"] = "mdf"


logger = get_logger()

__all__ = [
    "logger",
    "get_logger",
]
