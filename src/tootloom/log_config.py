# tootloom/log_config.py
"""Logging configuration for the tootloom library using Loguru.

Library modules import `logger` from here. Applications that want the
standard tootloom format call `configure_logging()` once at startup.
"""

import sys

from loguru import logger

from .config import get_settings

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def configure_logging(
    level: str | None = None, sink=sys.stderr, *, library_only: bool = False
) -> int:
    """Replace Loguru's handlers with a single tootloom handler.

    Args:
        level: The minimum logging level. Defaults to "DEBUG" when
            `ClientSettings.debug` is set, "INFO" otherwise.
        sink: The output sink (e.g., sys.stderr, "file.log").
        library_only: Only pass records emitted by tootloom modules.

    Returns:
        int: The id of the added handler, for `logger.remove()`.
    """
    if level is None:
        level = "DEBUG" if get_settings().debug else "INFO"
    level = level.upper()

    logger.remove()
    handler_id = logger.add(
        sink,
        level=level,
        format=_FORMAT,
        filter="tootloom" if library_only else None,
        colorize=sink is sys.stderr,
        backtrace=True,
        diagnose=False,
    )
    logger.debug(f"tootloom logging configured: level={level}, sink={sink}")
    return handler_id


__all__ = ["configure_logging", "logger"]
