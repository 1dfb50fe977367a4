"""
Diagnostic channel for id3tree.

Messages go through loguru's ``logger``. Besides the built-in levels a
``PROGRESS`` level is registered for long running loops (reading a file,
evaluating a test set). The package disables its own messages on import;
call :func:`configure_logging` (the CLI does) to see them.
"""

from __future__ import annotations

import sys
from typing import Any

from loguru import logger

PROGRESS = "PROGRESS"
PROGRESS_NO = 22  # between INFO (20) and SUCCESS (25)

DEFAULT_FORMAT = "<level>{level: <8}</level> | {name}:{function} - {message}"


def _register_levels() -> None:
    try:
        logger.level(PROGRESS)
    except ValueError:
        logger.level(PROGRESS, no=PROGRESS_NO, color="<cyan>")


_register_levels()


def configure_logging(level: str | int = "INFO", sink: Any = None, fmt: str = DEFAULT_FORMAT) -> None:
    """
    Route id3tree diagnostics to a single sink.

    Args:
        level: Minimum level name or number (TRACE, DEBUG, INFO, PROGRESS, WARNING, ERROR).
        sink: Anything loguru accepts as a sink. Defaults to stderr.
        fmt: loguru format string.
    """
    logger.configure(handlers=[{"sink": sink or sys.stderr, "level": level, "format": fmt}])
    logger.enable("id3tree")


def progress(message: str, *args: Any) -> None:
    """Log a message at PROGRESS level."""
    logger.opt(depth=1).log(PROGRESS, message, *args)
