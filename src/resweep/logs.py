# Copyright (c) Syntropy Systems
"""Logging setup: an appending run log plus a rich console handler."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from pathlib import Path

FILE_LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_LEVELS: Final[dict[str, int]] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_level(name: str) -> int:
    """Map a level name to a logging level, defaulting to INFO."""
    return _LEVELS.get(name.strip().lower(), logging.INFO)


def setup_logging(
    log_path: Path | None = None,
    *,
    console_log: bool = True,
    console_level: str = "info",
) -> logging.Logger:
    """Configure the ``resweep`` logger for a run.

    The run log receives INFO and above and is appended to, so a resumed
    run continues the same file. The console handler is optional and
    filtered at ``console_level``. Calling this again replaces the
    handlers installed by a previous call.
    """
    logger = logging.getLogger("resweep")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    levels: list[int] = []
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        logger.addHandler(file_handler)
        levels.append(logging.INFO)

    if console_log:
        level = parse_level(console_level)
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
        )
        console_handler.setLevel(level)
        logger.addHandler(console_handler)
        levels.append(level)

    logger.setLevel(min(levels) if levels else logging.WARNING)
    return logger
