"""Runtime logging helpers."""

from __future__ import annotations

import sys
from logging import Handler
from typing import Literal

from loguru import logger
from rich.console import Console
from rich.logging import RichHandler

LogProfile = Literal["default", "cli"]

_DEFAULT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<6} | {name}:{function}:{line} | {message}"
_CONFIGURED: tuple[LogProfile, str] | None = None


def _build_cli_handler() -> Handler:
    # stdout carries results, so log output always goes to stderr.
    return RichHandler(
        console=Console(stderr=True),
        show_level=True,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )


def configure_logging(*, profile: LogProfile = "default", level: str = "INFO") -> None:
    """Configure process-level logging once per profile and level."""
    global _CONFIGURED
    level = level.upper()
    if _CONFIGURED == (profile, level):
        return

    logger.remove()
    if profile == "cli":
        logger.add(
            _build_cli_handler(),
            level=level,
            format="{message}",
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stderr,
            level=level,
            format=_DEFAULT_FORMAT,
            backtrace=False,
            diagnose=False,
        )
    _CONFIGURED = (profile, level)
