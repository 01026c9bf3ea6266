"""Logging setup for command-line runs."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_console: Console | None = None


def get_console() -> Console:
    """Return the shared Rich console (stderr)."""
    global _console
    if _console is None:
        _console = Console(stderr=True)
    return _console


def setup_logging(level: str = "INFO") -> None:
    """Install a `RichHandler` on the root logger.

    Calling this more than once is a no-op apart from updating the level.
    """
    log = logging.getLogger()
    log.setLevel(level.upper())
    if log.handlers:
        return
    handler = RichHandler(
        console=get_console(),
        rich_tracebacks=True,
        show_time=True,
        log_time_format="%H:%M:%S",
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    log.addHandler(handler)
