"""Logging configuration for the command line."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "WARNING", verbose: bool = False) -> None:
    """Route log records through rich on stderr.

    Args:
        level: Level name from settings (e.g. "INFO")
        verbose: Force DEBUG regardless of level
    """
    resolved = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(
        level=resolved,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
