"""Logging setup: standard logging rendered by rich on stderr."""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def setup_logging(level: str = "WARNING", console: Optional[Console] = None) -> None:
    """Route the ``download_ticks`` loggers to a rich stderr handler.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR).
        console: Console to render on. Pass the console that draws progress
            bars so log lines and the live display do not interleave.
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    root = logging.getLogger("download_ticks")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())
    root.propagate = False

    # urllib3 retries and connection pool chatter only matter when debugging.
    logging.getLogger("urllib3").setLevel(
        logging.DEBUG if level.upper() == "DEBUG" else logging.WARNING
    )
