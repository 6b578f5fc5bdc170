"""Console logging for the blob store command line and server."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(log_level: str = "INFO", console: Console | None = None) -> None:
    """Attach a Rich console handler to the ``blob_store`` logger.

    Library code only ever calls ``logging.getLogger(__name__)``; this is for
    entry points.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ...).
        console: Console to render to. Defaults to stderr.
    """
    level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger("blob_store")
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    root_logger.addHandler(handler)
    root_logger.propagate = False

    for noisy_logger in ["aiosqlite", "httpx", "httpcore"]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)
