"""Logging configuration for the CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(verbose: bool = False) -> None:
    """
    Route `actorops` logs to stderr through rich.

    Without `verbose` only warnings and errors are shown; with it the
    individual platform requests and retries are logged as well.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logger = logging.getLogger("actorops")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    # httpx logs every request at INFO; keep it for verbose mode only
    logging.getLogger("httpx").setLevel(logging.INFO if verbose else logging.WARNING)
