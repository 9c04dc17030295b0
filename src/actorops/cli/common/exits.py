"""Exit handling utilities for the CLI."""

from contextlib import contextmanager
from typing import Iterator, NoReturn

import typer

from actorops.cli.common.output import out
from actorops.core.errors import PlatformError, PollTimeout


def ok_exit(msg: str | None = None) -> NoReturn:
    """Exit successfully with an optional informational message."""
    if msg:
        out.info(msg)
    raise typer.Exit(0)


def die(msg: str, code: int = 1) -> NoReturn:
    """Exit with an error message and optional exit code."""
    out.error(msg)
    raise typer.Exit(code)


def warn_exit(msg: str, code: int = 0) -> NoReturn:
    """Exit with a warning message and optional exit code."""
    out.warn(msg)
    raise typer.Exit(code)


def exit_from_exc(exc: Exception, *, message: str | None = None, code: int = 1) -> NoReturn:
    """
    Print an error message for an exception and exit with a given code.

    The exception text is used when no message is given.
    """
    out.error(message or str(exc))
    raise typer.Exit(code) from exc


@contextmanager
def platform_errors() -> Iterator[None]:
    """
    Turn platform errors raised in the block into CLI exits.

    PollTimeout exits with code 2: the run outcome is unknown, not failed.
    Every other platform error exits with code 1.
    """
    try:
        yield
    except PollTimeout as exc:
        exit_from_exc(
            exc,
            message=f"{exc}. The run may still finish; its outcome is unknown.",
            code=2,
        )
    except PlatformError as exc:
        exit_from_exc(exc, code=1)
