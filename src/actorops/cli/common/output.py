"""Output formatting utilities for the CLI."""

from __future__ import annotations

import json
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table
from rich.theme import Theme

from actorops.cli.common.tui_style import QUESTIONARY_STYLE_CONFIRM
from actorops.core.jobs import Build, BuildStatus, Job, RunStatus
from actorops.core.schema import JobSchema

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)


def status_style(status: RunStatus | BuildStatus) -> str:
    """Return the theme style used to render a run or build status."""
    if status.value == "SUCCEEDED":
        return "ok"
    if status.value in ("RUNNING", "READY"):
        return "warn"
    if status.value == "UNKNOWN":
        return "meta"
    return "err"


def _short(value: Any, limit: int = 40) -> str:
    if value is None:
        return ""
    text = value if isinstance(value, str) else json.dumps(value)
    return text if len(text) <= limit else f"{text[: limit - 3]}..."


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {v}")

    def json(self, value: Any) -> None:
        """Pretty-print a JSON value."""
        text = json.dumps(value, indent=2, ensure_ascii=False, default=str)
        console.print(Syntax(text, "json", word_wrap=True))

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """
        Ask the user for confirmation using a standardized Questionary prompt.

        Returns:
            True if the user confirms, False otherwise (including Ctrl-C).
        """
        console.print("[meta]Use y/n then Enter[/]")
        prompt = questionary.confirm(
            f"[ACTOR-OPS] {message}",
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
            auto_enter=False,
        )
        return bool(prompt.ask())

    def jobs_table(self, jobs: Iterable[Job], title: str = "Jobs") -> None:
        t = Table(title=title, show_lines=False)
        t.add_column("Job ID", style="ok", no_wrap=True)
        t.add_column("Title")
        t.add_column("Name", style="meta")
        t.add_column("Owner", style="meta")
        t.add_column("Version", style="meta")
        t.add_column("Runs", justify="right")

        for j in jobs:
            t.add_row(
                j.id,
                j.title,
                j.name,
                j.owner,
                j.current_version,
                str(j.total_runs),
            )

        console.print(t)

    def schema_table(self, schema: JobSchema, title: str = "Input schema") -> None:
        """Render the fields of a job input schema."""
        t = Table(title=title, show_lines=False)
        t.add_column("Field", style="ok", no_wrap=True)
        t.add_column("Kind", style="meta")
        t.add_column("Required")
        t.add_column("Default")
        t.add_column("Description", style="meta")

        for key, spec in schema.properties.items():
            kind = spec.kind.value
            if spec.enum_values:
                kind = f"{kind} ({', '.join(map(str, spec.enum_values))})"
            label = key if spec.label(key) == key else f"{spec.title} ({key})"
            t.add_row(
                label,
                kind,
                "[err]yes[/]" if key in schema.required else "no",
                _short(spec.default if spec.default is not None else spec.example),
                _short(spec.description, 60),
            )

        console.print(t)

    def builds_table(self, builds: Iterable[Build], title: str = "Builds") -> None:
        t = Table(title=title, show_lines=False)
        t.add_column("Build ID", style="meta", no_wrap=True)
        t.add_column("Number")
        t.add_column("Tag")
        t.add_column("Status")

        for b in builds:
            style = status_style(b.status)
            t.add_row(b.id, b.build_number, b.tag or "", f"[{style}]{b.status.value}[/{style}]")

        console.print(t)

    def results_preview(self, items: list[Any], *, total: int) -> None:
        """Print the first result items and how many were left out."""
        if not items:
            self.warn("The run produced no result items.")
            return
        self.header(f"Results (showing {len(items)} of {total})")
        self.json(items)


out = Out()
