"""Progress display for a watched run."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from actorops.cli.common.output import console, status_style
from actorops.core.jobs import Job, JobRun
from actorops.core.runs import RunCallback

_MAX_JOB_NAME_WIDTH = 56


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _display_job_label(job_id: str, job: Job | None) -> str:
    """
    Render a job label for the live progress line.

    - With a job: `<title>  (id: <id>)`.
    - Without one (or when the title is the id): just `<id>`.
    """
    if job is None or not job.title or job.title == job_id:
        return job_id
    return f"{_truncate(job.title, _MAX_JOB_NAME_WIDTH)}  (id: {job_id})"


@contextmanager
def run_progress(job_id: str, job: Job | None = None) -> Iterator[RunCallback]:
    """
    Show a spinner row for a run while the block executes.

    Yields a callback to pass as `on_update` to polling functions; every
    snapshot it receives refreshes the run id, status and item count. The
    elapsed timer stops once a terminal snapshot arrives.
    """
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.fields[job]}[/]"),
        TextColumn("run_id={task.fields[run_id]}"),
        TextColumn(
            "status=[{task.fields[style]}]{task.fields[status]}[/{task.fields[style]}]"
        ),
        TextColumn("items={task.fields[items]}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    task_id = progress.add_task(
        "",
        total=1,  # finite => elapsed stops when completed
        job=_display_job_label(job_id, job),
        run_id="-",
        status="STARTING",
        style="meta",
        items=0,
    )

    def _update(snapshot: JobRun) -> None:
        progress.update(
            task_id,
            run_id=snapshot.id,
            status=snapshot.status.value,
            style=status_style(snapshot.status),
            items=snapshot.items_count,
            completed=1 if snapshot.is_terminal else 0,
        )

    with progress:
        yield _update
