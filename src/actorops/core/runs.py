"""Core job run execution and monitoring logic.

This module contains domain-level functions for waiting on job runs and
for the complete "start, wait, collect results" flow. Everything here is
synchronous and talks to the platform only through an adapter.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from actorops.core.config import POLL_INTERVAL_SECONDS, POLL_MAX_WAIT_SECONDS
from actorops.core.datasets import ResultSet
from actorops.core.errors import IncompleteResults, OperationCancelled, PollTimeout
from actorops.core.jobs import JobRun, RunStatus

logger = logging.getLogger(__name__)

RunCallback = Callable[[JobRun], None]


class JobRunsAdapter(Protocol):
    """Interface for starting runs and querying their state."""

    def execute(self, job_id: str, run_input: dict[str, Any]) -> JobRun:
        """Start a run and return its first snapshot."""
        ...

    def get_run(self, job_id: str, run_id: str) -> JobRun:
        """Return the current snapshot of a run."""
        ...

    def poll_until_terminal(
        self,
        job_id: str,
        run_id: str,
        max_wait: float | None = None,
        poll_interval: float | None = None,
        *,
        cancel: threading.Event | None = None,
        on_update: RunCallback | None = None,
    ) -> JobRun:
        """Block until a run is terminal."""
        ...

    def get_results(
        self,
        dataset_id: str,
        expected_count: int,
        *,
        cancel: threading.Event | None = None,
    ) -> ResultSet:
        """Return the result items of a dataset."""
        ...


def wait_interval(
    seconds: float,
    *,
    sleep: Callable[[float], None] = time.sleep,
    cancel: threading.Event | None = None,
) -> None:
    """
    Wait for `seconds`, returning early with an error when cancelled.

    Raises:
        OperationCancelled: If the cancel event is (or becomes) set.
    """
    if cancel is None:
        sleep(seconds)
        return
    if cancel.wait(seconds):
        raise OperationCancelled("Wait cancelled")


def wait_for_run(
    adapter: JobRunsAdapter,
    job_id: str,
    run_id: str,
    *,
    poll_interval: float = POLL_INTERVAL_SECONDS,
    max_wait: float = POLL_MAX_WAIT_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    cancel: threading.Event | None = None,
    on_update: RunCallback | None = None,
) -> JobRun:
    """
    Block until a job run reaches a terminal state.

    This function re-fetches the run at a fixed interval until its status
    is SUCCEEDED, FAILED, ABORTED or TIMED-OUT. Fetch errors are not
    retried here; they propagate to the caller.

    Args:
        adapter: Adapter used to fetch run snapshots.
        job_id: Identifier of the job.
        run_id: Identifier of the run to monitor.
        poll_interval: Time in seconds to wait between status checks.
        max_wait: Deadline in seconds.
        sleep: Sleep function, replaceable in tests.
        clock: Monotonic clock, replaceable in tests.
        cancel: Optional event aborting the wait.
        on_update: Optional callback receiving every fetched snapshot.

    Returns:
        The terminal JobRun.

    Raises:
        PollTimeout: If the deadline passes first. The outcome of the run
            is unknown in that case.
        OperationCancelled: If the cancel event is set.
    """
    started = clock()
    while clock() - started < max_wait:
        if cancel is not None and cancel.is_set():
            raise OperationCancelled("Polling cancelled")

        run = adapter.get_run(job_id, run_id)
        if on_update is not None:
            on_update(run)
        if run.is_terminal:
            return run

        wait_interval(poll_interval, sleep=sleep, cancel=cancel)

    raise PollTimeout(job_id, run_id, max_wait)


@dataclass(frozen=True)
class RunOutcome:
    """
    Final state of a run started through `run_job`.

    Attributes:
        run: The terminal run snapshot.
        results: Result items, for succeeded runs with a dataset.
        message: Set when the run succeeded but results could not be read.
    """

    run: JobRun
    results: ResultSet | None = None
    message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.run.status == RunStatus.SUCCEEDED


def run_job(
    adapter: JobRunsAdapter,
    job_id: str,
    run_input: dict[str, Any],
    *,
    max_wait: float | None = None,
    cancel: threading.Event | None = None,
    on_update: RunCallback | None = None,
) -> RunOutcome:
    """
    Start a run, wait for it and collect its results.

    Results are only read for SUCCEEDED runs that have a dataset. If the
    dataset never reaches the reported item count, the outcome carries a
    message instead of results: the run itself still succeeded.
    """
    run = adapter.execute(job_id, run_input)
    final = adapter.poll_until_terminal(
        job_id,
        run.id,
        max_wait,
        cancel=cancel,
        on_update=on_update,
    )

    if final.status != RunStatus.SUCCEEDED or not final.dataset_id:
        return RunOutcome(run=final)

    try:
        results = adapter.get_results(final.dataset_id, final.items_count, cancel=cancel)
    except IncompleteResults as exc:
        logger.warning(
            "run succeeded but results are incomplete: %s",
            exc,
            extra={"event": "run.results.incomplete", "run_id": final.id},
        )
        return RunOutcome(
            run=final,
            message="Run completed successfully, but results could not be retrieved.",
        )
    return RunOutcome(run=final, results=results)


def summarize_run(run: JobRun) -> dict[str, Any]:
    """Return the display summary of a run."""
    duration = run.duration_seconds
    return {
        "Run ID": run.id,
        "Status": run.status.value,
        "Items": run.items_count,
        "Requests": run.requests_count,
        "Run time": f"{duration:.1f}s" if duration is not None else "-",
        "Dataset": run.dataset_id or "-",
    }
