"""Core job domain models plus selection logic.

This module defines the job data structures (Job, Build, JobRun and their
statuses) and the domain-level operation for filtering jobs. It is
intentionally free of CLI and HTTP concerns: adapters translate platform
payloads into these values and frontends render them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Protocol

from actorops.core.selectors import JobSelector

DEFAULT_DESCRIPTION = "No description available"
DEFAULT_VERSION = "1.0.0"


@dataclass(frozen=True)
class Job:
    """
    Represents a job (an "actor") hosted on the platform.

    Attributes:
        id: Unique identifier of the job.
        name: Technical name of the job.
        title: Human-readable title; falls back to the name.
        description: Short description; falls back to a placeholder.
        owner: Username of the job owner.
        current_version: Current version number; falls back to "1.0.0".
        total_runs: Number of runs recorded for the job.
    """

    id: str
    name: str
    title: str = ""
    description: str = DEFAULT_DESCRIPTION
    owner: str = ""
    current_version: str = DEFAULT_VERSION
    total_runs: int = 0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Job:
        """Build a Job from a platform list item, applying defaults."""
        name = str(payload.get("name") or "")
        stats = payload.get("stats") or {}
        return cls(
            id=str(payload["id"]),
            name=name,
            title=str(payload.get("title") or name),
            description=str(payload.get("description") or DEFAULT_DESCRIPTION),
            owner=str(payload.get("username") or ""),
            current_version=str(payload.get("currentVersionNumber") or DEFAULT_VERSION),
            total_runs=int(stats.get("totalRuns") or 0),
        )


class BuildStatus(str, Enum):
    """
    Enumeration of build states reported by the platform.

    UNKNOWN covers any value the platform may add later.
    """

    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    ABORTED = "ABORTED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Any) -> BuildStatus:
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class Build:
    """
    Represents a compiled artifact of a job.

    Attributes:
        id: Unique identifier of the build.
        status: Build status.
        build_number: Version-like build number (e.g. "0.1.12").
        tag: Optional tag attached to the build (e.g. "latest").
    """

    id: str
    status: BuildStatus
    build_number: str = ""
    tag: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Build:
        return cls(
            id=str(payload.get("id") or ""),
            status=BuildStatus.parse(payload.get("status")),
            build_number=str(payload.get("buildNumber") or ""),
            tag=payload.get("tag") or None,
        )


class RunStatus(str, Enum):
    """
    Enumeration of possible states of a job run.

    Values:
        READY: The run has been created but has not started yet.
        RUNNING: The run is currently executing.
        SUCCEEDED: The run completed successfully.
        FAILED: The run completed with an error.
        ABORTED: The run was aborted before completion.
        TIMED_OUT: The run exceeded its platform-side timeout.
        UNKNOWN: The run state could not be determined.
    """

    READY = "READY"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    ABORTED = "ABORTED"
    TIMED_OUT = "TIMED-OUT"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Any) -> RunStatus:
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_RUN_STATUSES


TERMINAL_RUN_STATUSES = frozenset(
    {
        RunStatus.SUCCEEDED,
        RunStatus.FAILED,
        RunStatus.ABORTED,
        RunStatus.TIMED_OUT,
    }
)


def _parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp as sent by the platform ("...Z")."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True)
class JobRun:
    """
    Represents a single execution (run) of a job.

    A JobRun is a snapshot: it is never mutated locally, a newer state is
    obtained by fetching the run again.

    Attributes:
        id: Unique identifier of the run.
        job_id: Identifier of the job this run belongs to.
        status: Current run status.
        started_at: Start time, if known.
        finished_at: Finish time, for finished runs.
        items_count: Number of result items produced so far.
        requests_count: Number of requests handled by the run.
        dataset_id: Identifier of the default result dataset.
    """

    id: str
    job_id: str
    status: RunStatus
    started_at: datetime | None = None
    finished_at: datetime | None = None
    items_count: int = 0
    requests_count: int = 0
    dataset_id: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], job_id: str) -> JobRun:
        stats = payload.get("stats") or {}
        return cls(
            id=str(payload["id"]),
            job_id=str(payload.get("actId") or job_id),
            status=RunStatus.parse(payload.get("status")),
            started_at=_parse_timestamp(payload.get("startedAt")),
            finished_at=_parse_timestamp(payload.get("finishedAt")),
            items_count=int(stats.get("itemsCount") or 0),
            requests_count=int(stats.get("requestsCount") or 0),
            dataset_id=payload.get("defaultDatasetId") or None,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def duration_seconds(self) -> float | None:
        """Wall-clock run time, when both start and finish are known."""
        if self.started_at is None or self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()


class JobsAdapter(Protocol):
    """Interface for job lookup operations used by the core domain."""

    def list_jobs(self) -> list[Job]:
        """Return all jobs owned by the current credential."""
        ...


def select_jobs(adapter: JobsAdapter, selector: JobSelector) -> list[Job]:
    """
    Select jobs using a selector strategy.

    The selector encapsulates matching logic (for example name-based,
    search-based, or combined selectors). This function iterates over all
    available jobs and applies the selector to each job.

    Args:
        adapter: Adapter used to retrieve all jobs.
        selector: JobSelector instance defining the matching strategy.

    Returns:
        A list of Job objects that match the selector.
    """
    return [job for job in adapter.list_jobs() if selector.matches(job)]
