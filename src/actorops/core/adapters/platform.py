from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, TypeVar
from urllib.parse import quote

import httpx

from actorops.core.auth import Credential, sanitize_base_url
from actorops.core.config import FALLBACK_BUILD_TAG, ClientSettings
from actorops.core.datasets import ResultSet, normalize_items
from actorops.core.errors import (
    BuildUnavailable,
    ExecutionFailed,
    FetchFailed,
    IncompleteResults,
    PlatformError,
)
from actorops.core.jobs import Build, BuildStatus, Job, JobRun
from actorops.core.runs import RunCallback, wait_for_run, wait_interval
from actorops.core.schema import JobSchema, schema_from_detail
from actorops.core.transport import RetryPolicy, Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _segment(value: str) -> str:
    """Quote one path segment; platform ids may contain `~`."""
    return quote(str(value), safe="~")


def _is_missing_build(message: str) -> bool:
    return "Build with tag" in message and "was not found" in message


@dataclass(frozen=True)
class BuildsResult:
    """Outcome of a build listing: either builds or the error that occurred."""

    builds: list[Build] = field(default_factory=list)
    error: PlatformError | None = None


def select_build_tag(builds: Iterable[Build]) -> str:
    """
    Pick the build tag to run.

    Builds are expected newest first. The first SUCCEEDED build wins; its
    tag is preferred over its build number. Without a successful build the
    fallback tag "latest" is returned.
    """
    for build in builds:
        if build.status == BuildStatus.SUCCEEDED:
            return build.tag or build.build_number or FALLBACK_BUILD_TAG
    return FALLBACK_BUILD_TAG


class JobPlatformClient:
    """Client for the job platform REST API."""

    def __init__(
        self,
        credential: Credential | str,
        base_url: str | None = None,
        *,
        settings: ClientSettings | None = None,
        policy: RetryPolicy | None = None,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Create a client.

        Args:
            credential: API token, raw or already validated.
            base_url: Endpoint override; defaults to the public API.
            settings: Tunables (page sizes, intervals, deadlines).
            policy: Transport retry policy; derived from settings if omitted.
            http_client: Pre-built httpx client (used as is, not closed).
            sleep: Sleep function used for every wait.
            clock: Monotonic clock used for poll deadlines.

        Raises:
            InvalidCredential: If the token is empty or not a string.
        """
        if not isinstance(credential, Credential):
            credential = Credential.parse(credential)
        self.settings = settings or ClientSettings()
        self.base_url = sanitize_base_url(base_url)
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.settings.request_timeout),
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
        )
        self._sleep = sleep
        self._clock = clock
        self._transport = Transport(
            self._http,
            credential,
            policy
            or RetryPolicy(
                max_attempts=self.settings.max_attempts,
                backoff_step=self.settings.backoff_step,
            ),
            sleep=sleep,
        )

    def close(self) -> None:
        """Close the connection pool, if this client created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> JobPlatformClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _data(self, method: str, path: str, *, op: str, **kwargs: Any) -> Any:
        """Send a request and unwrap the `{"data": ...}` envelope."""
        payload = self._transport.request(method, path, op=op, **kwargs)
        if not isinstance(payload, Mapping) or "data" not in payload:
            raise FetchFailed(f"Unexpected response envelope for {op}")
        return payload["data"]

    def _items(self, data: Any, op: str) -> list[Mapping[str, Any]]:
        items = data.get("items") if isinstance(data, Mapping) else None
        if not isinstance(items, list):
            raise FetchFailed(f"Unexpected list payload for {op}")
        return items

    def _parse_each(
        self, items: list[Any], parse: Callable[[Mapping[str, Any]], T], op: str
    ) -> list[T]:
        """Parse list items into models; any malformed item fails the whole page."""
        parsed = []
        for item in items:
            if not isinstance(item, Mapping):
                raise FetchFailed(f"Unexpected item in {op}: {item!r}")
            try:
                parsed.append(parse(item))
            except (KeyError, TypeError, ValueError) as exc:
                raise FetchFailed(f"Malformed item in {op}: {exc!r}") from exc
        return parsed

    def validate_credential(self) -> bool:
        """
        Probe the credential with one lightweight call.

        Returns False on any failure, bad key and network errors alike.
        """
        try:
            self._transport.request("GET", "/users/me", op="users.me")
        except (PlatformError, httpx.HTTPError) as exc:
            logger.info(
                "credential validation failed: %s",
                exc,
                extra={"event": "credential.invalid"},
            )
            return False
        return True

    def list_jobs(self) -> list[Job]:
        """Return the jobs owned by the credential holder (one page)."""
        data = self._data(
            "GET",
            "/acts",
            op="acts.list",
            params={"my": 1, "limit": self.settings.jobs_page_size},
        )
        return self._parse_each(self._items(data, "acts.list"), Job.from_payload, "acts.list")

    def get_job_detail(self, job_id: str) -> Mapping[str, Any]:
        """Return the raw detail payload of a job."""
        data = self._data("GET", f"/acts/{_segment(job_id)}", op="acts.get")
        if not isinstance(data, Mapping):
            raise FetchFailed("Unexpected job detail payload")
        return data

    def get_job_schema(self, job_id: str) -> JobSchema:
        """Return the input schema of a job (explicit, synthesized or empty)."""
        return schema_from_detail(self.get_job_detail(job_id))

    def fetch_builds(self, job_id: str) -> BuildsResult:
        """Fetch the most recent builds, newest first, capturing any error."""
        try:
            data = self._data(
                "GET",
                f"/acts/{_segment(job_id)}/builds",
                op="builds.list",
                params={"desc": 1, "limit": self.settings.builds_limit},
            )
            builds = self._parse_each(
                self._items(data, "builds.list"), Build.from_payload, "builds.list"
            )
        except PlatformError as exc:
            return BuildsResult(error=exc)
        return BuildsResult(builds=builds)

    def list_builds(self, job_id: str) -> list[Build]:
        """Return recent builds; an empty list when they cannot be listed."""
        result = self.fetch_builds(job_id)
        # a failed listing counts as no builds
        if result.error is not None:
            logger.warning(
                "failed to list builds for job %s: %s",
                job_id,
                result.error,
                extra={"event": "builds.list.failed", "job_id": job_id},
            )
            return []
        return result.builds

    def resolve_build_tag(self, job_id: str) -> str:
        """Return the tag of the newest successful build, or "latest"."""
        tag = select_build_tag(self.list_builds(job_id))
        if tag == FALLBACK_BUILD_TAG:
            logger.info(
                "no successful build found for job %s, using %s",
                job_id,
                FALLBACK_BUILD_TAG,
                extra={"event": "builds.fallback", "job_id": job_id},
            )
        return tag

    def execute(self, job_id: str, run_input: Mapping[str, Any]) -> JobRun:
        """
        Start a run of a job with the given input.

        Raises:
            BuildUnavailable: If the platform has no build for the resolved tag.
            ExecutionFailed: For any other failure, wrapping the cause.
        """
        tag = self.resolve_build_tag(job_id)
        try:
            data = self._data(
                "POST",
                f"/acts/{_segment(job_id)}/runs",
                op="runs.start",
                params={"build": tag},
                json_body=dict(run_input),
            )
            if not isinstance(data, Mapping) or "id" not in data:
                raise FetchFailed("Unexpected run payload")
            run = JobRun.from_payload(data, job_id)
        except PlatformError as exc:
            message = str(exc)
            if _is_missing_build(message):
                raise BuildUnavailable(message, cause=exc) from exc
            raise ExecutionFailed(f"Failed to run job: {message}", cause=exc) from exc
        except (KeyError, TypeError, ValueError) as exc:
            raise ExecutionFailed(f"Failed to run job: malformed run {exc}", cause=exc) from exc

        logger.info(
            "started run %s of job %s (build %s)",
            run.id,
            job_id,
            tag,
            extra={"event": "runs.started", "job_id": job_id, "run_id": run.id},
        )
        return run

    def get_run(self, job_id: str, run_id: str) -> JobRun:
        """Return the current snapshot of a run."""
        data = self._data(
            "GET",
            f"/acts/{_segment(job_id)}/runs/{_segment(run_id)}",
            op="runs.get",
        )
        if not isinstance(data, Mapping) or "id" not in data:
            raise FetchFailed("Unexpected run payload")
        return JobRun.from_payload(data, job_id)

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
        """
        Re-fetch a run every `poll_interval` seconds (default 2s) until it
        is terminal.

        Raises:
            PollTimeout: If `max_wait` (default 300s) elapses first.
            FetchFailed: If a status fetch fails; not retried at this level.
        """
        return wait_for_run(
            self,
            job_id,
            run_id,
            poll_interval=(
                self.settings.poll_interval if poll_interval is None else poll_interval
            ),
            max_wait=self.settings.poll_max_wait if max_wait is None else max_wait,
            sleep=self._sleep,
            clock=self._clock,
            cancel=cancel,
            on_update=on_update,
        )

    def get_results(
        self,
        dataset_id: str,
        expected_count: int,
        *,
        cancel: threading.Event | None = None,
    ) -> ResultSet:
        """
        Read the items of a result dataset.

        A run may report success before its dataset exposes every item, so
        the dataset is read until it returns at least `expected_count`
        items. A short read is never returned.

        Raises:
            IncompleteResults: If no attempt reached the expected count.
            OperationCancelled: If the cancel event is set while waiting.
        """
        if expected_count <= 0:
            return ResultSet(dataset_id=dataset_id, expected_count=0)

        attempts = self.settings.result_attempts
        last_error: PlatformError | None = None

        for attempt in range(1, attempts + 1):
            try:
                payload = self._transport.request(
                    "GET",
                    f"/datasets/{_segment(dataset_id)}/items",
                    op="datasets.items",
                    params={"format": "json", "clean": "true"},
                )
                items = normalize_items(payload)
            except FetchFailed as exc:
                last_error = exc
                logger.warning(
                    "dataset %s read failed (attempt %d/%d): %s",
                    dataset_id,
                    attempt,
                    attempts,
                    exc,
                    extra={"event": "datasets.items.failed", "dataset_id": dataset_id},
                )
            else:
                if len(items) >= expected_count:
                    return ResultSet(
                        dataset_id=dataset_id,
                        expected_count=expected_count,
                        items=items,
                    )
                logger.info(
                    "dataset %s has %d/%d items (attempt %d/%d)",
                    dataset_id,
                    len(items),
                    expected_count,
                    attempt,
                    attempts,
                    extra={"event": "datasets.items.short", "dataset_id": dataset_id},
                )

            if attempt < attempts:
                wait_interval(self.settings.result_interval, sleep=self._sleep, cancel=cancel)

        raise IncompleteResults(attempts, dataset_id, expected_count) from last_error
