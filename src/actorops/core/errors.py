"""Error taxonomy for the job platform client.

Every operation of the client either returns a well-formed value or raises
one of the exceptions below. Transient conditions (rate limits, server
errors, network failures) never surface directly: the transport retries
them and only reports a FetchFailed once the retry budget is spent.
"""

from __future__ import annotations


class PlatformError(RuntimeError):
    """Base class for all errors raised by actorops core."""


class InvalidCredential(PlatformError):
    """Raised when an API token is empty, blank or not a string."""


class FetchFailed(PlatformError):
    """
    A request ended with a non-2xx response or a network failure.

    Attributes:
        status: HTTP status code, or None when no response was received.
        message: Platform-provided or derived error message.
    """

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status
        self.message = message


class AuthenticationFailed(FetchFailed):
    """The platform rejected the credential (HTTP 401)."""


class Forbidden(FetchFailed):
    """The credential lacks permission for the resource (HTTP 403)."""


class ExecutionFailed(PlatformError):
    """Starting a run failed. The underlying failure is kept in `cause`."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class BuildUnavailable(ExecutionFailed):
    """The requested build tag does not exist for the job."""

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(
            "Job cannot be run because no suitable build is available. "
            f"The job may need to be built first. Original error: {message}",
            cause=cause,
        )
        self.original_message = message


class PollTimeout(PlatformError):
    """
    A run did not reach a terminal status before the deadline.

    The outcome is unknown: the platform may still finish the run.
    """

    def __init__(self, job_id: str, run_id: str, waited: float):
        super().__init__(
            f"Run {run_id} of job {job_id} did not finish within {waited:g}s"
        )
        self.job_id = job_id
        self.run_id = run_id
        self.waited = waited


class IncompleteResults(PlatformError):
    """A dataset never exposed the expected number of items."""

    def __init__(self, attempts: int, dataset_id: str, expected: int | None = None):
        detail = f" (expected {expected} items)" if expected is not None else ""
        super().__init__(
            f"Dataset {dataset_id} incomplete after {attempts} attempts{detail}"
        )
        self.attempts = attempts
        self.dataset_id = dataset_id
        self.expected = expected


class OperationCancelled(PlatformError):
    """A wait was aborted through its cancellation event."""
