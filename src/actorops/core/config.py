"""Configuration defaults for the job platform client.

All tunables of the client live here as named constants. `ClientSettings`
bundles them and can be built from `ACTOROPS_*` environment variables;
malformed values fall back to the documented default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

CLIENT_NAME = "actor-ops"
CLIENT_VERSION = "0.3.0"

#: Public REST endpoint of the platform.
DEFAULT_BASE_URL = "https://api.apify.com/v2"

#: Number of jobs fetched by `list_jobs` (single page).
JOBS_PAGE_SIZE = 100

#: Number of recent builds inspected when resolving a build tag.
BUILDS_LIMIT = 10

#: Build tag used when no successful build can be found.
FALLBACK_BUILD_TAG = "latest"

#: Seconds between two run status polls.
POLL_INTERVAL_SECONDS = 2.0

#: Seconds after which polling gives up with PollTimeout.
POLL_MAX_WAIT_SECONDS = 300.0

#: Attempts made to read the expected number of dataset items.
RESULT_ATTEMPTS = 5

#: Seconds between two dataset reads.
RESULT_INTERVAL_SECONDS = 2.0

#: Total transport attempts for retryable failures (first try included).
MAX_ATTEMPTS = 3

#: Linear backoff step: attempt N waits N * BACKOFF_STEP_SECONDS.
BACKOFF_STEP_SECONDS = 1.0

#: Per-request timeout handed to httpx.
REQUEST_TIMEOUT_SECONDS = 30.0

TOKEN_ENV_VARS = ("ACTOROPS_TOKEN", "APIFY_TOKEN")
BASE_URL_ENV = "ACTOROPS_BASE_URL"


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    """Return an int from the environment, or default when unset/invalid."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(int(raw), minimum)
    except ValueError:
        return default


def _env_float(name: str, default: float, minimum: float = 0.0) -> float:
    """Return a float from the environment, or default when unset/invalid."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(float(raw), minimum)
    except ValueError:
        return default


@dataclass(frozen=True)
class ClientSettings:
    """Tunables of a JobPlatformClient."""

    jobs_page_size: int = JOBS_PAGE_SIZE
    builds_limit: int = BUILDS_LIMIT
    poll_interval: float = POLL_INTERVAL_SECONDS
    poll_max_wait: float = POLL_MAX_WAIT_SECONDS
    result_attempts: int = RESULT_ATTEMPTS
    result_interval: float = RESULT_INTERVAL_SECONDS
    max_attempts: int = MAX_ATTEMPTS
    backoff_step: float = BACKOFF_STEP_SECONDS
    request_timeout: float = REQUEST_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> ClientSettings:
        """Build settings, honoring `ACTOROPS_*` overrides."""
        return cls(
            jobs_page_size=_env_int("ACTOROPS_JOBS_PAGE_SIZE", JOBS_PAGE_SIZE, 1),
            builds_limit=_env_int("ACTOROPS_BUILDS_LIMIT", BUILDS_LIMIT, 1),
            poll_interval=_env_float("ACTOROPS_POLL_INTERVAL", POLL_INTERVAL_SECONDS),
            poll_max_wait=_env_float("ACTOROPS_POLL_MAX_WAIT", POLL_MAX_WAIT_SECONDS),
            result_attempts=_env_int("ACTOROPS_RESULT_ATTEMPTS", RESULT_ATTEMPTS, 1),
            result_interval=_env_float(
                "ACTOROPS_RESULT_INTERVAL", RESULT_INTERVAL_SECONDS
            ),
            max_attempts=_env_int("ACTOROPS_MAX_ATTEMPTS", MAX_ATTEMPTS, 1),
            backoff_step=_env_float("ACTOROPS_BACKOFF_STEP", BACKOFF_STEP_SECONDS),
            request_timeout=_env_float(
                "ACTOROPS_REQUEST_TIMEOUT", REQUEST_TIMEOUT_SECONDS, 1.0
            ),
        )


def token_from_env() -> str | None:
    """Return the first API token found in the environment."""
    for name in TOKEN_ENV_VARS:
        value = os.getenv(name)
        if value:
            return value
    return None


def base_url_from_env() -> str | None:
    """Return the base URL override from the environment, if any."""
    return os.getenv(BASE_URL_ENV) or None
