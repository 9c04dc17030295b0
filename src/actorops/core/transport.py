"""HTTP transport with retry and error mapping.

Every platform call goes through `Transport.request`. It adds the
credential and client headers, retries transient failures (5xx, 429 and
network errors) with a linear backoff and maps the remaining non-2xx
responses to typed errors.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping

import httpx

from actorops.core.auth import Credential
from actorops.core.config import (
    BACKOFF_STEP_SECONDS,
    CLIENT_NAME,
    CLIENT_VERSION,
    MAX_ATTEMPTS,
)
from actorops.core.errors import AuthenticationFailed, FetchFailed, Forbidden

logger = logging.getLogger(__name__)

USER_AGENT = f"{CLIENT_NAME}/{CLIENT_VERSION}"


def is_retryable_status(status: int) -> bool:
    """Server errors and rate limiting are transient."""
    return status >= 500 or status == 429


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry settings of the transport.

    Attributes:
        max_attempts: Total attempts, the first one included.
        backoff_step: Attempt N waits N * backoff_step seconds before retrying.
        retryable_status: Predicate telling which HTTP statuses to retry.
    """

    max_attempts: int = MAX_ATTEMPTS
    backoff_step: float = BACKOFF_STEP_SECONDS
    retryable_status: Callable[[int], bool] = is_retryable_status

    def delay(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        return attempt * self.backoff_step


def _platform_message(response: httpx.Response) -> str:
    """Extract the platform's error message, else the raw body text."""
    fallback = f"API request failed with status {response.status_code}"
    text = response.text
    try:
        payload = response.json()
    except ValueError:
        return text or fallback
    if isinstance(payload, Mapping):
        error = payload.get("error")
        if isinstance(error, Mapping) and error.get("message"):
            return str(error["message"])
    return text or fallback


def error_for_response(response: httpx.Response) -> FetchFailed:
    """Map a non-2xx response to the matching typed error."""
    status = response.status_code
    if status == 401:
        return AuthenticationFailed("Invalid API key or authentication failed", status)
    if status == 403:
        return Forbidden("Access forbidden - check your API key permissions", status)
    if status == 429:
        return FetchFailed("Rate limit exceeded - please try again later", status)
    if status == 500:
        return FetchFailed("Platform server error - please try again later", status)
    return FetchFailed(_platform_message(response), status)


class Transport:
    """Authenticated request primitive shared by all client operations."""

    def __init__(
        self,
        client: httpx.Client,
        credential: Credential,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._credential = credential
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": self._credential.bearer(),
            "User-Agent": USER_AGENT,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _backoff(self, attempt: int, op: str, reason: str) -> None:
        delay = self.policy.delay(attempt)
        logger.warning(
            "platform request failed (attempt %d/%d), retrying in %.1fs: %s",
            attempt,
            self.policy.max_attempts,
            delay,
            reason,
            extra={"event": "platform.request.retry", "op": op, "attempt": attempt},
        )
        self._sleep(delay)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        op: str | None = None,
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Raises:
            AuthenticationFailed: On HTTP 401.
            Forbidden: On HTTP 403.
            FetchFailed: On any other non-2xx response, on a network failure
                once retries are exhausted, or on an undecodable body.
        """
        op = op or f"{method} {path}"
        attempts = max(self.policy.max_attempts, 1)

        for attempt in range(1, attempts + 1):
            started = time.perf_counter()
            logger.debug(
                "platform request %s %s",
                method,
                path,
                extra={"event": "platform.request", "op": op, "attempt": attempt},
            )
            try:
                response = self._client.request(
                    method,
                    path,
                    params=params,
                    json=json_body,
                    headers=self._headers(),
                )
            except httpx.TransportError as exc:
                if attempt < attempts:
                    self._backoff(attempt, op, f"{type(exc).__name__}: {exc}")
                    continue
                logger.debug(
                    "platform request failed",
                    extra={
                        "event": "platform.request.failed",
                        "op": op,
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    },
                )
                raise FetchFailed(f"Network error: {exc}") from exc

            duration_ms = round((time.perf_counter() - started) * 1000, 2)

            if response.is_success:
                return self._decode(response)

            error = error_for_response(response)
            if self.policy.retryable_status(response.status_code) and attempt < attempts:
                self._backoff(attempt, op, f"HTTP {response.status_code}")
                continue

            logger.debug(
                "platform request failed",
                extra={
                    "event": "platform.request.failed",
                    "op": op,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                    "error": error.message,
                },
            )
            raise error

        raise FetchFailed("Max retries exceeded")

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise FetchFailed(
                "Platform returned a non-JSON response", response.status_code
            ) from exc
