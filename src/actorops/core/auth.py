"""Credential handling for the job platform.

This module centralizes validation of API tokens and creation of a
JobPlatformClient, applying small normalization rules (trimming the token,
sanitizing the base URL) so the rest of the code can assume clean values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from actorops.core.config import (
    DEFAULT_BASE_URL,
    base_url_from_env,
    token_from_env,
)
from actorops.core.errors import InvalidCredential

if TYPE_CHECKING:
    from actorops.core.adapters.platform import JobPlatformClient


@dataclass(frozen=True)
class Credential:
    """
    An opaque API token.

    Attributes:
        token: The trimmed token value. Never shown in repr().
    """

    token: str = field(repr=False)

    @classmethod
    def parse(cls, value: object) -> Credential:
        """
        Validate a raw token and return a Credential.

        Raises:
            InvalidCredential: If the value is not a string or is blank.
        """
        if not isinstance(value, str) or not value.strip():
            raise InvalidCredential("Invalid API key provided")
        return cls(token=value.strip())

    def bearer(self) -> str:
        """Return the value of the Authorization header."""
        return f"Bearer {self.token}"


def sanitize_base_url(base_url: str | None) -> str:
    """
    Normalize a platform base URL.

    - Falls back to the public endpoint when empty
    - Removes query strings and fragments
    - Removes trailing slashes
    """
    if not base_url or not base_url.strip():
        return DEFAULT_BASE_URL
    url = base_url.strip().split("?", 1)[0].split("#", 1)[0]
    return url.rstrip("/")


def get_client(
    token: str | None = None,
    base_url: str | None = None,
) -> JobPlatformClient:
    """
    Create a JobPlatformClient.

    The token and base URL fall back to the `ACTOROPS_TOKEN`/`APIFY_TOKEN`
    and `ACTOROPS_BASE_URL` environment variables.

    Raises:
        InvalidCredential: If no usable token is available.
    """
    from actorops.core.adapters.platform import JobPlatformClient
    from actorops.core.config import ClientSettings

    credential = Credential.parse(token if token is not None else token_from_env())
    return JobPlatformClient(
        credential,
        base_url=base_url or base_url_from_env(),
        settings=ClientSettings.from_env(),
    )
