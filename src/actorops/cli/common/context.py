"""Application context management for the CLI."""

from dataclasses import dataclass

from actorops.cli.common.exits import die
from actorops.core.adapters.platform import JobPlatformClient
from actorops.core.auth import get_client
from actorops.core.errors import InvalidCredential


@dataclass
class JobsAppContext:
    """Application context holding the platform client for one invocation."""

    client: JobPlatformClient


def build_client(token: str | None, base_url: str | None) -> JobPlatformClient:
    """Create a platform client or exit when no usable token is configured."""
    try:
        return get_client(token, base_url)
    except InvalidCredential:
        die(
            "No valid API token. Pass --token or set ACTOROPS_TOKEN / APIFY_TOKEN.",
            code=2,
        )


def build_jobs_context(token: str | None, base_url: str | None) -> JobsAppContext:
    """Build and return the application context with a configured client.

    Args:
        token: Optional API token; falls back to the environment.
        base_url: Optional API base URL override.

    Returns:
        JobsAppContext: Application context with a configured client.
    """
    return JobsAppContext(client=build_client(token, base_url))
