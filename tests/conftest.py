from __future__ import annotations

import sys
from pathlib import Path

import httpx
import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from actorops.core.adapters.platform import JobPlatformClient  # noqa: E402

BASE_URL = "https://api.test/v2"


class FakeClock:
    """Monotonic clock that only advances when sleep() is called."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def time(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class Script:
    """MockTransport handler replaying responses in order (the last one repeats)."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def script():
    return Script


@pytest.fixture
def make_client(clock):
    """Build a JobPlatformClient whose HTTP calls go to a handler function."""
    http_clients: list[httpx.Client] = []

    def _make(handler, **kwargs) -> JobPlatformClient:
        http = httpx.Client(transport=httpx.MockTransport(handler), base_url=BASE_URL)
        http_clients.append(http)
        return JobPlatformClient(
            "test-token",
            base_url=BASE_URL,
            http_client=http,
            sleep=clock.sleep,
            clock=clock.time,
            **kwargs,
        )

    yield _make

    for http in http_clients:
        http.close()
