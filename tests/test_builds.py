import json

import httpx
import pytest

from actorops.core.adapters.platform import select_build_tag
from actorops.core.errors import (
    AuthenticationFailed,
    BuildUnavailable,
    ExecutionFailed,
    FetchFailed,
)
from actorops.core.jobs import Build, BuildStatus, RunStatus


def _build(status: BuildStatus, tag: str | None, number: str) -> Build:
    return Build(id=f"b{number}", status=status, build_number=number, tag=tag)


def _builds_page(*items):
    return httpx.Response(200, json={"data": {"items": list(items)}})


def _run_payload(run_id: str = "r1", status: str = "RUNNING"):
    return {
        "data": {
            "id": run_id,
            "actId": "a1",
            "status": status,
            "startedAt": "2024-05-01T10:00:00.000Z",
            "stats": {"itemsCount": 0, "requestsCount": 0},
            "defaultDatasetId": "d1",
        }
    }


def test_select_build_tag_prefers_most_recent_successful_tag():
    builds = [
        _build(BuildStatus.FAILED, "a", "3"),
        _build(BuildStatus.SUCCEEDED, "b", "2"),
        _build(BuildStatus.SUCCEEDED, None, "1"),
    ]

    assert select_build_tag(builds) == "b"


def test_select_build_tag_falls_back_to_build_number():
    builds = [
        _build(BuildStatus.RUNNING, None, "4"),
        _build(BuildStatus.SUCCEEDED, None, "0.0.3"),
    ]

    assert select_build_tag(builds) == "0.0.3"


def test_select_build_tag_without_builds_is_latest():
    assert select_build_tag([]) == "latest"


def test_select_build_tag_without_successful_build_is_latest():
    builds = [
        _build(BuildStatus.FAILED, "a", "2"),
        _build(BuildStatus.ABORTED, "b", "1"),
    ]

    assert select_build_tag(builds) == "latest"


def test_list_builds_parses_payload(make_client, script):
    handler = script(
        _builds_page(
            {"id": "b2", "status": "SUCCEEDED", "buildNumber": "0.0.2", "tag": "beta"},
            {"id": "b1", "status": "weird", "buildNumber": "0.0.1"},
        )
    )
    client = make_client(handler)

    builds = client.list_builds("a1")

    assert builds == [
        Build(id="b2", status=BuildStatus.SUCCEEDED, build_number="0.0.2", tag="beta"),
        Build(id="b1", status=BuildStatus.UNKNOWN, build_number="0.0.1", tag=None),
    ]
    request = handler.requests[0]
    assert request.url.path == "/v2/acts/a1/builds"
    assert request.url.params["desc"] == "1"
    assert request.url.params["limit"] == "10"


def test_list_builds_swallows_errors(make_client, script):
    client = make_client(script(httpx.Response(404, text="nope")))

    assert client.list_builds("a1") == []


def test_fetch_builds_keeps_the_error(make_client, script):
    client = make_client(script(httpx.Response(401)))

    result = client.fetch_builds("a1")

    assert result.builds == []
    assert isinstance(result.error, AuthenticationFailed)


def test_resolve_build_tag_is_latest_when_listing_fails(make_client, script):
    client = make_client(script(httpx.Response(403)))

    assert client.resolve_build_tag("a1") == "latest"


def test_execute_posts_input_with_resolved_tag(make_client):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path.endswith("/builds"):
            return _builds_page({"id": "b1", "status": "SUCCEEDED", "buildNumber": "1.2.3"})
        return httpx.Response(201, json=_run_payload())

    client = make_client(handler)

    run = client.execute("a1", {"url": "https://example.com", "maxItems": 3})

    post = seen[-1]
    assert post.method == "POST"
    assert post.url.path == "/v2/acts/a1/runs"
    assert post.url.params["build"] == "1.2.3"
    assert json.loads(post.content) == {"url": "https://example.com", "maxItems": 3}
    assert run.id == "r1"
    assert run.status == RunStatus.RUNNING
    assert run.dataset_id == "d1"


def test_execute_quotes_job_ids(make_client):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path.endswith("/builds"):
            return _builds_page()
        return httpx.Response(201, json=_run_payload())

    client = make_client(handler)
    client.execute("john~my scraper", {})

    assert seen[-1].url.raw_path.startswith(b"/v2/acts/john~my%20scraper/runs")
    assert seen[-1].url.params["build"] == "latest"


def test_execute_reports_missing_build(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/builds"):
            return _builds_page()
        return httpx.Response(
            404,
            json={"error": {"message": "Build with tag \"latest\" was not found"}},
        )

    client = make_client(handler)

    with pytest.raises(BuildUnavailable) as excinfo:
        client.execute("a1", {})

    assert "was not found" in excinfo.value.original_message
    assert isinstance(excinfo.value, ExecutionFailed)
    assert excinfo.value.cause is not None


def test_execute_wraps_other_failures(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/builds"):
            return _builds_page()
        return httpx.Response(400, json={"error": {"message": "Input is not valid"}})

    client = make_client(handler)

    with pytest.raises(ExecutionFailed) as excinfo:
        client.execute("a1", {})

    assert not isinstance(excinfo.value, BuildUnavailable)
    assert "Input is not valid" in str(excinfo.value)
    assert excinfo.value.cause.status == 400


def test_malformed_builds_page_counts_as_no_builds(make_client, script):
    client = make_client(script(_builds_page("oops")))

    result = client.fetch_builds("a1")

    assert result.builds == []
    assert isinstance(result.error, FetchFailed)
    assert client.list_builds("a1") == []


def test_execute_falls_back_to_latest_on_malformed_builds(make_client):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path.endswith("/builds"):
            return _builds_page(None, 42)
        return httpx.Response(201, json=_run_payload())

    client = make_client(handler)

    assert client.execute("a1", {}).id == "r1"
    assert seen[-1].url.params["build"] == "latest"


@pytest.mark.parametrize("data", [None, [], {"status": "READY"}])
def test_execute_wraps_malformed_run_payload(make_client, data):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/builds"):
            return _builds_page()
        return httpx.Response(201, json={"data": data})

    client = make_client(handler)

    with pytest.raises(ExecutionFailed) as excinfo:
        client.execute("a1", {})

    assert not isinstance(excinfo.value, BuildUnavailable)
    assert isinstance(excinfo.value.cause, FetchFailed)
