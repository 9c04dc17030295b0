import logging

import httpx
import pytest

from actorops.core.errors import AuthenticationFailed, FetchFailed, Forbidden
from actorops.core.transport import RetryPolicy, is_retryable_status


def _jobs_page(*items):
    return httpx.Response(200, json={"data": {"items": list(items)}})


def test_retryable_statuses():
    assert is_retryable_status(500)
    assert is_retryable_status(503)
    assert is_retryable_status(429)
    assert not is_retryable_status(404)
    assert not is_retryable_status(401)


def test_linear_backoff():
    policy = RetryPolicy(max_attempts=3, backoff_step=1.0)

    assert [policy.delay(n) for n in (1, 2, 3)] == [1.0, 2.0, 3.0]


def test_three_server_errors_fail_without_fourth_attempt(make_client, script, clock):
    handler = script(
        httpx.Response(503),
        httpx.Response(503),
        httpx.Response(503),
        _jobs_page(),
    )
    client = make_client(handler)

    with pytest.raises(FetchFailed) as excinfo:
        client.list_jobs()

    assert excinfo.value.status == 503
    assert len(handler.requests) == 3
    assert clock.sleeps == [1.0, 2.0]


def test_server_error_then_success_is_recovered(make_client, script, clock):
    handler = script(
        httpx.Response(500),
        httpx.Response(429),
        _jobs_page({"id": "a1", "name": "scraper"}),
    )
    client = make_client(handler)

    jobs = client.list_jobs()

    assert [j.id for j in jobs] == ["a1"]
    assert clock.sleeps == [1.0, 2.0]


def test_unauthorized_fails_immediately(make_client, script, clock):
    handler = script(httpx.Response(401, json={"error": {"message": "bad token"}}))
    client = make_client(handler)

    with pytest.raises(AuthenticationFailed) as excinfo:
        client.list_jobs()

    assert excinfo.value.status == 401
    assert len(handler.requests) == 1
    assert clock.sleeps == []


def test_forbidden_fails_immediately(make_client, script, clock):
    handler = script(httpx.Response(403))
    client = make_client(handler)

    with pytest.raises(Forbidden):
        client.list_jobs()

    assert len(handler.requests) == 1
    assert clock.sleeps == []


def test_client_error_uses_platform_message(make_client, script):
    handler = script(
        httpx.Response(404, json={"error": {"type": "record-not-found", "message": "Actor was not found"}})
    )
    client = make_client(handler)

    with pytest.raises(FetchFailed) as excinfo:
        client.get_job_schema("nope")

    assert excinfo.value.status == 404
    assert excinfo.value.message == "Actor was not found"


def test_client_error_falls_back_to_raw_text(make_client, script):
    handler = script(httpx.Response(400, text="plain failure"))
    client = make_client(handler)

    with pytest.raises(FetchFailed) as excinfo:
        client.list_jobs()

    assert excinfo.value.message == "plain failure"


def test_client_error_without_body_uses_status_message(make_client, script):
    handler = script(httpx.Response(418))
    client = make_client(handler)

    with pytest.raises(FetchFailed, match="status 418"):
        client.list_jobs()


def test_network_errors_are_retried(make_client, script, clock):
    handler = script(
        httpx.ConnectError("connection refused"),
        _jobs_page({"id": "a1", "name": "scraper"}),
    )
    client = make_client(handler)

    assert len(client.list_jobs()) == 1
    assert clock.sleeps == [1.0]


def test_network_errors_exhaust_attempts(make_client, script, clock):
    handler = script(httpx.ConnectError("connection refused"))
    client = make_client(handler)

    with pytest.raises(FetchFailed) as excinfo:
        client.list_jobs()

    assert excinfo.value.status is None
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
    assert len(handler.requests) == 3
    assert clock.sleeps == [1.0, 2.0]


def test_requests_carry_credential_and_client_headers(make_client, script):
    handler = script(_jobs_page())
    client = make_client(handler)

    client.list_jobs()

    request = handler.requests[0]
    assert request.headers["Authorization"] == "Bearer test-token"
    assert request.headers["User-Agent"].startswith("actor-ops/")
    assert request.url.path == "/v2/acts"
    assert request.url.params["my"] == "1"
    assert request.url.params["limit"] == "100"


def test_custom_policy_limits_attempts(make_client, script, clock):
    handler = script(httpx.Response(502))
    client = make_client(handler, policy=RetryPolicy(max_attempts=1))

    with pytest.raises(FetchFailed):
        client.list_jobs()

    assert len(handler.requests) == 1
    assert clock.sleeps == []


def test_non_json_success_body_fails(make_client, script):
    handler = script(httpx.Response(200, text="<html>"))
    client = make_client(handler)

    with pytest.raises(FetchFailed, match="non-JSON"):
        client.list_jobs()


def test_final_failures_are_not_logged_as_errors(make_client, script, caplog, monkeypatch):
    monkeypatch.setattr(logging.getLogger("actorops"), "propagate", True)
    client = make_client(script(httpx.Response(404, text="missing")))

    with caplog.at_level(logging.DEBUG, logger="actorops.core.transport"):
        with pytest.raises(FetchFailed):
            client.list_jobs()

    failures = [r for r in caplog.records if getattr(r, "event", None) == "platform.request.failed"]
    assert len(failures) == 1
    assert failures[0].levelno == logging.DEBUG
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]
