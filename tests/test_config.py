from actorops.core.config import (
    POLL_MAX_WAIT_SECONDS,
    RESULT_ATTEMPTS,
    ClientSettings,
    token_from_env,
)


def test_settings_defaults():
    settings = ClientSettings()

    assert settings.jobs_page_size == 100
    assert settings.builds_limit == 10
    assert settings.poll_interval == 2.0
    assert settings.poll_max_wait == 300.0
    assert settings.result_attempts == 5
    assert settings.max_attempts == 3


def test_settings_from_env_overrides_and_fallbacks(monkeypatch):
    monkeypatch.setenv("ACTOROPS_POLL_MAX_WAIT", "60")
    monkeypatch.setenv("ACTOROPS_RESULT_ATTEMPTS", "not-a-number")
    monkeypatch.setenv("ACTOROPS_MAX_ATTEMPTS", "0")

    settings = ClientSettings.from_env()

    assert settings.poll_max_wait == 60.0
    assert settings.result_attempts == RESULT_ATTEMPTS
    assert settings.max_attempts == 1
    assert POLL_MAX_WAIT_SECONDS == 300.0


def test_token_from_env_prefers_actorops_token(monkeypatch):
    monkeypatch.setenv("ACTOROPS_TOKEN", "first")
    monkeypatch.setenv("APIFY_TOKEN", "second")

    assert token_from_env() == "first"
