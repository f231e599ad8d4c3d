"""Tests for optional Logfire initialization."""

import logging
from collections.abc import Generator
from unittest.mock import patch

import pytest

from epic_http import __version__, observability
from epic_http.config import LOGFIRE_TOKEN_ENV, Settings


@pytest.fixture(autouse=True)
def reset_logfire_state(clean_env: dict[str, str | None]) -> Generator[None, None, None]:
    """Start each test with Logfire uninitialized."""
    observability._logfire_initialized = False
    yield
    observability._logfire_initialized = False


def test_disabled_without_token(settings: Settings) -> None:
    """Without a token initialization should be skipped."""
    with patch("logfire.configure") as configure:
        assert observability.initialize_logfire(settings) is False

    configure.assert_not_called()


def test_configures_and_instruments_httpx(monkeypatch: pytest.MonkeyPatch) -> None:
    """A token should configure Logfire, instrument httpx and forward logging."""
    monkeypatch.setenv(LOGFIRE_TOKEN_ENV, "lf-token")
    handler = logging.NullHandler()

    with (
        patch("logfire.configure") as configure,
        patch("logfire.instrument_httpx") as instrument_httpx,
        patch("logfire.LogfireLoggingHandler", return_value=handler),
    ):
        try:
            assert observability.initialize_logfire() is True
            assert observability.initialize_logfire() is True
        finally:
            logging.getLogger().removeHandler(handler)

    configure.assert_called_once()
    kwargs = configure.call_args.kwargs
    assert kwargs["token"] == "lf-token"
    assert kwargs["service_name"] == "epic-http"
    assert kwargs["service_version"] == __version__
    assert kwargs["environment"] == "development"
    assert "access_token" in kwargs["scrubbing"].extra_patterns
    instrument_httpx.assert_called_once_with()


def test_configure_failure_is_logged(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    """A failing Logfire setup should disable tracing rather than raise."""
    monkeypatch.setenv(LOGFIRE_TOKEN_ENV, "lf-token")

    with patch("logfire.configure", side_effect=RuntimeError("bad token")):
        assert observability.initialize_logfire() is False

    assert not observability._logfire_initialized
    assert "Failed to initialize Logfire" in caplog.text
