"""Tests for the secret-redacting log filter."""

import logging
from collections.abc import Generator
from io import StringIO

import pytest

from epic_http import logging_security
from epic_http.logging_security import (
    REDACTED,
    SecretFilter,
    install_filter,
    mask_authorization,
    register_secret,
)


def make_record(msg: str, args: tuple[object, ...] | dict[str, object] = ()) -> logging.LogRecord:
    """Build a log record with the given message and args."""
    return logging.LogRecord(
        name="epic_http.test",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=args,
        exc_info=None,
    )


@pytest.fixture
def reset_filter() -> Generator[None, None, None]:
    """Uninstall the global filter and drop queued secrets around a test."""

    def _reset() -> None:
        logging_security._filter = None
        logging_security._pending_secrets.clear()
        root_logger = logging.getLogger()
        root_logger.filters = [f for f in root_logger.filters if not isinstance(f, SecretFilter)]

    _reset()
    yield
    _reset()


@pytest.fixture
def log_stream(reset_filter: None) -> Generator[StringIO, None, None]:
    """Capture root logger output as plain messages."""
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger = logging.getLogger()
    original_level = root_logger.level
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)

    yield stream

    root_logger.removeHandler(handler)
    root_logger.setLevel(original_level)


class TestSecretFilter:
    """Tests for SecretFilter."""

    def test_empty_secret_ignored(self) -> None:
        """Test that an empty string never becomes a redaction target."""
        secret_filter = SecretFilter()
        secret_filter.register_secret("")

        assert secret_filter.redact("nothing to hide") == "nothing to hide"

    def test_redacts_message(self) -> None:
        """Test that registered tokens are removed from the message."""
        secret_filter = SecretFilter()
        secret_filter.register_secret("eg1~abc")
        record = make_record("Bearer eg1~abc rejected, eg1~abc again")

        assert secret_filter.filter(record) is True
        assert record.msg == f"Bearer {REDACTED} rejected, {REDACTED} again"

    def test_redacts_tuple_and_dict_args(self) -> None:
        """Test that string arguments are redacted and other types kept."""
        secret_filter = SecretFilter()
        secret_filter.register_secret("eg1~abc")

        record = make_record("%s %d", ("token eg1~abc", 3))
        secret_filter.filter(record)
        assert record.args == (f"token {REDACTED}", 3)

        record = make_record("%(token)s", {"token": "eg1~abc", "attempt": 2})
        secret_filter.filter(record)
        assert record.args == {"token": REDACTED, "attempt": 2}

    def test_redacts_exception_text(self) -> None:
        """Test that cached traceback text is redacted."""
        secret_filter = SecretFilter()
        secret_filter.register_secret("eg1~abc")
        record = make_record("failed")
        record.exc_text = "RuntimeError: refresh failed for eg1~abc"

        secret_filter.filter(record)

        assert record.exc_text == f"RuntimeError: refresh failed for {REDACTED}"

    def test_longest_secret_wins(self) -> None:
        """Test that a token containing another token is masked as a whole."""
        secret_filter = SecretFilter()
        secret_filter.register_secret("eg1~abc")
        secret_filter.register_secret("eg1~abcdef")

        assert secret_filter.redact("eg1~abcdef") == REDACTED

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Authorization: Bearer eg1~unseen", f"Authorization: Bearer {REDACTED}"),
            ("{'authorization': 'Bearer eg1~unseen'}", f"{{'authorization': 'Bearer {REDACTED}'}}"),
            ("Authorization: Bearer ...abcd", "Authorization: Bearer ...abcd"),
        ],
    )
    def test_bearer_values_redacted_without_registration(self, text: str, expected: str) -> None:
        """Test that bearer values are masked even if never registered."""
        assert SecretFilter().redact(text) == expected


class TestInstallFilter:
    """Tests for global filter installation and secret registration."""

    def test_install_is_idempotent(self, reset_filter: None) -> None:
        """Test that the filter is attached to the root logger only once."""
        first = install_filter()
        second = install_filter()

        assert first is second
        root_filters = [f for f in logging.getLogger().filters if isinstance(f, SecretFilter)]
        assert root_filters == [first]

    def test_secrets_registered_before_install_are_applied(self, reset_filter: None) -> None:
        """Test that queued secrets are handed to the filter on installation."""
        register_secret("eg1~queued")
        register_secret("")

        assert logging_security._pending_secrets == ["eg1~queued"]

        secret_filter = install_filter()

        assert logging_security._pending_secrets == []
        assert secret_filter.redact("eg1~queued") == REDACTED

    def test_refreshed_token_is_redacted_in_output(self, log_stream: StringIO) -> None:
        """Test that a token registered after installation is masked in formatted output."""
        install_filter()
        register_secret("eg1~fresh-token")

        logging.getLogger("epic_http.libs.epic").info("Retrying with %s", "eg1~fresh-token")

        assert log_stream.getvalue().strip() == f"Retrying with {REDACTED}"

    def test_traceback_from_child_logger_is_redacted(self, log_stream: StringIO) -> None:
        """Test that rendered tracebacks are masked for propagated records."""
        install_filter()
        register_secret("eg1~leaked")

        try:
            raise RuntimeError("refresh failed for eg1~leaked")
        except RuntimeError:
            logging.getLogger("epic_http.libs.epic.credentials").exception("Refresh failed")

        output = log_stream.getvalue()
        assert "eg1~leaked" not in output
        assert f"RuntimeError: refresh failed for {REDACTED}" in output

    def test_unregistered_values_are_kept(self, log_stream: StringIO) -> None:
        """Test that only registered values are masked."""
        install_filter()

        logging.getLogger("epic_http").info("account acc-1")

        assert "account acc-1" in log_stream.getvalue()


class TestMaskAuthorization:
    """Tests for mask_authorization."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("Bearer eg1~0123456789abcd", "Bearer ...abcd"),
            ("Bearer short", "Bearer ..."),
            ("basic dXNlcjpwYXNz", REDACTED),
            ("", ""),
            (None, None),
        ],
    )
    def test_mask(self, value: str | None, expected: str | None) -> None:
        """Test that only the scheme and the token's tail survive."""
        assert mask_authorization(value) == expected
