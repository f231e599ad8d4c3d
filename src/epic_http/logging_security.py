"""Keeps Epic bearer credentials out of log output.

Access tokens pass through the client on every protected request and are
rotated whenever a refresh happens. Each token the credential store sees is
registered here, and once :func:`install_filter` has run every occurrence of a
registered token, as well as anything following ``Bearer `` in a message, is
replaced with ``[REDACTED]``. Formatted messages and rendered tracebacks are
redacted too, so records from child loggers and third-party libraries (httpx
debug output included) are covered.

Usage:
    >>> from epic_http.logging_security import install_filter, register_secret
    >>> install_filter()
    >>> register_secret("eg1~abc")
    >>> logging.info("Sending with eg1~abc")  # Logs: Sending with [REDACTED]

Tokens registered before ``install_filter()`` is called are queued and applied
on installation.
"""

import logging
import re
import threading
from collections.abc import Callable
from typing import Final

REDACTED: Final[str] = "[REDACTED]"
BEARER_PREFIX: Final[str] = "Bearer "

_BEARER_VALUE = re.compile(r"(Bearer\s+)(?!\.\.\.)[^\s'\",;]+")


class SecretFilter(logging.Filter):
    """Redacts registered tokens and bearer values from log records.

    ``record.msg``, string entries of ``record.args`` and ``record.exc_text``
    are rewritten in place. Tokens may be registered from any thread while
    records are being filtered.
    """

    def __init__(self) -> None:
        super().__init__()
        self._secrets: set[str] = set()
        self._lock = threading.Lock()

    def register_secret(self, secret: str) -> None:
        """Register a value to redact. Empty strings are ignored."""
        if secret:
            with self._lock:
                self._secrets.add(secret)

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg:
            record.msg = self.redact(str(record.msg))

        if isinstance(record.args, dict):
            record.args = {key: self._redact_arg(value) for key, value in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(self._redact_arg(arg) for arg in record.args)

        if record.exc_text:
            record.exc_text = self.redact(record.exc_text)

        return True

    def redact(self, text: str) -> str:
        """Return ``text`` with registered tokens and bearer values replaced."""
        with self._lock:
            # Longest first so a token that contains another is fully masked
            secrets = sorted(self._secrets, key=len, reverse=True)

        for secret in secrets:
            text = text.replace(secret, REDACTED)
        return _BEARER_VALUE.sub(rf"\g<1>{REDACTED}", text)

    def _redact_arg(self, value: object) -> object:
        return self.redact(value) if isinstance(value, str) else value


_filter: SecretFilter | None = None
_pending_secrets: list[str] = []


def _redacting(original: Callable[..., str]) -> Callable[..., str]:
    """Wrap a logging method returning text so its result is redacted."""

    def wrapper(*args: object) -> str:
        text = original(*args)
        return _filter.redact(text) if _filter is not None else text

    return wrapper


def install_filter() -> SecretFilter:
    """Install the secret filter on the root logger (idempotent).

    ``LogRecord.getMessage`` and ``Formatter.formatException`` are wrapped as
    well: logger filters do not run for records propagated from child
    loggers, and arguments are only interpolated after filtering.

    Returns:
        The installed SecretFilter instance.
    """
    global _filter
    if _filter is not None:
        return _filter

    _filter = SecretFilter()
    logging.getLogger().addFilter(_filter)
    logging.LogRecord.getMessage = _redacting(  # type: ignore[method-assign]
        logging.LogRecord.getMessage
    )
    logging.Formatter.formatException = _redacting(  # type: ignore[method-assign]
        logging.Formatter.formatException
    )

    for secret in _pending_secrets:
        _filter.register_secret(secret)
    _pending_secrets.clear()

    return _filter


def register_secret(secret: str) -> None:
    """Register a token for redaction, queuing it until the filter is installed."""
    if not secret:
        return
    if _filter is not None:
        _filter.register_secret(secret)
    else:
        _pending_secrets.append(secret)


def mask_authorization(value: str | None) -> str | None:
    """Return an Authorization header value that is safe to log.

    Bearer tokens keep their scheme and their last four characters so that
    consecutive attempts can be told apart in debug output.
    """
    if not value:
        return value
    if value.startswith(BEARER_PREFIX):
        token = value[len(BEARER_PREFIX) :]
        tail = token[-4:] if len(token) > 8 else ""
        return f"{BEARER_PREFIX}...{tail}"
    return REDACTED
