"""Exceptions for requests to Epic services."""

from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from epic_http.libs.epic.models import EpicErrorPayload


class EpicError(Exception):
    """Base exception for all epic-http errors."""

    def __init__(self, message: str, details: str | None = None) -> None:
        """Initialize the exception.

        Args:
            message: The main error message.
            details: Optional additional details about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        """Return a string representation of the error."""
        if self.details:
            return f"{self.message}. Details: {self.details}"
        return self.message


class EpicConfigError(EpicError):
    """Configuration-related errors."""

    pass


class EpicClientError(EpicError):
    """Errors raised while talking to Epic services."""

    def __init__(
        self, message: str, status_code: int | None = None, details: str | None = None
    ) -> None:
        """Initialize the client error.

        Args:
            message: The main error message.
            status_code: HTTP status code if applicable.
            details: Optional additional details about the error.
        """
        self.status_code = status_code
        super().__init__(message, details)

    def __str__(self) -> str:
        """Return a string representation of the error."""
        base_message = self.message
        if self.status_code:
            base_message = f"{base_message} (HTTP {self.status_code})"
        if self.details:
            base_message = f"{base_message}. Details: {self.details}"
        return base_message


class EpicAPIError(EpicClientError):
    """An Epic service answered with a structured error payload.

    Attributes:
        payload: The parsed error body.
        error_code: Epic error code, e.g. ``errors.com.epicgames.common.oauth.invalid_token``.
        error_message: Human readable message from the payload, if any.
        request: The request that triggered the error.
    """

    def __init__(
        self, payload: "EpicErrorPayload", request: httpx.Request, status_code: int
    ) -> None:
        """Initialize the API error.

        Args:
            payload: The parsed error body.
            request: The request that triggered the error.
            status_code: HTTP status code of the error response.
        """
        self.payload = payload
        self.error_code = payload.error_code
        self.error_message = payload.error_message
        self.request = request
        super().__init__(
            payload.error_message or payload.error_code,
            status_code=status_code,
            details=payload.error_code if payload.error_message else None,
        )


class CredentialRefreshError(EpicClientError):
    """A forced credential refresh did not produce a usable access token."""

    pass
