"""Data models for Epic accounts, credentials and error payloads."""

from collections.abc import MutableMapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Final, TypeAlias

import httpx
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    JsonValue,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)

# Error codes Epic returns when the bearer token is expired or revoked.
CREDENTIAL_ERROR_CODES: Final[frozenset[str]] = frozenset(
    {
        "errors.com.epicgames.common.authentication.token_verification_failed",
        "errors.com.epicgames.common.oauth.invalid_token",
    }
)


class Account(BaseModel):
    """An Epic account known to the local account store."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    account_id: str = Field(..., alias="accountId")
    display_name: str | None = Field(default=None, alias="displayName")


class AccessToken(BaseModel):
    """An access token record as returned by Epic's OAuth token endpoint."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    account_id: str | None = None
    expires_at: datetime | None = None


# account_id -> cached access token
AccessTokenCache: TypeAlias = MutableMapping[str, AccessToken]


class EpicErrorPayload(BaseModel):
    """The JSON body Epic services send with error responses.

    Only ``errorCode`` decides whether a body is an Epic error. The remaining
    fields are informational: a value of an unexpected type is replaced by the
    field default instead of rejecting the payload.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    error_code: str = Field(..., alias="errorCode")
    error_message: str | None = Field(default=None, alias="errorMessage")
    message_vars: list[JsonValue] = Field(default_factory=list, alias="messageVars")
    numeric_error_code: int | None = Field(default=None, alias="numericErrorCode")
    originating_service: str | None = Field(default=None, alias="originatingService")
    intent: str | None = None

    @field_validator(
        "error_message", "numeric_error_code", "originating_service", "intent", mode="wrap"
    )
    @classmethod
    def drop_malformed(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        """Replace an optional value of the wrong type with None."""
        try:
            return handler(value)
        except ValidationError:
            return None

    @field_validator("message_vars", mode="wrap")
    @classmethod
    def drop_malformed_vars(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        """Replace a non-list ``messageVars`` (null included) with an empty list."""
        try:
            return handler(value)
        except ValidationError:
            return []


@dataclass(frozen=True)
class RecognizedEpicError:
    """An error response whose body is a well-formed Epic error payload."""

    payload: EpicErrorPayload

    @property
    def is_credential_error(self) -> bool:
        """Whether the error means the bearer token is no longer valid."""
        return self.payload.error_code in CREDENTIAL_ERROR_CODES


@dataclass(frozen=True)
class UnrecognizedError:
    """An error response whose body could not be read as an Epic error payload."""

    reason: str


ErrorClassification: TypeAlias = RecognizedEpicError | UnrecognizedError


def classify_error_response(response: httpx.Response) -> ErrorClassification:
    """Parse an error response body into a tagged classification.

    Bodies that are not JSON, or JSON that does not carry an ``errorCode``
    string, are unrecognized.
    """
    try:
        data = response.json()
    except ValueError as exc:
        return UnrecognizedError(f"body is not JSON: {exc}")

    try:
        return RecognizedEpicError(EpicErrorPayload.model_validate(data))
    except ValidationError as exc:
        return UnrecognizedError(f"body is not an Epic error payload: {exc.error_count()} errors")
