"""Authenticated access to Epic Games services.

Main Components:
    - EpicHTTPClient: httpx client with user agent stamping, Epic error
      normalization and a single credential refresh on token rejection
    - InMemoryCredentialStore: CredentialStore over an account list and an
      access token cache, refreshing through a DeviceAuthRefresher
    - EpicAPIError: raised for error responses carrying an Epic error payload

Basic Usage:
    from epic_http.libs.epic import EpicHTTPClient, InMemoryCredentialStore

    store = InMemoryCredentialStore(accounts, token_cache, refresher)
    async with EpicHTTPClient(credential_store=store) as client:
        response = await client.get(url, bearer_token=token_cache[account_id].access_token)
"""

from epic_http.libs.epic.client import EpicHTTPClient, RetryContext, is_protected_url
from epic_http.libs.epic.credentials import (
    CredentialStore,
    DeviceAuthRefresher,
    InMemoryCredentialStore,
)
from epic_http.libs.epic.exceptions import (
    CredentialRefreshError,
    EpicAPIError,
    EpicClientError,
    EpicConfigError,
    EpicError,
)
from epic_http.libs.epic.models import (
    CREDENTIAL_ERROR_CODES,
    AccessToken,
    AccessTokenCache,
    Account,
    EpicErrorPayload,
    RecognizedEpicError,
    UnrecognizedError,
    classify_error_response,
)

__all__ = [
    "CREDENTIAL_ERROR_CODES",
    "AccessToken",
    "AccessTokenCache",
    "Account",
    "CredentialRefreshError",
    "CredentialStore",
    "DeviceAuthRefresher",
    "EpicAPIError",
    "EpicClientError",
    "EpicConfigError",
    "EpicError",
    "EpicErrorPayload",
    "EpicHTTPClient",
    "InMemoryCredentialStore",
    "RecognizedEpicError",
    "RetryContext",
    "UnrecognizedError",
    "classify_error_response",
    "is_protected_url",
]
