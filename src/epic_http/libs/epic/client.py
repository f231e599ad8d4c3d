"""Authenticated HTTP client for Epic services.

Every request gets the installed Fortnite build's user agent unless the caller
set one. Requests to the protected domain additionally go through credential
handling: when Epic rejects the bearer token as invalid or expired, the token's
account is looked up, its cached credential dropped, a new token minted, and
the request replayed once with the new token. Error responses carrying an Epic
error payload are raised as :class:`EpicAPIError`.
"""

import asyncio
import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Final

import httpx
import tenacity
from pydantic import JsonValue, ValidationError
from typing_extensions import Self

from epic_http.config import Settings, get_settings
from epic_http.libs.epic.credentials import CredentialStore
from epic_http.libs.epic.exceptions import EpicAPIError, EpicConfigError
from epic_http.libs.epic.models import RecognizedEpicError, classify_error_response
from epic_http.libs.manifest import ManifestResolver
from epic_http.logging_security import BEARER_PREFIX, mask_authorization
from epic_http.user_agent import USER_AGENT_HEADER, UserAgentProvider

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER: Final = "Authorization"

# One initial attempt plus one replay after refreshing the credential.
MAX_ATTEMPTS: Final = 2


def is_protected_url(url: httpx.URL | str, protected_domain: str) -> bool:
    """Return True if ``url``'s host is ``protected_domain`` or one of its subdomains."""
    host = httpx.URL(url).host.lower()
    return host == protected_domain or host.endswith(f".{protected_domain}")


def extract_bearer_token(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return ""
    return authorization[len(BEARER_PREFIX) :].strip()


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as exc:
        raise EpicConfigError(
            "Invalid epic-http configuration",
            details="; ".join(
                f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
                for error in exc.errors()
            ),
        ) from exc


class CredentialRejectedError(Exception):
    """A protected request was rejected because its bearer token is invalid.

    Raised between attempts to drive the refresh-and-replay; callers only ever
    see the :class:`EpicAPIError` it is converted into.
    """

    def __init__(self, error: httpx.HTTPStatusError, classification: RecognizedEpicError) -> None:
        self.error = error
        self.classification = classification
        super().__init__(classification.payload.error_code)

    def to_api_error(self) -> EpicAPIError:
        return EpicAPIError(
            self.classification.payload, self.error.request, self.error.response.status_code
        )


@dataclass
class RetryContext:
    """Per-request state of the refresh-and-replay cycle."""

    original_headers: httpx.Headers
    attempts: int = 0
    rejection: CredentialRejectedError | None = None


class EpicHTTPClient:
    """HTTP client for Epic services with credential refresh on token rejection.

    Use as an async context manager, or call :meth:`close` when done.

    Example:
        async with EpicHTTPClient(credential_store=store) as client:
            response = await client.get(
                account_url,
                bearer_token=token,
            )
    """

    def __init__(
        self,
        credential_store: CredentialStore | None = None,
        settings: Settings | None = None,
        *,
        resolver: ManifestResolver | None = None,
        user_agent_provider: UserAgentProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            credential_store: Store used to recover from rejected tokens. Without
                one, rejected tokens are never refreshed.
            settings: Application settings, defaults to ``get_settings()``.
            resolver: Manifest resolver for the user agent, built from settings
                if omitted.
            user_agent_provider: Pre-built user agent provider, takes precedence
                over ``resolver``.
            transport: Optional httpx transport, mainly for tests.

        Raises:
            EpicConfigError: If ``settings`` is omitted and the environment holds
                an invalid configuration.
        """
        config = settings if settings is not None else _load_settings()

        self.credential_store = credential_store
        self.protected_domain = config.protected_domain
        self.http_timeout = config.http_timeout

        if user_agent_provider is None:
            user_agent_provider = UserAgentProvider(
                resolver if resolver is not None else ManifestResolver.from_settings(config)
            )
        self.user_agent = user_agent_provider

        self.retry_policy = tenacity.AsyncRetrying(
            retry=tenacity.retry_if_exception_type(CredentialRejectedError),
            stop=tenacity.stop_after_attempt(MAX_ATTEMPTS),
            reraise=True,
        )

        self.http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.http_timeout),
            follow_redirects=True,
            transport=transport,
        )
        # Only the resolved game user agent, or the caller's own, is ever sent
        self.http_client.headers.pop(USER_AGENT_HEADER, None)

    async def request(
        self,
        method: str,
        url: httpx.URL | str,
        *,
        headers: httpx.Headers | dict[str, str] | None = None,
        params: httpx.QueryParams | dict[str, str] | None = None,
        json: JsonValue = None,
        content: bytes | str | None = None,
        bearer_token: str | None = None,
    ) -> httpx.Response:
        """Build and send a request.

        Args:
            method: HTTP method.
            url: Absolute URL.
            headers: Additional headers; a ``User-Agent`` here is kept as is.
            params: Query parameters.
            json: JSON payload.
            content: Raw request body.
            bearer_token: Access token sent as ``Authorization: Bearer <token>``.

        Returns:
            The successful response.

        Raises:
            EpicAPIError: If a protected request fails with an Epic error payload.
            httpx.HTTPStatusError: For other error responses.
            httpx.TransportError: If no response was obtained.
        """
        final_headers = httpx.Headers(headers)
        if bearer_token is not None:
            final_headers[AUTHORIZATION_HEADER] = f"{BEARER_PREFIX}{bearer_token}"

        request = self.http_client.build_request(
            method,
            url,
            headers=final_headers,
            params=params,
            json=json,
            content=content,
        )
        return await self.send(request)

    async def get(self, url: httpx.URL | str, **kwargs: object) -> httpx.Response:
        """Send a GET request. See :meth:`request` for arguments."""
        return await self.request("GET", url, **kwargs)  # type: ignore[arg-type]

    async def post(self, url: httpx.URL | str, **kwargs: object) -> httpx.Response:
        """Send a POST request. See :meth:`request` for arguments."""
        return await self.request("POST", url, **kwargs)  # type: ignore[arg-type]

    async def put(self, url: httpx.URL | str, **kwargs: object) -> httpx.Response:
        """Send a PUT request. See :meth:`request` for arguments."""
        return await self.request("PUT", url, **kwargs)  # type: ignore[arg-type]

    async def delete(self, url: httpx.URL | str, **kwargs: object) -> httpx.Response:
        """Send a DELETE request. See :meth:`request` for arguments."""
        return await self.request("DELETE", url, **kwargs)  # type: ignore[arg-type]

    async def get_json(self, url: httpx.URL | str, **kwargs: object) -> JsonValue:
        """Send a GET request and return the decoded JSON body."""
        response = await self.get(url, **kwargs)
        return response.json()  # type: ignore[no-any-return]

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send a prepared request through the user agent and credential handling.

        Raises:
            EpicAPIError: If a protected request fails with an Epic error payload.
            httpx.HTTPStatusError: For other error responses.
            httpx.TransportError: If no response was obtained.
        """
        if USER_AGENT_HEADER not in request.headers:
            request.headers[USER_AGENT_HEADER] = await self.user_agent.get()

        if not is_protected_url(request.url, self.protected_domain):
            response = await self.http_client.send(request)
            response.raise_for_status()
            return response

        return await self._send_protected(request)

    async def _send_protected(self, request: httpx.Request) -> httpx.Response:
        # Buffer the body so the replay sends identical bytes
        await request.aread()

        context = RetryContext(original_headers=httpx.Headers(request.headers))
        retrying = self.retry_policy.copy()

        try:
            async for attempt in retrying:
                with attempt:
                    context.attempts += 1
                    rejection = context.rejection
                    if rejection is not None:
                        request = await self._replace_credential(request, context, rejection)

                    try:
                        response = await self._send_once(request)
                    except CredentialRejectedError as exc:
                        context.rejection = exc
                        raise
        except CredentialRejectedError as exc:
            raise exc.to_api_error() from exc.error

        return response

    async def _send_once(self, request: httpx.Request) -> httpx.Response:
        logger.debug(
            "Sending request",
            extra={
                "method": request.method,
                "url": str(request.url),
                "authorization": mask_authorization(request.headers.get(AUTHORIZATION_HEADER)),
            },
        )
        response = await self.http_client.send(request)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            classification = classify_error_response(exc.response)
            if not isinstance(classification, RecognizedEpicError):
                logger.debug(
                    "Error response without Epic error payload",
                    extra={"status_code": response.status_code, "reason": classification.reason},
                )
                raise

            if classification.is_credential_error:
                raise CredentialRejectedError(exc, classification) from exc

            raise EpicAPIError(
                classification.payload, exc.request, exc.response.status_code
            ) from exc

        return response

    async def _replace_credential(
        self,
        request: httpx.Request,
        context: RetryContext,
        rejection: CredentialRejectedError,
    ) -> httpx.Request:
        """Swap the rejected bearer token for a fresh one and rebuild the request.

        Raises:
            CredentialRejectedError: The original rejection, if no account owns
                the rejected token.
        """
        store = self.credential_store
        token = extract_bearer_token(request.headers.get(AUTHORIZATION_HEADER))
        account = store.lookup_by_token(token) if store is not None and token else None

        if store is None or account is None:
            logger.warning(
                "Rejected token belongs to no known account, not retrying",
                extra={
                    "url": str(request.url),
                    "error_code": rejection.classification.payload.error_code,
                },
            )
            raise rejection

        logger.info(
            "Access token rejected, refreshing and retrying",
            extra={
                "account_id": account.account_id,
                "error_code": rejection.classification.payload.error_code,
                "attempt": context.attempts,
            },
        )
        store.invalidate(account.account_id)
        new_token = await store.refresh(account)

        headers = httpx.Headers(context.original_headers)
        headers[AUTHORIZATION_HEADER] = f"{BEARER_PREFIX}{new_token}"
        return httpx.Request(
            request.method,
            request.url,
            headers=headers,
            content=request.content,
            extensions=request.extensions,
        )

    async def __aenter__(self) -> Self:
        """Enter the context manager."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Exit the context manager and close the HTTP client."""
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client.

        Cleanup failures are logged rather than raised so they do not mask an
        error that is already propagating. Cancellation is always re-raised.
        """
        try:
            await self.http_client.aclose()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("Error during HTTP client cleanup", exc_info=exc)

    def is_closed(self) -> bool:
        """Return True if the HTTP client is closed."""
        return self.http_client.is_closed
