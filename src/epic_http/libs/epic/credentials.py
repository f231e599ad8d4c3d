"""Credential lookup, invalidation and refresh for the Epic client.

The client never reaches into account or token storage directly. It talks to a
``CredentialStore``, which maps a rejected bearer token back to its account,
drops the stale cache entry and mints a replacement through the device-auth
flow.
"""

import logging
from collections.abc import Sequence
from typing import Protocol

from epic_http.libs.epic.exceptions import CredentialRefreshError
from epic_http.libs.epic.models import AccessToken, AccessTokenCache, Account
from epic_http.logging_security import register_secret

logger = logging.getLogger(__name__)


class DeviceAuthRefresher(Protocol):
    """The device-authentication flow that mints new access tokens."""

    async def force_refresh(self, account: Account) -> AccessToken:
        """Exchange the account's device auth for a new token, bypassing any cache."""
        ...


class CredentialStore(Protocol):
    """What the client needs from credential storage to recover from a rejected token."""

    def lookup_by_token(self, token: str) -> Account | None:
        """Return the account currently holding ``token``, if any."""
        ...

    def invalidate(self, account_id: str) -> None:
        """Drop the cached credential of ``account_id``."""
        ...

    async def refresh(self, account: Account) -> str:
        """Obtain a fresh access token for ``account``."""
        ...


class InMemoryCredentialStore:
    """Credential store over an account list and an access token cache.

    Both collections are owned by the caller and are used by reference, so
    changes made elsewhere (new logins, refreshes by other components) are seen
    by the next lookup.
    """

    def __init__(
        self,
        accounts: Sequence[Account],
        token_cache: AccessTokenCache,
        refresher: DeviceAuthRefresher,
    ) -> None:
        """Initialize the store.

        Args:
            accounts: Ordered accounts known to the application.
            token_cache: Mapping of account id to its cached access token.
            refresher: Device-auth flow used to mint replacement tokens.
        """
        self.accounts = accounts
        self.token_cache = token_cache
        self.refresher = refresher

        for cached in token_cache.values():
            register_secret(cached.access_token)

    def lookup_by_token(self, token: str) -> Account | None:
        if not token:
            return None

        account_id = next(
            (
                account_id
                for account_id, cached in self.token_cache.items()
                if cached.access_token == token
            ),
            None,
        )
        if account_id is None:
            return None

        return next(
            (account for account in self.accounts if account.account_id == account_id), None
        )

    def invalidate(self, account_id: str) -> None:
        if self.token_cache.pop(account_id, None) is not None:
            logger.debug("Invalidated cached access token", extra={"account_id": account_id})

    async def refresh(self, account: Account) -> str:
        """Force a device-auth refresh and cache the resulting token.

        Raises:
            CredentialRefreshError: If the refresher returned an empty token.
        """
        logger.info("Refreshing access token", extra={"account_id": account.account_id})
        token = await self.refresher.force_refresh(account)
        if not token.access_token:
            raise CredentialRefreshError(
                "Device auth refresh returned no access token",
                details=f"account {account.account_id}",
            )

        register_secret(token.access_token)
        self.token_cache[account.account_id] = token
        return token.access_token
