"""User-Agent handling for requests to Epic services.

Epic's services expect requests to come from the game client, so outbound
requests carry the installed Fortnite build's user agent. Resolving it means a
filesystem scan; the provider below performs it once per client, off the event
loop, and hands out the cached value afterwards.
"""

import asyncio
import logging

from epic_http.libs.manifest import ManifestResolver

logger = logging.getLogger(__name__)

USER_AGENT_HEADER = "User-Agent"


class UserAgentProvider:
    """Lazily resolved user agent, initialized at most once."""

    def __init__(self, resolver: ManifestResolver) -> None:
        self.resolver = resolver
        self._user_agent: str | None = None
        self._lock = asyncio.Lock()

    @property
    def resolved(self) -> bool:
        """Whether the user agent has been resolved yet."""
        return self._user_agent is not None

    async def get(self) -> str:
        """Return the user agent, resolving it on first use.

        Concurrent first calls wait for a single resolution instead of each
        scanning the manifest directory.
        """
        if self._user_agent is None:
            async with self._lock:
                if self._user_agent is None:
                    user_agent = await asyncio.to_thread(self.resolver.resolve_user_agent)
                    logger.debug("Resolved User-Agent", extra={"user_agent": user_agent})
                    self._user_agent = user_agent
        return self._user_agent
