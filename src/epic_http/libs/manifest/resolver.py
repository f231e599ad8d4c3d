"""Resolution of the installed Fortnite version from launcher manifests.

The Epic Games Launcher keeps one JSON ``.item`` file per installed app in a
fixed directory on Windows. The resolver scans that directory once, picks the
first entry whose display name matches the product, and derives the user agent
the game client itself would send. The outcome, including "nothing found", is
kept for the lifetime of the resolver, so a changed install is only picked up
after a restart (or an explicit ``clear_cache()``).
"""

import logging
import sys
import threading

from epic_http.config import (
    DEFAULT_FALLBACK_USER_AGENT,
    DEFAULT_MANIFESTS_DIRECTORY,
    DEFAULT_PRODUCT_NAME,
    Settings,
)
from epic_http.libs.manifest.exceptions import ManifestParseError
from epic_http.libs.manifest.filesystem import LocalManifestFilesystem, ManifestFilesystem
from epic_http.libs.manifest.models import MANIFEST_EXTENSION, ManifestItem, VersionManifest

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORM = "win32"


class ManifestResolver:
    """Read-through cache over the launcher's manifest directory."""

    def __init__(
        self,
        manifests_directory: str = DEFAULT_MANIFESTS_DIRECTORY,
        product_name: str = DEFAULT_PRODUCT_NAME,
        fallback_user_agent: str = DEFAULT_FALLBACK_USER_AGENT,
        filesystem: ManifestFilesystem | None = None,
        platform: str | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            manifests_directory: Directory holding the ``.item`` files.
            product_name: Display name to match, compared case-insensitively.
            fallback_user_agent: User agent returned when resolution fails.
            filesystem: Filesystem collaborator, defaults to the local disk.
            platform: Platform identifier, defaults to ``sys.platform``.
        """
        self.manifests_directory = manifests_directory
        self.product_name = product_name
        self.fallback_user_agent = fallback_user_agent
        self.filesystem = filesystem if filesystem is not None else LocalManifestFilesystem()
        self.platform = platform if platform is not None else sys.platform

        self._lock = threading.Lock()
        self._resolved = False
        self._manifest: VersionManifest | None = None

    @classmethod
    def from_settings(
        cls, settings: Settings, filesystem: ManifestFilesystem | None = None
    ) -> "ManifestResolver":
        """Create a resolver from application settings."""
        return cls(
            manifests_directory=settings.manifests_directory,
            product_name=settings.product_name,
            fallback_user_agent=settings.fallback_user_agent,
            filesystem=filesystem,
        )

    def resolve_manifest(self) -> VersionManifest | None:
        """Return the installed product's version manifest.

        Returns:
            The manifest of the first matching entry, or None when the platform
            is unsupported or no entry matches. Both outcomes are cached.

        Raises:
            OSError: If the manifests directory itself cannot be listed. This
                outcome is not cached.
        """
        if self.platform != SUPPORTED_PLATFORM:
            logger.debug(
                "Manifest lookup skipped on unsupported platform",
                extra={"platform": self.platform},
            )
            return None

        with self._lock:
            if self._resolved:
                return self._manifest

            manifest = self._scan()
            self._manifest = manifest
            self._resolved = True
            return manifest

    def resolve_user_agent(self) -> str:
        """Return the user agent of the installed product, or the fallback."""
        try:
            manifest = self.resolve_manifest()
        except Exception:
            logger.warning(
                "Could not resolve manifest, using fallback user agent",
                extra={"manifests_directory": self.manifests_directory},
                exc_info=True,
            )
            return self.fallback_user_agent

        if manifest is None or not manifest.user_agent:
            logger.debug("No installed version found, using fallback user agent")
            return self.fallback_user_agent

        return manifest.user_agent

    def clear_cache(self) -> None:
        """Forget the cached outcome so the next call scans again."""
        with self._lock:
            self._resolved = False
            self._manifest = None

    def _scan(self) -> VersionManifest | None:
        wanted = self.product_name.casefold()

        for name in self.filesystem.list_entries(self.manifests_directory):
            if not name.endswith(MANIFEST_EXTENSION):
                continue

            try:
                item = self._read_entry(name)
            except ManifestParseError as exc:
                logger.warning(
                    "Skipping unreadable manifest entry", extra={"entry": name}, exc_info=exc
                )
                continue

            if item.display_name.casefold() == wanted:
                manifest = VersionManifest.from_item(item, self.product_name)
                logger.info(
                    "Resolved installed version",
                    extra={"entry": name, "version": manifest.app_version_string},
                )
                return manifest

        logger.info(
            "No manifest entry matched",
            extra={
                "manifests_directory": self.manifests_directory,
                "product_name": self.product_name,
            },
        )
        return None

    def _read_entry(self, name: str) -> ManifestItem:
        path = self.filesystem.join_path(self.manifests_directory, name)
        try:
            return ManifestItem.model_validate_json(self.filesystem.read_text(path))
        except (OSError, ValueError) as exc:
            raise ManifestParseError(path, str(exc)) from exc
