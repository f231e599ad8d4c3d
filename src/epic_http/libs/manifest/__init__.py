"""Launcher manifest lookup.

Resolves the installed Fortnite version from the Epic Games Launcher's ``.item``
manifest files and derives the user agent the game client sends.

Basic Usage:
    from epic_http.libs.manifest import ManifestResolver

    resolver = ManifestResolver()
    user_agent = resolver.resolve_user_agent()
"""

from epic_http.libs.manifest.exceptions import ManifestError, ManifestParseError
from epic_http.libs.manifest.filesystem import LocalManifestFilesystem, ManifestFilesystem
from epic_http.libs.manifest.models import ManifestItem, VersionManifest
from epic_http.libs.manifest.resolver import ManifestResolver

__all__ = [
    "LocalManifestFilesystem",
    "ManifestError",
    "ManifestFilesystem",
    "ManifestItem",
    "ManifestParseError",
    "ManifestResolver",
    "VersionManifest",
]
