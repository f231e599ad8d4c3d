"""Filesystem access used to locate launcher manifest files."""

from pathlib import Path
from typing import Protocol


class ManifestFilesystem(Protocol):
    """Directory listing and file reading needed by the manifest resolver."""

    def list_entries(self, directory: str) -> list[str]:
        """Return the names of the entries in ``directory``."""
        ...

    def read_text(self, path: str) -> str:
        """Return the decoded text content of ``path``."""
        ...

    def join_path(self, *segments: str) -> str:
        """Join path segments into a single path."""
        ...


class LocalManifestFilesystem:
    """``pathlib`` implementation of :class:`ManifestFilesystem`."""

    def list_entries(self, directory: str) -> list[str]:
        return sorted(entry.name for entry in Path(directory).iterdir())

    def read_text(self, path: str) -> str:
        # The launcher writes some manifests with a UTF-8 BOM
        return Path(path).read_text(encoding="utf-8-sig")

    def join_path(self, *segments: str) -> str:
        return str(Path(*segments))
