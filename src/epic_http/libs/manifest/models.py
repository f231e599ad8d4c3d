"""Data models for launcher manifests."""

from typing import Final

from pydantic import BaseModel, ConfigDict, Field

MANIFEST_EXTENSION: Final[str] = ".item"


class ManifestItem(BaseModel):
    """A ``.item`` file written by the Epic Games Launcher for an installed app.

    Only ``DisplayName`` is required; the launcher leaves the other fields out
    (or null) for partially installed or broken entries.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    display_name: str = Field(..., alias="DisplayName")
    app_version_string: str | None = Field(default=None, alias="AppVersionString")
    catalog_namespace: str | None = Field(default=None, alias="CatalogNamespace")
    launch_command: str | None = Field(default=None, alias="LaunchCommand")
    install_location: str | None = Field(default=None, alias="InstallLocation")
    launch_executable: str | None = Field(default=None, alias="LaunchExecutable")
    catalog_item_id: str | None = Field(default=None, alias="CatalogItemId")


class VersionManifest(BaseModel):
    """Version metadata of the installed application.

    ``user_agent`` is empty unless ``app_version_string`` is non-empty, in which
    case it is ``"<product>/<app_version_string>"``.
    """

    model_config = ConfigDict(frozen=True)

    app_version_string: str = ""
    namespace: str = ""
    launch_command: str = ""
    user_agent: str = ""
    install_location: str = ""
    launch_executable: str = ""
    executable_location: str = ""

    @classmethod
    def from_item(cls, item: ManifestItem, product_name: str) -> "VersionManifest":
        """Derive the version manifest from a matching launcher entry."""
        version = (item.app_version_string or "").strip()
        return cls(
            app_version_string=version,
            namespace=item.catalog_namespace or "",
            launch_command=(item.launch_command or "").strip(),
            user_agent=f"{product_name}/{version}" if version else "",
            install_location=item.install_location or "",
            launch_executable=item.launch_executable or "",
            executable_location=item.launch_executable or "",
        )
