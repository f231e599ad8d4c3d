"""Application configuration management using Pydantic Settings.

Settings are loaded from ``EPICHTTP_``-prefixed environment variables and
validated once. Every value has a working default, so a bare environment yields
a client that talks to ``*.epicgames.com`` and reads the launcher manifests from
their standard Windows location.
"""

import logging
from functools import lru_cache
from typing import ClassVar, Final

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Environment variable prefix constants
ENV_PREFIX_NAME: Final[str] = "EPICHTTP"
ENV_PREFIX_DELIMITER: Final[str] = "_"
ENV_PREFIX: Final[str] = f"{ENV_PREFIX_NAME}{ENV_PREFIX_DELIMITER}"

PROTECTED_DOMAIN_ENV: Final[str] = f"{ENV_PREFIX}PROTECTED_DOMAIN"
HTTP_TIMEOUT_ENV: Final[str] = f"{ENV_PREFIX}HTTP_TIMEOUT"
MANIFESTS_DIRECTORY_ENV: Final[str] = f"{ENV_PREFIX}MANIFESTS_DIRECTORY"
PRODUCT_NAME_ENV: Final[str] = f"{ENV_PREFIX}PRODUCT_NAME"
FALLBACK_USER_AGENT_ENV: Final[str] = f"{ENV_PREFIX}FALLBACK_USER_AGENT"
ENVIRONMENT_ENV: Final[str] = f"{ENV_PREFIX}ENV"
LOGFIRE_TOKEN_ENV: Final[str] = f"{ENV_PREFIX}LOGFIRE_TOKEN"

DEFAULT_PROTECTED_DOMAIN: Final[str] = "epicgames.com"
DEFAULT_HTTP_TIMEOUT: Final[float] = 30.0
DEFAULT_MANIFESTS_DIRECTORY: Final[str] = "C:/ProgramData/Epic/EpicGamesLauncher/Data/Manifests"
DEFAULT_PRODUCT_NAME: Final[str] = "Fortnite"
# Known-good client version used whenever the installed one cannot be determined.
DEFAULT_FALLBACK_USER_AGENT: Final[str] = "Fortnite/++Fortnite+Release-38.10-CL-47888945-Windows"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
    )

    protected_domain: str = Field(
        default=DEFAULT_PROTECTED_DOMAIN,
        description="Root domain whose hosts receive credential handling",
        validation_alias=PROTECTED_DOMAIN_ENV,
    )

    http_timeout: float = Field(
        default=DEFAULT_HTTP_TIMEOUT,
        description="Per-request timeout ceiling in seconds",
        gt=0,
        le=300,
        validation_alias=HTTP_TIMEOUT_ENV,
    )

    manifests_directory: str = Field(
        default=DEFAULT_MANIFESTS_DIRECTORY,
        description="Directory holding the launcher's .item manifest files",
        validation_alias=MANIFESTS_DIRECTORY_ENV,
    )

    product_name: str = Field(
        default=DEFAULT_PRODUCT_NAME,
        description="Display name of the installed application to impersonate",
        validation_alias=PRODUCT_NAME_ENV,
    )

    fallback_user_agent: str = Field(
        default=DEFAULT_FALLBACK_USER_AGENT,
        description="User agent sent when no installed version can be resolved",
        validation_alias=FALLBACK_USER_AGENT_ENV,
    )

    environment: str = Field(
        default="development",
        description="Environment name (e.g., 'development', 'production')",
        validation_alias=ENVIRONMENT_ENV,
    )

    logfire_token: str | None = Field(
        default=None,
        description="Optional Pydantic Logfire token for observability",
        validation_alias=LOGFIRE_TOKEN_ENV,
    )

    @field_validator("protected_domain")
    @classmethod
    def validate_protected_domain(cls, v: str) -> str:
        """Normalize the protected domain to a bare lower-case host suffix."""
        v = v.strip().lower().lstrip(".")
        if not v:
            raise ValueError("Protected domain must not be empty")
        if "://" in v:
            raise ValueError("Protected domain must not include a scheme")
        if "/" in v or "?" in v or "#" in v:
            raise ValueError("Protected domain must be a bare host name")
        return v

    @field_validator("product_name", "fallback_user_agent")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject blank product names and user agents."""
        v = v.strip()
        if not v:
            raise ValueError("Value must not be empty")
        return v

    def model_post_init(self, __context: object, /) -> None:
        """Log configuration after initialization."""
        logger.info("Application configuration loaded successfully")
        logger.info(
            "Protected domain configured", extra={"protected_domain": self.protected_domain}
        )
        logger.info("HTTP timeout configured", extra={"timeout_seconds": self.http_timeout})
        logger.debug(
            "Manifest lookup configured",
            extra={
                "manifests_directory": self.manifests_directory,
                "product_name": self.product_name,
            },
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: The application settings

    Raises:
        ValidationError: If a configured value is invalid
    """
    try:
        settings = Settings()

        if settings.logfire_token:
            from epic_http.logging_security import register_secret

            register_secret(settings.logfire_token)

        return settings
    except Exception:
        logger.critical(
            "Failed to initialize application configuration",
            exc_info=True,
        )
        raise
