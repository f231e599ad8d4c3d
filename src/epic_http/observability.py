"""Optional Pydantic Logfire tracing of Epic requests.

With ``EPICHTTP_LOGFIRE_TOKEN`` set, outbound httpx calls are traced (the
replayed attempt after a credential refresh shows up as its own span) and
standard library logging is forwarded to Logfire. Epic credential fields are
added to Logfire's scrubbing patterns on top of its defaults.
"""

from __future__ import annotations

import logging
from typing import Final

from epic_http import __version__
from epic_http.config import Settings, get_settings

logger = logging.getLogger(__name__)

SERVICE_NAME: Final = "epic-http"

# Attribute names that carry Epic credentials in spans and log records.
CREDENTIAL_SCRUB_PATTERNS: Final = (
    "access_token",
    "refresh_token",
    "device_auth",
    "exchange_code",
    "bearer",
)

_logfire_initialized = False


def initialize_logfire(settings: Settings | None = None) -> bool:
    """Configure Logfire when a token is set.

    Args:
        settings: Application settings, defaults to ``get_settings()``.

    Returns:
        bool: True if Logfire is active after the call, False otherwise
    """
    global _logfire_initialized

    if _logfire_initialized:
        return True

    try:
        config = settings if settings is not None else get_settings()
        if not config.logfire_token:
            logger.debug("Logfire token not configured, tracing disabled")
            return False

        import logfire

        logfire.configure(
            token=config.logfire_token,
            service_name=SERVICE_NAME,
            service_version=__version__,
            environment=config.environment,
            scrubbing=logfire.ScrubbingOptions(extra_patterns=list(CREDENTIAL_SCRUB_PATTERNS)),
        )
        logfire.instrument_httpx()
        # Handler rather than basicConfig so the CLI keeps control of the level
        logging.getLogger().addHandler(logfire.LogfireLoggingHandler())

    except ImportError:
        logger.warning("Logfire package not installed, tracing disabled")
        return False
    except Exception:
        logger.exception("Failed to initialize Logfire")
        return False

    _logfire_initialized = True
    logger.info("Logfire tracing enabled", extra={"environment": config.environment})
    return True
