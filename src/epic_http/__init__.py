"""Epic HTTP: authenticated HTTP client layer for Epic Games services.

This package provides an httpx-based client that stamps outbound requests with
a Fortnite user agent derived from the locally installed game manifest, attaches
per-account bearer credentials, and transparently refreshes an expired credential
once before giving up.
"""

__version__ = "0.1.0"
