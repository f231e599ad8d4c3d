"""Pytest configuration and shared fixtures for the epic-http test suite."""

import json
import logging
import os
from collections.abc import Callable, Generator

import pytest

from epic_http.config import ENV_PREFIX, Settings
from epic_http.libs.manifest import ManifestResolver
from epic_http.libs.manifest.resolver import SUPPORTED_PLATFORM
from tests.unit.fakes import FakeManifestFilesystem


@pytest.fixture(scope="session")
def test_logging() -> Generator[None, None, None]:
    """Configure logging for test sessions."""
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    yield

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)


@pytest.fixture
def clean_env() -> Generator[dict[str, str | None], None, None]:
    """Remove EPICHTTP_ variables for the duration of a test, restoring them afterwards."""
    original_env = {key: value for key, value in os.environ.items() if key.startswith(ENV_PREFIX)}
    for key in original_env:
        del os.environ[key]

    yield dict(original_env)

    for key in [key for key in os.environ if key.startswith(ENV_PREFIX)]:
        del os.environ[key]
    os.environ.update(original_env)


@pytest.fixture
def settings(clean_env: dict[str, str | None]) -> Settings:
    """Default settings, unaffected by the outer environment."""
    return Settings()


@pytest.fixture
def manifest_files() -> Callable[..., dict[str, str]]:
    """Factory building a manifest directory listing from item dicts or raw strings."""

    def _build(**entries: dict[str, object] | str) -> dict[str, str]:
        return {
            name: value if isinstance(value, str) else json.dumps(value)
            for name, value in entries.items()
        }

    return _build


@pytest.fixture
def make_resolver() -> Callable[..., ManifestResolver]:
    """Factory for resolvers over an in-memory filesystem on the supported platform."""

    def _make(
        filesystem: FakeManifestFilesystem, platform: str = SUPPORTED_PLATFORM
    ) -> ManifestResolver:
        return ManifestResolver(
            manifests_directory="C:/ProgramData/Epic/EpicGamesLauncher/Data/Manifests",
            filesystem=filesystem,
            platform=platform,
        )

    return _make


@pytest.fixture(autouse=True)
def reset_lru_cache() -> Generator[None, None, None]:
    """Reset the settings cache between tests."""
    yield

    from epic_http.config import get_settings

    get_settings.cache_clear()


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (no external dependencies)"
    )
