"""
Pytest fixtures and configuration for serpkit tests.

Markers:
- @pytest.mark.unit: Single class/function, no external dependencies
  (default for tests without a marker)
- @pytest.mark.integration: Several components together, still offline

No test touches the network: adapters only build request descriptors and
parse bodies given to them.
"""

import os
from collections.abc import Generator
from pathlib import Path

import pytest

# Set test environment before importing anything else
os.environ["SERPKIT_CONFIG_DIR"] = str(Path(__file__).parent.parent / "config")

from serpkit.search.async_token import AsyncTokenProvider, reset_async_token_provider
from serpkit.search.models import QueryConfig, SearchQuery
from serpkit.utils.config import Settings, reset_settings


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests with no external dependencies (fast, <1s/test)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests across several components (offline)"
    )


def pytest_collection_modifyitems(config, items):
    """Tests without an explicit marker are unit tests."""
    for item in items:
        if not any(m.name in ("unit", "integration") for m in item.iter_markers()):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Reset cached settings and the process-wide token provider."""
    reset_settings()
    reset_async_token_provider()
    yield
    reset_settings()
    reset_async_token_provider()


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    """Default settings, independent of config files."""
    return Settings()


@pytest.fixture
def token_provider(fake_clock: FakeClock) -> AsyncTokenProvider:
    return AsyncTokenProvider(refresh_interval=3600, clock=fake_clock)


@pytest.fixture
def make_query(settings: Settings):
    """Build a SearchQuery with engine tables taken from default settings."""

    def _make(text: str, language: str = "", **engines: dict) -> SearchQuery:
        config = QueryConfig.from_settings(settings, language=language)
        if engines:
            config = QueryConfig(language=language, engines={**config.engines, **engines})
        return SearchQuery(query=text, config=config)

    return _make
