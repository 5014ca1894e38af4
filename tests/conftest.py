"""Shared test fixtures for the vodhub test suite."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from vodhub.domain.entities.media import CandidateResult, ProviderConfig
from vodhub.infrastructure.cache.memory_adapter import MemoryCacheAdapter
from vodhub.infrastructure.persistence.page_cache import PagedResultCache

# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced clock shared by cache layers under test."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


def make_record(**overrides: Any) -> CandidateResult:
    """CandidateResult with sensible defaults; keyword args override."""
    data: dict[str, Any] = {
        "id": "1",
        "title": "Example Show",
        "provider_key": "a",
        "provider_label": "Source A",
        "episodes": ("https://cdn.example/1.m3u8",),
        "year": "2019",
    }
    data.update(overrides)
    return CandidateResult(**data)


@pytest.fixture()
def record_factory() -> Callable[..., CandidateResult]:
    return make_record


@pytest.fixture()
def api_provider() -> ProviderConfig:
    return ProviderConfig(
        key="a",
        display_name="Source A",
        base_url="https://a.example/api.php/provide/vod",
        kind="api",
    )


@pytest.fixture()
def scrape_provider() -> ProviderConfig:
    return ProviderConfig(
        key="gv",
        display_name="GV Site",
        base_url="https://gv.example",
        kind="scrape",
    )


# ---------------------------------------------------------------------------
# Cache fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def memory_cache(clock: FakeClock) -> MemoryCacheAdapter:
    return MemoryCacheAdapter(ttl_seconds=3600, clock=clock)


@pytest.fixture()
def page_cache(memory_cache: MemoryCacheAdapter, clock: FakeClock) -> PagedResultCache:
    return PagedResultCache(memory_cache, ttl_seconds=7200, clock=clock)


# ---------------------------------------------------------------------------
# Mock port fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_registry(api_provider: ProviderConfig) -> MagicMock:
    """Mock ProviderRegistryPort (async methods)."""
    registry = MagicMock()
    registry.list_enabled = AsyncMock(return_value=[api_provider])
    registry.get = AsyncMock(return_value=api_provider)
    return registry
