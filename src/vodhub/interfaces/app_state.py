"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from vodhub.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from vodhub.application.use_cases import MediaDetailUseCase, SearchDispatchUseCase
    from vodhub.domain.ports import (
        CachePort,
        PageCachePort,
        ProviderAdapterPort,
        ProviderRegistryPort,
        SearchHistoryPort,
    )


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    cache: CachePort
    http_client: httpx.AsyncClient
    page_cache: PageCachePort

    # Domain Ports
    registry: ProviderRegistryPort
    history: SearchHistoryPort
    adapters: dict[str, ProviderAdapterPort]

    # Application Services
    search_uc: SearchDispatchUseCase
    detail_uc: MediaDetailUseCase
