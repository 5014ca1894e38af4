"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from vodhub.application.use_cases import MediaDetailUseCase, SearchDispatchUseCase
from vodhub.domain.ports import ProviderAdapterPort
from vodhub.infrastructure.cache.cache_factory import create_cache
from vodhub.infrastructure.config.schema import AppConfig
from vodhub.infrastructure.persistence import CacheSearchHistory, PagedResultCache
from vodhub.infrastructure.providers import ApiProviderAdapter, ScrapeProviderAdapter
from vodhub.infrastructure.registry import YamlProviderRegistry
from vodhub.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def build_adapters(
    config: AppConfig,
    page_cache: PagedResultCache,
    http_client: httpx.AsyncClient,
) -> dict[str, ProviderAdapterPort]:
    """One adapter per provider kind, all sharing ``http_client``."""
    api = ApiProviderAdapter(
        page_cache,
        client=http_client,
        search_timeout=config.http_search_timeout_seconds,
        detail_timeout=config.http_detail_timeout_seconds,
        user_agent=config.http_user_agent,
    )
    scrape = ScrapeProviderAdapter(
        page_cache,
        client=http_client,
        search_timeout=config.http_search_timeout_seconds,
        detail_timeout=config.http_detail_timeout_seconds,
        user_agent=config.http_user_agent,
        challenge_retry_delay=config.search.challenge_retry_delay_seconds,
        episode_concurrency=config.search.episode_concurrency,
    )
    return {api.kind: api, scrape.kind: scrape}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. Cache (required by page cache and history)
        2. HTTP Client (shared by all adapters)
        3. Page cache + search history
        4. Provider registry
        5. Adapters
        6. Use cases
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) Cache (must be first - other components depend on it)
    cache = create_cache(
        backend=config.cache.backend,
        directory=str(config.cache.directory),
        ttl_seconds=config.cache.ttl_seconds,
        max_concurrent=config.cache.max_concurrent,
    )

    await cache.__aenter__()
    state.cache = cache
    log.info("cache_initialized", backend=config.cache.backend)

    if config.environment == "dev":
        await cache.clear()
        log.debug("cache_cleared", environment="dev")

    # 2) HTTP client; adapters pass their own per-request timeouts
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_detail_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=True,
    )
    log.info("http_client_initialized")

    # 3) Cache-backed repositories
    state.page_cache = PagedResultCache(
        cache=state.cache,
        ttl_seconds=config.cache.ttl_seconds,
    )
    state.history = CacheSearchHistory(
        cache=state.cache,
        limit=config.search.history_limit,
    )
    log.info("page_cache_initialized", ttl_seconds=config.cache.ttl_seconds)

    # 4) Provider registry
    state.registry = YamlProviderRegistry(
        inline=config.providers.sources,
        file=config.providers.file,
    )
    log.info(
        "provider_registry_initialized",
        inline=len(config.providers.sources),
        file=str(config.providers.file) if config.providers.file else None,
    )

    # 5) Adapters
    state.adapters = build_adapters(config, state.page_cache, state.http_client)
    log.info("provider_adapters_initialized", kinds=sorted(state.adapters))

    # 6) Use cases
    state.search_uc = SearchDispatchUseCase(
        registry=state.registry,
        adapters=state.adapters,
        config=config.search,
        history=state.history,
    )
    state.detail_uc = MediaDetailUseCase(
        registry=state.registry,
        adapters=state.adapters,
    )

    log.info("app_startup_complete")

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")

        await state.cache.aclose()
        log.info("cache_closed")

        log.info("app_shutdown_complete")
