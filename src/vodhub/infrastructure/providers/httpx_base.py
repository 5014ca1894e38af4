"""Shared base class for httpx-based provider adapters.

Owns what both adapter variants have in common: client lifecycle,
classification of HTTP outcomes into the provider error taxonomy, and
the paged, cache-through ``search`` loop.  Variants only implement
``_fetch_search_page`` and ``resolve_detail``.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from vodhub.domain.entities.errors import (
    MalformedResponse,
    NetworkError,
    NetworkTimeout,
    ProviderError,
    UpstreamEmpty,
    UpstreamForbidden,
)
from vodhub.domain.entities.media import CandidateResult, MediaDetail, ProviderConfig
from vodhub.domain.ports.page_cache import PageCachePort

from .constants import (
    DEFAULT_DETAIL_TIMEOUT,
    DEFAULT_SEARCH_TIMEOUT,
    DEFAULT_USER_AGENT,
)


class HttpxProviderBase:
    """Shared base for provider adapters.

    Subclasses **must** set ``kind`` and override:
    - ``_fetch_search_page()`` (raise taxonomy errors, never cache)
    - ``resolve_detail()``

    A client passed in is shared and never closed here; without one the
    adapter lazily creates and owns its own.
    """

    kind: str = ""

    def __init__(
        self,
        page_cache: PageCachePort,
        *,
        client: httpx.AsyncClient | None = None,
        search_timeout: float = DEFAULT_SEARCH_TIMEOUT,
        detail_timeout: float = DEFAULT_DETAIL_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.page_cache = page_cache
        self.search_timeout = search_timeout
        self.detail_timeout = detail_timeout
        self.user_agent = user_agent
        self._client = client
        self._owns_client = client is None
        self._log = structlog.get_logger(f"vodhub.providers.{self.kind or 'base'}")

    # ------------------------------------------------------------------
    # Client lifecycle
    # ------------------------------------------------------------------

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=True)
            self._owns_client = True
        return self._client

    async def cleanup(self) -> None:
        """Close the httpx client if this adapter created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _headers(
        self, base: Mapping[str, str], provider: ProviderConfig
    ) -> dict[str, str]:
        headers = dict(base)
        headers["User-Agent"] = self.user_agent
        headers.update(provider.headers)
        return headers

    async def _get(
        self,
        url: str,
        *,
        provider: ProviderConfig,
        timeout: float,
        headers: Mapping[str, str],
    ) -> httpx.Response:
        """GET *url*, translating transport failures into taxonomy errors.

        The response is returned regardless of status; see ``_check_status``.
        """
        client = await self._ensure_client()
        try:
            return await client.get(url, headers=dict(headers), timeout=timeout)
        except httpx.TimeoutException as exc:
            raise NetworkTimeout(f"timed out: {url}", provider=provider.key) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(
                f"{type(exc).__name__}: {exc}", provider=provider.key
            ) from exc

    @staticmethod
    def _check_status(resp: httpx.Response, provider: ProviderConfig) -> None:
        if resp.status_code == 403:
            raise UpstreamForbidden(f"403 from {resp.url}", provider=provider.key)
        if not resp.is_success:
            raise NetworkError(
                f"HTTP {resp.status_code} from {resp.url}",
                provider=provider.key,
                status_code=resp.status_code,
            )

    async def _fetch(
        self,
        url: str,
        *,
        provider: ProviderConfig,
        timeout: float,
        headers: Mapping[str, str],
    ) -> httpx.Response:
        resp = await self._get(url, provider=provider, timeout=timeout, headers=headers)
        self._check_status(resp, provider)
        return resp

    @staticmethod
    def _parse_json(resp: httpx.Response, provider: ProviderConfig) -> Any:
        try:
            return resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as exc:
            raise MalformedResponse(
                f"invalid JSON from {resp.url}", provider=provider.key
            ) from exc

    # ------------------------------------------------------------------
    # Paged search
    # ------------------------------------------------------------------

    async def search(
        self,
        provider: ProviderConfig,
        query: str,
        *,
        max_pages: int = 1,
    ) -> list[CandidateResult]:
        """Search *provider*, following pagination up to *max_pages*.

        Failures of individual pages contribute nothing; this method does
        not raise ``ProviderError``.
        """
        results, page_count = await self._search_page(provider, query, 1)

        last_page = min(page_count or 1, max_pages)
        if last_page > 1:
            extra = await asyncio.gather(
                *(
                    self._search_page(provider, query, page)
                    for page in range(2, last_page + 1)
                )
            )
            for page_results, _ in extra:
                results.extend(page_results)

        self._log.info(
            "provider_search_done",
            provider=provider.key,
            query=query,
            pages=last_page,
            results=len(results),
        )
        return results

    async def _search_page(
        self, provider: ProviderConfig, query: str, page: int
    ) -> tuple[list[CandidateResult], int | None]:
        cached = await self.page_cache.get(provider.key, query, page)
        if cached is not None:
            self._log.debug(
                "provider_search_page_cached",
                provider=provider.key,
                page=page,
                status=cached.status,
            )
            if cached.is_ok:
                return list(cached.records), cached.page_count
            return [], None

        try:
            records, page_count = await self._fetch_search_page(provider, query, page)
        except UpstreamForbidden:
            self._log.warning("provider_search_forbidden", provider=provider.key, page=page)
            await self.page_cache.put(provider.key, query, page, "forbidden")
            return [], None
        except NetworkTimeout:
            self._log.warning("provider_search_timeout", provider=provider.key, page=page)
            await self.page_cache.put(provider.key, query, page, "timeout")
            return [], None
        except UpstreamEmpty:
            self._log.debug("provider_search_empty", provider=provider.key, page=page)
            return [], None
        except ProviderError as exc:
            self._log.warning(
                "provider_search_failed",
                provider=provider.key,
                page=page,
                reason=exc.reason,
                error=str(exc),
            )
            return [], None

        playable = [r for r in records if r.episodes]
        if page != 1:
            page_count = None
        await self.page_cache.put(
            provider.key, query, page, "ok", playable, page_count=page_count
        )
        return playable, page_count

    # ------------------------------------------------------------------
    # Variant hooks
    # ------------------------------------------------------------------

    async def _fetch_search_page(
        self, provider: ProviderConfig, query: str, page: int
    ) -> tuple[list[CandidateResult], int]:
        """Fetch one search page: ``(records, page_count)``.

        Raises ``UpstreamEmpty`` for a well-formed page without items.
        """
        raise NotImplementedError(
            f"{type(self).__name__}._fetch_search_page() not implemented"
        )

    async def resolve_detail(
        self, provider: ProviderConfig, media_id: str
    ) -> MediaDetail:
        raise NotImplementedError(
            f"{type(self).__name__}.resolve_detail() not implemented"
        )
