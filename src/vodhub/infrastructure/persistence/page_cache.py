"""Paged provider-search cache backed by CachePort (memory/diskcache)."""

from __future__ import annotations

import hashlib
import json
import time
from collections.abc import Callable, Sequence

import structlog

from vodhub.domain.entities.cache import CACHE_STATUSES, CacheEntry, CacheStatus
from vodhub.domain.entities.media import CandidateResult
from vodhub.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)


def _page_key(provider_key: str, query: str, page: int) -> str:
    # Query is hashed verbatim: "Foo" and "foo" are distinct entries.
    digest = hashlib.sha256(query.encode("utf-8")).hexdigest()[:24]
    return f"search-page:{provider_key}:{page}:{digest}"


def _serialize_entry(entry: CacheEntry) -> str:
    return json.dumps(
        {
            "status": entry.status,
            "records": [r.to_dict() for r in entry.records],
            "page_count": entry.page_count,
            "expires_at": entry.expires_at,
        },
        ensure_ascii=False,
    )


def _deserialize_entry(data: str) -> CacheEntry:
    d = json.loads(data)
    status = d["status"]
    if status not in CACHE_STATUSES:
        raise ValueError(f"unknown cache status: {status!r}")
    return CacheEntry(
        status=status,
        records=tuple(CandidateResult.from_dict(r) for r in d.get("records", [])),
        page_count=d.get("page_count"),
        expires_at=float(d["expires_at"]),
    )


class PagedResultCache:
    """Memoizes per-page search outcomes of each provider.

    The expiry instant is fixed at write time (``clock() + ttl_seconds``)
    and checked lazily on ``get``; an expired entry is dropped and
    reported as a miss.  ``clock`` defaults to wall time and is injected
    by tests.
    """

    def __init__(
        self,
        cache: CachePort,
        ttl_seconds: int = 7200,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.cache = cache
        self.ttl = ttl_seconds
        self._clock = clock

    async def get(self, provider_key: str, query: str, page: int) -> CacheEntry | None:
        key = _page_key(provider_key, query, page)
        data = await self.cache.get(key)
        if data is None:
            return None

        try:
            entry = _deserialize_entry(data)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            log.error(
                "page_cache_deserialize_error",
                provider=provider_key,
                page=page,
                error=str(e),
            )
            await self.cache.delete(key)
            return None

        if self._clock() >= entry.expires_at:
            await self.cache.delete(key)
            log.debug("page_cache_expired", provider=provider_key, page=page)
            return None

        log.debug(
            "page_cache_hit",
            provider=provider_key,
            page=page,
            status=entry.status,
            records=len(entry.records),
        )
        return entry

    async def put(
        self,
        provider_key: str,
        query: str,
        page: int,
        status: CacheStatus,
        records: Sequence[CandidateResult] = (),
        page_count: int | None = None,
    ) -> None:
        if status == "ok" and not records:
            return

        entry = CacheEntry(
            status=status,
            records=tuple(records) if status == "ok" else (),
            page_count=page_count,
            expires_at=self._clock() + self.ttl,
        )
        await self.cache.set(
            _page_key(provider_key, query, page),
            _serialize_entry(entry),
            ttl=self.ttl,
        )
        log.debug(
            "page_cache_stored",
            provider=provider_key,
            page=page,
            status=status,
            records=len(entry.records),
        )
