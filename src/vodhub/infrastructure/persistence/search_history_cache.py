"""Search history backed by CachePort (memory/diskcache)."""

from __future__ import annotations

import asyncio
import json

import structlog

from vodhub.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)

_HISTORY_KEY = "search-history"


class CacheSearchHistory:
    """Most-recent-first list of distinct queries, capped at ``limit``."""

    def __init__(self, cache: CachePort, limit: int = 20) -> None:
        self.cache = cache
        self.limit = limit
        self._lock = asyncio.Lock()

    async def recent(self) -> list[str]:
        data = await self.cache.get(_HISTORY_KEY)
        if data is None:
            return []
        try:
            items = json.loads(data)
        except json.JSONDecodeError as e:
            log.error("search_history_deserialize_error", error=str(e))
            return []
        return [q for q in items if isinstance(q, str)]

    async def record(self, query: str) -> None:
        query = query.strip()
        if not query:
            return
        async with self._lock:
            history = [q for q in await self.recent() if q != query]
            history.insert(0, query)
            del history[self.limit :]
            # ttl=0 disables expiry on both backends.
            await self.cache.set(_HISTORY_KEY, json.dumps(history, ensure_ascii=False), ttl=0)
        log.debug("search_history_recorded", query=query, size=len(history))
