"""In-process cache adapter (default backend)."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Any, Optional

import structlog

log = structlog.get_logger(__name__)


class MemoryCacheAdapter:
    """Dict-backed CachePort with per-key TTL.

    Expiry is evaluated lazily on access against ``clock`` so tests can
    move time forward without sleeping.  A TTL of ``0`` means "no expiry".
    """

    def __init__(
        self,
        ttl_seconds: int = 3600,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_ttl = ttl_seconds
        self._clock = clock
        self._data: dict[str, tuple[Any, float | None]] = {}
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> MemoryCacheAdapter:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        self._data.clear()

    def _live(self, key: str) -> tuple[Any, float | None] | None:
        item = self._data.get(key)
        if item is None:
            return None
        _, deadline = item
        if deadline is not None and self._clock() >= deadline:
            del self._data[key]
            log.debug("cache_expired", key=key)
            return None
        return item

    async def get(self, key: str) -> Optional[Any]:
        async with self._lock:
            item = self._live(key)
        log.debug("cache_get", key=key, hit=item is not None)
        return None if item is None else item[0]

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        expire = ttl if ttl is not None else self.default_ttl
        deadline = self._clock() + expire if expire else None
        async with self._lock:
            self._data[key] = (value, deadline)
        log.debug("cache_set", key=key, ttl=expire)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._data.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        async with self._lock:
            return self._live(key) is not None

    async def clear(self) -> None:
        async with self._lock:
            self._data.clear()
        log.warning("cache_cleared", backend="memory")
