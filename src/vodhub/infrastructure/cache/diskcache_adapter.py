"""SQLite-backed cache adapter built on diskcache."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional

import structlog
from diskcache import Cache as DiskCache

log = structlog.get_logger(__name__)


class DiskcacheAdapter:
    """Async facade over the synchronous ``diskcache.Cache``.

    Disk I/O runs in worker threads via ``asyncio.to_thread``; a semaphore
    bounds concurrent operations to keep SQLite lock contention low.
    The store is opened on ``__aenter__`` and must be entered before use.

    Args:
        directory: Directory holding the SQLite database.
        ttl_seconds: TTL applied when ``set()`` gets none.
        max_concurrent: Upper bound on parallel disk operations.
    """

    def __init__(
        self,
        directory: str | Path = "./.cache/vodhub",
        ttl_seconds: int = 3600,
        max_concurrent: int = 10,
    ) -> None:
        self.directory = Path(directory)
        self.default_ttl = ttl_seconds
        self._store: DiskCache | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

    async def __aenter__(self) -> DiskcacheAdapter:
        if self._store is None:
            self._store = await asyncio.to_thread(DiskCache, str(self.directory))
            log.info("diskcache_opened", directory=str(self.directory))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._store is not None:
            await asyncio.to_thread(self._store.close)
            self._store = None
            log.info("diskcache_closed", directory=str(self.directory))

    def _require_open(self) -> DiskCache:
        if self._store is None:
            raise RuntimeError(
                "DiskcacheAdapter is not open; use 'async with cache:' first"
            )
        return self._store

    async def get(self, key: str) -> Optional[Any]:
        store = self._require_open()
        async with self._semaphore:
            value = await asyncio.to_thread(store.get, key, None)
        log.debug("cache_get", key=key, hit=value is not None)
        return value

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        store = self._require_open()
        expire = ttl if ttl is not None else self.default_ttl
        async with self._semaphore:
            await asyncio.to_thread(store.set, key, value, expire or None)
        log.debug("cache_set", key=key, ttl=expire)

    async def delete(self, key: str) -> bool:
        if self._store is None:
            return False
        async with self._semaphore:
            return bool(await asyncio.to_thread(self._store.delete, key))

    async def exists(self, key: str) -> bool:
        if self._store is None:
            return False
        store = self._store
        async with self._semaphore:
            return await asyncio.to_thread(store.__contains__, key)

    async def clear(self) -> None:
        if self._store is None:
            return
        async with self._semaphore:
            await asyncio.to_thread(self._store.clear)
        log.warning("cache_cleared", backend="diskcache", directory=str(self.directory))
