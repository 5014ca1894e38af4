"""Builds the CachePort backend selected in config."""

from __future__ import annotations

from pathlib import Path

import structlog

from vodhub.domain.ports.cache import CachePort
from vodhub.infrastructure.cache.diskcache_adapter import DiskcacheAdapter
from vodhub.infrastructure.cache.memory_adapter import MemoryCacheAdapter
from vodhub.infrastructure.config.schema import CacheBackend

log = structlog.get_logger(__name__)


def create_cache(
    backend: CacheBackend = "memory",
    *,
    directory: str | Path = "./.cache/vodhub",
    ttl_seconds: int = 3600,
    max_concurrent: int = 10,
) -> CachePort:
    """Return an unopened cache adapter for ``backend``.

    Raises:
        ValueError: If ``backend`` is unknown.
    """
    log.info("cache_factory_create", backend=backend, ttl=ttl_seconds)
    if backend == "memory":
        return MemoryCacheAdapter(ttl_seconds=ttl_seconds)
    if backend == "diskcache":
        return DiskcacheAdapter(
            directory=directory,
            ttl_seconds=ttl_seconds,
            max_concurrent=max_concurrent,
        )
    raise ValueError(
        f"Unknown cache backend: {backend!r}. Must be 'memory' or 'diskcache'."
    )
