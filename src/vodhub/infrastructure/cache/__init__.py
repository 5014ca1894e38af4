"""Cache backends implementing CachePort."""

from .cache_factory import create_cache
from .diskcache_adapter import DiskcacheAdapter
from .memory_adapter import MemoryCacheAdapter

__all__ = [
    "DiskcacheAdapter",
    "MemoryCacheAdapter",
    "create_cache",
]
