"""CachePort-backed repositories."""

from .page_cache import PagedResultCache
from .search_history_cache import CacheSearchHistory

__all__ = ["CacheSearchHistory", "PagedResultCache"]
