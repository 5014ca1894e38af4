from .cache import CachePort
from .page_cache import PageCachePort
from .provider_adapter import ProviderAdapterPort
from .provider_registry import ProviderRegistryPort
from .search_history import SearchHistoryPort

__all__ = [
    "CachePort",
    "PageCachePort",
    "ProviderAdapterPort",
    "ProviderRegistryPort",
    "SearchHistoryPort",
]
