"""Provider adapters, one per provider ``kind``."""

from .api_adapter import ApiProviderAdapter
from .httpx_base import HttpxProviderBase
from .scrape_adapter import ScrapeProviderAdapter

__all__ = [
    "ApiProviderAdapter",
    "HttpxProviderBase",
    "ScrapeProviderAdapter",
]
