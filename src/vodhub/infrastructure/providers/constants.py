"""Shared constants for provider adapters."""

from __future__ import annotations

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)

DEFAULT_SEARCH_TIMEOUT = 8.0
DEFAULT_DETAIL_TIMEOUT = 10.0
DEFAULT_CHALLENGE_RETRY_DELAY = 1.5
DEFAULT_EPISODE_CONCURRENCY = 4

API_SEARCH_HEADERS: dict[str, str] = {
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept": "application/json",
}

BROWSER_HTML_HEADERS: dict[str, str] = {
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "zh-CN,zh;q=0.9,en;q=0.8",
}

# MacCMS collection API paths, appended to the provider base URL.
API_SEARCH_PATH = "?ac=videolist&wd={query}"
API_PAGE_PATH = "?ac=videolist&wd={query}&pg={page}"
API_DETAIL_PATH = "?ac=videolist&ids={id}"
API_HTML_DETAIL_PATH = "/index.php/vod/detail/id/{id}.html"

SCRAPE_SEARCH_PATH = "/search/-------------/?wd={query}"
SCRAPE_DETAIL_PATH = "/GV{id}/"
