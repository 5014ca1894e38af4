"""Adapter for MacCMS-style JSON collection APIs (``kind: api``).

Search:  ``{base}?ac=videolist&wd={query}[&pg={page}]`` -> ``{"list", "pagecount"}``
Detail:  ``{base}?ac=videolist&ids={id}``, or, when the provider declares a
         ``detail`` host, the HTML page ``{detail}/index.php/vod/detail/id/{id}.html``.
"""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import quote

from vodhub.domain.entities.errors import (
    DetailResolutionFailed,
    MalformedResponse,
    UpstreamEmpty,
)
from vodhub.domain.entities.media import (
    UNKNOWN_YEAR,
    CandidateResult,
    MediaDetail,
    ProviderConfig,
)

from .constants import (
    API_DETAIL_PATH,
    API_HTML_DETAIL_PATH,
    API_PAGE_PATH,
    API_SEARCH_HEADERS,
    API_SEARCH_PATH,
)
from .httpx_base import HttpxProviderBase
from .markup import clean_html_tags, collapse_whitespace, first_year
from .playlist import find_m3u8_urls, parse_play_url

_HTML_M3U8_RE = re.compile(r"\$(https?://[^\"'\s]+?\.m3u8)")
_H1_RE = re.compile(r"<h1[^>]*>([^<]+)</h1>")
_SKETCH_RE = re.compile(r"""<div[^>]*class=["']sketch["'][^>]*>(.*?)</div>""", re.DOTALL)
_JPG_RE = re.compile(r"(https?://[^\"'\s]+?\.jpg)")
_YEAR_TEXT_RE = re.compile(r">(\d{4})<")


def _year_of(raw: Any) -> str:
    if not raw:
        return UNKNOWN_YEAR
    return first_year(str(raw)) or UNKNOWN_YEAR


def _external_id(raw: Any) -> int:
    try:
        return max(int(raw or 0), 0)
    except (TypeError, ValueError):
        return 0


def _list_items(data: Any, provider_key: str) -> list[dict[str, Any]]:
    if not isinstance(data, dict):
        raise MalformedResponse("response is not a JSON object", provider=provider_key)
    items = data.get("list")
    if not isinstance(items, list) or not items:
        raise UpstreamEmpty("response list is empty", provider=provider_key)
    return [item for item in items if isinstance(item, dict)]


def _page_count(data: dict[str, Any]) -> int:
    try:
        return max(int(data.get("pagecount") or 1), 1)
    except (TypeError, ValueError):
        return 1


class ApiProviderAdapter(HttpxProviderBase):
    """Structured-API provider adapter."""

    kind = "api"

    def _to_candidate(
        self, provider: ProviderConfig, item: dict[str, Any]
    ) -> CandidateResult | None:
        media_id = str(item.get("vod_id") or "").strip()
        title = collapse_whitespace(str(item.get("vod_name") or ""))
        if not media_id or not title:
            return None

        play_url = item.get("vod_play_url") or ""
        episodes, titles = parse_play_url(play_url) if play_url else ([], [])
        return CandidateResult(
            id=media_id,
            title=title,
            provider_key=provider.key,
            provider_label=provider.display_name,
            poster=str(item.get("vod_pic") or ""),
            episodes=tuple(episodes),
            episode_titles=tuple(titles),
            year=_year_of(item.get("vod_year")),
            description=clean_html_tags(str(item.get("vod_content") or "")),
            category=str(item.get("type_name") or item.get("vod_class") or ""),
            external_id=_external_id(item.get("vod_douban_id")),
        )

    async def _fetch_search_page(
        self, provider: ProviderConfig, query: str, page: int
    ) -> tuple[list[CandidateResult], int]:
        path = API_SEARCH_PATH if page == 1 else API_PAGE_PATH
        url = provider.base_url + path.format(query=quote(query, safe=""), page=page)

        resp = await self._fetch(
            url,
            provider=provider,
            timeout=self.search_timeout,
            headers=self._headers(API_SEARCH_HEADERS, provider),
        )
        data = self._parse_json(resp, provider)
        items = _list_items(data, provider.key)

        records = [
            record
            for record in (self._to_candidate(provider, item) for item in items)
            if record is not None
        ]
        return records, _page_count(data)

    async def resolve_detail(
        self, provider: ProviderConfig, media_id: str
    ) -> MediaDetail:
        if provider.detail_base_url:
            return await self._resolve_html_detail(provider, media_id)

        url = provider.base_url + API_DETAIL_PATH.format(id=quote(media_id, safe=""))
        resp = await self._fetch(
            url,
            provider=provider,
            timeout=self.detail_timeout,
            headers=self._headers(API_SEARCH_HEADERS, provider),
        )
        data = self._parse_json(resp, provider)
        items = _list_items(data, provider.key)
        if not items:
            raise UpstreamEmpty("detail list is empty", provider=provider.key)

        item = items[0]
        play_url = item.get("vod_play_url") or ""
        episodes, titles = parse_play_url(play_url) if play_url else ([], [])

        content = str(item.get("vod_content") or "")
        if not episodes and content:
            episodes = find_m3u8_urls(content)
            titles = []

        if not episodes:
            raise DetailResolutionFailed(
                f"no playable episode for {media_id}", provider=provider.key
            )

        self._log.info(
            "provider_detail_resolved",
            provider=provider.key,
            media_id=media_id,
            episodes=len(episodes),
        )
        return MediaDetail(
            id=media_id,
            title=collapse_whitespace(str(item.get("vod_name") or "")),
            provider_key=provider.key,
            provider_label=provider.display_name,
            poster=str(item.get("vod_pic") or ""),
            episodes=tuple(episodes),
            episode_titles=tuple(titles),
            year=_year_of(item.get("vod_year")),
            description=clean_html_tags(content),
            category=str(item.get("type_name") or item.get("vod_class") or ""),
            external_id=_external_id(item.get("vod_douban_id")),
            source_url=url,
        )

    async def _resolve_html_detail(
        self, provider: ProviderConfig, media_id: str
    ) -> MediaDetail:
        url = provider.detail_base_url + API_HTML_DETAIL_PATH.format(
            id=quote(media_id, safe="")
        )
        resp = await self._fetch(
            url,
            provider=provider,
            timeout=self.detail_timeout,
            headers=self._headers(API_SEARCH_HEADERS, provider),
        )
        html = resp.text

        episodes: list[str] = []
        for link in dict.fromkeys(_HTML_M3U8_RE.findall(html)):
            # Some hosts append "(mirror name)" after the URL.
            paren = link.find("(")
            episodes.append(link[:paren] if paren > 0 else link)

        if not episodes:
            raise DetailResolutionFailed(
                f"no playable episode on detail page for {media_id}",
                provider=provider.key,
            )

        title = _H1_RE.search(html)
        sketch = _SKETCH_RE.search(html)
        cover = _JPG_RE.search(html)
        year = _YEAR_TEXT_RE.search(html)

        return MediaDetail(
            id=media_id,
            title=title.group(1).strip() if title else "",
            provider_key=provider.key,
            provider_label=provider.display_name,
            poster=cover.group(1).strip() if cover else "",
            episodes=tuple(episodes),
            episode_titles=tuple(str(i) for i in range(1, len(episodes) + 1)),
            year=year.group(1) if year else UNKNOWN_YEAR,
            description=clean_html_tags(sketch.group(1)) if sketch else "",
            source_url=url,
        )
