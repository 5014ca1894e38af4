"""Adapter for HTML-scraped catalog sites (``kind: scrape``).

Targets MacCMS "GV" templates fronted by a bot-challenge proxy:

- search page ``/search/-------------/?wd={query}`` lists result cards
  linking to ``/GV{id}/`` and to per-episode play pages
  ``/playGV{id}-{source}-{episode}/``
- the detail page carries metadata and the full set of play-page links
- each play page embeds ``var player_aaaa = {...}`` with the (possibly
  obfuscated) stream URL

Everything is extracted with regular expressions; no script is executed.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from urllib.parse import quote

import httpx

from vodhub.domain.entities.errors import (
    ChallengeDetected,
    DetailResolutionFailed,
    ProviderError,
    UpstreamEmpty,
)
from vodhub.domain.entities.media import (
    UNKNOWN_YEAR,
    CandidateResult,
    MediaDetail,
    ProviderConfig,
)
from vodhub.domain.ports.page_cache import PageCachePort

from .challenge import is_bot_challenge
from .constants import (
    BROWSER_HTML_HEADERS,
    DEFAULT_CHALLENGE_RETRY_DELAY,
    DEFAULT_DETAIL_TIMEOUT,
    DEFAULT_EPISODE_CONCURRENCY,
    DEFAULT_SEARCH_TIMEOUT,
    DEFAULT_USER_AGENT,
    SCRAPE_DETAIL_PATH,
    SCRAPE_SEARCH_PATH,
)
from .httpx_base import HttpxProviderBase
from .markup import clean_html_tags, site_origin, to_absolute_url
from .url_decoding import extract_player_url

# Search cards
_CARD_LINK_RE = re.compile(r'<a\b[^>]*href="(?:https?://[^"/]+)?/GV(\d+)/"[^>]*>', re.IGNORECASE)
_TITLE_ATTR_RE = re.compile(r'title="([^"]+)"')
_DATA_SRC_RE = re.compile(r'data-src="([^"]+)"', re.IGNORECASE)
_CARD_YEAR_RE = re.compile(r"\b((?:19|20)\d{2})\b")
_TAG_TEXT_RE = re.compile(r"<a\b[^>]*>([^<]+)</a>")
_ANCHOR_RE = re.compile(r"<a\b[^>]*>.*?</a>", re.IGNORECASE | re.DOTALL)

# Detail page
_DETAIL_TITLE_RES = (
    re.compile(r'<h3 class="slide-info-title[^"]*">([^<]+)</h3>'),
    re.compile(r"<title>([^<_]+)"),
)
_DETAIL_DESC_RES = (
    re.compile(r'id="height_limit"[^>]*>(.*?)</div>', re.DOTALL),
    re.compile(r'<meta\s+name="description"\s+content="([^"]*)"', re.IGNORECASE),
)
_DETAIL_YEAR_RES = (
    re.compile(r'<em class="cor4">年份：</em>\s*(\d{4})'),
    re.compile(r'href="/search/[^"]*?(\d{4})/"'),
    re.compile(r"<a[^>]*>(\d{4})</a>"),
)
_DETAIL_POSTER_RES = (
    re.compile(r'<div class="detail-pic">.*?data-src="([^"]+)"', re.DOTALL | re.IGNORECASE),
    re.compile(r'<img[^>]+data-src="([^"]+)"', re.IGNORECASE),
)
_EPISODE_LINK_RE = re.compile(r'href="(/playGV\d+-\d+-\d+/)"[^>]*>(.*?)</a>', re.DOTALL)

# Play page
_PLAY_TITLE_RES = (
    re.compile(r'class="player-title-link"[^>]*>([^<]+)</a>'),
    re.compile(r"<title>([^<_]+)"),
)
_PLAY_DESC_RES = (
    re.compile(r'<div class="small-text">(.*?)</div>', re.DOTALL),
    re.compile(r'<meta\s+name="description"\s+content="([^"]*)"', re.IGNORECASE),
)
_PLAY_YEAR_RES = (
    re.compile(r'<div class="cor4"\s+title="(\d{4})">'),
    re.compile(r"<a[^>]*>(\d{4})</a>"),
)
_PLAY_POSTER_RES = (
    re.compile(r'<div class="this-pic">.*?data-src="([^"]+)"', re.DOTALL | re.IGNORECASE),
    re.compile(r'<img[^>]+data-src="([^"]+)"', re.IGNORECASE),
)


def _first_match(html: str, patterns: tuple[re.Pattern[str], ...]) -> str:
    for pattern in patterns:
        match = pattern.search(html)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return ""


def _play_link_re(media_id: str) -> re.Pattern[str]:
    return re.compile(rf'href="((?:https?://[^"/]+)?/playGV{re.escape(media_id)}-\d+-\d+/)"')


@dataclass(frozen=True)
class _PlayPage:
    """What one episode page yielded."""

    url: str | None
    title: str = ""
    year: str = UNKNOWN_YEAR
    description: str = ""
    poster: str = ""

    @property
    def has_metadata(self) -> bool:
        return bool(self.title or self.poster or self.description) or (
            self.year != UNKNOWN_YEAR
        )


def parse_search_cards(
    html: str, provider: ProviderConfig, origin: str
) -> list[CandidateResult]:
    """Extract one record per distinct ``/GV{id}/`` card, in page order."""
    anchors = list(_CARD_LINK_RE.finditer(html))
    starts: dict[str, int] = {}
    for anchor in anchors:
        starts.setdefault(anchor.group(1), anchor.start())

    ordered = sorted(starts.items(), key=lambda kv: kv[1])
    records: list[CandidateResult] = []
    for index, (media_id, start) in enumerate(ordered):
        end = ordered[index + 1][1] if index + 1 < len(ordered) else len(html)
        card = html[start:end]

        title = ""
        for anchor in anchors:
            if anchor.group(1) == media_id:
                attr = _TITLE_ATTR_RE.search(anchor.group(0))
                if attr:
                    title = attr.group(1).strip()
                    break
        if not title:
            text = _TAG_TEXT_RE.search(card)
            title = text.group(1).strip() if text else ""
        if not title:
            continue

        poster = _DATA_SRC_RE.search(card)
        # Links carry the title and episode labels, never the release year.
        details = clean_html_tags(_ANCHOR_RE.sub(" ", card)).replace(title, " ")
        year = _CARD_YEAR_RE.search(details)
        play_paths = dict.fromkeys(_play_link_re(media_id).findall(html))

        records.append(
            CandidateResult(
                id=media_id,
                title=title,
                provider_key=provider.key,
                provider_label=provider.display_name,
                poster=to_absolute_url(poster.group(1), origin) if poster else "",
                episodes=tuple(to_absolute_url(p, origin) for p in play_paths),
                year=year.group(1) if year else UNKNOWN_YEAR,
            )
        )
    return records


def parse_play_page(html: str, origin: str) -> _PlayPage:
    return _PlayPage(
        url=extract_player_url(html),
        title=_first_match(html, _PLAY_TITLE_RES),
        year=_first_match(html, _PLAY_YEAR_RES) or UNKNOWN_YEAR,
        description=clean_html_tags(_first_match(html, _PLAY_DESC_RES)),
        poster=to_absolute_url(_first_match(html, _PLAY_POSTER_RES), origin),
    )


class ScrapeProviderAdapter(HttpxProviderBase):
    """HTML-scraping provider adapter with bot-challenge retry."""

    kind = "scrape"

    def __init__(
        self,
        page_cache: PageCachePort,
        *,
        client: httpx.AsyncClient | None = None,
        search_timeout: float = DEFAULT_SEARCH_TIMEOUT,
        detail_timeout: float = DEFAULT_DETAIL_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        challenge_retry_delay: float = DEFAULT_CHALLENGE_RETRY_DELAY,
        episode_concurrency: int = DEFAULT_EPISODE_CONCURRENCY,
    ) -> None:
        super().__init__(
            page_cache,
            client=client,
            search_timeout=search_timeout,
            detail_timeout=detail_timeout,
            user_agent=user_agent,
        )
        self.challenge_retry_delay = challenge_retry_delay
        self.episode_concurrency = episode_concurrency

    async def _fetch_html(
        self, url: str, provider: ProviderConfig, *, timeout: float
    ) -> str:
        """GET an HTML page, retrying once after a challenge interstitial.

        Raises:
            ChallengeDetected: The retry was challenged as well.
        """
        headers = self._headers(BROWSER_HTML_HEADERS, provider)
        for attempt in range(2):
            resp = await self._get(url, provider=provider, timeout=timeout, headers=headers)
            # Challenge proxies answer 200, 403 or 503; the body decides.
            challenged = resp.status_code in (200, 403, 503) and is_bot_challenge(
                resp.text
            )
            if not challenged:
                self._check_status(resp, provider)
                return resp.text

            self._log.warning(
                "provider_challenge_detected",
                provider=provider.key,
                url=url,
                attempt=attempt + 1,
            )
            if attempt == 0:
                await asyncio.sleep(self.challenge_retry_delay)

        raise ChallengeDetected(f"challenge persisted for {url}", provider=provider.key)

    async def _fetch_search_page(
        self, provider: ProviderConfig, query: str, page: int
    ) -> tuple[list[CandidateResult], int]:
        origin = site_origin(provider.base_url)
        url = origin + SCRAPE_SEARCH_PATH.format(query=quote(query, safe=""))
        html = await self._fetch_html(url, provider, timeout=self.search_timeout)

        records = parse_search_cards(html, provider, origin)
        if not records:
            raise UpstreamEmpty("no result cards", provider=provider.key)
        return records, 1

    async def _resolve_play_page(
        self,
        provider: ProviderConfig,
        origin: str,
        path: str,
        semaphore: asyncio.Semaphore,
    ) -> _PlayPage:
        async with semaphore:
            try:
                html = await self._fetch_html(
                    to_absolute_url(path, origin),
                    provider,
                    timeout=self.detail_timeout,
                )
            except ProviderError as exc:
                self._log.warning(
                    "provider_episode_failed",
                    provider=provider.key,
                    path=path,
                    reason=exc.reason,
                )
                return _PlayPage(url=None)
        return parse_play_page(html, origin)

    async def resolve_detail(
        self, provider: ProviderConfig, media_id: str
    ) -> MediaDetail:
        origin = site_origin(provider.base_url)
        detail_url = origin + SCRAPE_DETAIL_PATH.format(id=media_id)
        html = await self._fetch_html(detail_url, provider, timeout=self.detail_timeout)

        title = _first_match(html, _DETAIL_TITLE_RES)
        description = clean_html_tags(_first_match(html, _DETAIL_DESC_RES))
        year = _first_match(html, _DETAIL_YEAR_RES) or UNKNOWN_YEAR
        poster = to_absolute_url(_first_match(html, _DETAIL_POSTER_RES), origin)

        episode_links: dict[str, str] = {}
        for path, label in _EPISODE_LINK_RE.findall(html):
            if path not in episode_links:
                episode_links[path] = clean_html_tags(label) or str(len(episode_links) + 1)

        if not episode_links:
            raise DetailResolutionFailed(
                f"no play pages on {detail_url}", provider=provider.key
            )

        semaphore = asyncio.Semaphore(self.episode_concurrency)
        pages = await asyncio.gather(
            *(
                self._resolve_play_page(provider, origin, path, semaphore)
                for path in episode_links
            )
        )

        episodes: list[str] = []
        titles: list[str] = []
        for page, label in zip(pages, episode_links.values()):
            if page.url:
                episodes.append(page.url)
                titles.append(label)

        if not episodes:
            raise DetailResolutionFailed(
                f"no usable stream URL among {len(pages)} play pages",
                provider=provider.key,
            )

        fallback = next((p for p in pages if p.has_metadata), None)
        if fallback is not None:
            title = title or fallback.title
            poster = poster or fallback.poster
            description = description or fallback.description
            if year == UNKNOWN_YEAR:
                year = fallback.year

        self._log.info(
            "provider_detail_resolved",
            provider=provider.key,
            media_id=media_id,
            play_pages=len(pages),
            episodes=len(episodes),
        )
        return MediaDetail(
            id=media_id,
            title=title,
            provider_key=provider.key,
            provider_label=provider.display_name,
            poster=poster,
            episodes=tuple(episodes),
            episode_titles=tuple(titles),
            year=year,
            description=description,
            source_url=detail_url,
        )
