"""Small text helpers for provider markup."""

from __future__ import annotations

import html
import re
from urllib.parse import urljoin, urlsplit

_TAG_RE = re.compile(r"<[^>]+>")
_NEWLINES_RE = re.compile(r"\n+")
_SPACES_RE = re.compile(r"[ \t]+")
_WS_RE = re.compile(r"\s+")
_YEAR_RE = re.compile(r"\d{4}")


def clean_html_tags(text: str) -> str:
    """Strip markup and entities, keeping paragraph breaks as single newlines."""
    if not text:
        return ""
    stripped = _TAG_RE.sub("\n", text)
    stripped = html.unescape(stripped)
    stripped = _SPACES_RE.sub(" ", stripped)
    stripped = _NEWLINES_RE.sub("\n", stripped.replace("\n ", "\n"))
    return stripped.strip()


def collapse_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text.strip())


def first_year(text: str | None) -> str | None:
    """First 4-digit run in *text*, or None."""
    if not text:
        return None
    match = _YEAR_RE.search(text)
    return match.group(0) if match else None


def site_origin(base_url: str) -> str:
    """``scheme://host[:port]`` of *base_url*; the stripped input if unparsable."""
    parts = urlsplit(base_url)
    if parts.scheme and parts.netloc:
        return f"{parts.scheme}://{parts.netloc}"
    return base_url.rstrip("/")


def to_absolute_url(url: str, origin: str) -> str:
    if not url:
        return ""
    return urljoin(origin + "/", url)
