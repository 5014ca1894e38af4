"""Bot-challenge page detection for scraped providers."""

from __future__ import annotations

_CHALLENGE_MARKERS: tuple[str, ...] = (
    "cf-browser-verification",
    "cf_chl_opt",
    "challenge-platform",
)


def is_bot_challenge(html: str) -> bool:
    """Return *True* when *html* is an interstitial instead of content.

    Challenge pages are frequently served with status 200, so only the
    body is inspected.  "Just a moment" alone is too common in real
    content and only counts together with "cloudflare".
    """
    if any(marker in html for marker in _CHALLENGE_MARKERS):
        return True
    return "Just a moment" in html and "cloudflare" in html
