"""Decoding of obfuscated player URLs embedded in episode pages.

Episode pages carry ``"url"`` plus an ``"encrypt"`` discriminant.  The
set of schemes is closed; an unknown discriminant is rejected instead of
being guessed at.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Union
from urllib.parse import unquote

_PLAYER_BLOCK_RE = re.compile(r"var\s+player_aaaa\s*=\s*(\{.*?\});", re.DOTALL)
_PLAYER_URL_RE = re.compile(r'"url":"([^"]+)"')
_PLAYER_ENCRYPT_RE = re.compile(r'"encrypt":(\d+)')
_HTTP_RE = re.compile(r"^https?://", re.IGNORECASE)


@dataclass(frozen=True)
class Plain:
    raw: str

    def decode(self) -> str:
        return self.raw


@dataclass(frozen=True)
class PercentEncoded:
    raw: str

    def decode(self) -> str:
        return unquote(self.raw, errors="strict")


@dataclass(frozen=True)
class Base64ThenPercentEncoded:
    raw: str

    def decode(self) -> str:
        padded = self.raw + "=" * (-len(self.raw) % 4)
        text = base64.b64decode(padded).decode("utf-8")
        return unquote(text, errors="strict")


EncodedUrl = Union[Plain, PercentEncoded, Base64ThenPercentEncoded]

_SCHEMES: dict[int, type[EncodedUrl]] = {
    0: Plain,
    1: PercentEncoded,
    2: Base64ThenPercentEncoded,
}


def classify(raw: str, encrypt: int) -> EncodedUrl:
    """Wrap *raw* in the variant named by *encrypt*.

    JSON-escaped slashes (``\\/``) are normalized first.

    Raises:
        ValueError: If *encrypt* is not a known scheme.
    """
    try:
        scheme = _SCHEMES[encrypt]
    except KeyError:
        raise ValueError(f"unknown player url encoding: {encrypt}") from None
    return scheme(raw.replace("\\/", "/"))


def decode_player_url(raw: str, encrypt: int) -> str:
    """Decode *raw*; a failing decode step yields the normalized input."""
    encoded = classify(raw, encrypt)
    try:
        return encoded.decode()
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return encoded.raw


def to_playable_url(decoded: str) -> str | None:
    """Return an absolute http(s) URL, or None when *decoded* is unusable."""
    if _HTTP_RE.match(decoded):
        return decoded
    if decoded.startswith("//"):
        return f"https:{decoded}"
    return None


def extract_player_url(html: str) -> str | None:
    """Find the ``player_aaaa`` object in *html* and return its playable URL."""
    block = _PLAYER_BLOCK_RE.search(html)
    if not block:
        return None
    url_match = _PLAYER_URL_RE.search(block.group(1))
    if not url_match:
        return None
    encrypt_match = _PLAYER_ENCRYPT_RE.search(block.group(1))
    encrypt = int(encrypt_match.group(1)) if encrypt_match else 0
    try:
        decoded = decode_player_url(url_match.group(1), encrypt)
    except ValueError:
        return None
    return to_playable_url(decoded)
