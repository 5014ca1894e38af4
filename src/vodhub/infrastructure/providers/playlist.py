"""Parsing of MacCMS ``vod_play_url`` playlists.

Grammar: groups separated by ``$$$``, episodes within a group by ``#``,
each episode written as ``title$url``.
"""

from __future__ import annotations

import re

_M3U8_IN_TEXT_RE = re.compile(r"(https?://[^\"'\s]+?\.m3u8)")


def parse_play_url(play_url: str) -> tuple[list[str], list[str]]:
    """Return ``(episodes, titles)`` of the richest HLS group.

    Only ``title$url`` pairs with exactly two parts and an ``.m3u8`` URL
    count.  The group with the most such episodes wins; on a tie the
    earlier group is kept.

    >>> parse_play_url("EP1$https://a/1.m3u8#EP2$https://a/2.m3u8")
    (['https://a/1.m3u8', 'https://a/2.m3u8'], ['EP1', 'EP2'])
    """
    episodes: list[str] = []
    titles: list[str] = []

    for group in play_url.split("$$$"):
        group_episodes: list[str] = []
        group_titles: list[str] = []
        for pair in group.split("#"):
            parts = pair.split("$")
            if len(parts) == 2 and parts[1].endswith(".m3u8"):
                group_titles.append(parts[0])
                group_episodes.append(parts[1])
        if len(group_episodes) > len(episodes):
            episodes = group_episodes
            titles = group_titles

    return episodes, titles


def find_m3u8_urls(text: str) -> list[str]:
    """All ``.m3u8`` URLs embedded in free text, in order of appearance."""
    return _M3U8_IN_TEXT_RE.findall(text)
