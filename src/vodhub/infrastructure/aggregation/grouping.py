"""Title/year grouping of candidate results.

Records are bucketed by normalized title (first-seen order), then by
year.  A title's unknown-year records join its known-year bucket only
when exactly one such bucket exists; otherwise they form their own
``"<title>-unknown"`` group.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable, Sequence
from typing import Literal

from vodhub.domain.entities.aggregation import AggregationGroup, GroupStats
from vodhub.domain.entities.media import UNKNOWN_YEAR, CandidateResult

SearchType = Literal["tv", "movie", ""]

_WHITESPACE_RE = re.compile(r"[\s\u00a0\u3000]+")
_PUNCTUATION_RE = re.compile(r"[·•・.。:：,，!！?？'\"`~～_\-\u2014]")


def normalize_title(title: str) -> str:
    """Aggregation key of *title*.

    >>> normalize_title("Example Show: Part II!")
    'exampleshowpartii'
    """
    text = unicodedata.normalize("NFKC", title or "").lower()
    text = _WHITESPACE_RE.sub("", text)
    return _PUNCTUATION_RE.sub("", text)


def _year_bucket(year: str) -> str:
    return year if year and year != UNKNOWN_YEAR else UNKNOWN_YEAR


def _year_matches(result_year: str, target_year: str) -> bool:
    if not target_year:
        return True
    result = (result_year or UNKNOWN_YEAR).lower()
    return result == target_year.lower() or result == UNKNOWN_YEAR


def _type_matches(episode_count: int, search_type: SearchType) -> bool:
    if not search_type:
        return True
    # Search-stage records of some providers carry no episodes yet.
    if episode_count == 0:
        return True
    if search_type == "tv":
        return episode_count > 1
    return episode_count == 1


def filter_sources_for_playback(
    results: Iterable[CandidateResult],
    *,
    title: str,
    year: str,
    search_type: SearchType,
) -> list[CandidateResult]:
    """Results that can stand in for *title*/*year* during playback."""
    wanted = normalize_title(title)
    if not wanted:
        return []
    return [
        r
        for r in results
        if normalize_title(r.title) == wanted
        and _year_matches(r.year, year)
        and _type_matches(len(r.episodes), search_type)
    ]


def _majority(values: Iterable[int]) -> int:
    """Most frequent value; the first seen wins a tie.  0 when empty."""
    counts: dict[int, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    best, best_count = 0, 0
    for value, count in counts.items():
        if count > best_count:
            best, best_count = value, count
    return best


def compute_group_stats(members: Sequence[CandidateResult]) -> GroupStats:
    if not members:
        return GroupStats()

    episode_count = _majority(len(m.episodes) for m in members if m.episodes)

    representative = members[0]
    playable = filter_sources_for_playback(
        members,
        title=representative.title,
        year=representative.year,
        search_type="movie" if episode_count == 1 else "tv",
    )
    named = playable or list(members)
    source_names = tuple(
        dict.fromkeys(m.provider_label for m in named if m.provider_label)
    )

    external_id = _majority(m.external_id for m in members if m.external_id > 0)
    return GroupStats(
        episode_count=episode_count,
        source_names=source_names,
        external_id=external_id,
    )


def group_results(results: Iterable[CandidateResult]) -> list[AggregationGroup]:
    """Group *results* by normalized title and year.

    Records whose title normalizes to an empty string are skipped.
    """
    buckets: dict[str, list[CandidateResult]] = {}
    for record in results:
        title_key = normalize_title(record.title)
        if not title_key:
            continue
        buckets.setdefault(title_key, []).append(record)

    groups: list[AggregationGroup] = []
    for title_key, bucket in buckets.items():
        by_year: dict[str, list[CandidateResult]] = {}
        for record in bucket:
            by_year.setdefault(_year_bucket(record.year), []).append(record)

        known = [y for y in by_year if y != UNKNOWN_YEAR]
        if UNKNOWN_YEAR in by_year and len(known) == 1:
            by_year[known[0]].extend(by_year.pop(UNKNOWN_YEAR))

        for year, members in by_year.items():
            groups.append(
                AggregationGroup(
                    key=f"{title_key}-{year}",
                    title_key=title_key,
                    year=year,
                    members=tuple(members),
                    stats=compute_group_stats(members),
                )
            )
    return groups
