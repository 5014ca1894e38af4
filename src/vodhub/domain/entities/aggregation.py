"""Aggregated (grouped) views over candidate results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .media import CandidateResult

YearOrder = Literal["none", "asc", "desc"]

ALL = "all"


@dataclass(frozen=True)
class GroupStats:
    """Majority-vote statistics of one group."""

    episode_count: int = 0
    source_names: tuple[str, ...] = ()
    external_id: int = 0


@dataclass(frozen=True)
class AggregationGroup:
    """Records of one logical title from different providers.

    ``key`` is ``"<normalized title>-<year>"``; ``members`` keep arrival
    order, so the first member is the group's representative.
    """

    key: str
    title_key: str
    year: str
    members: tuple[CandidateResult, ...]
    stats: GroupStats = GroupStats()

    @property
    def representative(self) -> CandidateResult:
        return self.members[0]

    @property
    def episode_count(self) -> int:
        return self.stats.episode_count

    @property
    def source_names(self) -> tuple[str, ...]:
        return self.stats.source_names

    @property
    def external_id(self) -> int:
        return self.stats.external_id


@dataclass(frozen=True)
class FilterState:
    """Filter/sort request applied to the flat or the grouped view."""

    provider: str = ALL
    title: str = ALL
    year: str = ALL
    year_order: YearOrder = "none"


@dataclass(frozen=True)
class FilterOption:
    label: str
    value: str


@dataclass(frozen=True)
class FilterOptions:
    """Selectable filter values derived from the current flat list."""

    providers: tuple[FilterOption, ...] = ()
    titles: tuple[FilterOption, ...] = ()
    years: tuple[FilterOption, ...] = ()
