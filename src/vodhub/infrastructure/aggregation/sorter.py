"""Filtering and ordering of the flat and grouped result views.

Ordering when a year order is requested:
1. exact title match with the query first
2. year (ascending or descending), unknown year always last
3. title (ascending for ``asc``, descending for ``desc``)

With ``year_order="none"`` arrival order is kept.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from functools import cmp_to_key

from vodhub.domain.entities.aggregation import (
    ALL,
    AggregationGroup,
    FilterOption,
    FilterOptions,
    FilterState,
    YearOrder,
)
from vodhub.domain.entities.media import UNKNOWN_YEAR, CandidateResult


def _year_number(year: str) -> int | None:
    year = (year or "").strip()
    return int(year) if year.isdigit() else None


def _cmp(a: str, b: str) -> int:
    return (a > b) - (a < b)


def compare_year(a_year: str, b_year: str, order: YearOrder) -> int:
    """Comparator on year strings; unknown/empty always sorts last."""
    if order == "none":
        return 0
    a_num, b_num = _year_number(a_year), _year_number(b_year)
    if a_num is None and b_num is None:
        return 0
    if a_num is None:
        return 1
    if b_num is None:
        return -1
    return a_num - b_num if order == "asc" else b_num - a_num


def _compare_titled(
    a_title: str, a_year: str, b_title: str, b_year: str, query: str, order: YearOrder
) -> int:
    a_exact, b_exact = a_title == query, b_title == query
    if a_exact != b_exact:
        return -1 if a_exact else 1
    by_year = compare_year(a_year, b_year, order)
    if by_year:
        return by_year
    return _cmp(a_title, b_title) if order == "asc" else _cmp(b_title, a_title)


def sort_batch_for_no_order(
    records: Sequence[CandidateResult], query: str
) -> list[CandidateResult]:
    """Pre-sort one provider batch: exact match, known years descending, unknown last.

    Stable: ties keep the provider's own order.
    """

    def key(record: CandidateResult) -> tuple[int, int, int]:
        exact = (record.title or "").strip() == query
        year = _year_number(record.year)
        return (0 if exact else 1, 1 if year is None else 0, -(year or 0))

    return sorted(records, key=key)


def _matches(
    filter_state: FilterState, providers: Iterable[str], title: str, year: str
) -> bool:
    if filter_state.provider != ALL and filter_state.provider not in providers:
        return False
    if filter_state.title != ALL and title != filter_state.title:
        return False
    return filter_state.year == ALL or year == filter_state.year


def filter_results(
    records: Sequence[CandidateResult], query: str, filter_state: FilterState
) -> list[CandidateResult]:
    selected = [
        r for r in records if _matches(filter_state, (r.provider_key,), r.title, r.year)
    ]
    order = filter_state.year_order
    if order == "none":
        return selected
    query = query.strip()
    return sorted(
        selected,
        key=cmp_to_key(
            lambda a, b: _compare_titled(a.title, a.year, b.title, b.year, query, order)
        ),
    )


def filter_groups(
    groups: Sequence[AggregationGroup], query: str, filter_state: FilterState
) -> list[AggregationGroup]:
    """Provider matches any member; title and year match the representative."""
    selected = [
        g
        for g in groups
        if _matches(
            filter_state,
            {m.provider_key for m in g.members},
            g.representative.title,
            g.representative.year,
        )
    ]
    order = filter_state.year_order
    if order == "none":
        return selected
    query = query.strip()

    def compare(a: AggregationGroup, b: AggregationGroup) -> int:
        ra, rb = a.representative, b.representative
        return _compare_titled(ra.title, ra.year, rb.title, rb.year, query, order)

    return sorted(selected, key=cmp_to_key(compare))


def build_filter_options(records: Iterable[CandidateResult]) -> FilterOptions:
    """Providers by label, titles alphabetically, known years newest first then unknown."""
    providers: dict[str, str] = {}
    titles: set[str] = set()
    years: set[str] = set()
    for r in records:
        if r.provider_key and r.provider_label:
            providers[r.provider_key] = r.provider_label
        if r.title:
            titles.add(r.title)
        if r.year:
            years.add(r.year)

    known_years = sorted(
        (y for y in years if _year_number(y) is not None),
        key=lambda y: _year_number(y) or 0,
        reverse=True,
    )
    year_options = [FilterOption(label=y, value=y) for y in known_years]
    if UNKNOWN_YEAR in years:
        year_options.append(FilterOption(label=UNKNOWN_YEAR, value=UNKNOWN_YEAR))

    return FilterOptions(
        providers=tuple(
            FilterOption(label=label, value=key)
            for key, label in sorted(providers.items(), key=lambda kv: kv[1])
        ),
        titles=tuple(FilterOption(label=t, value=t) for t in sorted(titles)),
        years=tuple(year_options),
    )


class ResultSorter:
    """Bundles the view ordering functions for the aggregation engine."""

    def presort_batch(
        self, records: Sequence[CandidateResult], query: str
    ) -> list[CandidateResult]:
        return sort_batch_for_no_order(records, query)

    def sort_results(
        self, records: Sequence[CandidateResult], query: str, filter_state: FilterState
    ) -> list[CandidateResult]:
        return filter_results(records, query, filter_state)

    def sort_groups(
        self, groups: Sequence[AggregationGroup], query: str, filter_state: FilterState
    ) -> list[AggregationGroup]:
        return filter_groups(groups, query, filter_state)

    def filter_options(self, records: Iterable[CandidateResult]) -> FilterOptions:
        return build_filter_options(records)
