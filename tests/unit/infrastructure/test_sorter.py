"""Tests for result filtering, ordering and filter option derivation."""

from __future__ import annotations

import pytest

from vodhub.domain.entities.aggregation import AggregationGroup, FilterState
from vodhub.infrastructure.aggregation import (
    ResultSorter,
    build_filter_options,
    compare_year,
    filter_groups,
    filter_results,
    sort_batch_for_no_order,
)


def _group(*members) -> AggregationGroup:
    rep = members[0]
    return AggregationGroup(
        key=f"{rep.title.lower()}-{rep.year}",
        title_key=rep.title.lower(),
        year=rep.year,
        members=tuple(members),
    )


class TestCompareYear:
    @pytest.mark.parametrize(
        ("a", "b", "order", "sign"),
        [
            ("2019", "2021", "asc", -1),
            ("2019", "2021", "desc", 1),
            ("2019", "unknown", "asc", -1),
            ("2019", "unknown", "desc", -1),
            ("", "2019", "asc", 1),
            ("unknown", "", "desc", 0),
            ("2019", "2021", "none", 0),
        ],
    )
    def test_sign(self, a: str, b: str, order: str, sign: int) -> None:
        result = compare_year(a, b, order)  # type: ignore[arg-type]
        assert (result > 0) - (result < 0) == sign


class TestFilterResults:
    def test_none_keeps_arrival_order(self, record_factory) -> None:
        records = [
            record_factory(id="1", year="2018"),
            record_factory(id="2", year="2021"),
        ]
        assert filter_results(records, "x", FilterState()) == records

    def test_exact_match_then_year_then_title(self, record_factory) -> None:
        exact_old = record_factory(id="1", title="Show", year="2001")
        other_new = record_factory(id="2", title="Show II", year="2020")
        other_unknown = record_factory(id="3", title="Another", year="unknown")
        other_same_year_b = record_factory(id="4", title="B Show", year="2010")
        other_same_year_a = record_factory(id="5", title="A Show", year="2010")

        records = [other_unknown, other_same_year_b, other_new, exact_old, other_same_year_a]

        asc = filter_results(records, " Show ", FilterState(year_order="asc"))
        assert [r.id for r in asc] == ["1", "5", "4", "2", "3"]

        desc = filter_results(records, "Show", FilterState(year_order="desc"))
        assert [r.id for r in desc] == ["1", "2", "4", "5", "3"]

    def test_filters_by_provider_title_and_year(self, record_factory) -> None:
        a = record_factory(id="1", provider_key="a", year="2019")
        b = record_factory(id="2", provider_key="b", year="2019")
        c = record_factory(id="3", provider_key="b", year="2020")

        assert filter_results([a, b, c], "", FilterState(provider="b")) == [b, c]
        assert filter_results([a, b, c], "", FilterState(year="2020")) == [c]
        assert filter_results([a, b, c], "", FilterState(title="Nope")) == []


class TestFilterGroups:
    def test_provider_matches_any_member(self, record_factory) -> None:
        group = _group(
            record_factory(id="1", provider_key="a"),
            record_factory(id="2", provider_key="b"),
        )
        assert filter_groups([group], "", FilterState(provider="b")) == [group]
        assert filter_groups([group], "", FilterState(provider="c")) == []

    def test_title_and_year_use_representative(self, record_factory) -> None:
        group = _group(
            record_factory(id="1", year="2019"),
            record_factory(id="2", year="unknown"),
        )
        assert filter_groups([group], "", FilterState(year="2019")) == [group]
        assert filter_groups([group], "", FilterState(year="unknown")) == []

    def test_ordering(self, record_factory) -> None:
        old = _group(record_factory(id="1", title="Old", year="1999"))
        new = _group(record_factory(id="2", title="New", year="2022"))
        unknown = _group(record_factory(id="3", title="Lost", year="unknown"))

        desc = filter_groups([unknown, old, new], "", FilterState(year_order="desc"))
        assert desc == [new, old, unknown]

        asc = filter_groups([unknown, new, old], "", FilterState(year_order="asc"))
        assert asc == [old, new, unknown]


class TestSortBatchForNoOrder:
    def test_exact_first_then_newest_unknown_last(self, record_factory) -> None:
        records = [
            record_factory(id="1", title="Other", year="unknown"),
            record_factory(id="2", title="Other", year="2015"),
            record_factory(id="3", title="Show", year="2001"),
            record_factory(id="4", title="Other", year="2020"),
        ]
        ordered = sort_batch_for_no_order(records, "Show")
        assert [r.id for r in ordered] == ["3", "4", "2", "1"]

    def test_stable_for_ties(self, record_factory) -> None:
        records = [
            record_factory(id="1", year="2019"),
            record_factory(id="2", year="2019"),
            record_factory(id="3", year="2019"),
        ]
        assert sort_batch_for_no_order(records, "q") == records


class TestBuildFilterOptions:
    def test_options(self, record_factory) -> None:
        records = [
            record_factory(id="1", provider_key="z", provider_label="Alpha", title="Zeta", year="2001"),
            record_factory(id="2", provider_key="a", provider_label="Omega", title="Beta", year="unknown"),
            record_factory(id="3", provider_key="a", provider_label="Omega", title="Beta", year="2020"),
        ]

        options = build_filter_options(records)

        assert [(o.label, o.value) for o in options.providers] == [
            ("Alpha", "z"),
            ("Omega", "a"),
        ]
        assert [o.value for o in options.titles] == ["Beta", "Zeta"]
        assert [o.value for o in options.years] == ["2020", "2001", "unknown"]

    def test_empty(self) -> None:
        options = build_filter_options([])
        assert options.providers == ()
        assert options.years == ()


class TestResultSorter:
    def test_delegates(self, record_factory) -> None:
        sorter = ResultSorter()
        records = [record_factory(id="1", year="2001"), record_factory(id="2", year="2020")]

        assert sorter.presort_batch(records, "q")[0].id == "2"
        assert sorter.sort_results(records, "q", FilterState(year_order="asc"))[0].id == "1"
        assert len(sorter.filter_options(records).years) == 2
