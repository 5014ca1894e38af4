"""Tests for title/year grouping and group statistics."""

from __future__ import annotations

import random

import pytest

from vodhub.infrastructure.aggregation import (
    compute_group_stats,
    filter_sources_for_playback,
    group_results,
    normalize_title,
)


class TestNormalizeTitle:
    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Example Show", "exampleshow"),
            ("  EXAMPLE\u3000show ", "exampleshow"),
            ("Example·Show!", "exampleshow"),
            ("Ｅｘａｍｐｌｅ", "example"),
            ("", ""),
            ("...", ""),
        ],
    )
    def test_normalize(self, title: str, expected: str) -> None:
        assert normalize_title(title) == expected


class TestGroupResults:
    def test_same_title_and_year_grouped(self, record_factory) -> None:
        a = record_factory(id="1", provider_key="a", provider_label="A")
        b = record_factory(id="2", provider_key="b", provider_label="B", title="example show")

        (group,) = group_results([a, b])

        assert group.key == "exampleshow-2019"
        assert group.members == (a, b)
        assert group.source_names == ("A", "B")

    def test_different_years_split(self, record_factory) -> None:
        groups = group_results(
            [record_factory(id="1", year="2019"), record_factory(id="2", year="2021")]
        )
        assert [g.key for g in groups] == ["exampleshow-2019", "exampleshow-2021"]

    def test_unknown_folds_into_single_known_year(self, record_factory) -> None:
        known = record_factory(id="1", year="2019")
        unknown = record_factory(id="2", year="unknown", provider_key="b")

        (group,) = group_results([unknown, known])

        assert group.key == "exampleshow-2019"
        assert group.year == "2019"
        assert set(group.members) == {known, unknown}

    def test_unknown_stays_separate_with_several_known_years(self, record_factory) -> None:
        groups = group_results(
            [
                record_factory(id="1", year="2019"),
                record_factory(id="2", year="2021"),
                record_factory(id="3", year="unknown"),
            ]
        )
        assert sorted(g.key for g in groups) == [
            "exampleshow-2019",
            "exampleshow-2021",
            "exampleshow-unknown",
        ]

    def test_only_unknown(self, record_factory) -> None:
        (group,) = group_results([record_factory(year="unknown"), record_factory(year="")])
        assert group.key == "exampleshow-unknown"
        assert len(group.members) == 2

    def test_empty_normalized_title_skipped(self, record_factory) -> None:
        assert group_results([record_factory(title="!!!")]) == []

    def test_every_member_shares_the_group_title(self, record_factory) -> None:
        records = [
            record_factory(id=str(i), title=title, year=year)
            for i, (title, year) in enumerate(
                [("A", "2019"), ("a", "unknown"), ("B", "2020"), ("b ", "2020"), ("C", "")]
            )
        ]
        for group in group_results(records):
            assert {normalize_title(m.title) for m in group.members} == {group.title_key}

    def test_membership_independent_of_arrival_order(self, record_factory) -> None:
        records = [
            record_factory(id="1", provider_key="a", year="2019"),
            record_factory(id="2", provider_key="b", year="unknown"),
            record_factory(id="3", provider_key="c", title="Other", year="2020"),
            record_factory(id="4", provider_key="d", title="Other", year="2021"),
            record_factory(id="5", provider_key="e", title="Other", year="unknown"),
        ]

        def membership(items):
            return {
                g.key: frozenset((m.provider_key, m.id) for m in g.members)
                for g in group_results(items)
            }

        expected = membership(records)
        rng = random.Random(7)
        for _ in range(10):
            shuffled = records[:]
            rng.shuffle(shuffled)
            assert membership(shuffled) == expected


class TestComputeGroupStats:
    def test_majority_episode_count(self, record_factory) -> None:
        members = [
            record_factory(id="1", episodes=("u1", "u2")),
            record_factory(id="2", episodes=("u1", "u2", "u3")),
            record_factory(id="3", episodes=("u1", "u2")),
        ]
        assert compute_group_stats(members).episode_count == 2

    def test_tie_keeps_first_seen(self, record_factory) -> None:
        members = [
            record_factory(id="1", episodes=("u1", "u2", "u3")),
            record_factory(id="2", episodes=("u1",)),
        ]
        assert compute_group_stats(members).episode_count == 3

    def test_external_id_majority_ignores_zero(self, record_factory) -> None:
        members = [
            record_factory(id="1", external_id=0),
            record_factory(id="2", external_id=0),
            record_factory(id="3", external_id=55),
        ]
        assert compute_group_stats(members).external_id == 55

    def test_source_names_deduplicated(self, record_factory) -> None:
        members = [
            record_factory(id="1", provider_label="A"),
            record_factory(id="2", provider_label="A"),
            record_factory(id="3", provider_label="B"),
        ]
        assert compute_group_stats(members).source_names == ("A", "B")

    def test_empty(self) -> None:
        stats = compute_group_stats([])
        assert stats.episode_count == 0
        assert stats.source_names == ()


class TestFilterSourcesForPlayback:
    def test_matches_title_and_year(self, record_factory) -> None:
        keep = record_factory(id="1", year="2019")
        unknown = record_factory(id="2", year="unknown")
        other_year = record_factory(id="3", year="2020")
        other_title = record_factory(id="4", title="Else")

        result = filter_sources_for_playback(
            [keep, unknown, other_year, other_title],
            title="Example Show",
            year="2019",
            search_type="",
        )

        assert result == [keep, unknown]

    def test_type_filter(self, record_factory) -> None:
        movie = record_factory(id="1", episodes=("u",))
        series = record_factory(id="2", episodes=("u1", "u2"))

        assert filter_sources_for_playback(
            [movie, series], title="Example Show", year="", search_type="tv"
        ) == [series]
        assert filter_sources_for_playback(
            [movie, series], title="Example Show", year="", search_type="movie"
        ) == [movie]

    def test_blank_title(self, record_factory) -> None:
        assert filter_sources_for_playback(
            [record_factory()], title="", year="", search_type=""
        ) == []
