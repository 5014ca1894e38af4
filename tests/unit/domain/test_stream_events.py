"""Tests for stream events and aggregation value objects."""

from __future__ import annotations

from vodhub.domain.entities import (
    ALL,
    AggregationGroup,
    CacheEntry,
    CompleteEvent,
    FilterState,
    GroupStats,
    SourceErrorEvent,
    SourceResultEvent,
    StartEvent,
    is_terminal,
)


class TestIsTerminal:
    def test_terminal_events(self) -> None:
        assert is_terminal(SourceResultEvent(provider="a", records=()))
        assert is_terminal(SourceErrorEvent(provider="a", reason="timeout"))

    def test_lifecycle_events(self) -> None:
        assert not is_terminal(StartEvent(total_providers=2))
        assert not is_terminal(CompleteEvent(completed_providers=2))


class TestCacheEntry:
    def test_is_ok(self) -> None:
        assert CacheEntry(status="ok").is_ok
        assert not CacheEntry(status="timeout").is_ok
        assert not CacheEntry(status="forbidden").is_ok


class TestAggregationGroup:
    def test_representative_is_first_member(self, record_factory) -> None:
        first = record_factory(id="1")
        second = record_factory(id="2", provider_key="b")
        group = AggregationGroup(
            key="exampleshow-2019",
            title_key="exampleshow",
            year="2019",
            members=(first, second),
            stats=GroupStats(episode_count=1, source_names=("Source A",), external_id=7),
        )
        assert group.representative is first
        assert group.episode_count == 1
        assert group.source_names == ("Source A",)
        assert group.external_id == 7


class TestFilterState:
    def test_defaults_select_everything(self) -> None:
        fs = FilterState()
        assert fs.provider == ALL
        assert fs.title == ALL
        assert fs.year == ALL
        assert fs.year_order == "none"
