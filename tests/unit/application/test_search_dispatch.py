"""Tests for SearchDispatchUseCase fan-out/fan-in."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from vodhub.application.use_cases.search_dispatch import SearchDispatchUseCase
from vodhub.domain.entities.errors import NetworkTimeout
from vodhub.domain.entities.events import (
    CompleteEvent,
    SourceErrorEvent,
    SourceResultEvent,
    StartEvent,
)
from vodhub.domain.entities.media import ProviderConfig


def _provider(key: str, kind: str = "api") -> ProviderConfig:
    return ProviderConfig(
        key=key,
        display_name=f"Source {key.upper()}",
        base_url=f"https://{key}.example/api.php/provide/vod",
        kind=kind,  # type: ignore[arg-type]
    )


class _GatedAdapter:
    """Adapter whose per-provider outcome is released by an asyncio.Event."""

    kind = "api"

    def __init__(self, outcomes: dict[str, Any]) -> None:
        self.outcomes = outcomes
        self.gates = {key: asyncio.Event() for key in outcomes}
        self.cancelled: list[str] = []
        self.calls: list[tuple[str, str, int]] = []

    async def search(self, provider: ProviderConfig, query: str, *, max_pages: int):
        self.calls.append((provider.key, query, max_pages))
        try:
            await self.gates[provider.key].wait()
        except asyncio.CancelledError:
            self.cancelled.append(provider.key)
            raise
        outcome = self.outcomes[provider.key]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def resolve_detail(self, provider: ProviderConfig, media_id: str):
        raise NotImplementedError


def _registry(*providers: ProviderConfig) -> MagicMock:
    registry = MagicMock()
    registry.list_enabled = AsyncMock(return_value=list(providers))
    return registry


def _use_case(adapter: _GatedAdapter, *providers: ProviderConfig, history=None):
    return SearchDispatchUseCase(
        registry=_registry(*providers),
        adapters={"api": adapter},
        config=SimpleNamespace(max_pages=3),
        history=history,
    )


class TestDispatch:
    @pytest.mark.asyncio()
    async def test_events_in_completion_order(self, record_factory) -> None:
        rec_a = record_factory(id="1", provider_key="a")
        rec_b = record_factory(id="2", provider_key="b")
        adapter = _GatedAdapter({"a": [rec_a], "b": [rec_b]})
        uc = _use_case(adapter, _provider("a"), _provider("b"))

        stream = uc.dispatch("show")
        assert await stream.__anext__() == StartEvent(total_providers=2)

        adapter.gates["b"].set()
        first = await stream.__anext__()
        adapter.gates["a"].set()
        second = await stream.__anext__()
        last = await stream.__anext__()

        assert isinstance(first, SourceResultEvent)
        assert first.provider == "b"
        assert first.records == (rec_b,)
        assert first.provider_label == "Source B"
        assert isinstance(second, SourceResultEvent)
        assert second.provider == "a"
        assert last == CompleteEvent(completed_providers=2)

        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

    @pytest.mark.asyncio()
    async def test_max_pages_passed_through(self) -> None:
        adapter = _GatedAdapter({"a": []})
        adapter.gates["a"].set()
        uc = _use_case(adapter, _provider("a"))

        events = [e async for e in uc.dispatch("q")]

        assert adapter.calls == [("a", "q", 3)]
        assert events[1] == SourceResultEvent(provider="a", records=(), provider_label="Source A")

    @pytest.mark.asyncio()
    async def test_no_providers(self) -> None:
        uc = _use_case(_GatedAdapter({}))
        events = [e async for e in uc.dispatch("q")]
        assert events == [StartEvent(total_providers=0), CompleteEvent(completed_providers=0)]

    @pytest.mark.asyncio()
    async def test_unsupported_kind(self) -> None:
        uc = _use_case(_GatedAdapter({}), _provider("x", kind="scrape"))
        events = [e async for e in uc.dispatch("q")]
        assert events[1] == SourceErrorEvent(provider="x", reason="unsupported_kind")

    @pytest.mark.asyncio()
    async def test_provider_error_reason(self) -> None:
        adapter = _GatedAdapter({"a": NetworkTimeout("slow")})
        adapter.gates["a"].set()
        uc = _use_case(adapter, _provider("a"))

        events = [e async for e in uc.dispatch("q")]

        assert events[1] == SourceErrorEvent(provider="a", reason="timeout")

    @pytest.mark.asyncio()
    async def test_unexpected_exception_isolated(self, record_factory) -> None:
        adapter = _GatedAdapter({"a": RuntimeError("boom"), "b": [record_factory()]})
        adapter.gates["a"].set()
        adapter.gates["b"].set()
        uc = _use_case(adapter, _provider("a"), _provider("b"))

        events = [e async for e in uc.dispatch("q")]

        errors = [e for e in events if isinstance(e, SourceErrorEvent)]
        results = [e for e in events if isinstance(e, SourceResultEvent)]
        assert errors == [SourceErrorEvent(provider="a", reason="RuntimeError: boom")]
        assert len(results) == 1
        assert events[-1] == CompleteEvent(completed_providers=2)

    @pytest.mark.asyncio()
    async def test_abandoned_iterator_cancels_pending(self, record_factory) -> None:
        adapter = _GatedAdapter({"a": [record_factory()], "b": []})
        uc = _use_case(adapter, _provider("a"), _provider("b"))

        stream = uc.dispatch("q")
        await stream.__anext__()
        adapter.gates["a"].set()
        await stream.__anext__()
        await stream.aclose()
        await asyncio.sleep(0)

        assert adapter.cancelled == ["b"]

    @pytest.mark.asyncio()
    async def test_history_recorded(self) -> None:
        history = MagicMock()
        history.record = AsyncMock()
        uc = _use_case(_GatedAdapter({}), history=history)

        _ = [e async for e in uc.dispatch("show")]
        await asyncio.sleep(0)

        history.record.assert_awaited_once_with("show")

    @pytest.mark.asyncio()
    async def test_history_failure_does_not_break_dispatch(self) -> None:
        history = MagicMock()
        history.record = AsyncMock(side_effect=RuntimeError("disk full"))
        uc = _use_case(_GatedAdapter({}), history=history)

        events = [e async for e in uc.dispatch("show")]
        await asyncio.sleep(0)

        assert events[-1] == CompleteEvent(completed_providers=0)


class TestSearchAll:
    @pytest.mark.asyncio()
    async def test_collects_records(self, record_factory) -> None:
        rec_a = record_factory(id="1", provider_key="a")
        rec_b = record_factory(id="2", provider_key="b")
        adapter = _GatedAdapter({"a": [rec_a], "b": [rec_b], "c": NetworkTimeout()})
        for gate in adapter.gates.values():
            gate.set()
        uc = _use_case(adapter, _provider("a"), _provider("b"), _provider("c"))

        results = await uc.search_all("q")

        assert sorted(r.id for r in results) == ["1", "2"]
