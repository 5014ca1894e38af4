"""Search fan-out/fan-in use case.

One query -> one task per enabled provider -> lifecycle events streamed
in completion order.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Mapping
from typing import Protocol

import structlog

from vodhub.domain.entities.errors import ProviderError
from vodhub.domain.entities.events import (
    CompleteEvent,
    SourceErrorEvent,
    SourceResultEvent,
    StartEvent,
    StreamEvent,
    TerminalEvent,
)
from vodhub.domain.entities.media import CandidateResult, ProviderConfig
from vodhub.domain.ports.provider_adapter import ProviderAdapterPort
from vodhub.domain.ports.provider_registry import ProviderRegistryPort
from vodhub.domain.ports.search_history import SearchHistoryPort

log = structlog.get_logger(__name__)


class _SearchConfig(Protocol):
    """Live search settings; read once per dispatch."""

    max_pages: int


class SearchDispatchUseCase:
    """Dispatches a query to every enabled provider concurrently.

    Event order per dispatch:
        1. ``StartEvent(N)``
        2. N terminal events, first-finished-first-emitted
        3. ``CompleteEvent(N)``

    No global timeout and no retries: each adapter bounds its own
    requests.  Abandoning the iterator cancels provider tasks still
    running.
    """

    def __init__(
        self,
        *,
        registry: ProviderRegistryPort,
        adapters: Mapping[str, ProviderAdapterPort],
        config: _SearchConfig,
        history: SearchHistoryPort | None = None,
    ) -> None:
        self._registry = registry
        self._adapters = dict(adapters)
        self._config = config
        self._history = history
        self._background: set[asyncio.Task[None]] = set()

    def _record_history(self, query: str) -> None:
        history = self._history
        if history is None:
            return

        async def _record() -> None:
            try:
                await history.record(query)
            except Exception as exc:  # noqa: BLE001
                log.warning("search_history_record_failed", query=query, error=str(exc))

        task = asyncio.create_task(_record())
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _search_provider(
        self,
        provider: ProviderConfig,
        query: str,
        max_pages: int,
    ) -> TerminalEvent:
        adapter = self._adapters.get(provider.kind)
        if adapter is None:
            log.warning("provider_kind_unsupported", provider=provider.key, kind=provider.kind)
            return SourceErrorEvent(provider=provider.key, reason="unsupported_kind")

        try:
            records = await adapter.search(provider, query, max_pages=max_pages)
        except ProviderError as exc:
            log.warning("provider_search_error", provider=provider.key, reason=exc.reason)
            return SourceErrorEvent(provider=provider.key, reason=exc.reason)
        except Exception as exc:  # noqa: BLE001
            log.exception("provider_search_crashed", provider=provider.key)
            return SourceErrorEvent(
                provider=provider.key, reason=f"{type(exc).__name__}: {exc}"
            )

        return SourceResultEvent(
            provider=provider.key,
            records=tuple(records),
            provider_label=provider.display_name,
        )

    async def dispatch(self, query: str) -> AsyncIterator[StreamEvent]:
        """Stream lifecycle events for *query*."""
        max_pages = self._config.max_pages
        providers = await self._registry.list_enabled()
        self._record_history(query)

        log.info(
            "dispatch_start",
            query=query,
            providers=len(providers),
            max_pages=max_pages,
        )
        yield StartEvent(total_providers=len(providers))

        done: asyncio.Queue[TerminalEvent] = asyncio.Queue()

        async def _run(provider: ProviderConfig) -> None:
            done.put_nowait(await self._search_provider(provider, query, max_pages))

        tasks = [
            asyncio.create_task(_run(p), name=f"search:{p.key}") for p in providers
        ]
        completed = 0
        try:
            while completed < len(tasks):
                event = await done.get()
                completed += 1
                yield event
        finally:
            pending = [t for t in tasks if not t.done()]
            for task in pending:
                task.cancel()
            if pending:
                log.info("dispatch_abandoned", query=query, cancelled=len(pending))

        log.info("dispatch_complete", query=query, completed=completed)
        yield CompleteEvent(completed_providers=completed)

    async def search_all(self, query: str) -> list[CandidateResult]:
        """Run a full dispatch and return all records in arrival order."""
        results: list[CandidateResult] = []
        async for event in self.dispatch(query):
            if isinstance(event, SourceResultEvent):
                results.extend(event.records)
        return results
