"""Incremental aggregation of a search event stream.

Consumes StreamEvents for the current query and keeps two views up to
date: the flat result list (arrival order) and the grouped view
(title/year groups with majority-vote stats).

Batching: records of ``source_result`` events go to a pending buffer
which is merged into the flat list ``flush_delay`` seconds after the
first push of a burst; ``complete`` (or the end of the stream) flushes
immediately.  Every flush regroups from scratch.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, Callable, Coroutine, Iterable, Sequence
from typing import Any, Protocol

import structlog

from vodhub.domain.entities.aggregation import (
    AggregationGroup,
    FilterOptions,
    FilterState,
    GroupStats,
    YearOrder,
)
from vodhub.domain.entities.events import (
    CompleteEvent,
    SourceErrorEvent,
    SourceResultEvent,
    StartEvent,
    StreamEvent,
)
from vodhub.domain.entities.media import CandidateResult

log = structlog.get_logger(__name__)


class _ResultSorter(Protocol):
    """Filters and orders the flat and grouped views."""

    def presort_batch(
        self, records: Sequence[CandidateResult], query: str
    ) -> list[CandidateResult]: ...

    def sort_results(
        self, records: Sequence[CandidateResult], query: str, filter_state: FilterState
    ) -> list[CandidateResult]: ...

    def sort_groups(
        self, groups: Sequence[AggregationGroup], query: str, filter_state: FilterState
    ) -> list[AggregationGroup]: ...

    def filter_options(self, records: Iterable[CandidateResult]) -> FilterOptions: ...


# Type aliases for injected callables.
_GroupFn = Callable[[Iterable[CandidateResult]], list[AggregationGroup]]
GroupChangeListener = Callable[[str, GroupStats], None]


class AggregationEngine:
    """Stateful view model for one search session.

    Only the session opened by the latest ``begin()`` is current; events
    of an older session are discarded, so a late provider from a
    superseded search never reaches the views, even when the same query
    was searched again.
    """

    def __init__(
        self,
        *,
        group_fn: _GroupFn,
        sorter: _ResultSorter,
        flush_delay: float = 0.08,
        year_order: YearOrder = "none",
        listener: GroupChangeListener | None = None,
    ) -> None:
        self._group_fn = group_fn
        self._sorter = sorter
        self._flush_delay = flush_delay
        self._listener = listener
        # View ordering the incoming batches are pre-sorted for.
        self.year_order: YearOrder = year_order

        self._query = ""
        self._session = 0
        self._results: list[CandidateResult] = []
        self._groups: list[AggregationGroup] = []
        self._stats: dict[str, GroupStats] = {}
        self._pending: list[CandidateResult] = []
        self._flush_handle: asyncio.TimerHandle | None = None

        self.total_providers = 0
        self.completed_providers = 0
        self.loading = False

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    @property
    def query(self) -> str:
        return self._query

    @property
    def session(self) -> int:
        """Generation number of the latest ``begin()``."""
        return self._session

    def is_current(self, query: str, session: int | None = None) -> bool:
        if session is not None and session != self._session:
            return False
        return bool(self._query) and query.strip() == self._query

    def begin(self, query: str) -> int:
        """Make *query* current, reset every view and counter.

        Returns the new session number; streams bound to an older
        session are dropped even when they carry the same query text.
        """
        self._cancel_flush()
        self._session += 1
        self._query = query.strip()
        self._results = []
        self._groups = []
        self._stats = {}
        self._pending = []
        self.total_providers = 0
        self.completed_providers = 0
        self.loading = bool(self._query)
        log.debug("aggregation_begin", query=self._query, session=self._session)
        return self._session

    def consume(
        self, query: str, events: AsyncIterable[StreamEvent]
    ) -> Coroutine[Any, Any, None]:
        """Apply *events* of *query* until the stream ends or goes stale.

        The stream is bound to the session current when ``consume`` is
        called, not when the returned coroutine first runs.
        """
        return self._consume(self._session, query, events)

    async def _consume(
        self, session: int, query: str, events: AsyncIterable[StreamEvent]
    ) -> None:
        try:
            async for event in events:
                if not self.is_current(query, session):
                    log.info(
                        "aggregation_stale_stream_dropped",
                        query=query.strip(),
                        session=session,
                    )
                    break
                self._apply(event)
        finally:
            aclose = getattr(events, "aclose", None)
            if aclose is not None:
                await aclose()
            if self.is_current(query, session) and self.loading:
                # Stream ended or failed without ``complete``.
                self._flush()
                self.loading = False

    def load(self, query: str, records: Sequence[CandidateResult]) -> None:
        """Replace the views with a fully materialized result list."""
        if not self.is_current(query):
            return
        self._cancel_flush()
        self._pending = []
        self._results = self._incoming(records)
        self.total_providers = 1
        self.completed_providers = 1
        self._regroup()
        self.loading = False

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    def _incoming(self, records: Sequence[CandidateResult]) -> list[CandidateResult]:
        if self.year_order == "none":
            return self._sorter.presort_batch(records, self._query)
        return list(records)

    def _apply(self, event: StreamEvent) -> None:
        if isinstance(event, StartEvent):
            self.total_providers = event.total_providers
            self.completed_providers = 0
        elif isinstance(event, SourceResultEvent):
            self.completed_providers += 1
            if event.records:
                self._pending.extend(self._incoming(event.records))
                self._schedule_flush()
        elif isinstance(event, SourceErrorEvent):
            self.completed_providers += 1
        elif isinstance(event, CompleteEvent):
            self.completed_providers = event.completed_providers
            self._flush()
            self.loading = False

    def _schedule_flush(self) -> None:
        if self._flush_handle is None:
            loop = asyncio.get_running_loop()
            self._flush_handle = loop.call_later(self._flush_delay, self._flush)

    def _cancel_flush(self) -> None:
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None

    def _flush(self) -> None:
        self._cancel_flush()
        if not self._pending:
            return
        batch, self._pending = self._pending, []
        self._results = self._results + batch
        self._regroup()
        log.debug(
            "aggregation_flushed",
            query=self._query,
            appended=len(batch),
            results=len(self._results),
            groups=len(self._groups),
        )

    def _regroup(self) -> None:
        self._groups = self._group_fn(self._results)
        changed: list[AggregationGroup] = []
        for group in self._groups:
            previous = self._stats.get(group.key)
            if previous is not None and previous != group.stats:
                changed.append(group)
            self._stats[group.key] = group.stats

        if self._listener is not None:
            for group in changed:
                self._listener(group.key, group.stats)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def results(self) -> list[CandidateResult]:
        return list(self._results)

    @property
    def groups(self) -> list[AggregationGroup]:
        return list(self._groups)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def filtered_results(self, filter_state: FilterState) -> list[CandidateResult]:
        return self._sorter.sort_results(self._results, self._query, filter_state)

    def filtered_groups(self, filter_state: FilterState) -> list[AggregationGroup]:
        return self._sorter.sort_groups(self._groups, self._query, filter_state)

    def filter_options(self) -> FilterOptions:
        return self._sorter.filter_options(self._results)
