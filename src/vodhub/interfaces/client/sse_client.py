"""Client for the ``/api/v1/search/stream`` endpoint of a remote server."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Any

import httpx
import structlog

from vodhub.domain.entities.events import (
    CompleteEvent,
    SourceErrorEvent,
    SourceResultEvent,
    StartEvent,
    StreamEvent,
)
from vodhub.domain.entities.media import CandidateResult

log = structlog.get_logger(__name__)

STREAM_PATH = "/api/v1/search/stream"


def parse_event(payload: dict[str, Any]) -> StreamEvent | None:
    """Decode one wire payload; None for unknown event types."""
    kind = payload.get("type")
    if kind == "start":
        return StartEvent(total_providers=int(payload.get("totalProviders", 0)))
    if kind == "source_result":
        return SourceResultEvent(
            provider=str(payload.get("provider", "")),
            records=tuple(
                CandidateResult.from_dict(r) for r in payload.get("results") or ()
            ),
            provider_label=str(payload.get("providerLabel", "")),
        )
    if kind == "source_error":
        return SourceErrorEvent(
            provider=str(payload.get("provider", "")),
            reason=str(payload.get("reason", "")),
        )
    if kind == "complete":
        return CompleteEvent(
            completed_providers=int(payload.get("completedProviders", 0))
        )
    return None


class SseEventStream:
    """Reads the search event stream of a vodhub server.

    Usage::

        stream = SseEventStream("http://localhost:7979")
        async for event in stream.events("query"):
            ...

    A client passed in is shared and never closed here.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client
        self._timeout = timeout

    async def events(self, query: str) -> AsyncIterator[StreamEvent]:
        """Yield decoded events until ``complete`` or the server closes."""
        owned = self._client is None
        client = self._client or httpx.AsyncClient(timeout=self._timeout)
        url = f"{self.base_url}{STREAM_PATH}"
        try:
            async with client.stream(
                "GET",
                url,
                params={"q": query},
                headers={"Accept": "text/event-stream"},
            ) as resp:
                resp.raise_for_status()
                async for line in resp.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    try:
                        payload = json.loads(line[len("data:"):].strip())
                    except json.JSONDecodeError:
                        log.warning("sse_frame_malformed", url=url, line=line[:200])
                        continue
                    if not isinstance(payload, dict):
                        continue
                    event = parse_event(payload)
                    if event is None:
                        log.debug("sse_event_unknown", type=payload.get("type"))
                        continue
                    yield event
                    if isinstance(event, CompleteEvent):
                        return
        finally:
            if owned:
                await client.aclose()
