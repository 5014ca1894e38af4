"""JSON / SSE rendering of search events and detail records."""

from __future__ import annotations

import json
from typing import Any

from vodhub.domain.entities.errors import (
    ChallengeDetected,
    NetworkTimeout,
    ProviderError,
    ProviderNotFoundError,
    RegistryError,
)
from vodhub.domain.entities.events import (
    CompleteEvent,
    SourceErrorEvent,
    SourceResultEvent,
    StartEvent,
    StreamEvent,
)
from vodhub.domain.entities.media import CandidateResult, MediaDetail, ProviderConfig


def render_event(event: StreamEvent) -> dict[str, Any]:
    """Wire payload of one stream event (camelCase keys)."""
    if isinstance(event, StartEvent):
        return {"type": "start", "totalProviders": event.total_providers}
    if isinstance(event, SourceResultEvent):
        return {
            "type": "source_result",
            "provider": event.provider,
            "providerLabel": event.provider_label,
            "results": [r.to_dict() for r in event.records],
        }
    if isinstance(event, SourceErrorEvent):
        return {
            "type": "source_error",
            "provider": event.provider,
            "reason": event.reason,
        }
    if isinstance(event, CompleteEvent):
        return {"type": "complete", "completedProviders": event.completed_providers}
    raise TypeError(f"Unknown stream event: {type(event).__name__}")


def render_sse(event: StreamEvent) -> str:
    """One ``data:`` frame terminated by a blank line."""
    payload = json.dumps(render_event(event), ensure_ascii=False)
    return f"data: {payload}\n\n"


def render_results(records: list[CandidateResult]) -> dict[str, Any]:
    return {"results": [r.to_dict() for r in records]}


def render_detail(detail: MediaDetail) -> dict[str, Any]:
    return detail.to_dict()


def render_resource(provider: ProviderConfig) -> dict[str, str]:
    return {"key": provider.key, "name": provider.display_name, "api": provider.base_url}


def error_status(exc: Exception) -> int:
    """HTTP status for a detail-resolution failure.

    404 unknown provider, 504 timeout, 503 bot challenge, 502 for any
    other upstream failure.
    """
    if isinstance(exc, ProviderNotFoundError):
        return 404
    if isinstance(exc, NetworkTimeout):
        return 504
    if isinstance(exc, ChallengeDetected):
        return 503
    if isinstance(exc, (ProviderError, RegistryError)):
        return 502
    return 500


def render_error(exc: Exception) -> dict[str, str]:
    reason = exc.reason if isinstance(exc, ProviderError) else type(exc).__name__
    return {"error": reason, "detail": str(exc)}
