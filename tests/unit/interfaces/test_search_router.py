"""Tests for the search and detail router endpoints."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from vodhub.domain.entities.errors import (
    ChallengeDetected,
    DetailResolutionFailed,
    NetworkTimeout,
    ProviderNotFoundError,
    UnsupportedProviderKind,
)
from vodhub.domain.entities.events import (
    CompleteEvent,
    SourceErrorEvent,
    SourceResultEvent,
    StartEvent,
)
from vodhub.domain.entities.media import MediaDetail
from vodhub.interfaces.api.search import detail_router, router


class _FakeSearch:
    def __init__(self, events) -> None:
        self.events = events
        self.queries: list[str] = []
        self.search_all = AsyncMock(return_value=[])

    async def dispatch(self, query: str):
        self.queries.append(query)
        for event in self.events:
            yield event


def _make_app(
    *,
    search_uc: _FakeSearch | None = None,
    detail_uc: MagicMock | None = None,
    registry: MagicMock | None = None,
) -> FastAPI:
    """Create a minimal FastAPI app with the search routers."""
    app = FastAPI()
    app.include_router(router, prefix="/api/v1")
    app.include_router(detail_router, prefix="/api/v1")

    app.state.search_uc = search_uc or _FakeSearch([])
    app.state.detail_uc = detail_uc or MagicMock()
    app.state.registry = registry or MagicMock()
    return app


def _frames(body: str) -> list[dict]:
    return [
        json.loads(line[len("data: "):])
        for line in body.split("\n")
        if line.startswith("data: ")
    ]


class TestSearchStream:
    def test_streams_event_frames(self, record_factory) -> None:
        record = record_factory(id="9", title="Example Show")
        search_uc = _FakeSearch(
            [
                StartEvent(total_providers=2),
                SourceResultEvent(provider="a", records=(record,), provider_label="Source A"),
                SourceErrorEvent(provider="b", reason="timeout"),
                CompleteEvent(completed_providers=2),
            ]
        )
        client = TestClient(_make_app(search_uc=search_uc))

        resp = client.get("/api/v1/search/stream", params={"q": "  Example Show "})

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/event-stream")
        assert resp.headers["cache-control"] == "no-cache"
        assert search_uc.queries == ["Example Show"]

        frames = _frames(resp.text)
        assert [f["type"] for f in frames] == [
            "start",
            "source_result",
            "source_error",
            "complete",
        ]
        assert frames[0] == {"type": "start", "totalProviders": 2}
        assert frames[1]["providerLabel"] == "Source A"
        assert frames[1]["results"][0]["id"] == "9"
        assert frames[2] == {"type": "source_error", "provider": "b", "reason": "timeout"}
        assert frames[3] == {"type": "complete", "completedProviders": 2}

    def test_missing_query_rejected(self) -> None:
        client = TestClient(_make_app())
        resp = client.get("/api/v1/search/stream")
        assert resp.status_code == 422


class TestSearch:
    def test_returns_flat_results(self, record_factory) -> None:
        search_uc = _FakeSearch([])
        search_uc.search_all.return_value = [record_factory(id="1"), record_factory(id="2")]
        client = TestClient(_make_app(search_uc=search_uc))

        resp = client.get("/api/v1/search", params={"q": "show"})

        assert resp.status_code == 200
        assert [r["id"] for r in resp.json()["results"]] == ["1", "2"]
        search_uc.search_all.assert_awaited_once_with("show")

    def test_resources(self, api_provider, scrape_provider) -> None:
        registry = MagicMock()
        registry.list_enabled = AsyncMock(return_value=[api_provider, scrape_provider])
        client = TestClient(_make_app(registry=registry))

        resp = client.get("/api/v1/search/resources")

        assert resp.status_code == 200
        assert resp.json() == {
            "resources": [
                {"key": "a", "name": "Source A", "api": "https://a.example/api.php/provide/vod"},
                {"key": "gv", "name": "GV Site", "api": "https://gv.example"},
            ]
        }


class TestDetail:
    def test_success(self) -> None:
        detail_uc = MagicMock()
        detail_uc.resolve = AsyncMock(
            return_value=MediaDetail(
                id="42",
                title="Example Show",
                provider_key="a",
                provider_label="Source A",
                episodes=("https://cdn.example/1.m3u8",),
                source_url="https://a.example/detail/42",
            )
        )
        client = TestClient(_make_app(detail_uc=detail_uc))

        resp = client.get("/api/v1/detail", params={"source": "a", "id": "42"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == "42"
        assert body["episodes"] == ["https://cdn.example/1.m3u8"]
        assert body["source_url"] == "https://a.example/detail/42"
        detail_uc.resolve.assert_awaited_once_with("a", "42")

    @pytest.mark.parametrize(
        ("exc", "status", "error"),
        [
            (ProviderNotFoundError("unknown provider 'x'"), 404, "ProviderNotFoundError"),
            (NetworkTimeout("slow"), 504, "timeout"),
            (ChallengeDetected("blocked"), 503, "challenge"),
            (DetailResolutionFailed("no episodes"), 502, "detail_unresolved"),
            (UnsupportedProviderKind("ftp"), 502, "UnsupportedProviderKind"),
        ],
    )
    def test_errors_mapped_to_status(self, exc: Exception, status: int, error: str) -> None:
        detail_uc = MagicMock()
        detail_uc.resolve = AsyncMock(side_effect=exc)
        client = TestClient(_make_app(detail_uc=detail_uc))

        resp = client.get("/api/v1/detail", params={"source": "x", "id": "1"})

        assert resp.status_code == status
        assert resp.json() == {"error": error, "detail": str(exc)}

    def test_missing_id_rejected(self) -> None:
        client = TestClient(_make_app())
        resp = client.get("/api/v1/detail", params={"source": "a"})
        assert resp.status_code == 422
