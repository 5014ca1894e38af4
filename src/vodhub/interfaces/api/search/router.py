"""Search API endpoints (streaming search, one-shot search, detail, resources)."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any, cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse

from vodhub.domain.entities.errors import ProviderError, RegistryError
from vodhub.interfaces.app_state import AppState

from .presenter import (
    error_status,
    render_detail,
    render_error,
    render_resource,
    render_results,
    render_sse,
)

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/search", tags=["search"])
detail_router = APIRouter(tags=["detail"])

_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/stream")
async def search_stream(
    request: Request,
    q: str = Query(..., min_length=1, description="Search query"),
) -> StreamingResponse:
    state = cast(AppState, request.app.state)
    query = q.strip()

    async def _frames() -> AsyncIterator[str]:
        events = state.search_uc.dispatch(query)
        try:
            async for event in events:
                yield render_sse(event)
        finally:
            await events.aclose()

    return StreamingResponse(
        _frames(), media_type="text/event-stream", headers=_SSE_HEADERS
    )


@router.get("")
async def search(
    request: Request,
    q: str = Query(..., min_length=1, description="Search query"),
) -> dict[str, Any]:
    state = cast(AppState, request.app.state)
    records = await state.search_uc.search_all(q.strip())
    return render_results(records)


@router.get("/resources")
async def search_resources(request: Request) -> dict[str, Any]:
    state = cast(AppState, request.app.state)
    providers = await state.registry.list_enabled()
    return {"resources": [render_resource(p) for p in providers]}


@detail_router.get("/detail")
async def media_detail(
    request: Request,
    source: str = Query(..., min_length=1, description="Provider key"),
    media_id: str = Query(..., alias="id", min_length=1, description="Provider media id"),
) -> JSONResponse:
    state = cast(AppState, request.app.state)
    try:
        detail = await state.detail_uc.resolve(source, media_id)
    except (ProviderError, RegistryError) as exc:
        status_code = error_status(exc)
        log.info(
            "detail_request_failed",
            provider=source,
            media_id=media_id,
            status_code=status_code,
            error=str(exc),
        )
        return JSONResponse(content=render_error(exc), status_code=status_code)
    return JSONResponse(content=render_detail(detail))
