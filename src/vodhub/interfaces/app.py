"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from vodhub.infrastructure.config import AppConfig
from vodhub.interfaces.app_state import AppState
from vodhub.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration only, no resource initialization.

    Resources (HTTP client, cache, registry, adapters) are created in lifespan().
    """
    app = FastAPI(
        title="vodhub",
        description="Multi-provider video catalog search aggregator",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from vodhub.interfaces.api.search import detail_router, router as search_router

    app.include_router(search_router, prefix="/api/v1")
    app.include_router(detail_router, prefix="/api/v1")

    @app.get("/api/v1/healthz")
    async def healthz() -> dict[str, str | int]:
        """Liveness probe: 200 as long as the process is running."""
        registry = getattr(app.state, "registry", None)
        providers = await registry.list_enabled() if registry else []
        return {"status": "ok", "providers": len(providers)}

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = getattr(locals().get("response", None), "status_code", 500)

            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query),
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
