"""
edge_gate.api.app

FastAPI app factory for the edge gate service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Initialize and dispose shared infrastructure (DB engine, directory HTTP client)
  inside the app lifespan.
- Build the process-wide gate (one directory cache per process).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from edge_gate.api.routers.directory import router as directory_router
from edge_gate.api.routers.health import router as health_router
from edge_gate.api.routers.login import router as login_router
from edge_gate.api.routers.session import router as session_router
from edge_gate.db.init_db import init_db
from edge_gate.db.session import create_engine, create_sessionmaker
from edge_gate.gate.directory import DirectoryView
from edge_gate.gate.middleware import AuthGateMiddleware
from edge_gate.gate.wiring import build_directory, build_gate
from edge_gate.observability.logging import configure_logging, get_logger
from edge_gate.observability.middleware import RequestContextMiddleware
from edge_gate.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings, directory: DirectoryView | None = None) -> FastAPI:
    """
    `directory` overrides the HTTP-backed directory view (tests, embedded setups).
    """

    configure_logging(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, secret_configured=bool(settings.auth_secret))
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            await init_db(engine)

        http: httpx.AsyncClient | None = None
        view = directory
        if view is None and settings.resolved_auth_mode == "multi_user":
            http = httpx.AsyncClient(base_url=settings.directory_base_url)
            view = build_directory(settings=settings, http=http)
        app.state.gate = build_gate(settings=settings, directory=view)

        try:
            yield
        finally:
            if http is not None:
                await http.aclose()
            # Dispose the engine to close pools/FDs gracefully.
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Edge Authorization Gate",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Last added runs first: request context wraps the gate so deny logs carry request ids.
    app.add_middleware(AuthGateMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(health_router, tags=["health"])
    app.include_router(directory_router)
    app.include_router(login_router)
    app.include_router(session_router)

    return app


# --- Module Notes -----------------------------------------------------------
# The gate is built once here and shared by every request; each replica owns its own
# directory cache and no state is coordinated across processes.
