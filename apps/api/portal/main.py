"""FastAPI application for the Apex rental portal."""
from __future__ import annotations

import base64
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response

from .core.config import settings
from .core.logging import configure_logging
from .db.session import dispose_engine
from .routers import admin as admin_router
from .routers import client as client_router
from .routers import pages as pages_router
from .services.changes import feed
from .services.pg_listener import PostgresChangeListener

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    listener: PostgresChangeListener | None = None
    if settings.realtime_listen_enabled:
        listener = PostgresChangeListener(
            settings.database_dsn,
            settings.realtime_channel,
            feed,
            ssl=settings.database_ssl_required,
        )
        await listener.start()
    app.state.change_listener = listener
    try:
        yield
    finally:
        if listener is not None:
            await listener.stop()
        await dispose_engine()


app = FastAPI(title=f"{settings.app_name} API", version="0.1.0", lifespan=lifespan)

if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(pages_router.router)
app.include_router(client_router.router, prefix="/api", tags=["client"])
app.include_router(admin_router.router, prefix="/api/admin", tags=["admin"])


FAVICON_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR4nGMAAQAABQABDQottAAAAABJRU5ErkJggg=="
)


@app.get("/api/health", tags=["meta"])
async def health() -> dict[str, str]:
    """Simple liveness probe."""

    return {"status": "ok"}


@app.head("/api/health", tags=["meta"])
async def health_head() -> Response:
    """Allow HEAD for uptime monitors that only need the status code."""

    return Response(status_code=200)


@app.get("/robots.txt", response_class=PlainTextResponse, include_in_schema=False)
async def robots() -> PlainTextResponse:
    """Keep crawlers on the marketing pages and out of the API."""

    return PlainTextResponse("User-agent: *\nDisallow: /api/")


@app.get("/favicon.ico", include_in_schema=False)
async def favicon() -> Response:
    """Return a tiny placeholder favicon."""

    return Response(content=FAVICON_BYTES, media_type="image/png")
