"""FastAPI application factory.

Creates the app with logging middleware, metrics middleware, CORS, lifespan
wiring of the record store and tweet services, and the API router.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import Response

from src.tweetdesk.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.tweetdesk.api.v1.router import router as v1_router
from src.tweetdesk.config import get_settings
from src.tweetdesk.core.monitoring import MetricsMiddleware, get_metrics_response
from src.tweetdesk.services.llm import get_llm_service
from src.tweetdesk.services.x_platform import XPublishGateway
from src.tweetdesk.tweets.generation import (
    GenerationAdapter,
    GenerationQueue,
    ResponseParser,
)
from src.tweetdesk.tweets.lifecycle import TweetLifecycleManager
from src.tweetdesk.tweets.repository import JsonFileRecordStore
from src.tweetdesk.tweets.transcripts import TranscriptService


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: wire services on startup, drain generation on shutdown."""
    log = structlog.get_logger(__name__)
    settings = get_settings()
    configure_structlog()

    store = JsonFileRecordStore(settings.DATA_DIR)
    llm_service = get_llm_service()
    gateway = XPublishGateway()
    lifecycle = TweetLifecycleManager(store, gateway)
    queue = GenerationQueue(
        store=store,
        adapter=GenerationAdapter(llm_service, max_tokens=settings.LLM_MAX_TOKENS),
        parser=ResponseParser(),
        lifecycle=lifecycle,
    )

    app.state.settings = settings
    app.state.record_store = store
    app.state.llm_service = llm_service
    app.state.publish_gateway = gateway
    app.state.lifecycle_manager = lifecycle
    app.state.generation_queue = queue
    app.state.transcript_service = TranscriptService(
        store=store,
        queue=queue,
        lifecycle=lifecycle,
        max_chars=settings.MAX_TRANSCRIPT_CHARS,
    )

    log.info(
        "app.started",
        environment=settings.ENVIRONMENT.value,
        data_dir=settings.DATA_DIR,
        llm_available=llm_service.available,
        auth_enabled=settings.AUTH_ENABLED,
    )

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    if queue.in_flight:
        log.info("app.draining_generation", in_flight=queue.in_flight)
    await queue.drain()
    log.info("app.stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="TweetDesk API",
        version=settings.APP_VERSION,
        description="Meeting transcript to X post curation service",
        lifespan=lifespan,
    )

    # Middleware is added in reverse order (last added = outermost)

    # CORS middleware
    if settings.CORS_ALLOWED_ORIGINS == "*":
        origins = ["*"]
    else:
        origins = [o.strip() for o in settings.CORS_ALLOWED_ORIGINS.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging middleware (logs every request with timing)
    app.add_middleware(LoggingMiddleware)

    # Metrics middleware (outermost -- records Prometheus metrics for all requests)
    app.add_middleware(MetricsMiddleware)

    app.include_router(v1_router)

    # Prometheus metrics endpoint (infrastructure route, outside the API router)
    @app.get("/metrics", include_in_schema=False)
    async def metrics(request: Request) -> Response:
        """Prometheus metrics endpoint."""
        return get_metrics_response()

    return app


# Module-level app for uvicorn
app = create_app()
