"""
FastAPI application entry point.

Initializes FastAPI app, registers routers, adds middleware, and runs the
queue loops (dispatcher, worker, stuck-file sweeper, mirror drainer) for
the lifetime of the app.

Dependencies: fastapi, backend.api, backend.core.queue, backend.observability, backend.configs
System role: Application initialization and configuration
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.api import api_router
from backend.boundary.db.connection import (
    create_all_tables,
    get_async_engine,
    get_async_session_factory,
)
from backend.boundary.mirror import MirrorClient
from backend.configs import Settings, get_settings
from backend.core.ai import AIAnalyzer
from backend.core.ingestion import TextExtractor
from backend.core.queue import Dispatcher, StuckFileSweeper, Worker, build_registry
from backend.core.queue.loop import PollingLoop
from backend.core.queue.registry import HandlerRegistry
from backend.core.sync import MirrorSyncDrainer
from backend.observability.logger import configure_logging
from backend.observability.middleware import RequestIDMiddleware, RequestLoggingMiddleware

logger = logging.getLogger(__name__)


def build_loops(settings: Settings, registry: HandlerRegistry) -> list[PollingLoop]:
    """
    Create the background loops enabled by configuration.

    Args:
        settings: Application settings
        registry: Handlers the worker dispatches to

    Returns:
        list[PollingLoop]: Loops to start, in start order
    """
    session_factory = get_async_session_factory()
    queue = settings.queue
    loops: list[PollingLoop] = []

    if queue.enabled:
        loops.extend(
            [
                Dispatcher(
                    session_factory,
                    interval_seconds=queue.dispatch_interval_seconds,
                    enforce_max_attempts=queue.enforce_max_attempts,
                ),
                Worker(
                    session_factory,
                    registry,
                    batch_size=queue.worker_batch_size,
                    interval_seconds=queue.worker_interval_seconds,
                    handler_timeout_seconds=queue.handler_timeout_seconds,
                ),
                StuckFileSweeper(
                    session_factory,
                    interval_seconds=queue.sweep_interval_seconds,
                    stuck_after_seconds=queue.stuck_after_seconds,
                    max_analysis_jobs=queue.sweep_max_analysis_jobs,
                    priority=queue.default_priority,
                    max_attempts=queue.default_max_attempts,
                ),
            ]
        )

    if settings.mirror.enabled:
        loops.append(
            MirrorSyncDrainer(
                session_factory,
                MirrorClient(settings.mirror),
                interval_seconds=settings.mirror.interval_seconds,
                batch_size=settings.mirror.batch_size,
                max_attempts=settings.mirror.max_attempts,
                delivered_retention_seconds=settings.mirror.delivered_retention_seconds,
                failed_retention_seconds=settings.mirror.failed_retention_seconds,
            )
        )

    return loops


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Creates missing tables, then starts the queue loops; stops them on
    shutdown.
    """
    # Startup
    settings = get_settings()
    configure_logging(getattr(logging, settings.log_level.upper(), logging.INFO))
    logger.info("Application startup: logging configured")

    try:
        await create_all_tables(get_async_engine())
    except Exception as e:
        logger.exception("Failed to initialize database", extra={"error": str(e)})
        raise

    loops = build_loops(settings, app.state.registry)
    for loop in loops:
        loop.start()
    app.state.loops = loops
    logger.info(
        "Application startup complete",
        extra={"loops": ",".join(loop.name for loop in loops) or "none"},
    )

    yield

    # Shutdown
    for loop in reversed(loops):
        await loop.stop()
    await get_async_engine().dispose()
    logger.info("Application shutdown")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Knowledge Base Ingestion API",
        description="Multi-tenant file ingestion with text extraction and AI analysis",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.registry = build_registry(
        extractor=TextExtractor(max_chars=settings.storage.max_extracted_chars),
        analyzer=AIAnalyzer(settings.ai),
        priority=settings.queue.default_priority,
        max_attempts=settings.queue.default_max_attempts,
    )

    # Add observability middleware (added first = last to execute)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register API routes
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


def run() -> None:
    """Console entry point."""
    import uvicorn

    uvicorn.run("backend.main:app", host="0.0.0.0", port=8082)


if __name__ == "__main__":
    run()
