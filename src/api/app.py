"""
FastAPI application factory.

* Registers routes for sightings and admin.
* Owns the notification dispatcher: started on startup, drained on
  shutdown via lifespan events.
* Maps pipeline errors to HTTP responses (400 structured / 500 opaque).
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import limiter
from src.api.routes import admin, sightings
from src.config import settings
from src.domain.errors import DependencyFailure, SightingRejected
from src.domain.ports import ImageStore, SightingRepository
from src.infrastructure.image_store import FilesystemImageStore
from src.infrastructure.locks import SubjectLocks, build_subject_locks
from src.infrastructure.notifications import LoggingNotifier
from src.workers.dispatcher import NotificationDispatcher

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the notification worker on startup; drain it on shutdown."""
    dispatcher: NotificationDispatcher = app.state.dispatcher
    if not dispatcher.running:
        await dispatcher.start()
    yield
    await dispatcher.shutdown()


async def _sighting_rejected_handler(request: Request, exc: SightingRejected):
    return JSONResponse(
        status_code=400,
        content={"code": exc.code.value, "message": exc.message},
    )


async def _dependency_failure_handler(request: Request, exc: DependencyFailure):
    logger.error(
        "Request %s %s failed in %s (tiger_id=%s)",
        request.method, request.url.path, exc.operation, exc.tiger_id,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(
    *,
    repository: Optional[SightingRepository] = None,
    image_store: Optional[ImageStore] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
    subject_locks: Optional[SubjectLocks] = None,
) -> FastAPI:
    app = FastAPI(
        title="Tiger Sighting API",
        description=(
            "Records tiger sightings, rejects near-duplicates of the last "
            "known position, and notifies earlier observers of the same "
            "tiger when it turns up somewhere new."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    if repository is None:
        from src.infrastructure.database import async_session_factory
        from src.infrastructure.repositories import SqlAlchemySightingRepository

        repository = SqlAlchemySightingRepository(async_session_factory)

    if image_store is None:
        image_store = FilesystemImageStore(settings.image_storage_path)
    if dispatcher is None:
        dispatcher = NotificationDispatcher(
            LoggingNotifier(), capacity=settings.notification_queue_capacity
        )
    if subject_locks is None:
        subject_locks = build_subject_locks(
            settings.subject_lock_backend,
            settings.subject_lock_ttl_seconds,
            settings.subject_lock_wait_seconds,
        )

    app.state.sighting_repository = repository
    app.state.image_store = image_store
    app.state.dispatcher = dispatcher
    app.state.subject_locks = subject_locks

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Pipeline errors
    app.add_exception_handler(SightingRejected, _sighting_rejected_handler)
    app.add_exception_handler(DependencyFailure, _dependency_failure_handler)

    # Routers
    app.include_router(sightings.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
