"""FastAPI dependency injection helpers.

Long-lived collaborators are built once by ``create_app`` and kept on
``app.state``; handlers reach them through these functions so tests can
swap them with ``app.dependency_overrides``.
"""

from fastapi import Request

from src.domain.ports import SightingRepository
from src.services.ingestion import SightingIngestionService
from src.workers.dispatcher import NotificationDispatcher


def get_sighting_repository(request: Request) -> SightingRepository:
    return request.app.state.sighting_repository


def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.dispatcher


def get_ingestion_service(request: Request) -> SightingIngestionService:
    state = request.app.state
    return SightingIngestionService(
        repository=state.sighting_repository,
        image_store=state.image_store,
        notifications=state.dispatcher,
        locks=state.subject_locks,
    )
