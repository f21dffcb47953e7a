"""
Admin / observability endpoints
===============================

GET /api/v1/admin/health         -- simple health check
GET /api/v1/admin/notifications  -- notification dispatcher counters
"""

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_dispatcher
from src.api.middleware import limiter
from src.api.schemas import DispatcherStatsResponse, HealthResponse
from src.config import settings
from src.workers.dispatcher import NotificationDispatcher

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/notifications",
    response_model=DispatcherStatsResponse,
    summary="Notification queue depth and delivery counters",
)
@limiter.limit(settings.rate_limit)
async def notification_stats(
    request: Request,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return DispatcherStatsResponse(**dispatcher.stats())


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
