"""
Sighting endpoints
==================

POST /api/v1/sightings  -- report a sighting (multipart: sightingInfo + image)
GET  /api/v1/sightings  -- list a tiger's sightings, newest first
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from pydantic import ValidationError

from src.api.dependencies import get_ingestion_service, get_sighting_repository
from src.api.middleware import limiter
from src.api.pagination import page_window
from src.api.schemas import ErrorResponse, SightingInfo, SightingResponse
from src.config import settings
from src.domain.ports import SightingRepository
from src.services.ingestion import SightingIngestionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sightings", tags=["sightings"])


@router.post(
    "",
    status_code=201,
    response_model=SightingResponse,
    summary="Report a tiger sighting",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid or duplicate sighting"},
        500: {"description": "Repository or image storage failure"},
    },
)
@limiter.limit(settings.rate_limit)
async def create_sighting(
    request: Request,
    sighting_info: Optional[str] = Form(None, alias="sightingInfo"),
    image: Optional[UploadFile] = File(None),
    service: SightingIngestionService = Depends(get_ingestion_service),
):
    if not sighting_info:
        raise HTTPException(status_code=400, detail="Invalid sighting data")
    try:
        info = SightingInfo.model_validate_json(sighting_info)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid sighting data")

    if image is None:
        raise HTTPException(status_code=400, detail="Could not get uploaded file")
    limit = settings.max_upload_bytes
    if image.size is not None and image.size > limit:
        raise HTTPException(status_code=413, detail="Uploaded file is too large")
    # Never buffer more than one byte past the limit
    data = await image.read(limit + 1)
    if len(data) > limit:
        raise HTTPException(status_code=413, detail="Uploaded file is too large")
    ext = os.path.splitext(image.filename or "")[1]

    sighting = await service.ingest(info.to_entity(), data, ext)
    return SightingResponse.model_validate(sighting)


@router.get(
    "",
    response_model=list[SightingResponse],
    summary="List sightings of a tiger, newest first",
)
@limiter.limit(settings.rate_limit)
async def list_sightings(
    request: Request,
    tiger_id: Optional[str] = Query(None, alias="tigerID"),
    page: Optional[str] = Query(None),
    page_size: Optional[str] = Query(None, alias="pageSize"),
    repo: SightingRepository = Depends(get_sighting_repository),
):
    if not tiger_id:
        raise HTTPException(status_code=400, detail="Tiger ID is required")
    try:
        tid = int(tiger_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid Tiger ID")

    limit, offset = page_window(page, page_size)
    try:
        sightings = await repo.list_sightings(tid, limit, offset)
    except Exception:
        logger.exception("list_sightings failed for tiger %d", tid)
        raise HTTPException(status_code=500, detail="Failed to fetch sightings")
    return [SightingResponse.model_validate(s) for s in sightings]
