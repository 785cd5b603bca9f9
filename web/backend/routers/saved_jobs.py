#!/usr/bin/env python3
"""
Saved job endpoints - candidate bookmarks.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.context import RequestContext
from ..auth import get_request_context
from ..config import AppConfig
from ..dependencies import get_app_config, get_db
from ..models.requests import SavedJobNote
from ..services.saved_job_service import SavedJobService
from ..utils import validate_uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/saved-jobs", tags=["saved-jobs"])


def get_saved_job_service(
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config)
) -> SavedJobService:
    return SavedJobService(db, config)


@router.get("")
def list_saved_jobs(
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    sort_order: Optional[str] = Query(default=None, alias="sortOrder"),
    service: SavedJobService = Depends(get_saved_job_service),
    ctx: RequestContext = Depends(get_request_context)
):
    result = service.list_saved(ctx, service.page_request(page, limit), sort_by, sort_order)
    return {'success': True, **result}


@router.get("/count")
def get_saved_jobs_count(
    service: SavedJobService = Depends(get_saved_job_service),
    ctx: RequestContext = Depends(get_request_context)
):
    return {'success': True, 'count': service.count(ctx)}


@router.post("/{job_id}/save", status_code=201)
def save_job(
    job_id: str,
    service: SavedJobService = Depends(get_saved_job_service),
    ctx: RequestContext = Depends(get_request_context)
):
    saved = service.save(validate_uuid(job_id, "job_id"), ctx)
    return {'success': True, 'message': "Job saved successfully", 'savedJob': saved}


@router.delete("/{job_id}/unsave")
def unsave_job(
    job_id: str,
    service: SavedJobService = Depends(get_saved_job_service),
    ctx: RequestContext = Depends(get_request_context)
):
    service.unsave(validate_uuid(job_id, "job_id"), ctx)
    return {'success': True, 'message': "Job removed from saved list"}


@router.get("/{job_id}/check")
def check_job_saved(
    job_id: str,
    service: SavedJobService = Depends(get_saved_job_service),
    ctx: RequestContext = Depends(get_request_context)
):
    return {'success': True, 'isSaved': service.is_saved(validate_uuid(job_id, "job_id"), ctx)}


@router.put("/{job_id}/note")
def set_saved_job_note(
    job_id: str,
    data: SavedJobNote,
    service: SavedJobService = Depends(get_saved_job_service),
    ctx: RequestContext = Depends(get_request_context)
):
    saved = service.set_note(validate_uuid(job_id, "job_id"), data.notes, ctx)
    return {'success': True, 'message': "Note added successfully", 'savedJob': saved}
