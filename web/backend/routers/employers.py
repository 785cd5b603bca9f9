#!/usr/bin/env python3
"""
Public employer directory.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from core.context import RequestContext
from core.filters.queries import EmployerSearchParams
from ..auth import get_optional_context, get_request_context
from ..config import AppConfig
from ..dependencies import get_app_config, get_db
from ..services.employer_profile_service import EmployerProfileService
from ..utils import validate_uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/employers", tags=["employers"])


def get_employer_service(
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config)
) -> EmployerProfileService:
    return EmployerProfileService(db, config)


@router.get("")
def list_employers(
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    search: Optional[str] = None,
    location: Optional[str] = None,
    industry_type: Optional[str] = Query(default=None, alias="industryType"),
    featured: Optional[bool] = None,
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    sort_order: Optional[str] = Query(default=None, alias="sortOrder"),
    service: EmployerProfileService = Depends(get_employer_service)
):
    params = EmployerSearchParams(
        search=search,
        location=location,
        industry_type=industry_type,
        featured=featured or None,
    )
    result = service.list_employers(params, service.page_request(page, limit), sort_by, sort_order)
    return {'success': True, **result}


@router.get("/featured")
def get_featured_employers(
    limit: int = Query(default=6, ge=1, le=50),
    service: EmployerProfileService = Depends(get_employer_service)
):
    return {'success': True, **service.featured(limit)}


@router.get("/{employer_id}")
def get_employer(
    employer_id: str,
    service: EmployerProfileService = Depends(get_employer_service),
    ctx: Optional[RequestContext] = Depends(get_optional_context)
):
    """Employer detail with jobs split into active and closed, stats and recent applications."""
    return {'success': True, **service.employer_details(validate_uuid(employer_id, "id"), ctx)}


@router.get("/{employer_id}/jobs")
def get_employer_jobs(
    employer_id: str,
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    status: Optional[str] = None,
    service: EmployerProfileService = Depends(get_employer_service)
):
    result = service.employer_jobs(
        validate_uuid(employer_id, "id"), service.page_request(page, limit), status=status
    )
    return {'success': True, **result}


@router.put("/{employer_id}")
def update_employer(
    employer_id: str,
    data: Dict[str, Any] = Body(...),
    service: EmployerProfileService = Depends(get_employer_service),
    ctx: RequestContext = Depends(get_request_context)
):
    employer = service.update(validate_uuid(employer_id, "id"), data, ctx)
    return {'success': True, 'message': "Employer profile updated successfully", 'employer': employer}
