#!/usr/bin/env python3
"""
Job endpoints - public listing and search, employer management.

Static paths (/search, /filters, /employer/...) are declared before
/{job_id} so they are not captured as identifiers.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.context import RequestContext
from core.filters.queries import JobListParams, JobSearchParams
from core.utils import split_csv
from ..auth import get_optional_context, require_admin, require_employer
from ..config import AppConfig
from ..dependencies import get_app_config, get_db
from ..models.requests import JobCreate, JobPromote, JobUpdate
from ..services.job_service import JobService
from ..utils import validate_uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


@router.get("")
def list_jobs(
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    search: Optional[str] = None,
    job_type: Optional[str] = Query(default=None, alias="jobType"),
    location: Optional[str] = None,
    experience_level: Optional[str] = Query(default=None, alias="experienceLevel"),
    job_category: Optional[str] = Query(default=None, alias="jobCategory"),
    is_remote: Optional[bool] = Query(default=None, alias="isRemote"),
    min_salary: Optional[int] = Query(default=None, alias="minSalary", ge=0),
    max_salary: Optional[int] = Query(default=None, alias="maxSalary", ge=0),
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    sort_order: Optional[str] = Query(default=None, alias="sortOrder"),
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
    ctx: Optional[RequestContext] = Depends(get_optional_context)
):
    """List open jobs. Salary bounds match any overlapping job range."""
    service = JobService(db, config)
    params = JobListParams(
        search=search,
        job_type=job_type,
        location=location,
        experience_level=experience_level,
        job_category=job_category,
        is_remote=is_remote,
        min_salary=min_salary,
        max_salary=max_salary,
    )
    result = service.list_jobs(params, service.page_request(page, limit), sort_by, sort_order, ctx)
    return {'success': True, **result}


@router.get("/search")
def search_jobs(
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    search: Optional[str] = None,
    keyword: Optional[str] = None,
    job_title: Optional[str] = Query(default=None, alias="jobTitle"),
    position: Optional[str] = None,
    location: Optional[str] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    zip_code: Optional[str] = Query(default=None, alias="zipCode"),
    country: Optional[str] = None,
    tags: Optional[List[str]] = Query(default=None),
    job_type: Optional[str] = Query(default=None, alias="jobType"),
    experience_level: Optional[str] = Query(default=None, alias="experienceLevel"),
    job_category: Optional[str] = Query(default=None, alias="jobCategory"),
    is_remote: Optional[bool] = Query(default=None, alias="isRemote"),
    min_salary: Optional[int] = Query(default=None, alias="minSalary", ge=0),
    max_salary: Optional[int] = Query(default=None, alias="maxSalary", ge=0),
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    sort_order: Optional[str] = Query(default=None, alias="sortOrder"),
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
    ctx: Optional[RequestContext] = Depends(get_optional_context)
):
    """
    Advanced search.

    Tags may be repeated (?tags=a&tags=b) or comma separated; any match counts.
    """
    service = JobService(db, config)
    params = JobSearchParams(
        search=search,
        keyword=keyword,
        job_title=job_title,
        position=position,
        location=location,
        city=city,
        state=state,
        zip_code=zip_code,
        country=country,
        tags=[t for raw in (tags or []) for t in split_csv(raw)],
        job_type=job_type,
        experience_level=experience_level,
        job_category=job_category,
        is_remote=is_remote,
        min_salary=min_salary,
        max_salary=max_salary,
    )
    result = service.search_jobs(params, service.page_request(page, limit), sort_by, sort_order, ctx)
    return {'success': True, **result}


@router.get("/filters")
def get_job_filters(
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config)
):
    return {'success': True, 'filters': JobService(db, config).filter_options()}


@router.get("/employer/my-jobs")
def get_my_jobs(
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    status: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
    ctx: RequestContext = Depends(require_employer)
):
    """The employer's own jobs with per-job application breakdowns."""
    service = JobService(db, config)
    result = service.employer_jobs(ctx, service.page_request(page, limit), status=status, search=search)
    return {'success': True, **result}


@router.get("/employer/stats")
def get_my_job_stats(
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
    ctx: RequestContext = Depends(require_employer)
):
    return {'success': True, 'stats': JobService(db, config).employer_stats(ctx)}


@router.post("", status_code=201)
def create_job(
    data: JobCreate,
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
    ctx: RequestContext = Depends(require_employer)
):
    job = JobService(db, config).create_job(data, ctx)
    return {'success': True, 'message': "Job created successfully", 'job': job}


@router.get("/{job_id}")
def get_job(
    job_id: str,
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
    ctx: Optional[RequestContext] = Depends(get_optional_context)
):
    """Fetch a job by id or slug. Counts as a view."""
    return {'success': True, 'job': JobService(db, config).get_job(job_id, ctx)}


@router.put("/{job_id}")
def update_job(
    job_id: str,
    data: JobUpdate,
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
    ctx: RequestContext = Depends(require_employer)
):
    job = JobService(db, config).update_job(validate_uuid(job_id, "job_id"), data, ctx)
    return {'success': True, 'message': "Job updated successfully", 'job': job}


@router.delete("/{job_id}")
def close_job(
    job_id: str,
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
    ctx: RequestContext = Depends(require_employer)
):
    """Close the job. The row is kept so applications stay readable."""
    JobService(db, config).close_job(validate_uuid(job_id, "job_id"), ctx)
    return {'success': True, 'message': "Job closed successfully"}


@router.patch("/{job_id}/promote")
def promote_job(
    job_id: str,
    data: JobPromote,
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
    ctx: RequestContext = Depends(require_employer)
):
    job = JobService(db, config).promote_job(validate_uuid(job_id, "job_id"), data, ctx)
    return {'success': True, 'message': f"Job {data.action} updated successfully", 'job': job}


@router.patch("/{job_id}/expire")
def expire_job(
    job_id: str,
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
    ctx: RequestContext = Depends(require_employer)
):
    JobService(db, config).expire_job(validate_uuid(job_id, "job_id"), ctx)
    return {'success': True, 'message': "Job marked as expired"}


@router.post("/{job_id}/recompute-counters")
def recompute_job_counters(
    job_id: str,
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
    ctx: RequestContext = Depends(require_admin)
):
    """Repair drifted applicationsCount and hiredCount for one job."""
    counters = JobService(db, config).recompute_counters(validate_uuid(job_id, "job_id"), ctx)
    return {'success': True, 'message': "Job counters recomputed", **counters}


@router.get("/{job_id}/applications")
def get_job_applications(
    job_id: str,
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
    ctx: RequestContext = Depends(require_employer)
):
    service = JobService(db, config)
    result = service.job_applications(
        validate_uuid(job_id, "job_id"), ctx, service.page_request(page, limit), status=status
    )
    return {'success': True, **result}
