#!/usr/bin/env python3
"""
Application endpoints - apply, review, interview and withdraw.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from core.context import RequestContext
from core.lifecycle.state_machine import InterviewDetails
from core.storage import LocalFileStorage
from notification.service import NotificationService
from ..auth import get_request_context, require_candidate, require_employer
from ..config import AppConfig
from ..dependencies import get_app_config, get_db, get_notification_service, get_storage
from ..models.requests import NoteCreate, StatusUpdate, WithdrawRequest
from ..services.application_service import ApplicationService
from ..services.base import UploadedFile
from ..utils import optional_uuid, validate_uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/applications", tags=["applications"])


def get_application_service(
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
    notifier: NotificationService = Depends(get_notification_service),
    storage: LocalFileStorage = Depends(get_storage)
) -> ApplicationService:
    return ApplicationService(db, config, notifier=notifier, storage=storage)


@router.get("/stats")
def get_application_stats(
    service: ApplicationService = Depends(get_application_service),
    ctx: RequestContext = Depends(get_request_context)
):
    """Counts by status, by month (last 12) and in total, scoped to the caller."""
    return {'success': True, 'stats': service.stats(ctx)}


@router.get("/candidate")
def get_candidate_applications(
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    status: Optional[str] = None,
    service: ApplicationService = Depends(get_application_service),
    ctx: RequestContext = Depends(require_candidate)
):
    result = service.list_for_candidate(ctx, service.page_request(page, limit), status=status)
    return {'success': True, **result}


@router.post("", status_code=201)
def apply_for_job(
    job_id: str = Form(..., alias="jobId"),
    cover_letter: str = Form(default='', alias="coverLetter"),
    resume: Optional[UploadFile] = File(default=None),
    service: ApplicationService = Depends(get_application_service),
    ctx: RequestContext = Depends(require_candidate)
):
    """
    Apply for a job.

    The optional resume (pdf, doc, docx) is uploaded before the application
    is recorded.
    """
    upload = UploadedFile.from_upload(resume, service.storage.max_bytes)
    application = service.apply(ctx, validate_uuid(job_id, "jobId"), cover_letter, upload)
    return {
        'success': True,
        'message': "Application submitted successfully",
        'application': application,
    }


@router.put("/{application_id}/withdraw")
def withdraw_application(
    application_id: str,
    data: Optional[WithdrawRequest] = None,
    service: ApplicationService = Depends(get_application_service),
    ctx: RequestContext = Depends(require_candidate)
):
    reason = data.reason if data is not None else None
    service.withdraw(validate_uuid(application_id, "application_id"), ctx, reason)
    return {'success': True, 'message': "Application withdrawn successfully"}


@router.get("/employer")
def get_employer_applications(
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    status: Optional[str] = None,
    job_id: Optional[str] = Query(default=None, alias="jobId"),
    service: ApplicationService = Depends(get_application_service),
    ctx: RequestContext = Depends(require_employer)
):
    result = service.list_for_employer(
        ctx,
        service.page_request(page, limit),
        status=status,
        job_id=optional_uuid(job_id, "jobId"),
    )
    return {'success': True, **result}


@router.put("/{application_id}/status")
def update_application_status(
    application_id: str,
    data: StatusUpdate,
    service: ApplicationService = Depends(get_application_service),
    ctx: RequestContext = Depends(require_employer)
):
    application = service.update_status(validate_uuid(application_id, "application_id"), data, ctx)
    return {
        'success': True,
        'message': f"Application status updated to {application.status}",
        'application': application,
    }


@router.post("/{application_id}/interview")
def schedule_interview(
    application_id: str,
    data: InterviewDetails,
    service: ApplicationService = Depends(get_application_service),
    ctx: RequestContext = Depends(require_employer)
):
    application = service.schedule_interview(validate_uuid(application_id, "application_id"), data, ctx)
    return {'success': True, 'message': "Interview scheduled successfully", 'application': application}


@router.post("/{application_id}/notes")
def add_application_note(
    application_id: str,
    data: NoteCreate,
    service: ApplicationService = Depends(get_application_service),
    ctx: RequestContext = Depends(require_employer)
):
    application = service.add_note(validate_uuid(application_id, "application_id"), data.text, ctx)
    return {'success': True, 'message': "Note added successfully", 'notes': application.notes}


@router.get("/{application_id}/resume")
def get_application_resume(
    application_id: str,
    service: ApplicationService = Depends(get_application_service),
    ctx: RequestContext = Depends(require_employer)
):
    resume = service.resume_metadata(validate_uuid(application_id, "application_id"), ctx)
    return {'success': True, 'resume': resume}


@router.get("/{application_id}")
def get_application(
    application_id: str,
    service: ApplicationService = Depends(get_application_service),
    ctx: RequestContext = Depends(get_request_context)
):
    application = service.get(validate_uuid(application_id, "application_id"), ctx)
    return {'success': True, 'application': application}
