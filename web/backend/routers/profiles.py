#!/usr/bin/env python3
"""
Employer profile endpoints for the signed-in employer.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from core.context import RequestContext
from core.storage import LocalFileStorage
from ..auth import get_request_context
from ..config import AppConfig
from ..dependencies import get_app_config, get_db, get_storage
from ..services.base import UploadedFile
from ..services.employer_profile_service import EmployerProfileService
from ..utils import parse_json_field, validate_uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["profiles"])


def get_employer_service(
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
    storage: LocalFileStorage = Depends(get_storage)
) -> EmployerProfileService:
    return EmployerProfileService(db, config, storage=storage)


@router.post("/employer")
def save_employer_profile(
    data: Optional[str] = Form(default=None),
    company_info: Optional[str] = Form(default=None, alias="companyInfo"),
    founding_info: Optional[str] = Form(default=None, alias="foundingInfo"),
    social_links: Optional[str] = Form(default=None, alias="socialLinks"),
    contact: Optional[str] = Form(default=None, alias="contact"),
    logo: Optional[UploadFile] = File(default=None),
    banner: Optional[UploadFile] = File(default=None),
    service: EmployerProfileService = Depends(get_employer_service),
    ctx: RequestContext = Depends(get_request_context)
):
    """
    Create or update the caller's company profile.

    Sections come either inside one `data` JSON object or as separate
    JSON form fields; separate fields win.
    """
    payload = parse_json_field(data, "data")
    for name, raw, expected in (
        ('companyInfo', company_info, dict),
        ('foundingInfo', founding_info, dict),
        ('socialLinks', social_links, list),
        ('contact', contact, dict),
    ):
        if raw:
            payload[name] = parse_json_field(raw, name, expected)

    max_bytes = service.storage.max_bytes
    profile = service.upsert(
        ctx, payload, UploadedFile.from_upload(logo, max_bytes), UploadedFile.from_upload(banner, max_bytes)
    )
    return {
        'success': True,
        'message': "Employer profile updated successfully",
        'profile': profile,
        'completionPercentage': profile.completion_percentage,
        'isProfileComplete': profile.is_profile_complete,
    }


@router.get("/me")
def get_my_profile(
    service: EmployerProfileService = Depends(get_employer_service),
    ctx: RequestContext = Depends(get_request_context)
):
    return {'success': True, 'profile': service.get_mine(ctx)}


@router.get("/check-completion")
def check_profile_completion(
    service: EmployerProfileService = Depends(get_employer_service),
    ctx: RequestContext = Depends(get_request_context)
):
    return {'success': True, **service.completion(ctx)}


@router.delete("")
def delete_my_profile(
    service: EmployerProfileService = Depends(get_employer_service),
    ctx: RequestContext = Depends(get_request_context)
):
    service.delete(ctx)
    return {'success': True, 'message': "Profile deleted successfully"}


@router.get("/{profile_id}", dependencies=[Depends(get_request_context)])
def get_profile(
    profile_id: str,
    service: EmployerProfileService = Depends(get_employer_service)
):
    """Profile by profile id or owning user id."""
    return {'success': True, 'profile': service.get_profile(validate_uuid(profile_id, "id"))}
