#!/usr/bin/env python3
"""
Candidate profile endpoints - own profile, public directory and saved candidates.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from core.context import RequestContext
from core.filters.queries import CandidateSearchParams
from core.storage import LocalFileStorage
from ..auth import get_optional_context, get_request_context, require_employer
from ..config import AppConfig
from ..dependencies import get_app_config, get_db, get_storage
from ..services.base import UploadedFile
from ..services.candidate_profile_service import CandidateProfileService
from ..utils import parse_json_field, validate_uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/candidate-profile", tags=["candidates"])


def get_candidate_service(
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config),
    storage: LocalFileStorage = Depends(get_storage)
) -> CandidateProfileService:
    return CandidateProfileService(db, config, storage=storage)


# === Public directory ===

@router.get("/all")
def list_candidates(
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    search: Optional[str] = None,
    location: Optional[str] = None,
    gender: Optional[str] = None,
    experience: Optional[str] = None,
    education: Optional[str] = None,
    min_completion: Optional[int] = Query(default=None, alias="minCompletion", ge=0, le=100),
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    sort_order: Optional[str] = Query(default=None, alias="sortOrder"),
    service: CandidateProfileService = Depends(get_candidate_service),
    ctx: Optional[RequestContext] = Depends(get_optional_context)
):
    """Public candidate profiles. Employers also get an isSaved flag per candidate."""
    params = CandidateSearchParams(
        search=search,
        location=location,
        gender=gender,
        experience=experience,
        education=education,
        min_completion=min_completion,
    )
    result = service.list_candidates(params, service.page_request(page, limit), sort_by, sort_order, ctx)
    return {'success': True, **result}


@router.get("/filters")
def get_candidate_filters(service: CandidateProfileService = Depends(get_candidate_service)):
    return {'success': True, 'filters': service.filter_options()}


# === Own profile ===

@router.get("/me")
def get_my_profile(
    service: CandidateProfileService = Depends(get_candidate_service),
    ctx: RequestContext = Depends(get_request_context)
):
    profile = service.get_mine(ctx)
    if profile is None:
        return {'success': True, 'profile': None, 'message': "No profile found"}
    return {'success': True, 'profile': profile}


@router.post("")
def save_my_profile(
    data: Optional[str] = Form(default=None),
    profile_image: Optional[UploadFile] = File(default=None, alias="profileImage"),
    cv: Optional[UploadFile] = File(default=None),
    service: CandidateProfileService = Depends(get_candidate_service),
    ctx: RequestContext = Depends(get_request_context)
):
    """
    Create or update the caller's profile.

    `data` is a JSON object with any of personalInfo, profileDetails,
    socialLinks and accountSettings. Sections left out are not touched.
    """
    max_bytes = service.storage.max_bytes
    profile, created = service.upsert(
        ctx,
        parse_json_field(data, "data"),
        UploadedFile.from_upload(profile_image, max_bytes),
        UploadedFile.from_upload(cv, max_bytes),
    )
    return {
        'success': True,
        'message': "Profile created successfully" if created else "Profile updated successfully",
        'profile': profile,
    }


@router.delete("")
def delete_my_profile(
    service: CandidateProfileService = Depends(get_candidate_service),
    ctx: RequestContext = Depends(get_request_context)
):
    service.delete(ctx)
    return {'success': True, 'message': "Profile deleted successfully"}


@router.get("/stats/me")
def get_my_stats(
    service: CandidateProfileService = Depends(get_candidate_service),
    ctx: RequestContext = Depends(get_request_context)
):
    return {'success': True, 'stats': service.stats(ctx)}


# === Saved candidates ===

@router.get("/saved/employer")
def get_saved_candidates(
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    service: CandidateProfileService = Depends(get_candidate_service),
    ctx: RequestContext = Depends(require_employer)
):
    return {'success': True, **service.saved_candidates(ctx, service.page_request(page, limit))}


@router.get("/saved/count")
def get_saved_candidates_count(
    service: CandidateProfileService = Depends(get_candidate_service),
    ctx: RequestContext = Depends(require_employer)
):
    return {'success': True, 'count': service.saved_count(ctx)}


@router.post("/{candidate_id}/save", status_code=201)
def save_candidate(
    candidate_id: str,
    service: CandidateProfileService = Depends(get_candidate_service),
    ctx: RequestContext = Depends(require_employer)
):
    saved = service.save_candidate(validate_uuid(candidate_id, "candidate_id"), ctx)
    return {'success': True, 'message': "Candidate saved successfully", 'savedCandidate': saved}


@router.delete("/{candidate_id}/save")
def unsave_candidate(
    candidate_id: str,
    service: CandidateProfileService = Depends(get_candidate_service),
    ctx: RequestContext = Depends(require_employer)
):
    service.unsave_candidate(validate_uuid(candidate_id, "candidate_id"), ctx)
    return {'success': True, 'message': "Candidate removed from saved list"}


@router.get("/{candidate_id}/check-saved")
def check_saved_candidate(
    candidate_id: str,
    service: CandidateProfileService = Depends(get_candidate_service),
    ctx: RequestContext = Depends(require_employer)
):
    return {'success': True, 'isSaved': service.is_saved(validate_uuid(candidate_id, "candidate_id"), ctx)}


# === Public profile views ===

@router.get("/{user_id}/details")
def get_candidate_details(
    user_id: str,
    service: CandidateProfileService = Depends(get_candidate_service),
    ctx: Optional[RequestContext] = Depends(get_optional_context)
):
    """Full public profile by profile id or user id."""
    return {'success': True, **service.candidate_details(validate_uuid(user_id, "id"), ctx)}


@router.get("/{user_id}")
def get_public_profile(
    user_id: str,
    service: CandidateProfileService = Depends(get_candidate_service)
):
    return {'success': True, 'profile': service.public_profile(validate_uuid(user_id, "user_id"))}
