#!/usr/bin/env python3
"""
Response models for API endpoints.

All models serialize with camelCase keys. Routers wrap them in the
`{"success": true, ...}` envelope.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.filters.builder import PageInfo
from core.utils import days_remaining, days_since


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(CamelModel):
    """Pagination block returned by every list endpoint."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "currentPage": 2,
                "totalPages": 5,
                "totalItems": 48,
                "hasNextPage": True,
                "hasPrevPage": True
            }
        }
    )

    current_page: int
    total_pages: int
    total_items: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def from_info(cls, info: PageInfo) -> "Pagination":
        return cls(
            current_page=info.current_page,
            total_pages=info.total_pages,
            total_items=info.total_items,
            has_next_page=info.has_next_page,
            has_prev_page=info.has_prev_page,
        )


class UserSummary(CamelModel):
    id: uuid.UUID
    name: Optional[str] = None
    username: Optional[str] = None
    email: str
    phone: Optional[str] = None
    avatar: Optional[str] = None
    role: str

    @classmethod
    def from_user(cls, user) -> Optional["UserSummary"]:
        if user is None:
            return None
        return cls(
            id=user.id,
            name=user.name,
            username=user.username,
            email=user.email,
            phone=user.phone,
            avatar=user.avatar,
            role=user.role,
        )


# === Jobs ===

class SalaryRange(CamelModel):
    min: int = Field(ge=0)
    max: int = Field(ge=0)
    currency: str
    is_negotiable: bool


class JobLocation(CamelModel):
    country: str
    city: str
    state: str = ''
    zip_code: str = ''
    address: str = ''
    is_remote: bool = False


class JobOut(CamelModel):
    """A job posting with its derived counters."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "6ba7b810-9dad-11d1-80b4-00c04fd430c8",
                "jobTitle": "Senior Python Developer",
                "jobType": "Full-time",
                "salaryRange": {"min": 90000, "max": 120000, "currency": "USD", "isNegotiable": False},
                "location": {"country": "USA", "city": "Austin", "isRemote": True},
                "status": "Active",
                "applicationsCount": 4,
                "hiredCount": 0,
                "daysRemaining": 21
            }
        }
    )

    id: uuid.UUID
    employer_id: uuid.UUID
    company_name: Optional[str] = None
    job_title: str
    job_description: str
    job_type: str
    salary_range: SalaryRange
    location: JobLocation
    experience_level: str
    education_level: str
    vacancies: int
    job_category: str
    tags: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    application_method: str
    application_email: Optional[str] = None
    application_url: Optional[str] = None
    posted_date: datetime
    expiration_date: datetime
    status: str
    is_featured: bool
    is_highlighted: bool
    views: int
    applications_count: int
    hired_count: int
    slug: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None

    days_remaining: Optional[int] = None
    is_expired: Optional[bool] = None
    is_saved: Optional[bool] = None
    application_stats: Optional[Dict[str, int]] = None

    @classmethod
    def from_job(cls, job, now: Optional[datetime] = None, **extra: Any) -> "JobOut":
        remaining = days_remaining(job.expiration_date, now) if now is not None else None
        return cls(
            id=job.id,
            employer_id=job.employer_id,
            company_name=job.company_name(),
            job_title=job.job_title,
            job_description=job.job_description,
            job_type=job.job_type,
            salary_range=SalaryRange(
                min=job.salary_min or 0,
                max=job.salary_max or 0,
                currency=job.salary_currency or 'USD',
                is_negotiable=bool(job.salary_negotiable),
            ),
            location=JobLocation(
                country=job.country,
                city=job.city,
                state=job.state or '',
                zip_code=job.zip_code or '',
                address=job.address or '',
                is_remote=bool(job.is_remote),
            ),
            experience_level=job.experience_level,
            education_level=job.education_level,
            vacancies=job.vacancies,
            job_category=job.job_category,
            tags=list(job.tags or []),
            benefits=list(job.benefits or []),
            application_method=job.application_method,
            application_email=job.application_email,
            application_url=job.application_url,
            posted_date=job.posted_date,
            expiration_date=job.expiration_date,
            status=job.status,
            is_featured=bool(job.is_featured),
            is_highlighted=bool(job.is_highlighted),
            views=job.views or 0,
            applications_count=job.applications_count or 0,
            hired_count=job.hired_count or 0,
            slug=job.slug,
            meta_title=job.meta_title,
            meta_description=job.meta_description,
            days_remaining=remaining,
            **extra
        )


# === Applications ===

class StatusEventOut(CamelModel):
    status: str
    note: Optional[str] = None
    updated_by: Optional[uuid.UUID] = None
    updated_at: datetime


class NoteOut(CamelModel):
    text: str
    created_by: Optional[uuid.UUID] = None
    created_at: datetime


class StatusBadge(CamelModel):
    color: str
    label: str


class ApplicationOut(CamelModel):
    id: uuid.UUID
    job_id: uuid.UUID
    candidate_id: uuid.UUID
    employer_id: uuid.UUID
    cover_letter: str
    resume: Optional[Dict[str, Any]] = None
    status: str
    status_history: List[StatusEventOut] = Field(default_factory=list)
    interview_details: Optional[Dict[str, Any]] = None
    notes: List[NoteOut] = Field(default_factory=list)
    applied_at: datetime
    updated_at: datetime
    viewed_by_employer: bool
    viewed_at: Optional[datetime] = None
    is_deleted: bool
    withdrawal_reason: Optional[str] = None

    job: Optional[JobOut] = None
    candidate: Optional[UserSummary] = None
    days_since_applied: Optional[int] = None
    status_badge: Optional[StatusBadge] = None

    @classmethod
    def from_application(
        cls,
        application,
        include_job: bool = False,
        include_candidate: bool = False,
        now: Optional[datetime] = None,
        **extra: Any
    ) -> "ApplicationOut":
        job = None
        if include_job and application.job is not None:
            job = JobOut.from_job(application.job, now)
        return cls(
            id=application.id,
            job_id=application.job_id,
            candidate_id=application.candidate_id,
            employer_id=application.employer_id,
            cover_letter=application.cover_letter,
            resume=application.resume,
            status=application.status,
            status_history=[
                StatusEventOut(
                    status=e.status, note=e.note, updated_by=e.updated_by, updated_at=e.updated_at
                )
                for e in application.status_history
            ],
            interview_details=application.interview_details,
            notes=[
                NoteOut(text=n.text, created_by=n.created_by, created_at=n.created_at)
                for n in application.notes
            ],
            applied_at=application.applied_at,
            updated_at=application.updated_at,
            viewed_by_employer=bool(application.viewed_by_employer),
            viewed_at=application.viewed_at,
            is_deleted=bool(application.is_deleted),
            withdrawal_reason=application.withdrawal_reason,
            job=job,
            candidate=UserSummary.from_user(application.candidate) if include_candidate else None,
            days_since_applied=days_since(application.applied_at, now) if now is not None else None,
            **extra
        )


# === Profiles ===

class CandidateProfileOut(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    personal_info: Dict[str, Any]
    profile_details: Dict[str, Any]
    social_links: List[Dict[str, Any]]
    account_settings: Dict[str, Any]
    completion_percentage: int
    is_profile_complete: bool
    last_updated: Optional[datetime] = None
    created_at: Optional[datetime] = None
    user: Optional[UserSummary] = None
    is_saved: Optional[bool] = None
    stats: Optional[Dict[str, Any]] = None

    @classmethod
    def from_profile(cls, profile, include_user: bool = False, **extra: Any) -> "CandidateProfileOut":
        return cls(
            id=profile.id,
            user_id=profile.user_id,
            personal_info=dict(profile.personal_info or {}),
            profile_details=dict(profile.profile_details or {}),
            social_links=list(profile.social_links or []),
            account_settings=dict(profile.account_settings or {}),
            completion_percentage=profile.completion_percentage or 0,
            is_profile_complete=bool(profile.is_profile_complete),
            last_updated=profile.last_updated,
            created_at=profile.created_at,
            user=UserSummary.from_user(profile.user) if include_user else None,
            **extra
        )


class EmployerProfileOut(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    profile_image: str = ''
    phone: str = ''
    email: str = ''
    location: str = ''
    social_links: List[Dict[str, Any]] = Field(default_factory=list)
    company_info: Dict[str, Any] = Field(default_factory=dict)
    founding_info: Dict[str, Any] = Field(default_factory=dict)
    is_featured: bool = False
    completion_percentage: int
    is_profile_complete: bool
    last_updated: Optional[datetime] = None
    user: Optional[UserSummary] = None
    active_jobs: Optional[int] = None
    stats: Optional[Dict[str, Any]] = None

    @classmethod
    def from_profile(cls, profile, include_user: bool = False, **extra: Any) -> "EmployerProfileOut":
        return cls(
            id=profile.id,
            user_id=profile.user_id,
            profile_image=profile.profile_image or '',
            phone=profile.phone or '',
            email=profile.email or '',
            location=profile.location or '',
            social_links=list(profile.social_links or []),
            company_info=dict(profile.company_info or {}),
            founding_info=dict(profile.founding_info or {}),
            is_featured=bool(profile.is_featured),
            completion_percentage=profile.completion_percentage or 0,
            is_profile_complete=bool(profile.is_profile_complete),
            last_updated=profile.last_updated,
            user=UserSummary.from_user(profile.user) if include_user else None,
            **extra
        )


# === Saved items ===

class SavedJobOut(CamelModel):
    id: uuid.UUID
    job_id: uuid.UUID
    saved_date: datetime
    notes: Optional[str] = None
    job: Optional[JobOut] = None


class SavedCandidateOut(CamelModel):
    id: uuid.UUID
    candidate_id: uuid.UUID
    saved_at: datetime
    notes: Optional[str] = None
    candidate: Optional[UserSummary] = None
    profile: Optional[CandidateProfileOut] = None


# === Search history ===

class SearchHistoryOut(CamelModel):
    id: uuid.UUID
    search_query: str
    search_type: str
    filters: Dict[str, Any] = Field(default_factory=dict)
    search_count: int
    last_searched: datetime

    @classmethod
    def from_entry(cls, entry) -> "SearchHistoryOut":
        return cls(
            id=entry.id,
            search_query=entry.search_query,
            search_type=entry.search_type,
            filters=dict(entry.filters or {}),
            search_count=entry.search_count,
            last_searched=entry.last_searched,
        )


# === Statuses ===

class PipelineStatusOut(CamelModel):
    id: uuid.UUID
    name: str
    key: str
    color: str
    order: int
    is_default: bool
    is_active: bool
    employer_id: Optional[uuid.UUID] = None

    @classmethod
    def from_status(cls, status) -> "PipelineStatusOut":
        return cls(
            id=status.id,
            name=status.name,
            key=status.key,
            color=status.color,
            order=status.order,
            is_default=bool(status.is_default),
            is_active=bool(status.is_active),
            employer_id=status.employer_id,
        )
