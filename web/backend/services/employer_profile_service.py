#!/usr/bin/env python3
"""
Employer profile service - company profiles and the public employer directory.
"""

import logging
import uuid
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from core.aggregates import AggregateSynchronizer
from core.context import RequestContext, utcnow
from core.exceptions import AuthorizationError, NotFoundError
from core.filters import PageInfo, PageRequest, resolve_sort
from core.filters.queries import (
    EMPLOYER_DEFAULT_SORT,
    EMPLOYER_SORTS,
    EmployerSearchParams,
    employer_filters,
)
from core.lifecycle.states import JobStatus
from core.profiles import EmployerProfileUpdate, apply_employer_update, parse_section
from core.scorer import score_employer_profile
from core.storage import IMAGE_EXTENSIONS, LocalFileStorage
from database.models import EmployerProfile
from database.repositories import ApplicationRepository, EmployerProfileRepository, JobRepository
from ..config import AppConfig
from ..models.responses import ApplicationOut, EmployerProfileOut, JobOut, Pagination
from .base import BaseService, UploadedFile, store_upload

logger = logging.getLogger(__name__)

FEATURED_OPEN_JOBS = 5
RECENT_APPLICATIONS = 5


class EmployerProfileService(BaseService):
    """Service for employer profiles."""

    def __init__(self, db: Session, config: AppConfig, storage: Optional[LocalFileStorage] = None):
        super().__init__(db, config)
        self.storage = storage
        self.profiles = EmployerProfileRepository(db)
        self.jobs = JobRepository(db)
        self.applications = ApplicationRepository(db)
        self.sync = AggregateSynchronizer(db)

    def _save(
        self,
        profile: Optional[EmployerProfile],
        user_id: uuid.UUID,
        update: EmployerProfileUpdate,
        ctx: RequestContext,
        uploads: Optional[Dict[str, Optional[str]]] = None
    ) -> Tuple[EmployerProfile, bool]:
        created = profile is None
        current = profile.to_document() if profile is not None else {}
        document = apply_employer_update(current, update, uploads)
        score = score_employer_profile(document)

        if created:
            profile = EmployerProfile(user_id=user_id)
        profile.profile_image = document['profileImage']
        profile.phone = document['phone']
        profile.email = document['email']
        profile.location = document['location']
        profile.social_links = document['socialLinks']
        profile.company_info = document['companyInfo']
        profile.founding_info = document['foundingInfo']
        profile.completion_percentage = score.percentage
        profile.is_profile_complete = score.is_complete
        profile.last_updated = ctx.now
        if created:
            self.profiles.add(profile)
        self.db.commit()

        self.sync.sync_profile_completion(user_id, score.is_complete)
        logger.info(f"Employer profile saved for {user_id}: {score.percentage}% complete")
        return profile, created

    # === Own profile ===

    def upsert(
        self,
        ctx: RequestContext,
        data: Dict[str, Any],
        logo: Optional[UploadedFile] = None,
        banner: Optional[UploadedFile] = None
    ) -> EmployerProfileOut:
        """
        Create or update the calling employer's profile.

        Logo and banner are stored first; their URLs go into companyInfo.
        """
        if not ctx.is_employer:
            raise AuthorizationError("Only employers can create employer profiles")

        update = parse_section(EmployerProfileUpdate, data)
        uploads = {
            'logo': store_upload(self.storage, logo, 'company-logos', IMAGE_EXTENSIONS),
            'banner': store_upload(self.storage, banner, 'company-banners', IMAGE_EXTENSIONS),
        }
        profile, _ = self._save(self.profiles.get_by_user(ctx.actor_id), ctx.actor_id, update, ctx, uploads)
        return EmployerProfileOut.from_profile(profile)

    def get_mine(self, ctx: RequestContext) -> EmployerProfileOut:
        profile = self.profiles.get_by_user(ctx.actor_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        return EmployerProfileOut.from_profile(profile, include_user=True)

    def completion(self, ctx: RequestContext) -> Dict[str, Any]:
        profile = self.profiles.get_by_user(ctx.actor_id)
        if profile is None:
            return {
                'hasProfile': False,
                'completionPercentage': 0,
                'isProfileComplete': False,
                'message': "Profile not created yet",
            }
        return {
            'hasProfile': True,
            'completionPercentage': profile.completion_percentage or 0,
            'isProfileComplete': bool(profile.is_profile_complete),
            'profile': EmployerProfileOut.from_profile(profile),
        }

    def delete(self, ctx: RequestContext) -> None:
        profile = self.profiles.get_by_user(ctx.actor_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        self.profiles.delete(profile)
        self.sync.reset_profile_completion(ctx.actor_id)

    def get_profile(self, profile_id: uuid.UUID) -> EmployerProfileOut:
        profile = self.profiles.get_by_id_or_user(profile_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        return EmployerProfileOut.from_profile(profile, include_user=True)

    def update(self, identifier: uuid.UUID, data: Dict[str, Any], ctx: RequestContext) -> EmployerProfileOut:
        """Owner (or admin) update through the directory endpoint."""
        profile = self.profiles.get_by_id_or_user(identifier)
        if profile is None:
            raise NotFoundError("Employer profile not found")
        if profile.user_id != ctx.actor_id and not ctx.is_admin:
            raise AuthorizationError("Not authorized to update this profile")

        update = parse_section(EmployerProfileUpdate, data)
        profile, _ = self._save(profile, profile.user_id, update, ctx)
        return EmployerProfileOut.from_profile(profile)

    # === Directory ===

    def list_employers(
        self,
        params: EmployerSearchParams,
        page: PageRequest,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None
    ) -> Dict[str, Any]:
        now = utcnow()
        conditions = employer_filters(params).conditions
        order_by = resolve_sort(sort_by, sort_order or 'asc', EMPLOYER_SORTS, EMPLOYER_DEFAULT_SORT)
        profiles, total = self.profiles.find_page(conditions, order_by, page)

        employers = []
        for profile in profiles:
            open_jobs = self.jobs.count_open_for_employer(profile.user_id, now)
            out = EmployerProfileOut.from_profile(
                profile,
                include_user=True,
                stats={
                    'openJobs': open_jobs,
                    'totalJobs': self.jobs.count_for_employer(profile.user_id),
                    'totalApplications': self.applications.count(employer_id=profile.user_id),
                    'recentJobs': [
                        JobOut.from_job(job, now)
                        for job in self.jobs.recent_open_for_employer(profile.user_id, now)
                    ],
                },
            )
            out.is_featured = out.is_featured or open_jobs >= FEATURED_OPEN_JOBS
            employers.append(out)

        return {
            'employers': employers,
            'pagination': Pagination.from_info(PageInfo.build(page, total)),
            'filters': {
                'industryTypes': self.profiles.industry_types(),
                'locations': self.profiles.locations(),
            },
        }

    def featured(self, limit: int = 6) -> Dict[str, Any]:
        """Employers ranked by their number of open jobs."""
        ranked = self.jobs.open_job_counts_by_employer(utcnow(), limit)
        profiles = self.profiles.get_many_by_user([employer_id for employer_id, _ in ranked])
        return {
            'employers': [
                EmployerProfileOut.from_profile(
                    profiles[employer_id], include_user=True, stats={'openJobs': count}
                )
                for employer_id, count in ranked
                if employer_id in profiles
            ],
        }

    def employer_details(self, identifier: uuid.UUID, ctx: Optional[RequestContext] = None) -> Dict[str, Any]:
        profile = self.profiles.get_by_id_or_user(identifier)
        if profile is None:
            raise NotFoundError("Employer not found")

        now = ctx.now if ctx else utcnow()
        self.sync.expire_overdue_jobs(now, employer_id=profile.user_id)
        jobs, _ = self.jobs.employer_jobs(
            profile.user_id, PageRequest(page=1, limit=self.config.pagination.max_limit)
        )
        active = [j for j in jobs if j.status == JobStatus.ACTIVE.value and not j.is_past_expiration(now)]
        closed = [j for j in jobs if j not in active]

        by_status = self.applications.status_counts(employer_id=profile.user_id)
        by_status.pop('withdrawn', None)
        recent = self.applications.recent_for_employer(profile.user_id, RECENT_APPLICATIONS)

        return {
            'employer': EmployerProfileOut.from_profile(profile, include_user=True),
            'jobs': {
                'active': [JobOut.from_job(j, now) for j in active],
                'closed': [JobOut.from_job(j, now) for j in closed],
            },
            'stats': {
                'totalJobs': len(jobs),
                'activeJobs': len(active),
                'closedJobs': len(closed),
                'totalApplications': sum(j.applications_count or 0 for j in jobs),
                'applicationStatus': by_status,
            },
            'recentApplications': [
                ApplicationOut.from_application(a, include_job=True, include_candidate=True, now=now)
                for a in recent
            ],
            'isOwner': ctx is not None and (ctx.actor_id == profile.user_id or ctx.is_admin),
        }

    def employer_jobs(
        self,
        identifier: uuid.UUID,
        page: PageRequest,
        status: Optional[str] = None
    ) -> Dict[str, Any]:
        profile = self.profiles.get_by_id_or_user(identifier)
        if profile is None:
            raise NotFoundError("Employer not found")

        now = utcnow()
        jobs, total = self.jobs.employer_jobs(profile.user_id, page, status=status)
        return {
            'jobs': [JobOut.from_job(job, now) for job in jobs],
            'pagination': Pagination.from_info(PageInfo.build(page, total)),
        }
