#!/usr/bin/env python3
"""
Candidate profile service - profile upkeep, public listing and employer bookmarks.
"""

import logging
import uuid
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from core.aggregates import AggregateSynchronizer
from core.context import RequestContext
from core.exceptions import AuthorizationError, ConflictError, NotFoundError
from core.filters import PageInfo, PageRequest, resolve_sort
from core.filters.queries import (
    CANDIDATE_DEFAULT_SORT,
    CANDIDATE_SORTS,
    CandidateSearchParams,
    candidate_filters,
)
from core.profiles import CandidateProfileUpdate, apply_candidate_update, parse_section, with_account_defaults
from core.scorer import score_candidate_profile
from core.storage import IMAGE_EXTENSIONS, RESUME_EXTENSIONS, LocalFileStorage
from database.models import CandidateProfile
from database.repositories import (
    ApplicationRepository,
    CandidateProfileRepository,
    SavedCandidateRepository,
    SavedJobRepository,
)
from ..config import AppConfig
from ..models.responses import (
    ApplicationOut,
    CandidateProfileOut,
    Pagination,
    SavedCandidateOut,
    UserSummary,
)
from .base import BaseService, UploadedFile, store_upload

logger = logging.getLogger(__name__)

COMPLETION_RANGES = [
    {'label': 'All Profiles', 'value': 0},
    {'label': '50%+ Complete', 'value': 50},
    {'label': '80%+ Complete', 'value': 80},
    {'label': '100% Complete', 'value': 100},
]
RECENT_APPLICATIONS = 5


def _age(details: Dict[str, Any], today: date) -> Optional[int]:
    raw = details.get('dateOfBirth')
    if not raw:
        return None
    try:
        born = date.fromisoformat(str(raw)[:10])
    except ValueError:
        return None
    return today.year - born.year


def _is_public(profile: CandidateProfile) -> bool:
    return bool(with_account_defaults(profile.account_settings)['privacy'].get('profilePublic'))


class CandidateProfileService(BaseService):
    """Service for candidate profiles and the employer's saved-candidate list."""

    def __init__(self, db: Session, config: AppConfig, storage: Optional[LocalFileStorage] = None):
        super().__init__(db, config)
        self.storage = storage
        self.profiles = CandidateProfileRepository(db)
        self.applications = ApplicationRepository(db)
        self.saved_jobs = SavedJobRepository(db)
        self.saved = SavedCandidateRepository(db)
        self.sync = AggregateSynchronizer(db)

    # === Own profile ===

    def get_mine(self, ctx: RequestContext) -> Optional[CandidateProfileOut]:
        profile = self.profiles.get_by_user(ctx.actor_id)
        return CandidateProfileOut.from_profile(profile) if profile else None

    def upsert(
        self,
        ctx: RequestContext,
        data: Dict[str, Any],
        profile_image: Optional[UploadedFile] = None,
        cv: Optional[UploadedFile] = None
    ) -> Tuple[CandidateProfileOut, bool]:
        """
        Create or partially update the caller's profile and rescore it.

        Files are stored before anything is written; their URLs land in
        personalInfo.profileImage and personalInfo.cvUrl. The user's
        profile-complete flag is synced after the profile commit.

        Returns:
            (profile, created)
        """
        update = parse_section(CandidateProfileUpdate, data)
        uploads = {
            'profileImage': store_upload(self.storage, profile_image, 'candidate-profiles', IMAGE_EXTENSIONS),
            'cvUrl': store_upload(self.storage, cv, 'candidate-cvs', RESUME_EXTENSIONS),
        }

        profile = self.profiles.get_by_user(ctx.actor_id)
        created = profile is None
        current = profile.to_document() if profile is not None else {}
        document = apply_candidate_update(current, update, uploads)
        score = score_candidate_profile(document)

        if created:
            profile = CandidateProfile(user_id=ctx.actor_id)
        profile.personal_info = document['personalInfo']
        profile.profile_details = document['profileDetails']
        profile.social_links = document['socialLinks']
        profile.account_settings = document['accountSettings']
        profile.completion_percentage = score.percentage
        profile.is_profile_complete = score.is_complete
        profile.last_updated = ctx.now
        if created:
            self.profiles.add(profile)
        self.db.commit()

        self.sync.sync_profile_completion(ctx.actor_id, score.is_complete)
        logger.info(
            f"Candidate profile {'created' if created else 'updated'} for {ctx.actor_id}: "
            f"{score.percentage}% complete"
        )
        return CandidateProfileOut.from_profile(profile), created

    def delete(self, ctx: RequestContext) -> None:
        profile = self.profiles.get_by_user(ctx.actor_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        self.profiles.delete(profile)
        self.sync.reset_profile_completion(ctx.actor_id)

    def stats(self, ctx: RequestContext) -> Dict[str, Any]:
        profile = self.profiles.get_by_user(ctx.actor_id)
        if profile is None:
            raise NotFoundError("Profile not found")

        by_status = self.applications.status_counts(candidate_id=ctx.actor_id)
        by_status.pop('withdrawn', None)
        return {
            'totalApplications': sum(by_status.values()),
            **by_status,
            'savedJobs': self.saved_jobs.count_for_user(ctx.actor_id),
            'profileCompletion': profile.completion_percentage or 0,
            'isProfileComplete': bool(profile.is_profile_complete),
        }

    # === Public views ===

    def public_profile(self, user_id: uuid.UUID) -> Dict[str, Any]:
        """Reduced profile safe to show to anyone."""
        profile = self.profiles.get_by_user(user_id)
        if profile is None:
            raise NotFoundError("Profile not found")

        personal = profile.personal_info or {}
        details = profile.profile_details or {}
        return {
            'personalInfo': {
                key: personal.get(key)
                for key in ('fullName', 'title', 'experience', 'education', 'profileImage')
            },
            'profileDetails': {
                'nationality': details.get('nationality'),
                'biography': details.get('biography'),
            },
            'isProfileComplete': bool(profile.is_profile_complete),
            'completionPercentage': profile.completion_percentage or 0,
        }

    def filter_options(self) -> Dict[str, Any]:
        options = self.profiles.filter_options()
        return {
            'experienceLevels': options['experiences'],
            'educationLevels': options['educations'],
            'locations': options['locations'],
            'genders': options['genders'],
            'completionRanges': COMPLETION_RANGES,
        }

    def list_candidates(
        self,
        params: CandidateSearchParams,
        page: PageRequest,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        ctx: Optional[RequestContext] = None
    ) -> Dict[str, Any]:
        conditions = candidate_filters(params).conditions
        order_by = resolve_sort(sort_by, sort_order, CANDIDATE_SORTS, CANDIDATE_DEFAULT_SORT)
        profiles, total = self.profiles.find_page(conditions, order_by, page)

        saved_ids = set()
        if ctx is not None and ctx.is_employer:
            saved_ids = self.saved.saved_candidate_ids(ctx.actor_id, [p.user_id for p in profiles])

        today = (ctx.now if ctx else datetime.now()).date()
        candidates = [
            CandidateProfileOut.from_profile(
                profile,
                include_user=True,
                stats={
                    'applications': self.applications.count(candidate_id=profile.user_id),
                    'age': _age(profile.profile_details or {}, today),
                    'isSaved': profile.user_id in saved_ids,
                },
            )
            for profile in profiles
        ]
        return {
            'candidates': candidates,
            'pagination': Pagination.from_info(PageInfo.build(page, total)),
            'filters': self.filter_options(),
        }

    def candidate_details(self, identifier: uuid.UUID, ctx: Optional[RequestContext] = None) -> Dict[str, Any]:
        """
        Full public profile by profile id or user id.

        Recent applications are shown to the candidate themself and to
        employers; private profiles raise AuthorizationError.
        """
        profile = self.profiles.get_by_id_or_user(identifier)
        if profile is None:
            raise NotFoundError("Candidate not found")
        if not _is_public(profile):
            raise AuthorizationError("This profile is private")

        is_owner = ctx is not None and ctx.actor_id == profile.user_id
        applications = []
        if is_owner or (ctx is not None and ctx.is_employer):
            recent, _ = self.applications.list_for_candidate(
                profile.user_id, PageRequest(page=1, limit=RECENT_APPLICATIONS)
            )
            applications = [ApplicationOut.from_application(a, include_job=True) for a in recent]

        is_saved = False
        if ctx is not None and ctx.is_employer:
            is_saved = self.saved.get(ctx.actor_id, profile.user_id) is not None

        today = (ctx.now if ctx else datetime.now()).date()
        candidate = CandidateProfileOut.from_profile(
            profile,
            include_user=True,
            stats={
                'applications': self.applications.count(candidate_id=profile.user_id),
                'savedJobs': self.saved_jobs.count_for_user(profile.user_id) if is_owner else 0,
                'age': _age(profile.profile_details or {}, today),
                'isSaved': is_saved,
            },
        )
        return {
            'candidate': candidate,
            'applications': applications,
            'isOwner': is_owner,
            'canEdit': is_owner or (ctx is not None and ctx.is_admin),
        }

    # === Saved candidates (employers) ===

    def save_candidate(self, candidate_id: uuid.UUID, ctx: RequestContext) -> SavedCandidateOut:
        if self.profiles.get_by_user(candidate_id) is None:
            raise NotFoundError("Candidate not found")
        if self.saved.get(ctx.actor_id, candidate_id) is not None:
            raise ConflictError("Candidate already saved")

        saved = self.saved.add(ctx.actor_id, candidate_id)
        logger.info(f"Employer {ctx.actor_id} saved candidate {candidate_id}")
        return SavedCandidateOut(
            id=saved.id, candidate_id=saved.candidate_id, saved_at=saved.saved_at, notes=saved.notes
        )

    def unsave_candidate(self, candidate_id: uuid.UUID, ctx: RequestContext) -> None:
        saved = self.saved.get(ctx.actor_id, candidate_id)
        if saved is None:
            raise NotFoundError("Saved candidate not found")
        self.saved.delete(saved)

    def is_saved(self, candidate_id: uuid.UUID, ctx: RequestContext) -> bool:
        return self.saved.get(ctx.actor_id, candidate_id) is not None

    def saved_count(self, ctx: RequestContext) -> int:
        return self.saved.count_for_employer(ctx.actor_id)

    def saved_candidates(self, ctx: RequestContext, page: PageRequest) -> Dict[str, Any]:
        entries, total = self.saved.list_for_employer(ctx.actor_id, page)
        profiles = self.profiles.get_many_by_user([e.candidate_id for e in entries])

        results = []
        for entry in entries:
            profile = profiles.get(entry.candidate_id)
            results.append(SavedCandidateOut(
                id=entry.id,
                candidate_id=entry.candidate_id,
                saved_at=entry.saved_at,
                notes=entry.notes,
                candidate=UserSummary.from_user(entry.candidate),
                profile=CandidateProfileOut.from_profile(profile) if profile else None,
            ))
        return {
            'savedCandidates': results,
            'pagination': Pagination.from_info(PageInfo.build(page, total)),
        }
