import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import or_, select
from sqlalchemy.orm import joinedload

from core.filters.builder import PageRequest
from core.filters.queries import public_candidates
from database.models import CandidateProfile, EmployerProfile
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class CandidateProfileRepository(BaseRepository):
    def get_by_user(self, user_id: uuid.UUID) -> Optional[CandidateProfile]:
        stmt = select(CandidateProfile).where(CandidateProfile.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_id_or_user(self, identifier: uuid.UUID) -> Optional[CandidateProfile]:
        stmt = (
            select(CandidateProfile)
            .options(joinedload(CandidateProfile.user))
            .where(or_(CandidateProfile.id == identifier, CandidateProfile.user_id == identifier))
        )
        return self.db.execute(stmt).unique().scalars().first()

    def get_many_by_user(self, user_ids: Sequence[uuid.UUID]) -> Dict[uuid.UUID, CandidateProfile]:
        if not user_ids:
            return {}
        stmt = select(CandidateProfile).where(CandidateProfile.user_id.in_(list(user_ids)))
        return {p.user_id: p for p in self.db.execute(stmt).scalars().all()}

    def add(self, profile: CandidateProfile) -> CandidateProfile:
        self.db.add(profile)
        self.flush_or_conflict("Profile already exists for this user")
        return profile

    def delete(self, profile: CandidateProfile) -> None:
        self.db.delete(profile)
        self.db.commit()

    def find_page(
        self,
        conditions: Sequence[Any],
        order_by: Sequence[Any],
        page: PageRequest
    ) -> Tuple[List[CandidateProfile], int]:
        stmt = (
            select(CandidateProfile)
            .options(joinedload(CandidateProfile.user))
            .where(*conditions)
            .order_by(*order_by, CandidateProfile.id)
        )
        return self._page(stmt, page)

    def filter_options(self) -> Dict[str, List[str]]:
        """Distinct values present on public profiles, for filter dropdowns."""
        fields = {
            'locations': CandidateProfile.account_settings[('contact', 'location')].as_string(),
            'genders': CandidateProfile.profile_details['gender'].as_string(),
            'experiences': CandidateProfile.personal_info['experience'].as_string(),
            'educations': CandidateProfile.personal_info['education'].as_string(),
        }
        public = public_candidates().conditions
        options = {}
        for name, column in fields.items():
            values = self.db.execute(select(column).where(*public).distinct()).scalars().all()
            options[name] = sorted(v for v in values if v)
        return options


class EmployerProfileRepository(BaseRepository):
    def get_by_user(self, user_id: uuid.UUID) -> Optional[EmployerProfile]:
        stmt = select(EmployerProfile).where(EmployerProfile.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_id_or_user(self, identifier: uuid.UUID) -> Optional[EmployerProfile]:
        stmt = select(EmployerProfile).where(
            or_(EmployerProfile.id == identifier, EmployerProfile.user_id == identifier)
        )
        return self.db.execute(stmt).scalars().first()

    def get_many_by_user(self, user_ids: Sequence[uuid.UUID]) -> Dict[uuid.UUID, EmployerProfile]:
        if not user_ids:
            return {}
        stmt = select(EmployerProfile).where(EmployerProfile.user_id.in_(list(user_ids)))
        return {p.user_id: p for p in self.db.execute(stmt).scalars().all()}

    def add(self, profile: EmployerProfile) -> EmployerProfile:
        self.db.add(profile)
        self.flush_or_conflict("Profile already exists for this user")
        return profile

    def delete(self, profile: EmployerProfile) -> None:
        self.db.delete(profile)
        self.db.commit()

    def find_page(
        self,
        conditions: Sequence[Any],
        order_by: Sequence[Any],
        page: PageRequest
    ) -> Tuple[List[EmployerProfile], int]:
        stmt = (
            select(EmployerProfile)
            .options(joinedload(EmployerProfile.user))
            .where(*conditions)
            .order_by(*order_by, EmployerProfile.id)
        )
        return self._page(stmt, page)

    def industry_types(self) -> List[str]:
        column = EmployerProfile.founding_info['industryType'].as_string()
        values = self.db.execute(select(column).distinct()).scalars().all()
        return sorted(v for v in values if v)

    def locations(self) -> List[str]:
        values = self.db.execute(select(EmployerProfile.location).distinct()).scalars().all()
        return sorted(v for v in values if v)
