import logging
import uuid
from typing import Iterable, List, Optional, Set, Tuple

from sqlalchemy import select
from sqlalchemy.orm import joinedload

from core.filters.builder import PageRequest
from database.models import SavedCandidate, SavedJob
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class SavedJobRepository(BaseRepository):
    def get(self, user_id: uuid.UUID, job_id: uuid.UUID) -> Optional[SavedJob]:
        stmt = select(SavedJob).where(SavedJob.user_id == user_id, SavedJob.job_id == job_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def add(self, user_id: uuid.UUID, job_id: uuid.UUID) -> SavedJob:
        saved = SavedJob(user_id=user_id, job_id=job_id)
        self.db.add(saved)
        self.flush_or_conflict("Job is already saved")
        self.db.commit()
        return saved

    def delete(self, saved: SavedJob) -> None:
        self.db.delete(saved)
        self.db.commit()

    def list_for_user(self, user_id: uuid.UUID, page: PageRequest, order_by) -> Tuple[List[SavedJob], int]:
        stmt = (
            select(SavedJob)
            .options(joinedload(SavedJob.job))
            .where(SavedJob.user_id == user_id)
            .order_by(*order_by, SavedJob.id)
        )
        return self._page(stmt, page)

    def count_for_user(self, user_id: uuid.UUID) -> int:
        return self._count(select(SavedJob.id).where(SavedJob.user_id == user_id))

    def saved_job_ids(self, user_id: uuid.UUID, job_ids: Iterable[uuid.UUID]) -> Set[uuid.UUID]:
        ids = list(job_ids)
        if not ids:
            return set()
        stmt = select(SavedJob.job_id).where(SavedJob.user_id == user_id, SavedJob.job_id.in_(ids))
        return set(self.db.execute(stmt).scalars().all())


class SavedCandidateRepository(BaseRepository):
    def get(self, employer_id: uuid.UUID, candidate_id: uuid.UUID) -> Optional[SavedCandidate]:
        stmt = select(SavedCandidate).where(
            SavedCandidate.employer_id == employer_id,
            SavedCandidate.candidate_id == candidate_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def add(self, employer_id: uuid.UUID, candidate_id: uuid.UUID) -> SavedCandidate:
        saved = SavedCandidate(employer_id=employer_id, candidate_id=candidate_id)
        self.db.add(saved)
        self.flush_or_conflict("Candidate already saved")
        self.db.commit()
        return saved

    def delete(self, saved: SavedCandidate) -> None:
        self.db.delete(saved)
        self.db.commit()

    def list_for_employer(self, employer_id: uuid.UUID, page: PageRequest) -> Tuple[List[SavedCandidate], int]:
        stmt = (
            select(SavedCandidate)
            .options(joinedload(SavedCandidate.candidate))
            .where(SavedCandidate.employer_id == employer_id)
            .order_by(SavedCandidate.saved_at.desc(), SavedCandidate.id)
        )
        return self._page(stmt, page)

    def count_for_employer(self, employer_id: uuid.UUID) -> int:
        return self._count(select(SavedCandidate.id).where(SavedCandidate.employer_id == employer_id))

    def saved_candidate_ids(self, employer_id: uuid.UUID, candidate_ids: Iterable[uuid.UUID]) -> Set[uuid.UUID]:
        ids = list(candidate_ids)
        if not ids:
            return set()
        stmt = select(SavedCandidate.candidate_id).where(
            SavedCandidate.employer_id == employer_id,
            SavedCandidate.candidate_id.in_(ids),
        )
        return set(self.db.execute(stmt).scalars().all())
