import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import extract, func, select
from sqlalchemy.orm import selectinload

from core.filters.builder import PageRequest, is_unset
from core.lifecycle.states import ApplicationStatus
from database.models import Application
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ApplicationRepository(BaseRepository):
    def _select(self):
        return select(Application).options(
            selectinload(Application.status_history),
            selectinload(Application.notes),
        )

    def get(self, application_id: uuid.UUID) -> Optional[Application]:
        stmt = self._select().where(Application.id == application_id)
        return self.db.execute(stmt).unique().scalar_one_or_none()

    def get_live(self, application_id: uuid.UUID) -> Optional[Application]:
        stmt = self._select().where(
            Application.id == application_id, Application.is_deleted.is_(False)
        )
        return self.db.execute(stmt).unique().scalar_one_or_none()

    def find_live_for(self, job_id: uuid.UUID, candidate_id: uuid.UUID) -> Optional[Application]:
        stmt = select(Application).where(
            Application.job_id == job_id,
            Application.candidate_id == candidate_id,
            Application.is_deleted.is_(False),
        )
        return self.db.execute(stmt).scalars().first()

    def add(self, application: Application) -> Application:
        self.db.add(application)
        self.flush_or_conflict("You have already applied for this job")
        return application

    def _list(
        self,
        page: PageRequest,
        *conditions: Any,
        status: Optional[str] = None
    ) -> Tuple[List[Application], int]:
        stmt = self._select().where(Application.is_deleted.is_(False), *conditions)
        if not is_unset(status):
            stmt = stmt.where(Application.status == status)
        stmt = stmt.order_by(Application.applied_at.desc(), Application.id)
        return self._page(stmt, page)

    def list_for_candidate(
        self,
        candidate_id: uuid.UUID,
        page: PageRequest,
        status: Optional[str] = None
    ) -> Tuple[List[Application], int]:
        return self._list(page, Application.candidate_id == candidate_id, status=status)

    def list_for_employer(
        self,
        employer_id: uuid.UUID,
        page: PageRequest,
        status: Optional[str] = None,
        job_id: Optional[uuid.UUID] = None
    ) -> Tuple[List[Application], int]:
        conditions = [Application.employer_id == employer_id]
        if job_id is not None:
            conditions.append(Application.job_id == job_id)
        return self._list(page, *conditions, status=status)

    def list_for_job(
        self,
        job_id: uuid.UUID,
        page: PageRequest,
        status: Optional[str] = None
    ) -> Tuple[List[Application], int]:
        return self._list(page, Application.job_id == job_id, status=status)

    def recent_for_employer(self, employer_id: uuid.UUID, limit: int = 5) -> List[Application]:
        stmt = (
            select(Application)
            .where(Application.employer_id == employer_id, Application.is_deleted.is_(False))
            .order_by(Application.applied_at.desc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    # === Aggregates ===

    def _scope(self, candidate_id=None, employer_id=None, job_id=None) -> List[Any]:
        conditions = [Application.is_deleted.is_(False)]
        if candidate_id is not None:
            conditions.append(Application.candidate_id == candidate_id)
        if employer_id is not None:
            conditions.append(Application.employer_id == employer_id)
        if job_id is not None:
            conditions.append(Application.job_id == job_id)
        return conditions

    def count(self, candidate_id=None, employer_id=None, job_id=None) -> int:
        stmt = select(func.count(Application.id)).where(
            *self._scope(candidate_id, employer_id, job_id)
        )
        return int(self.db.execute(stmt).scalar_one())

    def status_counts(self, candidate_id=None, employer_id=None, job_id=None) -> Dict[str, int]:
        """Live applications per status; every known status is present."""
        counts = {status.value: 0 for status in ApplicationStatus}
        stmt = (
            select(Application.status, func.count(Application.id))
            .where(*self._scope(candidate_id, employer_id, job_id))
            .group_by(Application.status)
        )
        for status, count in self.db.execute(stmt):
            counts[status] = int(count)
        return counts

    def monthly_counts(self, candidate_id=None, employer_id=None, months: int = 12) -> List[Dict[str, int]]:
        year = extract('year', Application.applied_at).label('year')
        month = extract('month', Application.applied_at).label('month')
        stmt = (
            select(year, month, func.count(Application.id))
            .where(*self._scope(candidate_id, employer_id))
            .group_by(year, month)
            .order_by(year.desc(), month.desc())
            .limit(months)
        )
        return [
            {'year': int(y), 'month': int(m), 'count': int(c)}
            for y, m, c in self.db.execute(stmt)
        ]

    def mark_viewed(self, application: Application, when) -> None:
        application.viewed_by_employer = True
        application.viewed_at = when
        self.db.commit()
