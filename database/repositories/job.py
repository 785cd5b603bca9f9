import logging
import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import case, func, or_, select, update

from core.filters.builder import PageRequest, contains, is_unset
from core.lifecycle.states import ApplicationStatus, JobStatus
from database.models import Application, Job
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

APPLICATION_STAT_STATUSES = (
    ApplicationStatus.PENDING,
    ApplicationStatus.REVIEWED,
    ApplicationStatus.SHORTLISTED,
    ApplicationStatus.INTERVIEW,
    ApplicationStatus.HIRED,
    ApplicationStatus.REJECTED,
)


def _parse_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class JobRepository(BaseRepository):
    def get(self, job_id: uuid.UUID) -> Optional[Job]:
        return self._get(Job, job_id)

    def get_by_slug(self, slug: str) -> Optional[Job]:
        return self.db.execute(select(Job).where(Job.slug == slug)).unique().scalar_one_or_none()

    def get_by_id_or_slug(self, identifier: str) -> Optional[Job]:
        job_id = _parse_uuid(identifier)
        if job_id is not None:
            return self.get(job_id)
        return self.get_by_slug(identifier)

    def add(self, job: Job) -> Job:
        self.db.add(job)
        self.flush_or_conflict("A job with this slug already exists")
        return job

    def slug_taken(self, slug: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        stmt = select(Job.id).where(Job.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Job.id != exclude_id)
        return self.db.execute(stmt.limit(1)).first() is not None

    def unique_slug(self, base: str, exclude_id: Optional[uuid.UUID] = None) -> str:
        """First free slug among base, base-1, base-2, ..."""
        base = base or 'job'
        candidate, counter = base, 1
        while self.slug_taken(candidate, exclude_id):
            candidate = f"{base}-{counter}"
            counter += 1
        return candidate

    def find_page(
        self,
        conditions: Sequence[Any],
        order_by: Sequence[Any],
        page: PageRequest
    ) -> Tuple[List[Job], int]:
        stmt = select(Job).where(*conditions).order_by(*order_by, Job.id)
        return self._page(stmt, page)

    def increment_views(self, job_id: uuid.UUID) -> None:
        self.db.execute(
            update(Job).where(Job.id == job_id).values(views=Job.views + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

    def set_status(self, job: Job, status: JobStatus) -> Job:
        job.status = status.value
        self.db.commit()
        return job

    # === Employer views ===

    def employer_jobs(
        self,
        employer_id: uuid.UUID,
        page: PageRequest,
        status: Optional[str] = None,
        search: Optional[str] = None
    ) -> Tuple[List[Job], int]:
        stmt = select(Job).where(Job.employer_id == employer_id)
        if not is_unset(status):
            stmt = stmt.where(Job.status == status)
        if not is_unset(search):
            stmt = stmt.where(contains(Job.job_title, search))
        stmt = stmt.order_by(Job.posted_date.desc(), Job.id)
        return self._page(stmt, page)

    def application_status_counts(self, job_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, Dict[str, int]]:
        """Live application counts per job, broken down by status."""
        ids = list(job_ids)
        counts: Dict[uuid.UUID, Dict[str, int]] = {
            job_id: {s.value: 0 for s in APPLICATION_STAT_STATUSES} for job_id in ids
        }
        if not ids:
            return counts

        stmt = (
            select(Application.job_id, Application.status, func.count(Application.id))
            .where(Application.job_id.in_(ids), Application.is_deleted.is_(False))
            .group_by(Application.job_id, Application.status)
        )
        for job_id, status, count in self.db.execute(stmt):
            counts[job_id][status] = int(count)
        for job_counts in counts.values():
            job_counts['total'] = sum(job_counts.values())
        return counts

    def employer_stats(self, employer_id: uuid.UUID, now: datetime) -> Dict[str, int]:
        def status_sum(condition):
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        stmt = select(
            func.count(Job.id),
            status_sum(Job.status == JobStatus.ACTIVE.value),
            status_sum(or_(Job.status == JobStatus.EXPIRED.value, Job.expiration_date < now)),
            status_sum(Job.status == JobStatus.DRAFT.value),
            status_sum(Job.status == JobStatus.CLOSED.value),
            func.coalesce(func.sum(Job.views), 0),
        ).where(Job.employer_id == employer_id)
        total, active, expired, draft, closed, views = self.db.execute(stmt).one()

        live = (Application.employer_id == employer_id) & Application.is_deleted.is_(False)
        total_applications = self.db.execute(
            select(func.count(Application.id)).where(live)
        ).scalar_one()
        pending = self.db.execute(
            select(func.count(Application.id)).where(
                live, Application.status == ApplicationStatus.PENDING.value
            )
        ).scalar_one()

        return {
            'totalJobs': int(total),
            'activeJobs': int(active),
            'expiredJobs': int(expired),
            'draftJobs': int(draft),
            'closedJobs': int(closed),
            'totalViews': int(views),
            'totalApplications': int(total_applications),
            'pendingApplications': int(pending),
        }

    def count_open_for_employer(self, employer_id: uuid.UUID, now: datetime) -> int:
        return self._count(select(Job.id).where(
            Job.employer_id == employer_id,
            Job.status == JobStatus.ACTIVE.value,
            Job.expiration_date > now,
        ))

    def count_for_employer(self, employer_id: uuid.UUID) -> int:
        return self._count(select(Job.id).where(Job.employer_id == employer_id))

    def recent_open_for_employer(self, employer_id: uuid.UUID, now: datetime, limit: int = 3) -> List[Job]:
        stmt = (
            select(Job)
            .where(
                Job.employer_id == employer_id,
                Job.status == JobStatus.ACTIVE.value,
                Job.expiration_date > now,
            )
            .order_by(Job.posted_date.desc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).unique().scalars().all())

    def open_job_counts_by_employer(self, now: datetime, limit: int) -> List[Tuple[uuid.UUID, int]]:
        """Employers ranked by number of open jobs."""
        open_count = func.count(Job.id).label('open_jobs')
        stmt = (
            select(Job.employer_id, open_count)
            .where(Job.status == JobStatus.ACTIVE.value, Job.expiration_date > now)
            .group_by(Job.employer_id)
            .order_by(open_count.desc())
            .limit(limit)
        )
        return [(employer_id, int(count)) for employer_id, count in self.db.execute(stmt)]

    # === Filter options ===

    def distinct_values(self, column, only_active: bool = True) -> List[str]:
        stmt = select(column).distinct()
        if only_active:
            stmt = stmt.where(Job.status == JobStatus.ACTIVE.value)
        values = self.db.execute(stmt).scalars().all()
        return sorted(v for v in values if v)

    def salary_stats(self) -> Dict[str, Optional[float]]:
        stmt = select(
            func.min(Job.salary_min),
            func.max(Job.salary_max),
            func.avg(Job.salary_max),
        ).where(Job.status == JobStatus.ACTIVE.value)
        low, high, avg = self.db.execute(stmt).one()
        if low is None and high is None:
            return {'minSalary': 0, 'maxSalary': 200000, 'avgSalary': 80000}
        return {
            'minSalary': int(low or 0),
            'maxSalary': int(high or 0),
            'avgSalary': round(float(avg or 0), 2),
        }
