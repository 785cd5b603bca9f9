#!/usr/bin/env python3
"""
Job service - business logic for job postings.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from core.aggregates import AggregateSynchronizer
from core.context import RequestContext, utcnow
from core.exceptions import AuthorizationError, NotFoundError, ValidationError
from core.filters import PageInfo, PageRequest, resolve_sort
from core.filters.queries import (
    JOB_DEFAULT_SORT,
    JOB_SORTS,
    JobListParams,
    JobSearchParams,
    job_list_filters,
    job_search_filters,
)
from core.lifecycle.states import JobStatus
from core.utils import ensure_utc, slugify, split_csv
from database.models import Job
from database.repositories import ApplicationRepository, JobRepository, SavedJobRepository
from ..config import AppConfig
from ..models.requests import JobCreate, JobPromote, JobUpdate
from ..models.responses import ApplicationOut, JobOut, Pagination
from .base import BaseService

logger = logging.getLogger(__name__)

REQUIRED_JOB_FIELDS = (
    'job_title', 'job_description', 'job_type', 'country', 'city',
    'experience_level', 'education_level', 'job_category', 'expiration_date',
)
META_DESCRIPTION_LENGTH = 150


class JobService(BaseService):
    """Service for listing, publishing and managing job postings."""

    def __init__(self, db: Session, config: AppConfig):
        super().__init__(db, config)
        self.jobs = JobRepository(db)
        self.applications = ApplicationRepository(db)
        self.saved = SavedJobRepository(db)
        self.sync = AggregateSynchronizer(db)

    # === Public listing ===

    def _list(
        self,
        conditions: List[Any],
        page: PageRequest,
        sort_by: Optional[str],
        sort_order: Optional[str],
        ctx: Optional[RequestContext],
        now: datetime
    ) -> Dict[str, Any]:
        order_by = resolve_sort(sort_by, sort_order, JOB_SORTS, JOB_DEFAULT_SORT)
        jobs, total = self.jobs.find_page(conditions, order_by, page)

        if ctx is not None and ctx.is_candidate:
            saved_ids = self.saved.saved_job_ids(ctx.actor_id, [j.id for j in jobs])
            results = [JobOut.from_job(job, now, is_saved=job.id in saved_ids) for job in jobs]
        else:
            results = [JobOut.from_job(job, now) for job in jobs]

        return {
            'jobs': results,
            'pagination': Pagination.from_info(PageInfo.build(page, total)),
        }

    def list_jobs(
        self,
        params: JobListParams,
        page: PageRequest,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        ctx: Optional[RequestContext] = None
    ) -> Dict[str, Any]:
        """
        List open jobs with the basic filters.

        Args:
            params: Filter values; unset values impose no constraint
            page: Page window
            sort_by: Sort field name (allowlisted, unknown names use postedDate)
            sort_order: "asc" or "desc"
            ctx: Optional caller; candidates get an isSaved flag per job

        Returns:
            Dict with jobs and pagination
        """
        now = ctx.now if ctx else utcnow()
        conditions = job_list_filters(params, now).conditions
        return self._list(conditions, page, sort_by, sort_order, ctx, now)

    def search_jobs(
        self,
        params: JobSearchParams,
        page: PageRequest,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        ctx: Optional[RequestContext] = None
    ) -> Dict[str, Any]:
        now = ctx.now if ctx else utcnow()
        conditions = job_search_filters(params, now).conditions
        return self._list(conditions, page, sort_by, sort_order, ctx, now)

    def filter_options(self) -> Dict[str, Any]:
        return {
            'jobCategories': self.jobs.distinct_values(Job.job_category),
            'jobTypes': self.jobs.distinct_values(Job.job_type),
            'experienceLevels': self.jobs.distinct_values(Job.experience_level),
            'countries': self.jobs.distinct_values(Job.country),
            'cities': self.jobs.distinct_values(Job.city),
            'states': self.jobs.distinct_values(Job.state),
            'salaryRange': self.jobs.salary_stats(),
        }

    def get_job(self, identifier: str, ctx: Optional[RequestContext] = None) -> JobOut:
        """
        Load a job by id or slug and count the view.

        Raises:
            NotFoundError: If no job matches
        """
        now = ctx.now if ctx else utcnow()
        job = self.jobs.get_by_id_or_slug(identifier)
        if job is None:
            raise NotFoundError("Job not found")

        self.sync.refresh_job_status(job, now)
        self.jobs.increment_views(job.id)
        self.db.refresh(job)

        extra = {}
        if ctx is not None and ctx.is_candidate:
            extra['is_saved'] = self.saved.get(ctx.actor_id, job.id) is not None
        return JobOut.from_job(job, now, **extra)

    # === Employer management ===

    def _owned_job(self, job_id: uuid.UUID, ctx: RequestContext, action: str = "modify") -> Job:
        job = self.jobs.get(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        if job.employer_id != ctx.actor_id and not ctx.is_admin:
            raise AuthorizationError(f"Not authorized to {action} this job")
        return job

    @staticmethod
    def _check_expiration(expiration: Optional[datetime], now: datetime) -> None:
        # Naive dates are taken as UTC
        if expiration is not None and ensure_utc(expiration) <= now:
            raise ValidationError("Expiration date must be in the future")

    @staticmethod
    def _check_salary(low: Optional[int], high: Optional[int]) -> None:
        if low and high and low > high:
            raise ValidationError("Minimum salary cannot exceed maximum salary")

    def create_job(self, data: JobCreate, ctx: RequestContext) -> JobOut:
        missing = [name for name in REQUIRED_JOB_FIELDS if not getattr(data, name)]
        if missing:
            raise ValidationError(
                "Please provide all required fields",
                details={'missing': [to_camel(m) for m in missing]}
            )
        self._check_expiration(data.expiration_date, ctx.now)
        self._check_salary(data.min_salary, data.max_salary)

        job = Job(
            employer_id=ctx.actor_id,
            job_title=data.job_title.strip(),
            job_description=data.job_description,
            job_type=data.job_type,
            salary_min=data.min_salary or 0,
            salary_max=data.max_salary or 0,
            salary_currency=data.currency or 'USD',
            salary_negotiable=bool(data.is_negotiable),
            country=data.country,
            city=data.city,
            state=data.state or '',
            zip_code=data.zip_code or '',
            address=data.address or '',
            is_remote=bool(data.is_remote),
            experience_level=data.experience_level,
            education_level=data.education_level,
            vacancies=data.vacancies or 1,
            job_category=data.job_category,
            tags=split_csv(data.tags),
            benefits=split_csv(data.benefits),
            application_method=data.application_method or 'Platform',
            application_email=data.application_email,
            application_url=data.application_url,
            posted_date=ctx.now,
            expiration_date=ensure_utc(data.expiration_date),
            status=data.status or JobStatus.ACTIVE.value,
            views=0,
            applications_count=0,
            hired_count=0,
            slug=self.jobs.unique_slug(slugify(data.job_title)),
            meta_title=data.meta_title or f"{data.job_title.strip()} - Job Opportunity",
            meta_description=data.meta_description or f"{data.job_description[:META_DESCRIPTION_LENGTH]}...",
        )
        self.jobs.add(job)
        self.db.commit()
        logger.info(f"Job {job.id} created by employer {ctx.actor_id}")
        return JobOut.from_job(job, ctx.now)

    def update_job(self, job_id: uuid.UUID, data: JobUpdate, ctx: RequestContext) -> JobOut:
        job = self._owned_job(job_id, ctx, "update")
        changes = data.model_dump(exclude_unset=True)

        self._check_expiration(changes.get('expiration_date'), ctx.now)
        self._check_salary(
            changes.get('min_salary', job.salary_min), changes.get('max_salary', job.salary_max)
        )

        renamed = {
            'min_salary': 'salary_min',
            'max_salary': 'salary_max',
            'currency': 'salary_currency',
            'is_negotiable': 'salary_negotiable',
        }
        for name, value in changes.items():
            if value is None and name not in ('application_email', 'application_url'):
                continue
            if name in ('tags', 'benefits'):
                value = split_csv(value)
            elif name == 'status':
                value = JobStatus(value).value
            elif name == 'expiration_date':
                value = ensure_utc(value)
            setattr(job, renamed.get(name, name), value)

        if 'job_title' in changes and changes['job_title']:
            job.slug = self.jobs.unique_slug(slugify(job.job_title), exclude_id=job.id)

        self.db.commit()
        # Saving with a past date while Active is corrected immediately
        self.sync.refresh_job_status(job, ctx.now)
        logger.info(f"Job {job.id} updated ({', '.join(sorted(changes)) or 'no fields'})")
        return JobOut.from_job(job, ctx.now)

    def close_job(self, job_id: uuid.UUID, ctx: RequestContext) -> None:
        job = self._owned_job(job_id, ctx, "delete")
        self.jobs.set_status(job, JobStatus.CLOSED)
        logger.info(f"Job {job.id} closed")

    def expire_job(self, job_id: uuid.UUID, ctx: RequestContext) -> None:
        job = self._owned_job(job_id, ctx, "modify")
        self.jobs.set_status(job, JobStatus.EXPIRED)
        logger.info(f"Job {job.id} marked {JobStatus.EXPIRED.value}")

    def recompute_counters(self, job_id: uuid.UUID, ctx: RequestContext) -> Dict[str, int]:
        """Rebuild applicationsCount and hiredCount from the job's live applications."""
        if self.jobs.get(job_id) is None:
            raise NotFoundError("Job not found")
        counters = self.sync.recompute_job_counters(job_id)
        logger.info(f"Counters for job {job_id} recomputed by {ctx.actor_id}")
        return counters

    def promote_job(self, job_id: uuid.UUID, data: JobPromote, ctx: RequestContext) -> JobOut:
        job = self._owned_job(job_id, ctx, "promote")
        if data.action == 'feature':
            job.is_featured = data.value
        elif data.action == 'highlight':
            job.is_highlighted = data.value
        else:
            raise ValidationError("Invalid action")
        self.db.commit()
        logger.info(f"Job {job.id} {data.action} set to {data.value}")
        return JobOut.from_job(job, ctx.now)

    def employer_jobs(
        self,
        ctx: RequestContext,
        page: PageRequest,
        status: Optional[str] = None,
        search: Optional[str] = None
    ) -> Dict[str, Any]:
        self.sync.expire_overdue_jobs(ctx.now, employer_id=ctx.actor_id)
        jobs, total = self.jobs.employer_jobs(ctx.actor_id, page, status=status, search=search)
        counts = self.jobs.application_status_counts([j.id for j in jobs])

        results = []
        for job in jobs:
            out = JobOut.from_job(job, ctx.now, application_stats=counts.get(job.id))
            out.applications_count = counts.get(job.id, {}).get('total', 0)
            out.is_expired = out.days_remaining == 0 or job.status == JobStatus.EXPIRED.value
            results.append(out)

        stats = self.jobs.employer_stats(ctx.actor_id, ctx.now)
        return {
            'jobs': results,
            'stats': {
                'totalJobs': stats['totalJobs'],
                'totalApplications': stats['totalApplications'],
                'pendingApplications': stats['pendingApplications'],
                'activeJobs': stats['activeJobs'],
                'expiredJobs': stats['expiredJobs'],
            },
            'pagination': Pagination.from_info(PageInfo.build(page, total)),
        }

    def employer_stats(self, ctx: RequestContext) -> Dict[str, int]:
        stats = self.jobs.employer_stats(ctx.actor_id, ctx.now)
        stats.pop('pendingApplications', None)
        return stats

    def job_applications(
        self,
        job_id: uuid.UUID,
        ctx: RequestContext,
        page: PageRequest,
        status: Optional[str] = None
    ) -> Dict[str, Any]:
        job = self._owned_job(job_id, ctx, "view applications for")
        applications, total = self.applications.list_for_job(job.id, page, status=status)
        counts = self.applications.status_counts(job_id=job.id)
        counts.pop('withdrawn', None)

        return {
            'applications': [
                ApplicationOut.from_application(a, include_candidate=True, now=ctx.now)
                for a in applications
            ],
            'job': {
                'id': job.id,
                'jobTitle': job.job_title,
                'jobType': job.job_type,
                'location': job.location_label,
            },
            'stats': counts,
            'pagination': Pagination.from_info(PageInfo.build(page, total)),
        }
