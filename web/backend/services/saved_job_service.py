#!/usr/bin/env python3
"""
Saved job service - candidate bookmarks.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from core.context import RequestContext
from core.exceptions import ConflictError, NotFoundError
from core.filters import PageInfo, PageRequest, resolve_sort
from core.filters.queries import SAVED_JOB_DEFAULT_SORT, SAVED_JOB_SORTS
from database.models import SavedJob
from database.repositories import JobRepository, SavedJobRepository
from ..config import AppConfig
from ..models.responses import JobOut, Pagination, SavedJobOut
from .base import BaseService

logger = logging.getLogger(__name__)


class SavedJobService(BaseService):
    def __init__(self, db: Session, config: AppConfig):
        super().__init__(db, config)
        self.saved = SavedJobRepository(db)
        self.jobs = JobRepository(db)

    @staticmethod
    def _out(saved: SavedJob, ctx: RequestContext) -> SavedJobOut:
        return SavedJobOut(
            id=saved.id,
            job_id=saved.job_id,
            saved_date=saved.saved_date,
            notes=saved.notes,
            job=JobOut.from_job(saved.job, ctx.now) if saved.job is not None else None,
        )

    def save(self, job_id: uuid.UUID, ctx: RequestContext) -> SavedJobOut:
        if self.jobs.get(job_id) is None:
            raise NotFoundError("Job not found")
        if self.saved.get(ctx.actor_id, job_id) is not None:
            raise ConflictError("Job is already saved")

        saved = self.saved.add(ctx.actor_id, job_id)
        logger.info(f"User {ctx.actor_id} saved job {job_id}")
        return self._out(saved, ctx)

    def unsave(self, job_id: uuid.UUID, ctx: RequestContext) -> None:
        saved = self.saved.get(ctx.actor_id, job_id)
        if saved is None:
            raise NotFoundError("Saved job not found")
        self.saved.delete(saved)

    def is_saved(self, job_id: uuid.UUID, ctx: RequestContext) -> bool:
        return self.saved.get(ctx.actor_id, job_id) is not None

    def count(self, ctx: RequestContext) -> int:
        return self.saved.count_for_user(ctx.actor_id)

    def list_saved(
        self,
        ctx: RequestContext,
        page: PageRequest,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None
    ) -> Dict[str, Any]:
        """Saved jobs with job details; bookmarks whose job is gone are skipped."""
        order_by = resolve_sort(sort_by, sort_order, SAVED_JOB_SORTS, SAVED_JOB_DEFAULT_SORT)
        entries, total = self.saved.list_for_user(ctx.actor_id, page, order_by)
        return {
            'savedJobs': [self._out(e, ctx) for e in entries if e.job is not None],
            'pagination': Pagination.from_info(PageInfo.build(page, total)),
        }

    def set_note(self, job_id: uuid.UUID, notes: str, ctx: RequestContext) -> SavedJobOut:
        saved = self.saved.get(ctx.actor_id, job_id)
        if saved is None:
            raise NotFoundError("Saved job not found")
        saved.notes = notes
        self.db.commit()
        return self._out(saved, ctx)
