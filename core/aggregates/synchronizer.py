#!/usr/bin/env python3
"""
Entity Aggregates Synchronizer.

Keeps derived values in step with the writes that drive them:
- job.applications_count / job.hired_count from application events
- user.is_profile_complete from profile saves
- job.status Active -> Expired once the expiration date has passed

The primary write is committed by the caller first; each adjustment here
is its own single-row UPDATE and commit. There is no cross-row
transaction, so a failure between the two leaves the counter off until
recompute_job_counters() is run.
"""

import logging
import uuid
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import AggregateSyncError
from core.lifecycle.state_machine import CounterDelta
from core.lifecycle.states import ApplicationStatus, JobStatus
from database.models import Application, Job, User

logger = logging.getLogger(__name__)


class AggregateSynchronizer:
    def __init__(self, db: Session):
        self.db = db

    def _execute(self, stmt, description: str) -> int:
        try:
            result = self.db.execute(stmt.execution_options(synchronize_session=False))
            self.db.commit()
            return result.rowcount
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to {description}: {e}")
            raise AggregateSyncError(f"Failed to {description}") from e

    def apply_job_deltas(self, job_id: uuid.UUID, delta: CounterDelta) -> None:
        """
        Atomically increment the job's counters by the given delta.

        Args:
            job_id: Job to adjust
            delta: Counter changes produced by a lifecycle operation

        Raises:
            AggregateSyncError: If the UPDATE fails; the primary write stays committed
        """
        if delta.is_empty:
            return

        values = {}
        if delta.applications:
            values['applications_count'] = Job.applications_count + delta.applications
        if delta.hired:
            values['hired_count'] = Job.hired_count + delta.hired

        stmt = update(Job).where(Job.id == job_id).values(**values)
        rows = self._execute(stmt, f"update counters for job {job_id}")
        if rows == 0:
            logger.warning(f"Counter update matched no job {job_id}")
        else:
            logger.info(
                f"Job {job_id} counters adjusted: applications={delta.applications:+d} "
                f"hired={delta.hired:+d}"
            )

    def sync_profile_completion(self, user_id: uuid.UUID, is_complete: bool) -> bool:
        """
        Propagate a profile's complete flag to its user if it differs.

        Returns:
            True if the user row was written
        """
        current = self.db.execute(
            select(User.is_profile_complete).where(User.id == user_id)
        ).scalar_one_or_none()
        if current is None:
            logger.warning(f"No user {user_id} to sync profile completion")
            return False
        if bool(current) == bool(is_complete):
            return False

        stmt = update(User).where(User.id == user_id).values(is_profile_complete=is_complete)
        self._execute(stmt, f"sync profile completion for user {user_id}")
        logger.info(f"User {user_id} profile complete -> {is_complete}")
        return True

    def reset_profile_completion(self, user_id: uuid.UUID) -> bool:
        return self.sync_profile_completion(user_id, False)

    def recompute_job_counters(self, job_id: uuid.UUID) -> Dict[str, int]:
        """Rebuild a job's counters from its live applications."""
        live = (Application.job_id == job_id) & Application.is_deleted.is_(False)
        applications = self.db.execute(
            select(func.count(Application.id)).where(live)
        ).scalar_one()
        hired = self.db.execute(
            select(func.count(Application.id)).where(
                live, Application.status == ApplicationStatus.HIRED.value
            )
        ).scalar_one()

        stmt = update(Job).where(Job.id == job_id).values(
            applications_count=applications, hired_count=hired
        )
        self._execute(stmt, f"recompute counters for job {job_id}")
        logger.info(f"Recomputed job {job_id}: applications={applications} hired={hired}")
        return {'applicationsCount': int(applications), 'hiredCount': int(hired)}

    def refresh_job_status(self, job: Optional[Job], now: datetime) -> bool:
        """
        Correct an Active job whose expiration date has passed.

        Returns:
            True if the job was moved to Expired
        """
        if job is None or job.status != JobStatus.ACTIVE.value or not job.is_past_expiration(now):
            return False

        stmt = update(Job).where(
            Job.id == job.id, Job.status == JobStatus.ACTIVE.value
        ).values(status=JobStatus.EXPIRED.value)
        self._execute(stmt, f"expire job {job.id}")
        self.db.refresh(job)
        logger.info(f"Job {job.id} past expiration, marked {JobStatus.EXPIRED.value}")
        return True

    def expire_overdue_jobs(self, now: datetime, employer_id: Optional[uuid.UUID] = None) -> int:
        """Bulk form of refresh_job_status, optionally scoped to one employer."""
        stmt = update(Job).where(
            Job.status == JobStatus.ACTIVE.value,
            Job.expiration_date < now,
        )
        if employer_id is not None:
            stmt = stmt.where(Job.employer_id == employer_id)
        rows = self._execute(stmt.values(status=JobStatus.EXPIRED.value), "expire overdue jobs")
        if rows:
            logger.info(f"Marked {rows} overdue job(s) {JobStatus.EXPIRED.value}")
        return rows
