#!/usr/bin/env python3
"""
Application service - submitting, reviewing and withdrawing applications.

Each lifecycle operation commits the application first and then applies
the job counter delta as a separate write. Status notifications go out
only after both have been attempted.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from core.aggregates import AggregateSynchronizer
from core.context import RequestContext
from core.exceptions import AuthorizationError, ConflictError, NotFoundError, StorageError
from core.filters import PageInfo, PageRequest
from core.lifecycle.state_machine import ApplicationStateMachine, InterviewDetails, TransitionOutcome
from core.storage import RESUME_EXTENSIONS, LocalFileStorage
from database.models import Application
from database.repositories import ApplicationRepository, JobRepository, UserRepository
from notification.service import NotificationService
from ..config import AppConfig
from ..models.requests import StatusUpdate
from ..models.responses import ApplicationOut, Pagination, StatusBadge
from ..utils import status_badge
from .base import BaseService, UploadedFile

logger = logging.getLogger(__name__)


class ApplicationService(BaseService):
    """Service for the job application lifecycle."""

    def __init__(
        self,
        db: Session,
        config: AppConfig,
        notifier: Optional[NotificationService] = None,
        storage: Optional[LocalFileStorage] = None
    ):
        super().__init__(db, config)
        self.notifier = notifier
        self.storage = storage
        self.applications = ApplicationRepository(db)
        self.jobs = JobRepository(db)
        self.users = UserRepository(db)
        self.sync = AggregateSynchronizer(db)
        self.machine = ApplicationStateMachine(idempotent=config.lifecycle.idempotent_transitions)

    def _commit_outcome(self, outcome: TransitionOutcome) -> None:
        self.db.commit()
        self.sync.apply_job_deltas(outcome.application.job_id, outcome.delta)

    def _notify(self, application: Application, ctx: RequestContext, note: Optional[str] = None) -> None:
        """Best-effort status notification; failures are logged only."""
        if self.notifier is None or not self.config.notifications.enabled:
            return
        try:
            candidate = self.users.get(application.candidate_id)
            job = application.job
            if candidate is None or job is None:
                logger.warning(f"Skipping notification for application {application.id}: missing candidate or job")
                return
            self.notifier.send_status_notifications(
                candidate=candidate,
                job_title=job.job_title,
                status=application.status,
                company_name=job.company_name(),
                note=note,
                now=ctx.now,
            )
        except Exception as e:
            logger.error(f"Status notification for application {application.id} failed: {e}")

    def _live(self, application_id: uuid.UUID) -> Application:
        application = self.applications.get_live(application_id)
        if application is None:
            raise NotFoundError("Application not found")
        return application

    # === Candidate operations ===

    def apply(
        self,
        ctx: RequestContext,
        job_id: uuid.UUID,
        cover_letter: str,
        resume: Optional[UploadedFile] = None
    ) -> ApplicationOut:
        """
        Submit an application for the acting candidate.

        The resume, when given, is stored before the application row is
        written so a failed upload leaves nothing behind in the database.

        Raises:
            NotFoundError: Job missing or not Active (expired jobs included)
            ConflictError: A live application for this job already exists
            StorageError: Resume upload rejected or failed
        """
        job = self.jobs.get(job_id)
        self.sync.refresh_job_status(job, ctx.now)

        if self.applications.find_live_for(job_id, ctx.actor_id) is not None:
            raise ConflictError("You have already applied for this job")

        outcome = self.machine.submit(job, ctx, cover_letter)
        stored = None
        if resume is not None and resume.data:
            stored = self.storage.upload(
                resume.data, 'resumes', resume.filename,
                mimetype=resume.content_type, allowed=RESUME_EXTENSIONS
            )
            outcome.application.resume = stored.to_metadata()

        try:
            self.applications.add(outcome.application)
        except ConflictError:
            if stored is not None:
                self._discard_upload(stored.key)
            raise
        self._commit_outcome(outcome)
        return ApplicationOut.from_application(outcome.application, now=ctx.now)

    def _discard_upload(self, key: str) -> None:
        try:
            self.storage.delete(key)
        except StorageError as e:
            logger.error(f"Could not remove orphaned resume {key}: {e}")

    def withdraw(self, application_id: uuid.UUID, ctx: RequestContext, reason: Optional[str] = None) -> None:
        outcome = self.machine.withdraw(self._live(application_id), ctx, reason)
        self._commit_outcome(outcome)

    def list_for_candidate(
        self,
        ctx: RequestContext,
        page: PageRequest,
        status: Optional[str] = None
    ) -> Dict[str, Any]:
        applications, total = self.applications.list_for_candidate(ctx.actor_id, page, status=status)
        return {
            'applications': [
                ApplicationOut.from_application(a, include_job=True, now=ctx.now)
                for a in applications
            ],
            'pagination': Pagination.from_info(PageInfo.build(page, total)),
        }

    # === Employer operations ===

    def list_for_employer(
        self,
        ctx: RequestContext,
        page: PageRequest,
        status: Optional[str] = None,
        job_id: Optional[uuid.UUID] = None
    ) -> Dict[str, Any]:
        applications, total = self.applications.list_for_employer(
            ctx.actor_id, page, status=status, job_id=job_id
        )
        return {
            'applications': [
                ApplicationOut.from_application(
                    a, include_job=True, include_candidate=True, now=ctx.now
                )
                for a in applications
            ],
            'pagination': Pagination.from_info(PageInfo.build(page, total)),
        }

    def update_status(self, application_id: uuid.UUID, data: StatusUpdate, ctx: RequestContext) -> ApplicationOut:
        outcome = self.machine.transition(
            self._live(application_id), data.status, ctx,
            note=data.note, interview=data.interview_details
        )
        if outcome.changed:
            self._commit_outcome(outcome)
            self._notify(outcome.application, ctx, data.note)
        return ApplicationOut.from_application(outcome.application, now=ctx.now)

    def schedule_interview(
        self,
        application_id: uuid.UUID,
        interview: InterviewDetails,
        ctx: RequestContext
    ) -> ApplicationOut:
        outcome = self.machine.schedule_interview(self._live(application_id), interview, ctx)
        self._commit_outcome(outcome)
        self._notify(outcome.application, ctx, interview.notes)
        return ApplicationOut.from_application(outcome.application, now=ctx.now)

    def add_note(self, application_id: uuid.UUID, text: str, ctx: RequestContext) -> ApplicationOut:
        application = self._live(application_id)
        self.machine.add_note(application, text, ctx)
        self.db.commit()
        return ApplicationOut.from_application(application, now=ctx.now)

    def resume_metadata(self, application_id: uuid.UUID, ctx: RequestContext) -> Dict[str, Any]:
        application = self._live(application_id)
        if application.employer_id != ctx.actor_id and not ctx.is_admin:
            raise AuthorizationError("Not authorized to view this resume")
        if not application.resume:
            raise NotFoundError("Resume not found")
        return dict(application.resume)

    # === Shared ===

    def get(self, application_id: uuid.UUID, ctx: RequestContext) -> ApplicationOut:
        """
        Fetch one application for its candidate, owning employer or an admin.

        The first view by the owning employer marks it viewed.
        """
        application = self._live(application_id)
        is_owner_employer = application.employer_id == ctx.actor_id
        if not (application.candidate_id == ctx.actor_id or is_owner_employer or ctx.is_admin):
            raise AuthorizationError("Not authorized to view this application")

        if is_owner_employer and not application.viewed_by_employer:
            self.applications.mark_viewed(application, ctx.now)

        return ApplicationOut.from_application(
            application,
            include_job=True,
            include_candidate=True,
            now=ctx.now,
            status_badge=StatusBadge(**status_badge(application.status)),
        )

    def stats(self, ctx: RequestContext) -> Dict[str, Any]:
        scope = {}
        if ctx.is_candidate:
            scope['candidate_id'] = ctx.actor_id
        elif ctx.is_employer:
            scope['employer_id'] = ctx.actor_id

        by_status = self.applications.status_counts(**scope)
        return {
            'byStatus': by_status,
            'byMonth': self.applications.monthly_counts(**scope),
            'total': sum(by_status.values()),
        }
