#!/usr/bin/env python3
"""
Application State Machine - status changes and their side effects.

Operations mutate Application objects in memory and report the counter
delta the owning Job needs. Persisting the application and applying the
delta are the caller's job (see core.aggregates.synchronizer); the two
happen as separate writes.

Transitions are deliberately loose: an employer may set any status other
than "withdrawn" at any time, including from a terminal state. Only
withdrawal checks the current status.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.context import RequestContext
from core.exceptions import (
    AuthorizationError, InvalidStateTransition, NotFoundError, ValidationError
)
from core.lifecycle.states import (
    ApplicationStatus, InterviewType, JobStatus, NON_WITHDRAWABLE_STATUSES
)
from database.models import Application, ApplicationNote, ApplicationStatusEvent, Job

logger = logging.getLogger(__name__)

SUBMITTED_NOTE = "Application submitted"
DEFAULT_WITHDRAWAL_REASON = "Withdrawn by candidate"


class InterviewDetails(BaseModel):
    """Interview substructure stored on the application when status is interview."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='forbid')

    scheduled_date: datetime
    duration: Optional[int] = Field(default=60, ge=0)
    type: InterviewType = InterviewType.ONLINE
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    notes: Optional[str] = None

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', by_alias=True)


@dataclass
class CounterDelta:
    """Increment to apply to the owning job's counters."""
    applications: int = 0
    hired: int = 0

    @property
    def is_empty(self) -> bool:
        return self.applications == 0 and self.hired == 0


@dataclass
class TransitionOutcome:
    application: Application
    previous_status: Optional[str]
    delta: CounterDelta = field(default_factory=CounterDelta)
    changed: bool = True


def _format_date(value: datetime) -> str:
    return f"{value.month}/{value.day}/{value.year}"


class ApplicationStateMachine:
    """
    Governs application status and the history/counter effects of each change.

    Args:
        idempotent: When True, setting the status an application already
            has is a no-op (no history entry, no counter delta). When False,
            every call appends history and "hired" counts again.
    """

    def __init__(self, idempotent: bool = False):
        self.idempotent = idempotent

    def _append_history(
        self,
        application: Application,
        status: str,
        note: Optional[str],
        ctx: RequestContext,
        actor_recorded: bool = True
    ) -> None:
        application.status_history.append(ApplicationStatusEvent(
            status=status,
            note=note,
            updated_by=ctx.actor_id if actor_recorded else None,
            updated_at=ctx.now,
        ))
        application.updated_at = ctx.now

    def _ensure_live(self, application: Optional[Application]) -> Application:
        if application is None or application.is_deleted:
            raise NotFoundError("Application not found")
        return application

    def _ensure_employer(self, application: Application, ctx: RequestContext) -> None:
        if ctx.is_admin:
            return
        if application.employer_id != ctx.actor_id:
            raise AuthorizationError("Not authorized to manage this application")

    def submit(
        self,
        job: Optional[Job],
        ctx: RequestContext,
        cover_letter: str,
        resume: Optional[Dict[str, Any]] = None
    ) -> TransitionOutcome:
        """
        Create a pending application for the acting candidate.

        Duplicate detection is left to the store's unique index and the
        caller's pre-check; this only validates the job and the input.
        """
        if not ctx.is_candidate:
            raise AuthorizationError("Only candidates can apply for jobs")
        if job is None or job.status != JobStatus.ACTIVE.value:
            raise NotFoundError("Job not found or no longer active")
        if not cover_letter or not cover_letter.strip():
            raise ValidationError("Cover letter is required")

        application = Application(
            job_id=job.id,
            candidate_id=ctx.actor_id,
            employer_id=job.employer_id,
            cover_letter=cover_letter.strip(),
            resume=resume,
            status=ApplicationStatus.PENDING.value,
            applied_at=ctx.now,
            updated_at=ctx.now,
            is_deleted=False,
            viewed_by_employer=False,
        )
        # Seed entry carries no actor, matching a system-recorded submission
        self._append_history(
            application, ApplicationStatus.PENDING.value, SUBMITTED_NOTE, ctx, actor_recorded=False
        )
        logger.info(f"Application submitted for job {job.id} by candidate {ctx.actor_id}")
        return TransitionOutcome(
            application=application,
            previous_status=None,
            delta=CounterDelta(applications=1),
        )

    def transition(
        self,
        application: Optional[Application],
        new_status: ApplicationStatus,
        ctx: RequestContext,
        note: Optional[str] = None,
        interview: Optional[InterviewDetails] = None
    ) -> TransitionOutcome:
        """
        Set a new status on behalf of the owning employer.

        Args:
            application: Live application (soft-deleted rows raise NotFoundError)
            new_status: Target status; "withdrawn" is only reachable via withdraw()
            ctx: Acting employer or admin
            note: History note; defaults to "Status updated to <status>"
            interview: Required when new_status is interview

        Returns:
            TransitionOutcome with the hired delta when the target is "hired"
        """
        application = self._ensure_live(application)
        self._ensure_employer(application, ctx)
        new_status = ApplicationStatus(new_status)

        if new_status == ApplicationStatus.WITHDRAWN:
            raise ValidationError("Only the candidate can withdraw an application")
        if new_status == ApplicationStatus.INTERVIEW and interview is None:
            raise ValidationError("Interview details are required for status 'interview'")

        previous = application.status
        # Rescheduling an interview is still a change
        if self.idempotent and previous == new_status.value and interview is None:
            logger.info(f"Application {application.id} already {previous}, skipping transition")
            return TransitionOutcome(application=application, previous_status=previous, changed=False)

        application.status = new_status.value
        if interview is not None:
            application.interview_details = interview.to_document()
        self._append_history(
            application,
            new_status.value,
            note or f"Status updated to {new_status.value}",
            ctx,
        )

        delta = CounterDelta(hired=1 if new_status == ApplicationStatus.HIRED else 0)
        logger.info(f"Application {application.id}: {previous} -> {new_status.value}")
        return TransitionOutcome(application=application, previous_status=previous, delta=delta)

    def schedule_interview(
        self,
        application: Optional[Application],
        interview: InterviewDetails,
        ctx: RequestContext
    ) -> TransitionOutcome:
        note = f"Interview scheduled for {_format_date(interview.scheduled_date)}"
        return self.transition(
            application, ApplicationStatus.INTERVIEW, ctx, note=note, interview=interview
        )

    def withdraw(
        self,
        application: Optional[Application],
        ctx: RequestContext,
        reason: Optional[str] = None
    ) -> TransitionOutcome:
        """Soft-delete the application on behalf of its candidate."""
        application = self._ensure_live(application)
        if application.candidate_id != ctx.actor_id:
            raise AuthorizationError("Only the applicant can withdraw this application")

        previous = application.status
        if previous in {s.value for s in NON_WITHDRAWABLE_STATUSES}:
            raise InvalidStateTransition(f"Cannot withdraw application with status: {previous}")

        reason = (reason or '').strip() or DEFAULT_WITHDRAWAL_REASON
        application.is_deleted = True
        application.deleted_at = ctx.now
        application.withdrawal_reason = reason
        application.status = ApplicationStatus.WITHDRAWN.value
        self._append_history(application, ApplicationStatus.WITHDRAWN.value, reason, ctx)

        logger.info(f"Application {application.id} withdrawn from {previous}")
        return TransitionOutcome(
            application=application,
            previous_status=previous,
            delta=CounterDelta(applications=-1),
        )

    def add_note(
        self,
        application: Optional[Application],
        text: str,
        ctx: RequestContext
    ) -> ApplicationNote:
        application = self._ensure_live(application)
        self._ensure_employer(application, ctx)
        if not text or not text.strip():
            raise ValidationError("Note text is required")

        note = ApplicationNote(text=text.strip(), created_by=ctx.actor_id, created_at=ctx.now)
        application.notes.append(note)
        application.updated_at = ctx.now
        return note
