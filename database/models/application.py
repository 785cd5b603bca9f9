import uuid

from sqlalchemy import Column, Integer, Text, Boolean, ForeignKey, Uuid, Index
from sqlalchemy.orm import relationship

from core.lifecycle.states import ApplicationStatus
from .base import Base, JSONType, UTCDateTime, utcnow


class Application(Base):
    """
    A candidate's application to a job.

    Never physically deleted: withdrawal sets is_deleted and the row stops
    being visible to every lifecycle operation.
    """
    __tablename__ = 'applications'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    job_id = Column(Uuid, ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False)
    candidate_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    employer_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)

    cover_letter = Column(Text, nullable=False)
    # {filename, originalName, url, size, mimetype}
    resume = Column(JSONType)

    status = Column(Text, nullable=False, default=ApplicationStatus.PENDING.value)
    # {scheduledDate, duration, type, location, meetingLink, notes}
    interview_details = Column(JSONType)

    applied_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    viewed_by_employer = Column(Boolean, nullable=False, default=False)
    viewed_at = Column(UTCDateTime)

    # Soft delete
    is_deleted = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(UTCDateTime)
    withdrawal_reason = Column(Text)

    # Relationships
    job = relationship("Job", back_populates="applications")
    candidate = relationship("User", foreign_keys=[candidate_id])
    employer = relationship("User", foreign_keys=[employer_id])
    status_history = relationship(
        "ApplicationStatusEvent",
        back_populates="application",
        order_by="ApplicationStatusEvent.id",
        cascade="all, delete-orphan"
    )
    notes = relationship(
        "ApplicationNote",
        back_populates="application",
        order_by="ApplicationNote.id",
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        # One live application per (job, candidate); withdrawn rows don't count
        Index(
            'uq_applications_job_candidate_active', 'job_id', 'candidate_id',
            unique=True,
            postgresql_where=is_deleted.is_(False),
            sqlite_where=is_deleted.is_(False),
        ),
        Index('idx_applications_employer_status', 'employer_id', 'status'),
        Index('idx_applications_candidate_applied', 'candidate_id', 'applied_at'),
        Index('idx_applications_status_applied', 'status', 'applied_at'),
    )


class ApplicationStatusEvent(Base):
    """Append-only status history entry."""
    __tablename__ = 'application_status_history'

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(Uuid, ForeignKey('applications.id', ondelete='CASCADE'), nullable=False)
    status = Column(Text, nullable=False)
    note = Column(Text)
    updated_by = Column(Uuid, ForeignKey('users.id', ondelete='SET NULL'))
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)

    application = relationship("Application", back_populates="status_history")

    __table_args__ = (
        Index('idx_status_history_application', 'application_id'),
    )


class ApplicationNote(Base):
    """Free-text note attributed to an actor."""
    __tablename__ = 'application_notes'

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(Uuid, ForeignKey('applications.id', ondelete='CASCADE'), nullable=False)
    text = Column(Text, nullable=False)
    created_by = Column(Uuid, ForeignKey('users.id', ondelete='SET NULL'))
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    application = relationship("Application", back_populates="notes")

    __table_args__ = (
        Index('idx_application_notes_application', 'application_id'),
    )
