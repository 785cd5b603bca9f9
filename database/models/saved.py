import uuid

from sqlalchemy import Column, Text, ForeignKey, Uuid, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base, UTCDateTime, utcnow


class SavedJob(Base):
    """Candidate bookmark of a job. At most one per (user, job)."""
    __tablename__ = 'saved_jobs'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    job_id = Column(Uuid, ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False)
    saved_date = Column(UTCDateTime, nullable=False, default=utcnow)
    notes = Column(Text)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    job = relationship("Job")

    __table_args__ = (
        UniqueConstraint('user_id', 'job_id', name='uq_saved_jobs_user_job'),
        Index('idx_saved_jobs_user', 'user_id'),
        Index('idx_saved_jobs_saved_date', 'saved_date'),
    )


class SavedCandidate(Base):
    """Employer bookmark of a candidate. At most one per (employer, candidate)."""
    __tablename__ = 'saved_candidates'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    employer_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    candidate_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    saved_at = Column(UTCDateTime, nullable=False, default=utcnow)
    notes = Column(Text)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    candidate = relationship("User", foreign_keys=[candidate_id])

    __table_args__ = (
        UniqueConstraint('employer_id', 'candidate_id', name='uq_saved_candidates_employer_candidate'),
        Index('idx_saved_candidates_employer_saved', 'employer_id', 'saved_at'),
        Index('idx_saved_candidates_candidate', 'candidate_id'),
    )
