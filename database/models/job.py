import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, Integer, Text, Boolean, ForeignKey, Uuid, Index
from sqlalchemy.orm import relationship

from core.lifecycle.states import JobStatus
from .base import Base, JSONType, UTCDateTime, utcnow


class Job(Base):
    """
    Job posting owned by an employer.

    applications_count, hired_count and views are aggregate counters; they
    are only ever changed through atomic increments, never set by clients.
    """
    __tablename__ = 'jobs'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    employer_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)

    # Basic information
    job_title = Column(Text, nullable=False)
    job_description = Column(Text, nullable=False)
    job_type = Column(Text, nullable=False)

    # Salary range
    salary_min = Column(Integer, nullable=False, default=0)
    salary_max = Column(Integer, nullable=False, default=0)
    salary_currency = Column(Text, nullable=False, default='USD')
    salary_negotiable = Column(Boolean, nullable=False, default=False)

    # Location
    country = Column(Text, nullable=False)
    city = Column(Text, nullable=False)
    state = Column(Text, nullable=False, default='')
    zip_code = Column(Text, nullable=False, default='')
    address = Column(Text, nullable=False, default='')
    is_remote = Column(Boolean, nullable=False, default=False)

    # Requirements and details
    experience_level = Column(Text, nullable=False)
    education_level = Column(Text, nullable=False)
    vacancies = Column(Integer, nullable=False, default=1)
    job_category = Column(Text, nullable=False)
    tags = Column(JSONType, nullable=False, default=list)
    benefits = Column(JSONType, nullable=False, default=list)

    # How candidates apply
    application_method = Column(Text, nullable=False, default='Platform')
    application_email = Column(Text)
    application_url = Column(Text)

    # Timeline and lifecycle
    posted_date = Column(UTCDateTime, nullable=False, default=utcnow)
    expiration_date = Column(UTCDateTime, nullable=False)
    status = Column(Text, nullable=False, default=JobStatus.ACTIVE.value)  # Active|Expired|Closed|Draft
    is_featured = Column(Boolean, nullable=False, default=False)
    is_highlighted = Column(Boolean, nullable=False, default=False)

    # Aggregate counters
    views = Column(Integer, nullable=False, default=0)
    applications_count = Column(Integer, nullable=False, default=0)
    hired_count = Column(Integer, nullable=False, default=0)

    # SEO
    slug = Column(Text, unique=True)
    meta_title = Column(Text)
    meta_description = Column(Text)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    employer = relationship("User", lazy="joined")
    applications = relationship("Application", back_populates="job")

    __table_args__ = (
        Index('idx_jobs_employer', 'employer_id'),
        Index('idx_jobs_status', 'status'),
        Index('idx_jobs_job_type', 'job_type'),
        Index('idx_jobs_category', 'job_category'),
        Index('idx_jobs_experience', 'experience_level'),
        Index('idx_jobs_featured', 'is_featured'),
        Index('idx_jobs_expiration', 'expiration_date'),
        Index('idx_jobs_salary', 'salary_min', 'salary_max'),
    )

    def is_past_expiration(self, now: datetime) -> bool:
        return self.expiration_date is not None and self.expiration_date < now

    @property
    def location_label(self) -> str:
        parts = [p for p in (self.city, self.state, self.country) if p]
        return ", ".join(parts)

    def company_name(self) -> Optional[str]:
        """Company name from the employer profile, falling back to the account name."""
        profile = getattr(self.employer, 'employer_profile', None) if self.employer else None
        if profile is not None:
            name = (profile.company_info or {}).get('companyName')
            if name:
                return name
        return self.employer.name if self.employer else None
