import uuid
from typing import Any, Dict

from sqlalchemy import Column, Integer, Text, Boolean, ForeignKey, Uuid, Index
from sqlalchemy.orm import relationship

from .base import Base, JSONType, UTCDateTime, utcnow


class CandidateProfile(Base):
    """
    Candidate profile sections stored as JSON documents with camelCase keys.

    completion_percentage and is_profile_complete are recomputed from the
    sections on every save and are never accepted from clients.
    """
    __tablename__ = 'candidate_profiles'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True)

    personal_info = Column(JSONType, nullable=False, default=dict)
    profile_details = Column(JSONType, nullable=False, default=dict)
    social_links = Column(JSONType, nullable=False, default=list)
    account_settings = Column(JSONType, nullable=False, default=dict)

    is_profile_complete = Column(Boolean, nullable=False, default=False)
    completion_percentage = Column(Integer, nullable=False, default=0)

    last_updated = Column(UTCDateTime, nullable=False, default=utcnow)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="candidate_profile")

    __table_args__ = (
        Index('idx_candidate_profiles_completion', 'completion_percentage'),
    )

    def to_document(self) -> Dict[str, Any]:
        """Section map in the shape the scorer and API consume."""
        return {
            'personalInfo': dict(self.personal_info or {}),
            'profileDetails': dict(self.profile_details or {}),
            'socialLinks': list(self.social_links or []),
            'accountSettings': dict(self.account_settings or {}),
        }


class EmployerProfile(Base):
    """
    Employer company profile. Contact fields are flat columns; company and
    founding info are JSON sections.
    """
    __tablename__ = 'employer_profiles'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True)

    profile_image = Column(Text, nullable=False, default='')
    phone = Column(Text, nullable=False, default='')
    email = Column(Text, nullable=False, default='')
    location = Column(Text, nullable=False, default='')
    social_links = Column(JSONType, nullable=False, default=list)

    company_info = Column(JSONType, nullable=False, default=dict)
    founding_info = Column(JSONType, nullable=False, default=dict)

    is_featured = Column(Boolean, nullable=False, default=False)
    is_profile_complete = Column(Boolean, nullable=False, default=False)
    completion_percentage = Column(Integer, nullable=False, default=0)

    last_updated = Column(UTCDateTime, nullable=False, default=utcnow)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="employer_profile")

    def to_document(self) -> Dict[str, Any]:
        return {
            'profileImage': self.profile_image or '',
            'phone': self.phone or '',
            'email': self.email or '',
            'location': self.location or '',
            'socialLinks': list(self.social_links or []),
            'companyInfo': dict(self.company_info or {}),
            'foundingInfo': dict(self.founding_info or {}),
        }
