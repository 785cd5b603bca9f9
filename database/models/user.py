import uuid

from sqlalchemy import Column, Text, Boolean, Uuid, Index
from sqlalchemy.orm import relationship

from .base import Base, UTCDateTime, utcnow


class User(Base):
    """
    Account record. Credentials live with the auth provider; this row carries
    identity, contact details used for notifications, and the denormalized
    profile-completion flag.
    """
    __tablename__ = 'users'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text)
    username = Column(Text, unique=True)
    email = Column(Text, nullable=False, unique=True)
    role = Column(Text, nullable=False, default='candidate')  # candidate|employer|admin

    phone = Column(Text, nullable=False, default='')
    address = Column(Text, nullable=False, default='')
    avatar = Column(Text)

    # Derived from the owning profile's completion score
    is_profile_complete = Column(Boolean, nullable=False, default=False)
    is_email_verified = Column(Boolean, nullable=False, default=False)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    candidate_profile = relationship("CandidateProfile", back_populates="user", uselist=False)
    employer_profile = relationship("EmployerProfile", back_populates="user", uselist=False)

    __table_args__ = (
        Index('idx_users_role', 'role'),
    )

    @property
    def display_name(self) -> str:
        return self.name or self.username or self.email
