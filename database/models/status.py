import uuid

from sqlalchemy import Column, Integer, Text, Boolean, ForeignKey, Uuid, Index, UniqueConstraint

from .base import Base, UTCDateTime, utcnow


class PipelineStatus(Base):
    """
    Display label for an application stage. Default rows are shared by all
    employers; custom rows belong to one employer and are soft-deleted.
    """
    __tablename__ = 'pipeline_statuses'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    key = Column(Text, nullable=False)
    color = Column(Text, nullable=False, default='bg-gray-100 text-gray-800')
    order = Column(Integer, nullable=False, default=0)
    is_default = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    employer_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'))

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint('employer_id', 'key', name='uq_pipeline_statuses_employer_key'),
        Index('idx_pipeline_statuses_employer_order', 'employer_id', 'order'),
    )
