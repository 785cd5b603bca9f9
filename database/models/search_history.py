import uuid

from sqlalchemy import Column, Integer, Text, ForeignKey, Uuid, Index, UniqueConstraint

from .base import Base, JSONType, UTCDateTime, utcnow


class SearchHistory(Base):
    """
    Logged search query. Repeats by the same user bump search_count instead
    of inserting a new row; anonymous searches have a NULL user_id.
    """
    __tablename__ = 'search_history'

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey('users.id', ondelete='CASCADE'))
    search_query = Column(Text, nullable=False)  # stored lowercase
    search_type = Column(Text, nullable=False, default='keyword')  # job|location|keyword|combined
    filters = Column(JSONType, nullable=False, default=dict)
    ip_address = Column(Text)
    user_agent = Column(Text)
    search_count = Column(Integer, nullable=False, default=1)
    last_searched = Column(UTCDateTime, nullable=False, default=utcnow)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint('user_id', 'search_query', name='uq_search_history_user_query'),
        Index('idx_search_history_query', 'search_query'),
        Index('idx_search_history_last_searched', 'last_searched'),
        Index('idx_search_history_count', 'search_count'),
    )
