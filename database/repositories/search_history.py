import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, distinct, func, select

from core.filters.builder import contains
from database.models import SearchHistory
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class SearchHistoryRepository(BaseRepository):
    def find(self, user_id: Optional[uuid.UUID], query: str) -> Optional[SearchHistory]:
        owner = SearchHistory.user_id.is_(None) if user_id is None else SearchHistory.user_id == user_id
        stmt = select(SearchHistory).where(owner, SearchHistory.search_query == query)
        return self.db.execute(stmt).scalars().first()

    def log(
        self,
        user_id: Optional[uuid.UUID],
        query: str,
        search_type: str,
        filters: Dict[str, Any],
        now: datetime,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> SearchHistory:
        """
        Record a completed search; a repeat by the same user bumps its count.

        `query` must already be normalized (trimmed, lowercase).
        """
        entry = self.find(user_id, query)
        if entry is not None:
            entry.search_count = (entry.search_count or 0) + 1
            entry.last_searched = now
            # New dict so the JSON column registers the change
            entry.filters = {**(entry.filters or {}), **filters}
            if ip_address:
                entry.ip_address = ip_address
            if user_agent:
                entry.user_agent = user_agent
        else:
            entry = SearchHistory(
                user_id=user_id,
                search_query=query,
                search_type=search_type,
                filters=dict(filters),
                ip_address=ip_address,
                user_agent=user_agent,
                search_count=1,
                last_searched=now,
            )
            self.db.add(entry)
        self.flush_or_conflict("Search already recorded")
        self.db.commit()
        return entry

    def recent_for_user(self, user_id: uuid.UUID, limit: int = 10) -> List[SearchHistory]:
        stmt = (
            select(SearchHistory)
            .where(SearchHistory.user_id == user_id)
            .order_by(SearchHistory.last_searched.desc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def popular(self, min_count: int = 2, limit: int = 10) -> List[Dict[str, Any]]:
        total = func.sum(SearchHistory.search_count).label('total_searches')
        last = func.max(SearchHistory.last_searched).label('last_searched')
        stmt = (
            select(
                SearchHistory.search_query,
                total,
                func.count(distinct(SearchHistory.user_id)),
                last,
            )
            .group_by(SearchHistory.search_query)
            .having(total >= min_count)
            .order_by(total.desc(), last.desc())
            .limit(limit)
        )
        return [
            {
                'searchQuery': query,
                'totalSearches': int(total_searches),
                'uniqueUserCount': int(users),
                'lastSearched': last_searched,
            }
            for query, total_searches, users, last_searched in self.db.execute(stmt)
        ]

    def trending(self, since: datetime, limit: int = 10) -> List[Dict[str, Any]]:
        recent = func.sum(SearchHistory.search_count).label('recent_searches')
        last = func.max(SearchHistory.last_searched).label('last_searched')
        stmt = (
            select(SearchHistory.search_query, recent, last)
            .where(SearchHistory.last_searched >= since)
            .group_by(SearchHistory.search_query)
            .order_by(recent.desc(), last.desc())
            .limit(limit)
        )
        return [
            {'searchQuery': query, 'recentSearches': int(count), 'lastSearched': last_searched}
            for query, count, last_searched in self.db.execute(stmt)
        ]

    def suggestions(self, term: str, limit: int = 5) -> List[Dict[str, Any]]:
        """Stored queries containing `term`, excluding the exact term itself."""
        count = func.sum(SearchHistory.search_count).label('count')
        stmt = (
            select(SearchHistory.search_query, count)
            .where(contains(SearchHistory.search_query, term), SearchHistory.search_query != term)
            .group_by(SearchHistory.search_query)
            .order_by(count.desc())
            .limit(limit)
        )
        return [
            {'suggestion': query, 'count': int(c)}
            for query, c in self.db.execute(stmt)
        ]

    def clear_for_user(self, user_id: uuid.UUID) -> int:
        result = self.db.execute(delete(SearchHistory).where(SearchHistory.user_id == user_id))
        self.db.commit()
        return result.rowcount
