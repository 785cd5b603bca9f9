#!/usr/bin/env python3
"""
Search history service - per-user recent searches and global search trends.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from core.context import RequestContext, utcnow
from core.exceptions import ValidationError
from database.repositories import SearchHistoryRepository
from ..config import AppConfig
from ..models.requests import SearchLog
from ..models.responses import SearchHistoryOut
from .base import BaseService

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
RECENT_LIMIT = 10
TRENDING_WINDOW = timedelta(days=7)


def normalize_query(query: Optional[str]) -> str:
    return (query or '').strip().lower()


class SearchHistoryService(BaseService):
    def __init__(self, db: Session, config: AppConfig):
        super().__init__(db, config)
        self.history = SearchHistoryRepository(db)

    def log_search(
        self,
        data: SearchLog,
        ctx: Optional[RequestContext] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> SearchHistoryOut:
        """
        Record a completed search; anonymous searches are kept without an owner.

        Raises:
            ValidationError: Query shorter than two characters
        """
        query = normalize_query(data.search_query)
        if len(query) < MIN_QUERY_LENGTH:
            raise ValidationError(f"Search query must be at least {MIN_QUERY_LENGTH} characters long")

        entry = self.history.log(
            user_id=ctx.actor_id if ctx else None,
            query=query,
            search_type=data.search_type,
            filters=data.filters,
            now=ctx.now if ctx else utcnow(),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return SearchHistoryOut.from_entry(entry)

    def recent(self, ctx: RequestContext) -> List[SearchHistoryOut]:
        return [SearchHistoryOut.from_entry(e) for e in self.history.recent_for_user(ctx.actor_id, RECENT_LIMIT)]

    def popular(self, min_count: int = 2, limit: int = 10) -> List[Dict[str, Any]]:
        return self.history.popular(min_count=min_count, limit=limit)

    def trending(self, limit: int = 10) -> List[Dict[str, Any]]:
        return self.history.trending(utcnow() - TRENDING_WINDOW, limit=limit)

    def suggestions(self, query: Optional[str], limit: int = 5) -> List[Dict[str, Any]]:
        term = normalize_query(query)
        if len(term) < MIN_QUERY_LENGTH:
            return []
        return self.history.suggestions(term, limit=limit)

    def clear(self, ctx: RequestContext) -> int:
        removed = self.history.clear_for_user(ctx.actor_id)
        logger.info(f"Cleared {removed} search history entries for user {ctx.actor_id}")
        return removed
