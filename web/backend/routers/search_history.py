#!/usr/bin/env python3
"""
Search history endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from core.context import RequestContext
from ..auth import get_optional_context, get_request_context
from ..config import AppConfig
from ..dependencies import get_app_config, get_db
from ..models.requests import SearchLog
from ..services.search_history_service import SearchHistoryService
from ..utils import client_ip

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/search-history", tags=["search-history"])


def get_search_history_service(
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config)
) -> SearchHistoryService:
    return SearchHistoryService(db, config)


@router.get("/popular")
def get_popular_searches(
    limit: int = Query(default=10, ge=1, le=100),
    min_count: int = Query(default=2, alias="minCount", ge=1),
    service: SearchHistoryService = Depends(get_search_history_service)
):
    return {'success': True, 'popularSearches': service.popular(min_count=min_count, limit=limit)}


@router.get("/trending")
def get_trending_searches(
    limit: int = Query(default=10, ge=1, le=100),
    service: SearchHistoryService = Depends(get_search_history_service)
):
    """Most searched queries over the last 7 days."""
    return {'success': True, 'trendingSearches': service.trending(limit=limit)}


@router.get("/suggestions")
def get_search_suggestions(
    query: Optional[str] = None,
    limit: int = Query(default=5, ge=1, le=50),
    service: SearchHistoryService = Depends(get_search_history_service)
):
    return {'success': True, 'suggestions': service.suggestions(query, limit=limit)}


@router.post("", status_code=201)
def save_search(
    data: SearchLog,
    request: Request,
    service: SearchHistoryService = Depends(get_search_history_service),
    ctx: Optional[RequestContext] = Depends(get_optional_context)
):
    """Record a completed search. Anonymous callers are recorded without a user."""
    entry = service.log_search(
        data, ctx, ip_address=client_ip(request), user_agent=request.headers.get('user-agent')
    )
    return {'success': True, 'message': "Search saved successfully", 'search': entry}


@router.get("/history")
def get_search_history(
    service: SearchHistoryService = Depends(get_search_history_service),
    ctx: RequestContext = Depends(get_request_context)
):
    return {'success': True, 'searchHistory': service.recent(ctx)}


@router.delete("/history")
def clear_search_history(
    service: SearchHistoryService = Depends(get_search_history_service),
    ctx: RequestContext = Depends(get_request_context)
):
    service.clear(ctx)
    return {'success': True, 'message': "Search history cleared successfully"}
