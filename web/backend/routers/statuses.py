#!/usr/bin/env python3
"""
Pipeline status endpoints (employers only).
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.context import RequestContext
from ..auth import require_employer
from ..config import AppConfig
from ..dependencies import get_app_config, get_db
from ..models.requests import StatusCreate, StatusEdit, StatusReorder
from ..services.status_service import StatusService
from ..utils import validate_uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/statuses", tags=["statuses"])


def get_status_service(
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config)
) -> StatusService:
    return StatusService(db, config)


@router.get("")
def list_statuses(
    service: StatusService = Depends(get_status_service),
    ctx: RequestContext = Depends(require_employer)
):
    """Shared defaults followed by the employer's active statuses, by order."""
    return {'success': True, 'statuses': service.list_statuses(ctx)}


@router.post("", status_code=201)
def create_status(
    data: StatusCreate,
    service: StatusService = Depends(get_status_service),
    ctx: RequestContext = Depends(require_employer)
):
    status = service.create(data, ctx)
    return {'success': True, 'message': "Status created successfully", 'status': status}


@router.put("/reorder")
def reorder_statuses(
    data: StatusReorder,
    service: StatusService = Depends(get_status_service),
    ctx: RequestContext = Depends(require_employer)
):
    service.reorder(data, ctx)
    return {'success': True, 'message': "Statuses reordered successfully"}


@router.put("/{status_id}")
def update_status(
    status_id: str,
    data: StatusEdit,
    service: StatusService = Depends(get_status_service),
    ctx: RequestContext = Depends(require_employer)
):
    status = service.update(validate_uuid(status_id, "status_id"), data, ctx)
    return {'success': True, 'message': "Status updated successfully", 'status': status}


@router.delete("/{status_id}")
def delete_status(
    status_id: str,
    service: StatusService = Depends(get_status_service),
    ctx: RequestContext = Depends(require_employer)
):
    service.delete(validate_uuid(status_id, "status_id"), ctx)
    return {'success': True, 'message': "Status deleted successfully"}
