#!/usr/bin/env python3
"""
Status service - employer pipeline labels.

Shared defaults are seeded on first use and cannot be changed; employers
add, rename, recolour, reorder and soft-delete their own.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from core.context import RequestContext
from core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from core.utils import status_key
from database.models import PipelineStatus
from database.repositories import StatusRepository
from ..config import AppConfig
from ..models.requests import StatusCreate, StatusEdit, StatusReorder
from ..models.responses import PipelineStatusOut
from ..utils import DEFAULT_BADGE_COLOR, validate_uuid
from .base import BaseService

logger = logging.getLogger(__name__)


class StatusService(BaseService):
    def __init__(self, db: Session, config: AppConfig):
        super().__init__(db, config)
        self.statuses = StatusRepository(db)

    def _key_for(self, name: str, ctx: RequestContext, exclude_id: Optional[uuid.UUID] = None) -> str:
        key = status_key(name)
        if not key:
            raise ValidationError("Status name must contain letters or digits")
        if self.statuses.key_taken(key, ctx.actor_id, exclude_id):
            raise ConflictError("Status with this name already exists")
        return key

    def _editable(self, status_id: uuid.UUID, ctx: RequestContext, action: str) -> PipelineStatus:
        status = self.statuses.get_owned(status_id, ctx.actor_id)
        if status is None:
            raise NotFoundError("Status not found")
        if status.is_default:
            raise AuthorizationError(f"Cannot {action} default statuses")
        return status

    def list_statuses(self, ctx: RequestContext) -> List[PipelineStatusOut]:
        self.statuses.ensure_defaults()
        return [PipelineStatusOut.from_status(s) for s in self.statuses.list_for_employer(ctx.actor_id)]

    def create(self, data: StatusCreate, ctx: RequestContext) -> PipelineStatusOut:
        self.statuses.ensure_defaults()
        status = PipelineStatus(
            name=data.name.strip(),
            key=self._key_for(data.name, ctx),
            color=data.color or DEFAULT_BADGE_COLOR,
            order=data.order if data.order is not None else self.statuses.next_order(ctx.actor_id),
            employer_id=ctx.actor_id,
            is_default=False,
            is_active=True,
        )
        self.statuses.add(status)
        logger.info(f"Employer {ctx.actor_id} created status '{status.key}'")
        return PipelineStatusOut.from_status(status)

    def update(self, status_id: uuid.UUID, data: StatusEdit, ctx: RequestContext) -> PipelineStatusOut:
        status = self._editable(status_id, ctx, "modify")
        if data.name:
            status.key = self._key_for(data.name, ctx, exclude_id=status.id)
            status.name = data.name.strip()
        if data.color:
            status.color = data.color
        if data.order is not None:
            status.order = data.order
        if data.is_active is not None:
            status.is_active = data.is_active
        self.statuses.flush_or_conflict("Status with this name already exists")
        self.db.commit()
        return PipelineStatusOut.from_status(status)

    def delete(self, status_id: uuid.UUID, ctx: RequestContext) -> None:
        status = self._editable(status_id, ctx, "delete")
        status.is_active = False
        self.db.commit()
        logger.info(f"Employer {ctx.actor_id} deactivated status '{status.key}'")

    def reorder(self, data: StatusReorder, ctx: RequestContext) -> int:
        pairs = [(validate_uuid(status_id, "status id"), order) for status_id, order in data.pairs()]
        return self.statuses.reorder(ctx.actor_id, pairs)
