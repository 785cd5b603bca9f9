import logging
import uuid
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, or_, select, update

from database.models import PipelineStatus
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

# (name, key, color, order)
DEFAULT_STATUSES = (
    ("Pending", "pending", "bg-yellow-100 text-yellow-800", 1),
    ("Reviewed", "reviewed", "bg-blue-100 text-blue-800", 2),
    ("Shortlisted", "shortlisted", "bg-purple-100 text-purple-800", 3),
    ("Interview", "interview", "bg-indigo-100 text-indigo-800", 4),
    ("Hired", "hired", "bg-green-100 text-green-800", 5),
    ("Rejected", "rejected", "bg-red-100 text-red-800", 6),
)


class StatusRepository(BaseRepository):
    def ensure_defaults(self) -> int:
        """Insert any missing shared default statuses. Returns how many were added."""
        existing = set(self.db.execute(
            select(PipelineStatus.key).where(PipelineStatus.is_default.is_(True))
        ).scalars().all())

        added = 0
        for name, key, color, order in DEFAULT_STATUSES:
            if key in existing:
                continue
            self.db.add(PipelineStatus(
                name=name, key=key, color=color, order=order, is_default=True, employer_id=None
            ))
            added += 1
        if added:
            self.db.commit()
            logger.info(f"Seeded {added} default pipeline status(es)")
        return added

    def list_for_employer(self, employer_id: uuid.UUID) -> List[PipelineStatus]:
        stmt = (
            select(PipelineStatus)
            .where(or_(
                PipelineStatus.is_default.is_(True),
                (PipelineStatus.employer_id == employer_id) & PipelineStatus.is_active.is_(True),
            ))
            .order_by(PipelineStatus.order, PipelineStatus.created_at)
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_owned(self, status_id: uuid.UUID, employer_id: uuid.UUID) -> Optional[PipelineStatus]:
        """An employer's own status, or a shared default (so callers can refuse edits)."""
        stmt = select(PipelineStatus).where(
            PipelineStatus.id == status_id,
            or_(PipelineStatus.employer_id == employer_id, PipelineStatus.is_default.is_(True)),
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def key_taken(self, key: str, employer_id: uuid.UUID, exclude_id: Optional[uuid.UUID] = None) -> bool:
        stmt = select(PipelineStatus.id).where(
            PipelineStatus.key == key,
            or_(PipelineStatus.employer_id == employer_id, PipelineStatus.is_default.is_(True)),
        )
        if exclude_id is not None:
            stmt = stmt.where(PipelineStatus.id != exclude_id)
        return self.db.execute(stmt.limit(1)).first() is not None

    def next_order(self, employer_id: uuid.UUID) -> int:
        highest = self.db.execute(
            select(func.max(PipelineStatus.order)).where(PipelineStatus.employer_id == employer_id)
        ).scalar_one()
        return (highest or 0) + 1

    def add(self, status: PipelineStatus) -> PipelineStatus:
        self.db.add(status)
        self.flush_or_conflict("Status with this name already exists")
        self.db.commit()
        return status

    def reorder(self, employer_id: uuid.UUID, orders: Iterable[Tuple[uuid.UUID, int]]) -> int:
        """Set order on the employer's custom statuses; defaults are skipped."""
        updated = 0
        for status_id, order in orders:
            result = self.db.execute(
                update(PipelineStatus)
                .where(
                    PipelineStatus.id == status_id,
                    PipelineStatus.employer_id == employer_id,
                    PipelineStatus.is_default.is_(False),
                )
                .values(order=order)
                .execution_options(synchronize_session=False)
            )
            updated += result.rowcount
        self.db.commit()
        return updated
