import logging
from typing import Any, List, Optional, Tuple, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import ConflictError
from core.filters.builder import PageRequest

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class BaseRepository:
    def __init__(self, db: Session):
        self.db = db

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def flush_or_conflict(self, message: str) -> None:
        """Flush pending writes, translating unique-index violations to ConflictError."""
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"Integrity conflict: {e.orig}")
            raise ConflictError(message) from e

    def _get(self, model: Type[ModelT], entity_id: Any) -> Optional[ModelT]:
        return self.db.get(model, entity_id)

    def _count(self, stmt) -> int:
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        return int(self.db.execute(count_stmt).scalar_one())

    def _page(self, stmt, page: PageRequest) -> Tuple[List[Any], int]:
        """Run one page of `stmt` plus a separate count over the same filter."""
        items = self.db.execute(stmt.offset(page.offset).limit(page.limit)).unique().scalars().all()
        return list(items), self._count(stmt)
