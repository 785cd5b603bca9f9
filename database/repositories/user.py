import logging
import uuid
from typing import Iterable, Optional

from sqlalchemy import select

from database.models import User
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository):
    def get(self, user_id: uuid.UUID) -> Optional[User]:
        return self._get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email.strip().lower())
        return self.db.execute(stmt).scalar_one_or_none()

    def get_many(self, user_ids: Iterable[uuid.UUID]) -> dict:
        ids = list(set(user_ids))
        if not ids:
            return {}
        users = self.db.execute(select(User).where(User.id.in_(ids))).scalars().all()
        return {user.id: user for user in users}

    def create(
        self,
        email: str,
        role: str,
        name: Optional[str] = None,
        username: Optional[str] = None,
        phone: str = ''
    ) -> User:
        user = User(
            email=email.strip().lower(),
            role=role,
            name=name,
            username=username,
            phone=phone,
        )
        self.db.add(user)
        self.flush_or_conflict("User with this email or username already exists")
        return user
