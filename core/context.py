from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union
import uuid

from core.lifecycle.states import UserRole


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RequestContext:
    """Explicit per-request identity and clock passed into core operations.

    The actor id and role come from the auth boundary and are trusted as-is.
    Carrying `now` here keeps every timestamp written by one operation
    identical and lets tests pin the clock.
    """
    actor_id: uuid.UUID
    role: UserRole
    now: datetime = field(default_factory=utcnow)

    @classmethod
    def build(
        cls,
        actor_id: Union[uuid.UUID, str],
        role: Union[UserRole, str],
        now: Optional[datetime] = None
    ) -> "RequestContext":
        """Build a context from loosely typed identity values.

        Args:
            actor_id: User id as UUID or string
            role: Role enum or its string value
            now: Optional fixed timestamp (defaults to current UTC time)

        Returns:
            RequestContext with normalized types
        """
        if not isinstance(actor_id, uuid.UUID):
            actor_id = uuid.UUID(str(actor_id))
        return cls(
            actor_id=actor_id,
            role=UserRole(role),
            now=now or utcnow()
        )

    @property
    def is_candidate(self) -> bool:
        return self.role == UserRole.CANDIDATE

    @property
    def is_employer(self) -> bool:
        return self.role == UserRole.EMPLOYER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
