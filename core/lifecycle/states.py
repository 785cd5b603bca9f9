#!/usr/bin/env python3
"""
Closed vocabularies for lifecycle fields.

Status-like strings are validated against these enums at the request
boundary, before they reach the state machine or the store.
"""

from enum import Enum
from typing import FrozenSet


class UserRole(str, Enum):
    CANDIDATE = "candidate"
    EMPLOYER = "employer"
    ADMIN = "admin"


class ApplicationStatus(str, Enum):
    """Application pipeline states, in happy-path order."""
    PENDING = "pending"
    REVIEWED = "reviewed"
    SHORTLISTED = "shortlisted"
    INTERVIEW = "interview"
    HIRED = "hired"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


TERMINAL_STATUSES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.HIRED,
    ApplicationStatus.REJECTED,
    ApplicationStatus.WITHDRAWN,
})

# Withdrawal is blocked only from these; "withdrawn" rows are already soft-deleted.
NON_WITHDRAWABLE_STATUSES: FrozenSet[ApplicationStatus] = frozenset({
    ApplicationStatus.HIRED,
    ApplicationStatus.REJECTED,
})


class JobStatus(str, Enum):
    ACTIVE = "Active"
    EXPIRED = "Expired"
    CLOSED = "Closed"
    DRAFT = "Draft"


class InterviewType(str, Enum):
    ONLINE = "online"
    PHONE = "phone"
    IN_PERSON = "in-person"


def is_terminal(status: str) -> bool:
    """Check whether a stored status string is a terminal state."""
    try:
        return ApplicationStatus(status) in TERMINAL_STATUSES
    except ValueError:
        return False
