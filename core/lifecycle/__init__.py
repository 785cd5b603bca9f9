from core.lifecycle.states import (
    ApplicationStatus,
    InterviewType,
    JobStatus,
    UserRole,
    TERMINAL_STATUSES,
    NON_WITHDRAWABLE_STATUSES,
    is_terminal,
)

__all__ = [
    'ApplicationStatus',
    'InterviewType',
    'JobStatus',
    'UserRole',
    'TERMINAL_STATUSES',
    'NON_WITHDRAWABLE_STATUSES',
    'is_terminal',
]
