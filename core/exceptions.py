#!/usr/bin/env python3
"""
Domain error taxonomy.

Every core and service operation raises one of these; the web layer maps
them to HTTP status codes in web/backend/exceptions.py.
"""

from typing import Any, Dict, Optional


class JobBoardError(Exception):
    """Base exception for domain and service errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(JobBoardError):
    """Raised when required fields are missing or malformed."""
    pass


class AuthorizationError(JobBoardError):
    """Raised when the actor lacks rights over the entity."""
    pass


class NotFoundError(JobBoardError):
    """Raised when an entity is missing or soft-deleted."""
    pass


class ConflictError(JobBoardError):
    """Raised on duplicate applications, duplicate saves and similar clashes."""
    pass


class InvalidStateTransition(JobBoardError):
    """Raised when a lifecycle operation is not allowed from the current state."""
    pass


class AggregateSyncError(JobBoardError):
    """Raised when a derived counter or flag could not be propagated."""
    pass


class StorageError(JobBoardError):
    """Raised when a file upload fails."""
    pass
