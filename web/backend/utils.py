#!/usr/bin/env python3
"""
Utility functions for the web application.
"""

import json
import uuid
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request

from core.exceptions import ValidationError

STATUS_BADGE_COLORS = {
    'pending': 'bg-yellow-100 text-yellow-800',
    'reviewed': 'bg-blue-100 text-blue-800',
    'shortlisted': 'bg-purple-100 text-purple-800',
    'interview': 'bg-indigo-100 text-indigo-800',
    'hired': 'bg-green-100 text-green-800',
    'rejected': 'bg-red-100 text-red-800',
}
DEFAULT_BADGE_COLOR = 'bg-gray-100 text-gray-800'


def validate_uuid(value: str, name: str = "id") -> uuid.UUID:
    """Parse a path/query UUID, rejecting malformed values with 400."""
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {name} format: {value}. Must be a valid UUID."
        )


def optional_uuid(value: Optional[str], name: str = "id") -> Optional[uuid.UUID]:
    if value is None or value == '' or value.lower() == 'all':
        return None
    return validate_uuid(value, name)


def status_badge(status: str) -> Dict[str, str]:
    return {
        'color': STATUS_BADGE_COLORS.get(status, DEFAULT_BADGE_COLOR),
        'label': status.capitalize() if status else '',
    }


def parse_json_field(raw: Optional[str], name: str = "data", expected: type = dict) -> Any:
    """Decode a JSON value sent as a multipart form field."""
    if raw is None or raw == '':
        return expected()
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError(f"Invalid JSON in '{name}' field")
    if not isinstance(value, expected):
        kind = "object" if expected is dict else "array"
        raise ValidationError(f"'{name}' must be a JSON {kind}")
    return value


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get('x-forwarded-for')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.client.host if request.client else None
