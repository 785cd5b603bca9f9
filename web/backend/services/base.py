#!/usr/bin/env python3
"""
Shared plumbing for request-scoped services.
"""

from typing import Optional

from sqlalchemy.orm import Session

from core.filters import PageRequest
from core.storage import MAX_UPLOAD_BYTES, LocalFileStorage
from ..config import AppConfig


class UploadedFile:
    """File contents read from a multipart request."""

    def __init__(self, data: bytes, filename: str, content_type: Optional[str] = None):
        self.data = data
        self.filename = filename
        self.content_type = content_type

    @classmethod
    def from_upload(cls, upload, limit: int = MAX_UPLOAD_BYTES) -> Optional["UploadedFile"]:
        """Read a multipart upload, at most one byte past `limit` so oversize files still fail validation."""
        if upload is None or not upload.filename:
            return None
        return cls(upload.file.read(limit + 1), upload.filename, upload.content_type)


class BaseService:
    def __init__(self, db: Session, config: AppConfig):
        self.db = db
        self.config = config

    def page_request(self, page: Optional[int], limit: Optional[int]) -> PageRequest:
        return PageRequest.build(
            page, limit,
            default_limit=self.config.pagination.default_limit,
            max_limit=self.config.pagination.max_limit
        )


def store_upload(
    storage: LocalFileStorage,
    upload: Optional[UploadedFile],
    folder: str,
    allowed: frozenset
) -> Optional[str]:
    """Store an optional upload and return its public URL."""
    if upload is None or not upload.data:
        return None
    stored = storage.upload(
        upload.data, folder, upload.filename, mimetype=upload.content_type, allowed=allowed
    )
    return stored.url
