#!/usr/bin/env python3
"""
File storage for resumes, CVs, profile images and company branding.

Uploads are written under a local root and addressed by a public URL.
Callers store the returned URL on their entity only after upload()
succeeds, so a failed upload never leaves a dangling reference.
"""

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from core.exceptions import StorageError

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 5 * 1024 * 1024

RESUME_EXTENSIONS = frozenset({'.pdf', '.doc', '.docx'})
IMAGE_EXTENSIONS = frozenset({'.jpg', '.jpeg', '.png', '.gif', '.webp'})


@dataclass(frozen=True)
class StoredFile:
    url: str
    key: str
    size: int
    original_name: str
    mimetype: Optional[str] = None

    def to_metadata(self) -> dict:
        """Resume metadata shape stored on applications."""
        return {
            'filename': self.key.rsplit('/', 1)[-1],
            'originalName': self.original_name,
            'url': self.url,
            'size': self.size,
            'mimetype': self.mimetype,
        }


class LocalFileStorage:
    """Writes uploads to `{root}/{folder}/{uuid}{ext}` and serves them from base_url."""

    def __init__(self, root: str, base_url: str = '/uploads', max_bytes: int = MAX_UPLOAD_BYTES):
        self.root = Path(root)
        self.base_url = base_url.rstrip('/')
        self.max_bytes = max_bytes

    def _check(self, data: bytes, filename: str, allowed: Optional[frozenset]) -> str:
        ext = os.path.splitext(filename or '')[1].lower()
        if allowed is not None and ext not in allowed:
            raise StorageError(f"Unsupported file type '{ext or filename}'")
        if not data:
            raise StorageError("Uploaded file is empty")
        if len(data) > self.max_bytes:
            raise StorageError(f"File exceeds {self.max_bytes // (1024 * 1024)}MB limit")
        return ext

    def upload(
        self,
        data: bytes,
        folder: str,
        filename: str,
        mimetype: Optional[str] = None,
        allowed: Optional[frozenset] = None
    ) -> StoredFile:
        """
        Store a file and return where it can be fetched.

        Args:
            data: File contents
            folder: Logical folder, e.g. "resumes" or "company-logos"
            filename: Client-supplied name, used only for its extension
            mimetype: Content type reported by the client
            allowed: Optional allowlist of lowercase extensions

        Returns:
            StoredFile with the public URL

        Raises:
            StorageError: On rejected input or a failed write
        """
        ext = self._check(data, filename, allowed)
        key = f"{folder.strip('/')}/{uuid.uuid4().hex}{ext}"
        path = self.root / key

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to store upload in {folder}: {e}")
            raise StorageError("File upload failed") from e

        logger.info(f"Stored upload {key} ({len(data)} bytes)")
        return StoredFile(
            url=f"{self.base_url}/{key}",
            key=key,
            size=len(data),
            original_name=filename or '',
            mimetype=mimetype,
        )

    def resolve(self, key: str) -> Path:
        """Filesystem path of a stored key; rejects keys escaping the root."""
        root = self.root.resolve()
        path = (root / key).resolve()
        if root not in path.parents:
            raise StorageError("Invalid storage key")
        return path

    def delete(self, key: str) -> bool:
        """
        Remove a stored file.

        Returns:
            False if nothing was stored under the key

        Raises:
            StorageError: On an invalid key or a failed delete
        """
        path = self.resolve(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to delete upload {key}: {e}")
            raise StorageError("File delete failed") from e
        logger.info(f"Deleted upload {key}")
        return True
