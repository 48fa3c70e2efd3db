"""
Local filesystem blob store for resumes, profile pictures and logos.

Refs returned here are opaque to the rest of the application and are
persisted verbatim on profiles and applications.
"""
import logging
import os
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from app.core import config
from app.core.errors import DependencyError, ValidationError

logger = logging.getLogger(__name__)

RESUME = "resume"
IMAGE = "image"

_EXTENSIONS = {
    "application/pdf": ".pdf",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


@dataclass(frozen=True)
class StoredBlob:
    ref: str
    filename: str
    size_bytes: int


def _content_type_allowed(category: str, content_type: str) -> bool:
    if category == RESUME:
        return content_type.startswith("application/")
    if category == IMAGE:
        return content_type.startswith("image/")
    return False


class LocalBlobStore:
    """Writes blobs under ``<root>/<category>/`` and serves them at ``/uploads``."""

    def __init__(self, root: str, max_bytes: int = config.MAX_UPLOAD_BYTES, url_prefix: str = "/uploads"):
        self.root = Path(root)
        self.max_bytes = max_bytes
        self.url_prefix = url_prefix

    def store(
        self,
        data: bytes,
        content_type: Optional[str],
        category: str,
        owner_id: int,
        original_filename: Optional[str] = None,
    ) -> StoredBlob:
        """
        Persist one upload.

        Raises:
            ValidationError: file too large or content type not allowed
            DependencyError: the filesystem write failed
        """
        content_type = (content_type or "").lower()
        if not _content_type_allowed(category, content_type):
            if category == IMAGE:
                raise ValidationError("Only image files are allowed")
            raise ValidationError("Only PDF and document files are allowed for resumes")
        if len(data) > self.max_bytes:
            raise ValidationError(f"File too large. Maximum size is {self.max_bytes // (1024 * 1024)}MB")
        if not data:
            raise ValidationError("Uploaded file is empty")

        ext = _EXTENSIONS.get(content_type)
        if ext is None and original_filename:
            ext = os.path.splitext(original_filename)[1].lower()[:10]
        name = f"{owner_id}-{int(time.time() * 1000)}-{secrets.token_hex(4)}{ext or ''}"

        directory = self.root / category
        try:
            directory.mkdir(parents=True, exist_ok=True)
            (directory / name).write_bytes(data)
        except OSError as e:
            logger.error(f"Blob write failed: category={category}, owner_id={owner_id}, error={e}")
            raise DependencyError("File storage is unavailable")

        logger.info(f"Blob stored: category={category}, owner_id={owner_id}, size={len(data)}")
        return StoredBlob(
            ref=f"{self.url_prefix}/{category}/{name}",
            filename=original_filename or name,
            size_bytes=len(data),
        )

    def delete(self, ref: str) -> None:
        """Remove a stored blob. Missing files and failed removals are logged, not raised."""
        prefix = f"{self.url_prefix}/"
        if not ref.startswith(prefix):
            logger.warning(f"Refusing to delete blob outside store: ref={ref}")
            return
        path = (self.root / ref[len(prefix):]).resolve()
        if self.root.resolve() not in path.parents:
            logger.warning(f"Refusing to delete blob outside store: ref={ref}")
            return
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug(f"Blob already gone: ref={ref}")
        except OSError as e:
            logger.warning(f"Blob delete failed: ref={ref}, error={e}")
        else:
            logger.info(f"Blob deleted: ref={ref}")


_store: Optional[LocalBlobStore] = None


def get_blob_store() -> LocalBlobStore:
    """Dependency returning the process-wide blob store."""
    global _store
    if _store is None:
        _store = LocalBlobStore(config.UPLOAD_DIR)
    return _store
