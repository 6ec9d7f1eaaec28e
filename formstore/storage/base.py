# formstore/storage/base.py
"""
Resource store interface for files uploaded with form submissions.

Design principles:
- File contents live in object storage (local directory or S3), never in the entry table
- Entries only hold a resource reference ({"__resource__": key, ...}) in their properties
- Deleting a resource is idempotent: a missing object is not an error
- Public URIs are resolved on read, so a moved bucket or CDN only needs config changes
"""

import mimetypes
import re
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Optional

# Marker key identifying a resource reference inside stored properties
RESOURCE_MARKER = "__resource__"


class ResourceNotFoundError(LookupError):
    """Raised when a resource reference points at an object that no longer exists."""

    def __init__(self, key: str):
        super().__init__(f"Resource not found: {key}")
        self.key = key


@dataclass(frozen=True)
class ResourceRef:
    """Reference to an uploaded file, as stored in an entry's properties."""

    key: str
    filename: Optional[str] = None
    media_type: Optional[str] = None

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {RESOURCE_MARKER: self.key}
        if self.filename:
            data["filename"] = self.filename
        if self.media_type:
            data["mediaType"] = self.media_type
        return data

    @classmethod
    def from_json(cls, data: Any) -> Optional["ResourceRef"]:
        """Return a reference for a tagged mapping, None for anything else."""
        if not isinstance(data, dict):
            return None
        key = data.get(RESOURCE_MARKER)
        if not isinstance(key, str) or not key:
            return None
        return cls(key=key, filename=data.get("filename"), media_type=data.get("mediaType"))


_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(filename: str) -> str:
    """Reduce a client supplied filename to a safe object key segment."""
    name = filename.rsplit("/", 1)[-1].rsplit("\\", 1)[-1]
    name = _UNSAFE_FILENAME_CHARS.sub("-", name).strip(".-")
    return name or "upload"


class ResourceStore(ABC):
    """
    Abstract interface for the resource store.

    Implementations must handle:
    - Upload of raw bytes under a generated key
    - Idempotent delete (False when the object is already gone)
    - Public URI lookup that fails loudly for stale references
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (e.g., 's3', 'local')."""
        pass

    @abstractmethod
    def upload(
        self,
        key: str,
        content: bytes,
        media_type: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> ResourceRef:
        """
        Store content under key.

        Args:
            key: Object key/path (e.g., "resources/2024/01/06/<uuid>/cv.pdf")
            content: Raw file bytes
            media_type: MIME type; guessed from the filename when omitted
            filename: Original client filename

        Returns:
            ResourceRef to put into the entry's properties
        """
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check if object exists."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete object from storage.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    def public_uri(self, key: str) -> str:
        """
        Public URI of the object.

        Raises:
            ResourceNotFoundError: if the object does not exist
        """
        pass

    def generate_key(self, filename: str, timestamp: Optional[datetime] = None) -> str:
        """
        Generate a storage key for an uploaded file.

        Format: resources/{year}/{month}/{day}/{uuid}/{filename}
        """
        ts = timestamp or datetime.now(UTC)
        return f"resources/{ts.year}/{ts.month:02d}/{ts.day:02d}/{uuid.uuid4().hex}/{sanitize_filename(filename)}"

    @staticmethod
    def guess_media_type(filename: Optional[str]) -> str:
        if filename:
            guessed, _ = mimetypes.guess_type(filename)
            if guessed:
                return guessed
        return "application/octet-stream"
