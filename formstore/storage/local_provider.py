# formstore/storage/local_provider.py
"""
Local filesystem resource store for development, single-host setups and tests.

Files are written below LOCAL_STORAGE_PATH and are expected to be served by
the web server under RESOURCE_BASE_URL.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from formstore.storage.base import ResourceNotFoundError, ResourceRef, ResourceStore

logger = logging.getLogger(__name__)


class LocalResourceStore(ResourceStore):
    """
    Local filesystem resource store.

    Stores files in a directory structure that mimics S3 keys, with a small
    JSON sidecar holding the original filename and media type.

    Configuration:
    - LOCAL_STORAGE_PATH: Base directory (default: ./resources)
    - RESOURCE_BASE_URL: Public base URL (default: /_resources)
    """

    def __init__(self, base_path: str | None = None, base_url: str | None = None):
        self._base_path = Path(base_path or os.getenv("LOCAL_STORAGE_PATH", "./resources"))
        self._base_path.mkdir(parents=True, exist_ok=True)
        self._base_url = (base_url or os.getenv("RESOURCE_BASE_URL", "/_resources")).rstrip("/")
        self._metadata_suffix = ".meta.json"

        logger.info(f"Local resource store initialized: {self._base_path}")

    @property
    def name(self) -> str:
        return "local"

    def _get_path(self, key: str) -> Path:
        """Get filesystem path for key, with path traversal protection."""
        resolved = (self._base_path / key).resolve()
        if not resolved.is_relative_to(self._base_path.resolve()):
            raise ValueError("Path traversal detected")
        return resolved

    def _get_metadata_path(self, key: str) -> Path:
        """Get sidecar path for key, with path traversal protection."""
        resolved = (self._base_path / f"{key}{self._metadata_suffix}").resolve()
        if not resolved.is_relative_to(self._base_path.resolve()):
            raise ValueError("Path traversal detected")
        return resolved

    def upload(
        self,
        key: str,
        content: bytes,
        media_type: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> ResourceRef:
        """Write content to the local filesystem."""
        media_type = media_type or self.guess_media_type(filename)

        file_path = self._get_path(key)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(content)

        meta_path = self._get_metadata_path(key)
        meta_path.write_text(json.dumps({"filename": filename, "media_type": media_type, "size_bytes": len(content)}))

        logger.debug(f"Stored resource locally: {key}")
        return ResourceRef(key=key, filename=filename, media_type=media_type)

    def exists(self, key: str) -> bool:
        """Check if object exists. Keys outside the base directory never do."""
        try:
            return self._get_path(key).is_file()
        except ValueError:
            logger.warning(f"Rejected resource key outside the store: {key}")
            return False

    def delete(self, key: str) -> bool:
        """Delete object and sidecar. Returns False when nothing was there."""
        try:
            file_path = self._get_path(key)
            meta_path = self._get_metadata_path(key)
        except ValueError:
            logger.warning(f"Rejected resource key outside the store: {key}")
            return False

        deleted = False
        if file_path.exists():
            file_path.unlink()
            deleted = True
        if meta_path.exists():
            meta_path.unlink()

        return deleted

    def public_uri(self, key: str) -> str:
        if not self.exists(key):
            raise ResourceNotFoundError(key)
        return f"{self._base_url}/{quote(key)}"

    def read(self, key: str) -> bytes:
        """Return the stored bytes."""
        if not self.exists(key):
            raise ResourceNotFoundError(key)
        return self._get_path(key).read_bytes()

