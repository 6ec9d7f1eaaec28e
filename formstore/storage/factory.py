# formstore/storage/factory.py
"""
Factory function for creating the resource store.
"""

import logging
from typing import Optional

from formstore.storage.base import ResourceStore

logger = logging.getLogger(__name__)

# Global singleton instance
_resource_store: Optional[ResourceStore] = None


def get_resource_store(
    provider_name: Optional[str] = None,
    **kwargs,
) -> ResourceStore:
    """
    Get or create the resource store instance.

    Args:
        provider_name: 's3' or 'local' (default from STORAGE_PROVIDER setting)
        **kwargs: Additional arguments for the provider

    Returns:
        ResourceStore instance (singleton)
    """
    global _resource_store

    if _resource_store is not None:
        return _resource_store

    from formstore.config import get_settings

    settings = get_settings()
    name = (provider_name or settings.STORAGE_PROVIDER).lower().strip()

    if name == "s3":
        from formstore.storage.s3_provider import S3ResourceStore

        kwargs.setdefault("bucket", settings.S3_BUCKET)
        kwargs.setdefault("public_base_url", settings.S3_PUBLIC_BASE_URL)
        _resource_store = S3ResourceStore(**kwargs)
    elif name == "local":
        from formstore.storage.local_provider import LocalResourceStore

        kwargs.setdefault("base_path", settings.LOCAL_STORAGE_PATH)
        kwargs.setdefault("base_url", settings.RESOURCE_BASE_URL)
        _resource_store = LocalResourceStore(**kwargs)
    else:
        raise ValueError(f"Unknown storage provider: {name}. Available: s3, local")

    logger.info(f"Resource store initialized: {_resource_store.name}")
    return _resource_store


def set_resource_store(store: ResourceStore) -> None:
    """
    Set a custom resource store (useful for testing).
    """
    global _resource_store
    _resource_store = store


def reset_resource_store() -> None:
    """
    Reset the resource store singleton (for testing).
    """
    global _resource_store
    _resource_store = None
