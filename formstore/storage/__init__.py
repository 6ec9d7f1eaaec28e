# formstore/storage/__init__.py
"""
Resource store abstraction for files uploaded with form submissions.

Entries hold only resource references; the bytes live in object storage.
This module provides a clean interface for upload/delete/URI operations.
"""

from formstore.storage.base import (
    RESOURCE_MARKER,
    ResourceNotFoundError,
    ResourceRef,
    ResourceStore,
)
from formstore.storage.factory import (
    get_resource_store,
    reset_resource_store,
    set_resource_store,
)
from formstore.storage.local_provider import LocalResourceStore

__all__ = [
    "RESOURCE_MARKER",
    "ResourceStore",
    "ResourceRef",
    "ResourceNotFoundError",
    "LocalResourceStore",
    "get_resource_store",
    "set_resource_store",
    "reset_resource_store",
]
