# formstore/routers/__init__.py
"""
API routers for the storage admin endpoints.
"""

from formstore.routers.storage import router as storage_router

__all__ = [
    "storage_router",
]
