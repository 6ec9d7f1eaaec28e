# formstore/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.
"""

from formstore.schemas.storage import (
    BucketListResponse,
    BucketSummary,
    CleanupResponse,
    CleanupResultResponse,
    DeleteEntriesResponse,
    EntryListResponse,
    EntryResponse,
    StoredEntryResponse,
    SubmissionRequest,
)

__all__ = [
    "BucketListResponse",
    "BucketSummary",
    "CleanupResponse",
    "CleanupResultResponse",
    "DeleteEntriesResponse",
    "EntryListResponse",
    "EntryResponse",
    "StoredEntryResponse",
    "SubmissionRequest",
]
