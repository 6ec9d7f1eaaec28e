# formstore/schemas/storage.py
"""
Request and response models for the storage admin API.
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class BucketSummary(BaseModel):
    """A bucket and the number of entries it holds."""

    name: str
    entries: int


class BucketListResponse(BaseModel):
    buckets: list[BucketSummary] = Field(default_factory=list)
    total: int = Field(0, description="Number of buckets")


class EntryResponse(BaseModel):
    """One entry rendered for display. Blank cells hold '-'."""

    id: uuid.UUID
    created_at: str = Field(..., description="Creation time in the configured DATETIME_FORMAT")
    values: dict[str, str] = Field(default_factory=dict, description="Rendered value per label")


class EntryListResponse(BaseModel):
    bucket: str
    labels: list[str] = Field(default_factory=list, description="Column labels in display order")
    entries: list[EntryResponse] = Field(default_factory=list, description="Entries, newest first")


class SubmissionRequest(BaseModel):
    """A form submission to store."""

    values: dict[str, Any] = Field(..., description="Field key -> submitted value")


class StoredEntryResponse(BaseModel):
    id: uuid.UUID
    bucket: str
    created_at: datetime
    properties: dict[str, Any]


class DeleteEntriesResponse(BaseModel):
    bucket: str
    deleted: int


class CleanupResultResponse(BaseModel):
    """Outcome of cleaning up one bucket."""

    bucket: str
    message: str
    removed: int = 0
    total: int = 0
    days_to_keep: int | None = None
    success: bool = True


class CleanupResponse(BaseModel):
    results: list[CleanupResultResponse] = Field(default_factory=list)
    total_removed: int = 0
    errors: list[str] = Field(default_factory=list)
