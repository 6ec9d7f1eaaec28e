# formstore/routers/storage.py
"""
Admin endpoints for stored form entries.

GET    /v1/storage/buckets                     - Buckets with entry counts
GET    /v1/storage/buckets/{bucket}/entries    - Rendered entries of a bucket
POST   /v1/storage/buckets/{bucket}/entries    - Store a submission
DELETE /v1/storage/buckets/{bucket}/entries    - Delete all entries of a bucket
GET    /v1/storage/buckets/{bucket}/export     - Download the bucket as a file
DELETE /v1/storage/entries/{entry_id}          - Delete one entry
POST   /v1/storage/cleanup                     - Run the configured bucket cleanup
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from formstore.auth import require_admin_key
from formstore.config import get_settings
from formstore.database import get_db
from formstore.logging_config import log_operation
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
from formstore.services.entries import (
    bucket_counts,
    delete_by_bucket,
    delete_entry,
    get_entry,
    store_submission,
)
from formstore.services.export import UnsupportedFormatError, export_bucket, list_bucket_entries
from formstore.services.retention import run_configured_cleanup
from formstore.services.schema import schema_resolver_for

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/storage", tags=["storage"])


@router.get("/buckets", response_model=BucketListResponse)
def list_buckets(
    db: Session = Depends(get_db),
    _: None = Depends(require_admin_key),
) -> BucketListResponse:
    """List all buckets that hold entries, sorted by name."""
    counts = bucket_counts(db)
    return BucketListResponse(
        buckets=[BucketSummary(name=name, entries=count) for name, count in counts.items()],
        total=len(counts),
    )


@router.get("/buckets/{bucket}/entries", response_model=EntryListResponse)
def list_entries(
    bucket: str,
    db: Session = Depends(get_db),
    _: None = Depends(require_admin_key),
) -> EntryListResponse:
    """
    List the entries of a bucket, newest first.

    Column labels are resolved against the form definition where possible;
    every value is rendered as text.
    """
    listing = list_bucket_entries(db, bucket)
    if not listing.entries:
        raise HTTPException(status_code=404, detail=f"No entries in bucket '{bucket}'")

    return EntryListResponse(
        bucket=bucket,
        labels=listing.labels,
        entries=[EntryResponse(**entry) for entry in listing.entries],
    )


@router.post("/buckets/{bucket}/entries", response_model=StoredEntryResponse, status_code=201)
def create_entry(
    bucket: str,
    request: SubmissionRequest,
    db: Session = Depends(get_db),
    _: None = Depends(require_admin_key),
) -> StoredEntryResponse:
    """Store a form submission in a bucket."""
    try:
        entry = store_submission(db, bucket, request.values, resolver=schema_resolver_for(db, bucket))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return StoredEntryResponse(
        id=entry.id,
        bucket=entry.bucket,
        created_at=entry.created_at,
        properties=entry.properties,
    )


@router.delete("/buckets/{bucket}/entries", response_model=DeleteEntriesResponse)
def delete_bucket_entries(
    bucket: str,
    remove_attached_resources: bool = Query(False, description="Also delete uploaded files"),
    db: Session = Depends(get_db),
    _: None = Depends(require_admin_key),
) -> DeleteEntriesResponse:
    """Delete every entry of a bucket."""
    deleted = delete_by_bucket(db, bucket, remove_resources=remove_attached_resources)
    logger.info(f"Deleted {deleted} entries of bucket '{bucket}'", extra={"bucket": bucket, "removed": deleted})
    return DeleteEntriesResponse(bucket=bucket, deleted=deleted)


@router.get("/buckets/{bucket}/export")
def export_entries(
    bucket: str,
    writer_type: str = Query("Xlsx", description="Xlsx, Xls, Ods, Csv or Html"),
    export_datetime: bool = Query(False, description="Append the creation time as a DateTime column"),
    db: Session = Depends(get_db),
    _: None = Depends(require_admin_key),
) -> Response:
    """Download all entries of a bucket as a file."""
    try:
        result = export_bucket(db, bucket, writer_type=writer_type, export_datetime=export_datetime)
    except UnsupportedFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return Response(
        content=result.content,
        media_type=result.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@router.delete("/entries/{entry_id}", status_code=204)
def delete_single_entry(
    entry_id: uuid.UUID,
    remove_attached_resources: bool = Query(False, description="Also delete uploaded files"),
    db: Session = Depends(get_db),
    _: None = Depends(require_admin_key),
) -> Response:
    """Delete one entry."""
    entry = get_entry(db, entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Entry not found")

    delete_entry(db, entry, remove_resources=remove_attached_resources)
    return Response(status_code=204)


@router.post("/cleanup", response_model=CleanupResponse)
def run_cleanup(
    db: Session = Depends(get_db),
    _: None = Depends(require_admin_key),
) -> CleanupResponse:
    """
    Clean up every configured bucket with its own retention rule.

    A bucket with a broken rule is reported in `errors` and does not stop
    the others.
    """
    with log_operation("cleanup-configured-buckets"):
        results = run_configured_cleanup(db, get_settings().CLEANUP)

    return CleanupResponse(
        results=[
            CleanupResultResponse(
                bucket=r.bucket,
                message=r.message,
                removed=r.removed,
                total=r.total,
                days_to_keep=r.days_to_keep,
                success=r.success,
            )
            for r in results.values()
        ],
        total_removed=sum(r.removed for r in results.values()),
        errors=[f"{r.bucket}: {r.error}" for r in results.values() if not r.success],
    )
