# formstore/services/entries.py
"""
Entry repository: writing submissions, reading buckets, deleting entries.

Entries are append-only. Deletion is per entry so that resources referenced
by an entry can be removed alongside it.
"""

import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from formstore.models import BUCKET_MAX_LENGTH, UNDEFINED_BUCKET, Entry, utcnow
from formstore.services.schema import SchemaResolver
from formstore.services.values import resource_refs
from formstore.storage.base import ResourceRef, ResourceStore

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    """A file submitted with a form, before it is moved to the resource store."""

    filename: str
    content: bytes
    media_type: Optional[str] = None


def normalize_bucket(bucket: Optional[str]) -> str:
    """Blank buckets become '__undefined__'; overlong names are rejected."""
    bucket = (bucket or "").strip() or UNDEFINED_BUCKET
    if len(bucket) > BUCKET_MAX_LENGTH:
        raise ValueError(f"Bucket name exceeds {BUCKET_MAX_LENGTH} characters")
    return bucket


def _holds_resource_ref(value: Any) -> bool:
    if isinstance(value, dict):
        return ResourceRef.from_json(value) is not None or any(_holds_resource_ref(v) for v in value.values())
    if isinstance(value, list):
        return any(_holds_resource_ref(v) for v in value)
    return False


def store_submission(
    db: Session,
    bucket: Optional[str],
    values: Mapping[str, Any],
    resolver: Optional[SchemaResolver] = None,
    resources: Optional[ResourceStore] = None,
    files: Optional[Mapping[str, UploadedFile]] = None,
) -> Entry:
    """
    Store one form submission as a new entry.

    Uploaded files are written to the resource store and replaced by
    resource references. Client values that carry a resource reference
    are dropped. When the bucket was named explicitly and a resolver is
    given, fields whose form element type is ignored in the finisher are
    dropped as well.
    """
    named = bool((bucket or "").strip())
    bucket = normalize_bucket(bucket)

    properties: dict[str, Any] = {}
    for field_key, value in values.items():
        if _holds_resource_ref(value):
            logger.warning(
                f"Dropped field '{field_key}' of a submission to '{bucket}': resource references are set by uploads only",
                extra={"bucket": bucket},
            )
            continue
        properties[field_key] = value

    if files:
        resources = _store_for(resources)
        for field_key, upload in files.items():
            key = resources.generate_key(upload.filename)
            ref = resources.upload(key, upload.content, media_type=upload.media_type, filename=upload.filename)
            properties[field_key] = ref.to_json()

    if named and resolver is not None:
        properties = {
            key: value for key, value in properties.items() if not resolver.must_be_ignored_in_finisher(key)
        }

    entry = Entry(bucket=bucket, properties=properties, created_at=utcnow())
    db.add(entry)
    db.commit()
    db.refresh(entry)

    logger.info(f"Stored entry {entry.id} in bucket '{bucket}'", extra={"bucket": bucket, "entry_id": str(entry.id)})
    return entry


def list_buckets(db: Session, excluding: Iterable[str] = ()) -> list[str]:
    """Distinct bucket names, sorted, without loading entries."""
    query = db.query(Entry.bucket).distinct()
    excluded = list(excluding)
    if excluded:
        query = query.filter(Entry.bucket.notin_(excluded))
    return [row.bucket for row in query.order_by(Entry.bucket).all()]


def count_entries(db: Session, bucket: str) -> int:
    return db.query(func.count(Entry.id)).filter(Entry.bucket == bucket).scalar() or 0


def bucket_counts(db: Session) -> dict[str, int]:
    """Entry count per bucket, sorted by bucket name."""
    rows = db.query(Entry.bucket, func.count(Entry.id)).group_by(Entry.bucket).order_by(Entry.bucket).all()
    return {bucket: count for bucket, count in rows}


def find_by_bucket(db: Session, bucket: str) -> list[Entry]:
    """Entries of a bucket, newest first."""
    return db.query(Entry).filter(Entry.bucket == bucket).order_by(Entry.created_at.desc()).all()


def get_entry(db: Session, entry_id: uuid.UUID) -> Optional[Entry]:
    return db.query(Entry).filter(Entry.id == entry_id).first()


def remove_attached_resources(refs: Iterable[ResourceRef], resources: ResourceStore, entry_id=None) -> int:
    """
    Delete the given resources of an already deleted entry.

    A resource that is already gone is logged and skipped. A store error is
    logged and does not stop the remaining resources.
    """
    removed = 0
    for ref in refs:
        extra = {"resource_key": ref.key, "entry_id": str(entry_id)}
        try:
            deleted = resources.delete(ref.key)
        except Exception as e:
            logger.error(f"Failed to delete resource {ref.key} of entry {entry_id}: {e}", extra=extra)
            continue
        if deleted:
            removed += 1
        else:
            logger.info(f"Resource {ref.key} of entry {entry_id} was already gone", extra=extra)
    return removed


def _store_for(resources: Optional[ResourceStore]) -> ResourceStore:
    if resources is None:
        from formstore.storage.factory import get_resource_store

        resources = get_resource_store()
    return resources


def delete_entry(
    db: Session,
    entry: Entry,
    remove_resources: bool = False,
    resources: Optional[ResourceStore] = None,
) -> None:
    """
    Delete one entry, optionally together with its uploaded files.

    Files are removed only after the delete is committed.
    """
    entry_id, bucket = entry.id, entry.bucket
    refs = resource_refs(entry.properties) if remove_resources else []

    db.delete(entry)
    db.commit()
    logger.debug(f"Deleted entry {entry_id}", extra={"entry_id": str(entry_id), "bucket": bucket})

    if refs:
        remove_attached_resources(refs, _store_for(resources), entry_id=entry_id)


def delete_by_bucket(
    db: Session,
    bucket: str,
    cutoff: Optional[datetime] = None,
    remove_resources: bool = False,
    resources: Optional[ResourceStore] = None,
) -> int:
    """
    Delete entries of a bucket created at or before cutoff (all entries when cutoff is None).

    Returns the number of deleted entries. Changes are committed once, and
    attached files are removed after that commit.
    """
    query = db.query(Entry).filter(Entry.bucket == bucket)
    if cutoff is not None:
        query = query.filter(Entry.created_at <= cutoff)

    attached: list[tuple[uuid.UUID, list[ResourceRef]]] = []
    count = 0
    for entry in query.all():
        if remove_resources:
            attached.append((entry.id, resource_refs(entry.properties)))
        db.delete(entry)
        count += 1

    db.commit()
    logger.debug(f"Deleted {count} entries of bucket '{bucket}'", extra={"bucket": bucket, "removed": count})

    if any(refs for _, refs in attached):
        store = _store_for(resources)
        for entry_id, refs in attached:
            remove_attached_resources(refs, store, entry_id=entry_id)
    return count
