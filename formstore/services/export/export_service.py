# formstore/services/export/export_service.py
"""
Bucket listing and file export.

Both share one table: labels collected across all entries of the bucket and
one rendered row per entry. The listing feeds the admin API, the export
hands the table to a format writer.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC
from typing import Optional

from sqlalchemy.orm import Session

from formstore.config import Settings, get_settings
from formstore.models import Entry
from formstore.services.date_format import format_datetime
from formstore.services.entries import find_by_bucket
from formstore.services.export.formats import ExportFormat, UnsupportedFormatError, get_export_format
from formstore.services.export.writers import DEFAULT_WRITERS, ExportMetadata, Writer
from formstore.services.fields import FieldResolver
from formstore.services.schema import schema_resolver_for
from formstore.services.values import ValueFormatter
from formstore.storage.base import ResourceStore

logger = logging.getLogger(__name__)

EXPORT_DATETIME_LABEL = "DateTime"

# Placeholder for blank cells in the JSON listing
EMPTY_CELL = "-"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class ExportResult:
    """A rendered export file."""

    content: bytes
    filename: str
    mime_type: str


@dataclass
class BucketListing:
    labels: list[str]
    entries: list[dict]


def format_created_at(entry: Entry, datetime_format: str) -> str:
    """Creation time of an entry in the configured output format (stored as naive UTC)."""
    return format_datetime(entry.created_at.replace(tzinfo=UTC), datetime_format)


def build_table(
    entries: Iterable[Entry],
    resolver: FieldResolver,
    export_datetime: bool = False,
    datetime_format: str = "Y-m-d H:i:s",
    empty: str = "",
) -> tuple[list[str], list[list[str]]]:
    """
    Header labels and value rows for a set of entries.

    With export_datetime a trailing DateTime column holds each entry's
    creation time.
    """
    entries = list(entries)
    labels = resolver.collect_labels(entries)
    rows = resolver.build_rows(entries, labels, empty=empty)

    if export_datetime:
        labels = [*labels, EXPORT_DATETIME_LABEL]
        for row, entry in zip(rows, entries):
            row.append(format_created_at(entry, datetime_format))

    return labels, rows


def export_filename(bucket: str, extension: str) -> str:
    safe_bucket = _UNSAFE_FILENAME_CHARS.sub("_", bucket).strip("._") or "export"
    return f"Form-Storage-{safe_bucket}.{extension}"


def _field_resolver(db: Session, bucket: str, settings: Settings, resources: Optional[ResourceStore]) -> FieldResolver:
    return FieldResolver(
        schema_resolver_for(db, bucket, settings),
        ValueFormatter(settings.DATETIME_FORMAT, resources=resources),
    )


def export_bucket(
    db: Session,
    bucket: str,
    writer_type: str = "Xlsx",
    export_datetime: bool = False,
    settings: Optional[Settings] = None,
    formats: Optional[dict[str, ExportFormat]] = None,
    writers: Optional[dict[str, Writer]] = None,
    resources: Optional[ResourceStore] = None,
) -> ExportResult:
    """
    Render every entry of a bucket in the requested format.

    Raises:
        UnsupportedFormatError: writer_type is not an available format
    """
    export_format = get_export_format(writer_type, formats)
    writers = DEFAULT_WRITERS if writers is None else writers
    writer = writers.get(writer_type)
    if writer is None:
        raise UnsupportedFormatError(writer_type, sorted(writers))

    settings = settings or get_settings()
    entries = find_by_bucket(db, bucket)
    labels, rows = build_table(
        entries,
        _field_resolver(db, bucket, settings, resources),
        export_datetime=export_datetime,
        datetime_format=settings.DATETIME_FORMAT,
    )

    metadata = ExportMetadata(
        creator=settings.EXPORT_CREATOR,
        title=settings.EXPORT_TITLE,
        subject=settings.EXPORT_SUBJECT,
    )
    content = writer(labels, rows, metadata)

    logger.info(
        f"Exported {len(rows)} entries of bucket '{bucket}' as {writer_type}",
        extra={"bucket": bucket, "writer_type": writer_type, "rows": len(rows)},
    )
    return ExportResult(
        content=content,
        filename=export_filename(bucket, export_format.extension),
        mime_type=export_format.mime_type,
    )


def list_bucket_entries(
    db: Session,
    bucket: str,
    settings: Optional[Settings] = None,
    resources: Optional[ResourceStore] = None,
) -> BucketListing:
    """Labels and rendered entries of a bucket, newest first; blank cells become '-'."""
    settings = settings or get_settings()
    entries = find_by_bucket(db, bucket)
    resolver = _field_resolver(db, bucket, settings, resources)
    labels, rows = build_table(entries, resolver, empty=EMPTY_CELL)

    listed = []
    for entry, row in zip(entries, rows):
        listed.append(
            {
                "id": entry.id,
                "created_at": format_created_at(entry, settings.DATETIME_FORMAT),
                "values": dict(zip(labels, row)),
            }
        )
    return BucketListing(labels=labels, entries=listed)
