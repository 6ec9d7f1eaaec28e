# formstore/services/export/__init__.py
"""
Bucket listing and export.

- formats: available export formats (extension, MIME type)
- writers: xlsx/xls/ods/csv/html writers
- export_service: table building, file export, JSON listing
"""

from formstore.services.export.export_service import (
    EMPTY_CELL,
    EXPORT_DATETIME_LABEL,
    BucketListing,
    ExportResult,
    build_table,
    export_bucket,
    list_bucket_entries,
)
from formstore.services.export.formats import (
    DEFAULT_EXPORT_FORMATS,
    ExportFormat,
    UnsupportedFormatError,
    get_export_format,
)
from formstore.services.export.writers import DEFAULT_WRITERS, ExportMetadata

__all__ = [
    "EMPTY_CELL",
    "EXPORT_DATETIME_LABEL",
    "BucketListing",
    "ExportResult",
    "build_table",
    "export_bucket",
    "list_bucket_entries",
    "DEFAULT_EXPORT_FORMATS",
    "ExportFormat",
    "UnsupportedFormatError",
    "get_export_format",
    "DEFAULT_WRITERS",
    "ExportMetadata",
]
