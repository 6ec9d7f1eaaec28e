# formstore/services/export/formats.py
"""
Export formats offered for bucket downloads.

The table is passed into export calls instead of living on a class, so
deployments and tests can restrict or extend it.
"""

from dataclasses import dataclass


class UnsupportedFormatError(ValueError):
    """Raised when an export is requested in a format that is not configured."""

    def __init__(self, writer_type: str, available: list[str] | None = None):
        message = f"No writer available for type {writer_type}."
        if available:
            message += f" Available: {', '.join(available)}"
        super().__init__(message)
        self.writer_type = writer_type


@dataclass(frozen=True)
class ExportFormat:
    """File extension and MIME type of one export format."""

    extension: str
    mime_type: str


DEFAULT_EXPORT_FORMATS: dict[str, ExportFormat] = {
    "Xls": ExportFormat(extension="xls", mime_type="application/vnd.ms-excel"),
    "Xlsx": ExportFormat(
        extension="xlsx",
        mime_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ),
    "Ods": ExportFormat(extension="ods", mime_type="application/vnd.oasis.opendocument.spreadsheet"),
    "Csv": ExportFormat(extension="csv", mime_type="text/csv"),
    "Html": ExportFormat(extension="html", mime_type="text/html"),
}


def get_export_format(writer_type: str, formats: dict[str, ExportFormat] | None = None) -> ExportFormat:
    """Look up a format; raises UnsupportedFormatError for unknown selectors."""
    formats = DEFAULT_EXPORT_FORMATS if formats is None else formats
    try:
        return formats[writer_type]
    except KeyError:
        raise UnsupportedFormatError(writer_type, sorted(formats)) from None
