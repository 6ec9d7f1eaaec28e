# formstore/services/values.py
"""
Stored value variants and their text rendering for listings and exports.

Entry properties are free-form JSON. Before rendering they are read into a
small tagged union:

- ResourceRef        {"__resource__": key, ...}        uploaded file
- DateDescriptor     {"date", "dateFormat", "timezone"} date picker value
- str, int/float, bool, None
- list / dict        nested values of the same variants

stringify() renders them in a fixed precedence: resource, string, boolean,
number, date, collection, anything else. Booleans are checked before numbers
because bool is an int subclass.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional, Union

from formstore.services.date_format import DateFormatError, format_datetime, parse_datetime
from formstore.storage.base import ResourceNotFoundError, ResourceRef, ResourceStore

logger = logging.getLogger(__name__)

BULLET = "- "
LINE_BREAK = "\r\n"


@dataclass(frozen=True)
class DateDescriptor:
    """A date value together with the format it was entered in."""

    date: str
    date_format: str
    timezone: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> Optional["DateDescriptor"]:
        if not isinstance(data, dict):
            return None
        if data.get("date") is None or data.get("dateFormat") is None:
            return None
        return cls(
            date=str(data["date"]),
            date_format=str(data["dateFormat"]),
            timezone=data.get("timezone") or None,
        )


StoredValue = Union[ResourceRef, DateDescriptor, str, int, float, bool, list, dict, None]


def coerce_value(raw: Any) -> StoredValue:
    """Turn a raw JSON value into one of the value variants (tagged mappings only)."""
    if isinstance(raw, (ResourceRef, DateDescriptor)):
        return raw
    if isinstance(raw, dict):
        return ResourceRef.from_json(raw) or DateDescriptor.from_json(raw) or raw
    return raw


def resource_refs(properties: dict) -> list[ResourceRef]:
    """Resource references held directly in an entry's properties."""
    refs = []
    for value in (properties or {}).values():
        value = coerce_value(value)
        if isinstance(value, ResourceRef):
            refs.append(value)
    return refs


def format_number(value: Union[int, float]) -> str:
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


class ValueFormatter:
    """
    Renders stored values as plain text.

    Args:
        datetime_format: Output format for dates (PHP date() notation)
        resources: Resource store used to resolve public URIs of uploaded files
    """

    def __init__(self, datetime_format: str = "Y-m-d H:i:s", resources: Optional[ResourceStore] = None):
        self.datetime_format = datetime_format
        self._resources = resources

    @property
    def resources(self) -> ResourceStore:
        if self._resources is None:
            from formstore.storage.factory import get_resource_store

            self._resources = get_resource_store()
        return self._resources

    def stringify(self, value: Any, indent: int = 0) -> str:
        value = coerce_value(value)

        if isinstance(value, ResourceRef):
            try:
                return self.resources.public_uri(value.key)
            except ResourceNotFoundError:
                logger.debug(f"Resource {value.key} no longer exists", extra={"resource_key": value.key})
                return ""
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return format_number(value)
        if isinstance(value, DateDescriptor):
            return self.format_date(value)
        if isinstance(value, (list, tuple, dict)):
            items = value.values() if isinstance(value, dict) else value
            rendered = [self.stringify(item, indent + 1) for item in items]
            separator = LINE_BREAK + " " * (indent * 2) + BULLET
            return BULLET + separator.join(rendered)

        return ""

    def format_date(self, value: DateDescriptor) -> str:
        try:
            parsed = parse_datetime(value.date, value.date_format, value.timezone)
        except DateFormatError as e:
            # Keep what the user entered rather than dropping it
            logger.warning(f"Could not parse stored date {value.date!r}: {e}")
            return value.date
        return format_datetime(parsed, self.datetime_format)
