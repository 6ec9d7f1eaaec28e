# formstore/services/fields.py
"""
Column labels and cell values for listing and export.

Forms change over time, so the entries of one bucket do not share a fixed
set of keys. Labels are collected across every entry; a key that cannot be
resolved against the form definition is used as its own label so no stored
data disappears from an export.
"""

from collections.abc import Iterable
from typing import Optional

from formstore.models import Entry
from formstore.services.schema import SchemaResolver
from formstore.services.values import ValueFormatter

_MISSING = object()


class FieldResolver:
    """Builds the column set and per-entry values of one bucket."""

    def __init__(self, schema: SchemaResolver, formatter: Optional[ValueFormatter] = None):
        self.schema = schema
        self.formatter = formatter or ValueFormatter()

    def collect_labels(self, entries: Iterable[Entry]) -> list[str]:
        """
        Ordered, de-duplicated labels over all entries.

        Keys are visited in entry order, then key order. Fields whose form
        element type is ignored in exports contribute no column.
        """
        labels: dict[str, None] = {}
        for entry in entries:
            for key in (entry.properties or {}):
                element = self.schema.resolve(key)
                if element is None:
                    labels.setdefault(key, None)
                    continue
                if self.schema.must_be_ignored_in_export(element.type_name):
                    continue
                labels.setdefault(element.display_label, None)
        return list(labels)

    def raw_value_for_label(self, entry: Entry, label: str):
        """Stored value for label: direct key, then node identifier, then speaking identifier."""
        properties = entry.properties or {}
        if label in properties:
            return properties[label]

        element = self.schema.resolve(label)
        if element is None:
            return _MISSING

        if element.node_identifier in properties:
            return properties[element.node_identifier]
        if element.speaking_identifier and element.speaking_identifier in properties:
            return properties[element.speaking_identifier]
        return _MISSING

    def value_for_label(self, entry: Entry, label: str) -> str:
        """Rendered value for label; empty when the entry has no such field."""
        value = self.raw_value_for_label(entry, label)
        if value is _MISSING:
            return ""
        return self.formatter.stringify(value)

    def build_rows(self, entries: Iterable[Entry], labels: list[str], empty: str = "") -> list[list[str]]:
        """One row of rendered values per entry, `empty` for blank cells."""
        rows = []
        for entry in entries:
            rows.append([self.value_for_label(entry, label) or empty for label in labels])
        return rows
