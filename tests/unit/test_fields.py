# tests/unit/test_fields.py
"""Unit tests for column label collection and cell values."""

from unittest.mock import MagicMock

from formstore.models import Entry
from formstore.services.schema import FormElementData, SchemaResolver, StaticSchemaSource

NAME = FormElementData(
    type_name="Neos.Form.Builder:SingleLineText",
    node_identifier="node-name",
    speaking_identifier="name",
    label="Your name",
)
SECTION = FormElementData(
    type_name="Neos.Form.Builder:Section",
    node_identifier="node-section",
    label="Personal data",
)


def _entry(properties):
    return Entry(bucket="contact", properties=properties)


def _field_resolver(forms=None, ignored_in_export=()):
    from formstore.services.fields import FieldResolver
    from formstore.services.values import ValueFormatter

    schema = SchemaResolver(
        "contact",
        source=StaticSchemaSource(forms or {}),
        ignored_in_export=ignored_in_export,
    )
    return FieldResolver(schema, ValueFormatter(resources=MagicMock()))


class TestCollectLabels:
    """Tests for FieldResolver.collect_labels()."""

    def test_union_in_first_seen_order(self):
        resolver = _field_resolver()

        labels = resolver.collect_labels([_entry({"x": 1, "y": 2}), _entry({"y": 3, "z": 4})])

        assert labels == ["x", "y", "z"]

    def test_resolved_keys_use_display_label(self):
        resolver = _field_resolver({"contact": [NAME]})

        assert resolver.collect_labels([_entry({"node-name": "Jane"}), _entry({"name": "John"})]) == ["Your name"]

    def test_ignored_types_have_no_column(self):
        resolver = _field_resolver({"contact": [NAME, SECTION]}, ignored_in_export=["Neos.Form.Builder:Section"])

        labels = resolver.collect_labels([_entry({"node-section": "", "node-name": "Jane"})])

        assert labels == ["Your name"]

    def test_no_entries(self):
        assert _field_resolver().collect_labels([]) == []


class TestValueForLabel:
    """Tests for FieldResolver.value_for_label()."""

    def test_missing_label_is_empty(self):
        resolver = _field_resolver()

        assert resolver.value_for_label(_entry({"x": 1}), "y") == ""

    def test_direct_key(self):
        resolver = _field_resolver()

        assert resolver.value_for_label(_entry({"x": 1}), "x") == "1"

    def test_label_falls_back_to_node_identifier(self):
        resolver = _field_resolver({"contact": [NAME]})

        assert resolver.value_for_label(_entry({"node-name": "Jane"}), "Your name") == "Jane"

    def test_label_falls_back_to_speaking_identifier(self):
        resolver = _field_resolver({"contact": [NAME]})

        assert resolver.value_for_label(_entry({"name": "John"}), "Your name") == "John"


class TestBuildRows:
    """Tests for FieldResolver.build_rows()."""

    def test_rows_follow_labels(self):
        resolver = _field_resolver()
        entries = [_entry({"x": "a", "y": "b"}), _entry({"y": "c", "z": True})]

        rows = resolver.build_rows(entries, ["x", "y", "z"], empty="-")

        assert rows == [["a", "b", "-"], ["-", "c", "true"]]
