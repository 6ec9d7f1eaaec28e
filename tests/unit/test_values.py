# tests/unit/test_values.py
"""Unit tests for value normalization."""

from unittest.mock import MagicMock

from formstore.storage.base import ResourceNotFoundError


class TestStringify:
    """Tests for ValueFormatter.stringify()."""

    def _formatter(self, **kwargs):
        from formstore.services.values import ValueFormatter

        kwargs.setdefault("resources", MagicMock())
        return ValueFormatter(**kwargs)

    def test_plain_values(self):
        formatter = self._formatter()

        assert formatter.stringify("hello") == "hello"
        assert formatter.stringify(True) == "true"
        assert formatter.stringify(False) == "false"
        assert formatter.stringify(42) == "42"
        assert formatter.stringify(2.5) == "2.5"
        assert formatter.stringify(3.0) == "3"

    def test_none_and_unknown_render_empty(self):
        formatter = self._formatter()

        assert formatter.stringify(None) == ""
        assert formatter.stringify(object()) == ""

    def test_nested_collection(self):
        formatter = self._formatter()

        assert formatter.stringify(["a", ["b", "c"]]) == "- a\r\n- - b\r\n  - c"

    def test_flat_collection(self):
        formatter = self._formatter()

        assert formatter.stringify(["x", 1, True]) == "- x\r\n- 1\r\n- true"

    def test_mapping_renders_its_values(self):
        formatter = self._formatter()

        assert formatter.stringify({"first": "a", "second": "b"}) == "- a\r\n- b"

    def test_date_descriptor(self):
        formatter = self._formatter(datetime_format="d.m.Y")

        value = {"date": "2024-01-15", "dateFormat": "Y-m-d", "timezone": "UTC"}

        assert formatter.stringify(value) == "15.01.2024"

    def test_unparseable_date_keeps_raw_value(self):
        formatter = self._formatter(datetime_format="d.m.Y")

        value = {"date": "sometime", "dateFormat": "Y-m-d"}

        assert formatter.stringify(value) == "sometime"

    def test_resource_renders_public_uri(self):
        store = MagicMock()
        store.public_uri.return_value = "/_resources/resources/cv.pdf"
        formatter = self._formatter(resources=store)

        result = formatter.stringify({"__resource__": "resources/cv.pdf", "filename": "cv.pdf"})

        assert result == "/_resources/resources/cv.pdf"
        store.public_uri.assert_called_once_with("resources/cv.pdf")

    def test_missing_resource_renders_empty(self):
        store = MagicMock()
        store.public_uri.side_effect = ResourceNotFoundError("resources/gone.pdf")
        formatter = self._formatter(resources=store)

        assert formatter.stringify({"__resource__": "resources/gone.pdf"}) == ""


class TestResourceRefs:
    """Tests for resource_refs()."""

    def test_collects_top_level_references(self):
        from formstore.services.values import resource_refs

        refs = resource_refs(
            {
                "cv": {"__resource__": "resources/a/cv.pdf", "filename": "cv.pdf", "mediaType": "application/pdf"},
                "name": "Jane",
                "date": {"date": "2024-01-01", "dateFormat": "Y-m-d"},
            }
        )

        assert [ref.key for ref in refs] == ["resources/a/cv.pdf"]
        assert refs[0].media_type == "application/pdf"

    def test_empty_properties(self):
        from formstore.services.values import resource_refs

        assert resource_refs({}) == []
        assert resource_refs(None) == []
