# tests/unit/test_resource_store.py
"""Tests for the resource stores."""

import os
import tempfile
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from formstore.storage.base import ResourceNotFoundError, ResourceRef
from formstore.storage.local_provider import LocalResourceStore


class TestPathTraversal:
    """Verify _get_path rejects path traversal attempts."""

    def setup_method(self):
        self.tmpdir = os.path.realpath(tempfile.mkdtemp())
        self.store = LocalResourceStore(base_path=self.tmpdir)

    def test_traversal_with_dotdot(self):
        with pytest.raises(ValueError, match="Path traversal detected"):
            self.store._get_path("../../../etc/passwd")

    def test_traversal_with_absolute(self):
        with pytest.raises(ValueError, match="Path traversal detected"):
            self.store._get_path("/etc/passwd")

    def test_normal_key_succeeds(self):
        path = self.store._get_path("resources/2024/01/06/abc/cv.pdf")
        assert str(path).startswith(self.tmpdir)

    def test_metadata_traversal(self):
        with pytest.raises(ValueError, match="Path traversal detected"):
            self.store._get_metadata_path("../../../etc/passwd")


class TestLocalResourceStore:
    """Tests for LocalResourceStore operations."""

    def test_upload_and_public_uri(self, tmp_path):
        store = LocalResourceStore(base_path=str(tmp_path), base_url="https://example.com/files/")

        ref = store.upload("resources/a b/cv.pdf", b"data", filename="cv.pdf")

        assert ref == ResourceRef(key="resources/a b/cv.pdf", filename="cv.pdf", media_type="application/pdf")
        assert store.exists("resources/a b/cv.pdf")
        assert store.public_uri("resources/a b/cv.pdf") == "https://example.com/files/resources/a%20b/cv.pdf"

    def test_public_uri_of_missing_resource(self, tmp_path):
        store = LocalResourceStore(base_path=str(tmp_path))

        with pytest.raises(ResourceNotFoundError):
            store.public_uri("resources/missing.pdf")

    def test_delete_is_idempotent(self, tmp_path):
        store = LocalResourceStore(base_path=str(tmp_path))
        store.upload("resources/cv.pdf", b"data")

        assert store.delete("resources/cv.pdf") is True
        assert store.delete("resources/cv.pdf") is False
        assert not store.exists("resources/cv.pdf")

    def test_key_outside_base_is_missing(self, tmp_path):
        store = LocalResourceStore(base_path=str(tmp_path / "store"))
        (tmp_path / "secret.txt").write_text("secret")

        assert store.exists("../secret.txt") is False
        assert store.delete("../secret.txt") is False
        assert (tmp_path / "secret.txt").exists()
        with pytest.raises(ResourceNotFoundError):
            store.public_uri("../../etc/passwd")
        with pytest.raises(ResourceNotFoundError):
            store.read("../secret.txt")

    def test_generate_key(self, tmp_path):
        store = LocalResourceStore(base_path=str(tmp_path))

        key = store.generate_key("../My CV (final).pdf", timestamp=datetime(2024, 1, 6))

        assert key.startswith("resources/2024/01/06/")
        assert key.endswith("/My-CV-final-.pdf")


class TestResourceRef:
    """Tests for resource reference (de)serialization."""

    def test_json_shape(self):
        ref = ResourceRef(key="resources/cv.pdf", filename="cv.pdf", media_type="application/pdf")

        assert ref.to_json() == {"__resource__": "resources/cv.pdf", "filename": "cv.pdf", "mediaType": "application/pdf"}

    def test_untagged_mapping_is_not_a_reference(self):
        assert ResourceRef.from_json({"key": "resources/cv.pdf"}) is None
        assert ResourceRef.from_json("resources/cv.pdf") is None


class TestS3ResourceStore:
    """Tests for S3ResourceStore with a mocked boto3 client."""

    def _not_found(self):
        return ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadObject")

    def _store(self, client, **kwargs):
        from formstore.storage.s3_provider import S3ResourceStore

        return S3ResourceStore(bucket="forms", client=client, **kwargs)

    def test_upload(self):
        client = MagicMock()
        store = self._store(client)

        ref = store.upload("resources/cv.pdf", b"data", filename="cv.pdf")

        assert ref.media_type == "application/pdf"
        kwargs = client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "forms"
        assert kwargs["ContentType"] == "application/pdf"

    def test_delete_missing_object(self):
        client = MagicMock()
        client.head_object.side_effect = self._not_found()
        store = self._store(client)

        assert store.delete("resources/cv.pdf") is False
        client.delete_object.assert_not_called()

    def test_public_uri_with_base_url(self):
        store = self._store(MagicMock(), public_base_url="https://cdn.example.com")

        assert store.public_uri("resources/cv.pdf") == "https://cdn.example.com/resources/cv.pdf"

    def test_public_uri_presigned(self):
        client = MagicMock()
        client.generate_presigned_url.return_value = "https://s3/signed"
        store = self._store(client)

        assert store.public_uri("resources/cv.pdf") == "https://s3/signed"

    def test_public_uri_of_missing_object(self):
        client = MagicMock()
        client.head_object.side_effect = self._not_found()
        store = self._store(client)

        with pytest.raises(ResourceNotFoundError):
            store.public_uri("resources/cv.pdf")

    def test_other_errors_propagate(self):
        client = MagicMock()
        client.head_object.side_effect = ClientError({"Error": {"Code": "403"}}, "HeadObject")
        store = self._store(client)

        with pytest.raises(ClientError):
            store.exists("resources/cv.pdf")


class TestResourceStoreFactory:
    """Tests for the resource store singleton."""

    def test_set_and_reset(self, tmp_path):
        from formstore.storage import get_resource_store, reset_resource_store, set_resource_store

        store = LocalResourceStore(base_path=str(tmp_path))
        set_resource_store(store)
        try:
            assert get_resource_store() is store
        finally:
            reset_resource_store()

    def test_unknown_provider(self):
        from formstore.storage import get_resource_store, reset_resource_store

        reset_resource_store()
        with pytest.raises(ValueError, match="Unknown storage provider"):
            get_resource_store("ftp")
