"""
BlobRepository tests.

The Azure SDK client is patched out; these cover how SDK failures surface
to callers and how uploads are encoded.
"""

import gzip
from unittest.mock import patch

import pytest
from azure.core.exceptions import ResourceNotFoundError, ServiceRequestError

from exceptions import TransientFault
from infrastructure.blob import BlobRepository


@pytest.fixture
def blob_client():
    with patch("infrastructure.blob.BlobServiceClient") as service_cls:
        service = service_cls.from_connection_string.return_value
        service.account_name = "devstore"
        client = service.get_container_client.return_value.get_blob_client.return_value
        yield client


@pytest.fixture
def repo(blob_client):
    return BlobRepository(connection_string="UseDevelopmentStorage=true")


class TestBlobRepository:

    def test_requires_credentials(self):
        with pytest.raises(ValueError):
            BlobRepository()

    def test_read_returns_bytes(self, repo, blob_client):
        blob_client.download_blob.return_value.readall.return_value = b"<feed/>"
        assert repo.read_blob("packages", "current.feed.xml") == b"<feed/>"

    def test_missing_blob_is_not_found(self, repo, blob_client):
        blob_client.download_blob.side_effect = ResourceNotFoundError("missing")
        with pytest.raises(ResourceNotFoundError):
            repo.read_blob("packages", "current.feed.xml")

    def test_transport_failure_on_read_is_transient(self, repo, blob_client):
        blob_client.download_blob.side_effect = ServiceRequestError("connection refused")
        with pytest.raises(TransientFault) as exc_info:
            repo.read_blob("packages", "current.feed.xml")
        assert isinstance(exc_info.value.__cause__, ServiceRequestError)

    def test_transport_failure_on_write_is_transient(self, repo, blob_client):
        blob_client.upload_blob.side_effect = ServiceRequestError("connection refused")
        with pytest.raises(TransientFault):
            repo.write_blob("packages", "current.feed.xml", b"<feed/>")

    def test_compressed_upload_sets_encoding(self, repo, blob_client, tmp_path):
        src = tmp_path / "current.feed.xml"
        src.write_bytes(b"<feed/>")
        blob_client.upload_blob.return_value = {"etag": "0x1"}

        result = repo.upload_file("packages", "current.feed.xml.gz", str(src), compressed=True)

        data = blob_client.upload_blob.call_args.args[0]
        settings = blob_client.upload_blob.call_args.kwargs["content_settings"]
        assert gzip.decompress(data) == b"<feed/>"
        assert settings.content_encoding == "gzip"
        assert result["etag"] == "0x1"

    def test_download_to_file_leaves_local_copy_on_missing_blob(self, repo, blob_client, tmp_path):
        dest = tmp_path / "current.feed.xml"
        dest.write_bytes(b"local")
        blob_client.download_blob.side_effect = ResourceNotFoundError("missing")

        with pytest.raises(ResourceNotFoundError):
            repo.download_to_file("packages", "current.feed.xml", str(dest))
        assert dest.read_bytes() == b"local"
