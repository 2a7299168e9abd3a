"""
ArtifactStore tests.

Canonical naming, alias copies in remote mode, overwrite in local-only mode.
"""

from core.models.catalog import CanonicalName
from services.artifact_store import ArtifactStore
from tests.factories.fakes import CONTAINER, InMemoryBlobRepository


def _name(name="CoApp"):
    return CanonicalName(name=name, flavor="", version="1.0.0.5", architecture="Any")


class TestArtifactStore:

    def test_location_joins_package_prefix(self, current_config):
        store = ArtifactStore(extension=".msi")
        assert store.location_for(current_config, _name("zlib")) == \
            "https://packages.example.test/pkgs/zlib-1.0.0.5-any.msi"

    def test_remote_upload(self, current_config, tmp_path):
        src = tmp_path / "upload.bin"
        src.write_bytes(b"artifact")
        blob_repo = InMemoryBlobRepository()

        stored = ArtifactStore(blob_repo=blob_repo).store(current_config, _name("zlib"), str(src))

        assert stored.blob_names == ["zlib-1.0.0.5-any.msi"]
        assert blob_repo.read_blob(CONTAINER, "zlib-1.0.0.5-any.msi") == b"artifact"

    def test_alias_copy_written(self, current_config, tmp_path):
        src = tmp_path / "upload.bin"
        src.write_bytes(b"toolkit")
        blob_repo = InMemoryBlobRepository()
        store = ArtifactStore(blob_repo=blob_repo, aliases={"CoApp": "coapp.msi"})

        stored = store.store(current_config, _name("coapp"), str(src))

        assert stored.blob_names == ["coapp-1.0.0.5-any.msi", "coapp.msi"]
        assert blob_repo.read_blob(CONTAINER, "coapp.msi") == b"toolkit"

    def test_local_only_copy_overwrites(self, local_config, tmp_path):
        store = ArtifactStore()
        src = tmp_path / "upload.bin"

        src.write_bytes(b"first")
        store.store(local_config, _name("zlib"), str(src))
        src.write_bytes(b"second")
        stored = store.store(local_config, _name("zlib"), str(src))

        assert stored.local_path.endswith("zlib-1.0.0.5-any.msi")
        with open(stored.local_path, "rb") as f:
            assert f.read() == b"second"
        assert src.exists()
