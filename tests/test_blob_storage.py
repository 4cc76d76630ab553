"""Unit tests for docpad.storage: disk and in-memory blob storage."""

import pytest

from docpad.storage import BlobNotFoundError, DiskBlobStorage, InMemoryBlobStorage


@pytest.fixture(params=["disk", "memory"])
def blob_storage(request, tmp_path):
    if request.param == "disk":
        return DiskBlobStorage(str(tmp_path / "blobs"))
    return InMemoryBlobStorage()


class TestBlobStorage:

    def test_store_and_retrieve(self, blob_storage):
        key = blob_storage.store(b"# heading")
        assert blob_storage.retrieve(key) == b"# heading"

    def test_keys_are_unique(self, blob_storage):
        assert blob_storage.store(b"same") != blob_storage.store(b"same")

    def test_delete(self, blob_storage):
        key = blob_storage.store(b"data")
        blob_storage.delete(key)
        with pytest.raises(BlobNotFoundError):
            blob_storage.retrieve(key)

    def test_delete_missing_key_is_noop(self, blob_storage):
        blob_storage.delete("0" * 32)

    def test_retrieve_missing_key(self, blob_storage):
        with pytest.raises(BlobNotFoundError):
            blob_storage.retrieve("f" * 32)


class TestDiskBlobStorage:

    def test_creates_root(self, tmp_path):
        root = tmp_path / "nested" / "storage"
        DiskBlobStorage(str(root))
        assert root.is_dir()

    def test_sharded_layout(self, tmp_path):
        storage = DiskBlobStorage(str(tmp_path))
        key = storage.store(b"x")
        path = storage.path_for(key)
        assert path == tmp_path / key[:2] / key[2:4] / key
        assert path.read_bytes() == b"x"

    def test_delete_removes_file(self, tmp_path):
        storage = DiskBlobStorage(str(tmp_path))
        key = storage.store(b"x")
        storage.delete(key)
        assert not storage.path_for(key).exists()


class TestInMemoryBlobStorage:

    def test_len_and_contains(self):
        storage = InMemoryBlobStorage()
        key = storage.store(b"x")
        assert len(storage) == 1
        assert key in storage
        storage.delete(key)
        assert len(storage) == 0
        assert key not in storage
