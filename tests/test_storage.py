import pytest

from app.cms.storage import LocalStorage, S3Storage, StorageError, storage_from_config


def test_local_storage_roundtrip(tmp_path):
    storage = LocalStorage(root=tmp_path)
    storage.put_bytes("2024/05/a.txt", b"hello")
    assert storage.exists("2024/05/a.txt")
    with storage.open("2024/05/a.txt") as fh:
        assert fh.read() == b"hello"
    storage.delete("2024/05/a.txt")
    assert not storage.exists("2024/05/a.txt")
    storage.delete("2024/05/a.txt")


def test_local_storage_rejects_escaping_keys(tmp_path):
    storage = LocalStorage(root=tmp_path / "uploads")
    with pytest.raises(StorageError):
        storage.put_bytes("../outside.txt", b"x")


def test_storage_from_config():
    assert isinstance(storage_from_config({"STORAGE_BACKEND": "local", "UPLOAD_ROOT": "/tmp/x"}), LocalStorage)
    s3 = storage_from_config({"STORAGE_BACKEND": "s3", "S3_BUCKET": "media", "S3_ENDPOINT": "nyc3.example.com"})
    assert isinstance(s3, S3Storage)
    assert s3.bucket == "media"
