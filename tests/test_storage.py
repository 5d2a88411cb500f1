"""Tests for the local object store."""

import pytest

from geturilist.errors import DeleteError, ObjectNotFoundError, StorageError
from geturilist.storage import LocalObjectStore


class TestLocalObjectStore:
    def test_write_then_read(self, tmp_path) -> None:
        store = LocalObjectStore(tmp_path)
        store.write("out", "a/b/file.warc.gz", b"data")
        assert (tmp_path / "out" / "a" / "b" / "file.warc.gz").read_bytes() == b"data"
        assert store.read("out", "a/b/file.warc.gz") == b"data"

    def test_write_overwrites_without_leftovers(self, tmp_path) -> None:
        store = LocalObjectStore(tmp_path)
        store.write("out", "x", b"one")
        store.write("out", "x", b"two")
        assert store.read("out", "x") == b"two"
        assert [p.name for p in (tmp_path / "out").iterdir()] == ["x"]

    def test_read_missing(self, tmp_path) -> None:
        with pytest.raises(ObjectNotFoundError):
            LocalObjectStore(tmp_path).read("in", "missing.txt")

    def test_delete(self, tmp_path) -> None:
        store = LocalObjectStore(tmp_path)
        store.write("in", "urls.txt", b"")
        store.delete("in", "urls.txt")
        assert not (tmp_path / "in" / "urls.txt").exists()

    def test_delete_missing_raises(self, tmp_path) -> None:
        with pytest.raises(DeleteError, match="not found"):
            LocalObjectStore(tmp_path).delete("in", "urls.txt")

    def test_name_cannot_escape_bucket(self, tmp_path) -> None:
        with pytest.raises(StorageError):
            LocalObjectStore(tmp_path).write("out", "../elsewhere", b"x")
