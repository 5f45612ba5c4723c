"""Tests for file helpers."""

import pytest

from checkout_server import storage
from checkout_server.errors import StorageError


class TestReadLines:
    def test_strips_line_endings(self, tmp_path):
        path = tmp_path / "f.txt"
        path.write_bytes("a:1\r\nb:2\n".encode("utf-8"))
        assert storage.read_lines(path) == ["a:1", "b:2"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(StorageError):
            storage.read_lines(tmp_path / "missing.txt")

    def test_invalid_utf8(self, tmp_path):
        path = tmp_path / "f.txt"
        path.write_bytes(b"br\xf6d:2\n")
        with pytest.raises(StorageError):
            storage.read_lines(path)

    def test_directory_instead_of_file(self, tmp_path):
        with pytest.raises(StorageError):
            storage.read_lines(tmp_path)


class TestWriteLines:
    def test_writes_and_leaves_no_temp_file(self, tmp_path):
        path = tmp_path / "f.txt"
        storage.write_lines(path, ["a", "b"])
        assert path.read_text(encoding="utf-8") == "a\nb\n"
        assert [p.name for p in tmp_path.iterdir()] == ["f.txt"]

    def test_unwritable_destination(self, tmp_path):
        target = tmp_path / "dir"
        target.mkdir()
        with pytest.raises(StorageError):
            storage.write_lines(target, ["a"])


class TestTruncate:
    def test_truncates(self, tmp_path):
        path = tmp_path / "f.txt"
        path.write_text("content", encoding="utf-8")
        storage.truncate(path)
        assert path.read_text(encoding="utf-8") == ""

    def test_failure_is_reported(self, tmp_path):
        with pytest.raises(StorageError):
            storage.truncate(tmp_path / "missing-dir" / "f.txt")
