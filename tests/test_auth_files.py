"""Tests for authorization strategies and FileLike sources."""

import io

import pytest

from requestkit import BasicAuth, BearerAuth, FileLike, file_like
from requestkit._auth import _normalize_auth


class TestAuth:
    def test_basic_header(self):
        assert BasicAuth("user", "pass").header == ("Authorization", "Basic dXNlcjpwYXNz")

    def test_basic_equality(self):
        assert BasicAuth("a", "b") == BasicAuth("a", "b")
        assert BasicAuth("a", "b") != BasicAuth("a", "c")

    def test_password_not_in_repr(self):
        assert "secret" not in repr(BasicAuth("user", "secret"))

    def test_bearer_header(self):
        assert BearerAuth("tok").header == ("Authorization", "Bearer tok")

    def test_normalize(self):
        assert _normalize_auth(None) is None
        assert _normalize_auth(("u", "p")) == BasicAuth("u", "p")
        with pytest.raises(TypeError):
            _normalize_auth("user:pass")


class TestFileLike:
    def test_from_bytes(self):
        file = FileLike("field", b"data")
        assert file.filename == "field"
        assert file.contents == b"data"
        assert len(file) == 4

    def test_from_text(self):
        assert FileLike("field", "é").contents == "é".encode("utf-8")

    def test_stream_read_once(self):
        stream = io.BytesIO(b"streamed")
        file = FileLike("field", stream)
        assert file.contents == b"streamed"
        assert stream.tell() == 8
        assert file.contents == b"streamed"

    def test_from_path(self, tmp_path):
        path = tmp_path / "report.csv"
        path.write_bytes(b"a,b\n")
        file = FileLike.from_path(path)
        assert file.field_name == "report.csv"
        assert file.contents == b"a,b\n"

    def test_from_path_string_with_name(self, tmp_path):
        path = tmp_path / "report.csv"
        path.write_bytes(b"x")
        assert FileLike.from_path(str(path), name="upload").field_name == "upload"

    def test_file_like_path(self, tmp_path):
        path = tmp_path / "image.png"
        path.write_bytes(b"\x89PNG")
        assert file_like(path).field_name == "image.png"

    def test_file_like_stream_uses_name(self, tmp_path):
        path = tmp_path / "named.bin"
        path.write_bytes(b"x")
        with open(path, "rb") as f:
            assert file_like(f).field_name == "named.bin"

    def test_file_like_bytes_needs_name(self):
        with pytest.raises(ValueError):
            file_like(b"data")
        assert file_like(b"data", name="field").contents == b"data"

    def test_invalid_contents(self):
        with pytest.raises(TypeError):
            FileLike("field", 42)

    def test_empty_field_name(self):
        with pytest.raises(ValueError):
            FileLike("", b"x")
