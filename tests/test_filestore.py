"""Tests for the JSON file helpers."""

import json
import os

import pytest

from livejson import DocumentAccessError, DocumentReadError, DocumentWriteError, InvalidDocumentError
from livejson import filestore


class TestRead:
    def test_reads_object(self, tmp_path):
        path = tmp_path / "a.json"
        path.write_text('{"b": 1, "a": [true, null]}')
        data = filestore.read_document(path)
        assert data == {"b": 1, "a": [True, None]}
        assert list(data) == ["b", "a"]

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "a.json"
        path.write_text("{")
        with pytest.raises(DocumentReadError) as info:
            filestore.read_document(path)
        assert isinstance(info.value.original_error, json.JSONDecodeError)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentReadError):
            filestore.read_document(tmp_path / "nope.json")

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "a.json"
        path.write_text("[1, 2]")
        with pytest.raises(InvalidDocumentError):
            filestore.read_document(path)

    def test_encoding(self, tmp_path):
        path = tmp_path / "a.json"
        path.write_bytes('{"k": "é"}'.encode("latin-1"))
        assert filestore.read_document(path, encoding="latin-1") == {"k": "é"}


class TestWrite:
    def test_insertion_order_and_indent(self, tmp_path):
        path = tmp_path / "a.json"
        filestore.write_document(path, {"z": 1, "a": [1, False, None]}, indent=4)
        text = path.read_text()
        assert text.index('"z"') < text.index('"a"')
        assert '\n    "z": 1' in text
        assert json.loads(text) == {"z": 1, "a": [1, False, None]}

    def test_compact(self, tmp_path):
        path = tmp_path / "a.json"
        filestore.write_document(path, {"a": "é"}, indent=None)
        assert path.read_text(encoding="utf-8") == '{"a": "é"}'

    def test_write_failure(self, tmp_path):
        with pytest.raises(DocumentWriteError):
            filestore.write_document(tmp_path / "no" / "a.json", {})


class TestStat:
    def test_stat_mtime(self, tmp_path):
        path = tmp_path / "a.json"
        assert filestore.stat_mtime(path) is None
        path.write_text("{}")
        assert filestore.stat_mtime(path) == os.stat(path).st_mtime_ns

    @pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0, reason="root ignores permissions")
    def test_check_access(self, tmp_path):
        path = tmp_path / "a.json"
        path.write_text("{}")
        filestore.check_access(path, writable=True)
        path.chmod(0o444)
        try:
            filestore.check_access(path, writable=False)
            with pytest.raises(DocumentAccessError):
                filestore.check_access(path, writable=True)
        finally:
            path.chmod(0o644)
