"""Tests for the archive client -- extraction and request-scoped storage."""

import zipfile

import pytest

from zipreview.clients.archive import (
    extract_archive,
    extraction_workspace,
    remove_path,
    save_upload,
)
from zipreview.errors import ArchiveExtractionError


def test_extract_archive_writes_all_entries(make_zip, tmp_path):
    archive = make_zip({"app/package.json": "{}", "app/src/index.js": "let a1 = 1;"})
    dest = tmp_path / "out"
    dest.mkdir()
    assert extract_archive(archive, dest) == 2
    assert (dest / "app/src/index.js").read_text() == "let a1 = 1;"


def test_extract_rejects_non_zip(tmp_path):
    bogus = tmp_path / "bogus.zip"
    bogus.write_bytes(b"definitely not a zip")
    with pytest.raises(ArchiveExtractionError) as exc_info:
        extract_archive(bogus, tmp_path / "out")
    assert exc_info.value.status_code == 500
    assert "Invalid zip archive" in exc_info.value.details


def test_extract_rejects_path_traversal(tmp_path):
    archive = tmp_path / "evil.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("../escape.txt", "pwned")
    dest = tmp_path / "out"
    dest.mkdir()
    with pytest.raises(ArchiveExtractionError):
        extract_archive(archive, dest)
    assert not (tmp_path / "escape.txt").exists()


def test_workspace_removed_on_success(tmp_path):
    with extraction_workspace(tmp_path / "extracted") as workdir:
        (workdir / "f.txt").write_text("x")
        assert workdir.is_dir()
    assert not workdir.exists()


def test_workspace_removed_on_failure(tmp_path):
    with pytest.raises(RuntimeError):
        with extraction_workspace(tmp_path / "extracted") as workdir:
            (workdir / "nested").mkdir()
            raise RuntimeError("boom")
    assert not workdir.exists()


def test_workspaces_are_disjoint(tmp_path):
    parent = tmp_path / "extracted"
    with extraction_workspace(parent) as first, extraction_workspace(parent) as second:
        assert first != second
        (first / "a").write_text("1")
        assert not (second / "a").exists()
    assert list(parent.iterdir()) == []


def test_save_upload_and_remove(tmp_path):
    path = save_upload(b"PK\x03\x04", tmp_path / "uploads")
    assert path.read_bytes() == b"PK\x03\x04"
    assert path.suffix == ".zip"
    remove_path(path)
    assert not path.exists()


def test_remove_path_ignores_missing(tmp_path):
    remove_path(tmp_path / "never-existed")
