"""Tests for review_pipeline -- end to end without HTTP."""

import json
import threading
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from zipreview.errors import ArchiveExtractionError, DescriptorNotFoundError
from zipreview.services import review_pipeline
from zipreview.services.review_pipeline import analyze_archive, review_archive


def _extract_dir_is_empty(settings) -> bool:
    extract_dir = Path(settings.EXTRACT_DIR)
    return not extract_dir.exists() or not any(extract_dir.iterdir())


EXPRESS_PROJECT = {
    "my-app/package.json": json.dumps({"dependencies": {"express": "4.0.0"}}),
    "my-app/index.js": "const x = require('express')();\n" + "app.use(foo);\n" * 14,
    "my-app/.env": "PORT=3000\n",
}


def test_express_scenario(make_zip, test_settings):
    report = analyze_archive(make_zip(EXPRESS_PROJECT), test_settings)

    assert report.dependencies == {"express": "4.0.0"}
    assert report.suspicious_identifiers == ["x"]
    assert report.readability.total_lines == 15
    assert report.readability.long_lines == 0
    assert report.env_files == [".env"]
    assert [i.priority for i in report.improvements] == ["medium"]
    assert "x" in report.improvements[0].suggestion
    assert report.rating == "9.0/10"
    assert _extract_dir_is_empty(test_settings)


def test_paths_are_relative_to_project_root(make_zip, test_settings):
    report = analyze_archive(make_zip(EXPRESS_PROJECT), test_settings)
    assert sorted(report.files) == [".env", "index.js", "package.json"]
    assert report.analyzed_files == ["index.js"]


def test_no_descriptor_raises_and_cleans_up(make_zip, test_settings):
    archive = make_zip({"src/index.js": "let ok = 1;\n"})
    with pytest.raises(DescriptorNotFoundError) as exc_info:
        analyze_archive(archive, test_settings)
    assert str(exc_info.value) == "No package.json found"
    assert exc_info.value.status_code == 400
    assert _extract_dir_is_empty(test_settings)


def test_corrupt_archive_raises_and_cleans_up(tmp_path, test_settings):
    bogus = tmp_path / "bogus.zip"
    bogus.write_bytes(b"garbage")
    with pytest.raises(ArchiveExtractionError):
        analyze_archive(bogus, test_settings)
    assert _extract_dir_is_empty(test_settings)


def test_excluded_dirs_never_scanned(make_zip, test_settings):
    archive = make_zip({
        "package.json": "{}",
        "index.js": "let ok = 1;\n",
        "node_modules/lib/index.js": "const q = 1;\n",
        "dist/bundle.js": "var z = 1;\n",
    })
    report = analyze_archive(archive, test_settings)
    assert report.suspicious_identifiers == []
    assert all(not f.startswith(("node_modules/", "dist/")) for f in report.files)


def test_malformed_descriptor_degrades_to_empty_deps(make_zip, test_settings):
    archive = make_zip({"package.json": "{oops", "index.js": "let ok = 1;\n", ".env": ""})
    report = analyze_archive(archive, test_settings)
    assert report.dependencies == {}
    assert report.improvements == []


def test_extra_excluded_dirs_from_settings(make_zip, test_settings):
    test_settings.EXTRA_EXCLUDED_DIRS = ["fixtures"]
    archive = make_zip({
        "package.json": "{}",
        ".env": "",
        "fixtures/sample.js": "const x = 1;\n",
    })
    report = analyze_archive(archive, test_settings)
    assert report.suspicious_identifiers == []


def test_description_is_echoed(make_zip, test_settings):
    report = analyze_archive(make_zip(EXPRESS_PROJECT), test_settings, "A todo API")
    assert report.project_description == "A todo API"


# ---------------------------------------------------------------------------
# review_archive
# ---------------------------------------------------------------------------


def _thread_recording(monkeypatch, name, calls):
    real = getattr(review_pipeline, name)

    def _wrapper(*args, **kwargs):
        calls[name] = threading.get_ident()
        return real(*args, **kwargs)

    monkeypatch.setattr(review_pipeline, name, _wrapper)


@pytest.mark.asyncio
async def test_review_workspace_handled_off_event_loop(make_zip, test_settings, monkeypatch):
    calls: dict[str, int] = {}
    _thread_recording(monkeypatch, "create_workspace", calls)
    _thread_recording(monkeypatch, "remove_workspace", calls)
    generator = MagicMock()
    generator.generate = AsyncMock(return_value="ok")

    result = await review_archive(make_zip(EXPRESS_PROJECT), test_settings, generator)

    loop_thread = threading.get_ident()
    assert [s.file for s in result.summary] == ["package.json", "index.js"]
    assert calls["create_workspace"] != loop_thread
    assert calls["remove_workspace"] != loop_thread
    assert _extract_dir_is_empty(test_settings)


@pytest.mark.asyncio
async def test_review_workspace_removed_on_failure(tmp_path, test_settings):
    bogus = tmp_path / "bogus.zip"
    bogus.write_bytes(b"garbage")
    with pytest.raises(ArchiveExtractionError):
        await review_archive(bogus, test_settings, MagicMock())
    assert _extract_dir_is_empty(test_settings)
