"""Shared test fixtures -- reduces boilerplate across test modules.

Provides:
- ``test_settings`` -- autouse fixture: isolated upload/extract dirs under
  ``tmp_path`` and a fake LLM key, wired into the app's ``get_settings``
- ``write_tree`` -- lays out ``{path: content}`` on disk
- ``make_zip`` -- writes an archive from ``{path: content}``
- ``test_client`` -- pre-built TestClient against the app
"""

import zipfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from zipreview.api.deps import get_settings
from zipreview.config import Settings
from zipreview.main import app


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_tree(root: Path, files: dict[str, str]) -> Path:
    for rel, content in files.items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return root


def _make_zip(path: Path, files: dict[str, str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as zf:
        for rel, content in files.items():
            zf.writestr(rel, content)
    return path


@pytest.fixture
def write_tree(tmp_path: Path):
    """Return ``write(files, root=tmp_path / "tree") -> root``."""

    def _write(files: dict[str, str], root: Path | None = None) -> Path:
        return _write_tree(root or tmp_path / "tree", files)

    return _write


@pytest.fixture
def make_zip(tmp_path: Path):
    """Return ``make(files, name="project.zip") -> Path`` of a new archive."""

    def _make(files: dict[str, str], name: str = "project.zip") -> Path:
        return _make_zip(tmp_path / "zips" / name, files)

    return _make


# ---------------------------------------------------------------------------
# Environment patching
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def test_settings(tmp_path: Path) -> Settings:
    """Deterministic, isolated settings for every test.

    Storage lives under ``tmp_path`` so tests never touch the working
    directory, and the app's ``get_settings`` dependency returns these.
    """
    current = Settings(
        _env_file=None,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        EXTRACT_DIR=str(tmp_path / "extracted"),
        LLM_PROVIDER="gemini",
        LLM_MODEL="",
        GEMINI_API_KEY="test-key",
        ANTHROPIC_API_KEY="",
    )
    app.dependency_overrides[get_settings] = lambda: current
    yield current
    app.dependency_overrides.pop(get_settings, None)
    if hasattr(app.state, "text_generator"):
        del app.state.text_generator


@pytest.fixture
def test_client() -> TestClient:
    """A fresh ``TestClient`` instance wrapping the FastAPI app.

    Not used as a context manager, so the lifespan hook does not run.
    """
    return TestClient(app, raise_server_exceptions=False)
