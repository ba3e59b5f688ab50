"""Test fixtures for robyn-uploads unit tests."""

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from uploads.core.lifespan import State
from uploads.core.settings import settings
from uploads.files.registry import UploadRegistry, upload_scope


# -----------------------------------------------------------------------------
# Mock classes for Robyn Request
# -----------------------------------------------------------------------------


@dataclass
class MockRequest:
    """Mock Request object for Robyn carrying uploaded files."""

    files: dict[str, bytes] = field(default_factory=dict)
    method: str = "POST"
    path: str = "/"


# -----------------------------------------------------------------------------
# Settings fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def upload_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Pin upload limits and directories so tests ignore the environment."""
    monkeypatch.setattr(settings, "POST_MAX_SIZE", "8M")
    monkeypatch.setattr(settings, "UPLOAD_MAX_FILESIZE", "2M")
    monkeypatch.setattr(settings, "MAX_FILE_UPLOADS", 20)
    monkeypatch.setattr(settings, "UPLOAD_TMP_DIR", tmp_path / "staging")
    monkeypatch.setattr(settings, "UPLOAD_DIR", tmp_path / "storage")
    return settings


# -----------------------------------------------------------------------------
# Upload fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def staging_dir(tmp_path: Path) -> Path:
    path = tmp_path / "staging"
    path.mkdir(exist_ok=True)
    return path


@pytest.fixture
def storage_dir(tmp_path: Path) -> Path:
    path = tmp_path / "storage"
    path.mkdir(exist_ok=True)
    return path


@pytest.fixture
def registry(staging_dir: Path):
    """Active upload scope for the duration of one test."""
    with upload_scope(staging_dir) as active:
        yield active


@pytest.fixture
def make_record(registry: UploadRegistry) -> Callable[..., dict]:
    """Factory fixture staging bytes and returning the leaf record."""

    def _make(name: str = "x.txt", data: bytes = b"abc", content_type: str = "text/plain") -> dict:
        return registry.stage(name, data, content_type)

    return _make


@pytest.fixture
def make_mock_request() -> Callable[..., MockRequest]:
    def _make(files: dict[str, bytes] | None = None) -> MockRequest:
        return MockRequest(files=files or {})

    return _make


# -----------------------------------------------------------------------------
# State fixture
# -----------------------------------------------------------------------------


@pytest.fixture
def test_state() -> State:
    """Create a test state container."""
    return State()
