"""Tests for the upload endpoint logic."""

from pathlib import Path

import pytest

from uploads.api.files import iter_leaves, store_files
from uploads.core.settings import settings
from uploads.files.errors import UploadErrorCode, UploadErrorKind
from uploads.files.registry import UploadRegistry
from uploads.files.tree import Files
from uploads.files.uploaded import UploadedFile


def test_iter_leaves_flattens_with_brackets(registry: UploadRegistry) -> None:
    """Verify nested fields are reported with their bracketed names."""
    single = UploadedFile(registry.stage("a.txt", b"a")["tmp_name"], "a.txt")
    nested = UploadedFile(registry.stage("b.txt", b"b")["tmp_name"], "b.txt")

    leaves = dict(iter_leaves({"single": single, "docs": {"x": {"one": nested}}}))

    assert leaves == {"single": single, "docs[x][one]": nested}


def test_store_files_moves_valid_and_reports_rejected(registry: UploadRegistry, storage_dir: Path) -> None:
    """Verify valid uploads are stored and invalid ones rejected with their kind."""
    record = registry.stage("notes.txt", b"hello", "text/plain")
    raw = {
        "notes": record,
        "big": {"error": UploadErrorCode.INI_SIZE, "name": "big.iso", "type": "", "tmp_name": "", "size": 0},
    }

    response = store_files(Files(raw))

    assert [f.field for f in response.stored] == ["notes"]
    stored = response.stored[0]
    assert stored.size == 5
    assert stored.mime_type == "text/plain"
    assert Path(stored.location) == storage_dir / Path(record["tmp_name"]).name
    assert Path(stored.location).read_bytes() == b"hello"

    assert [r.field for r in response.rejected] == ["big"]
    assert response.rejected[0].kind is UploadErrorKind.INI_SIZE
    assert "big.iso" in response.rejected[0].message


def test_store_files_reports_move_failure(registry: UploadRegistry, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Verify a missing storage directory is reported as a rejection without kind."""
    monkeypatch.setattr(settings, "UPLOAD_DIR", tmp_path / "nowhere")
    files = Files({"notes": registry.stage("notes.txt", b"hello")})

    response = store_files(files)

    assert response.stored == []
    assert response.rejected[0].kind is None
    assert "Unable to find" in response.rejected[0].message
