"""Tests for the upload error taxonomy."""

import pytest

from uploads.core.settings import settings
from uploads.files.errors import (
    FileError,
    FileMoveError,
    UploadedFileNotFoundError,
    UploadError,
    UploadErrorCode,
    UploadErrorKind,
    classify,
    error_message,
    failure_kind,
)


class TestClassify:
    """Tests for classify."""

    @pytest.mark.parametrize(
        ("code", "kind"),
        [
            (0, UploadErrorKind.OK),
            (1, UploadErrorKind.INI_SIZE),
            (2, UploadErrorKind.FORM_SIZE),
            (3, UploadErrorKind.PARTIAL),
            (4, UploadErrorKind.NO_FILE),
            (6, UploadErrorKind.NO_TMP_DIR),
            (7, UploadErrorKind.CANT_WRITE),
            (8, UploadErrorKind.EXTENSION),
        ],
    )
    def test_known_codes(self, code: int, kind: UploadErrorKind) -> None:
        assert classify(code) is kind

    @pytest.mark.parametrize("code", [5, 9, -1, 42])
    def test_unknown_codes(self, code: int) -> None:
        assert classify(code) is UploadErrorKind.UNKNOWN

    def test_every_kind_has_template(self) -> None:
        for kind in UploadErrorKind:
            assert kind.template

    def test_refused_ok_code_is_unknown(self) -> None:
        assert failure_kind(UploadErrorCode.OK) is UploadErrorKind.UNKNOWN
        assert failure_kind(UploadErrorCode.PARTIAL) is UploadErrorKind.PARTIAL


class TestErrorMessage:
    """Tests for error_message."""

    def test_name_is_filled(self) -> None:
        message = error_message(UploadErrorCode.PARTIAL, "photo.jpg")
        assert message == "The file photo.jpg was only partially uploaded."

    def test_size_in_kib(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "UPLOAD_MAX_FILESIZE", "2M")
        message = error_message(UploadErrorCode.INI_SIZE, "big.iso")
        assert '"big.iso"' in message
        assert "limit is 2048 KiB" in message

    def test_fractional_kib(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "UPLOAD_MAX_FILESIZE", "1536")
        assert "limit is 1.5 KiB" in error_message(UploadErrorCode.INI_SIZE, "a")

    def test_unknown_code(self) -> None:
        assert error_message(99, "a.txt") == "The file a.txt was not uploaded due to an unknown error."


class TestExceptions:
    """Tests for the exception family."""

    def test_upload_error_carries_kind(self) -> None:
        ex = UploadError(UploadErrorCode.CANT_WRITE, "a.txt")
        assert ex.kind is UploadErrorKind.CANT_WRITE
        assert ex.code == 7
        assert str(ex) == "The file a.txt could not be written on disk."

    def test_upload_error_unknown_code(self) -> None:
        assert UploadError(123, "a.txt").kind is UploadErrorKind.UNKNOWN

    def test_not_found_carries_path(self) -> None:
        ex = UploadedFileNotFoundError("/tmp/missing")
        assert ex.path == "/tmp/missing"
        assert str(ex) == 'The file "/tmp/missing" does not exist'

    def test_move_error_is_not_upload_error(self) -> None:
        ex = FileMoveError("boom", source="a", target="b", reason="denied")
        assert isinstance(ex, FileError)
        assert not isinstance(ex, UploadError)
        assert (ex.source, ex.target, ex.reason) == ("a", "b", "denied")
