"""Validated handle to one uploaded file."""

import contextlib
import os
import re
from pathlib import Path, PurePath

from beartype import beartype

from uploads.core.logger import LogIcon, logger
from uploads.files import registry
from uploads.files.errors import (
    FileMoveError,
    UploadedFileNotFoundError,
    UploadError,
    UploadErrorCode,
    UploadErrorKind,
    classify,
    error_message,
)
from uploads.files.size import max_file_size

DEFAULT_MIME_TYPE = "application/octet-stream"

_TAGS = re.compile(r"<[^>]*>")


def client_basename(name: str) -> str:
    """Locale independent base name, both ``/`` and ``\\`` count as separators."""
    return name.replace("\\", "/").rpartition("/")[2]


def _read_umask() -> int:
    """Process umask, read once at import: reading it means briefly setting it to 0."""
    mask = os.umask(0)
    os.umask(mask)
    return mask


UMASK = _read_umask()


class UploadedFile:
    """
    A file submitted with the current request.

    The handle is only backed by a file when the upload succeeded. For
    handles carrying an error code only the client metadata, ``error``,
    ``kind``, ``error_message`` and ``is_valid()`` are meaningful; ``move()``
    always raises the classified ``UploadError`` for them.

    Client supplied values (``client_original_name``, ``client_mime_type``)
    are never safe to trust.
    """

    __slots__ = ("_path", "_original_name", "_mime_type", "_error")

    @beartype
    def __init__(self, path: str | os.PathLike, original_name: str, mime_type: str | None = "", error: int | None = None) -> None:
        self._original_name = client_basename(original_name)
        self._mime_type = mime_type or DEFAULT_MIME_TYPE
        self._error = UploadErrorCode.OK if error is None else error
        self._path = os.fspath(path)

        if self._error == UploadErrorCode.OK and not os.path.isfile(self._path):
            raise UploadedFileNotFoundError(self._path)

    def __repr__(self) -> str:
        return f"UploadedFile(name={self._original_name!r}, error={self._error!r}, path={self._path!r})"

    @property
    def path(self) -> str:
        return self._path

    @property
    def client_original_name(self) -> str:
        return self._original_name

    @property
    def client_original_extension(self) -> str:
        return PurePath(self._original_name).suffix.lstrip(".")

    @property
    def client_mime_type(self) -> str:
        return self._mime_type

    @property
    def error(self) -> int:
        return self._error

    @property
    def kind(self) -> UploadErrorKind:
        return classify(self._error)

    @property
    def error_message(self) -> str:
        return error_message(self._error, self._original_name)

    @property
    def size(self) -> int:
        """Size of the temp file on disk."""
        return os.path.getsize(self._path)

    def is_valid(self) -> bool:
        """True if the upload succeeded and the path was produced by the upload mechanism."""
        return self._error == UploadErrorCode.OK and registry.is_uploaded_file(self._path)

    @beartype
    def move(self, directory: str | os.PathLike, name: str | None = None) -> Path:
        """
        Move the uploaded file into ``directory`` and return its new location.

        The target name is ``name`` or the temp file's own base name, never the
        client supplied name, so uploaders cannot choose or overwrite stored
        files. Can only be called once per handle: afterwards the temp path no
        longer exists.

        Raises:
            UploadError: the handle carries an upload error code.
            FileMoveError: the directory is unusable or the relocation failed.
        """
        if not self.is_valid():
            raise UploadError(self._error, self._original_name)

        target = self._target_file(os.fspath(directory), name)

        try:
            moved = self._registry().move_uploaded_file(self._path, target)
        except OSError as err:
            reason = _TAGS.sub("", err.strerror or str(err))
            raise FileMoveError(
                f'Could not move the file "{self._path}" to "{target}" ({reason})',
                source=self._path,
                target=str(target),
                reason=reason,
            ) from err

        with contextlib.suppress(OSError):
            os.chmod(moved, 0o666 & ~UMASK)

        logger.info("Uploaded file moved", icon=LogIcon.MOVE, name=self._original_name, target=str(moved))
        return moved

    @staticmethod
    def get_max_file_size() -> int:
        """Largest accepted upload in bytes according to the configured limits."""
        return max_file_size()

    @staticmethod
    def _registry() -> registry.UploadRegistry:
        active = registry.current_registry()
        if active is None:
            raise PermissionError("no upload scope is active")
        return active

    def _target_file(self, directory: str, name: str | None) -> Path:
        if not os.path.isdir(directory):
            raise FileMoveError(f"Unable to find the {directory} directory")
        if not os.access(directory, os.W_OK):
            raise FileMoveError(f"Unable to write in the {directory} directory")

        if not name:
            name = os.path.basename(self._path)

        return Path(directory.rstrip("/\\") or directory) / name
