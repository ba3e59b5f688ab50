"""Request-scoped registry of files produced by the upload mechanism.

Only paths staged by the active registry count as uploads. This is what
``UploadedFile.is_valid`` asks before trusting a temp path, and the only
way such a file may be relocated is through ``move_uploaded_file``.
"""

import contextlib
import os
import shutil
import tempfile
from collections.abc import Iterator
from contextvars import ContextVar
from pathlib import Path

from uploads.core.logger import LogIcon, logger
from uploads.files.errors import UploadErrorCode
from uploads.files.size import max_file_size

_current: ContextVar["UploadRegistry | None"] = ContextVar("upload_registry", default=None)


class UploadRegistry:
    """Stages client bytes as temp files and remembers which paths it produced."""

    def __init__(self, directory: str | os.PathLike) -> None:
        self.directory = Path(directory)
        self._paths: set[str] = set()

    def __contains__(self, path: object) -> bool:
        return isinstance(path, (str, os.PathLike)) and self._key(path) in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    @staticmethod
    def _key(path: str | os.PathLike) -> str:
        return os.path.realpath(path)

    def _record(self, filename: str, content_type: str, error: int, tmp_name: str = "", size: int = 0) -> dict:
        return {
            "name": filename,
            "full_path": filename,
            "type": content_type,
            "tmp_name": tmp_name,
            "error": int(error),
            "size": size,
        }

    def stage(self, filename: str, data: bytes, content_type: str = "", form_max_size: int | None = None) -> dict:
        """Write one submitted file to a temp path and return its leaf record."""
        size = len(data)

        if not filename and not data:
            return self._record(filename, content_type, UploadErrorCode.NO_FILE)
        if size > max_file_size():
            return self._record(filename, content_type, UploadErrorCode.INI_SIZE, size=size)
        if form_max_size is not None and size > form_max_size:
            return self._record(filename, content_type, UploadErrorCode.FORM_SIZE, size=size)
        if not self.directory.is_dir():
            logger.warning("Upload temp directory missing", icon=LogIcon.FOLDER, directory=str(self.directory))
            return self._record(filename, content_type, UploadErrorCode.NO_TMP_DIR, size=size)

        try:
            fd, tmp_name = tempfile.mkstemp(prefix="upl", dir=self.directory)
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
        except OSError as err:
            logger.warning("Could not write upload to disk", icon=LogIcon.ERROR, filename=filename, error=str(err))
            return self._record(filename, content_type, UploadErrorCode.CANT_WRITE, size=size)

        self._paths.add(self._key(tmp_name))
        return self._record(filename, content_type, UploadErrorCode.OK, tmp_name=tmp_name, size=size)

    def is_uploaded_file(self, path: str | os.PathLike) -> bool:
        """True when ``path`` was staged by this registry and has not been moved since."""
        return path in self and os.path.isfile(path)

    def move_uploaded_file(self, source: str | os.PathLike, target: str | os.PathLike) -> Path:
        """Relocate a staged file, ``OSError`` from the filesystem propagates untouched."""
        if not self.is_uploaded_file(source):
            raise PermissionError(f"{source} is not an uploaded file")
        moved = Path(shutil.move(os.fspath(source), os.fspath(target)))
        self._paths.discard(self._key(source))
        return moved

    def cleanup(self) -> None:
        """Delete staged files that were never moved."""
        for path in list(self._paths):
            with contextlib.suppress(FileNotFoundError):
                os.unlink(path)
            self._paths.discard(path)


def current_registry() -> UploadRegistry | None:
    return _current.get()


def is_uploaded_file(path: str | os.PathLike) -> bool:
    """Spoofing check against the registry bound to the current request, False without one."""
    registry = _current.get()
    return registry is not None and registry.is_uploaded_file(path)


@contextlib.contextmanager
def upload_scope(directory: str | os.PathLike) -> Iterator[UploadRegistry]:
    """Bind a fresh registry for the duration of one request, removing unmoved temp files on exit."""
    registry = UploadRegistry(directory)
    token = _current.set(registry)
    try:
        yield registry
    finally:
        _current.reset(token)
        if len(registry):
            logger.debug("Removing unmoved uploads", icon=LogIcon.CLEANUP, count=len(registry))
        registry.cleanup()
