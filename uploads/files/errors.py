"""Upload error taxonomy and the exceptions raised by the file handling core."""

from enum import IntEnum, StrEnum

from uploads.files.size import max_file_size


class UploadErrorCode(IntEnum):
    """Upload outcome codes as assigned by the host runtime."""

    OK = 0
    INI_SIZE = 1
    FORM_SIZE = 2
    PARTIAL = 3
    NO_FILE = 4
    NO_TMP_DIR = 6
    CANT_WRITE = 7
    EXTENSION = 8


class UploadErrorKind(StrEnum):
    """Machine-distinguishable classification of an upload outcome."""

    OK = "ok"
    INI_SIZE = "ini_size"
    FORM_SIZE = "form_size"
    PARTIAL = "partial"
    NO_FILE = "no_file"
    NO_TMP_DIR = "no_tmp_dir"
    CANT_WRITE = "cant_write"
    EXTENSION = "extension"
    UNKNOWN = "unknown"

    @property
    def template(self) -> str:
        return MESSAGE_TEMPLATES.get(self, MESSAGE_TEMPLATES[UploadErrorKind.UNKNOWN])


MESSAGE_TEMPLATES: dict[UploadErrorKind, str] = {
    UploadErrorKind.INI_SIZE: 'The file "{name}" exceeds the upload_max_filesize limit (limit is {size} KiB).',
    UploadErrorKind.FORM_SIZE: "The file {name} exceeds the upload limit defined in your form.",
    UploadErrorKind.PARTIAL: "The file {name} was only partially uploaded.",
    UploadErrorKind.NO_FILE: "No file was uploaded.",
    UploadErrorKind.NO_TMP_DIR: "File could not be uploaded: missing temporary directory.",
    UploadErrorKind.CANT_WRITE: "The file {name} could not be written on disk.",
    UploadErrorKind.EXTENSION: "File upload was stopped by an extension.",
    UploadErrorKind.UNKNOWN: "The file {name} was not uploaded due to an unknown error.",
}


def classify(code: int | None) -> UploadErrorKind:
    """Map a raw upload code to its kind, unmapped codes are ``UNKNOWN``."""
    try:
        return UploadErrorKind[UploadErrorCode(code).name]
    except ValueError:
        return UploadErrorKind.UNKNOWN


def _format_kib(size: int) -> str:
    kib = size / 1024
    return str(int(kib)) if kib.is_integer() else str(kib)


def failure_kind(code: int | None) -> UploadErrorKind:
    """Kind reported when a file with ``code`` is refused, an OK code that failed the upload check is unknown."""
    kind = classify(code)
    return UploadErrorKind.UNKNOWN if kind is UploadErrorKind.OK else kind


def error_message(code: int | None, name: str) -> str:
    """Human readable message for ``code`` filled with the client file name and current size limit."""
    template = failure_kind(code).template
    return template.replace("{name}", name).replace("{size}", _format_kib(max_file_size()))


class FileError(Exception):
    """Base class for every failure raised while handling uploaded files."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UploadedFileNotFoundError(FileError):
    """The runtime reported a successful upload but no file exists at the temp path."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f'The file "{path}" does not exist')


class FileMoveError(FileError):
    """Moving a file failed: unusable destination or a failing relocation call."""

    def __init__(self, message: str, source: str | None = None, target: str | None = None, reason: str = "") -> None:
        self.source = source
        self.target = target
        self.reason = reason
        super().__init__(message)


class UploadError(FileError):
    """Classified upload failure, the kind is carried as data."""

    def __init__(self, code: int | None, name: str) -> None:
        self.code = code
        self.kind = failure_kind(code)
        super().__init__(error_message(code, name))
