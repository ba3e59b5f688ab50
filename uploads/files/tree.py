"""Normalization of the host runtime's upload description into a tree of ``UploadedFile``."""

from collections.abc import Iterator, Mapping
from typing import Any

from uploads.core.logger import LogIcon, logger
from uploads.files.errors import UploadErrorCode
from uploads.files.uploaded import UploadedFile

FILE_KEYS = frozenset({"error", "name", "size", "tmp_name", "type"})
PARALLEL_KEYS = ("error", "name", "type", "tmp_name", "size", "full_path")

type UploadTree = dict[str, UploadedFile | UploadTree]


def _holds_handles(data: Mapping) -> bool:
    return any(isinstance(value, UploadedFile) or (isinstance(value, Mapping) and _holds_handles(value)) for value in data.values())


def is_file_record(data: Mapping) -> bool:
    """
    Leaf or denormalizable record: all five fixed keys are present at this level.

    A map already holding ``UploadedFile`` values at any depth is a normalized
    branch, even when its sub-fields happen to be named like the fixed keys.
    """
    return FILE_KEYS.issubset(data.keys()) and not _holds_handles(data)


def denormalize(data: Mapping) -> dict[str, Any]:
    """
    Reshape a record whose values are parallel maps into a map of records.

    ``{"name": {"a": "x.txt"}, "type": {"a": "text/plain"}, ...}`` becomes
    ``{"a": {"name": "x.txt", "type": "text/plain", ...}}``. One level is
    zipped per call; records of deeper parallel maps are zipped again by
    ``Files``. Plain leaf records and branches are returned unchanged.
    """
    if not is_file_record(data) or not isinstance(data["name"], Mapping):
        return dict(data)

    files = {}
    for key in data["name"]:
        record = {}
        for field in PARALLEL_KEYS:
            values = data.get(field)
            record[field] = values.get(key) if isinstance(values, Mapping) else None
        files[key] = record
    return files


class Files:
    """
    Uploaded files of one request, keyed by form field name.

    Values are either an ``UploadedFile`` or a nested mapping of the same for
    array-style fields (``photos[front]``). Fields submitted without a file
    are absent rather than present and invalid.
    """

    def __init__(self, parameters: Mapping[str, Mapping | UploadedFile]) -> None:
        self._parameters: UploadTree = {}
        self._set(parameters)

    def __contains__(self, key: object) -> bool:
        return key in self._parameters

    def __iter__(self) -> Iterator[str]:
        return iter(self._parameters)

    def __len__(self) -> int:
        return len(self._parameters)

    def __repr__(self) -> str:
        return f"Files({self._parameters!r})"

    def all(self) -> UploadTree:
        return self._parameters

    def get(self, key: str) -> UploadedFile | UploadTree | None:
        return self._parameters.get(key)

    def _set(self, parameters: Mapping[str, Mapping | UploadedFile]) -> None:
        for key, file in parameters.items():
            if not isinstance(file, (Mapping, UploadedFile)):
                raise TypeError("An uploaded file must be a mapping or an instance of UploadedFile.")

            if converted := self._convert(key, file):
                self._parameters[key] = converted

    def _convert(self, key: str, file: Mapping | UploadedFile, record: bool = False) -> UploadedFile | UploadTree | None:
        # entries zipped out of parallel maps are records whatever their sub-keys are named
        if isinstance(file, UploadedFile):
            return file

        if not (record or is_file_record(file)):
            return self._convert_branch(key, file)

        if isinstance(file.get("name"), Mapping):
            return self._convert_branch(key, denormalize(file), records=True)

        return self._build_leaf(key, file)

    def _convert_branch(self, key: str, branch: Mapping, records: bool = False) -> UploadTree:
        tree: UploadTree = {}
        for sub_key, value in branch.items():
            if not isinstance(value, (Mapping, UploadedFile)):
                logger.warning("Dropped non file entry", icon=LogIcon.UPLOAD, field=key, key=sub_key)
                continue
            if converted := self._convert(sub_key, value, records):
                tree[sub_key] = converted
        return tree

    @staticmethod
    def _build_leaf(key: str, record: Mapping) -> UploadedFile | None:
        if record["error"] == UploadErrorCode.NO_FILE:
            return None
        try:
            return UploadedFile(record["tmp_name"], record["name"], record["type"], record["error"])
        except Exception as ex:
            logger.warning("Dropped malformed upload entry", icon=LogIcon.WARNING, field=key, error=str(ex))
            return None
