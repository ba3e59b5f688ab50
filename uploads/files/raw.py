"""Build the host runtime's raw upload description from submitted multipart parts.

A part named ``photos[front]`` lands in five (plus ``full_path``) parallel
maps under ``photos``, the same inconsistent shape ``Files`` expects to
normalize; a part without brackets becomes a flat leaf record.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from uploads.core.logger import LogIcon, logger
from uploads.core.settings import settings
from uploads.files.registry import UploadRegistry
from uploads.files.tree import PARALLEL_KEYS

_FIELD = re.compile(r"^(?P<base>[^\[]+)(?P<keys>(?:\[[^\[\]]*\])*)$")
_KEY = re.compile(r"\[([^\[\]]*)\]")


@dataclass(frozen=True, slots=True)
class UploadPart:
    """One file part of a multipart/form-data body."""

    field: str
    filename: str
    data: bytes
    content_type: str = ""


def split_field_name(field: str) -> tuple[str, list[str]]:
    """``"a[b][]"`` -> ``("a", ["b", ""])``, names that do not parse are used verbatim."""
    match = _FIELD.match(field)
    if not match:
        return field, []
    return match.group("base"), _KEY.findall(match.group("keys"))


def _assign(target: dict, keys: list[str], value: Any) -> None:
    *parents, last = keys
    for key in parents:
        child = target.get(key)
        if not isinstance(child, dict):
            child = target[key] = {}
        target = child
    target[last] = value


def _resolve_keys(tree: dict, base: str, keys: list[str]) -> list[str]:
    """Replace auto-index ``[]`` segments with concrete indexes once, shared by every parallel map."""
    names = tree.get(base, {}).get("name", {})
    resolved = []
    for key in keys:
        if not isinstance(names, dict):
            names = {}
        if key == "":
            key = str(sum(1 for k in names if k.isdigit()))
        resolved.append(key)
        names = names.get(key, {})
    return resolved


def build_raw_files(parts: Iterable[UploadPart], registry: UploadRegistry, form_max_size: int | None = None) -> dict[str, Any]:
    """Stage every part through ``registry`` and arrange the records in the host runtime shape."""
    raw: dict[str, Any] = {}

    for count, part in enumerate(parts):
        if count >= settings.MAX_FILE_UPLOADS:
            logger.warning("Maximum number of file uploads reached", icon=LogIcon.FORBIDDEN, skipped=part.field, limit=settings.MAX_FILE_UPLOADS)
            continue

        record = registry.stage(part.filename, part.data, part.content_type, form_max_size)
        base, keys = split_field_name(part.field)

        if not keys:
            raw[base] = record
            continue

        keys = _resolve_keys(raw, base, keys)
        entry = raw.get(base)
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), dict):
            entry = raw[base] = {field: {} for field in PARALLEL_KEYS}
        for field in PARALLEL_KEYS:
            _assign(entry[field], keys, record[field])

    return raw
