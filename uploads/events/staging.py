"""Upload directories lifespan event."""

import contextlib
import os
from dataclasses import dataclass
from pathlib import Path

from uploads.core.lifespan import BaseEvent
from uploads.core.logger import LogIcon, logger
from uploads.core.settings import settings as st


@dataclass(frozen=True, slots=True)
class UploadDirectories:
    """Where uploads are staged during a request and where they are stored afterwards."""

    staging: Path
    storage: Path


def prepare_directories(staging: Path, storage: Path) -> UploadDirectories:
    staging.mkdir(parents=True, exist_ok=True)
    storage.mkdir(parents=True, exist_ok=True)
    return UploadDirectories(staging=staging, storage=storage)


def purge_staging(staging: Path) -> int:
    """Remove staged files left behind by aborted requests, returns how many were removed."""
    removed = 0
    if not staging.is_dir():
        return removed
    for entry in staging.iterdir():
        if entry.is_file():
            with contextlib.suppress(FileNotFoundError):
                os.unlink(entry)
                removed += 1
    return removed


class UploadStagingEvent(BaseEvent[UploadDirectories]):
    """Creates the upload directories on startup and purges the staging area on shutdown."""

    name = "uploads"

    async def startup(self) -> UploadDirectories:
        directories = prepare_directories(st.UPLOAD_TMP_DIR, st.UPLOAD_DIR)
        logger.info("Upload directories ready", icon=LogIcon.FOLDER, staging=str(directories.staging), storage=str(directories.storage))
        return directories

    async def shutdown(self, instance: UploadDirectories) -> None:
        removed = purge_staging(instance.staging)
        logger.info("Staging area purged", icon=LogIcon.CLEANUP, removed=removed)
