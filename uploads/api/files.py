"""Upload endpoint: stores every valid submitted file in the upload directory."""

from collections.abc import Iterator

from uploads.core.logger import LogIcon, logger
from uploads.core.router import Router
from uploads.core.settings import settings as st
from uploads.files.errors import FileMoveError, UploadError
from uploads.files.tree import Files, UploadTree
from uploads.files.uploaded import UploadedFile
from uploads.models.core import RejectedFile, StoredFile, UploadResponse

router = Router(__file__, prefix="/files")


def iter_leaves(tree: UploadTree, prefix: str = "") -> Iterator[tuple[str, UploadedFile]]:
    """Flatten a tree into ``("photos[front]", file)`` pairs."""
    for key, value in tree.items():
        field = f"{prefix}[{key}]" if prefix else key
        if isinstance(value, UploadedFile):
            yield field, value
        else:
            yield from iter_leaves(value, field)


def store_files(files: Files) -> UploadResponse:
    response = UploadResponse(max_file_size=UploadedFile.get_max_file_size())

    for field, file in iter_leaves(files.all()):
        size = file.size if file.is_valid() else 0
        try:
            location = file.move(st.UPLOAD_DIR)
        except UploadError as ex:
            logger.warning("Upload rejected", icon=LogIcon.FORBIDDEN, field=field, kind=ex.kind)
            response.rejected.append(RejectedFile(field=field, name=file.client_original_name, kind=ex.kind, message=ex.message))
            continue
        except FileMoveError as ex:
            logger.error("Upload could not be stored", icon=LogIcon.ERROR, field=field, reason=ex.message)
            response.rejected.append(RejectedFile(field=field, name=file.client_original_name, message=ex.message))
            continue

        response.stored.append(
            StoredFile(
                field=field,
                name=file.client_original_name,
                mime_type=file.client_mime_type,
                size=size,
                location=str(location),
            )
        )

    return response


@router.post("/upload")
async def upload(files: Files) -> UploadResponse:
    """Store the submitted files and report which ones were rejected."""
    return store_files(files)
