"""Response models for the upload endpoints."""

from pydantic import BaseModel, Field

from uploads.files.errors import UploadErrorKind


class StoredFile(BaseModel):
    """A file moved out of the staging area."""

    field: str
    name: str
    mime_type: str
    size: int
    location: str


class RejectedFile(BaseModel):
    """A submitted file that could not be stored."""

    field: str
    name: str
    kind: UploadErrorKind | None = None
    message: str


class UploadResponse(BaseModel):
    """Outcome of one upload request."""

    stored: list[StoredFile] = Field(default_factory=list)
    rejected: list[RejectedFile] = Field(default_factory=list)
    max_file_size: int
