"""Health check endpoint."""

from pydantic import BaseModel

from uploads.core.logger import LogIcon, logger
from uploads.core.router import Router
from uploads.core.settings import settings as st
from uploads.files.uploaded import UploadedFile

router = Router(__file__, prefix="/")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    service: str
    version: str
    max_file_size: int


@router.get("/health")
async def health_check() -> HealthResponse:
    logger.info("Health check requested", icon=LogIcon.HEALTHCHECK)
    return HealthResponse(
        status="healthy",
        service=st.API_NAME,
        version=st.API_VERSION,
        max_file_size=UploadedFile.get_max_file_size(),
    )
