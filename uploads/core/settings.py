"""Unified settings for robyn-uploads."""

import importlib.metadata
import tempfile
import tomllib
from pathlib import Path
from typing import ClassVar, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


def read_pyproject(pyproject_path: Path) -> dict:
    """Read pyproject.toml into a dict, empty when the file is not shipped."""
    if not pyproject_path.is_file():
        return {}
    with pyproject_path.open("rb") as file_handle:
        return tomllib.load(file_handle)


def get_version(name: str) -> str:
    """Get version from installed package metadata."""
    try:
        return importlib.metadata.version(name)
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0"


class Settings(BaseSettings):
    """Unified settings for robyn-uploads service."""

    DEBUG: bool = True
    ENVIRONMENT: Literal["DEV", "PROD"] = "DEV"

    # ClassVar to prevent Pydantic from trying to load from env
    BASE_DIR: ClassVar[Path] = Path(__file__).parent.parent.parent
    PROJECT: ClassVar[dict] = read_pyproject(BASE_DIR / "pyproject.toml")
    API_NAME: ClassVar[str] = PROJECT.get("project", {}).get("name", "robyn-uploads")
    API_DESCRIPTION: ClassVar[str] = PROJECT.get("project", {}).get("description", "Upload normalization engine")
    API_VERSION: ClassVar[str] = get_version(API_NAME)

    # Server
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Upload limits, same grammar as php.ini size directives ("8M", "0x400", "+2g")
    POST_MAX_SIZE: str = "8M"
    UPLOAD_MAX_FILESIZE: str = "2M"
    MAX_FILE_UPLOADS: int = 20

    # Paths
    UPLOAD_DIR: Path = BASE_DIR / "data" / "uploads"
    UPLOAD_TMP_DIR: Path = Path(tempfile.gettempdir()) / "robyn-uploads"

    @property
    def api_url(self) -> str:
        return f"http://{self.API_HOST}:{self.API_PORT}"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()  # type: ignore
