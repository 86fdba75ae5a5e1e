"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from photo_party.services.photos import (
    DEFAULT_MAX_PHOTOS_PER_USER,
    DEFAULT_MAX_UPLOAD_BYTES,
)

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    storage_backend: str = "file"
    upload_dir: Path = Path(".hidden_uploads")
    data_file: Path | None = None
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    max_photos_per_user: int = DEFAULT_MAX_PHOTOS_PER_USER
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 4000
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def resolved_data_file(self) -> Path:
        """Path of the JSON state document."""
        return self.data_file or self.upload_dir / "data.json"
