"""Application configuration via Pydantic Settings."""
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class BlobDeletePolicy(str, Enum):
    """What a delete does when removing a blob from the object store fails."""

    ABORT = "abort"
    BEST_EFFORT = "best_effort"


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "SongVault"
    app_version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False

    # API
    api_host: str = "0.0.0.0"
    api_port: int = Field(default=3000, validation_alias=AliasChoices("api_port", "port"))
    songs_prefix: str = "/songs"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Object storage
    storage_backend: Literal["local", "supabase"] = "local"
    storage_path: Path = Field(default=Path("./data/objects"))
    public_base_url: str = "http://localhost:3000"
    supabase_url: str = ""
    supabase_key: str = ""
    storage_timeout: float = 30.0
    audio_bucket: str = "songs"
    image_bucket: str = "image"

    # Metadata store
    database_url: str = "sqlite+aiosqlite:///./data/songvault.db"

    # Coordinator behaviour
    blob_delete_policy: BlobDeletePolicy = BlobDeletePolicy.ABORT
    normalize_category_on_write: bool = True

    @field_validator("storage_path", mode="before")
    @classmethod
    def ensure_path(cls, v: str | Path) -> Path:
        """Convert string to Path and ensure it exists."""
        path = Path(v)
        path.mkdir(parents=True, exist_ok=True)
        return path

    @field_validator("public_base_url", "supabase_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
