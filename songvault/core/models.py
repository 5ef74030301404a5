"""Domain models for SongVault."""
from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


@dataclass
class MediaPayload:
    """An uploaded file held in memory."""

    filename: str
    content_type: str
    data: bytes


@dataclass
class UploadResult:
    """Outcome of a successful song upload."""

    song_id: str
    audio_url: str
    image_url: str | None = None


@dataclass
class DeleteResult:
    """Outcome of a song delete.

    failed_keys is only ever non-empty under the best-effort blob policy;
    the abort policy raises instead.
    """

    song_id: str
    removed_keys: list[str] = field(default_factory=list)
    failed_keys: list[str] = field(default_factory=list)


# ============ Request/Response Models ============


class Song(BaseModel):
    """A song record as stored in the metadata store."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    artist: str
    category: str
    audio_url: str = Field(alias="audioUrl")
    image_url: str | None = Field(default=None, alias="imageUrl")
    created_at: datetime = Field(alias="createdAt")


class SongUploadResponse(BaseModel):
    """Response after a song upload."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    song_id: str = Field(alias="songId")
    audio_url: str = Field(alias="audioUrl")
    image_url: str | None = Field(default=None, alias="imageUrl")


class MessageResponse(BaseModel):
    """Plain message body used for not-found and validation responses."""

    message: str


class PartialDeleteResponse(BaseModel):
    """Delete went through but some blobs are still in storage."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    failed_keys: list[str] = Field(alias="failedKeys")


class ErrorResponse(BaseModel):
    """Body returned when an upstream call fails."""

    message: str
    error: str
