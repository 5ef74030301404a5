"""Domain exceptions for SongVault."""
from typing import Any


class SongVaultError(Exception):
    """Base exception for all SongVault errors."""

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# Validation errors
class SongValidationError(SongVaultError):
    """Request is missing or carries invalid input."""

    status_code = 400


class MissingAudioError(SongValidationError):
    """Upload request carries no audio file."""

    def __init__(self) -> None:
        super().__init__("No audio file uploaded.")


# Lookup errors
class SongNotFoundError(SongVaultError):
    """No song record with the given id."""

    status_code = 404

    def __init__(self, song_id: str) -> None:
        super().__init__(f"Song not found: {song_id}", details={"song_id": song_id})
        self.song_id = song_id


# Upstream errors
class UpstreamError(SongVaultError):
    """A call to the object store or metadata store failed."""

    pass


class StorageError(UpstreamError):
    """Error in object storage operations."""

    pass


class BlobUploadError(StorageError):
    """Uploading a blob to a bucket failed."""

    pass


class BlobRemovalError(StorageError):
    """Removing one or more blobs from their buckets failed."""

    pass


class MetadataStoreError(UpstreamError):
    """Error reading or writing song documents."""

    pass
