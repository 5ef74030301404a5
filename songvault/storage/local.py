"""Local filesystem object store."""
from pathlib import Path

import aiofiles

from songvault.core.config import settings
from songvault.core.exceptions import BlobRemovalError, BlobUploadError, StorageError
from songvault.core.logging import get_logger
from songvault.storage.base import ObjectStore

logger = get_logger(__name__)


class LocalStorage(ObjectStore):
    """Local filesystem object store.

    Each bucket is a directory under the base path. The API serves the
    base path at ``/storage/v1/object/public`` so public URLs resolve.

    Example:
        storage = LocalStorage()

        await storage.upload("songs", "1700000000000_track.mp3", audio_bytes)
        url = storage.get_public_url("songs", "1700000000000_track.mp3")
    """

    def __init__(
        self,
        base_path: Path | None = None,
        public_base_url: str | None = None,
    ) -> None:
        self.base_path = base_path or settings.storage_path
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.public_base_url = (public_base_url or settings.public_base_url).rstrip("/")

    def _resolve_path(self, bucket: str, key: str) -> Path:
        """Resolve bucket and key to an absolute path."""
        # Prevent path traversal
        clean_bucket = bucket.replace("..", "").strip("/")
        clean_key = key.replace("..", "").lstrip("/")
        return self.base_path / clean_bucket / clean_key

    async def upload(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str | None = None,
    ) -> None:
        """Write a blob to disk, replacing any existing file."""
        path = self._resolve_path(bucket, key)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            logger.error("Failed to save blob", bucket=bucket, key=key, error=str(e))
            raise BlobUploadError(
                f"Failed to upload {bucket}/{key}: {e}",
                details={"bucket": bucket, "key": key},
            )

        logger.debug("Blob saved", path=str(path), content_type=content_type)

    async def remove(self, bucket: str, key: str) -> None:
        """Delete a blob from disk."""
        path = self._resolve_path(bucket, key)

        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Failed to delete blob", bucket=bucket, key=key, error=str(e))
            raise BlobRemovalError(
                f"Failed to remove {bucket}/{key}: {e}",
                details={"bucket": bucket, "key": key},
            )

        logger.debug("Blob deleted", path=str(path))

    async def load(self, bucket: str, key: str) -> bytes:
        """Read a blob from disk."""
        path = self._resolve_path(bucket, key)

        if not path.is_file():
            raise StorageError(f"Blob not found: {bucket}/{key}")

        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except OSError as e:
            logger.error("Failed to load blob", bucket=bucket, key=key, error=str(e))
            raise StorageError(f"Failed to load {bucket}/{key}: {e}")

    async def exists(self, bucket: str, key: str) -> bool:
        return self._resolve_path(bucket, key).is_file()
