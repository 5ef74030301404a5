"""Supabase Storage object store over its REST API."""
from typing import Any

import httpx

from songvault.core.config import settings
from songvault.core.exceptions import BlobRemovalError, BlobUploadError, StorageError
from songvault.core.logging import get_logger
from songvault.storage.base import ObjectStore

logger = get_logger(__name__)


class SupabaseStorage(ObjectStore):
    """Object store backed by Supabase Storage.

    Talks to ``{supabase_url}/storage/v1`` with the service key. One
    ``httpx.AsyncClient`` is shared for the lifetime of the store.

    Example:
        storage = SupabaseStorage()

        await storage.upload("songs", key, audio_bytes, "audio/mpeg")
        url = storage.get_public_url("songs", key)

        await storage.close()
    """

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.public_base_url = (url or settings.supabase_url).rstrip("/")
        self.api_key = api_key or settings.supabase_key
        if not self.public_base_url or not self.api_key:
            raise StorageError("Supabase URL and key must be configured")

        self._client = httpx.AsyncClient(
            base_url=f"{self.public_base_url}/storage/v1",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "apikey": self.api_key,
            },
            timeout=timeout or settings.storage_timeout,
            transport=transport,
        )

    @staticmethod
    def _error_text(response: httpx.Response) -> str:
        """Pull the error message out of a Supabase error body."""
        try:
            body: Any = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or body)
        return str(body)

    async def upload(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str | None = None,
    ) -> None:
        """Upload a blob with upsert enabled."""
        try:
            response = await self._client.post(
                f"/object/{bucket}/{key}",
                content=data,
                headers={
                    "Content-Type": content_type or "application/octet-stream",
                    "x-upsert": "true",
                },
            )
        except httpx.HTTPError as e:
            logger.error("Supabase upload failed", bucket=bucket, key=key, error=str(e))
            raise BlobUploadError(
                f"Failed to upload {bucket}/{key}: {e}",
                details={"bucket": bucket, "key": key},
            )

        if response.is_error:
            message = self._error_text(response)
            logger.error(
                "Supabase rejected upload",
                bucket=bucket,
                key=key,
                status_code=response.status_code,
                error=message,
            )
            raise BlobUploadError(
                message,
                details={"bucket": bucket, "key": key, "status_code": response.status_code},
            )

        logger.debug("Blob uploaded", bucket=bucket, key=key, size=len(data))

    async def remove(self, bucket: str, key: str) -> None:
        """Remove a blob; Supabase reports success for absent keys."""
        try:
            response = await self._client.request(
                "DELETE",
                f"/object/{bucket}",
                json={"prefixes": [key]},
            )
        except httpx.HTTPError as e:
            logger.error("Supabase remove failed", bucket=bucket, key=key, error=str(e))
            raise BlobRemovalError(
                f"Failed to remove {bucket}/{key}: {e}",
                details={"bucket": bucket, "key": key},
            )

        if response.is_error:
            message = self._error_text(response)
            logger.error(
                "Supabase rejected remove",
                bucket=bucket,
                key=key,
                status_code=response.status_code,
                error=message,
            )
            raise BlobRemovalError(
                message,
                details={"bucket": bucket, "key": key, "status_code": response.status_code},
            )

        logger.debug("Blob removed", bucket=bucket, key=key)

    async def load(self, bucket: str, key: str) -> bytes:
        try:
            response = await self._client.get(f"/object/{bucket}/{key}")
        except httpx.HTTPError as e:
            raise StorageError(f"Failed to load {bucket}/{key}: {e}")

        if response.is_error:
            raise StorageError(
                self._error_text(response),
                details={"bucket": bucket, "key": key, "status_code": response.status_code},
            )
        return response.content

    async def exists(self, bucket: str, key: str) -> bool:
        try:
            response = await self._client.head(f"/object/{bucket}/{key}")
        except httpx.HTTPError as e:
            raise StorageError(f"Failed to stat {bucket}/{key}: {e}")

        # Missing objects come back as 400 or 404 depending on server version
        if response.status_code in (400, 404):
            return False
        if response.is_error:
            raise StorageError(
                self._error_text(response),
                details={"bucket": bucket, "key": key, "status_code": response.status_code},
            )
        return True

    async def close(self) -> None:
        await self._client.aclose()
