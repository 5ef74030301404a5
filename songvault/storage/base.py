"""Abstract object store interface."""
from abc import ABC, abstractmethod

from songvault.storage.keys import key_from_public_url, public_url_prefix


class ObjectStore(ABC):
    """Abstract base class for bucket-based blob storage.

    Provides a consistent interface for the local filesystem and
    hosted storage. Public URLs have the form
    ``{public_base_url}/storage/v1/object/public/{bucket}/{key}``.
    """

    public_base_url: str

    @abstractmethod
    async def upload(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str | None = None,
    ) -> None:
        """Store a blob, overwriting any blob already under the key.

        Args:
            bucket: Bucket name
            key: Storage key within the bucket
            data: Blob bytes
            content_type: MIME type

        Raises:
            BlobUploadError: If the blob could not be stored
        """
        ...

    @abstractmethod
    async def remove(self, bucket: str, key: str) -> None:
        """Remove a blob. Removing a key that does not exist succeeds.

        Raises:
            BlobRemovalError: If the store rejected the removal
        """
        ...

    @abstractmethod
    async def load(self, bucket: str, key: str) -> bytes:
        """Load a blob's bytes.

        Raises:
            StorageError: If the blob is missing or unreadable
        """
        ...

    @abstractmethod
    async def exists(self, bucket: str, key: str) -> bool:
        """Check whether a blob exists."""
        ...

    def get_public_url(self, bucket: str, key: str) -> str:
        """Public URL for a blob, derived from bucket and key alone."""
        return f"{self.url_prefix(bucket)}{key}"

    def url_prefix(self, bucket: str) -> str:
        return public_url_prefix(self.public_base_url, bucket)

    def key_from_url(self, bucket: str, url: str) -> str | None:
        """Recover the storage key from one of this store's public URLs."""
        return key_from_public_url(url, bucket)

    async def close(self) -> None:
        """Release network resources held by the store."""
        return None
