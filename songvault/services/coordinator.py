"""Dual-store coordinator for song records.

Song bytes live in an object store and song metadata in a metadata store.
There is no transaction spanning the two, so every operation runs its
outbound calls in a fixed order and leaves partial results in place when a
step fails:

- upload: audio blob -> image blob -> metadata document
- delete: metadata read -> audio removal -> image removal -> document delete

Nothing is retried or rolled back. Blobs stranded by a failed upload are
logged with their bucket and key so they can be cleaned up by hand.
"""
import time
from typing import Any, Callable

from songvault.core.categories import DEFAULT_CATEGORY, normalize_category
from songvault.core.config import BlobDeletePolicy, Settings
from songvault.core.exceptions import (
    BlobRemovalError,
    MissingAudioError,
    SongNotFoundError,
    UpstreamError,
)
from songvault.core.logging import get_logger
from songvault.core.models import DeleteResult, MediaPayload, Song, UploadResult
from songvault.storage.base import ObjectStore
from songvault.storage.keys import build_storage_key
from songvault.storage.metadata import MetadataStore

logger = get_logger(__name__)

DEFAULT_ARTIST = "Unknown"


class SongCoordinator:
    """Keeps the object store and metadata store in step for song records.

    Example:
        coordinator = SongCoordinator(LocalStorage(), MetadataStore())

        result = await coordinator.upload_song(
            MediaPayload("track.mp3", "audio/mpeg", audio_bytes),
            artist="X",
        )
        await coordinator.delete_song(result.song_id)
    """

    def __init__(
        self,
        object_store: ObjectStore,
        metadata_store: MetadataStore,
        audio_bucket: str = "songs",
        image_bucket: str = "image",
        blob_delete_policy: BlobDeletePolicy = BlobDeletePolicy.ABORT,
        normalize_category_on_write: bool = True,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            object_store: Blob storage for audio and cover images
            metadata_store: Song document storage
            audio_bucket: Bucket receiving audio blobs
            image_bucket: Bucket receiving cover images
            blob_delete_policy: Whether a failed blob removal stops a delete
            normalize_category_on_write: Apply category aliases on upload
            clock: Seconds-since-epoch source used for storage keys
        """
        self.object_store = object_store
        self.metadata_store = metadata_store
        self.audio_bucket = audio_bucket
        self.image_bucket = image_bucket
        self.blob_delete_policy = BlobDeletePolicy(blob_delete_policy)
        self.normalize_category_on_write = normalize_category_on_write
        self.clock = clock or time.time

    @classmethod
    def from_settings(
        cls,
        object_store: ObjectStore,
        metadata_store: MetadataStore,
        settings: Settings,
    ) -> "SongCoordinator":
        return cls(
            object_store,
            metadata_store,
            audio_bucket=settings.audio_bucket,
            image_bucket=settings.image_bucket,
            blob_delete_policy=settings.blob_delete_policy,
            normalize_category_on_write=settings.normalize_category_on_write,
        )

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    async def _store_blob(self, bucket: str, payload: MediaPayload) -> tuple[str, str]:
        """Upload one payload under a fresh key and return (key, public URL)."""
        key = build_storage_key(payload.filename, self._now_ms())
        await self.object_store.upload(bucket, key, payload.data, payload.content_type)
        return key, self.object_store.get_public_url(bucket, key)

    async def upload_song(
        self,
        audio: MediaPayload | None,
        image: MediaPayload | None = None,
        name: str | None = None,
        artist: str | None = None,
        category: str | None = None,
    ) -> UploadResult:
        """Store a song's blobs, then its metadata document.

        Raises:
            MissingAudioError: No audio payload; nothing was called
            BlobUploadError: A blob upload failed; later steps were skipped
            MetadataStoreError: The document insert failed after the blobs
                were stored
        """
        if audio is None:
            raise MissingAudioError()

        stored: list[tuple[str, str]] = []
        try:
            audio_key, audio_url = await self._store_blob(self.audio_bucket, audio)
            stored.append((self.audio_bucket, audio_key))

            image_url: str | None = None
            if image is not None:
                image_key, image_url = await self._store_blob(self.image_bucket, image)
                stored.append((self.image_bucket, image_key))

            category = category or DEFAULT_CATEGORY
            if self.normalize_category_on_write:
                category = normalize_category(category)

            song_id = await self.metadata_store.insert(
                {
                    "name": name or audio.filename,
                    "artist": artist or DEFAULT_ARTIST,
                    "category": category,
                    "audioUrl": audio_url,
                    "imageUrl": image_url,
                }
            )
        except UpstreamError as e:
            if stored:
                logger.error(
                    "Upload failed after storing blobs; blobs are orphaned",
                    orphaned=[f"{bucket}/{key}" for bucket, key in stored],
                    error=e.message,
                )
            raise

        logger.info(
            "Song uploaded",
            song_id=song_id,
            audio_key=audio_key,
            has_image=image is not None,
        )
        return UploadResult(song_id=song_id, audio_url=audio_url, image_url=image_url)

    async def list_songs(self) -> list[Song]:
        """All songs, newest first. An empty list means there are none."""
        documents = await self.metadata_store.query()
        return [Song.model_validate(doc) for doc in documents]

    async def list_songs_by_category(self, category: str) -> list[Song]:
        """Songs in a category (aliases resolved), newest first."""
        documents = await self.metadata_store.query(category=normalize_category(category))
        return [Song.model_validate(doc) for doc in documents]

    async def get_song(self, song_id: str) -> Song:
        document = await self.metadata_store.get(song_id)
        if document is None:
            raise SongNotFoundError(song_id)
        return Song.model_validate(document)

    async def _remove_blob(self, bucket: str, url: str) -> str:
        """Remove the blob behind a public URL and return its key."""
        key = self.object_store.key_from_url(bucket, url)
        if key is None:
            raise BlobRemovalError(
                f"URL is not in bucket '{bucket}': {url}",
                details={"bucket": bucket, "url": url},
            )
        await self.object_store.remove(bucket, key)
        return key

    async def delete_song(self, song_id: str) -> DeleteResult:
        """Remove a song's blobs, then its metadata document.

        Both blob removals are always attempted. Under the abort policy a
        failed removal raises BlobRemovalError once both attempts are done
        and the document is kept; under best-effort the failure is logged
        and the document is deleted anyway.

        Raises:
            SongNotFoundError: No such song; nothing else was called
            BlobRemovalError: A blob removal failed (abort policy only)
            MetadataStoreError: Reading or deleting the document failed
        """
        document = await self.metadata_store.get(song_id)
        if document is None:
            raise SongNotFoundError(song_id)

        result = DeleteResult(song_id=song_id)
        errors: list[str] = []
        targets = [
            (self.audio_bucket, document.get("audioUrl")),
            (self.image_bucket, document.get("imageUrl")),
        ]
        for bucket, url in targets:
            if not url:
                continue
            try:
                key = await self._remove_blob(bucket, url)
            except BlobRemovalError as e:
                logger.error(
                    "Blob removal failed",
                    song_id=song_id,
                    bucket=bucket,
                    url=url,
                    error=e.message,
                )
                result.failed_keys.append(e.details.get("key") or url)
                errors.append(e.message)
            else:
                result.removed_keys.append(key)

        if errors and self.blob_delete_policy == BlobDeletePolicy.ABORT:
            details: dict[str, Any] = {
                "song_id": song_id,
                "removed": result.removed_keys,
                "failed": result.failed_keys,
            }
            raise BlobRemovalError("; ".join(errors), details=details)

        await self.metadata_store.delete(song_id)

        logger.info(
            "Song deleted",
            song_id=song_id,
            removed=result.removed_keys,
            failed=result.failed_keys,
        )
        return result
