"""Storage module - object store and metadata store abstractions."""
from songvault.core.config import Settings
from songvault.core.exceptions import StorageError
from songvault.storage.base import ObjectStore
from songvault.storage.local import LocalStorage
from songvault.storage.metadata import MetadataStore
from songvault.storage.supabase import SupabaseStorage

__all__ = [
    "ObjectStore",
    "LocalStorage",
    "SupabaseStorage",
    "MetadataStore",
    "create_object_store",
]


def create_object_store(settings: Settings) -> ObjectStore:
    """Create the object store selected by settings.storage_backend."""
    if settings.storage_backend == "local":
        return LocalStorage(settings.storage_path, settings.public_base_url)
    elif settings.storage_backend == "supabase":
        return SupabaseStorage(
            settings.supabase_url,
            settings.supabase_key,
            settings.storage_timeout,
        )
    else:
        raise StorageError(f"Unknown storage backend: {settings.storage_backend}")
