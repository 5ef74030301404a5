"""Pytest configuration and fixtures."""
from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from songvault.api.main import create_app
from songvault.core.config import Settings
from songvault.core.models import MediaPayload
from songvault.storage.local import LocalStorage
from songvault.storage.metadata import MetadataStore
from tests.fakes import FakeMetadataStore, FakeObjectStore

BASE_URL = "http://testserver"


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Test settings with safe defaults."""
    return Settings(
        environment="development",
        debug=True,
        storage_backend="local",
        storage_path=tmp_path / "objects",
        public_base_url=BASE_URL,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'songs.db'}",
    )


@pytest.fixture
def events() -> list[tuple[Any, ...]]:
    """Shared call log for the fake stores."""
    return []


@pytest.fixture
def fake_object_store(events: list[tuple[Any, ...]]) -> FakeObjectStore:
    return FakeObjectStore(events)


@pytest.fixture
def fake_metadata_store(events: list[tuple[Any, ...]]) -> FakeMetadataStore:
    return FakeMetadataStore(events)


@pytest.fixture
def local_storage(test_settings: Settings) -> LocalStorage:
    return LocalStorage(test_settings.storage_path, test_settings.public_base_url)


@pytest.fixture
async def metadata_store(test_settings: Settings) -> AsyncGenerator[MetadataStore, None]:
    """SQLite-backed metadata store in a temp directory."""
    store = MetadataStore(test_settings.database_url)
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def client(test_settings: Settings) -> Generator[TestClient, None, None]:
    """Client for an app running on the local object store and SQLite."""
    app = create_app(test_settings)
    with TestClient(app, base_url=BASE_URL) as c:
        yield c


@pytest.fixture
def fake_client(
    test_settings: Settings,
    fake_object_store: FakeObjectStore,
    fake_metadata_store: FakeMetadataStore,
) -> Generator[TestClient, None, None]:
    """Client for an app wired to the in-memory fakes."""
    app = create_app(test_settings, fake_object_store, fake_metadata_store)  # type: ignore[arg-type]
    with TestClient(app, base_url=BASE_URL) as c:
        yield c


@pytest.fixture
def audio_payload() -> MediaPayload:
    return MediaPayload("Café del Mar.mp3", "audio/mpeg", b"ID3\x03\x00fake-audio-bytes")


@pytest.fixture
def image_payload() -> MediaPayload:
    return MediaPayload("cover art.png", "image/png", b"\x89PNG\r\n\x1a\nfake-image")
