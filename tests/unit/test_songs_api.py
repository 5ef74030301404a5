"""Tests for the song HTTP endpoints."""
from fastapi.testclient import TestClient

from songvault.api.main import create_app
from songvault.core.config import BlobDeletePolicy, Settings
from songvault.core.exceptions import SongNotFoundError
from tests.conftest import BASE_URL
from tests.fakes import FakeMetadataStore, FakeObjectStore

AUDIO = b"ID3\x03\x00" + bytes(range(256)) * 4
IMAGE = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def upload(client: TestClient, with_image: bool = True, **fields: str):
    files = {"file": ("Song A.mp3", AUDIO, "audio/mpeg")}
    if with_image:
        files["image"] = ("cover.png", IMAGE, "image/png")
    return client.post("/songs/add-song", data=fields, files=files)


class TestAddSong:
    """Test cases for POST /songs/add-song."""

    def test_upload_scenario(self, client: TestClient) -> None:
        """Test the full upload contract against the local stores."""
        response = upload(client, name="Song A", artist="X", category="เปียโน")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Song uploaded successfully!"
        assert body["songId"]
        assert body["audioUrl"].startswith("http://testserver/storage/v1/object/public/songs/")
        assert body["imageUrl"].startswith("http://testserver/storage/v1/object/public/image/")

        song = client.get(f"/songs/{body['songId']}").json()
        assert song["name"] == "Song A"
        assert song["artist"] == "X"
        assert song["category"] == "ดนตรีเปียโน"

    def test_public_urls_serve_uploaded_bytes(self, client: TestClient) -> None:
        body = upload(client).json()

        assert client.get(body["audioUrl"]).content == AUDIO
        assert client.get(body["imageUrl"]).content == IMAGE

    def test_missing_audio_is_400(
        self,
        fake_client: TestClient,
        events: list,
    ) -> None:
        response = fake_client.post(
            "/songs/add-song",
            data={"name": "x"},
            files={"image": ("cover.png", IMAGE, "image/png")},
        )

        assert response.status_code == 400
        assert response.json() == {"message": "No audio file uploaded."}
        assert events == []

    def test_upload_defaults(self, fake_client: TestClient, fake_metadata_store: FakeMetadataStore) -> None:
        body = upload(fake_client, with_image=False).json()

        doc = fake_metadata_store.documents[body["songId"]]
        assert body["imageUrl"] is None
        assert doc["name"] == "Song A.mp3"
        assert doc["artist"] == "Unknown"
        assert doc["category"] == "Uncategorized"

    def test_upstream_failure_is_500(
        self,
        fake_client: TestClient,
        fake_object_store: FakeObjectStore,
        fake_metadata_store: FakeMetadataStore,
    ) -> None:
        fake_object_store.fail_upload.add("image")

        response = upload(fake_client)

        assert response.status_code == 500
        assert response.json() == {
            "message": "Error uploading song",
            "error": "upload to image refused",
        }
        assert fake_metadata_store.documents == {}


class TestListSongs:
    """Test cases for GET /songs/ and GET /songs/category/{category}."""

    def test_empty_listing_is_404(self, client: TestClient) -> None:
        response = client.get("/songs/")

        assert response.status_code == 404
        assert response.json() == {"message": "No songs found."}

    def test_listing_without_trailing_slash(self, client: TestClient) -> None:
        """Test that /songs answers directly instead of redirecting to /songs/."""
        song_id = upload(client).json()["songId"]

        response = client.get("/songs", follow_redirects=False)

        assert response.status_code == 200
        assert [s["id"] for s in response.json()] == [song_id]

    def test_listing_newest_first(self, client: TestClient) -> None:
        first = upload(client, name="first").json()["songId"]
        second = upload(client, name="second").json()["songId"]

        response = client.get("/songs/")

        assert response.status_code == 200
        songs = response.json()
        assert [s["id"] for s in songs] == [second, first]
        assert set(songs[0]) == {
            "id",
            "name",
            "artist",
            "category",
            "audioUrl",
            "imageUrl",
            "createdAt",
        }

    def test_category_alias_filter(self, client: TestClient) -> None:
        elderly = upload(client, category="เพลงสำหรับผู้สูงวัย").json()["songId"]
        upload(client, category="Pop")

        response = client.get("/songs/category/ผู้สูงวัย")

        assert response.status_code == 200
        assert [s["id"] for s in response.json()] == [elderly]

    def test_empty_category_is_404(self, client: TestClient) -> None:
        upload(client, category="Pop")

        response = client.get("/songs/category/Jazz")

        assert response.status_code == 404
        assert response.json() == {"message": "ไม่พบเพลงในหมวดหมู่นี้"}

    def test_query_failure_is_500(self, client: TestClient) -> None:
        async def broken(category=None):
            raise RuntimeError("connection reset")

        client.app.state.metadata_store.query = broken

        response = client.get("/songs/")

        assert response.status_code == 500
        assert response.json() == {"message": "Error fetching songs", "error": "connection reset"}

    def test_get_unknown_song_is_404(self, client: TestClient) -> None:
        response = client.get("/songs/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"message": "เพลงไม่พบ"}


class TestDeleteSong:
    """Test cases for DELETE /songs/delete-song/{song_id}."""

    def test_delete_scenario(self, client: TestClient) -> None:
        """Test that delete removes the record and both blobs."""
        body = upload(client, name="Song A", artist="X", category="เปียโน").json()

        response = client.delete(f"/songs/delete-song/{body['songId']}")

        assert response.status_code == 200
        assert "message" in response.json()
        assert client.get("/songs/").status_code == 404
        assert client.get(body["audioUrl"]).status_code == 404
        assert client.get(body["imageUrl"]).status_code == 404

    def test_delete_unknown_is_404(self, fake_client: TestClient, events: list) -> None:
        response = fake_client.delete("/songs/delete-song/unknown")

        assert response.status_code == 404
        assert response.json() == {"message": "เพลงไม่พบ"}
        assert not any(e[0] == "remove" for e in events)

    def test_blob_failure_under_abort_is_500(
        self,
        fake_client: TestClient,
        fake_object_store: FakeObjectStore,
        fake_metadata_store: FakeMetadataStore,
    ) -> None:
        song_id = upload(fake_client).json()["songId"]
        fake_object_store.fail_remove.add("songs")

        response = fake_client.delete(f"/songs/delete-song/{song_id}")

        assert response.status_code == 500
        assert response.json()["message"] == "เกิดข้อผิดพลาด"
        assert "remove from songs refused" in response.json()["error"]
        assert song_id in fake_metadata_store.documents

    def test_blob_failure_under_best_effort_reports_leftovers(
        self,
        test_settings: Settings,
        fake_object_store: FakeObjectStore,
        fake_metadata_store: FakeMetadataStore,
    ) -> None:
        """Test that a best-effort delete says which files stayed in storage."""
        settings = test_settings.model_copy(
            update={"blob_delete_policy": BlobDeletePolicy.BEST_EFFORT}
        )
        app = create_app(settings, fake_object_store, fake_metadata_store)  # type: ignore[arg-type]

        with TestClient(app, base_url=BASE_URL) as c:
            body = upload(c).json()
            fake_object_store.fail_remove.add("image")

            response = c.delete(f"/songs/delete-song/{body['songId']}")

        assert response.status_code == 200
        payload = response.json()
        assert payload["message"] != "ลบเพลงสำเร็จทั้งในฐานข้อมูลและที่เก็บไฟล์"
        assert len(payload["failedKeys"]) == 1
        assert body["imageUrl"].endswith(payload["failedKeys"][0])
        assert body["songId"] not in fake_metadata_store.documents


class TestHealth:
    """Test cases for the health endpoints and middleware."""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client: TestClient) -> None:
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["ready"] is True
        assert response.json()["checks"]["metadata_store"] is True

    def test_request_id_echoed(self, client: TestClient) -> None:
        response = client.get("/live", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_generated(self, client: TestClient) -> None:
        response = client.get("/songs/")

        request_id = response.headers["X-Request-ID"]
        assert len(request_id) == 32
        assert client.get("/songs/").headers["X-Request-ID"] != request_id


class TestErrorHandler:
    """Test cases for the application error handler."""

    def test_domain_error_body_is_readable(self, test_settings: Settings) -> None:
        app = create_app(test_settings)

        @app.get("/missing-song")
        async def missing_song() -> None:
            raise SongNotFoundError("abc123")

        with TestClient(app, base_url=BASE_URL) as c:
            response = c.get("/missing-song")

        assert response.status_code == 404
        assert response.json() == {
            "message": "Song not found: abc123",
            "details": {"song_id": "abc123"},
        }
