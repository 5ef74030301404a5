"""Song upload, listing and delete endpoints."""
from typing import Any

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from songvault.api.deps import CoordinatorDep, require_ready
from songvault.core.exceptions import MissingAudioError, SongNotFoundError
from songvault.core.logging import get_logger
from songvault.core.models import (
    ErrorResponse,
    MediaPayload,
    MessageResponse,
    PartialDeleteResponse,
    Song,
    SongUploadResponse,
)

logger = get_logger(__name__)

router = APIRouter(dependencies=[Depends(require_ready)])

NO_SONGS_MESSAGE = "No songs found."
NO_SONGS_IN_CATEGORY_MESSAGE = "ไม่พบเพลงในหมวดหมู่นี้"
SONG_NOT_FOUND_MESSAGE = "เพลงไม่พบ"
SONG_DELETED_MESSAGE = "ลบเพลงสำเร็จทั้งในฐานข้อมูลและที่เก็บไฟล์"
DELETE_FAILED_MESSAGE = "เกิดข้อผิดพลาด"
SONG_DELETED_FILES_LEFT_MESSAGE = "ลบเพลงออกจากฐานข้อมูลแล้ว แต่ลบไฟล์บางส่วนในที่เก็บไฟล์ไม่สำเร็จ"


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _error(message: str, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"message": message, "error": getattr(exc, "message", str(exc))},
    )


def _songs(songs: list[Song], empty_message: str) -> JSONResponse:
    if not songs:
        return _message(404, empty_message)
    content: list[dict[str, Any]] = [
        song.model_dump(mode="json", by_alias=True) for song in songs
    ]
    return JSONResponse(status_code=200, content=content)


async def _read_payload(upload: UploadFile | None) -> MediaPayload | None:
    """Read a multipart file part into memory; empty parts count as absent."""
    if upload is None or not upload.filename:
        return None
    return MediaPayload(
        filename=upload.filename,
        content_type=upload.content_type or "application/octet-stream",
        data=await upload.read(),
    )


@router.post(
    "/add-song",
    response_model=SongUploadResponse,
    responses={400: {"model": MessageResponse}, 500: {"model": ErrorResponse}},
)
async def add_song(
    coordinator: CoordinatorDep,
    file: UploadFile | None = File(None),
    image: UploadFile | None = File(None),
    name: str | None = Form(None),
    artist: str | None = Form(None),
    category: str | None = Form(None),
) -> JSONResponse:
    """Upload a song's audio (and optional cover), then record its metadata."""
    try:
        result = await coordinator.upload_song(
            audio=await _read_payload(file),
            image=await _read_payload(image),
            name=name,
            artist=artist,
            category=category,
        )
    except MissingAudioError as e:
        return _message(400, e.message)
    except Exception as e:
        logger.exception("Error uploading song", error=str(e))
        return _error("Error uploading song", e)

    body = SongUploadResponse(
        message="Song uploaded successfully!",
        song_id=result.song_id,
        audio_url=result.audio_url,
        image_url=result.image_url,
    )
    return JSONResponse(status_code=200, content=body.model_dump(by_alias=True))


@router.get("", include_in_schema=False)
@router.get(
    "/",
    response_model=list[Song],
    responses={404: {"model": MessageResponse}, 500: {"model": ErrorResponse}},
)
async def list_songs(coordinator: CoordinatorDep) -> JSONResponse:
    """All songs, newest first."""
    try:
        songs = await coordinator.list_songs()
    except Exception as e:
        logger.exception("Error fetching songs", error=str(e))
        return _error("Error fetching songs", e)

    return _songs(songs, NO_SONGS_MESSAGE)


@router.get(
    "/category/{category}",
    response_model=list[Song],
    responses={404: {"model": MessageResponse}, 500: {"model": ErrorResponse}},
)
async def list_songs_by_category(category: str, coordinator: CoordinatorDep) -> JSONResponse:
    """Songs in one category, newest first. Category aliases are accepted."""
    try:
        songs = await coordinator.list_songs_by_category(category)
    except Exception as e:
        logger.exception("Error fetching songs by category", category=category, error=str(e))
        return _error("Error fetching songs by category", e)

    return _songs(songs, NO_SONGS_IN_CATEGORY_MESSAGE)


@router.get(
    "/{song_id}",
    response_model=Song,
    responses={404: {"model": MessageResponse}, 500: {"model": ErrorResponse}},
)
async def get_song(song_id: str, coordinator: CoordinatorDep) -> JSONResponse:
    try:
        song = await coordinator.get_song(song_id)
    except SongNotFoundError:
        return _message(404, SONG_NOT_FOUND_MESSAGE)
    except Exception as e:
        logger.exception("Error fetching song", song_id=song_id, error=str(e))
        return _error("Error fetching song", e)

    return JSONResponse(status_code=200, content=song.model_dump(mode="json", by_alias=True))


@router.delete(
    "/delete-song/{song_id}",
    response_model=MessageResponse | PartialDeleteResponse,
    responses={404: {"model": MessageResponse}, 500: {"model": ErrorResponse}},
)
async def delete_song(song_id: str, coordinator: CoordinatorDep) -> JSONResponse:
    """Remove a song's blobs and then its metadata document."""
    try:
        result = await coordinator.delete_song(song_id)
    except SongNotFoundError:
        return _message(404, SONG_NOT_FOUND_MESSAGE)
    except Exception as e:
        logger.exception("Error deleting song", song_id=song_id, error=str(e))
        return _error(DELETE_FAILED_MESSAGE, e)

    if result.failed_keys:
        body = PartialDeleteResponse(
            message=SONG_DELETED_FILES_LEFT_MESSAGE,
            failed_keys=result.failed_keys,
        )
        return JSONResponse(status_code=200, content=body.model_dump(by_alias=True))

    return _message(200, SONG_DELETED_MESSAGE)
