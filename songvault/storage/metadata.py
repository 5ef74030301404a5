"""Song metadata storage using SQLAlchemy (SQLite/PostgreSQL)."""
from datetime import datetime, timezone
from typing import Any, Callable
from uuid import uuid4

from sqlalchemy import DateTime, String, Text, delete, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from songvault.core.config import settings
from songvault.core.exceptions import MetadataStoreError
from songvault.core.logging import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


class SongModel(Base):
    """Song record database model."""

    __tablename__ = "songs"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(Text)
    artist: Mapped[str] = mapped_column(String(255))
    category: Mapped[str] = mapped_column(String(255), index=True)
    audio_url: Mapped[str] = mapped_column(Text)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, index=True)

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "artist": self.artist,
            "category": self.category,
            "audioUrl": self.audio_url,
            "imageUrl": self.image_url,
            "createdAt": self.created_at,
        }


class MetadataStore:
    """Async store for song documents.

    The store assigns ``id`` and ``createdAt`` on insert. Every failure
    from the database surfaces as MetadataStoreError.

    Example:
        store = MetadataStore()
        await store.initialize()

        song_id = await store.insert({"name": "Song A", ...})
        song = await store.get(song_id)
    """

    def __init__(
        self,
        database_url: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.database_url = database_url or settings.database_url
        self.engine = create_async_engine(self.database_url, echo=False)
        self.async_session = sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self.clock = clock or _utcnow

    async def initialize(self) -> None:
        """Create database tables."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise MetadataStoreError(f"Failed to initialize metadata store: {e}")

    async def insert(self, fields: dict[str, Any]) -> str:
        """Insert a song document and return its new id."""
        song_id = uuid4().hex
        try:
            async with self.async_session() as session:
                session.add(
                    SongModel(
                        id=song_id,
                        name=fields["name"],
                        artist=fields["artist"],
                        category=fields["category"],
                        audio_url=fields["audioUrl"],
                        image_url=fields.get("imageUrl"),
                        created_at=self.clock(),
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to insert song", error=str(e))
            raise MetadataStoreError(f"Failed to insert song: {e}")

        return song_id

    async def get(self, song_id: str) -> dict[str, Any] | None:
        """Get a song document by id."""
        try:
            async with self.async_session() as session:
                song = await session.get(SongModel, song_id)
        except SQLAlchemyError as e:
            logger.error("Failed to fetch song", song_id=song_id, error=str(e))
            raise MetadataStoreError(f"Failed to fetch song {song_id}: {e}")

        return song.to_document() if song else None

    async def query(self, category: str | None = None) -> list[dict[str, Any]]:
        """List song documents, newest first, optionally filtered by category."""
        stmt = select(SongModel)
        if category is not None:
            stmt = stmt.where(SongModel.category == category)
        stmt = stmt.order_by(SongModel.created_at.desc())

        try:
            async with self.async_session() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Failed to query songs", category=category, error=str(e))
            raise MetadataStoreError(f"Failed to query songs: {e}")

        return [row.to_document() for row in rows]

    async def delete(self, song_id: str) -> bool:
        """Delete a song document. Returns False if it was already gone."""
        try:
            async with self.async_session() as session:
                result = await session.execute(
                    delete(SongModel).where(SongModel.id == song_id)
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to delete song", song_id=song_id, error=str(e))
            raise MetadataStoreError(f"Failed to delete song {song_id}: {e}")

        return result.rowcount > 0

    async def ping(self) -> bool:
        """Check the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            return False
        return True

    async def close(self) -> None:
        """Close database connection."""
        await self.engine.dispose()
