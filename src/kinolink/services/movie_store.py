"""Persistent store for merged movie records."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kinolink.database import create_session_factory
from kinolink.errors import StoreError
from kinolink.models.movie import Movie
from kinolink.schemas.movie import MergedRecord

logger = logging.getLogger(__name__)


class MovieStore:
    """
    Reads and upserts merged records keyed by catalog id.

    Each call uses its own session, so concurrent records never share one.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        """
        Initialize store.

        Args:
            session_factory: Session factory (connects to settings.database_url if not provided)
        """
        self.session_factory = session_factory or create_session_factory()

    async def get(self, source_id: int) -> MergedRecord | None:
        """Return the stored record for a catalog film, or None."""
        try:
            async with self.session_factory() as db:
                movie = await db.get(Movie, source_id)
                if movie is None:
                    return None
                return MergedRecord.model_validate(movie)
        except SQLAlchemyError as e:
            raise StoreError(f"Could not read movie {source_id}: {e}") from e

    async def upsert(self, record: MergedRecord) -> None:
        """Insert the record, or overwrite the stored row with the same catalog id."""
        values = record.model_dump(exclude={"source_id"})

        async with self.session_factory() as db:
            try:
                movie = await db.get(Movie, record.source_id)
                if movie is None:
                    db.add(Movie(source_id=record.source_id, **values))
                    logger.debug(f"Inserting movie {record.source_id}")
                else:
                    for field, value in values.items():
                        setattr(movie, field, value)
                    logger.debug(f"Updating movie {record.source_id}")
                await db.commit()
            except SQLAlchemyError as e:
                await db.rollback()
                raise StoreError(f"Could not store movie {record.source_id}: {e}") from e
