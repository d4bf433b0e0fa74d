"""Database engine and session factory for the movie store."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from kinolink.config import settings


def create_engine(database_url: str | None = None, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine.

    Args:
        database_url: SQLAlchemy URL (uses settings if not provided)
        echo: Log every SQL statement
    """
    return create_async_engine(
        database_url or settings.database_url,
        echo=echo,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine | None = None) -> async_sessionmaker[AsyncSession]:
    """
    Create a session factory bound to an engine.

    Loaded rows stay readable after commit (expire_on_commit is off).
    """
    return async_sessionmaker(
        engine or create_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
