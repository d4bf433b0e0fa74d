"""Movie model storing the merged record of a catalog film."""

from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Float, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from kinolink.models.base import Base, TimestampMixin


class Movie(Base, TimestampMixin):
    """
    Merged movie model.

    One row per catalog film, keyed by the catalog id. External ids are
    indexed but not unique: a catalog may list the same film twice, for
    example a restored version next to the original release.
    """

    __tablename__ = "movies"

    source_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    imdb_id: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    tmdb_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    # Catalog text
    title: Mapped[str | None] = mapped_column(String(500), nullable=True, index=True)
    original_title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    year: Mapped[str | None] = mapped_column(String(20), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    enriched_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    origin: Mapped[str | None] = mapped_column(String(300), nullable=True)
    origin_countries: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=list)
    origin_country_codes: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=list)
    genres: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=list)
    directors: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=list)
    cast: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=list)
    localized_titles: Mapped[dict[str, str]] = mapped_column(JSONB, nullable=False, default=dict)

    # Media
    poster_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    source_poster_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    backdrop_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    trailer_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    # Statistics
    vote_average: Mapped[float | None] = mapped_column(Float, nullable=True)
    vote_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    popularity: Mapped[float | None] = mapped_column(Float, nullable=True)
    imdb_rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    imdb_rating_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    original_language: Mapped[str | None] = mapped_column(String(10), nullable=True)
    adult: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    # Release / storage metadata
    release_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    stored_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Movie(source_id={self.source_id}, title={self.title!r}, imdb_id={self.imdb_id!r})>"
