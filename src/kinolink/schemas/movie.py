"""Pydantic schemas for movie records flowing through resolution."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class SourceRecord(BaseModel):
    """A film entry as scraped from the regional catalog."""

    source_id: int
    title: str | None = None
    original_title: str | None = None
    year: str | None = None  # Free text, e.g. "1970" or "1969–1970"
    directors: list[str] = Field(default_factory=list)
    cast: list[str] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    localized_titles: dict[str, str] = Field(default_factory=dict)
    origin: str | None = None  # e.g. "Československo / Francie"
    description: str | None = None
    poster_url: str | None = None
    imdb_id: str | None = None  # Taken from an outbound link on the catalog page
    low_confidence: bool = False  # e.g. student films; suppresses enrichment


class CandidateMatch(BaseModel):
    """An unvalidated hit returned by a metadata service search."""

    external_id: str
    title: str = ""
    year: str | None = None
    raw_text: str | None = None  # Listing snippet as shown in search results
    title_type: str | None = None


class EnrichedRecord(BaseModel):
    """Full metadata fetched from one metadata service for a single id."""

    external_id: str
    title: str | None = None
    original_title: str | None = None
    release_date: date | None = None
    year: str | None = None
    overview: str | None = None
    poster_url: str | None = None
    backdrop_url: str | None = None
    vote_average: float | None = None
    vote_count: int | None = None
    popularity: float | None = None
    original_language: str | None = None
    adult: bool | None = None
    trailer_url: str | None = None
    directors: list[str] = Field(default_factory=list)
    title_type: str | None = None

    @property
    def detail_year(self) -> str | None:
        """Year reported by the detail page, preferring the release date."""
        if self.release_date:
            return str(self.release_date.year)
        return self.year


class MergedRecord(BaseModel):
    """Canonical record persisted per catalog film."""

    model_config = ConfigDict(from_attributes=True)

    source_id: int
    imdb_id: str | None = None
    tmdb_id: int | None = None

    # Source-authored text
    title: str | None = None
    original_title: str | None = None
    year: str | None = None
    description: str | None = None
    enriched_description: str | None = None
    origin: str | None = None
    origin_countries: list[str] = Field(default_factory=list)
    origin_country_codes: list[str] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    directors: list[str] = Field(default_factory=list)
    cast: list[str] = Field(default_factory=list)
    localized_titles: dict[str, str] = Field(default_factory=dict)

    # Media
    poster_url: str | None = None
    source_poster_url: str | None = None
    backdrop_url: str | None = None
    trailer_url: str | None = None

    # Statistics
    vote_average: float | None = None
    vote_count: int | None = None
    popularity: float | None = None
    imdb_rating: float | None = None
    imdb_rating_count: int | None = None
    original_language: str | None = None
    adult: bool | None = None

    # Release / storage metadata
    release_date: date | None = None
    stored_at: datetime | None = None

    @property
    def imdb_url(self) -> str | None:
        return f"https://www.imdb.com/title/{self.imdb_id}/" if self.imdb_id else None

    @property
    def tmdb_url(self) -> str | None:
        return f"https://www.themoviedb.org/movie/{self.tmdb_id}" if self.tmdb_id else None
