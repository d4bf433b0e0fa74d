"""Fuse a catalog record with IMDb and TMDb metadata into one canonical record."""

import logging
from datetime import datetime
from typing import Any

from kinolink.schemas.movie import EnrichedRecord, MergedRecord, SourceRecord
from kinolink.utils.country_codes import country_codes
from kinolink.utils.text import split_origin

logger = logging.getLogger(__name__)

# Never back-filled: the key, and the timestamp of this merge
_NOT_BACKFILLED = {"source_id", "stored_at"}


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def _first(*values: Any) -> Any:
    """First non-empty value, or None."""
    for value in values:
        if not _is_empty(value):
            return value
    return None


def _tmdb_values(previous: MergedRecord | None, tmdb: EnrichedRecord | None) -> dict[str, Any]:
    """
    TMDb-sourced values of the previous record, used when TMDb was not fetched.

    They rank above the catalog and IMDb fallbacks, so a cycle without TMDb
    data keeps the TMDb poster, overview and trailer instead of overwriting
    them. A previous poster that was the catalog fallback is not carried.
    """
    if tmdb is not None or previous is None or previous.tmdb_id is None:
        return {}

    values = {
        "enriched_description": previous.enriched_description,
        "trailer_url": previous.trailer_url,
        "original_language": previous.original_language,
        "release_date": previous.release_date,
    }
    if previous.poster_url != previous.source_poster_url:
        values["poster_url"] = previous.poster_url
    return values


class MetadataMerger:
    """
    Merges catalog, IMDb and TMDb data.

    Precedence:
    - Identity: the catalog id and both confirmed external ids, verbatim
    - Text (titles, synopsis, genres, people, origin): catalog first; the
      enriched synopsis is kept in its own field, never dropped
    - Media and statistics: TMDb first; the poster falls back to the
      catalog poster, which is always kept as source_poster_url
    - When TMDb was not fetched, the previous record's TMDb values rank
      just below fresh TMDb data, above the catalog and IMDb fallbacks
    - Anything still empty is back-filled from the previous stored record,
      so a partial fetch never erases known data
    """

    def merge(
        self,
        source: SourceRecord,
        imdb: EnrichedRecord | None = None,
        tmdb: EnrichedRecord | None = None,
        previous: MergedRecord | None = None,
        *,
        imdb_id: str | None = None,
        tmdb_id: int | None = None,
        stored_at: datetime | None = None,
    ) -> MergedRecord:
        """
        Merge one film.

        Pure: the same arguments always produce an equal record.

        Args:
            source: Catalog record
            imdb: IMDb metadata, if resolved and fetched
            tmdb: TMDb metadata, if resolved and fetched
            previous: Record stored on the previous cycle
            imdb_id: Confirmed IMDb id (defaults to the IMDb record's id)
            tmdb_id: Confirmed TMDb id (defaults to the TMDb record's id)
            stored_at: Timestamp of this merge

        Returns:
            Merged record
        """
        if previous is not None and previous.source_id != source.source_id:
            raise ValueError(
                f"Previous record {previous.source_id} does not belong to source {source.source_id}"
            )

        if imdb_id is None and imdb is not None:
            imdb_id = imdb.external_id
        if tmdb_id is None and tmdb is not None:
            tmdb_id = int(tmdb.external_id)

        carried = _tmdb_values(previous, tmdb)
        origin_countries = split_origin(source.origin)

        merged = MergedRecord(
            source_id=source.source_id,
            imdb_id=imdb_id,
            tmdb_id=tmdb_id,
            title=_first(source.title, tmdb and tmdb.title, imdb and imdb.title),
            original_title=_first(
                source.original_title,
                tmdb and tmdb.original_title,
                imdb and imdb.original_title,
            ),
            year=_first(source.year, tmdb and tmdb.detail_year, imdb and imdb.detail_year),
            description=_first(source.description),
            enriched_description=_first(
                tmdb and tmdb.overview,
                carried.get("enriched_description"),
                imdb and imdb.overview,
            ),
            origin=_first(source.origin),
            origin_countries=origin_countries,
            origin_country_codes=country_codes(origin_countries),
            genres=list(source.genres),
            directors=list(
                _first(source.directors, tmdb and tmdb.directors, imdb and imdb.directors) or []
            ),
            cast=list(source.cast),
            localized_titles=dict(source.localized_titles),
            poster_url=_first(
                tmdb and tmdb.poster_url,
                carried.get("poster_url"),
                source.poster_url,
            ),
            source_poster_url=_first(source.poster_url),
            backdrop_url=_first(tmdb and tmdb.backdrop_url),
            trailer_url=_first(
                tmdb and tmdb.trailer_url,
                carried.get("trailer_url"),
                imdb and imdb.trailer_url,
            ),
            vote_average=tmdb.vote_average if tmdb else None,
            vote_count=tmdb.vote_count if tmdb else None,
            popularity=tmdb.popularity if tmdb else None,
            imdb_rating=imdb.vote_average if imdb else None,
            imdb_rating_count=imdb.vote_count if imdb else None,
            original_language=_first(
                tmdb and tmdb.original_language,
                carried.get("original_language"),
                imdb and imdb.original_language,
            ),
            adult=tmdb.adult if tmdb else None,
            release_date=_first(
                tmdb and tmdb.release_date,
                carried.get("release_date"),
                imdb and imdb.release_date,
            ),
            stored_at=stored_at,
        )

        if previous is not None:
            merged = self.backfill(merged, previous)

        return merged

    def backfill(self, merged: MergedRecord, previous: MergedRecord) -> MergedRecord:
        """Copy every field that is empty in merged but known in previous."""
        updates = {}
        for field in MergedRecord.model_fields:
            if field in _NOT_BACKFILLED:
                continue
            current = getattr(merged, field)
            earlier = getattr(previous, field)
            if _is_empty(current) and not _is_empty(earlier):
                updates[field] = earlier

        if updates:
            logger.debug(
                f"Back-filled {sorted(updates)} for {merged.source_id} from previous record"
            )
            return merged.model_copy(update=updates)
        return merged
