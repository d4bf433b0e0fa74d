"""Resolve one catalog film against IMDb and TMDb and merge the results."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from kinolink.schemas.movie import MergedRecord, SourceRecord
from kinolink.services.identity_resolver import (
    IdentityResolver,
    IMDbResolver,
    ResolutionResult,
    ResolutionStatus,
    TMDbResolver,
)
from kinolink.services.metadata_merger import MetadataMerger

logger = logging.getLogger(__name__)


@dataclass
class MovieResolution:
    """Everything one resolution cycle produced for a film."""

    imdb: ResolutionResult
    tmdb: ResolutionResult
    merged: MergedRecord | None = None

    @property
    def failed(self) -> bool:
        return ResolutionStatus.FAILED in (self.imdb.status, self.tmdb.status)

    @property
    def resolved(self) -> bool:
        return ResolutionStatus.RESOLVED in (self.imdb.status, self.tmdb.status)


class MetadataOrchestrator:
    """
    Runs one resolution cycle for a catalog film.

    1. IMDb ladder, reusing the IMDb id stored on a previous cycle
    2. TMDb ladder, reusing the stored TMDb id or bridging via the IMDb id
    3. Merge with the previous record for back-fill

    Low-confidence catalog entries (student films and the like) skip both
    ladders and are merged from catalog data alone.
    """

    def __init__(
        self,
        imdb_resolver: IdentityResolver | None = None,
        tmdb_resolver: IdentityResolver | None = None,
        merger: MetadataMerger | None = None,
    ) -> None:
        self.imdb_resolver = imdb_resolver or IMDbResolver()
        self.tmdb_resolver = tmdb_resolver or TMDbResolver()
        self.merger = merger or MetadataMerger()

    async def resolve_movie(
        self,
        source: SourceRecord,
        existing: MergedRecord | None = None,
        now: datetime | None = None,
    ) -> MovieResolution:
        """
        Resolve and merge one film.

        Args:
            source: Catalog record
            existing: Record stored on the previous cycle
            now: Timestamp for the merged record (defaults to current UTC time)

        Returns:
            Per-service results, and the merged record unless a service failed
        """
        now = now or datetime.now(UTC)

        if source.low_confidence:
            logger.info(f"Skipping enrichment for low-confidence film {source.source_id}")
            imdb_result = ResolutionResult.unresolved()
            tmdb_result = ResolutionResult.unresolved()
        else:
            imdb_result = await self.imdb_resolver.resolve(
                source,
                known_id=existing.imdb_id if existing else None,
            )
            if imdb_result.status == ResolutionStatus.FAILED:
                return MovieResolution(imdb=imdb_result, tmdb=ResolutionResult.unresolved())

            known_tmdb_id = existing.tmdb_id if existing else None
            tmdb_result = await self.tmdb_resolver.resolve(
                source,
                known_id=str(known_tmdb_id) if known_tmdb_id is not None else None,
                bridge_id=imdb_result.external_id,
            )
            if tmdb_result.status == ResolutionStatus.FAILED:
                return MovieResolution(imdb=imdb_result, tmdb=tmdb_result)

        merged = self.merger.merge(
            source,
            imdb=imdb_result.enriched,
            tmdb=tmdb_result.enriched,
            previous=existing,
            imdb_id=imdb_result.external_id,
            tmdb_id=int(tmdb_result.external_id) if tmdb_result.external_id else None,
            stored_at=now,
        )
        return MovieResolution(imdb=imdb_result, tmdb=tmdb_result, merged=merged)
