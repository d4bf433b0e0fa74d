"""Identity resolution: find the metadata-service id of a catalog film."""

import logging
from dataclasses import dataclass
from enum import Enum

from kinolink.config import settings
from kinolink.errors import MalformedPayloadError
from kinolink.schemas.movie import CandidateMatch, EnrichedRecord, SourceRecord
from kinolink.services.candidate_validator import CandidateValidator
from kinolink.services.imdb_client import IMDbClient
from kinolink.services.search_client import CandidateSearchClient, TypeFilter
from kinolink.services.tmdb_client import TMDbClient
from kinolink.utils.text import extract_year, normalise_title, split_origin

logger = logging.getLogger(__name__)

# Localized-title keys of the English-speaking market, as the catalog labels them
ENGLISH_MARKET_KEYS = (
    "angličtina",
    "English",
    "USA",
    "United States",
    "Spojené státy",
    "UK",
    "United Kingdom",
    "Velká Británie",
    "Spojené království",
)


class ResolutionStatus(str, Enum):
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    FAILED = "failed"


@dataclass
class ResolutionResult:
    """Outcome of running the ladder for one service."""

    status: ResolutionStatus
    match: CandidateMatch | None = None
    enriched: EnrichedRecord | None = None
    stage: str | None = None
    error: str | None = None

    @property
    def external_id(self) -> str | None:
        return self.match.external_id if self.match else None

    @classmethod
    def unresolved(cls) -> "ResolutionResult":
        return cls(status=ResolutionStatus.UNRESOLVED)


class IdentityResolver:
    """
    Resolves a catalog film to one metadata service using a fallback ladder.

    Stages, each tried only when the previous one found nothing:
    0. Known id from a previous cycle: fetched directly, never re-searched
    1. Service shortcut (direct link or id bridge, see subclasses)
    2. Search each title candidate, escalating per title:
       feature films with the year, relaxed type filter, year ±1,
       and no year when none is known

    The first validated candidate wins. Exhausting the ladder is a normal
    "unresolved" outcome, not an error.
    """

    def __init__(
        self,
        client: CandidateSearchClient,
        validator: CandidateValidator | None = None,
        max_candidates: int | None = None,
    ) -> None:
        """
        Initialize resolver.

        Args:
            client: Metadata service client
            validator: Candidate validator (creates default if not provided)
            max_candidates: Candidates validated per search (uses settings if not provided)
        """
        self.client = client
        self.validator = validator or CandidateValidator()
        self.max_candidates = max_candidates or settings.max_candidates_per_search

    async def resolve(
        self,
        source: SourceRecord,
        known_id: str | None = None,
        bridge_id: str | None = None,
    ) -> ResolutionResult:
        """
        Run the ladder for one catalog film.

        Args:
            source: Catalog film
            known_id: Id confirmed for this service on a previous cycle
            bridge_id: Id already confirmed on the other service

        Returns:
            Resolved, unresolved or failed result
        """
        try:
            return await self._run_ladder(source, known_id, bridge_id)
        except MalformedPayloadError as e:
            logger.error(f"[{self.client.name}] Resolution failed for {source.source_id}: {e}")
            return ResolutionResult(status=ResolutionStatus.FAILED, error=str(e))

    async def _run_ladder(
        self,
        source: SourceRecord,
        known_id: str | None,
        bridge_id: str | None,
    ) -> ResolutionResult:
        service = self.client.name

        # Stage 0: a confirmed id is authoritative
        if known_id:
            enriched = await self.client.fetch_by_id(known_id)
            if enriched is None:
                logger.warning(f"[{service}] Could not refresh known id {known_id}, keeping it")
            return ResolutionResult(
                status=ResolutionStatus.RESOLVED,
                match=CandidateMatch(external_id=known_id),
                enriched=enriched,
                stage="known-id",
            )

        # Stage 1: service-specific shortcut
        result = await self._try_shortcut(source, bridge_id)
        if result:
            logger.info(f"[{service}] {source.source_id} resolved via {result.stage}: {result.external_id}")
            return result

        # Stages 2-3: title search ladder
        result = await self._search_ladder(source)
        if result:
            logger.info(f"[{service}] {source.source_id} resolved via {result.stage}: {result.external_id}")
            return result

        logger.info(f"[{service}] No match for {source.source_id} ({source.title!r})")
        return ResolutionResult.unresolved()

    async def _try_shortcut(
        self, source: SourceRecord, bridge_id: str | None
    ) -> ResolutionResult | None:
        return None

    async def _search_ladder(self, source: SourceRecord) -> ResolutionResult | None:
        attempted: set[tuple[str, int | None, TypeFilter | None]] = set()

        for title in self.search_titles(source):
            for stage, year_hint, type_filter in self._escalation_steps(source):
                # Skip steps the client would send identically on the wire
                key = (
                    title.lower(),
                    year_hint if self.client.supports_year_hint else None,
                    type_filter if self.client.supports_type_filter else None,
                )
                if key in attempted:
                    continue
                attempted.add(key)

                logger.debug(f"[{self.client.name}] Searching '{title}' ({stage})")
                candidates = await self.client.search(title, year_hint=key[1], type_filter=key[2])
                if not candidates:
                    continue

                for candidate in self._order_candidates(source, title, candidates)[: self.max_candidates]:
                    enriched = await self._validate_candidate(source, candidate)
                    if enriched:
                        return ResolutionResult(
                            status=ResolutionStatus.RESOLVED,
                            match=candidate,
                            enriched=enriched,
                            stage=stage,
                        )

        return None

    def _escalation_steps(
        self, source: SourceRecord
    ) -> list[tuple[str, int | None, TypeFilter | None]]:
        year = extract_year(source.year)
        if year:
            y = int(year)
            return [
                ("feature", y, TypeFilter.FEATURE),
                ("relaxed-type", y, TypeFilter.RELAXED),
                ("year-plus-one", y + 1, TypeFilter.RELAXED),
                ("year-minus-one", y - 1, TypeFilter.RELAXED),
            ]
        return [
            ("feature", None, TypeFilter.FEATURE),
            ("relaxed-type", None, TypeFilter.RELAXED),
            ("no-year", None, TypeFilter.RELAXED),
        ]

    def _order_candidates(
        self, source: SourceRecord, query: str, candidates: list[CandidateMatch]
    ) -> list[CandidateMatch]:
        """Order in which candidates are validated; the service ranking by default."""
        return list(candidates)

    async def _validate_candidate(
        self, source: SourceRecord, candidate: CandidateMatch
    ) -> EnrichedRecord | None:
        """
        Validate one candidate against the catalog film.

        Returns the candidate's enriched record when it passes type, year
        and director checks, otherwise None.
        """
        service = self.client.name
        candidate_id = candidate.external_id

        if not self.validator.is_type_acceptable(candidate.title_type):
            logger.info(f"[{service}] Rejecting {candidate_id}: listing type '{candidate.title_type}'")
            return None

        details = await self.client.fetch_by_id(candidate_id)
        if details is None:
            logger.info(f"[{service}] Rejecting {candidate_id}: no details available")
            return None

        if not self.validator.is_type_acceptable(details.title_type):
            logger.info(f"[{service}] Rejecting {candidate_id}: title type '{details.title_type}'")
            return None

        listing_year = self.validator.listing_year(candidate)
        if not self.validator.is_year_valid(source.year, details.detail_year, listing_year):
            logger.info(
                f"[{service}] Rejecting {candidate_id}: year {details.detail_year} "
                f"(listing {listing_year}) vs catalog {source.year}"
            )
            return None

        if source.directors:
            directors = details.directors or await self.client.fetch_credited_directors(candidate_id)
            if not self.validator.are_directors_valid(source.directors, directors):
                logger.info(
                    f"[{service}] Rejecting {candidate_id}: directors {directors} "
                    f"vs catalog {source.directors}"
                )
                return None
            details = details.model_copy(update={"directors": directors})

        return details

    def search_titles(self, source: SourceRecord) -> list[str]:
        """
        Build the ordered, de-duplicated list of titles to search for.

        Order: localized titles of the origin countries, the English-market
        title, the primary title, the original title, then all remaining
        localized titles. Market titles search far better than the catalog's
        own transcriptions.
        """
        candidates: list[str | None] = []
        for country in split_origin(source.origin):
            candidates.append(self._localized_title(source, country))
        candidates.append(self._localized_title(source, *ENGLISH_MARKET_KEYS))
        candidates.append(source.title)
        candidates.append(source.original_title)
        candidates.extend(source.localized_titles.values())

        seen: set[str] = set()
        titles = []
        for candidate in candidates:
            if not candidate or not candidate.strip():
                continue
            trimmed = candidate.strip()
            if trimmed.lower() not in seen:
                seen.add(trimmed.lower())
                titles.append(trimmed)
        return titles

    @staticmethod
    def _localized_title(source: SourceRecord, *keys: str) -> str | None:
        lowered = {k.lower(): v for k, v in source.localized_titles.items()}
        for key in keys:
            title = lowered.get(key.lower())
            if title and title.strip():
                return title
        return None


class IMDbResolver(IdentityResolver):
    """Ladder for IMDb: adds the direct-link shortcut and title-first ordering."""

    def __init__(
        self,
        client: CandidateSearchClient | None = None,
        validator: CandidateValidator | None = None,
        max_candidates: int | None = None,
    ) -> None:
        super().__init__(client or IMDbClient(), validator, max_candidates)

    async def _try_shortcut(
        self, source: SourceRecord, bridge_id: str | None
    ) -> ResolutionResult | None:
        """Validate the IMDb id linked from the catalog page, if any."""
        if not source.imdb_id:
            return None

        candidate = CandidateMatch(external_id=source.imdb_id)
        enriched = await self._validate_candidate(source, candidate)
        if enriched is None:
            logger.info(f"[imdb] Linked id {source.imdb_id} failed validation, searching instead")
            return None

        return ResolutionResult(
            status=ResolutionStatus.RESOLVED,
            match=candidate,
            enriched=enriched,
            stage="direct-link",
        )

    def _order_candidates(
        self, source: SourceRecord, query: str, candidates: list[CandidateMatch]
    ) -> list[CandidateMatch]:
        """
        Title matches first, then candidates sharing a year with the catalog.

        Candidates matching neither are dropped.
        """
        targets = {
            normalise_title(t)
            for t in [source.title, source.original_title, query, *source.localized_titles.values()]
            if t
        }
        targets.discard("")

        prioritised = []
        secondary = []
        for candidate in candidates:
            if normalise_title(candidate.title) in targets:
                prioritised.append(candidate)
            elif self.validator.shares_year(source.year, candidate):
                secondary.append(candidate)

        return prioritised + secondary


class TMDbResolver(IdentityResolver):
    """Ladder for TMDb: tries the IMDb id bridge before searching."""

    def __init__(
        self,
        client: TMDbClient | None = None,
        validator: CandidateValidator | None = None,
        max_candidates: int | None = None,
    ) -> None:
        super().__init__(client or TMDbClient(), validator, max_candidates)

    async def _try_shortcut(
        self, source: SourceRecord, bridge_id: str | None
    ) -> ResolutionResult | None:
        """Look TMDb up through the confirmed IMDb id."""
        if not bridge_id:
            return None

        match = await self.client.find_by_imdb_id(bridge_id)
        if match is None:
            return None

        enriched = await self.client.fetch_by_id(match.external_id)
        if enriched is None:
            logger.warning(f"[tmdb] Bridged id {match.external_id} has no details, searching instead")
            return None

        return ResolutionResult(
            status=ResolutionStatus.RESOLVED,
            match=match,
            enriched=enriched,
            stage="id-bridge",
        )
