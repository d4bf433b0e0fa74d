"""Acceptance rules for search candidates: title type, year and directors."""

import logging
from collections.abc import Iterable

from rapidfuzz.distance import Levenshtein

from kinolink.config import settings
from kinolink.schemas.movie import CandidateMatch
from kinolink.utils.text import extract_year, extract_years, normalise_name, sort_tokens

logger = logging.getLogger(__name__)

# Title types that are never a film shown in cinemas. Anything else,
# including types we have never seen, is accepted.
REJECTED_TITLE_TYPES = frozenset(
    {
        "podcast-series",
        "podcast-episode",
        "tv-series",
        "tv-episode",
        "video-game",
        "music-video",
    }
)


def name_similarity(a: str, b: str) -> float:
    """
    Levenshtein similarity between two strings, from 0.0 to 1.0.

    Computed as (longest length - edit distance) / longest length.
    Two empty strings are identical.
    """
    if a == b:
        return 1.0
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - Levenshtein.distance(a, b)) / longest


class CandidateValidator:
    """
    Decides whether a search candidate is the catalog film.

    Three independent checks, each permissive when the catalog has nothing
    to compare against:
    1. Title type: podcasts, series, episodes and games are rejected
    2. Year: detail year within ±1, or listing year exactly equal
    3. Directors: at least one catalog director matches one credited director
    """

    YEAR_TOLERANCE = 1
    LISTING_YEAR_TOLERANCE = 2  # Used only for ordering candidates

    def __init__(self, similarity_threshold: float | None = None) -> None:
        """
        Initialize validator.

        Args:
            similarity_threshold: Minimum fuzzy similarity for director names
                (uses settings if not provided)
        """
        self.similarity_threshold = (
            similarity_threshold
            if similarity_threshold is not None
            else settings.director_similarity_threshold
        )

    def is_type_acceptable(self, title_type: str | None) -> bool:
        """Reject only the explicit exclusion set; unknown types pass."""
        if not title_type:
            return True
        return title_type.lower() not in REJECTED_TITLE_TYPES

    def is_year_valid(
        self,
        source_year: str | None,
        candidate_year: str | None,
        listing_year: str | None = None,
    ) -> bool:
        """
        Check the candidate's year against the catalog year.

        Args:
            source_year: Free-text catalog year
            candidate_year: Year from the candidate's detail page
            listing_year: Year shown in the search listing, which may be the
                production year while the detail page shows a later release

        Returns:
            True if the year is compatible or the catalog year is unknown
        """
        source = extract_year(source_year)
        if source is None:
            return True

        candidate = extract_year(candidate_year)
        if candidate is not None and abs(int(candidate) - int(source)) <= self.YEAR_TOLERANCE:
            return True

        listing = extract_year(listing_year)
        if listing is not None and listing == source:
            return True

        return False

    def are_directors_valid(
        self,
        source_directors: Iterable[str] | None,
        candidate_directors: Iterable[str] | None,
    ) -> bool:
        """
        Check that one catalog director matches one credited director.

        Either credit list may be incomplete, so a single matching pair is
        enough. Names are compared after normalization, exactly, with words
        sorted, and finally by fuzzy similarity on both forms.
        """
        source = [n for n in (normalise_name(d) for d in source_directors or []) if n]
        if not source:
            return True

        candidates = [n for n in (normalise_name(d) for d in candidate_directors or []) if n]
        if not candidates:
            return False

        candidate_sorted = {sort_tokens(n) for n in candidates}

        for name in source:
            if name in candidates:
                return True

            name_sorted = sort_tokens(name)
            if name_sorted in candidate_sorted:
                return True

            for other in candidates:
                similarity = max(
                    name_similarity(name, other),
                    name_similarity(name_sorted, sort_tokens(other)),
                )
                if similarity >= self.similarity_threshold:
                    logger.debug(f"Fuzzy director match '{name}' ~ '{other}' ({similarity:.2f})")
                    return True

        return False

    def listing_year(self, candidate: CandidateMatch) -> str | None:
        """Year shown in the search listing, recovered from the snippet if needed."""
        return extract_year(candidate.year) or extract_year(candidate.raw_text)

    def shares_year(self, source_year: str | None, candidate: CandidateMatch) -> bool:
        """
        Loose year test used to order candidates, not to accept them.

        Any year in the listing within ±2 counts, because episodes and
        regional releases often show a neighbouring year.
        """
        source = extract_year(source_year)
        if source is None:
            return True

        years = extract_years(candidate.year) + extract_years(candidate.raw_text)
        return any(
            abs(int(year) - int(source)) <= self.LISTING_YEAR_TOLERANCE for year in years
        )
