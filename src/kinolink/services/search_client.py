"""Contract shared by the metadata service clients."""

from enum import Enum
from typing import Protocol

from kinolink.schemas.movie import CandidateMatch, EnrichedRecord


class TypeFilter(str, Enum):
    """Which kinds of titles a search should return."""

    FEATURE = "feature"  # Feature films only
    RELAXED = "relaxed"  # Also TV movies, shorts and specials


# Canonical title type tags used across services
TITLE_TYPES = {
    "movie": "movie",
    "feature": "movie",
    "tvmovie": "tv-movie",
    "tvspecial": "tv-special",
    "tvminiseries": "tv-mini-series",
    "tvshort": "tv-short",
    "short": "short",
    "video": "video",
    "podcastseries": "podcast-series",
    "podcastepisode": "podcast-episode",
    "tvseries": "tv-series",
    "tvepisode": "tv-episode",
    "videogame": "video-game",
    "musicvideo": "music-video",
    "musicvideoobject": "music-video",
}


def canonical_title_type(label: str | None) -> str | None:
    """
    Map a service-specific type label to a canonical tag.

    "TV Series", "TVSeries" and "tv-series" all become "tv-series".
    Unknown labels are kept, lowercased and hyphenated, so the validator
    can still see them.
    """
    if not label or not label.strip():
        return None
    key = "".join(ch for ch in label.lower() if ch.isalnum())
    if key in TITLE_TYPES:
        return TITLE_TYPES[key]
    return "-".join(label.lower().split())


class CandidateSearchClient(Protocol):
    """
    Boundary to one metadata service.

    Implementations must not raise on transport failures: they log and
    return an empty list or None so the resolver simply escalates.
    """

    name: str
    supports_year_hint: bool
    supports_type_filter: bool

    async def search(
        self,
        query: str,
        year_hint: int | None = None,
        type_filter: TypeFilter | None = None,
    ) -> list[CandidateMatch]: ...

    async def fetch_by_id(self, external_id: str) -> EnrichedRecord | None: ...

    async def fetch_credited_directors(self, external_id: str) -> list[str]: ...
