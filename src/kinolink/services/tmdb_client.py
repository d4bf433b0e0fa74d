"""TMDb API client for searching films and fetching their metadata."""

import logging
from datetime import date
from typing import Any

import httpx

from kinolink.config import settings
from kinolink.errors import MalformedPayloadError
from kinolink.schemas.movie import CandidateMatch, EnrichedRecord
from kinolink.services.search_client import TypeFilter

logger = logging.getLogger(__name__)


class TMDbClient:
    """Client for The Movie Database (TMDb) API."""

    BASE_URL = "https://api.themoviedb.org/3"
    IMAGE_BASE_URL = "https://image.tmdb.org/t/p/original"

    name = "tmdb"
    supports_year_hint = True
    supports_type_filter = False  # /search/movie already covers every film type

    def __init__(
        self,
        api_key: str | None = None,
        language: str | None = None,
        timeout: int | None = None,
    ) -> None:
        """
        Initialize TMDb client.

        Args:
            api_key: TMDb API key (uses settings if not provided)
            language: Response language (uses settings if not provided)
            timeout: HTTP timeout in seconds (uses settings if not provided)
        """
        self.api_key = api_key or settings.tmdb_api_key
        self.language = language or settings.tmdb_language
        self.timeout = timeout or settings.http_timeout
        if not self.api_key:
            logger.warning("TMDb API key not configured")

    async def search(
        self,
        query: str,
        year_hint: int | None = None,
        type_filter: TypeFilter | None = None,
    ) -> list[CandidateMatch]:
        """
        Search for films by title.

        Args:
            query: Film title
            year_hint: Release year (optional, narrows results)
            type_filter: Ignored, TMDb movie search has no type facet

        Returns:
            Candidates in TMDb ranking order, empty on any failure
        """
        params: dict[str, Any] = {
            "query": query,
            "include_adult": "false",
            "language": self.language,
            "page": 1,
        }
        if year_hint:
            params["year"] = year_hint

        data = await self._get("/search/movie", params)
        if data is None:
            return []

        results = data.get("results", [])
        if not isinstance(results, list):
            raise MalformedPayloadError(self.name, f"search results for {query!r} are not a list")

        candidates = []
        for result in results:
            if not isinstance(result, dict) or not isinstance(result.get("id"), int):
                continue
            release_date = result.get("release_date") or ""
            candidates.append(
                CandidateMatch(
                    external_id=str(result["id"]),
                    title=result.get("title") or "",
                    year=release_date[:4] or None,
                    raw_text=result.get("original_title"),
                    title_type="movie",
                )
            )

        if not candidates:
            logger.info(f"No TMDb results for: {query}")
        return candidates

    async def fetch_by_id(self, external_id: str) -> EnrichedRecord | None:
        """
        Get detailed film information including trailer videos.

        Args:
            external_id: TMDb film ID

        Returns:
            Enriched record or None if unavailable
        """
        data = await self._get(
            f"/movie/{external_id}",
            {"language": self.language, "append_to_response": "videos"},
        )
        if data is None:
            return None

        record = self.parse_movie(data)
        record.trailer_url = self.select_trailer_url(data.get("videos") or {})
        return record

    async def fetch_credited_directors(self, external_id: str) -> list[str]:
        """Fetch the director credits of a film, empty on any failure."""
        data = await self._get(f"/movie/{external_id}/credits", {"language": self.language})
        if data is None:
            return []
        return self.extract_directors(data)

    async def find_by_imdb_id(self, imdb_id: str) -> CandidateMatch | None:
        """
        Look up the TMDb film linked to an IMDb id.

        Args:
            imdb_id: IMDb title id, e.g. "tt0066498"

        Returns:
            The linked film or None if TMDb has no mapping
        """
        data = await self._get(
            f"/find/{imdb_id}",
            {"external_source": "imdb_id", "language": self.language},
        )
        if data is None:
            return None

        movie_results = data.get("movie_results") or []
        if not isinstance(movie_results, list):
            raise MalformedPayloadError(self.name, f"find results for {imdb_id} are not a list")
        if not movie_results:
            logger.info(f"No TMDb film linked to {imdb_id}")
            return None

        result = movie_results[0]
        if not isinstance(result, dict) or not isinstance(result.get("id"), int):
            raise MalformedPayloadError(self.name, f"find result for {imdb_id} has no id")

        release_date = result.get("release_date") or ""
        return CandidateMatch(
            external_id=str(result["id"]),
            title=result.get("title") or "",
            year=release_date[:4] or None,
            title_type="movie",
        )

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any] | None:
        """
        GET a TMDb endpoint.

        Transport failures are logged and turned into None. A body that is
        not a JSON object raises MalformedPayloadError.
        """
        if not self.api_key:
            logger.warning("Cannot query TMDb without API key")
            return None

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.BASE_URL}{path}",
                    params={"api_key": self.api_key, **params},
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"TMDb request error for {path}: {e}")
            return None

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedPayloadError(self.name, f"{path} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise MalformedPayloadError(self.name, f"{path} returned {type(data).__name__}")
        return data

    def parse_movie(self, data: dict[str, Any]) -> EnrichedRecord:
        """
        Build an enriched record from a TMDb movie object.

        Args:
            data: TMDb movie details or search result

        Returns:
            Enriched record without trailer or directors
        """
        tmdb_id = data.get("id")
        if not isinstance(tmdb_id, int):
            raise MalformedPayloadError(self.name, "movie payload has no integer id")

        release_date = self._parse_date(data.get("release_date"))
        return EnrichedRecord(
            external_id=str(tmdb_id),
            title=data.get("title"),
            original_title=data.get("original_title"),
            release_date=release_date,
            year=str(release_date.year) if release_date else None,
            overview=data.get("overview") or None,
            poster_url=self._image_url(data.get("poster_path")),
            backdrop_url=self._image_url(data.get("backdrop_path")),
            vote_average=self._number(data.get("vote_average")),
            vote_count=self._integer(data.get("vote_count")),
            popularity=self._number(data.get("popularity")),
            original_language=data.get("original_language"),
            adult=data.get("adult") if isinstance(data.get("adult"), bool) else None,
            title_type="movie",
        )

    def extract_directors(self, credits: dict[str, Any]) -> list[str]:
        """
        Extract director names from TMDb credits.

        Args:
            credits: TMDb credits data

        Returns:
            List of director names

        Raises:
            MalformedPayloadError: If the crew is not a list
        """
        crew = credits.get("crew", [])
        if not isinstance(crew, list):
            raise MalformedPayloadError(self.name, "credits crew is not a list")

        directors = [
            person["name"]
            for person in crew
            if isinstance(person, dict)
            and person.get("job") == "Director"
            and isinstance(person.get("name"), str)
            and person["name"]
        ]
        return directors

    def select_trailer_url(self, videos: dict[str, Any]) -> str | None:
        """
        Pick the best YouTube video for a film.

        Preference: official trailer, any trailer, teaser, any other video.

        Args:
            videos: TMDb videos data

        Returns:
            YouTube watch URL or None

        Raises:
            MalformedPayloadError: If the videos or their results have the wrong shape
        """
        if not isinstance(videos, dict):
            raise MalformedPayloadError(self.name, f"videos is {type(videos).__name__}, not an object")
        results = videos.get("results", [])
        if not isinstance(results, list):
            raise MalformedPayloadError(self.name, "video results are not a list")

        official_key = None
        trailer_key = None
        teaser_key = None
        any_key = None

        for video in results:
            if not isinstance(video, dict):
                continue
            if str(video.get("site", "")).lower() != "youtube":
                continue
            key = video.get("key")
            if not key:
                continue

            video_type = str(video.get("type", "")).lower()
            if video_type == "trailer":
                if video.get("official") is True:
                    official_key = official_key or key
                trailer_key = trailer_key or key
            elif video_type == "teaser":
                teaser_key = teaser_key or key
            else:
                any_key = any_key or key

        best_key = official_key or trailer_key or teaser_key or any_key
        return f"https://www.youtube.com/watch?v={best_key}" if best_key else None

    def _image_url(self, path: str | None) -> str | None:
        return f"{self.IMAGE_BASE_URL}{path}" if path else None

    @staticmethod
    def _parse_date(value: Any) -> date | None:
        if not value or not isinstance(value, str):
            return None
        try:
            return date.fromisoformat(value)
        except ValueError:
            logger.debug(f"Unparseable TMDb release date: {value!r}")
            return None

    @staticmethod
    def _number(value: Any) -> float | None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)

    @staticmethod
    def _integer(value: Any) -> int | None:
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value
