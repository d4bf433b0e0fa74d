"""IMDb client scraping the public find and title pages."""

import json
import logging
import re
from datetime import date
from typing import Any

import httpx
from bs4 import BeautifulSoup, Tag

from kinolink.config import settings
from kinolink.schemas.movie import CandidateMatch, EnrichedRecord
from kinolink.services.search_client import TypeFilter, canonical_title_type

logger = logging.getLogger(__name__)

IMDB_ID_PATTERN = re.compile(r"tt\d+")

# Type labels as IMDb prints them in listings and page titles
LISTING_TYPE_PATTERN = re.compile(
    r"\b(TV Series|TV Mini Series|TV Movie|TV Episode|TV Special|TV Short|"
    r"Podcast Series|Podcast Episode|Video Game|Music Video|Video|Short)\b",
    re.IGNORECASE,
)


class IMDbClient:
    """
    Client for IMDb title search and title metadata.

    Search uses the find page (legacy table layout and the current list
    layout are both understood). Title metadata comes from the JSON-LD block
    of the title page, with the HTML <title> as a fallback for year and type.
    """

    name = "imdb"
    supports_year_hint = False  # The find page has no year facet
    supports_type_filter = True

    def __init__(
        self,
        base_url: str | None = None,
        timeout: int | None = None,
        user_agent: str | None = None,
    ) -> None:
        """
        Initialize IMDb client.

        Args:
            base_url: IMDb site root (uses settings if not provided)
            timeout: HTTP timeout in seconds (uses settings if not provided)
            user_agent: Browser user agent (uses settings if not provided)
        """
        self.base_url = (base_url or settings.imdb_base_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout
        self.headers = {
            "User-Agent": user_agent or settings.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        }

    async def search(
        self,
        query: str,
        year_hint: int | None = None,
        type_filter: TypeFilter | None = None,
    ) -> list[CandidateMatch]:
        """
        Search IMDb titles.

        Args:
            query: Title to search for
            year_hint: Ignored, the find page cannot filter by year
            type_filter: FEATURE restricts to movies; RELAXED searches all titles

        Returns:
            Candidates in IMDb ranking order, empty on any failure
        """
        params = {"q": query, "s": "tt"}
        if type_filter == TypeFilter.FEATURE:
            params["ttype"] = "ft"

        html = await self._get_html(f"{self.base_url}/find/", params)
        if html is None:
            return []

        results = self._parse_search_html(html)
        logger.info(f"IMDb search for '{query}' ({type_filter or 'all'}): {len(results)} results")
        return results

    async def fetch_by_id(self, external_id: str) -> EnrichedRecord | None:
        """
        Fetch title metadata from the title page.

        Args:
            external_id: IMDb title id

        Returns:
            Enriched record or None if the page is unavailable or unreadable
        """
        html = await self._get_html(f"{self.base_url}/title/{external_id}/")
        if html is None:
            return None
        return self._parse_title_html(external_id, html)

    async def fetch_credited_directors(self, external_id: str) -> list[str]:
        """
        Fetch director credits from the full credits page.

        The title page JSON-LD often lists no director for older or obscure
        titles, while the full credits page still does.

        Args:
            external_id: IMDb title id

        Returns:
            Director names in credit order, empty on any failure
        """
        html = await self._get_html(f"{self.base_url}/title/{external_id}/fullcredits")
        if html is None:
            return []

        directors = self._parse_credits_html(html)
        logger.debug(f"IMDb full credits for {external_id}: {len(directors)} directors")
        return directors

    async def _get_html(self, url: str, params: dict[str, str] | None = None) -> str | None:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers=self.headers,
                follow_redirects=True,
            ) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                return response.text
        except httpx.HTTPError as e:
            logger.error(f"IMDb request error for {url}: {e}")
            return None

    # ------------------------------------------------------------------
    # Search page parsing
    # ------------------------------------------------------------------

    def _parse_search_html(self, html: str) -> list[CandidateMatch]:
        """Parse both find page layouts, keeping the first hit per id."""
        soup = BeautifulSoup(html, "html.parser")

        seen: set[str] = set()
        results = []
        for result in self._parse_legacy_results(soup) + self._parse_modern_results(soup):
            if result.external_id not in seen:
                seen.add(result.external_id)
                results.append(result)
        return results

    def _parse_legacy_results(self, soup: BeautifulSoup) -> list[CandidateMatch]:
        results = []
        for row in soup.select("table.findList tr"):
            text_cell = row.find("td", class_="result_text")
            link = text_cell.find("a") if text_cell else None
            if not link:
                continue

            match = IMDB_ID_PATTERN.search(link.get("href", ""))
            if not match:
                continue

            raw_text = text_cell.get_text(" ", strip=True)
            year_match = re.search(r"\((\d{4})\)", raw_text)
            results.append(
                CandidateMatch(
                    external_id=match.group(0),
                    title=link.get_text(strip=True),
                    year=year_match.group(1) if year_match else None,
                    raw_text=raw_text,
                    title_type=self._type_from_text(raw_text),
                )
            )
        return results

    def _parse_modern_results(self, soup: BeautifulSoup) -> list[CandidateMatch]:
        section = self._find_results_section(soup, "Movies") or self._find_results_section(
            soup, "Titles"
        )
        if section is None:
            return []

        results = []
        for item in section.select("li.ipc-metadata-list-summary-item"):
            link = item.select_one("a[href*='/title/tt']")
            if not link:
                continue

            match = IMDB_ID_PATTERN.search(link.get("href", ""))
            if not match:
                continue

            # aria-label reads "View title page for <Title>"
            title = re.sub(r"^View title page for ", "", link.get("aria-label", "")).strip()
            if not title:
                title = link.get_text(strip=True)

            year = None
            snippets = []
            for span in item.select("span[class*='cli-title-metadata-item']"):
                text = span.get_text(strip=True)
                if not text:
                    continue
                snippets.append(text)
                year_match = re.search(r"\b(\d{4})\b", text)
                if year_match and year is None:
                    year = year_match.group(1)
            raw_text = " ".join(snippets)

            type_label = item.select_one("[class*='ipc-metadata-list-summary-item__tl']")
            title_type = canonical_title_type(type_label.get_text(strip=True)) if type_label else None
            if title_type is None:
                title_type = self._type_from_text(raw_text)

            results.append(
                CandidateMatch(
                    external_id=match.group(0),
                    title=title,
                    year=year,
                    raw_text=raw_text,
                    title_type=title_type,
                )
            )
        return results

    @staticmethod
    def _find_results_section(soup: BeautifulSoup, heading: str) -> Tag | None:
        for section in soup.select("section[data-testid='find-results-section-title']"):
            h3 = section.find("h3")
            if h3 and h3.get_text(strip=True) == heading:
                return section
        return None

    @staticmethod
    def _type_from_text(text: str | None) -> str | None:
        if not text:
            return None
        match = LISTING_TYPE_PATTERN.search(text)
        return canonical_title_type(match.group(1)) if match else None

    # ------------------------------------------------------------------
    # Full credits parsing
    # ------------------------------------------------------------------

    def _parse_credits_html(self, html: str) -> list[str]:
        """Director names from the legacy table layout or the current section layout."""
        soup = BeautifulSoup(html, "html.parser")

        links: list[Tag] = []
        heading = soup.find("h4", id="director") or soup.find("h4", attrs={"name": "director"})
        if heading is not None:
            table = heading.find_next_sibling("table")
            if table is not None:
                links = table.select("a[href*='/name/nm']")

        if not links:
            section = soup.select_one("[data-testid='sub-section-director']")
            if section is not None:
                links = section.select("a[href*='/name/nm']")

        names = []
        for link in links:
            name = link.get_text(" ", strip=True)
            if name and name not in names:
                names.append(name)
        return names

    # ------------------------------------------------------------------
    # Title page parsing
    # ------------------------------------------------------------------

    def _parse_title_html(self, imdb_id: str, html: str) -> EnrichedRecord | None:
        """
        Extract metadata from a title page.

        JSON-LD is preferred. When it lacks a year, the <title> tag
        ("Ucho (1970) - IMDb") supplies year and type, keeping any rating
        already found in JSON-LD.
        """
        soup = BeautifulSoup(html, "html.parser")

        fallback_rating: tuple[float | None, int | None] = (None, None)
        for script in soup.find_all("script", type="application/ld+json"):
            raw = script.string or script.get_text()
            if not raw or not raw.strip():
                continue
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError:
                logger.debug(f"Skipping unreadable JSON-LD block on {imdb_id}")
                continue

            for node in self._json_ld_nodes(payload):
                record = self._record_from_json_ld(imdb_id, node)
                if record is not None:
                    return record
                rating = self._rating_from_json_ld(node)
                if rating[0] is not None:
                    fallback_rating = rating

        title_tag = soup.find("title")
        if title_tag is None:
            return None

        page_title = title_tag.get_text(strip=True)
        year_match = re.search(r"\((?:[^()]*?\s)?(\d{4})", page_title)
        if not year_match:
            return None

        logger.debug(f"JSON-LD had no year for {imdb_id}, using page title '{page_title}'")
        type_match = re.search(r"\(([A-Za-z ]+?)\s+\d{4}", page_title)
        return EnrichedRecord(
            external_id=imdb_id,
            title=re.sub(r"\s*\(.*$", "", page_title).strip() or None,
            year=year_match.group(1),
            vote_average=fallback_rating[0],
            vote_count=fallback_rating[1],
            title_type=self._type_from_text(type_match.group(1)) if type_match else None,
        )

    @staticmethod
    def _json_ld_nodes(payload: Any) -> list[dict[str, Any]]:
        """Flatten a JSON-LD document, including @graph arrays, into objects."""
        if isinstance(payload, list):
            nodes = []
            for item in payload:
                nodes.extend(IMDbClient._json_ld_nodes(item))
            return nodes
        if not isinstance(payload, dict):
            return []
        nodes = IMDbClient._json_ld_nodes(payload.get("@graph", []))
        nodes.append(payload)
        return nodes

    def _record_from_json_ld(self, imdb_id: str, node: dict[str, Any]) -> EnrichedRecord | None:
        node_type = node.get("@type")
        if not isinstance(node_type, str) or not node_type:
            return None

        release_date = None
        year = None
        for value in self._date_values(node):
            year_match = re.search(r"\b(\d{4})\b", value)
            if year_match:
                year = year_match.group(1)
                try:
                    release_date = date.fromisoformat(value[:10])
                except ValueError:
                    release_date = None
                break

        if year is None:
            return None

        rating, rating_count = self._rating_from_json_ld(node)
        trailer = node.get("trailer")
        return EnrichedRecord(
            external_id=imdb_id,
            title=node.get("name"),
            original_title=node.get("alternateName") or node.get("name"),
            release_date=release_date,
            year=year,
            overview=node.get("description"),
            poster_url=node.get("image") if isinstance(node.get("image"), str) else None,
            vote_average=rating,
            vote_count=rating_count,
            original_language=node.get("inLanguage") if isinstance(node.get("inLanguage"), str) else None,
            trailer_url=trailer.get("embedUrl") if isinstance(trailer, dict) else None,
            directors=self._directors_from_json_ld(node),
            title_type=canonical_title_type(node_type),
        )

    @staticmethod
    def _date_values(node: dict[str, Any]) -> list[str]:
        values = [node.get("datePublished"), node.get("releaseDate")]
        for event in node.get("releasedEvent") or []:
            if isinstance(event, dict):
                values.append(event.get("startDate"))
        return [v for v in values if isinstance(v, str) and v]

    @staticmethod
    def _directors_from_json_ld(node: dict[str, Any]) -> list[str]:
        director = node.get("director")
        entries = director if isinstance(director, list) else [director]
        names = []
        for entry in entries:
            if isinstance(entry, dict) and isinstance(entry.get("name"), str):
                names.append(entry["name"])
            elif isinstance(entry, str) and entry:
                names.append(entry)
        return names

    @staticmethod
    def _rating_from_json_ld(node: dict[str, Any]) -> tuple[float | None, int | None]:
        aggregate = node.get("aggregateRating")
        if not isinstance(aggregate, dict):
            return None, None

        rating = None
        count = None
        try:
            if aggregate.get("ratingValue") is not None:
                rating = float(aggregate["ratingValue"])
        except (TypeError, ValueError):
            rating = None
        try:
            if aggregate.get("ratingCount") is not None:
                count = int(aggregate["ratingCount"])
        except (TypeError, ValueError):
            count = None
        return rating, count
