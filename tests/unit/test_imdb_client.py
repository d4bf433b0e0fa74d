"""Tests for the IMDb find and title page client."""

import json
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from kinolink.services.imdb_client import IMDbClient
from kinolink.services.search_client import TypeFilter


# ---------------------------------------------------------------------------
# Sample pages
# ---------------------------------------------------------------------------

LEGACY_FIND_HTML = """
<html><body>
<table class="findList">
  <tr>
    <td class="primary_photo"><a href="/title/tt0066498/"><img src="x.jpg"></a></td>
    <td class="result_text"> <a href="/title/tt0066498/?ref_=fn_tt_tt_1">Ucho</a> (1970) (TV Movie) </td>
  </tr>
  <tr>
    <td class="result_text"> <a href="/title/tt1111111/">Ucho</a> (2011) (TV Series) </td>
  </tr>
  <tr>
    <td class="result_text">No link here</td>
  </tr>
</table>
</body></html>
"""

MODERN_FIND_HTML = """
<html><body>
<section data-testid="find-results-section-name">
  <h3>People</h3>
  <ul>
    <li class="ipc-metadata-list-summary-item">
      <a href="/name/nm0434522/" aria-label="View name page for Karel Kachyňa">Karel Kachyňa</a>
    </li>
  </ul>
</section>
<section data-testid="find-results-section-title">
  <h3>Titles</h3>
  <ul>
    <li class="ipc-metadata-list-summary-item">
      <a href="/title/tt0066498/?ref_=fn_all_ttl_1" aria-label="View title page for The Ear">The Ear</a>
      <span class="cli-title-metadata-item">1970</span>
      <span class="cli-title-metadata-item">1h 34m</span>
    </li>
    <li class="ipc-metadata-list-summary-item">
      <a href="/title/tt7654321/" aria-label="View title page for The Ear">The Ear</a>
      <span class="cli-title-metadata-item">2019–2021</span>
      <span class="ipc-metadata-list-summary-item__tl">Podcast Series</span>
    </li>
    <li class="ipc-metadata-list-summary-item">
      <a href="/title/tt0066498/">The Ear</a>
    </li>
  </ul>
</section>
</body></html>
"""

JSON_LD = {
    "@context": "https://schema.org",
    "@type": "Movie",
    "name": "The Ear",
    "alternateName": "Ucho",
    "datePublished": "1970-01-01",
    "description": "A party official fears his house is bugged.",
    "image": "https://m.media-amazon.com/images/ucho.jpg",
    "inLanguage": "cs",
    "aggregateRating": {"ratingValue": 7.6, "ratingCount": 2345},
    "director": [{"@type": "Person", "name": "Karel Kachyňa"}],
}


LEGACY_CREDITS_HTML = """
<html><body>
<h4 name="director" id="director" class="dataHeaderWithBorder">Directed by</h4>
<table class="simpleTable simpleCreditsTable">
  <tr><td class="name"><a href="/name/nm0434522/?ref_=ttfc_fc_dr1">Karel Kachyna</a></td></tr>
</table>
<h4 name="writer" id="writer" class="dataHeaderWithBorder">Writing Credits</h4>
<table class="simpleTable simpleCreditsTable">
  <tr><td class="name"><a href="/name/nm0702592/">Jan Procházka</a></td></tr>
</table>
</body></html>
"""

MODERN_CREDITS_HTML = """
<html><body>
<div data-testid="sub-section-director">
  <ul>
    <li><a href="/name/nm0434522/?ref_=ttfc_dr_1"><img src="k.jpg"></a>
        <a href="/name/nm0434522/?ref_=ttfc_dr_1">Karel Kachyna</a></li>
    <li><a href="/name/nm0000002/">Second Director</a></li>
  </ul>
</div>
<div data-testid="sub-section-writer">
  <a href="/name/nm0702592/">Jan Procházka</a>
</div>
</body></html>
"""


def title_page(json_ld: object | None, page_title: str = "Ucho (1970) - IMDb") -> str:
    script = ""
    if json_ld is not None:
        script = f'<script type="application/ld+json">{json.dumps(json_ld)}</script>'
    return f"<html><head><title>{page_title}</title>{script}</head><body></body></html>"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_http_response(text: str, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if status_code >= 400:
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            f"HTTP {status_code}", request=MagicMock(), response=MagicMock()
        )
    else:
        response.raise_for_status = MagicMock()
    return response


def make_async_client_ctx(response: MagicMock) -> AsyncMock:
    """Return an async context manager whose .get() always returns *response*."""
    inner = AsyncMock()
    inner.get = AsyncMock(return_value=response)
    ctx = AsyncMock()
    ctx.__aenter__ = AsyncMock(return_value=inner)
    ctx.__aexit__ = AsyncMock(return_value=False)
    return ctx


# ---------------------------------------------------------------------------
# search
# ---------------------------------------------------------------------------


class TestSearch:
    async def test_feature_filter_restricts_to_movies(self) -> None:
        client = IMDbClient(base_url="https://www.imdb.com")
        ctx = make_async_client_ctx(make_http_response(MODERN_FIND_HTML))
        with patch("httpx.AsyncClient", return_value=ctx):
            await client.search("The Ear", type_filter=TypeFilter.FEATURE)
        call = ctx.__aenter__.return_value.get.call_args
        assert call.args[0] == "https://www.imdb.com/find/"
        assert call.kwargs["params"] == {"q": "The Ear", "s": "tt", "ttype": "ft"}

    async def test_relaxed_filter_searches_all_titles(self) -> None:
        client = IMDbClient(base_url="https://www.imdb.com/")
        ctx = make_async_client_ctx(make_http_response(MODERN_FIND_HTML))
        with patch("httpx.AsyncClient", return_value=ctx):
            await client.search("The Ear", type_filter=TypeFilter.RELAXED)
        params = ctx.__aenter__.return_value.get.call_args.kwargs["params"]
        assert "ttype" not in params

    async def test_year_hint_is_not_sent(self) -> None:
        client = IMDbClient()
        ctx = make_async_client_ctx(make_http_response(MODERN_FIND_HTML))
        with patch("httpx.AsyncClient", return_value=ctx):
            await client.search("The Ear", year_hint=1970)
        params = ctx.__aenter__.return_value.get.call_args.kwargs["params"]
        assert "1970" not in params.values()

    async def test_returns_empty_on_http_error(self) -> None:
        client = IMDbClient()
        ctx = make_async_client_ctx(make_http_response("", status_code=503))
        with patch("httpx.AsyncClient", return_value=ctx):
            assert await client.search("The Ear") == []

    async def test_returns_empty_on_timeout(self) -> None:
        client = IMDbClient()
        inner = AsyncMock()
        inner.get = AsyncMock(side_effect=httpx.ReadTimeout("timed out"))
        ctx = AsyncMock()
        ctx.__aenter__ = AsyncMock(return_value=inner)
        ctx.__aexit__ = AsyncMock(return_value=False)
        with patch("httpx.AsyncClient", return_value=ctx):
            assert await client.search("The Ear") == []


class TestParseSearchHtml:
    def setup_method(self) -> None:
        self.client = IMDbClient()

    def test_legacy_layout(self) -> None:
        results = self.client._parse_search_html(LEGACY_FIND_HTML)
        assert [r.external_id for r in results] == ["tt0066498", "tt1111111"]
        assert results[0].title == "Ucho"
        assert results[0].year == "1970"
        assert results[0].title_type == "tv-movie"
        assert results[1].title_type == "tv-series"

    def test_modern_layout(self) -> None:
        results = self.client._parse_search_html(MODERN_FIND_HTML)
        assert [r.external_id for r in results] == ["tt0066498", "tt7654321"]
        assert results[0].title == "The Ear"
        assert results[0].year == "1970"
        assert results[0].raw_text == "1970 1h 34m"
        assert results[0].title_type is None

    def test_modern_type_label(self) -> None:
        results = self.client._parse_search_html(MODERN_FIND_HTML)
        assert results[1].year == "2019"
        assert results[1].title_type == "podcast-series"

    def test_ignores_people_section(self) -> None:
        results = self.client._parse_search_html(MODERN_FIND_HTML)
        assert all(r.external_id.startswith("tt") for r in results)

    def test_empty_page(self) -> None:
        assert self.client._parse_search_html("<html></html>") == []


# ---------------------------------------------------------------------------
# fetch_by_id / title page parsing
# ---------------------------------------------------------------------------


class TestFetchById:
    async def test_requests_title_page(self) -> None:
        client = IMDbClient(base_url="https://www.imdb.com")
        ctx = make_async_client_ctx(make_http_response(title_page(JSON_LD)))
        with patch("httpx.AsyncClient", return_value=ctx):
            record = await client.fetch_by_id("tt0066498")
        assert ctx.__aenter__.return_value.get.call_args.args[0] == (
            "https://www.imdb.com/title/tt0066498/"
        )
        assert record is not None
        assert record.external_id == "tt0066498"

    async def test_returns_none_on_not_found(self) -> None:
        client = IMDbClient()
        ctx = make_async_client_ctx(make_http_response("", status_code=404))
        with patch("httpx.AsyncClient", return_value=ctx):
            assert await client.fetch_by_id("tt0000000") is None

    async def test_credited_directors_come_from_full_credits_page(self) -> None:
        client = IMDbClient(base_url="https://www.imdb.com")
        ctx = make_async_client_ctx(make_http_response(LEGACY_CREDITS_HTML))
        with patch("httpx.AsyncClient", return_value=ctx):
            directors = await client.fetch_credited_directors("tt0066498")
        assert directors == ["Karel Kachyna"]
        assert ctx.__aenter__.return_value.get.call_args.args[0] == (
            "https://www.imdb.com/title/tt0066498/fullcredits"
        )

    async def test_credited_directors_empty_on_http_error(self) -> None:
        client = IMDbClient()
        ctx = make_async_client_ctx(make_http_response("", status_code=503))
        with patch("httpx.AsyncClient", return_value=ctx):
            assert await client.fetch_credited_directors("tt0066498") == []


class TestParseCreditsHtml:
    def setup_method(self) -> None:
        self.client = IMDbClient()

    def test_legacy_layout(self) -> None:
        assert self.client._parse_credits_html(LEGACY_CREDITS_HTML) == ["Karel Kachyna"]

    def test_modern_layout(self) -> None:
        assert self.client._parse_credits_html(MODERN_CREDITS_HTML) == [
            "Karel Kachyna",
            "Second Director",
        ]

    def test_no_director_section(self) -> None:
        assert self.client._parse_credits_html(title_page(JSON_LD)) == []


class TestParseTitleHtml:
    def setup_method(self) -> None:
        self.client = IMDbClient()

    def test_json_ld(self) -> None:
        record = self.client._parse_title_html("tt0066498", title_page(JSON_LD))
        assert record.title == "The Ear"
        assert record.original_title == "Ucho"
        assert record.release_date == date(1970, 1, 1)
        assert record.detail_year == "1970"
        assert record.overview == "A party official fears his house is bugged."
        assert record.poster_url == "https://m.media-amazon.com/images/ucho.jpg"
        assert record.vote_average == 7.6
        assert record.vote_count == 2345
        assert record.original_language == "cs"
        assert record.directors == ["Karel Kachyňa"]
        assert record.title_type == "movie"

    def test_json_ld_graph(self) -> None:
        graph = {"@context": "https://schema.org", "@graph": [{"@type": "TVEpisode", "name": "Pilot", "datePublished": "2005-03-24"}]}
        record = self.client._parse_title_html("tt0664521", title_page(graph))
        assert record.title_type == "tv-episode"
        assert record.year == "2005"

    def test_year_only_date(self) -> None:
        node = {**JSON_LD, "datePublished": "1970"}
        record = self.client._parse_title_html("tt0066498", title_page(node))
        assert record.year == "1970"
        assert record.release_date is None

    def test_page_title_fallback_keeps_rating(self) -> None:
        node = {"@type": "Movie", "name": "Ucho", "aggregateRating": {"ratingValue": "7.1", "ratingCount": "99"}}
        record = self.client._parse_title_html(
            "tt0066498", title_page(node, page_title="Ucho (TV Movie 1970) - IMDb")
        )
        assert record.title == "Ucho"
        assert record.year == "1970"
        assert record.title_type == "tv-movie"
        assert record.vote_average == 7.1
        assert record.vote_count == 99

    def test_page_title_fallback_with_broken_json_ld(self) -> None:
        html = (
            "<html><head><title>The Office (TV Series 2005–2013) - IMDb</title>"
            '<script type="application/ld+json">{not json</script></head></html>'
        )
        record = self.client._parse_title_html("tt0386676", html)
        assert record.year == "2005"
        assert record.title_type == "tv-series"

    def test_returns_none_without_year(self) -> None:
        html = title_page(None, page_title="IMDb")
        assert self.client._parse_title_html("tt0066498", html) is None
