"""Unit tests for MetadataMerger."""

from datetime import UTC, date, datetime

import pytest

from kinolink.schemas.movie import EnrichedRecord, MergedRecord, SourceRecord
from kinolink.services.metadata_merger import MetadataMerger

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)
EARLIER = datetime(2026, 9, 1, 12, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_source(**overrides) -> SourceRecord:
    values = {
        "source_id": 1,
        "title": "Ucho",
        "original_title": "Ucho",
        "year": "1970",
        "directors": ["Karel Kachyňa"],
        "cast": ["Radoslav Brzobohatý", "Jiřina Bohdalová"],
        "genres": ["Drama"],
        "origin": "Československo / Francie",
        "description": "Stranický funkcionář se vrací z večírku.",
        "poster_url": "https://catalog.example/ucho.jpg",
        "localized_titles": {"angličtina": "The Ear"},
    }
    values.update(overrides)
    return SourceRecord(**values)


def make_tmdb(**overrides) -> EnrichedRecord:
    values = {
        "external_id": "47906",
        "title": "The Ear",
        "original_title": "Ucho",
        "release_date": date(1970, 1, 1),
        "overview": "A party official fears his house is bugged.",
        "poster_url": "https://image.tmdb.org/t/p/original/ucho.jpg",
        "backdrop_url": "https://image.tmdb.org/t/p/original/ucho-backdrop.jpg",
        "vote_average": 7.4,
        "vote_count": 112,
        "popularity": 3.2,
        "original_language": "cs",
        "adult": False,
        "trailer_url": "https://www.youtube.com/watch?v=abc",
        "directors": ["Karel Kachyňa"],
    }
    values.update(overrides)
    return EnrichedRecord(**values)


def make_imdb(**overrides) -> EnrichedRecord:
    values = {
        "external_id": "tt0066498",
        "title": "The Ear",
        "year": "1970",
        "overview": "IMDb synopsis.",
        "vote_average": 7.6,
        "vote_count": 2345,
        "directors": ["Karel Kachyna"],
    }
    values.update(overrides)
    return EnrichedRecord(**values)


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestMerge:
    def setup_method(self) -> None:
        self.merger = MetadataMerger()

    def test_identity_from_confirmed_ids(self) -> None:
        merged = self.merger.merge(make_source(), make_imdb(), make_tmdb(), stored_at=NOW)
        assert merged.source_id == 1
        assert merged.imdb_id == "tt0066498"
        assert merged.tmdb_id == 47906
        assert merged.imdb_url == "https://www.imdb.com/title/tt0066498/"
        assert merged.tmdb_url == "https://www.themoviedb.org/movie/47906"

    def test_explicit_ids_win(self) -> None:
        merged = self.merger.merge(make_source(), imdb_id="tt0066498", tmdb_id=47906)
        assert merged.imdb_id == "tt0066498"
        assert merged.tmdb_id == 47906

    def test_catalog_text_wins(self) -> None:
        merged = self.merger.merge(make_source(), make_imdb(), make_tmdb())
        assert merged.title == "Ucho"
        assert merged.description == "Stranický funkcionář se vrací z večírku."
        assert merged.directors == ["Karel Kachyňa"]
        assert merged.cast == ["Radoslav Brzobohatý", "Jiřina Bohdalová"]
        assert merged.genres == ["Drama"]

    def test_enriched_synopsis_kept_separately(self) -> None:
        merged = self.merger.merge(make_source(), make_imdb(), make_tmdb())
        assert merged.enriched_description == "A party official fears his house is bugged."

    def test_imdb_synopsis_when_tmdb_has_none(self) -> None:
        merged = self.merger.merge(make_source(), make_imdb(), make_tmdb(overview=None))
        assert merged.enriched_description == "IMDb synopsis."

    def test_enriched_text_fills_missing_catalog_text(self) -> None:
        source = make_source(title=None, original_title=None, year=None, directors=[])
        merged = self.merger.merge(source, make_imdb(), make_tmdb())
        assert merged.title == "The Ear"
        assert merged.original_title == "Ucho"
        assert merged.year == "1970"
        assert merged.directors == ["Karel Kachyňa"]

    def test_media_and_statistics_from_tmdb(self) -> None:
        merged = self.merger.merge(make_source(), make_imdb(), make_tmdb())
        assert merged.poster_url == "https://image.tmdb.org/t/p/original/ucho.jpg"
        assert merged.backdrop_url == "https://image.tmdb.org/t/p/original/ucho-backdrop.jpg"
        assert merged.vote_average == 7.4
        assert merged.vote_count == 112
        assert merged.popularity == 3.2
        assert merged.release_date == date(1970, 1, 1)
        assert merged.trailer_url == "https://www.youtube.com/watch?v=abc"

    def test_imdb_rating_stored_separately(self) -> None:
        merged = self.merger.merge(make_source(), make_imdb(), make_tmdb())
        assert merged.imdb_rating == 7.6
        assert merged.imdb_rating_count == 2345

    def test_catalog_poster_always_retained(self) -> None:
        merged = self.merger.merge(make_source(), make_imdb(), make_tmdb())
        assert merged.source_poster_url == "https://catalog.example/ucho.jpg"

    def test_poster_falls_back_to_catalog(self) -> None:
        merged = self.merger.merge(make_source(), make_imdb(), make_tmdb(poster_url=None))
        assert merged.poster_url == "https://catalog.example/ucho.jpg"

    def test_origin_countries_split(self) -> None:
        merged = self.merger.merge(make_source())
        assert merged.origin_countries == ["Československo", "Francie"]

    def test_origin_country_codes(self) -> None:
        merged = self.merger.merge(make_source(origin="Česká republika"))
        assert merged.origin_country_codes == ["CZ"]

    def test_origin_country_codes_keep_catalog_order(self) -> None:
        merged = self.merger.merge(make_source(origin="USA / Československo"))
        assert merged.origin_country_codes == ["US", "CS"]

    def test_origin_country_codes_empty_without_origin(self) -> None:
        merged = self.merger.merge(make_source(origin=None))
        assert merged.origin_country_codes == []

    def test_stored_at_from_argument(self) -> None:
        merged = self.merger.merge(make_source(), stored_at=NOW)
        assert merged.stored_at == NOW

    def test_catalog_only(self) -> None:
        merged = self.merger.merge(make_source())
        assert merged.imdb_id is None
        assert merged.tmdb_id is None
        assert merged.enriched_description is None
        assert merged.poster_url == "https://catalog.example/ucho.jpg"

    def test_is_deterministic(self) -> None:
        args = (make_source(), make_imdb(), make_tmdb())
        first = self.merger.merge(*args, stored_at=NOW)
        second = self.merger.merge(*args, stored_at=NOW)
        assert first == second

    def test_rejects_previous_record_of_other_film(self) -> None:
        with pytest.raises(ValueError):
            self.merger.merge(make_source(), previous=MergedRecord(source_id=2))


# ---------------------------------------------------------------------------
# Back-fill
# ---------------------------------------------------------------------------


class TestBackfill:
    def setup_method(self) -> None:
        self.merger = MetadataMerger()
        self.previous = self.merger.merge(make_source(), make_imdb(), make_tmdb(), stored_at=EARLIER)

    def test_partial_fetch_never_erases_known_data(self) -> None:
        merged = self.merger.merge(make_source(), previous=self.previous, stored_at=NOW)
        assert merged.imdb_id == "tt0066498"
        assert merged.tmdb_id == 47906
        assert merged.poster_url == "https://image.tmdb.org/t/p/original/ucho.jpg"
        assert merged.trailer_url == "https://www.youtube.com/watch?v=abc"
        assert merged.backdrop_url == "https://image.tmdb.org/t/p/original/ucho-backdrop.jpg"
        assert merged.vote_average == 7.4
        assert merged.imdb_rating == 7.6
        assert merged.release_date == date(1970, 1, 1)
        assert merged.enriched_description == "A party official fears his house is bugged."
        assert merged.origin_country_codes == ["CS", "FR"]

    def test_tmdb_values_outrank_imdb_when_tmdb_missing(self) -> None:
        merged = self.merger.merge(
            make_source(),
            make_imdb(trailer_url="https://www.imdb.com/video/vi123"),
            previous=self.previous,
            stored_at=NOW,
        )
        assert merged.enriched_description == "A party official fears his house is bugged."
        assert merged.trailer_url == "https://www.youtube.com/watch?v=abc"
        assert merged.poster_url == "https://image.tmdb.org/t/p/original/ucho.jpg"
        assert merged.original_language == "cs"
        assert merged.release_date == date(1970, 1, 1)
        assert merged.imdb_rating == 7.6

    def test_catalog_poster_fallback_not_carried(self) -> None:
        previous = self.merger.merge(
            make_source(), make_imdb(), make_tmdb(poster_url=None), stored_at=EARLIER
        )
        merged = self.merger.merge(
            make_source(poster_url="https://catalog.example/ucho-2.jpg"),
            previous=previous,
        )
        assert merged.poster_url == "https://catalog.example/ucho-2.jpg"

    def test_previous_values_ignored_when_tmdb_fetched(self) -> None:
        merged = self.merger.merge(
            make_source(),
            make_imdb(),
            make_tmdb(overview=None),
            previous=self.previous,
        )
        assert merged.enriched_description == "IMDb synopsis."

    def test_fresh_values_replace_previous(self) -> None:
        merged = self.merger.merge(
            make_source(),
            make_imdb(),
            make_tmdb(vote_average=8.1),
            previous=self.previous,
            stored_at=NOW,
        )
        assert merged.vote_average == 8.1

    def test_empty_catalog_lists_backfilled(self) -> None:
        merged = self.merger.merge(make_source(cast=[], genres=[]), previous=self.previous)
        assert merged.cast == ["Radoslav Brzobohatý", "Jiřina Bohdalová"]
        assert merged.genres == ["Drama"]

    def test_stored_at_not_backfilled(self) -> None:
        merged = self.merger.merge(make_source(), previous=self.previous)
        assert merged.stored_at is None

    def test_merging_onto_itself_is_stable(self) -> None:
        again = self.merger.merge(
            make_source(), make_imdb(), make_tmdb(), previous=self.previous, stored_at=EARLIER
        )
        assert again == self.previous
