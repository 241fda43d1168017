"""
Tests for the Browse page: filter URL encoding, query variables and the page controller.
Run: pytest tests/test_browse.py
"""

import pytest

from conftest import FakeResponse, ok
from moviehub.browse import (
	EMPTY_MESSAGE,
	ERROR_MESSAGE,
	BrowseFilters,
	BrowsePage,
	browse_url,
	suggest_genre,
)
from moviehub.errors import InvalidArgumentError
from moviehub.page_state import ViewStatus


def test_query_params_round_trip():
	filters = BrowseFilters(title="star", min_year="1990", max_year="1999", min_rating=4, genres=("Sci-Fi", "Drama"))
	params = filters.to_query_params()
	assert params == {
		"title": "star",
		"minYear": "1990",
		"maxYear": "1999",
		"minRating": "4",
		"genres": "Sci-Fi,Drama",
	}
	assert BrowseFilters.from_query_params(params) == filters
	assert BrowseFilters.from_query_string(filters.to_query_string()) == filters


def test_empty_filters_make_bare_url():
	assert BrowseFilters().to_query_params() == {}
	assert browse_url(BrowseFilters()) == "/browse"
	assert browse_url(BrowseFilters(title="alien")) == "/browse?title=alien"


def test_query_variables_double_rating_and_expand_years():
	filters = BrowseFilters(title="matrix", min_year="1999", max_year="2003", min_rating=3, genres=("Action",))
	assert filters.to_query_variables() == {
		"partialTitle": "matrix",
		"minDate": "1999-01-01",
		"maxDate": "2003-12-31",
		"minRating": 6,
		"genres": ["Action"],
	}
	assert BrowseFilters().to_query_variables() == {}


def test_star_toggle_clears_same_rating():
	filters = BrowseFilters().toggle_rating(3)
	assert filters.min_rating == 3
	assert filters.toggle_rating(4).min_rating == 4
	assert filters.toggle_rating(3).min_rating is None


def test_genre_toggle():
	filters = BrowseFilters().toggle_genre("Drama", True).toggle_genre("Comedy", True)
	assert filters.genres == ("Drama", "Comedy")
	assert filters.toggle_genre("Drama", True).genres == ("Drama", "Comedy")
	assert filters.toggle_genre("Drama", False).genres == ("Comedy",)


def test_bad_rating_in_url_is_ignored():
	assert BrowseFilters.from_query_params({"minRating": "lots"}).min_rating is None
	assert BrowseFilters.from_query_params({"minRating": "9"}).min_rating is None
	assert BrowseFilters.from_query_params({"minRating": ["2"]}).min_rating == 2


@pytest.mark.parametrize("raw", ["inf", "-inf", "nan", "1e400"])
def test_non_finite_rating_in_url_is_ignored(dc, session, raw):
	session.responses = [ok({"movies": []})]
	page = BrowsePage(dc)
	page.load({"minRating": raw, "title": "heat"})
	assert page.filters.min_rating is None
	assert session.posts[0]["json"]["variables"] == {"partialTitle": "heat"}
	assert page.state.status == ViewStatus.SUCCESS


def test_rating_filter_is_coerced_to_int():
	assert BrowseFilters().with_filter("min_rating", "3").to_query_variables() == {"minRating": 6}
	assert BrowseFilters().with_filter("min_rating", 4.0).min_rating == 4
	for bad in ("three", 2.5, 0, 6):
		with pytest.raises(InvalidArgumentError):
			BrowseFilters().with_filter("min_rating", bad)


def test_genres_survive_round_trip_unchanged():
	filters = BrowseFilters(genres=("Musicals", "drama", "Sci-Fi"))
	assert BrowseFilters.from_query_string(filters.to_query_string()) == filters
	assert filters.to_query_variables() == {"genres": ["Musicals", "drama", "Sci-Fi"]}
	parsed = BrowseFilters.from_query_params({"genres": " science fiction,Sci-Fi, Sci-Fi"})
	assert parsed.genres == ("science fiction", "Sci-Fi")


def test_genre_suggestions():
	assert suggest_genre("sci fi") == "Sci-Fi"
	assert suggest_genre("ACTION") == "Action"
	assert suggest_genre("thriler") == "Thriller"  # close typo
	assert suggest_genre("Documentary") is None
	assert suggest_genre("Drama") is None  # already offered
	filters = BrowseFilters(genres=("Musicals", "Drama", "Documentary"))
	assert filters.genre_suggestions() == {"Musicals": "Musical"}


def test_load_runs_browse_movies_with_variables(dc, session):
	session.responses = [ok({"movies": [{"id": "m1", "title": "Alien", "releaseDate": "1979-05-25", "rating": 8.5}]})]
	page = BrowsePage(dc)
	movies = page.load({"title": "ali", "minRating": "4"})

	body = session.posts[0]["json"]
	assert body["operationName"] == "BrowseMovies"
	assert body["variables"] == {"partialTitle": "ali", "minRating": 8}
	assert [m.title for m in movies] == ["Alien"]
	assert movies[0].release_year == 1979
	assert page.state.status == ViewStatus.SUCCESS
	assert page.pending == page.filters
	assert not page.is_empty


def test_empty_result_offers_reset(dc, session):
	session.responses = [ok({"movies": []})]
	page = BrowsePage(dc)
	page.load({"genres": "Western", "minYear": "2030"})
	assert page.is_empty
	assert EMPTY_MESSAGE
	assert page.reset() == "/browse"
	assert page.pending.is_empty()
	assert page.apply() == "/browse"


def test_backend_failure_shows_generic_error(dc, session):
	session.responses = [FakeResponse(500, text="internal")]
	page = BrowsePage(dc)
	assert page.load({}) == []
	assert page.state.status == ViewStatus.ERROR
	assert page.state.error == ERROR_MESSAGE
	assert not page.is_empty


def test_stale_response_is_discarded(dc):
	page = BrowsePage(dc)
	first_token, _ = page.start({"title": "old"})
	second_token, variables = page.start({"title": "new"})
	assert variables == {"partialTitle": "new"}

	assert page.finish(second_token, [])
	assert not page.finish(first_token, ["stale"])
	assert page.movies == []
	assert page.filters.title == "new"


def test_pending_filters_build_next_url(dc):
	page = BrowsePage(dc)
	page.update_pending("title", "dune")
	page.select_rating(5)
	page.select_genre("Sci-Fi", True)
	assert page.apply() == "/browse?title=dune&minRating=5&genres=Sci-Fi"
	page.update_pending("title", "")
	assert page.pending.title is None
