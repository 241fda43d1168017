"""
Tests for the typed operation layer: reference names, call shapes and variable checks.
Run: pytest tests/test_generated.py
"""

import pytest

from conftest import ok
from moviehub import generated
from moviehub.data_connect import MUTATION, QUERY, set_data_connect
from moviehub.errors import InvalidArgumentError


@pytest.mark.parametrize("name", sorted(generated.OPERATIONS))
def test_ref_builders_carry_wire_names(name):
	op = generated.OPERATIONS[name]
	snake = "".join("_" + c.lower() if c.isupper() else c for c in name).lstrip("_")
	builder = getattr(generated, f"{snake}_ref")
	assert builder.operation_name == name
	assert callable(getattr(generated, snake))
	assert op.kind in (QUERY, MUTATION)


def test_both_call_shapes_build_equal_refs(dc):
	set_data_connect(dc)
	explicit = generated.movie_page_ref(dc, {"id": "m1"})
	implicit = generated.movie_page_ref({"id": "m1"})
	assert explicit == implicit
	assert implicit.client is dc
	assert explicit.kind == QUERY
	assert explicit.variables == {"id": "m1"}


def test_explicit_call_shape_methods(dc):
	set_data_connect(dc)
	with_client = generated.SEARCH_MOVIES.ref_with_client(dc, {"query": "alien"})
	without_client = generated.SEARCH_MOVIES.ref_without_client({"query": "alien"})
	assert with_client == without_client
	with pytest.raises(InvalidArgumentError):
		generated.SEARCH_MOVIES.ref_with_client({"query": "alien"})


def test_default_handle_created_from_environment():
	ref = generated.get_movies_ref({"limit": 3})
	assert ref.client.project_id == "test-project"


def test_builder_marks_generated_sdk(dc):
	assert not dc.is_generated_sdk
	generated.home_page_ref(dc)
	assert dc.is_generated_sdk


def test_missing_required_variables_never_reach_network(dc, session):
	with pytest.raises(InvalidArgumentError, match="Variables required."):
		generated.add_watch(dc)
	with pytest.raises(InvalidArgumentError, match="watchDate"):
		generated.add_watch(dc, {"movieId": "m1"})
	with pytest.raises(InvalidArgumentError):
		generated.movie_page(dc, {"id": None})
	assert session.posts == []


def test_unknown_variables_rejected(dc, session):
	with pytest.raises(InvalidArgumentError, match="unknown"):
		generated.browse_movies(dc, {"partialTitle": "x", "director": "y"})
	assert session.posts == []


def test_no_variable_operations_reject_variables(dc):
	with pytest.raises(InvalidArgumentError):
		generated.HOME_PAGE.ref(dc, {"x": 1})
	with pytest.raises(InvalidArgumentError):
		generated.DETAILED_WATCH_HISTORY.ref_with_client(dc, {"x": 1})


def test_optional_only_operations_accept_no_variables(dc, session):
	session.responses = [ok({"watches": []})]
	result = generated.watch_history_page(dc)
	assert result.data == {"watches": []}
	assert session.posts[0]["json"]["variables"] == {}


def test_executor_sends_mutation(dc, session):
	session.responses = [ok({"review_insert": {"id": "r1"}})]
	result = generated.add_review(dc, {"movieId": "m1", "rating": 8, "reviewText": "Great"})
	post = session.posts[0]
	assert post["url"].endswith(":executeMutation")
	assert post["json"]["operationName"] == "AddReview"
	assert "py/gen" in post["headers"]["x-goog-api-client"]
	assert result.data["review_insert"]["id"] == "r1"


def test_operation_execute_picks_executor(dc, session):
	generated.UPDATE_USER.execute(dc, {"username": "ada"})
	generated.GET_MOVIES.execute(dc)
	assert session.posts[0]["url"].endswith(":executeMutation")
	assert session.posts[1]["url"].endswith(":executeQuery")


def test_builders_without_client_follow_emulator_variable(monkeypatch):
	monkeypatch.setenv("DATA_CONNECT_EMULATOR_HOST", "127.0.0.1:9500")
	ref = generated.get_movies_ref({"limit": 3})
	assert ref.client.origin == "http://127.0.0.1:9500"
	assert generated.HOME_PAGE.ref_without_client().client is ref.client
