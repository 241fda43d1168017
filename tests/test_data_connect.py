"""
Tests for the Data Connect client: endpoints, headers, executors and error mapping.
Run: pytest tests/test_data_connect.py
"""

import pytest
import requests

from conftest import FakeResponse, FakeSession, ok
from moviehub.data_connect import (
	DataConnect,
	execute_mutation,
	execute_query,
	get_data_connect,
	mutation_ref,
	parse_emulator_host,
	query_ref,
	set_data_connect,
	validate_args,
)
from moviehub.errors import AuthorizationError, InvalidArgumentError, NetworkError, ValidationError
from moviehub.generated import CONNECTOR_CONFIG

RESOURCE = "projects/test-project/locations/us-central1/services/app/connectors/connector"


def test_production_endpoint_and_body(dc, session):
	session.responses = [ok({"movies": []})]
	result = execute_query(query_ref(dc, "GetMovies", {"limit": 5}))

	post = session.posts[0]
	assert post["url"] == f"https://firebasedataconnect.googleapis.com/v1/{RESOURCE}:executeQuery"
	assert post["json"] == {"name": RESOURCE, "operationName": "GetMovies", "variables": {"limit": 5}}
	assert result.data == {"movies": []}
	assert result.source == "SERVER"
	assert result.ref.name == "GetMovies"


def test_mutation_endpoint(dc, session):
	execute_mutation(mutation_ref(dc, "DeleteWatch", {"watchId": "w1"}))
	assert session.posts[0]["url"].endswith(":executeMutation")


def test_emulator_redirect(dc, session):
	dc.connect_emulator("localhost")
	execute_query(query_ref(dc, "HomePage"))
	assert session.posts[0]["url"].startswith("http://localhost:9399/v1/")
	assert dc.is_emulator


def test_emulator_cannot_be_connected_after_first_operation(dc):
	execute_query(query_ref(dc, "HomePage"))
	with pytest.raises(InvalidArgumentError):
		dc.connect_emulator("localhost")


def test_headers_carry_token_and_generated_marker(session):
	dc = DataConnect("test-project", CONNECTOR_CONFIG, session=session, api_key="k", token_provider=lambda: "tok")
	headers = dc.headers()
	assert headers["Authorization"] == "Bearer tok"
	assert headers["X-Goog-Api-Key"] == "k"
	assert "py/gen" not in headers["x-goog-api-client"]

	dc.use_generated_sdk()
	assert "py/gen" in dc.headers()["x-goog-api-client"]


def test_with_token_keeps_origin(dc):
	dc.connect_emulator("127.0.0.1", 9000)
	clone = dc.with_token("abc")
	assert clone.origin == "http://127.0.0.1:9000"
	assert clone.headers()["Authorization"] == "Bearer abc"
	assert "Authorization" not in dc.headers()


def test_empty_project_id_rejected():
	with pytest.raises(InvalidArgumentError):
		DataConnect("", CONNECTOR_CONFIG)


def test_kind_mismatch_rejected(dc, session):
	with pytest.raises(InvalidArgumentError):
		execute_query(mutation_ref(dc, "AddWatch", {"movieId": "m", "watchDate": "2024-01-01"}))
	with pytest.raises(InvalidArgumentError):
		execute_mutation(query_ref(dc, "HomePage"))
	assert session.posts == []


@pytest.mark.parametrize(
	"response, error",
	[
		(FakeResponse(401, {"error": {"message": "unauthenticated"}}), AuthorizationError),
		(FakeResponse(403, {"error": {"message": "denied"}}), AuthorizationError),
		(FakeResponse(400, {"error": {"message": "bad variables"}}), ValidationError),
		(FakeResponse(200, {"data": None, "errors": [{"message": "field not found"}]}), ValidationError),
		(FakeResponse(500, text="boom"), NetworkError),
		(FakeResponse(200, text="<html>"), NetworkError),
	],
)
def test_error_mapping(dc, session, response, error):
	session.responses = [response]
	with pytest.raises(error):
		execute_query(query_ref(dc, "HomePage"))


def test_transport_failure_is_network_error(dc, session):
	session.responses = [requests.ConnectionError("connection refused")]
	with pytest.raises(NetworkError):
		execute_query(query_ref(dc, "HomePage"))


def test_validation_error_keeps_backend_errors(dc, session):
	session.responses = [FakeResponse(200, {"errors": [{"message": "nope"}]})]
	with pytest.raises(ValidationError) as info:
		execute_query(query_ref(dc, "HomePage"))
	assert info.value.errors == [{"message": "nope"}]
	assert "nope" in str(info.value)


def test_registry_returns_same_handle():
	first = get_data_connect(CONNECTOR_CONFIG, session=FakeSession())
	assert get_data_connect(CONNECTOR_CONFIG) is first
	assert first.project_id == "test-project"  # from FIREBASE_PROJECT_ID


def test_set_data_connect_replaces_default(dc):
	set_data_connect(dc)
	assert get_data_connect(CONNECTOR_CONFIG) is dc


def test_validate_args_shapes(dc):
	assert validate_args(CONNECTOR_CONFIG, dc, {"a": 1}) == (dc, {"a": 1})
	set_data_connect(dc)
	assert validate_args(CONNECTOR_CONFIG, {"a": 1}) == (dc, {"a": 1})
	assert validate_args(CONNECTOR_CONFIG) == (dc, None)

	with pytest.raises(InvalidArgumentError, match="Variables required."):
		validate_args(CONNECTOR_CONFIG, dc, None, validate_vars=True)
	with pytest.raises(InvalidArgumentError):
		validate_args(CONNECTOR_CONFIG, {"a": 1}, {"b": 2})
	with pytest.raises(InvalidArgumentError):
		validate_args(CONNECTOR_CONFIG, "not a client")
	with pytest.raises(InvalidArgumentError):
		validate_args(CONNECTOR_CONFIG, dc, ["not", "a", "mapping"])


def test_parse_emulator_host():
	assert parse_emulator_host("localhost") == ("localhost", 9399)
	assert parse_emulator_host("127.0.0.1:9400") == ("127.0.0.1", 9400)
	assert parse_emulator_host(" dc-emulator ") == ("dc-emulator", 9399)


def test_default_handle_honours_emulator_variable(monkeypatch):
	monkeypatch.setenv("DATA_CONNECT_EMULATOR_HOST", "localhost")
	session = FakeSession(ok({"movies": []}))
	dc = get_data_connect(CONNECTOR_CONFIG, session=session)
	assert dc.is_emulator
	assert dc.origin == "http://localhost:9399"

	execute_query(query_ref(dc, "GetMovies"))
	assert session.posts[0]["url"].startswith("http://localhost:9399/v1/")


def test_default_handle_uses_production_without_emulator_variable():
	assert get_data_connect(CONNECTOR_CONFIG).origin == "https://firebasedataconnect.googleapis.com"
