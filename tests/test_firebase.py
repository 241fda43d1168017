"""
Tests for app bootstrap: emulator wiring, the one-time profile sync and the state stores.
Run: pytest tests/test_firebase.py
"""

from conftest import FakeResponse, FakeSession, ok
from moviehub.auth import AuthUser
from moviehub.config import Settings
from moviehub.data_connect import get_data_connect
from moviehub.firebase import ProfileSync, initialize_app
from moviehub.generated import CONNECTOR_CONFIG
from moviehub.state import JsonFileStateStore, MemoryStateStore

ADA = AuthUser(uid="u1", email="ada@example.com", display_name="Ada", photo_url="https://img/ada.png", id_token="tok")


def test_settings_from_env(monkeypatch, tmp_path):
	monkeypatch.setenv("DATA_CONNECT_EMULATOR_HOST", "localhost")
	monkeypatch.setenv("MOVIEHUB_STATE_PATH", str(tmp_path / "state.json"))
	monkeypatch.setenv("MOVIEHUB_HTTP_TIMEOUT", "not-a-number")
	settings = Settings.from_env()
	assert settings.project_id == "test-project"
	assert settings.emulator_host == "localhost"
	assert settings.state_path == tmp_path / "state.json"
	assert settings.http_timeout == 30.0
	assert not hasattr(settings, "api_url")  # the UI talks to the controllers directly


def test_initialize_app_uses_emulator_and_installs_default():
	session = FakeSession()
	ctx = initialize_app(Settings(project_id="demo", emulator_host="localhost"), store=MemoryStateStore(), session=session)
	assert ctx.dc.origin == "http://localhost:9399"
	assert get_data_connect(CONNECTOR_CONFIG) is ctx.dc
	assert ctx.auth.current_user is None
	assert session.posts == []  # nobody signed in yet


def test_profile_saved_once_per_store():
	session = FakeSession(ok({"user_upsert": {"id": "u1"}}))
	store = MemoryStateStore()
	ctx = initialize_app(Settings(project_id="demo"), store=store, session=session)

	ctx.auth.sign_in(ADA)
	ctx.auth.sign_out()
	ctx.auth.sign_in(ADA)

	assert len(session.posts) == 1
	body = session.posts[0]["json"]
	assert body["operationName"] == "UpdateUser"
	assert body["variables"] == {"username": "ada", "displayName": "Ada", "imageUrl": "https://img/ada.png"}
	assert session.posts[0]["headers"]["Authorization"] == "Bearer tok"
	assert store.get("savedUser") == "true"


def test_flag_not_set_when_mutation_fails(dc, session):
	session.responses = [FakeResponse(503, text="unavailable")]
	store = MemoryStateStore()
	ProfileSync(dc, store)(ADA)
	assert store.get("savedUser") is None

	session.responses = [ok({})]
	ProfileSync(dc, store)(ADA)
	assert store.get("savedUser") == "true"
	assert len(session.posts) == 2


def test_existing_flag_skips_mutation(dc, session):
	ProfileSync(dc, MemoryStateStore({"savedUser": "true"}))(ADA)
	ProfileSync(dc, MemoryStateStore())(None)
	assert session.posts == []


def test_json_file_store_persists(tmp_path):
	path = tmp_path / "nested" / "state.json"
	store = JsonFileStateStore(path)
	assert store.get("savedUser") is None
	store.set("savedUser", "true")
	assert JsonFileStateStore(path).get("savedUser") == "true"
	store.delete("savedUser")
	assert JsonFileStateStore(path).get("savedUser") is None


def test_json_file_store_ignores_corrupt_file(tmp_path):
	path = tmp_path / "state.json"
	path.write_text("{not json", encoding="utf-8")
	store = JsonFileStateStore(path)
	assert store.get("savedUser") is None
	store.set("savedUser", "true")
	assert store.get("savedUser") == "true"
