"""
App bootstrap.
Builds the Data Connect handle (redirected to the emulator when
DATA_CONNECT_EMULATOR_HOST is set), the auth session, the persisted-state
store, the one-time profile sync, and the search-enabled generative model.
"""

from dataclasses import dataclass  # app context container
from typing import Any, Optional  # type hints

import requests  # shared HTTP session

# Google GenAI SDK for the grounded generative model
from google import genai  # Gemini client
from google.genai import types  # request configuration types

from loguru import logger  # console logger

from .auth import Auth, AuthUser
from .config import SAVED_USER_KEY, SEARCH_MODEL_NAME, Settings
from .data_connect import DataConnect, execute_mutation, parse_emulator_host, set_data_connect
from .errors import MovieHubError
from .generated import CONNECTOR_CONFIG, UPDATE_USER
from .state import JsonFileStateStore, StateStore


def data_connect_for(
	settings: Settings,
	session: Optional[requests.Session] = None,
	token_provider=None,
) -> DataConnect:
	"""Create the app's Data Connect handle and install it as the process-wide default."""
	dc = DataConnect(
		settings.project_id,
		CONNECTOR_CONFIG,
		session=session,
		api_key=settings.api_key,
		token_provider=token_provider,
		timeout=settings.http_timeout,
	)
	if settings.emulator_host:
		host, port = parse_emulator_host(settings.emulator_host)
		dc.connect_emulator(host, port, ssl=False)
	return set_data_connect(dc)


class SearchEnabledModel:
	"""
	Gemini model with the Google Search tool enabled.
	The client is created lazily so a missing API key surfaces as a search error, not a startup crash.
	"""

	def __init__(self, api_key: Optional[str] = None, model_name: str = SEARCH_MODEL_NAME, client: Any = None):
		self.api_key = api_key
		self.model_name = model_name
		self._client = client

	@property
	def client(self):
		if self._client is None:
			self._client = genai.Client(api_key=self.api_key) if self.api_key else genai.Client()
		return self._client

	def generate_content(self, prompt: str):
		config = types.GenerateContentConfig(
			tools=[types.Tool(google_search=types.GoogleSearch())],
		)
		logger.debug(f"[AI] generate_content model={self.model_name} prompt_chars={len(prompt)}")
		return self.client.models.generate_content(model=self.model_name, contents=prompt, config=config)


def get_search_enabled_model(settings: Optional[Settings] = None) -> SearchEnabledModel:
	settings = settings or Settings.from_env()
	return SearchEnabledModel(api_key=settings.gemini_api_key)


class ProfileSync:
	"""
	Auth-state listener that saves the user's profile once per store.
	The first signed-in user triggers a single UpdateUser mutation; the
	savedUser flag then stops it from repeating.
	"""

	def __init__(self, dc: DataConnect, store: StateStore):
		self.dc = dc
		self.store = store

	def __call__(self, user: Optional[AuthUser]):
		if user is None or self.store.get(SAVED_USER_KEY):
			return
		variables = {
			"username": user.username or user.uid,
			"displayName": user.display_name,
			"imageUrl": user.photo_url,
		}
		try:
			execute_mutation(UPDATE_USER.ref_with_client(self.dc, variables))
		except MovieHubError as e:
			logger.error(f"[ProfileSync] Could not save profile for {variables['username']}: {e}")
			return
		self.store.set(SAVED_USER_KEY, "true")
		logger.info(f"[ProfileSync] Saved profile for {variables['username']}")


@dataclass
class AppContext:
	"""Everything the API and UI need, built once per process."""
	settings: Settings
	dc: DataConnect
	auth: Auth
	store: StateStore
	profile_sync: ProfileSync
	model: Any = None  # generative model override; built from settings when None

	def search_model(self):
		if self.model is None:
			self.model = get_search_enabled_model(self.settings)
		return self.model


def initialize_app(
	settings: Optional[Settings] = None,
	store: Optional[StateStore] = None,
	session: Optional[requests.Session] = None,
) -> AppContext:
	"""Wire the handle, auth session, state store and profile sync together."""
	settings = settings or Settings.from_env()
	auth = Auth(api_key=settings.api_key, session=session, timeout=settings.http_timeout)
	dc = data_connect_for(settings, session=session, token_provider=auth.id_token)
	store = store or JsonFileStateStore(settings.state_path)
	profile_sync = ProfileSync(dc, store)
	auth.on_auth_state_changed(profile_sync)
	logger.info(
		f"[App] Initialized project={settings.project_id} "
		f"backend={'emulator ' + dc.origin if dc.is_emulator else 'production'}"
	)
	return AppContext(settings=settings, dc=dc, auth=auth, store=store, profile_sync=profile_sync)
