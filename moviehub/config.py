"""
Configuration for MovieHub.
Static connector/model constants plus a Settings object read from the environment.
"""

# Standard libs for environment access and paths
import os  # read environment variables
from dataclasses import dataclass, field  # simple settings container
from pathlib import Path  # default location of persisted state
from typing import Optional  # optional settings

# Connector descriptor values; must match the server-side deployment exactly
CONNECTOR_ID = "connector"  # connector name inside the service
SERVICE_ID = "app"  # Data Connect service id
LOCATION = "us-central1"  # deployment region

# Version reported in the x-goog-api-client header
SDK_VERSION = "0.1.0"

# Production endpoint and local emulator port
DATA_CONNECT_ORIGIN = "https://firebasedataconnect.googleapis.com"  # production origin
DATA_CONNECT_API_VERSION = "v1"  # REST API version segment
EMULATOR_PORT = 9399  # fixed Data Connect emulator port

# Identity Toolkit endpoint used for email/password sign-in
IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"

# Generative model used by the Find Theatres page (Google Search grounded)
SEARCH_MODEL_NAME = "gemini-3-pro-preview"

# Key of the persisted flag that gates the one-time profile sync
SAVED_USER_KEY = "savedUser"


def _env_float(name: str, default: float) -> float:
	"""Read a float from the environment, falling back to the default when unset or malformed."""
	raw = os.getenv(name)
	if not raw:
		return default
	try:
		return float(raw)
	except ValueError:
		return default


@dataclass
class Settings:
	"""
	Runtime settings for the app, API and UI.
	Values come from environment variables; see from_env().
	"""
	project_id: str = "demo-moviehub"  # Firebase project id
	api_key: Optional[str] = None  # Firebase web API key (Identity Toolkit)
	emulator_host: Optional[str] = None  # DATA_CONNECT_EMULATOR_HOST when set
	gemini_api_key: Optional[str] = None  # key for the generative model
	state_path: Path = field(default_factory=lambda: Path.home() / ".moviehub" / "state.json")  # persisted flags
	http_timeout: float = 30.0  # seconds per Data Connect request

	@classmethod
	def from_env(cls) -> "Settings":
		"""Build settings from the process environment."""
		defaults = cls()  # baseline values
		state_path = os.getenv("MOVIEHUB_STATE_PATH")
		return cls(
			project_id=os.getenv("FIREBASE_PROJECT_ID", defaults.project_id),
			api_key=os.getenv("FIREBASE_API_KEY") or None,
			emulator_host=os.getenv("DATA_CONNECT_EMULATOR_HOST") or None,
			gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or None,
			state_path=Path(state_path) if state_path else defaults.state_path,
			http_timeout=_env_float("MOVIEHUB_HTTP_TIMEOUT", defaults.http_timeout),
		)
