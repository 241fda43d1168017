"""
Firebase Data Connect client.
Holds the client handle, builds operation references, and executes them over
the Data Connect REST API with requests.

Endpoints:
- POST {origin}/v1/{connector}:executeQuery
- POST {origin}/v1/{connector}:executeMutation

No retry policy lives here; callers decide whether to re-submit.
"""

# Standard libs for typing and mappings
from typing import Any, Callable, Dict, Mapping, Optional, Tuple  # type hints

# HTTP client used for every network round-trip
import requests  # blocking HTTP client

# Console logging
from loguru import logger  # console logger

from .config import (
	DATA_CONNECT_API_VERSION,
	DATA_CONNECT_ORIGIN,
	EMULATOR_PORT,
	SDK_VERSION,
	Settings,
)
from .errors import AuthorizationError, InvalidArgumentError, NetworkError, ValidationError
from .models import ConnectorConfig, OperationRef, OperationResult

QUERY = "query"
MUTATION = "mutation"

# Status codes the backend uses to reject the operation itself
_VALIDATION_STATUSES = {400, 404, 422}
_AUTH_STATUSES = {401, 403}

# Process-wide handles, one per connector descriptor
_INSTANCES: Dict[ConnectorConfig, "DataConnect"] = {}


class DataConnect:
	"""
	Client handle for one Data Connect connector.
	Knows where to send requests (production or emulator) and how to authenticate.
	"""

	def __init__(
		self,
		project_id: str,
		connector_config: ConnectorConfig,
		session: Optional[requests.Session] = None,
		api_key: Optional[str] = None,
		token_provider: Optional[Callable[[], Optional[str]]] = None,
		timeout: float = 30.0,
	):
		if not project_id:
			raise InvalidArgumentError("project_id is required to reach Data Connect")
		self.project_id = project_id  # Firebase project
		self.connector_config = connector_config  # immutable descriptor
		self.session = session or requests.Session()  # pooled HTTP session
		self.api_key = api_key  # optional web API key
		self.token_provider = token_provider  # returns a Firebase ID token or None
		self.timeout = timeout  # per-request timeout in seconds
		self.origin = DATA_CONNECT_ORIGIN  # production unless redirected
		self.is_emulator = False  # set by connect_emulator
		self.is_generated_sdk = False  # usage-tracking flag
		self._initialized = False  # flips on the first executed operation

	def connect_emulator(self, host: str, port: int = EMULATOR_PORT, ssl: bool = False):
		"""Redirect every later operation to a local emulator."""
		if self._initialized:
			raise InvalidArgumentError("Cannot connect to the emulator after operations have been executed")
		scheme = "https" if ssl else "http"
		self.origin = f"{scheme}://{host}:{port}"
		self.is_emulator = True
		logger.info(f"[DataConnect] Using emulator at {self.origin}")

	def use_generated_sdk(self):
		"""Mark this handle as driven by the generated operation layer (telemetry only)."""
		self.is_generated_sdk = True

	def with_token(self, token: Optional[str]) -> "DataConnect":
		"""Copy of this handle that authenticates as a specific caller (per-request use)."""
		clone = DataConnect(
			self.project_id,
			self.connector_config,
			session=self.session,
			api_key=self.api_key,
			token_provider=lambda: token,
			timeout=self.timeout,
		)
		clone.origin = self.origin
		clone.is_emulator = self.is_emulator
		clone.is_generated_sdk = self.is_generated_sdk
		return clone

	@property
	def resource_name(self) -> str:
		return self.connector_config.resource_name(self.project_id)

	def endpoint(self, kind: str) -> str:
		"""REST URL for executing a query or mutation against this connector."""
		action = "executeQuery" if kind == QUERY else "executeMutation"
		return f"{self.origin}/{DATA_CONNECT_API_VERSION}/{self.resource_name}:{action}"

	def headers(self) -> Dict[str, str]:
		"""Request headers: content type, client telemetry, and credentials."""
		client = f"gl-python/ fire/{SDK_VERSION}"
		if self.is_generated_sdk:
			client += " py/gen"
		headers = {
			"Content-Type": "application/json",
			"x-goog-api-client": client,
		}
		if self.api_key:
			headers["X-Goog-Api-Key"] = self.api_key
		token = self.token_provider() if self.token_provider else None
		if token:
			headers["Authorization"] = f"Bearer {token}"
		return headers


def parse_emulator_host(value: str) -> Tuple[str, int]:
	"""Split 'host' or 'host:port'; a bare host uses the fixed emulator port."""
	host, sep, port = value.strip().rpartition(":")
	if sep and port.isdigit() and host:
		return host, int(port)
	return value.strip(), EMULATOR_PORT


def get_data_connect(
	connector_config: ConnectorConfig,
	project_id: Optional[str] = None,
	**kwargs,
) -> DataConnect:
	"""
	Return the process-wide handle for a connector, creating it on first use.
	project_id falls back to FIREBASE_PROJECT_ID from the environment, and a new
	handle honours DATA_CONNECT_EMULATOR_HOST.
	"""
	existing = _INSTANCES.get(connector_config)
	if existing is not None:
		return existing
	settings = Settings.from_env()
	if project_id is None:
		project_id = settings.project_id
	dc = DataConnect(project_id, connector_config, **kwargs)
	if settings.emulator_host:
		host, port = parse_emulator_host(settings.emulator_host)
		dc.connect_emulator(host, port, ssl=False)
	_INSTANCES[connector_config] = dc
	logger.debug(f"[DataConnect] Created handle for {dc.resource_name}")
	return dc


def set_data_connect(dc: DataConnect) -> DataConnect:
	"""Install dc as the process-wide handle for its connector (used by app bootstrap)."""
	_INSTANCES[dc.connector_config] = dc
	return dc


def validate_args(
	connector_config: ConnectorConfig,
	dc_or_vars: Any = None,
	variables: Any = None,
	validate_vars: bool = False,
) -> Tuple[DataConnect, Optional[Dict[str, Any]]]:
	"""
	Work out which argument is the client handle and which is the variables.
	Accepts (dc, vars), (vars,) or () and returns (dc, vars).
	"""
	if isinstance(dc_or_vars, DataConnect):
		dc, resolved = dc_or_vars, variables
	elif dc_or_vars is None or isinstance(dc_or_vars, Mapping):
		if variables is not None:
			raise InvalidArgumentError("Variables passed twice; pass (dc, variables) or (variables)")
		dc, resolved = get_data_connect(connector_config), dc_or_vars
	else:
		raise InvalidArgumentError(
			f"Expected a DataConnect handle or a variables mapping, got {type(dc_or_vars).__name__}"
		)

	if resolved is not None and not isinstance(resolved, Mapping):
		raise InvalidArgumentError(f"Variables must be a mapping, got {type(resolved).__name__}")
	if validate_vars and resolved is None:
		raise InvalidArgumentError("Variables required.")
	return dc, dict(resolved) if resolved is not None else None


def query_ref(dc: DataConnect, name: str, variables: Optional[Mapping[str, Any]] = None) -> OperationRef:
	return OperationRef(name=name, kind=QUERY, variables=dict(variables or {}), client=dc)


def mutation_ref(dc: DataConnect, name: str, variables: Optional[Mapping[str, Any]] = None) -> OperationRef:
	return OperationRef(name=name, kind=MUTATION, variables=dict(variables or {}), client=dc)


def execute_query(ref: OperationRef) -> OperationResult:
	"""Run a read-only operation and return its result."""
	if ref.kind != QUERY:
		raise InvalidArgumentError(f"{ref.name} is a {ref.kind}; use execute_mutation")
	return _execute(ref)


def execute_mutation(ref: OperationRef) -> OperationResult:
	"""Run a write operation and return its result."""
	if ref.kind != MUTATION:
		raise InvalidArgumentError(f"{ref.name} is a {ref.kind}; use execute_query")
	return _execute(ref)


def _execute(ref: OperationRef) -> OperationResult:
	dc = ref.client
	if not isinstance(dc, DataConnect):
		raise InvalidArgumentError(f"{ref.name} is not bound to a DataConnect handle")
	dc._initialized = True

	url = dc.endpoint(ref.kind)
	body = {"name": dc.resource_name, "operationName": ref.name, "variables": ref.variables}
	logger.debug(f"[DataConnect] {ref.kind} {ref.name} vars={sorted(ref.variables)}")

	try:
		response = dc.session.post(url, json=body, headers=dc.headers(), timeout=dc.timeout)
	except requests.RequestException as e:
		logger.warning(f"[DataConnect] {ref.name} failed to reach {dc.origin}: {e}")
		raise NetworkError(f"{ref.name}: request failed: {e}") from e

	status = response.status_code
	if status in _AUTH_STATUSES:
		raise AuthorizationError(f"{ref.name}: {_error_message(response)}", status_code=status)
	if status in _VALIDATION_STATUSES:
		raise ValidationError(f"{ref.name}: {_error_message(response)}", status_code=status)
	if not 200 <= status < 300:
		raise NetworkError(f"{ref.name}: server responded {status}: {_error_message(response)}", status_code=status)

	try:
		payload = response.json()
	except ValueError as e:
		raise NetworkError(f"{ref.name}: response was not valid JSON", status_code=status) from e
	if not isinstance(payload, dict):
		raise NetworkError(f"{ref.name}: unexpected response shape", status_code=status)

	errors = payload.get("errors") or []
	if errors:
		messages = "; ".join(str(err.get("message", err)) if isinstance(err, dict) else str(err) for err in errors)
		raise ValidationError(f"{ref.name}: {messages}", errors=errors, status_code=status)
	if "data" not in payload:
		raise NetworkError(f"{ref.name}: response had no data", status_code=status)

	logger.debug(f"[DataConnect] {ref.name} ok")
	return OperationResult(data=payload.get("data") or {}, source="SERVER", ref=ref)


def _error_message(response) -> str:
	"""Best-effort human-readable message from an error response."""
	try:
		payload = response.json()
	except ValueError:
		payload = None
	if isinstance(payload, dict):
		error = payload.get("error")
		if isinstance(error, dict) and error.get("message"):
			return str(error["message"])
		if isinstance(error, str):
			return error
		errors = payload.get("errors")
		if errors:
			return "; ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors)
	text = (getattr(response, "text", "") or "").strip()
	return text[:200] or f"HTTP {response.status_code}"
