"""
Authentication session.
Tracks the signed-in user, notifies listeners on sign-in/sign-out, and
supplies the ID token that Data Connect requests carry.
"""

from dataclasses import dataclass  # user record
from typing import Callable, List, Optional  # type hints

import requests  # Identity Toolkit REST calls

from loguru import logger  # console logger

from .config import IDENTITY_TOOLKIT_URL
from .errors import AuthorizationError, InvalidArgumentError, NetworkError


@dataclass
class AuthUser:
	"""The signed-in Firebase user."""
	uid: str  # Firebase auth uid
	email: Optional[str] = None  # account email
	display_name: Optional[str] = None  # provider display name
	photo_url: Optional[str] = None  # avatar URL
	id_token: Optional[str] = None  # bearer token for backend calls

	@property
	def username(self) -> Optional[str]:
		"""Local part of the email address."""
		if not self.email:
			return None
		return self.email.split("@")[0]


AuthListener = Callable[[Optional[AuthUser]], None]


class Auth:
	"""Current user plus auth-state listeners."""

	def __init__(self, api_key: Optional[str] = None, session: Optional[requests.Session] = None, timeout: float = 30.0):
		self.api_key = api_key
		self.session = session or requests.Session()
		self.timeout = timeout
		self.current_user: Optional[AuthUser] = None
		self._listeners: List[AuthListener] = []

	def on_auth_state_changed(self, listener: AuthListener) -> Callable[[], None]:
		"""Register a listener; it is called immediately with the current user. Returns an unsubscribe function."""
		self._listeners.append(listener)
		listener(self.current_user)

		def unsubscribe():
			if listener in self._listeners:
				self._listeners.remove(listener)
		return unsubscribe

	def _notify(self):
		for listener in list(self._listeners):
			listener(self.current_user)

	def sign_in(self, user: AuthUser) -> AuthUser:
		"""Adopt a user obtained elsewhere (e.g., an ID token from a web sign-in)."""
		self.current_user = user
		logger.info(f"[Auth] Signed in as {user.email or user.uid}")
		self._notify()
		return user

	def sign_in_with_password(self, email: str, password: str) -> AuthUser:
		"""Sign in through the Identity Toolkit REST API."""
		if not self.api_key:
			raise InvalidArgumentError("FIREBASE_API_KEY is required for password sign-in")
		try:
			response = self.session.post(
				IDENTITY_TOOLKIT_URL,
				params={"key": self.api_key},
				json={"email": email, "password": password, "returnSecureToken": True},
				timeout=self.timeout,
			)
		except requests.RequestException as e:
			raise NetworkError(f"Sign-in request failed: {e}") from e

		try:
			payload = response.json()
		except ValueError as e:
			raise NetworkError("Sign-in response was not valid JSON", status_code=response.status_code) from e
		if not isinstance(payload, dict):
			raise NetworkError("Sign-in response had an unexpected shape", status_code=response.status_code)

		if response.status_code != 200:
			error = payload.get("error")
			message = error.get("message", "sign-in failed") if isinstance(error, dict) else "sign-in failed"
			raise AuthorizationError(f"Sign-in rejected: {message}", status_code=response.status_code)

		user = AuthUser(
			uid=payload.get("localId", ""),
			email=payload.get("email", email),
			display_name=payload.get("displayName") or None,
			photo_url=payload.get("profilePicture") or None,
			id_token=payload.get("idToken"),
		)
		return self.sign_in(user)

	def sign_out(self):
		if self.current_user is not None:
			logger.info(f"[Auth] Signed out {self.current_user.email or self.current_user.uid}")
		self.current_user = None
		self._notify()

	def id_token(self) -> Optional[str]:
		"""Token provider for DataConnect; None when signed out."""
		return self.current_user.id_token if self.current_user else None
