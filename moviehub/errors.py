"""
Error types for MovieHub.
Client-side validation errors are raised before any network call; backend
and transport failures are raised by the executors and caught by the pages.
"""


class MovieHubError(Exception):
	"""Base class for every error raised by this package."""


class InvalidArgumentError(MovieHubError, ValueError):
	"""Raised when an operation is called with a malformed client or variables."""


class NetworkError(MovieHubError):
	"""Raised on timeouts, connection failures and unreadable responses."""

	def __init__(self, message: str, status_code: int = None):
		super().__init__(message)
		self.status_code = status_code  # HTTP status if the server answered


class AuthorizationError(MovieHubError):
	"""Raised when the backend rejects the caller's credentials (401/403)."""

	def __init__(self, message: str, status_code: int = None):
		super().__init__(message)
		self.status_code = status_code


class ValidationError(MovieHubError):
	"""Raised when the backend reports the operation itself as invalid."""

	def __init__(self, message: str, errors: list = None, status_code: int = None):
		super().__init__(message)
		self.errors = errors or []  # raw GraphQL error objects
		self.status_code = status_code


class ShowtimeParseError(MovieHubError):
	"""Raised when the generative model returns text that is not the expected JSON."""
