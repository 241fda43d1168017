"""
Shared finite-state view model for the pages: idle -> loading -> success | error.
Each request gets a generation token; results for anything but the latest
token are discarded so a slow, older response cannot overwrite newer state.
"""

from enum import Enum  # view status values
from typing import Any, Optional  # type hints

from loguru import logger  # console logger


class ViewStatus(str, Enum):
	IDLE = "idle"
	LOADING = "loading"
	SUCCESS = "success"
	ERROR = "error"


class PageState:
	"""Status, payload and error message for one UI region."""

	def __init__(self, name: str = "page"):
		self.name = name  # used in log lines
		self.status = ViewStatus.IDLE
		self.data: Any = None
		self.error: Optional[str] = None
		self._generation = 0  # id of the latest request

	@property
	def is_loading(self) -> bool:
		return self.status == ViewStatus.LOADING

	def begin(self) -> int:
		"""Enter LOADING for a new request and return its token."""
		self._generation += 1
		self.status = ViewStatus.LOADING
		self.error = None
		return self._generation

	def is_current(self, token: int) -> bool:
		return token == self._generation

	def succeed(self, token: int, data: Any) -> bool:
		"""Store a result if it belongs to the latest request; return whether it was applied."""
		if not self.is_current(token):
			logger.debug(f"[{self.name}] Discarding stale result for request {token} (latest={self._generation})")
			return False
		self.status = ViewStatus.SUCCESS
		self.data = data
		self.error = None
		return True

	def fail(self, token: int, message: str) -> bool:
		"""Store an error if it belongs to the latest request; return whether it was applied."""
		if not self.is_current(token):
			logger.debug(f"[{self.name}] Discarding stale error for request {token} (latest={self._generation})")
			return False
		self.status = ViewStatus.ERROR
		self.error = message
		return True

	def reset(self):
		"""Back to IDLE; any in-flight request becomes stale."""
		self._generation += 1
		self.status = ViewStatus.IDLE
		self.data = None
		self.error = None
