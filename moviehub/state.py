"""
Persisted client-side state.
A small key/value store for flags that must survive restarts (such as the
one-time profile sync marker). The store is injected wherever it is needed.
"""

import json  # on-disk format
from pathlib import Path  # filesystem-safe paths
from typing import Dict, Optional  # type hints

from loguru import logger  # console logger


class StateStore:
	"""Interface: string keys to string values."""

	def get(self, key: str) -> Optional[str]:
		raise NotImplementedError

	def set(self, key: str, value: str):
		raise NotImplementedError

	def delete(self, key: str):
		raise NotImplementedError


class MemoryStateStore(StateStore):
	"""Process-local store; forgets everything on exit."""

	def __init__(self, initial: Optional[Dict[str, str]] = None):
		self._values: Dict[str, str] = dict(initial or {})

	def get(self, key: str) -> Optional[str]:
		return self._values.get(key)

	def set(self, key: str, value: str):
		self._values[key] = value

	def delete(self, key: str):
		self._values.pop(key, None)


class JsonFileStateStore(StateStore):
	"""
	Store backed by a JSON object on disk (one file per user profile).
	The file is re-read on every access so several processes see each other's writes.
	"""

	def __init__(self, path):
		self.path = Path(path)

	def _load(self) -> Dict[str, str]:
		if not self.path.exists():
			return {}
		try:
			data = json.loads(self.path.read_text(encoding="utf-8"))
		except (OSError, json.JSONDecodeError) as e:
			logger.warning(f"[State] Ignoring unreadable state file {self.path}: {e}")
			return {}
		return data if isinstance(data, dict) else {}

	def _save(self, values: Dict[str, str]):
		self.path.parent.mkdir(parents=True, exist_ok=True)
		self.path.write_text(json.dumps(values, indent=2, sort_keys=True), encoding="utf-8")

	def get(self, key: str) -> Optional[str]:
		value = self._load().get(key)
		return str(value) if value is not None else None

	def set(self, key: str, value: str):
		values = self._load()
		values[key] = value
		self._save(values)
		logger.debug(f"[State] Saved '{key}' to {self.path}")

	def delete(self, key: str):
		values = self._load()
		if key in values:
			del values[key]
			self._save(values)
