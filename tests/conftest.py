"""
Shared fixtures: a fake requests session that records every POST and plays
back canned responses, plus a clean process-wide Data Connect registry.
"""

import json
from typing import Any, Dict, List

import pytest
import requests

from moviehub import data_connect
from moviehub.data_connect import DataConnect
from moviehub.generated import CONNECTOR_CONFIG


class FakeResponse:
	def __init__(self, status_code: int = 200, payload: Any = None, text: str = None):
		self.status_code = status_code
		self._payload = payload
		self.text = text if text is not None else (json.dumps(payload) if payload is not None else "")

	def json(self):
		if self._payload is None:
			raise ValueError("No JSON body")
		return self._payload


class FakeSession:
	"""Stands in for requests.Session; responses are consumed in order, the last one repeats."""

	def __init__(self, *responses):
		self.responses: List[Any] = list(responses) or [FakeResponse(200, {"data": {}})]
		self.posts: List[Dict[str, Any]] = []

	def post(self, url, json=None, headers=None, timeout=None, params=None):
		self.posts.append({"url": url, "json": json, "headers": headers or {}, "timeout": timeout, "params": params})
		response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
		if isinstance(response, Exception):
			raise response
		return response


def ok(data: Dict[str, Any]) -> FakeResponse:
	return FakeResponse(200, {"data": data})


@pytest.fixture(autouse=True)
def clean_registry(monkeypatch):
	monkeypatch.setattr(data_connect, "_INSTANCES", {})
	monkeypatch.delenv("DATA_CONNECT_EMULATOR_HOST", raising=False)
	monkeypatch.setenv("FIREBASE_PROJECT_ID", "test-project")


@pytest.fixture
def session():
	return FakeSession()


@pytest.fixture
def dc(session):
	return DataConnect("test-project", CONNECTOR_CONFIG, session=session)


@pytest.fixture
def connection_error():
	return requests.ConnectionError("connection refused")
