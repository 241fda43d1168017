"""
Find Theatres page.
Asks a Google Search grounded generative model for showtimes of a movie (and a
few similar ones) near a location, then parses the model's JSON answer.
"""

# Standard libs for JSON parsing, regex, dates and typing
import json  # parse model output
import re  # strip markdown code fences
from dataclasses import dataclass, field  # request container
from datetime import date as date_cls  # default search date
from typing import Any, List, Optional  # type hints

# Pydantic validates the shape of the model's JSON
from pydantic import BaseModel, ConfigDict, Field  # response schema definitions
from pydantic import ValidationError as SchemaError  # shape mismatches

# Console logging
from loguru import logger  # console logger

from .errors import ShowtimeParseError
from .models import GroundingInfo, GroundingSource
from .page_state import PageState

ERROR_MESSAGE = "Could not find showtimes. Please try again."  # generic failure text
IDLE_MESSAGE = "Enter a location to see what's playing."  # shown before the first search
NO_SHOWTIMES_MESSAGE = "No showtimes found nearby for this date."  # per-movie empty list

_FENCE = re.compile(r"```json|```")  # markdown fences the model sometimes adds


class Theatre(BaseModel):
	"""A cinema and its showtimes for the requested date."""
	name: str
	showtimes: List[str] = Field(default_factory=list)


class TheatreMovie(BaseModel):
	"""One movie in the model's answer: the requested one or a recommendation."""
	model_config = ConfigDict(populate_by_name=True)

	title: str
	is_target_movie: bool = Field(default=False, alias="isTargetMovie")
	description: str = ""
	theatres: List[Theatre] = Field(default_factory=list)


@dataclass
class TheatreSearchRequest:
	"""What the user asked for: a movie, where, and when."""
	title: str = ""  # movie the user wants to see
	genre: str = ""  # its genre, for context
	description: str = ""  # its synopsis, for context
	location: str = ""  # city, zip, address or "lat, lon"
	date: str = field(default_factory=lambda: date_cls.today().isoformat())  # YYYY-MM-DD


def format_coordinates(latitude: float, longitude: float) -> str:
	"""Location string produced by the 'use my location' action."""
	return f"{latitude}, {longitude}"


def build_prompt(request: TheatreSearchRequest) -> str:
	"""Prompt asking for 2-3 similar movies playing near the location, as strict JSON."""
	return f"""
Context: User wants to see the movie "{request.title}" ({request.genre}) in a theatre.
Movie Description: "{request.description}"
Location: {request.location}
Date: {request.date}

Task:
1. Find 2-3 movies similar to {request.title} currently playing in this city.
2. Return strict JSON format.

JSON Schema:
{{
    "movies": [
        {{
            "title": "Movie Title",
            "isTargetMovie": boolean,
            "description": "Short tagline or reason for recommendation",
            "theatres": [
                {{ "name": "Cinema Name", "showtimes": ["7:00 PM", "9:30 PM"] }}
            ]
        }}
    ]
}}
""".strip()


def parse_showtimes(text: Optional[str]) -> List[TheatreMovie]:
	"""
	Parse the model's answer into TheatreMovie objects.
	Raises ShowtimeParseError for malformed JSON or a missing/invalid 'movies' list.
	"""
	if not text or not text.strip():
		raise ShowtimeParseError("Model returned an empty response")

	clean = _FENCE.sub("", text).strip()
	try:
		data = json.loads(clean)
	except json.JSONDecodeError as e:
		raise ShowtimeParseError(f"Model response was not valid JSON: {e}") from e

	movies = data.get("movies") if isinstance(data, dict) else None
	if not isinstance(movies, list):
		raise ShowtimeParseError("Invalid response format: expected a 'movies' list")

	try:
		return [TheatreMovie.model_validate(m) for m in movies]
	except SchemaError as e:
		raise ShowtimeParseError(f"Invalid response format: {e.error_count()} schema error(s)") from e


def extract_grounding(response: Any) -> Optional[GroundingInfo]:
	"""Pull cited sources and the search entry point out of the first candidate."""
	candidates = getattr(response, "candidates", None) or []
	if not candidates:
		return None
	metadata = getattr(candidates[0], "grounding_metadata", None)
	if metadata is None:
		return None

	sources: List[GroundingSource] = []
	for chunk in getattr(metadata, "grounding_chunks", None) or []:
		web = getattr(chunk, "web", None)
		uri = getattr(web, "uri", None) if web is not None else None
		if uri:
			sources.append(GroundingSource(uri=uri, title=getattr(web, "title", None) or "Source"))

	entry_point = getattr(metadata, "search_entry_point", None)
	rendered = getattr(entry_point, "rendered_content", None) if entry_point is not None else None
	return GroundingInfo(sources=sources, rendered_content=rendered)


class FindTheatresPage:
	"""
	Controller for the Find Theatres page.
	model must expose generate_content(prompt) returning a response with
	.text and .candidates (see firebase.SearchEnabledModel).
	"""

	def __init__(self, model: Any, request: Optional[TheatreSearchRequest] = None):
		self.model = model
		self.request = request or TheatreSearchRequest()
		self.state = PageState("FindTheatres")
		self.grounding: Optional[GroundingInfo] = None

	@property
	def movies(self) -> List[TheatreMovie]:
		return self.state.data or []

	def use_location(self, latitude: float, longitude: float):
		"""Geolocation callback: fill the location from coordinates."""
		self.request.location = format_coordinates(latitude, longitude)
		logger.debug(f"[FindTheatres] Location set from coordinates: {self.request.location}")

	def search(self) -> List[TheatreMovie]:
		"""Ask the model for showtimes; every failure becomes the generic error message."""
		if not self.request.location or not self.request.date:
			logger.debug("[FindTheatres] Location or date missing; not searching")
			return self.movies

		token = self.state.begin()
		self.state.data = []
		self.grounding = None
		logger.info(f"[FindTheatres] Scanning theatres near '{self.request.location}' on {self.request.date}")

		try:
			response = self.model.generate_content(build_prompt(self.request))
			grounding = extract_grounding(response)
			movies = parse_showtimes(getattr(response, "text", None))
		except Exception as e:  # model SDK errors have no common base class
			logger.error(f"[FindTheatres] Search error: {e}")
			self.state.fail(token, ERROR_MESSAGE)
			return self.movies

		if self.state.succeed(token, movies):
			self.grounding = grounding
			logger.info(f"[FindTheatres] Found {len(movies)} movies")
		return self.movies
