"""
Browse page.
Filter state, its canonical URL encoding, the mapping to BrowseMovies
variables, and the page controller that loads movies for a set of filters.
"""

# Standard libs for dataclasses, typing and URL encoding
from dataclasses import dataclass, replace  # immutable filter state
from typing import Any, Dict, List, Mapping, Optional, Tuple  # type hints
from urllib.parse import parse_qsl, urlencode  # query-string encoding

# Fuzzy matching for "did you mean" hints on genre names typed into shared URLs
from rapidfuzz import fuzz, process  # fuzzy matching utilities

# Console logging
from loguru import logger  # console logger

from .data_connect import DataConnect, execute_query
from .errors import InvalidArgumentError, MovieHubError
from .generated import BROWSE_MOVIES
from .models import Movie
from .page_state import PageState, ViewStatus

# Genres offered as checkboxes in the filter sidebar
GENRES = [
	"Action",
	"Adventure",
	"Comedy",
	"Drama",
	"Thriller",
	"Sci-Fi",
	"Horror",
	"Rom-Com",
	"Mystery",
	"Western",
	"Animation",
	"Musical",
]

# Common user phrasings -> the label used by the backend
GENRE_SYNONYMS = {
	'sci-fi': 'Sci-Fi',  # canonical form
	'sci fi': 'Sci-Fi',  # spaced form
	'scifi': 'Sci-Fi',  # common variant
	'sci-fy': 'Sci-Fi',  # typo variant
	'science fiction': 'Sci-Fi',  # long form
	'science-fiction': 'Sci-Fi',  # long form with dash
	'rom-com': 'Rom-Com',
	'romcom': 'Rom-Com',
	'rom com': 'Rom-Com',
	'romantic comedy': 'Rom-Com',
	'animated': 'Animation',
	'funny': 'Comedy',
	'scary': 'Horror',
}

BROWSE_PATH = "/browse"  # page route
MIN_STARS = 1  # smallest selectable rating
MAX_STARS = 5  # largest selectable rating
EMPTY_MESSAGE = "No movies found matching your filters."  # empty-state text
ERROR_MESSAGE = "Could not load movies. Please try again."  # generic failure text

# Filter key -> URL parameter name (also the canonical parameter order)
_PARAM_NAMES = {
	"title": "title",
	"min_year": "minYear",
	"max_year": "maxYear",
	"min_rating": "minRating",
	"genres": "genres",
}


def suggest_genre(genre: str) -> Optional[str]:
	"""
	Closest offered genre for a label that is not one of GENRES, or None.
	Only used for "did you mean" hints; filters always keep the genres exactly as given.
	"""
	cleaned = genre.strip()
	if not cleaned or cleaned in GENRES:
		return None
	lower = cleaned.lower()

	# Different casing of an offered genre
	for g in GENRES:
		if g.lower() == lower:
			return g

	# Known synonyms collapse to one label
	if lower in GENRE_SYNONYMS:
		return GENRE_SYNONYMS[lower]

	# Small typos (e.g., "thriler") point at the closest offered genre
	match = process.extractOne(lower, [g.lower() for g in GENRES], scorer=fuzz.ratio)
	if match and match[1] >= 88:
		return GENRES[match[2]]
	return None


def _coerce_rating(value: Any) -> int:
	"""Star rating as an int in MIN_STARS..MAX_STARS; anything else is rejected."""
	try:
		rating = int(value)
	except (TypeError, ValueError) as e:
		raise InvalidArgumentError(f"Star rating must be a whole number, got {value!r}") from e
	if isinstance(value, float) and value != rating:
		raise InvalidArgumentError(f"Star rating must be a whole number, got {value!r}")
	if not MIN_STARS <= rating <= MAX_STARS:
		raise InvalidArgumentError(f"Star rating must be between {MIN_STARS} and {MAX_STARS}, got {rating}")
	return rating


@dataclass(frozen=True)
class BrowseFilters:
	"""Filters selected in the sidebar. Empty values mean 'not set'."""
	title: Optional[str] = None  # partial title match
	min_year: Optional[str] = None  # earliest release year (as typed)
	max_year: Optional[str] = None  # latest release year (as typed)
	min_rating: Optional[int] = None  # 1-5 stars
	genres: Tuple[str, ...] = ()  # any-of genre labels

	def with_filter(self, key: str, value: Any) -> "BrowseFilters":
		"""Return a copy with one filter changed; empty values clear it."""
		if key not in _PARAM_NAMES:
			raise KeyError(f"Unknown browse filter: {key}")
		if value is None or value == "" or (isinstance(value, (list, tuple)) and len(value) == 0):
			return replace(self, **{key: () if key == "genres" else None})
		if key == "genres":
			value = tuple(value)
		elif key == "min_rating":
			value = _coerce_rating(value)
		return replace(self, **{key: value})

	def toggle_rating(self, rating: int) -> "BrowseFilters":
		"""Select a star rating; selecting the current one clears it."""
		if self.min_rating == rating:
			return self.with_filter("min_rating", None)
		return self.with_filter("min_rating", rating)

	def toggle_genre(self, genre: str, checked: bool) -> "BrowseFilters":
		current = list(self.genres)
		if checked and genre not in current:
			current.append(genre)
		elif not checked:
			current = [g for g in current if g != genre]
		return self.with_filter("genres", current)

	def cleared(self) -> "BrowseFilters":
		return BrowseFilters()

	def is_empty(self) -> bool:
		return self == BrowseFilters()

	def genre_suggestions(self) -> Dict[str, str]:
		"""Selected genre -> offered genre it probably meant, for labels that are not offered."""
		suggestions: Dict[str, str] = {}
		for g in self.genres:
			suggestion = suggest_genre(g)
			if suggestion:
				suggestions[g] = suggestion
		return suggestions

	def to_query_params(self) -> Dict[str, str]:
		"""URL parameters in canonical order, omitting empty values."""
		params: Dict[str, str] = {}
		for key, name in _PARAM_NAMES.items():
			value = getattr(self, key)
			if value is None or value == "" or value == ():
				continue
			params[name] = ",".join(value) if key == "genres" else str(value)
		return params

	def to_query_string(self) -> str:
		return urlencode(self.to_query_params())

	@classmethod
	def from_query_params(cls, params: Mapping[str, Any]) -> "BrowseFilters":
		"""Read filters back from URL parameters (the inverse of to_query_params)."""
		def first(name: str) -> Optional[str]:
			value = params.get(name)
			if isinstance(value, (list, tuple)):  # parse_qs style multi-values
				value = value[0] if value else None
			return str(value) if value not in (None, "") else None

		min_rating = None
		raw_rating = first("minRating")
		if raw_rating is not None:
			try:
				min_rating = int(float(raw_rating))
			except (ValueError, OverflowError):  # "abc", "nan", "inf"
				logger.warning(f"[Browse] Ignoring non-numeric minRating '{raw_rating}'")
			if min_rating is not None and not MIN_STARS <= min_rating <= MAX_STARS:
				logger.warning(f"[Browse] Ignoring out-of-range minRating {min_rating}")
				min_rating = None

		genres: List[str] = []
		raw_genres = first("genres")
		if raw_genres:
			for g in raw_genres.split(","):
				g = g.strip()
				if g and g not in genres:
					genres.append(g)

		return cls(
			title=first("title"),
			min_year=first("minYear"),
			max_year=first("maxYear"),
			min_rating=min_rating,
			genres=tuple(genres),
		)

	@classmethod
	def from_query_string(cls, query: str) -> "BrowseFilters":
		return cls.from_query_params(dict(parse_qsl(query.lstrip("?"))))

	def to_query_variables(self) -> Dict[str, Any]:
		"""BrowseMovies variables; star ratings are doubled onto the 10-point scale."""
		variables: Dict[str, Any] = {}
		if self.title:
			variables["partialTitle"] = self.title
		if self.min_year:
			variables["minDate"] = f"{self.min_year}-01-01"
		if self.max_year:
			variables["maxDate"] = f"{self.max_year}-12-31"
		if self.min_rating is not None:
			variables["minRating"] = self.min_rating * 2
		if self.genres:
			variables["genres"] = list(self.genres)
		return variables


def browse_url(filters: BrowseFilters) -> str:
	"""Canonical, shareable URL for a set of filters."""
	query = filters.to_query_string()
	return f"{BROWSE_PATH}?{query}" if query else BROWSE_PATH


class BrowsePage:
	"""
	Controller for the Browse page.
	The URL parameters are the source of truth: load() reads them, runs
	BrowseMovies and stores the movies; apply() turns the pending sidebar
	filters into the next URL.
	"""

	def __init__(self, dc: DataConnect):
		self.dc = dc  # client handle
		self.state = PageState("Browse")  # loading/error/result
		self.filters = BrowseFilters()  # filters currently applied (from the URL)
		self.pending = BrowseFilters()  # filters selected but not yet applied

	@property
	def movies(self) -> List[Movie]:
		return self.state.data or []

	@property
	def is_empty(self) -> bool:
		"""True when a load succeeded with zero movies (show the reset affordance)."""
		return self.state.status == ViewStatus.SUCCESS and not self.movies

	@property
	def suggestions(self) -> Dict[str, str]:
		return self.filters.genre_suggestions()

	def start(self, params: Mapping[str, Any]) -> Tuple[int, Dict[str, Any]]:
		"""Sync filters from URL params and open a new request; returns (token, variables)."""
		self.filters = BrowseFilters.from_query_params(params)
		self.pending = self.filters
		token = self.state.begin()
		return token, self.filters.to_query_variables()

	def finish(self, token: int, movies: List[Movie]) -> bool:
		applied = self.state.succeed(token, movies)
		if applied:
			logger.info(f"[Browse] Showing {len(movies)} movies for {self.filters.to_query_string() or 'no filters'}")
		return applied

	def load(self, params: Mapping[str, Any]) -> List[Movie]:
		"""Fetch movies for the filters in params; errors become the generic message."""
		token, variables = self.start(params)
		try:
			result = execute_query(BROWSE_MOVIES.ref_with_client(self.dc, variables))
		except MovieHubError as e:
			logger.error(f"[Browse] BrowseMovies failed: {e}")
			self.state.fail(token, ERROR_MESSAGE)
			return []
		movies = [Movie.from_dict(m) for m in (result.data.get("movies") or [])]
		self.finish(token, movies)
		return self.movies

	def update_pending(self, key: str, value: Any):
		self.pending = self.pending.with_filter(key, value)

	def select_rating(self, rating: int):
		self.pending = self.pending.toggle_rating(rating)

	def select_genre(self, genre: str, checked: bool):
		self.pending = self.pending.toggle_genre(genre, checked)

	def apply(self) -> str:
		"""URL to navigate to for the pending filters."""
		return browse_url(self.pending)

	def reset(self) -> str:
		"""Clear every filter; returns the bare browse URL."""
		self.pending = self.pending.cleared()
		return BROWSE_PATH
