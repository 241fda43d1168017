"""
Advanced (full-text) search page.
Runs SearchMovies for a term and keeps the three result rows the connector
returns: plain (any term), phrase (exact sequence) and query-string syntax.
"""

from typing import Dict, List  # type hints

from loguru import logger  # console logger

from .data_connect import DataConnect, execute_query
from .errors import MovieHubError
from .generated import SEARCH_MOVIES
from .models import Movie
from .page_state import PageState

# (key, heading, description) for each result row, in display order
RESULT_ROWS = [
	(
		"plain",
		"Plain Search Results",
		"Matches any of the search terms (OR logic). Best for general searches.",
	),
	(
		"phrase",
		"Phrase Search Results",
		"Matches the exact sequence of words entered. Ideal for finding specific titles.",
	),
	(
		"query",
		"Query String Results",
		"Supports operators like `+` (AND) and `-` (NOT) for more specific logic.",
	),
]

ERROR_MESSAGE = "Search failed. Please try again."
PROMPT_MESSAGE = "Enter a term in the search bar to see results from three different search methods."


def empty_rows() -> Dict[str, List[Movie]]:
	return {key: [] for key, _, _ in RESULT_ROWS}


class AdvancedSearchPage:
	"""Controller for the full-text search page."""

	def __init__(self, dc: DataConnect):
		self.dc = dc
		self.state = PageState("AdvancedSearch")
		self.query = ""  # last submitted term
		self.has_searched = False  # False until the first real submission

	@property
	def rows(self) -> Dict[str, List[Movie]]:
		return self.state.data or empty_rows()

	def search(self, term: str) -> Dict[str, List[Movie]]:
		"""Submit a search; blank terms are ignored."""
		term = (term or "").strip()
		if not term:
			logger.debug("[AdvancedSearch] Ignoring blank search")
			return self.rows

		self.query = term
		self.has_searched = True
		token = self.state.begin()
		self.state.data = None  # clear previous rows while loading

		try:
			result = execute_query(SEARCH_MOVIES.ref_with_client(self.dc, {"query": term}))
		except MovieHubError as e:
			logger.error(f"[AdvancedSearch] Error performing search for '{term}': {e}")
			self.state.fail(token, ERROR_MESSAGE)
			return self.rows

		rows = empty_rows()
		for key in rows:
			rows[key] = [Movie.from_dict(m) for m in (result.data.get(key) or [])]
		if self.state.succeed(token, rows):
			counts = ", ".join(f"{k}={len(v)}" for k, v in rows.items())
			logger.info(f"[AdvancedSearch] '{term}' -> {counts}")
		return self.rows
