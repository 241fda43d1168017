"""
Typed operation layer for the MovieHub connector.

Each connector operation gets a reference builder (`<name>_ref`) and an
executor wrapper (`<name>`). Builders accept (dc, variables), (variables) or
(), check the variables against the operation's declared fields, and return
an OperationRef tagged with the wire-level operation name. Executors run the
reference and return an OperationResult.

The explicit call shapes Operation.ref_with_client() and
Operation.ref_without_client() run exactly the same checks.
"""

from dataclasses import dataclass  # operation definitions
from typing import Any, Dict, FrozenSet, Mapping, Optional  # type hints

from .config import CONNECTOR_ID, LOCATION, SERVICE_ID
from .data_connect import (
	MUTATION,
	QUERY,
	DataConnect,
	execute_mutation,
	execute_query,
	get_data_connect,
	mutation_ref,
	query_ref,
	validate_args,
)
from .errors import InvalidArgumentError
from .models import ConnectorConfig, OperationRef, OperationResult

CONNECTOR_CONFIG = ConnectorConfig(connector=CONNECTOR_ID, service=SERVICE_ID, location=LOCATION)


@dataclass(frozen=True)
class Operation:
	"""Declared shape of one connector operation."""
	name: str  # wire name sent to the backend
	kind: str  # QUERY or MUTATION
	required: FrozenSet[str] = frozenset()  # fields that must be present and non-null
	optional: FrozenSet[str] = frozenset()  # fields that may be omitted
	vars_required: bool = False  # whether a variables mapping must be passed at all
	takes_vars: bool = True  # False for operations with no variables

	def check_variables(self, variables: Optional[Dict[str, Any]]) -> Dict[str, Any]:
		"""Validate a resolved variables mapping against the declared fields."""
		if not self.takes_vars:
			if variables:
				raise InvalidArgumentError(f"{self.name} takes no variables")
			return {}
		if variables is None:
			if self.vars_required:
				raise InvalidArgumentError(f"{self.name}: variables required.")
			return {}
		missing = sorted(k for k in self.required if variables.get(k) is None)
		if missing:
			raise InvalidArgumentError(f"{self.name}: missing required variable(s): {', '.join(missing)}")
		unknown = sorted(set(variables) - self.required - self.optional)
		if unknown:
			raise InvalidArgumentError(f"{self.name}: unknown variable(s): {', '.join(unknown)}")
		return variables

	def _build(self, dc: DataConnect, variables: Optional[Dict[str, Any]]) -> OperationRef:
		checked = self.check_variables(variables)
		dc.use_generated_sdk()
		builder = query_ref if self.kind == QUERY else mutation_ref
		return builder(dc, self.name, checked)

	def ref(self, dc_or_vars: Any = None, variables: Any = None) -> OperationRef:
		"""Build a reference from either call shape."""
		validate_vars = self.vars_required and self.takes_vars
		dc, resolved = validate_args(CONNECTOR_CONFIG, dc_or_vars, variables, validate_vars)
		if not self.takes_vars and resolved:
			raise InvalidArgumentError(f"{self.name} takes no variables")
		return self._build(dc, resolved)

	def ref_with_client(self, dc: DataConnect, variables: Optional[Mapping[str, Any]] = None) -> OperationRef:
		if not isinstance(dc, DataConnect):
			raise InvalidArgumentError(f"{self.name}: expected a DataConnect handle")
		return self.ref(dc, variables)

	def ref_without_client(self, variables: Optional[Mapping[str, Any]] = None) -> OperationRef:
		return self.ref(get_data_connect(CONNECTOR_CONFIG), variables)

	def execute(self, dc_or_vars: Any = None, variables: Any = None) -> OperationResult:
		ref = self.ref(dc_or_vars, variables)
		if self.kind == QUERY:
			return execute_query(ref)
		return execute_mutation(ref)


def _fields(*names: str) -> FrozenSet[str]:
	return frozenset(names)


UPDATE_USER = Operation(
	"UpdateUser", MUTATION,
	required=_fields("username"), optional=_fields("displayName", "imageUrl"), vars_required=True,
)
ADD_WATCH = Operation(
	"AddWatch", MUTATION,
	required=_fields("movieId", "watchDate"), optional=_fields("location", "format"), vars_required=True,
)
ADD_REVIEW = Operation(
	"AddReview", MUTATION,
	required=_fields("movieId", "rating", "reviewText"), vars_required=True,
)
DELETE_WATCH = Operation("DeleteWatch", MUTATION, required=_fields("watchId"), vars_required=True)
HOME_PAGE = Operation("HomePage", QUERY, takes_vars=False)
SEARCH_MOVIES = Operation("SearchMovies", QUERY, required=_fields("query"), vars_required=True)
MOVIE_PAGE = Operation("MoviePage", QUERY, required=_fields("id"), vars_required=True)
WATCH_HISTORY_PAGE = Operation("WatchHistoryPage", QUERY, optional=_fields("limit", "offset"))
BROWSE_MOVIES = Operation(
	"BrowseMovies", QUERY,
	optional=_fields("partialTitle", "minDate", "maxDate", "minRating", "genres"),
)
GET_MOVIES = Operation("GetMovies", QUERY, optional=_fields("limit"))
DETAILED_WATCH_HISTORY = Operation("DetailedWatchHistory", QUERY, takes_vars=False)

OPERATIONS: Dict[str, Operation] = {
	op.name: op
	for op in (
		UPDATE_USER, ADD_WATCH, ADD_REVIEW, DELETE_WATCH,
		HOME_PAGE, SEARCH_MOVIES, MOVIE_PAGE, WATCH_HISTORY_PAGE,
		BROWSE_MOVIES, GET_MOVIES, DETAILED_WATCH_HISTORY,
	)
}


# Mutations

def update_user_ref(dc_or_vars=None, variables=None) -> OperationRef:
	return UPDATE_USER.ref(dc_or_vars, variables)
update_user_ref.operation_name = UPDATE_USER.name


def update_user(dc_or_vars=None, variables=None) -> OperationResult:
	return execute_mutation(update_user_ref(dc_or_vars, variables))


def add_watch_ref(dc_or_vars=None, variables=None) -> OperationRef:
	return ADD_WATCH.ref(dc_or_vars, variables)
add_watch_ref.operation_name = ADD_WATCH.name


def add_watch(dc_or_vars=None, variables=None) -> OperationResult:
	return execute_mutation(add_watch_ref(dc_or_vars, variables))


def add_review_ref(dc_or_vars=None, variables=None) -> OperationRef:
	return ADD_REVIEW.ref(dc_or_vars, variables)
add_review_ref.operation_name = ADD_REVIEW.name


def add_review(dc_or_vars=None, variables=None) -> OperationResult:
	return execute_mutation(add_review_ref(dc_or_vars, variables))


def delete_watch_ref(dc_or_vars=None, variables=None) -> OperationRef:
	return DELETE_WATCH.ref(dc_or_vars, variables)
delete_watch_ref.operation_name = DELETE_WATCH.name


def delete_watch(dc_or_vars=None, variables=None) -> OperationResult:
	return execute_mutation(delete_watch_ref(dc_or_vars, variables))


# Queries

def home_page_ref(dc=None) -> OperationRef:
	return HOME_PAGE.ref(dc)
home_page_ref.operation_name = HOME_PAGE.name


def home_page(dc=None) -> OperationResult:
	return execute_query(home_page_ref(dc))


def search_movies_ref(dc_or_vars=None, variables=None) -> OperationRef:
	return SEARCH_MOVIES.ref(dc_or_vars, variables)
search_movies_ref.operation_name = SEARCH_MOVIES.name


def search_movies(dc_or_vars=None, variables=None) -> OperationResult:
	return execute_query(search_movies_ref(dc_or_vars, variables))


def movie_page_ref(dc_or_vars=None, variables=None) -> OperationRef:
	return MOVIE_PAGE.ref(dc_or_vars, variables)
movie_page_ref.operation_name = MOVIE_PAGE.name


def movie_page(dc_or_vars=None, variables=None) -> OperationResult:
	return execute_query(movie_page_ref(dc_or_vars, variables))


def watch_history_page_ref(dc_or_vars=None, variables=None) -> OperationRef:
	return WATCH_HISTORY_PAGE.ref(dc_or_vars, variables)
watch_history_page_ref.operation_name = WATCH_HISTORY_PAGE.name


def watch_history_page(dc_or_vars=None, variables=None) -> OperationResult:
	return execute_query(watch_history_page_ref(dc_or_vars, variables))


def browse_movies_ref(dc_or_vars=None, variables=None) -> OperationRef:
	return BROWSE_MOVIES.ref(dc_or_vars, variables)
browse_movies_ref.operation_name = BROWSE_MOVIES.name


def browse_movies(dc_or_vars=None, variables=None) -> OperationResult:
	return execute_query(browse_movies_ref(dc_or_vars, variables))


def get_movies_ref(dc_or_vars=None, variables=None) -> OperationRef:
	return GET_MOVIES.ref(dc_or_vars, variables)
get_movies_ref.operation_name = GET_MOVIES.name


def get_movies(dc_or_vars=None, variables=None) -> OperationResult:
	return execute_query(get_movies_ref(dc_or_vars, variables))


def detailed_watch_history_ref(dc=None) -> OperationRef:
	return DETAILED_WATCH_HISTORY.ref(dc)
detailed_watch_history_ref.operation_name = DETAILED_WATCH_HISTORY.name


def detailed_watch_history(dc=None) -> OperationResult:
	return execute_query(detailed_watch_history_ref(dc))
