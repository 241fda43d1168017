"""
FastAPI server exposing the MovieHub pages as JSON.
Endpoints:
- GET /health: basic health check
- GET /home: HomePage query
- GET /browse?title=&minYear=&maxYear=&minRating=&genres=: filtered movie grid
- GET /search?q=...: plain / phrase / query-string full-text rows
- GET /movies/{movie_id}: MoviePage query
- POST /theatres: AI showtime search near a location
- GET /history, GET /history/detailed: the caller's watch history (Bearer token)
- POST /watches, DELETE /watches/{watch_id}, POST /reviews: mutations (Bearer token)

Startup initializes the Data Connect handle once (production or emulator).
"""

# Import standard libraries for timing and typing
import time  # measure startup and request latencies
from typing import Any, Dict, List, Optional  # precise typing for clarity

# Import FastAPI for building the web API and Pydantic for request/response models
from fastapi import FastAPI, Header, HTTPException, Query, Request  # FastAPI primitives
from fastapi.responses import JSONResponse  # custom error payloads
from pydantic import BaseModel, Field  # request/response schema definitions

# Import our internal modules for data access and page logic
from moviehub.advanced_search import RESULT_ROWS, AdvancedSearchPage  # full-text search
from moviehub.browse import EMPTY_MESSAGE, BrowsePage  # browse grid
from moviehub.data_connect import DataConnect, execute_mutation, execute_query  # executors
from moviehub.errors import AuthorizationError, InvalidArgumentError, MovieHubError, NetworkError, ValidationError
from moviehub.firebase import AppContext, initialize_app  # bootstrap
from moviehub import generated  # connector operations
from moviehub.models import Movie  # movie record
from moviehub.theatres import FindTheatresPage, TheatreMovie, TheatreSearchRequest  # AI showtimes

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger

# Instantiate the FastAPI application with metadata
app = FastAPI(title="MovieHub API", version="1.0.0")  # web app

# Globals that hold the app context and measured startup time
CONTEXT: Optional[AppContext] = None  # set on startup (or by tests)
STARTUP_TIME_S: float = 0.0  # measures how long startup took


# Pydantic model that describes the shape of a single movie in responses
class MovieOut(BaseModel):
	id: str  # unique id
	title: str  # display title
	year: Optional[int] = None  # release year
	genre: Optional[str] = None  # primary genre
	rating: Optional[float] = None  # 0-10 rating
	image_url: Optional[str] = None  # poster image URL
	description: Optional[str] = None  # short synopsis snippet


# Browse grid payload, including the canonical shareable query string
class BrowseResponse(BaseModel):
	query_string: str  # canonical filters
	url: str  # /browse?... for navigation/bookmarks
	elapsed_ms: float  # server-side time in ms
	empty: bool  # True -> show empty state with reset action
	message: Optional[str] = None  # empty-state text
	reset_url: str = "/browse"  # where the reset action navigates
	suggestions: Dict[str, str] = {}  # unoffered genre -> offered genre it probably meant
	movies: List[MovieOut]  # grid items


# Advanced search payload: one list per search method
class SearchResponse(BaseModel):
	query: str  # original query string
	elapsed_ms: float  # server-side search time in ms
	rows: Dict[str, List[MovieOut]]  # plain / phrase / query
	descriptions: Dict[str, str]  # row key -> explanation


# Find Theatres request/response
class TheatresRequest(BaseModel):
	title: str = ""
	genre: str = ""
	description: str = ""
	location: str = Field(..., min_length=1)
	date: Optional[str] = None  # defaults to today


class SourceOut(BaseModel):
	uri: str
	title: str


class TheatresResponse(BaseModel):
	movies: List[TheatreMovie]
	sources: List[SourceOut] = []
	rendered_content: Optional[str] = None
	error: Optional[str] = None


# Mutation request bodies
class AddWatchRequest(BaseModel):
	movieId: str
	watchDate: str
	location: Optional[str] = None
	format: Optional[str] = None


class AddReviewRequest(BaseModel):
	movieId: str
	rating: int = Field(..., ge=0, le=10)
	reviewText: str


def to_movie_out(m: Movie) -> MovieOut:
	return MovieOut(
		id=m.id,
		title=m.title,
		year=m.release_year,
		genre=m.genre,
		rating=m.rating,
		image_url=m.image_url,
		description=m.description[:350] if m.description else None,
	)


def get_context() -> AppContext:
	"""Return the initialized app context or fail with 503."""
	if CONTEXT is None:
		logger.warning("[API] Request received before startup finished")
		raise HTTPException(status_code=503, detail="App not initialized")
	return CONTEXT


def authed_client(authorization: Optional[str]) -> DataConnect:
	"""Per-request handle that forwards the caller's Firebase ID token."""
	if not authorization or not authorization.lower().startswith("bearer "):
		raise HTTPException(status_code=401, detail="Missing Bearer token")
	token = authorization.split(" ", 1)[1].strip()
	return get_context().dc.with_token(token)


# Map client/backend errors to HTTP status codes
@app.exception_handler(MovieHubError)
async def moviehub_error_handler(request: Request, exc: MovieHubError):
	if isinstance(exc, (InvalidArgumentError, ValidationError)):
		status = 400
	elif isinstance(exc, AuthorizationError):
		status = 401
	elif isinstance(exc, NetworkError):
		status = 502
	else:
		status = 500
	logger.warning(f"[API] {request.url.path} failed with {type(exc).__name__}: {exc}")
	return JSONResponse(status_code=status, content={"detail": str(exc), "error": type(exc).__name__})


# FastAPI startup hook to initialize the app context once
@app.on_event("startup")
async def startup_event():
	"""Initialize the Data Connect handle and log how it was initialized."""
	global CONTEXT, STARTUP_TIME_S  # refer to module-level globals
	start = time.time()  # start timer for startup latency
	logger.info("[API] Startup: initializing app context...")  # log intent
	CONTEXT = initialize_app()  # build handle, auth and state store
	STARTUP_TIME_S = time.time() - start  # elapsed seconds
	logger.info(f"[API] Startup complete in {STARTUP_TIME_S:.2f}s.")  # summary log


# Simple health endpoint for readiness checks
@app.get("/health")
async def health():
	"""Return minimal health info for liveness/readiness probes."""
	return {
		"status": "ok",  # constant indicator
		"project_id": CONTEXT.settings.project_id if CONTEXT else None,  # target project
		"emulator": CONTEXT.dc.origin if CONTEXT and CONTEXT.dc.is_emulator else None,  # emulator origin if used
		"startup_seconds": round(STARTUP_TIME_S, 2),  # startup latency
	}


@app.get("/home")
def home():
	"""HomePage query data as returned by the connector."""
	return generated.home_page(get_context().dc).data


@app.get("/browse", response_model=BrowseResponse)
def browse(
	title: Optional[str] = None,
	minYear: Optional[str] = None,
	maxYear: Optional[str] = None,
	minRating: Optional[str] = None,
	genres: Optional[str] = None,
):
	"""Run BrowseMovies for the given filters; zero movies yields the empty state."""
	start = time.time()  # start timer
	params = {"title": title, "minYear": minYear, "maxYear": maxYear, "minRating": minRating, "genres": genres}
	page = BrowsePage(get_context().dc)  # fresh controller per request
	page.load({k: v for k, v in params.items() if v is not None})  # fetch
	if page.state.error:  # backend failure already logged by the page
		raise HTTPException(status_code=502, detail=page.state.error)

	elapsed_ms = (time.time() - start) * 1000  # compute ms
	logger.info(f"[API] /browse served {len(page.movies)} movies in {elapsed_ms:.2f} ms")  # summary
	return BrowseResponse(
		query_string=page.filters.to_query_string(),
		url=page.apply(),
		elapsed_ms=round(elapsed_ms, 2),
		empty=page.is_empty,
		message=EMPTY_MESSAGE if page.is_empty else None,
		suggestions=page.suggestions,
		movies=[to_movie_out(m) for m in page.movies],
	)


@app.get("/search", response_model=SearchResponse)
def search(q: str = Query(..., min_length=1, description="Full-text search term")):
	"""Run SearchMovies and return the three result rows."""
	start = time.time()  # start timer
	page = AdvancedSearchPage(get_context().dc)
	rows = page.search(q)
	if page.state.error:
		raise HTTPException(status_code=502, detail=page.state.error)
	elapsed_ms = (time.time() - start) * 1000
	logger.info(f"[API] /search q='{q}' served in {elapsed_ms:.2f} ms")
	return SearchResponse(
		query=q,
		elapsed_ms=round(elapsed_ms, 2),
		rows={key: [to_movie_out(m) for m in movies] for key, movies in rows.items()},
		descriptions={key: description for key, _, description in RESULT_ROWS},
	)


@app.get("/movies/{movie_id}")
def movie_detail(movie_id: str):
	"""MoviePage query; 404 when the connector has no such movie."""
	data = generated.movie_page(get_context().dc, {"id": movie_id}).data
	if not data.get("movie"):
		raise HTTPException(status_code=404, detail=f"Movie {movie_id} not found")
	return data


@app.post("/theatres", response_model=TheatresResponse)
def find_theatres(body: TheatresRequest):
	"""Ask the grounded model for showtimes; failures come back as an error message, not a 5xx."""
	ctx = get_context()
	request = TheatreSearchRequest(
		title=body.title,
		genre=body.genre,
		description=body.description,
		location=body.location,
	)
	if body.date:
		request.date = body.date
	page = FindTheatresPage(ctx.search_model(), request)
	movies = page.search()
	grounding = page.grounding
	return TheatresResponse(
		movies=movies,
		sources=[SourceOut(uri=s.uri, title=s.title) for s in (grounding.sources if grounding else [])],
		rendered_content=grounding.rendered_content if grounding else None,
		error=page.state.error,
	)


@app.get("/history")
def watch_history(
	limit: Optional[int] = Query(None, ge=1),
	offset: Optional[int] = Query(None, ge=0),
	authorization: Optional[str] = Header(None),
):
	dc = authed_client(authorization)
	variables: Dict[str, Any] = {}
	if limit is not None:
		variables["limit"] = limit
	if offset is not None:
		variables["offset"] = offset
	return execute_query(generated.WATCH_HISTORY_PAGE.ref_with_client(dc, variables)).data


@app.get("/history/detailed")
def detailed_history(authorization: Optional[str] = Header(None)):
	return generated.detailed_watch_history(authed_client(authorization)).data


@app.post("/watches")
def add_watch(body: AddWatchRequest, authorization: Optional[str] = Header(None)):
	variables = body.model_dump(exclude_none=True)
	return execute_mutation(generated.ADD_WATCH.ref_with_client(authed_client(authorization), variables)).data


@app.delete("/watches/{watch_id}")
def delete_watch(watch_id: str, authorization: Optional[str] = Header(None)):
	return generated.delete_watch(authed_client(authorization), {"watchId": watch_id}).data


@app.post("/reviews")
def add_review(body: AddReviewRequest, authorization: Optional[str] = Header(None)):
	return generated.add_review(authed_client(authorization), body.model_dump()).data
