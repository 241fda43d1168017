"""
Data models for MovieHub.
Defines the connector descriptor, operation references/results, and the
passive domain records returned by the backend.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
# Import typing helpers for precise and self-documenting types
from typing import Any, Dict, List, Optional  # mappings, lists and optional values


@dataclass(frozen=True)
class ConnectorConfig:
	"""
	Identifies which backend schema/endpoint an operation targets.
	Shared read-only by every operation builder.
	"""
	connector: str  # connector name inside the service
	service: str  # Data Connect service id
	location: str  # deployment region (e.g., "us-central1")

	def resource_name(self, project_id: str) -> str:
		"""Full connector resource name used in REST paths and request bodies."""
		return (
			f"projects/{project_id}/locations/{self.location}"
			f"/services/{self.service}/connectors/{self.connector}"
		)


@dataclass(frozen=True)
class OperationRef:
	"""
	A bound, not-yet-executed description of one named query or mutation.
	Created fresh per call and used once; equality ignores the client handle.
	"""
	name: str  # wire-level operation name (e.g., "BrowseMovies")
	kind: str  # "query" or "mutation"
	variables: Dict[str, Any] = field(default_factory=dict)  # bound variables
	client: Any = field(default=None, compare=False, repr=False)  # DataConnect handle


@dataclass
class OperationResult:
	"""Typed payload of an executed operation plus where it came from."""
	data: Dict[str, Any]  # the "data" object returned by the connector
	source: str  # "SERVER" (no client cache exists)
	ref: OperationRef  # the reference that produced this result


@dataclass
class User:
	"""A signed-in user's public profile."""
	id: Optional[str] = None  # auth uid
	username: Optional[str] = None  # local part of the email
	display_name: Optional[str] = None  # display name from the auth provider
	image_url: Optional[str] = None  # avatar URL

	@classmethod
	def from_dict(cls, data: Optional[Dict[str, Any]]) -> "User":
		data = data or {}
		return cls(
			id=data.get("id"),
			username=data.get("username"),
			display_name=data.get("displayName"),
			image_url=data.get("imageUrl"),
		)


@dataclass
class Movie:
	"""
	A movie as returned by the connector.
	Only id and title are guaranteed; everything else depends on the query.
	"""
	id: str  # movie UUID
	title: str  # display title
	image_url: Optional[str] = None  # poster URL
	release_date: Optional[str] = None  # ISO date string
	genre: Optional[str] = None  # primary genre label
	rating: Optional[float] = None  # average rating on a 0-10 scale
	description: Optional[str] = None  # synopsis
	tags: List[str] = field(default_factory=list)  # free-form tags

	@property
	def release_year(self) -> Optional[int]:
		"""Year portion of release_date, or None when missing/unparseable."""
		if not self.release_date:
			return None
		try:
			return int(str(self.release_date)[:4])
		except ValueError:
			return None

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "Movie":
		"""Build a Movie from connector JSON with safe defaults."""
		rating = data.get("rating")
		tags = data.get("tags") or []
		if isinstance(tags, str):  # tolerate comma-separated strings
			tags = [t.strip() for t in tags.split(",") if t.strip()]
		return cls(
			id=str(data.get("id", "")),
			title=data.get("title") or "",
			image_url=data.get("imageUrl"),
			release_date=data.get("releaseDate"),
			genre=data.get("genre"),
			rating=float(rating) if rating is not None else None,
			description=data.get("description"),
			tags=list(tags),
		)


@dataclass
class Watch:
	"""One entry in a user's watch history."""
	id: str  # watch UUID
	movie: Optional[Movie] = None  # the movie watched
	watch_date: Optional[str] = None  # ISO date
	location: Optional[str] = None  # where it was watched
	format: Optional[str] = None  # e.g., "theatre", "streaming"

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "Watch":
		movie = data.get("movie")
		return cls(
			id=str(data.get("id", "")),
			movie=Movie.from_dict(movie) if movie else None,
			watch_date=data.get("watchDate"),
			location=data.get("location"),
			format=data.get("format"),
		)


@dataclass
class Review:
	"""A user's review of a movie."""
	movie_id: Optional[str] = None  # reviewed movie
	rating: Optional[int] = None  # 0-10 scale
	review_text: Optional[str] = None  # body
	review_date: Optional[str] = None  # ISO date
	user: Optional[User] = None  # author

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "Review":
		movie = data.get("movie") or {}
		user = data.get("user")
		return cls(
			movie_id=data.get("movieId") or movie.get("id"),
			rating=data.get("rating"),
			review_text=data.get("reviewText"),
			review_date=data.get("reviewDate"),
			user=User.from_dict(user) if user else None,
		)


@dataclass
class GroundingSource:
	"""A web page the model cited while grounding its answer."""
	uri: str  # link to the source
	title: str = "Source"  # page title when provided


@dataclass
class GroundingInfo:
	"""Attribution that must be shown next to grounded model output."""
	sources: List[GroundingSource] = field(default_factory=list)  # cited pages
	rendered_content: Optional[str] = None  # search entry point HTML snippet
