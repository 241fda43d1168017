"""
Streamlit UI for MovieHub.
Three pages (Browse, Advanced Search, Find Theatres) driven by the same page
controllers the API uses. Browse filters live in the URL query string so a
filtered view can be bookmarked or shared.

Run UI:    streamlit run streamlit_app.py
Emulator:  DATA_CONNECT_EMULATOR_HOST=localhost streamlit run streamlit_app.py
"""

# Streamlit framework to build a simple interactive UI
import streamlit as st  # UI primitives
# Typing to make function signatures clearer
from typing import List, Optional  # type hints

from moviehub.advanced_search import PROMPT_MESSAGE, RESULT_ROWS, AdvancedSearchPage  # full-text search
from moviehub.browse import EMPTY_MESSAGE, GENRES, MAX_STARS, BrowsePage  # browse grid
from moviehub.errors import MovieHubError  # sign-in failures
from moviehub.firebase import AppContext, initialize_app  # bootstrap
from moviehub.models import Movie  # movie record
from moviehub.page_state import ViewStatus  # page status values
from moviehub.theatres import IDLE_MESSAGE, NO_SHOWTIMES_MESSAGE, FindTheatresPage, TheatreSearchRequest  # AI showtimes

# Configure Streamlit page (title and layout width)
st.set_page_config(page_title="MovieHub", layout="wide")  # wide layout


# Cache the app context so the handle and auth session are built once per server process
@st.cache_resource(show_spinner=True)
def init_context() -> Optional[AppContext]:
	"""Create the app context; show an error in the UI if configuration is broken."""
	try:
		return initialize_app()
	except MovieHubError as e:
		st.error(f"Failed to initialize MovieHub: {e}")
		return None


def render_grid(movies: List[Movie], columns: int = 6):
	"""Poster grid with title and year/genre captions."""
	for start in range(0, len(movies), columns):
		cols = st.columns(columns)
		for col, movie in zip(cols, movies[start:start + columns]):
			with col:
				if movie.image_url:
					st.image(movie.image_url, width='stretch')  # poster
				st.markdown(f"**{movie.title}**")  # title
				st.caption(" · ".join(str(p) for p in (movie.release_year, movie.genre) if p))  # year + genre


def browse_view(ctx: AppContext):
	st.header("Browse Movies")
	page: BrowsePage = st.session_state.setdefault("browse_page", BrowsePage(ctx.dc))

	# URL params are the applied filters; reload whenever they change
	params = st.query_params.to_dict()
	if st.session_state.get("browse_params") != params:
		with st.spinner("Loading movies..."):
			page.load(params)
		st.session_state["browse_params"] = params

	# Sidebar filters edit the pending filters only
	with st.sidebar:
		st.subheader("Filters")
		pending = page.pending
		title = st.text_input("Title", value=pending.title or "", placeholder="Search by title")
		c1, c2 = st.columns(2)
		with c1:
			min_year = st.text_input("Min year", value=pending.min_year or "")
		with c2:
			max_year = st.text_input("Max year", value=pending.max_year or "")
		page.update_pending("title", title)
		page.update_pending("min_year", min_year)
		page.update_pending("max_year", max_year)

		st.caption("Minimum rating")
		star_cols = st.columns(MAX_STARS)
		for rating, col in enumerate(star_cols, start=1):
			with col:
				filled = page.pending.min_rating is not None and rating <= page.pending.min_rating
				if st.button("★" if filled else "☆", key=f"star-{rating}"):
					page.select_rating(rating)  # selecting the same star again clears it
					st.rerun()

		st.caption("Genres")
		for genre in GENRES:
			checked = st.checkbox(genre, value=genre in page.pending.genres, key=f"genre-{genre}")
			if checked != (genre in page.pending.genres):
				page.select_genre(genre, checked)

		if st.button("Search", type="primary"):
			st.query_params.from_dict(page.pending.to_query_params())
			st.rerun()
		if st.button("Reset All Filters"):
			page.reset()
			st.query_params.clear()
			st.rerun()

	# Results
	if page.state.status == ViewStatus.ERROR:
		st.error(page.state.error)
	elif page.is_empty:
		st.info(EMPTY_MESSAGE)
		for typed, offered in page.suggestions.items():
			st.caption(f"No genre called '{typed}'. Did you mean **{offered}**?")
		if st.button("Clear Filters"):
			page.reset()
			st.query_params.clear()
			st.rerun()
	else:
		st.caption(f"Shareable link: {page.apply()}")
		render_grid(page.movies)


def advanced_search_view(ctx: AppContext):
	st.header("Full-Text Search")
	page: AdvancedSearchPage = st.session_state.setdefault("search_page", AdvancedSearchPage(ctx.dc))

	with st.form("search-form"):
		query = st.text_input("Search Movies", value=page.query, placeholder="Search for movies...")
		submitted = st.form_submit_button("Search")
	if submitted:
		with st.spinner("Searching..."):
			page.search(query)

	if not page.has_searched:
		st.caption(PROMPT_MESSAGE)
		return
	if page.state.status == ViewStatus.ERROR:
		st.error(page.state.error)

	for key, heading, description in RESULT_ROWS:
		st.subheader(heading)
		st.caption(description)
		movies = page.rows.get(key) or []
		if movies:
			render_grid(movies)
		else:
			st.write("No results found for this search type.")
		st.divider()


def find_theatres_view(ctx: AppContext):
	st.header("Box Office Search")
	params = st.query_params
	page: FindTheatresPage = st.session_state.setdefault(
		"theatres_page",
		FindTheatresPage(
			ctx.search_model(),
			TheatreSearchRequest(
				title=params.get("title", ""),
				genre=params.get("genre", ""),
				description=params.get("description", ""),
			),
		),
	)
	if page.request.title:
		st.caption(f"Find **{page.request.title}** or similar films near you.")

	left, right = st.columns([1, 2])  # form on the left, results on the right
	with left:
		with st.form("theatres-form"):
			page.request.title = st.text_input("Movie", value=page.request.title)
			page.request.date = str(st.date_input("Date", value=page.request.date))
			page.request.location = st.text_input("Location", value=page.request.location, placeholder="City, Zip, or Address")
			submitted = st.form_submit_button("Find Showtimes", type="primary")

		with st.expander("Use my location"):
			lat = st.number_input("Latitude", value=0.0, format="%.5f")
			lon = st.number_input("Longitude", value=0.0, format="%.5f")
			if st.button("Use these coordinates"):
				page.use_location(lat, lon)
				st.rerun()

		if page.grounding:
			if page.grounding.rendered_content:
				st.html(page.grounding.rendered_content)  # required search attribution
			if page.grounding.sources:
				st.caption("Sources: " + " · ".join(f"[{s.title}]({s.uri})" for s in page.grounding.sources))

	with right:
		if submitted:
			with st.spinner(f"Scanning theatres in {page.request.location or 'your area'}..."):
				page.search()
		if page.state.status == ViewStatus.ERROR:
			st.error(page.state.error)
		elif not page.movies:
			st.info(IDLE_MESSAGE)
		for movie in page.movies:
			with st.container(border=True):
				badge = "Selected Movie" if movie.is_target_movie else "Recommendation"
				st.subheader(f"🎬 {movie.title}")
				st.caption(badge)
				if movie.description:
					st.write(movie.description)
				if not movie.theatres:
					st.caption(NO_SHOWTIMES_MESSAGE)
				for theatre in movie.theatres:
					st.markdown(f"**📍 {theatre.name}**")
					st.write("  ".join(f"`{t}`" for t in theatre.showtimes))


def auth_sidebar(ctx: AppContext):
	"""Email/password sign-in; the first sign-in saves the user's profile once."""
	with st.sidebar:
		user = ctx.auth.current_user
		if user is not None:
			st.caption(f"Signed in as {user.email or user.uid}")
			if st.button("Sign out"):
				ctx.auth.sign_out()
				st.rerun()
			return
		with st.expander("Sign in"):
			email = st.text_input("Email")
			password = st.text_input("Password", type="password")
			if st.button("Sign in"):
				try:
					ctx.auth.sign_in_with_password(email, password)
					st.rerun()
				except MovieHubError as e:
					st.error(f"Sign-in failed: {e}")


# Main page title
st.title("🎬 MovieHub")  # friendly header

context = init_context()
if context is None:
	st.stop()

PAGES = {
	"Browse": browse_view,
	"Advanced Search": advanced_search_view,
	"Find Theatres": find_theatres_view,
}

with st.sidebar:
	choice = st.radio("Page", list(PAGES), index=0)
	st.markdown("---")  # separator
auth_sidebar(context)

PAGES[choice](context)

# Show a footer indicator of the backend in use
st.sidebar.markdown("---")  # separator
if context.dc.is_emulator:
	st.sidebar.caption(f"Backend: emulator at {context.dc.origin}")  # mode label
else:
	st.sidebar.caption(f"Backend: project {context.settings.project_id}")  # mode label
