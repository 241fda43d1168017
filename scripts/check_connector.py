"""
Connectivity smoke check for the Data Connect connector.

This script:
1) Reads settings from the environment (project, emulator host)
2) Initializes the Data Connect handle
3) Runs the HomePage query
4) Runs the GetMovies query and reports counts

Usage:
    python -m scripts.check_connector
    DATA_CONNECT_EMULATOR_HOST=localhost python -m scripts.check_connector

Exits non-zero if either query fails.
"""

import sys  # exit status
import time  # measure step timings

from loguru import logger  # console logging

from moviehub.config import Settings  # environment settings
from moviehub.errors import MovieHubError  # any client/backend failure
from moviehub.firebase import initialize_app  # bootstrap
from moviehub.generated import get_movies, home_page  # connector operations
from moviehub.state import MemoryStateStore  # no persisted state needed here


def main() -> int:
	# Headline banner for visibility in console
	logger.info("=" * 60)
	logger.info("Data Connect Connector Check")
	logger.info("=" * 60)

	# 1) Settings
	logger.info("[1/4] Reading settings...")
	settings = Settings.from_env()  # environment-driven config
	logger.info(f"[OK] project={settings.project_id} emulator={settings.emulator_host or '-'}")

	# 2) Handle
	logger.info("\n[2/4] Initializing Data Connect handle...")
	ctx = initialize_app(settings, store=MemoryStateStore())  # do not touch the user's state file
	logger.info(f"[OK] Targeting {ctx.dc.origin} / {ctx.dc.resource_name}")

	try:
		# 3) HomePage
		logger.info("\n[3/4] Running HomePage...")
		t0 = time.time()  # start timer
		home = home_page(ctx.dc).data
		sections = {k: len(v) for k, v in home.items() if isinstance(v, list)}  # list sizes per section
		logger.info(f"[OK] HomePage in {(time.time() - t0) * 1000:.1f} ms; sections={sections}")

		# 4) GetMovies
		logger.info("\n[4/4] Running GetMovies...")
		t0 = time.time()
		movies = get_movies(ctx.dc, {"limit": 10}).data.get("movies") or []
		logger.info(f"[OK] GetMovies returned {len(movies)} movies in {(time.time() - t0) * 1000:.1f} ms")
	except MovieHubError as e:
		logger.error(f"[FAIL] {type(e).__name__}: {e}")
		return 1

	# Footer
	logger.info("\nConnector reachable.")
	logger.info("=" * 60)
	return 0


if __name__ == '__main__':
	sys.exit(main())  # invoke check
