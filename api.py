"""
FastAPI server exposing the anime query tools.
Run: uvicorn api:app --reload

Endpoints:
- GET /health: basic health check
- POST /tools/search, /tools/filter, /tools/filter-exclusions, /tools/options,
  /tools/statistics, /tools/find-exact, /tools/lookup: one endpoint per tool

Startup loads the dataset once (ANIME_DATA_PATH, default data/anime-data.json);
every request reads the same immutable snapshot.
"""

# Import standard libraries for timing
import time  # measure startup and request latencies
from typing import Any, Dict, Optional  # precise typing for clarity

# Import FastAPI for building the web API
from fastapi import FastAPI  # FastAPI primitives

# Import our internal modules for data loading and the tool layer
from anime_engine import config  # paths and logging settings
from anime_engine.data_loader import DataLoader  # loads and normalizes anime
from anime_engine.schemas import (  # request bodies
	ExclusionFilterParams,
	FilterParams,
	FindExactParams,
	LookupParams,
	OptionsParams,
	SearchParams,
	StatisticsParams,
)
from anime_engine.tools import AnimeToolkit  # tool operations

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger

# Instantiate the FastAPI application with metadata
app = FastAPI(title="Anime Query Engine API", version="1.0.0")  # web app

# Globals that hold the toolkit instance and measured startup time
TOOLKIT: Optional[AnimeToolkit] = None  # will point to the initialized toolkit
STARTUP_TIME_S: float = 0.0  # measures how long startup took


def get_toolkit() -> AnimeToolkit:
	"""Return the loaded toolkit, or an empty one so tools answer 'data unavailable'."""
	return TOOLKIT if TOOLKIT is not None else AnimeToolkit([])


# FastAPI startup hook to load the dataset once
@app.on_event("startup")
async def startup_event():
	"""Load the dataset and build the toolkit."""
	global TOOLKIT, STARTUP_TIME_S  # refer to module-level globals
	start = time.time()  # start timer for startup latency

	config.configure_logging()  # apply ANIME_LOG_LEVEL
	logger.info(f"[API] Startup: loading anime from {config.DATA_PATH}...")  # log intent

	# An unreadable dataset yields an empty list; the tools then report "data unavailable"
	records = DataLoader().load(config.DATA_PATH)  # read dataset
	TOOLKIT = AnimeToolkit(records)  # create toolkit

	STARTUP_TIME_S = time.time() - start  # elapsed seconds
	logger.info(f"[API] Startup complete in {STARTUP_TIME_S:.2f}s with {len(records)} anime.")  # summary log


# Simple health endpoint for readiness checks
@app.get("/health")
async def health():
	"""Return minimal health info for liveness/readiness probes."""
	toolkit = get_toolkit()
	return {
		"status": "ok",  # constant indicator
		"data_loaded": toolkit.available,  # True if records are loaded
		"records": len(toolkit.records),  # dataset size
		"startup_seconds": round(STARTUP_TIME_S, 2)  # startup latency
	}


def _timed(name: str, call) -> Dict[str, Any]:
	"""Run one tool call and log how long it took."""
	start = time.time()  # start timer
	payload = call()  # run tool
	elapsed_ms = (time.time() - start) * 1000  # compute ms
	logger.info(f"[API] /tools/{name} success={payload.get('success')} in {elapsed_ms:.2f} ms")  # summary
	return payload


@app.post("/tools/search")
def search(params: SearchParams):
	"""Fuzzy text search."""
	return _timed("search", lambda: get_toolkit().search_anime(params))


@app.post("/tools/filter")
def filter_anime(params: FilterParams):
	"""Full filter with sort and pagination."""
	return _timed("filter", lambda: get_toolkit().filter_anime(params))


@app.post("/tools/filter-exclusions")
def filter_with_exclusions(params: ExclusionFilterParams):
	"""Include/exclude filter."""
	return _timed("filter-exclusions", lambda: get_toolkit().filter_anime_with_exclusions(params))


@app.post("/tools/options")
def options(params: OptionsParams):
	"""Unique values of a categorical field."""
	return _timed("options", lambda: get_toolkit().get_anime_options(params))


@app.post("/tools/statistics")
def statistics(params: StatisticsParams):
	"""Statistics of a numeric field."""
	return _timed("statistics", lambda: get_toolkit().get_anime_statistics(params))


@app.post("/tools/find-exact")
def find_exact(params: FindExactParams):
	"""Exact title lookup with suggestions."""
	return _timed("find-exact", lambda: get_toolkit().find_exact_anime(params))


@app.post("/tools/lookup")
def lookup(params: LookupParams):
	"""Exact-or-partial title lookup."""
	return _timed("lookup", lambda: get_toolkit().get_anime_by_title(params))
