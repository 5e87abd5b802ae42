"""
Configuration for the anime query engine.
"""
import os
import sys
from pathlib import Path

from loguru import logger

# ---------------------------------------------------------------------------
# Paths (override with ANIME_DATA_PATH for deployment)
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parents[1]
DATA_PATH = Path(os.environ.get("ANIME_DATA_PATH", str(PROJECT_ROOT / "data" / "anime-data.json")))

# ---------------------------------------------------------------------------
# Fuzzy search tuning
# ---------------------------------------------------------------------------
FUZZY_FRACTION = float(os.environ.get("ANIME_FUZZY_FRACTION", "0.2"))  # edit budget per token length
MAX_FUZZY_DISTANCE = 6  # hard cap on edits regardless of token length
FIELD_BOOSTS = {"title": 2.0, "english": 2.0}  # other indexed fields weigh 1.0

# ---------------------------------------------------------------------------
# Tool payloads
# ---------------------------------------------------------------------------
DESCRIPTION_PREVIEW = int(os.environ.get("ANIME_DESCRIPTION_PREVIEW", "200"))  # chars kept in summaries
SUGGESTION_LIMIT = int(os.environ.get("ANIME_SUGGESTION_LIMIT", "5"))
SUGGESTION_CUTOFF = 80  # minimum WRatio for a typo-tolerant title suggestion

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = os.environ.get("ANIME_LOG_LEVEL", "INFO").upper()


def configure_logging(level: str = LOG_LEVEL) -> None:
	"""Replace loguru's default sink with a stderr sink at the configured level."""
	logger.remove()
	logger.add(sys.stderr, level=level)
