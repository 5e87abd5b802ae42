"""
Print a summary of the anime dataset.

This script:
1) Loads anime from the configured dataset (ANIME_DATA_PATH or data/anime-data.json)
2) Reports how many records have a known value for each numeric field
3) Lists the distinct genres, types and statuses

Usage:
	python -m scripts.dataset_summary [path]

Useful after regenerating the dataset to spot scraping artifacts early.
"""

import sys  # optional path argument
from pathlib import Path  # filesystem-safe paths

from loguru import logger  # console logging

from anime_engine import config  # default dataset path
from anime_engine.aggregates import get_field_statistics, get_unique_values  # summaries
from anime_engine.data_loader import DataLoader  # data ingestion
from anime_engine.models import NUMERIC_FIELDS  # fields with statistics


def main(argv=None):
	argv = sys.argv[1:] if argv is None else argv
	data_path = Path(argv[0]) if argv else config.DATA_PATH  # input dataset

	# Headline banner for visibility in console
	logger.info("=" * 60)
	logger.info(f"Dataset summary: {data_path}")
	logger.info("=" * 60)

	# 1) Load data
	records = DataLoader().load(data_path)
	if not records:
		logger.error("No records loaded; nothing to summarize.")
		return 1
	logger.info(f"[OK] Loaded {len(records)} anime")

	# 2) Numeric coverage
	for field in NUMERIC_FIELDS:
		stats = get_field_statistics(records, field)
		if stats is None:
			logger.info(f"  {field:<11} no known values")
			continue
		logger.info(
			f"  {field:<11} known={stats.count:<6} min={stats.min:g} max={stats.max:g} avg={stats.avg:.2f}"
		)

	# 3) Categorical values
	for field in ('genres', 'type', 'status'):
		values = get_unique_values(records, field)
		logger.info(f"  {field:<11} {len(values)} distinct: {', '.join(values[:15])}{' ...' if len(values) > 15 else ''}")

	logger.info("=" * 60)
	return 0


if __name__ == '__main__':
	sys.exit(main())  # invoke summary
