"""
Data loading and preprocessing module.
Handles loading anime rows from JSON/JSONL/CSV and cleaning/normalizing them into records.
"""

# Standard libs for file parsing, regex, math checks, typing, and paths
import csv  # tabular interchange format
import json  # read JSON arrays and JSON lines
import math  # finite-number checks
import re  # uppercase-boundary splitting
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union  # type hints
from pathlib import Path  # filesystem-safe paths

# Import our Anime data class and field groupings used across the project
from .models import Anime, ANIME_FIELDS, MULTI_VALUE_FIELDS, NUMERIC_FIELDS, Number  # structured record

# Console logging
from loguru import logger  # console logger


# Zero-width split point before every uppercase letter ("ActionComedy" -> "Action", "Comedy")
_UPPERCASE_BOUNDARY = re.compile(r'(?=[A-Z])')

# Placeholder the source feed uses for "no value"
_PLACEHOLDER = 'N/A'


def clean_comma_separated_field(field_value: str) -> str:
	"""
	Repair a comma-separated tag field coming from the scraped feed.
	Tags accidentally concatenated with themselves are collapsed
	("AdventureAdventure,ComedyComedy" -> "Adventure, Comedy"), placeholders
	and empty segments are dropped, and duplicates are removed keeping first-seen order.
	"""
	if not field_value or field_value.strip() == '' or field_value == _PLACEHOLDER:
		return ''

	items = [item.strip() for item in field_value.split(',') if item.strip() != '']
	cleaned: Dict[str, None] = {}  # ordered set

	for item in items:
		cleaned_item = item

		# Same text repeated exactly: "AdventureAdventure" -> "Adventure"
		half_length = len(item) // 2
		if half_length > 0 and item[:half_length] == item[half_length:]:
			cleaned_item = item[:half_length]
		else:
			# Capitalised words repeated: split on uppercase boundaries and compare halves
			parts = _UPPERCASE_BOUNDARY.split(item)
			if parts and parts[0] == '':
				parts = parts[1:]  # re.split yields a leading '' when the item starts uppercase
			if len(parts) % 2 == 0:
				middle = len(parts) // 2
				first_half = ''.join(parts[:middle])
				second_half = ''.join(parts[middle:])
				if first_half == second_half:
					cleaned_item = first_half

		if cleaned_item and cleaned_item != _PLACEHOLDER:
			cleaned[cleaned_item] = None

	return ', '.join(cleaned)


def to_number(value: Any) -> Optional[Number]:
	"""
	Coerce a loosely-typed value into a number, or None (unknown) when that is not possible.
	Thousands separators are stripped; NaN and infinities become unknown.
	"""
	if value is None or isinstance(value, bool):
		return None
	if isinstance(value, (int, float)):
		return value if math.isfinite(value) else None

	text = str(value).strip().replace(',', '')
	if text == '' or '_' in text:  # int()/float() would accept "1_000"
		return None
	try:
		return int(text)
	except ValueError:
		pass
	try:
		number = float(text)
	except ValueError:
		return None
	return number if math.isfinite(number) else None


class DataLoader:
	"""
	Handles loading and preprocessing of anime data.
	Every public load method returns an empty list on failure instead of raising,
	so callers can treat "no records" as "no data available".
	"""

	def load(self, filepath: Union[str, Path]) -> List[Anime]:
		"""Load a dataset file, choosing the parser from its suffix (.json, .jsonl, .csv)."""
		suffix = Path(filepath).suffix.lower()  # dispatch key
		if suffix == '.jsonl':
			return self.load_from_jsonl(filepath)
		if suffix == '.csv':
			return self.load_from_csv(filepath)
		return self.load_from_json(filepath)  # the dataset ships as a JSON array

	def load_from_json(self, filepath: Union[str, Path]) -> List[Anime]:
		"""
		Load anime from a JSON file holding an array of flat key/value objects.
		Returns a list of Anime objects, or [] if the file is missing or malformed.
		"""
		filepath = Path(filepath)  # normalize path
		logger.info(f"[Loader] Loading anime from {filepath}...")  # log action

		try:
			with open(filepath, 'r', encoding='utf-8') as f:
				raw = json.load(f)  # whole array at once
		except (OSError, json.JSONDecodeError) as e:
			logger.error(f"[Loader] Failed to load anime data from {filepath}: {e}")  # unreadable source
			return []

		if not isinstance(raw, list):  # the file must hold an array of rows
			logger.error(f"[Loader] Expected a JSON array in {filepath}, got {type(raw).__name__}")
			return []

		return self.load_records(raw)

	def load_from_jsonl(self, filepath: Union[str, Path]) -> List[Anime]:
		"""
		Load anime from a JSON Lines (JSONL) file where each line is one JSON object.
		Invalid lines are skipped with a warning.
		"""
		rows = []  # accumulator for parsed rows
		filepath = Path(filepath)  # normalize path
		logger.info(f"[Loader] Loading anime from {filepath}...")  # log action

		try:
			# Read line-by-line to handle large datasets efficiently
			with open(filepath, 'r', encoding='utf-8') as f:
				for line_num, line in enumerate(f, 1):  # keep track of line number for diagnostics
					if not line.strip():  # tolerate blank lines
						continue
					try:
						rows.append(json.loads(line))  # parse JSON object per line
					except json.JSONDecodeError as e:
						logger.warning(f"[Loader] Skipping invalid JSON at line {line_num}: {e}")  # malformed line
		except OSError as e:
			logger.error(f"[Loader] Failed to load anime data from {filepath}: {e}")  # unreadable source
			return []

		return self.load_records(rows)

	def load_from_csv(self, filepath: Union[str, Path]) -> List[Anime]:
		"""Load anime from a CSV export with one header row."""
		filepath = Path(filepath)  # normalize path
		logger.info(f"[Loader] Loading anime from {filepath}...")  # log action

		try:
			# utf-8-sig swallows the BOM spreadsheet exports like to prepend
			with open(filepath, 'r', encoding='utf-8-sig', newline='') as f:
				rows = list(csv.DictReader(f))
		except (OSError, csv.Error, UnicodeDecodeError) as e:
			logger.error(f"[Loader] Failed to load anime data from {filepath}: {e}")  # unreadable source
			return []

		return self.load_records(rows)

	def load_records(self, rows: Iterable[Any]) -> List[Anime]:
		"""
		Convert loosely-typed rows into Anime records.
		Rows that are not mappings or have no title are skipped with a warning.
		"""
		records = []  # accumulator for parsed Anime objects
		for row_num, row in enumerate(rows, 1):  # 1-based for diagnostics
			if not isinstance(row, Mapping):  # only key/value rows make sense
				logger.warning(f"[Loader] Skipping row {row_num}: expected an object, got {type(row).__name__}")
				continue
			try:
				anime = self._parse_anime_data(row)  # convert dict -> Anime
			except Exception as e:
				logger.warning(f"[Loader] Error parsing anime at row {row_num}: {e}")  # unexpected issue
				continue  # move on
			if anime is None:  # no usable title
				logger.warning(f"[Loader] Skipping row {row_num}: missing title")
				continue
			records.append(anime)  # collect

		logger.info(f"[Loader] Successfully loaded {len(records)} anime.")  # summary
		return records  # return list

	def _parse_anime_data(self, data: Mapping) -> Optional[Anime]:
		"""
		Convert a raw dictionary into a strongly-typed Anime object.
		Keys are matched case-insensitively, so "Title" and "title" both work.
		"""
		# Lowercase the keys once so the dataset's capitalised columns map onto attribute names
		lookup = {str(key).strip().lower(): value for key, value in data.items()}

		values: Dict[str, Any] = {}  # attribute name -> cleaned value
		for name in ANIME_FIELDS:
			raw = lookup.get(name)  # None when the key is missing
			if name in NUMERIC_FIELDS:
				values[name] = to_number(raw)  # number or unknown
			elif name in MULTI_VALUE_FIELDS:
				values[name] = clean_comma_separated_field(self._as_text(raw))  # repaired tag list
			else:
				values[name] = self._as_text(raw)  # plain text, '' when absent

		if not values['title'].strip():  # title is the one required field
			return None

		return Anime(**values)  # assemble the record

	def _as_text(self, value: Any) -> str:
		"""
		Normalize a value that may be None, a list, or a scalar into a string.
		Lists are joined with commas so tag lists can arrive either way.
		"""
		if value is None:  # missing field
			return ''
		if isinstance(value, list):  # already a list of tags
			return ','.join(str(item) for item in value if item is not None)
		if isinstance(value, float) and not math.isfinite(value):  # NaN from spreadsheet exports
			return ''
		return str(value)
