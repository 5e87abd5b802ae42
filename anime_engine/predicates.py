"""
Predicate library.
Stateless single-field filters over a working collection; each returns a new list.
"""

import re
from typing import Iterable, List, Optional, Sequence

from loguru import logger

from .models import (
	Anime,
	CategoricalDirective,
	DateRangeFilter,
	NumericDirective,
	NumericFilter,
	RangeFilter,
	Selective,
	TextFilter,
)

RE_YEAR = re.compile(r"\d{4}")  # first 4-digit run in free-text dates
RE_LEADING_INT = re.compile(r"\s*(-?\d+)")  # "2010", "2010-04", " 1998 "

NUMERIC_OPERATORS = ('eq', 'gt', 'gte', 'lt', 'lte', 'between')


def extract_year(aired: str) -> Optional[int]:
	"""Return the first 4-digit run in an aired string as a year, or None."""
	if not aired:
		return None
	m = RE_YEAR.search(aired)
	return int(m.group(0)) if m else None


def split_segments(value: str) -> List[str]:
	"""Split a comma-delimited tag field into trimmed, lowercased segments."""
	return [item.strip().lower() for item in value.split(',')]


def _clean_values(values: Iterable[str]) -> List[str]:
	# lowercase and drop blanks; an empty needle would match everything
	return [v.strip().lower() for v in values if isinstance(v, str) and v.strip()]


def _text(anime: Anime, field: str) -> str:
	value = getattr(anime, field, '')
	return '' if value is None else str(value)


def apply_text_filter(data: Sequence[Anime], field: str, directive: TextFilter) -> List[Anime]:
	"""Keep records whose field equals (exact) or contains the query."""
	query = directive.query if directive.case_sensitive else directive.query.lower()

	def matches(anime: Anime) -> bool:
		value = _text(anime, field)
		if not value:  # absent values never match
			return False
		if not directive.case_sensitive:
			value = value.lower()
		return value == query if directive.exact else query in value

	return [anime for anime in data if matches(anime)]


def _satisfies(value: float, directive: NumericDirective) -> bool:
	if isinstance(directive, RangeFilter):
		if directive.min is not None and value < directive.min:
			return False
		if directive.max is not None and value > directive.max:
			return False
		return True

	op = directive.operator
	if op == 'eq':
		return value == directive.value
	if op == 'gt':
		return value > directive.value
	if op == 'gte':
		return value >= directive.value
	if op == 'lt':
		return value < directive.value
	if op == 'lte':
		return value <= directive.value
	if op == 'between':
		# no upper bound means nothing can be "between"
		if directive.second_value is None:
			return False
		return directive.value <= value <= directive.second_value
	return True


def apply_numeric_filter(data: Sequence[Anime], field: str, directive: NumericDirective) -> List[Anime]:
	"""
	Keep records whose numeric field satisfies the directive.
	A record with an unknown value never satisfies a numeric directive.
	"""
	if isinstance(directive, NumericFilter) and directive.operator not in NUMERIC_OPERATORS:
		logger.debug(f"[Predicates] Ignoring unknown operator '{directive.operator}' on {field}")
		return list(data)
	return [
		anime for anime in data
		if getattr(anime, field) is not None and _satisfies(getattr(anime, field), directive)
	]


def _combine(hits: List[bool], directive: CategoricalDirective) -> bool:
	if isinstance(directive, Selective) and directive.match_all:
		return all(hits)
	return any(hits)


def apply_categorical_filter(data: Sequence[Anime], field: str, directive: CategoricalDirective) -> List[Anime]:
	"""Single-valued field: case-insensitive containment of each value in the whole field."""
	values = _clean_values(directive.values)
	if not values:
		logger.debug(f"[Predicates] Empty categorical directive on {field}; skipped")
		return list(data)

	result = []
	for anime in data:
		field_value = _text(anime, field).lower()
		if _combine([v in field_value for v in values], directive):
			result.append(anime)
	return result


def apply_multi_value_filter(data: Sequence[Anime], field: str, directive: CategoricalDirective) -> List[Anime]:
	"""
	Delimited field: each requested value must be contained in at least one segment.
	match_all requires every value to hit; otherwise any value is enough.
	"""
	values = _clean_values(directive.values)
	if not values:
		logger.debug(f"[Predicates] Empty multi-value directive on {field}; skipped")
		return list(data)

	result = []
	for anime in data:
		segments = split_segments(_text(anime, field))
		hits = [any(v in segment for segment in segments) for v in values]
		if _combine(hits, directive):
			result.append(anime)
	return result


def exclude_categorical(data: Sequence[Anime], field: str, values: Iterable[str]) -> List[Anime]:
	"""Drop records whose single-valued field contains any of the values."""
	needles = _clean_values(values)
	if not needles:
		return list(data)
	return [
		anime for anime in data
		if not any(v in _text(anime, field).lower() for v in needles)
	]


def exclude_multi_value(data: Sequence[Anime], field: str, values: Iterable[str]) -> List[Anime]:
	"""Drop records where any value is contained in any segment of the delimited field."""
	needles = _clean_values(values)
	if not needles:
		return list(data)
	result = []
	for anime in data:
		segments = split_segments(_text(anime, field))
		if not any(v in segment for v in needles for segment in segments):
			result.append(anime)
	return result


def parse_year_bound(bound) -> Optional[int]:
	"""Accept 1998, "1998" or "1998-04"; anything else is no bound."""
	if bound is None or isinstance(bound, bool):
		return None
	if isinstance(bound, int):
		return bound
	if isinstance(bound, float):
		return int(bound)
	if isinstance(bound, str):
		m = RE_LEADING_INT.match(bound)
		return int(m.group(1)) if m else None
	return None


def apply_date_filter(data: Sequence[Anime], directive: DateRangeFilter) -> List[Anime]:
	"""Keep records whose aired year lies within the inclusive bounds."""
	start = parse_year_bound(directive.start)
	end = parse_year_bound(directive.end)
	if start is None and end is None:
		logger.debug("[Predicates] Date directive without usable bounds; skipped")
		return list(data)

	result = []
	for anime in data:
		year = extract_year(anime.aired)
		if year is None:  # undated records never match a bounded range
			continue
		if start is not None and year < start:
			continue
		if end is not None and year > end:
			continue
		result.append(anime)
	return result
