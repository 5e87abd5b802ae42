"""
Aggregate helpers.
Unique values for choice lists and min/max/average statistics for numeric fields.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .models import Anime, MULTI_VALUE_FIELDS, NUMERIC_FIELDS, resolve_field


@dataclass(frozen=True)
class FieldStatistics:
	min: float
	max: float
	avg: float
	count: int


def get_unique_values(data: Sequence[Anime], field: str) -> List[str]:
	"""
	Return the distinct values of a field, sorted, case preserved.
	Genres/studios/producers are split on commas so each tag counts on its own.
	"""
	name = resolve_field(field)
	if name is None:
		return []

	values = set()
	for anime in data:
		value = getattr(anime, name)
		if value is None or value == '':
			continue
		if name in MULTI_VALUE_FIELDS:
			for item in str(value).split(','):
				item = item.strip()
				if item:
					values.add(item)
		else:
			values.add(str(value))
	return sorted(values)


def get_field_statistics(data: Sequence[Anime], field: str) -> Optional[FieldStatistics]:
	"""Statistics over records with a known value; None when there are none."""
	name = resolve_field(field)
	if name not in NUMERIC_FIELDS:
		return None

	values = np.fromiter(
		(getattr(anime, name) for anime in data if getattr(anime, name) is not None),
		dtype=float,
	)
	if values.size == 0:
		return None

	return FieldStatistics(
		min=float(values.min()),
		max=float(values.max()),
		avg=float(values.mean()),
		count=int(values.size),
	)
