"""
Query engine module.
Applies a filter specification to an anime collection as a fixed pipeline:
search -> text -> numeric -> categorical -> date -> sort -> pagination.
"""

from functools import cmp_to_key  # multi-key comparator with null handling
from numbers import Real  # numeric comparison check
from typing import Iterator, List, Mapping, Optional, Sequence, Tuple, Union  # type annotations

# Import project modules for data structures and components
from .models import AnimeFilters, Anime, DateRangeFilter, OrList, RangeFilter, SortOption, TextFilter, resolve_field  # core data classes
from .filter_spec import build_filters  # loose dict -> AnimeFilters
from .search_index import FuzzySearchIndex  # token index for fuzzy search
from . import predicates  # single-field filters

# Import loguru for console logging
from loguru import logger  # simple structured logger


FilterInput = Union[AnimeFilters, Mapping]

# Pipeline order within each stage
TEXT_STAGE = ('title', 'english', 'japanese', 'description')
NUMERIC_STAGE = ('score', 'popularity', 'rank', 'members', 'episodes')
CATEGORICAL_STAGE = (
	('type', False),
	('status', False),
	('genres', True),
	('demographic', False),
	('studios', True),
	('producers', True),
	('source', False),
	('rating', False),
	('premiered', False),
)  # (field, is multi-valued)


def _is_number(value) -> bool:
	return isinstance(value, Real) and not isinstance(value, bool)


def _compare(a: Anime, b: Anime, options: Sequence[SortOption]) -> int:
	"""
	Compare two records over the sort options in priority order.
	Unknown values go after defined ones ascending and before them descending.
	"""
	for option in options:
		a_val = getattr(a, option.field)
		b_val = getattr(b, option.field)
		ascending = option.direction == 'asc'

		if a_val is None and b_val is None:
			continue
		if a_val is None:
			return 1 if ascending else -1
		if b_val is None:
			return -1 if ascending else 1

		if _is_number(a_val) and _is_number(b_val):
			comparison = (a_val > b_val) - (a_val < b_val)
		else:
			a_str, b_str = str(a_val), str(b_val)
			comparison = (a_str > b_str) - (a_str < b_str)

		if comparison != 0:
			return comparison if ascending else -comparison
	return 0


def sort_records(data: Sequence[Anime], options: Sequence[SortOption]) -> List[Anime]:
	"""Stable multi-key sort; options naming unknown fields or directions are skipped."""
	valid = []
	for option in options:
		name = resolve_field(option.field)
		direction = option.direction.lower() if isinstance(option.direction, str) else None
		if name is None or direction not in ('asc', 'desc'):
			logger.debug(f"[Engine] Ignoring sort option {option}")
			continue
		valid.append(SortOption(field=name, direction=direction))
	if not valid:
		return list(data)
	return sorted(data, key=cmp_to_key(lambda a, b: _compare(a, b, valid)))


def paginate(data: Sequence[Anime], limit: Optional[int], offset: Optional[int]) -> List[Anime]:
	"""Slice [offset, offset + limit); no limit means to the end."""
	if limit is None and offset is None:
		return list(data)
	start = max(0, offset or 0)
	if limit is None:
		return list(data[start:])
	return list(data[start:start + max(0, limit)])


class AnimeFilterContext:
	"""
	Immutable wrapper around a collection snapshot.
	filter() returns a new context, so specifications can be layered one after another.
	The fuzzy index for a context is built on first search and reused afterwards.
	"""

	def __init__(self, records: Sequence[Anime]):
		self._records: Tuple[Anime, ...] = tuple(records)  # read-only snapshot
		self._index: Optional[FuzzySearchIndex] = None  # built lazily

	@property
	def data(self) -> Tuple[Anime, ...]:
		"""Current working collection."""
		return self._records

	def get_data(self) -> List[Anime]:
		"""Fresh list copy of the current collection."""
		return list(self._records)

	def __len__(self) -> int:
		return len(self._records)

	def __iter__(self) -> Iterator[Anime]:
		return iter(self._records)

	@property
	def index(self) -> FuzzySearchIndex:
		if self._index is None:
			logger.debug(f"[Engine] Building search index over {len(self._records)} records")
			self._index = FuzzySearchIndex(self._records)
		return self._index

	def with_filters(self, filters: FilterInput) -> 'AnimeFilterContext':
		"""Alias of filter()."""
		return self.filter(filters)

	def filter(self, filters: FilterInput) -> 'AnimeFilterContext':
		"""Apply one specification and return the narrowed context."""
		spec = build_filters(filters)
		data: List[Anime] = list(self._records)  # working collection
		logger.debug(f"[Engine] Filtering {len(data)} records | directives={spec.applied()}")

		# 1) Search narrows by set membership, keeping collection order
		if spec.search is not None:
			hits = self.index.lookup(
				spec.search.query,
				exact=spec.search.exact,
				case_sensitive=spec.search.case_sensitive,
			)
			data = [anime for position, anime in enumerate(self._records) if position in hits]
			logger.debug(f"[Engine] After search '{spec.search.query}': {len(data)}")

		# 2) Field-specific text filters
		for name in TEXT_STAGE:
			directive = getattr(spec, name)
			if directive is not None:
				data = predicates.apply_text_filter(data, name, directive)

		# 3) Numeric filters
		for name in NUMERIC_STAGE:
			directive = getattr(spec, name)
			if directive is not None:
				data = predicates.apply_numeric_filter(data, name, directive)

		# 4) Categorical filters
		for name, multi in CATEGORICAL_STAGE:
			directive = getattr(spec, name)
			if directive is None:
				continue
			if multi:
				data = predicates.apply_multi_value_filter(data, name, directive)
			else:
				data = predicates.apply_categorical_filter(data, name, directive)

		# 5) Date range
		if spec.aired is not None:
			data = predicates.apply_date_filter(data, spec.aired)

		logger.debug(f"[Engine] {len(data)} records left after filtering")

		# 6) Sort
		if spec.sort:
			data = sort_records(data, spec.sort)

		# 7) Pagination
		data = paginate(data, spec.limit, spec.offset)

		return AnimeFilterContext(data)


def query(data: Sequence[Anime], filters: FilterInput) -> Optional[List[Anime]]:
	"""
	One-shot query.
	Returns None when there is no data at all, otherwise a fresh list (empty when nothing matched).
	"""
	if not data:
		logger.warning("[Engine] Query against an empty collection; no data available")
		return None
	result = AnimeFilterContext(data).filter(filters).get_data()
	logger.info(f"[Engine] Query returned {len(result)} of {len(data)} records")
	return result


def filter_anime(data: Sequence[Anime], filters: FilterInput) -> Optional[List[Anime]]:
	"""Same as query(); kept under the name the tool layer uses."""
	return query(data, filters)


def create_filter_chain(data: Sequence[Anime]) -> AnimeFilterContext:
	"""Start a chain of filter() calls over a collection."""
	return AnimeFilterContext(data)


# Convenience helpers for single-directive queries

def search_anime_by_text(data: Sequence[Anime], text: str) -> Optional[List[Anime]]:
	return query(data, AnimeFilters(search=TextFilter(query=text)))


def filter_anime_by_genre(data: Sequence[Anime], genres: Sequence[str]) -> Optional[List[Anime]]:
	return query(data, AnimeFilters(genres=OrList(tuple(genres))))


def filter_anime_by_score(data: Sequence[Anime], min_score: Optional[float] = None, max_score: Optional[float] = None) -> Optional[List[Anime]]:
	return query(data, AnimeFilters(score=RangeFilter(min=min_score, max=max_score)))


def filter_anime_by_episodes(data: Sequence[Anime], min_episodes: Optional[int] = None, max_episodes: Optional[int] = None) -> Optional[List[Anime]]:
	return query(data, AnimeFilters(episodes=RangeFilter(min=min_episodes, max=max_episodes)))


def filter_anime_by_type(data: Sequence[Anime], types: Sequence[str]) -> Optional[List[Anime]]:
	return query(data, AnimeFilters(type=OrList(tuple(types))))


def filter_anime_by_status(data: Sequence[Anime], statuses: Sequence[str]) -> Optional[List[Anime]]:
	return query(data, AnimeFilters(status=OrList(tuple(statuses))))


def filter_anime_by_year(data: Sequence[Anime], start_year=None, end_year=None) -> Optional[List[Anime]]:
	return query(data, AnimeFilters(aired=DateRangeFilter(start=start_year, end=end_year)))
