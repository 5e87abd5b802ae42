"""
Conversational tool layer.
Named operations an agent can call with a structured parameter object. Every
operation returns a plain dict payload and never raises: unexpected faults are
reported as {success: False, message, error}.
"""

from functools import wraps
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Type, Union

from loguru import logger
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from rapidfuzz import fuzz, process, utils

from . import config
from .aggregates import get_field_statistics, get_unique_values
from .models import (
	Anime,
	AnimeFilters,
	DateRangeFilter,
	OrList,
	RangeFilter,
	Selective,
	SortOption,
	TextFilter,
	resolve_field,
)
from .predicates import (
	apply_categorical_filter,
	apply_date_filter,
	apply_multi_value_filter,
	apply_numeric_filter,
	exclude_categorical,
	exclude_multi_value,
	extract_year,
)
from .query_engine import AnimeFilterContext, paginate, sort_records
from .schemas import (
	ExclusionFilterParams,
	FilterParams,
	FindExactParams,
	LookupParams,
	OptionsParams,
	SearchParams,
	StatisticsParams,
)

UNAVAILABLE_MESSAGE = "Anime data is unavailable"

# include/exclude dimension -> (record field, is multi-valued)
EXCLUSION_DIMENSIONS = {
	'genres': ('genres', True),
	'types': ('type', False),
	'statuses': ('status', False),
	'studios': ('studios', True),
	'demographics': ('demographic', False),
	'sources': ('source', False),
	'ratings': ('rating', False),
}


def _preview(text: str) -> str:
	limit = config.DESCRIPTION_PREVIEW
	if not text:
		return ''
	return text[:limit] + ('...' if len(text) > limit else '')


def _year(anime: Anime) -> str:
	year = extract_year(anime.aired)
	return str(year) if year is not None else 'Unknown'


def _brief(anime: Anime) -> Dict[str, Any]:
	return {
		'title': anime.title,
		'englishTitle': anime.english,
		'score': anime.score,
		'episodes': anime.episodes,
		'type': anime.type,
		'status': anime.status,
		'genres': anime.genres,
		'description': _preview(anime.description),
		'year': _year(anime),
	}


def _listing(anime: Anime) -> Dict[str, Any]:
	item = _brief(anime)
	item.update({
		'rank': anime.rank,
		'popularity': anime.popularity,
		'studios': anime.studios,
		'demographic': anime.demographic,
		'rating': anime.rating,
		'source': anime.source,
		'aired': anime.aired,
	})
	return item


def _details(anime: Anime) -> Dict[str, Any]:
	return {
		'title': anime.title,
		'englishTitle': anime.english,
		'japaneseTitle': anime.japanese,
		'synonyms': anime.synonyms,
		'description': anime.description,
		'score': anime.score,
		'rank': anime.rank,
		'popularity': anime.popularity,
		'members': anime.members,
		'episodes': anime.episodes,
		'type': anime.type,
		'status': anime.status,
		'aired': anime.aired,
		'premiered': anime.premiered,
		'broadcast': anime.broadcast,
		'producers': anime.producers,
		'licensors': anime.licensors,
		'studios': anime.studios,
		'source': anime.source,
		'genres': anime.genres,
		'demographic': anime.demographic,
		'duration': anime.duration,
		'rating': anime.rating,
	}


def _range(low, high) -> Optional[RangeFilter]:
	if low is None and high is None:
		return None
	return RangeFilter(min=low, max=high)


def _or_list(values: Optional[List[str]]) -> Optional[OrList]:
	return OrList(tuple(values)) if values else None


def _years(start, end) -> Optional[DateRangeFilter]:
	if not start and not end:
		return None
	return DateRangeFilter(start=start or None, end=end or None)


def tool(params_model: Type[BaseModel], failure_message: str, **failure_extra):
	"""
	Wrap a toolkit method: validate the raw parameters into params_model and turn
	any exception into a failure payload.
	"""
	def decorator(func: Callable[..., Dict[str, Any]]):
		@wraps(func)
		def wrapper(self, params: Union[BaseModel, Mapping, None] = None, **kwargs) -> Dict[str, Any]:
			try:
				if not isinstance(params, params_model):
					raw = dict(params or {})
					raw.update(kwargs)
					params = params_model.model_validate(raw)
				return func(self, params)
			except Exception as e:
				logger.exception(f"[Tools] {func.__name__} failed")
				payload = {'success': False, 'message': failure_message, 'error': str(e)}
				payload.update({key: (value() if callable(value) else value) for key, value in failure_extra.items()})
				return payload
		return wrapper
	return decorator


class AnimeToolkit:
	"""
	The operations exposed to the conversational agent, bound to one loaded snapshot.
	The search index is built once for the snapshot and shared by every call.
	"""

	def __init__(self, records: Sequence[Anime]):
		self.records = tuple(records)
		self._context = AnimeFilterContext(self.records)
		logger.info(f"[Tools] Toolkit ready with {len(self.records)} anime")

	@property
	def available(self) -> bool:
		return bool(self.records)

	def _unavailable(self, **extra) -> Dict[str, Any]:
		payload = {'success': False, 'message': UNAVAILABLE_MESSAGE, 'results': [], 'totalCount': 0}
		payload.update(extra)
		return payload

	def _run(self, spec: AnimeFilters) -> List[Anime]:
		return self._context.filter(spec).get_data()

	@tool(SearchParams, "Failed to search anime data", results=list)
	def search_anime(self, params: SearchParams) -> Dict[str, Any]:
		"""Fuzzy text search over titles, descriptions and synonyms."""
		if not self.available:
			return self._unavailable()

		results = self._run(AnimeFilters(search=TextFilter(query=params.query)))
		if not results:
			return {
				'success': True,
				'message': f'No anime found matching "{params.query}"',
				'results': [],
				'totalCount': 0,
			}

		page = paginate(results, params.limit, None)
		return {
			'success': True,
			'message': f'Found {len(results)} anime matching "{params.query}"',
			'results': [_brief(anime) for anime in page],
			'totalCount': len(results),
		}

	@tool(FilterParams, "Failed to filter anime data", results=list)
	def filter_anime(self, params: FilterParams) -> Dict[str, Any]:
		"""Full filter: search, numeric ranges, categories, years, one sort key and pagination."""
		if not self.available:
			return self._unavailable()

		sort = ()
		if params.sort_by:
			sort = (SortOption(field=resolve_field(params.sort_by), direction=params.sort_direction or 'desc'),)

		spec = AnimeFilters(
			search=TextFilter(query=params.search_query) if params.search_query else None,
			score=_range(params.min_score, params.max_score),
			episodes=_range(params.min_episodes, params.max_episodes),
			rank=_range(params.min_rank, params.max_rank),
			genres=_or_list(params.genres),
			type=_or_list(params.types),
			status=_or_list(params.statuses),
			studios=_or_list(params.studios),
			demographic=_or_list(params.demographics),
			source=_or_list(params.sources),
			rating=_or_list(params.ratings),
			aired=_years(params.start_year, params.end_year),
			sort=sort,
		)
		matches = self._run(spec)
		if not matches:
			return {
				'success': True,
				'message': "No anime found matching the specified criteria",
				'results': [],
				'totalCount': 0,
			}

		page = paginate(matches, params.limit, params.offset)
		return {
			'success': True,
			'message': f"Found {len(matches)} anime matching the criteria",
			'results': [_listing(anime) for anime in page],
			'totalCount': len(matches),
			'appliedFilters': list(spec.applied()),
		}

	@tool(ExclusionFilterParams, "Failed to filter anime with inclusion/exclusion criteria", results=list)
	def filter_anime_with_exclusions(self, params: ExclusionFilterParams) -> Dict[str, Any]:
		"""
		Include/exclude filter. Includes narrow the set (genres by any or all per
		include_all_genres, every other dimension by any); excludes drop a record
		on any hit.
		"""
		if not self.available:
			return self._unavailable()

		data: List[Anime] = list(self.records)

		# Literal text search first
		if params.search_query:
			data = self._run(AnimeFilters(search=TextFilter(query=params.search_query, exact=True)))

		# Includes
		for dimension, (field, multi) in EXCLUSION_DIMENSIONS.items():
			values = getattr(params, f'include_{dimension}')
			if not values:
				continue
			if multi:
				match_all = dimension == 'genres' and params.include_all_genres
				data = apply_multi_value_filter(data, field, Selective(tuple(values), match_all=match_all))
			else:
				data = apply_categorical_filter(data, field, OrList(tuple(values)))

		# Excludes
		for dimension, (field, multi) in EXCLUSION_DIMENSIONS.items():
			values = getattr(params, f'exclude_{dimension}')
			if not values:
				continue
			if multi:
				data = exclude_multi_value(data, field, values)
			else:
				data = exclude_categorical(data, field, values)

		# Numeric ranges
		score = _range(params.min_score, params.max_score)
		if score is not None:
			data = apply_numeric_filter(data, 'score', score)
		episodes = _range(params.min_episodes, params.max_episodes)
		if episodes is not None:
			data = apply_numeric_filter(data, 'episodes', episodes)

		# Years
		years = _years(params.start_year, params.end_year)
		if years is not None:
			data = apply_date_filter(data, years)

		if params.sort_by:
			data = sort_records(data, [SortOption(field=resolve_field(params.sort_by), direction=params.sort_direction or 'desc')])

		total = len(data)
		if not total:
			return {
				'success': True,
				'message': "No anime found matching the specified inclusion/exclusion criteria",
				'results': [],
				'totalCount': 0,
			}

		data = paginate(data, params.limit, None)
		set_lists = [name for name, value in params if isinstance(value, list) and value]
		return {
			'success': True,
			'message': f"Found {total} anime matching the inclusion/exclusion criteria",
			'results': [_listing(anime) for anime in data],
			'totalCount': total,
			'appliedFilters': {
				'included': [to_camel(name) for name in set_lists if name.startswith('include_')],
				'excluded': [to_camel(name) for name in set_lists if name.startswith('exclude_')],
			},
		}

	@tool(OptionsParams, "Failed to get unique values", values=list)
	def get_anime_options(self, params: OptionsParams) -> Dict[str, Any]:
		"""Distinct values of a categorical field, for choice lists."""
		if not self.available:
			return self._unavailable(field=params.field, values=[], count=0)

		values = get_unique_values(self.records, params.field)
		return {
			'success': True,
			'field': params.field,
			'values': values,
			'count': len(values),
			'message': f"Found {len(values)} unique values for {params.field}",
		}

	@tool(StatisticsParams, "Failed to calculate statistics", statistics=None)
	def get_anime_statistics(self, params: StatisticsParams) -> Dict[str, Any]:
		"""Min / max / average / count of a numeric field over records with a known value."""
		if not self.available:
			return self._unavailable(field=params.field, statistics=None)

		stats = get_field_statistics(self.records, params.field)
		if stats is None:
			return {
				'success': False,
				'field': params.field,
				'message': f"No valid data found for field {params.field}",
				'statistics': None,
			}

		return {
			'success': True,
			'field': params.field,
			'statistics': {
				'minimum': stats.min,
				'maximum': stats.max,
				'average': round(stats.avg, 2),
				'count': stats.count,
				'totalRecords': len(self.records),
			},
			'message': f"Statistics calculated for {stats.count} records with valid {params.field} values",
		}

	@tool(FindExactParams, "Failed to search for exact anime match", anime=None)
	def find_exact_anime(self, params: FindExactParams) -> Dict[str, Any]:
		"""Exact, case-insensitive title match with suggestions when nothing matches."""
		if not self.available:
			return self._unavailable(anime=None)

		wanted = params.title.lower().strip()
		fields = ('title', 'english', 'japanese') if params.match_any_language else ('title',)

		found = next(
			(anime for anime in self.records if any(getattr(anime, f).lower().strip() == wanted for f in fields if getattr(anime, f))),
			None,
		)
		if found is None:
			return {
				'success': False,
				'message': f'No anime found with exact title "{params.title}"',
				'anime': None,
				'suggestions': self._suggestions(wanted),
			}

		return {
			'success': True,
			'message': f"Found exact match: {found.title}",
			'anime': _details(found),
		}

	def _suggestions(self, wanted: str) -> List[Dict[str, str]]:
		"""Substring hits first, then close spellings of the main title."""
		limit = config.SUGGESTION_LIMIT
		picked: List[int] = []
		if wanted:
			for position, anime in enumerate(self.records):
				if len(picked) >= limit:
					break
				if any(wanted in getattr(anime, f).lower() for f in ('title', 'english', 'japanese')):
					picked.append(position)

		if len(picked) < limit and wanted:
			choices = {position: anime.title for position, anime in enumerate(self.records)}
			close = process.extract(
				wanted,
				choices,
				scorer=fuzz.WRatio,
				processor=utils.default_process,
				score_cutoff=config.SUGGESTION_CUTOFF,
				limit=limit * 2,
			)
			for _, score, position in close:
				if len(picked) >= limit:
					break
				if position not in picked:
					logger.debug(f"[Tools] Suggesting '{self.records[position].title}' (score={score:.0f})")
					picked.append(position)

		return [
			{
				'title': self.records[p].title,
				'englishTitle': self.records[p].english,
				'japaneseTitle': self.records[p].japanese,
			}
			for p in picked
		]

	@tool(LookupParams, "Failed to retrieve anime data", anime=None)
	def get_anime_by_title(self, params: LookupParams) -> Dict[str, Any]:
		"""Exact title match across Title/English/Japanese, falling back to a partial match."""
		if not self.available:
			return self._unavailable(anime=None)

		wanted = params.title.lower().strip()
		fields = ('title', 'english', 'japanese')
		anime = None
		if wanted:
			anime = next((a for a in self.records if any(getattr(a, f) and getattr(a, f).lower().strip() == wanted for f in fields)), None)
			if anime is None:
				anime = next((a for a in self.records if any(wanted in getattr(a, f).lower() for f in fields)), None)

		if anime is None:
			return {
				'success': False,
				'message': f'No anime found with title "{params.title}"',
				'anime': None,
			}

		if params.detailed:
			payload = _details(anime)
		else:
			payload = {key: value for key, value in _brief(anime).items() if key != 'description'}
		return {
			'success': True,
			'message': f"Found anime: {anime.title}",
			'anime': payload,
		}
