"""
Data models for the Anime Query Engine.
Defines the anime record and the filter directives used throughout the system.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field, fields  # frozen records + field introspection
# Import typing helpers for precise and self-documenting types
from typing import Dict, Optional, Tuple, Union  # optional values, tuples and unions


# Numeric fields hold a number or None; None is the "unknown" marker (never 0 as a placeholder)
Number = Union[int, float]


@dataclass(frozen=True)
class Anime:
	"""
	Represents a single catalogued anime and all the information we know about it.
	Records are frozen: a loaded collection is a read-only snapshot.
	"""
	title: str  # primary title (required, non-empty)
	english: str = ''  # English title, empty when absent
	japanese: str = ''  # native-language title, empty when absent
	synonyms: str = ''  # alternative names as free text
	description: str = ''  # synopsis
	score: Optional[float] = None  # average user score, None when unknown
	popularity: Optional[Number] = None  # popularity position, None when unknown
	rank: Optional[Number] = None  # overall rank, None when unknown
	members: Optional[Number] = None  # member count, None when unknown
	episodes: Optional[Number] = None  # episode count, None when unknown
	type: str = ''  # media type (TV, Movie, OVA, ...)
	status: str = ''  # release status (Finished Airing, Currently Airing, ...)
	aired: str = ''  # loosely formatted air date range, e.g. "Apr 3, 1998 to Apr 24, 1999"
	premiered: str = ''  # premiere season/year, e.g. "Spring 1998"
	broadcast: str = ''  # broadcast slot as free text
	producers: str = ''  # ", "-joined producer tags
	licensors: str = ''  # licensors as free text
	studios: str = ''  # ", "-joined studio tags
	source: str = ''  # source material (Manga, Original, ...)
	genres: str = ''  # ", "-joined genre tags
	demographic: str = ''  # target demographic (Shounen, Seinen, ...)
	duration: str = ''  # episode duration as free text
	rating: str = ''  # content rating (PG-13, R, ...)


# Mapping from the dataset's capitalised column names to Anime attribute names
SOURCE_KEYS: Dict[str, str] = {
	'Title': 'title',
	'English': 'english',
	'Japanese': 'japanese',
	'Synonyms': 'synonyms',
	'Description': 'description',
	'Score': 'score',
	'Popularity': 'popularity',
	'Rank': 'rank',
	'Members': 'members',
	'Episodes': 'episodes',
	'Type': 'type',
	'Status': 'status',
	'Aired': 'aired',
	'Premiered': 'premiered',
	'Broadcast': 'broadcast',
	'Producers': 'producers',
	'Licensors': 'licensors',
	'Studios': 'studios',
	'Source': 'source',
	'Genres': 'genres',
	'Demographic': 'demographic',
	'Duration': 'duration',
	'Rating': 'rating',
}

NUMERIC_FIELDS = ('score', 'popularity', 'rank', 'members', 'episodes')  # number-or-unknown
MULTI_VALUE_FIELDS = ('genres', 'studios', 'producers')  # comma-delimited tag lists
SEARCH_FIELDS = ('title', 'english', 'japanese', 'description', 'synonyms')  # indexed text
ANIME_FIELDS = tuple(f.name for f in fields(Anime))  # every attribute name


def resolve_field(name) -> Optional[str]:
	"""
	Map a caller-supplied field reference ("Score", "score", "SCORE") to an Anime attribute.
	Returns None for anything that is not a known field.
	"""
	if not isinstance(name, str):
		return None
	key = name.strip().lower()
	return key if key in ANIME_FIELDS else None


@dataclass(frozen=True)
class TextFilter:
	"""Text match directive: substring by default, full equality when exact."""
	query: str  # text to look for
	exact: bool = False  # full equality instead of containment
	case_sensitive: bool = False  # skip case folding


@dataclass(frozen=True)
class NumericFilter:
	"""Comparison directive: eq | gt | gte | lt | lte | between."""
	operator: str  # comparison operator
	value: float  # first operand
	second_value: Optional[float] = None  # upper bound for 'between'


@dataclass(frozen=True)
class RangeFilter:
	"""Inclusive range directive; either bound may be omitted."""
	min: Optional[float] = None
	max: Optional[float] = None


@dataclass(frozen=True)
class OrList:
	"""Categorical directive from a plain list: at least one value must match."""
	values: Tuple[str, ...]


@dataclass(frozen=True)
class Selective:
	"""Categorical directive with explicit combination: all values (match_all) or any."""
	values: Tuple[str, ...]
	match_all: bool = False


@dataclass(frozen=True)
class DateRangeFilter:
	"""Inclusive year bounds for the aired field."""
	start: Optional[int] = None
	end: Optional[int] = None


@dataclass(frozen=True)
class SortOption:
	"""One sort key: an Anime attribute name and a direction ('asc' or 'desc')."""
	field: str
	direction: str = 'asc'


NumericDirective = Union[NumericFilter, RangeFilter]
CategoricalDirective = Union[OrList, Selective]


@dataclass(frozen=True)
class AnimeFilters:
	"""
	A complete query: search, per-field text, numeric, categorical and date
	directives plus sort and pagination. Every directive is optional.
	"""
	# Fuzzy / literal search across the indexed text fields
	search: Optional[TextFilter] = None

	# Field-specific text filters
	title: Optional[TextFilter] = None
	english: Optional[TextFilter] = None
	japanese: Optional[TextFilter] = None
	description: Optional[TextFilter] = None

	# Numeric filters
	score: Optional[NumericDirective] = None
	popularity: Optional[NumericDirective] = None
	rank: Optional[NumericDirective] = None
	members: Optional[NumericDirective] = None
	episodes: Optional[NumericDirective] = None

	# Categorical filters
	type: Optional[CategoricalDirective] = None
	status: Optional[CategoricalDirective] = None
	genres: Optional[CategoricalDirective] = None
	demographic: Optional[CategoricalDirective] = None
	studios: Optional[CategoricalDirective] = None
	producers: Optional[CategoricalDirective] = None
	source: Optional[CategoricalDirective] = None
	rating: Optional[CategoricalDirective] = None
	premiered: Optional[CategoricalDirective] = None

	# Date filter
	aired: Optional[DateRangeFilter] = None

	# Sorting and pagination
	sort: Tuple[SortOption, ...] = field(default_factory=tuple)
	limit: Optional[int] = None
	offset: Optional[int] = None

	def applied(self) -> Tuple[str, ...]:
		"""Names of the directives that are set, excluding pagination."""
		names = []
		for f in fields(self):
			if f.name in ('limit', 'offset'):
				continue
			value = getattr(self, f.name)
			if value:
				names.append(f.name)
		return tuple(names)
