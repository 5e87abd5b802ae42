"""
Parameter models for the conversational tool boundary.
Field names are snake_case in Python and camelCase on the wire (minScore, sortBy, ...).
"""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


SortField = Literal['Score', 'Popularity', 'Rank', 'Episodes', 'Title']
SortDirection = Literal['asc', 'desc']
OptionField = Literal['Genres', 'Studios', 'Producers', 'Type', 'Status', 'Source', 'Rating', 'Demographic', 'Premiered']
StatisticsField = Literal['Score', 'Episodes', 'Rank', 'Popularity', 'Members']
Year = Union[int, str]


class ToolParams(BaseModel):
	"""Base model: accept both camelCase aliases and field names, ignore extras."""
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')


class SearchParams(ToolParams):
	query: str = Field(..., description="Text to find in titles, descriptions and synonyms")
	limit: Optional[int] = Field(None, ge=0, description="Maximum number of results (default: all)")


class FilterParams(ToolParams):
	# Text search
	search_query: Optional[str] = Field(None, description="Text to search for in titles and descriptions")

	# Numeric filters
	min_score: Optional[float] = Field(None, description="Minimum score (0-10)")
	max_score: Optional[float] = Field(None, description="Maximum score (0-10)")
	min_episodes: Optional[float] = None
	max_episodes: Optional[float] = None
	min_rank: Optional[float] = None
	max_rank: Optional[float] = None

	# Categorical filters
	genres: Optional[List[str]] = Field(None, description="Genres, any of which may match (e.g. ['Action', 'Drama'])")
	types: Optional[List[str]] = Field(None, description="Media types (e.g. ['TV', 'Movie', 'OVA'])")
	statuses: Optional[List[str]] = None
	studios: Optional[List[str]] = None
	demographics: Optional[List[str]] = None
	sources: Optional[List[str]] = None
	ratings: Optional[List[str]] = None

	# Date filters
	start_year: Optional[Year] = Field(None, description="Earliest year to include (YYYY)")
	end_year: Optional[Year] = Field(None, description="Latest year to include (YYYY)")

	# Sorting and pagination
	sort_by: Optional[SortField] = None
	sort_direction: Optional[SortDirection] = None
	limit: Optional[int] = Field(None, ge=0)
	offset: Optional[int] = Field(None, ge=0)


class ExclusionFilterParams(ToolParams):
	# What to keep
	include_genres: Optional[List[str]] = None
	include_types: Optional[List[str]] = None
	include_statuses: Optional[List[str]] = None
	include_studios: Optional[List[str]] = None
	include_demographics: Optional[List[str]] = None
	include_sources: Optional[List[str]] = None
	include_ratings: Optional[List[str]] = None

	# What to drop
	exclude_genres: Optional[List[str]] = None
	exclude_types: Optional[List[str]] = None
	exclude_statuses: Optional[List[str]] = None
	exclude_studios: Optional[List[str]] = None
	exclude_demographics: Optional[List[str]] = None
	exclude_sources: Optional[List[str]] = None
	exclude_ratings: Optional[List[str]] = None

	search_query: Optional[str] = None
	min_score: Optional[float] = None
	max_score: Optional[float] = None
	min_episodes: Optional[float] = None
	max_episodes: Optional[float] = None
	start_year: Optional[Year] = None
	end_year: Optional[Year] = None
	sort_by: Optional[SortField] = None
	sort_direction: Optional[SortDirection] = None
	limit: Optional[int] = Field(None, ge=0)

	include_all_genres: bool = Field(False, description="Require every included genre instead of any")


class OptionsParams(ToolParams):
	field: OptionField


class StatisticsParams(ToolParams):
	field: StatisticsField


class FindExactParams(ToolParams):
	title: str
	match_any_language: bool = Field(True, description="Also match English and Japanese titles")


class LookupParams(ToolParams):
	title: str = Field(..., description="Exact or partial title")
	detailed: bool = True
