"""
Tests for the query engine: pipeline composition, sorting, pagination and chaining.
"""

import pytest

from anime_engine.data_loader import DataLoader
from anime_engine.aggregates import get_unique_values
from anime_engine.models import AnimeFilters, NumericFilter, OrList, RangeFilter, SortOption, TextFilter
from anime_engine import query_engine
from anime_engine.query_engine import AnimeFilterContext, create_filter_chain, filter_anime, query


def titles(result):
	return [anime.title for anime in result]


def scored(*scores):
	return DataLoader().load_records([{'Title': f'S{i}', 'Score': s} for i, s in enumerate(scores)])


def test_example_numeric_queries(example_records):
	assert titles(filter_anime(example_records, {'score': {'operator': 'gte', 'value': 8}})) == ['A']
	assert filter_anime(example_records, {'score': {'operator': 'between', 'value': 1, 'secondValue': 5}}) == []


def test_example_genre_queries(example_records):
	assert titles(filter_anime(example_records, {'genres': {'values': ['Action', 'Comedy'], 'matchAny': False}})) == ['A']
	assert titles(filter_anime(example_records, {'genres': {'values': ['Drama'], 'matchAny': True}})) == ['B']
	assert titles(filter_anime(example_records, {'genres': ['Drama', 'Action']})) == ['A', 'B']


def test_empty_collection_is_no_data_not_no_match(example_records):
	assert query([], AnimeFilters()) is None
	result = query(example_records, {'type': ['Movie']})
	assert result == []
	assert result is not None


def test_query_does_not_mutate_source(records):
	before = list(records)
	query(records, {'sort': [{'field': 'Score', 'direction': 'asc'}], 'limit': 2})
	assert records == before


def test_sort_unknown_last_ascending():
	result = query(scored('7', 'N/A', '9'), {'sort': [{'field': 'Score', 'direction': 'asc'}]})
	assert [a.score for a in result] == [7, 9, None]


def test_sort_unknown_first_descending():
	result = query(scored('7', 'N/A', '9'), {'sort': [{'field': 'Score', 'direction': 'desc'}]})
	assert [a.score for a in result] == [None, 9, 7]


def test_multi_key_sort_is_stable(records):
	spec = {'sort': [{'field': 'Type', 'direction': 'asc'}, {'field': 'Score', 'direction': 'desc'}]}
	assert titles(query(records, spec)) == [
		'Kimi no Na wa.',  # Movie
		'Untitled Sequel Project',  # TV, unknown score first when descending
		'Fullmetal Alchemist: Brotherhood',
		'Cowboy Bebop',
		'K-On!',
	]
	# equal keys keep collection order
	assert titles(query(records, {'sort': [{'field': 'Type', 'direction': 'desc'}]}))[:4] == [
		'Fullmetal Alchemist: Brotherhood', 'Cowboy Bebop', 'K-On!', 'Untitled Sequel Project',
	]


def test_string_sort(records):
	result = query(records, {'sort': [{'field': 'title', 'direction': 'asc'}]})
	assert titles(result) == sorted(titles(records))


def test_invalid_sort_directive_is_ignored(records):
	result = query(records, {'sort': [{'field': 'NotAField', 'direction': 'asc'}, {'field': 'Score', 'direction': 'sideways'}]})
	assert titles(result) == titles(records)
	direct = query(records, AnimeFilters(sort=(SortOption('Bogus', 'asc'), SortOption('Episodes', 'ASC'))))
	assert [a.episodes for a in direct] == [1, 13, 26, 64, None]


@pytest.mark.parametrize("offset", [None, 0, 1, 3, 5, 9])
@pytest.mark.parametrize("limit", [None, 0, 1, 2, 10])
def test_pagination_length(records, offset, limit):
	spec = {}
	if offset is not None:
		spec['offset'] = offset
	if limit is not None:
		spec['limit'] = limit
	total = len(records)
	start = offset or 0
	expected = max(0, total - start) if limit is None else min(limit, max(0, total - start))
	result = query(records, spec)
	assert len(result) == expected
	assert titles(result) == titles(records)[start:start + expected]


def test_pipeline_applies_pagination_after_sort(records):
	result = query(records, {'sort': [{'field': 'Score', 'direction': 'desc'}], 'offset': 1, 'limit': 2})
	assert titles(result) == ['Fullmetal Alchemist: Brotherhood', 'Kimi no Na wa.']


def test_unknown_score_never_returned_with_score_directive(records):
	for directive in ({'min': 0}, {'max': 100}, {'operator': 'lt', 'value': 11}, {'operator': 'gte', 'value': 0}):
		assert 'Untitled Sequel Project' not in titles(query(records, {'score': directive}))


def test_idempotence(records):
	spec = {'score': {'min': 8}, 'type': ['TV'], 'sort': [{'field': 'Score', 'direction': 'asc'}]}
	once = query(records, spec)
	twice = query(once, spec)
	assert once == twice


def test_commutativity_within_a_stage(records):
	score_first = create_filter_chain(records).filter({'score': {'min': 8}}).filter({'type': ['TV']})
	type_first = create_filter_chain(records).filter({'type': ['TV']}).filter({'score': {'min': 8}})
	assert set(score_first.data) == set(type_first.data)
	assert titles(score_first.data) == ['Fullmetal Alchemist: Brotherhood', 'Cowboy Bebop']


def test_unique_genres_round_trip(records):
	for genre in get_unique_values(records, 'Genres'):
		contributors = [a for a in records if genre in [g.strip() for g in a.genres.split(',')]]
		result = query(records, {'genres': [genre]})
		assert result
		assert all(anime in result for anime in contributors)


def test_chain_returns_new_immutable_contexts(records):
	base = create_filter_chain(records)
	tv = base.filter({'type': ['TV']})
	short = tv.with_filters({'episodes': {'max': 26}})
	assert len(base) == 5
	assert len(tv) == 4
	assert titles(short) == ['Cowboy Bebop', 'K-On!']
	assert isinstance(short, AnimeFilterContext)
	assert isinstance(short.data, tuple)


def test_search_then_filters(records):
	result = query(records, {'search': {'query': 'alchemist'}, 'score': {'min': 9}})
	assert titles(result) == ['Fullmetal Alchemist: Brotherhood']
	assert titles(query(records, {'search': {'query': 'bounty hunt', 'exact': True}})) == ['Cowboy Bebop']


def test_search_keeps_collection_order(records):
	# "two" hits both descriptions that mention two people
	result = query(records, {'search': {'query': 'two'}})
	assert titles(result) == ['Fullmetal Alchemist: Brotherhood', 'Kimi no Na wa.']


def test_text_field_filters(records):
	assert titles(query(records, {'english': 'your name'})) == ['Kimi no Na wa.']
	assert titles(query(records, {'japanese': {'query': 'けいおん！', 'exact': True}})) == ['K-On!']
	assert titles(query(records, {'description': 'tea'})) == ['K-On!']


def test_date_and_categorical_together(records):
	spec = {'aired': {'start': '2009', 'end': '2016'}, 'source': ['manga'], 'demographic': ['seinen']}
	assert titles(query(records, spec)) == ['K-On!']
	assert titles(query(records, {'premiered': ['Spring 2009']})) == ['Fullmetal Alchemist: Brotherhood', 'K-On!']
	assert titles(query(records, {'studios': ['bones'], 'producers': {'values': ['aniplex', 'square'], 'matchAny': False}})) == [
		'Fullmetal Alchemist: Brotherhood',
	]


def test_malformed_directives_are_no_ops(records):
	spec = {
		'genres': {'values': []},
		'score': {'operator': 'approximately', 'value': 8},
		'episodes': 'many',
		'aired': {'start': 'someday'},
		'limit': 'ten',
		'type': ['TV'],
	}
	assert len(query(records, spec)) == 4


def test_typed_filters_accepted(records):
	spec = AnimeFilters(score=NumericFilter('gt', 8.8), type=OrList(('TV',)))
	assert titles(query(records, spec)) == ['Fullmetal Alchemist: Brotherhood']
	assert titles(query(records, AnimeFilters(members=RangeFilter(min=2_000_000)))) == [
		'Fullmetal Alchemist: Brotherhood', 'Kimi no Na wa.',
	]


def test_typed_directives_with_unusable_values_are_no_ops(records):
	assert len(query(records, AnimeFilters(score=NumericFilter('gte', None)))) == 5
	assert len(query(records, AnimeFilters(score=NumericFilter('between', 'high', 9)))) == 5
	assert len(query(records, AnimeFilters(episodes=RangeFilter(min='lots')))) == 5
	assert len(query(records, AnimeFilters(search=TextFilter(query=None), type=OrList(('TV',)), limit='ten'))) == 4


def test_typed_numeric_strings_are_coerced(records):
	spec = AnimeFilters(score=RangeFilter(min='8.8'))
	assert titles(query(records, spec)) == ['Fullmetal Alchemist: Brotherhood', 'Kimi no Na wa.']


def test_search_index_built_once_per_context(records, monkeypatch):
	built = []
	original = query_engine.FuzzySearchIndex

	def counting(*args, **kwargs):
		built.append(1)
		return original(*args, **kwargs)

	monkeypatch.setattr(query_engine, 'FuzzySearchIndex', counting)
	context = create_filter_chain(records)
	context.filter({'search': 'bebop'})
	context.filter({'search': 'alchemist'})
	assert len(built) == 1


def test_convenience_helpers(records):
	assert titles(query_engine.search_anime_by_text(records, 'bebop')) == ['Cowboy Bebop']
	assert titles(query_engine.filter_anime_by_genre(records, ['Romance'])) == ['Kimi no Na wa.']
	assert titles(query_engine.filter_anime_by_score(records, 8.8, 9.0)) == ['Kimi no Na wa.']
	assert titles(query_engine.filter_anime_by_episodes(records, 60)) == ['Fullmetal Alchemist: Brotherhood']
	assert titles(query_engine.filter_anime_by_type(records, ['movie'])) == ['Kimi no Na wa.']
	assert len(query_engine.filter_anime_by_status(records, ['finished'])) == 4
	assert titles(query_engine.filter_anime_by_year(records, '1990', '2000')) == ['Cowboy Bebop']
