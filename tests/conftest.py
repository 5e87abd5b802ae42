"""
Shared sample data for the test suite.
Rows use the dataset's own column names and string values, like the scraped feed.
"""

import pytest

from anime_engine.data_loader import DataLoader


SAMPLE_ROWS = [
	{
		'Title': 'Fullmetal Alchemist: Brotherhood',
		'English': 'Fullmetal Alchemist: Brotherhood',
		'Japanese': '鋼の錬金術師 FULLMETAL ALCHEMIST',
		'Synonyms': 'Hagane no Renkinjutsushi: Fullmetal Alchemist',
		'Description': "Two brothers search for the Philosopher's Stone after a failed alchemical ritual.",
		'Score': '9.1',
		'Popularity': '3',
		'Rank': '1',
		'Members': '3,200,000',
		'Episodes': '64',
		'Type': 'TV',
		'Status': 'Finished Airing',
		'Aired': 'Apr 5, 2009 to Jul 4, 2010',
		'Premiered': 'Spring 2009',
		'Producers': 'Aniplex, Square Enix, Aniplex',
		'Studios': 'BonesBones',
		'Source': 'Manga',
		'Genres': 'ActionAction, AdventureAdventure, DramaDrama, FantasyFantasy',
		'Demographic': 'Shounen',
		'Rating': 'R - 17+ (violence & profanity)',
	},
	{
		'Title': 'Cowboy Bebop',
		'English': 'Cowboy Bebop',
		'Japanese': 'カウボーイビバップ',
		'Synonyms': '',
		'Description': 'In the year 2071 a crew of bounty hunters drifts through space.',
		'Score': '8.75',
		'Popularity': '40',
		'Rank': '28',
		'Members': '1,900,000',
		'Episodes': '26',
		'Type': 'TV',
		'Status': 'Finished Airing',
		'Aired': 'Apr 3, 1998 to Apr 24, 1999',
		'Premiered': 'Spring 1998',
		'Producers': 'Bandai Visual',
		'Studios': 'Sunrise',
		'Source': 'Original',
		'Genres': 'Action, Award WinningAward Winning, Sci-Fi',
		'Demographic': '',
		'Rating': 'R - 17+ (violence & profanity)',
	},
	{
		'Title': 'K-On!',
		'English': 'K-On!',
		'Japanese': 'けいおん！',
		'Synonyms': 'Keion',
		'Description': 'A high school light music club that mostly drinks tea.',
		'Score': '7.9',
		'Popularity': '150',
		'Rank': '600',
		'Members': '1,100,000',
		'Episodes': '13',
		'Type': 'TV',
		'Status': 'Finished Airing',
		'Aired': 'Apr 3, 2009 to Jun 26, 2009',
		'Premiered': 'Spring 2009',
		'Producers': 'TBS, Pony Canyon',
		'Studios': 'Kyoto Animation',
		'Source': '4-koma manga',
		'Genres': 'ComedyComedy, Slice of Life',
		'Demographic': 'Seinen',
		'Rating': 'PG-13 - Teens 13 or older',
	},
	{
		'Title': 'Untitled Sequel Project',
		'Score': 'N/A',
		'Popularity': 'N/A',
		'Rank': '',
		'Members': '1,234',
		'Episodes': 'Unknown',
		'Type': 'TV',
		'Status': 'Not yet aired',
		'Aired': 'Not available',
		'Genres': 'N/A',
		'Studios': 'N/A',
	},
	{
		'Title': 'Kimi no Na wa.',
		'English': 'Your Name.',
		'Japanese': '君の名は。',
		'Synonyms': 'Your Name',
		'Description': 'Two teenagers discover they are swapping bodies across a comet-lit summer.',
		'Score': '8.84',
		'Popularity': '20',
		'Rank': '20',
		'Members': '2,500,000',
		'Episodes': '1',
		'Type': 'Movie',
		'Status': 'Finished Airing',
		'Aired': 'Aug 26, 2016',
		'Premiered': '',
		'Producers': 'Toho, Kadokawa',
		'Studios': 'CoMix Wave Films',
		'Source': 'Original',
		'Genres': 'Award Winning, Drama, Romance, Supernatural',
		'Demographic': '',
		'Rating': 'PG-13 - Teens 13 or older',
	},
]

# The two-record example used throughout the filter tests
EXAMPLE_ROWS = [
	{'Title': 'A', 'Score': '8.5', 'Genres': 'ActionAction,Comedy'},
	{'Title': 'B', 'Score': 'N/A', 'Genres': 'Drama'},
]


@pytest.fixture
def records():
	return DataLoader().load_records(SAMPLE_ROWS)


@pytest.fixture
def example_records():
	return DataLoader().load_records(EXAMPLE_ROWS)


@pytest.fixture
def sample_rows():
	return [dict(row) for row in SAMPLE_ROWS]
