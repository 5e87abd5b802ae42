"""
Fuzzy search index module.
Builds a token index over the text fields of a collection and answers
prefix / edit-distance tolerant lookups with per-field boosts.
"""

import re
from bisect import bisect_left
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Set, Tuple

from rapidfuzz import process  # batch fuzzy matching over the vocabulary
from rapidfuzz.distance import Levenshtein  # edit distance scorer

from loguru import logger

from . import config
from .models import Anime, SEARCH_FIELDS

RE_TOKEN = re.compile(r"\w+")  # unicode-aware word runs


def tokenize(text: str) -> List[str]:
	"""Lowercase a string and split it into word tokens."""
	if not text:
		return []
	return RE_TOKEN.findall(text.lower())


class FuzzySearchIndex:
	"""
	Token index keyed by record position.
	Scoring signals:
	- exact token hit: full weight
	- prefix hit (indexed token starts with the query token): prefix_weight
	- fuzzy hit within the edit budget: fuzzy_weight / (1 + distance)
	Each hit is multiplied by the boost of the field it came from.
	"""

	def __init__(
		self,
		records: Sequence[Anime],
		fields: Sequence[str] = SEARCH_FIELDS,
		boosts: Optional[Dict[str, float]] = None,
		fuzzy_fraction: float = config.FUZZY_FRACTION,
		max_distance: int = config.MAX_FUZZY_DISTANCE,
		prefix_weight: float = 0.375,
		fuzzy_weight: float = 0.45,
	):
		self.records = records
		self.fields = tuple(fields)
		self.boosts = dict(config.FIELD_BOOSTS if boosts is None else boosts)
		self.fuzzy_fraction = fuzzy_fraction
		self.max_distance = max_distance
		self.prefix_weight = prefix_weight
		self.fuzzy_weight = fuzzy_weight

		# token -> {position: summed field boost}
		self._postings: Dict[str, Dict[int, float]] = defaultdict(dict)
		for position, anime in enumerate(records):
			for field in self.fields:
				boost = self.boosts.get(field, 1.0)
				for token in set(tokenize(getattr(anime, field, ''))):
					postings = self._postings[token]
					postings[position] = postings.get(position, 0.0) + boost

		self._vocabulary = sorted(self._postings)  # sorted for prefix scans
		logger.debug(f"[Index] Indexed {len(records)} records | vocabulary={len(self._vocabulary)}")

	def __len__(self) -> int:
		return len(self.records)

	def _edit_budget(self, token: str) -> int:
		# round half up, capped
		return min(self.max_distance, int(len(token) * self.fuzzy_fraction + 0.5))

	def _expand(self, token: str) -> Dict[str, float]:
		"""Return {indexed token: match weight} for one query token."""
		weights: Dict[str, float] = {}
		if token in self._postings:
			weights[token] = 1.0

		# Prefix expansion over the sorted vocabulary
		start = bisect_left(self._vocabulary, token)
		for term in self._vocabulary[start:]:
			if not term.startswith(token):
				break
			if term != token:
				weights[term] = max(weights.get(term, 0.0), self.prefix_weight)

		# Edit-distance expansion
		budget = self._edit_budget(token)
		if budget > 0 and self._vocabulary:
			matches = process.extract(
				token,
				self._vocabulary,
				scorer=Levenshtein.distance,
				score_cutoff=budget,
				limit=None,
			)
			for term, distance, _ in matches:
				if distance == 0:
					continue
				weight = self.fuzzy_weight / (1 + distance)
				weights[term] = max(weights.get(term, 0.0), weight)
		return weights

	def search(self, query: str, exact: bool = False, case_sensitive: bool = False) -> List[Tuple[int, float]]:
		"""
		Return (position, score) pairs, best first.
		exact=True skips tokenization and expansion and does a literal substring
		match over every indexed field, in collection order.
		"""
		if not query or not query.strip():
			return []

		if exact:
			return [(position, 1.0) for position in self._literal_matches(query, case_sensitive)]

		scores: Dict[int, float] = defaultdict(float)
		for token in tokenize(query):
			for term, weight in self._expand(token).items():
				for position, boost in self._postings[term].items():
					scores[position] += weight * boost

		ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
		logger.debug(f"[Index] Query '{query}' matched {len(ranked)} records")
		return ranked

	def lookup(self, query: str, exact: bool = False, case_sensitive: bool = False) -> Set[int]:
		"""Positions matching the query; only membership matters to the filter pipeline."""
		return {position for position, _ in self.search(query, exact=exact, case_sensitive=case_sensitive)}

	def _literal_matches(self, query: str, case_sensitive: bool) -> List[int]:
		needle = query if case_sensitive else query.lower()
		positions = []
		for position, anime in enumerate(self.records):
			for field in self.fields:
				value = getattr(anime, field, '') or ''
				if not case_sensitive:
					value = value.lower()
				if needle in value:
					positions.append(position)
					break
		return positions
