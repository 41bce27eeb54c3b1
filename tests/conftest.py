"""
Pytest configuration and shared fixtures for ladder tests.
"""

import itertools
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ladder import Competitor, MatchRecord


@pytest.fixture
def trio():
	"""Three lightweights seeded 1-3, eligible for every ladder"""
	return [
		Competitor(id="alice", name="Alice", base_class="u60kg", seed_rank=1),
		Competitor(id="bob", name="Bob", base_class="u60kg", seed_rank=2),
		Competitor(id="cara", name="Cara", base_class="u60kg", seed_rank=3),
	]


@pytest.fixture
def make_match():
	"""Build MatchRecords with increasing input row positions"""
	rows = itertools.count()

	def _make(winner, loser, when=None, arm="Right", seq=None, badge_suppressed=False, weight_class="", row=None):
		return MatchRecord(
			winner_id=winner,
			loser_id=loser,
			arm=arm,
			timestamp=when,
			sequence=seq,
			weight_class=weight_class,
			row_index=next(rows) if row is None else row,
			badge_suppressed=badge_suppressed,
		)

	return _make
