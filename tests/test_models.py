"""
Unit tests for the data models.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.models import Competitor, FixtureRound, MatchResult, StandingsRow, BracketSlot


class TestCompetitor:
    """Tests for the Competitor model."""

    def test_competitor_creation(self):
        competitor = Competitor(name="Alice", rank=3)
        assert competitor.name == "Alice"
        assert competitor.rank == 3

    def test_copy_with_new_rank(self):
        """Copying with a rank leaves the original untouched."""
        competitor = Competitor("Alice", 3)
        moved = competitor.copy(rank=1)
        assert moved.rank == 1
        assert competitor.rank == 3
        assert moved.name == "Alice"

    def test_dict_round_trip(self):
        competitor = Competitor("Alice", 2)
        assert Competitor.from_dict(competitor.to_dict()) == competitor

    def test_competitor_repr(self):
        repr_str = repr(Competitor("Alice", 2))
        assert "Alice" in repr_str
        assert "2" in repr_str


class TestMatchResult:
    """Tests for the MatchResult model."""

    def test_defaults_to_unset_scores(self):
        result = MatchResult("A", "B", 1)
        assert result.score_a == ''
        assert result.score_b == ''

    def test_to_dict_uses_persisted_keys(self):
        result = MatchResult("A", "B", 2, "4", "1")
        assert result.to_dict() == {'a': 'A', 'b': 'B', 'round': 2, 'ag': '4', 'bg': '1'}

    def test_from_dict_converts_numbers_to_text(self):
        """Numeric scores from JSON/YAML are stored as text."""
        result = MatchResult.from_dict({'a': 'A', 'b': 'B', 'round': 1, 'ag': 4, 'bg': None})
        assert result.score_a == '4'
        assert result.score_b == ''

    def test_cleared_keeps_pairing(self):
        result = MatchResult("A", "B", 3, "4", "2").cleared()
        assert (result.competitor_a, result.competitor_b, result.round_number) == ("A", "B", 3)
        assert result.score_a == '' and result.score_b == ''


class TestDerivedModels:
    """Tests for standings rows, fixture rounds and bracket slots."""

    def test_standings_row_starts_at_zero(self):
        row = StandingsRow("Alice", 1)
        assert row.to_dict() == {
            'name': 'Alice', 'seed_rank': 1, 'wins': 0, 'losses': 0,
            'games_for': 0, 'games_against': 0, 'game_diff': 0, 'matches_played': 0,
        }

    def test_fixture_round_to_dict(self):
        rnd = FixtureRound(1, [("A", "B")])
        assert rnd.to_dict() == {'round': 1, 'matches': [["A", "B"]]}
        assert FixtureRound.from_dict(rnd.to_dict()).pairings == [("A", "B")]

    def test_bracket_slot_repr(self):
        slot = BracketSlot("ČF1", "Alice", "4B")
        assert "ČF1" in repr(slot)
        assert slot.to_dict() == {'label': 'ČF1', 'a': 'Alice', 'b': '4B'}
