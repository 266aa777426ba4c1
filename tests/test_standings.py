"""
Unit tests for standings calculation.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.models import Competitor, MatchResult
from core.standings import calculate_standings, is_recorded, parse_score


def roster(*names):
    return [Competitor(name, i + 1) for i, name in enumerate(names)]


def by_name(table):
    return {row.name: row for row in table}


class TestParseScore:
    """Tests for score text parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("4", 4),
        ("0", 0),
        (" 6 ", 6),
        ("2.5", 2.5),
        (3, 3),
    ])
    def test_numbers(self, text, expected):
        assert parse_score(text) == expected

    @pytest.mark.parametrize("text", ["", "   ", None, "abc", "4-2", "inf", "nan"])
    def test_unset_or_invalid(self, text):
        assert parse_score(text) is None

    def test_zero_is_recorded(self):
        """'0' is a real score, distinct from unset."""
        assert is_recorded(MatchResult("A", "B", 1, "0", "4"))

    def test_half_filled_is_not_recorded(self):
        assert not is_recorded(MatchResult("A", "B", 1, "4", ""))


class TestCalculateStandings:
    """Tests for aggregation and sorting."""

    def test_single_result(self, two_player_result):
        table = calculate_standings(roster("X", "Y"), [two_player_result])
        assert [row.name for row in table] == ["X", "Y"]
        x, y = table
        assert (x.wins, x.losses, x.games_for, x.games_against, x.game_diff) == (1, 0, 4, 2, 2)
        assert (y.wins, y.losses, y.games_for, y.games_against, y.game_diff) == (0, 1, 2, 4, -2)

    def test_winner_listed_second(self):
        table = calculate_standings(roster("X", "Y"), [MatchResult("X", "Y", 1, "1", "4")])
        assert [row.name for row in table] == ["Y", "X"]

    def test_row_per_competitor_without_results(self):
        table = calculate_standings(roster("A", "B", "C"), [])
        assert [row.name for row in table] == ["A", "B", "C"]
        assert all(row.wins == 0 and row.games_for == 0 for row in table)

    def test_unplayed_results_contribute_nothing(self):
        results = [
            MatchResult("A", "B", 1),
            MatchResult("A", "C", 2, "4", ""),
            MatchResult("B", "C", 3, "x", "2"),
        ]
        table = calculate_standings(roster("A", "B", "C"), results)
        assert all(row.matches_played == 0 for row in table)
        assert [row.name for row in table] == ["A", "B", "C"]

    def test_tie_counts_games_but_no_win(self):
        table = by_name(calculate_standings(roster("A", "B"), [MatchResult("A", "B", 1, "3", "3")]))
        assert table["A"].wins == 0 and table["A"].losses == 0
        assert table["A"].games_for == 3 and table["B"].games_against == 3
        assert table["A"].matches_played == 1

    def test_games_for_outranks_seed(self):
        """Equal wins and difference: more games won sorts first, even with a worse seed."""
        results = [
            MatchResult("P1", "P2", 1, "4", "2"),
            MatchResult("P3", "P4", 1, "6", "4"),
        ]
        table = calculate_standings(roster("P1", "P2", "P3", "P4"), results)
        assert [row.name for row in table] == ["P3", "P1", "P4", "P2"]

    def test_game_diff_outranks_games_for(self):
        results = [
            MatchResult("A", "C", 1, "4", "0"),
            MatchResult("B", "D", 1, "5", "3"),
        ]
        table = calculate_standings(roster("A", "B", "C", "D"), results)
        assert [row.name for row in table][:2] == ["A", "B"]

    def test_seed_breaks_full_tie(self):
        results = [
            MatchResult("C", "D", 1, "4", "2"),
            MatchResult("B", "A", 1, "4", "2"),
        ]
        table = calculate_standings(roster("A", "B", "C", "D"), results)
        assert [row.name for row in table] == ["B", "C", "A", "D"]

    def test_stale_result_is_skipped(self):
        """Results naming players no longer on the roster change nothing."""
        results = [
            MatchResult("A", "B", 1, "4", "1"),
            MatchResult("A", "Ghost", 2, "0", "4"),
            MatchResult("Ghost", "Phantom", 3, "4", "0"),
            None,
        ]
        table = by_name(calculate_standings(roster("A", "B"), results))
        assert (table["A"].wins, table["A"].losses, table["A"].games_for) == (1, 0, 4)
        assert table["B"].games_against == 4
        assert "Ghost" not in table

    def test_decimal_scores(self):
        table = by_name(calculate_standings(roster("A", "B"), [MatchResult("A", "B", 1, "2.5", "1")]))
        assert table["A"].game_diff == 1.5

    def test_idempotent(self):
        players = roster("A", "B", "C")
        results = [MatchResult("A", "B", 1, "4", "3"), MatchResult("B", "C", 2, "4", "0")]
        first = [row.to_dict() for row in calculate_standings(players, results)]
        second = [row.to_dict() for row in calculate_standings(players, results)]
        assert first == second

    def test_accumulates_over_many_matches(self):
        players = roster("A", "B", "C")
        results = [
            MatchResult("A", "B", 1, "4", "3"),
            MatchResult("C", "A", 2, "4", "1"),
            MatchResult("B", "C", 3, "4", "2"),
        ]
        table = by_name(calculate_standings(players, results))
        assert (table["A"].wins, table["A"].losses, table["A"].games_for, table["A"].games_against) == (1, 1, 5, 7)
        assert (table["B"].wins, table["B"].games_for, table["B"].games_against) == (1, 7, 6)
        assert (table["C"].wins, table["C"].games_for, table["C"].games_against) == (1, 6, 5)
        assert [row.name for row in calculate_standings(players, results)] == ["B", "C", "A"]
