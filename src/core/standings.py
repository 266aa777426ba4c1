"""
Group standings from recorded match results.
"""
import math
from typing import Iterable, List, Optional, Sequence, Union

from .models import Competitor, MatchResult, StandingsRow

Number = Union[int, float]


def parse_score(text) -> Optional[Number]:
    """Parse an entered score. Returns None for empty or non-numeric input."""
    if text is None:
        return None
    text = str(text).strip()
    if text == '':
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return int(value) if value.is_integer() else value


def is_recorded(result: MatchResult) -> bool:
    return parse_score(result.score_a) is not None and parse_score(result.score_b) is not None


def calculate_standings(roster: Sequence[Competitor], results: Iterable[Optional[MatchResult]]) -> List[StandingsRow]:
    """
    Calculate the standings table for one group.

    Returns one row per roster competitor, sorted by wins, game difference,
    games for (all descending) and finally seed rank (ascending).

    Results whose competitors are not on the roster are ignored; they are
    left over from an earlier seeding. A tied score counts as played but
    gives neither side a win or a loss.
    """
    table = [StandingsRow(c.name, c.rank) for c in roster]
    index = {row.name: row for row in table}

    for result in results:
        if result is None:
            continue
        row_a = index.get(result.competitor_a)
        row_b = index.get(result.competitor_b)
        if row_a is None or row_b is None:
            continue
        score_a = parse_score(result.score_a)
        score_b = parse_score(result.score_b)
        if score_a is None or score_b is None:
            continue

        row_a.games_for += score_a
        row_a.games_against += score_b
        row_b.games_for += score_b
        row_b.games_against += score_a
        row_a.matches_played += 1
        row_b.matches_played += 1
        if score_a > score_b:
            row_a.wins += 1
            row_b.losses += 1
        elif score_b > score_a:
            row_b.wins += 1
            row_a.losses += 1

    for row in table:
        row.game_diff = row.games_for - row.games_against

    table.sort(key=StandingsRow.sort_key)
    return table
