"""
Playoff projection: top four of each group into a fixed crossover bracket.
"""
from typing import List, Sequence

from .models import BracketSlot, StandingsRow

QUALIFIERS_PER_GROUP = 4

# (label, (group, position), (group, position)), positions are 1-based
CROSSOVER = (
    ('ČF1', ('A', 1), ('B', 4)),
    ('ČF2', ('A', 2), ('B', 3)),
    ('ČF3', ('B', 1), ('A', 4)),
    ('ČF4', ('B', 2), ('A', 3)),
)


def placeholder(position: int, group: str) -> str:
    """Label for a slot with no competitor yet, e.g. '3A'."""
    return f"{position}{group}"


def top_names(standings: Sequence[StandingsRow], group: str, count: int = QUALIFIERS_PER_GROUP) -> List[str]:
    names = [row.name for row in standings[:count]]
    for position in range(len(names) + 1, count + 1):
        names.append(placeholder(position, group))
    return names


def project_bracket(standings_a: Sequence[StandingsRow], standings_b: Sequence[StandingsRow]) -> List[BracketSlot]:
    """Build the four quarterfinal matchups from the two group tables.

    Groups with fewer than four competitors get placeholder labels for the
    missing positions.
    """
    qualifiers = {
        'A': top_names(standings_a, 'A'),
        'B': top_names(standings_b, 'B'),
    }
    bracket = []
    for label, (group_a, pos_a), (group_b, pos_b) in CROSSOVER:
        bracket.append(BracketSlot(
            label,
            qualifiers[group_a][pos_a - 1],
            qualifiers[group_b][pos_b - 1],
        ))
    return bracket
