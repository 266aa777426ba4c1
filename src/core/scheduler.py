"""
Round-robin fixture generation for a single group (circle method).
"""
from typing import Dict, List, Optional, Sequence

from .models import Competitor, FixtureRound

# Synthetic opponent for odd-sized groups; never appears in the output.
BYE = None


def _working_list(competitors: Sequence[Competitor]) -> List[Optional[str]]:
    names = [c.name for c in competitors]
    if len(names) % 2 == 1:
        names.append(BYE)
    return names


def _rotate(names: List[Optional[str]]) -> None:
    """Move the last entry to position 1; position 0 stays fixed."""
    names.insert(1, names.pop())


def round_robin(competitors: Sequence[Competitor]) -> List[FixtureRound]:
    """
    Generate a round-robin schedule where everyone meets everyone once.

    Odd groups get a bye appended so each round has M/2 slots; pairings
    against the bye are dropped, so that competitor sits the round out.
    Rounds are numbered from 1. The result depends only on input order.
    """
    names = _working_list(competitors)
    size = len(names)
    if size < 2:
        return []

    schedule = []
    for r in range(size - 1):
        pairings = []
        for i in range(size // 2):
            a, b = names[i], names[size - 1 - i]
            if a is BYE or b is BYE:
                continue
            pairings.append((a, b))
        schedule.append(FixtureRound(r + 1, pairings))
        _rotate(names)
    return schedule


def bye_rounds(competitors: Sequence[Competitor]) -> Dict[str, int]:
    """Return {name: round_number} of the round each competitor sits out.

    Empty for even-sized groups.
    """
    names = _working_list(competitors)
    size = len(names)
    if size < 2 or BYE not in names:
        return {}

    byes = {}
    for r in range(size - 1):
        for i in range(size // 2):
            a, b = names[i], names[size - 1 - i]
            if a is BYE:
                byes[b] = r + 1
            elif b is BYE:
                byes[a] = r + 1
        _rotate(names)
    return byes


def count_pairings(schedule: Sequence[FixtureRound]) -> int:
    return sum(len(rnd.pairings) for rnd in schedule)
