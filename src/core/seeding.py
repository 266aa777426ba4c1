"""
Group split algorithms: turn the master ranking into groups A and B.
"""
import math
from typing import List, Sequence, Tuple

from .errors import UnknownSeedingAlgorithm
from .models import Competitor

SNAKE = 'snake'
SPLIT_HALF = 'split-half'
ALGORITHMS = (SNAKE, SPLIT_HALF)
DEFAULT_ALGORITHM = SNAKE


def rerank(ranking: Sequence[Competitor]) -> List[Competitor]:
    """Return copies of the ranking with rank set to position + 1."""
    return [c.copy(rank=i + 1) for i, c in enumerate(ranking)]


def move(ranking: Sequence[Competitor], from_index: int, to_index: int) -> List[Competitor]:
    """Move one competitor to a new position and rerank everyone."""
    n = len(ranking)
    if not (0 <= from_index < n and 0 <= to_index < n):
        raise IndexError(f"Cannot move {from_index} -> {to_index} in a ranking of {n}")
    result = list(ranking)
    moved = result.pop(from_index)
    result.insert(to_index, moved)
    return rerank(result)


def snake_split(ranking: Sequence[Competitor]) -> Tuple[List[Competitor], List[Competitor]]:
    """
    Serpentine draft over consecutive pairs of the ranking.

    Pair 0 (seeds 1, 2) sends seed 1 to A and seed 2 to B, pair 1 (seeds 3, 4)
    sends seed 4 to A and seed 3 to B, and so on alternating. A trailing
    unpaired seed follows the rule of its pair index.
    """
    group_a, group_b = [], []
    for position, competitor in enumerate(rerank(ranking)):
        pair_index, offset = divmod(position, 2)
        lower = offset == 0
        if pair_index % 2 == 0:
            (group_a if lower else group_b).append(competitor)
        else:
            (group_b if lower else group_a).append(competitor)
    return group_a, group_b


def split_half(ranking: Sequence[Competitor]) -> Tuple[List[Competitor], List[Competitor]]:
    """First ceil(N/2) seeds go to A, the rest to B."""
    ranked = rerank(ranking)
    cut = math.ceil(len(ranked) / 2)
    return ranked[:cut], ranked[cut:]


_SPLITTERS = {
    SNAKE: snake_split,
    SPLIT_HALF: split_half,
}


def split_groups(ranking: Sequence[Competitor], algorithm: str = DEFAULT_ALGORITHM) -> Tuple[List[Competitor], List[Competitor]]:
    """Partition the ranking into two groups with the chosen algorithm.

    Each competitor's rank is overwritten with its master ranking position.
    """
    try:
        splitter = _SPLITTERS[algorithm]
    except KeyError:
        raise UnknownSeedingAlgorithm(
            f"Unknown seeding algorithm '{algorithm}' (expected one of {', '.join(ALGORITHMS)})"
        ) from None
    return splitter(ranking)


def seed_sum(group: Sequence[Competitor]) -> int:
    return sum(c.rank for c in group)
