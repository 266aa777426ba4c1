"""
Explicit tournament state container.

Holds the master ranking, the seeded groups with their schedules, and the
per-group result maps. Every mutation is a single synchronous call;
derived views (standings, bracket) are recomputed on demand.
"""
from typing import Dict, List, Optional

from .bracket import project_bracket
from .errors import (DuplicateCompetitor, InvalidImport, StaleGeneration,
                     UnknownCompetitor, UnknownMatch)
from .models import BracketSlot, Competitor, FixtureRound, MatchResult, StandingsRow
from .scheduler import round_robin
from .seeding import DEFAULT_ALGORITHM, move, rerank, split_groups
from .standings import calculate_standings

GROUPS = ('A', 'B')
SCORE_FIELDS = ('ag', 'bg')
# Separators of the match id; names containing them would make ids collide
RESERVED_IN_NAMES = ('__', '::')


def match_id(group: str, a: str, b: str) -> str:
    """Build the identifier of a group match, e.g. 'A::Alice__Bob'."""
    return f"{group}::{a}__{b}"


def validate_name(name) -> str:
    """Strip a competitor name and check it can be used in a match id."""
    name = '' if name is None else str(name).strip()
    if not name:
        raise ValueError('Competitor name must not be empty')
    for reserved in RESERVED_IN_NAMES:
        if reserved in name:
            raise ValueError(f"Competitor name '{name}' must not contain '{reserved}'")
    return name


def empty_results(schedule: List[FixtureRound], group: str) -> Dict[str, MatchResult]:
    results = {}
    for rnd in schedule:
        for a, b in rnd.pairings:
            key = match_id(group, a, b)
            if key in results:
                raise DuplicateCompetitor(f"Competitor names produce the same match id '{key}'")
            results[key] = MatchResult(a, b, rnd.round_number)
    return results


def _empty_groups():
    return {group: [] for group in GROUPS}


def _results_from_payload(payload) -> Dict[str, Dict[str, MatchResult]]:
    if not isinstance(payload, dict) or not all(g in payload for g in GROUPS):
        raise InvalidImport(f"Results must contain the group keys {', '.join(GROUPS)}")
    parsed = {}
    for group in GROUPS:
        entries = payload[group]
        if entries is None:
            raise InvalidImport(f"Results for group {group} are missing")
        if not isinstance(entries, dict):
            raise InvalidImport(f"Results for group {group} must be a mapping")
        parsed[group] = {}
        for key, entry in entries.items():
            if entry is None:
                continue
            try:
                parsed[group][str(key)] = MatchResult.from_dict(entry)
            except (KeyError, TypeError, AttributeError) as e:
                raise InvalidImport(f"Malformed result {key!r} in group {group}: {e}") from None
    return parsed


class TournamentState:
    def __init__(self, ranking=None, algorithm=DEFAULT_ALGORITHM):
        self.ranking: List[Competitor] = rerank(ranking or [])
        self.algorithm = algorithm
        self.generation = 0
        self.groups: Dict[str, List[Competitor]] = _empty_groups()
        self.schedules: Dict[str, List[FixtureRound]] = _empty_groups()
        self.results: Dict[str, Dict[str, MatchResult]] = {group: {} for group in GROUPS}

    # Ranking

    def _normalize_name(self, name) -> str:
        return validate_name(name)

    def _index_of(self, name: str) -> int:
        for i, c in enumerate(self.ranking):
            if c.name == name:
                return i
        raise UnknownCompetitor(f"No competitor named '{name}'")

    def names(self) -> List[str]:
        return [c.name for c in self.ranking]

    def set_ranking(self, names) -> None:
        """Replace the whole ranking, best seed first."""
        previous = self.ranking
        self.ranking = []
        try:
            for name in names:
                self.add_competitor(name)
        except ValueError:
            self.ranking = previous
            raise

    def add_competitor(self, name) -> Competitor:
        name = self._normalize_name(name)
        if name in self.names():
            raise DuplicateCompetitor(f"Competitor '{name}' already exists")
        competitor = Competitor(name, len(self.ranking) + 1)
        self.ranking.append(competitor)
        return competitor

    def rename_competitor(self, old_name, new_name) -> Competitor:
        new_name = self._normalize_name(new_name)
        index = self._index_of(old_name)
        if new_name != old_name and new_name in self.names():
            raise DuplicateCompetitor(f"Competitor '{new_name}' already exists")
        self.ranking[index] = Competitor(new_name, index + 1)
        return self.ranking[index]

    def remove_competitor(self, name) -> None:
        index = self._index_of(name)
        del self.ranking[index]
        self.ranking = rerank(self.ranking)

    def move_competitor(self, from_index: int, to_index: int) -> None:
        self.ranking = move(self.ranking, from_index, to_index)

    # Seeding

    def apply_seeding(self, algorithm: Optional[str] = None) -> int:
        """Split the ranking into groups and start a fresh schedule generation.

        All existing results are discarded. Returns the new generation.
        """
        algorithm = algorithm or self.algorithm
        group_a, group_b = split_groups(self.ranking, algorithm)
        self.algorithm = algorithm
        self.ranking = rerank(self.ranking)
        self.groups = {'A': group_a, 'B': group_b}
        self.schedules = {group: round_robin(self.groups[group]) for group in GROUPS}
        self.results = {group: empty_results(self.schedules[group], group) for group in GROUPS}
        self.generation += 1
        return self.generation

    # Results

    def _check_group(self, group: str) -> None:
        if group not in GROUPS:
            raise UnknownMatch(f"Unknown group '{group}'")

    def _get_result(self, group: str, key: str) -> MatchResult:
        self._check_group(group)
        try:
            return self.results[group][key]
        except KeyError:
            raise UnknownMatch(f"No match '{key}' in group {group}") from None

    def update_score(self, group: str, key: str, field: str, value, generation: Optional[int] = None) -> MatchResult:
        """Set one score field ('ag' or 'bg') of a match as raw text."""
        self._check_generation(generation)
        if field not in SCORE_FIELDS:
            raise ValueError(f"Score field must be one of {', '.join(SCORE_FIELDS)}")
        result = self._get_result(group, key)
        text = '' if value is None else str(value)
        if field == 'ag':
            result.score_a = text
        else:
            result.score_b = text
        return result

    def _check_generation(self, generation: Optional[int]) -> None:
        if generation is not None and generation != self.generation:
            raise StaleGeneration(self.generation, generation)

    def clear_match(self, group: str, key: str, generation: Optional[int] = None) -> MatchResult:
        self._check_generation(generation)
        result = self._get_result(group, key)
        self.results[group][key] = result.cleared()
        return self.results[group][key]

    def reset_results(self) -> None:
        self.results = {group: empty_results(self.schedules[group], group) for group in GROUPS}

    # Derived views

    def schedule(self, group: str) -> List[FixtureRound]:
        self._check_group(group)
        return self.schedules[group]

    def standings(self, group: str) -> List[StandingsRow]:
        self._check_group(group)
        return calculate_standings(self.groups[group], self.results[group].values())

    def bracket(self) -> List[BracketSlot]:
        return project_bracket(self.standings('A'), self.standings('B'))

    # Serialization

    def results_payload(self) -> dict:
        return {
            group: {key: result.to_dict() for key, result in self.results[group].items()}
            for group in GROUPS
        }

    def import_results(self, payload) -> None:
        """Replace all results from an exported payload.

        Raises InvalidImport and leaves the current results untouched when
        either group key is missing or an entry is malformed.
        """
        self.results = _results_from_payload(payload)

    def to_dict(self) -> dict:
        return {
            'algorithm': self.algorithm,
            'generation': self.generation,
            'ranking': [c.to_dict() for c in self.ranking],
            'groups': {group: [c.to_dict() for c in self.groups[group]] for group in GROUPS},
            'schedules': {group: [r.to_dict() for r in self.schedules[group]] for group in GROUPS},
            'results': self.results_payload(),
        }

    @classmethod
    def from_dict(cls, data) -> 'TournamentState':
        if not isinstance(data, dict):
            raise InvalidImport('State snapshot must be a mapping')
        try:
            state = cls(
                ranking=[Competitor.from_dict(c) for c in data.get('ranking') or []],
                algorithm=data.get('algorithm') or DEFAULT_ALGORITHM,
            )
            state.generation = int(data.get('generation') or 0)
            groups = data.get('groups') or {}
            schedules = data.get('schedules') or {}
            for group in GROUPS:
                state.groups[group] = [Competitor.from_dict(c) for c in groups.get(group) or []]
                # Schedules are only rebuilt if the snapshot lacks them
                if group in schedules:
                    state.schedules[group] = [FixtureRound.from_dict(r) for r in schedules[group] or []]
                else:
                    state.schedules[group] = round_robin(state.groups[group])
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise InvalidImport(f"Malformed state snapshot: {e}") from None
        results = data.get('results')
        if results:
            state.results = _results_from_payload(results)
        else:
            state.reset_results()
        return state
