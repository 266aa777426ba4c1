"""
Exceptions raised by the tournament core and state store.
"""


class TournamentError(Exception):
    """Base class for all domain errors."""


class UnknownSeedingAlgorithm(TournamentError, ValueError):
    pass


class DuplicateCompetitor(TournamentError, ValueError):
    pass


class UnknownCompetitor(TournamentError, LookupError):
    pass


class UnknownMatch(TournamentError, LookupError):
    pass


class StaleGeneration(TournamentError):
    """A result write was made against a schedule that has since been regenerated."""

    def __init__(self, expected, got):
        super().__init__(f"Schedule generation {got} is stale (current is {expected})")
        self.expected = expected
        self.got = got


class InvalidImport(TournamentError, ValueError):
    pass
