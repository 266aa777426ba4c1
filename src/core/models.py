class Competitor:
    def __init__(self, name, rank):
        self.name = name
        self.rank = rank  # 1 = strongest seed

    def copy(self, rank=None):
        return Competitor(self.name, self.rank if rank is None else rank)

    def to_dict(self):
        return {'name': self.name, 'rank': self.rank}

    @classmethod
    def from_dict(cls, data):
        return cls(name=data['name'], rank=int(data['rank']))

    def __eq__(self, other):
        if not isinstance(other, Competitor):
            return NotImplemented
        return self.name == other.name and self.rank == other.rank

    def __repr__(self):
        return f"Competitor(name={self.name}, rank={self.rank})"


class FixtureRound:
    def __init__(self, round_number, pairings=None):
        self.round_number = round_number
        self.pairings = pairings if pairings else []  # [(name_a, name_b), ...]

    def to_dict(self):
        return {'round': self.round_number, 'matches': [list(p) for p in self.pairings]}

    @classmethod
    def from_dict(cls, data):
        return cls(int(data['round']), [tuple(p) for p in data.get('matches', [])])

    def __repr__(self):
        return f"FixtureRound(round_number={self.round_number}, pairings={self.pairings})"


class MatchResult:
    """A single group match. Scores are kept as entered text; '' means unset."""

    def __init__(self, competitor_a, competitor_b, round_number, score_a='', score_b=''):
        self.competitor_a = competitor_a
        self.competitor_b = competitor_b
        self.round_number = round_number
        self.score_a = score_a
        self.score_b = score_b

    def cleared(self):
        return MatchResult(self.competitor_a, self.competitor_b, self.round_number)

    def to_dict(self):
        return {
            'a': self.competitor_a,
            'b': self.competitor_b,
            'round': self.round_number,
            'ag': self.score_a,
            'bg': self.score_b,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            competitor_a=data['a'],
            competitor_b=data['b'],
            round_number=data.get('round'),
            score_a=_score_text(data.get('ag')),
            score_b=_score_text(data.get('bg')),
        )

    def __repr__(self):
        return (f"MatchResult({self.competitor_a} {self.score_a or '-'}:"
                f"{self.score_b or '-'} {self.competitor_b}, round={self.round_number})")


def _score_text(value):
    # YAML/JSON may hand back numbers; scores live as text
    if value is None:
        return ''
    return str(value)


class StandingsRow:
    def __init__(self, name, seed_rank):
        self.name = name
        self.seed_rank = seed_rank
        self.wins = 0
        self.losses = 0
        self.games_for = 0
        self.games_against = 0
        self.game_diff = 0
        self.matches_played = 0

    def sort_key(self):
        return (-self.wins, -self.game_diff, -self.games_for, self.seed_rank)

    def to_dict(self):
        return {
            'name': self.name,
            'seed_rank': self.seed_rank,
            'wins': self.wins,
            'losses': self.losses,
            'games_for': self.games_for,
            'games_against': self.games_against,
            'game_diff': self.game_diff,
            'matches_played': self.matches_played,
        }

    def __repr__(self):
        return (f"StandingsRow(name={self.name}, W={self.wins}, L={self.losses}, "
                f"GF={self.games_for}, GA={self.games_against}, GD={self.game_diff})")


class BracketSlot:
    def __init__(self, label, a, b):
        self.label = label
        self.a = a
        self.b = b

    def to_dict(self):
        return {'label': self.label, 'a': self.a, 'b': self.b}

    def __repr__(self):
        return f"BracketSlot(label={self.label}, a={self.a}, b={self.b})"
