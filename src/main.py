# Command-line entry point: seed a ranking into two groups and print the fixtures

import argparse
import os
import sys
import yaml
from core.models import Competitor
from core.scheduler import round_robin, bye_rounds
from core.seeding import ALGORITHMS, DEFAULT_ALGORITHM, split_groups
from core.state import validate_name


def load_ranking(file_path):
    """Load a ranking from YAML: a list of names, best seed first.

    Entries may also be mappings with a 'name' key.
    """
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file)
    if not data:
        return []
    if not isinstance(data, list):
        raise ValueError(f"{file_path} must contain a list of competitor names")
    ranking = []
    for i, entry in enumerate(data):
        name = validate_name(entry.get('name') if isinstance(entry, dict) else entry)
        if any(c.name == name for c in ranking):
            raise ValueError(f"Duplicate competitor '{name}' in {file_path}")
        ranking.append(Competitor(name=name, rank=i + 1))
    return ranking


def format_group(group_name, competitors):
    lines = [f"# Group {group_name}"]
    for c in competitors:
        lines.append(f"{c.rank}. {c.name}")
    byes = bye_rounds(competitors)
    for rnd in round_robin(competitors):
        lines.append(f"Round {rnd.round_number}")
        for a, b in rnd.pairings:
            lines.append(f"  {a} vs {b}")
        resting = [name for name, r in byes.items() if r == rnd.round_number]
        if resting:
            lines.append(f"  (rest: {', '.join(resting)})")
    return "\n".join(lines)


def main(argv=None):
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    parser = argparse.ArgumentParser(description='Split a ranking into groups A and B and print the round-robin schedule.')
    parser.add_argument('ranking', nargs='?', default=os.path.join(base_dir, 'data', 'ranking.yaml'),
                        help='YAML file with the ranking (default: data/ranking.yaml)')
    parser.add_argument('--algorithm', choices=ALGORITHMS, default=DEFAULT_ALGORITHM,
                        help='Group split algorithm (default: %(default)s)')
    args = parser.parse_args(argv)

    try:
        ranking = load_ranking(args.ranking)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: cannot load ranking: {e}", file=sys.stderr)
        return 1

    if not ranking:
        print(f"No competitors loaded. Check {args.ranking}")
        return 1

    group_a, group_b = split_groups(ranking, args.algorithm)
    print(format_group('A', group_a))
    print()
    print(format_group('B', group_b))
    return 0


if __name__ == '__main__':
    sys.exit(main())
