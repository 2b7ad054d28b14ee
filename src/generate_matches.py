"""
Generate tournament fixtures from a YAML team list.

Usage:
    python src/generate_matches.py data/teams.yaml
    python src/generate_matches.py data/teams.yaml --format knockout --shuffle --output data/fixtures.yaml

The team file is either a list of {id, name} entries or a list of names.

Exit codes:
    0: Success
    1: Team file missing or unreadable
    2: Fixtures could not be generated for these teams
"""
import argparse
import os
import random
import sys
import yaml
from matchday.elimination import group_by_round
from matchday.errors import MatchdayError
from matchday.formats import GENERATORS, LEAGUE, generate_fixtures
from matchday.teams import coerce_team


def load_teams(file_path):
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file)
    if not data:
        return []
    if isinstance(data, dict):
        data = data.get('teams', [])
    return [coerce_team(entry) for entry in data]


def format_fixtures(fixtures, teams):
    """Render fixtures grouped by round, one line per fixture."""
    names = {team.id: team.name for team in teams}
    lines = []
    for round_fixtures in group_by_round(fixtures).values():
        if lines:
            lines.append('')
        lines.append(f"# {round_fixtures[0].round_name}")
        for fixture in round_fixtures:
            team_a = _slot_label(fixture, 'a', names)
            team_b = _slot_label(fixture, 'b', names)
            group = f" [{fixture.group_name}]" if fixture.group_name else ''
            lines.append(f"{fixture.match_number}. {team_a} vs {team_b}{group}")
    return '\n'.join(lines)


def _slot_label(fixture, slot, names):
    team_id = fixture.team_id(slot)
    if team_id is not None:
        return names.get(team_id, team_id)
    return 'BYE' if slot in fixture.bye_slots else 'TBD'


def save_fixtures(file_path, fixtures, format_name):
    os.makedirs(os.path.dirname(os.path.abspath(file_path)), exist_ok=True)
    with open(file_path, 'w', encoding='utf-8') as f:
        yaml.dump({'format': format_name, 'fixtures': [fx.to_dict() for fx in fixtures]},
                  f, default_flow_style=False, sort_keys=False)


def parse_args(argv=None):
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)
    parser = argparse.ArgumentParser(description='Generate tournament fixtures.')
    parser.add_argument('teams_file', nargs='?', default=os.path.join(base_dir, 'data', 'teams.yaml'),
                        help='YAML file listing the teams')
    parser.add_argument('--format', dest='format_name', choices=sorted(GENERATORS), default=LEAGUE,
                        help='Tournament format (default: league)')
    parser.add_argument('--shuffle', action='store_true', help='Randomise team order before the draw')
    parser.add_argument('--seed', type=int, help='Random seed used with --shuffle')
    parser.add_argument('--output', help='Write fixtures to this YAML file')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    try:
        teams = load_teams(args.teams_file)
    except (OSError, yaml.YAMLError, MatchdayError) as e:
        print(f"Error: Cannot read teams from {args.teams_file}: {e}", file=sys.stderr)
        return 1

    rng = random.Random(args.seed) if args.seed is not None else None
    try:
        fixtures = generate_fixtures(teams, args.format_name, shuffle=args.shuffle, rng=rng)
    except MatchdayError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(format_fixtures(fixtures, teams))
    if args.output:
        save_fixtures(args.output, fixtures, args.format_name)
        print(f"\nSaved {len(fixtures)} fixtures to {args.output}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
