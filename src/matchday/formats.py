"""
Tournament formats built from the round robin and knockout generators.
"""
import logging
import random
from typing import Callable, Dict, List, Optional, Sequence

from matchday.elimination import build_bracket, generate_knockout_fixtures
from matchday.errors import UnknownFormatError
from matchday.models import Fixture, new_fixture_id
from matchday.round_robin import generate_group_fixtures, generate_round_robin_fixtures
from matchday.teams import shuffle_teams, validate_teams

logger = logging.getLogger(__name__)

LEAGUE = 'league'
KNOCKOUT = 'knockout'
LEAGUE_KNOCKOUT = 'league_knockout'
GROUP_KNOCKOUT = 'group_knockout'


def _flatten(rounds: List[List[Fixture]]) -> List[Fixture]:
    return [fixture for round_fixtures in rounds for fixture in round_fixtures]


def generate_league_plus_knockout_fixtures(teams: Sequence,
                                           id_factory: Optional[Callable[[], str]] = None) -> List[Fixture]:
    """
    League stage where everyone meets once, then semi-finals and a final.

    The knockout fixtures are empty placeholders, filled from the league
    table once it is complete (see ``standings.seed_league_knockout``).
    """
    teams = validate_teams(teams, minimum=4)
    id_factory = id_factory or new_fixture_id

    league = generate_round_robin_fixtures(teams, id_factory=id_factory)
    for fixture in league:
        fixture.round_name = f"League - {fixture.round_name}"

    league_rounds = max(f.round_number for f in league)
    knockout = build_bracket(4, start_round=league_rounds + 1,
                             start_match_number=len(league) + 1, id_factory=id_factory)
    return league + _flatten(knockout)


def split_into_groups(teams: Sequence) -> Dict[str, list]:
    """
    Split teams into 2 groups, or 4 from eight teams up, keeping their order.

    Group sizes differ by at most one, larger groups first.
    """
    num_groups = 4 if len(teams) >= 8 else 2
    base, extra = divmod(len(teams), num_groups)

    groups = {}
    start = 0
    for index in range(num_groups):
        size = base + (1 if index < extra else 0)
        groups[f"Group {chr(ord('A') + index)}"] = list(teams[start:start + size])
        start += size
    return groups


def generate_group_plus_knockout_fixtures(teams: Sequence,
                                          id_factory: Optional[Callable[[], str]] = None) -> List[Fixture]:
    """
    Group stage where everyone in a group meets once, then a knockout.

    Two groups lead to semi-finals, four groups to quarter-finals. The
    knockout fixtures are linked placeholders, filled from the group tables
    (see ``standings.seed_group_knockout``).
    """
    teams = validate_teams(teams, minimum=4)
    id_factory = id_factory or new_fixture_id

    fixtures = []
    groups = split_into_groups(teams)
    for group_name, members in groups.items():
        fixtures.extend(generate_group_fixtures(
            members, group_name, start_match_number=len(fixtures) + 1, id_factory=id_factory))

    knockout = build_bracket(2 * len(groups), start_round=2,
                             start_match_number=len(fixtures) + 1, id_factory=id_factory)
    return fixtures + _flatten(knockout)


GENERATORS = {
    LEAGUE: generate_round_robin_fixtures,
    KNOCKOUT: generate_knockout_fixtures,
    LEAGUE_KNOCKOUT: generate_league_plus_knockout_fixtures,
    GROUP_KNOCKOUT: generate_group_plus_knockout_fixtures,
}


class TournamentFormat:
    def __init__(self, teams, format_name=LEAGUE, shuffle=False, rng=None):
        if format_name not in GENERATORS:
            raise UnknownFormatError(format_name, tuple(GENERATORS))
        self.teams = validate_teams(teams)
        self.format_name = format_name
        self.shuffle = shuffle
        self.rng = rng

    def ordered_teams(self):
        if self.shuffle:
            return shuffle_teams(self.teams, self.rng)
        return list(self.teams)

    def groups(self):
        """Group membership for the group stage format, else an empty dict."""
        if self.format_name != GROUP_KNOCKOUT:
            return {}
        return split_into_groups(self.teams)

    def generate(self, id_factory=None):
        teams = self.ordered_teams()
        # Shuffled order decides the groups too
        self.teams = teams
        fixtures = GENERATORS[self.format_name](teams, id_factory=id_factory)
        logger.debug("Generated %d fixtures for %d teams in %s format",
                     len(fixtures), len(teams), self.format_name)
        return fixtures


def generate_fixtures(teams: Sequence, format_name: str = LEAGUE, shuffle: bool = False,
                      rng: Optional[random.Random] = None,
                      id_factory: Optional[Callable[[], str]] = None) -> List[Fixture]:
    return TournamentFormat(teams, format_name, shuffle=shuffle, rng=rng).generate(id_factory=id_factory)
