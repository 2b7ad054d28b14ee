"""
Round robin (league) fixture generation using the circle method.
"""
import logging
from itertools import combinations
from typing import Callable, List, Optional, Sequence

from matchday.models import Fixture, new_fixture_id
from matchday.teams import validate_teams

logger = logging.getLogger(__name__)


def count_rounds(num_teams: int) -> int:
    """Number of rounds a single round robin takes (odd counts add a bye round)."""
    if num_teams < 2:
        return 0
    return num_teams if num_teams % 2 else num_teams - 1


def generate_round_robin_fixtures(teams: Sequence,
                                  id_factory: Optional[Callable[[], str]] = None) -> List[Fixture]:
    """
    Generate a single round robin where every pair of teams meets once.

    Teams keep the order they are given in; shuffle beforehand for a random
    draw. With an odd number of teams a placeholder is added and any pairing
    against it is skipped, so each team sits out exactly one round.
    """
    teams = validate_teams(teams)
    id_factory = id_factory or new_fixture_id

    slots = [team.id for team in teams]
    if len(slots) % 2:
        slots.append(None)

    num_slots = len(slots)
    rounds = num_slots - 1
    matches_per_round = num_slots // 2

    fixtures = []
    for round_index in range(rounds):
        for match in range(matches_per_round):
            home = (round_index + match) % (num_slots - 1)
            away = (num_slots - 1 - match + round_index) % (num_slots - 1)
            # One team stays fixed while the rest rotate around it
            if match == 0:
                away = num_slots - 1

            team_a, team_b = slots[home], slots[away]
            if team_a is None or team_b is None:
                continue

            fixtures.append(Fixture(
                id=id_factory(),
                team_a_id=team_a,
                team_b_id=team_b,
                round_number=round_index + 1,
                match_number=len(fixtures) + 1,
                round_name=f"Round {round_index + 1}",
            ))

    logger.debug("Generated %d round robin fixtures over %d rounds for %d teams",
                 len(fixtures), rounds, len(teams))
    return fixtures


def generate_group_fixtures(teams: Sequence, group_name: str, start_match_number: int = 1,
                            round_number: int = 1,
                            id_factory: Optional[Callable[[], str]] = None) -> List[Fixture]:
    """
    Every pair within a group plays once, all in the same stage round.

    A group of one team produces no fixtures.
    """
    teams = validate_teams(teams, minimum=1)
    id_factory = id_factory or new_fixture_id

    fixtures = []
    for team_a, team_b in combinations(teams, 2):
        fixtures.append(Fixture(
            id=id_factory(),
            team_a_id=team_a.id,
            team_b_id=team_b.id,
            round_number=round_number,
            match_number=start_match_number + len(fixtures),
            round_name=group_name,
            group_name=group_name,
        ))
    return fixtures
