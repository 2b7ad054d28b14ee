"""
Single elimination bracket generation and progression.
"""
import logging
import math
from typing import Callable, Dict, List, Optional, Sequence

from matchday.errors import FixtureNotFoundError, InvalidTeamError
from matchday.models import SLOT_A, SLOT_B, Fixture, new_fixture_id
from matchday.teams import validate_teams

logger = logging.getLogger(__name__)


def get_round_name(teams_in_round: int) -> str:
    """Get the name of a round based on number of teams."""
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semi Final"
    elif teams_in_round == 8:
        return "Quarter Final"
    else:
        return f"Round of {teams_in_round}"


def calculate_bracket_size(num_teams: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_teams <= 0:
        return 0
    return 2 ** math.ceil(math.log2(num_teams))


def calculate_byes(num_teams: int) -> int:
    """Calculate number of byes needed."""
    bracket_size = calculate_bracket_size(num_teams)
    return bracket_size - num_teams


def seed_first_round(team_ids: List[str], bracket_size: int) -> List[Optional[str]]:
    """
    Lay out first-round entrants, two per fixture, None marking a bye.

    Teams keep their order. The last ``byes`` teams each face a bye, so no
    fixture is left without any team at all.

    For 5 teams: [A, B, C, None, D, None, E, None]
    """
    byes = bracket_size - len(team_ids)
    paired = len(team_ids) - byes
    entrants = list(team_ids[:paired])
    for team_id in team_ids[paired:]:
        entrants.extend([team_id, None])
    return entrants


def build_bracket(bracket_size: int, start_round: int = 1, start_match_number: int = 1,
                  id_factory: Optional[Callable[[], str]] = None) -> List[List[Fixture]]:
    """
    Build an empty, fully linked bracket tree.

    Returns one list of fixtures per round, first round first. Every fixture
    except the final points at the fixture its winner moves into: fixture i
    of a round feeds fixture i // 2 of the next, even positions into slot A
    and odd positions into slot B.
    """
    id_factory = id_factory or new_fixture_id
    rounds = []
    previous_round = []
    teams_in_round = bracket_size
    round_number = start_round
    match_number = start_match_number

    while teams_in_round >= 2:
        round_name = get_round_name(teams_in_round)
        current_round = []
        for _ in range(teams_in_round // 2):
            current_round.append(Fixture(
                id=id_factory(),
                team_a_id=None,
                team_b_id=None,
                round_number=round_number,
                match_number=match_number,
                round_name=round_name,
            ))
            match_number += 1

        for i, previous in enumerate(previous_round):
            previous.next_match_id = current_round[i // 2].id
            previous.is_team_a_winner_slot = i % 2 == 0

        rounds.append(current_round)
        previous_round = current_round
        teams_in_round //= 2
        round_number += 1

    return rounds


def generate_knockout_fixtures(teams: Sequence,
                               id_factory: Optional[Callable[[], str]] = None) -> List[Fixture]:
    """
    Generate every fixture of a single elimination bracket.

    The bracket is padded to the next power of two. Byes fill the B slot of
    the last first-round fixtures, one per fixture. Byes are not advanced
    here; see ``advance_walkovers``.
    """
    teams = validate_teams(teams)
    bracket_size = calculate_bracket_size(len(teams))
    rounds = build_bracket(bracket_size, id_factory=id_factory)

    entrants = seed_first_round([team.id for team in teams], bracket_size)
    for i, fixture in enumerate(rounds[0]):
        for slot, team_id in ((SLOT_A, entrants[i * 2]), (SLOT_B, entrants[i * 2 + 1])):
            if team_id is None:
                fixture.bye_slots.add(slot)
            else:
                fixture.set_team(slot, team_id)

    fixtures = [fixture for round_fixtures in rounds for fixture in round_fixtures]
    logger.debug("Generated knockout bracket of size %d for %d teams (%d fixtures)",
                 bracket_size, len(teams), len(fixtures))
    return fixtures


def _index_by_id(fixtures: Sequence[Fixture]) -> Dict[str, Fixture]:
    return {fixture.id: fixture for fixture in fixtures}


def advance_winner(fixtures: Sequence[Fixture], fixture_id: str, winner_id: str) -> Optional[Fixture]:
    """
    Move the winner of a fixture into the slot it feeds.

    Returns the receiving fixture, or None when the fixture has no forward
    link (a final).
    """
    by_id = _index_by_id(fixtures)
    fixture = by_id.get(fixture_id)
    if fixture is None:
        raise FixtureNotFoundError(fixture_id)
    if winner_id not in fixture.team_ids:
        raise InvalidTeamError(f"Team '{winner_id}' is not playing in fixture '{fixture_id}'")

    if fixture.next_match_id is None:
        return None
    next_fixture = by_id.get(fixture.next_match_id)
    if next_fixture is None:
        raise FixtureNotFoundError(fixture.next_match_id)

    slot = SLOT_A if fixture.is_team_a_winner_slot else SLOT_B
    next_fixture.set_team(slot, winner_id)
    return next_fixture


def find_walkovers(fixtures: Sequence[Fixture]) -> List[Fixture]:
    """Fixtures where one team is drawn against a bye."""
    return [fixture for fixture in fixtures if fixture.is_walkover]


def advance_walkovers(fixtures: Sequence[Fixture]) -> List[Fixture]:
    """
    Push every team drawn against a bye into its next fixture.

    Returns the walkover fixtures that were resolved.
    """
    walkovers = find_walkovers(fixtures)
    for fixture in walkovers:
        advance_winner(fixtures, fixture.id, fixture.team_ids[0])
    return walkovers


def group_by_round(fixtures: Sequence[Fixture]) -> Dict[int, List[Fixture]]:
    rounds = {}
    for fixture in sorted(fixtures, key=lambda f: (f.round_number, f.match_number)):
        rounds.setdefault(fixture.round_number, []).append(fixture)
    return rounds


def get_bracket_display(fixtures: Sequence[Fixture]) -> Dict:
    """
    Get bracket data formatted for UI display.
    """
    rounds = group_by_round(fixtures)
    first_round = rounds.get(min(rounds)) if rounds else []
    bracket_size = len(first_round) * 2

    matches_per_round = {}
    display_rounds = {}
    for round_fixtures in rounds.values():
        round_name = round_fixtures[0].round_name
        display_rounds[round_name] = [f.to_dict() for f in round_fixtures]
        matches_per_round[round_name] = len([f for f in round_fixtures if not f.is_walkover])

    return {
        'rounds': display_rounds,
        'bracket_size': bracket_size,
        'total_rounds': len(rounds),
        'byes': sum(len(f.bye_slots) for f in first_round),
        'matches_per_round': matches_per_round,
    }
