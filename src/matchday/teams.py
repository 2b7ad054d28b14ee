"""
Team list preparation: coercion, validation and random ordering.
"""
import random
from typing import List, Optional, Sequence

from matchday.errors import DuplicateTeamError, InvalidTeamCountError, InvalidTeamError
from matchday.models import Team


def coerce_team(value) -> Team:
    """Accept a Team, a {'id', 'name'} mapping or a bare id string."""
    if isinstance(value, Team):
        return value
    if isinstance(value, dict):
        if 'id' not in value:
            raise InvalidTeamError(f"Team entry has no id: {value!r}")
        return Team.from_dict(value)
    if isinstance(value, str):
        return Team(id=value, name=value)
    raise InvalidTeamError(f"Cannot interpret {value!r} as a team")


def validate_teams(teams: Sequence, minimum: int = 2) -> List[Team]:
    """
    Return the teams as Team objects, in the given order.

    Raises InvalidTeamCountError below ``minimum`` teams, InvalidTeamError for
    empty ids and DuplicateTeamError for repeated ids.
    """
    coerced = [coerce_team(t) for t in teams]
    if len(coerced) < minimum:
        raise InvalidTeamCountError(len(coerced), minimum)

    seen = set()
    for team in coerced:
        if not team.id or not str(team.id).strip():
            raise InvalidTeamError("Team id must be a non-empty string")
        if team.id in seen:
            raise DuplicateTeamError(team.id)
        seen.add(team.id)
    return coerced


def shuffle_teams(teams: Sequence, rng: Optional[random.Random] = None) -> list:
    """Return a shuffled copy of ``teams``; the input is left untouched."""
    shuffled = list(teams)
    (rng or random).shuffle(shuffled)
    return shuffled
