"""
Tie-breaker scoring for matches that finish level.

The tie-breaker starts with a five-raid shootout per side, raids alternating
between the sides. Only raid points count: there are no outs, revivals or
all-out bonuses. If the shootout totals are level after ten raids, a single
golden raid decides the match: any point wins it for the raiding side, an
empty raid hands it to the defenders.

States only move forward::

    shootout -> golden_raid -> complete
    shootout -> complete
"""
import logging
from typing import Dict, List, Optional

from matchday.errors import InvalidPointsError, InvalidTransitionError, TieBreakerSetupError
from matchday.models import (PHASE_COMPLETE, PHASE_GOLDEN_RAID, PHASE_SHOOTOUT, SIDES,
                             TieBreakerState, other_side)

logger = logging.getLogger(__name__)

SHOOTOUT_RAIDS_PER_TEAM = 5
MAX_RAID_POINTS = 5
PLAYERS_ON_COURT = 7

TOSS_RAID = 'raid'
TOSS_DEFEND = 'defend'


def first_raiding_team(toss_winner: str, choice: str) -> str:
    """The side that raids first, given who won the toss and what they chose."""
    if toss_winner not in SIDES:
        raise TieBreakerSetupError(f"Toss winner must be one of {SIDES}, got {toss_winner!r}")
    if choice == TOSS_RAID:
        return toss_winner
    if choice == TOSS_DEFEND:
        return other_side(toss_winner)
    raise TieBreakerSetupError(f"Toss choice must be '{TOSS_RAID}' or '{TOSS_DEFEND}', got {choice!r}")


def validate_lineup(playing: List[str], raiders: List[str]) -> None:
    """
    Check a side's tie-breaker line-up: seven players on court and five
    distinct raiders, in raiding order, chosen from them.
    """
    if len(set(playing)) != len(playing):
        raise TieBreakerSetupError("A player is listed twice in the playing seven")
    if len(playing) != PLAYERS_ON_COURT:
        raise TieBreakerSetupError(f"Exactly {PLAYERS_ON_COURT} players must be selected, got {len(playing)}")
    if len(set(raiders)) != len(raiders):
        raise TieBreakerSetupError("A raider is listed twice")
    if len(raiders) != SHOOTOUT_RAIDS_PER_TEAM:
        raise TieBreakerSetupError(
            f"Exactly {SHOOTOUT_RAIDS_PER_TEAM} raiders must be selected, got {len(raiders)}")
    outsiders = [r for r in raiders if r not in playing]
    if outsiders:
        raise TieBreakerSetupError(f"Raiders must come from the playing seven: {', '.join(outsiders)}")


def _check_sides(label: str, value) -> None:
    if value is None:
        return
    if not isinstance(value, dict):
        raise TieBreakerSetupError(f"{label} must map each side to a list of player ids, got {value!r}")
    for side, ids in value.items():
        if side not in SIDES:
            raise TieBreakerSetupError(f"Unknown side {side!r} in {label}")
        if not isinstance(ids, (list, tuple)):
            raise TieBreakerSetupError(f"{label} for side {side} must be a list, got {ids!r}")


def start_tie_breaker(first_team: str = 'A', raiders: Optional[Dict[str, List[str]]] = None,
                      lineups: Optional[Dict[str, List[str]]] = None) -> TieBreakerState:
    """
    Create the opening shootout state.

    ``raiders`` optionally maps each side to its ordered raiders; when
    ``lineups`` (the playing seven per side) is given too, both are checked
    with ``validate_lineup``.
    """
    if first_team not in SIDES:
        raise TieBreakerSetupError(f"First raiding team must be one of {SIDES}, got {first_team!r}")
    for label, value in (('raiders', raiders), ('lineups', lineups)):
        _check_sides(label, value)
    if lineups:
        for side in SIDES:
            validate_lineup(lineups.get(side, []), (raiders or {}).get(side, []))
    return TieBreakerState(phase=PHASE_SHOOTOUT, current_team=first_team, raiders=raiders)


def _check_points(points, maximum: Optional[int] = None) -> int:
    if isinstance(points, bool) or not isinstance(points, int):
        raise InvalidPointsError(f"Raid points must be an integer, got {points!r}")
    if points < 0:
        raise InvalidPointsError(f"Raid points cannot be negative, got {points}")
    if maximum is not None and points > maximum:
        raise InvalidPointsError(f"Raid points must be between 0 and {maximum}, got {points}")
    return points


def _next_shootout_raider(state: TieBreakerState, last_team: str) -> Optional[str]:
    other = other_side(last_team)
    if state.raids[other] < SHOOTOUT_RAIDS_PER_TEAM:
        return other
    if state.raids[last_team] < SHOOTOUT_RAIDS_PER_TEAM:
        return last_team
    return None


def _record_shootout(state: TieBreakerState, points: int) -> None:
    team = state.current_team
    if state.raids[team] >= SHOOTOUT_RAIDS_PER_TEAM:
        raise InvalidTransitionError(f"Team {team} has already taken its {SHOOTOUT_RAIDS_PER_TEAM} shootout raids")

    state.raids[team] += 1
    state.score[team] += points

    next_team = _next_shootout_raider(state, team)
    if next_team is not None:
        state.current_team = next_team
        return

    # Both sides have used all their raids
    if state.score['A'] != state.score['B']:
        state.winner = 'A' if state.score['A'] > state.score['B'] else 'B'
        state.phase = PHASE_COMPLETE
        logger.debug("Shootout won by %s (%d-%d)", state.winner, state.score['A'], state.score['B'])
    else:
        state.golden_raid_team = other_side(team)
        state.current_team = state.golden_raid_team
        state.phase = PHASE_GOLDEN_RAID
        logger.debug("Shootout level at %d, golden raid by %s", state.score['A'], state.golden_raid_team)


def _record_golden_raid(state: TieBreakerState, points: int) -> None:
    raider = state.golden_raid_team
    state.winner = raider if points > 0 else other_side(raider)
    state.phase = PHASE_COMPLETE


def record_shootout_point(state: TieBreakerState, points: int) -> TieBreakerState:
    """
    Record one tie-breaker raid and return the resulting state.

    The given state is not modified. In the shootout ``points`` (0 to 5) is
    added to the raiding side. In the golden raid, 0 means the defenders win
    and any positive value means the raiders win.
    """
    points = _check_points(points)
    if state.phase == PHASE_COMPLETE:
        raise InvalidTransitionError("Tie-breaker is already complete")
    if state.phase not in (PHASE_SHOOTOUT, PHASE_GOLDEN_RAID):
        raise InvalidTransitionError(f"Unknown tie-breaker phase {state.phase!r}")

    next_state = state.copy()
    if state.phase == PHASE_SHOOTOUT:
        _check_points(points, MAX_RAID_POINTS)
        _record_shootout(next_state, points)
    else:
        _record_golden_raid(next_state, points)
    return next_state


class TieBreaker:
    """
    Mutable holder around the pure transition, keeping the raid history.
    """

    def __init__(self, state=None):
        self.state = state or start_tie_breaker()
        self.history = []

    def record(self, points):
        self.state = record_shootout_point(self.state, points)
        self.history.append(points)
        return self.state

    @property
    def winner(self):
        return self.state.winner
