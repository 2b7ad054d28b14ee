"""
League and group standings, and seeding knockout placeholders from them.
"""
from typing import Dict, List, Optional, Sequence

from matchday.errors import InvalidTeamCountError, MatchdayError
from matchday.models import SLOT_A, SLOT_B, Fixture
from matchday.teams import coerce_team

DEFAULT_POINTS_SYSTEM = {'win': 2, 'tie': 1, 'loss': 0}


def _empty_row(team) -> Dict:
    return {
        'team_id': team.id,
        'team': team.name,
        'played': 0,
        'won': 0,
        'tied': 0,
        'lost': 0,
        'score_for': 0,
        'score_against': 0,
        'score_diff': 0,
        'points': 0,
    }


def calculate_standings(teams: Sequence, fixtures: Sequence[Fixture], results: Dict[str, Dict],
                        points_system: Optional[Dict] = None, group_name: Optional[str] = None) -> List[Dict]:
    """
    Calculate a ranked table from recorded fixture scores.

    ``results`` maps fixture id to {'team_a_score': n, 'team_b_score': n}.
    Only fixtures between two listed teams count, restricted to
    ``group_name`` when given.

    Ranking: points -> score difference -> score for -> name
    """
    points_system = {**DEFAULT_POINTS_SYSTEM, **(points_system or {})}
    rows = {}
    for team in teams:
        team = coerce_team(team)
        rows[team.id] = _empty_row(team)

    for fixture in fixtures:
        if group_name is not None and fixture.group_name != group_name:
            continue
        result = results.get(fixture.id)
        if not result:
            continue
        if fixture.team_a_id not in rows or fixture.team_b_id not in rows:
            continue
        score_a = result.get('team_a_score')
        score_b = result.get('team_b_score')
        if score_a is None or score_b is None:
            continue

        team_a = rows[fixture.team_a_id]
        team_b = rows[fixture.team_b_id]
        for row, scored, conceded in ((team_a, score_a, score_b), (team_b, score_b, score_a)):
            row['played'] += 1
            row['score_for'] += scored
            row['score_against'] += conceded
            if scored > conceded:
                row['won'] += 1
                row['points'] += points_system['win']
            elif scored < conceded:
                row['lost'] += 1
                row['points'] += points_system['loss']
            else:
                row['tied'] += 1
                row['points'] += points_system['tie']

    for row in rows.values():
        row['score_diff'] = row['score_for'] - row['score_against']

    ranked = sorted(
        rows.values(),
        key=lambda x: (-x['points'], -x['score_diff'], -x['score_for'], x['team'])
    )
    for position, row in enumerate(ranked, start=1):
        row['position'] = position
    return ranked


def calculate_group_standings(groups: Dict[str, Sequence], fixtures: Sequence[Fixture],
                              results: Dict[str, Dict], points_system: Optional[Dict] = None) -> Dict[str, List[Dict]]:
    return {
        name: calculate_standings(members, fixtures, results, points_system, group_name=name)
        for name, members in groups.items()
    }


def _knockout_entry_round(fixtures: Sequence[Fixture], round_name: str) -> List[Fixture]:
    entry = [f for f in fixtures if f.round_name == round_name and f.group_name is None]
    return sorted(entry, key=lambda f: f.match_number)


def _fill(fixture: Fixture, team_a: Dict, team_b: Dict) -> None:
    fixture.set_team(SLOT_A, team_a['team_id'])
    fixture.set_team(SLOT_B, team_b['team_id'])


def seed_league_knockout(fixtures: Sequence[Fixture], standings: List[Dict]) -> List[Fixture]:
    """
    Fill the semi-finals after a league stage: 1st v 4th and 2nd v 3rd.
    """
    if len(standings) < 4:
        raise InvalidTeamCountError(len(standings), 4)
    semi_finals = _knockout_entry_round(fixtures, "Semi Final")
    if len(semi_finals) != 2:
        raise MatchdayError("Expected two semi-final placeholders")
    _fill(semi_finals[0], standings[0], standings[3])
    _fill(semi_finals[1], standings[1], standings[2])
    return semi_finals


def seed_group_knockout(fixtures: Sequence[Fixture], group_standings: Dict[str, List[Dict]]) -> List[Fixture]:
    """
    Fill the first knockout round from group winners and runners-up.

    Groups are paired in name order (A with B, C with D); within a pair the
    winner of each group meets the runner-up of the other.
    """
    names = sorted(group_standings)
    for name in names:
        if len(group_standings[name]) < 2:
            raise InvalidTeamCountError(len(group_standings[name]), 2)

    round_name = "Semi Final" if len(names) == 2 else "Quarter Final"
    entry = _knockout_entry_round(fixtures, round_name)
    if len(entry) != len(names):
        raise MatchdayError(f"Expected {len(names)} {round_name} placeholders, found {len(entry)}")

    for i in range(0, len(names), 2):
        first = group_standings[names[i]]
        second = group_standings[names[i + 1]]
        _fill(entry[i], first[0], second[1])
        _fill(entry[i + 1], second[0], first[1])
    return entry
