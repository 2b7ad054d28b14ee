"""
Flask web application for matchday fixtures and tie-breakers.
"""
import os
import yaml
from datetime import datetime
from filelock import FileLock
from flask import Flask, request, jsonify
from matchday.elimination import advance_walkovers, advance_winner, get_bracket_display
from matchday.errors import FixtureNotFoundError, MatchdayError, TieBreakerSetupError
from matchday.formats import GENERATORS, GROUP_KNOCKOUT, LEAGUE_KNOCKOUT, generate_fixtures
from matchday.models import Fixture, TieBreakerState
from matchday.standings import (calculate_group_standings, calculate_standings,
                                seed_group_knockout, seed_league_knockout)
from matchday.teams import validate_teams
from matchday.tiebreaker import TieBreaker, first_raiding_team, start_tie_breaker

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('MATCHDAY_DATA_DIR', os.path.join(BASE_DIR, 'data'))

LOCK_TIMEOUT = 10

if not app.debug:
    app.logger.setLevel(os.environ.get('MATCHDAY_LOG_LEVEL', 'INFO'))


def _file_path(name):
    return os.path.join(DATA_DIR, name)


def _data_lock():
    os.makedirs(DATA_DIR, exist_ok=True)
    return FileLock(_file_path('.lock'), timeout=LOCK_TIMEOUT)


def _load_yaml(name, default):
    path = _file_path(name)
    if not os.path.exists(path):
        return default
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        app.logger.warning(f'Failed to parse {path}: {e}')
        return default
    return data if data else default


def _save_yaml(name, data):
    os.makedirs(DATA_DIR, exist_ok=True)
    with open(_file_path(name), 'w', encoding='utf-8') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def get_default_settings():
    """Default tournament settings."""
    return {
        'tournament_name': 'Tournament',
        'format': 'league',
        'shuffle_teams': True,
        'points_system': {'win': 2, 'tie': 1, 'loss': 0},
        'tie_breaker': 'Score Difference',
    }


def load_settings():
    """Load settings from YAML file, merging with defaults."""
    defaults = get_default_settings()
    data = _load_yaml('settings.yaml', {})
    if not isinstance(data, dict):
        return defaults
    merged = {**defaults, **data}
    merged['points_system'] = {**defaults['points_system'], **(data.get('points_system') or {})}
    return merged


def save_settings(settings):
    _save_yaml('settings.yaml', settings)


def load_teams():
    """Load teams as a list of {'id', 'name'} dicts."""
    data = _load_yaml('teams.yaml', [])
    return data if isinstance(data, list) else []


def save_teams(teams):
    _save_yaml('teams.yaml', teams)


def load_fixtures():
    data = _load_yaml('fixtures.yaml', {})
    return [Fixture.from_dict(f) for f in data.get('fixtures', [])]


def save_fixtures(fixtures, format_name=None):
    data = _load_yaml('fixtures.yaml', {})
    if format_name is not None:
        data['format'] = format_name
        data['generated'] = datetime.now().isoformat()
    data['fixtures'] = [f.to_dict() for f in fixtures]
    _save_yaml('fixtures.yaml', data)


def load_fixtures_format():
    return _load_yaml('fixtures.yaml', {}).get('format')


def load_results():
    """Load recorded scores keyed by fixture id."""
    data = _load_yaml('results.yaml', {})
    return data if isinstance(data, dict) else {}


def save_results(results):
    _save_yaml('results.yaml', results)


def load_tiebreakers():
    data = _load_yaml('tiebreakers.yaml', {})
    return data if isinstance(data, dict) else {}


def save_tiebreakers(tiebreakers):
    _save_yaml('tiebreakers.yaml', tiebreakers)


def _is_knockout(fixture):
    return fixture.next_match_id is not None or fixture.round_name == 'Final'


def _find_fixture(fixtures, fixture_id):
    for fixture in fixtures:
        if fixture.id == fixture_id:
            return fixture
    raise FixtureNotFoundError(fixture_id)


def _groups_from_fixtures(fixtures, teams):
    names = {t['id']: t.get('name', t['id']) for t in teams}
    groups = {}
    for fixture in fixtures:
        if fixture.group_name is None:
            continue
        members = groups.setdefault(fixture.group_name, [])
        for team_id in fixture.team_ids:
            if all(m['id'] != team_id for m in members):
                members.append({'id': team_id, 'name': names.get(team_id, team_id)})
    return groups


def _league_teams(fixtures, teams):
    """Teams taking part in the league stage, in team list order."""
    playing = {team_id for f in fixtures if f.next_match_id is None and f.group_name is None
               and f.round_name.startswith(('Round ', 'League - ')) for team_id in f.team_ids}
    return [t for t in teams if t['id'] in playing]


def calculate_current_standings():
    fixtures = load_fixtures()
    teams = load_teams()
    results = load_results()
    settings = load_settings()
    points_system = settings['points_system']
    league = [f for f in fixtures if not _is_knockout(f)]
    if load_fixtures_format() == GROUP_KNOCKOUT:
        groups = _groups_from_fixtures(league, teams)
        return {'groups': calculate_group_standings(groups, league, results, points_system)}
    return {'table': calculate_standings(_league_teams(league, teams), league, results, points_system)}


@app.errorhandler(MatchdayError)
def handle_matchday_error(e):
    status = 404 if isinstance(e, FixtureNotFoundError) else 400
    return jsonify({'success': False, 'error': str(e)}), status


@app.route('/api/teams', methods=['GET'])
def api_get_teams():
    return jsonify({'success': True, 'teams': load_teams()})


@app.route('/api/teams', methods=['POST'])
def api_save_teams():
    """Replace the team list."""
    data = request.get_json(silent=True) or {}
    teams = validate_teams(data.get('teams', []), minimum=0)
    with _data_lock():
        save_teams([t.to_dict() for t in teams])
    app.logger.info(f'Saved {len(teams)} teams')
    return jsonify({'success': True, 'teams': [t.to_dict() for t in teams]})


@app.route('/api/settings', methods=['GET'])
def api_get_settings():
    return jsonify({'success': True, 'settings': load_settings()})


@app.route('/api/settings', methods=['POST'])
def api_save_settings():
    data = request.get_json(silent=True) or {}
    unknown = set(data) - set(get_default_settings())
    if unknown:
        return jsonify({'success': False, 'error': f'Unknown settings: {", ".join(sorted(unknown))}'}), 400
    if 'format' in data and data['format'] not in GENERATORS:
        return jsonify({'success': False, 'error': f'Unknown tournament format \'{data["format"]}\''}), 400
    if 'shuffle_teams' in data and not isinstance(data['shuffle_teams'], bool):
        return jsonify({'success': False, 'error': 'shuffle_teams must be true or false'}), 400
    with _data_lock():
        settings = load_settings()
        settings.update(data)
        save_settings(settings)
    return jsonify({'success': True, 'settings': settings})


@app.route('/api/fixtures/generate', methods=['POST'])
def api_generate_fixtures():
    """Generate fixtures for the saved teams, replacing any existing fixtures and results."""
    data = request.get_json(silent=True) or {}
    settings = load_settings()
    format_name = data.get('format', settings['format'])
    shuffle = data.get('shuffle', settings['shuffle_teams'])
    if not isinstance(shuffle, bool):
        return jsonify({'success': False, 'error': 'shuffle must be true or false'}), 400

    with _data_lock():
        fixtures = generate_fixtures(load_teams(), format_name, shuffle=shuffle)
        save_fixtures(fixtures, format_name)
        save_results({})
    app.logger.info(f'Generated {len(fixtures)} {format_name} fixtures')
    return jsonify({'success': True, 'format': format_name, 'fixtures': [f.to_dict() for f in fixtures]})


@app.route('/api/fixtures', methods=['GET'])
def api_get_fixtures():
    fixtures = load_fixtures()
    return jsonify({
        'success': True,
        'format': load_fixtures_format(),
        'fixtures': [f.to_dict() for f in fixtures],
        'results': load_results(),
    })


@app.route('/api/bracket', methods=['GET'])
def api_get_bracket():
    knockout = [f for f in load_fixtures() if f.group_name is None and _is_knockout(f)]
    return jsonify({'success': True, 'bracket': get_bracket_display(knockout)})


@app.route('/api/fixtures/<fixture_id>/result', methods=['POST'])
def api_record_result(fixture_id):
    """
    Record a fixture score.

    Knockout fixtures need a winner: the higher score, or ``winner_id`` when
    the score is level and a tie-breaker decided it.
    """
    data = request.get_json(silent=True) or {}
    try:
        score_a = int(data['team_a_score'])
        score_b = int(data['team_b_score'])
    except (KeyError, TypeError, ValueError):
        return jsonify({'success': False, 'error': 'team_a_score and team_b_score must be integers'}), 400

    with _data_lock():
        fixtures = load_fixtures()
        fixture = _find_fixture(fixtures, fixture_id)
        if not fixture.is_ready:
            return jsonify({'success': False, 'error': 'Both teams must be decided before recording a result'}), 400

        winner_id = data.get('winner_id')
        if score_a != score_b:
            winner_id = fixture.team_a_id if score_a > score_b else fixture.team_b_id

        results = load_results()
        next_fixture = None
        if _is_knockout(fixture):
            if fixture.next_match_id in results:
                return jsonify({'success': False, 'error': 'The next fixture already has a result; this result can no longer change'}), 400
            if winner_id is None:
                return jsonify({'success': False, 'error': 'Knockout fixtures need a winner; record the tie-breaker first'}), 400
            next_fixture = advance_winner(fixtures, fixture_id, winner_id)

        results[fixture_id] = {'team_a_score': score_a, 'team_b_score': score_b, 'winner_id': winner_id}
        save_results(results)
        save_fixtures(fixtures)

    app.logger.info(f'Recorded result {score_a}-{score_b} for fixture {fixture_id}')
    return jsonify({
        'success': True,
        'winner_id': winner_id,
        'next_fixture': next_fixture.to_dict() if next_fixture else None,
    })


@app.route('/api/fixtures/advance-walkovers', methods=['POST'])
def api_advance_walkovers():
    with _data_lock():
        fixtures = load_fixtures()
        resolved = advance_walkovers(fixtures)
        save_fixtures(fixtures)
    return jsonify({'success': True, 'resolved': [f.id for f in resolved]})


@app.route('/api/fixtures/seed-knockout', methods=['POST'])
def api_seed_knockout():
    """Fill the knockout placeholders from the current standings."""
    with _data_lock():
        format_name = load_fixtures_format()
        standings = calculate_current_standings()
        fixtures = load_fixtures()
        if format_name == LEAGUE_KNOCKOUT:
            seeded = seed_league_knockout(fixtures, standings['table'])
        elif format_name == GROUP_KNOCKOUT:
            seeded = seed_group_knockout(fixtures, standings['groups'])
        else:
            return jsonify({'success': False, 'error': 'Only league_knockout and group_knockout fixtures are seeded from standings'}), 400
        save_fixtures(fixtures)
    return jsonify({'success': True, 'fixtures': [f.to_dict() for f in seeded]})


@app.route('/api/standings', methods=['GET'])
def api_get_standings():
    standings = calculate_current_standings()
    return jsonify({'success': True, 'tie_breaker': load_settings()['tie_breaker'], **standings})


def _tiebreaker_payload(match_id, entry):
    state = TieBreakerState.from_dict(entry['state'])
    return {
        'success': True,
        'match_id': match_id,
        'state': state.to_dict(),
        'raiding_team': state.raiding_team,
        'current_raider_id': state.current_raider_id,
        'history': entry.get('history', []),
    }


@app.route('/api/tiebreaker/<match_id>/start', methods=['POST'])
def api_start_tiebreaker(match_id):
    """
    Start a tie-breaker. Pass either ``first_raiding_team`` or
    ``toss_winner`` with ``toss_choice`` ('raid' or 'defend').
    """
    data = request.get_json(silent=True) or {}
    if 'toss_winner' in data:
        first_team = first_raiding_team(data['toss_winner'], data.get('toss_choice'))
    else:
        first_team = data.get('first_raiding_team', 'A')

    state = start_tie_breaker(first_team, raiders=data.get('raiders'), lineups=data.get('lineups'))
    entry = {'state': state.to_dict(), 'history': []}
    with _data_lock():
        tiebreakers = load_tiebreakers()
        if match_id in tiebreakers and not data.get('restart', False):
            raise TieBreakerSetupError(f"Tie-breaker for match '{match_id}' already started")
        tiebreakers[match_id] = entry
        save_tiebreakers(tiebreakers)
    app.logger.info(f'Tie-breaker started for match {match_id}, team {first_team} raids first')
    return jsonify(_tiebreaker_payload(match_id, entry))


@app.route('/api/tiebreaker/<match_id>/raid', methods=['POST'])
def api_record_tiebreaker_raid(match_id):
    data = request.get_json(silent=True) or {}
    with _data_lock():
        tiebreakers = load_tiebreakers()
        entry = tiebreakers.get(match_id)
        if entry is None:
            return jsonify({'success': False, 'error': f"No tie-breaker for match '{match_id}'"}), 404

        tiebreaker = TieBreaker(TieBreakerState.from_dict(entry['state']))
        tiebreaker.history = list(entry.get('history', []))
        tiebreaker.record(data.get('points'))

        entry = {'state': tiebreaker.state.to_dict(), 'history': tiebreaker.history}
        tiebreakers[match_id] = entry
        save_tiebreakers(tiebreakers)

    if tiebreaker.winner:
        app.logger.info(f'Tie-breaker for match {match_id} won by team {tiebreaker.winner}')
    return jsonify(_tiebreaker_payload(match_id, entry))


@app.route('/api/tiebreaker/<match_id>', methods=['GET'])
def api_get_tiebreaker(match_id):
    entry = load_tiebreakers().get(match_id)
    if entry is None:
        return jsonify({'success': False, 'error': f"No tie-breaker for match '{match_id}'"}), 404
    return jsonify(_tiebreaker_payload(match_id, entry))


if __name__ == '__main__':
    app.run(debug=True, port=5000)
