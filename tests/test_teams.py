"""
Unit tests for team list validation.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from matchday.errors import DuplicateTeamError, InvalidTeamCountError, InvalidTeamError, MatchdayError
from matchday.models import Team
from matchday.teams import coerce_team, validate_teams


class TestCoerceTeam:
    """Tests for accepted team representations."""

    def test_team_passes_through(self):
        team = Team('a', 'A')
        assert coerce_team(team) is team

    def test_mapping(self):
        assert coerce_team({'id': 'a', 'name': 'A'}) == Team('a', 'A')

    def test_string(self):
        assert coerce_team('Alpha') == Team('Alpha', 'Alpha')

    def test_mapping_without_id(self):
        with pytest.raises(InvalidTeamError):
            coerce_team({'name': 'A'})

    def test_unsupported_value(self):
        with pytest.raises(InvalidTeamError):
            coerce_team(12)


class TestValidateTeams:
    """Tests for team list checks."""

    def test_keeps_order(self):
        assert [t.id for t in validate_teams(['c', 'a', 'b'])] == ['c', 'a', 'b']

    def test_minimum(self):
        with pytest.raises(InvalidTeamCountError) as exc_info:
            validate_teams(['a'])
        assert exc_info.value.count == 1
        assert validate_teams([], minimum=0) == []

    def test_blank_id(self):
        with pytest.raises(InvalidTeamError):
            validate_teams([Team('a'), Team('  ')])

    def test_duplicate(self):
        with pytest.raises(DuplicateTeamError):
            validate_teams(['a', 'b', 'a'])

    def test_errors_share_base_class(self):
        with pytest.raises(MatchdayError):
            validate_teams(['a', 'a'])
        with pytest.raises(ValueError):
            validate_teams(['a', 'a'])
