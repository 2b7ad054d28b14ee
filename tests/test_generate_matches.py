"""
Tests for the generate_matches command line tool.
"""
import pytest
import sys
import os
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from generate_matches import format_fixtures, load_teams, main
from matchday.elimination import generate_knockout_fixtures


@pytest.fixture
def teams_file(tmp_path):
    path = tmp_path / "teams.yaml"
    path.write_text(yaml.dump([
        {'id': 'pat', 'name': 'Patna Pirates'},
        {'id': 'jai', 'name': 'Jaipur Pink Panthers'},
        {'id': 'ben', 'name': 'Bengal Warriors'},
    ]))
    return path


class TestLoadTeams:
    """Tests for reading team files."""

    def test_load_team_records(self, teams_file):
        teams = load_teams(str(teams_file))
        assert [t.id for t in teams] == ['pat', 'jai', 'ben']
        assert teams[0].name == 'Patna Pirates'

    def test_load_names_only(self, tmp_path):
        path = tmp_path / "teams.yaml"
        path.write_text("teams:\n  - Alpha\n  - Beta\n")
        teams = load_teams(str(path))
        assert [(t.id, t.name) for t in teams] == [('Alpha', 'Alpha'), ('Beta', 'Beta')]

    def test_load_empty_file(self, tmp_path):
        path = tmp_path / "teams.yaml"
        path.write_text("")
        assert load_teams(str(path)) == []


class TestFormatFixtures:
    """Tests for the printed schedule."""

    def test_byes_and_placeholders(self, teams):
        team_list = teams(3)
        output = format_fixtures(generate_knockout_fixtures(team_list), team_list)
        assert output.splitlines() == [
            "# Semi Final",
            "1. Team 1 vs Team 2",
            "2. Team 3 vs BYE",
            "",
            "# Final",
            "3. TBD vs TBD",
        ]


class TestMain:
    """Tests for the command line entry point."""

    def test_league(self, teams_file, capsys):
        assert main([str(teams_file)]) == 0
        output = capsys.readouterr().out
        assert "# Round 1" in output
        assert "Jaipur Pink Panthers vs Bengal Warriors" in output

    def test_writes_output_file(self, teams_file, tmp_path):
        output_file = tmp_path / "out" / "fixtures.yaml"
        assert main([str(teams_file), '--format', 'knockout', '--shuffle', '--seed', '4',
                     '--output', str(output_file)]) == 0
        data = yaml.safe_load(output_file.read_text())
        assert data['format'] == 'knockout'
        assert len(data['fixtures']) == 3

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.yaml")]) == 1
        assert "Error" in capsys.readouterr().err

    def test_too_few_teams(self, tmp_path, capsys):
        path = tmp_path / "teams.yaml"
        path.write_text("- Solo\n")
        assert main([str(path)]) == 2
        assert "At least 2 teams" in capsys.readouterr().err
