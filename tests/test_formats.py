"""
Unit tests for combined tournament formats and format dispatch.
"""
import pytest
import random
import sys
import os
from collections import Counter
from itertools import combinations

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from matchday.errors import InvalidTeamCountError, UnknownFormatError
from matchday.formats import (
    GROUP_KNOCKOUT,
    KNOCKOUT,
    LEAGUE,
    LEAGUE_KNOCKOUT,
    TournamentFormat,
    generate_fixtures,
    generate_group_plus_knockout_fixtures,
    generate_league_plus_knockout_fixtures,
    split_into_groups,
)
from matchday.teams import shuffle_teams


class TestLeaguePlusKnockout:
    """Tests for a league stage followed by semi-finals and a final."""

    def test_structure(self, teams, id_factory):
        fixtures = generate_league_plus_knockout_fixtures(teams(5), id_factory=id_factory)
        league = fixtures[:-3]
        semi_1, semi_2, final = fixtures[-3:]

        assert len(league) == 10
        assert all(f.round_name.startswith("League - Round ") for f in league)
        assert semi_1.round_name == semi_2.round_name == "Semi Final"
        assert final.round_name == "Final"
        assert semi_1.round_number == semi_2.round_number == 6
        assert final.round_number == 7
        assert [f.match_number for f in fixtures] == list(range(1, 14))

    def test_semi_finals_feed_final(self, teams):
        fixtures = generate_league_plus_knockout_fixtures(teams(4))
        semi_1, semi_2, final = fixtures[-3:]
        assert semi_1.next_match_id == final.id and semi_1.is_team_a_winner_slot is True
        assert semi_2.next_match_id == final.id and semi_2.is_team_a_winner_slot is False
        assert final.next_match_id is None
        assert all(f.team_a_id is None and f.team_b_id is None for f in (semi_1, semi_2, final))

    def test_needs_four_teams(self, teams):
        with pytest.raises(InvalidTeamCountError):
            generate_league_plus_knockout_fixtures(teams(3))


class TestGroupPlusKnockout:
    """Tests for a group stage followed by a knockout."""

    def test_split_two_groups(self, teams):
        groups = split_into_groups(teams(7))
        assert list(groups) == ["Group A", "Group B"]
        assert [len(g) for g in groups.values()] == [4, 3]

    def test_split_four_groups(self, teams):
        groups = split_into_groups(teams(9))
        assert list(groups) == ["Group A", "Group B", "Group C", "Group D"]
        assert [len(g) for g in groups.values()] == [3, 2, 2, 2]

    @pytest.mark.parametrize("num_teams", range(8, 17))
    def test_no_empty_group(self, teams, num_teams):
        groups = split_into_groups(teams(num_teams))
        assert all(len(g) >= 2 for g in groups.values())
        assert sum(len(g) for g in groups.values()) == num_teams

    def test_two_group_structure(self, teams):
        """Test six teams give two groups of three, two semi-finals and a final."""
        fixtures = generate_group_plus_knockout_fixtures(teams(6))
        group_fixtures = [f for f in fixtures if f.group_name]
        knockout = [f for f in fixtures if not f.group_name]

        assert len(group_fixtures) == 6
        assert Counter(f.group_name for f in group_fixtures) == {"Group A": 3, "Group B": 3}
        assert all(f.round_number == 1 for f in group_fixtures)
        assert [f.round_name for f in knockout] == ["Semi Final", "Semi Final", "Final"]
        assert [f.round_number for f in knockout] == [2, 2, 3]
        assert [f.match_number for f in fixtures] == list(range(1, 10))

    def test_four_group_structure(self, teams):
        """Test eight teams give four groups and a linked quarter-final bracket."""
        fixtures = generate_group_plus_knockout_fixtures(teams(8))
        knockout = [f for f in fixtures if not f.group_name]

        assert [f.round_name for f in knockout] == ["Quarter Final"] * 4 + ["Semi Final"] * 2 + ["Final"]
        by_id = {f.id: f for f in knockout}
        for fixture in knockout[:-1]:
            assert fixture.next_match_id in by_id
        assert knockout[-1].next_match_id is None

    def test_group_pairs_play_once(self, teams):
        team_list = teams(10)
        fixtures = generate_group_plus_knockout_fixtures(team_list)
        for name, members in split_into_groups(team_list).items():
            played = {frozenset((f.team_a_id, f.team_b_id)) for f in fixtures if f.group_name == name}
            assert played == {frozenset((a.id, b.id)) for a, b in combinations(members, 2)}


class TestTournamentFormat:
    """Tests for format dispatch."""

    @pytest.mark.parametrize("format_name,expected", [
        (LEAGUE, 15),
        (KNOCKOUT, 7),
        (LEAGUE_KNOCKOUT, 18),
        (GROUP_KNOCKOUT, 9),
    ])
    def test_dispatch(self, teams, format_name, expected):
        assert len(generate_fixtures(teams(6), format_name)) == expected

    def test_unknown_format(self, teams):
        with pytest.raises(UnknownFormatError):
            TournamentFormat(teams(4), 'swiss')

    def test_shuffle_is_reproducible_with_rng(self, teams):
        team_list = teams(8)
        first = generate_fixtures(team_list, KNOCKOUT, shuffle=True, rng=random.Random(7))
        second = generate_fixtures(team_list, KNOCKOUT, shuffle=True, rng=random.Random(7))
        assert [(f.team_a_id, f.team_b_id) for f in first] == [(f.team_a_id, f.team_b_id) for f in second]

    def test_unshuffled_keeps_order(self, teams):
        fixtures = generate_fixtures(teams(4), KNOCKOUT)
        assert (fixtures[0].team_a_id, fixtures[0].team_b_id) == ('T1', 'T2')

    def test_groups_only_for_group_format(self, teams):
        assert TournamentFormat(teams(6), LEAGUE).groups() == {}
        assert list(TournamentFormat(teams(6), GROUP_KNOCKOUT).groups()) == ["Group A", "Group B"]


class TestShuffleTeams:
    """Tests for random team ordering."""

    def test_shuffle_returns_new_list(self, teams):
        team_list = teams(10)
        original = list(team_list)
        shuffled = shuffle_teams(team_list, random.Random(1))
        assert team_list == original
        assert sorted(t.id for t in shuffled) == sorted(t.id for t in original)

    def test_shuffle_with_seed_is_deterministic(self, teams):
        team_list = teams(10)
        assert shuffle_teams(team_list, random.Random(3)) == shuffle_teams(team_list, random.Random(3))
