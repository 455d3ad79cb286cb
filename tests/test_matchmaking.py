from __future__ import annotations

import pytest

from domain.matchmaking import balance_teams


def test_greedy_split_alternates_by_running_total() -> None:
    values = {"a": 1500.0, "b": 1400.0, "c": 1300.0, "d": 1200.0}

    teams = balance_teams(["a", "b", "c", "d"], values)

    assert teams.team_a == ("a", "d")
    assert teams.team_b == ("b", "c")
    assert teams.difference == pytest.approx(0.0)


def test_roster_sizes_differ_by_at_most_one() -> None:
    values = {"a": 3000.0, "b": 100.0, "c": 100.0, "d": 100.0, "e": 100.0, "f": 100.0}

    teams = balance_teams(list(values), values)

    assert len(teams.team_a) == len(teams.team_b) == 3
    # An uncapped greedy split would leave "a" alone against five players.
    assert teams.team_a == ("a", "e", "f")
    assert teams.total_a + teams.total_b == pytest.approx(3500.0)


def test_duplicates_are_ignored_and_ties_prefer_team_a() -> None:
    values = {"a": 10.0, "b": 10.0, "c": 10.0, "d": 10.0, "e": 10.0}

    teams = balance_teams(["a", "b", "c", "a", "d", "e"], values)

    assert teams.team_a == ("a", "c", "e")
    assert teams.team_b == ("b", "d")


def test_too_few_players_or_missing_values_raise() -> None:
    with pytest.raises(ValueError, match="at least 4 players"):
        balance_teams(["a", "b", "c"], {"a": 1.0, "b": 1.0, "c": 1.0})
    with pytest.raises(ValueError, match="no balancing value"):
        balance_teams(["a", "b", "c", "d"], {"a": 1.0, "b": 1.0, "c": 1.0})
