"""Tests for the cumulative hero win-rate series."""

from __future__ import annotations

from datetime import datetime

import pytest

from builders import LogBuilder
from domain.analytics import hero_win_rate_over_time
from domain.common import Side


def _series_by_name(rows):
    return {row.hero_name: row for row in rows}


def test_cumulative_counts_never_decrease() -> None:
    log = LogBuilder()
    for day, winner in enumerate([Side.TITANS, Side.ATLANTEANS, Side.TITANS, Side.TITANS], start=1):
        log.add([("a", "Brogan")], [("b", "Arien")], winner=winner, date=datetime(2026, 5, day, 20))

    brogan = _series_by_name(hero_win_rate_over_time(log.matches, log.participations))["Brogan"]

    games = [point.games_played_total for point in brogan.points]
    wins = [point.wins_total for point in brogan.points]
    assert games == sorted(games)
    assert wins == sorted(wins)
    assert games[-1] == brogan.total_games == 4
    assert brogan.points[-1].win_rate == pytest.approx(75.0)


def test_same_day_games_collapse_into_one_point() -> None:
    log = LogBuilder()
    log.add([("a", "Brogan")], [("b", "Arien")], date=datetime(2026, 5, 1, 18))
    log.add([("a", "Brogan")], [("b", "Arien")], date=datetime(2026, 5, 1, 21))
    log.add([("a", "Brogan")], [("b", "Arien")], date=datetime(2026, 5, 2, 18))

    brogan = _series_by_name(hero_win_rate_over_time(log.matches, log.participations))["Brogan"]

    assert [point.day.day for point in brogan.points] == [1, 2]
    assert [point.games_played_total for point in brogan.points] == [2, 3]


def test_points_before_min_games_are_hidden() -> None:
    log = LogBuilder()
    for day in range(1, 4):
        log.add([("a", "Brogan")], [("b", "Arien")], date=datetime(2026, 5, day, 20))
    log.add([("a", "Brogan")], [("b", "Sabina")], date=datetime(2026, 5, 4, 20))

    rows = _series_by_name(hero_win_rate_over_time(log.matches, log.participations, min_games=3))

    assert [point.games_played_total for point in rows["Brogan"].points] == [3, 4]
    assert "Sabina" not in rows
    assert rows["Arien"].points[0].games_played_total == 3


def test_hero_filter_and_unsorted_input() -> None:
    log = LogBuilder()
    log.add([("a", "Brogan")], [("b", "Arien")], winner=Side.ATLANTEANS, date=datetime(2026, 5, 3))
    log.add([("a", "Brogan")], [("b", "Arien")], winner=Side.TITANS, date=datetime(2026, 5, 1))

    rows = hero_win_rate_over_time(list(reversed(log.matches)), log.participations, hero_ids=[1])

    assert [row.hero_name for row in rows] == ["Brogan"]
    assert [point.win_rate for point in rows[0].points] == [pytest.approx(100.0), pytest.approx(50.0)]


def test_points_count_games_of_their_day_and_series_spans_plotted_days() -> None:
    log = LogBuilder()
    log.add([("a", "Brogan")], [("b", "Arien")], date=datetime(2026, 5, 1, 18))
    log.add([("a", "Brogan")], [("b", "Arien")], date=datetime(2026, 5, 1, 21))
    log.add([("a", "Brogan")], [("b", "Arien")], date=datetime(2026, 5, 4, 18))

    brogan = _series_by_name(hero_win_rate_over_time(log.matches, log.participations))["Brogan"]

    assert [point.games_played_on_day for point in brogan.points] == [2, 1]
    assert brogan.first_day == datetime(2026, 5, 1).date()
    assert brogan.last_day == datetime(2026, 5, 4).date()


def test_empty_hero_filter_selects_every_hero() -> None:
    log = LogBuilder()
    log.add([("a", "Brogan")], [("b", "Arien")])

    everything = hero_win_rate_over_time(log.matches, log.participations)
    empty_filter = hero_win_rate_over_time(log.matches, log.participations, hero_ids=[])

    assert [row.hero_name for row in empty_filter] == [row.hero_name for row in everything]
    assert len(empty_filter) == 2
