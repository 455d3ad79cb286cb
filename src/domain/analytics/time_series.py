"""Cumulative hero win rate by calendar day."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date

from domain.analytics.common import Tally, win_rate
from domain.common import DateRange, Match, Participation, chronological, filter_matches, group_by_match


@dataclass(frozen=True)
class TimeSeriesPoint:
    """Cumulative record at the end of ``day``."""

    day: date
    games_played_on_day: int
    games_played_total: int
    wins_total: int
    win_rate: float


@dataclass(frozen=True)
class HeroTimeSeries:
    hero_id: int
    hero_name: str
    total_games: int
    wins: int
    win_rate: float
    points: tuple[TimeSeriesPoint, ...]

    @property
    def first_day(self) -> date | None:
        """First plotted day, ``None`` when no point passed the sample filter."""
        return self.points[0].day if self.points else None

    @property
    def last_day(self) -> date | None:
        return self.points[-1].day if self.points else None


@dataclass
class _SeriesAccumulator:
    hero_name: str
    running: Tally = field(default_factory=Tally)
    points: list[TimeSeriesPoint] = field(default_factory=list)

    def close_day(self, day: date) -> None:
        same_day = bool(self.points) and self.points[-1].day == day
        point = TimeSeriesPoint(
            day=day,
            games_played_on_day=self.points[-1].games_played_on_day + 1 if same_day else 1,
            games_played_total=self.running.games,
            wins_total=self.running.wins,
            win_rate=self.running.win_rate,
        )
        if same_day:
            self.points[-1] = point
        else:
            self.points.append(point)


def hero_win_rate_over_time(
    matches: Sequence[Match],
    participations: Sequence[Participation],
    *,
    hero_ids: Iterable[int] | None = None,
    min_games: int = 1,
    date_range: DateRange | None = None,
) -> list[HeroTimeSeries]:
    """Build one cumulative series per hero.

    Points before the hero's ``min_games``-th game are dropped so early
    small-sample swings stay hidden; heroes that never reach ``min_games`` are
    omitted. An empty ``hero_ids`` selects every hero, like ``None``. Series
    are ordered by games played, most first.
    """
    if min_games < 1:
        raise ValueError("min_games must be >= 1")

    wanted = set(hero_ids) if hero_ids is not None else set()
    participations_by_match = group_by_match(participations)
    series: dict[int, _SeriesAccumulator] = {}

    for match in chronological(filter_matches(matches, date_range)):
        day = match.date.date()
        for entry in participations_by_match.get(match.id, []):
            if wanted and entry.hero_id not in wanted:
                continue
            accumulator = series.get(entry.hero_id)
            if accumulator is None:
                accumulator = _SeriesAccumulator(hero_name=entry.hero_name)
                series[entry.hero_id] = accumulator
            accumulator.running.record(entry.won(match))
            accumulator.close_day(day)

    results = [
        HeroTimeSeries(
            hero_id=hero_id,
            hero_name=accumulator.hero_name,
            total_games=accumulator.running.games,
            wins=accumulator.running.wins,
            win_rate=win_rate(accumulator.running.wins, accumulator.running.games),
            points=tuple(point for point in accumulator.points if point.games_played_total >= min_games),
        )
        for hero_id, accumulator in series.items()
        if accumulator.running.games >= min_games
    ]
    results.sort(key=lambda item: (-item.total_games, item.hero_name))
    return results


__all__ = ["HeroTimeSeries", "TimeSeriesPoint", "hero_win_rate_over_time"]
