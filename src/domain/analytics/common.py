"""Accumulators and ranking helpers shared by hero and player analytics."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Mapping, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from domain.common import COMBAT_STAT_FIELDS, Participation

TOP_N = 3

K = TypeVar("K", bound=Hashable)


def win_rate(wins: int, games: int) -> float:
    """Win percentage with a guarded denominator."""
    if games <= 0:
        return 0.0
    return wins / games * 100.0


@dataclass
class Tally:
    wins: int = 0
    games: int = 0

    def record(self, won: bool) -> None:
        self.games += 1
        if won:
            self.wins += 1

    @property
    def losses(self) -> int:
        return self.games - self.wins

    @property
    def win_rate(self) -> float:
        return win_rate(self.wins, self.games)


@dataclass(frozen=True)
class RankedRelation(Generic[K]):
    """One entry of a top-N list: the related entity and the shared record."""

    key: K
    name: str
    win_rate: float
    games_played: int


def top_relations(
    tallies: Mapping[K, Tally],
    *,
    min_games: int,
    best_first: bool,
    name_of: Callable[[K], str],
    limit: int = TOP_N,
) -> tuple[RankedRelation[K], ...]:
    """Rank relations by win rate, dropping those below ``min_games``.

    Filtered relations never take a slot. Ties prefer the larger sample, then
    the name for a stable order.
    """
    eligible = [(key, tally) for key, tally in tallies.items() if tally.games >= min_games]
    direction = -1.0 if best_first else 1.0
    eligible.sort(key=lambda item: (direction * item[1].win_rate, -item[1].games, name_of(item[0])))
    return tuple(
        RankedRelation(
            key=key,
            name=name_of(key),
            win_rate=tally.win_rate,
            games_played=tally.games,
        )
        for key, tally in eligible[:limit]
    )


class CombatAccumulator:
    """Averages combat counters over tracked values only.

    An untracked (``None``) counter adds nothing to the sum or the denominator,
    so a stat that was not recorded for a match cannot drag averages to zero.
    """

    def __init__(self) -> None:
        self._sums = {stat: 0 for stat in COMBAT_STAT_FIELDS}
        self._counts = {stat: 0 for stat in COMBAT_STAT_FIELDS}

    def add(self, participation: Participation) -> None:
        for stat in COMBAT_STAT_FIELDS:
            value = getattr(participation, stat)
            if value is None:
                continue
            self._sums[stat] += value
            self._counts[stat] += 1

    def averages(self) -> dict[str, float | None]:
        return {
            stat: (self._sums[stat] / self._counts[stat]) if self._counts[stat] else None
            for stat in COMBAT_STAT_FIELDS
        }

    def tracked_games(self) -> dict[str, int]:
        return dict(self._counts)


def most_common(counts: Mapping[K, int], *, name_of: Callable[[K], str], limit: int = TOP_N) -> list[K]:
    ordered: Sequence[K] = sorted(counts, key=lambda key: (-counts[key], name_of(key)))
    return list(ordered[:limit])


__all__ = [
    "CombatAccumulator",
    "RankedRelation",
    "TOP_N",
    "Tally",
    "most_common",
    "top_relations",
    "win_rate",
]
