"""Balanced team generation for a selected group of players."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

MIN_PLAYERS = 4


class BalanceMode(str, Enum):
    RATING = "rating"
    EXPERIENCE = "experience"


@dataclass(frozen=True)
class BalancedTeams:
    team_a: tuple[str, ...]
    team_b: tuple[str, ...]
    total_a: float
    total_b: float

    @property
    def difference(self) -> float:
        return abs(self.total_a - self.total_b)


def balance_teams(player_ids: Sequence[str], values: Mapping[str, float]) -> BalancedTeams:
    """Greedy split: strongest first, each to the side with the lower running total.

    Ties go to team A. Unlike a plain greedy split, a side stops taking
    players once it holds half the group (rounded up), so one strong player
    cannot end up alone against everyone else and roster sizes never differ
    by more than one.
    """
    selected = list(dict.fromkeys(player_ids))
    if len(selected) < MIN_PLAYERS:
        raise ValueError(f"balanced teams need at least {MIN_PLAYERS} players, got {len(selected)}")
    missing = [player_id for player_id in selected if player_id not in values]
    if missing:
        raise ValueError(f"no balancing value for players: {missing}")

    ordered = sorted(selected, key=lambda player_id: (-values[player_id], player_id))
    capacity = (len(ordered) + 1) // 2
    team_a: list[str] = []
    team_b: list[str] = []
    total_a = 0.0
    total_b = 0.0

    for player_id in ordered:
        value = float(values[player_id])
        to_a = total_a <= total_b
        if to_a and len(team_a) >= capacity:
            to_a = False
        elif not to_a and len(team_b) >= capacity:
            to_a = True
        if to_a:
            team_a.append(player_id)
            total_a += value
        else:
            team_b.append(player_id)
            total_b += value

    return BalancedTeams(
        team_a=tuple(team_a),
        team_b=tuple(team_b),
        total_a=total_a,
        total_b=total_b,
    )


__all__ = ["BalanceMode", "BalancedTeams", "MIN_PLAYERS", "balance_teams"]
