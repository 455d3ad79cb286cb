"""Favourite heroes/roles and combat averages for one player."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from domain.analytics.common import CombatAccumulator, Tally, most_common
from domain.common import Match, Participation


@dataclass(frozen=True)
class FavouriteHero:
    hero_id: int
    hero_name: str
    count: int


@dataclass(frozen=True)
class FavouriteRole:
    role: str
    count: int


@dataclass(frozen=True)
class PlayerStats:
    player_id: str
    games_played: int
    wins: int
    losses: int
    win_rate: float
    favourite_heroes: tuple[FavouriteHero, ...]
    favourite_roles: tuple[FavouriteRole, ...]
    combat_averages: dict[str, float | None] = field(default_factory=dict)
    tracked_games: dict[str, int] = field(default_factory=dict)


def player_stats(
    player_id: str,
    matches: Sequence[Match],
    participations: Sequence[Participation],
) -> PlayerStats:
    matches_by_id = {match.id: match for match in matches}
    record = Tally()
    combat = CombatAccumulator()
    hero_counts: dict[int, int] = {}
    hero_names: dict[int, str] = {}
    role_counts: dict[str, int] = {}

    for entry in participations:
        if entry.player_id != player_id:
            continue
        match = matches_by_id.get(entry.match_id)
        if match is None:
            continue
        record.record(entry.won(match))
        combat.add(entry)
        hero_counts[entry.hero_id] = hero_counts.get(entry.hero_id, 0) + 1
        hero_names.setdefault(entry.hero_id, entry.hero_name)
        for role in entry.hero_roles:
            role_counts[role] = role_counts.get(role, 0) + 1

    favourite_heroes = tuple(
        FavouriteHero(hero_id=hero_id, hero_name=hero_names[hero_id], count=hero_counts[hero_id])
        for hero_id in most_common(hero_counts, name_of=lambda hero_id: hero_names[hero_id])
    )
    favourite_roles = tuple(
        FavouriteRole(role=role, count=role_counts[role])
        for role in most_common(role_counts, name_of=str)
    )
    return PlayerStats(
        player_id=player_id,
        games_played=record.games,
        wins=record.wins,
        losses=record.losses,
        win_rate=record.win_rate,
        favourite_heroes=favourite_heroes,
        favourite_roles=favourite_roles,
        combat_averages=combat.averages(),
        tracked_games=combat.tracked_games(),
    )


__all__ = ["FavouriteHero", "FavouriteRole", "PlayerStats", "player_stats"]
