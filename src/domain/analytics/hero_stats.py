"""Per-hero win rates with teammate synergy and opponent counters."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from domain.analytics.common import CombatAccumulator, RankedRelation, Tally, top_relations
from domain.common import DateRange, Match, Participation, filter_matches, group_by_match
from domain.heroes import EMPTY_CATALOG, HeroCatalog


@dataclass(frozen=True)
class HeroStats:
    hero_id: int
    hero_name: str
    roles: tuple[str, ...]
    complexity: int
    expansion: str
    total_games: int
    wins: int
    losses: int
    win_rate: float
    best_teammates: tuple[RankedRelation[int], ...]
    best_against: tuple[RankedRelation[int], ...]
    worst_against: tuple[RankedRelation[int], ...]
    combat_averages: dict[str, float | None] = field(default_factory=dict)


@dataclass
class _HeroAccumulator:
    hero_id: int
    hero_name: str
    roles: tuple[str, ...]
    record: Tally = field(default_factory=Tally)
    teammates: dict[int, Tally] = field(default_factory=dict)
    opponents: dict[int, Tally] = field(default_factory=dict)
    combat: CombatAccumulator = field(default_factory=CombatAccumulator)


def hero_stats(
    matches: Sequence[Match],
    participations: Sequence[Participation],
    *,
    min_relationship_games: int = 1,
    date_range: DateRange | None = None,
    catalog: HeroCatalog = EMPTY_CATALOG,
) -> list[HeroStats]:
    """Aggregate hero records, sorted by games played (most first)."""
    if min_relationship_games < 1:
        raise ValueError("min_relationship_games must be >= 1")

    participations_by_match = group_by_match(participations)
    heroes: dict[int, _HeroAccumulator] = {}

    for match in filter_matches(matches, date_range):
        roster = participations_by_match.get(match.id, [])
        for entry in roster:
            accumulator = heroes.get(entry.hero_id)
            if accumulator is None:
                accumulator = _HeroAccumulator(
                    hero_id=entry.hero_id,
                    hero_name=entry.hero_name,
                    roles=entry.hero_roles,
                )
                heroes[entry.hero_id] = accumulator

            won = entry.won(match)
            accumulator.record.record(won)
            accumulator.combat.add(entry)

            for other in roster:
                if other is entry or other.hero_id == entry.hero_id:
                    continue
                relations = accumulator.teammates if other.side == entry.side else accumulator.opponents
                relations.setdefault(other.hero_id, Tally()).record(won)

    def name_of(hero_id: int) -> str:
        accumulator = heroes.get(hero_id)
        return accumulator.hero_name if accumulator is not None else str(hero_id)

    results: list[HeroStats] = []
    for accumulator in heroes.values():
        info = catalog.by_name(accumulator.hero_name)
        results.append(
            HeroStats(
                hero_id=accumulator.hero_id,
                hero_name=accumulator.hero_name,
                roles=info.roles if info is not None else accumulator.roles,
                complexity=info.complexity if info is not None else 1,
                expansion=info.expansion if info is not None else "Unknown",
                total_games=accumulator.record.games,
                wins=accumulator.record.wins,
                losses=accumulator.record.losses,
                win_rate=accumulator.record.win_rate,
                best_teammates=top_relations(
                    accumulator.teammates,
                    min_games=min_relationship_games,
                    best_first=True,
                    name_of=name_of,
                ),
                best_against=top_relations(
                    accumulator.opponents,
                    min_games=min_relationship_games,
                    best_first=True,
                    name_of=name_of,
                ),
                worst_against=top_relations(
                    accumulator.opponents,
                    min_games=min_relationship_games,
                    best_first=False,
                    name_of=name_of,
                ),
                combat_averages=accumulator.combat.averages(),
            )
        )

    results.sort(key=lambda stats: (-stats.total_games, stats.hero_name))
    return results


__all__ = ["HeroStats", "hero_stats"]
