"""Player relationship network: records as teammates and as opponents."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from domain.analytics.common import RankedRelation, Tally, top_relations, win_rate
from domain.common import DateRange, Match, Participation, filter_matches, group_by_match


@dataclass(frozen=True)
class PlayerRelationship:
    """Shared record of ``player_id`` with ``related_player_id``, from ``player_id``'s side."""

    player_id: str
    related_player_id: str
    teammate_wins: int
    teammate_losses: int
    opponent_wins: int
    opponent_losses: int

    @property
    def teammate_games(self) -> int:
        return self.teammate_wins + self.teammate_losses

    @property
    def opponent_games(self) -> int:
        return self.opponent_wins + self.opponent_losses

    @property
    def total_games(self) -> int:
        return self.teammate_games + self.opponent_games

    @property
    def teammate_win_rate(self) -> float:
        return win_rate(self.teammate_wins, self.teammate_games)

    @property
    def opponent_win_rate(self) -> float:
        return win_rate(self.opponent_wins, self.opponent_games)


@dataclass(frozen=True)
class PlayerSynergy:
    player_id: str
    best_teammates: tuple[RankedRelation[str], ...]
    best_against: tuple[RankedRelation[str], ...]
    worst_against: tuple[RankedRelation[str], ...]


@dataclass
class _PairAccumulator:
    as_teammates: Tally = field(default_factory=Tally)
    as_opponents: Tally = field(default_factory=Tally)


def _accumulate_pairs(
    matches: Sequence[Match],
    participations: Sequence[Participation],
    selected: set[str],
    date_range: DateRange | None,
) -> dict[tuple[str, str], _PairAccumulator]:
    participations_by_match = group_by_match(participations)
    pairs: dict[tuple[str, str], _PairAccumulator] = {}

    for match in filter_matches(matches, date_range):
        roster = [
            entry
            for entry in participations_by_match.get(match.id, [])
            if entry.player_id in selected
        ]
        for entry in roster:
            won = entry.won(match)
            for other in roster:
                if other.player_id == entry.player_id:
                    continue
                pair = pairs.setdefault((entry.player_id, other.player_id), _PairAccumulator())
                if other.side == entry.side:
                    pair.as_teammates.record(won)
                else:
                    pair.as_opponents.record(won)
    return pairs


def player_relationships(
    matches: Sequence[Match],
    participations: Sequence[Participation],
    player_ids: Iterable[str],
    *,
    min_games: int = 1,
    date_range: DateRange | None = None,
) -> list[PlayerRelationship]:
    """Directed relationships among ``player_ids`` with at least ``min_games`` together."""
    if min_games < 1:
        raise ValueError("min_games must be >= 1")

    selected = set(player_ids)
    pairs = _accumulate_pairs(matches, participations, selected, date_range)

    relationships = [
        PlayerRelationship(
            player_id=player_id,
            related_player_id=related_id,
            teammate_wins=pair.as_teammates.wins,
            teammate_losses=pair.as_teammates.losses,
            opponent_wins=pair.as_opponents.wins,
            opponent_losses=pair.as_opponents.losses,
        )
        for (player_id, related_id), pair in pairs.items()
    ]
    relationships = [relationship for relationship in relationships if relationship.total_games >= min_games]
    relationships.sort(key=lambda relationship: (relationship.player_id, relationship.related_player_id))
    return relationships


def player_synergies(
    matches: Sequence[Match],
    participations: Sequence[Participation],
    player_ids: Iterable[str],
    *,
    min_games: int = 1,
    date_range: DateRange | None = None,
) -> list[PlayerSynergy]:
    """Top teammates and best/worst opponents for each selected player."""
    if min_games < 1:
        raise ValueError("min_games must be >= 1")

    selected = sorted(set(player_ids))
    pairs = _accumulate_pairs(matches, participations, set(selected), date_range)

    teammates: dict[str, dict[str, Tally]] = {player_id: {} for player_id in selected}
    opponents: dict[str, dict[str, Tally]] = {player_id: {} for player_id in selected}
    for (player_id, related_id), pair in pairs.items():
        if pair.as_teammates.games:
            teammates[player_id][related_id] = pair.as_teammates
        if pair.as_opponents.games:
            opponents[player_id][related_id] = pair.as_opponents

    return [
        PlayerSynergy(
            player_id=player_id,
            best_teammates=top_relations(
                teammates[player_id], min_games=min_games, best_first=True, name_of=str
            ),
            best_against=top_relations(
                opponents[player_id], min_games=min_games, best_first=True, name_of=str
            ),
            worst_against=top_relations(
                opponents[player_id], min_games=min_games, best_first=False, name_of=str
            ),
        )
        for player_id in selected
    ]


__all__ = ["PlayerRelationship", "PlayerSynergy", "player_relationships", "player_synergies"]
