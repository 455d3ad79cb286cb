"""Replay the full match log into current ratings and per-match snapshots."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from domain.common import Match, Participation, Side, chronological, group_by_match
from domain.ratings.calculator import (
    Belief,
    RatingParameters,
    default_belief,
    display_rating,
    ordinal,
    rate_teams,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayerRating:
    """Replay output for one player."""

    player_id: str
    mu: float
    sigma: float
    ordinal: float
    display_rating: int
    total_games: int
    wins: int
    losses: int
    last_played: datetime | None

    @property
    def belief(self) -> Belief:
        return Belief(mu=self.mu, sigma=self.sigma)


@dataclass(frozen=True)
class RatingSnapshot:
    """Belief state of every known player right after one match.

    Snapshot 0 is taken before any match: default beliefs, no participants.
    """

    index: int
    match_id: int | None
    date: datetime | None
    beliefs: dict[str, Belief]
    participants: tuple[str, ...]
    ordinal_z: float = 3.0

    def display_ratings(self) -> dict[str, int]:
        return {
            player_id: display_rating(belief, self.ordinal_z)
            for player_id, belief in self.beliefs.items()
        }


@dataclass(frozen=True)
class ReplayResult:
    ratings: dict[str, PlayerRating]
    snapshots: list[RatingSnapshot]
    processed_matches: int
    skipped_match_ids: tuple[int, ...] = field(default_factory=tuple)

    @property
    def beliefs(self) -> dict[str, Belief]:
        return {player_id: rating.belief for player_id, rating in self.ratings.items()}

    def display_ratings(self) -> dict[str, int]:
        return {player_id: rating.display_rating for player_id, rating in self.ratings.items()}


@dataclass
class _Counters:
    total_games: int = 0
    wins: int = 0
    losses: int = 0
    last_played: datetime | None = None


def replay_ratings(
    matches: Sequence[Match],
    participations: Sequence[Participation],
    player_ids: Iterable[str],
    params: RatingParameters,
) -> ReplayResult:
    """Recompute every belief from defaults by replaying matches in date order.

    The same log always yields identical output; reordering matches changes
    every belief computed after the first moved match.
    """
    initial = default_belief(params)
    beliefs: dict[str, Belief] = {}
    counters: dict[str, _Counters] = {}
    for player_id in player_ids:
        beliefs[player_id] = initial
        counters[player_id] = _Counters()

    snapshots = [
        RatingSnapshot(
            index=0,
            match_id=None,
            date=None,
            beliefs=dict(beliefs),
            participants=(),
            ordinal_z=params.ordinal_z,
        )
    ]
    participations_by_match = group_by_match(participations)
    skipped: list[int] = []
    processed = 0

    for match in chronological(matches):
        roster = participations_by_match.get(match.id, [])
        titans = [entry.player_id for entry in roster if entry.side == Side.TITANS]
        atlanteans = [entry.player_id for entry in roster if entry.side == Side.ATLANTEANS]

        if not titans or not atlanteans:
            logger.warning(
                "skipping match_id=%s due to empty team (titans=%d atlanteans=%d)",
                match.id,
                len(titans),
                len(atlanteans),
            )
            skipped.append(match.id)
            continue

        for player_id in (*titans, *atlanteans):
            if player_id not in beliefs:
                beliefs[player_id] = initial
                counters[player_id] = _Counters()

        titans_post, atlanteans_post = rate_teams(
            [beliefs[player_id] for player_id in titans],
            [beliefs[player_id] for player_id in atlanteans],
            match.winning_side,
            params,
            side_a=Side.TITANS,
        )
        for player_id, belief in zip(titans, titans_post):
            beliefs[player_id] = belief
        for player_id, belief in zip(atlanteans, atlanteans_post):
            beliefs[player_id] = belief

        for entry in roster:
            player_counters = counters[entry.player_id]
            player_counters.total_games += 1
            if entry.won(match):
                player_counters.wins += 1
            else:
                player_counters.losses += 1
            player_counters.last_played = match.date

        processed += 1
        snapshots.append(
            RatingSnapshot(
                index=processed,
                match_id=match.id,
                date=match.date,
                beliefs=dict(beliefs),
                participants=tuple(entry.player_id for entry in roster),
                ordinal_z=params.ordinal_z,
            )
        )

    ratings = {
        player_id: PlayerRating(
            player_id=player_id,
            mu=belief.mu,
            sigma=belief.sigma,
            ordinal=ordinal(belief, params.ordinal_z),
            display_rating=display_rating(belief, params.ordinal_z),
            total_games=counters[player_id].total_games,
            wins=counters[player_id].wins,
            losses=counters[player_id].losses,
            last_played=counters[player_id].last_played,
        )
        for player_id, belief in beliefs.items()
    }
    return ReplayResult(
        ratings=ratings,
        snapshots=snapshots,
        processed_matches=processed,
        skipped_match_ids=tuple(skipped),
    )


__all__ = ["PlayerRating", "RatingSnapshot", "ReplayResult", "replay_ratings"]
