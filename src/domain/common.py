"""Shared domain types for the match log."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class Side(str, Enum):
    """The two fixed sides of a Guards of Atlantis match."""

    TITANS = "titans"
    ATLANTEANS = "atlanteans"

    @property
    def opponent(self) -> Side:
        return Side.ATLANTEANS if self is Side.TITANS else Side.TITANS


class GameLength(str, Enum):
    QUICK = "quick"
    LONG = "long"


COMBAT_STAT_FIELDS: tuple[str, ...] = (
    "kills",
    "deaths",
    "assists",
    "gold_earned",
    "minion_kills",
    "level",
)


@dataclass(frozen=True)
class Player:
    """A player row as read from the match log store."""

    id: str
    name: str
    total_games: int = 0
    wins: int = 0
    losses: int = 0
    mu: float | None = None
    sigma: float | None = None
    ordinal: float | None = None
    display_rating: int | None = None
    level: int | None = None
    last_played: datetime | None = None
    date_created: datetime | None = None

    @property
    def has_rating(self) -> bool:
        return self.mu is not None and self.sigma is not None


@dataclass(frozen=True)
class Match:
    """Canonical match payload used by the replay engine and analytics."""

    id: int
    date: datetime
    winning_side: Side
    game_length: GameLength = GameLength.LONG
    double_lanes: bool = False
    titan_players: int = 0
    atlantean_players: int = 0


@dataclass(frozen=True)
class Participation:
    """One player's appearance in a match.

    ``None`` combat counters are untracked; ``0`` is a tracked zero.
    """

    id: int
    match_id: int
    player_id: str
    side: Side
    hero_id: int
    hero_name: str
    hero_roles: tuple[str, ...] = ()
    kills: int | None = None
    deaths: int | None = None
    assists: int | None = None
    gold_earned: int | None = None
    minion_kills: int | None = None
    level: int | None = None

    def won(self, match: Match) -> bool:
        return self.side == match.winning_side


@dataclass(frozen=True)
class ParticipantSubmission:
    """Per-player input of a new match submission."""

    player_id: str
    side: Side
    hero_id: int
    hero_name: str
    hero_roles: tuple[str, ...] = ()
    kills: int | None = None
    deaths: int | None = None
    assists: int | None = None
    gold_earned: int | None = None
    minion_kills: int | None = None
    level: int | None = None


@dataclass(frozen=True)
class MatchSubmission:
    """A complete match as entered after a game."""

    date: datetime
    winning_side: Side
    game_length: GameLength
    double_lanes: bool
    participants: tuple[ParticipantSubmission, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DateRange:
    """Inclusive date window; an open bound is ``None``."""

    start: datetime | None = None
    end: datetime | None = None

    def __post_init__(self) -> None:
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError(f"date range start {self.start} is after end {self.end}")

    def contains(self, moment: datetime) -> bool:
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False
        return True


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, matching the stored column type."""
    return datetime.now(UTC).replace(tzinfo=None)


def filter_matches(matches: Sequence[Match], date_range: DateRange | None) -> list[Match]:
    """Return matches inside ``date_range`` (all matches when no range is given)."""
    if date_range is None:
        return list(matches)
    return [match for match in matches if date_range.contains(match.date)]


def chronological(matches: Sequence[Match]) -> list[Match]:
    """Sort matches by date, breaking ties by insertion order (id)."""
    return sorted(matches, key=lambda match: (match.date, match.id))


def group_by_match(participations: Sequence[Participation]) -> dict[int, list[Participation]]:
    grouped: dict[int, list[Participation]] = {}
    for participation in participations:
        grouped.setdefault(participation.match_id, []).append(participation)
    return grouped


__all__ = [
    "COMBAT_STAT_FIELDS",
    "DateRange",
    "GameLength",
    "Match",
    "MatchSubmission",
    "ParticipantSubmission",
    "Participation",
    "Player",
    "Side",
    "chronological",
    "filter_matches",
    "group_by_match",
    "utc_now",
]
