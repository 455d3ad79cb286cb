"""Consistency checks for a match and its roster.

Errors block a commit; warnings are surfaced to the caller but never block.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

from domain.common import GameLength, Match, MatchSubmission, Participation, Side, utc_now

MIN_LEVEL = 1
MAX_LEVEL = 10
KILL_SOFT_CEILING: dict[GameLength, int] = {GameLength.QUICK: 12, GameLength.LONG: 20}
HIGH_DEATHS_THRESHOLD = 12
MAX_ROSTER_IMBALANCE = 1
STALE_MATCH_AGE = timedelta(days=365)

_NON_NEGATIVE_STATS = ("kills", "deaths", "assists", "gold_earned", "minion_kills")


class _RosterEntry(Protocol):
    player_id: str
    side: Side
    hero_id: int
    hero_name: str
    kills: int | None
    deaths: int | None
    assists: int | None
    gold_earned: int | None
    minion_kills: int | None
    level: int | None


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    message: str
    player_id: str | None = None
    participation_id: int | None = None


@dataclass(frozen=True)
class ValidationResult:
    errors: tuple[ValidationIssue, ...] = field(default_factory=tuple)
    warnings: tuple[ValidationIssue, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _entry_issue(entry: _RosterEntry, field_name: str, message: str) -> ValidationIssue:
    return ValidationIssue(
        field=field_name,
        message=message,
        player_id=entry.player_id,
        participation_id=getattr(entry, "id", None),
    )


def _naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(UTC).replace(tzinfo=None)


def validate_roster(
    date: datetime,
    game_length: GameLength,
    entries: Sequence[_RosterEntry],
    *,
    now: datetime | None = None,
) -> ValidationResult:
    """Validate match-level fields plus every roster entry.

    ``entries`` may be stored participations (carrying an ``id``) or new
    submissions (no id yet).
    """
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    titans = [entry for entry in entries if entry.side == Side.TITANS]
    atlanteans = [entry for entry in entries if entry.side == Side.ATLANTEANS]
    for side, roster in ((Side.TITANS, titans), (Side.ATLANTEANS, atlanteans)):
        if not roster:
            errors.append(ValidationIssue(field="side", message=f"{side.value} side has no players"))
    if abs(len(titans) - len(atlanteans)) > MAX_ROSTER_IMBALANCE:
        warnings.append(
            ValidationIssue(
                field="side",
                message=(
                    f"uneven rosters: {len(titans)} titans vs {len(atlanteans)} atlanteans"
                ),
            )
        )

    seen_heroes: set[int] = set()
    seen_players: set[str] = set()
    kill_ceiling = KILL_SOFT_CEILING[game_length]

    for entry in entries:
        if entry.player_id in seen_players:
            errors.append(
                _entry_issue(entry, "player_id", f"player {entry.player_id} appears more than once")
            )
        seen_players.add(entry.player_id)

        if entry.hero_id in seen_heroes:
            errors.append(
                _entry_issue(
                    entry, "hero_id", f"hero {entry.hero_name} is picked by more than one player"
                )
            )
        seen_heroes.add(entry.hero_id)

        if not entry.hero_name:
            errors.append(_entry_issue(entry, "hero_name", "hero name must not be empty"))

        for stat in _NON_NEGATIVE_STATS:
            value = getattr(entry, stat)
            if value is not None and value < 0:
                errors.append(_entry_issue(entry, stat, f"{stat} must be >= 0, got {value}"))

        if entry.level is not None and not MIN_LEVEL <= entry.level <= MAX_LEVEL:
            errors.append(
                _entry_issue(
                    entry,
                    "level",
                    f"level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {entry.level}",
                )
            )

        if entry.kills is not None and entry.kills > kill_ceiling:
            warnings.append(
                _entry_issue(
                    entry,
                    "kills",
                    f"{entry.kills} kills is unusually high for a {game_length.value} game",
                )
            )
        if entry.deaths is not None and entry.deaths > HIGH_DEATHS_THRESHOLD:
            warnings.append(
                _entry_issue(entry, "deaths", f"{entry.deaths} deaths is unusually high")
            )

    current = _naive_utc(now) if now is not None else utc_now()
    match_date = _naive_utc(date)
    if match_date > current:
        warnings.append(ValidationIssue(field="date", message="match date is in the future"))
    elif current - match_date > STALE_MATCH_AGE:
        warnings.append(ValidationIssue(field="date", message="match date is more than a year old"))

    return ValidationResult(errors=tuple(errors), warnings=tuple(warnings))


def validate_match_edit(
    match: Match,
    participations: Sequence[Participation],
    *,
    now: datetime | None = None,
) -> ValidationResult:
    """Validate an edited match draft together with its participations."""
    return validate_roster(match.date, match.game_length, participations, now=now)


def validate_submission(submission: MatchSubmission, *, now: datetime | None = None) -> ValidationResult:
    """Validate a new match submission before anything is written."""
    return validate_roster(
        submission.date,
        submission.game_length,
        submission.participants,
        now=now,
    )


__all__ = [
    "HIGH_DEATHS_THRESHOLD",
    "KILL_SOFT_CEILING",
    "MAX_LEVEL",
    "MIN_LEVEL",
    "ValidationIssue",
    "ValidationResult",
    "validate_match_edit",
    "validate_roster",
    "validate_submission",
]
