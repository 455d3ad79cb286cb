"""Versioned one-time data migrations for the match log.

Version 1 converts legacy all-zero combat stats to "not tracked". Older
submissions stored ``0`` for every stat nobody recorded, which would otherwise
drag every combat average toward zero.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from domain.common import COMBAT_STAT_FIELDS, Participation, group_by_match, utc_now
from domain.errors import MigrationTimeoutError
from repositories.match_log_repository import (
    fetch_all_participations,
    fetch_matches,
    get_metadata_value,
    mark_stat_untracked,
    set_metadata_value,
)

logger = logging.getLogger(__name__)

MIGRATION_VERSION_KEY = "migration_version"
CURRENT_MIGRATION_VERSION = 1
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class MigrationResult:
    success: bool
    version: int
    matches_analyzed: int = 0
    stats_converted: int = 0
    players_affected: int = 0
    error: str | None = None
    duration_seconds: float = 0.0


def applied_version(session: Session) -> int:
    raw = get_metadata_value(session, MIGRATION_VERSION_KEY)
    if raw is None:
        return 0
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"app_metadata.{MIGRATION_VERSION_KEY} is not an integer: {raw!r}") from exc


def _untracked_stats(roster: list[Participation]) -> list[str]:
    """Stats where every participant recorded exactly 0 and none is already untracked."""
    return [
        stat
        for stat in COMBAT_STAT_FIELDS
        if roster and all(getattr(entry, stat) == 0 for entry in roster)
    ]


def _convert_legacy_zero_stats(
    session: Session,
    deadline: float,
    clock: Callable[[], float],
) -> tuple[int, int, int]:
    matches = fetch_matches(session)
    participations_by_match = group_by_match(fetch_all_participations(session))
    stats_converted = 0
    players_affected: set[str] = set()

    for match in matches:
        if clock() > deadline:
            raise MigrationTimeoutError(
                f"legacy stats migration exceeded its deadline at match_id={match.id}"
            )
        roster = participations_by_match.get(match.id, [])
        for stat in _untracked_stats(roster):
            stats_converted += mark_stat_untracked(session, [entry.id for entry in roster], stat)
            players_affected.update(entry.player_id for entry in roster)

    return len(matches), stats_converted, len(players_affected)


def run_migrations(
    *,
    session_factory,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    clock: Callable[[], float] = time.monotonic,
) -> MigrationResult:
    """Apply pending migrations in one transaction.

    Safe to call on every start: once the version marker is set this is a
    no-op. On timeout or any error nothing is written, the marker stays unset
    and the failure is reported in the returned result.
    """
    if timeout_seconds <= 0:
        raise ValueError("timeout_seconds must be > 0")

    started = clock()
    deadline = started + timeout_seconds

    with session_factory() as session:
        version = applied_version(session)
        if version >= CURRENT_MIGRATION_VERSION:
            return MigrationResult(
                success=True,
                version=version,
                duration_seconds=clock() - started,
            )

        try:
            matches_analyzed, stats_converted, players_affected = _convert_legacy_zero_stats(
                session, deadline, clock
            )
            set_metadata_value(
                session,
                MIGRATION_VERSION_KEY,
                str(CURRENT_MIGRATION_VERSION),
                now=utc_now(),
            )
            session.commit()
        except Exception as exc:
            session.rollback()
            logger.exception("migration to version %d failed", CURRENT_MIGRATION_VERSION)
            return MigrationResult(
                success=False,
                version=version,
                error=str(exc),
                duration_seconds=clock() - started,
            )

    logger.info(
        "migrated to version=%d matches_analyzed=%d stats_converted=%d players_affected=%d",
        CURRENT_MIGRATION_VERSION,
        matches_analyzed,
        stats_converted,
        players_affected,
    )
    return MigrationResult(
        success=True,
        version=CURRENT_MIGRATION_VERSION,
        matches_analyzed=matches_analyzed,
        stats_converted=stats_converted,
        players_affected=players_affected,
        duration_seconds=clock() - started,
    )


__all__ = [
    "CURRENT_MIGRATION_VERSION",
    "MIGRATION_VERSION_KEY",
    "MigrationResult",
    "applied_version",
    "run_migrations",
]
