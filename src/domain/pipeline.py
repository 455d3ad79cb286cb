"""Rebuild pipeline: replay the match log and rewrite cached player ratings."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from domain.ratings.calculator import RatingParameters
from domain.ratings.replay import ReplayResult, replay_ratings
from repositories.match_log_repository import (
    fetch_all_participations,
    fetch_matches,
    fetch_player_ids,
    save_player_ratings,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RebuildSummary:
    """Outcome of one full replay."""

    processed_matches: int
    skipped_matches: int
    tracked_players: int
    updated_players: int
    dry_run: bool


def replay_store(session: Session, params: RatingParameters) -> ReplayResult:
    """Replay every stored match visible to ``session``."""
    return replay_ratings(
        fetch_matches(session),
        fetch_all_participations(session),
        fetch_player_ids(session),
        params,
    )


def rebuild_in_session(
    session: Session,
    params: RatingParameters,
    *,
    dry_run: bool = False,
) -> tuple[ReplayResult, RebuildSummary]:
    """Replay and, unless ``dry_run``, overwrite cached ratings inside the caller's transaction.

    The caller owns commit/rollback, so an edit and its replay can share one
    transaction.
    """
    result = replay_store(session, params)
    updated = 0 if dry_run else save_player_ratings(session, result.ratings)
    summary = RebuildSummary(
        processed_matches=result.processed_matches,
        skipped_matches=len(result.skipped_match_ids),
        tracked_players=len(result.ratings),
        updated_players=updated,
        dry_run=dry_run,
    )
    logger.info(
        "replayed processed_matches=%d skipped_matches=%d tracked_players=%d updated_players=%d dry_run=%s",
        summary.processed_matches,
        summary.skipped_matches,
        summary.tracked_players,
        summary.updated_players,
        dry_run,
    )
    return result, summary


def rebuild_player_ratings(
    *,
    session_factory,
    params: RatingParameters,
    dry_run: bool = False,
    echo: Callable[[str], None] | None = None,
) -> RebuildSummary:
    """Run a full rebuild in its own transaction."""
    with session_factory() as session:
        if dry_run:
            _, summary = rebuild_in_session(session, params, dry_run=True)
            session.rollback()
            if echo is not None:
                echo(
                    f"[dry-run] processed_matches={summary.processed_matches} "
                    f"skipped_matches={summary.skipped_matches} "
                    f"tracked_players={summary.tracked_players}"
                )
            return summary

        try:
            _, summary = rebuild_in_session(session, params)
            session.commit()
        except Exception:
            session.rollback()
            raise

    if echo is not None:
        echo(
            "completed "
            f"processed_matches={summary.processed_matches} "
            f"skipped_matches={summary.skipped_matches} "
            f"tracked_players={summary.tracked_players} "
            f"updated_players={summary.updated_players}"
        )
    return summary


__all__ = ["RebuildSummary", "rebuild_in_session", "rebuild_player_ratings", "replay_store"]
