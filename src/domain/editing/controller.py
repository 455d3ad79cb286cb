"""Atomic match edits and deletions followed by a full rating replay."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from domain.common import utc_now
from domain.editing.patches import (
    ParticipationPatch,
    normalize_match_changes,
    patch_match,
    patch_participations,
)
from domain.editing.session import MatchEditSession
from domain.editing.validation import ValidationIssue, validate_match_edit
from domain.errors import MatchValidationError
from domain.pipeline import RebuildSummary, rebuild_in_session
from domain.ratings.calculator import RatingParameters
from domain.ratings.replay import ReplayResult
from repositories.match_log_repository import (
    apply_match_patch,
    apply_participation_patches,
    delete_match,
    fetch_participations,
    get_match,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitResult:
    match_id: int
    changed_match_fields: tuple[str, ...]
    changed_participation_ids: tuple[int, ...]
    warnings: tuple[ValidationIssue, ...]
    rebuild: RebuildSummary
    replay: ReplayResult = field(repr=False)


@dataclass(frozen=True)
class DeleteResult:
    match_id: int
    rebuild: RebuildSummary
    replay: ReplayResult = field(repr=False)


class MatchEditController:
    """Keeps cached ratings a function of the match log under edits.

    Every write applies the change, replays the whole log and rewrites cached
    player ratings in a single transaction. Any failure rolls all of it back.
    """

    def __init__(
        self,
        session_factory,
        params: RatingParameters,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._params = params
        self._clock = clock

    def load(self, match_id: int) -> MatchEditSession:
        with self._session_factory() as session:
            match = get_match(session, match_id)
            participations = fetch_participations(session, match_id)
        return MatchEditSession(match, participations, now=self._clock())

    def commit(self, edit: MatchEditSession) -> CommitResult:
        """Persist an edit session's changes; the session is closed afterwards."""
        result = edit.validate()
        if not result.is_valid:
            raise MatchValidationError(result)
        outcome = self.commit_patch(edit.match_id, edit.match_patch(), edit.participation_patches())
        edit.mark_committed()
        return outcome

    def commit_patch(
        self,
        match_id: int,
        match_patch: Mapping[str, Any] | None = None,
        participation_patches: Sequence[ParticipationPatch] = (),
    ) -> CommitResult:
        """Validate the merged draft against the stored match, then write and replay."""
        changes = normalize_match_changes(match_patch or {})
        patches = [patch for patch in participation_patches if not patch.is_empty]

        with self._session_factory() as session:
            try:
                stored_match = get_match(session, match_id)
                stored_participations = fetch_participations(session, match_id)
                draft_match = patch_match(stored_match, changes)
                draft_participations = patch_participations(stored_participations, patches)

                validation = validate_match_edit(
                    draft_match,
                    draft_participations,
                    now=self._clock(),
                )
                if not validation.is_valid:
                    raise MatchValidationError(validation)

                if changes:
                    apply_match_patch(session, match_id, changes)
                if patches:
                    apply_participation_patches(session, match_id, patches)

                replay, rebuild = rebuild_in_session(session, self._params)
                session.commit()
            except Exception:
                session.rollback()
                raise

        logger.info(
            "committed edit match_id=%s match_fields=%s participations=%s",
            match_id,
            sorted(changes),
            [patch.participation_id for patch in patches],
        )
        return CommitResult(
            match_id=match_id,
            changed_match_fields=tuple(sorted(changes)),
            changed_participation_ids=tuple(patch.participation_id for patch in patches),
            warnings=validation.warnings,
            rebuild=rebuild,
            replay=replay,
        )

    def delete_match(self, match_id: int) -> DeleteResult:
        with self._session_factory() as session:
            try:
                delete_match(session, match_id)
                replay, rebuild = rebuild_in_session(session, self._params)
                session.commit()
            except Exception:
                session.rollback()
                raise

        logger.info("deleted match_id=%s", match_id)
        return DeleteResult(match_id=match_id, rebuild=rebuild, replay=replay)


__all__ = ["CommitResult", "DeleteResult", "MatchEditController"]
