"""In-memory edit session for one stored match."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Any

from domain.common import Match, Participation
from domain.editing.patches import (
    MATCH_EDITABLE_FIELDS,
    PARTICIPATION_EDITABLE_FIELDS,
    ParticipationPatch,
    normalize_match_changes,
    normalize_participation_changes,
)
from domain.editing.validation import ValidationResult, validate_match_edit
from domain.errors import EditStateError


class EditState(str, Enum):
    LOADED = "loaded"
    VALIDATED = "validated"
    COMMITTED = "committed"
    DISCARDED = "discarded"


class MatchEditSession:
    """Baseline snapshot plus a working copy of one match and its roster.

    Every change re-validates the working copy. The baseline is never touched,
    so ``reset()`` always returns to what was loaded and the patches only carry
    fields that actually differ.
    """

    def __init__(
        self,
        match: Match,
        participations: Sequence[Participation],
        *,
        now: datetime | None = None,
    ) -> None:
        foreign = [entry.id for entry in participations if entry.match_id != match.id]
        if foreign:
            raise ValueError(f"participations {foreign} do not belong to match_id={match.id}")

        self._baseline_match = match
        self._baseline_participations = {entry.id: entry for entry in participations}
        self._order = [entry.id for entry in participations]
        self._match = match
        self._participations = dict(self._baseline_participations)
        self._now = now
        self._state = EditState.LOADED
        self._result: ValidationResult | None = None

    @property
    def match_id(self) -> int:
        return self._baseline_match.id

    @property
    def state(self) -> EditState:
        return self._state

    @property
    def match(self) -> Match:
        return self._match

    @property
    def participations(self) -> list[Participation]:
        return [self._participations[participation_id] for participation_id in self._order]

    @property
    def baseline_match(self) -> Match:
        return self._baseline_match

    @property
    def baseline_participations(self) -> list[Participation]:
        return [self._baseline_participations[participation_id] for participation_id in self._order]

    @property
    def result(self) -> ValidationResult | None:
        """Result of the most recent validation, ``None`` until the first one."""
        return self._result

    @property
    def is_dirty(self) -> bool:
        return bool(self.match_patch()) or bool(self.participation_patches())

    def _ensure_open(self) -> None:
        if self._state in (EditState.COMMITTED, EditState.DISCARDED):
            raise EditStateError(f"edit session for match_id={self.match_id} is {self._state.value}")

    def validate(self) -> ValidationResult:
        self._ensure_open()
        self._result = validate_match_edit(self._match, self.participations, now=self._now)
        self._state = EditState.VALIDATED
        return self._result

    def update_match(self, **changes: Any) -> ValidationResult:
        self._ensure_open()
        self._match = replace(self._match, **normalize_match_changes(changes))
        return self.validate()

    def update_participation(self, participation_id: int, **changes: Any) -> ValidationResult:
        self._ensure_open()
        current = self._participations.get(participation_id)
        if current is None:
            raise ValueError(
                f"participation_id={participation_id} is not part of match_id={self.match_id}"
            )
        self._participations[participation_id] = replace(
            current,
            **normalize_participation_changes(changes),
        )
        return self.validate()

    def reset(self) -> None:
        """Drop every pending change and return to the loaded state."""
        self._ensure_open()
        self._match = self._baseline_match
        self._participations = dict(self._baseline_participations)
        self._result = None
        self._state = EditState.LOADED

    def discard(self) -> None:
        self._ensure_open()
        self._state = EditState.DISCARDED

    def mark_committed(self) -> None:
        self._ensure_open()
        self._state = EditState.COMMITTED

    def match_patch(self) -> dict[str, Any]:
        return {
            field_name: getattr(self._match, field_name)
            for field_name in sorted(MATCH_EDITABLE_FIELDS)
            if getattr(self._match, field_name) != getattr(self._baseline_match, field_name)
        }

    def participation_patches(self) -> list[ParticipationPatch]:
        patches: list[ParticipationPatch] = []
        for participation_id in self._order:
            working = self._participations[participation_id]
            baseline = self._baseline_participations[participation_id]
            changes = {
                field_name: getattr(working, field_name)
                for field_name in sorted(PARTICIPATION_EDITABLE_FIELDS)
                if getattr(working, field_name) != getattr(baseline, field_name)
            }
            if changes:
                patches.append(ParticipationPatch(participation_id=participation_id, changes=changes))
        return patches


__all__ = ["EditState", "MatchEditSession"]
