"""Field-level patches produced by diffing an edited match against its baseline."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any

from domain.common import COMBAT_STAT_FIELDS, GameLength, Match, Participation, Side

MATCH_EDITABLE_FIELDS: frozenset[str] = frozenset(
    {"date", "winning_side", "game_length", "double_lanes"}
)
PARTICIPATION_EDITABLE_FIELDS: frozenset[str] = frozenset(
    {"side", "hero_id", "hero_name", "hero_roles", *COMBAT_STAT_FIELDS}
)


def check_match_fields(changes: Mapping[str, Any]) -> None:
    unknown = set(changes) - MATCH_EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"match fields are not editable: {sorted(unknown)}")


def check_participation_fields(changes: Mapping[str, Any]) -> None:
    unknown = set(changes) - PARTICIPATION_EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"participation fields are not editable: {sorted(unknown)}")


def normalize_match_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    """Coerce raw match field values (strings from a form or CLI) to domain types."""
    check_match_fields(changes)
    normalized: dict[str, Any] = {}
    for key, value in changes.items():
        if key == "date":
            if not isinstance(value, datetime):
                raise ValueError(f"date must be a datetime, got {type(value).__name__}")
            normalized[key] = value
        elif key == "winning_side":
            normalized[key] = Side(value)
        elif key == "game_length":
            normalized[key] = GameLength(value)
        else:
            if not isinstance(value, bool):
                raise ValueError(f"double_lanes must be a boolean, got {value!r}")
            normalized[key] = value
    return normalized


def normalize_participation_changes(changes: Mapping[str, Any]) -> dict[str, Any]:
    check_participation_fields(changes)
    normalized: dict[str, Any] = {}
    for key, value in changes.items():
        if key == "side":
            normalized[key] = Side(value)
        elif key == "hero_id":
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"hero_id must be an integer, got {value!r}")
            normalized[key] = value
        elif key == "hero_name":
            normalized[key] = str(value)
        elif key == "hero_roles":
            normalized[key] = tuple(str(role) for role in value)
        else:
            if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                raise ValueError(f"{key} must be an integer or None, got {value!r}")
            normalized[key] = value
    return normalized


@dataclass(frozen=True)
class ParticipationPatch:
    """Changed fields of one participation.

    A key mapped to ``None`` marks a combat stat as untracked; an absent key
    leaves the stored value alone.
    """

    participation_id: int
    changes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        normalized = normalize_participation_changes(self.changes)
        object.__setattr__(self, "changes", MappingProxyType(normalized))

    @property
    def is_empty(self) -> bool:
        return not self.changes


def patch_match(match: Match, changes: Mapping[str, Any]) -> Match:
    return replace(match, **normalize_match_changes(changes))


def patch_participations(
    participations: Sequence[Participation],
    patches: Sequence[ParticipationPatch],
) -> list[Participation]:
    """Return a patched copy of one match's participations.

    Raises ``ValueError`` when a patch targets a participation outside the list.
    """
    by_id = {participation.id: participation for participation in participations}
    for patch in patches:
        current = by_id.get(patch.participation_id)
        if current is None:
            raise ValueError(f"participation_id={patch.participation_id} is not part of this match")
        by_id[patch.participation_id] = replace(current, **patch.changes)
    return [by_id[participation.id] for participation in participations]


__all__ = [
    "MATCH_EDITABLE_FIELDS",
    "PARTICIPATION_EDITABLE_FIELDS",
    "ParticipationPatch",
    "patch_match",
    "patch_participations",
    "check_match_fields",
    "check_participation_fields",
    "normalize_match_changes",
    "normalize_participation_changes",
]
