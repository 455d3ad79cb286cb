"""Exception types raised by the engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.editing.validation import ValidationResult


class MatchNotFoundError(LookupError):
    def __init__(self, match_id: int) -> None:
        super().__init__(f"match_id={match_id} not found")
        self.match_id = match_id


class PlayerNotFoundError(LookupError):
    def __init__(self, player_id: str) -> None:
        super().__init__(f"player_id={player_id} not found")
        self.player_id = player_id


class MatchValidationError(ValueError):
    """A submission or edit carries fatal validation errors."""

    def __init__(self, result: ValidationResult) -> None:
        messages = "; ".join(issue.message for issue in result.errors)
        super().__init__(f"match failed validation: {messages}")
        self.result = result


class EditStateError(RuntimeError):
    """An edit session was used after it was committed or discarded."""


class MigrationTimeoutError(TimeoutError):
    pass


__all__ = [
    "EditStateError",
    "MatchNotFoundError",
    "MatchValidationError",
    "MigrationTimeoutError",
    "PlayerNotFoundError",
]
