"""Match validation and edit sessions.

The transactional controller lives in ``domain.editing.controller``.
"""

from domain.editing.patches import ParticipationPatch
from domain.editing.session import EditState, MatchEditSession
from domain.editing.validation import (
    ValidationIssue,
    ValidationResult,
    validate_match_edit,
    validate_submission,
)

__all__ = [
    "EditState",
    "MatchEditSession",
    "ParticipationPatch",
    "ValidationIssue",
    "ValidationResult",
    "validate_match_edit",
    "validate_submission",
]
