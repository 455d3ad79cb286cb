"""Database repository helpers."""

from repositories.match_log_repository import (
    apply_match_patch,
    apply_participation_patches,
    delete_match,
    ensure_players,
    ensure_schema,
    fetch_all_participations,
    fetch_matches,
    fetch_participations,
    fetch_players,
    get_match,
    insert_match,
    save_player_ratings,
)

__all__ = [
    "apply_match_patch",
    "apply_participation_patches",
    "delete_match",
    "ensure_players",
    "ensure_schema",
    "fetch_all_participations",
    "fetch_matches",
    "fetch_participations",
    "fetch_players",
    "get_match",
    "insert_match",
    "save_player_ratings",
]
