"""Rating primitive, replay engine and win probability."""

from domain.ratings.calculator import (
    Belief,
    RatingParameters,
    default_belief,
    display_rating,
    ordinal,
    rate_teams,
)
from domain.ratings.replay import PlayerRating, RatingSnapshot, ReplayResult, replay_ratings
from domain.ratings.win_probability import WinProbability, estimate_win_probability

__all__ = [
    "Belief",
    "PlayerRating",
    "RatingParameters",
    "RatingSnapshot",
    "ReplayResult",
    "WinProbability",
    "default_belief",
    "display_rating",
    "estimate_win_probability",
    "ordinal",
    "rate_teams",
    "replay_ratings",
]
