"""Hero and player analytics computed from the match log."""

from domain.analytics.common import RankedRelation
from domain.analytics.hero_stats import HeroStats, hero_stats
from domain.analytics.player_stats import PlayerStats, player_stats
from domain.analytics.relationships import (
    PlayerRelationship,
    PlayerSynergy,
    player_relationships,
    player_synergies,
)
from domain.analytics.time_series import HeroTimeSeries, TimeSeriesPoint, hero_win_rate_over_time

__all__ = [
    "HeroStats",
    "HeroTimeSeries",
    "PlayerRelationship",
    "PlayerStats",
    "PlayerSynergy",
    "RankedRelation",
    "TimeSeriesPoint",
    "hero_stats",
    "hero_win_rate_over_time",
    "player_relationships",
    "player_stats",
    "player_synergies",
]
