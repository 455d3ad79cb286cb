"""Rating and analytics domain modules."""

from domain.common import DateRange, GameLength, Match, Participation, Player, Side

__all__ = ["DateRange", "GameLength", "Match", "Participation", "Player", "Side"]
