"""ORM models."""

from models.app_metadata import AppMetadata
from models.base import Base
from models.match import MatchRecord
from models.match_player import MatchPlayerRecord
from models.player import PlayerRecord

__all__ = [
    "AppMetadata",
    "Base",
    "MatchPlayerRecord",
    "MatchRecord",
    "PlayerRecord",
]
