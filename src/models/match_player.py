"""match_players table model."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base


class MatchPlayerRecord(Base):
    """One player's participation in a match.

    Combat counters are nullable: NULL means the stat was not tracked for the
    match, 0 means it was tracked and the value was zero.
    """

    __tablename__ = "match_players"
    __table_args__ = (
        UniqueConstraint("match_id", "player_id", name="uq_match_players_match_player"),
        CheckConstraint("team IN ('titans', 'atlanteans')", name="ck_match_players_team"),
        Index("idx_match_players_match", "match_id"),
        Index("idx_match_players_player", "player_id"),
        Index("idx_match_players_hero", "hero_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    match_id: Mapped[int] = mapped_column(
        ForeignKey("matches.id", ondelete="CASCADE"),
        nullable=False,
    )
    player_id: Mapped[str] = mapped_column(ForeignKey("players.id"), nullable=False)
    team: Mapped[str] = mapped_column(String(16), nullable=False)
    hero_id: Mapped[int] = mapped_column(Integer, nullable=False)
    hero_name: Mapped[str] = mapped_column(String(64), nullable=False)
    hero_roles: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    kills: Mapped[int | None] = mapped_column(Integer, nullable=True)
    deaths: Mapped[int | None] = mapped_column(Integer, nullable=True)
    assists: Mapped[int | None] = mapped_column(Integer, nullable=True)
    gold_earned: Mapped[int | None] = mapped_column(Integer, nullable=True)
    minion_kills: Mapped[int | None] = mapped_column(Integer, nullable=True)
    level: Mapped[int | None] = mapped_column(Integer, nullable=True)

    match = relationship("MatchRecord", back_populates="participants")
