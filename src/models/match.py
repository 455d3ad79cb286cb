"""matches table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base


class MatchRecord(Base):
    """One recorded game. Insertion order (``id``) breaks ties between equal dates."""

    __tablename__ = "matches"
    __table_args__ = (
        CheckConstraint(
            "winning_team IN ('titans', 'atlanteans')",
            name="ck_matches_winning_team",
        ),
        CheckConstraint("game_length IN ('quick', 'long')", name="ck_matches_game_length"),
        CheckConstraint("titan_players >= 0", name="ck_matches_titan_players"),
        CheckConstraint("atlantean_players >= 0", name="ck_matches_atlantean_players"),
        Index("idx_matches_date", "date", "id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    winning_team: Mapped[str] = mapped_column(String(16), nullable=False)
    game_length: Mapped[str] = mapped_column(String(16), nullable=False)
    double_lanes: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    titan_players: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    atlantean_players: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )

    participants = relationship(
        "MatchPlayerRecord",
        back_populates="match",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
