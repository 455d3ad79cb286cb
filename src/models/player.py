"""players table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Float, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class PlayerRecord(Base):
    """A player plus the cached output of the last rating replay.

    ``mu``/``sigma``/``ordinal``/``display_rating`` are rewritten by every replay
    and are never read back as an input to the rating math.
    """

    __tablename__ = "players"
    __table_args__ = (
        CheckConstraint("total_games >= 0", name="ck_players_total_games"),
        CheckConstraint("wins + losses = total_games", name="ck_players_counters"),
    )

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    total_games: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    mu: Mapped[float | None] = mapped_column(Float, nullable=True)
    sigma: Mapped[float | None] = mapped_column(Float, nullable=True)
    ordinal: Mapped[float | None] = mapped_column(Float, nullable=True, index=True)
    display_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_played: Mapped[datetime | None] = mapped_column(DateTime(timezone=False), nullable=True)
    date_created: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
