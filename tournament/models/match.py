"""Bracket match model."""
from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tournament.models.base import Base


class MatchStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Match(Base):
    """Node of a category's elimination bracket.

    ``round`` 1 is the first round played; ``position`` is 0-based within the round.
    The winner moves to ``next_match_id`` on side ``winner_advances_as`` (1 or 2).
    ``court_id`` and ``scheduled_at`` are set by the organiser after the draw.
    """

    __tablename__ = "matches"
    __table_args__ = (
        UniqueConstraint("category_id", "round", "position", name="uq_match_category_round_position"),
        # Ids of deleted brackets are never handed out again
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"), nullable=False, index=True)
    round: Mapped[int] = mapped_column(Integer, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    participant1_registration_id: Mapped[Optional[int]] = mapped_column(ForeignKey("registrations.id"), nullable=True)
    participant2_registration_id: Mapped[Optional[int]] = mapped_column(ForeignKey("registrations.id"), nullable=True)
    bye: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    next_match_id: Mapped[Optional[int]] = mapped_column(ForeignKey("matches.id"), nullable=True)
    winner_advances_as: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # 1 or 2; null for the final
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=MatchStatus.SCHEDULED.value)
    court_id: Mapped[Optional[int]] = mapped_column(ForeignKey("courts.id"), nullable=True)
    scheduled_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    category: Mapped["Category"] = relationship("Category", back_populates="matches")
