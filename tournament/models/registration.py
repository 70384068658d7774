"""Registration model - player entered into a tournament category."""
from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tournament.models.base import Base


class Registration(Base):
    """Entry of a player into a category. Ids grow with insertion order."""

    __tablename__ = "registrations"
    __table_args__ = (UniqueConstraint("category_id", "player_id", name="uq_registration_category_player"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id"), nullable=False)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"), nullable=False, index=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"), nullable=False)

    tournament: Mapped["Tournament"] = relationship("Tournament", back_populates="registrations")
    category: Mapped["Category"] = relationship("Category", back_populates="registrations")
    player: Mapped["Player"] = relationship("Player", back_populates="registrations")
