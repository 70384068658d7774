"""Category model - a competition within a tournament (e.g. men's singles)."""
from __future__ import annotations

import enum
from decimal import Decimal
from typing import Optional

from sqlalchemy import ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tournament.models.base import Base


class CategoryType(str, enum.Enum):
    SINGLES = "SINGLES"
    DOUBLES = "DOUBLES"


class TournamentFormat(str, enum.Enum):
    SINGLE_ELIMINATION = "SINGLE_ELIMINATION"


class Category(Base):
    """Category of a tournament. The bracket engine only acts on single elimination."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    category_type: Mapped[str] = mapped_column(String(20), nullable=False, default=CategoryType.SINGLES.value)
    format: Mapped[str] = mapped_column(String(30), nullable=False, default=TournamentFormat.SINGLE_ELIMINATION.value)
    gender_restriction: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # free text for now
    min_age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_participants: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    registration_fee: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)

    tournament: Mapped["Tournament"] = relationship("Tournament", back_populates="categories")
    registrations = relationship(
        "Registration", back_populates="category", cascade="all, delete-orphan"
    )
    matches = relationship(
        "Match", back_populates="category", cascade="all, delete-orphan"
    )
