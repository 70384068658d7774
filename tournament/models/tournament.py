"""Tournament model."""
from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tournament.models.base import Base


class Tournament(Base):
    """Tournament hosting one or more categories."""

    __tablename__ = "tournaments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    categories = relationship(
        "Category", back_populates="tournament", cascade="all, delete-orphan"
    )
    registrations = relationship(
        "Registration", back_populates="tournament", cascade="all, delete-orphan"
    )
