"""Player model."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tournament.models.base import Base


class Player(Base):
    """Person who can register for tournament categories."""

    __tablename__ = "players"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    gender: Mapped[Optional[str]] = mapped_column(String(1), nullable=True)  # M, F
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    registrations = relationship(
        "Registration", back_populates="player", cascade="all, delete-orphan"
    )
