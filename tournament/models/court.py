"""Court model."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from tournament.models.base import Base


class Court(Base):
    """Playing court at the venue."""

    __tablename__ = "courts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    location_note: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
