"""Bracket request/response schemas. Wire names are camelCase; snake_case is accepted on input."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrmModel(CamelModel):
    """Camel-case DTO read straight from ORM objects."""

    model_config = ConfigDict(from_attributes=True)


class SeedEntry(CamelModel):
    registration_id: int
    seed_number: int  # 1 = top seed; range checked by the engine


class DrawGenerateRequest(CamelModel):
    seeds: Optional[list[SeedEntry]] = None
    overwrite_if_draft: bool = False


class MatchDto(OrmModel):
    id: Optional[int] = None  # None in previews
    round: int
    position: int
    participant1_registration_id: Optional[int] = None
    participant2_registration_id: Optional[int] = None
    bye: bool = False
    next_match_id: Optional[int] = None
    winner_advances_as: Optional[int] = None
    status: str
    court_id: Optional[int] = None
    scheduled_at: Optional[datetime] = None


class BracketSummaryResponse(CamelModel):
    category_id: int
    total_participants: Optional[int] = None
    effective_size: Optional[int] = None
    rounds: Optional[int] = None
    matches: list[MatchDto] = []
