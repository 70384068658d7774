"""API routes for tournaments, categories, players, courts, registrations and match scheduling."""
from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import Field, field_validator
from sqlalchemy import exists, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tournament.models import (
    Category,
    CategoryType,
    Court,
    Match,
    MatchStatus,
    Player,
    Registration,
    Tournament,
    TournamentFormat,
    User,
)
from tournament.models.base import async_session_factory
from tournament.schemas import CamelModel, MatchDto, OrmModel
from web.auth import require_admin_user, require_user

logger = logging.getLogger("courtside.api")

router = APIRouter(prefix="/api/v1", tags=["tournaments"])


# --- Pydantic schemas ---


def _required(value):
    """Update fields may be omitted but not cleared."""
    if value is None:
        raise ValueError("may not be null")
    return value


class TournamentCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    location: Optional[str] = Field(None, max_length=200)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class TournamentUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    location: Optional[str] = Field(None, max_length=200)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v):
        return _required(v)


class TournamentResponse(OrmModel):
    id: int
    name: str
    location: Optional[str]
    start_date: Optional[date]
    end_date: Optional[date]


class CategoryCreate(CamelModel):
    name: str = Field(min_length=1, max_length=120)
    category_type: CategoryType = CategoryType.SINGLES
    format: TournamentFormat = TournamentFormat.SINGLE_ELIMINATION
    gender_restriction: Optional[str] = Field(None, max_length=20)
    min_age: Optional[int] = Field(None, ge=0)
    max_age: Optional[int] = Field(None, ge=0)
    max_participants: Optional[int] = Field(None, ge=2)
    registration_fee: Optional[Decimal] = Field(None, ge=0)


class CategoryResponse(OrmModel):
    id: int
    tournament_id: int
    name: str
    category_type: str
    format: str
    gender_restriction: Optional[str]
    min_age: Optional[int]
    max_age: Optional[int]
    max_participants: Optional[int]
    registration_fee: Optional[Decimal]


class PlayerCreate(CamelModel):
    first_name: str = Field(min_length=2, max_length=100)
    last_name: str = Field(min_length=2, max_length=100)
    gender: Optional[str] = Field(None, pattern=r"^[MF]$")
    phone: Optional[str] = Field(None, pattern=r"^\+?[1-9]\d{1,14}$")


class PlayerUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(None, min_length=2, max_length=100)
    gender: Optional[str] = Field(None, pattern=r"^[MF]$")
    phone: Optional[str] = Field(None, pattern=r"^\+?[1-9]\d{1,14}$")

    @field_validator("first_name", "last_name")
    @classmethod
    def names_not_null(cls, v):
        return _required(v)


class PlayerResponse(OrmModel):
    id: int
    first_name: str
    last_name: str
    gender: Optional[str]
    phone: Optional[str]


class CourtCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    location_note: Optional[str] = Field(None, max_length=200)


class CourtUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    location_note: Optional[str] = Field(None, max_length=200)

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v):
        return _required(v)


class CourtResponse(OrmModel):
    id: int
    name: str
    location_note: Optional[str]


class RegistrationCreate(CamelModel):
    tournament_id: int
    category_id: int
    player_id: int


class RegistrationResponse(OrmModel):
    id: int
    tournament_id: int
    category_id: int
    player_id: int


class MatchUpdate(CamelModel):
    """Scheduling of a drawn match. Omitted fields are left as they are; null clears court or time."""

    court_id: Optional[int] = None
    scheduled_at: Optional[datetime] = None
    status: Optional[MatchStatus] = None

    @field_validator("status")
    @classmethod
    def status_not_null(cls, v):
        return _required(v)


# --- Helpers ---


def _check_dates(start: Optional[date], end: Optional[date]) -> None:
    if start and end and end < start:
        raise HTTPException(400, "Tournament end date must be after start date")


async def _name_taken(session: AsyncSession, column, name: str, exclude_id: Optional[int] = None) -> bool:
    """Case-insensitive uniqueness check on a name column."""
    stmt = select(column.class_.id).where(func.lower(column) == name.strip().lower())
    if exclude_id is not None:
        stmt = stmt.where(column.class_.id != exclude_id)
    result = await session.execute(stmt)
    return result.first() is not None


async def _get_or_404(session: AsyncSession, model, obj_id: int, label: str):
    obj = await session.get(model, obj_id)
    if not obj:
        raise HTTPException(404, f"{label} not found with id: {obj_id}")
    return obj


# --- Tournaments ---


@router.get("/tournaments", response_model=list[TournamentResponse])
async def list_tournaments(user: User = Depends(require_user)):
    async with async_session_factory() as session:
        result = await session.execute(select(Tournament).order_by(Tournament.id))
        return result.scalars().all()


@router.get("/tournaments/{tournament_id}", response_model=TournamentResponse)
async def get_tournament(tournament_id: int, user: User = Depends(require_user)):
    async with async_session_factory() as session:
        return await _get_or_404(session, Tournament, tournament_id, "Tournament")


@router.post("/tournaments", response_model=TournamentResponse, status_code=201)
async def create_tournament(body: TournamentCreate, user: User = Depends(require_admin_user)):
    """Create a tournament. Names are unique (case-insensitive); start date may not be in the past."""
    _check_dates(body.start_date, body.end_date)
    if body.start_date and body.start_date < date.today():
        raise HTTPException(400, "Tournament start date cannot be in the past")
    async with async_session_factory() as session:
        if await _name_taken(session, Tournament.name, body.name):
            raise HTTPException(409, f"Tournament with name '{body.name}' already exists")
        t = Tournament(**body.model_dump())
        session.add(t)
        await session.commit()
        logger.info("Created tournament %s (%s)", t.id, t.name)
        return t


@router.put("/tournaments/{tournament_id}", response_model=TournamentResponse)
async def update_tournament(tournament_id: int, body: TournamentUpdate, user: User = Depends(require_admin_user)):
    async with async_session_factory() as session:
        t = await _get_or_404(session, Tournament, tournament_id, "Tournament")
        updates = body.model_dump(exclude_unset=True)
        _check_dates(updates.get("start_date", t.start_date), updates.get("end_date", t.end_date))
        if updates.get("name") and updates["name"].strip().lower() != t.name.lower():
            if await _name_taken(session, Tournament.name, updates["name"], exclude_id=t.id):
                raise HTTPException(409, f"Tournament with name '{updates['name']}' already exists")
        for key, value in updates.items():
            setattr(t, key, value)
        await session.commit()
        return t


@router.delete("/tournaments/{tournament_id}", status_code=204)
async def delete_tournament(tournament_id: int, user: User = Depends(require_admin_user)):
    async with async_session_factory() as session:
        t = await _get_or_404(session, Tournament, tournament_id, "Tournament")
        await session.delete(t)
        await session.commit()
    return Response(status_code=204)


# --- Categories ---


@router.get("/tournaments/{tournament_id}/categories", response_model=list[CategoryResponse])
async def list_categories(tournament_id: int, user: User = Depends(require_user)):
    async with async_session_factory() as session:
        await _get_or_404(session, Tournament, tournament_id, "Tournament")
        result = await session.execute(
            select(Category).where(Category.tournament_id == tournament_id).order_by(Category.id)
        )
        return result.scalars().all()


@router.get("/tournaments/{tournament_id}/categories/{category_id}", response_model=CategoryResponse)
async def get_category(tournament_id: int, category_id: int, user: User = Depends(require_user)):
    async with async_session_factory() as session:
        c = await session.get(Category, category_id)
        if not c or c.tournament_id != tournament_id:
            raise HTTPException(404, "Category not found for tournament")
        return c


@router.post("/tournaments/{tournament_id}/categories", response_model=CategoryResponse, status_code=201)
async def create_category(tournament_id: int, body: CategoryCreate, user: User = Depends(require_admin_user)):
    if body.min_age is not None and body.max_age is not None and body.max_age < body.min_age:
        raise HTTPException(400, "maxAge must not be below minAge")
    async with async_session_factory() as session:
        await _get_or_404(session, Tournament, tournament_id, "Tournament")
        data = body.model_dump()
        data["category_type"] = body.category_type.value
        data["format"] = body.format.value
        c = Category(tournament_id=tournament_id, **data)
        session.add(c)
        await session.commit()
        return c


@router.delete("/tournaments/{tournament_id}/categories/{category_id}", status_code=204)
async def delete_category(tournament_id: int, category_id: int, user: User = Depends(require_admin_user)):
    async with async_session_factory() as session:
        c = await session.get(Category, category_id)
        if not c or c.tournament_id != tournament_id:
            raise HTTPException(404, "Category not found for tournament")
        await session.delete(c)
        await session.commit()
    return Response(status_code=204)


# --- Players ---


@router.get("/players", response_model=list[PlayerResponse])
async def list_players(user: User = Depends(require_user)):
    async with async_session_factory() as session:
        result = await session.execute(select(Player).order_by(Player.last_name, Player.first_name))
        return result.scalars().all()


@router.get("/players/{player_id}", response_model=PlayerResponse)
async def get_player(player_id: int, user: User = Depends(require_user)):
    async with async_session_factory() as session:
        return await _get_or_404(session, Player, player_id, "Player")


async def _player_name_taken(
    session: AsyncSession, first_name: str, last_name: str, exclude_id: Optional[int] = None
) -> bool:
    stmt = select(Player.id).where(
        func.lower(Player.first_name) == first_name.strip().lower(),
        func.lower(Player.last_name) == last_name.strip().lower(),
    )
    if exclude_id is not None:
        stmt = stmt.where(Player.id != exclude_id)
    result = await session.execute(stmt)
    return result.first() is not None


@router.post("/players", response_model=PlayerResponse, status_code=201)
async def create_player(body: PlayerCreate, user: User = Depends(require_admin_user)):
    async with async_session_factory() as session:
        if await _player_name_taken(session, body.first_name, body.last_name):
            raise HTTPException(409, f"Player with name '{body.first_name} {body.last_name}' already exists")
        p = Player(**body.model_dump())
        session.add(p)
        await session.commit()
        return p


@router.put("/players/{player_id}", response_model=PlayerResponse)
async def update_player(player_id: int, body: PlayerUpdate, user: User = Depends(require_admin_user)):
    async with async_session_factory() as session:
        p = await _get_or_404(session, Player, player_id, "Player")
        updates = body.model_dump(exclude_unset=True)
        first = updates.get("first_name") or p.first_name
        last = updates.get("last_name") or p.last_name
        if await _player_name_taken(session, first, last, exclude_id=p.id):
            raise HTTPException(409, f"Player with name '{first} {last}' already exists")
        for key, value in updates.items():
            setattr(p, key, value)
        await session.commit()
        return p


@router.delete("/players/{player_id}", status_code=204)
async def delete_player(player_id: int, user: User = Depends(require_admin_user)):
    """Delete a player and their registrations. Not allowed while any of their categories has a bracket."""
    async with async_session_factory() as session:
        p = await _get_or_404(session, Player, player_id, "Player")
        drawn = await session.scalar(
            select(
                exists().where(
                    Match.category_id.in_(select(Registration.category_id).where(Registration.player_id == p.id))
                )
            )
        )
        if drawn:
            raise HTTPException(409, "Player is entered in a category that already has a bracket")
        await session.delete(p)
        await session.commit()
    return Response(status_code=204)


# --- Courts ---


@router.get("/courts", response_model=list[CourtResponse])
async def list_courts(user: User = Depends(require_user)):
    async with async_session_factory() as session:
        result = await session.execute(select(Court).order_by(Court.name))
        return result.scalars().all()


@router.get("/courts/{court_id}", response_model=CourtResponse)
async def get_court(court_id: int, user: User = Depends(require_user)):
    async with async_session_factory() as session:
        return await _get_or_404(session, Court, court_id, "Court")


@router.post("/courts", response_model=CourtResponse, status_code=201)
async def create_court(body: CourtCreate, user: User = Depends(require_admin_user)):
    async with async_session_factory() as session:
        if await _name_taken(session, Court.name, body.name):
            raise HTTPException(409, f"Court with name '{body.name}' already exists")
        c = Court(**body.model_dump())
        session.add(c)
        await session.commit()
        return c


@router.put("/courts/{court_id}", response_model=CourtResponse)
async def update_court(court_id: int, body: CourtUpdate, user: User = Depends(require_admin_user)):
    async with async_session_factory() as session:
        c = await _get_or_404(session, Court, court_id, "Court")
        updates = body.model_dump(exclude_unset=True)
        if updates.get("name") and await _name_taken(session, Court.name, updates["name"], exclude_id=c.id):
            raise HTTPException(409, f"Court with name '{updates['name']}' already exists")
        for key, value in updates.items():
            setattr(c, key, value)
        await session.commit()
        return c


@router.delete("/courts/{court_id}", status_code=204)
async def delete_court(court_id: int, user: User = Depends(require_admin_user)):
    async with async_session_factory() as session:
        c = await _get_or_404(session, Court, court_id, "Court")
        # Matches on this court become unassigned
        await session.execute(update(Match).where(Match.court_id == c.id).values(court_id=None))
        await session.delete(c)
        await session.commit()
    return Response(status_code=204)


# --- Registrations ---


@router.post("/registrations", response_model=RegistrationResponse, status_code=201)
async def create_registration(body: RegistrationCreate, user: User = Depends(require_admin_user)):
    """Register a player for a category. One registration per player and category."""
    async with async_session_factory() as session:
        await _get_or_404(session, Tournament, body.tournament_id, "Tournament")
        await _get_or_404(session, Player, body.player_id, "Player")
        category = await session.get(Category, body.category_id)
        if not category or category.tournament_id != body.tournament_id:
            raise HTTPException(404, "Category not found for tournament")
        dup = await session.execute(
            select(Registration.id).where(
                Registration.category_id == body.category_id,
                Registration.player_id == body.player_id,
            )
        )
        if dup.first() is not None:
            raise HTTPException(409, "Player is already registered for this tournament in this category")
        if category.max_participants is not None:
            count = await session.scalar(
                select(func.count(Registration.id)).where(Registration.category_id == category.id)
            )
            if count >= category.max_participants:
                raise HTTPException(400, "Category is full")
        reg = Registration(**body.model_dump())
        session.add(reg)
        await session.commit()
        return reg


@router.get("/registrations/{registration_id}", response_model=RegistrationResponse)
async def get_registration(registration_id: int, user: User = Depends(require_user)):
    async with async_session_factory() as session:
        return await _get_or_404(session, Registration, registration_id, "Registration")


@router.get("/categories/{category_id}/registrations", response_model=list[RegistrationResponse])
async def list_category_registrations(category_id: int, user: User = Depends(require_user)):
    """Registrations of a category in the order they were made."""
    async with async_session_factory() as session:
        await _get_or_404(session, Category, category_id, "Category")
        result = await session.execute(
            select(Registration).where(Registration.category_id == category_id).order_by(Registration.id)
        )
        return result.scalars().all()


@router.delete("/registrations/{registration_id}", status_code=204)
async def delete_registration(registration_id: int, user: User = Depends(require_admin_user)):
    """Withdraw a registration. Not allowed once the category has a bracket."""
    async with async_session_factory() as session:
        reg = await _get_or_404(session, Registration, registration_id, "Registration")
        drawn = await session.scalar(select(exists().where(Match.category_id == reg.category_id)))
        if drawn:
            raise HTTPException(409, "Category already has a bracket; delete the draft bracket first")
        await session.delete(reg)
        await session.commit()
    return Response(status_code=204)


# --- Matches ---


@router.get("/matches/{match_id}", response_model=MatchDto)
async def get_match(match_id: int, user: User = Depends(require_user)):
    async with async_session_factory() as session:
        return await _get_or_404(session, Match, match_id, "Match")


@router.patch("/matches/{match_id}", response_model=MatchDto)
async def update_match(match_id: int, body: MatchUpdate, user: User = Depends(require_admin_user)):
    """Assign court and start time, or move the match status. Participants are never changed here."""
    async with async_session_factory() as session:
        m = await _get_or_404(session, Match, match_id, "Match")
        updates = body.model_dump(exclude_unset=True)
        if updates.get("court_id") is not None:
            await _get_or_404(session, Court, updates["court_id"], "Court")
        if "status" in updates:
            updates["status"] = updates["status"].value
        for key, value in updates.items():
            setattr(m, key, value)
        await session.commit()
        logger.info("Updated match %s: %s", m.id, ", ".join(sorted(updates)))
        return m
