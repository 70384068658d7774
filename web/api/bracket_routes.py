"""Bracket API routes: generate, preview, read and delete a category's draw."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Response

from tournament.models import User
from tournament.models.base import async_session_factory
from tournament.schemas import BracketSummaryResponse, DrawGenerateRequest
from tournament.services.bracket_gen import (
    delete_draft_bracket,
    generate_single_elimination,
    get_bracket,
    preview_single_elimination,
)
from web.auth import require_admin_user, require_user

router = APIRouter(prefix="/api/v1", tags=["brackets"])


@router.post(
    "/tournaments/{tournament_id}/categories/{category_id}/draw:generate",
    response_model=BracketSummaryResponse,
)
async def generate_draw(
    tournament_id: int,
    category_id: int,
    body: Optional[DrawGenerateRequest] = Body(None),
    user: User = Depends(require_admin_user),
):
    """Generate the single-elimination bracket of a category (admin only)."""
    async with async_session_factory() as session:
        return await generate_single_elimination(session, tournament_id, category_id, body)


@router.post(
    "/tournaments/{tournament_id}/categories/{category_id}/draw:preview",
    response_model=BracketSummaryResponse,
)
async def preview_draw(
    tournament_id: int,
    category_id: int,
    body: Optional[DrawGenerateRequest] = Body(None),
    user: User = Depends(require_user),
):
    """Show the bracket generation would create, without saving it."""
    async with async_session_factory() as session:
        return await preview_single_elimination(session, tournament_id, category_id, body)


@router.get("/categories/{category_id}/bracket", response_model=BracketSummaryResponse)
async def read_bracket(category_id: int, user: User = Depends(require_user)):
    """Current bracket, matches ordered by round then position."""
    async with async_session_factory() as session:
        return await get_bracket(session, category_id)


@router.delete("/categories/{category_id}/bracket", status_code=204)
async def remove_draft_bracket(
    category_id: int,
    draft: bool = True,
    user: User = Depends(require_admin_user),
):
    """Delete an unplayed bracket (admin only). Only draft deletion is supported."""
    if not draft:
        raise HTTPException(400, "Only draft brackets can be deleted (draft=true)")
    async with async_session_factory() as session:
        await delete_draft_bracket(session, category_id)
    return Response(status_code=204)
