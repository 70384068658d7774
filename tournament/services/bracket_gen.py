"""Bracket generation service: single-elimination draws for a tournament category."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from tournament.models import Category, Match, MatchStatus, TournamentFormat
from tournament.schemas import BracketSummaryResponse, DrawGenerateRequest, MatchDto
from tournament.services.bracket_store import BracketStore
from tournament.services.errors import (
    BracketAlreadyExistsError,
    BracketCorruptedError,
    CategoryNotFoundError,
    InsufficientParticipantsError,
    InvalidRequestError,
)
from tournament.services.seeding import build_seed_map, order_by_seed
from tournament.services.topology import BracketTopology

logger = logging.getLogger("courtside.bracket")

MatchGrid = Dict[Tuple[int, int], Match]


def _bye_winner(m: Match) -> Optional[int]:
    """Registration id of the only participant of a BYE match."""
    if m.participant1_registration_id is not None:
        return m.participant1_registration_id
    return m.participant2_registration_id


def _assign_side(m: Match, side: Optional[int], registration_id: int) -> None:
    """Put registration on side 1 or 2 of match."""
    if side == 1:
        m.participant1_registration_id = registration_id
    else:
        m.participant2_registration_id = registration_id


def _has_progressed(m: Match) -> bool:
    """True once a match is past draft state. BYEs completed at generation don't count."""
    if m.status == MatchStatus.SCHEDULED.value:
        return False
    return not (m.round == 1 and m.bye and m.status == MatchStatus.COMPLETED.value)


def _plan_matches(category_id: int, topology: BracketTopology, ordered: Sequence[int]) -> MatchGrid:
    """Build every match of the bracket in memory, round 1 filled with mirror pairing."""
    grid: MatchGrid = {}
    for r, pos in topology.positions():
        ref = topology.next_ref(r, pos)
        grid[(r, pos)] = Match(
            category_id=category_id,
            round=r,
            position=pos,
            bye=False,
            status=MatchStatus.SCHEDULED.value,
            winner_advances_as=ref.side if ref else None,
        )

    n = len(ordered)
    for pos in range(topology.matches_in(1)):
        m = grid[(1, pos)]
        slot1, slot2 = topology.round1_slots(pos)
        m.participant1_registration_id = ordered[slot1] if slot1 < n else None
        m.participant2_registration_id = ordered[slot2] if slot2 < n else None
        # Exactly one side vacant; both vacant is impossible for n >= 2
        m.bye = (m.participant1_registration_id is None) != (m.participant2_registration_id is None)
    return grid


def _summary(
    category_id: int,
    matches: Iterable[Match],
    topology: Optional[BracketTopology] = None,
) -> BracketSummaryResponse:
    dtos = [MatchDto.model_validate(m) for m in matches]
    if topology is None and dtos:
        first_round = [d for d in dtos if d.round == 1]
        topology = BracketTopology(
            participants=sum(
                (d.participant1_registration_id is not None) + (d.participant2_registration_id is not None)
                for d in first_round
            ),
            size=len(dtos) + 1,
            rounds=max(d.round for d in dtos),
        )
    return BracketSummaryResponse(
        category_id=category_id,
        total_participants=topology.participants if topology else None,
        effective_size=topology.size if topology else None,
        rounds=topology.rounds if topology else None,
        matches=dtos,
    )


async def _load_draw_inputs(
    store: BracketStore,
    tournament_id: int,
    category_id: int,
    request: DrawGenerateRequest,
    lock: bool = False,
) -> Tuple[Category, dict]:
    category = await store.find_category(category_id, tournament_id, lock=lock)
    if not category:
        raise CategoryNotFoundError(f"Category {category_id} not found for tournament {tournament_id}")
    if category.format != TournamentFormat.SINGLE_ELIMINATION.value:
        raise InvalidRequestError(f"Category format {category.format} is not single elimination")
    return category, build_seed_map(request.seeds)


async def _ordered_participants(store: BracketStore, category_id: int, seed_map: dict) -> List[int]:
    registrations = await store.list_registrations(category_id)
    if len(registrations) < 2:
        raise InsufficientParticipantsError("At least two registrations are required")
    return order_by_seed([r.id for r in registrations], seed_map)


async def _delete_matches(store: BracketStore, category_id: int) -> int:
    """Delete the whole bracket of a category unless it has progressed. Returns matches deleted."""
    matches = await store.list_matches(category_id)
    if any(_has_progressed(m) for m in matches):
        raise BracketAlreadyExistsError("Bracket has progressed past draft and cannot be removed")
    # Ascending round order: each match is deleted before the match it points to
    for m in matches:
        await store.delete_match(m)
    return len(matches)


async def _create_single_elim_matches(
    store: BracketStore, category_id: int, ordered: Sequence[int]
) -> BracketSummaryResponse:
    topology = BracketTopology.for_participants(len(ordered))
    grid = _plan_matches(category_id, topology, ordered)

    # Pass 1: insert every match round by round so ids exist
    for key in sorted(grid):
        grid[key] = await store.save_match(grid[key])

    # Pass 2: forward links
    for (r, pos), m in grid.items():
        ref = topology.next_ref(r, pos)
        if ref is None:
            continue
        target = grid.get((ref.round, ref.position))
        if target is None or target.id is None:
            raise BracketCorruptedError(f"Next match of round {r} position {pos} was not created")
        m.next_match_id = target.id
        await store.save_match(m)

    # BYE auto-advance: the lone participant wins and takes its side of the next match
    for pos in range(topology.matches_in(1)):
        m = grid[(1, pos)]
        if not m.bye:
            continue
        winner = _bye_winner(m)
        m.status = MatchStatus.COMPLETED.value
        await store.save_match(m)
        if m.next_match_id is None or winner is None:
            continue
        target = await store.get_match(m.next_match_id)
        if target is None:
            raise BracketCorruptedError(f"Broken bracket: next match {m.next_match_id} missing")
        _assign_side(target, m.winner_advances_as, winner)
        await store.save_match(target)

    matches = await store.list_matches(category_id)
    if len(matches) != topology.total_matches:
        raise BracketCorruptedError(
            f"Expected {topology.total_matches} matches, storage holds {len(matches)}"
        )
    return _summary(category_id, matches, topology)


async def generate_single_elimination(
    session: AsyncSession,
    tournament_id: int,
    category_id: int,
    request: Optional[DrawGenerateRequest] = None,
) -> BracketSummaryResponse:
    """Create the single-elimination bracket of a category in one transaction.

    Seeded registrations take the first slots in seed order, the rest follow in
    registration order. Round-1 match i pairs slot i with slot E-1-i, so BYEs fall to
    the top slots. BYE matches are completed immediately and their winner moved on.
    With ``overwrite_if_draft`` an existing, unplayed bracket is replaced.
    Any failure rolls back everything, including the removal of an old bracket.
    """
    req = request or DrawGenerateRequest()
    store = BracketStore(session)
    try:
        category, seed_map = await _load_draw_inputs(store, tournament_id, category_id, req, lock=True)
        if await store.has_matches(category.id):
            if not req.overwrite_if_draft:
                raise BracketAlreadyExistsError(
                    "Bracket already exists. Set overwriteIfDraft=true to recreate (draft only)."
                )
            removed = await _delete_matches(store, category.id)
            logger.info("Removed draft bracket of category %s (%d matches)", category.id, removed)
        ordered = await _ordered_participants(store, category.id, seed_map)
        summary = await _create_single_elim_matches(store, category.id, ordered)
    except Exception:
        await session.rollback()
        raise
    await session.commit()
    logger.info(
        "Generated bracket for category %s: %d participants, size %d, %d rounds",
        category_id,
        summary.total_participants,
        summary.effective_size,
        summary.rounds,
    )
    return summary


async def preview_single_elimination(
    session: AsyncSession,
    tournament_id: int,
    category_id: int,
    request: Optional[DrawGenerateRequest] = None,
) -> BracketSummaryResponse:
    """Return the bracket generation would create, without writing anything. Match ids are null."""
    req = request or DrawGenerateRequest()
    store = BracketStore(session)
    category, seed_map = await _load_draw_inputs(store, tournament_id, category_id, req)
    ordered = await _ordered_participants(store, category.id, seed_map)
    return preview_bracket_structure(category.id, ordered)


def preview_bracket_structure(category_id: int, ordered: Sequence[int]) -> BracketSummaryResponse:
    """Same shape as get_bracket, computed in memory from already ordered registration ids."""
    topology = BracketTopology.for_participants(len(ordered))
    grid = _plan_matches(category_id, topology, ordered)
    for pos in range(topology.matches_in(1)):
        m = grid[(1, pos)]
        if not m.bye:
            continue
        m.status = MatchStatus.COMPLETED.value
        ref = topology.next_ref(1, pos)
        winner = _bye_winner(m)
        if ref is not None and winner is not None:
            _assign_side(grid[(ref.round, ref.position)], ref.side, winner)
    return _summary(category_id, (grid[k] for k in sorted(grid)), topology)


async def get_bracket(session: AsyncSession, category_id: int) -> BracketSummaryResponse:
    """Current bracket of a category, matches ordered by (round, position)."""
    store = BracketStore(session)
    category = await store.get_category(category_id)
    if not category:
        raise CategoryNotFoundError(f"Category {category_id} not found")
    matches = await store.list_matches(category_id)
    return _summary(category_id, matches)


async def delete_draft_bracket(session: AsyncSession, category_id: int) -> int:
    """Remove every match of a category's unplayed bracket. Returns the number deleted."""
    store = BracketStore(session)
    try:
        category = await store.get_category(category_id)
        if not category:
            raise CategoryNotFoundError(f"Category {category_id} not found")
        deleted = await _delete_matches(store, category_id)
    except Exception:
        await session.rollback()
        raise
    await session.commit()
    logger.info("Deleted draft bracket of category %s (%d matches)", category_id, deleted)
    return deleted
