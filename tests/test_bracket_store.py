"""Tests for the bracket storage wrapper."""
import pytest

from tournament.models import Match
from tournament.services.bracket_store import BracketStore
from tournament.services.errors import BracketAlreadyExistsError


@pytest.mark.asyncio
async def test_duplicate_round_position_rejected(session, make_category):
    _, cid, _ = await make_category(2)
    store = BracketStore(session)
    await store.save_match(Match(category_id=cid, round=1, position=0))
    with pytest.raises(BracketAlreadyExistsError):
        await store.save_match(Match(category_id=cid, round=1, position=0))
    await session.rollback()


@pytest.mark.asyncio
async def test_list_matches_ordered(session, make_category):
    _, cid, _ = await make_category(4)
    store = BracketStore(session)
    for r, pos in [(2, 0), (1, 1), (1, 0)]:
        await store.save_match(Match(category_id=cid, round=r, position=pos))
    assert await store.has_matches(cid)
    assert [(m.round, m.position) for m in await store.list_matches(cid)] == [(1, 0), (1, 1), (2, 0)]
    assert not await store.has_matches(cid + 1)
    await session.rollback()


@pytest.mark.asyncio
async def test_find_category_scoped_by_tournament(session, make_category):
    tid, cid, regs = await make_category(3)
    store = BracketStore(session)
    assert (await store.find_category(cid, tid, lock=True)).id == cid
    assert await store.find_category(cid, tid + 1) is None
    assert [r.id for r in await store.list_registrations(cid)] == regs
