"""Storage used by the bracket engine. Wraps one AsyncSession; the caller owns the transaction."""
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tournament.models import Category, Match, Registration
from tournament.services.errors import BracketAlreadyExistsError, StorageFailureError

logger = logging.getLogger("courtside.store")


class BracketStore:
    """Category, registration and match access for bracket generation.

    Writes are flushed, never committed.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_category(
        self, category_id: int, tournament_id: int, lock: bool = False
    ) -> Optional[Category]:
        """Category scoped by tournament. ``lock`` takes a row lock where the database supports it."""
        stmt = select(Category).where(
            Category.id == category_id,
            Category.tournament_id == tournament_id,
        )
        if lock:
            stmt = stmt.with_for_update()
        result = await self._execute(stmt)
        return result.scalar_one_or_none()

    async def get_category(self, category_id: int) -> Optional[Category]:
        try:
            return await self.session.get(Category, category_id)
        except SQLAlchemyError as exc:
            raise StorageFailureError("Failed to load category") from exc

    async def list_registrations(self, category_id: int) -> List[Registration]:
        """Registrations of the category in insertion order."""
        result = await self._execute(
            select(Registration)
            .where(Registration.category_id == category_id)
            .order_by(Registration.id)
        )
        return list(result.scalars().all())

    async def has_matches(self, category_id: int) -> bool:
        result = await self._execute(
            select(exists().where(Match.category_id == category_id))
        )
        return bool(result.scalar())

    async def list_matches(self, category_id: int) -> List[Match]:
        """Matches of the category ordered by (round, position)."""
        result = await self._execute(
            select(Match)
            .where(Match.category_id == category_id)
            .order_by(Match.round, Match.position)
        )
        return list(result.scalars().all())

    async def get_match(self, match_id: int) -> Optional[Match]:
        try:
            return await self.session.get(Match, match_id)
        except SQLAlchemyError as exc:
            raise StorageFailureError("Failed to load match") from exc

    async def save_match(self, match: Match) -> Match:
        """Insert or update. Identity is assigned on the first save."""
        self.session.add(match)
        await self._flush()
        return match

    async def delete_match(self, match: Match) -> None:
        await self.session.delete(match)
        await self._flush()

    async def _execute(self, stmt):
        try:
            return await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.exception("Bracket query failed")
            raise StorageFailureError("Storage query failed") from exc

    async def _flush(self) -> None:
        try:
            await self.session.flush()
        except IntegrityError as exc:
            # Another generator inserted the same (category, round, position)
            raise BracketAlreadyExistsError("Bracket is being generated concurrently") from exc
        except SQLAlchemyError as exc:
            logger.exception("Bracket write failed")
            raise StorageFailureError("Storage write failed") from exc
