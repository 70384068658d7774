"""Seed ordering: seeded registrations first by seed number, then the rest in entry order."""
from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from tournament.schemas import SeedEntry
from tournament.services.errors import InvalidSeedsError


def build_seed_map(seeds: Optional[Iterable[SeedEntry]]) -> dict[int, int]:
    """Return {registration_id: seed_number}. Raises InvalidSeedsError on duplicates or seeds below 1."""
    seed_map: dict[int, int] = {}
    used_numbers: set[int] = set()
    for entry in seeds or ():
        if entry.seed_number < 1:
            raise InvalidSeedsError(f"Seed number must be at least 1, got {entry.seed_number}")
        if entry.seed_number in used_numbers:
            raise InvalidSeedsError(f"Duplicate seed number: {entry.seed_number}")
        if entry.registration_id in seed_map:
            raise InvalidSeedsError(f"Registration {entry.registration_id} is seeded more than once")
        used_numbers.add(entry.seed_number)
        seed_map[entry.registration_id] = entry.seed_number
    return seed_map


def order_by_seed(
    registration_ids: Sequence[int], seed_map: Optional[Mapping[int, int]] = None
) -> list[int]:
    """Seeded ids sorted by seed number, followed by unseeded ids in input order.

    Seeds for ids not in ``registration_ids`` are ignored.
    """
    if not seed_map:
        return list(registration_ids)
    seeded = [r for r in registration_ids if r in seed_map]
    unseeded = [r for r in registration_ids if r not in seed_map]
    seeded.sort(key=seed_map.__getitem__)
    return seeded + unseeded
