"""Single-elimination bracket structure: size, rounds, round-1 pairing and progression."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, NamedTuple, Optional, Tuple


def next_power_of_2(n: int) -> int:
    """Round up to next power of 2."""
    p = 1
    while p < n:
        p *= 2
    return p


class NextRef(NamedTuple):
    """Where the winner of a match plays next."""

    round: int
    position: int
    side: int  # 1 or 2


@dataclass(frozen=True)
class BracketTopology:
    """Shape of a bracket for ``participants`` entrants.

    ``size`` is the effective size E (next power of two), ``rounds`` is log2(E).
    Round ``r`` holds E / 2**r matches.
    """

    participants: int
    size: int
    rounds: int

    @classmethod
    def for_participants(cls, n: int) -> "BracketTopology":
        if n < 2:
            raise ValueError(f"A bracket needs at least 2 participants, got {n}")
        size = next_power_of_2(n)
        return cls(participants=n, size=size, rounds=size.bit_length() - 1)

    @property
    def byes(self) -> int:
        return self.size - self.participants

    @property
    def total_matches(self) -> int:
        return self.size - 1

    def matches_in(self, round_num: int) -> int:
        if not 1 <= round_num <= self.rounds:
            raise ValueError(f"Round {round_num} outside 1..{self.rounds}")
        return self.size >> round_num

    def round1_opponent(self, slot: int) -> int:
        """Slot i meets slot E-1-i in round 1."""
        return self.size - 1 - slot

    def round1_slots(self, position: int) -> Tuple[int, int]:
        """(side 1 slot, side 2 slot) of round-1 match ``position``."""
        return position, self.round1_opponent(position)

    def next_ref(self, round_num: int, position: int) -> Optional[NextRef]:
        """Next match for the winner, or None for the final."""
        if round_num >= self.rounds:
            return None
        return next_ref(round_num, position)

    def positions(self) -> Iterator[Tuple[int, int]]:
        """Every (round, position) in ascending order."""
        for r in range(1, self.rounds + 1):
            for pos in range(self.matches_in(r)):
                yield r, pos


def next_ref(round_num: int, position: int) -> NextRef:
    """Winner of (round, position) plays (round+1, position // 2), side 1 if position is even else 2."""
    return NextRef(round_num + 1, position // 2, 1 if position % 2 == 0 else 2)
