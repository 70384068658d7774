"""Tests for bracket topology: sizes, pairing and progression."""
import pytest

from tournament.services.topology import BracketTopology, NextRef, next_power_of_2, next_ref


@pytest.mark.parametrize(
    "n, expected",
    [(1, 1), (2, 2), (3, 4), (4, 4), (5, 8), (8, 8), (9, 16), (17, 32)],
)
def test_next_power_of_2(n, expected):
    assert next_power_of_2(n) == expected


def test_five_participants():
    topo = BracketTopology.for_participants(5)
    assert (topo.size, topo.rounds, topo.byes, topo.total_matches) == (8, 3, 3, 7)
    assert [topo.matches_in(r) for r in (1, 2, 3)] == [4, 2, 1]


def test_two_participants_single_final():
    topo = BracketTopology.for_participants(2)
    assert (topo.size, topo.rounds) == (2, 1)
    assert list(topo.positions()) == [(1, 0)]
    assert topo.next_ref(1, 0) is None


def test_rejects_fewer_than_two():
    with pytest.raises(ValueError):
        BracketTopology.for_participants(1)


def test_round1_mirror_pairing():
    topo = BracketTopology.for_participants(8)
    assert [topo.round1_slots(i) for i in range(4)] == [(0, 7), (1, 6), (2, 5), (3, 4)]
    assert topo.round1_opponent(7) == 0


def test_next_ref_side_by_parity():
    assert next_ref(1, 0) == NextRef(2, 0, 1)
    assert next_ref(1, 1) == NextRef(2, 0, 2)
    assert next_ref(1, 6) == NextRef(2, 3, 1)
    assert next_ref(2, 3) == NextRef(3, 1, 2)


def test_matches_in_out_of_range():
    topo = BracketTopology.for_participants(4)
    with pytest.raises(ValueError):
        topo.matches_in(3)


@pytest.mark.parametrize("n", range(2, 34))
def test_every_next_match_gets_one_side1_and_one_side2(n):
    topo = BracketTopology.for_participants(n)
    positions = list(topo.positions())
    assert len(positions) == topo.size - 1
    feeds = {}
    for r, pos in positions:
        ref = topo.next_ref(r, pos)
        if r == topo.rounds:
            assert ref is None
            continue
        assert (ref.round, ref.position) in positions
        feeds.setdefault((ref.round, ref.position), []).append(ref.side)
    for sides in feeds.values():
        assert sorted(sides) == [1, 2]
