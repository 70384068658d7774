"""Tests for seed ordering and seed map validation."""
import pytest

from tournament.schemas import SeedEntry
from tournament.services.errors import InvalidSeedsError
from tournament.services.seeding import build_seed_map, order_by_seed


def test_no_seeds_keeps_input_order():
    regs = [5, 3, 9, 1]
    assert order_by_seed(regs, {}) == regs
    assert order_by_seed(regs, None) == regs


def test_no_seeds_returns_copy():
    regs = [1, 2]
    out = order_by_seed(regs)
    out.append(3)
    assert regs == [1, 2]


def test_seeded_first_then_unseeded_in_input_order():
    # A=1, B=2, C=3, D=4; C is seed 1, A is seed 2
    assert order_by_seed([1, 2, 3, 4], {3: 1, 1: 2}) == [3, 1, 2, 4]


def test_seed_numbers_need_not_be_contiguous():
    assert order_by_seed([10, 20, 30, 40], {40: 7, 20: 3}) == [20, 40, 10, 30]


def test_unknown_registrations_in_seed_map_are_ignored():
    assert order_by_seed([1, 2, 3], {99: 1, 2: 2}) == [2, 1, 3]


def test_build_seed_map():
    seeds = [SeedEntry(registration_id=7, seed_number=2), SeedEntry(registration_id=9, seed_number=1)]
    assert build_seed_map(seeds) == {7: 2, 9: 1}


def test_build_seed_map_empty():
    assert build_seed_map(None) == {}
    assert build_seed_map([]) == {}


def test_duplicate_seed_number_rejected():
    seeds = [SeedEntry(registration_id=7, seed_number=1), SeedEntry(registration_id=9, seed_number=1)]
    with pytest.raises(InvalidSeedsError, match="Duplicate seed number: 1"):
        build_seed_map(seeds)


def test_seed_number_below_one_rejected():
    with pytest.raises(InvalidSeedsError):
        build_seed_map([SeedEntry(registration_id=7, seed_number=0)])


def test_same_registration_seeded_twice_rejected():
    seeds = [SeedEntry(registration_id=7, seed_number=1), SeedEntry(registration_id=7, seed_number=2)]
    with pytest.raises(InvalidSeedsError):
        build_seed_map(seeds)


def test_seed_entry_accepts_camel_case():
    entry = SeedEntry.model_validate({"registrationId": 4, "seedNumber": 3})
    assert (entry.registration_id, entry.seed_number) == (4, 3)
