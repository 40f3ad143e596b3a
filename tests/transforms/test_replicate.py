"""Tests for the replicate transform."""

from collections import Counter

import pytest

from channel_lineup.errors import InvalidScheduleError
from channel_lineup.lineup.entries import FlexEntry, ProgramEntry
from channel_lineup.transforms import replicate

LINEUP = [ProgramEntry("a", 10), FlexEntry(5), ProgramEntry("b", 20)]


def test_fixed_repeats_in_order():
    assert replicate(LINEUP, 3) == LINEUP * 3


def test_random_is_a_permutation(rng):
    result = replicate(LINEUP, 4, mode="random", rng=rng)

    assert len(result) == 12
    assert Counter(result) == Counter(LINEUP * 4)


def test_random_is_reproducible():
    assert replicate(LINEUP, 5, mode="random", seed=9) == replicate(LINEUP, 5, mode="random", seed=9)


def test_zero_copies():
    assert replicate(LINEUP, 0) == []


def test_input_not_mutated():
    lineup = list(LINEUP)
    replicate(lineup, 2, mode="random", seed=1)

    assert lineup == LINEUP


@pytest.mark.parametrize("count, mode", [(-1, "fixed"), (2, "sideways")])
def test_invalid_arguments(count, mode):
    with pytest.raises(InvalidScheduleError):
        replicate(LINEUP, count, mode=mode)
