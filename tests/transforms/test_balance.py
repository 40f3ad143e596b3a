"""Tests for the balance transform."""

from collections import Counter

import pytest

from channel_lineup.errors import InvalidScheduleError
from channel_lineup.lineup.entries import FlexEntry, ProgramEntry
from channel_lineup.transforms import balance


def _totals(entries, by="duration"):
    totals = Counter()
    for entry in entries:
        if isinstance(entry, ProgramEntry):
            totals[entry.group_key or entry.program_id] += entry.duration_ms if by == "duration" else 1
    return totals


def test_balance_by_count_equalizes():
    entries = [
        ProgramEntry("a1", 10, "a"), ProgramEntry("a2", 10, "a"), ProgramEntry("a3", 10, "a"),
        ProgramEntry("b1", 30, "b"),
    ]

    result = balance(entries, by="program_count")

    assert result[:4] == entries
    assert result[4:] == [ProgramEntry("b1", 30, "b")] * 2
    assert set(_totals(result, "program_count").values()) == {3}


def test_balance_by_duration_within_longest_program():
    entries = [
        ProgramEntry("a1", 100, "a"), ProgramEntry("a2", 100, "a"), ProgramEntry("a3", 100, "a"),
        ProgramEntry("b1", 40, "b"), ProgramEntry("b2", 25, "b"),
        FlexEntry(5),
    ]

    result = balance(entries)

    totals = _totals(result)
    assert max(totals.values()) - min(totals.values()) <= 100
    # b's programs are cycled in lineup order
    assert result[6:8] == [ProgramEntry("b1", 40, "b"), ProgramEntry("b2", 25, "b")]


def test_balance_custom_tolerance():
    entries = [ProgramEntry("a1", 100, "a"), ProgramEntry("b1", 10, "b")]

    result = balance(entries, tolerance=0)

    assert _totals(result) == {"a": 100, "b": 100}


def test_groups_fall_back_to_program_id():
    entries = [ProgramEntry("x", 10), ProgramEntry("x", 10), ProgramEntry("y", 10)]

    result = balance(entries, by="program_count")

    assert result[-1] == ProgramEntry("y", 10)
    assert len(result) == 4


def test_never_removes_entries():
    entries = [ProgramEntry("a", 10, "g"), FlexEntry(1)]

    assert balance(entries) == entries


def test_iteration_cap_warns(log_capture):
    entries = [ProgramEntry("a1", 1000, "a"), ProgramEntry("b1", 1, "b")]

    result = balance(entries, tolerance=0, iteration_cap=5)

    assert len(result) == 7
    assert "Balancing stopped" in log_capture.text


def test_zero_length_group_is_left_out(log_capture):
    entries = [ProgramEntry("a", 0, "A"), ProgramEntry("b", 60_000, "B")]

    assert balance(entries, by="duration", tolerance=0) == entries
    assert "Balancing stopped" not in log_capture.text


def test_zero_length_group_does_not_block_others():
    entries = [
        ProgramEntry("z", 0, "Z"),
        ProgramEntry("a1", 100, "a"),
        ProgramEntry("b1", 50, "b"),
    ]

    result = balance(entries, tolerance=0)

    assert result[3:] == [ProgramEntry("b1", 50, "b")]
    assert _totals(result)["a"] == _totals(result)["b"] == 100


def test_invalid_mode():
    with pytest.raises(InvalidScheduleError):
        balance([], by="rating")
