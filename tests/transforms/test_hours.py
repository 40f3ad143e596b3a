"""Tests for the restrict hours transform."""

from channel_lineup.lineup.entries import FlexEntry, ProgramEntry, RedirectEntry
from channel_lineup.transforms import restrict_hours

MINUTE = 60_000
HOUR = 60 * MINUTE
DAY = 24 * HOUR
MIDNIGHT = 1_704_067_200_000


def _starts(start_time, entries):
    t = start_time
    for entry in entries:
        yield t, entry
        t += entry.duration_ms


def test_entries_stay_inside_window():
    entries = [ProgramEntry(f"p{i}", 50 * MINUTE) for i in range(10)]

    result = restrict_hours(entries, 18 * HOUR, 21 * HOUR, now=MIDNIGHT + 5 * HOUR)

    assert result.new_start_time == MIDNIGHT + 18 * HOUR
    programs = 0
    for start, entry in _starts(result.new_start_time, result.entries):
        if isinstance(entry, FlexEntry):
            continue
        offset = (start - MIDNIGHT) % DAY
        assert 18 * HOUR <= offset
        assert offset + entry.duration_ms <= 21 * HOUR
        programs += 1
    assert programs == 10


def test_skip_flex_covers_rest_of_period():
    entries = [ProgramEntry("a", 2 * HOUR), ProgramEntry("b", 2 * HOUR)]

    result = restrict_hours(entries, 0, 3 * HOUR, now=MIDNIGHT)

    # One hour left in the window plus the 21 hours outside it
    assert result.entries == [ProgramEntry("a", 2 * HOUR), FlexEntry(22 * HOUR), ProgramEntry("b", 2 * HOUR)]


def test_window_crossing_midnight():
    entries = [ProgramEntry("a", HOUR), RedirectEntry("news", 2 * HOUR)]

    result = restrict_hours(entries, 23 * HOUR, 26 * HOUR, now=MIDNIGHT)

    assert result.new_start_time == MIDNIGHT + 23 * HOUR
    assert result.entries == entries


def test_flex_and_long_entries_dropped():
    entries = [FlexEntry(HOUR), ProgramEntry("long", 5 * HOUR), ProgramEntry("short", HOUR)]

    result = restrict_hours(entries, 0, 2 * HOUR, now=MIDNIGHT)

    assert result.entries == [ProgramEntry("short", HOUR)]


def test_no_survivors():
    result = restrict_hours([FlexEntry(HOUR), ProgramEntry("long", 5 * HOUR)], 0, HOUR, now=MIDNIGHT)

    assert result.new_start_time is None
    assert result.entries == []


def test_invalid_window_is_noop():
    entries = [ProgramEntry("a", HOUR), FlexEntry(HOUR)]

    for start, end in [(5 * HOUR, 5 * HOUR), (5 * HOUR, 4 * HOUR), (-1, HOUR), (0, DAY + 1), (DAY + 1, DAY + 2)]:
        result = restrict_hours(entries, start, end, now=MIDNIGHT)
        assert result.new_start_time is None
        assert result.entries == entries
