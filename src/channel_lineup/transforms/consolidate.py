"""Merge adjacent filler and redirect runs."""

from typing import Iterable, List

from channel_lineup.lineup.entries import (
    FlexEntry,
    LineupEntry,
    RedirectEntry,
    validate_entries,
)


def consolidate(entries: Iterable[LineupEntry]) -> List[LineupEntry]:
    """
    Merge maximal runs of flex, and of redirects to the same channel.

    Program entries never merge. Applying this twice gives the same result
    as applying it once.

    Args:
        entries: Lineup to consolidate

    Returns:
        New lineup with the same total duration
    """
    result: List[LineupEntry] = []
    for entry in validate_entries(entries):
        previous = result[-1] if result else None
        if isinstance(entry, FlexEntry) and isinstance(previous, FlexEntry):
            result[-1] = FlexEntry(previous.duration_ms + entry.duration_ms)
        elif (
            isinstance(entry, RedirectEntry)
            and isinstance(previous, RedirectEntry)
            and previous.target_channel_id == entry.target_channel_id
        ):
            result[-1] = RedirectEntry(entry.target_channel_id, previous.duration_ms + entry.duration_ms)
        else:
            result.append(entry)
    return result
