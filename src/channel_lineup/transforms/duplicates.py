"""Remove repeated programs and redirects from a lineup."""

from typing import Iterable, List, Set, Tuple

from channel_lineup.lineup.entries import (
    LineupEntry,
    ProgramEntry,
    RedirectEntry,
    validate_entries,
)


def remove_duplicates(entries: Iterable[LineupEntry]) -> List[LineupEntry]:
    """
    Keep the first occurrence of each program and redirect target.

    All flex is dropped.
    """
    seen: Set[Tuple[str, str]] = set()
    result: List[LineupEntry] = []
    for entry in validate_entries(entries):
        if isinstance(entry, ProgramEntry):
            key = ("program", entry.program_id)
        elif isinstance(entry, RedirectEntry):
            key = ("redirect", entry.target_channel_id)
        else:
            continue
        if key in seen:
            continue
        seen.add(key)
        result.append(entry)
    return result
