"""Even out airtime between the groups of a lineup."""

from typing import Dict, Iterable, List, Literal, Optional

from channel_lineup.config import get_settings
from channel_lineup.errors import InvalidScheduleError
from channel_lineup.lineup.entries import LineupEntry, ProgramEntry, validate_entries
from channel_lineup.logging.config import get_logger

logger = get_logger(__name__)

BalanceBy = Literal["duration", "program_count"]


def group_of(entry: ProgramEntry) -> str:
    """Balancing group of a program entry: its group key, else its program id."""
    return entry.group_key or entry.program_id


def balance(
    entries: Iterable[LineupEntry],
    by: BalanceBy = "duration",
    tolerance: Optional[int] = None,
    iteration_cap: Optional[int] = None,
) -> List[LineupEntry]:
    """
    Append programs to under-represented groups until groups are even.

    Groups are compared by total duration or by program count. The group
    furthest behind receives the next copy of its own programs, cycling
    through them in lineup order. Existing entries are never removed.
    Groups made only of zero-length programs are left out, since copies
    of them add no airtime.

    Args:
        entries: Lineup to balance
        by: ``duration`` or ``program_count``
        tolerance: Allowed spread between the largest and smallest group;
            defaults to the longest program (duration) or 0 (count)
        iteration_cap: Maximum entries to append (defaults to config)

    Returns:
        New lineup, the input followed by the appended copies

    Raises:
        InvalidScheduleError: Unknown balancing mode or negative tolerance
    """
    if by not in ("duration", "program_count"):
        raise InvalidScheduleError(f"Unknown balance mode: {by!r}")
    if tolerance is not None and tolerance < 0:
        raise InvalidScheduleError(f"Balance tolerance must be non-negative, got {tolerance}")

    result = validate_entries(entries)
    programs = [entry for entry in result if isinstance(entry, ProgramEntry)]

    members: Dict[str, List[ProgramEntry]] = {}
    totals: Dict[str, int] = {}
    for entry in programs:
        key = group_of(entry)
        group = members.setdefault(key, [])
        if all(existing.program_id != entry.program_id for existing in group):
            group.append(entry)
        totals[key] = totals.get(key, 0) + _measure(entry, by)

    # Appending copies of zero-length programs never closes the gap
    stuck = [key for key, group in members.items() if not any(_measure(e, by) for e in group)]
    if stuck:
        logger.debug(f"Not balancing groups with no airtime to add: {', '.join(stuck)}")
        for key in stuck:
            del members[key]
            del totals[key]

    if len(members) < 2:
        return result

    if tolerance is None:
        tolerance = max(entry.duration_ms for entry in programs) if by == "duration" else 0

    cap = iteration_cap or get_settings().iteration_cap
    cursors = {key: 0 for key in members}
    appended = 0

    while max(totals.values()) - min(totals.values()) > tolerance:
        if appended >= cap:
            logger.warning(
                f"Balancing stopped after {appended} appended programs; "
                f"spread is still {max(totals.values()) - min(totals.values())}"
            )
            break
        key = min(totals, key=totals.get)
        group = members[key]
        entry = group[cursors[key] % len(group)]
        cursors[key] += 1
        result.append(entry)
        totals[key] += _measure(entry, by)
        appended += 1

    logger.debug(f"Balanced {len(members)} groups by {by}, appended {appended} programs")
    return result


def _measure(entry: ProgramEntry, by: str) -> int:
    return entry.duration_ms if by == "duration" else 1
