"""Restrict a lineup to a daily viewing window."""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from channel_lineup.lineup.entries import LineupEntry, is_flex, push_or_extend_flex, validate_entries
from channel_lineup.logging.config import get_logger
from channel_lineup.scheduler.timing import DAY_MS, now_ms, period_start

logger = get_logger(__name__)


@dataclass
class RestrictHoursResult:
    """Rewritten lineup plus the instant its first window opens."""

    new_start_time: Optional[int]
    entries: List[LineupEntry] = field(default_factory=list)


def restrict_hours(
    entries: Iterable[LineupEntry],
    start_offset_ms: int,
    end_offset_ms: int,
    now: Optional[int] = None,
    period_ms: int = DAY_MS,
) -> RestrictHoursResult:
    """
    Rewrite a lineup so content only plays between two offsets of each period.

    Flex is dropped, as is anything longer than the window. The remaining
    entries are walked in order; an entry that would overflow the current
    window is preceded by flex that skips to the next period's window.

    Args:
        entries: Lineup to rewrite
        start_offset_ms: Window start within the period
        end_offset_ms: Window end within the period (may pass the period end)
        now: Reference instant for the new start time (defaults to the wall clock)
        period_ms: Period length

    Returns:
        RestrictHoursResult; an invalid window returns the lineup unchanged
        with no start time, and a lineup with no survivors is empty

    Raises:
        InvalidScheduleError: An entry has a negative duration
    """
    entries = validate_entries(entries)

    valid = 0 <= start_offset_ms <= period_ms and start_offset_ms < end_offset_ms <= start_offset_ms + period_ms
    if not valid:
        logger.warning(
            f"Ignoring invalid restrict window {start_offset_ms}-{end_offset_ms} "
            f"for a {period_ms} ms period"
        )
        return RestrictHoursResult(None, list(entries))

    max_duration = end_offset_ms - start_offset_ms
    survivors = [e for e in entries if not is_flex(e) and e.duration_ms <= max_duration]
    dropped = len(entries) - len(survivors)
    if dropped:
        logger.debug(f"Dropped {dropped} flex or over-long entries")
    if not survivors:
        return RestrictHoursResult(None, [])

    result: List[LineupEntry] = []
    offset = 0
    for entry in survivors:
        if offset + entry.duration_ms > max_duration:
            time_left = max_duration - offset
            push_or_extend_flex(result, time_left + period_ms - max_duration)
            offset = 0
        result.append(entry)
        offset += entry.duration_ms

    now = now_ms() if now is None else now
    return RestrictHoursResult(period_start(now, period_ms) + start_offset_ms, result)
