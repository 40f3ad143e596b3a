"""Period, pad and time zone arithmetic shared by the schedulers."""

import time
from dataclasses import dataclass
from typing import List, Optional

from channel_lineup.lineup.entries import LineupEntry, push_or_extend_flex

SECOND_MS = 1000
MINUTE_MS = 60 * SECOND_MS
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS
WEEK_MS = 7 * DAY_MS

DEFAULT_SLACK_MS = 9999


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def period_start(t: int, period_ms: int) -> int:
    """Start of the epoch-anchored period containing ``t``."""
    return t - (t % period_ms)


def time_of_period(t: int, period_ms: int) -> int:
    """Offset of ``t`` into its epoch-anchored period."""
    return t % period_ms


def to_period_offset(time_of_day_ms: int, time_zone_offset_minutes: int, period_ms: int) -> int:
    """
    Convert a local time of day into an offset of the UTC period grid.

    ``time_zone_offset_minutes`` follows the ``getTimezoneOffset`` convention:
    minutes added to local time to get UTC (UTC-5 is ``300``).
    """
    return (time_of_day_ms + time_zone_offset_minutes * MINUTE_MS) % period_ms


def alignment_gap(t: int, pad_ms: int, slack_ms: int = DEFAULT_SLACK_MS) -> int:
    """
    Flex needed to move ``t`` onto the next multiple of ``pad_ms``.

    Remainders within the slack on either side count as aligned.
    """
    if pad_ms <= 1:
        return 0
    m = t % pad_ms
    if m > slack_ms and pad_ms - m > slack_ms:
        return pad_ms - m
    return 0


@dataclass
class PaddedEntry:
    """An entry plus the flex that will follow it."""

    entry: LineupEntry
    pad_ms: int = 0

    @property
    def total_duration(self) -> int:
        return self.entry.duration_ms + self.pad_ms


def create_padded_entry(
    entry: LineupEntry, pad_ms: int, slack_ms: int = DEFAULT_SLACK_MS
) -> PaddedEntry:
    """
    Pad an entry so it ends on a multiple of ``pad_ms``.

    Args:
        entry: Program or redirect entry
        pad_ms: Pad interval (1 disables padding)
        slack_ms: Remainders within this tolerance are not padded

    Returns:
        PaddedEntry with its trailing flex amount
    """
    if pad_ms <= 1:
        return PaddedEntry(entry, 0)

    rem = entry.duration_ms % pad_ms
    pad_amount = pad_ms - rem
    should_pad = rem > slack_ms and pad_amount > slack_ms
    return PaddedEntry(entry, pad_amount if should_pad else 0)


def distribute_flex(padded: List[PaddedEntry], pad_ms: int, remaining_ms: int) -> None:
    """
    Spread leftover slot time across the trailing flex of padded entries.

    Whole multiples of ``pad_ms`` are shared out, entries with the least
    existing padding first; the sub-pad remainder goes to the last entry.
    Mutates ``padded`` in place.
    """
    if not padded or remaining_ms <= 0:
        return

    pad_ms = max(pad_ms, 1)
    div, mod = divmod(remaining_ms, pad_ms)
    padded[-1].pad_ms += mod

    by_least_padding = sorted(range(len(padded)), key=lambda i: padded[i].pad_ms)
    share, extra = divmod(div, len(padded))
    for position, index in enumerate(by_least_padding):
        q = share + (1 if position < extra else 0)
        padded[index].pad_ms += q * pad_ms


def spread_evenly(padded: List[PaddedEntry], remaining_ms: int) -> None:
    """
    Split leftover time into equal shares, the rounding remainder on the first.

    Used when padding is applied per slot rather than per episode.
    """
    if not padded or remaining_ms <= 0:
        return

    share = remaining_ms // len(padded)
    for item in padded:
        item.pad_ms += share
    padded[0].pad_ms += remaining_ms - share * len(padded)


def append_padded(
    lineup: List[LineupEntry],
    padded: List[PaddedEntry],
    limit_ms: Optional[int] = None,
) -> int:
    """
    Append padded entries and their flex to a lineup.

    Args:
        lineup: Lineup to mutate
        padded: Entries with trailing flex
        limit_ms: Optional cap on the time added; entries are never split,
            only trailing flex is clipped

    Returns:
        Milliseconds added to the lineup
    """
    added = 0
    for item in padded:
        if limit_ms is not None and added >= limit_ms:
            break
        lineup.append(item.entry)
        added += item.entry.duration_ms
        flex = item.pad_ms
        if limit_ms is not None:
            flex = min(flex, max(limit_ms - added, 0))
        added += push_or_extend_flex(lineup, flex)
    return added


class IterationBudget:
    """Bounded loop counter shared by the packing loops of one call."""

    def __init__(self, cap: int, name: str):
        self.cap = cap
        self.name = name
        self.spent = 0

    @property
    def exhausted(self) -> bool:
        return self.spent >= self.cap

    def spend(self) -> bool:
        """Count one iteration; False once the cap is reached."""
        if self.exhausted:
            return False
        self.spent += 1
        return True
