"""Insert commercial-style breaks and align start times."""

import random
from typing import Iterable, List, Optional

from channel_lineup.errors import InvalidScheduleError
from channel_lineup.lineup.entries import LineupEntry, is_flex, push_or_extend_flex, validate_entries
from channel_lineup.scheduler.weights import resolve_rng


def add_breaks(
    entries: Iterable[LineupEntry],
    after_ms: int,
    min_break_ms: int,
    max_break_ms: int,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
) -> List[LineupEntry]:
    """
    Insert flex breaks once enough content has played.

    A running content counter is reset by every flex entry. Before an entry
    that would push it past ``after_ms``, a break of random length in
    ``[min_break_ms, max_break_ms]`` is inserted and the counter restarts.

    Args:
        entries: Lineup to rewrite
        after_ms: Content allowed between breaks
        min_break_ms: Shortest break
        max_break_ms: Longest break
        rng: Randomness source for break lengths
        seed: Seed used when no rng is given

    Returns:
        New lineup with breaks inserted

    Raises:
        InvalidScheduleError: Non-positive interval or an inverted break range
    """
    if after_ms <= 0:
        raise InvalidScheduleError(f"Break interval must be positive, got {after_ms}")
    if min_break_ms < 0 or min_break_ms > max_break_ms:
        raise InvalidScheduleError(f"Invalid break range {min_break_ms}-{max_break_ms}")

    rng = resolve_rng(rng, seed)
    result: List[LineupEntry] = []
    counter = 0
    for entry in validate_entries(entries):
        if is_flex(entry):
            push_or_extend_flex(result, entry.duration_ms)
            counter = 0
            continue
        if counter + entry.duration_ms > after_ms:
            push_or_extend_flex(result, rng.randint(min_break_ms, max_break_ms))
            counter = 0
        result.append(entry)
        counter += entry.duration_ms
    return result


def pad_start_times(entries: Iterable[LineupEntry], pad_ms: int, start_time: int) -> List[LineupEntry]:
    """
    Drop existing flex and re-add it so every entry starts on a pad multiple.

    Start times are measured from the epoch, so ``start_time`` anchors the
    lineup. The first entry starts at ``start_time`` as given.

    Args:
        entries: Lineup to rewrite
        pad_ms: Pad interval in milliseconds
        start_time: Epoch milliseconds of the first entry

    Returns:
        New lineup with alignment flex after each entry

    Raises:
        InvalidScheduleError: Pad interval below 1
    """
    if pad_ms < 1:
        raise InvalidScheduleError(f"Pad interval must be at least 1, got {pad_ms}")

    result: List[LineupEntry] = []
    t = start_time
    for entry in validate_entries(entries):
        if is_flex(entry):
            continue
        result.append(entry)
        t += entry.duration_ms
        remainder = t % pad_ms
        if remainder:
            t += push_or_extend_flex(result, pad_ms - remainder)
    return result
