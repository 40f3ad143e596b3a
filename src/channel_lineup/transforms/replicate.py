"""Repeat a lineup a number of times."""

import random
from typing import Iterable, List, Literal, Optional

from channel_lineup.errors import InvalidScheduleError
from channel_lineup.lineup.entries import LineupEntry, validate_entries
from channel_lineup.scheduler.weights import resolve_rng

ReplicateMode = Literal["fixed", "random"]


def replicate(
    entries: Iterable[LineupEntry],
    count: int,
    mode: ReplicateMode = "fixed",
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
) -> List[LineupEntry]:
    """
    Concatenate ``count`` copies of a lineup.

    Args:
        entries: Lineup to repeat
        count: Number of copies (0 yields an empty lineup)
        mode: ``fixed`` keeps order; ``random`` shuffles the whole result once
        rng: Randomness source for ``random`` mode
        seed: Seed used when no rng is given

    Returns:
        New lineup of ``len(entries) * count`` entries

    Raises:
        InvalidScheduleError: Negative count or unknown mode
    """
    if count < 0:
        raise InvalidScheduleError(f"Replicate count must be non-negative, got {count}")
    if mode not in ("fixed", "random"):
        raise InvalidScheduleError(f"Unknown replicate mode: {mode!r}")

    result = validate_entries(entries) * count
    if mode == "random":
        resolve_rng(rng, seed).shuffle(result)
    return result
