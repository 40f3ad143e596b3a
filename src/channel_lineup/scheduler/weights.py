"""Weighted slot selection for the random slot scheduler."""

import bisect
import random
from itertools import accumulate
from typing import Dict, List, Optional, Sequence

from channel_lineup.config import get_settings
from channel_lineup.logging.config import get_logger

logger = get_logger(__name__)


class SlotPicker:
    """
    Pick one slot index from the eligible set.

    Selection modes:
    - uniform: every eligible slot is equally likely
    - weighted: probability ``weight / sum(eligible weights)``, drawn by
      binary search over the cumulative weights
    - none: round-robin in declaration order, ignoring eligibility
    """

    def __init__(self, weights: Sequence[float], distribution: str, rng: random.Random):
        """
        Initialize picker.

        Args:
            weights: Weight per slot in declaration order
            distribution: ``uniform``, ``weighted`` or ``none``
            rng: Randomness source
        """
        self.weights = list(weights)
        self.distribution = distribution
        self.rng = rng
        self._next_sequential = 0

    def can_ever_pick(self, candidates: Sequence[int]) -> bool:
        """Whether any of the candidate slots could ever be drawn."""
        if not candidates:
            return False
        if self.distribution == "weighted":
            return any(self.weights[i] > 0 for i in candidates)
        return True

    def pick(self, eligible: Sequence[int], active: Optional[Sequence[int]] = None) -> Optional[int]:
        """
        Draw a slot.

        Args:
            eligible: Slot indexes not cooling down
            active: Slot indexes not retired (used by round-robin mode)

        Returns:
            Chosen slot index, or None when nothing can be drawn
        """
        if self.distribution == "none":
            return self._pick_sequential(active if active is not None else eligible)
        if not eligible:
            return None
        if self.distribution == "weighted":
            index = pick_weighted(eligible, [self.weights[i] for i in eligible], self.rng)
            logger.debug(f"Weighted draw picked slot {index} of {len(eligible)} eligible")
            return index
        return eligible[self.rng.randrange(len(eligible))]

    def _pick_sequential(self, active: Sequence[int]) -> Optional[int]:
        if not active:
            return None
        ordered = sorted(active)
        position = bisect.bisect_left(ordered, self._next_sequential)
        if position >= len(ordered):
            position = 0
        index = ordered[position]
        self._next_sequential = index + 1
        return index

    def distribution_summary(self, indexes: Sequence[int]) -> Dict[int, float]:
        """
        Selection probability per slot under the current weights.

        Args:
            indexes: Slot indexes to include

        Returns:
            Dict mapping slot index to probability
        """
        if not indexes:
            return {}
        if self.distribution != "weighted":
            return {i: 1 / len(indexes) for i in indexes}
        total = sum(self.weights[i] for i in indexes)
        if total <= 0:
            return {i: 0.0 for i in indexes}
        return {i: self.weights[i] / total for i in indexes}


def pick_weighted(items: Sequence[int], weights: Sequence[float], rng: random.Random) -> Optional[int]:
    """
    Draw one item with probability proportional to its weight.

    Args:
        items: Candidate items
        weights: Non-negative weight per item

    Returns:
        Chosen item, or None when every weight is zero
    """
    cumulative: List[float] = list(accumulate(weights))
    if not cumulative or cumulative[-1] <= 0:
        return None

    target = rng.random() * cumulative[-1]
    position = bisect.bisect_right(cumulative, target)
    # Guard against float rounding landing on the total
    position = min(position, len(items) - 1)
    while weights[position] <= 0 and position > 0:
        position -= 1
    return items[position]


def resolve_rng(rng: Optional[random.Random] = None, seed: Optional[int] = None) -> random.Random:
    """
    Pick the randomness source for one scheduling call.

    An explicit ``rng`` wins, then ``seed``, then the configured default seed.
    """
    if rng is not None:
        return rng
    if seed is None:
        seed = get_settings().default_seed
    return random.Random(seed)
