"""Random slot scheduler: weighted, cooldown-aware slot draws."""

import random
from typing import Dict, Iterable, List, Optional, Set, Union

from channel_lineup.config import get_settings
from channel_lineup.lineup.entries import (
    LineupEntry,
    ProgramEntry,
    RedirectEntry,
    ScheduleResult,
    push_or_extend_flex,
)
from channel_lineup.logging.config import get_logger
from channel_lineup.programs.models import Program, coerce_programs
from channel_lineup.programs.resolver import PoolResolver
from channel_lineup.scheduler.iterators import ProgramIterator, make_iterator
from channel_lineup.scheduler.specs import (
    FixedCount,
    FixedDuration,
    RandomSlot,
    RandomSlotSchedule,
    parse_spec,
)
from channel_lineup.scheduler.timing import (
    DAY_MS,
    IterationBudget,
    PaddedEntry,
    alignment_gap,
    append_padded,
    create_padded_entry,
    distribute_flex,
    now_ms,
    spread_evenly,
)
from channel_lineup.scheduler.weights import SlotPicker, resolve_rng

logger = get_logger(__name__)


class RandomSlotScheduler:
    """
    Fill a horizon by repeatedly drawing slots.

    Ensures:
    - A slot is not drawn again until its cooldown has elapsed
    - Weighted draws are proportional to the eligible weights
    - Slots whose pools are empty are retired for the rest of the call
    - The loop ends early when no slot can ever be drawn again
    """

    def __init__(
        self,
        spec: Union[RandomSlotSchedule, dict],
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        iteration_cap: Optional[int] = None,
    ):
        """
        Initialize scheduler.

        Args:
            spec: Random slot schedule (model or raw mapping)
            rng: Randomness source for slot draws and shuffles
            seed: Seed used when no rng is given
            iteration_cap: Loop bound (defaults to config)

        Raises:
            InvalidScheduleError: The schedule is malformed
        """
        self.settings = get_settings()
        self.spec = parse_spec(RandomSlotSchedule, spec)
        self.rng = resolve_rng(rng, seed)
        self.iteration_cap = iteration_cap or self.settings.iteration_cap
        self.slack_ms = self.settings.slack_ms
        self.pad_ms = self.spec.pad_ms or self.settings.default_pad_ms
        self.picker = SlotPicker(
            [slot.weight for slot in self.spec.slots],
            self.spec.random_distribution,
            self.rng,
        )

    def schedule(self, programs: Iterable[Union[Program, dict]], now: Optional[int] = None) -> ScheduleResult:
        """
        Generate the lineup.

        Args:
            programs: Program pool
            now: Start instant in epoch ms (defaults to the wall clock)

        Returns:
            ScheduleResult starting at ``now`` and covering ``max_days`` days

        Raises:
            InvalidScheduleError: A program is malformed
        """
        pool = coerce_programs(programs)
        now = now_ms() if now is None else now

        if not self.spec.slots:
            logger.info("Random slot schedule has no slots, returning empty lineup")
            return ScheduleResult(start_time=now, entries=[])

        resolver = PoolResolver(pool)
        iterators: Dict[tuple, Optional[ProgramIterator]] = {}
        budget = IterationBudget(self.iteration_cap, "random slots")
        horizon = self.spec.max_days * DAY_MS
        sequential = self.spec.random_distribution == "none"

        lineup: List[LineupEntry] = []
        last_selected_at: Dict[int, int] = {}
        retired: Set[int] = set()
        elapsed = 0

        while elapsed < horizon:
            if not budget.spend():
                logger.warning(
                    f"Random slot scheduling stopped after {budget.spent} iterations "
                    f"at {elapsed} ms of {horizon} ms"
                )
                break

            active = [i for i in range(len(self.spec.slots)) if i not in retired]
            if not self.picker.can_ever_pick(active):
                logger.warning(
                    f"No slot can be selected any more, stopping at {elapsed} ms of {horizon} ms"
                )
                break

            if sequential:
                eligible = active
            else:
                eligible = [i for i in active if self._cooled_down(i, elapsed, last_selected_at)]

            if not self.picker.can_ever_pick(eligible):
                wait = self._earliest_expiry(active, elapsed, last_selected_at) - elapsed
                logger.debug(f"All slots cooling down, adding {wait} ms of flex")
                elapsed += push_or_extend_flex(lineup, min(wait, horizon - elapsed))
                continue

            index = self.picker.pick(eligible, active)
            if index is None:
                break
            slot = self.spec.slots[index]

            added = self._fill(slot, resolver, iterators, lineup, horizon - elapsed, budget)
            if added is None:
                logger.debug(f"Retiring {slot.selector.describe()}: no candidate programs")
                retired.add(index)
                continue

            elapsed += added
            last_selected_at[index] = elapsed

        result = ScheduleResult(start_time=now, entries=lineup)
        logger.info(
            f"Scheduled {len(lineup)} entries over {self.spec.max_days} days "
            f"({result.total_duration_ms} ms) from {now}"
        )
        return result

    def _cooled_down(self, index: int, elapsed: int, last_selected_at: Dict[int, int]) -> bool:
        if index not in last_selected_at:
            return True
        return elapsed - last_selected_at[index] >= self.spec.slots[index].cooldown_ms

    def _earliest_expiry(self, active: List[int], elapsed: int, last_selected_at: Dict[int, int]) -> int:
        expiries = [
            last_selected_at[i] + self.spec.slots[i].cooldown_ms
            for i in active
            if i in last_selected_at and self.picker.can_ever_pick([i])
        ]
        return min(expiries) if expiries else elapsed

    def _iterator_for(
        self,
        slot: RandomSlot,
        resolver: PoolResolver,
        iterators: Dict[tuple, Optional[ProgramIterator]],
    ) -> Optional[ProgramIterator]:
        key = (slot.selector, slot.order, slot.direction)
        if key not in iterators:
            candidates = resolver.candidates(slot.selector)
            iterators[key] = (
                make_iterator(candidates, slot.order, self.rng, slot.direction) if candidates else None
            )
        return iterators[key]

    def _fill(
        self,
        slot: RandomSlot,
        resolver: PoolResolver,
        iterators: Dict[tuple, Optional[ProgramIterator]],
        lineup: List[LineupEntry],
        horizon_left: int,
        budget: IterationBudget,
    ) -> Optional[int]:
        """
        Append one slot's contribution.

        Args:
            slot: Drawn slot
            resolver: Candidate pools for this call
            iterators: Shared iterators for this call
            lineup: Lineup to mutate
            horizon_left: Milliseconds left before the horizon
            budget: Iteration budget for this call

        Returns:
            Milliseconds added, or None when the slot has no candidates
        """
        spec = slot.duration_spec
        selector = slot.selector

        if selector.type == "flex":
            return push_or_extend_flex(lineup, min(spec.duration_ms, horizon_left))

        if selector.type == "redirect":
            duration = min(spec.duration_ms, horizon_left)
            lineup.append(RedirectEntry(selector.channel_id, duration))
            return duration

        iterator = self._iterator_for(slot, resolver, iterators)
        if iterator is None:
            if isinstance(spec, FixedDuration):
                return push_or_extend_flex(lineup, min(spec.duration_ms, horizon_left))
            return None

        if isinstance(spec, FixedDuration):
            padded = self._pack_window(iterator, spec.duration_ms, horizon_left, budget)
            used = sum(item.total_duration for item in padded)
            if not padded:
                return push_or_extend_flex(lineup, min(spec.duration_ms, horizon_left))
            self._place_gap(padded, spec.duration_ms - used)
            return append_padded(lineup, padded, limit_ms=horizon_left)

        if isinstance(spec, FixedCount):
            padded = self._take(iterator, budget, horizon_left, count=spec.count)
        else:
            padded = self._take(iterator, budget, horizon_left, target_ms=spec.target_ms or horizon_left)

        if self.spec.pad_style == "slot":
            content = sum(item.total_duration for item in padded)
            self._place_gap(padded, alignment_gap(content, self.pad_ms, self.slack_ms))
        elif self.spec.flex_preference == "end" and len(padded) > 1:
            moved = sum(item.pad_ms for item in padded[:-1])
            for item in padded[:-1]:
                item.pad_ms = 0
            padded[-1].pad_ms += moved

        return append_padded(lineup, padded, limit_ms=horizon_left)

    def _pad(self, program: Program) -> PaddedEntry:
        entry = ProgramEntry(program.id, program.duration_ms, program.group_key)
        if self.spec.pad_style == "slot":
            return PaddedEntry(entry, 0)
        return create_padded_entry(entry, self.pad_ms, self.slack_ms)

    def _place_gap(self, padded: List[PaddedEntry], gap: int) -> None:
        if gap <= 0 or not padded:
            return
        if self.spec.flex_preference == "end":
            padded[-1].pad_ms += gap
        elif self.spec.pad_style == "slot":
            spread_evenly(padded, gap)
        else:
            distribute_flex(padded, self.pad_ms, gap)

    def _take(
        self,
        iterator: ProgramIterator,
        budget: IterationBudget,
        horizon_left: int,
        count: Optional[int] = None,
        target_ms: Optional[int] = None,
    ) -> List[PaddedEntry]:
        """Draw ``count`` programs, or programs until ``target_ms`` is met."""
        padded: List[PaddedEntry] = []
        used = 0
        while used < horizon_left and budget.spend():
            if count is not None and len(padded) >= count:
                break
            if target_ms is not None and used >= target_ms:
                break
            item = self._pad(iterator.take())
            padded.append(item)
            used += item.total_duration
        return padded

    def _pack_window(
        self,
        iterator: ProgramIterator,
        window: int,
        horizon_left: int,
        budget: IterationBudget,
    ) -> List[PaddedEntry]:
        """
        Pack programs into a fixed window.

        When the first program does not fit, shuffled slots look ahead in
        the current pass for one that does; ordered slots fall back to flex.
        """
        padded: List[PaddedEntry] = []
        used = 0
        while used < window and used < horizon_left and budget.spend():
            candidate = self._pad(iterator.current())
            if used + candidate.total_duration <= window:
                padded.append(candidate)
                used += candidate.total_duration
                iterator.advance()
                continue
            if padded or not iterator.reorderable:
                break
            for offset, program in enumerate(iterator.upcoming(), start=1):
                candidate = self._pad(program)
                if candidate.total_duration <= window:
                    iterator.promote(offset)
                    break
            else:
                break
            padded.append(candidate)
            used += candidate.total_duration
            iterator.advance()
        return padded


def schedule_random_slots(
    programs: Iterable[Union[Program, dict]],
    spec: Union[RandomSlotSchedule, dict],
    now: Optional[int] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    iteration_cap: Optional[int] = None,
) -> ScheduleResult:
    """
    Generate a lineup from a random slot schedule.

    Args:
        programs: Program pool
        spec: Random slot schedule
        now: Start instant in epoch ms (defaults to the wall clock)
        rng: Randomness source for draws and shuffles
        seed: Seed used when no rng is given
        iteration_cap: Loop bound (defaults to config)

    Returns:
        ScheduleResult starting at ``now``

    Raises:
        InvalidScheduleError: The schedule or program pool is malformed
    """
    scheduler = RandomSlotScheduler(spec, rng=rng, seed=seed, iteration_cap=iteration_cap)
    return scheduler.schedule(programs, now=now)
