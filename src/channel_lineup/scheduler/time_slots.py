"""Time slot scheduler: fixed time-of-day slots repeating every period."""

import bisect
import random
from typing import Dict, Iterable, List, Optional, Tuple, Union

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
from channel_lineup.scheduler.specs import TimeSlot, TimeSlotSchedule, parse_spec
from channel_lineup.scheduler.timing import (
    IterationBudget,
    PaddedEntry,
    alignment_gap,
    append_padded,
    create_padded_entry,
    distribute_flex,
    now_ms,
    period_start,
    to_period_offset,
)
from channel_lineup.scheduler.weights import resolve_rng

logger = get_logger(__name__)


class TimeSlotScheduler:
    """
    Fill a horizon of periods from time-of-day slots.

    Each slot owns the window from its start to the next slot's start
    (wrapping to the first slot of the next period). Programs are packed
    greedily into the window and the gap is filled with flex, either
    spread across the programs or appended after the last one.
    """

    def __init__(
        self,
        spec: Union[TimeSlotSchedule, dict],
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        iteration_cap: Optional[int] = None,
    ):
        """
        Initialize scheduler.

        Args:
            spec: Time slot schedule (model or raw mapping)
            rng: Randomness source for shuffled slots
            seed: Seed used when no rng is given
            iteration_cap: Loop bound (defaults to config)

        Raises:
            InvalidScheduleError: The schedule is malformed
        """
        self.settings = get_settings()
        self.spec = parse_spec(TimeSlotSchedule, spec)
        self.rng = resolve_rng(rng, seed)
        self.iteration_cap = iteration_cap or self.settings.iteration_cap
        self.slack_ms = self.settings.slack_ms
        self.pad_ms = self.spec.pad_ms or self.settings.default_pad_ms
        self.tz_offset = (
            self.spec.time_zone_offset_minutes
            if self.spec.time_zone_offset_minutes is not None
            else self.settings.default_time_zone_offset_minutes
        )

        period = self.spec.period_ms
        # Absolute offsets can wrap past the period end, so re-sort after shifting
        placed = sorted(
            ((to_period_offset(slot.time_of_day_ms, self.tz_offset, period), slot) for slot in self.spec.slots),
            key=lambda pair: pair[0],
        )
        self._offsets = [offset for offset, _ in placed]
        self._slots = [slot for _, slot in placed]

    def start_time_for(self, now: int) -> int:
        """
        Next occurrence, at or after ``now``, of the earliest local slot.

        Args:
            now: Epoch milliseconds

        Returns:
            Epoch milliseconds of the first slot occurrence
        """
        period = self.spec.period_ms
        first = self.spec.slots[0]
        offset = to_period_offset(first.time_of_day_ms, self.tz_offset, period)
        start = period_start(now, period) + offset
        if start < now:
            start += period
        if self.spec.start_tomorrow:
            start += period
        return start

    def slot_window(self, t: int) -> Tuple[TimeSlot, int, int]:
        """
        Locate the slot occurrence containing instant ``t``.

        Returns:
            Tuple of (slot, nominal start, end) in epoch milliseconds
        """
        period = self.spec.period_ms
        day_time = t % period
        index = bisect.bisect_right(self._offsets, day_time) - 1
        if index < 0:
            index = len(self._offsets) - 1

        offset = self._offsets[index]
        slot_start = t - ((day_time - offset) % period)
        next_offset = self._offsets[(index + 1) % len(self._offsets)]
        span = (next_offset - offset) % period or period
        return self._slots[index], slot_start, slot_start + span

    def schedule(self, programs: Iterable[Union[Program, dict]], now: Optional[int] = None) -> ScheduleResult:
        """
        Generate the lineup.

        Args:
            programs: Program pool
            now: Reference instant in epoch ms (defaults to the wall clock)

        Returns:
            ScheduleResult covering ``max_days`` periods

        Raises:
            InvalidScheduleError: A program is malformed
        """
        pool = coerce_programs(programs)
        now = now_ms() if now is None else now

        if not self.spec.slots:
            logger.info("Time slot schedule has no slots, returning empty lineup")
            return ScheduleResult(start_time=now, entries=[])

        resolver = PoolResolver(pool)
        iterators: Dict[tuple, Optional[ProgramIterator]] = {}
        budget = IterationBudget(self.iteration_cap, "time slots")

        start_time = self.start_time_for(now)
        horizon_end = start_time + self.spec.max_days * self.spec.period_ms
        lineup: List[LineupEntry] = []
        t = start_time

        while t < horizon_end:
            if not budget.spend():
                logger.warning(
                    f"Time slot scheduling stopped after {budget.spent} iterations "
                    f"at {t - start_time} ms of {horizon_end - start_time} ms"
                )
                break

            slot, slot_start, slot_end = self.slot_window(t)
            late = t - slot_start

            if late > 0:
                gap = alignment_gap(t, self.pad_ms, self.slack_ms)
                if 0 < gap < slot_end - t:
                    t += push_or_extend_flex(lineup, min(gap, horizon_end - t))
                    continue

            window = slot_end - t
            if late > self.spec.lateness_ms + self.slack_ms:
                logger.debug(f"Entered {slot.selector.describe()} {late} ms late, filling with flex")
                t += push_or_extend_flex(lineup, min(window, horizon_end - t))
                continue

            selector = slot.selector
            if selector.type == "redirect":
                duration = min(window, horizon_end - t)
                lineup.append(RedirectEntry(selector.channel_id, duration))
                t += duration
                continue

            iterator = self._iterator_for(slot, resolver, iterators)
            if iterator is None:
                t += push_or_extend_flex(lineup, min(window, horizon_end - t))
                continue

            padded = self._pack(iterator, window, horizon_end - t, budget)
            used = sum(item.total_duration for item in padded)
            remaining = window - used

            if not padded:
                logger.debug(f"No program fits {selector.describe()} ({window} ms), filling with flex")
                t += push_or_extend_flex(lineup, min(window, horizon_end - t))
                continue

            if remaining > 0:
                if self.spec.flex_preference == "end":
                    padded[-1].pad_ms += remaining
                else:
                    distribute_flex(padded, self.pad_ms, remaining)

            t += append_padded(lineup, padded, limit_ms=horizon_end - t)

        result = ScheduleResult(start_time=start_time, entries=lineup)
        logger.info(
            f"Scheduled {len(lineup)} entries over {self.spec.max_days} periods "
            f"({result.total_duration_ms} ms) from {start_time}"
        )
        return result

    def _iterator_for(
        self,
        slot: TimeSlot,
        resolver: PoolResolver,
        iterators: Dict[tuple, Optional[ProgramIterator]],
    ) -> Optional[ProgramIterator]:
        """Shared iterator per (selector, order, direction); None for flex or empty pools."""
        if not slot.selector.selects_programs:
            return None
        key = (slot.selector, slot.order, slot.direction)
        if key not in iterators:
            candidates = resolver.candidates(slot.selector)
            iterators[key] = (
                make_iterator(candidates, slot.order, self.rng, slot.direction) if candidates else None
            )
        return iterators[key]

    def _pad(self, program: Program) -> PaddedEntry:
        entry = ProgramEntry(program.id, program.duration_ms, program.group_key)
        return create_padded_entry(entry, self.pad_ms, self.slack_ms)

    def _pack(
        self,
        iterator: ProgramIterator,
        window: int,
        horizon_left: int,
        budget: IterationBudget,
    ) -> List[PaddedEntry]:
        """
        Greedily pack programs into a slot window.

        The first program may overflow the window by up to ``lateness_ms``;
        failing that, shuffled slots look ahead in the current pass for one
        that fits. Later programs that do not fit end the slot and stay
        current.
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

            if padded:
                break

            if candidate.total_duration - window <= self.spec.lateness_ms:
                padded.append(candidate)
                iterator.advance()
                break

            fitting = self._search_fit(iterator, window, budget)
            if fitting is None:
                break
            padded.append(fitting)
            used += fitting.total_duration

        return padded

    def _search_fit(
        self, iterator: ProgramIterator, window: int, budget: IterationBudget
    ) -> Optional[PaddedEntry]:
        """
        Look ahead through the rest of the pass for a program that fits.

        The cursor does not move unless a program is placed; ordered
        iterators are never searched.
        """
        if not iterator.reorderable:
            return None
        for offset, program in enumerate(iterator.upcoming(), start=1):
            if not budget.spend():
                return None
            candidate = self._pad(program)
            if candidate.total_duration <= window:
                iterator.promote(offset)
                iterator.advance()
                return candidate
        return None


def schedule_time_slots(
    programs: Iterable[Union[Program, dict]],
    spec: Union[TimeSlotSchedule, dict],
    now: Optional[int] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    iteration_cap: Optional[int] = None,
) -> ScheduleResult:
    """
    Generate a lineup from a time slot schedule.

    Args:
        programs: Program pool
        spec: Time slot schedule
        now: Reference instant in epoch ms (defaults to the wall clock)
        rng: Randomness source for shuffled slots
        seed: Seed used when no rng is given
        iteration_cap: Loop bound (defaults to config)

    Returns:
        ScheduleResult starting at the next occurrence of the earliest slot

    Raises:
        InvalidScheduleError: The schedule or program pool is malformed
    """
    scheduler = TimeSlotScheduler(spec, rng=rng, seed=seed, iteration_cap=iteration_cap)
    return scheduler.schedule(programs, now=now)
