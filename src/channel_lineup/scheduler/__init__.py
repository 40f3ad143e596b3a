"""Slot schedulers for channel lineups."""

from channel_lineup.scheduler.random_slots import RandomSlotScheduler, schedule_random_slots
from channel_lineup.scheduler.specs import (
    Dynamic,
    FixedCount,
    FixedDuration,
    RandomSlot,
    RandomSlotSchedule,
    TimeSlot,
    TimeSlotSchedule,
)
from channel_lineup.scheduler.time_slots import TimeSlotScheduler, schedule_time_slots

__all__ = [
    "Dynamic",
    "FixedCount",
    "FixedDuration",
    "RandomSlot",
    "RandomSlotSchedule",
    "RandomSlotScheduler",
    "TimeSlot",
    "TimeSlotSchedule",
    "TimeSlotScheduler",
    "schedule_random_slots",
    "schedule_time_slots",
]
