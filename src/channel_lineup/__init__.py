"""Channel lineup scheduling engine."""

__version__ = "0.1.0"

from channel_lineup.errors import InvalidScheduleError, LineupError, LineupFileError
from channel_lineup.lineup import FlexEntry, ProgramEntry, RedirectEntry, ScheduleResult
from channel_lineup.programs import Program, SlotSelector, resolve
from channel_lineup.scheduler import (
    RandomSlotSchedule,
    TimeSlotSchedule,
    schedule_random_slots,
    schedule_time_slots,
)
from channel_lineup.transforms import (
    RestrictHoursResult,
    add_breaks,
    balance,
    consolidate,
    pad_start_times,
    remove_duplicates,
    replicate,
    restrict_hours,
)

__all__ = [
    "FlexEntry",
    "InvalidScheduleError",
    "LineupError",
    "LineupFileError",
    "Program",
    "ProgramEntry",
    "RandomSlotSchedule",
    "RedirectEntry",
    "RestrictHoursResult",
    "ScheduleResult",
    "SlotSelector",
    "TimeSlotSchedule",
    "add_breaks",
    "balance",
    "consolidate",
    "pad_start_times",
    "remove_duplicates",
    "replicate",
    "resolve",
    "restrict_hours",
    "schedule_random_slots",
    "schedule_time_slots",
]
