"""Lineup entries and schedule results."""

from channel_lineup.lineup.entries import (
    FlexEntry,
    LineupEntry,
    ProgramEntry,
    RedirectEntry,
    ScheduleResult,
    entry_from_dict,
    push_or_extend_flex,
    total_duration,
)

__all__ = [
    "FlexEntry",
    "LineupEntry",
    "ProgramEntry",
    "RedirectEntry",
    "ScheduleResult",
    "entry_from_dict",
    "push_or_extend_flex",
    "total_duration",
]
