"""Lineup transforms: each takes an entry list and returns a new one."""

from channel_lineup.transforms.balance import balance
from channel_lineup.transforms.breaks import add_breaks, pad_start_times
from channel_lineup.transforms.consolidate import consolidate
from channel_lineup.transforms.duplicates import remove_duplicates
from channel_lineup.transforms.hours import RestrictHoursResult, restrict_hours
from channel_lineup.transforms.replicate import replicate

__all__ = [
    "RestrictHoursResult",
    "add_breaks",
    "balance",
    "consolidate",
    "pad_start_times",
    "remove_duplicates",
    "replicate",
    "restrict_hours",
]
