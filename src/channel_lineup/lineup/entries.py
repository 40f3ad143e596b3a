"""Lineup entry value objects and schedule results."""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Union

from channel_lineup.errors import InvalidScheduleError


@dataclass(frozen=True)
class ProgramEntry:
    """A program placed in the lineup."""

    program_id: str
    duration_ms: int
    group_key: Optional[str] = None

    type = "program"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = {"type": self.type, "program_id": self.program_id, "duration_ms": self.duration_ms}
        if self.group_key is not None:
            data["group_key"] = self.group_key
        return data


@dataclass(frozen=True)
class FlexEntry:
    """Filler time with no program content."""

    duration_ms: int

    type = "flex"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"type": self.type, "duration_ms": self.duration_ms}


@dataclass(frozen=True)
class RedirectEntry:
    """A pointer to another channel for a span of time."""

    target_channel_id: str
    duration_ms: int

    type = "redirect"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": self.type,
            "target_channel_id": self.target_channel_id,
            "duration_ms": self.duration_ms,
        }


LineupEntry = Union[ProgramEntry, FlexEntry, RedirectEntry]


def is_flex(entry: LineupEntry) -> bool:
    return isinstance(entry, FlexEntry)


def is_program(entry: LineupEntry) -> bool:
    return isinstance(entry, ProgramEntry)


def is_redirect(entry: LineupEntry) -> bool:
    return isinstance(entry, RedirectEntry)


def total_duration(entries: Iterable[LineupEntry]) -> int:
    """Sum of entry durations in milliseconds."""
    return sum(entry.duration_ms for entry in entries)


def push_or_extend_flex(lineup: List[LineupEntry], duration_ms: int) -> int:
    """
    Append flex to a lineup, extending a trailing flex entry if present.

    Args:
        lineup: Lineup to mutate
        duration_ms: Flex duration to add

    Returns:
        Milliseconds actually added (0 for non-positive durations)
    """
    if duration_ms <= 0:
        return 0

    if lineup and isinstance(lineup[-1], FlexEntry):
        lineup[-1] = FlexEntry(lineup[-1].duration_ms + duration_ms)
    else:
        lineup.append(FlexEntry(duration_ms))
    return duration_ms


def entry_from_dict(data: dict[str, Any]) -> LineupEntry:
    """
    Build an entry from its dictionary form.

    Accepts both snake_case and camelCase keys.

    Raises:
        InvalidScheduleError: Unknown type, missing keys or negative duration
    """
    entry_type = data.get("type")
    duration_ms = data.get("duration_ms", data.get("durationMs"))
    if duration_ms is None:
        raise InvalidScheduleError(f"Lineup entry is missing a duration: {data!r}")
    duration_ms = int(duration_ms)
    if duration_ms < 0:
        raise InvalidScheduleError(f"Lineup entry has a negative duration: {data!r}")

    if entry_type == "flex":
        return FlexEntry(duration_ms)
    if entry_type == "redirect":
        target = data.get("target_channel_id", data.get("targetChannelId"))
        if target is None:
            raise InvalidScheduleError(f"Redirect entry is missing a target channel: {data!r}")
        return RedirectEntry(str(target), duration_ms)
    if entry_type in ("program", "content", None):
        program_id = data.get("program_id", data.get("programId"))
        if program_id is None:
            raise InvalidScheduleError(f"Program entry is missing a program id: {data!r}")
        group_key = data.get("group_key", data.get("groupKey"))
        return ProgramEntry(str(program_id), duration_ms, group_key)

    raise InvalidScheduleError(f"Unknown lineup entry type: {entry_type!r}")


def validate_entries(entries: Iterable[LineupEntry]) -> List[LineupEntry]:
    """
    Check a lineup for contract violations.

    Raises:
        InvalidScheduleError: An entry has a negative duration or unknown type
    """
    checked = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, (ProgramEntry, FlexEntry, RedirectEntry)):
            raise InvalidScheduleError(f"Entry {position} is not a lineup entry: {entry!r}")
        if entry.duration_ms < 0:
            raise InvalidScheduleError(f"Entry {position} has a negative duration")
        checked.append(entry)
    return checked


@dataclass
class ScheduleResult:
    """Start instant plus the ordered entries of a generated lineup."""

    start_time: int
    entries: List[LineupEntry] = field(default_factory=list)

    @property
    def total_duration_ms(self) -> int:
        """Total duration of all entries."""
        return total_duration(self.entries)

    @property
    def end_time(self) -> int:
        """Absolute instant the last entry ends."""
        return self.start_time + self.total_duration_ms

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "start_time": self.start_time,
            "entries": [entry.to_dict() for entry in self.entries],
        }
