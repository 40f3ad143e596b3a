"""Load schedule specs, program pools and lineups from YAML or JSON files."""

import json
from pathlib import Path
from typing import Any, List, Optional, Tuple, Type, TypeVar

import yaml

from channel_lineup.errors import InvalidScheduleError, LineupFileError
from channel_lineup.lineup.entries import LineupEntry, entry_from_dict
from channel_lineup.logging.config import get_logger
from channel_lineup.programs.models import Program, coerce_programs
from channel_lineup.scheduler.specs import (
    RandomSlotSchedule,
    SpecModel,
    TimeSlotSchedule,
    parse_spec,
)

logger = get_logger(__name__)

SpecT = TypeVar("SpecT", bound=SpecModel)


def load_document(path: Path) -> Any:
    """
    Read a YAML or JSON document.

    ``.json`` files are parsed as JSON, everything else as YAML.

    Raises:
        LineupFileError: The file is missing or cannot be parsed
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise LineupFileError(path, f"cannot read file: {e.strerror or e}") from e

    try:
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise LineupFileError(path, f"cannot parse file: {e}") from e


def _unwrap(data: Any, key: str, path: Path) -> List[Any]:
    """Accept a bare list or a mapping holding the list under ``key``."""
    if isinstance(data, dict) and key in data:
        data = data[key]
    if not isinstance(data, list):
        raise LineupFileError(path, f"expected a list of {key}")
    return data


def load_programs(path: Path) -> List[Program]:
    """
    Load a program pool.

    Raises:
        LineupFileError: The file is unreadable or a program is invalid
    """
    path = Path(path)
    items = _unwrap(load_document(path), "programs", path)
    try:
        programs = coerce_programs(items)
    except InvalidScheduleError as e:
        raise LineupFileError(path, str(e)) from e
    logger.debug(f"Loaded {len(programs)} programs from {path}")
    return programs


def load_spec(path: Path, model: Type[SpecT]) -> SpecT:
    """
    Load and validate a schedule spec.

    Raises:
        LineupFileError: The file is unreadable or the schedule is invalid
    """
    path = Path(path)
    data = load_document(path)
    if not isinstance(data, dict):
        raise LineupFileError(path, "expected a mapping")
    try:
        return parse_spec(model, data)
    except InvalidScheduleError as e:
        raise LineupFileError(path, str(e)) from e


def load_time_slot_schedule(path: Path) -> TimeSlotSchedule:
    return load_spec(path, TimeSlotSchedule)


def load_random_slot_schedule(path: Path) -> RandomSlotSchedule:
    return load_spec(path, RandomSlotSchedule)


def load_lineup(path: Path) -> Tuple[Optional[int], List[LineupEntry]]:
    """
    Load a lineup, either a bare entry list or a schedule result mapping.

    Returns:
        Tuple of (start time if present, entries)

    Raises:
        LineupFileError: The file is unreadable or an entry is invalid
    """
    path = Path(path)
    data = load_document(path)
    start_time = None
    if isinstance(data, dict):
        start_time = data.get("start_time", data.get("startTime"))
    items = _unwrap(data, "entries", path)
    try:
        entries = [entry_from_dict(item) for item in items]
    except (InvalidScheduleError, AttributeError, TypeError, ValueError) as e:
        raise LineupFileError(path, f"invalid lineup entry: {e}") from e
    return (int(start_time) if start_time is not None else None), entries
