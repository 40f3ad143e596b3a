"""Schedule models for time slot and random slot lineups."""

from typing import Annotated, Any, List, Literal, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from channel_lineup.errors import InvalidScheduleError
from channel_lineup.programs.resolver import SlotSelector
from channel_lineup.scheduler.iterators import Direction
from channel_lineup.scheduler.timing import DAY_MS

FlexPreference = Literal["distribute", "end"]


class SpecModel(BaseModel):
    """Base for spec models: camelCase or snake_case keys, unknown keys ignored."""

    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class FixedCount(SpecModel):
    """Exactly ``count`` programs per selection."""

    type: Literal["fixed_count"] = "fixed_count"
    count: int = Field(ge=1)


class Dynamic(SpecModel):
    """Programs until ``target_ms`` (or the remaining horizon) is met."""

    type: Literal["dynamic"] = "dynamic"
    target_ms: Optional[int] = Field(default=None, gt=0)


class FixedDuration(SpecModel):
    """Programs packed into a ``duration_ms`` window, remainder as flex."""

    type: Literal["fixed_duration"] = "fixed_duration"
    duration_ms: int = Field(gt=0)


DurationSpec = Annotated[Union[FixedCount, Dynamic, FixedDuration], Field(discriminator="type")]


class TimeSlot(SpecModel):
    """A slot that starts at a fixed local time within the period."""

    time_of_day_ms: int = Field(ge=0)
    selector: SlotSelector
    order: Literal["shuffle", "ordered", "ordered_shuffle"] = "shuffle"
    direction: Direction = "asc"


class TimeSlotSchedule(SpecModel):
    """Fixed time-of-day slots repeating every period."""

    period_ms: int = Field(default=DAY_MS, gt=0)
    lateness_ms: int = Field(default=0, ge=0)
    max_days: int = Field(gt=0)
    flex_preference: FlexPreference = "distribute"
    pad_ms: Optional[int] = Field(default=None, ge=1)
    time_zone_offset_minutes: Optional[int] = None
    start_tomorrow: bool = False
    slots: List[TimeSlot] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_slots(self) -> "TimeSlotSchedule":
        """Sort slots by time of day; reject duplicates and out-of-period times."""
        self.slots.sort(key=lambda slot: slot.time_of_day_ms)
        seen = set()
        for slot in self.slots:
            if slot.time_of_day_ms >= self.period_ms:
                raise ValueError(
                    f"slot time {slot.time_of_day_ms} is outside the {self.period_ms} ms period"
                )
            if slot.time_of_day_ms in seen:
                raise ValueError(f"duplicate slot time {slot.time_of_day_ms}")
            seen.add(slot.time_of_day_ms)
        return self


class RandomSlot(SpecModel):
    """A slot picked at random, optionally with a cooldown."""

    selector: SlotSelector
    weight: float = Field(default=1.0, ge=0)
    cooldown_ms: int = Field(default=0, ge=0)
    duration_spec: DurationSpec = Field(default_factory=lambda: FixedCount(count=1))
    order: Literal["shuffle", "ordered", "ordered_shuffle"] = "shuffle"
    direction: Direction = "asc"

    @field_validator("duration_spec", mode="before")
    @classmethod
    def parse_legacy_duration(cls, v: Any) -> Any:
        """
        Accept the host application's duration specs.

        ``{"type": "fixed", "durationMs": n}`` is a fixed window and
        ``{"type": "dynamic", "programCount": n}`` a fixed program count.
        """
        if not isinstance(v, dict):
            return v
        kind = v.get("type")
        if kind == "fixed":
            return {"type": "fixed_duration", "duration_ms": v.get("duration_ms", v.get("durationMs"))}
        if kind == "dynamic":
            count = v.get("program_count", v.get("programCount"))
            if count is not None:
                return {"type": "fixed_count", "count": count}
        return v

    @model_validator(mode="after")
    def check_filler_duration(self) -> "RandomSlot":
        """Flex and redirect slots have no programs to count."""
        if not self.selector.selects_programs and not isinstance(self.duration_spec, FixedDuration):
            raise ValueError(
                f"{self.selector.describe()} slot requires a fixed_duration duration spec"
            )
        return self


class RandomSlotSchedule(SpecModel):
    """Slots drawn at random until the horizon is filled."""

    max_days: int = Field(gt=0)
    pad_ms: Optional[int] = Field(default=None, ge=1)
    pad_style: Literal["episode", "slot"] = "episode"
    flex_preference: FlexPreference = "distribute"
    random_distribution: Literal["uniform", "weighted", "none"] = "uniform"
    slots: List[RandomSlot] = Field(default_factory=list)


SpecT = TypeVar("SpecT", bound=SpecModel)


def parse_spec(model: Type[SpecT], data: Union[SpecT, dict]) -> SpecT:
    """
    Validate a spec, converting pydantic errors to InvalidScheduleError.

    Args:
        model: Spec model class
        data: Model instance or raw mapping

    Returns:
        Validated model instance

    Raises:
        InvalidScheduleError: The schedule is malformed
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        raise InvalidScheduleError(
            f"Invalid {model.__name__}: " + "; ".join(errors), errors=errors
        ) from e
