"""Program pool models."""

from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from channel_lineup.errors import InvalidScheduleError


class Program(BaseModel):
    """
    An item eligible for playback.

    ``kind`` is a dot-delimited category path (``movie``, ``movie.feature``,
    ``episode``, ``custom``, ``track``). ``group_key`` identifies the show,
    custom show or artist the program belongs to.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    duration_ms: int = Field(gt=0)
    kind: str = "movie"
    group_key: Optional[str] = None

    # Ordering metadata
    title: Optional[str] = None
    season: Optional[int] = None
    episode: Optional[int] = None
    index: Optional[int] = None
    date: Optional[str] = None

    def matches_kind(self, prefix: str) -> bool:
        """
        Check the program's kind against a category prefix.

        ``"movie."`` and ``"movie"`` both match ``movie`` and ``movie.feature``
        but not ``movies``.
        """
        category = prefix.rstrip(".")
        if not category:
            return True
        return self.kind == category or self.kind.startswith(f"{category}.")

    @property
    def order_key(self) -> tuple:
        """Sort key for in-order playback: season/episode, index, date, title."""
        return (
            self.season if self.season is not None else 0,
            self.episode if self.episode is not None else 0,
            self.index if self.index is not None else 0,
            self.date or "",
            self.title or "",
            self.id,
        )


def coerce_programs(items: Iterable[Union[Program, Dict[str, Any]]]) -> List[Program]:
    """
    Validate a program pool given as models or raw mappings.

    Raises:
        InvalidScheduleError: A program is malformed or has a non-positive duration
    """
    programs = []
    for position, item in enumerate(items):
        if isinstance(item, Program):
            programs.append(item)
            continue
        try:
            programs.append(Program.model_validate(item))
        except ValidationError as e:
            errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
            raise InvalidScheduleError(
                f"Program {position} is invalid: " + "; ".join(errors), errors=errors
            ) from e
    return programs
