"""Program pool resolver: binds slot selectors to candidate programs."""

from typing import Any, Dict, Iterable, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from channel_lineup.logging.config import get_logger
from channel_lineup.programs.models import Program

logger = get_logger(__name__)

SelectorType = Literal["kind", "show", "custom_show", "flex", "redirect"]

# Slot id prefixes understood by the string shorthand
_PREFIXES = {
    "show.": "show",
    "tv.": "show",
    "custom-show.": "custom_show",
    "custom_show.": "custom_show",
    "redirect.": "redirect",
}


class SlotSelector(BaseModel):
    """
    Predicate describing which programs a slot may play.

    Selectors may also be written as strings: ``"movie."`` (kind prefix),
    ``"show.<id>"``, ``"custom-show.<id>"``, ``"redirect.<channel>"`` and
    ``"flex"``.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    type: SelectorType = "kind"
    value: Optional[str] = None
    channel_id: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def parse_shorthand(cls, data: Any) -> Any:
        """Expand the string shorthand into a selector mapping."""
        if not isinstance(data, str):
            return data

        if data == "flex":
            return {"type": "flex"}
        for prefix, selector_type in _PREFIXES.items():
            if data.startswith(prefix):
                key = data[len(prefix):]
                if selector_type == "redirect":
                    return {"type": "redirect", "channel_id": key}
                return {"type": selector_type, "value": key}
        return {"type": "kind", "value": data}

    @model_validator(mode="after")
    def check_required(self) -> "SlotSelector":
        """Each selector type needs its own key."""
        if self.type in ("kind", "show", "custom_show") and self.value is None:
            raise ValueError(f"selector of type '{self.type}' requires a value")
        if self.type == "redirect" and not self.channel_id:
            raise ValueError("redirect selector requires a channel_id")
        return self

    @property
    def selects_programs(self) -> bool:
        """Whether this selector draws from the program pool at all."""
        return self.type in ("kind", "show", "custom_show")

    def matches(self, program: Program) -> bool:
        """
        Check whether a program satisfies this selector.

        Args:
            program: Candidate program

        Returns:
            True if the program belongs in a slot using this selector
        """
        if self.type == "kind":
            return program.matches_kind(self.value or "")
        if self.type == "show":
            return program.group_key == self.value and not program.matches_kind("custom")
        if self.type == "custom_show":
            return program.group_key == self.value and program.matches_kind("custom")
        return False

    def describe(self) -> str:
        """Short human readable form used in logs."""
        if self.type == "flex":
            return "flex"
        if self.type == "redirect":
            return f"redirect.{self.channel_id}"
        if self.type == "kind":
            return f"kind:{self.value}"
        return f"{self.type.replace('_', '-')}.{self.value}"


def resolve(pool: Iterable[Program], selector: SlotSelector) -> List[Program]:
    """
    Return the subsequence of the pool satisfying the selector.

    Args:
        pool: Full program pool
        selector: Slot selector

    Returns:
        Matching programs in pool order (empty when nothing matches)
    """
    if not selector.selects_programs:
        return []
    return [program for program in pool if selector.matches(program)]


def unique_programs(programs: Iterable[Program]) -> List[Program]:
    """Collapse repeated program ids, keeping the first occurrence."""
    seen: set[str] = set()
    result = []
    for program in programs:
        if program.id in seen:
            continue
        seen.add(program.id)
        result.append(program)
    return result


class PoolResolver:
    """
    Per-call cache of resolved candidate pools.

    Built fresh for each scheduling call so pools always reflect the pool
    that call was given.
    """

    def __init__(self, pool: Iterable[Program]):
        """
        Initialize resolver.

        Args:
            pool: Full program pool for this call
        """
        self.pool = list(pool)
        self._cache: Dict[SlotSelector, List[Program]] = {}

    def candidates(self, selector: SlotSelector) -> List[Program]:
        """
        Get de-duplicated candidates for a selector.

        Args:
            selector: Slot selector

        Returns:
            Matching programs with duplicate ids removed
        """
        if selector not in self._cache:
            matched = unique_programs(resolve(self.pool, selector))
            if selector.selects_programs and not matched:
                logger.debug(f"No programs match {selector.describe()}")
            self._cache[selector] = matched
        return self._cache[selector]
