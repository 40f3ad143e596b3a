"""Program pool and slot selector resolution."""

from channel_lineup.programs.models import Program, coerce_programs
from channel_lineup.programs.resolver import PoolResolver, SlotSelector, resolve

__all__ = ["Program", "SlotSelector", "PoolResolver", "coerce_programs", "resolve"]
