"""Candidate iterators used by the slot schedulers."""

import random
from abc import ABC, abstractmethod
from typing import Dict, List, Literal, Optional

from channel_lineup.programs.models import Program

SlotOrder = Literal["shuffle", "ordered", "ordered_shuffle"]
Direction = Literal["asc", "desc"]


class ProgramIterator(ABC):
    """
    Endless cursor over a slot's candidate programs.

    ``current()`` peeks without consuming so a program that does not fit
    stays current for the next slot occurrence. Only iterators with
    ``reorderable`` set may have a later program pulled forward; ordered
    traversals never skip ahead.
    """

    reorderable = False

    def __init__(self, programs: List[Program]):
        if not programs:
            raise ValueError("iterator requires at least one program")
        self.programs = list(programs)
        self._position = 0

    def __len__(self) -> int:
        return len(self.programs)

    @property
    @abstractmethod
    def sequence(self) -> List[Program]:
        """Programs in the order of the current pass."""

    def current(self) -> Program:
        return self.sequence[self._position]

    def advance(self) -> None:
        self._position += 1
        if self._position >= len(self.sequence):
            self._position = 0
            self._on_wrap()

    def take(self) -> Program:
        """Return the current program and move past it."""
        program = self.current()
        self.advance()
        return program

    def upcoming(self) -> List[Program]:
        """Programs after the current one, up to the end of this pass."""
        return self.sequence[self._position + 1:]

    def promote(self, offset: int) -> None:
        """
        Move the program ``offset`` places ahead into the current position.

        Programs it jumps over shift back by one and stay in this pass.

        Raises:
            ValueError: The iterator keeps a fixed order
        """
        if not self.reorderable:
            raise ValueError(f"{type(self).__name__} cannot reorder its programs")
        sequence = self.sequence
        sequence.insert(self._position, sequence.pop(self._position + offset))

    def _on_wrap(self) -> None:
        """Hook called when a pass over the sequence completes."""


class ShuffleBag(ProgramIterator):
    """Held random permutation, reshuffled only once fully consumed."""

    reorderable = True

    def __init__(self, programs: List[Program], rng: random.Random):
        super().__init__(programs)
        self.rng = rng
        self._bag = list(self.programs)
        self.rng.shuffle(self._bag)

    @property
    def sequence(self) -> List[Program]:
        return self._bag

    def _on_wrap(self) -> None:
        self.rng.shuffle(self._bag)


class OrderedIterator(ProgramIterator):
    """Sorted traversal (season/episode, index, date, title), wrapping."""

    def __init__(self, programs: List[Program], direction: Direction = "asc"):
        super().__init__(programs)
        self._sorted = sorted(
            self.programs,
            key=lambda p: p.order_key,
            reverse=direction == "desc",
        )

    @property
    def sequence(self) -> List[Program]:
        return self._sorted


class OrderedShuffle(ProgramIterator):
    """
    Shuffle the order of groups while each group keeps its internal order.

    Groups are keyed by ``group_key`` (programs without one form their own
    group). Group order is reshuffled on every pass.
    """

    def __init__(
        self,
        programs: List[Program],
        rng: random.Random,
        direction: Direction = "asc",
    ):
        super().__init__(programs)
        self.rng = rng

        groups: Dict[str, List[Program]] = {}
        for program in self.programs:
            groups.setdefault(program.group_key or program.id, []).append(program)
        self._groups = [
            sorted(members, key=lambda p: p.order_key, reverse=direction == "desc")
            for members in groups.values()
        ]
        self._flat: List[Program] = []
        self._reshuffle()

    @property
    def sequence(self) -> List[Program]:
        return self._flat

    def _reshuffle(self) -> None:
        self.rng.shuffle(self._groups)
        self._flat = [program for group in self._groups for program in group]

    def _on_wrap(self) -> None:
        self._reshuffle()


def make_iterator(
    programs: List[Program],
    order: SlotOrder,
    rng: random.Random,
    direction: Optional[Direction] = None,
) -> ProgramIterator:
    """
    Build the iterator for a slot's order mode.

    Args:
        programs: Non-empty candidate list
        order: ``shuffle``, ``ordered`` or ``ordered_shuffle``
        rng: Randomness source for shuffled modes
        direction: Traversal direction for ordered modes

    Returns:
        Iterator positioned at its first program
    """
    direction = direction or "asc"
    if order == "ordered":
        return OrderedIterator(programs, direction)
    if order == "ordered_shuffle":
        return OrderedShuffle(programs, rng, direction)
    return ShuffleBag(programs, rng)
