"""Exceptions raised at the engine's call boundary."""


class LineupError(Exception):
    """Base class for channel lineup errors."""


class InvalidScheduleError(LineupError, ValueError):
    """
    A schedule, program pool or lineup violates the input contract.

    Raised before any scheduling loop starts, never from inside one.
    """

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


class LineupFileError(LineupError):
    """A spec, program or lineup file could not be read or parsed."""

    def __init__(self, path, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
