"""State of a pending request, tagged by request generation."""

import itertools
from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class FailureReason(StrEnum):
    """Why an operation ended without a value."""

    NO_LINK = "no_link"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class Loading:
    """Request issued, result not yet known."""

    generation: int


@dataclass(frozen=True)
class Ready(Generic[T]):
    """Request finished with a value."""

    value: T
    generation: int


@dataclass(frozen=True)
class Failed:
    """Request finished without a value."""

    reason: FailureReason
    generation: int


OperationState = Loading | Ready | Failed


class GenerationCounter:
    """Monotonic request counter used to detect superseded completions."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self.current = 0

    def next(self) -> int:
        """Start a new generation and return its number."""
        self.current = next(self._counter)
        return self.current

    def is_current(self, generation: int) -> bool:
        return generation == self.current
