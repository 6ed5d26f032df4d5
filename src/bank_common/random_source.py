"""Injectable randomness for initial balances and wheel outcomes.

Production uses ``SystemRandomSource``; tests pass a ``SequenceRandomSource``
so every draw is known in advance.
"""

import random
from collections.abc import Iterable, Sequence
from typing import Protocol, TypeVar

T = TypeVar("T")


class RandomSourceProtocol(Protocol):
    def randint(self, low: int, high: int) -> int: ...

    def choice(self, options: Sequence[T]) -> T: ...


class SystemRandomSource:
    """OS-entropy backed source (``random.SystemRandom``)."""

    def __init__(self) -> None:
        self._rng = random.SystemRandom()

    def randint(self, low: int, high: int) -> int:
        return self._rng.randint(low, high)

    def choice(self, options: Sequence[T]) -> T:
        return self._rng.choice(options)


class SequenceRandomSource:
    """Deterministic source replaying pre-recorded values.

    ``randint`` pops the next queued integer; ``choice`` pops the next queued
    value and returns it if it is one of the options.
    """

    def __init__(self, values: Iterable[object] = ()) -> None:
        self._values = list(values)

    def push(self, *values: object) -> None:
        self._values.extend(values)

    def _next(self) -> object:
        if not self._values:
            raise LookupError("SequenceRandomSource exhausted")
        return self._values.pop(0)

    def randint(self, low: int, high: int) -> int:
        value = self._next()
        if not isinstance(value, int) or not (low <= value <= high):
            raise ValueError(f"Queued value {value!r} outside [{low}, {high}]")
        return value

    def choice(self, options: Sequence[T]) -> T:
        value = self._next()
        if value not in options:
            raise ValueError(f"Queued value {value!r} is not one of the options")
        return value  # type: ignore[return-value]
