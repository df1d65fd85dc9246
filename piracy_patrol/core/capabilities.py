from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

# Wall clock used to stamp recordings; `time.time` in production.
Clock = Callable[[], float]


class RandomSource(Protocol):
    """Uniform draws in [0, 1). `random.Random` satisfies this."""

    def random(self) -> float:  # pragma: no cover
        ...


class Cancellable(Protocol):
    def cancel(self) -> None:  # pragma: no cover
        ...


class Scheduler(Protocol):
    """One-shot delayed callbacks; `asyncio` loop.call_later in production."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:  # pragma: no cover
        ...
