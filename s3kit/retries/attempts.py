"""Attempt strategies.

An `AttemptStrategy` is an immutable policy shared by many calls. Each
logical call starts its own `Attempt` and polls it::

    attempt = strategy.start()
    while attempt.next():
        try:
            return do_something()
        except TemporaryError:
            if not attempt.has_next():
                raise
"""

import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class AttemptStrategy:
    """Strategy for waiting for an action to complete successfully.

    Attributes:
        total: Total duration of the attempts.
        delay: Interval between two attempts.
        min: Minimum number of attempts. Overrides total.

    """

    total: timedelta
    delay: timedelta = timedelta()
    min: int = 0

    def start(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "Attempt":
        """Begin a new sequence of attempts.

        Args:
            clock: Monotonic clock in seconds.
            sleep: Function blocking for a number of seconds.

        """
        return Attempt(self, clock=clock, sleep=sleep)


class Attempt:
    """Sequence of attempts of a single call."""

    def __init__(
        self,
        strategy: AttemptStrategy,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the attempt sequence. The first `next` always succeeds."""
        self._strategy = strategy
        self._clock = clock
        self._sleep = sleep
        now = clock()
        self._last = now
        self._end = now + strategy.total.total_seconds()
        self._force = True
        self._count = 0

    @property
    def strategy(self) -> AttemptStrategy:
        """Strategy of the sequence."""
        return self._strategy

    @property
    def count(self) -> int:
        """Number of attempts started so far."""
        return self._count

    def next(self) -> bool:
        """Wait until it is time for the next attempt, or return False if it is time to stop."""
        now = self._clock()
        sleep = self._next_sleep(now)

        if not self._force and now + sleep >= self._end and self._strategy.min <= self._count:
            return False

        self._force = False

        if sleep > 0 and self._count > 0:
            self._sleep(sleep)
            now = self._clock()

        self._count += 1
        self._last = now
        return True

    def has_next(self) -> bool:
        """Return whether another attempt will be made if the current one fails.

        If it returns True, the following call to `next` is guaranteed to return True.
        """
        if self._force or self._strategy.min > self._count:
            return True

        now = self._clock()
        if now + self._next_sleep(now) < self._end:
            self._force = True
            return True

        return False

    def _next_sleep(self, now: float) -> float:
        return max(self._strategy.delay.total_seconds() - (now - self._last), 0.0)

    def __iter__(self) -> Iterator[int]:
        """Iterate over the attempt numbers, starting from 1."""
        while self.next():
            yield self._count


DEFAULT_ATTEMPTS = AttemptStrategy(total=timedelta(seconds=5), delay=timedelta(milliseconds=200), min=5)
