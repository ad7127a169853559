"""Waiters used between transport tries."""

import time
from collections.abc import Callable
from datetime import timedelta

DEFAULT_BACKOFF_BASE = timedelta(milliseconds=100)


class ExponentialBackoff:
    """Waits ``base * 2 ** attempt``."""

    def __init__(
        self,
        base: timedelta = DEFAULT_BACKOFF_BASE,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the waiter."""
        self._base = base.total_seconds()
        self._sleep = sleep

    def delay(self, attempt: int) -> float:
        """Seconds to wait after the zero based attempt."""
        return self._base * 2**attempt

    def wait(self, attempt: int) -> None:
        """Block before the try following attempt."""
        self._sleep(self.delay(attempt))


class LinearBackoff:
    """Waits ``base * attempt``."""

    def __init__(
        self,
        base: timedelta = DEFAULT_BACKOFF_BASE,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the waiter."""
        self._base = base.total_seconds()
        self._sleep = sleep

    def delay(self, attempt: int) -> float:
        """Seconds to wait after the zero based attempt."""
        return self._base * attempt

    def wait(self, attempt: int) -> None:
        """Block before the try following attempt."""
        self._sleep(self.delay(attempt))
