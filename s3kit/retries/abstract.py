"""Abstract retry policies."""

from typing import Protocol

import httpx


class AbstractRetryPredicate(Protocol):
    """Decides whether a single HTTP exchange should be tried again."""

    def should_retry(
        self,
        request: httpx.Request,
        response: httpx.Response | None,
        error: Exception | None,
    ) -> bool:
        """Return whether to retry after receiving response or error."""
        ...


class AbstractErrorRetryPredicate(Protocol):
    """Decides whether a whole operation failing with error should be attempted again."""

    def should_retry(self, error: Exception | None) -> bool:
        """Return whether to attempt the operation again."""
        ...


class AbstractWaiter(Protocol):
    """Waits between two tries."""

    def wait(self, attempt: int) -> None:
        """Block before the try following the zero based attempt."""
        ...
