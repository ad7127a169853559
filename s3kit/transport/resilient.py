"""Resilient httpx transport.

`ResilientTransport` retries a single exchange on transient failures, below
one signed request. It does not sign again: failures that need a fresh
signature are retried by the attempt strategy of the bucket operations.
"""

import logging
from types import TracebackType
from typing import Self

import httpx
from opentelemetry import trace

from s3kit.configs.retry import ResilientTransportConfig
from s3kit.retries.abstract import AbstractRetryPredicate, AbstractWaiter
from s3kit.retries.backoff import ExponentialBackoff
from s3kit.retries.predicates import TransportRetryPredicate

logger = logging.getLogger(__name__)


class ResilientTransport(httpx.BaseTransport):
    """Transport retrying a request a maximum of `max_tries` times.

    Retries are only attempted when the predicate says so, by default for
    temporary network errors and 5xx responses. If a waiter is given it is
    called between tries.

    Example:
        ```python
        transport = ResilientTransport(max_tries=3, waiter=ExponentialBackoff())
        with httpx.Client(transport=transport) as client:
            client.get("https://s3.amazonaws.com/")
        ```

    """

    def __init__(
        self,
        transport: httpx.BaseTransport | None = None,
        *,
        max_tries: int = 3,
        predicate: AbstractRetryPredicate | None = None,
        waiter: AbstractWaiter | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            transport: Transport doing the actual exchange. Defaults to `httpx.HTTPTransport`.
            max_tries: Maximum number of tries, at least 1.
            predicate: Decides whether to retry. Defaults to `TransportRetryPredicate`.
            waiter: Waits between tries. If None, tries follow each other immediately.

        """
        if max_tries < 1:
            raise ValueError(f"max_tries must be at least 1, got {max_tries}")

        self._transport = transport or httpx.HTTPTransport()
        self._max_tries = max_tries
        self._predicate = predicate or TransportRetryPredicate()
        self._waiter = waiter

    @property
    def max_tries(self) -> int:
        """Maximum number of tries."""
        return self._max_tries

    def execute(self, request: httpx.Request) -> tuple[httpx.Response | None, Exception | None]:
        """Send a request, retrying it while the predicate allows.

        Gives up silently after `max_tries`, returning the last response and error.
        Responses that are retried are closed. The last response is left open.

        Returns:
            Pair of the last response (or None) and the last error (or None).

        """
        response: httpx.Response | None = None
        error: Exception | None = None

        for attempt in range(self._max_tries):
            response, error = self._round_trip(request)

            if not self._predicate.should_retry(request, response, error):
                break

            if attempt + 1 >= self._max_tries:
                logger.warning("Giving up on %s %s after %d tries", request.method, request.url, self._max_tries)
                break

            logger.debug(
                "Retrying %s %s after try %d (status: %s, error: %r)",
                request.method,
                request.url,
                attempt + 1,
                response.status_code if response is not None else None,
                error,
            )
            trace.get_current_span().add_event(
                "s3kit.transport.retry", {"attempt": attempt + 1, "http.method": request.method}
            )

            if response is not None:
                response.close()

            if self._waiter is not None:
                self._waiter.wait(attempt)

        return response, error

    def _round_trip(self, request: httpx.Request) -> tuple[httpx.Response | None, Exception | None]:
        try:
            return self._transport.handle_request(request), None
        except httpx.TransportError as error:
            return None, error

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        """Handle a request for an httpx client.

        Raises:
            httpx.TransportError: The last error, when no try produced a response.

        """
        response, error = self.execute(request)
        if error is not None:
            raise error
        if response is None:
            raise httpx.TransportError("No response received", request=request)
        return response

    def close(self) -> None:
        """Close the wrapped transport."""
        self._transport.close()

    def __enter__(self) -> Self:
        """Enter the context manager."""
        self._transport.__enter__()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        """Exit the context manager."""
        self._transport.__exit__(exc_type, exc_value, traceback)


def new_http_client(
    config: ResilientTransportConfig | None = None,
    transport: httpx.BaseTransport | None = None,
    predicate: AbstractRetryPredicate | None = None,
    waiter: AbstractWaiter | None = None,
) -> httpx.Client:
    """Create an httpx client sending requests through a `ResilientTransport`.

    Args:
        config: Transport config. If None, the default config is used.
            See `s3kit.configs.retry.ResilientTransportConfig` for more details.
        transport: Transport doing the actual exchange. Defaults to `httpx.HTTPTransport`.
        predicate: Decides whether to retry. Defaults to `TransportRetryPredicate`.
        waiter: Waits between tries. Defaults to an `ExponentialBackoff` based on the config.

    """
    config = config or ResilientTransportConfig()
    resilient_transport = ResilientTransport(
        transport,
        max_tries=config.max_tries,
        predicate=predicate,
        waiter=waiter or ExponentialBackoff(base=config.backoff_base),
    )
    timeout = httpx.Timeout(config.deadline.total_seconds(), connect=config.dial_timeout.total_seconds())
    return httpx.Client(transport=resilient_transport, timeout=timeout)
