"""Retryability predicates.

Two layers decide about retries. `TransportRetryPredicate` judges a single
HTTP exchange below one signed request. `S3ErrorRetryPredicate` judges the
outcome of a whole bucket operation, which is then signed again and resent.

See http://docs.aws.amazon.com/general/latest/gr/api-retries.html
"""

from collections.abc import Iterable

import httpx

from s3kit.exceptions import S3ResponseClientException, S3TransportClientException

TEMPORARY_NETWORK_ERRORS: tuple[type[Exception], ...] = (httpx.TimeoutException, httpx.NetworkError)

# Failures of an operation that are worth signing again and resending:
# lost connections, unexpected EOF, DNS failures and read/write errors.
RETRYABLE_TRANSPORT_ERRORS: tuple[type[Exception], ...] = (
    httpx.ConnectError,
    httpx.ReadError,
    httpx.WriteError,
    httpx.RemoteProtocolError,
)

DEFAULT_RETRYABLE_ERROR_CODES = frozenset({"InternalError", "NoSuchUpload", "NoSuchBucket"})


class TransportRetryPredicate:
    """Retries temporary network errors and 5xx responses."""

    def should_retry(
        self,
        request: httpx.Request,  # noqa: ARG002
        response: httpx.Response | None,
        error: Exception | None,
    ) -> bool:
        """Return whether to retry after receiving response or error."""
        if error is not None:
            return isinstance(error, TEMPORARY_NETWORK_ERRORS)
        if response is not None:
            return response.is_server_error
        return False


class S3ErrorRetryPredicate:
    """Retries operations that failed with a transient error.

    Response errors are transient when their code belongs to a configurable
    set, by default ``InternalError``, ``NoSuchUpload`` and ``NoSuchBucket``.
    The latter two usually come from eventual consistency right after the
    upload or the bucket was created.
    """

    def __init__(self, codes: Iterable[str] = DEFAULT_RETRYABLE_ERROR_CODES) -> None:
        """Initialize the predicate.

        Args:
            codes: Error codes that make a response error retryable.

        """
        self._codes = frozenset(codes)

    @property
    def codes(self) -> frozenset[str]:
        """Error codes that make a response error retryable."""
        return self._codes

    def should_retry(self, error: Exception | None) -> bool:
        """Return whether to attempt the operation again."""
        if error is None:
            return False
        if isinstance(error, S3ResponseClientException):
            return error.code in self._codes
        if isinstance(error, S3TransportClientException):
            error = error.__cause__
        return isinstance(error, RETRYABLE_TRANSPORT_ERRORS)
