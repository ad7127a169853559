"""Retry policies."""

from s3kit.retries.abstract import AbstractErrorRetryPredicate, AbstractRetryPredicate, AbstractWaiter
from s3kit.retries.attempts import Attempt, AttemptStrategy
from s3kit.retries.backoff import ExponentialBackoff, LinearBackoff
from s3kit.retries.predicates import DEFAULT_RETRYABLE_ERROR_CODES, S3ErrorRetryPredicate, TransportRetryPredicate

__all__ = [
    "DEFAULT_RETRYABLE_ERROR_CODES",
    "AbstractErrorRetryPredicate",
    "AbstractRetryPredicate",
    "AbstractWaiter",
    "Attempt",
    "AttemptStrategy",
    "ExponentialBackoff",
    "LinearBackoff",
    "S3ErrorRetryPredicate",
    "TransportRetryPredicate",
]
