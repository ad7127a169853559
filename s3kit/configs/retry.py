"""Retry configs."""

from datetime import timedelta

from pydantic import Field
from pydantic_settings import BaseSettings

from s3kit.retries.attempts import AttemptStrategy
from s3kit.retries.predicates import DEFAULT_RETRYABLE_ERROR_CODES


class AttemptStrategyConfig(BaseSettings):
    """Attempt strategy config.

    This config is used to retry whole bucket operations, signing them again on every attempt.

    Attributes:
        min_attempts (int): Minimum number of attempts. Overrides total. Defaults to 5.
        total (timedelta): Total duration of the attempts. Defaults to 5 seconds.
        delay (timedelta): Interval between two attempts. Defaults to 200 milliseconds.
        retryable_error_codes (frozenset[str]): Error codes worth another attempt.
            Defaults to InternalError, NoSuchUpload and NoSuchBucket.

    """

    min_attempts: int = Field(default=5, ge=0, description="Minimum number of attempts. Overrides total.")
    total: timedelta = Field(default=timedelta(seconds=5), description="Total duration of the attempts.")
    delay: timedelta = Field(default=timedelta(milliseconds=200), description="Interval between two attempts.")
    retryable_error_codes: frozenset[str] = Field(
        default=DEFAULT_RETRYABLE_ERROR_CODES, description="Error codes worth another attempt."
    )

    def to_strategy(self) -> AttemptStrategy:
        """Build the attempt strategy."""
        return AttemptStrategy(total=self.total, delay=self.delay, min=self.min_attempts)


class ResilientTransportConfig(BaseSettings):
    """Resilient transport config.

    This config is used to retry single HTTP exchanges on network errors and 5xx responses.

    Attributes:
        max_tries (int): Maximum number of tries of a single exchange. Defaults to 3.
        dial_timeout (timedelta): Maximum time to wait for a connection. Defaults to 10 seconds.
        deadline (timedelta): Maximum time of a single exchange. Defaults to 5 seconds.
        backoff_base (timedelta): Base of the exponential backoff between tries. Defaults to 100 milliseconds.

    """

    max_tries: int = Field(default=3, ge=1, description="Maximum number of tries of a single exchange.")
    dial_timeout: timedelta = Field(default=timedelta(seconds=10), description="Maximum time to wait for a connection.")
    deadline: timedelta = Field(default=timedelta(seconds=5), description="Maximum time of a single exchange.")
    backoff_base: timedelta = Field(
        default=timedelta(milliseconds=100), description="Base of the exponential backoff between tries."
    )
