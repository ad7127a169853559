"""Observability config."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings


def get_enable_otel_tracer() -> bool:
    """Get if otel tracer is enabled."""
    return "OTEL_EXPORTER_OTLP_ENDPOINT" in os.environ


class ObservabilityConfig(BaseSettings):
    """Observability configuration.

    Attributes:
        service_name (str): The name reported by the traces. Defaults to "s3kit".
        enable_otel_tracer (bool): Whether to enable the otel tracer.
            Defaults to the value of the "OTEL_EXPORTER_OTLP_ENDPOINT" environment variable.
        enable_console_tracer (bool): Whether to enable the console tracer. Defaults to False.
        suppress_httpx_logs (bool): Whether to suppress the httpx logs. Defaults to True.
        log_signing (bool): Whether to log the strings to sign at debug level. Defaults to False.

    """

    service_name: str = "s3kit"

    enable_otel_tracer: bool = Field(
        default_factory=get_enable_otel_tracer, description="Whether to enable the otel tracer."
    )
    enable_console_tracer: bool = Field(default=False, description="Whether to enable the console tracer.")

    suppress_httpx_logs: bool = Field(default=True, description="Whether to suppress the httpx logs.")
    log_signing: bool = Field(default=False, description="Whether to log the strings to sign at debug level.")
