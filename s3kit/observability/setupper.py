"""Observability setup for applications using the S3 client."""

import logging
from typing import Self

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from s3kit.configs.observability import ObservabilityConfig

logger = logging.getLogger(__name__)

DEFAULT_LOG_FORMAT = "time=%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)r"
SIGNER_LOGGER = "s3kit.auth.signer"


class ObservabilitySetupper:
    """Observability setupper.

    Example:
        ```python
        ObservabilitySetupper().setup_logging().setup_tracing().instrument_httpx()
        ```

    """

    def __init__(self, config: ObservabilityConfig | None = None) -> None:
        """Initialize the observability setupper.

        Args:
            config: The observability config.
                If None, the default observability config will be used.
                See `s3kit.configs.observability.ObservabilityConfig` for more details.

        """
        self._config = config or ObservabilityConfig()
        self._resource = Resource.create(attributes={SERVICE_NAME: self._config.service_name})
        self._tracer_provider: TracerProvider | None = None

    def setup_logging(self, level: int = logging.INFO, formatter: logging.Formatter | None = None) -> Self:
        """Setup logging.

        Adds a console handler to the root logger and sets its level.

        Args:
            level: The level to set for the root logger. Defaults to `logging.INFO`.
            formatter: The formatter to use for the console handler.
                If None, a logfmt-like formatter is used.

        """
        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter or logging.Formatter(DEFAULT_LOG_FORMAT))
        root_logger.addHandler(console_handler)

        if not self._config.log_signing:
            logging.getLogger(SIGNER_LOGGER).setLevel(max(level, logging.INFO))

        logger.info("Logging has been setup")

        return self

    def instrument_httpx(self) -> Self:
        """Instrument httpx."""
        HTTPXClientInstrumentor().instrument()

        logger.info("httpx has been instrumented")

        if self._config.suppress_httpx_logs:
            logging.getLogger("httpx").setLevel(logging.WARNING)
            logging.getLogger("httpcore").setLevel(logging.WARNING)
            logger.info("httpx logs have been suppressed")

        return self

    def setup_tracing(self) -> Self:
        """Setup tracing.

        See `s3kit.configs.observability.ObservabilityConfig` for more details.
        """
        tracer_provider = TracerProvider(resource=self._resource)

        if self._config.enable_console_tracer:
            tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
            logger.info("Enabled console span exporter")

        if self._config.enable_otel_tracer:
            tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter()))
            logger.info("Enabled opentelemetry span exporter")

        trace.set_tracer_provider(tracer_provider)

        self._tracer_provider = tracer_provider

        logger.info("Tracing has been setup")

        return self

    def get_tracer_provider(self) -> TracerProvider | None:
        """Get the tracer provider.

        Returns:
            TracerProvider | None: The tracer provider. None if tracing has not been setup.

        """
        return self._tracer_provider

    def shutdown(self) -> None:
        """Flush and shut the tracer provider down."""
        if self._tracer_provider is not None:
            self._tracer_provider.shutdown()
            logger.info("Tracing has been shut down")
