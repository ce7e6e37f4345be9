"""
OpenTelemetry tracing configuration.

Provides:
- Tracer provider with OTLP export (Jaeger / Tempo) and optional console export
- Auto-instrumentation for FastAPI and SQLAlchemy
Use cases open their own spans through ``trace.get_tracer(__name__)``.
"""

from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_ON

from src.platform.config.core_setting import settings


class TracingConfig:
    """
    Usage:
        tracing = TracingConfig(service_name='shopping-cart-service')
        tracing.setup()
    """

    def __init__(
        self,
        *,
        service_name: str,
        otlp_endpoint: str | None = None,
        enable_console: bool = False,
    ) -> None:
        self.service_name = service_name
        self.otlp_endpoint = otlp_endpoint or settings.OTEL_EXPORTER_OTLP_ENDPOINT or None
        self.enable_console = enable_console or settings.OTEL_CONSOLE_EXPORT
        self._provider: TracerProvider | None = None

    def setup(self) -> None:
        """Install the global tracer provider; call once at startup."""
        resource = Resource(attributes={SERVICE_NAME: self.service_name})
        # Tail sampling (keep errors, sample successes) belongs in the collector
        self._provider = TracerProvider(resource=resource, sampler=ALWAYS_ON)

        if self.otlp_endpoint:
            self._provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=self.otlp_endpoint))
            )
        if self.enable_console:
            self._provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

        trace.set_tracer_provider(self._provider)

    def instrument_fastapi(self, *, app: Any, excluded_urls: str = 'health,metrics') -> None:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=excluded_urls)

    def instrument_sqlalchemy(self, *, engine: Any) -> None:
        if hasattr(engine, 'sync_engine'):  # AsyncEngine
            SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)
        else:
            SQLAlchemyInstrumentor().instrument(engine=engine)

    def shutdown(self) -> None:
        if self._provider:
            self._provider.shutdown()
