"""
telemetry.py

PURPOSE: Optional OpenTelemetry tracing for requests and streams.
DEPENDENCIES: opentelemetry-api, opentelemetry-sdk, opentelemetry-exporter-otlp (all optional)

ARCHITECTURE NOTES:
Library modules grab a tracer at import time with get_tracer(__name__).
Until init_telemetry() has run with tracing enabled, and whenever the otel
packages are missing, every span is a no-op. Applications embedding the
client may also install their own global tracer provider and call
init_telemetry() with enabled=False to opt out of ours.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from paxsenix.config import OpenTelemetrySettings

logger = logging.getLogger(__name__)

_initialized = False
_tracer_provider: object | None = None


@runtime_checkable
class Span(Protocol):
    """The subset of the otel span API used by the client."""

    def __enter__(self) -> Span: ...
    def __exit__(self, *args: object) -> None: ...
    def set_attribute(self, key: str, value: object) -> None: ...
    def record_exception(self, exception: BaseException) -> None: ...
    def add_event(self, name: str, attributes: dict[str, object] | None = None) -> None: ...


@runtime_checkable
class Tracer(Protocol):
    """The subset of the otel tracer API used by the client."""

    def start_as_current_span(self, name: str, **kwargs: object) -> Span: ...


class NoOpSpan:
    """Span that records nothing."""

    def __enter__(self) -> Span:
        return self

    def __exit__(self, *args: object) -> None:
        pass

    def set_attribute(self, key: str, value: object) -> None:  # noqa: ARG002
        pass

    def record_exception(self, exception: BaseException) -> None:  # noqa: ARG002
        pass

    def add_event(  # noqa: ARG002
        self, name: str, attributes: dict[str, object] | None = None
    ) -> None:
        pass


class NoOpTracer:
    """Tracer handing out NoOpSpans."""

    def start_as_current_span(self, name: str, **kwargs: object) -> Span:  # noqa: ARG002
        return NoOpSpan()


class LazyTracer:
    """Resolves the real tracer on every span, so import order never matters."""

    def __init__(self, name: str) -> None:
        self._name = name

    def start_as_current_span(self, name: str, **kwargs: object) -> Span:
        if not _initialized or _tracer_provider is None:
            return NoOpSpan()
        try:
            from opentelemetry import trace
        except ImportError:
            return NoOpSpan()
        return trace.get_tracer(self._name).start_as_current_span(name, **kwargs)  # type: ignore[return-value]


def init_telemetry(settings: OpenTelemetrySettings) -> None:
    """
    Install a tracer provider according to settings.

    Idempotent, and harmless when the otel packages are not installed.
    """
    global _initialized, _tracer_provider

    if _initialized:
        logger.debug("Telemetry already initialized")
        return
    _initialized = True

    if not settings.enabled:
        logger.debug("Telemetry disabled")
        return

    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
    except ImportError:
        logger.warning(
            "OpenTelemetry packages not installed. "
            "Install with: pip install paxsenix[observability]"
        )
        return

    provider = TracerProvider(resource=Resource.create({"service.name": settings.service_name}))

    if settings.endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

            provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.endpoint))
            )
            logger.info(f"Exporting spans to {settings.endpoint}")
        except ImportError:
            logger.warning("OTLP exporter not available, falling back to console")
            provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    else:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracer_provider = provider
    logger.info(f"Telemetry initialized: service={settings.service_name}")


def get_tracer(name: str) -> Tracer:
    """Return a lazily-resolved tracer for a module (pass __name__)."""
    return LazyTracer(name)


def shutdown_telemetry() -> None:
    """Flush pending spans and reset, so init_telemetry() may run again."""
    global _initialized, _tracer_provider

    if _tracer_provider is not None:
        try:
            from opentelemetry.sdk.trace import TracerProvider

            if isinstance(_tracer_provider, TracerProvider):
                _tracer_provider.shutdown()
        except ImportError:
            pass

    _tracer_provider = None
    _initialized = False
