"""Optional OpenTelemetry tracing (no-op unless enabled)."""

from paxsenix.observability.telemetry import get_tracer, init_telemetry, shutdown_telemetry

__all__ = ["get_tracer", "init_telemetry", "shutdown_telemetry"]
