"""Optional OpenTelemetry tracing for inbound requests and outbound API calls."""

import contextlib
import os
from typing import Any, Dict, Iterator, Optional

from flask import Flask

try:
    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.flask import FlaskInstrumentor
    from opentelemetry.instrumentation.requests import RequestsInstrumentor
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
except Exception:  # pragma: no cover - optional dependency
    trace = None  # type: ignore

TRACER_NAME = "bookify"
# Probes and scrapes would drown out real traffic
EXCLUDED_URLS = "healthz,readyz,metrics"


def parse_otlp_headers(raw: Optional[str]) -> Optional[Dict[str, str]]:
    """Parse ``key=value,key2=value2`` exporter headers."""
    if not raw:
        return None
    headers: Dict[str, str] = {}
    for pair in raw.split(","):
        key, sep, value = pair.partition("=")
        if sep and key.strip():
            headers[key.strip().lower()] = value.strip()
    return headers or None


def init_tracing(app: Flask) -> bool:
    """Export spans over OTLP when an endpoint is configured; returns whether tracing is on."""
    if trace is None:  # pragma: no cover - optional dependency
        return False

    endpoint = app.config.get("OTEL_EXPORTER_OTLP_ENDPOINT") or os.getenv(
        "OTEL_EXPORTER_OTLP_ENDPOINT"
    )
    if not endpoint:
        return False

    ratio = min(1.0, max(0.0, float(app.config.get("OTEL_TRACES_SAMPLE_RATIO", 1.0))))
    provider = TracerProvider(
        resource=Resource.create({"service.name": app.config.get("OTEL_SERVICE_NAME", "bookify")}),
        sampler=ParentBased(TraceIdRatioBased(ratio)),
    )
    exporter = OTLPSpanExporter(
        endpoint=endpoint,
        headers=parse_otlp_headers(app.config.get("OTEL_EXPORTER_OTLP_HEADERS")),
        insecure=app.config.get("OTEL_EXPORTER_OTLP_INSECURE", True),
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    FlaskInstrumentor().instrument_app(app, excluded_urls=EXCLUDED_URLS)
    # Google Books and the Spotify token endpoint go through requests, as does spotipy
    RequestsInstrumentor().instrument()
    return True


@contextlib.contextmanager
def span(name: str, **attributes: Any) -> Iterator[None]:
    """Wrap a unit of work in a child span; a no-op without OpenTelemetry."""
    if trace is None:
        yield
        return
    with trace.get_tracer(TRACER_NAME).start_as_current_span(name) as current:
        for key, value in attributes.items():
            if value is not None:
                current.set_attribute(f"bookify.{key}", value)
        yield
