"""OpenTelemetry setup with span attribute redaction."""
import re
import logging
from typing import Optional

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.sdk.trace import ReadableSpan, Span, SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from txvault.core.config import Settings

logger = logging.getLogger(__name__)


class RedactingSpanProcessor(SpanProcessor):
    """
    SpanProcessor that redacts record and payload data from spans before they
    are handed to the wrapped processor for export.
    """
    def __init__(self, processor: SpanProcessor):
        self._processor = processor
        self._sensitive_keys = {
            "authorization", "cookie", "set-cookie",
            "payload", "payload_ct", "dek_wrapped", "master_key",
        }
        self._sensitive_patterns = [
            re.compile(r"http\.request\.header\..*", re.IGNORECASE),
            re.compile(r"http\.response\.header\..*", re.IGNORECASE),
            re.compile(r".*(nonce|tag|secret|token|key).*", re.IGNORECASE),
        ]

    def on_start(self, span: Span, parent_context: Optional[Context] = None) -> None:
        self._processor.on_start(span, parent_context)

    def on_end(self, span: ReadableSpan) -> None:
        if span.attributes:
            redacted = {
                key: "[REDACTED]" if self._should_redact(key) else value
                for key, value in span.attributes.items()
            }
            # ReadableSpan has no public setter; the wrapped processor reads _attributes.
            if hasattr(span, "_attributes"):
                span._attributes = redacted

        self._processor.on_end(span)

    def shutdown(self) -> None:
        self._processor.shutdown()

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return self._processor.force_flush(timeout_millis)

    def _should_redact(self, key: str) -> bool:
        key_lower = key.lower()
        if key_lower in self._sensitive_keys:
            return True
        return any(p.match(key_lower) for p in self._sensitive_patterns)


def setup_opentelemetry(app: FastAPI, settings: Settings) -> Optional[TracerProvider]:
    """Install a tracer provider and instrument FastAPI. Returns None when tracing is off."""
    if not settings.TRACING_ENABLED:
        return None

    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

    provider = TracerProvider()

    if settings.OTEL_EXPORTER_OTLP_ENDPOINT:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        processor = BatchSpanProcessor(
            OTLPSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True)
        )
    elif not settings.is_prod:
        processor = BatchSpanProcessor(ConsoleSpanExporter())
    else:
        processor = None

    if processor:
        provider.add_span_processor(RedactingSpanProcessor(processor))

    trace.set_tracer_provider(provider)

    # Health checks are excluded to reduce noise
    FastAPIInstrumentor.instrument_app(app, tracer_provider=provider, excluded_urls="health/*")

    logger.info("OpenTelemetry tracing enabled")
    return provider


def instrument_engine(engine, provider: Optional[TracerProvider]) -> None:
    """Trace SQL queries issued through ``engine``."""
    if provider is None or engine is None:
        return

    from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
    SQLAlchemyInstrumentor().instrument(engine=engine, tracer_provider=provider)
