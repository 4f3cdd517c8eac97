"""Observability setup for OpenTelemetry, metrics, and structured logging."""

import logging

import structlog
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from .config import settings

SERVICE_NAME = "studio-booking-api"

# Prometheus metrics
REGISTRY = CollectorRegistry()

# Request metrics
REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code'],
    registry=REGISTRY
)

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=REGISTRY
)

# Business metrics
BOOKINGS_CREATED = Counter(
    'studio_bookings_created_total',
    'Total bookings created',
    registry=REGISTRY
)

BOOKINGS_CANCELLED = Counter(
    'studio_bookings_cancelled_total',
    'Total bookings cancelled by members',
    registry=REGISTRY
)

BOOKING_REJECTIONS = Counter(
    'studio_booking_rejections_total',
    'Lifecycle operations rejected by a booking rule',
    ['operation', 'code'],
    registry=REGISTRY
)

WAITING_LIST_ENTRIES_CREATED = Counter(
    'studio_waiting_list_entries_created_total',
    'Total waiting list entries created',
    registry=REGISTRY
)

VACANCIES_OPENED = Counter(
    'studio_vacancies_opened_total',
    'Cancellations that freed a spot in a class with a waiting list',
    registry=REGISTRY
)

CLASSES_COMPLETED = Counter(
    'studio_classes_completed_total',
    'Scheduled classes marked as completed',
    registry=REGISTRY
)


def setup_structured_logging():
    """Configure structured logging with structlog."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict['trace_id'] = format(ctx.trace_id, '032x')
            event_dict['span_id'] = format(ctx.span_id, '016x')
        return event_dict

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_tracing(app_name: str = SERVICE_NAME):
    """Setup OpenTelemetry tracing."""
    resource = Resource.create({
        "service.name": app_name,
        "service.version": "1.0.0",
        "environment": settings.environment,
    })

    trace.set_tracer_provider(TracerProvider(resource=resource))
    return trace.get_tracer(__name__)


def instrument_fastapi(app):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine=None):
    """Instrument SQLAlchemy with OpenTelemetry."""
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)
    else:
        SQLAlchemyInstrumentor().instrument()


class MetricsCollector:
    """Collector for business metrics."""

    @staticmethod
    def record_booking_created():
        """Record a booking creation."""
        BOOKINGS_CREATED.inc()

    @staticmethod
    def record_booking_cancelled():
        """Record a booking cancellation."""
        BOOKINGS_CANCELLED.inc()

    @staticmethod
    def record_rejection(operation: str, code: str):
        """Record a lifecycle operation rejected by a rule."""
        BOOKING_REJECTIONS.labels(operation=operation, code=code).inc()

    @staticmethod
    def record_waiting_list_entry_created():
        """Record a waiting list entry creation."""
        WAITING_LIST_ENTRIES_CREATED.inc()

    @staticmethod
    def record_vacancy_opened():
        """Record a cancellation that freed a spot for the waiting list."""
        VACANCIES_OPENED.inc()

    @staticmethod
    def record_classes_completed(count: int):
        """Record classes marked as completed."""
        CLASSES_COMPLETED.inc(count)

    @staticmethod
    def record_request(method: str, endpoint: str, status_code: int, duration_seconds: float):
        """Record an HTTP request."""
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration_seconds)


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()
