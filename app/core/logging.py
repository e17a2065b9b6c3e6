"""Log configuration and optional OTLP tracing for the validation API."""

from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from app.core.config import Settings

APP_LOGGER = "app"

# Driver and exporter loggers never go below WARNING.
_QUIET_LOGGERS = ("asyncpg", "urllib3", "opentelemetry")

_active_provider: TracerProvider | None = None


def parse_otlp_headers(header_string: str | None) -> dict[str, str]:
    """Parse ``key=value,key2=value2`` exporter headers, skipping malformed items."""

    headers: dict[str, str] = {}
    for item in (header_string or "").split(","):
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            continue
        headers[key.strip()] = value.strip()
    return headers


def build_logging_config(settings: Settings) -> dict[str, Any]:
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    quiet_level = logging.getLevelName(max(level, logging.WARNING))

    loggers: dict[str, Any] = {name: {"level": quiet_level} for name in _QUIET_LOGGERS}
    loggers[APP_LOGGER] = {"level": logging.getLevelName(level)}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"plain": {"format": settings.log_format}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "level": logging.getLevelName(level),
            }
        },
        "loggers": loggers,
        "root": {"handlers": ["console"], "level": logging.getLevelName(level)},
    }


def configure_logging(settings: Settings) -> logging.Logger:
    """Apply :func:`build_logging_config` and return the ``app`` logger."""

    dictConfig(build_logging_config(settings))
    return logging.getLogger(APP_LOGGER)


def _span_exporter(settings: Settings) -> OTLPSpanExporter:
    options: dict[str, Any] = {}
    if settings.otel_exporter_otlp_endpoint:
        options["endpoint"] = settings.otel_exporter_otlp_endpoint
    headers = parse_otlp_headers(settings.otel_exporter_otlp_headers)
    if headers:
        options["headers"] = headers
    return OTLPSpanExporter(**options)


def init_tracer(settings: Settings) -> TracerProvider | None:
    """Register a batching OTLP provider for dispatch spans.

    Returns ``None`` when tracing is off or a provider from an earlier call is
    still active; the global no-op tracer then serves ``workflow.dispatch``.
    """

    global _active_provider

    if not settings.otel_enabled or _active_provider is not None:
        return None

    provider = TracerProvider(resource=Resource.create({"service.name": settings.otel_service_name}))
    provider.add_span_processor(BatchSpanProcessor(_span_exporter(settings)))
    trace.set_tracer_provider(provider)
    _active_provider = provider
    logging.getLogger(APP_LOGGER).info("Tracing enabled for %s", settings.otel_service_name)
    return provider


def shutdown_tracer(provider: TracerProvider | None) -> None:
    global _active_provider

    if provider is None:
        return
    provider.shutdown()
    if provider is _active_provider:
        _active_provider = None
