"""Middleware configuration for the FastAPI application."""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING
import uuid

from fastapi.middleware.cors import CORSMiddleware
from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware

from outbox_service.core.settings import get_app_settings
from outbox_service.infra.logging import log_context
from outbox_service.infra.metrics.prometheus import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from fastapi import FastAPI, Request, Response

    from outbox_service.core.settings.app import AppSettings

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and bind it to the logging context."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        with log_context(request_id=request_id):
            response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record HTTP request count, latency and in-flight gauge.

    Route templates (``/api/v1/products/{product_id}``) are used as the
    endpoint label to keep cardinality low. When a span is active its trace
    id is attached as an exemplar.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        method = request.method
        endpoint = request.url.path
        in_progress = http_requests_in_progress.labels(method=method, endpoint=endpoint)
        in_progress.inc()

        start_time = time.perf_counter()
        status_code = 500  # Default to error in case of exception
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration = time.perf_counter() - start_time
            route = request.scope.get("route")
            if route is not None and hasattr(route, "path"):
                endpoint = route.path

            span_context = trace.get_current_span().get_span_context()
            exemplar = (
                {"trace_id": format(span_context.trace_id, "032x")}
                if span_context.is_valid
                else None
            )
            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
                duration, exemplar=exemplar
            )
            http_requests_total.labels(
                method=method, endpoint=endpoint, status=status_code
            ).inc(exemplar=exemplar)
            in_progress.dec()


def configure_middleware(app: FastAPI, app_settings: AppSettings | None = None) -> None:
    """Install middleware; the last one added runs first."""
    app_settings = app_settings or get_app_settings()

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    if app_settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=app_settings.cors_origins,
            allow_credentials=app_settings.cors_allow_credentials,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.debug("CORS enabled", extra={"origins": app_settings.cors_origins})


__all__ = ["MetricsMiddleware", "RequestIDMiddleware", "configure_middleware"]
