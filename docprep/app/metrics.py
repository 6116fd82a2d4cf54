from __future__ import annotations

import time

from fastapi import Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.responses import Response

from docprep.app.settings import settings

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
CACHE_LOOKUPS = Counter(
    "docprep_cache_lookups_total",
    "Response cache lookups by result",
    ["result"],
)
PREPARE_STRATEGY = Counter(
    "docprep_prepare_strategy_total",
    "Document preparation outcomes by strategy",
    ["strategy"],
)


def record_cache_lookup(hit: bool) -> None:
    if settings.metrics_enabled:
        CACHE_LOOKUPS.labels("hit" if hit else "miss").inc()


def record_prepare_strategy(strategy: str) -> None:
    if settings.metrics_enabled:
        PREPARE_STRATEGY.labels(strategy).inc()


async def metrics_middleware(request: Request, call_next):
    if not settings.metrics_enabled:
        return await call_next(request)
    path = request.url.path
    if path == "/metrics":
        return await call_next(request)
    start = time.monotonic()
    status = 500
    try:
        response = await call_next(request)
        status = response.status_code
        return response
    finally:
        duration = time.monotonic() - start
        REQUEST_COUNT.labels(request.method, path, str(status)).inc()
        REQUEST_LATENCY.labels(request.method, path).observe(duration)


def metrics_response() -> Response:
    if not settings.metrics_enabled:
        return Response(status_code=404)
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
