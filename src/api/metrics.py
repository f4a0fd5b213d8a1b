"""Prometheus counters for HTTP traffic, transcription and the waitlist."""

from __future__ import annotations

import time
from typing import Callable

from fastapi import APIRouter, FastAPI, Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)

NAMESPACE = "crisp"

HTTP_REQUESTS = Counter(
    "http_requests_total",
    "HTTP requests by route template and status",
    labelnames=("route", "method", "status"),
    namespace=NAMESPACE,
)

HTTP_LATENCY = Histogram(
    "http_request_seconds",
    "HTTP handling time by route template",
    labelnames=("route", "method"),
    namespace=NAMESPACE,
)

TRANSCRIBE_COUNTER = Counter(
    "transcriptions_total",
    "Transcription outcomes by provider (ok, empty, error)",
    labelnames=("provider", "status"),
    namespace=NAMESPACE,
)

TRANSCRIBE_DURATION = Histogram(
    "transcription_provider_seconds",
    "Time spent waiting on the transcription provider",
    labelnames=("provider",),
    namespace=NAMESPACE,
    buckets=(0.5, 1, 2, 5, 10, 20, 30, 60),
)

WAITLIST_COUNTER = Counter(
    "waitlist_submissions_total",
    "Waitlist submissions by outcome (accepted, rejected, throttled, error)",
    labelnames=("status",),
    namespace=NAMESPACE,
)

router = APIRouter(tags=["metrics"])


@router.get("/metrics", include_in_schema=False)
async def metrics_endpoint() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


def instrument_app(app: FastAPI) -> FastAPI:
    @app.middleware("http")
    async def count_requests(request: Request, call_next: Callable):  # type: ignore
        if request.url.path == "/metrics":
            return await call_next(request)
        started = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            route = _route_template(request)
            HTTP_REQUESTS.labels(route=route, method=request.method, status=str(status)).inc()
            HTTP_LATENCY.labels(route=route, method=request.method).observe(
                time.perf_counter() - started
            )

    return app
