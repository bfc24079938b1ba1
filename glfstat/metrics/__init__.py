"""Prometheus registry and the HTTP middleware feeding it."""

from __future__ import annotations

import time
from typing import Any, Awaitable, Callable

from fastapi import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()
HTTP_REQUESTS_TOTAL = Counter(
    "glfstat_http_requests_total",
    "HTTP requests by route template",
    ["route", "method", "status"],
    registry=REGISTRY,
)
HTTP_REQUEST_SECONDS = Histogram(
    "glfstat_http_request_seconds",
    "HTTP request latency by route template",
    ["route", "method"],
    registry=REGISTRY,
)

Asgi = Callable[..., Awaitable[Any]]


def render_metrics() -> Response:
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


def _route_template(scope: dict[str, Any]) -> str:
    # ids in raw paths would explode label cardinality
    route = scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class MetricsMiddleware:
    def __init__(self, app: Asgi):
        self.app = app

    async def __call__(self, scope: dict[str, Any], receive: Asgi, send: Asgi) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        status_code = 500
        started = time.perf_counter()

        async def _send(message: dict[str, Any]) -> None:
            nonlocal status_code
            if message.get("type") == "http.response.start":
                status_code = message.get("status", 200)
            await send(message)

        try:
            await self.app(scope, receive, _send)
        finally:
            route = _route_template(scope)
            method = scope.get("method", "GET")
            HTTP_REQUEST_SECONDS.labels(route=route, method=method).observe(
                time.perf_counter() - started
            )
            HTTP_REQUESTS_TOTAL.labels(
                route=route, method=method, status=str(status_code)
            ).inc()


__all__ = ["REGISTRY", "MetricsMiddleware", "render_metrics"]
