"""Request logging and metrics middleware."""

from __future__ import annotations

import logging
import time
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from grepbase.utils.monitoring import observe_request

logger = logging.getLogger("grepbase.api")

# Logged at DEBUG and grouped under one route label.
QUIET_PREFIXES = ("/metrics",)


def route_template(request: Request) -> str:
    """Templated route path, so metric labels stay bounded."""

    route = request.scope.get("route")
    path = getattr(route, "path", None)
    if path:
        return path
    if request.url.path.startswith(QUIET_PREFIXES):
        return QUIET_PREFIXES[0]
    return "unmatched"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log each request and record it in the HTTP request metrics."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        route = route_template(request)
        observe_request(request.method, route, response.status_code, duration)

        level = logging.DEBUG if request.url.path.startswith(QUIET_PREFIXES) else logging.INFO
        logger.log(
            level,
            "request.completed",
            extra={
                "route": route,
                "path": request.url.path,
                "method": request.method,
                "status": response.status_code,
                "duration_ms": round(duration * 1000, 2),
                "client": request.client.host if request.client else None,
            },
        )

        return response
