"""
EndpointKit: Request Logging Middleware
=========================================

What:  One access log line per HTTP request with status and duration.
Why:   Endpoint pipelines stay free of logging calls; every request, including
       ones rejected by validation or the auth gate, still leaves a trace.
How:   Times the whole downstream stack around call_next and logs on the
       "endpointkit.access" logger. The request id is not part of the message:
       RequestIDLogFilter stamps it on the record for the formatter.
When:  Inside RequestIDMiddleware, so the request id is already available.

Logged: method, path, status, duration, client IP.
Never logged: bodies, query values, headers.
"""

import logging
import time
from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger("endpointkit.access")


def status_log_level(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, anything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Access logging for endpoint traffic.

    For FILE and STREAM responses the duration covers the pipeline up to the
    status line, not the body transfer.

    Paths in `excluded_paths` (typically the health endpoint) pass through
    without a log line.
    """

    def __init__(self, app: ASGIApp, excluded_paths: Iterable[str] = ()):
        super().__init__(app)
        self.excluded_paths = frozenset(p for p in excluded_paths if p)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.excluded_paths:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        client = request.client.host if request.client else "unknown"
        logger.log(
            status_log_level(response.status_code),
            "%s %s -> %d in %.1fms (client %s)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            client,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
                "client_ip": client,
            },
        )
        return response
