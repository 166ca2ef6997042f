"""
EndpointKit: Request ID Middleware
====================================

What:  Assigns a correlation id to each incoming request and echoes it back.
Why:   Every log line and every error body of one request share the same id,
       so a client-reported failure can be found in the logs directly.
How:   Reads the id from the request header or generates one, stores it in a
       ContextVar and request.state, and sets it on the response header.
When:  Outermost application middleware (runs before any endpoint pipeline).
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

# Coroutine-local storage for the current request id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that assigns a unique ID to each request for tracing.

    Behavior:
        1. Use the client's id header if present (end-to-end tracing)
        2. Otherwise generate a short UUID
        3. Store in ContextVar (loggers, error handlers) and request.state
        4. Add to response headers
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 8 hex chars are enough for correlation and stay readable in logs
        rid = request.headers.get(self.header_name) or str(uuid.uuid4())[:8]

        # Not reset afterwards: the catch-all error handler runs outside this
        # middleware and still needs the id for its log line and body
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers[self.header_name] = rid
        return response


class RequestIDLogFilter(logging.Filter):
    """
    Injects the current request id into every log record.

    Makes `%(request_id)s` usable in the log format; records emitted outside a
    request get "-".
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get("") or "-"
        return True
