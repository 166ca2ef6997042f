"""
EndpointKit: Global Exception Handlers
========================================

What:  The error-propagation boundary of every endpoint pipeline.
Why:   Pipeline stages only raise; these handlers decide what the client sees,
       so every endpoint reports failures in the same ErrorResponse shape.
How:   FastAPI's exception_handler registry, looked up by exception class.

Handler hierarchy:
    ValidationException   → 400 with the full field error list in `info`
    HttpException         → its own status, message and info
    ConfigurationError    → 500, generic message (details logged server-side)
    Exception (fallback)  → 500, generic message, traceback logged

TransportError deliberately has no dedicated handler. If nothing was sent
yet it falls through to the 500 fallback; if headers were already committed
Starlette cannot send a second response and only the log entry remains.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from endpointkit.exceptions import ConfigurationError, HttpException, ValidationException
from endpointkit.middleware.request_id import request_id_var
from endpointkit.schemas.responses import ErrorResponse

logger = logging.getLogger(__name__)


def _error_body(error: str, message: str, info=None) -> dict:
    return ErrorResponse(
        error=error,
        message=message,
        info=jsonable_encoder(info),
        request_id=request_id_var.get(""),
    ).model_dump()


def register_exception_handlers(app: FastAPI) -> None:
    """Register the boundary handlers on `app`."""

    @app.exception_handler(ValidationException)
    async def handle_validation_error(request: Request, exc: ValidationException):
        """Client sent invalid input: report every failing field at once."""
        logger.warning(
            "Validation failed for %s %s: %d field error(s)",
            request.method,
            request.url.path,
            len(exc.errors),
        )
        return JSONResponse(
            status_code=exc.status,
            content=_error_body(exc.error_code, exc.message, exc.info),
        )

    @app.exception_handler(HttpException)
    async def handle_http_exception(request: Request, exc: HttpException):
        """Any client-visible error raised by a stage of the pipeline."""
        log_level = logging.ERROR if exc.status >= 500 else logging.INFO
        logger.log(
            log_level,
            "%s %s → %d %s",
            request.method,
            request.url.path,
            exc.status,
            exc.message,
        )
        return JSONResponse(
            status_code=exc.status,
            content=_error_body(exc.error_code, exc.message, exc.info),
        )

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        """Endpoint authoring mistake: generic message to the client, details logged."""
        logger.error(
            "Configuration error on %s %s: %s | Context: %s",
            request.method,
            request.url.path,
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "server_error",
                "An internal error occurred. Please try again later.",
            ),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: never leaks internals, stack trace is logged server-side."""
        logger.error(
            "Unexpected error on %s %s: %s",
            request.method,
            request.url.path,
            str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )
