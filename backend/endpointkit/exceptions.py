"""
EndpointKit: Exception Hierarchy
==================================

What:  Typed errors used as the vocabulary of the endpoint pipeline.
Why:   Every pipeline stage short-circuits by raising. The global exception
       handlers (error_handlers.py) turn these into exactly one response.
How:   Each exception carries a message and an optional context dict for
       server-side logging. HTTP-mapped errors additionally carry a status
       code and a client-facing `info` payload.
Who:   Raised by validators, auth gates, middleware, handlers and the
       response dispatcher; caught by the handlers registered in main.py.

Exception Hierarchy:
    EndpointKitError (base)
    ├── HttpException                 → carried status (client-visible info)
    │   ├── BadRequestException       → 400 Bad Request
    │   │   └── ValidationException   → 400 with the full field error list
    │   └── UnauthorizedException     → 401 Unauthorized
    ├── ConfigurationError            → 500 (endpoint authoring mistake)
    └── TransportError                → 500 if nothing was sent yet, else logged
        ├── FileTransferError
        └── StreamRelayError
"""

from typing import Any, Dict, List, Optional, Sequence

from endpointkit.schemas.pipeline import FieldError


class EndpointKitError(Exception):
    """
    Base exception for all EndpointKit errors.

    Attributes:
        message:  Human-readable error description
        context:  Additional debug info (logged, never returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class HttpException(EndpointKitError):
    """
    An error that maps directly onto an HTTP response.

    What:    Base of the client-visible errors. The exception handler writes
             `status` as the response code and returns `message` and `info`.
    How:     Subclasses fix `status` and `error_code`; ad-hoc errors can be
             raised directly, e.g. HttpException(409, "Already exists").

    Attributes:
        status:      HTTP status code written to the response
        info:        Optional structured detail returned to the client
        error_code:  Machine-readable error identifier for the response body
    """

    error_code = "http_error"

    def __init__(
        self,
        status: int,
        message: str,
        info: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.status = status
        self.info = info


class BadRequestException(HttpException):
    """Client input cannot be processed. HTTP 400."""

    error_code = "bad_request"

    def __init__(self, message: str = "Bad request", info: Any = None):
        super().__init__(400, message, info)


class ValidationException(BadRequestException):
    """
    Raised when one or more validators reject the request.

    What:    Carries every field error the validators produced, in order.
    Why:     Clients get complete validation feedback in one round trip
             instead of fixing fields one at a time.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Bad request",
            "info": [{"field": "name", "message": "Field required", "location": "body"}]
        }
    """

    error_code = "validation_error"

    def __init__(self, errors: Sequence[FieldError]):
        if not errors:
            raise ValueError("ValidationException requires at least one field error")
        super().__init__(message="Bad request", info=list(errors))

    @property
    def errors(self) -> List[FieldError]:
        return self.info


class UnauthorizedException(HttpException):
    """Request is missing valid credentials. HTTP 401."""

    error_code = "unauthorized"

    def __init__(self, message: str = "Authentication required", info: Any = None):
        super().__init__(401, message, info)


class ConfigurationError(EndpointKitError):
    """
    Raised when an endpoint or registry is wired incorrectly.

    What:    Programmer misuse, not client input: unknown response kind,
             handler result of the wrong type for the declared kind, a route
             registered twice, registry changes after traffic started.
    HTTP:    500 Internal Server Error (generic message, details logged)
    """

    def __init__(
        self,
        message: str = "Endpoint is misconfigured",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TransportError(EndpointKitError):
    """
    Raised when sending a file or relaying a stream fails.

    What:    The response body could not be delivered.
    When:    Before headers are committed the boundary answers with a 500.
             After commit the failure can only be logged, because a second
             status line cannot be written on the same response.
    """

    def __init__(
        self,
        message: str = "Response body could not be delivered",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileTransferError(TransportError):
    """A FILE response could not be sent."""

    def __init__(self, file: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["file"] = file
        super().__init__(message="Error sending file", context=ctx)
        self.file = file


class StreamRelayError(TransportError):
    """The source of a STREAM response failed while being relayed."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Error relaying response stream", context=context)
