"""
EndpointKit: Declarative Endpoints for FastAPI
================================================

What: Turns a declarative endpoint description (path, method, validators,
      auth requirement, response kind, handler) into a FastAPI route with a
      fixed pipeline: validate → auth gate → shared middleware → header hook
      → handler → response dispatch.

Architecture Note:

    ┌─────────────────────────────────────┐
    │   Endpoint (lifecycle engine)       │  ← fixed pipeline order
    ├─────────────────────────────────────┤
    │   MiddlewareRegistry                │  ← auth gate + shared middleware
    ├─────────────────────────────────────┤
    │   Services                          │  ← validation, request data,
    │                                     │    response dispatch
    ├─────────────────────────────────────┤
    │   Exceptions + error handlers       │  ← one response per request
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"

from endpointkit.endpoint import (  # noqa: E402
    DeleteEndpoint,
    Endpoint,
    GetEndpoint,
    PostEndpoint,
    PutEndpoint,
)
from endpointkit.exceptions import (  # noqa: E402
    BadRequestException,
    ConfigurationError,
    EndpointKitError,
    FileTransferError,
    HttpException,
    StreamRelayError,
    TransportError,
    UnauthorizedException,
    ValidationException,
)
from endpointkit.middleware.registry import CallNext, MiddlewareFunc, MiddlewareRegistry  # noqa: E402
from endpointkit.schemas.pipeline import (  # noqa: E402
    FieldError,
    Method,
    RequestData,
    ResponseEnvelope,
    ResponseKind,
)
from endpointkit.services.dispatcher import ResponseDispatcher, stream_file  # noqa: E402
from endpointkit.services.validation import (  # noqa: E402
    FunctionValidator,
    PydanticValidator,
    Validator,
)

__all__ = [
    "BadRequestException",
    "CallNext",
    "ConfigurationError",
    "DeleteEndpoint",
    "Endpoint",
    "EndpointKitError",
    "FieldError",
    "FileTransferError",
    "FunctionValidator",
    "GetEndpoint",
    "HttpException",
    "Method",
    "MiddlewareFunc",
    "MiddlewareRegistry",
    "PostEndpoint",
    "PutEndpoint",
    "PydanticValidator",
    "RequestData",
    "ResponseDispatcher",
    "ResponseEnvelope",
    "ResponseKind",
    "StreamRelayError",
    "TransportError",
    "UnauthorizedException",
    "ValidationException",
    "Validator",
    "stream_file",
]
