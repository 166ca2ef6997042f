"""
EndpointKit: Pipeline Data Models
===================================

What:  Pydantic models that flow between the stages of the endpoint pipeline.
Why:   Each stage receives a typed, immutable value instead of the raw
       Starlette request, so handlers cannot mutate what later stages see.
How:   Frozen pydantic v2 models; instances are built fresh for every request.
Who:   Built by services.request_data and services.validation, consumed by
       endpoint.Endpoint and services.dispatcher.

Model Inventory:
    - Method:           HTTP verb an endpoint is bound to
    - ResponseKind:     wire strategy for the handler's result
    - FieldError:       one validation failure tied to one input field
    - RequestData:      read-only view of body, query, route params and headers
    - ResponseEnvelope: status code + headers, computed before the handler runs
"""

from enum import Enum
from typing import Any, Dict, Literal

from pydantic import BaseModel, Field

FieldLocation = Literal["body", "query", "params", "headers", "request"]


class Method(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class ResponseKind(str, Enum):
    """
    How the handler's return value is written to the wire.

        JSON:   value is JSON-encoded (dicts, lists, pydantic models, ...)
        FILE:   value is a path string; the file is sent
        STREAM: value is a readable stream; its chunks are relayed
    """
    JSON = "json"
    FILE = "file"
    STREAM = "stream"


class FieldError(BaseModel):
    """
    What:  A single field-level rule violation reported by a validator.
    Who:   Collected by the lifecycle engine and returned to the client in the
           `info` list of a 400 response.

    Example:
        {"field": "name", "message": "Field required", "location": "body"}
    """
    field: str = Field(description="Dotted path of the offending input field")
    message: str = Field(description="Human-readable description of the violation")
    location: FieldLocation = Field(
        default="body",
        description="Which part of the request the field was read from",
    )

    model_config = {"frozen": True}


class RequestData(BaseModel):
    """
    What:  Read-only view of one incoming request.
    When:  Constructed exactly once per request, after validation, auth and
           shared middleware have all let the request through.

    Why frozen:
        The same instance is handed to the header hook and then to the handler.
        Freezing guarantees the handler sees exactly what the header hook saw.
    """
    body: Any = Field(default=None, description="Parsed JSON, form dict, raw bytes or None")
    query: Dict[str, Any] = Field(default_factory=dict)
    params: Dict[str, Any] = Field(default_factory=dict)
    headers: Dict[str, str] = Field(default_factory=dict)

    model_config = {"frozen": True}


class ResponseEnvelope(BaseModel):
    """
    What:  Status code and headers for the outgoing response.
    Who:   Returned by Endpoint.headers(); applied by the dispatcher before any
           body byte is written.
    """
    status: int = Field(default=200, ge=100, le=599)
    headers: Dict[str, str] = Field(default_factory=dict)

    model_config = {"frozen": True}
