"""
EndpointKit: Response Body Schemas
====================================

What:  Pydantic models for the bodies EndpointKit itself writes.
Why:   Error and health payloads keep one shape across every endpoint, which
       lets clients parse failures without per-route special cases.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    What:  Standard error response format for every failed request.
    Who:   Built by the exception handlers in error_handlers.py.

    Example:
        {
            "error": "validation_error",
            "message": "Bad request",
            "info": [{"field": "name", "message": "Field required", "location": "body"}],
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")
    info: Optional[Any] = Field(
        default=None,
        description="Structured detail, e.g. the list of field errors",
    )
    request_id: str = Field(default="", description="Correlation id for support")


class HealthResponse(BaseModel):
    """
    What:  Liveness payload returned by the health endpoint.
    Who:   Polled by load balancers and container health checks.
    """
    status: str = Field(description="Always 'healthy' while the process serves requests")
    version: str = Field(description="EndpointKit version")
    uptime_seconds: float = Field(description="Seconds since the module was imported")
