"""
EndpointKit: Health Check Endpoint
====================================

What:  Liveness endpoint for load balancers and container health checks.
Why:   Gives every EndpointKit service a probe target out of the box, and is
       itself an ordinary Endpoint, so it exercises the same pipeline.
How:   Unauthenticated GetEndpoint returning a HealthResponse.

Note: shared middleware still runs for this endpoint; only the auth gate is
skipped.
"""

import time

from endpointkit import __version__
from endpointkit.endpoint import GetEndpoint
from endpointkit.middleware.registry import MiddlewareRegistry
from endpointkit.schemas.pipeline import RequestData
from endpointkit.schemas.responses import HealthResponse

_start_time = time.time()


class HealthEndpoint(GetEndpoint):
    def __init__(self, registry: MiddlewareRegistry, path: str = "/health"):
        super().__init__(path, registry=registry)

    def setup(self) -> None:
        # Probes carry no credentials
        self.set_auth_required(False)

    async def execute(self, data: RequestData) -> HealthResponse:
        return HealthResponse(
            status="healthy",
            version=__version__,
            uptime_seconds=round(time.time() - _start_time, 2),
        )
