# Middleware package init
"""
EndpointKit: Middleware Package
=================================

Two different kinds of middleware live here.

ASGI middleware (application-wide, added by create_app):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → route

    - request_id.py:  correlation id in a ContextVar and response header
    - logging.py:     one access log line per request

Endpoint middleware (registry.py):
    Inside each route, after validation:
    [Auth gate] → [Shared middleware...] → header hook → handler

    Registered once on a MiddlewareRegistry and applied to every endpoint
    that shares it, in registration order.
"""
