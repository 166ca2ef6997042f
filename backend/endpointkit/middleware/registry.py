"""
EndpointKit: Middleware Registry (Auth Gate & Shared Middleware)
=================================================================

What:  The set of cross-cutting handlers shared by every endpoint: one
       optional auth gate plus an ordered list of shared middleware.
Why:   Endpoints describe only their own behaviour; authentication, auditing,
       tenancy checks and similar concerns are registered once and applied
       uniformly.
How:   A MiddlewareRegistry is created at startup and handed by reference to
       every Endpoint. For each request, build_chain() wraps the endpoint's
       terminal step in [auth gate?] + shared middleware, in registration
       order.

Middleware protocol (same shape as Starlette's dispatch(request, call_next)):

    async def audit(request: Request, call_next: CallNext) -> Response:
        response = await call_next(request)
        ...
        return response

    A middleware short-circuits by raising (e.g. UnauthorizedException) or by
    returning its own Response without calling call_next. call_next may be
    awaited at most once.

Lifecycle:
    register_*()  → only during startup
    seal()        → called by the app lifespan or the first dispatched request
    build_chain() → per request, read-only
"""

import logging
from typing import Awaitable, Callable, Optional, Tuple

from starlette.requests import Request
from starlette.responses import Response

from endpointkit.config import settings
from endpointkit.exceptions import ConfigurationError, UnauthorizedException

logger = logging.getLogger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]
MiddlewareFunc = Callable[[Request, CallNext], Awaitable[Response]]


class MiddlewareRegistry:
    """
    Shared, startup-configured middleware for a group of endpoints.

    Attributes:
        allow_unauthenticated: What to do when an endpoint requires auth but
            no auth gate was registered. True lets the request through, False
            rejects it with 401.
    """

    def __init__(self, allow_unauthenticated: Optional[bool] = None):
        if allow_unauthenticated is None:
            allow_unauthenticated = settings.allow_unauthenticated
        self.allow_unauthenticated = allow_unauthenticated
        self._middlewares: Tuple[MiddlewareFunc, ...] = ()
        self._auth_middleware: Optional[MiddlewareFunc] = None
        self._sealed = False

    @property
    def middlewares(self) -> Tuple[MiddlewareFunc, ...]:
        return self._middlewares

    @property
    def auth_middleware(self) -> Optional[MiddlewareFunc]:
        return self._auth_middleware

    @property
    def sealed(self) -> bool:
        return self._sealed

    def register_middleware(self, middleware: MiddlewareFunc) -> MiddlewareFunc:
        """
        Append a shared middleware. Runs after the auth gate, in registration
        order, for every endpoint. No de-duplication: registering the same
        function twice runs it twice.

        Returns the middleware so this can be used as a decorator.
        """
        self._ensure_open("register_middleware")
        self._middlewares = self._middlewares + (middleware,)
        logger.debug("Registered shared middleware %s", _name(middleware))
        return middleware

    def register_auth_middleware(self, middleware: MiddlewareFunc) -> MiddlewareFunc:
        """Set the auth gate. Last registration wins."""
        self._ensure_open("register_auth_middleware")
        if self._auth_middleware is not None:
            logger.info(
                "Replacing auth middleware %s with %s",
                _name(self._auth_middleware),
                _name(middleware),
            )
        self._auth_middleware = middleware
        return middleware

    def seal(self) -> None:
        """Freeze the registry. Idempotent."""
        if self._sealed:
            return
        self._sealed = True
        if self._auth_middleware is None and self.allow_unauthenticated:
            logger.warning(
                "No auth middleware registered: endpoints that require auth "
                "will accept unauthenticated requests"
            )
        logger.debug(
            "Middleware registry sealed with %d shared middleware",
            len(self._middlewares),
        )

    def build_chain(self, endpoint: CallNext, auth_required: bool) -> CallNext:
        """
        Compose the per-request chain ending in `endpoint`.

        Order: auth gate (if required) → shared middleware → endpoint.
        """
        stages = []
        if auth_required:
            if self._auth_middleware is not None:
                stages.append(self._auth_middleware)
            elif not self.allow_unauthenticated:
                stages.append(_deny_unauthenticated)
        stages.extend(self._middlewares)

        handler = endpoint
        for middleware in reversed(stages):
            handler = _link(middleware, handler)
        return handler

    def _ensure_open(self, operation: str) -> None:
        if self._sealed:
            raise ConfigurationError(
                f"{operation} called after the middleware registry was sealed; "
                "register middleware before serving requests",
            )


def _link(middleware: MiddlewareFunc, downstream: CallNext) -> CallNext:
    """Bind one middleware to the rest of the chain with a single-use call_next."""

    async def call(request: Request) -> Response:
        advanced = False

        async def call_next(req: Request) -> Response:
            nonlocal advanced
            if advanced:
                raise ConfigurationError(
                    f"Middleware {_name(middleware)} called call_next more than once"
                )
            advanced = True
            return await downstream(req)

        response = await middleware(request, call_next)
        if response is None:
            raise ConfigurationError(f"Middleware {_name(middleware)} returned no response")
        return response

    return call


async def _deny_unauthenticated(request: Request, call_next: CallNext) -> Response:
    raise UnauthorizedException()


def _name(middleware: MiddlewareFunc) -> str:
    return getattr(middleware, "__qualname__", None) or repr(middleware)
