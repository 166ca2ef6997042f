"""
EndpointKit: FastAPI Application Factory
==========================================

What:  Creates a FastAPI application serving a set of EndpointKit endpoints.
Why:   Centralizes logging setup, ambient middleware, exception handlers and
       route registration, so services only declare their endpoints.
How:   create_app(registry, endpoints) returns a configured FastAPI instance.
Who:   Called from a service's ASGI module, e.g.

           registry = MiddlewareRegistry()
           registry.register_auth_middleware(require_token)
           app = create_app(registry, [GetItem(registry), CreateItem(registry)])

       and served with any ASGI server (uvicorn service.asgi:app).

Application Architecture:
    ┌────────────────────────────────────────────────────┐
    │                    FastAPI App                     │
    │                                                    │
    │  ASGI middleware:                                  │
    │  ┌────────────┐ ┌──────────┐ ┌──────┐ ┌──────┐    │
    │  │ Request ID │→│ Logging  │→│ GZip │→│ CORS │    │
    │  └────────────┘ └──────────┘ └──────┘ └──────┘    │
    │                                                    │
    │  Routes (one per Endpoint, each running           │
    │  validate → auth → shared middleware → handler):   │
    │  ┌──────────────┐ ┌─────────────┐ ┌─────────────┐  │
    │  │ GET /items/… │ │ POST /items │ │ GET /health │  │
    │  └──────────────┘ └─────────────┘ └─────────────┘  │
    │                                                    │
    │  Exception handlers (error_handlers.py)            │
    └────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   configure logging, seal the middleware registry
    Shutdown:  log shutdown
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Iterable, Optional

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from endpointkit import __version__
from endpointkit.config import Settings, settings as default_settings
from endpointkit.endpoint import Endpoint
from endpointkit.error_handlers import register_exception_handlers
from endpointkit.middleware.logging import RequestLoggingMiddleware
from endpointkit.middleware.registry import MiddlewareRegistry
from endpointkit.middleware.request_id import RequestIDLogFilter, RequestIDMiddleware
from endpointkit.routes.health import HealthEndpoint

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(config: Optional[Settings] = None) -> None:
    """
    Configure application logging.

    What:    Root logger to stdout with a consistent format that includes the
             request id of the request being served.
    When:    Called once during app startup.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s
    """
    config = config or default_settings
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Uvicorn's own access log duplicates RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    registry: MiddlewareRegistry,
    endpoints: Iterable[Endpoint],
    config: Optional[Settings] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        registry:   the middleware registry shared by `endpoints`; also used
                    for the built-in health endpoint
        endpoints:  endpoint instances to mount, each registered exactly once
        config:     settings override (tests); defaults to the env-loaded ones

    Returns: Fully configured FastAPI instance.
    """
    config = config or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(config)
        registry.seal()
        logger.info("%s starting with %d route(s)", config.app_name, len(app.routes))
        yield
        logger.info("%s shutting down", config.app_name)

    app = FastAPI(title=config.app_name, version=__version__, lifespan=lifespan)

    # Middleware executes in REVERSE order of addition:
    # Request ID → Logging → GZip → CORS → routes
    origins = config.cors_origins_list
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=[config.request_id_header],
        )
    if config.gzip_minimum_size:
        app.add_middleware(GZipMiddleware, minimum_size=config.gzip_minimum_size)
    app.add_middleware(RequestLoggingMiddleware, excluded_paths=[config.health_path])
    app.add_middleware(RequestIDMiddleware, header_name=config.request_id_header)

    register_exception_handlers(app)

    router = APIRouter()
    for endpoint in endpoints:
        if endpoint.registry is not registry:
            logger.warning(
                "%s %s uses a different middleware registry than the application",
                endpoint.method.value,
                endpoint.path,
            )
        endpoint.register_route(router)
    if config.health_path:
        HealthEndpoint(registry, path=config.health_path).register_route(router)
    app.include_router(router)

    return app
