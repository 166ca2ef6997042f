"""
EndpointKit: Test Configuration (conftest.py)
===============================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (raw Starlette requests, test
       settings, HTTP clients over ASGI, temp files).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Inventory:
    ├── make_request:   factory for Starlette Request objects (no app needed)
    ├── registry:       fresh permissive MiddlewareRegistry
    ├── test_settings:  Settings with GZip and the health endpoint disabled
    ├── client_for:     factory for HTTPX AsyncClient over ASGITransport
    └── sample_file:    small file on disk for FILE/STREAM tests
"""

import os
from typing import Any, Dict, List, Optional, Tuple, Union

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

# Override settings for testing BEFORE any app imports
os.environ["ENDPOINTKIT_LOG_LEVEL"] = "WARNING"

from endpointkit.config import Settings  # noqa: E402
from endpointkit.middleware.registry import MiddlewareRegistry  # noqa: E402


def build_request(
    method: str = "GET",
    path: str = "/",
    body: bytes = b"",
    headers: Optional[Union[Dict[str, str], List[Tuple[str, str]]]] = None,
    query_string: bytes = b"",
    path_params: Optional[Dict[str, Any]] = None,
) -> Request:
    """
    Build a Starlette Request whose receive channel yields `body` once.

    `headers` may be a dict or a list of pairs when a name repeats.
    """
    pairs = headers.items() if isinstance(headers, dict) else headers or []
    raw_headers = [
        (name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in pairs
    ]
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "server": ("test", 80),
        "client": ("127.0.0.1", 50000),
        "root_path": "",
        "path": path,
        "raw_path": path.encode("latin-1"),
        "query_string": query_string,
        "headers": raw_headers,
        "path_params": path_params or {},
    }
    delivered = False

    async def receive():
        nonlocal delivered
        if delivered:
            return {"type": "http.disconnect"}
        delivered = True
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, receive)


@pytest.fixture
def make_request():
    """
    Provides a factory for raw Starlette requests.

    Usage:
        async def test_x(make_request):
            request = make_request("POST", body=b'{"a": 1}',
                                   headers={"content-type": "application/json"})
    """
    return build_request


@pytest.fixture
def registry():
    """A fresh registry that lets auth-required requests through when no gate is set."""
    return MiddlewareRegistry(allow_unauthenticated=True)


@pytest.fixture
def test_settings():
    """
    Settings for app-level tests.

    GZip off so byte-level assertions see raw bodies; health endpoint off so
    the route table only holds the endpoints under test.
    """
    return Settings(gzip_minimum_size=0, health_path="", log_level="WARNING")


@pytest.fixture
def client_for():
    """
    Provides a factory for HTTPX AsyncClients talking to an ASGI app.

    Usage:
        async with client_for(app) as client:
            response = await client.get("/items/5")

    Pass raise_app_exceptions=False to observe the 500 written by the
    catch-all handler instead of the re-raised exception.
    """

    def factory(app, **transport_kwargs) -> AsyncClient:
        transport = ASGITransport(app=app, **transport_kwargs)
        return AsyncClient(transport=transport, base_url="http://test")

    return factory


@pytest.fixture
def sample_file(tmp_path):
    """A small binary file standing in for a generated report."""
    path = tmp_path / "report.pdf"
    path.write_bytes(b"%PDF-1.4 fake report body\n" * 8)
    return path
