"""
EndpointKit: Endpoint Lifecycle Engine
========================================

What:  Base class that turns a declarative endpoint description into a fully
       wired FastAPI route with a fixed request pipeline.
Why:   Every endpoint gets the same ordering guarantees, the same auth and
       middleware handling and the same error propagation, while only
       describing what is specific to it.
How:   Subclasses declare path, method, validators, auth requirement and
       response kind, and override execute() (plus optionally headers() and
       file_sent()). register_route() binds dispatch() on a FastAPI router.

Request Pipeline (dispatch):
    ┌────────────┐  ┌───────────┐  ┌──────────────────┐  ┌─────────────┐
    │ Validators │→ │ Auth gate │→ │ Shared middleware │→ │ RequestData │
    └────────────┘  └───────────┘  └──────────────────┘  └─────────────┘
                                                                │
          ┌─────────────────────┐  ┌───────────┐  ┌────────────┐│
          │ Response dispatcher │← │ execute() │← │ headers()  │┘
          └─────────────────────┘  └───────────┘  └────────────┘

    Any stage may raise; the exception reaches the application's exception
    handlers unchanged and nothing else runs. A middleware may also answer
    on its own by returning a Response without calling onward.

Example:
    class GetItem(GetEndpoint):
        def __init__(self, registry):
            super().__init__("/items/{item_id}", registry=registry)
            self.set_auth_required(False)

        def get_validators(self):
            return [PydanticValidator(params=ItemParams)]

        async def execute(self, data):
            return {"id": int(data.params["item_id"])}
"""

import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from fastapi import APIRouter
from starlette.requests import Request
from starlette.responses import Response

from endpointkit.exceptions import ConfigurationError, ValidationException
from endpointkit.middleware.registry import MiddlewareRegistry
from endpointkit.schemas.pipeline import Method, RequestData, ResponseEnvelope, ResponseKind
from endpointkit.services.dispatcher import ResponseDispatcher
from endpointkit.services.request_data import build_request_data
from endpointkit.services.validation import Validator, collect_field_errors

logger = logging.getLogger(__name__)

_default_dispatcher = ResponseDispatcher()


async def _resolve(value: Any) -> Any:
    """Await `value` if the override returned an awaitable (sync or async hooks)."""
    if inspect.isawaitable(value):
        return await value
    return value


class Endpoint(ABC):
    """
    One route's complete behavioural description plus its pipeline.

    Construction-time settings:
        auth_required:  default True; set_auth_required(False) opts out of
                        the registry's auth gate
        response_kind:  default JSON; set_response_kind() switches to FILE
                        or STREAM

    Both may be changed in __init__ or setup() only. register_route() freezes
    them, and calling a setter afterwards raises ConfigurationError.
    """

    def __init__(
        self,
        path: str,
        method: Method,
        *,
        registry: MiddlewareRegistry,
        dispatcher: Optional[ResponseDispatcher] = None,
    ):
        self._path = path
        self._method = Method(method)
        self._registry = registry
        self._dispatcher = dispatcher or _default_dispatcher
        self._auth_required = True
        self._response_kind = ResponseKind.JSON
        self._registered = False
        self.setup()

    # ── Declarative surface ───────────────────────────────────────────────

    @property
    def path(self) -> str:
        return self._path

    @property
    def method(self) -> Method:
        return self._method

    @property
    def auth_required(self) -> bool:
        return self._auth_required

    @property
    def response_kind(self) -> ResponseKind:
        return self._response_kind

    @property
    def registry(self) -> MiddlewareRegistry:
        return self._registry

    def set_auth_required(self, value: bool) -> None:
        self._ensure_configurable("auth_required")
        self._auth_required = bool(value)

    def set_response_kind(self, value: ResponseKind) -> None:
        self._ensure_configurable("response_kind")
        self._response_kind = ResponseKind(value)

    def setup(self) -> None:
        """Construction hook for subclasses; runs at the end of __init__."""

    # ── Overridable steps ─────────────────────────────────────────────────

    def get_validators(self) -> List[Validator]:
        """Validators run before anything else. Default: none."""
        return []

    def headers(self, data: RequestData) -> Any:
        """
        Compute status code and response headers before the handler runs.

        May be sync or async. Default: 200 with no extra headers.
        """
        return ResponseEnvelope()

    @abstractmethod
    def execute(self, data: RequestData) -> Any:
        """
        Handle the request. May be sync or async.

        Return value by response kind:
            JSON:   anything jsonable_encoder accepts
            FILE:   path of the file to send (str)
            STREAM: async iterable, generator or readable file object
        """

    async def file_sent(self, file: str) -> None:
        """Called once after a FILE response finished sending (or failed to)."""
        return None

    # ── Wiring ────────────────────────────────────────────────────────────

    def register_route(self, router: APIRouter) -> None:
        """
        Bind this endpoint's method and path on `router`.

        Raises:
            ConfigurationError: the endpoint was already registered
        """
        if self._registered:
            raise ConfigurationError(
                f"{type(self).__name__} is already registered for "
                f"{self._method.value} {self._path}",
            )
        router.add_api_route(
            self._path,
            self.dispatch,
            methods=[self._method.value],
            name=type(self).__name__,
            response_model=None,
        )
        self._registered = True
        logger.debug(
            "Registered %s %s → %s (auth_required=%s, response_kind=%s)",
            self._method.value,
            self._path,
            type(self).__name__,
            self._auth_required,
            self._response_kind.value,
        )

    async def dispatch(self, request: Request) -> Response:
        """Per-request entry point: run the pipeline and return one Response."""
        self._registry.seal()

        errors = await collect_field_errors(request, self.get_validators())
        if errors:
            raise ValidationException(errors)

        chain = self._registry.build_chain(self._process, auth_required=self._auth_required)
        return await chain(request)

    async def _process(self, request: Request) -> Response:
        data = await build_request_data(request)

        envelope = await _resolve(self.headers(data))
        if not isinstance(envelope, ResponseEnvelope):
            envelope = ResponseEnvelope.model_validate(envelope)

        result = await _resolve(self.execute(data))
        return self._dispatcher.dispatch(
            result,
            self._response_kind,
            envelope,
            on_file_sent=self.file_sent,
        )

    def _ensure_configurable(self, attribute: str) -> None:
        if self._registered:
            raise ConfigurationError(
                f"Cannot change {attribute} of {type(self).__name__} after its route was registered",
            )


class GetEndpoint(Endpoint, ABC):
    def __init__(self, path: str = "/", *, registry: MiddlewareRegistry, **kwargs: Any):
        super().__init__(path, Method.GET, registry=registry, **kwargs)


class PostEndpoint(Endpoint, ABC):
    def __init__(self, path: str = "/", *, registry: MiddlewareRegistry, **kwargs: Any):
        super().__init__(path, Method.POST, registry=registry, **kwargs)


class PutEndpoint(Endpoint, ABC):
    def __init__(self, path: str = "/", *, registry: MiddlewareRegistry, **kwargs: Any):
        super().__init__(path, Method.PUT, registry=registry, **kwargs)


class DeleteEndpoint(Endpoint, ABC):
    def __init__(self, path: str = "/", *, registry: MiddlewareRegistry, **kwargs: Any):
        super().__init__(path, Method.DELETE, registry=registry, **kwargs)
