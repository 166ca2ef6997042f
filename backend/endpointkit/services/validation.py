"""
EndpointKit: Validation Adapters
==================================

What:  The contract the lifecycle engine uses to ask "is this request valid?"
       plus two ready-made adapters.
Why:   The engine treats validation as a black box that returns an ordered
       list of field errors. Rule semantics belong to the adapter.
How:   A Validator is awaited with the raw Starlette request and returns a
       list of FieldError (empty = valid). An endpoint may declare several
       validators; their errors are concatenated in declaration order.

Adapter Inventory:
    - PydanticValidator:  one pydantic model per request location
    - FunctionValidator:  wraps a plain (sync or async) callable
"""

import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Type, Union

import pydantic
from starlette.requests import Request

from endpointkit.exceptions import BadRequestException
from endpointkit.schemas.pipeline import FieldError
from endpointkit.services.request_data import read_body, read_headers, read_query

logger = logging.getLogger(__name__)


class Validator(ABC):
    """
    Abstract validation adapter.

    Contract:
        - validate() never raises for invalid input; it returns the errors
        - the returned order is the order reported to the client
        - unexpected failures (bugs) may raise and become a 500
    """

    @abstractmethod
    async def validate(self, request: Request) -> List[FieldError]:
        ...


class PydanticValidator(Validator):
    """
    Validates request locations against pydantic models.

    Usage:
        class CreateItem(BaseModel):
            name: str
            price: float = Field(gt=0)

        PydanticValidator(body=CreateItem)

    Locations are checked in the order body, query, params, headers; every
    failing field of every location is reported. An empty body is validated
    as {} so that missing required fields are reported by name.
    """

    def __init__(
        self,
        *,
        body: Optional[Type[pydantic.BaseModel]] = None,
        query: Optional[Type[pydantic.BaseModel]] = None,
        params: Optional[Type[pydantic.BaseModel]] = None,
        headers: Optional[Type[pydantic.BaseModel]] = None,
    ):
        self.models: Dict[str, Type[pydantic.BaseModel]] = {
            location: model
            for location, model in (
                ("body", body),
                ("query", query),
                ("params", params),
                ("headers", headers),
            )
            if model is not None
        }

    async def validate(self, request: Request) -> List[FieldError]:
        errors: List[FieldError] = []
        for location, model in self.models.items():
            try:
                source = await self._read(request, location)
            except BadRequestException as e:
                errors.append(FieldError(field=location, message=e.message, location=location))
                continue
            try:
                model.model_validate(source)
            except pydantic.ValidationError as e:
                errors.extend(_from_pydantic(e, location))
        return errors

    @staticmethod
    async def _read(request: Request, location: str) -> Any:
        if location == "body":
            body = await read_body(request)
            return {} if body is None else body
        if location == "query":
            return read_query(request)
        if location == "params":
            return dict(request.path_params)
        return read_headers(request)


ErrorLike = Union[FieldError, Tuple[str, str]]


class FunctionValidator(Validator):
    """
    Wraps a callable taking the request and returning field errors.

    The callable may be sync or async and may yield FieldError instances or
    (field, message) tuples; tuples are reported with `location`.

        def require_tenant(request):
            if "x-tenant" not in request.headers:
                yield ("x-tenant", "Header required")

        FunctionValidator(require_tenant, location="headers")
    """

    def __init__(
        self,
        func: Callable[[Request], Any],
        location: str = "request",
    ):
        self.func = func
        self.location = location

    async def validate(self, request: Request) -> List[FieldError]:
        result = self.func(request)
        if inspect.isawaitable(result):
            result = await result
        return [_coerce(item, self.location) for item in (result or ())]


async def collect_field_errors(
    request: Request, validators: Sequence[Validator]
) -> List[FieldError]:
    """Run every validator in order and concatenate their errors."""
    errors: List[FieldError] = []
    for validator in validators:
        errors.extend(await validator.validate(request))
    if errors:
        logger.debug(
            "Request %s %s failed validation with %d field error(s)",
            request.method,
            request.url.path,
            len(errors),
        )
    return errors


def _from_pydantic(exc: pydantic.ValidationError, location: str) -> Iterable[FieldError]:
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or location
        yield FieldError(field=field, message=error["msg"], location=location)


def _coerce(item: ErrorLike, location: str) -> FieldError:
    if isinstance(item, FieldError):
        return item
    field, message = item
    return FieldError(field=field, message=message, location=location)
