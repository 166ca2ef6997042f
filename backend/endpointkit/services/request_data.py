"""
EndpointKit: Request Data Construction
========================================

What:  Reads the body, query string, route params and headers of a Starlette
       request into plain Python values.
Why:   Validators and handlers both need the same parsed view of the request;
       parsing lives in one place so they never disagree.
How:   Starlette caches the raw body and the parsed form on the Request
       object, so the body is read from the socket once even when a
       validator and the engine both ask for it.

Body handling:
    application/json (and +json)       → parsed JSON
    application/x-www-form-urlencoded  → dict (repeated keys become lists)
    multipart/form-data                → dict, file parts stay UploadFile
    anything else                      → raw bytes
    empty body                         → None
"""

import json
from typing import Any, Dict, Iterable, Tuple

from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request

from endpointkit.exceptions import BadRequestException
from endpointkit.schemas.pipeline import RequestData

FORM_MEDIA_TYPES = frozenset({"application/x-www-form-urlencoded", "multipart/form-data"})


async def read_body(request: Request) -> Any:
    """
    Parse the request body according to its Content-Type.

    Form bodies go through Starlette's form parser (python-multipart).

    Raises:
        BadRequestException: the body claims to be JSON or a form but
                             cannot be parsed as one
    """
    raw = await request.body()
    if not raw:
        return None

    media_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if media_type == "application/json" or media_type.endswith("+json"):
        try:
            return json.loads(raw)
        except ValueError as e:
            raise BadRequestException(message="Malformed JSON body") from e
    if media_type in FORM_MEDIA_TYPES:
        try:
            form = await request.form()
        except (MultiPartException, StarletteHTTPException) as e:
            raise BadRequestException(message="Malformed form body") from e
        return collapse_multi(form.multi_items())
    return raw


def collapse_multi(items: Iterable[Tuple[str, Any]]) -> Dict[str, Any]:
    """Turn (key, value) pairs into a dict; a key seen twice maps to a list."""
    result: Dict[str, Any] = {}
    for key, value in items:
        if key not in result:
            result[key] = value
        elif isinstance(result[key], list):
            result[key].append(value)
        else:
            result[key] = [result[key], value]
    return result


def read_query(request: Request) -> Dict[str, Any]:
    return collapse_multi(request.query_params.multi_items())


def read_headers(request: Request) -> Dict[str, str]:
    # Names arrive lower-cased; repeated headers are joined as one comma list
    headers: Dict[str, str] = {}
    for name, value in request.headers.items():
        headers[name] = f"{headers[name]}, {value}" if name in headers else value
    return headers


async def build_request_data(request: Request) -> RequestData:
    """Build the read-only RequestData handed to the header hook and handler."""
    return RequestData(
        body=await read_body(request),
        query=read_query(request),
        params=dict(request.path_params),
        headers=read_headers(request),
    )
