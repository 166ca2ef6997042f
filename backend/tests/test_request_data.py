"""
EndpointKit: Request Data Unit Tests
======================================

What:  Tests for reading a Starlette request into RequestData.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from endpointkit.exceptions import BadRequestException
from endpointkit.services.request_data import (
    build_request_data,
    collapse_multi,
    read_body,
    read_headers,
)

MULTIPART_BODY = (
    b"--X\r\n"
    b"Content-Disposition: form-data; name=\"name\"\r\n\r\n"
    b"lamp\r\n"
    b"--X\r\n"
    b"Content-Disposition: form-data; name=\"tag\"\r\n\r\n"
    b"a\r\n"
    b"--X\r\n"
    b"Content-Disposition: form-data; name=\"tag\"\r\n\r\n"
    b"b\r\n"
    b"--X--\r\n"
)


class TestReadBody:

    @pytest.mark.asyncio
    async def test_json_body_is_parsed(self, make_request):
        request = make_request(
            "POST", body=b'{"name": "lamp"}', headers={"content-type": "application/json"}
        )
        assert await read_body(request) == {"name": "lamp"}

    @pytest.mark.asyncio
    async def test_vendor_json_media_type_is_parsed(self, make_request):
        request = make_request(
            "POST",
            body=b"[1, 2]",
            headers={"content-type": "application/vnd.api+json; charset=utf-8"},
        )
        assert await read_body(request) == [1, 2]

    @pytest.mark.asyncio
    async def test_empty_body_is_none(self, make_request):
        assert await read_body(make_request("POST")) is None

    @pytest.mark.asyncio
    async def test_malformed_json_is_bad_request(self, make_request):
        request = make_request(
            "POST", body=b"{not json", headers={"content-type": "application/json"}
        )
        with pytest.raises(BadRequestException, match="Malformed JSON"):
            await read_body(request)

    @pytest.mark.asyncio
    async def test_form_body_becomes_dict(self, make_request):
        request = make_request(
            "POST",
            body=b"tag=a&tag=b&name=lamp",
            headers={"content-type": "application/x-www-form-urlencoded"},
        )
        assert await read_body(request) == {"tag": ["a", "b"], "name": "lamp"}

    @pytest.mark.asyncio
    async def test_multipart_body_becomes_dict(self, make_request):
        request = make_request(
            "POST",
            body=MULTIPART_BODY,
            headers={"content-type": "multipart/form-data; boundary=X"},
        )
        assert await read_body(request) == {"name": "lamp", "tag": ["a", "b"]}

    @pytest.mark.asyncio
    async def test_multipart_without_boundary_is_bad_request(self, make_request):
        request = make_request(
            "POST", body=MULTIPART_BODY, headers={"content-type": "multipart/form-data"}
        )
        with pytest.raises(BadRequestException, match="Malformed form body"):
            await read_body(request)

    @pytest.mark.asyncio
    async def test_other_media_types_stay_raw(self, make_request):
        request = make_request(
            "PUT", body=b"\x00\x01", headers={"content-type": "application/octet-stream"}
        )
        assert await read_body(request) == b"\x00\x01"

    @pytest.mark.asyncio
    async def test_body_can_be_read_twice(self, make_request):
        """Validators and the engine both read the body; Starlette caches it."""
        request = make_request(
            "POST", body=b'{"a": 1}', headers={"content-type": "application/json"}
        )
        assert await read_body(request) == await read_body(request)


class TestBuildRequestData:

    @pytest.mark.asyncio
    async def test_collects_all_request_parts(self, make_request):
        request = make_request(
            "POST",
            path="/items/5",
            body=b'{"name": "lamp"}',
            headers={"Content-Type": "application/json", "X-Tenant": "acme"},
            query_string=b"expand=owner&tag=a&tag=b",
            path_params={"item_id": "5"},
        )
        data = await build_request_data(request)

        assert data.body == {"name": "lamp"}
        assert data.query == {"expand": "owner", "tag": ["a", "b"]}
        assert data.params == {"item_id": "5"}
        assert data.headers["x-tenant"] == "acme"

    @pytest.mark.asyncio
    async def test_request_data_is_frozen(self, make_request):
        data = await build_request_data(make_request())
        with pytest.raises(PydanticValidationError):
            data.body = {"changed": True}


def test_collapse_multi_keeps_first_order():
    assert collapse_multi([("a", "1"), ("b", "2"), ("a", "3"), ("a", "4")]) == {
        "a": ["1", "3", "4"],
        "b": "2",
    }


def test_repeated_headers_are_joined(make_request):
    request = make_request(
        headers=[("Accept", "text/html"), ("Accept", "application/json"), ("X-Tenant", "acme")]
    )
    assert read_headers(request) == {
        "accept": "text/html, application/json",
        "x-tenant": "acme",
    }
