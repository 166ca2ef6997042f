"""
EndpointKit: Validation Adapter Unit Tests
============================================

What:  Tests for PydanticValidator, FunctionValidator and error collection.
Why:   Clients must receive every failing field, in a stable order, in one
       400 response.
"""

import pytest
from pydantic import BaseModel, Field

from endpointkit.schemas.pipeline import FieldError
from endpointkit.services.validation import (
    FunctionValidator,
    PydanticValidator,
    collect_field_errors,
)

JSON = {"content-type": "application/json"}


class CreateItem(BaseModel):
    name: str
    price: float = Field(default=1.0, gt=0)


class ListQuery(BaseModel):
    limit: int = Field(default=20, ge=1, le=100)


class ItemParams(BaseModel):
    item_id: int


class TestPydanticValidator:

    @pytest.mark.asyncio
    async def test_valid_body_has_no_errors(self, make_request):
        request = make_request("POST", body=b'{"name": "lamp", "price": 3}', headers=JSON)
        assert await PydanticValidator(body=CreateItem).validate(request) == []

    @pytest.mark.asyncio
    async def test_missing_field_is_reported_by_name(self, make_request):
        request = make_request("POST", body=b'{"price": 3}', headers=JSON)
        errors = await PydanticValidator(body=CreateItem).validate(request)

        assert len(errors) == 1
        assert errors[0].field == "name"
        assert errors[0].location == "body"
        assert errors[0].message

    @pytest.mark.asyncio
    async def test_empty_body_reports_required_fields(self, make_request):
        errors = await PydanticValidator(body=CreateItem).validate(make_request("POST"))
        assert [e.field for e in errors] == ["name"]

    @pytest.mark.asyncio
    async def test_reports_every_error_across_locations(self, make_request):
        request = make_request(
            "POST",
            body=b'{"price": -5}',
            headers=JSON,
            query_string=b"limit=1000",
        )
        validator = PydanticValidator(body=CreateItem, query=ListQuery)
        errors = await validator.validate(request)

        assert [(e.location, e.field) for e in errors] == [
            ("body", "name"),
            ("body", "price"),
            ("query", "limit"),
        ]

    @pytest.mark.asyncio
    async def test_path_params_are_validated(self, make_request):
        request = make_request(path="/items/abc", path_params={"item_id": "abc"})
        errors = await PydanticValidator(params=ItemParams).validate(request)

        assert errors == [
            FieldError(field="item_id", message=errors[0].message, location="params")
        ]

    @pytest.mark.asyncio
    async def test_malformed_json_becomes_field_error(self, make_request):
        request = make_request("POST", body=b"{oops", headers=JSON)
        errors = await PydanticValidator(body=CreateItem).validate(request)

        assert errors == [
            FieldError(field="body", message="Malformed JSON body", location="body")
        ]


class TestFunctionValidator:

    @pytest.mark.asyncio
    async def test_sync_generator_of_tuples(self, make_request):
        def require_tenant(request):
            if "x-tenant" not in request.headers:
                yield ("x-tenant", "Header required")

        errors = await FunctionValidator(require_tenant, location="headers").validate(
            make_request()
        )
        assert errors == [FieldError(field="x-tenant", message="Header required", location="headers")]

    @pytest.mark.asyncio
    async def test_async_callable_returning_field_errors(self, make_request):
        async def always_fails(request):
            return [FieldError(field="q", message="too short", location="query")]

        errors = await FunctionValidator(always_fails).validate(make_request())
        assert errors[0].location == "query"

    @pytest.mark.asyncio
    async def test_none_means_valid(self, make_request):
        errors = await FunctionValidator(lambda request: None).validate(make_request())
        assert errors == []


class TestCollectFieldErrors:

    @pytest.mark.asyncio
    async def test_concatenates_in_declaration_order(self, make_request):
        first = FunctionValidator(lambda r: [("a", "first")])
        second = FunctionValidator(lambda r: [("b", "second"), ("c", "third")])

        errors = await collect_field_errors(make_request(), [first, second])
        assert [e.field for e in errors] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_no_validators_means_valid(self, make_request):
        assert await collect_field_errors(make_request(), []) == []
