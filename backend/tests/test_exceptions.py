"""
EndpointKit: Exception Model Unit Tests
=========================================

What:  Tests for the HTTP-mapped exception hierarchy.
Why:   The error handlers rely on status, message, info and error_code being
       set consistently by every subclass.
"""

import pytest

from endpointkit.exceptions import (
    BadRequestException,
    ConfigurationError,
    EndpointKitError,
    FileTransferError,
    HttpException,
    StreamRelayError,
    TransportError,
    UnauthorizedException,
    ValidationException,
)
from endpointkit.schemas.pipeline import FieldError


class TestHttpException:

    def test_carries_status_message_and_info(self):
        exc = HttpException(409, "Item already exists", info={"id": 7})
        assert exc.status == 409
        assert exc.message == "Item already exists"
        assert exc.info == {"id": 7}
        assert str(exc) == "Item already exists"

    def test_info_is_optional(self):
        assert HttpException(418, "Teapot").info is None

    def test_bad_request_is_400(self):
        exc = BadRequestException()
        assert exc.status == 400
        assert exc.error_code == "bad_request"

    def test_unauthorized_is_401(self):
        exc = UnauthorizedException()
        assert exc.status == 401
        assert isinstance(exc, HttpException)


class TestValidationException:

    def test_keeps_every_field_error_in_order(self):
        errors = [
            FieldError(field="name", message="Field required"),
            FieldError(field="price", message="Input should be greater than 0"),
        ]
        exc = ValidationException(errors)

        assert exc.status == 400
        assert exc.error_code == "validation_error"
        assert exc.info == errors
        assert exc.errors == errors

    def test_is_a_bad_request(self):
        exc = ValidationException([FieldError(field="q", message="bad", location="query")])
        assert isinstance(exc, BadRequestException)

    def test_requires_at_least_one_error(self):
        with pytest.raises(ValueError):
            ValidationException([])


class TestServerSideErrors:

    def test_configuration_error_is_not_client_visible(self):
        exc = ConfigurationError("xml is not implemented")
        assert isinstance(exc, EndpointKitError)
        assert not isinstance(exc, HttpException)

    def test_file_transfer_error_records_file(self):
        exc = FileTransferError("/tmp/report.pdf", context={"reason": "gone"})
        assert isinstance(exc, TransportError)
        assert exc.file == "/tmp/report.pdf"
        assert exc.context == {"reason": "gone", "file": "/tmp/report.pdf"}

    def test_stream_relay_error_is_transport_error(self):
        exc = StreamRelayError()
        assert isinstance(exc, TransportError)
        assert exc.context == {}
