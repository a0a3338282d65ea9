"""Mapping of use-case errors to HTTP problem responses."""

import pytest
from clubfunds.application.usecases.results import OperationError, OperationResult
from clubfunds.crosscutting.error_responses import AppHTTPException, ErrorCode
from clubfunds.domain.errors import ErrorKind, GuardReason
from clubfunds.interfaces.api.http.error_mapping import to_http_exception, unwrap

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "kind,status,code",
    [
        (ErrorKind.NOT_FOUND, 404, ErrorCode.NOT_FOUND),
        (ErrorKind.ALREADY_EXISTS, 409, ErrorCode.ALREADY_EXISTS),
        (ErrorKind.INVALID_STATE_TRANSITION, 409, ErrorCode.INVALID_STATE_TRANSITION),
        (ErrorKind.PROTECTED_RESOURCE, 403, ErrorCode.PROTECTED_RESOURCE),
        (ErrorKind.CONCURRENT_MODIFICATION, 412, ErrorCode.CONCURRENT_MODIFICATION),
        (ErrorKind.VALIDATION_FAILURE, 422, ErrorCode.VALIDATION_ERROR),
        (ErrorKind.INTERNAL_ERROR, 500, ErrorCode.INTERNAL_ERROR),
    ],
)
def test_kind_maps_to_status(kind, status, code):
    exc = to_http_exception(OperationError(kind=kind, message="boom"))

    assert exc.status_code == status
    assert exc.code is code
    assert exc.retryable is (kind is ErrorKind.CONCURRENT_MODIFICATION)


def test_reason_and_resource_travel_in_errors():
    exc = to_http_exception(
        OperationError(
            kind=ErrorKind.INVALID_STATE_TRANSITION,
            message="Payment is already verified",
            reason=GuardReason.ALREADY_VERIFIED,
            resource="Payment",
        )
    )

    assert exc.detail == "Payment is already verified"
    assert exc.errors == [{"reason": "ALREADY_VERIFIED", "resource": "Payment"}]


def test_unwrap_returns_payload_or_raises():
    assert unwrap(OperationResult.ok("payload")) == "payload"

    with pytest.raises(AppHTTPException) as exc_info:
        unwrap(OperationResult.fail(OperationError(kind=ErrorKind.NOT_FOUND, message="gone")))

    assert exc_info.value.status_code == 404
