"""Tests for pm_common.errors and pm_common.response."""

from src.pm_common.errors import (
    AppError,
    EventNotFoundError,
    ExchangeError,
    ExchangeTimeoutError,
    OrderPersistFailedError,
    OrderRejectedError,
    OrderValidationError,
    RateLimitError,
    SnapshotRefreshError,
    UnauthenticatedError,
)
from src.pm_common.response import ApiResponse, error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1, message="x"), Exception)


class TestSpecificErrors:
    def test_unauthenticated(self) -> None:
        err = UnauthenticatedError()
        assert (err.code, err.http_status, err.message) == (1006, 401, "Unauthenticated.")

    def test_event_not_found(self) -> None:
        err = EventNotFoundError("us-election")
        assert err.http_status == 404
        assert "us-election" in err.message

    def test_snapshot_refresh_message(self) -> None:
        err = SnapshotRefreshError()
        assert err.http_status == 500
        assert err.message == "Unable to refresh market data. Please try again."

    def test_order_validation_keeps_field(self) -> None:
        err = OrderValidationError("side", "side: bad")
        assert err.field == "side"
        assert err.http_status == 422

    def test_order_rejected_uses_exchange_status(self) -> None:
        err = OrderRejectedError(400, {"error": "insufficient balance"})
        assert err.http_status == 400
        assert err.payload == {"error": "insufficient balance"}

    def test_persist_failed_is_generic(self) -> None:
        err = OrderPersistFailedError()
        assert err.message == (
            "Something went wrong while processing your order. Please try again."
        )

    def test_exchange_errors(self) -> None:
        err = ExchangeError(500, "boom")
        assert (err.status_code, err.body, err.http_status) == (500, "boom", 502)
        assert ExchangeTimeoutError("/book", 5.0).http_status == 504

    def test_rate_limit(self) -> None:
        assert RateLimitError().http_status == 429


class TestResponse:
    def test_success_envelope(self) -> None:
        resp = success_response({"a": 1})
        assert isinstance(resp, ApiResponse)
        assert resp.code == 0
        assert resp.data == {"a": 1}
        assert resp.request_id.startswith("req_")

    def test_error_envelope(self) -> None:
        resp = error_response(3003, "Event not found")
        assert resp.code == 3003
        assert resp.data is None
