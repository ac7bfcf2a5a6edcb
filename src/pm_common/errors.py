"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  3xxx: Market / Event
  4xxx: Order
  6xxx: Exchange (CLOB)
  9xxx: System
"""

from typing import Any


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/User ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is disabled", 403)


class UnauthenticatedError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "Unauthenticated.", 401)


class NotAuthorizedError(AppError):
    def __init__(self) -> None:
        super().__init__(1007, "Not authorized.", 403)


# --- 3xxx: Market / Event ---

class EventNotFoundError(AppError):
    def __init__(self, slug: str) -> None:
        super().__init__(3003, f"Event not found: {slug}", 404)


class SnapshotRefreshError(AppError):
    def __init__(self) -> None:
        super().__init__(3004, "Unable to refresh market data. Please try again.", 500)


# --- 4xxx: Order ---

class OrderNotFoundError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4004, f"Order not found: {order_id}", 404)


class OrderValidationError(AppError):
    """First failing field of an order payload."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(4007, message, 422)
        self.field = field


class OrderRejectedError(AppError):
    """Exchange refused the order; payload is returned to the client verbatim."""

    def __init__(self, status_code: int, payload: Any) -> None:
        super().__init__(4008, "Order rejected by exchange", status_code)
        self.payload = payload


class OrderPersistFailedError(AppError):
    def __init__(self) -> None:
        super().__init__(
            4009,
            "Something went wrong while processing your order. Please try again.",
            500,
        )


# --- 6xxx: Exchange ---

class ExchangeTimeoutError(AppError):
    def __init__(self, path: str, timeout: float) -> None:
        super().__init__(6001, f"Exchange request timed out after {timeout}s: {path}", 504)
        self.path = path


class ExchangeError(AppError):
    """Non-2xx response from the exchange, raw body kept for the caller."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(
            6002, f"Exchange request failed [{status_code}]: {body or 'no body'}", 502
        )
        self.status_code = status_code
        self.body = body


class MalformedResponseError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(6003, f"Malformed exchange response: {detail}", 502)


class ExchangeUnavailableError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(6004, f"Exchange unavailable: {detail}", 503)


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
