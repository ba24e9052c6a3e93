"""Errors raised by the payment service operations.

Each error maps to one HTTP status; the API renders them as ``{"error": message}``.
"""


class PaymentAPIError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PaymentAPIError):
    """Missing or malformed required input."""
    status_code = 400


class NotFoundError(PaymentAPIError):
    """Referenced entity does not exist."""
    status_code = 404


class InvalidStateError(PaymentAPIError):
    """Operation is not legal in the order's current lifecycle state."""
    status_code = 400


class ForbiddenError(PaymentAPIError):
    status_code = 403


class StorageError(PaymentAPIError):
    """Persistence failure; the message is the driver's, unchanged."""
    status_code = 500
