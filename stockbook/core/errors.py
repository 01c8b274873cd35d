# stockbook/core/errors.py

"""
Error taxonomy shared by the services and the HTTP layer.

Services raise these; ``stockbook.main`` turns them into JSON responses
of the form ``{"detail": ..., "code": ...}`` with the status code below.
Caller mistakes map to 4xx, operational faults to 5xx.
"""

from fastapi import status
from pydantic import ValidationError as PydanticValidationError


class StockbookError(Exception):
    code = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Unexpected error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(StockbookError):
    code = "validation_error"
    status_code = 422
    message = "Invalid input"


class NotFound(StockbookError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"


class InsufficientStock(StockbookError):
    code = "insufficient_stock"
    status_code = status.HTTP_409_CONFLICT
    message = "Insufficient stock"


class Unauthorized(StockbookError):
    code = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Not authenticated"


class StorageFailure(StockbookError):
    code = "storage_failure"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    message = "Storage is unavailable, please retry"


def parse_input(schema, **values):
    """Build ``schema`` from ``values``, raising our ValidationError on failure."""
    try:
        return schema(**values)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        message = f"{field}: {first['msg']}" if field else first["msg"]
        raise ValidationError(message) from exc
