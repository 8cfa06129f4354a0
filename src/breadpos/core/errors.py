"""Domain errors and the JSON body they render to.

Endpoints and core services raise these; ``exception_handlers`` turns them
into ``{"code", "message", "details"}`` responses. Auth failures stay as
plain ``HTTPException`` so they render as ``{"detail": ...}``.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict[str, Any]] = Field(None, description="Additional context")


class AppError(Exception):
    """Base for errors that map to a fixed status code and error code."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code

    def to_response(self) -> ErrorDetail:
        return ErrorDetail(code=self.code, message=self.message, details=self.details or None)


class ValidationError(AppError):
    code = "VALIDATION_ERROR"
    status_code = 422


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            f"{resource} with ID {resource_id} not found",
            {"resource": resource, "resource_id": resource_id},
        )


class ConflictError(AppError):
    """Duplicate names, a second open shift, an inventory phase recorded twice."""

    code = "CONFLICT"
    status_code = 409


class InvalidStateError(AppError):
    """The record exists but is in the wrong lifecycle state (shift closed, failure resolved)."""

    code = "INVALID_STATE"
    status_code = 400


class InsufficientStockError(AppError):
    code = "INSUFFICIENT_STOCK"
    status_code = 409

    def __init__(self, product_name: str, available: int, needed: int):
        super().__init__(
            f"{product_name}: only {available} available (need {needed})",
            {"product": product_name, "available": available, "needed": needed},
        )


class PaymentVerificationError(AppError):
    """Checkout is missing a GCash reference, proof photo or discount ID."""

    code = "PAYMENT_VERIFICATION_FAILED"
    status_code = 422


class DatabaseError(AppError):
    code = "DATABASE_ERROR"
    status_code = 500
