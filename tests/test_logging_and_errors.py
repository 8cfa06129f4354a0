"""Tests for logging and error handling."""

import pytest

from breadpos.core.errors import (
    ConflictError,
    ErrorDetail,
    InsufficientStockError,
    InvalidStateError,
    NotFoundError,
    PaymentVerificationError,
    ValidationError,
)
from breadpos.core.logging import get_request_id, set_request_id
from breadpos.core.sentry import filter_sensitive_data


class TestErrorClasses:
    """Test custom exception classes."""

    def test_validation_error_creates_correct_response(self):
        exc = ValidationError("Invalid email", details={"field": "email"})

        assert exc.code == "VALIDATION_ERROR"
        assert exc.status_code == 422
        assert exc.details == {"field": "email"}

        response = exc.to_response()
        assert isinstance(response, ErrorDetail)
        assert response.code == "VALIDATION_ERROR"

    def test_not_found_error_includes_resource_context(self):
        exc = NotFoundError(resource="Product", resource_id="123")

        assert exc.code == "NOT_FOUND"
        assert exc.status_code == 404
        assert exc.details["resource"] == "Product"
        assert exc.details["resource_id"] == "123"

    def test_conflict_error_creates_correct_response(self):
        exc = ConflictError("Customer name already exists", details={"name": "Barangay Hall"})

        assert exc.code == "CONFLICT"
        assert exc.status_code == 409
        assert exc.details == {"name": "Barangay Hall"}

    def test_insufficient_stock_message(self):
        exc = InsufficientStockError("Ensaymada", available=2, needed=3)

        assert exc.status_code == 409
        assert exc.message == "Ensaymada: only 2 available (need 3)"
        assert exc.details == {"product": "Ensaymada", "available": 2, "needed": 3}

    def test_state_and_payment_errors(self):
        assert InvalidStateError("Shift is not active").status_code == 400
        payment = PaymentVerificationError("GCash reference number is required")
        assert payment.code == "PAYMENT_VERIFICATION_FAILED"
        assert payment.status_code == 422

    def test_empty_details_omitted(self):
        response = ConflictError("Already recorded").to_response()

        assert response.model_dump(exclude_none=True) == {"code": "CONFLICT", "message": "Already recorded"}


class TestRequestIDContext:
    """Test request ID injection."""

    def test_set_and_get_request_id(self):
        set_request_id("test-request-123")

        assert get_request_id() == "test-request-123"

    def test_request_id_default(self):
        set_request_id("no-request-id")
        assert get_request_id() == "no-request-id"


class TestErrorHandling:
    """Test global error handlers."""

    @pytest.mark.asyncio
    async def test_request_id_header_in_response(self, unauthenticated_client):
        test_id = "register-2-req-0042"
        response = await unauthenticated_client.get("/health", headers={"X-Request-ID": test_id})

        assert response.headers.get("X-Request-ID") == test_id

    @pytest.mark.asyncio
    async def test_request_id_generated_when_missing(self, unauthenticated_client):
        response = await unauthenticated_client.get("/health")

        assert len(response.headers["X-Request-ID"]) > 0

    @pytest.mark.asyncio
    async def test_app_error_rendered_as_json(self, client):
        response = await client.get("/products/00000000-0000-0000-0000-000000000000")

        assert response.status_code == 404
        assert response.json() == {
            "code": "NOT_FOUND",
            "message": "Product with ID 00000000-0000-0000-0000-000000000000 not found",
            "details": {"resource": "Product", "resource_id": "00000000-0000-0000-0000-000000000000"},
        }

    @pytest.mark.asyncio
    async def test_http_exception_rendered_as_detail(self, unauthenticated_client):
        response = await unauthenticated_client.get("/auth/me")

        assert response.status_code == 401
        assert response.json() == {"detail": "Not authenticated"}


class TestSentryScrubbing:
    def test_pins_and_photos_redacted(self):
        event = {
            "request": {"data": {"name": "Ana", "pin": "1234", "payment": {"gcash_photo": "data:image/png;base64,AAA"}}},
            "extra": {"sale_number": "S-20250301-001", "sql_statement": "SELECT * FROM sales"},
        }

        scrubbed = filter_sensitive_data(event, {})

        assert scrubbed["request"]["data"]["pin"] == "[redacted]"
        assert scrubbed["request"]["data"]["payment"]["gcash_photo"] == "[redacted]"
        assert scrubbed["request"]["data"]["name"] == "Ana"
        assert scrubbed["extra"] == {"sale_number": "S-20250301-001"}

    def test_query_breadcrumbs_dropped(self):
        event = {
            "breadcrumbs": {
                "values": [
                    {"category": "query", "message": "UPDATE daily_inventory SET sold_qty = 4"},
                    {"category": "httplib", "message": "POST /sales"},
                ]
            }
        }

        scrubbed = filter_sensitive_data(event, {})

        assert [crumb["message"] for crumb in scrubbed["breadcrumbs"]["values"]] == ["POST /sales"]
