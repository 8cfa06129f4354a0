# File: tests/test_validators.py
"""Tests for core validation utilities."""

from decimal import Decimal

import pytest

from breadpos.core.validators import (
    sanitize_html,
    validate_currency,
    validate_email,
    validate_phone,
    validate_pin,
)


class TestValidateCurrency:
    """Test currency validation."""

    def test_valid_amount(self):
        assert validate_currency("45.50") == Decimal("45.50")

    def test_negative_currency_fails(self):
        with pytest.raises(ValueError, match="cannot be negative"):
            validate_currency(Decimal("-10.00"))

    def test_exceeds_max_fails(self):
        with pytest.raises(ValueError, match="exceeds maximum"):
            validate_currency(Decimal("10000000000.00"))

    def test_more_than_two_decimals_fails(self):
        with pytest.raises(ValueError, match="2 decimal places"):
            validate_currency("5.005")

    def test_invalid_format_fails(self):
        with pytest.raises(ValueError, match="Invalid currency format"):
            validate_currency("invalid")


class TestValidatePin:
    @pytest.mark.parametrize("pin", ["1234", "00000000", " 4321 "])
    def test_valid(self, pin):
        assert validate_pin(pin) == pin.strip()

    @pytest.mark.parametrize("pin", ["123", "123456789", "12a4", ""])
    def test_invalid(self, pin):
        with pytest.raises(ValueError, match="4 to 8 digits"):
            validate_pin(pin)


class TestValidatePhone:
    def test_valid_phone(self):
        assert validate_phone("+63 917 555 0101") == "+63 917 555 0101"
        assert validate_phone("(02) 8123-4567") == "(02) 8123-4567"

    def test_empty_returns_none(self):
        assert validate_phone("") is None
        assert validate_phone("   ") is None

    def test_invalid_chars_fail(self):
        with pytest.raises(ValueError, match="can only contain"):
            validate_phone("0917-CALL-NOW")

    def test_too_short_fails(self):
        with pytest.raises(ValueError, match="at least 7 digits"):
            validate_phone("123")


class TestValidateEmail:
    def test_lowercased(self):
        assert validate_email("  Orders@Bakery.PH ") == "orders@bakery.ph"

    def test_empty_returns_none(self):
        assert validate_email(None) is None

    def test_invalid_fails(self):
        with pytest.raises(ValueError, match="Invalid email format"):
            validate_email("not-an-email")


class TestSanitizeHtml:
    def test_strips_tags(self):
        assert sanitize_html("<script>alert('x')</script>Ube") == "alert(&#x27;x&#x27;)Ube"

    def test_escapes_ampersand(self):
        assert sanitize_html("Bread & Butter") == "Bread &amp; Butter"

    def test_empty_after_stripping_returns_none(self):
        assert sanitize_html("<b></b>  ") is None
        assert sanitize_html(None) is None
