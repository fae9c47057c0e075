"""Unit tests for input validators and sanitizers."""

from decimal import Decimal

import pytest

from earnings_api.utils.validators import (
    normalize_operator,
    parse_amount,
    sanitize_text,
    validate_user_id,
)


class TestNormalizeOperator:
    """Operator names are matched case-insensitively."""

    @pytest.mark.parametrize("raw, expected", [
        ("Airtel", "Airtel"),
        ("airtel", "Airtel"),
        ("  JIO ", "Jio"),
        ("vi", "Vi"),
    ])
    def test_known_operators(self, raw, expected):
        assert normalize_operator(raw) == expected

    def test_unknown_operator(self):
        with pytest.raises(ValueError, match="Unknown operator"):
            normalize_operator("BSNL")

    def test_empty_operator(self):
        with pytest.raises(ValueError):
            normalize_operator("")


class TestValidateUserId:

    def test_accepts_auth_provider_uid(self):
        assert validate_user_id("aB3dE_9-x.y") == "aB3dE_9-x.y"

    def test_strips_whitespace(self):
        assert validate_user_id("  user-1 ") == "user-1"

    @pytest.mark.parametrize("bad", ["", "user 1", "user/1", "x" * 129, "user;drop"])
    def test_rejects_malformed(self, bad):
        with pytest.raises(ValueError, match="Invalid user id"):
            validate_user_id(bad)


class TestParseAmount:

    def test_integer(self):
        assert parse_amount(300) == Decimal("300")

    def test_string_with_two_places(self):
        assert parse_amount("150.50") == Decimal("150.50")

    def test_float_input(self):
        assert parse_amount(99.5) == Decimal("99.5")

    @pytest.mark.parametrize("bad", [0, "0", -5, "-0.01"])
    def test_not_positive(self, bad):
        with pytest.raises(ValueError, match="positive"):
            parse_amount(bad)

    def test_too_many_decimal_places(self):
        with pytest.raises(ValueError, match="2 decimal places"):
            parse_amount("10.005")

    @pytest.mark.parametrize("bad", ["abc", "", "1,000"])
    def test_not_a_number(self, bad):
        with pytest.raises(ValueError):
            parse_amount(bad)

    def test_infinity(self):
        with pytest.raises(ValueError):
            parse_amount("Infinity")


class TestSanitizeText:

    def test_strips_markup(self):
        assert sanitize_text("<b>Paid</b> via UPI") == "Paid via UPI"

    def test_drops_script_tags(self):
        assert "<script>" not in sanitize_text("<script>alert(1)</script>ok")

    def test_truncates(self):
        assert len(sanitize_text("a" * 50, max_length=10)) == 10

    def test_none_passthrough(self):
        assert sanitize_text(None) is None

    def test_markup_only_becomes_none(self):
        assert sanitize_text("<br>") is None
