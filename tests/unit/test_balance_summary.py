"""Unit tests for balance arithmetic."""

from decimal import Decimal

from earnings_api.services.balance import BalanceSummary
from earnings_api.utils.helpers import format_amount, quantize_amount


class TestBalanceSummary:

    def test_defaults_are_zero(self):
        summary = BalanceSummary()
        assert summary.lifetime_earnings == Decimal("0.00")
        assert summary.available_balance == Decimal("0.00")

    def test_lifetime_includes_adjustments(self):
        summary = BalanceSummary(
            referral_earnings=Decimal("300"),
            total_adjustments=Decimal("-50.25"),
        )
        assert summary.lifetime_earnings == Decimal("249.75")

    def test_available_subtracts_committed_withdrawals(self):
        summary = BalanceSummary(
            referral_earnings=Decimal("500"),
            total_adjustments=Decimal("20"),
            total_withdrawn=Decimal("300"),
        )
        assert summary.available_balance == Decimal("220.00")

    def test_fully_withdrawn(self):
        summary = BalanceSummary(referral_earnings=Decimal("300"), total_withdrawn=Decimal("300"))
        assert format_amount(summary.available_balance) == "0.00"


class TestAmountHelpers:

    def test_quantize_rounds_half_up(self):
        assert quantize_amount("10.005") == Decimal("10.01")

    def test_quantize_handles_driver_types(self):
        assert quantize_amount(None) == Decimal("0.00")
        assert quantize_amount(12.5) == Decimal("12.50")
        assert quantize_amount(7) == Decimal("7.00")

    def test_format_amount(self):
        assert format_amount(Decimal("300")) == "300.00"
        assert format_amount("0") == "0.00"
