"""
Tests: membership discount and complexity multiplier rules.

Run with:
    pytest tests/test_fee_rules.py -v
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from marketplace_console.models.complexity_level import ComplexityLevel
from marketplace_console.models.enums import FeeType, MembershipStatus
from marketplace_console.services.fee_rules import (
    apply_membership_discount,
    build_complexity_table,
    is_active_member,
    quote_discount,
)


class TestMembershipDiscount:

    def test_active_member_gets_discount(self):
        assert apply_membership_discount(299, 10, MembershipStatus.ACTIVE) == Decimal("269.10")

    def test_inactive_member_pays_original(self):
        assert apply_membership_discount(299, 10, MembershipStatus.INACTIVE) == Decimal("299.00")

    def test_legacy_paid_status_counts_as_active(self):
        assert apply_membership_discount(100, 20, "member_paid") == Decimal("80.00")

    def test_missing_status_is_inactive(self):
        assert not is_active_member(None)
        assert not is_active_member("suspended")
        assert apply_membership_discount(100, 20, None) == Decimal("100.00")

    def test_no_discount_configured(self):
        assert apply_membership_discount(100, None, MembershipStatus.ACTIVE) == Decimal("100.00")

    def test_full_discount(self):
        assert apply_membership_discount(100, 100, MembershipStatus.ACTIVE) == Decimal("0.00")

    def test_out_of_range_discount_is_clamped_and_logged(self):
        logger = MagicMock()
        assert apply_membership_discount(100, 150, MembershipStatus.ACTIVE, logger) == Decimal("0.00")
        assert apply_membership_discount(100, -10, MembershipStatus.ACTIVE, logger) == Decimal("100.00")
        assert logger.warning.call_count == 2

    @pytest.mark.parametrize("discount", [0, 5, 12.5, 33, 50, 99.99, 100])
    def test_final_never_exceeds_original(self, discount):
        original = Decimal("1234.56")
        final = apply_membership_discount(original, discount, MembershipStatus.ACTIVE)
        assert Decimal("0") <= final <= original

    def test_quote_keeps_original_for_display(self):
        quote = quote_discount(299, 10, MembershipStatus.ACTIVE)
        assert quote.original == Decimal("299.00")
        assert quote.final == Decimal("269.10")
        assert quote.discount_applied
        assert quote.savings == Decimal("29.90")

    def test_quote_for_non_member_has_no_discount(self):
        quote = quote_discount(299, 10, MembershipStatus.INACTIVE)
        assert quote.final == quote.original
        assert not quote.discount_applied
        assert quote.discount_percentage == Decimal("0")

    @pytest.mark.parametrize("status", [MembershipStatus.ACTIVE, MembershipStatus.INACTIVE])
    @pytest.mark.parametrize("discount", [None, 0, 10, 50])
    @pytest.mark.parametrize("original", ["0.001", "0.005", "0.009", "12.345"])
    def test_sub_cent_originals_never_round_up(self, original, discount, status):
        amount = Decimal(original)
        final = apply_membership_discount(amount, discount, status)
        assert Decimal("0") <= final <= amount

    def test_undiscounted_amount_is_returned_exactly(self):
        assert apply_membership_discount(Decimal("0.005"), 10, MembershipStatus.INACTIVE) == Decimal("0.005")
        assert apply_membership_discount(Decimal("0.005"), 0, MembershipStatus.ACTIVE) == Decimal("0.005")

    def test_quote_for_sub_cent_original(self):
        quote = quote_discount(Decimal("0.009"), 10, MembershipStatus.ACTIVE)
        assert quote.original == Decimal("0.009")
        assert quote.final <= quote.original


class TestComplexityTable:

    def test_rows_follow_level_order(self, complexity_levels):
        rows = build_complexity_table(complexity_levels, 100, FeeType.MANAGEMENT)
        assert [row.level_name for row in rows] == ["Low", "Medium", "High", "Expert"]
        assert [row.final_fee for row in rows] == [
            Decimal("100.00"), Decimal("125.00"), Decimal("150.00"), Decimal("200.00"),
        ]

    def test_consulting_uses_consulting_multiplier(self, complexity_levels):
        rows = build_complexity_table(complexity_levels, 200, FeeType.CONSULTING)
        assert rows[-1].level_name == "Expert"
        assert rows[-1].multiplier == Decimal("2.5")
        assert rows[-1].final_fee == Decimal("500.00")

    def test_zero_base_fee_yields_no_rows(self, complexity_levels):
        assert build_complexity_table(complexity_levels, 0, FeeType.MANAGEMENT) == []
        assert build_complexity_table(complexity_levels, None, FeeType.MANAGEMENT) == []

    def test_no_levels_yields_no_rows(self):
        assert build_complexity_table([], 100, FeeType.MANAGEMENT) == []

    def test_inactive_levels_are_skipped(self, complexity_levels):
        retired = ComplexityLevel(id="9", name="Retired", level_order=0, is_active=False)
        rows = build_complexity_table([retired, *complexity_levels], 100, FeeType.MANAGEMENT)
        assert "Retired" not in [row.level_name for row in rows]

    def test_negative_multiplier_treated_as_zero(self):
        logger = MagicMock()
        broken = ComplexityLevel(
            id="1", name="Broken", level_order=1,
            management_fee_multiplier=Decimal("-2"),
        )
        rows = build_complexity_table([broken], 100, FeeType.MANAGEMENT, logger)
        assert rows[0].multiplier == Decimal("0")
        assert rows[0].final_fee == Decimal("0.00")
        logger.warning.assert_called_once()

    def test_null_multiplier_defaults_to_one(self):
        level = ComplexityLevel.model_validate(
            {"id": 1, "name": "Low", "level_order": 1, "management_fee_multiplier": None},
        )
        rows = build_complexity_table([level], 80, FeeType.MANAGEMENT)
        assert rows[0].final_fee == Decimal("80.00")
