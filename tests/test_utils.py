"""
Tests: key normalization and JSON-safe payload conversion.

Run with:
    pytest tests/test_utils.py -v
"""

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

from marketplace_console.models.enums import BillingCadence
from marketplace_console.models.storage_models import MembershipSnapshot
from marketplace_console.utils import convert_to_json_safe, normalize_keys, to_snake_case


class TestSnakeCase:

    def test_camel_case(self):
        assert to_snake_case("halfYearlyFee") == "half_yearly_fee"
        assert to_snake_case("discountPercentage") == "discount_percentage"

    def test_acronym_prefix(self):
        assert to_snake_case("USDAmount") == "usd_amount"

    def test_snake_case_unchanged(self):
        assert to_snake_case("platform_usage_fee_percentage") == "platform_usage_fee_percentage"

    def test_nested_keys(self):
        data = {"engagementModel": "Aggregator", "plans": [{"quarterlyFee": 1}]}
        assert normalize_keys(data) == {
            "engagement_model": "Aggregator", "plans": [{"quarterly_fee": 1}],
        }


class TestJsonSafe:

    def test_scalars(self):
        assert convert_to_json_safe(None) is None
        assert convert_to_json_safe(True) is True
        assert convert_to_json_safe(Decimal("12.50")) == 12.5
        assert convert_to_json_safe(Decimal("NaN")) is None
        assert convert_to_json_safe(float("inf")) is None

    def test_enum_member_unwrapped(self):
        result = convert_to_json_safe(BillingCadence.ANNUAL)
        assert result == BillingCadence.ANNUAL.value
        assert type(result) is str

    def test_dates(self):
        assert convert_to_json_safe(date(2026, 1, 2)) == "2026-01-02"
        assert convert_to_json_safe(datetime(2026, 1, 2, 3, 4)) == "2026-01-02T03:04:00"

    def test_containers_and_unknown(self):
        assert convert_to_json_safe({"fees": (Decimal("1"), Path("a"))}) == {"fees": [1.0, "a"]}

    def test_pydantic_model(self):
        dumped = convert_to_json_safe(MembershipSnapshot(status="active", plan="annual"))
        assert dumped["status"] == "active"
        assert dumped["plan"] == "annual"
        assert isinstance(dumped["updated_at"], str)
