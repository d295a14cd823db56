"""
Tests: master-data CRUD validation, status codes and audit trail.

Run with:
    pytest tests/test_master_data.py -v
"""

import json

import pytest

from marketplace_console.repositories import (
    ComplexityLevelRepository,
    CountryRepository,
    EngagementModelRepository,
    FeeFormulaRepository,
    PricingPlanRepository,
)
from marketplace_console.services.master_data import MasterDataService


@pytest.fixture
def service(db, store, logger):
    repos = {
        "engagement_models": EngagementModelRepository(db, store, logger),
        "platform_fee_formulas": FeeFormulaRepository(db, store, logger),
        "complexity_levels": ComplexityLevelRepository(db, store, logger),
        "pricing_plans": PricingPlanRepository(db, store, logger),
        "countries": CountryRepository(db, store, logger),
    }
    return MasterDataService(repos, db, logger)


def _audit_rows(db):
    return db.sqlite.execute(
        "SELECT action, entity_type, entity_id, user_id, details FROM audit_log ORDER BY id"
    ).fetchall()


class TestCreate:

    def test_valid_formula(self, service, remote, db):
        result = service.create_record(
            "platform_fee_formulas",
            {"engagement_model_id": "m1", "base_management_fee": 100,
             "platform_usage_fee_percentage": 10},
            user_id="admin-1",
        )
        assert result.success
        assert result.status_code == 201
        assert result.data["id"] == "gen-1"

        table, op, payload = remote.calls[-1]
        assert (table, op) == ("master_platform_fee_formulas", "insert")
        assert payload["base_management_fee"] == 100.0
        assert payload["advance_payment_percentage"] == 25.0

        audit = _audit_rows(db)
        assert len(audit) == 1
        assert audit[0]["action"] == "CREATE"
        assert audit[0]["entity_type"] == "master_platform_fee_formulas"
        assert audit[0]["entity_id"] == "gen-1"
        assert audit[0]["user_id"] == "admin-1"
        assert json.loads(audit[0]["details"]) == {
            "fields": "base_management_fee,engagement_model_id,platform_usage_fee_percentage",
        }

    def test_discount_out_of_range_is_400(self, service, remote, db):
        result = service.create_record(
            "platform_fee_formulas",
            {"engagement_model_id": "m1", "membership_discount_percentage": 150},
            user_id="admin-1",
        )
        assert not result.success
        assert result.status_code == 400
        assert "membership_discount_percentage" in result.error
        assert remote.calls == []
        assert _audit_rows(db) == []

    def test_negative_multiplier_is_400(self, service, remote):
        result = service.create_record(
            "complexity_levels",
            {"name": "Broken", "level_order": 1, "management_fee_multiplier": -1},
            user_id="admin-1",
        )
        assert result.status_code == 400

    def test_unexpected_field_is_400(self, service, remote):
        result = service.create_record(
            "engagement_models", {"name": "Aggregator", "colour": "red"}, user_id="admin-1",
        )
        assert result.status_code == 400
        assert "colour" in result.error

    def test_unknown_table_is_400(self, service, remote):
        result = service.create_record("users", {"name": "x"}, user_id="admin-1")
        assert result.status_code == 400

    def test_read_only_table_is_400(self, service, remote):
        assert "countries" not in service.tables
        result = service.create_record("countries", {"name": "India"}, user_id="admin-1")
        assert result.status_code == 400

    def test_remote_failure_is_500(self, service, remote, db):
        remote.fail = True
        result = service.create_record(
            "engagement_models", {"name": "Aggregator"}, user_id="admin-1",
        )
        assert result.status_code == 500
        assert _audit_rows(db) == []

    def test_plan_currency_upper_cased(self, service, remote):
        result = service.create_record(
            "pricing_plans",
            {"engagement_model": "Annual Subscription", "quarterly_fee": 299, "currency": "inr"},
            user_id="admin-1",
        )
        assert result.data["currency"] == "INR"


class TestUpdateDelete:

    @pytest.fixture
    def stored(self, remote):
        remote.tables["master_platform_fee_formulas"] = [{
            "id": "f1", "engagement_model_id": "m1", "formula_type": "structured",
            "base_management_fee": 100.0, "base_consulting_fee": 200.0,
            "platform_usage_fee_percentage": 10.0, "advance_payment_percentage": 25.0,
            "membership_discount_percentage": 0.0, "is_active": True,
        }]
        return remote

    def test_only_patched_columns_sent(self, service, stored, db):
        result = service.update_record(
            "platform_fee_formulas", "f1", {"membership_discount_percentage": 15}, user_id="admin-2",
        )
        assert result.success
        assert result.data["membership_discount_percentage"] == 15.0
        assert stored.calls[-1] == (
            "master_platform_fee_formulas", "update", {"membership_discount_percentage": 15.0},
        )
        audit = _audit_rows(db)
        assert audit[-1]["action"] == "UPDATE"
        assert json.loads(audit[-1]["details"]) == {"fields": "membership_discount_percentage"}

    def test_patch_validated_against_stored_row(self, service, stored):
        result = service.update_record(
            "platform_fee_formulas", "f1", {"platform_usage_fee_percentage": 120}, user_id="admin-2",
        )
        assert result.status_code == 400

    def test_unknown_patch_field(self, service, stored):
        result = service.update_record(
            "platform_fee_formulas", "f1", {"bogus": 1}, user_id="admin-2",
        )
        assert result.status_code == 400
        assert "bogus" in result.error

    def test_missing_row_is_404(self, service, stored):
        result = service.update_record(
            "platform_fee_formulas", "nope", {"is_active": False}, user_id="admin-2",
        )
        assert result.status_code == 404

    def test_delete(self, service, stored, db):
        result = service.delete_record("platform_fee_formulas", "f1", user_id="admin-3")
        assert result.success
        assert stored.tables["master_platform_fee_formulas"] == []
        audit = _audit_rows(db)
        assert audit[-1]["action"] == "DELETE"
        assert json.loads(audit[-1]["details"]) == {}

    def test_list_records(self, service, stored):
        result = service.list_records("platform_fee_formulas", {"is_active": True})
        assert [row["id"] for row in result.data] == ["f1"]
        assert service.list_records("users").status_code == 400
