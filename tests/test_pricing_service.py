"""
Tests: PricingService over repositories backed by a fake remote store.

Run with:
    pytest tests/test_pricing_service.py -v
"""

from decimal import Decimal

import pytest

from conftest import make_formula, make_model
from marketplace_console.config import AppConfig
from marketplace_console.models.enums import BillingCadence, MarketplaceSubtype, MembershipStatus
from marketplace_console.repositories import (
    ComplexityLevelRepository,
    CountryRepository,
    EngagementModelRepository,
    FeeFormulaRepository,
    PricingPlanRepository,
)
from marketplace_console.services.pricing_engine import NO_PRICING_PLACEHOLDER, evaluate_formula
from marketplace_console.services.pricing_service import PricingService


def _formula(formula_id, model_id, **kwargs):
    row = {
        "id": formula_id,
        "engagement_model_id": model_id,
        "formula_type": "structured",
        "is_active": True,
        "country_id": None,
        "base_management_fee": 100,
        "base_consulting_fee": 200,
        "platform_usage_fee_percentage": 10,
        "membership_discount_percentage": 20,
        "advance_payment_percentage": None,
    }
    row.update(kwargs)
    return row


@pytest.fixture
def seeded(remote):
    remote.tables.update({
        "master_engagement_models": [
            {"id": "m-mp", "name": "Market Place", "is_user_created": False},
            {"id": "m-agg", "name": "Aggregator", "is_user_created": False},
            {"id": "m-sub", "name": "Annual Subscription", "is_user_created": False},
            {"id": "m-own", "name": "Custom Deal", "is_user_created": True},
        ],
        "master_platform_fee_formulas": [
            _formula(
                "f-gen", "m-mp", platform_usage_fee_percentage=15,
                master_engagement_model_subtypes={"id": "s1", "name": "General"},
            ),
            _formula(
                "f-pm", "m-mp", platform_usage_fee_percentage=20,
                master_engagement_model_subtypes={"id": "s2", "name": "Program Managed"},
            ),
            _formula("f-agg", "m-agg"),
            _formula("f-agg-in", "m-agg", country_id="c-in", platform_usage_fee_percentage=12),
        ],
        "master_challenge_complexity": [
            {"id": "3", "name": "High", "level_order": 3, "is_active": True,
             "management_fee_multiplier": 1.5, "consulting_fee_multiplier": 1.5},
            {"id": "1", "name": "Low", "level_order": 1, "is_active": True,
             "management_fee_multiplier": 1, "consulting_fee_multiplier": 1},
            {"id": "2", "name": "Medium", "level_order": 2, "is_active": True,
             "management_fee_multiplier": 1.25, "consulting_fee_multiplier": 1.25},
            {"id": "0", "name": "Legacy", "level_order": 0, "is_active": False},
        ],
        "pricing_configurations": [
            {"id": "p1", "engagementModel": "Annual Subscription", "country": "India",
             "organizationType": "", "quarterlyFee": 299, "halfYearlyFee": 549,
             "annualFee": 999, "currency": "USD", "discountPercentage": 10},
        ],
        "master_countries": [{"id": "c-in", "name": "India"}],
    })
    return remote


@pytest.fixture
def service(db, store, logger):
    repos = {
        "engagement_model_repo": EngagementModelRepository(db, store, logger),
        "fee_formula_repo": FeeFormulaRepository(db, store, logger),
        "complexity_level_repo": ComplexityLevelRepository(db, store, logger),
        "pricing_plan_repo": PricingPlanRepository(db, store, logger),
        "country_repo": CountryRepository(db, store, logger),
    }
    config = AppConfig(DEFAULT_COUNTRY="India", DEFAULT_ORGANIZATION_TYPE="", FETCH_WORKERS=3)
    return PricingService(config=config, logger=logger, **repos)


class TestLoadEngagementPricing:

    def test_cards_for_every_visible_model(self, service, seeded):
        result = service.load_engagement_pricing(MembershipStatus.INACTIVE)
        assert result.success
        assert [card.card_id for card in result.data] == [
            "m-agg", "m-sub", "m-mp-general", "m-mp-program-managed",
        ]

    def test_model_without_formula_shows_placeholder(self, service, seeded):
        cards = {c.card_id: c for c in service.load_engagement_pricing(None).data}
        assert cards["m-sub"].placeholder == NO_PRICING_PLACEHOLDER
        assert cards["m-sub"].breakdown is None

    def test_general_card_for_member(self, service, seeded):
        cards = {c.card_id: c for c in service.load_engagement_pricing("active").data}
        general = cards["m-mp-general"].breakdown
        assert general.subtype is MarketplaceSubtype.GENERAL
        assert general.consulting_fee is None
        assert general.platform_usage_fee_percentage == Decimal("15")
        assert general.management_fee.discounted.final == Decimal("80.00")
        assert [row.final_fee for row in general.management_fee.complexity_rows] == [
            Decimal("80.00"), Decimal("100.00"), Decimal("120.00"),
        ]
        assert cards["m-mp-program-managed"].breakdown.consulting_fee is not None

    def test_country_specific_formula(self, service, seeded):
        country_id = service.resolve_country_id("india")
        assert country_id == "c-in"
        cards = {c.card_id: c for c in service.load_engagement_pricing(None, country_id).data}
        assert cards["m-agg"].breakdown.platform_usage_fee_percentage == Decimal("12")

    def test_unknown_country_uses_global_formula(self, service, seeded):
        assert service.resolve_country_id("Atlantis") is None
        cards = {c.card_id: c for c in service.load_engagement_pricing(None, None).data}
        assert cards["m-agg"].breakdown.platform_usage_fee_percentage == Decimal("10")

    def test_no_models(self, service, remote):
        result = service.load_engagement_pricing(MembershipStatus.INACTIVE)
        assert result.success
        assert result.data == []

    def test_offline_reload_uses_cache(self, service, seeded):
        online = service.load_engagement_pricing(MembershipStatus.ACTIVE).data
        seeded.fail = True
        offline = service.load_engagement_pricing(MembershipStatus.ACTIVE)
        assert offline.success
        assert offline.data == online

    def test_unexpected_failure_is_500(self, service, seeded, monkeypatch):
        def _boom():
            raise RuntimeError("boom")

        monkeypatch.setattr(service, "fetch_master_data", _boom)
        result = service.load_engagement_pricing(MembershipStatus.ACTIVE)
        assert not result.success
        assert result.status_code == 500
        assert "boom" in result.error


class TestFeePreview:

    def test_one_quote_per_active_level(self, service, seeded):
        result = service.get_fee_preview("m-agg", 10000, MembershipStatus.INACTIVE)
        assert result.success
        assert [q.complexity_name for q in result.data] == ["Low", "Medium", "High"]
        assert all(q.total_fee == Decimal("1000.00") for q in result.data)
        assert all(q.advance_payment == Decimal("250.00") for q in result.data)

    def test_program_managed_preview(self, service, seeded):
        result = service.get_fee_preview(
            "m-mp", 10000, MembershipStatus.INACTIVE,
            subtype=MarketplaceSubtype.PROGRAM_MANAGED,
        )
        high = result.data[-1]
        assert high.platform_usage_fee == Decimal("2000.00")
        assert high.total_fee == Decimal("2450.00")

    def test_model_without_pricing_is_404(self, service, seeded):
        result = service.get_fee_preview("m-sub", 10000, MembershipStatus.INACTIVE)
        assert result.status_code == 404
        assert result.error == NO_PRICING_PLACEHOLDER

    def test_negative_fee_is_400(self, service, seeded):
        result = service.get_fee_preview("m-agg", -5, MembershipStatus.INACTIVE)
        assert not result.success
        assert result.status_code == 400


class TestPreviewLoadedBreakdown:

    def _aggregator_breakdown(self, service):
        cards = service.load_engagement_pricing(MembershipStatus.INACTIVE).data
        return next(card for card in cards if card.card_id == "m-agg").breakdown

    def test_reuses_loaded_master_data(self, service, seeded):
        breakdown = self._aggregator_breakdown(service)
        before = len(seeded.calls)
        result = service.preview_fees(breakdown, 10000)
        assert result.success
        assert len(seeded.calls) == before
        assert [q.complexity_name for q in result.data] == ["Low", "Medium", "High"]
        assert all(q.total_fee == Decimal("1000.00") for q in result.data)

    def test_works_while_offline_after_load(self, service, seeded):
        breakdown = self._aggregator_breakdown(service)
        seeded.fail = True
        result = service.preview_fees(breakdown, 10000)
        assert result.success
        assert len(result.data) == 3

    def test_loads_levels_once_when_nothing_loaded(self, service, seeded):
        breakdown = evaluate_formula(
            make_model("Aggregator", "m-agg"), make_formula("m-agg"), MembershipStatus.INACTIVE,
        )
        assert service.preview_fees(breakdown, 10000).success
        level_reads = [call for call in seeded.calls if call[0] == "master_challenge_complexity"]
        assert len(level_reads) == 1

        assert service.preview_fees(breakdown, 20000).success
        level_reads = [call for call in seeded.calls if call[0] == "master_challenge_complexity"]
        assert len(level_reads) == 1

    def test_negative_fee_is_400(self, service, seeded):
        breakdown = self._aggregator_breakdown(service)
        result = service.preview_fees(breakdown, -5)
        assert result.status_code == 400

    def test_level_read_failure_is_500(self, service, seeded, monkeypatch):
        breakdown = evaluate_formula(
            make_model("Aggregator", "m-agg"), make_formula("m-agg"), MembershipStatus.INACTIVE,
        )

        def _boom():
            raise RuntimeError("boom")

        monkeypatch.setattr(service._complexity_levels, "list_active", _boom)
        result = service.preview_fees(breakdown, 10000)
        assert not result.success
        assert result.status_code == 500


class TestBillingPlanQuote:

    def test_member_quote(self, service, seeded):
        result = service.quote_billing_plan(
            "Annual Subscription", BillingCadence.QUARTERLY, MembershipStatus.ACTIVE,
        )
        assert result.success
        assert result.data.amount.final == Decimal("269.10")
        assert result.data.amount.original == Decimal("299.00")

    def test_non_member_quote(self, service, seeded):
        result = service.quote_billing_plan("Annual Subscription", "annual", "inactive")
        assert result.data.amount.final == Decimal("999.00")

    def test_unknown_cadence_is_400(self, service, seeded):
        result = service.quote_billing_plan("Annual Subscription", "monthly", "active")
        assert result.status_code == 400

    def test_unknown_plan_is_404(self, service, seeded):
        result = service.quote_billing_plan("Aggregator", "annual", "active")
        assert result.status_code == 404
        assert result.error == NO_PRICING_PLACEHOLDER
