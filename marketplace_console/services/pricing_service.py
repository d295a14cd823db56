"""
Engagement Pricing Service.

Loads the master data behind the pricing dashboard and hands it to the
pure pricing engine.  Engagement models, complexity levels and fee
formulas are fetched in parallel; all three must resolve before any
breakdown is built.

All methods return ServiceResult for a consistent contract with the view
layer.  Store failures are logged with their traceback and surfaced as
``success=False`` with a human-readable error.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import NamedTuple, Optional

from marketplace_console.config import AppConfig
from marketplace_console.logger import StructuredLogger
from marketplace_console.models.complexity_level import ComplexityLevel
from marketplace_console.models.engagement_model import EngagementModel
from marketplace_console.models.enums import BillingCadence, MarketplaceSubtype
from marketplace_console.models.platform_fee_formula import PlatformFeeFormula
from marketplace_console.models.service_models import (
    EngagementModelPricing,
    FeeBreakdown,
    PlanQuote,
    ServiceResult,
    SolutionFeeQuote,
)
from marketplace_console.repositories.complexity_level_repository import ComplexityLevelRepository
from marketplace_console.repositories.country_repository import CountryRepository
from marketplace_console.repositories.engagement_model_repository import EngagementModelRepository
from marketplace_console.repositories.fee_formula_repository import FeeFormulaRepository
from marketplace_console.repositories.pricing_plan_repository import PricingPlanRepository
from marketplace_console.services.base_service import BaseService
from marketplace_console.services.billing_plans import (
    CadenceLike,
    quote_plan,
    resolve_pricing_plan,
)
from marketplace_console.services.fee_rules import StatusLike
from marketplace_console.services.pricing_engine import (
    NO_PRICING_PLACEHOLDER,
    build_pricing_cards,
    evaluate_formula,
    preview_all_complexities,
    select_formula,
)
from marketplace_console.utils.math_utils import Number


class PricingMasterData(NamedTuple):
    engagement_models: list[EngagementModel]
    formulas: list[PlatformFeeFormula]
    complexity_levels: list[ComplexityLevel]


class PricingService(BaseService):
    """
    Service layer for the engagement pricing dashboard.

    Delegates data access to the pricing repositories and all arithmetic
    to ``services.pricing_engine`` and ``services.billing_plans``.
    """

    def __init__(
        self,
        engagement_model_repo: EngagementModelRepository,
        fee_formula_repo: FeeFormulaRepository,
        complexity_level_repo: ComplexityLevelRepository,
        pricing_plan_repo: PricingPlanRepository,
        country_repo: CountryRepository,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._engagement_models = engagement_model_repo
        self._formulas = fee_formula_repo
        self._complexity_levels = complexity_level_repo
        self._plans = pricing_plan_repo
        self._countries = country_repo
        self._config = config
        # Levels from the last master-data fetch, reused by preview_fees.
        self._loaded_levels: list[ComplexityLevel] = []

    # ------------------------------------------------------------------
    # Master data
    # ------------------------------------------------------------------

    def fetch_master_data(self) -> PricingMasterData:
        """Fetch models, formulas and complexity levels concurrently.

        Raises whatever the first failing fetch raised.
        """
        with ThreadPoolExecutor(
            max_workers=self._config.FETCH_WORKERS,
            thread_name_prefix="pricing-fetch",
        ) as pool:
            models_future = pool.submit(self._engagement_models.list_models)
            formulas_future = pool.submit(self._formulas.list_active)
            levels_future = pool.submit(self._complexity_levels.list_active)
            master = PricingMasterData(
                engagement_models=models_future.result(),
                formulas=formulas_future.result(),
                complexity_levels=levels_future.result(),
            )
        self._loaded_levels = master.complexity_levels
        return master

    def resolve_country_id(self, country_name: Optional[str]) -> Optional[str]:
        """Map a country name to its ``master_countries`` id, if known."""
        if not country_name:
            return None
        try:
            return self._countries.find_id_by_name(country_name)
        except Exception as exc:
            self._logger.warning("Country lookup failed for %s: %s", country_name, exc)
            return None

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def load_engagement_pricing(
        self,
        membership_status: StatusLike,
        country_id: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> ServiceResult[list[EngagementModelPricing]]:
        """
        Build every pricing card for the dashboard.

        An empty ``data`` list means no engagement models exist; cards
        without a matching formula carry a placeholder instead of a
        breakdown.

        Returns:
            ServiceResult with the list of cards, or an error message.
        """
        try:
            master = self.fetch_master_data()
            cards = build_pricing_cards(
                master.engagement_models,
                master.formulas,
                master.complexity_levels,
                membership_status,
                country_id,
                currency=currency or self._config.DEFAULT_CURRENCY,
                default_advance_percentage=self._config.DEFAULT_ADVANCE_PAYMENT_PERCENTAGE,
                logger=self._logger,
            )
            self._logger.info(
                "Built %d pricing cards for %d engagement models",
                len(cards), len(master.engagement_models),
            )
            return ServiceResult(success=True, data=cards)
        except Exception as exc:
            return self._failed("loading engagement pricing", exc)

    def get_fee_preview(
        self,
        engagement_model_id: str,
        solution_fee: Number,
        membership_status: StatusLike,
        country_id: Optional[str] = None,
        subtype: Optional[MarketplaceSubtype] = None,
    ) -> ServiceResult[list[SolutionFeeQuote]]:
        """
        Price a solution value at every complexity level for one model.

        Returns:
            ServiceResult with one quote per complexity level, a 404 when
            the model has no pricing, or a 400 for an invalid solution fee.
        """
        try:
            master = self.fetch_master_data()
        except Exception as exc:
            return self._failed("loading fee preview data", exc)

        model = next(
            (m for m in master.engagement_models if m.id == engagement_model_id), None,
        )
        formula = (
            select_formula(master.formulas, engagement_model_id, country_id, subtype)
            if model is not None else None
        )
        if model is None or formula is None:
            return ServiceResult(success=False, error=NO_PRICING_PLACEHOLDER, status_code=404)

        breakdown = evaluate_formula(
            model, formula, membership_status, master.complexity_levels, subtype,
            currency=self._config.DEFAULT_CURRENCY,
            default_advance_percentage=self._config.DEFAULT_ADVANCE_PAYMENT_PERCENTAGE,
            logger=self._logger,
        )
        try:
            quotes = preview_all_complexities(breakdown, solution_fee, master.complexity_levels)
        except ValueError as exc:
            return ServiceResult(success=False, error=str(exc), status_code=400)
        return ServiceResult(success=True, data=quotes)

    def preview_fees(
        self,
        breakdown: FeeBreakdown,
        solution_fee: Number,
    ) -> ServiceResult[list[SolutionFeeQuote]]:
        """
        Fee preview grid for a breakdown the dashboard already holds.

        Uses the complexity levels from the last master-data load; the
        store is only queried when nothing has been loaded yet.
        """
        levels = self._loaded_levels
        if not levels:
            try:
                levels = self._complexity_levels.list_active()
            except Exception as exc:
                return self._failed("loading complexity levels", exc)
            self._loaded_levels = levels

        try:
            quotes = preview_all_complexities(breakdown, solution_fee, levels)
        except ValueError as exc:
            return ServiceResult(success=False, error=str(exc), status_code=400)
        return ServiceResult(success=True, data=quotes)

    # ------------------------------------------------------------------
    # Billing plans
    # ------------------------------------------------------------------

    def quote_billing_plan(
        self,
        engagement_model_name: str,
        cadence: CadenceLike,
        membership_status: StatusLike,
        country: Optional[str] = None,
        organization_type: Optional[str] = None,
    ) -> ServiceResult[PlanQuote]:
        """
        Quote the billing plan for a model and cadence.

        Country and organization type default to the configured values.
        """
        try:
            cadence = BillingCadence(cadence)
        except ValueError:
            return ServiceResult(
                success=False,
                error=f"Unknown billing cadence '{cadence}'.",
                status_code=400,
            )

        try:
            plans = self._plans.list_plans()
        except Exception as exc:
            return self._failed("loading pricing plans", exc)

        plan = resolve_pricing_plan(
            plans,
            engagement_model_name,
            country or self._config.DEFAULT_COUNTRY,
            organization_type or self._config.DEFAULT_ORGANIZATION_TYPE,
        )
        if plan is None:
            return ServiceResult(success=False, error=NO_PRICING_PLACEHOLDER, status_code=404)
        return ServiceResult(
            success=True,
            data=quote_plan(plan, cadence, membership_status, self._logger),
        )
