"""
Pricing Engine.

Pure-function module that turns master data into what the dashboard
shows:

- :func:`select_formula` picks the formula that prices an engagement
  model for a country (country-specific first, then global).
- :func:`evaluate_formula` builds the per-model ``FeeBreakdown``.
- :func:`calculate_solution_fees` / :func:`preview_all_complexities`
  price a concrete solution value.
- :func:`build_pricing_cards` assembles one card per engagement model,
  splitting Market Place into its General and Program Managed subtypes.

Functions are stateless: input data -> output result, no side effects.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional, Sequence

from marketplace_console.logger import StructuredLogger
from marketplace_console.models.complexity_level import ComplexityLevel
from marketplace_console.models.engagement_model import EngagementModel
from marketplace_console.models.enums import (
    EngagementModelKind,
    FeeType,
    MarketplaceSubtype,
    MembershipStatus,
)
from marketplace_console.models.platform_fee_formula import PlatformFeeFormula
from marketplace_console.models.service_models import (
    EngagementModelPricing,
    FeeBreakdown,
    FeeSection,
    SolutionFeeQuote,
)
from marketplace_console.services.fee_rules import (
    StatusLike,
    build_complexity_table,
    is_active_member,
    quote_discount,
)
from marketplace_console.utils.currency import DEFAULT_CURRENCY, format_amount
from marketplace_console.utils.math_utils import (
    ONE_HUNDRED,
    ZERO,
    Number,
    clamp_percentage,
    percentage_of,
    quantize_money,
    to_decimal,
)

__all__ = [
    "DEFAULT_ADVANCE_PAYMENT_PERCENTAGE",
    "NO_MODELS_PLACEHOLDER",
    "NO_PRICING_PLACEHOLDER",
    "build_pricing_cards",
    "calculate_solution_fees",
    "evaluate_formula",
    "format_headline_fee",
    "preview_all_complexities",
    "select_formula",
]

NO_PRICING_PLACEHOLDER: str = "No pricing available"
NO_MODELS_PLACEHOLDER: str = "No engagement models found"
DEFAULT_ADVANCE_PAYMENT_PERCENTAGE: Decimal = Decimal("25")

_SUBTYPE_SLUGS: dict[MarketplaceSubtype, str] = {
    MarketplaceSubtype.GENERAL: "general",
    MarketplaceSubtype.PROGRAM_MANAGED: "program-managed",
}


# ---------------------------------------------------------------------------
# Formula lookup
# ---------------------------------------------------------------------------

def _pick_by_country(
    candidates: Sequence[PlatformFeeFormula],
    country_id: Optional[str],
) -> Optional[PlatformFeeFormula]:
    if country_id is not None:
        for formula in candidates:
            if formula.country_id == country_id:
                return formula
    for formula in candidates:
        if formula.is_global:
            return formula
    return None


def select_formula(
    formulas: Iterable[PlatformFeeFormula],
    engagement_model_id: str,
    country_id: Optional[str],
    subtype: Optional[MarketplaceSubtype] = None,
) -> Optional[PlatformFeeFormula]:
    """Return the active formula pricing *engagement_model_id* in *country_id*.

    A formula for the country wins over a global one (no ``country_id``).
    When *subtype* is given, a formula for that subtype wins over one
    without a subtype.  ``None`` means the card shows a placeholder.
    """
    candidates = [
        f for f in formulas
        if f.is_active and f.engagement_model_id == engagement_model_id
    ]
    if subtype is None:
        return _pick_by_country(candidates, country_id)

    exact = _pick_by_country([f for f in candidates if f.subtype == subtype], country_id)
    if exact is not None:
        return exact
    return _pick_by_country([f for f in candidates if f.subtype is None], country_id)


# ---------------------------------------------------------------------------
# Breakdown
# ---------------------------------------------------------------------------

def _fee_section(
    fee_type: FeeType,
    base_fee: Decimal,
    formula: PlatformFeeFormula,
    membership_status: StatusLike,
    complexity_levels: Sequence[ComplexityLevel],
    logger: Optional[StructuredLogger],
) -> FeeSection:
    discounted = quote_discount(
        base_fee, formula.membership_discount_percentage, membership_status, logger,
    )
    return FeeSection(
        fee_type=fee_type,
        base_fee=quantize_money(base_fee),
        discounted=discounted,
        complexity_rows=build_complexity_table(
            complexity_levels, discounted.final, fee_type, logger,
        ),
    )


def evaluate_formula(
    engagement_model: EngagementModel,
    formula: PlatformFeeFormula,
    membership_status: StatusLike,
    complexity_levels: Optional[Sequence[ComplexityLevel]] = None,
    subtype: Optional[MarketplaceSubtype] = None,
    *,
    currency: str = DEFAULT_CURRENCY,
    default_advance_percentage: Number = DEFAULT_ADVANCE_PAYMENT_PERCENTAGE,
    logger: Optional[StructuredLogger] = None,
) -> FeeBreakdown:
    """Build the fee breakdown for *engagement_model* priced by *formula*.

    Only Market Place models carry a subtype; for them *subtype* (or the
    formula's own subtype) decides whether the consulting fee is shown.
    The General subtype never shows a consulting section.
    """
    kind = engagement_model.kind
    effective_subtype: Optional[MarketplaceSubtype] = None
    if kind == EngagementModelKind.MARKETPLACE:
        effective_subtype = subtype or formula.subtype

    levels = list(complexity_levels or [])
    management = _fee_section(
        FeeType.MANAGEMENT, formula.base_management_fee,
        formula, membership_status, levels, logger,
    )
    consulting: Optional[FeeSection] = None
    if effective_subtype != MarketplaceSubtype.GENERAL:
        consulting = _fee_section(
            FeeType.CONSULTING, formula.base_consulting_fee,
            formula, membership_status, levels, logger,
        )

    advance = formula.advance_payment_percentage
    if advance is None:
        advance = to_decimal(default_advance_percentage)

    display_name = engagement_model.name
    if effective_subtype is not None:
        display_name = f"{engagement_model.name} - {effective_subtype.value}"

    status = (
        MembershipStatus.ACTIVE if is_active_member(membership_status)
        else MembershipStatus.INACTIVE
    )
    return FeeBreakdown(
        engagement_model_id=engagement_model.id,
        engagement_model_name=engagement_model.name,
        display_name=display_name,
        kind=kind,
        subtype=effective_subtype,
        is_fee_based=kind.is_fee_based,
        currency=currency,
        membership_status=status,
        platform_usage_fee_percentage=formula.platform_usage_fee_percentage,
        advance_payment_percentage=clamp_percentage(advance),
        membership_discount_percentage=formula.membership_discount_percentage,
        management_fee=management,
        consulting_fee=consulting,
    )


def format_headline_fee(breakdown: FeeBreakdown) -> str:
    """Card headline: percentage of solution fee or the management fee amount."""
    if breakdown.is_fee_based:
        return format_amount(
            breakdown.platform_usage_fee_percentage,
            breakdown.currency,
            is_percentage_model=True,
        )
    return format_amount(breakdown.management_fee.discounted.final, breakdown.currency)


# ---------------------------------------------------------------------------
# Solution fee calculation
# ---------------------------------------------------------------------------

def _non_negative(value: Decimal) -> Decimal:
    return value if value >= ZERO else ZERO


def _total_fee(
    breakdown: FeeBreakdown,
    platform: Decimal,
    management: Decimal,
    consulting: Decimal,
) -> Decimal:
    if breakdown.kind == EngagementModelKind.AGGREGATOR:
        return platform
    if breakdown.subtype == MarketplaceSubtype.GENERAL:
        return platform + management
    return platform + management + consulting


def calculate_solution_fees(
    breakdown: FeeBreakdown,
    solution_fee: Number,
    complexity: Optional[ComplexityLevel] = None,
) -> SolutionFeeQuote:
    """Price a concrete solution value under *breakdown*.

    Platform usage fee is ``solution × pct / 100``.  Management and
    consulting fees are the member-discounted base fees scaled by the
    chosen complexity level (×1 without one).  The total follows the
    engagement model: Aggregator charges the platform fee only, Market
    Place General adds the management fee, every other model adds both
    fees.  The advance payment is a percentage of the total.

    Raises:
        ValueError: If *solution_fee* is negative or not numeric.
    """
    solution = to_decimal(solution_fee, "solution_fee")
    if solution < ZERO:
        raise ValueError(f"solution_fee must be >= 0, got {solution}.")

    management_multiplier = Decimal("1")
    consulting_multiplier = Decimal("1")
    if complexity is not None:
        management_multiplier = _non_negative(complexity.management_fee_multiplier)
        consulting_multiplier = _non_negative(complexity.consulting_fee_multiplier)

    platform = quantize_money(
        percentage_of(solution, breakdown.platform_usage_fee_percentage)
    )
    management = quantize_money(
        breakdown.management_fee.discounted.final * management_multiplier
    )
    consulting = ZERO
    if breakdown.consulting_fee is not None:
        consulting = quantize_money(
            breakdown.consulting_fee.discounted.final * consulting_multiplier
        )

    total = quantize_money(_total_fee(breakdown, platform, management, consulting))
    advance = quantize_money(total * breakdown.advance_payment_percentage / ONE_HUNDRED)

    return SolutionFeeQuote(
        complexity_name=complexity.name if complexity is not None else None,
        management_multiplier=management_multiplier,
        consulting_multiplier=consulting_multiplier,
        solution_fee=quantize_money(solution),
        platform_usage_fee=platform,
        management_fee=management,
        consulting_fee=consulting,
        total_fee=total,
        advance_payment=advance,
    )


def preview_all_complexities(
    breakdown: FeeBreakdown,
    solution_fee: Number,
    complexity_levels: Iterable[ComplexityLevel],
) -> list[SolutionFeeQuote]:
    """One quote per active complexity level, in ``level_order``."""
    ordered = sorted(
        (lvl for lvl in complexity_levels if lvl.is_active),
        key=lambda lvl: lvl.level_order,
    )
    return [calculate_solution_fees(breakdown, solution_fee, lvl) for lvl in ordered]


# ---------------------------------------------------------------------------
# Dashboard cards
# ---------------------------------------------------------------------------

def build_pricing_cards(
    engagement_models: Iterable[EngagementModel],
    formulas: Sequence[PlatformFeeFormula],
    complexity_levels: Sequence[ComplexityLevel],
    membership_status: StatusLike,
    country_id: Optional[str] = None,
    *,
    currency: str = DEFAULT_CURRENCY,
    default_advance_percentage: Number = DEFAULT_ADVANCE_PAYMENT_PERCENTAGE,
    logger: Optional[StructuredLogger] = None,
) -> list[EngagementModelPricing]:
    """Build one card per engagement model (two for Market Place).

    Models without a matching formula get a placeholder card instead of
    a breakdown.
    """
    cards: list[EngagementModelPricing] = []
    for model in engagement_models:
        if model.kind == EngagementModelKind.MARKETPLACE:
            targets: list[tuple[Optional[MarketplaceSubtype], str]] = [
                (subtype, f"{model.id}-{slug}") for subtype, slug in _SUBTYPE_SLUGS.items()
            ]
        else:
            targets = [(None, model.id)]

        for subtype, card_id in targets:
            formula = select_formula(formulas, model.id, country_id, subtype)
            display_name = model.name if subtype is None else f"{model.name} - {subtype.value}"
            if formula is None:
                cards.append(
                    EngagementModelPricing(
                        card_id=card_id,
                        engagement_model_id=model.id,
                        engagement_model_name=model.name,
                        subtype=subtype,
                        display_name=display_name,
                        description=model.description,
                        placeholder=NO_PRICING_PLACEHOLDER,
                    )
                )
                continue
            breakdown = evaluate_formula(
                model, formula, membership_status, complexity_levels, subtype,
                currency=currency,
                default_advance_percentage=default_advance_percentage,
                logger=logger,
            )
            cards.append(
                EngagementModelPricing(
                    card_id=card_id,
                    engagement_model_id=model.id,
                    engagement_model_name=model.name,
                    subtype=breakdown.subtype,
                    display_name=breakdown.display_name,
                    description=model.description,
                    breakdown=breakdown,
                )
            )
    return cards
