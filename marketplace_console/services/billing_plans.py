"""
Billing Plan Selector.

Cadence pricing for subscription-style engagement and the selection
workflow of a dashboard card::

    NO_MODEL_SELECTED --select_model--> MODEL_SELECTED
    MODEL_SELECTED    --select_plan---> PLAN_SELECTED
    PLAN_SELECTED     --submit--------> SUBMITTED
    SUBMITTED         --modify_selection--> MODEL_SELECTED (model kept)

``select_model`` may be repeated from MODEL_SELECTED or PLAN_SELECTED
and clears any chosen plan.  Every other transition raises
``InvalidSelectionTransition``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional, Union

from marketplace_console.exceptions import InvalidSelectionTransition
from marketplace_console.logger import StructuredLogger
from marketplace_console.models.enums import (
    BillingCadence,
    MarketplaceSubtype,
    SelectionState,
)
from marketplace_console.models.pricing_plan import PricingPlan
from marketplace_console.models.service_models import DiscountedAmount, PlanQuote
from marketplace_console.models.storage_models import EngagementSelection
from marketplace_console.services.fee_rules import StatusLike, quote_discount
from marketplace_console.utils.math_utils import ZERO, quantize_money

__all__ = [
    "SelectionCard",
    "quote_plan",
    "resolve_pricing_plan",
    "select_plan_amount",
]

CadenceLike = Union[BillingCadence, str]

_GLOBAL_COUNTRY = "global"


def select_plan_amount(plan: Optional[PricingPlan], cadence: CadenceLike) -> Decimal:
    """Return the plan's fee for *cadence*; a missing plan or field is 0."""
    if plan is None:
        return ZERO
    fee = plan.fee_for(BillingCadence(cadence))
    return quantize_money(fee) if fee is not None else ZERO


def quote_plan(
    plan: PricingPlan,
    cadence: CadenceLike,
    membership_status: StatusLike,
    logger: Optional[StructuredLogger] = None,
) -> PlanQuote:
    """Price *plan* for *cadence*, applying the member discount when active."""
    cadence = BillingCadence(cadence)
    return PlanQuote(
        engagement_model=plan.engagement_model,
        cadence=cadence,
        currency=plan.currency,
        amount=quote_discount(
            select_plan_amount(plan, cadence),
            plan.discount_percentage,
            membership_status,
            logger,
        ),
    )


def _same(left: Optional[str], right: Optional[str]) -> bool:
    return (left or "").strip().casefold() == (right or "").strip().casefold()


def _is_global(plan: PricingPlan) -> bool:
    return not plan.country or _same(plan.country, _GLOBAL_COUNTRY)


def resolve_pricing_plan(
    plans: Iterable[PricingPlan],
    engagement_model_name: str,
    country: Optional[str],
    organization_type: Optional[str],
) -> Optional[PricingPlan]:
    """Find the plan for a model, country and organization type.

    Lookup order: exact country and organization type, then a global plan
    (no country, or ``"Global"``), then any plan for the model.
    """
    candidates = [p for p in plans if _same(p.engagement_model, engagement_model_name)]
    if not candidates:
        return None

    for plan in candidates:
        if _same(plan.country, country) and _same(plan.organization_type, organization_type):
            return plan
    for plan in candidates:
        if _is_global(plan):
            return plan
    return candidates[0]


class SelectionCard:
    """Selection state of the engagement pricing dashboard."""

    def __init__(self) -> None:
        self.state: SelectionState = SelectionState.NO_MODEL_SELECTED
        self.engagement_model: Optional[str] = None
        self.subtype: Optional[MarketplaceSubtype] = None
        self.cadence: Optional[BillingCadence] = None
        self.quote: Optional[PlanQuote] = None

    @classmethod
    def from_selection(cls, selection: EngagementSelection) -> "SelectionCard":
        """Restore a card from a persisted selection."""
        card = cls()
        card.engagement_model = selection.engagement_model
        card.subtype = selection.subtype
        card.state = selection.state
        if (
            selection.state in (SelectionState.PLAN_SELECTED, SelectionState.SUBMITTED)
            and selection.cadence is not None
        ):
            card.cadence = selection.cadence
            if selection.original_amount is not None:
                final = selection.discounted_amount
                if final is None:
                    final = selection.original_amount
                card.quote = PlanQuote(
                    engagement_model=selection.engagement_model,
                    cadence=selection.cadence,
                    currency=selection.currency,
                    amount=DiscountedAmount(
                        original=selection.original_amount,
                        final=final,
                        discount_applied=final < selection.original_amount,
                    ),
                )
        elif selection.state != SelectionState.NO_MODEL_SELECTED:
            card.state = SelectionState.MODEL_SELECTED
        if card.state == SelectionState.NO_MODEL_SELECTED:
            card.engagement_model = None
        return card

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def select_model(
        self,
        engagement_model: str,
        subtype: Optional[MarketplaceSubtype] = None,
    ) -> None:
        self._require("select a model", SelectionState.NO_MODEL_SELECTED,
                      SelectionState.MODEL_SELECTED, SelectionState.PLAN_SELECTED)
        self.engagement_model = engagement_model
        self.subtype = subtype
        self._clear_plan()
        self.state = SelectionState.MODEL_SELECTED

    def select_plan(self, cadence: CadenceLike, quote: Optional[PlanQuote] = None) -> None:
        self._require("select a plan", SelectionState.MODEL_SELECTED,
                      SelectionState.PLAN_SELECTED)
        self.cadence = BillingCadence(cadence)
        self.quote = quote
        self.state = SelectionState.PLAN_SELECTED

    def submit(self) -> EngagementSelection:
        """Freeze the selection and return it for persistence."""
        self._require("submit", SelectionState.PLAN_SELECTED)
        self.state = SelectionState.SUBMITTED
        return self.to_selection()

    def modify_selection(self) -> None:
        """Reopen a submitted selection, keeping the model and clearing the plan."""
        self._require("modify the selection", SelectionState.SUBMITTED)
        self._clear_plan()
        self.state = SelectionState.MODEL_SELECTED

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def to_selection(self) -> EngagementSelection:
        if self.engagement_model is None:
            raise InvalidSelectionTransition(self.state, "save a selection")
        amount = self.quote.amount if self.quote is not None else None
        return EngagementSelection(
            engagement_model=self.engagement_model,
            subtype=self.subtype,
            cadence=self.cadence,
            currency=self.quote.currency if self.quote is not None else "USD",
            original_amount=amount.original if amount is not None else None,
            discounted_amount=amount.final if amount is not None else None,
            state=self.state,
        )

    def _require(self, action: str, *allowed: SelectionState) -> None:
        if self.state not in allowed:
            raise InvalidSelectionTransition(self.state, action)

    def _clear_plan(self) -> None:
        self.cadence = None
        self.quote = None

    def __repr__(self) -> str:
        return (
            f"SelectionCard(state={self.state}, model={self.engagement_model!r}, "
            f"cadence={self.cadence})"
        )
