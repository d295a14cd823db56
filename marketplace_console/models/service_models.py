"""
Service Layer Data Transfer Objects.

Pydantic models for validated output at service boundaries: fee
breakdowns, per-complexity rows, billing plan quotes and the standard
``ServiceResult`` envelope.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from marketplace_console.models.enums import (
    BillingCadence,
    EngagementModelKind,
    FeeType,
    MarketplaceSubtype,
    MembershipStatus,
)

T = TypeVar("T")

__all__ = [
    "ComplexityFeeRow",
    "DiscountedAmount",
    "EngagementModelPricing",
    "FeeBreakdown",
    "FeeSection",
    "PlanQuote",
    "ServiceResult",
    "SolutionFeeQuote",
]


# ---------------------------------------------------------------------------
# Fee rule outputs
# ---------------------------------------------------------------------------

class DiscountedAmount(BaseModel):
    """An amount before and after the membership discount.

    ``original`` is what the card shows struck through when
    ``discount_applied`` is true.
    """

    original: Decimal
    final: Decimal
    discount_percentage: Decimal = Decimal("0")
    discount_applied: bool = False

    @property
    def savings(self) -> Decimal:
        return self.original - self.final


class ComplexityFeeRow(BaseModel):
    """One row of the complexity multiplier table."""

    level_name: str
    level_order: int
    multiplier: Decimal
    final_fee: Decimal


# ---------------------------------------------------------------------------
# Platform fee formula evaluation
# ---------------------------------------------------------------------------

class FeeSection(BaseModel):
    """Management or consulting fee block of a breakdown."""

    fee_type: FeeType
    base_fee: Decimal
    discounted: DiscountedAmount
    complexity_rows: list[ComplexityFeeRow] = Field(default_factory=list)


class FeeBreakdown(BaseModel):
    """Per-engagement-model fee breakdown produced by the formula evaluator.

    ``consulting_fee`` is ``None`` for the Marketplace General subtype,
    which only charges a management fee.
    """

    engagement_model_id: str
    engagement_model_name: str
    display_name: str
    kind: EngagementModelKind
    subtype: Optional[MarketplaceSubtype] = None
    is_fee_based: bool
    currency: str = "USD"
    membership_status: MembershipStatus = MembershipStatus.INACTIVE
    platform_usage_fee_percentage: Decimal
    advance_payment_percentage: Decimal
    membership_discount_percentage: Decimal
    management_fee: FeeSection
    consulting_fee: Optional[FeeSection] = None


class SolutionFeeQuote(BaseModel):
    """Concrete fees for a given solution value and complexity level."""

    complexity_name: Optional[str] = None
    management_multiplier: Decimal = Decimal("1")
    consulting_multiplier: Decimal = Decimal("1")
    solution_fee: Decimal
    platform_usage_fee: Decimal
    management_fee: Decimal
    consulting_fee: Decimal
    total_fee: Decimal
    advance_payment: Decimal


class EngagementModelPricing(BaseModel):
    """One dashboard card: an engagement model with its breakdown or placeholder."""

    card_id: str
    engagement_model_id: str
    engagement_model_name: str
    subtype: Optional[MarketplaceSubtype] = None
    display_name: str
    description: Optional[str] = None
    breakdown: Optional[FeeBreakdown] = None
    placeholder: Optional[str] = None

    @property
    def has_pricing(self) -> bool:
        return self.breakdown is not None


# ---------------------------------------------------------------------------
# Billing plans
# ---------------------------------------------------------------------------

class PlanQuote(BaseModel):
    """A billing plan amount for one cadence, discounted for members."""

    engagement_model: str
    cadence: BillingCadence
    currency: str
    amount: DiscountedAmount


# ---------------------------------------------------------------------------
# Generic service models
# ---------------------------------------------------------------------------

class ServiceResult(BaseModel, Generic[T]):
    """
    Standard service return envelope.

    All service methods return this, providing a consistent contract
    for the view layer.  Failures carry a human-readable ``error`` that
    the view shows as a notification.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    status_code: int = 200
