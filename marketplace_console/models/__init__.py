"""
Data Models Package.

Re-exports all Pydantic models for convenient imports:
    from marketplace_console.models import EngagementModel, PlatformFeeFormula
    from marketplace_console.models import MembershipStatus, BillingCadence
    from marketplace_console.models import FeeBreakdown, ServiceResult
"""

from marketplace_console.models.enums import (
    BillingCadence,
    EngagementModelKind,
    FeeType,
    MarketplaceSubtype,
    MembershipStatus,
    SelectionState,
)
from marketplace_console.models.engagement_model import EngagementModel
from marketplace_console.models.platform_fee_formula import PlatformFeeFormula
from marketplace_console.models.complexity_level import ComplexityLevel
from marketplace_console.models.pricing_plan import PricingPlan
from marketplace_console.models.service_models import (
    ComplexityFeeRow,
    DiscountedAmount,
    EngagementModelPricing,
    FeeBreakdown,
    FeeSection,
    PlanQuote,
    ServiceResult,
    SolutionFeeQuote,
)
from marketplace_console.models.storage_models import (
    EngagementSelection,
    MasterDataCache,
    MembershipSnapshot,
    RememberedIdentifier,
    SeekingOrgSession,
)

__all__ = [
    "BillingCadence",
    "EngagementModelKind",
    "FeeType",
    "MarketplaceSubtype",
    "MembershipStatus",
    "SelectionState",
    "EngagementModel",
    "PlatformFeeFormula",
    "ComplexityLevel",
    "PricingPlan",
    "ComplexityFeeRow",
    "DiscountedAmount",
    "EngagementModelPricing",
    "FeeBreakdown",
    "FeeSection",
    "PlanQuote",
    "ServiceResult",
    "SolutionFeeQuote",
    "EngagementSelection",
    "MasterDataCache",
    "MembershipSnapshot",
    "RememberedIdentifier",
    "SeekingOrgSession",
]
