"""
Master Data Write Schemas.

Validated payloads for the pricing master-data editors.  Reads accept
whatever the remote store holds; writes are range-checked here so that
new out-of-range discounts or negative multipliers never reach the store.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class _WriteModel(BaseModel):
    model_config = {"extra": "forbid", "str_strip_whitespace": True}


class EngagementModelWrite(_WriteModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    is_user_created: bool = True


class PlatformFeeFormulaWrite(_WriteModel):
    engagement_model_id: str = Field(min_length=1)
    engagement_model_subtype_id: Optional[str] = None
    country_id: Optional[str] = None
    currency_id: Optional[str] = None
    formula_name: Optional[str] = None
    formula_type: str = "structured"
    base_management_fee: Decimal = Field(default=Decimal("0"), ge=0)
    base_consulting_fee: Decimal = Field(default=Decimal("0"), ge=0)
    platform_usage_fee_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    advance_payment_percentage: Decimal = Field(default=Decimal("25"), ge=0, le=100)
    membership_discount_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    is_active: bool = True


class ComplexityLevelWrite(_WriteModel):
    name: str = Field(min_length=1)
    level_order: int = Field(ge=0)
    management_fee_multiplier: Decimal = Field(default=Decimal("1"), ge=0)
    consulting_fee_multiplier: Decimal = Field(default=Decimal("1"), ge=0)
    description: Optional[str] = None
    is_active: bool = True


class PricingPlanWrite(_WriteModel):
    engagement_model: str = Field(min_length=1)
    country: Optional[str] = None
    organization_type: Optional[str] = None
    quarterly_fee: Optional[Decimal] = Field(default=None, ge=0)
    half_yearly_fee: Optional[Decimal] = Field(default=None, ge=0)
    annual_fee: Optional[Decimal] = Field(default=None, ge=0)
    currency: str = "USD"
    discount_percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, v: str) -> str:
        return v.upper()


# Keyed by the logical table names in ``AppConfig.PRICING_TABLES``.
WRITE_SCHEMAS: dict[str, type[_WriteModel]] = {
    "engagement_models": EngagementModelWrite,
    "platform_fee_formulas": PlatformFeeFormulaWrite,
    "complexity_levels": ComplexityLevelWrite,
    "pricing_plans": PricingPlanWrite,
}
