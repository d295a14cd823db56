"""
PricingPlan Model.

Billing cadence record for subscription-style engagement: the fee for
each billing period plus the member discount.  Legacy configurations
were saved with camelCase keys (``quarterlyFee``); repositories normalise
keys before constructing the model.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator

from marketplace_console.models.enums import BillingCadence


class PricingPlan(BaseModel):
    """Per-cadence fees for one engagement model / country / organization type."""

    id: Optional[str] = None
    engagement_model: str = ""
    country: Optional[str] = None
    organization_type: Optional[str] = None
    quarterly_fee: Optional[Decimal] = None
    half_yearly_fee: Optional[Decimal] = None
    annual_fee: Optional[Decimal] = None
    currency: str = "USD"
    discount_percentage: Optional[Decimal] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: object) -> object:
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("currency", mode="before")
    @classmethod
    def _default_currency(cls, v: object) -> object:
        return v or "USD"

    def fee_for(self, cadence: BillingCadence) -> Optional[Decimal]:
        """Return the stored fee for *cadence*, or ``None`` when absent."""
        return getattr(self, cadence.fee_field)

    model_config = {"from_attributes": True}
