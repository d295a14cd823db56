"""
PlatformFeeFormula Model.

One row of ``master_platform_fee_formulas``.  A formula applies to an
engagement model, optionally narrowed to a marketplace subtype and a
country.  Values are read as stored; range checks happen on the write
path (``models.master_data``) and clamping in the fee rules.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from marketplace_console.models.enums import MarketplaceSubtype


class PlatformFeeFormula(BaseModel):
    """Base fees, percentages and discount for one engagement model."""

    id: str
    engagement_model_id: str
    engagement_model_subtype_id: Optional[str] = None
    subtype: Optional[MarketplaceSubtype] = None
    country_id: Optional[str] = None
    currency_id: Optional[str] = None
    formula_name: Optional[str] = None
    base_management_fee: Decimal = Decimal("0")
    base_consulting_fee: Decimal = Decimal("0")
    platform_usage_fee_percentage: Decimal = Decimal("0")
    advance_payment_percentage: Optional[Decimal] = None
    membership_discount_percentage: Decimal = Decimal("0")
    is_active: bool = True

    @model_validator(mode="before")
    @classmethod
    def _flatten_subtype_join(cls, data: object) -> object:
        """Lift ``master_engagement_model_subtypes.name`` into ``subtype``.

        Formula reads embed the subtype row via a PostgREST join; the
        nested name is the only part the pricing engine needs.
        """
        if not isinstance(data, dict) or data.get("subtype"):
            return data
        joined = data.get("master_engagement_model_subtypes")
        if isinstance(joined, dict) and joined.get("name"):
            return {**data, "subtype": joined["name"]}
        return data

    @field_validator(
        "id", "engagement_model_id", "engagement_model_subtype_id",
        "country_id", "currency_id", mode="before",
    )
    @classmethod
    def _coerce_ids(cls, v: object) -> object:
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator(
        "base_management_fee", "base_consulting_fee",
        "platform_usage_fee_percentage", "membership_discount_percentage",
        mode="before",
    )
    @classmethod
    def _null_as_zero(cls, v: object) -> object:
        return Decimal("0") if v is None else v

    @field_validator("subtype", mode="before")
    @classmethod
    def _unknown_subtype_is_none(cls, v: object) -> object:
        if v is None or isinstance(v, MarketplaceSubtype):
            return v
        try:
            return MarketplaceSubtype(str(v))
        except ValueError:
            return None

    @property
    def is_global(self) -> bool:
        """A formula without a country applies wherever no country formula exists."""
        return self.country_id is None

    model_config = {"from_attributes": True}
