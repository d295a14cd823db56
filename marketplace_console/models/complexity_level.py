"""
ComplexityLevel Model.

One row of ``master_challenge_complexity``: an ordered tier that scales
the base management and consulting fees.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator

from marketplace_console.models.enums import FeeType


class ComplexityLevel(BaseModel):
    """Ordered challenge complexity tier (Low, Medium, High, Expert)."""

    id: str
    name: str
    level_order: int = 0
    management_fee_multiplier: Decimal = Decimal("1")
    consulting_fee_multiplier: Decimal = Decimal("1")
    description: Optional[str] = None
    is_active: bool = True

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: object) -> object:
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("management_fee_multiplier", "consulting_fee_multiplier", mode="before")
    @classmethod
    def _missing_multiplier_is_one(cls, v: object) -> object:
        # Rows created before multipliers existed carry NULL.
        return Decimal("1") if v is None else v

    def multiplier_for(self, fee_type: FeeType) -> Decimal:
        """Return the multiplier applied to *fee_type* at this level."""
        if fee_type == FeeType.MANAGEMENT:
            return self.management_fee_multiplier
        return self.consulting_fee_multiplier

    model_config = {"from_attributes": True}
