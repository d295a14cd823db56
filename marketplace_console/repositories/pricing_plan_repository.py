"""
Pricing Plan Repository.

Reads ``pricing_configurations``: per-cadence subscription fees by
engagement model, country and organization type.  Older rows were saved
with camelCase columns; ``list_rows`` normalises them.
"""

from __future__ import annotations

from marketplace_console.models.pricing_plan import PricingPlan
from marketplace_console.repositories.base_repository import BaseRepository


class PricingPlanRepository(BaseRepository):
    """Data access layer for PricingPlan entities."""

    TABLE = "pricing_configurations"

    def list_plans(self) -> list[PricingPlan]:
        rows = self.list_rows()
        return self._to_models(rows, PricingPlan)
