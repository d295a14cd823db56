"""
Platform Fee Formula Repository.

Reads active structured formulas from ``master_platform_fee_formulas``,
embedding the marketplace subtype row so the formula knows whether it
prices the General or the Program Managed card.
"""

from __future__ import annotations

from typing import Optional

from marketplace_console.models.platform_fee_formula import PlatformFeeFormula
from marketplace_console.repositories.base_repository import BaseRepository


class FeeFormulaRepository(BaseRepository):
    """Data access layer for PlatformFeeFormula entities."""

    TABLE = "master_platform_fee_formulas"
    SELECT = "*, master_engagement_model_subtypes(id, name)"

    def list_active(
        self,
        engagement_model_id: Optional[str] = None,
    ) -> list[PlatformFeeFormula]:
        """Fetch active structured formulas, optionally for one engagement model."""
        filters: dict[str, object] = {"is_active": True, "formula_type": "structured"}
        if engagement_model_id is not None:
            filters["engagement_model_id"] = engagement_model_id
        rows = self.list_rows(filters)
        return self._to_models(rows, PlatformFeeFormula)
