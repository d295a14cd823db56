"""Complexity Level Repository for ``master_challenge_complexity``."""

from __future__ import annotations

from marketplace_console.models.complexity_level import ComplexityLevel
from marketplace_console.repositories.base_repository import BaseRepository


class ComplexityLevelRepository(BaseRepository):
    """Data access layer for ComplexityLevel entities."""

    TABLE = "master_challenge_complexity"

    def list_active(self) -> list[ComplexityLevel]:
        """Fetch active complexity levels in ``level_order``."""
        rows = self.list_rows({"is_active": True}, order_by="level_order")
        return self._to_models(rows, ComplexityLevel)
