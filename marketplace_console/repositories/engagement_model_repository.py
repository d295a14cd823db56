"""
Engagement Model Repository.

Reads ``master_engagement_models``.  Models created by administrators for
individual organizations (``is_user_created``) are hidden from the
pricing dashboard.
"""

from __future__ import annotations

from marketplace_console.models.engagement_model import EngagementModel
from marketplace_console.repositories.base_repository import BaseRepository


class EngagementModelRepository(BaseRepository):
    """Data access layer for EngagementModel entities."""

    TABLE = "master_engagement_models"

    def list_models(self, include_user_created: bool = False) -> list[EngagementModel]:
        """Fetch engagement models ordered by name."""
        filters = {} if include_user_created else {"is_user_created": False}
        rows = self.list_rows(filters, order_by="name")
        return self._to_models(rows, EngagementModel)
