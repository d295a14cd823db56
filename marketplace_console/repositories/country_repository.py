"""
Country Repository.

Resolves the organization's country name to the ``master_countries`` id
that fee formulas are keyed by.
"""

from __future__ import annotations

from typing import Optional

from marketplace_console.repositories.base_repository import BaseRepository


class CountryRepository(BaseRepository):
    """Read-only access to ``master_countries``."""

    TABLE = "master_countries"

    def find_id_by_name(self, name: str) -> Optional[str]:
        """Return the id of the country called *name* (case-insensitive)."""
        wanted = name.strip().lower()
        if not wanted:
            return None
        for row in self.list_rows(order_by="name"):
            if str(row.get("name") or "").strip().lower() == wanted:
                return str(row["id"])
        return None
