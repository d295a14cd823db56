"""Domain exceptions for the pricing console."""

from __future__ import annotations


class PricingError(Exception):
    """Base class for all pricing console errors."""


class InvalidSelectionTransition(PricingError):
    """Raised when a selection card is driven through an illegal transition."""

    def __init__(self, current: str, action: str) -> None:
        super().__init__(f"Cannot {action} while card is in state {current}")
        self.current = current
        self.action = action


class LocalStoreError(PricingError):
    """Raised when a local store value is corrupt or cannot be migrated."""


class UnknownTableError(PricingError):
    """Raised when master-data CRUD targets a table outside the pricing set."""


class RecordNotFoundError(PricingError, LookupError):
    """Raised when an update targets a row the remote store does not hold."""

    def __init__(self, table: str, record_id: str) -> None:
        super().__init__(f"{table} row '{record_id}' not found")
        self.table = table
        self.record_id = record_id
