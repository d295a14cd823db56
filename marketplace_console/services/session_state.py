"""
Session State Service.

Everything the console remembers between runs lives in the ``LocalStore``:
the remembered login identifier, the current seeking-organization
session, each user's membership snapshot and dashboard selection.

Reads never fail the caller: an unreadable value is logged and treated
as absent.  Writes return ServiceResult.
"""

from __future__ import annotations

from typing import Optional, TypeVar

from pydantic import BaseModel

from marketplace_console.exceptions import LocalStoreError
from marketplace_console.logger import StructuredLogger
from marketplace_console.models.enums import MembershipStatus
from marketplace_console.models.service_models import ServiceResult
from marketplace_console.models.storage_models import (
    EngagementSelection,
    MembershipSnapshot,
    RememberedIdentifier,
    SeekingOrgSession,
)
from marketplace_console.services.base_service import BaseService
from marketplace_console.services.billing_plans import SelectionCard
from marketplace_console.storage.local_store import LocalStore
from marketplace_console.storage.schemas import (
    CURRENT_SESSION_KEY,
    REMEMBER_ME_KEY,
    membership_key,
    selection_key,
)

M = TypeVar("M", bound=BaseModel)


class SessionStateService(BaseService):
    """Typed access to per-user state kept in the local store."""

    def __init__(self, local_store: LocalStore, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._store = local_store

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def get_membership(self, user_id: str) -> Optional[MembershipSnapshot]:
        return self._read(membership_key(user_id), MembershipSnapshot)

    def get_membership_status(self, user_id: str) -> MembershipStatus:
        """Current membership status; unknown users are inactive."""
        snapshot = self.get_membership(user_id)
        return snapshot.status if snapshot is not None else MembershipStatus.INACTIVE

    def set_membership(
        self,
        user_id: str,
        status: MembershipStatus,
        plan: Optional[str] = None,
    ) -> ServiceResult[MembershipSnapshot]:
        snapshot = MembershipSnapshot(status=status, plan=plan)
        return self._write(membership_key(user_id), snapshot)

    # ------------------------------------------------------------------
    # Engagement selection
    # ------------------------------------------------------------------

    def get_selection(self, user_id: str) -> Optional[EngagementSelection]:
        return self._read(selection_key(user_id), EngagementSelection)

    def save_selection(
        self,
        user_id: str,
        selection: EngagementSelection,
    ) -> ServiceResult[EngagementSelection]:
        return self._write(selection_key(user_id), selection)

    def clear_selection(self, user_id: str) -> bool:
        return self._store.delete(selection_key(user_id))

    def submit_selection(
        self,
        user_id: str,
        card: SelectionCard,
    ) -> ServiceResult[EngagementSelection]:
        """Submit *card* and persist it.

        Raises:
            InvalidSelectionTransition: If *card* has no plan selected.
        """
        return self.save_selection(user_id, card.submit())

    def reopen_selection(
        self,
        user_id: str,
        card: SelectionCard,
    ) -> ServiceResult[EngagementSelection]:
        """Reopen a submitted *card* and persist the reopened state.

        The stored selection moves back to MODEL_SELECTED with the card.

        Raises:
            InvalidSelectionTransition: If *card* is not submitted.
        """
        card.modify_selection()
        return self.save_selection(user_id, card.to_selection())

    # ------------------------------------------------------------------
    # Login identity
    # ------------------------------------------------------------------

    def get_remembered_identifier(self) -> Optional[str]:
        remembered = self._read(REMEMBER_ME_KEY, RememberedIdentifier)
        if remembered is None or not remembered.remember:
            return None
        return remembered.identifier

    def remember_identifier(self, identifier: str) -> ServiceResult[RememberedIdentifier]:
        return self._write(REMEMBER_ME_KEY, RememberedIdentifier(identifier=identifier))

    def forget_identifier(self) -> bool:
        return self._store.delete(REMEMBER_ME_KEY)

    def get_current_session(self) -> Optional[SeekingOrgSession]:
        return self._read(CURRENT_SESSION_KEY, SeekingOrgSession)

    def start_session(self, session: SeekingOrgSession) -> ServiceResult[SeekingOrgSession]:
        result = self._write(CURRENT_SESSION_KEY, session)
        if result.success:
            self._logger.info(
                "Seeking organization session started",
                extra={"user_id": session.user_id, "organization_id": session.organization_id},
            )
        return result

    def end_session(self) -> bool:
        return self._store.delete(CURRENT_SESSION_KEY)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _read(self, key: str, model: type[M]) -> Optional[M]:
        try:
            return self._store.get(key, model)
        except LocalStoreError as exc:
            self._logger.warning("Ignoring unreadable local value %s: %s", key, exc)
            return None

    def _write(self, key: str, value: M) -> ServiceResult[M]:
        try:
            self._store.put(key, value)
        except LocalStoreError as exc:
            return self._failed(f"saving {key}", exc)
        return ServiceResult(success=True, data=value)
