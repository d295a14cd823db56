"""
Local Store Value Models.

Typed values persisted in the ``LocalStore``.  Each key family has one
model; the store wraps it in a versioned envelope.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, JsonValue

from marketplace_console.models.enums import (
    BillingCadence,
    MarketplaceSubtype,
    MembershipStatus,
    SelectionState,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RememberedIdentifier(BaseModel):
    """``seeking_org_remember_me``: the identifier pre-filled on the login form."""

    identifier: str = Field(min_length=1)
    remember: bool = True
    saved_at: datetime = Field(default_factory=_utcnow)


class SeekingOrgSession(BaseModel):
    """``current_seeking_org_session``: who is using the console right now.

    Holds display identity only; no credentials or tokens are stored.
    """

    user_id: str
    organization_id: Optional[str] = None
    organization_name: Optional[str] = None
    country: Optional[str] = None
    organization_type: Optional[str] = None
    login_time: datetime = Field(default_factory=_utcnow)


class MembershipSnapshot(BaseModel):
    """``membership_<user_id>``: the organization's membership state."""

    status: MembershipStatus = MembershipStatus.INACTIVE
    plan: Optional[str] = None
    updated_at: datetime = Field(default_factory=_utcnow)


class EngagementSelection(BaseModel):
    """``engagement_selection_<user_id>``: the dashboard card selection."""

    engagement_model: str
    subtype: Optional[MarketplaceSubtype] = None
    cadence: Optional[BillingCadence] = None
    currency: str = "USD"
    original_amount: Optional[Decimal] = None
    discounted_amount: Optional[Decimal] = None
    state: SelectionState = SelectionState.MODEL_SELECTED
    selected_at: datetime = Field(default_factory=_utcnow)


class MasterDataCache(BaseModel):
    """``master_cache_<table>``: last rows read from a remote table, keyed by id."""

    rows: dict[str, dict[str, JsonValue]] = Field(default_factory=dict)
    refreshed_at: datetime = Field(default_factory=_utcnow)
