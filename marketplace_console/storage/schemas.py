"""
Local Store Key Registry.

Key names, schema versions and legacy migrations for every value the
console keeps in the ``LocalStore``.

Legacy (version 0) payloads are the bare camelCase blobs the web
dashboard used to keep in localStorage, e.g. an engagement selection::

    {"model": "Aggregator", "duration": "quarterly",
     "pricing": {"currency": "USD", "originalAmount": 300,
                 "discountedAmount": 240, "frequency": "quarterly"},
     "selectedAt": "2024-05-01T10:00:00Z"}
"""

from __future__ import annotations

from typing import Optional

from marketplace_console.models.enums import (
    BillingCadence,
    MarketplaceSubtype,
    MembershipStatus,
    SelectionState,
)
from marketplace_console.models.storage_models import (
    EngagementSelection,
    MasterDataCache,
    MembershipSnapshot,
    RememberedIdentifier,
    SeekingOrgSession,
)
from marketplace_console.storage.local_store import LocalStore
from marketplace_console.utils.string_helpers import normalize_keys

REMEMBER_ME_KEY = "seeking_org_remember_me"
CURRENT_SESSION_KEY = "current_seeking_org_session"
MEMBERSHIP_PREFIX = "membership_"
SELECTION_PREFIX = "engagement_selection_"
MASTER_CACHE_PREFIX = "master_cache_"


def membership_key(user_id: str) -> str:
    return f"{MEMBERSHIP_PREFIX}{user_id}"


def selection_key(user_id: str) -> str:
    return f"{SELECTION_PREFIX}{user_id}"


def master_cache_key(table: str) -> str:
    return f"{MASTER_CACHE_PREFIX}{table}"


# ---------------------------------------------------------------------------
# v0 -> v1 migrations
# ---------------------------------------------------------------------------

def _coerce_status(value: object) -> str:
    try:
        return MembershipStatus(str(value or "")).value
    except ValueError:
        return MembershipStatus.INACTIVE.value


def _coerce_cadence(value: object) -> Optional[str]:
    if not value:
        return None
    try:
        return BillingCadence(str(value)).value
    except ValueError:
        return None


def _coerce_subtype(value: object) -> Optional[str]:
    if not value:
        return None
    try:
        return MarketplaceSubtype(str(value)).value
    except ValueError:
        return None


def migrate_membership_v0(data: dict) -> dict:
    """Legacy membership blob -> ``MembershipSnapshot`` v1.

    ``member_paid`` (and its variants) becomes ``active``; unknown
    statuses become ``inactive``.
    """
    legacy = normalize_keys(data)
    migrated: dict = {
        "status": _coerce_status(legacy.get("status") or legacy.get("membership_status")),
        "plan": legacy.get("plan") or legacy.get("membership_type") or legacy.get("selected_plan"),
    }
    updated_at = legacy.get("updated_at") or legacy.get("activated_at")
    if updated_at:
        migrated["updated_at"] = updated_at
    return migrated


def migrate_selection_v0(data: dict) -> dict:
    """Legacy ``{model, duration, pricing, selectedAt}`` -> ``EngagementSelection`` v1."""
    legacy = normalize_keys(data)
    model = legacy.get("model") or legacy.get("engagement_model") or ""
    if isinstance(model, dict):
        model = model.get("name") or ""
    pricing = legacy.get("pricing") or {}
    if not isinstance(pricing, dict):
        pricing = {}

    migrated: dict = {
        "engagement_model": str(model),
        "subtype": _coerce_subtype(legacy.get("subtype")),
        "cadence": _coerce_cadence(legacy.get("duration") or pricing.get("frequency")),
        "currency": pricing.get("currency") or "USD",
        "original_amount": pricing.get("original_amount"),
        "discounted_amount": pricing.get("discounted_amount"),
        # A stored legacy selection was always a submitted one.
        "state": SelectionState.SUBMITTED.value,
    }
    if legacy.get("selected_at"):
        migrated["selected_at"] = legacy["selected_at"]
    return migrated


def migrate_remember_me_v0(data: dict) -> dict:
    legacy = normalize_keys(data)
    return {
        "identifier": legacy.get("identifier") or legacy.get("email") or legacy.get("organization_id") or "",
        "remember": bool(legacy.get("remember", legacy.get("remember_me", True))),
    }


def migrate_session_v0(data: dict) -> dict:
    legacy = normalize_keys(data)
    migrated: dict = {
        "user_id": str(legacy.get("user_id") or legacy.get("id") or ""),
        "organization_id": legacy.get("organization_id") or legacy.get("org_id"),
        "organization_name": legacy.get("organization_name") or legacy.get("org_name"),
        "country": legacy.get("country"),
        "organization_type": legacy.get("organization_type"),
    }
    if legacy.get("login_time"):
        migrated["login_time"] = legacy["login_time"]
    return migrated


def register_default_schemas(store: LocalStore) -> None:
    """Register every key family the console persists."""
    store.register(REMEMBER_ME_KEY, RememberedIdentifier, version=1)
    store.register_migration(REMEMBER_ME_KEY, 0, migrate_remember_me_v0)

    store.register(CURRENT_SESSION_KEY, SeekingOrgSession, version=1)
    store.register_migration(CURRENT_SESSION_KEY, 0, migrate_session_v0)

    store.register(MEMBERSHIP_PREFIX, MembershipSnapshot, version=1)
    store.register_migration(MEMBERSHIP_PREFIX, 0, migrate_membership_v0)

    store.register(SELECTION_PREFIX, EngagementSelection, version=1)
    store.register_migration(SELECTION_PREFIX, 0, migrate_selection_v0)

    store.register(MASTER_CACHE_PREFIX, MasterDataCache, version=1)
