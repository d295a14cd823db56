"""
Shared Enumerations for Pricing Models.

All string enumerations for type-safe field constraints.
StrEnum values compare equal to their string equivalents,
so code like ``if status == 'active'`` continues to work.
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Optional

_RE_NON_ALNUM = re.compile(r"[^a-z0-9&]+")


def _squash(value: str) -> str:
    """Lower-case and drop separators: ``"Half-Yearly"`` -> ``"halfyearly"``."""
    return _RE_NON_ALNUM.sub("", value.strip().lower())


class MembershipStatus(StrEnum):
    """Organization membership state.

    Legacy payloads stored ``member_paid`` / ``member`` for a paid
    membership and ``not-a-member`` otherwise; those spellings are
    accepted on input.
    """

    ACTIVE = "active"
    INACTIVE = "inactive"

    @classmethod
    def _missing_(cls, value: object) -> Optional["MembershipStatus"]:
        if not isinstance(value, str):
            return None
        squashed = _squash(value)
        if squashed in {"active", "member", "memberpaid", "paid"}:
            return cls.ACTIVE
        if squashed in {"inactive", "notamember", "nonmember", "none", ""}:
            return cls.INACTIVE
        return None


class EngagementModelKind(StrEnum):
    """Closed set of engagement model behaviours.

    Resolved once from the model's display name when a row is loaded;
    rendering branches on the kind, never on the name string.
    """

    MARKETPLACE = "MARKETPLACE"
    AGGREGATOR = "AGGREGATOR"
    MARKETPLACE_AGGREGATOR = "MARKETPLACE_AGGREGATOR"
    PLATFORM_SERVICE = "PLATFORM_SERVICE"
    SUBSCRIPTION = "SUBSCRIPTION"

    @classmethod
    def from_name(cls, name: str) -> "EngagementModelKind":
        """Resolve the kind for an engagement model display name or slug."""
        squashed = _squash(name)
        if squashed in _KIND_ALIASES:
            return _KIND_ALIASES[squashed]
        if squashed.startswith("marketplace&aggregator"):
            return cls.MARKETPLACE_AGGREGATOR
        if squashed.startswith("marketplace"):
            return cls.MARKETPLACE
        if "platformasaservice" in squashed or "paas" in squashed:
            return cls.PLATFORM_SERVICE
        return cls.SUBSCRIPTION

    @property
    def is_fee_based(self) -> bool:
        """Fee-based models charge a percentage of the solution value."""
        return self in _FEE_BASED_KINDS


_KIND_ALIASES: dict[str, EngagementModelKind] = {
    "marketplace": EngagementModelKind.MARKETPLACE,
    "aggregator": EngagementModelKind.AGGREGATOR,
    "marketplace&aggregator": EngagementModelKind.MARKETPLACE_AGGREGATOR,
    "marketplaceaggregator": EngagementModelKind.MARKETPLACE_AGGREGATOR,
    "platformasaservice": EngagementModelKind.PLATFORM_SERVICE,
    "platformservice": EngagementModelKind.PLATFORM_SERVICE,
    "paas": EngagementModelKind.PLATFORM_SERVICE,
}

_FEE_BASED_KINDS: frozenset[EngagementModelKind] = frozenset({
    EngagementModelKind.MARKETPLACE,
    EngagementModelKind.AGGREGATOR,
    EngagementModelKind.MARKETPLACE_AGGREGATOR,
})


class MarketplaceSubtype(StrEnum):
    """Marketplace engagement subtypes.

    ``GENERAL`` charges a management fee only; ``PROGRAM_MANAGED`` charges
    management and consulting fees.
    """

    GENERAL = "General"
    PROGRAM_MANAGED = "Program Managed"

    @classmethod
    def _missing_(cls, value: object) -> Optional["MarketplaceSubtype"]:
        if not isinstance(value, str):
            return None
        squashed = _squash(value)
        for member in cls:
            if _squash(member.value) == squashed:
                return member
        return None


class BillingCadence(StrEnum):
    """Subscription billing periods."""

    QUARTERLY = "quarterly"
    HALF_YEARLY = "half-yearly"
    ANNUAL = "annual"

    @classmethod
    def _missing_(cls, value: object) -> Optional["BillingCadence"]:
        if not isinstance(value, str):
            return None
        squashed = _squash(value)
        if squashed == "yearly":
            return cls.ANNUAL
        for member in cls:
            if _squash(member.value) == squashed:
                return member
        return None

    @property
    def fee_field(self) -> str:
        """Name of the ``PricingPlan`` field holding this cadence's fee."""
        return _CADENCE_FIELDS[self]


_CADENCE_FIELDS: dict[BillingCadence, str] = {
    BillingCadence.QUARTERLY: "quarterly_fee",
    BillingCadence.HALF_YEARLY: "half_yearly_fee",
    BillingCadence.ANNUAL: "annual_fee",
}


class FeeType(StrEnum):
    """Fee components scaled by complexity multipliers."""

    MANAGEMENT = "management"
    CONSULTING = "consulting"


class SelectionState(StrEnum):
    """Dashboard card selection workflow states."""

    NO_MODEL_SELECTED = "NO_MODEL_SELECTED"
    MODEL_SELECTED = "MODEL_SELECTED"
    PLAN_SELECTED = "PLAN_SELECTED"
    SUBMITTED = "SUBMITTED"
