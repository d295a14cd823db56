"""
Fee Rules.

Pure-function module for the two rules every pricing card is built from:

- the membership discount applied to a base amount, and
- the complexity multiplier table that scales a base fee per challenge tier.

Functions are stateless: input data -> output result, no side effects
beyond optional warning logs for out-of-range master data.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional, Union

from marketplace_console.logger import StructuredLogger
from marketplace_console.models.complexity_level import ComplexityLevel
from marketplace_console.models.enums import FeeType, MembershipStatus
from marketplace_console.models.service_models import ComplexityFeeRow, DiscountedAmount
from marketplace_console.utils.math_utils import (
    ONE_HUNDRED,
    ZERO,
    Number,
    clamp_percentage,
    quantize_money,
    to_decimal,
)

__all__ = [
    "apply_membership_discount",
    "build_complexity_table",
    "is_active_member",
    "quote_discount",
]

StatusLike = Union[MembershipStatus, str, None]


def is_active_member(status: StatusLike) -> bool:
    """``True`` for an active membership, including legacy ``member_paid``."""
    if status is None:
        return False
    try:
        return MembershipStatus(status) == MembershipStatus.ACTIVE
    except ValueError:
        return False


def _effective_discount(
    discount_percentage: Optional[Number],
    logger: Optional[StructuredLogger],
) -> Decimal:
    raw = to_decimal(discount_percentage, "discount_percentage")
    clamped = clamp_percentage(raw)
    if clamped != raw and logger is not None:
        logger.warning(
            "Membership discount %s%% outside [0, 100]; clamped to %s%%",
            raw, clamped,
        )
    return clamped


def apply_membership_discount(
    original: Optional[Number],
    discount_percentage: Optional[Number],
    membership_status: StatusLike,
    logger: Optional[StructuredLogger] = None,
) -> Decimal:
    """Return *original* reduced by the member discount.

    Non-members, and members with no discount, pay *original* exactly.
    A discounted amount is rounded to cents but never rounds up past
    *original*; the discount is clamped into [0, 100] so the result
    always lies between zero and *original*.
    """
    amount = to_decimal(original, "original")
    if not is_active_member(membership_status):
        return amount

    discount = _effective_discount(discount_percentage, logger)
    if discount == ZERO:
        return amount
    return min(quantize_money(amount * (ONE_HUNDRED - discount) / ONE_HUNDRED), amount)


def quote_discount(
    original: Optional[Number],
    discount_percentage: Optional[Number],
    membership_status: StatusLike,
    logger: Optional[StructuredLogger] = None,
) -> DiscountedAmount:
    """Like :func:`apply_membership_discount`, keeping the original for display."""
    active = is_active_member(membership_status)
    discount = _effective_discount(discount_percentage, logger) if active else ZERO
    final = apply_membership_discount(original, discount, membership_status)
    return DiscountedAmount(
        original=to_decimal(original, "original"),
        final=final,
        discount_percentage=discount,
        discount_applied=active and discount > ZERO,
    )


def build_complexity_table(
    levels: Iterable[ComplexityLevel],
    base_fee: Optional[Number],
    fee_type: FeeType,
    logger: Optional[StructuredLogger] = None,
) -> list[ComplexityFeeRow]:
    """Scale *base_fee* by each active level's multiplier for *fee_type*.

    Rows come back in ascending ``level_order`` whatever the input order.
    An empty level list or a zero/missing base fee yields no rows.
    """
    base = to_decimal(base_fee, "base_fee")
    if base == ZERO:
        return []

    rows: list[ComplexityFeeRow] = []
    for level in sorted(
        (lvl for lvl in levels if lvl.is_active),
        key=lambda lvl: lvl.level_order,
    ):
        multiplier = level.multiplier_for(fee_type)
        if multiplier < ZERO:
            if logger is not None:
                logger.warning(
                    "Negative %s multiplier %s on complexity level %s; using 0",
                    fee_type, multiplier, level.name,
                )
            multiplier = ZERO
        rows.append(
            ComplexityFeeRow(
                level_name=level.name,
                level_order=level.level_order,
                multiplier=multiplier,
                final_fee=quantize_money(base * multiplier),
            )
        )
    return rows
