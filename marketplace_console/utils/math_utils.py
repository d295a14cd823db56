"""
Money Math Utilities.

Decimal helpers shared by the fee rules, the pricing engine and the
billing plan selector.  No floats cross these functions: every input is
coerced to ``Decimal`` through ``str`` so ``0.1`` stays ``0.1``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext, localcontext
from typing import Optional, Union

__all__: list[str] = [
    "ONE_HUNDRED",
    "ZERO",
    "clamp_percentage",
    "money_context",
    "percentage_of",
    "quantize_money",
    "to_decimal",
]

Number = Union[Decimal, int, float, str]

ZERO: Decimal = Decimal("0")
ONE_HUNDRED: Decimal = Decimal("100")
_CENT: Decimal = Decimal("0.01")


def _validate_finite(value: Decimal, name: str) -> None:
    """Raise ``ValueError`` if *value* is NaN or +/-Inf."""
    if value.is_nan() or value.is_infinite():
        raise ValueError(f"{name} must be a finite number, got {value!r}.")


def to_decimal(value: Optional[Number], name: str = "value") -> Decimal:
    """Coerce *value* to ``Decimal``; ``None`` and ``""`` become zero.

    Raises:
        ValueError: If *value* is not numeric or is NaN/Inf.
    """
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"{name} must be numeric, got {value!r}.") from exc
    _validate_finite(result, name)
    return result


def money_context(value: Decimal):
    """Decimal context wide enough to hold *value* to the cent.

    The default 28-digit precision makes ``quantize`` fail for amounts
    beyond ~1E+26.
    """
    ctx = getcontext().copy()
    ctx.prec = max(ctx.prec, value.adjusted() + 3)
    return localcontext(ctx)


def quantize_money(value: Number) -> Decimal:
    """Round to two decimal places using half-up rounding."""
    amount = to_decimal(value)
    with money_context(amount):
        return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


def clamp_percentage(value: Optional[Number]) -> Decimal:
    """Clamp a percentage into the closed range [0, 100]."""
    pct = to_decimal(value, "percentage")
    return max(ZERO, min(ONE_HUNDRED, pct))


def percentage_of(amount: Number, percentage: Optional[Number]) -> Decimal:
    """Return ``amount * percentage / 100`` without rounding."""
    return to_decimal(amount, "amount") * to_decimal(percentage, "percentage") / ONE_HUNDRED
