"""Conversion of repository payloads into values the Supabase client can send."""

from __future__ import annotations

import math
from datetime import date
from decimal import Decimal
from enum import Enum
from functools import singledispatch
from typing import Any

from pydantic import BaseModel

__all__ = ["convert_to_json_safe"]


@singledispatch
def convert_to_json_safe(data: Any) -> Any:
    """Recursively turn *data* into plain JSON types.

    The Supabase client serialises with the stdlib ``json`` module, so
    ``Decimal`` money, enum members and dates must be unwrapped first.
    Anything without a registered conversion (``UUID``, ``Path``) is
    sent as its string form.
    """
    return str(data)


@convert_to_json_safe.register(type(None))
@convert_to_json_safe.register(str)
@convert_to_json_safe.register(int)
def _(data):
    # str and int enum members resolve here through their base class.
    return data.value if isinstance(data, Enum) else data


@convert_to_json_safe.register(Enum)
def _(data: Enum):
    return convert_to_json_safe(data.value)


@convert_to_json_safe.register(float)
def _(data: float):
    return None if math.isnan(data) or math.isinf(data) else data


@convert_to_json_safe.register(Decimal)
def _(data: Decimal):
    return None if not data.is_finite() else float(data)


# Covers datetime as well.
@convert_to_json_safe.register(date)
def _(data: date):
    return data.isoformat()


@convert_to_json_safe.register(dict)
def _(data: dict):
    return {key: convert_to_json_safe(value) for key, value in data.items()}


@convert_to_json_safe.register(list)
@convert_to_json_safe.register(tuple)
def _(data):
    return [convert_to_json_safe(item) for item in data]


@convert_to_json_safe.register(BaseModel)
def _(data: BaseModel):
    return convert_to_json_safe(data.model_dump())
