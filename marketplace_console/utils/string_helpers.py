"""
Key normalization for rows and stored blobs.

Remote rows use snake_case columns, but older localStorage blobs were
written by a JavaScript client in camelCase (``quarterlyFee``,
``discountPercentage``, ``engagementModel``).  Repositories and the local
store run everything through :func:`normalize_keys` before validation, so
models only ever see snake_case.
"""

from __future__ import annotations

import re

from pydantic import JsonValue

__all__ = [
    "JsonValue",
    "normalize_keys",
    "to_snake_case",
]

# Zero-width split points: "feeUSD" | "APIKey" -> "API_Key"
_WORD_BOUNDARY = re.compile(r"(?<=[a-z\d])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_REPEATED_UNDERSCORES = re.compile(r"__+")


def to_snake_case(name: str) -> str:
    """Return *name* in snake_case.

    ``halfYearlyFee`` -> ``half_yearly_fee``, ``USDAmount`` ->
    ``usd_amount``; names already in snake_case pass through unchanged.
    """
    split = _WORD_BOUNDARY.sub("_", name)
    return _REPEATED_UNDERSCORES.sub("_", split).lower()


def normalize_keys(data: JsonValue) -> JsonValue:
    """Snake-case every dict key in *data*, descending into lists."""
    if isinstance(data, list):
        return [normalize_keys(item) for item in data]
    if not isinstance(data, dict):
        return data
    return {to_snake_case(key): normalize_keys(value) for key, value in data.items()}
