"""Shared utility functions and models for the Marketplace Pricing Console.

This package provides convenience re-exports so that consumers can import
directly from ``marketplace_console.utils`` (e.g. ``from
marketplace_console.utils import format_amount``) while full absolute
imports remain supported.
"""

from marketplace_console.utils.audit import AuditEvent, log_audit_event
from marketplace_console.utils.currency import format_amount, parse_amount
from marketplace_console.utils.general import convert_to_json_safe
from marketplace_console.utils.math_utils import quantize_money, to_decimal
from marketplace_console.utils.string_helpers import normalize_keys, to_snake_case

__all__ = [
    "AuditEvent",
    "convert_to_json_safe",
    "format_amount",
    "log_audit_event",
    "normalize_keys",
    "parse_amount",
    "quantize_money",
    "to_decimal",
    "to_snake_case",
]
