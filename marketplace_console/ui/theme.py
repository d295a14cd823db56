"""UI Theme Constants for the Marketplace Pricing Console.

Colours, fonts and sizes shared by the header, the pricing dashboard and
the fee breakdown cards.  Slate header over a light content area; teal
marks the selected card and the headline fee.

Constants only, no logic.
"""

from __future__ import annotations

from typing import Final

# ---------------------------------------------------------------------------
# Colour palette
# ---------------------------------------------------------------------------

HEADER_BG: Final[str] = "#1f2a37"
HEADER_TEXT: Final[str] = "#e5e7eb"

CONTENT_BG: Final[str] = "#f3f4f6"
CONTENT_CARD_BG: Final[str] = "#ffffff"
CARD_SELECTED_BG: Final[str] = "#e6f6f4"

ACCENT_PRIMARY: Final[str] = "#0f766e"
ACCENT_HOVER: Final[str] = "#115e59"
TEXT_PRIMARY: Final[str] = "#111827"
TEXT_SECONDARY: Final[str] = "#6b7280"

# Connectivity indicator in the header
STATUS_ONLINE: Final[str] = "#16a34a"
STATUS_OFFLINE: Final[str] = "#dc2626"

# Fee display
DISCOUNT_TEXT: Final[str] = "#16a34a"
STRUCK_TEXT: Final[str] = "#9ca3af"
PLACEHOLDER_TEXT: Final[str] = "#6b7280"
BADGE_BG: Final[str] = "#fef3c7"
BADGE_TEXT: Final[str] = "#92400e"

# Solution fee input and status line
INPUT_BG: Final[str] = "#ffffff"
INPUT_BORDER: Final[str] = "#d1d5db"
ERROR_TEXT: Final[str] = "#b91c1c"
SUCCESS_TEXT: Final[str] = "#15803d"

# ---------------------------------------------------------------------------
# Fonts
# ---------------------------------------------------------------------------

FONT_FAMILY: Final[str] = "Segoe UI"
FONT_BRAND: Final[tuple[str, int, str]] = (FONT_FAMILY, 20, "bold")
FONT_HEADING: Final[tuple[str, int, str]] = (FONT_FAMILY, 18, "bold")
FONT_CARD_TITLE: Final[tuple[str, int, str]] = (FONT_FAMILY, 15, "bold")
FONT_PRICE: Final[tuple[str, int, str]] = (FONT_FAMILY, 18, "bold")
FONT_BODY: Final[tuple[str, int]] = (FONT_FAMILY, 13)
FONT_LABEL: Final[tuple[str, int, str]] = (FONT_FAMILY, 11, "bold")
FONT_SMALL: Final[tuple[str, int]] = (FONT_FAMILY, 11)
FONT_CAPTION: Final[tuple[str, int]] = (FONT_FAMILY, 10)
FONT_BUTTON: Final[tuple[str, int, str]] = (FONT_FAMILY, 13, "bold")

# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------

HEADER_HEIGHT: Final[int] = 52
CARD_WIDTH: Final[int] = 340
MAIN_WINDOW_WIDTH: Final[int] = 1180
MAIN_WINDOW_HEIGHT: Final[int] = 760
MIN_WINDOW_WIDTH: Final[int] = 820
MIN_WINDOW_HEIGHT: Final[int] = 600
CORNER_RADIUS: Final[int] = 10
PADDING_SM: Final[int] = 8
PADDING_MD: Final[int] = 14
PADDING_LG: Final[int] = 22
