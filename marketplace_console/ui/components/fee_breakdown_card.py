"""
Fee Breakdown Card Component.

One dashboard card per engagement model (Market Place shows one per
subtype).  Renders:

- Model name and description
- Headline fee: ``"15% of Solution Fee"`` for fee-based models,
  otherwise the management fee in currency
- Management fee (and consulting fee unless Market Place General),
  with the original struck through when a member discount applies
- The complexity multiplier table for each fee
- Advance payment percentage

Cards without pricing show the placeholder text instead.  Selected state
uses a teal left accent bar.

**Thin UI Rule**: Zero business logic; only display and callbacks.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Callable

import customtkinter as ctk

from marketplace_console.models.service_models import (
    EngagementModelPricing,
    FeeBreakdown,
    FeeSection,
)
from marketplace_console.services.pricing_engine import format_headline_fee
from marketplace_console.ui.theme import (
    ACCENT_PRIMARY,
    BADGE_BG,
    BADGE_TEXT,
    CARD_SELECTED_BG,
    CARD_WIDTH,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    DISCOUNT_TEXT,
    FONT_BODY,
    FONT_CAPTION,
    FONT_CARD_TITLE,
    FONT_FAMILY,
    FONT_LABEL,
    FONT_PRICE,
    FONT_SMALL,
    PADDING_MD,
    PADDING_SM,
    PLACEHOLDER_TEXT,
    STRUCK_TEXT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from marketplace_console.utils.currency import (
    format_amount,
    format_percentage,
    format_plain_number,
)


class FeeBreakdownCard(ctk.CTkFrame):
    """Card showing one engagement model's fee breakdown.

    Parameters
    ----------
    parent:
        Scrollable container frame.
    pricing:
        The card data built by the pricing service.
    on_select:
        Callback invoked with the card when it is clicked.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        pricing: EngagementModelPricing,
        on_select: Callable[[EngagementModelPricing], None],
    ) -> None:
        super().__init__(
            parent,
            width=CARD_WIDTH,
            fg_color=CONTENT_CARD_BG,
            corner_radius=CORNER_RADIUS,
            cursor="hand2",
        )
        self._pricing = pricing
        self._on_select = on_select
        self._is_selected: bool = False
        self._struck_font = ctk.CTkFont(family=FONT_FAMILY, size=11, overstrike=True)

        self._build_ui()
        self._bind_click_recursive(self)

    # ------------------------------------------------------------------
    # Widget construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        self._accent_bar = ctk.CTkFrame(
            self, width=4, fg_color="transparent", corner_radius=0,
        )
        self._accent_bar.pack(side="left", fill="y")
        self._accent_bar.pack_propagate(False)

        inner = ctk.CTkFrame(self, fg_color="transparent")
        inner.pack(fill="both", expand=True, padx=(PADDING_SM, PADDING_MD), pady=PADDING_SM)

        ctk.CTkLabel(
            inner,
            text=self._pricing.display_name,
            font=FONT_CARD_TITLE,
            text_color=TEXT_PRIMARY,
            anchor="w",
        ).pack(fill="x")

        if self._pricing.description:
            ctk.CTkLabel(
                inner,
                text=self._pricing.description,
                font=FONT_SMALL,
                text_color=TEXT_SECONDARY,
                anchor="w",
                justify="left",
                wraplength=CARD_WIDTH - 2 * PADDING_MD,
            ).pack(fill="x", pady=(2, PADDING_SM))

        breakdown = self._pricing.breakdown
        if breakdown is None:
            ctk.CTkLabel(
                inner,
                text=self._pricing.placeholder or "",
                font=FONT_BODY,
                text_color=PLACEHOLDER_TEXT,
                anchor="w",
            ).pack(fill="x", pady=PADDING_SM)
            return

        self._build_breakdown(inner, breakdown)

    def _build_breakdown(self, inner: ctk.CTkFrame, breakdown: FeeBreakdown) -> None:
        ctk.CTkLabel(
            inner,
            text=format_headline_fee(breakdown),
            font=FONT_PRICE,
            text_color=ACCENT_PRIMARY,
            anchor="w",
        ).pack(fill="x", pady=(0, PADDING_SM))

        if breakdown.management_fee.discounted.discount_applied:
            ctk.CTkLabel(
                inner,
                text=(
                    f"Member discount "
                    f"{format_percentage(breakdown.membership_discount_percentage)}"
                ),
                font=FONT_CAPTION,
                text_color=BADGE_TEXT,
                fg_color=BADGE_BG,
                corner_radius=4,
            ).pack(anchor="w", pady=(0, PADDING_SM))

        self._build_section(inner, "Management Fee", breakdown.management_fee, breakdown.currency)
        if breakdown.consulting_fee is not None:
            self._build_section(
                inner, "Consulting Fee", breakdown.consulting_fee, breakdown.currency,
            )

        ctk.CTkLabel(
            inner,
            text=(
                f"Advance payment: "
                f"{format_percentage(breakdown.advance_payment_percentage)} of total"
            ),
            font=FONT_SMALL,
            text_color=TEXT_SECONDARY,
            anchor="w",
        ).pack(fill="x", pady=(PADDING_SM, 0))

    def _build_section(
        self,
        inner: ctk.CTkFrame,
        title: str,
        section: FeeSection,
        currency: str,
    ) -> None:
        row = ctk.CTkFrame(inner, fg_color="transparent")
        row.pack(fill="x", pady=(PADDING_SM, 2))

        ctk.CTkLabel(
            row, text=title, font=FONT_LABEL, text_color=TEXT_PRIMARY,
        ).pack(side="left")

        discounted = section.discounted
        ctk.CTkLabel(
            row,
            text=format_amount(discounted.final, currency),
            font=FONT_LABEL,
            text_color=DISCOUNT_TEXT if discounted.discount_applied else TEXT_PRIMARY,
        ).pack(side="right")
        if discounted.discount_applied:
            ctk.CTkLabel(
                row,
                text=format_amount(discounted.original, currency),
                font=self._struck_font,
                text_color=STRUCK_TEXT,
            ).pack(side="right", padx=(0, 6))

        for fee_row in section.complexity_rows:
            line = ctk.CTkFrame(inner, fg_color="transparent")
            line.pack(fill="x")
            ctk.CTkLabel(
                line,
                text=f"{fee_row.level_name} (\u00d7{_format_multiplier(fee_row.multiplier)})",
                font=FONT_CAPTION,
                text_color=TEXT_SECONDARY,
            ).pack(side="left", padx=(PADDING_SM, 0))
            ctk.CTkLabel(
                line,
                text=format_amount(fee_row.final_fee, currency),
                font=FONT_CAPTION,
                text_color=TEXT_SECONDARY,
            ).pack(side="right")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def set_selected(self, selected: bool) -> None:
        """Toggle the visual selected state."""
        self._is_selected = selected
        if selected:
            self._accent_bar.configure(fg_color=ACCENT_PRIMARY)
            self.configure(fg_color=CARD_SELECTED_BG)
        else:
            self._accent_bar.configure(fg_color="transparent")
            self.configure(fg_color=CONTENT_CARD_BG)

    @property
    def pricing(self) -> EngagementModelPricing:
        return self._pricing

    # ------------------------------------------------------------------
    # Click handling
    # ------------------------------------------------------------------

    def _bind_click_recursive(self, widget: ctk.CTkBaseClass) -> None:
        """Bind left-click to every child widget so the whole card is clickable."""
        widget.bind("<Button-1>", self._on_click)
        for child in widget.winfo_children():
            self._bind_click_recursive(child)

    def _on_click(self, _event: object) -> None:
        self._on_select(self._pricing)


def _format_multiplier(value: Decimal) -> str:
    """``1.50`` -> ``"1.5"``; ``2`` -> ``"2"``."""
    return format_plain_number(value)
