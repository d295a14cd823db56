"""Engagement Pricing View.

The organization's pricing dashboard: one ``FeeBreakdownCard`` per
engagement model, a billing cadence chooser, a solution-fee preview and
the Submit / Modify controls.  The ``SelectionCard`` state machine
decides which controls are enabled.

Master data, plan quotes and fee previews load on worker threads;
results are marshalled back to the Tk thread with ``self.after(0, ...)``.
Service failures are shown in the status line at the bottom of the view.

**Thin UI Rule**: Zero business logic; pricing comes from
``PricingService`` and persistence from ``SessionStateService``.
"""

from __future__ import annotations

import threading
from decimal import Decimal
from typing import Optional

import customtkinter as ctk

from marketplace_console.exceptions import InvalidSelectionTransition
from marketplace_console.logger import StructuredLogger
from marketplace_console.models.enums import (
    BillingCadence,
    MembershipStatus,
    SelectionState,
)
from marketplace_console.models.service_models import (
    EngagementModelPricing,
    FeeBreakdown,
    PlanQuote,
    ServiceResult,
    SolutionFeeQuote,
)
from marketplace_console.models.storage_models import SeekingOrgSession
from marketplace_console.services.billing_plans import SelectionCard
from marketplace_console.services.pricing_engine import (
    NO_MODELS_PLACEHOLDER,
    NO_PRICING_PLACEHOLDER,
)
from marketplace_console.services.pricing_service import PricingService
from marketplace_console.services.session_state import SessionStateService
from marketplace_console.ui.components.fee_breakdown_card import FeeBreakdownCard
from marketplace_console.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_BG,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BUTTON,
    FONT_CAPTION,
    FONT_HEADING,
    FONT_LABEL,
    FONT_SMALL,
    INPUT_BG,
    INPUT_BORDER,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    PLACEHOLDER_TEXT,
    SUCCESS_TEXT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from marketplace_console.utils.currency import format_amount, parse_amount

_CADENCE_LABELS: dict[str, BillingCadence] = {
    "Quarterly": BillingCadence.QUARTERLY,
    "Half-Yearly": BillingCadence.HALF_YEARLY,
    "Annual": BillingCadence.ANNUAL,
}
_CARDS_PER_ROW: int = 3


class EngagementPricingView(ctk.CTkFrame):
    """Engagement model pricing dashboard.

    Parameters
    ----------
    parent:
        Content container provided by the Host Shell.
    pricing_service:
        Builds cards, fee previews and plan quotes.
    session_state:
        Persists the membership status and the submitted selection.
    session:
        The current seeking-organization session.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        pricing_service: PricingService,
        session_state: SessionStateService,
        session: SeekingOrgSession,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._pricing = pricing_service
        self._state = session_state
        self._session = session
        self._logger = logger

        self._membership: MembershipStatus = session_state.get_membership_status(session.user_id)
        saved = session_state.get_selection(session.user_id)
        self._selection = SelectionCard.from_selection(saved) if saved else SelectionCard()

        self._country_id: Optional[str] = None
        self._pricing_cards: list[EngagementModelPricing] = []
        self._card_widgets: dict[str, FeeBreakdownCard] = {}

        self._build_ui()
        self._refresh_controls()
        self.reload()

    # ------------------------------------------------------------------
    # Widget creation
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        header = ctk.CTkFrame(self, fg_color="transparent")
        header.pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_SM))

        ctk.CTkLabel(
            header, text="Engagement Models", font=FONT_HEADING, text_color=TEXT_PRIMARY,
        ).pack(side="left")

        self._btn_reload = ctk.CTkButton(
            header,
            text="Refresh",
            width=90,
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            command=self.reload,
        )
        self._btn_reload.pack(side="right")

        self._membership_label = ctk.CTkLabel(
            header,
            text=self._membership_text(),
            font=FONT_SMALL,
            text_color=TEXT_SECONDARY,
        )
        self._membership_label.pack(side="right", padx=PADDING_MD)

        self._cards_frame = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._cards_frame.pack(fill="both", expand=True, padx=PADDING_LG)
        for column in range(_CARDS_PER_ROW):
            self._cards_frame.grid_columnconfigure(column, weight=1, uniform="cards")

        self._build_selection_panel()

        self._status_label = ctk.CTkLabel(
            self, text="", font=FONT_SMALL, text_color=TEXT_SECONDARY, anchor="w",
        )
        self._status_label.pack(fill="x", padx=PADDING_LG, pady=(0, PADDING_SM))

    def _build_selection_panel(self) -> None:
        panel = ctk.CTkFrame(self, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        panel.pack(fill="x", padx=PADDING_LG, pady=PADDING_SM)

        # --- Row 1: selected model + cadence + actions ---
        row1 = ctk.CTkFrame(panel, fg_color="transparent")
        row1.pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, PADDING_SM))

        self._selected_label = ctk.CTkLabel(
            row1, text="", font=FONT_LABEL, text_color=TEXT_PRIMARY, anchor="w",
        )
        self._selected_label.pack(side="left")

        self._btn_modify = ctk.CTkButton(
            row1, text="Modify Selection", width=140, font=FONT_BUTTON,
            fg_color="transparent", text_color=ACCENT_PRIMARY,
            border_color=ACCENT_PRIMARY, border_width=1,
            command=self._on_modify,
        )
        self._btn_modify.pack(side="right")

        self._btn_submit = ctk.CTkButton(
            row1, text="Submit", width=110, font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY, hover_color=ACCENT_HOVER,
            command=self._on_submit,
        )
        self._btn_submit.pack(side="right", padx=PADDING_SM)

        self._cadence = ctk.CTkSegmentedButton(
            row1, values=list(_CADENCE_LABELS), command=self._on_cadence,
        )
        self._cadence.pack(side="right", padx=PADDING_MD)

        self._plan_label = ctk.CTkLabel(
            panel, text="", font=FONT_BODY, text_color=TEXT_SECONDARY, anchor="w",
        )
        self._plan_label.pack(fill="x", padx=PADDING_MD)

        # --- Row 2: solution fee preview ---
        row2 = ctk.CTkFrame(panel, fg_color="transparent")
        row2.pack(fill="x", padx=PADDING_MD, pady=PADDING_SM)

        ctk.CTkLabel(
            row2, text="Solution fee", font=FONT_CAPTION, text_color=TEXT_SECONDARY,
        ).pack(side="left", padx=(0, PADDING_SM))

        self._solution_entry = ctk.CTkEntry(
            row2, width=140, fg_color=INPUT_BG, border_color=INPUT_BORDER,
            placeholder_text="10,000.00",
        )
        self._solution_entry.pack(side="left")

        self._btn_preview = ctk.CTkButton(
            row2, text="Preview Fees", width=120, font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY, hover_color=ACCENT_HOVER,
            command=self._on_preview,
        )
        self._btn_preview.pack(side="left", padx=PADDING_SM)

        self._preview_frame = ctk.CTkFrame(panel, fg_color="transparent")
        self._preview_frame.pack(fill="x", padx=PADDING_MD, pady=(0, PADDING_MD))

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def reload(self) -> None:
        """Reload pricing cards on a worker thread."""
        self._btn_reload.configure(state="disabled")
        self._show_status("Loading pricing...")
        threading.Thread(target=self._load_worker, daemon=True, name="pricing-load").start()

    def _load_worker(self) -> None:
        country_id = self._pricing.resolve_country_id(self._session.country)
        result = self._pricing.load_engagement_pricing(self._membership, country_id)
        self.after(0, lambda: self._on_loaded(result, country_id))

    def _on_loaded(
        self,
        result: ServiceResult[list[EngagementModelPricing]],
        country_id: Optional[str],
    ) -> None:
        if not self.winfo_exists():
            return
        self._btn_reload.configure(state="normal")
        self._country_id = country_id

        if not result.success:
            self._show_status(result.error or "Could not load pricing.", error=True)
            return

        self._pricing_cards = result.data or []
        self._render_cards()
        self._refresh_controls()
        self._show_status("")

    def _render_cards(self) -> None:
        for widget in self._cards_frame.winfo_children():
            widget.destroy()
        self._card_widgets.clear()

        if not self._pricing_cards:
            ctk.CTkLabel(
                self._cards_frame,
                text=NO_MODELS_PLACEHOLDER,
                font=FONT_BODY,
                text_color=PLACEHOLDER_TEXT,
            ).grid(row=0, column=0, columnspan=_CARDS_PER_ROW, pady=PADDING_LG)
            return

        for index, pricing in enumerate(self._pricing_cards):
            widget = FeeBreakdownCard(self._cards_frame, pricing, on_select=self._on_card_selected)
            widget.grid(
                row=index // _CARDS_PER_ROW,
                column=index % _CARDS_PER_ROW,
                padx=PADDING_SM,
                pady=PADDING_SM,
                sticky="nsew",
            )
            self._card_widgets[pricing.card_id] = widget

    # ------------------------------------------------------------------
    # Selection workflow
    # ------------------------------------------------------------------

    def _on_card_selected(self, pricing: EngagementModelPricing) -> None:
        try:
            self._selection.select_model(pricing.engagement_model_name, pricing.subtype)
        except InvalidSelectionTransition:
            self._show_status("Your selection is submitted. Choose Modify Selection first.", error=True)
            return
        self._clear_preview()
        self._refresh_controls()

    def _on_cadence(self, label: str) -> None:
        model = self._selection.engagement_model
        if model is None:
            return
        cadence = _CADENCE_LABELS[label]
        self._cadence.configure(state="disabled")
        self._show_status("Loading plan...")
        threading.Thread(
            target=self._quote_worker, args=(model, cadence), daemon=True, name="plan-quote",
        ).start()

    def _quote_worker(self, model: str, cadence: BillingCadence) -> None:
        result = self._pricing.quote_billing_plan(
            model,
            cadence,
            self._membership,
            country=self._session.country,
            organization_type=self._session.organization_type,
        )
        self.after(0, lambda: self._on_quoted(model, cadence, result))

    def _on_quoted(
        self,
        model: str,
        cadence: BillingCadence,
        result: ServiceResult[PlanQuote],
    ) -> None:
        if not self.winfo_exists():
            return
        # Another model was picked while the quote was loading.
        if self._selection.engagement_model != model:
            self._refresh_controls()
            return
        try:
            self._selection.select_plan(cadence, result.data if result.success else None)
        except InvalidSelectionTransition as exc:
            self._show_status(str(exc), error=True)
            self._refresh_controls()
            return
        if not result.success and result.status_code != 404:
            self._show_status(result.error or "Could not quote plan.", error=True)
        else:
            self._show_status("")
        self._refresh_controls()

    def _on_submit(self) -> None:
        try:
            saved = self._state.submit_selection(self._session.user_id, self._selection)
        except InvalidSelectionTransition as exc:
            self._show_status(str(exc), error=True)
            return
        if saved.success:
            self._show_status("Selection submitted.", success=True)
        else:
            self._show_status(saved.error or "Could not save selection.", error=True)
        self._refresh_controls()

    def _on_modify(self) -> None:
        try:
            saved = self._state.reopen_selection(self._session.user_id, self._selection)
        except InvalidSelectionTransition as exc:
            self._show_status(str(exc), error=True)
            return
        if saved.success:
            self._show_status("")
        else:
            self._show_status(saved.error or "Could not save selection.", error=True)
        self._refresh_controls()

    def _on_preview(self) -> None:
        pricing = self._selected_pricing()
        if pricing is None or pricing.breakdown is None:
            self._show_status(NO_PRICING_PLACEHOLDER, error=True)
            return
        breakdown = pricing.breakdown
        try:
            solution_fee = parse_amount(self._solution_entry.get(), breakdown.currency)
        except ValueError as exc:
            self._show_status(str(exc), error=True)
            return

        self._btn_preview.configure(state="disabled")
        threading.Thread(
            target=self._preview_worker,
            args=(breakdown, solution_fee),
            daemon=True,
            name="fee-preview",
        ).start()

    def _preview_worker(self, breakdown: FeeBreakdown, solution_fee: Decimal) -> None:
        result = self._pricing.preview_fees(breakdown, solution_fee)
        self.after(0, lambda: self._on_previewed(result, breakdown.currency))

    def _on_previewed(self, result: ServiceResult[list[SolutionFeeQuote]], currency: str) -> None:
        if not self.winfo_exists():
            return
        self._refresh_controls()
        if not result.success:
            self._show_status(result.error or NO_PRICING_PLACEHOLDER, error=True)
            return
        self._render_preview(result.data or [], currency)
        self._show_status("")

    def _render_preview(self, quotes: list[SolutionFeeQuote], currency: str) -> None:
        self._clear_preview()
        headers = ("Complexity", "Platform Fee", "Management", "Consulting", "Total", "Advance")
        for column, text in enumerate(headers):
            ctk.CTkLabel(
                self._preview_frame, text=text, font=FONT_LABEL, text_color=TEXT_PRIMARY,
            ).grid(row=0, column=column, padx=PADDING_SM, sticky="w")
        for row, quote in enumerate(quotes, start=1):
            cells = (
                quote.complexity_name or "\u2014",
                format_amount(quote.platform_usage_fee, currency),
                format_amount(quote.management_fee, currency),
                format_amount(quote.consulting_fee, currency),
                format_amount(quote.total_fee, currency),
                format_amount(quote.advance_payment, currency),
            )
            for column, text in enumerate(cells):
                ctk.CTkLabel(
                    self._preview_frame, text=text, font=FONT_SMALL, text_color=TEXT_SECONDARY,
                ).grid(row=row, column=column, padx=PADDING_SM, sticky="w")

    def _clear_preview(self) -> None:
        for widget in self._preview_frame.winfo_children():
            widget.destroy()

    # ------------------------------------------------------------------
    # Display helpers
    # ------------------------------------------------------------------

    def _selected_pricing(self) -> Optional[EngagementModelPricing]:
        for pricing in self._pricing_cards:
            if (
                pricing.engagement_model_name == self._selection.engagement_model
                and pricing.subtype == self._selection.subtype
            ):
                return pricing
        return None

    def _refresh_controls(self) -> None:
        state = self._selection.state
        selected = self._selected_pricing()
        for card_id, widget in self._card_widgets.items():
            widget.set_selected(selected is not None and card_id == selected.card_id)

        if state == SelectionState.NO_MODEL_SELECTED:
            self._selected_label.configure(text="Select an engagement model")
        else:
            name = selected.display_name if selected else self._selection.engagement_model
            suffix = "  \u2022  Submitted" if state == SelectionState.SUBMITTED else ""
            self._selected_label.configure(text=f"{name}{suffix}")

        can_choose = state in (SelectionState.MODEL_SELECTED, SelectionState.PLAN_SELECTED)
        self._cadence.configure(state="normal" if can_choose else "disabled")
        if self._selection.cadence is None:
            self._cadence.set("")
        else:
            label = next(k for k, v in _CADENCE_LABELS.items() if v == self._selection.cadence)
            self._cadence.set(label)

        self._btn_submit.configure(
            state="normal" if state == SelectionState.PLAN_SELECTED else "disabled",
        )
        self._btn_modify.configure(
            state="normal" if state == SelectionState.SUBMITTED else "disabled",
        )
        self._btn_preview.configure(
            state="normal" if selected is not None and selected.has_pricing else "disabled",
        )
        self._plan_label.configure(text=self._plan_text())

    def _plan_text(self) -> str:
        quote = self._selection.quote
        if self._selection.cadence is None:
            return ""
        if quote is None:
            return NO_PRICING_PLACEHOLDER
        amount = quote.amount
        text = f"{format_amount(amount.final, quote.currency)} {quote.cadence.value}"
        if amount.discount_applied:
            text += f"  (was {format_amount(amount.original, quote.currency)})"
        return text

    def _membership_text(self) -> str:
        if self._membership == MembershipStatus.ACTIVE:
            return "Member pricing applied"
        return "Standard pricing"

    def _show_status(self, message: str, error: bool = False, success: bool = False) -> None:
        colour = ERROR_TEXT if error else SUCCESS_TEXT if success else TEXT_SECONDARY
        self._status_label.configure(text=message, text_color=colour)
        if error:
            self._logger.warning("Pricing view: %s", message)
