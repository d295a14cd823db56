"""Application Host Shell.

The top-level ``CTk`` window: a header with the organization name and
connectivity indicator, and the engagement pricing dashboard as content.

All dependencies are injected via the constructor.  The shell contains
no business logic.
"""

from __future__ import annotations

from typing import Optional

import customtkinter as ctk

from marketplace_console import __version__ as _APP_VERSION
from marketplace_console.database import DatabaseManager
from marketplace_console.logger import StructuredLogger
from marketplace_console.models.storage_models import SeekingOrgSession
from marketplace_console.services import ServiceContainer
from marketplace_console.ui.theme import (
    CONTENT_BG,
    FONT_BRAND,
    FONT_SMALL,
    HEADER_BG,
    HEADER_HEIGHT,
    HEADER_TEXT,
    MAIN_WINDOW_HEIGHT,
    MAIN_WINDOW_WIDTH,
    MIN_WINDOW_HEIGHT,
    MIN_WINDOW_WIDTH,
    PADDING_LG,
    STATUS_OFFLINE,
    STATUS_ONLINE,
)
from marketplace_console.ui.views.pricing_view import EngagementPricingView


class AppShell(ctk.CTk):
    """Host Shell: the main application window.

    Parameters
    ----------
    db:
        Database manager (used for the online indicator).
    services:
        Fully-wired service container.
    session:
        The current seeking-organization session.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        db: DatabaseManager,
        services: ServiceContainer,
        session: SeekingOrgSession,
        logger: StructuredLogger,
    ) -> None:
        super().__init__()

        self._db = db
        self._services = services
        self._session = session
        self._logger = logger
        self._pricing_view: Optional[EngagementPricingView] = None

        self.title(f"Marketplace Pricing Console {_APP_VERSION}")
        ctk.set_appearance_mode("light")
        ctk.set_default_color_theme("blue")
        self.geometry(f"{MAIN_WINDOW_WIDTH}x{MAIN_WINDOW_HEIGHT}")
        self.minsize(MIN_WINDOW_WIDTH, MIN_WINDOW_HEIGHT)
        self.configure(fg_color=CONTENT_BG)

        self.protocol("WM_DELETE_WINDOW", self._on_close)

        self._build_header()
        self._show_pricing()

    def _build_header(self) -> None:
        header = ctk.CTkFrame(self, height=HEADER_HEIGHT, fg_color=HEADER_BG, corner_radius=0)
        header.pack(fill="x")
        header.pack_propagate(False)

        ctk.CTkLabel(
            header,
            text=self._session.organization_name or "Solution Marketplace",
            font=FONT_BRAND,
            text_color=HEADER_TEXT,
        ).pack(side="left", padx=PADDING_LG)

        online = self._db.is_online
        ctk.CTkLabel(
            header,
            text="\u25CF Online" if online else "\u25CF Offline (cached data)",
            font=FONT_SMALL,
            text_color=STATUS_ONLINE if online else STATUS_OFFLINE,
        ).pack(side="right", padx=PADDING_LG)

    def _show_pricing(self) -> None:
        self._pricing_view = EngagementPricingView(
            parent=self,
            pricing_service=self._services["pricing_service"],
            session_state=self._services["session_state_service"],
            session=self._session,
            logger=self._logger,
        )
        self._pricing_view.pack(fill="both", expand=True)

    def _on_close(self) -> None:
        self._logger.info("Closing Marketplace Pricing Console.")
        self.destroy()
