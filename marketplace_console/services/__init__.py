"""
Business Logic Services Package.

Services depend on the Repository layer for data access and on the pure
pricing modules (``fee_rules``, ``pricing_engine``, ``billing_plans``)
for arithmetic.

The ``create_services()`` factory wires every repository and service together,
returning a typed dict that the application layer (views) can consume
without knowing the internal dependency graph.
"""

from __future__ import annotations

from typing import TypedDict

from marketplace_console.config import AppConfig
from marketplace_console.database import DatabaseManager
from marketplace_console.logger import get_logger
from marketplace_console.repositories.base_repository import BaseRepository
from marketplace_console.repositories.complexity_level_repository import ComplexityLevelRepository
from marketplace_console.repositories.country_repository import CountryRepository
from marketplace_console.repositories.engagement_model_repository import EngagementModelRepository
from marketplace_console.repositories.fee_formula_repository import FeeFormulaRepository
from marketplace_console.repositories.pricing_plan_repository import PricingPlanRepository
from marketplace_console.services.master_data import MasterDataService
from marketplace_console.services.pricing_service import PricingService
from marketplace_console.services.session_state import SessionStateService
from marketplace_console.storage.local_store import LocalStore


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    pricing_service: PricingService
    session_state_service: SessionStateService
    master_data_service: MasterDataService


def create_services(
    db: DatabaseManager,
    local_store: LocalStore,
    config: AppConfig,
) -> ServiceContainer:
    """
    Wire all repositories and services together.

    This is the single composition root for the service layer.  The
    application entry-point calls this once at startup and passes the
    returned dict to views as needed.

    Args:
        db: Initialised DatabaseManager (Supabase optional, SQLite ready).
        local_store: LocalStore with the default schemas registered.
        config: Application configuration.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = get_logger("services")

    # ------------------------------------------------------------------
    # 1. Repositories (data-access layer)
    # ------------------------------------------------------------------
    engagement_model_repo = EngagementModelRepository(
        db=db, local_store=local_store, logger=logger, table=config.table_name("engagement_models"),
    )
    fee_formula_repo = FeeFormulaRepository(
        db=db, local_store=local_store, logger=logger, table=config.table_name("platform_fee_formulas"),
    )
    complexity_level_repo = ComplexityLevelRepository(
        db=db, local_store=local_store, logger=logger, table=config.table_name("complexity_levels"),
    )
    pricing_plan_repo = PricingPlanRepository(
        db=db, local_store=local_store, logger=logger, table=config.table_name("pricing_plans"),
    )
    country_repo = CountryRepository(
        db=db, local_store=local_store, logger=logger, table=config.table_name("countries"),
    )

    editable: dict[str, BaseRepository] = {
        "engagement_models": engagement_model_repo,
        "platform_fee_formulas": fee_formula_repo,
        "complexity_levels": complexity_level_repo,
        "pricing_plans": pricing_plan_repo,
    }

    # ------------------------------------------------------------------
    # 2. Services
    # ------------------------------------------------------------------
    pricing_service = PricingService(
        engagement_model_repo=engagement_model_repo,
        fee_formula_repo=fee_formula_repo,
        complexity_level_repo=complexity_level_repo,
        pricing_plan_repo=pricing_plan_repo,
        country_repo=country_repo,
        config=config,
        logger=logger,
    )
    session_state_service = SessionStateService(local_store=local_store, logger=logger)
    master_data_service = MasterDataService(repositories=editable, db=db, logger=logger)

    return ServiceContainer(
        pricing_service=pricing_service,
        session_state_service=session_state_service,
        master_data_service=master_data_service,
    )
