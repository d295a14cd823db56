"""
Repository Layer.

Each repository owns one remote table and inherits the remote-first,
cache-fallback read contract from ``BaseRepository``.
"""

from marketplace_console.repositories.base_repository import BaseRepository
from marketplace_console.repositories.complexity_level_repository import ComplexityLevelRepository
from marketplace_console.repositories.country_repository import CountryRepository
from marketplace_console.repositories.engagement_model_repository import EngagementModelRepository
from marketplace_console.repositories.fee_formula_repository import FeeFormulaRepository
from marketplace_console.repositories.pricing_plan_repository import PricingPlanRepository

__all__ = [
    "BaseRepository",
    "ComplexityLevelRepository",
    "CountryRepository",
    "EngagementModelRepository",
    "FeeFormulaRepository",
    "PricingPlanRepository",
]
