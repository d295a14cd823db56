"""
Settings for the Marketplace Pricing Console.

Values come from the process environment and an optional ``.env`` file in
the working directory.  Components receive an ``AppConfig`` through their
constructors; ``get_config()`` exists for the entry point and the logger.
"""

from __future__ import annotations

import logging
import threading
from decimal import Decimal
from pathlib import Path
from typing import ClassVar, Optional

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_log = logging.getLogger("marketplace_console.config")


class AppConfig(BaseSettings):
    """Environment-driven settings.  Empty Supabase credentials mean offline."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: SecretStr = SecretStr("")

    # Applied when a row or the seeking organization leaves them unset.
    DEFAULT_CURRENCY: str = "USD"
    DEFAULT_COUNTRY: str = "India"
    DEFAULT_ORGANIZATION_TYPE: str = ""
    DEFAULT_ADVANCE_PAYMENT_PERCENTAGE: Decimal = Field(default=Decimal("25"), ge=0, le=100)

    # Logical name -> remote table.  Not overridable from the environment.
    PRICING_TABLES: ClassVar[dict[str, str]] = {
        "engagement_models": "master_engagement_models",
        "platform_fee_formulas": "master_platform_fee_formulas",
        "complexity_levels": "master_challenge_complexity",
        "pricing_plans": "pricing_configurations",
        "countries": "master_countries",
    }

    LOCAL_STORE_PATH: Path = Path("marketplace_local.db")
    FETCH_WORKERS: int = Field(default=3, ge=1, le=16)

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "marketplace_console.log"
    LOG_MAX_BYTES: int = 5 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 3

    @field_validator("DEFAULT_CURRENCY")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.strip().upper() or "USD"

    @model_validator(mode="after")
    def _report_offline(self) -> "AppConfig":
        if not self.SUPABASE_URL:
            _log.warning(
                "SUPABASE_URL is not set; master data will come from the local cache only."
            )
        return self

    def table_name(self, key: str) -> str:
        """Remote table for the logical name *key*; ``KeyError`` if unknown."""
        return self.PRICING_TABLES[key]


_config: Optional[AppConfig] = None
_config_lock = threading.Lock()


def get_config() -> AppConfig:
    """Process-wide ``AppConfig``, built from the environment on first use."""
    global _config
    if _config is not None:
        return _config
    with _config_lock:
        if _config is None:
            _config = AppConfig()
    return _config
