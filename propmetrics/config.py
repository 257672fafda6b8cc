"""
Application configuration using Pydantic Settings.
"""

import os
from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("APP_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite:///./propmetrics.db"

    # App settings
    app_name: str = "Property Metrics Engine"
    debug: bool = False
    log_level: str = "INFO"
    app_env: str = "development"

    # Engine defaults, used when neither assumptions nor the legacy deal blob
    # carry a value. Rates are decimals (0.05 = 5%).
    default_vacancy_rate: float = 0.05
    default_expense_ratio: float = 0.45
    default_management_rate: float = 0.08
    default_loan_percentage: float = 0.75
    default_interest_rate: float = 0.07
    default_loan_term_years: int = 30
    default_market_cap_rate: float = 0.055
    default_refinance_ltv: float = 0.75
    default_refinance_rate: float = 0.065

    # Estimates applied to purchase price when no cost records exist
    closing_cost_estimate_rate: float = 0.02
    holding_cost_estimate_rate: float = 0.01

    model_config = SettingsConfigDict(
        env_file=get_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator(
        "default_vacancy_rate",
        "default_expense_ratio",
        "default_management_rate",
        "default_loan_percentage",
        "default_interest_rate",
        "default_market_cap_rate",
        "default_refinance_ltv",
        "default_refinance_rate",
        "closing_cost_estimate_rate",
        "holding_cost_estimate_rate",
        mode="before",
    )
    @classmethod
    def _to_fraction(cls, v: Any) -> Any:
        # Accept "5", "5%" or 0.05 for the same 5% rate
        if isinstance(v, str):
            v = v.strip().replace("%", "")
        f = float(v)
        if f > 1.0:
            f = f / 100.0
        if f < 0:
            raise ValueError("rate must be non-negative")
        return f


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
