"""
Configuration Management for Net Worth Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The simulation constants have named defaults in the simulation module;
the settings below only allow overriding them per environment.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from networth_tracker.simulation.constants import (
    ANNUAL_GROWTH_RATE,
    ANNUAL_VOLATILITY,
    ECONOMIC_CYCLE_AMPLITUDE,
    ECONOMIC_CYCLE_FREQUENCY,
    LIABILITY_DECAY_PER_PERIOD,
    LIABILITY_JITTER_BAND,
    MONTHLY_CONTRIBUTION_RATE,
    SEASONAL_AMPLITUDE,
)


class SimulationSettings(BaseSettings):
    """Historical series simulator tuning."""

    model_config = SettingsConfigDict(
        env_prefix="NETWORTH_SIM_",
        extra="ignore"
    )

    annual_growth_rate: float = Field(
        default=ANNUAL_GROWTH_RATE,
        gt=-1.0,
        le=1.0,
        description="Compound annual growth rate of the synthetic trend"
    )
    annual_volatility: float = Field(
        default=ANNUAL_VOLATILITY,
        ge=0.0,
        le=1.0,
        description="Annualized volatility of the random shocks"
    )
    liability_decay: float = Field(
        default=LIABILITY_DECAY_PER_PERIOD,
        ge=0.0,
        lt=1.0,
        description="Multiplicative liability paydown per monthly sample"
    )
    liability_jitter_band: float = Field(
        default=LIABILITY_JITTER_BAND,
        ge=0.0,
        lt=1.0,
        description="Liability jitter is clamped to +/- this fraction"
    )
    seasonal_amplitude: float = Field(
        default=SEASONAL_AMPLITUDE,
        ge=0.0,
        le=0.5,
        description="Seasonal swing as a fraction of the trend"
    )
    economic_cycle_amplitude: float = Field(
        default=ECONOMIC_CYCLE_AMPLITUDE,
        ge=0.0,
        le=0.5,
        description="Economic cycle swing as a fraction of the trend"
    )
    economic_cycle_frequency: float = Field(
        default=ECONOMIC_CYCLE_FREQUENCY,
        gt=0.0,
        description="Number of economic cycles across the whole series"
    )
    monthly_contribution_rate: float = Field(
        default=MONTHLY_CONTRIBUTION_RATE,
        ge=0.0,
        le=0.1,
        description="Contribution accrued per monthly sample, as a fraction of target assets"
    )


class ProjectionSettings(BaseSettings):
    """Net worth projection scenarios."""

    model_config = SettingsConfigDict(
        env_prefix="NETWORTH_PROJECTION_",
        extra="ignore"
    )

    conservative_rate: float = Field(default=0.04, gt=-1.0, le=1.0)
    moderate_rate: float = Field(default=0.07, gt=-1.0, le=1.0)
    aggressive_rate: float = Field(default=0.10, gt=-1.0, le=1.0)
    horizons_years: str = Field(
        default="1,2",
        description="Comma-separated projection horizons in years"
    )

    @field_validator('horizons_years')
    @classmethod
    def validate_horizons(cls, v: str) -> str:
        """Every horizon must be a positive integer."""
        for part in v.split(","):
            if not part.strip().isdigit() or int(part) <= 0:
                raise ValueError(f"Invalid projection horizon: {part!r}")
        return v

    @property
    def horizons_list(self) -> list[int]:
        """Get horizons as a sorted list of years."""
        return sorted({int(part) for part in self.horizons_years.split(",")})


class LiabilitySettings(BaseSettings):
    """Rates and terms used to build liability payment schedules."""

    model_config = SettingsConfigDict(
        env_prefix="NETWORTH_LIABILITY_",
        extra="ignore"
    )

    credit_card_apr: float = Field(default=0.2199, ge=0.0, le=1.0)
    mortgage_apr: float = Field(default=0.065, ge=0.0, le=1.0)
    loan_apr: float = Field(default=0.07, ge=0.0, le=1.0)
    other_apr: float = Field(default=0.0, ge=0.0, le=1.0)
    credit_minimum_principal_rate: float = Field(
        default=0.01,
        gt=0.0,
        le=1.0,
        description="Share of the balance repaid by a credit card minimum payment, on top of interest"
    )
    minimum_payment_floor: float = Field(
        default=25.0,
        ge=0.0,
        description="Smallest credit card minimum payment (currency units)"
    )
    mortgage_term_months: int = Field(default=360, ge=1, le=600)
    loan_term_months: int = Field(default=60, ge=1, le=600)
    other_term_months: int = Field(default=12, ge=1, le=600)
    schedule_payments: int = Field(
        default=12,
        ge=1,
        le=600,
        description="Number of upcoming payments shown in a schedule"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for structured logs"
    )

    # Data
    currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Currency code all accounts are held in"
    )
    demo_user_id: str = Field(
        default="550e8400-e29b-41d4-a716-446655440000",
        description="Owner of the demo accounts"
    )

    # History defaults
    default_history_period: str = Field(
        default="12months",
        description="History window used when none is requested"
    )
    default_granularity: str = Field(
        default="monthly",
        description="Sampling granularity used when none is requested"
    )
    change_window_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="How far back the 'change from previous' comparison looks"
    )

    # Consistency checks
    consistency_tolerance: float = Field(
        default=1.0,
        gt=0.0,
        description="Maximum allowed drift between totals and breakdowns (currency units)"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def simulation(self) -> SimulationSettings:
        return SimulationSettings()

    @property
    def projection(self) -> ProjectionSettings:
        return ProjectionSettings()

    @property
    def liability(self) -> LiabilitySettings:
        return LiabilitySettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("simulation", "projection", "liability", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
