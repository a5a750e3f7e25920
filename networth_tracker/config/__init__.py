"""Configuration package."""

from networth_tracker.config.settings import (
    AppSettings,
    LiabilitySettings,
    ProjectionSettings,
    Settings,
    SimulationSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "LiabilitySettings",
    "ProjectionSettings",
    "Settings",
    "SimulationSettings",
    "get_settings",
    "validate_all_settings",
]
