"""
User Preference Models

Display preferences and notification settings for the demo user. Updates
are partial: only the fields supplied change, and the merged record is
validated again before it is stored.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from networth_tracker.models.account import utc_now


class PrivacySettings(BaseModel):
    """What the user agrees to share."""

    model_config = ConfigDict(extra="forbid")

    share_anonymous_data: bool = False
    include_in_benchmarks: bool = True


class UserPreferences(BaseModel):
    """How the dashboard presents data."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    currency: str = Field(
        default="USD",
        pattern="^[A-Z]{3}$",
        description="ISO 4217 display currency"
    )
    date_format: str = Field(
        default="MM/DD/YYYY",
        pattern="^(MM/DD/YYYY|DD/MM/YYYY|YYYY-MM-DD)$"
    )
    refresh_frequency: str = Field(
        default="daily",
        pattern="^(manual|daily|weekly)$",
        description="How often linked accounts are refreshed"
    )
    theme: str = Field(default="system", pattern="^(light|dark|system)$")
    privacy: PrivacySettings = Field(default_factory=PrivacySettings)
    updated_at: datetime = Field(default_factory=utc_now)


class NotificationChannel(BaseModel):
    """Alerts sent over one channel."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = False
    weekly_reports: bool = False
    account_alerts: bool = False
    security_alerts: bool = True


class NotificationSettings(BaseModel):
    """Per-channel notification switches."""

    model_config = ConfigDict(extra="forbid")

    email: NotificationChannel = Field(
        default_factory=lambda: NotificationChannel(
            enabled=True,
            weekly_reports=True,
            account_alerts=True,
            security_alerts=True,
        )
    )
    push: NotificationChannel = Field(default_factory=NotificationChannel)
    sms: NotificationChannel = Field(
        default_factory=lambda: NotificationChannel(security_alerts=False)
    )
    updated_at: datetime = Field(default_factory=utc_now)
