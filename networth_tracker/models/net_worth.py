"""
Net Worth Models

Derived views over accounts and balances: history points, category
breakdowns, summaries and dashboard cards. None of these have an identity
of their own; they are recomputed every time they are asked for.

DESIGN DECISION: Breakdowns are fixed-field models keyed by the closed
category enumeration, not free-form dicts. Adding a category means adding
a field here.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from networth_tracker.errors import (
    UnknownExportFormatError,
    UnknownGranularityError,
    UnknownPeriodError,
    UnknownReportError,
)


# Net worth must equal assets - liabilities to within a cent
NET_WORTH_IDENTITY_TOLERANCE = 0.01


# =============================================================================
# ENUMS
# =============================================================================

class Granularity(str, Enum):
    """Sampling interval of a historical series."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"

    @property
    def interval_days(self) -> int:
        """Fixed length of one sampling interval in days."""
        return _GRANULARITY_DAYS[self]

    @classmethod
    def parse(cls, value) -> "Granularity":
        """Parse a granularity, raising UnknownGranularityError if unsupported."""
        try:
            return cls(value)
        except ValueError:
            raise UnknownGranularityError(value, [m.value for m in cls]) from None


_GRANULARITY_DAYS = {
    Granularity.DAILY: 1,
    Granularity.WEEKLY: 7,
    Granularity.MONTHLY: 30,
    Granularity.QUARTERLY: 90,
}


class HistoryPeriod(str, Enum):
    """Look-back window offered by the dashboard."""
    THREE_MONTHS = "3months"
    SIX_MONTHS = "6months"
    TWELVE_MONTHS = "12months"
    TWENTY_FOUR_MONTHS = "24months"

    @property
    def days(self) -> int:
        return _PERIOD_DAYS[self]

    @property
    def label(self) -> str:
        return _PERIOD_LABELS[self]

    def window(self, end: dt.date) -> tuple[dt.date, dt.date]:
        """(start, end) dates of this period ending on `end`."""
        return end - dt.timedelta(days=self.days), end

    @classmethod
    def parse(cls, value) -> "HistoryPeriod":
        """Parse a period, raising UnknownPeriodError if unsupported."""
        try:
            return cls(value)
        except ValueError:
            raise UnknownPeriodError(value, [m.value for m in cls]) from None


_PERIOD_DAYS = {
    HistoryPeriod.THREE_MONTHS: 90,
    HistoryPeriod.SIX_MONTHS: 180,
    HistoryPeriod.TWELVE_MONTHS: 365,
    HistoryPeriod.TWENTY_FOUR_MONTHS: 730,
}

_PERIOD_LABELS = {
    HistoryPeriod.THREE_MONTHS: "3 Months",
    HistoryPeriod.SIX_MONTHS: "6 Months",
    HistoryPeriod.TWELVE_MONTHS: "1 Year",
    HistoryPeriod.TWENTY_FOUR_MONTHS: "2 Years",
}


class ExportFormat(str, Enum):
    """Supported export formats."""
    CSV = "csv"
    JSON = "json"

    @classmethod
    def parse(cls, value) -> "ExportFormat":
        try:
            return cls(value)
        except ValueError:
            raise UnknownExportFormatError(value, [m.value for m in cls]) from None


class ReportType(str, Enum):
    """Reports offered by the export page."""
    NET_WORTH_SUMMARY = "net-worth-summary"
    ACCOUNT_DETAILS = "account-details"
    BALANCE_HISTORY = "balance-history"

    @classmethod
    def parse(cls, value) -> "ReportType":
        try:
            return cls(value)
        except ValueError:
            raise UnknownReportError(value, [m.value for m in cls]) from None


class Trend(str, Enum):
    """Direction of a change."""
    UP = "up"
    DOWN = "down"
    FLAT = "flat"

    @classmethod
    def of(cls, amount) -> "Trend":
        if amount > 0:
            return cls.UP
        if amount < 0:
            return cls.DOWN
        return cls.FLAT


# =============================================================================
# HISTORY
# =============================================================================

class HistoryPoint(BaseModel):
    """
    One sample of a net worth time series.

    Assets and liabilities are never negative; net worth is
    assets - liabilities.
    """

    date: dt.date
    net_worth: float
    total_assets: float = Field(..., ge=0)
    total_liabilities: float = Field(..., ge=0)

    @model_validator(mode='after')
    def validate_identity(self) -> 'HistoryPoint':
        """Net worth must match assets - liabilities."""
        expected = self.total_assets - self.total_liabilities
        if abs(self.net_worth - expected) > NET_WORTH_IDENTITY_TOLERANCE:
            raise ValueError(
                f"Net worth {self.net_worth} does not equal assets - liabilities ({expected})"
            )
        return self


# =============================================================================
# BREAKDOWNS
# =============================================================================

class AssetBreakdown(BaseModel):
    """
    Current asset value per category.

    Methods must precede the `property` field, which shadows the builtin
    decorator for the rest of the class body.
    """

    @property
    def total(self) -> Decimal:
        return sum(self.as_dict().values(), Decimal("0"))

    def as_dict(self) -> dict[str, Decimal]:
        return {name: getattr(self, name) for name in type(self).model_fields}

    cash: Decimal = Decimal("0")
    investments: Decimal = Decimal("0")
    property: Decimal = Decimal("0")
    vehicles: Decimal = Decimal("0")
    precious_metals: Decimal = Decimal("0")
    digital_assets: Decimal = Decimal("0")
    other: Decimal = Decimal("0")


class LiabilityBreakdown(BaseModel):
    """Current amount owed per liability bucket."""

    credit_cards: Decimal = Decimal("0")
    mortgages: Decimal = Decimal("0")
    loans: Decimal = Decimal("0")
    other: Decimal = Decimal("0")

    @property
    def total(self) -> Decimal:
        return sum(self.as_dict().values(), Decimal("0"))

    def as_dict(self) -> dict[str, Decimal]:
        return {name: getattr(self, name) for name in type(self).model_fields}


# =============================================================================
# SUMMARY
# =============================================================================

class NetWorthTotals(BaseModel):
    """Aggregate totals at one point in time."""

    total_assets: Decimal = Decimal("0")
    total_liabilities: Decimal = Decimal("0")

    @property
    def net_worth(self) -> Decimal:
        return self.total_assets - self.total_liabilities


class ChangeFromPrevious(BaseModel):
    """How net worth moved since the comparison point."""

    amount: Decimal
    percentage: float
    period: str = "last month"


class NetWorthSummary(BaseModel):
    """Current net worth with an optional change block."""

    current_net_worth: Decimal
    total_assets: Decimal
    total_liabilities: Decimal
    last_updated: dt.datetime
    change_from_previous: Optional[ChangeFromPrevious] = None


class CardChange(BaseModel):
    amount: Decimal
    percentage: float
    period: str
    trend: Trend


class DashboardSummaryCard(BaseModel):
    """Headline number shown at the top of the dashboard."""

    title: str
    value: Decimal
    change: Optional[CardChange] = None
    format: str = Field(default="currency", pattern="^(currency|number|percentage)$")
    icon: Optional[str] = None


# =============================================================================
# TRENDS AND PROJECTIONS
# =============================================================================

class TrendAnalysis(BaseModel):
    """Growth statistics over a monthly history."""

    monthly_growth_rate: float = Field(
        ...,
        description="Average month-over-month change, in percent"
    )
    period_growth: float = Field(
        ...,
        description="Change from the first to the last point, in percent"
    )
    volatility: str = Field(..., pattern="^(low|medium|high)$")
    volatility_pct: float = Field(
        ...,
        ge=0,
        description="Standard deviation of monthly changes, in percent"
    )
    trend: str = Field(..., pattern="^(upward|downward|flat)$")
    projected_net_worth: dict[str, float] = Field(
        default_factory=dict,
        description="Net worth extrapolated at the measured growth rate"
    )


class ProjectionPoint(BaseModel):
    date: dt.date
    value: float


class NetWorthProjections(BaseModel):
    """Compounding scenarios from the current net worth."""

    conservative: list[ProjectionPoint] = Field(default_factory=list)
    moderate: list[ProjectionPoint] = Field(default_factory=list)
    aggressive: list[ProjectionPoint] = Field(default_factory=list)


# =============================================================================
# LIABILITY PAYMENT SCHEDULES
# =============================================================================

class PaymentScheduleItem(BaseModel):
    """One upcoming payment split into principal and interest."""

    date: dt.date
    amount: Decimal = Field(..., ge=0, description="Principal plus interest")
    payment_type: str = Field(..., pattern="^(minimum|scheduled)$")
    principal: Decimal = Field(..., ge=0)
    interest: Decimal = Field(..., ge=0)
    remaining_balance: Decimal = Field(
        ...,
        ge=0,
        description="Amount still owed after this payment"
    )


class PaymentSchedule(BaseModel):
    """
    Upcoming payments for a liability account.

    Credit accounts pay a minimum (interest plus a slice of the balance);
    loans pay a fixed amortizing amount over their remaining term.
    """

    account_id: str
    account_name: str
    liability_type: str = Field(
        ...,
        description="Liability breakdown bucket (credit_cards, mortgages, loans, other)"
    )
    balance: Decimal
    annual_rate: float = Field(..., ge=0)
    payment: Decimal = Field(..., ge=0, description="Regular payment amount")
    items: list[PaymentScheduleItem] = Field(default_factory=list)

    @property
    def total_interest(self) -> Decimal:
        return sum((item.interest for item in self.items), Decimal("0"))

    @property
    def total_principal(self) -> Decimal:
        return sum((item.principal for item in self.items), Decimal("0"))


# =============================================================================
# REPORTS
# =============================================================================

class ReportDefinition(BaseModel):
    """An entry in the report catalog."""

    id: ReportType
    name: str
    description: str
    formats: list[ExportFormat]


class GeneratedReport(BaseModel):
    """A rendered report, ready to download."""

    report_id: str = Field(..., description="Unique id of this generation")
    report_type: ReportType
    format: ExportFormat
    status: str = Field(default="completed", pattern="^(completed|failed)$")
    filename: str
    media_type: str
    content: str
    row_count: int = Field(..., ge=0)
    generated_at: dt.datetime
