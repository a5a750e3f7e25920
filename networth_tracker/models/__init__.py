"""
Data Models Package

This package contains all Pydantic models used in the Net Worth Tracker.
All data flowing through the system must conform to these schemas.
"""

from networth_tracker.models.account import (
    DEFAULT_CATEGORY_FOR_TYPE,
    Account,
    AccountCategory,
    AccountListItem,
    AccountType,
    Balance,
    BalanceSource,
    ManualAssetDetails,
    ValidationIssue,
    ValidationResult,
)
from networth_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from networth_tracker.models.net_worth import (
    AssetBreakdown,
    CardChange,
    ChangeFromPrevious,
    DashboardSummaryCard,
    ExportFormat,
    GeneratedReport,
    Granularity,
    HistoryPeriod,
    HistoryPoint,
    LiabilityBreakdown,
    NetWorthProjections,
    NetWorthSummary,
    NetWorthTotals,
    PaymentSchedule,
    PaymentScheduleItem,
    ProjectionPoint,
    ReportDefinition,
    ReportType,
    Trend,
    TrendAnalysis,
)
from networth_tracker.models.preferences import (
    NotificationChannel,
    NotificationSettings,
    PrivacySettings,
    UserPreferences,
)

__all__ = [
    # Account models
    "DEFAULT_CATEGORY_FOR_TYPE",
    "Account",
    "AccountCategory",
    "AccountListItem",
    "AccountType",
    "Balance",
    "BalanceSource",
    "ManualAssetDetails",
    "ValidationIssue",
    "ValidationResult",
    # Net worth models
    "AssetBreakdown",
    "CardChange",
    "ChangeFromPrevious",
    "DashboardSummaryCard",
    "ExportFormat",
    "GeneratedReport",
    "Granularity",
    "HistoryPeriod",
    "HistoryPoint",
    "LiabilityBreakdown",
    "NetWorthProjections",
    "NetWorthSummary",
    "NetWorthTotals",
    "PaymentSchedule",
    "PaymentScheduleItem",
    "ProjectionPoint",
    "ReportDefinition",
    "ReportType",
    "Trend",
    "TrendAnalysis",
    # Preference models
    "NotificationChannel",
    "NotificationSettings",
    "PrivacySettings",
    "UserPreferences",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
