"""
Audit Models for Net Worth Tracker

Every change to accounts or balances, and every computation served to the
dashboard, is logged for audit purposes. This provides:
1. Traceability of balance changes
2. Debugging information when totals look wrong
3. Ability to reconstruct how a number was produced

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from networth_tracker.models.account import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Accounts
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_UPDATED = "account_updated"
    ACCOUNT_DELETED = "account_deleted"

    # Balances
    BALANCE_RECORDED = "balance_recorded"
    BALANCE_SUPERSEDED = "balance_superseded"

    # Computations
    SUMMARY_COMPUTED = "summary_computed"
    HISTORY_GENERATED = "history_generated"
    BREAKDOWN_COMPUTED = "breakdown_computed"
    EXPORT_GENERATED = "export_generated"
    DATA_REFRESHED = "data_refreshed"
    PAYMENT_SCHEDULE_GENERATED = "payment_schedule_generated"
    REPORT_GENERATED = "report_generated"

    # Preferences
    PREFERENCES_UPDATED = "preferences_updated"
    NOTIFICATIONS_UPDATED = "notifications_updated"

    # Validation
    INTEGRITY_CHECK_PASSED = "integrity_check_passed"
    INTEGRITY_CHECK_FAILED = "integrity_check_failed"
    CONSISTENCY_CHECK_FAILED = "consistency_check_failed"
    VALIDATION_ERROR = "validation_error"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'balance', 'history')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one dashboard load)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    stack_trace: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.account_created(account_id, name, "manual_asset")
        event = AuditEventBuilder.balance_recorded(balance_id, account_id, "1500.00")
    """

    @staticmethod
    def account_created(
        account_id: str,
        name: str,
        account_type: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Account created: {name}",
            details={"name": name, "type": account_type},
            is_user_action=True,
        )

    @staticmethod
    def account_updated(
        account_id: str,
        changes: dict[str, Any],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_UPDATED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Account updated: {', '.join(sorted(changes)) or 'no changes'}",
            details={"changes": changes},
            is_user_action=True,
        )

    @staticmethod
    def account_deleted(
        account_id: str,
        balances_removed: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Account deleted with {balances_removed} balances",
            details={"balances_removed": balances_removed},
            is_user_action=True,
        )

    @staticmethod
    def balance_recorded(
        balance_id: str,
        account_id: str,
        amount: str,
        source: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCE_RECORDED,
            entity_type="balance",
            entity_id=balance_id,
            correlation_id=correlation_id,
            description=f"Balance recorded: ${amount}",
            details={"account_id": account_id, "amount": amount, "source": source},
        )

    @staticmethod
    def balance_superseded(
        previous_balance_id: str,
        new_balance_id: str,
        account_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCE_SUPERSEDED,
            entity_type="balance",
            entity_id=previous_balance_id,
            correlation_id=correlation_id,
            description="Current balance superseded",
            details={"account_id": account_id, "replaced_by": new_balance_id},
        )

    @staticmethod
    def summary_computed(
        net_worth: str,
        account_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUMMARY_COMPUTED,
            entity_type="summary",
            correlation_id=correlation_id,
            description=f"Net worth summary computed over {account_count} accounts",
            details={"net_worth": net_worth, "account_count": account_count},
        )

    @staticmethod
    def history_generated(
        period: str,
        granularity: str,
        point_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HISTORY_GENERATED,
            entity_type="history",
            correlation_id=correlation_id,
            description=f"History generated: {period} {granularity}, {point_count} points",
            details={
                "period": period,
                "granularity": granularity,
                "point_count": point_count,
            },
        )

    @staticmethod
    def breakdown_computed(
        kind: str,
        total: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BREAKDOWN_COMPUTED,
            entity_type="breakdown",
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} breakdown computed",
            details={"kind": kind, "total": total},
        )

    @staticmethod
    def export_generated(
        export_format: str,
        row_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_GENERATED,
            entity_type="export",
            correlation_id=correlation_id,
            description=f"Export generated as {export_format} with {row_count} rows",
            details={"format": export_format, "row_count": row_count},
            is_user_action=True,
        )

    @staticmethod
    def data_refreshed(
        accounts_refreshed: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_REFRESHED,
            correlation_id=correlation_id,
            description=f"Refreshed {accounts_refreshed} linked accounts",
            details={"accounts_refreshed": accounts_refreshed},
            is_user_action=True,
        )

    @staticmethod
    def payment_schedule_generated(
        account_id: str,
        liability_type: str,
        payment_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_SCHEDULE_GENERATED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Payment schedule generated with {payment_count} payments",
            details={"liability_type": liability_type, "payment_count": payment_count},
        )

    @staticmethod
    def report_generated(
        report_id: str,
        report_type: str,
        export_format: str,
        row_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_GENERATED,
            entity_type="report",
            entity_id=report_id,
            correlation_id=correlation_id,
            description=f"Report {report_type} generated as {export_format}",
            details={
                "report_type": report_type,
                "format": export_format,
                "row_count": row_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def preferences_updated(
        user_id: str,
        kind: str,
        changes: dict[str, Any],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        event_type = (
            AuditEventType.NOTIFICATIONS_UPDATED if kind == "notifications"
            else AuditEventType.PREFERENCES_UPDATED
        )
        return AuditEvent(
            event_type=event_type,
            entity_type=kind,
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} updated: {', '.join(sorted(changes)) or 'no changes'}",
            details={"changes": changes},
            is_user_action=True,
        )

    @staticmethod
    def integrity_checked(
        is_valid: bool,
        issues: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        if is_valid:
            return AuditEvent(
                event_type=AuditEventType.INTEGRITY_CHECK_PASSED,
                entity_type="dataset",
                correlation_id=correlation_id,
                description="Dataset integrity check passed",
                details={"issue_count": len(issues)},
            )
        return AuditEvent(
            event_type=AuditEventType.INTEGRITY_CHECK_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="dataset",
            correlation_id=correlation_id,
            description=f"Dataset integrity check failed with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def consistency_failed(
        issues: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONSISTENCY_CHECK_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Totals and breakdowns disagree in {len(issues)} places",
            details={"issues": issues},
        )

    @staticmethod
    def validation_error(
        entity_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_ERROR,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            correlation_id=correlation_id,
            description=f"Invalid {entity_type} rejected",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
