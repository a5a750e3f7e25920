"""
Audit Logger

DESIGN DECISION: Every change to the dataset and every number served to
the dashboard is logged. This provides:
1. Traceability of balance changes
2. Debugging capability when totals look off
3. A history the Settings page can show

The audit logger:
- Is async to match the storage interface
- Gracefully handles failures (doesn't crash a flow if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
import sys
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from networth_tracker.models.audit import AuditEvent, AuditEventBuilder
from networth_tracker.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structured logs to stdout at the given level."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for the in-app audit trail)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("networth_tracker.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def get_recent_events(self, limit: int = 50) -> list[AuditEvent]:
        """Most recent stored events, newest first. Empty without storage."""
        if not self._storage:
            return []
        return await self._storage.get_recent_events(limit=limit)

    async def log_account_created(
        self,
        account_id: str,
        name: str,
        account_type: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.account_created(
            account_id=account_id,
            name=name,
            account_type=account_type,
            correlation_id=correlation_id,
        ))

    async def log_account_updated(
        self,
        account_id: str,
        changes: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.account_updated(
            account_id=account_id,
            changes=changes,
            correlation_id=correlation_id,
        ))

    async def log_account_deleted(
        self,
        account_id: str,
        balances_removed: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.account_deleted(
            account_id=account_id,
            balances_removed=balances_removed,
            correlation_id=correlation_id,
        ))

    async def log_balance_recorded(
        self,
        balance_id: str,
        account_id: str,
        amount: str,
        source: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a new balance snapshot."""
        await self.log(AuditEventBuilder.balance_recorded(
            balance_id=balance_id,
            account_id=account_id,
            amount=amount,
            source=source,
            correlation_id=correlation_id,
        ))

    async def log_balance_superseded(
        self,
        previous_balance_id: str,
        new_balance_id: str,
        account_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.balance_superseded(
            previous_balance_id=previous_balance_id,
            new_balance_id=new_balance_id,
            account_id=account_id,
            correlation_id=correlation_id,
        ))

    async def log_summary_computed(
        self,
        net_worth: str,
        account_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.summary_computed(
            net_worth=net_worth,
            account_count=account_count,
            correlation_id=correlation_id,
        ))

    async def log_history_generated(
        self,
        period: str,
        granularity: str,
        point_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.history_generated(
            period=period,
            granularity=granularity,
            point_count=point_count,
            correlation_id=correlation_id,
        ))

    async def log_breakdown_computed(
        self,
        kind: str,
        total: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.breakdown_computed(
            kind=kind,
            total=total,
            correlation_id=correlation_id,
        ))

    async def log_export_generated(
        self,
        export_format: str,
        row_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.export_generated(
            export_format=export_format,
            row_count=row_count,
            correlation_id=correlation_id,
        ))

    async def log_data_refreshed(
        self,
        accounts_refreshed: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.data_refreshed(
            accounts_refreshed=accounts_refreshed,
            correlation_id=correlation_id,
        ))

    async def log_payment_schedule_generated(
        self,
        account_id: str,
        liability_type: str,
        payment_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.payment_schedule_generated(
            account_id=account_id,
            liability_type=liability_type,
            payment_count=payment_count,
            correlation_id=correlation_id,
        ))

    async def log_report_generated(
        self,
        report_id: str,
        report_type: str,
        export_format: str,
        row_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.report_generated(
            report_id=report_id,
            report_type=report_type,
            export_format=export_format,
            row_count=row_count,
            correlation_id=correlation_id,
        ))

    async def log_preferences_updated(
        self,
        user_id: str,
        kind: str,
        changes: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a change to display preferences or notification settings."""
        await self.log(AuditEventBuilder.preferences_updated(
            user_id=user_id,
            kind=kind,
            changes=changes,
            correlation_id=correlation_id,
        ))

    async def log_integrity_checked(
        self,
        is_valid: bool,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log the outcome of a dataset integrity check."""
        await self.log(AuditEventBuilder.integrity_checked(
            is_valid=is_valid,
            issues=issues,
            correlation_id=correlation_id,
        ))

    async def log_consistency_failed(
        self,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.consistency_failed(
            issues=issues,
            correlation_id=correlation_id,
        ))

    async def log_validation_error(
        self,
        entity_type: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.validation_error(
            entity_type=entity_type,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a dashboard load).
    Pass it through all subsequent operations.
    """
    return uuid4()
