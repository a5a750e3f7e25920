"""
Main Orchestrator for Net Worth Tracker

This module ties together all the components and defines the
end-to-end flows for:
1. Dashboard (storage → aggregate → simulate → present)
2. Accounts (create, record balance, update, delete, refresh)
3. Liabilities (payment schedules)
4. Settings (display preferences, notifications)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every number is recomputed from storage on each call
- Synthetic history is always anchored at the live totals
- Every step is audited
- Failures are audited and re-raised, never defaulted
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ValidationError

from networth_tracker.aggregation import (
    analyze_trends,
    build_payment_schedule,
    build_summary,
    compute_asset_breakdown,
    compute_current_totals,
    compute_liability_breakdown,
    compute_totals_as_of,
    project_net_worth,
)
from networth_tracker.audit import AuditLogger, create_correlation_id
from networth_tracker.config import (
    AppSettings,
    LiabilitySettings,
    ProjectionSettings,
    get_settings,
)
from networth_tracker.errors import (
    NetWorthTrackerError,
    NotALiabilityError,
    UnknownAccountTypeError,
)
from networth_tracker.models.account import (
    DEFAULT_CATEGORY_FOR_TYPE,
    Account,
    AccountCategory,
    AccountListItem,
    AccountType,
    Balance,
    BalanceSource,
    ManualAssetDetails,
    ValidationResult,
    utc_now,
)
from networth_tracker.models.net_worth import (
    AssetBreakdown,
    CardChange,
    DashboardSummaryCard,
    ExportFormat,
    GeneratedReport,
    Granularity,
    HistoryPeriod,
    HistoryPoint,
    LiabilityBreakdown,
    NetWorthProjections,
    NetWorthSummary,
    PaymentSchedule,
    ReportDefinition,
    ReportType,
    Trend,
    TrendAnalysis,
)
from networth_tracker.models.preferences import NotificationSettings, UserPreferences
from networth_tracker.services.export import MEDIA_TYPES, export_dataset
from networth_tracker.services.reports import (
    render_report,
    report_catalog,
    report_definition,
    report_filename,
    resolve_format,
)
from networth_tracker.services.storage import (
    AccountStorageInterface,
    InMemoryAccountStorage,
    InMemoryAuditStorage,
    InMemoryPreferenceStorage,
    NotFoundError,
    PreferenceStorageInterface,
    load_demo_data,
)
from networth_tracker.simulation import HistorySimulator
from networth_tracker.validation import DatasetValidator, check_consistency


MANUAL_TYPES = (AccountType.MANUAL_ASSET, AccountType.MANUAL_LIABILITY)


def _percent_change(amount: Decimal, base: Decimal) -> float:
    if base == 0:
        return 0.0
    return round(float(amount / abs(base) * 100), 2)


class DashboardFlow:
    """
    Orchestrates everything the dashboard reads.

    Flow:
    1. Load → accounts and balances for the user
    2. Aggregate → totals and breakdowns from current balances
    3. Simulate → history anchored at those totals
    4. Present → typed models, exports and integrity reports
    """

    def __init__(
        self,
        storage: AccountStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        simulator: Optional[HistorySimulator] = None,
        validator: Optional[DatasetValidator] = None,
        app_settings: Optional[AppSettings] = None,
        projection_settings: Optional[ProjectionSettings] = None,
    ):
        settings = get_settings()
        self._storage = storage
        self._audit_logger = audit_logger
        self._app_settings = app_settings or settings.app
        self._projection_settings = projection_settings or settings.projection
        self._simulator = simulator or HistorySimulator()
        self._validator = validator or DatasetValidator(self._app_settings.currency)

    async def _load(self) -> tuple[list[Account], list[Balance]]:
        accounts = await self._storage.list_accounts(user_id=self._app_settings.demo_user_id)
        owned = {account.id for account in accounts}
        balances = [
            balance for balance in await self._storage.list_balances()
            if balance.account_id in owned
        ]
        return accounts, balances

    async def _audit_failure(
        self,
        error: Exception,
        correlation_id: Optional[UUID],
    ) -> None:
        if not self._audit_logger:
            return
        if isinstance(error, NetWorthTrackerError):
            await self._audit_logger.log_validation_error(
                entity_type="request",
                error_message=str(error),
                correlation_id=correlation_id,
            )
        else:
            await self._audit_logger.log_error(
                error_type=type(error).__name__,
                error_message=str(error),
                correlation_id=correlation_id,
            )

    async def get_summary(
        self,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> NetWorthSummary:
        """Current net worth with the change over the comparison window."""
        correlation_id = correlation_id or create_correlation_id()
        accounts, balances = await self._load()

        try:
            summary = build_summary(
                accounts,
                balances,
                now=now or utc_now(),
                change_window_days=self._app_settings.change_window_days,
            )
        except NetWorthTrackerError as e:
            await self._audit_failure(e, correlation_id)
            raise

        if self._audit_logger:
            await self._audit_logger.log_summary_computed(
                net_worth=str(summary.current_net_worth),
                account_count=len(accounts),
                correlation_id=correlation_id,
            )
        return summary

    async def get_summary_cards(
        self,
        now: Optional[datetime] = None,
    ) -> list[DashboardSummaryCard]:
        """
        Net Worth, Total Assets and Total Liabilities cards.

        Each card carries its change over the comparison window when there
        is data that old.
        """
        now = now or utc_now()
        summary = await self.get_summary(now=now)
        accounts, balances = await self._load()

        change = summary.change_from_previous
        previous = None
        if change is not None:
            comparison_date = now.date() - timedelta(days=self._app_settings.change_window_days)
            previous = compute_totals_as_of(accounts, balances, comparison_date)

        def card_change(current: Decimal, before: Optional[Decimal]) -> Optional[CardChange]:
            if before is None:
                return None
            amount = current - before
            return CardChange(
                amount=amount,
                percentage=_percent_change(amount, before),
                period=change.period,
                trend=Trend.of(amount),
            )

        return [
            DashboardSummaryCard(
                title="Net Worth",
                value=summary.current_net_worth,
                change=card_change(
                    summary.current_net_worth,
                    previous.net_worth if previous is not None else None,
                ),
                icon="wallet",
            ),
            DashboardSummaryCard(
                title="Total Assets",
                value=summary.total_assets,
                change=card_change(
                    summary.total_assets,
                    previous.total_assets if previous is not None else None,
                ),
                icon="trending-up",
            ),
            DashboardSummaryCard(
                title="Total Liabilities",
                value=summary.total_liabilities,
                change=card_change(
                    summary.total_liabilities,
                    previous.total_liabilities if previous is not None else None,
                ),
                icon="trending-down",
            ),
        ]

    async def list_accounts(
        self,
        account_type: Optional[AccountType] = None,
        category: Optional[AccountCategory] = None,
        is_active: Optional[bool] = None,
    ) -> list[AccountListItem]:
        """Accounts flattened with their current balance."""
        accounts = await self._storage.list_accounts(
            user_id=self._app_settings.demo_user_id,
            account_type=account_type,
            category=category,
            is_active=is_active,
        )
        items = []
        for account in accounts:
            current = await self._storage.get_current_balance(account.id)
            items.append(AccountListItem.from_account(account, current))
        return items

    async def get_asset_breakdown(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> AssetBreakdown:
        accounts, balances = await self._load()
        breakdown = compute_asset_breakdown(accounts, balances)
        if self._audit_logger:
            await self._audit_logger.log_breakdown_computed(
                kind="asset",
                total=str(breakdown.total),
                correlation_id=correlation_id,
            )
        return breakdown

    async def get_liability_breakdown(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> LiabilityBreakdown:
        accounts, balances = await self._load()
        breakdown = compute_liability_breakdown(accounts, balances)
        if self._audit_logger:
            await self._audit_logger.log_breakdown_computed(
                kind="liability",
                total=str(breakdown.total),
                correlation_id=correlation_id,
            )
        return breakdown

    async def get_history(
        self,
        period: Union[HistoryPeriod, str, None] = None,
        granularity: Union[Granularity, str, None] = None,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[HistoryPoint]:
        """
        Net worth history for a period, ending today at the live totals.

        Raises:
            UnknownPeriodError: period is not supported
            UnknownGranularityError: granularity is not supported
        """
        correlation_id = correlation_id or create_correlation_id()
        accounts, balances = await self._load()

        try:
            period = HistoryPeriod.parse(period or self._app_settings.default_history_period)
            granularity = Granularity.parse(granularity or self._app_settings.default_granularity)
            totals = compute_current_totals(accounts, balances)
            start, end = period.window((now or utc_now()).date())
            history = self._simulator.generate(
                start,
                end,
                granularity,
                target_net_worth=totals.net_worth,
                target_liabilities=totals.total_liabilities,
            )
        except NetWorthTrackerError as e:
            await self._audit_failure(e, correlation_id)
            raise

        if self._audit_logger:
            await self._audit_logger.log_history_generated(
                period=period.value,
                granularity=granularity.value,
                point_count=len(history),
                correlation_id=correlation_id,
            )
        return history

    async def get_asset_performance(
        self,
        period: Union[HistoryPeriod, str, None] = None,
        granularity: Union[Granularity, str, None] = None,
        now: Optional[datetime] = None,
    ) -> list[HistoryPoint]:
        """Asset-only history: liabilities are zero and net worth equals assets."""
        correlation_id = create_correlation_id()
        accounts, balances = await self._load()

        try:
            period = HistoryPeriod.parse(period or self._app_settings.default_history_period)
            granularity = Granularity.parse(granularity or self._app_settings.default_granularity)
            totals = compute_current_totals(accounts, balances)
            start, end = period.window((now or utc_now()).date())
            return self._simulator.generate(
                start,
                end,
                granularity,
                target_net_worth=totals.total_assets,
                target_liabilities=0,
            )
        except NetWorthTrackerError as e:
            await self._audit_failure(e, correlation_id)
            raise

    async def get_trends(
        self,
        period: Union[HistoryPeriod, str, None] = None,
        now: Optional[datetime] = None,
    ) -> TrendAnalysis:
        """Growth statistics over the monthly history of a period."""
        history = await self.get_history(period, Granularity.MONTHLY, now=now)
        return analyze_trends(history)

    async def get_projections(
        self,
        now: Optional[datetime] = None,
    ) -> NetWorthProjections:
        """Conservative, moderate and aggressive compounding of today's net worth."""
        now = now or utc_now()
        accounts, balances = await self._load()
        totals = compute_current_totals(accounts, balances)
        s = self._projection_settings
        return project_net_worth(
            float(totals.net_worth),
            now.date(),
            conservative_rate=s.conservative_rate,
            moderate_rate=s.moderate_rate,
            aggressive_rate=s.aggressive_rate,
            horizons_years=s.horizons_list,
        )

    async def export(
        self,
        export_format: Union[ExportFormat, str],
        period: Union[HistoryPeriod, str, None] = None,
        granularity: Union[Granularity, str, None] = None,
        now: Optional[datetime] = None,
    ) -> str:
        """
        Export history (CSV) or the full dashboard dataset (JSON).

        Raises:
            UnknownExportFormatError: format is not csv or json
        """
        correlation_id = create_correlation_id()
        now = now or utc_now()

        try:
            export_format = ExportFormat.parse(export_format)
        except NetWorthTrackerError as e:
            await self._audit_failure(e, correlation_id)
            raise

        history = await self.get_history(period, granularity, now=now, correlation_id=correlation_id)
        summary = await self.get_summary(now=now, correlation_id=correlation_id)
        accounts = await self.list_accounts()
        content = export_dataset(export_format, summary, accounts, history, exported_at=now)

        if self._audit_logger:
            await self._audit_logger.log_export_generated(
                export_format=export_format.value,
                row_count=len(history),
                correlation_id=correlation_id,
            )
        return content

    def list_reports(self) -> list[ReportDefinition]:
        """Reports the dashboard can generate, with their formats."""
        return report_catalog()

    async def generate_report(
        self,
        report_type: Union[ReportType, str],
        export_format: Union[ExportFormat, str] = ExportFormat.CSV,
        period: Union[HistoryPeriod, str, None] = None,
        granularity: Union[Granularity, str, None] = None,
        now: Optional[datetime] = None,
    ) -> GeneratedReport:
        """
        Render a catalog report from live data.

        Raises:
            UnknownReportError: report is not in the catalog
            UnknownExportFormatError: the report is not offered in that format
        """
        correlation_id = create_correlation_id()
        now = now or utc_now()

        try:
            definition = report_definition(report_type)
            export_format = resolve_format(definition, export_format)
        except NetWorthTrackerError as e:
            await self._audit_failure(e, correlation_id)
            raise

        summary = await self.get_summary(now=now, correlation_id=correlation_id)
        history = await self.get_history(period, granularity, now=now, correlation_id=correlation_id)
        accounts, balances = await self._load()
        content, row_count = render_report(
            definition.id,
            export_format,
            summary,
            compute_asset_breakdown(accounts, balances),
            compute_liability_breakdown(accounts, balances),
            await self.list_accounts(),
            history,
        )

        report = GeneratedReport(
            report_id=f"report-{uuid4().hex[:12]}",
            report_type=definition.id,
            format=export_format,
            filename=report_filename(definition.id, export_format, now),
            media_type=MEDIA_TYPES[export_format],
            content=content,
            row_count=row_count,
            generated_at=now,
        )
        if self._audit_logger:
            await self._audit_logger.log_report_generated(
                report_id=report.report_id,
                report_type=definition.id.value,
                export_format=export_format.value,
                row_count=row_count,
                correlation_id=correlation_id,
            )
        return report

    async def check_integrity(
        self,
        now: Optional[datetime] = None,
    ) -> tuple[ValidationResult, ValidationResult]:
        """
        Validate the dataset, then check totals, breakdowns and history agree.

        Consistency is only checked when the dataset passes stage 1; the
        aggregation cannot run over orphan balances.

        Returns:
            (dataset_result, consistency_result)
        """
        correlation_id = create_correlation_id()
        accounts, balances = await self._load()

        dataset_result = self._validator.validate(accounts, balances)
        if self._audit_logger:
            await self._audit_logger.log_integrity_checked(
                is_valid=dataset_result.is_valid,
                issues=[issue.model_dump() for issue in dataset_result.issues],
                correlation_id=correlation_id,
            )

        if not dataset_result.schema_valid:
            consistency = ValidationResult(
                schema_valid=False,
                integrity_valid=False,
                is_valid=False,
                warnings=["Consistency not checked: the dataset failed schema validation"],
            )
            return dataset_result, consistency

        totals = compute_current_totals(accounts, balances)
        history = await self.get_history(now=now, correlation_id=correlation_id)
        consistency = check_consistency(
            totals,
            compute_asset_breakdown(accounts, balances),
            compute_liability_breakdown(accounts, balances),
            history,
            tolerance=self._app_settings.consistency_tolerance,
        )
        if not consistency.is_valid and self._audit_logger:
            await self._audit_logger.log_consistency_failed(
                issues=[issue.model_dump() for issue in consistency.issues],
                correlation_id=correlation_id,
            )
        return dataset_result, consistency


class AccountFlow:
    """
    Orchestrates changes to accounts and balances.

    Every change is audited. Invalid input is audited as a validation
    error and re-raised.
    """

    def __init__(
        self,
        storage: AccountStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        app_settings: Optional[AppSettings] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._app_settings = app_settings or get_settings().app

    async def _get(self, account_id: str) -> Account:
        account = await self._storage.get_account(account_id)
        if account is None:
            raise NotFoundError(f"Account {account_id} not found")
        return account

    async def _reject(
        self,
        entity_type: str,
        error: Exception,
        correlation_id: Optional[UUID],
    ) -> None:
        if self._audit_logger:
            await self._audit_logger.log_validation_error(
                entity_type=entity_type,
                error_message=str(error),
                correlation_id=correlation_id,
            )

    async def create_manual_account(
        self,
        name: str,
        account_type: Union[AccountType, str],
        subtype: str,
        initial_balance: Union[Decimal, float, str],
        category: Union[AccountCategory, str, None] = None,
        description: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Account:
        """
        Create a manual asset or liability with its first balance.

        Raises:
            UnknownAccountTypeError: type is not manual_asset or manual_liability
            UnknownCategoryError: category is not recognised
            pydantic.ValidationError: fields fail model validation
        """
        correlation_id = correlation_id or create_correlation_id()
        now = now or utc_now()

        try:
            account_type = AccountType.parse(account_type)
            if account_type not in MANUAL_TYPES:
                raise UnknownAccountTypeError(
                    account_type.value, [t.value for t in MANUAL_TYPES]
                )
            category = (
                AccountCategory.parse(category)
                if category else DEFAULT_CATEGORY_FOR_TYPE[account_type]
            )
            account = Account(
                user_id=self._app_settings.demo_user_id,
                name=name,
                institution_name="Manual Entry",
                type=account_type,
                subtype=subtype,
                category=category,
                is_manual=True,
                manual_asset_details=(
                    ManualAssetDetails(description=description, notes=notes)
                    if description else None
                ),
                created_at=now,
                updated_at=now,
            )
            balance = Balance(
                account_id=account.id,
                balance=Decimal(str(initial_balance)),
                balance_date=now.date(),
                is_current=True,
                source=BalanceSource.MANUAL_ENTRY,
                created_at=now,
            )
        except (NetWorthTrackerError, ValidationError) as e:
            await self._reject("account", e, correlation_id)
            raise

        await self._storage.save_account(account)
        if self._audit_logger:
            await self._audit_logger.log_account_created(
                account_id=account.id,
                name=account.name,
                account_type=account.type.value,
                correlation_id=correlation_id,
            )
        await self._store_balance(balance, correlation_id)
        return account

    async def record_balance(
        self,
        account_id: str,
        amount: Union[Decimal, float, str],
        now: Optional[datetime] = None,
        limit: Optional[Decimal] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Balance:
        """
        Record a new current balance, superseding the previous one.

        Raises:
            NotFoundError: account doesn't exist
            pydantic.ValidationError: amount is not a valid balance
        """
        correlation_id = correlation_id or create_correlation_id()
        now = now or utc_now()
        account = await self._get(account_id)

        try:
            balance = Balance(
                account_id=account.id,
                balance=Decimal(str(amount)),
                limit=limit,
                balance_date=now.date(),
                is_current=True,
                source=_source_for(account),
                created_at=now,
            )
        except ValidationError as e:
            await self._reject("balance", e, correlation_id)
            raise

        await self._store_balance(balance, correlation_id)
        await self._storage.update_account(account.model_copy(update={"updated_at": now}))
        return balance

    async def _store_balance(
        self,
        balance: Balance,
        correlation_id: Optional[UUID],
    ) -> None:
        superseded = await self._storage.record_balance(balance)
        if not self._audit_logger:
            return
        await self._audit_logger.log_balance_recorded(
            balance_id=balance.id,
            account_id=balance.account_id,
            amount=str(balance.balance),
            source=balance.source.value,
            correlation_id=correlation_id,
        )
        if superseded is not None:
            await self._audit_logger.log_balance_superseded(
                previous_balance_id=superseded.id,
                new_balance_id=balance.id,
                account_id=balance.account_id,
                correlation_id=correlation_id,
            )

    async def update_account(
        self,
        account_id: str,
        name: Optional[str] = None,
        category: Union[AccountCategory, str, None] = None,
        is_active: Optional[bool] = None,
        now: Optional[datetime] = None,
    ) -> Account:
        """Change an account's name, category or active flag."""
        correlation_id = create_correlation_id()
        account = await self._get(account_id)

        changes = {}
        try:
            if name is not None and name != account.name:
                changes["name"] = name
            if category is not None:
                category = AccountCategory.parse(category)
                if category != account.category:
                    changes["category"] = category
            if is_active is not None and is_active != account.is_active:
                changes["is_active"] = is_active
            # model_copy skips validation, so re-validate the merged record
            updated = Account.model_validate({
                **account.model_dump(),
                **changes,
                "updated_at": now or utc_now(),
            })
        except (NetWorthTrackerError, ValidationError) as e:
            await self._reject("account", e, correlation_id)
            raise

        await self._storage.update_account(updated)
        if self._audit_logger:
            await self._audit_logger.log_account_updated(
                account_id=account_id,
                changes={k: getattr(v, "value", v) for k, v in changes.items()},
                correlation_id=correlation_id,
            )
        return updated

    async def delete_account(self, account_id: str) -> int:
        """
        Delete an account and its balances.

        Returns:
            Number of balances removed
        """
        removed = await self._storage.delete_account(account_id)
        if self._audit_logger:
            await self._audit_logger.log_account_deleted(
                account_id=account_id,
                balances_removed=removed,
            )
        return removed

    async def refresh_linked_accounts(
        self,
        now: Optional[datetime] = None,
    ) -> int:
        """
        Simulate a refresh from the linked feeds.

        No provider is called: each active linked account re-records its
        current balance dated today.

        Returns:
            Number of accounts refreshed
        """
        correlation_id = create_correlation_id()
        now = now or utc_now()
        accounts = await self._storage.list_accounts(
            user_id=self._app_settings.demo_user_id,
            is_active=True,
        )

        refreshed = 0
        for account in accounts:
            if account.is_manual:
                continue
            current = await self._storage.get_current_balance(account.id)
            if current is None:
                continue
            await self.record_balance(
                account.id,
                current.balance,
                now=now,
                limit=current.limit,
                correlation_id=correlation_id,
            )
            refreshed += 1

        if self._audit_logger:
            await self._audit_logger.log_data_refreshed(
                accounts_refreshed=refreshed,
                correlation_id=correlation_id,
            )
        return refreshed


class LiabilityFlow:
    """
    Orchestrates payment schedules for liability accounts.

    Rates and terms come from LiabilitySettings; nothing is stored.
    """

    def __init__(
        self,
        storage: AccountStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        liability_settings: Optional[LiabilitySettings] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._liability_settings = liability_settings or get_settings().liability

    async def get_payment_schedule(
        self,
        account_id: str,
        now: Optional[datetime] = None,
        payments: Optional[int] = None,
    ) -> PaymentSchedule:
        """
        Upcoming payments on a liability, split into principal and interest.

        Raises:
            NotFoundError: account doesn't exist
            NotALiabilityError: account is an asset
        """
        correlation_id = create_correlation_id()
        account = await self._storage.get_account(account_id)
        if account is None:
            raise NotFoundError(f"Account {account_id} not found")

        try:
            schedule = build_payment_schedule(
                account,
                await self._storage.get_current_balance(account_id),
                (now or utc_now()).date(),
                settings=self._liability_settings,
                payments=payments,
            )
        except NotALiabilityError as e:
            if self._audit_logger:
                await self._audit_logger.log_validation_error(
                    entity_type="account",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_payment_schedule_generated(
                account_id=account_id,
                liability_type=schedule.liability_type,
                payment_count=len(schedule.items),
                correlation_id=correlation_id,
            )
        return schedule


def _merge_changes(current: BaseModel, changes: dict[str, Any]) -> dict[str, Any]:
    """Overlay changes on a model's fields, one level deep for nested sections."""
    merged = current.model_dump()
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


class SettingsFlow:
    """
    Orchestrates the user's display preferences and notification settings.

    Updates are partial and validated as a whole; a rejected update leaves
    the stored record unchanged.
    """

    def __init__(
        self,
        storage: PreferenceStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        app_settings: Optional[AppSettings] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._app_settings = app_settings or get_settings().app

    @property
    def _user_id(self) -> str:
        return self._app_settings.demo_user_id

    async def get_preferences(self) -> UserPreferences:
        return await self._storage.get_preferences(self._user_id)

    async def get_notifications(self) -> NotificationSettings:
        return await self._storage.get_notifications(self._user_id)

    async def update_preferences(
        self,
        changes: dict[str, Any],
        now: Optional[datetime] = None,
    ) -> UserPreferences:
        """
        Apply a partial update to the display preferences.

        Raises:
            pydantic.ValidationError: a changed value is invalid or unknown
        """
        current = await self.get_preferences()
        updated = await self._apply(UserPreferences, "preferences", current, changes, now)
        await self._storage.save_preferences(self._user_id, updated)
        return updated

    async def update_notifications(
        self,
        changes: dict[str, Any],
        now: Optional[datetime] = None,
    ) -> NotificationSettings:
        """
        Apply a partial update to the notification settings.

        Raises:
            pydantic.ValidationError: a changed value is invalid or unknown
        """
        current = await self.get_notifications()
        updated = await self._apply(NotificationSettings, "notifications", current, changes, now)
        await self._storage.save_notifications(self._user_id, updated)
        return updated

    async def _apply(self, model, kind, current, changes, now):
        correlation_id = create_correlation_id()
        try:
            updated = model.model_validate({
                **_merge_changes(current, changes),
                "updated_at": now or utc_now(),
            })
        except ValidationError as e:
            if self._audit_logger:
                await self._audit_logger.log_validation_error(
                    entity_type=kind,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_preferences_updated(
                user_id=self._user_id,
                kind=kind,
                changes=changes,
                correlation_id=correlation_id,
            )
        return updated


def _source_for(account: Account) -> BalanceSource:
    if account.is_manual:
        return BalanceSource.MANUAL_ENTRY
    if account.type is AccountType.WALLET:
        return BalanceSource.CHAIN_RPC
    return BalanceSource.LINKED_FEED


def create_app_components(
    with_audit_storage: bool = True,
) -> tuple[DashboardFlow, AccountFlow, LiabilityFlow, SettingsFlow, InMemoryAccountStorage]:
    """
    Factory function to create all application components.

    Storage starts empty; seed it with load_demo_data().

    Args:
        with_audit_storage: Keep audit events in memory as well as in the
                    structured log. Set to False for log-only auditing.

    Returns:
        (dashboard_flow, account_flow, liability_flow, settings_flow, storage)
    """
    storage = InMemoryAccountStorage()
    audit_logger = AuditLogger(InMemoryAuditStorage() if with_audit_storage else None)

    dashboard_flow = DashboardFlow(
        storage=storage,
        audit_logger=audit_logger,
    )
    account_flow = AccountFlow(
        storage=storage,
        audit_logger=audit_logger,
    )
    liability_flow = LiabilityFlow(
        storage=storage,
        audit_logger=audit_logger,
    )
    settings_flow = SettingsFlow(
        storage=InMemoryPreferenceStorage(),
        audit_logger=audit_logger,
    )

    return dashboard_flow, account_flow, liability_flow, settings_flow, storage


async def create_demo_components(
    now: Optional[datetime] = None,
    with_audit_storage: bool = True,
) -> tuple[DashboardFlow, AccountFlow, LiabilityFlow, SettingsFlow, InMemoryAccountStorage]:
    """
    Components over storage seeded with the demo dataset as of `now`.

    Demo balances are dated from this clock; build a fresh set when the
    date moves on.
    """
    components = create_app_components(with_audit_storage=with_audit_storage)
    await load_demo_data(
        components[-1],
        now=now or utc_now(),
        user_id=get_settings().app.demo_user_id,
    )
    return components
