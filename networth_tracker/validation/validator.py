"""
Two-Stage Dataset Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Duplicate account IDs
- Balances pointing at unknown accounts
- Linked/manual exclusivity
- Currency mismatch

STAGE 2 - INTEGRITY VALIDATION:
- More than one current balance per account
- Negative asset balances
- Active accounts without a current balance
- Credit balances above their limit

Stage 2 only runs when stage 1 passes: integrity checks assume every
balance has an account.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for human review.
"""

from collections import Counter
from collections.abc import Iterable
from decimal import Decimal
from typing import Optional

from networth_tracker.aggregation import ASSET_TYPES
from networth_tracker.models.account import (
    Account,
    AccountType,
    Balance,
    ValidationIssue,
    ValidationResult,
)
from networth_tracker.models.net_worth import (
    AssetBreakdown,
    HistoryPoint,
    LiabilityBreakdown,
    NetWorthTotals,
)


class DatasetValidator:
    """
    Validates a set of accounts and balances through a two-stage pipeline.

    Stage 1: Schema validation (references and per-record shape)
    Stage 2: Integrity validation (relationships between records)
    """

    def __init__(self, currency: Optional[str] = None):
        """
        Initialize validator.

        Args:
            currency: Expected account currency. Defaults to AppSettings.currency.
        """
        if currency is None:
            from networth_tracker.config import get_settings
            currency = get_settings().app.currency
        self._currency = currency

    def _validate_schema(
        self,
        accounts: list[Account],
        balances: list[Balance],
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        counts = Counter(account.id for account in accounts)
        for account_id, count in counts.items():
            if count > 1:
                issues.append(ValidationIssue(
                    field="account.id",
                    issue_type="duplicate_account",
                    message=f"Account ID {account_id} appears {count} times",
                    severity="error",
                    entity_id=account_id,
                    suggested_fix="Remove or re-key the duplicate accounts",
                ))

        for account in accounts:
            if account.is_manual == bool(account.linked_item_id):
                issues.append(ValidationIssue(
                    field="account.linked_item_id",
                    issue_type="link_state",
                    message=f"Account '{account.name}' must be either linked or manual",
                    severity="error",
                    entity_id=account.id,
                ))
            if account.currency != self._currency:
                issues.append(ValidationIssue(
                    field="account.currency",
                    issue_type="currency_mismatch",
                    message=(
                        f"Account '{account.name}' is held in {account.currency}, "
                        f"expected {self._currency}"
                    ),
                    severity="error",
                    entity_id=account.id,
                ))

        known = set(counts)
        for balance in balances:
            if balance.account_id not in known:
                issues.append(ValidationIssue(
                    field="balance.account_id",
                    issue_type="orphan_balance",
                    message=(
                        f"Balance {balance.id} references unknown account "
                        f"{balance.account_id}"
                    ),
                    severity="error",
                    entity_id=balance.id,
                    suggested_fix="Delete the balance or restore its account",
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_integrity(
        self,
        accounts: list[Account],
        balances: list[Balance],
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Integrity validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []
        by_id = {account.id: account for account in accounts}

        current: dict[str, list[Balance]] = {}
        for balance in balances:
            if balance.is_current:
                current.setdefault(balance.account_id, []).append(balance)

        for account_id, entries in current.items():
            if len(entries) > 1:
                issues.append(ValidationIssue(
                    field="balance.is_current",
                    issue_type="multiple_current",
                    message=(
                        f"Account '{by_id[account_id].name}' has "
                        f"{len(entries)} current balances"
                    ),
                    severity="error",
                    entity_id=account_id,
                    suggested_fix="Record the latest balance again to supersede the others",
                ))

        for account_id, entries in current.items():
            account = by_id[account_id]
            for balance in entries:
                if account.type in ASSET_TYPES and balance.balance < 0:
                    issues.append(ValidationIssue(
                        field="balance.balance",
                        issue_type="negative_asset",
                        message=(
                            f"Asset account '{account.name}' has a negative "
                            f"balance (${balance.balance:,.2f})"
                        ),
                        severity="warning",
                        entity_id=balance.id,
                        suggested_fix="Please verify this balance is correct",
                    ))
                if (
                    account.type is AccountType.CREDIT
                    and balance.limit is not None
                    and balance.balance > balance.limit
                ):
                    issues.append(ValidationIssue(
                        field="balance.limit",
                        issue_type="over_limit",
                        message=(
                            f"'{account.name}' balance (${balance.balance:,.2f}) "
                            f"exceeds its limit (${balance.limit:,.2f})"
                        ),
                        severity="warning",
                        entity_id=balance.id,
                    ))

        for account in accounts:
            if account.is_active and account.id not in current:
                issues.append(ValidationIssue(
                    field="balance",
                    issue_type="missing_current",
                    message=f"Active account '{account.name}' has no current balance",
                    severity="info",
                    entity_id=account.id,
                    suggested_fix="It counts as zero until a balance is recorded",
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(
        self,
        accounts: Iterable[Account],
        balances: Iterable[Balance],
    ) -> ValidationResult:
        """
        Run full two-stage validation pipeline.

        Returns:
            ValidationResult with all issues found
        """
        accounts = list(accounts)
        balances = list(balances)
        all_issues = []

        schema_valid, schema_issues = self._validate_schema(accounts, balances)
        all_issues.extend(schema_issues)

        # Only run stage 2 if stage 1 passes
        integrity_valid = False
        if schema_valid:
            integrity_valid, integrity_issues = self._validate_integrity(accounts, balances)
            all_issues.extend(integrity_issues)

        return ValidationResult(
            schema_valid=schema_valid,
            integrity_valid=integrity_valid,
            is_valid=schema_valid and integrity_valid,
            issues=all_issues,
            warnings=[i.message for i in all_issues if i.severity == "warning"],
        )


def check_consistency(
    totals: NetWorthTotals,
    asset_breakdown: AssetBreakdown,
    liability_breakdown: LiabilityBreakdown,
    history: Optional[list[HistoryPoint]] = None,
    tolerance: float = 1.0,
) -> ValidationResult:
    """
    Check that breakdowns and history agree with the live totals.

    - Asset breakdown total equals total assets
    - Liability breakdown total equals total liabilities
    - The last history point equals the live totals
    """
    issues = []
    limit = Decimal(str(tolerance))

    def compare(field: str, label: str, expected, actual) -> None:
        drift = abs(Decimal(str(expected)) - Decimal(str(actual)))
        if drift > limit:
            issues.append(ValidationIssue(
                field=field,
                issue_type="drift",
                message=f"{label} is off by ${drift:,.2f} (expected {expected}, got {actual})",
                severity="error",
            ))

    compare("asset_breakdown", "Asset breakdown", totals.total_assets, asset_breakdown.total)
    compare(
        "liability_breakdown",
        "Liability breakdown",
        totals.total_liabilities,
        liability_breakdown.total,
    )

    if history:
        last = history[-1]
        compare("history.total_assets", "Latest history assets",
                totals.total_assets, last.total_assets)
        compare("history.total_liabilities", "Latest history liabilities",
                totals.total_liabilities, last.total_liabilities)
        compare("history.net_worth", "Latest history net worth",
                totals.net_worth, last.net_worth)

    is_valid = not issues
    return ValidationResult(
        schema_valid=True,
        integrity_valid=is_valid,
        is_valid=is_valid,
        issues=issues,
    )


def get_user_friendly_summary(result: ValidationResult) -> str:
    """
    Generate a user-friendly summary of validation results.

    This is what the Settings page shows.
    """
    if result.is_valid and not result.warnings:
        return "✅ All checks passed! Your accounts and balances are consistent."

    lines = []

    if result.has_errors:
        lines.append(f"❌ Found {result.error_count} problem(s) with your data:")
        for issue in result.issues:
            if issue.severity == "error":
                lines.append(f"   • {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     💡 {issue.suggested_fix}")

    if result.warnings:
        lines.append("")
        lines.append("⚠️ Please verify the following:")
        for warning in result.warnings:
            lines.append(f"   • {warning}")

    notes = [issue.message for issue in result.issues if issue.severity == "info"]
    if notes:
        lines.append("")
        lines.append("ℹ️ For your information:")
        for note in notes:
            lines.append(f"   • {note}")

    return "\n".join(lines).strip()
