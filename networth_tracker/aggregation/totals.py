"""
Net Worth Aggregation

Pure functions from (accounts, balances) to totals and breakdowns. Nothing
here caches: every call recomputes from the data it is handed.

RULES:
- Only current balances count toward "now" totals
- Account type alone decides asset vs liability
- Accounts without a current balance contribute zero
- Inactive accounts still count
- A current balance whose account is missing is an error, not a zero
"""

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional, Union

from networth_tracker.errors import OrphanBalanceError
from networth_tracker.models.account import (
    Account,
    AccountCategory,
    AccountType,
    Balance,
    utc_now,
)
from networth_tracker.models.net_worth import (
    AssetBreakdown,
    ChangeFromPrevious,
    LiabilityBreakdown,
    NetWorthSummary,
    NetWorthTotals,
)


ASSET = "asset"
LIABILITY = "liability"

ACCOUNT_SIDE: dict[AccountType, str] = {
    AccountType.DEPOSITORY: ASSET,
    AccountType.INVESTMENT: ASSET,
    AccountType.MANUAL_ASSET: ASSET,
    AccountType.WALLET: ASSET,
    AccountType.CREDIT: LIABILITY,
    AccountType.LOAN: LIABILITY,
    AccountType.MANUAL_LIABILITY: LIABILITY,
}

ASSET_TYPES = frozenset(t for t, side in ACCOUNT_SIDE.items() if side == ASSET)
LIABILITY_TYPES = frozenset(t for t, side in ACCOUNT_SIDE.items() if side == LIABILITY)

CATEGORY_FIELD: dict[AccountCategory, str] = {
    AccountCategory.CASH: "cash",
    AccountCategory.INVESTMENT: "investments",
    AccountCategory.PROPERTY: "property",
    AccountCategory.VEHICLE: "vehicles",
    AccountCategory.PRECIOUS_METAL: "precious_metals",
    AccountCategory.DIGITAL_ASSET: "digital_assets",
    AccountCategory.OTHER: "other",
}

MORTGAGE_SUBTYPE = "mortgage"


def classify_account(account_type: Union[AccountType, str]) -> str:
    """
    Return "asset" or "liability" for an account type.

    Raises:
        UnknownAccountTypeError: the string is not an account type
    """
    return ACCOUNT_SIDE[AccountType.parse(account_type)]


def liability_bucket(account: Account) -> str:
    """LiabilityBreakdown field an account's balance belongs to."""
    if account.type is AccountType.CREDIT:
        return "credit_cards"
    if account.type is AccountType.LOAN:
        if account.subtype.strip().lower() == MORTGAGE_SUBTYPE:
            return "mortgages"
        return "loans"
    if account.type is AccountType.MANUAL_LIABILITY:
        return "other"
    raise ValueError(f"{account.type.value} accounts are not liabilities")


def current_positions(
    accounts: Iterable[Account],
    balances: Iterable[Balance],
) -> list[tuple[Account, Balance]]:
    """
    Pair every current balance with its account.

    Raises:
        OrphanBalanceError: a current balance references an unknown account
    """
    by_id = {account.id: account for account in accounts}
    positions = []
    for balance in balances:
        if not balance.is_current:
            continue
        account = by_id.get(balance.account_id)
        if account is None:
            raise OrphanBalanceError(balance.id, balance.account_id)
        positions.append((account, balance))
    return positions


def _totals_from_positions(positions: Iterable[tuple[Account, Balance]]) -> NetWorthTotals:
    assets = Decimal("0")
    liabilities = Decimal("0")
    for account, balance in positions:
        if ACCOUNT_SIDE[account.type] == ASSET:
            assets += balance.balance
        else:
            liabilities += balance.balance
    return NetWorthTotals(total_assets=assets, total_liabilities=liabilities)


def compute_current_totals(
    accounts: Iterable[Account],
    balances: Iterable[Balance],
) -> NetWorthTotals:
    """Assets, liabilities and net worth from current balances."""
    return _totals_from_positions(current_positions(accounts, balances))


def compute_asset_breakdown(
    accounts: Iterable[Account],
    balances: Iterable[Balance],
) -> AssetBreakdown:
    """Current asset balances grouped by account category."""
    sums = {name: Decimal("0") for name in AssetBreakdown.model_fields}
    for account, balance in current_positions(accounts, balances):
        if account.type in ASSET_TYPES:
            sums[CATEGORY_FIELD[account.category]] += balance.balance
    return AssetBreakdown(**sums)


def compute_liability_breakdown(
    accounts: Iterable[Account],
    balances: Iterable[Balance],
) -> LiabilityBreakdown:
    """Current liability balances grouped into credit cards, mortgages, loans, other."""
    sums = {name: Decimal("0") for name in LiabilityBreakdown.model_fields}
    for account, balance in current_positions(accounts, balances):
        if account.type in LIABILITY_TYPES:
            sums[liability_bucket(account)] += balance.balance
    return LiabilityBreakdown(**sums)


def latest_balances_as_of(
    accounts: Iterable[Account],
    balances: Iterable[Balance],
    as_of: date,
) -> list[tuple[Account, Balance]]:
    """
    Most recent balance per account dated on or before as_of.

    Ties on the same date go to the current balance, then to the one
    recorded last.

    Historical balances of unknown accounts are skipped.

    Raises:
        OrphanBalanceError: a current balance in the window references an
            unknown account
    """
    by_id = {account.id: account for account in accounts}
    latest: dict[str, Balance] = {}
    for balance in balances:
        if balance.balance_date > as_of:
            continue
        if balance.account_id not in by_id:
            if balance.is_current:
                raise OrphanBalanceError(balance.id, balance.account_id)
            continue
        key = (balance.balance_date, balance.is_current, balance.created_at)
        best = latest.get(balance.account_id)
        if best is None or key > (best.balance_date, best.is_current, best.created_at):
            latest[balance.account_id] = balance
    return [(by_id[account_id], balance) for account_id, balance in latest.items()]


def compute_totals_as_of(
    accounts: Iterable[Account],
    balances: Iterable[Balance],
    as_of: date,
) -> NetWorthTotals:
    """Totals using each account's latest balance dated on or before as_of."""
    return _totals_from_positions(latest_balances_as_of(accounts, balances, as_of))


def change_period_label(window_days: int) -> str:
    if window_days == 30:
        return "last month"
    if window_days == 7:
        return "last week"
    return f"last {window_days} days"


def build_summary(
    accounts: Iterable[Account],
    balances: Iterable[Balance],
    now: Optional[datetime] = None,
    change_window_days: int = 30,
) -> NetWorthSummary:
    """
    Current net worth with the change since change_window_days ago.

    The change block is omitted when no balance is dated on or before the
    comparison date.
    """
    accounts = list(accounts)
    balances = list(balances)
    now = now or utc_now()

    positions = current_positions(accounts, balances)
    totals = _totals_from_positions(positions)

    comparison_date = now.date() - timedelta(days=change_window_days)
    previous_positions = latest_balances_as_of(accounts, balances, comparison_date)

    change = None
    if previous_positions:
        previous = _totals_from_positions(previous_positions)
        amount = totals.net_worth - previous.net_worth
        percentage = (
            float(amount / abs(previous.net_worth) * 100)
            if previous.net_worth != 0 else 0.0
        )
        change = ChangeFromPrevious(
            amount=amount,
            percentage=round(percentage, 2),
            period=change_period_label(change_window_days),
        )

    last_updated = max((balance.created_at for _, balance in positions), default=now)

    return NetWorthSummary(
        current_net_worth=totals.net_worth,
        total_assets=totals.total_assets,
        total_liabilities=totals.total_liabilities,
        last_updated=last_updated,
        change_from_previous=change,
    )
