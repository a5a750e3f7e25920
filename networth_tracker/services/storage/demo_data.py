"""
Demo Data

Deterministic accounts and balances for the demo dashboard. Everything is
built relative to a supplied clock, per call, so nothing goes stale while
the process runs.

Accounts cover every asset category and liability bucket: checking,
savings, brokerage, IRA, credit card, auto loan, mortgage, home, car,
gold and an on-chain wallet.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from networth_tracker.models.account import (
    Account,
    AccountCategory,
    AccountType,
    Balance,
    BalanceSource,
    ManualAssetDetails,
    utc_now,
)
from networth_tracker.services.storage.interface import AccountStorageInterface


DEMO_USER_ID = "550e8400-e29b-41d4-a716-446655440000"

MONTH_AGO = timedelta(days=30)
YEAR_AGO = timedelta(days=365)


# (id, name, official name, institution, mask, type, subtype, category,
#  linked item, current balance, month-ago balance, credit limit)
_LINKED_ACCOUNTS = [
    ("acc-1", "Chase Checking", "Chase Total Checking", "Chase", "1234",
     AccountType.DEPOSITORY, "checking", AccountCategory.CASH,
     "item-1", "12500", "12000", None),
    ("acc-2", "Chase Savings", "Chase Premier Savings", "Chase", "5678",
     AccountType.DEPOSITORY, "savings", AccountCategory.CASH,
     "item-1", "25000", "24500", None),
    ("acc-3", "Schwab Brokerage", "Charles Schwab Brokerage Account", "Charles Schwab", "9012",
     AccountType.INVESTMENT, "brokerage", AccountCategory.INVESTMENT,
     "item-2", "85000", "82000", None),
    ("acc-4", "Vanguard IRA", "Vanguard Individual Retirement Account", "Vanguard", "3456",
     AccountType.INVESTMENT, "ira", AccountCategory.INVESTMENT,
     "item-3", "42500", "41000", None),
    ("acc-5", "Chase Sapphire", "Chase Sapphire Preferred", "Chase", "7890",
     AccountType.CREDIT, "credit_card", AccountCategory.OTHER,
     "item-1", "2500", "3000", "15000"),
    ("acc-6", "Auto Loan", "Toyota Financial Services Auto Loan", "Toyota Financial", "2468",
     AccountType.LOAN, "auto", AccountCategory.OTHER,
     "item-4", "15000", "15500", None),
    ("acc-9", "Home Mortgage", "Wells Fargo 30-Year Fixed Mortgage", "Wells Fargo", "1357",
     AccountType.LOAN, "mortgage", AccountCategory.OTHER,
     "item-5", "280000", "281200", None),
]

# (id, name, subtype, category, description, notes, current, month ago)
_MANUAL_ASSETS = [
    ("acc-7", "Home", "real_estate", AccountCategory.PROPERTY,
     "Primary residence - 3br/2ba single family home",
     "Estimated value based on recent comparable sales",
     "350000", "348000"),
    ("acc-8", "2022 Toyota Camry", "vehicle", AccountCategory.VEHICLE,
     "2022 Toyota Camry LE - 4dr sedan",
     "KBB estimated value for good condition",
     "28000", "28500"),
    ("acc-10", "Gold Coins", "gold", AccountCategory.PRECIOUS_METAL,
     "Ten 1oz American Gold Eagle coins",
     "Valued at spot price less dealer spread",
     "8500", "8200"),
]

_WALLETS = [
    ("acc-11", "Solana Wallet", "wallet-1", "sol", "4200", "3900"),
]


def build_demo_accounts(
    now: Optional[datetime] = None,
    user_id: str = DEMO_USER_ID,
) -> list[Account]:
    """Demo accounts timestamped relative to `now`."""
    now = now or utc_now()
    created = now - YEAR_AGO
    accounts = []

    for (account_id, name, official, institution, mask, account_type, subtype,
         category, item_id, _, _, _) in _LINKED_ACCOUNTS:
        accounts.append(Account(
            id=account_id,
            user_id=user_id,
            linked_item_id=item_id,
            linked_account_id=f"linked-{account_id}",
            name=name,
            official_name=official,
            institution_name=institution,
            mask=mask,
            type=account_type,
            subtype=subtype,
            category=category,
            created_at=created,
            updated_at=now,
        ))

    for account_id, name, subtype, category, description, notes, _, _ in _MANUAL_ASSETS:
        accounts.append(Account(
            id=account_id,
            user_id=user_id,
            name=name,
            institution_name="Manual Entry",
            type=AccountType.MANUAL_ASSET,
            subtype=subtype,
            category=category,
            is_manual=True,
            manual_asset_details=ManualAssetDetails(description=description, notes=notes),
            created_at=created,
            updated_at=now,
        ))

    for account_id, name, wallet_id, subtype, _, _ in _WALLETS:
        accounts.append(Account(
            id=account_id,
            user_id=user_id,
            linked_item_id=wallet_id,
            name=name,
            institution_name="Solana",
            type=AccountType.WALLET,
            subtype=subtype,
            category=AccountCategory.DIGITAL_ASSET,
            created_at=created,
            updated_at=now,
        ))

    return accounts


def build_demo_balances(now: Optional[datetime] = None) -> list[Balance]:
    """Current and month-ago balances for every demo account."""
    now = now or utc_now()
    month_ago = now - MONTH_AGO

    rows = [
        (account_id, account_type, current, previous, BalanceSource.LINKED_FEED, limit)
        for (account_id, _, _, _, _, account_type, *_, current, previous, limit) in _LINKED_ACCOUNTS
    ]
    rows += [
        (account_id, AccountType.MANUAL_ASSET, current, previous, BalanceSource.MANUAL_ENTRY, None)
        for (account_id, *_, current, previous) in _MANUAL_ASSETS
    ]
    rows += [
        (account_id, AccountType.WALLET, current, previous, BalanceSource.CHAIN_RPC, None)
        for (account_id, *_, current, previous) in _WALLETS
    ]

    balances = []
    for account_id, account_type, current, previous, source, limit in rows:
        is_depository = account_type is AccountType.DEPOSITORY
        for suffix, amount, when, is_current in (
            ("monthly", previous, month_ago, False),
            ("current", current, now, True),
        ):
            balances.append(Balance(
                id=f"bal-{account_id}-{suffix}",
                account_id=account_id,
                balance=Decimal(amount),
                available_balance=Decimal(amount) if is_depository else None,
                limit=Decimal(limit) if limit else None,
                balance_date=when.date(),
                is_current=is_current,
                source=source,
                created_at=when,
            ))
    return balances


async def load_demo_data(
    storage: AccountStorageInterface,
    now: Optional[datetime] = None,
    user_id: str = DEMO_USER_ID,
) -> int:
    """
    Populate storage with the demo dataset.

    Returns:
        Number of accounts loaded
    """
    now = now or utc_now()
    accounts = build_demo_accounts(now, user_id)
    for account in accounts:
        await storage.save_account(account)
    for balance in build_demo_balances(now):
        await storage.record_balance(balance)
    return len(accounts)
