"""Tests for the in-memory storage and demo data loader."""

import asyncio
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from networth_tracker.models.account import (
    Account,
    AccountCategory,
    AccountType,
    Balance,
    BalanceSource,
)
from networth_tracker.models.audit import AuditEventBuilder
from networth_tracker.models.preferences import UserPreferences
from networth_tracker.services.storage import (
    DEMO_USER_ID,
    DuplicateError,
    InMemoryAccountStorage,
    InMemoryAuditStorage,
    InMemoryPreferenceStorage,
    NotFoundError,
    load_demo_data,
)


NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_account(account_id="acc-a", account_type=AccountType.DEPOSITORY, **kwargs):
    fields = dict(
        id=account_id,
        user_id="user-1",
        linked_item_id="item-1",
        name="Checking",
        type=account_type,
        subtype="checking",
        category=AccountCategory.CASH,
    )
    fields.update(kwargs)
    return Account(**fields)


def make_balance(balance_id, account_id="acc-a", amount="100", is_current=True):
    return Balance(
        id=balance_id,
        account_id=account_id,
        balance=Decimal(amount),
        balance_date=date(2024, 6, 15),
        is_current=is_current,
        source=BalanceSource.LINKED_FEED,
    )


@pytest.fixture
def storage():
    return InMemoryAccountStorage()


class TestAccountCrud:
    """Tests for account storage."""

    def test_save_and_get(self, storage):
        """Test a saved account can be fetched back."""
        account = make_account()
        asyncio.run(storage.save_account(account))
        assert asyncio.run(storage.get_account("acc-a")) == account

    def test_get_missing_returns_none(self, storage):
        """Test unknown ids return None."""
        assert asyncio.run(storage.get_account("nope")) is None

    def test_duplicate_account_rejected(self, storage):
        """Test saving the same id twice raises."""
        asyncio.run(storage.save_account(make_account()))
        with pytest.raises(DuplicateError):
            asyncio.run(storage.save_account(make_account()))

    def test_list_filters(self, storage):
        """Test type, category, activity and owner filters."""
        async def run():
            await storage.save_account(make_account("a"))
            await storage.save_account(make_account(
                "b", AccountType.CREDIT, subtype="credit_card", category=AccountCategory.OTHER,
            ))
            await storage.save_account(make_account("c", is_active=False))
            await storage.save_account(make_account("d", user_id="user-2"))
            return (
                await storage.list_accounts(),
                await storage.list_accounts(account_type=AccountType.CREDIT),
                await storage.list_accounts(category=AccountCategory.CASH),
                await storage.list_accounts(is_active=False),
                await storage.list_accounts(user_id="user-2"),
            )

        everything, credit, cash, inactive, other_user = asyncio.run(run())
        assert [a.id for a in everything] == ["a", "b", "c", "d"]
        assert [a.id for a in credit] == ["b"]
        assert [a.id for a in cash] == ["a", "c", "d"]
        assert [a.id for a in inactive] == ["c"]
        assert [a.id for a in other_user] == ["d"]

    def test_update_account(self, storage):
        """Test updates replace the stored account."""
        asyncio.run(storage.save_account(make_account()))
        renamed = make_account(name="Main Checking")
        asyncio.run(storage.update_account(renamed))
        assert asyncio.run(storage.get_account("acc-a")).name == "Main Checking"

    def test_update_missing_raises(self, storage):
        """Test updating an unknown account raises."""
        with pytest.raises(NotFoundError):
            asyncio.run(storage.update_account(make_account()))

    def test_delete_removes_balances(self, storage):
        """Test deleting an account removes its balances too."""
        async def run():
            await storage.save_account(make_account("a"))
            await storage.save_account(make_account("b"))
            await storage.record_balance(make_balance("a-1", "a", is_current=False))
            await storage.record_balance(make_balance("a-2", "a"))
            await storage.record_balance(make_balance("b-1", "b"))
            removed = await storage.delete_account("a")
            return removed, await storage.list_balances()

        removed, remaining = asyncio.run(run())
        assert removed == 2
        assert [b.id for b in remaining] == ["b-1"]

    def test_delete_missing_raises(self, storage):
        """Test deleting an unknown account raises."""
        with pytest.raises(NotFoundError):
            asyncio.run(storage.delete_account("nope"))


class TestBalances:
    """Tests for balance recording and supersede."""

    def test_new_current_supersedes_old(self, storage):
        """Test recording a current balance demotes the previous one."""
        async def run():
            await storage.save_account(make_account())
            first = await storage.record_balance(make_balance("b-1", amount="100"))
            second = await storage.record_balance(make_balance("b-2", amount="150"))
            return first, second, await storage.list_balances(current_only=True)

        first, second, current = asyncio.run(run())
        assert first is None
        assert second.id == "b-1"
        assert second.is_current is False
        assert [b.id for b in current] == ["b-2"]

    def test_historical_balance_keeps_current(self, storage):
        """Test non-current balances don't touch the current one."""
        async def run():
            await storage.save_account(make_account())
            await storage.record_balance(make_balance("b-1"))
            superseded = await storage.record_balance(make_balance("b-0", is_current=False))
            return superseded, await storage.get_current_balance("acc-a")

        superseded, current = asyncio.run(run())
        assert superseded is None
        assert current.id == "b-1"

    def test_at_most_one_current(self, storage):
        """Test repeated updates leave exactly one current balance."""
        async def run():
            await storage.save_account(make_account())
            for i in range(5):
                await storage.record_balance(make_balance(f"b-{i}", amount=str(100 + i)))
            return await storage.list_balances("acc-a")

        balances = asyncio.run(run())
        assert len(balances) == 5
        assert sum(1 for b in balances if b.is_current) == 1

    def test_concurrent_updates_keep_one_current(self, storage):
        """Test concurrent current balances still leave exactly one current."""
        async def run():
            await storage.save_account(make_account())
            await asyncio.gather(*(
                storage.record_balance(make_balance(f"b-{i}", amount=str(i)))
                for i in range(10)
            ))
            return await storage.list_balances("acc-a", current_only=True)

        assert len(asyncio.run(run())) == 1

    def test_balance_for_missing_account(self, storage):
        """Test balances need an existing account."""
        with pytest.raises(NotFoundError):
            asyncio.run(storage.record_balance(make_balance("b-1", "ghost")))

    def test_duplicate_balance_rejected(self, storage):
        """Test balance ids are unique."""
        async def run():
            await storage.save_account(make_account())
            await storage.record_balance(make_balance("b-1"))
            await storage.record_balance(make_balance("b-1", is_current=False))

        with pytest.raises(DuplicateError):
            asyncio.run(run())

    def test_no_current_balance(self, storage):
        """Test accounts without balances have no current balance."""
        asyncio.run(storage.save_account(make_account()))
        assert asyncio.run(storage.get_current_balance("acc-a")) is None


class TestAuditStorage:
    """Tests for the append-only audit log."""

    def test_queries(self):
        """Test lookups by correlation id, entity and recency."""
        audit = InMemoryAuditStorage()
        correlation_id = uuid4()

        async def run():
            await audit.append_event(AuditEventBuilder.account_created(
                "acc-a", "Checking", "depository", correlation_id,
            ))
            await audit.append_event(AuditEventBuilder.balance_recorded(
                "b-1", "acc-a", "100.00", "plaid", correlation_id,
            ))
            await audit.append_event(AuditEventBuilder.account_deleted("acc-b", 3))
            return (
                await audit.get_events_by_correlation_id(correlation_id),
                await audit.get_events_by_entity("account", "acc-a"),
                await audit.get_recent_events(limit=2),
            )

        correlated, by_entity, recent = asyncio.run(run())
        assert len(correlated) == 2
        assert [e.entity_id for e in by_entity] == ["acc-a"]
        assert [e.entity_id for e in recent] == ["acc-b", "b-1"]


class TestDemoData:
    """Tests for the demo dataset loader."""

    def test_load_demo_data(self, storage):
        """Test the demo loader stores eleven accounts with current balances."""
        async def run():
            count = await load_demo_data(storage, now=NOW)
            return (
                count,
                await storage.list_accounts(user_id=DEMO_USER_ID),
                await storage.list_balances(current_only=True),
                await storage.list_balances(),
            )

        count, accounts, current, everything = asyncio.run(run())
        assert count == 11
        assert len(accounts) == 11
        assert len(current) == 11
        assert len(everything) == 22

    def test_demo_ids(self, storage):
        """Test demo balances use predictable ids."""
        asyncio.run(load_demo_data(storage, now=NOW))
        current = asyncio.run(storage.get_current_balance("acc-5"))
        assert current.id == "bal-acc-5-current"
        assert current.balance == Decimal("2500")
        assert current.limit == Decimal("15000")

    def test_available_balance_only_on_depository(self, storage):
        """Test available balance is set for depository accounts and nothing else."""
        async def run():
            await load_demo_data(storage, now=NOW)
            accounts = {a.id: a for a in await storage.list_accounts()}
            return accounts, await storage.list_balances()

        accounts, balances = asyncio.run(run())
        for balance in balances:
            if accounts[balance.account_id].type is AccountType.DEPOSITORY:
                assert balance.available_balance == balance.balance
            else:
                assert balance.available_balance is None
        checking = next(b for b in balances if b.id == "bal-acc-1-current")
        assert checking.available_balance == Decimal("12500")


class TestPreferenceStorage:
    """Tests for the in-memory preference storage."""

    def test_defaults_until_saved(self):
        """Test unknown users get default preferences and notifications."""
        storage = InMemoryPreferenceStorage()
        preferences = asyncio.run(storage.get_preferences("user-1"))
        notifications = asyncio.run(storage.get_notifications("user-1"))
        assert preferences.currency == "USD"
        assert preferences.theme == "system"
        assert notifications.email.enabled is True
        assert notifications.sms.security_alerts is False

    def test_saved_per_user(self):
        """Test saved preferences belong to one user only."""
        storage = InMemoryPreferenceStorage()
        asyncio.run(storage.save_preferences("user-1", UserPreferences(theme="dark")))
        assert asyncio.run(storage.get_preferences("user-1")).theme == "dark"
        assert asyncio.run(storage.get_preferences("user-2")).theme == "system"
