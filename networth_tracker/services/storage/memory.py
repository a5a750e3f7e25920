"""
In-Memory Storage

Dict-backed implementations of the storage interfaces. Used for the demo
dashboard and for tests.

Balance supersede is atomic with respect to the event loop: record_balance
never awaits between demoting the old current balance and inserting the
new one.
"""

from typing import Optional
from uuid import UUID

from networth_tracker.models.account import (
    Account,
    AccountCategory,
    AccountType,
    Balance,
)
from networth_tracker.models.audit import AuditEvent
from networth_tracker.models.preferences import NotificationSettings, UserPreferences
from networth_tracker.services.storage.interface import (
    AccountStorageInterface,
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    PreferenceStorageInterface,
)


class InMemoryAccountStorage(AccountStorageInterface):
    """Accounts and balances held in process memory."""

    def __init__(self):
        self._accounts: dict[str, Account] = {}
        self._balances: dict[str, Balance] = {}

    async def save_account(self, account: Account) -> bool:
        if account.id in self._accounts:
            raise DuplicateError(f"Account {account.id} already exists")
        self._accounts[account.id] = account
        return True

    async def get_account(self, account_id: str) -> Optional[Account]:
        return self._accounts.get(account_id)

    async def list_accounts(
        self,
        user_id: Optional[str] = None,
        account_type: Optional[AccountType] = None,
        category: Optional[AccountCategory] = None,
        is_active: Optional[bool] = None,
    ) -> list[Account]:
        accounts = list(self._accounts.values())
        if user_id is not None:
            accounts = [a for a in accounts if a.user_id == user_id]
        if account_type is not None:
            accounts = [a for a in accounts if a.type == account_type]
        if category is not None:
            accounts = [a for a in accounts if a.category == category]
        if is_active is not None:
            accounts = [a for a in accounts if a.is_active == is_active]
        return accounts

    async def update_account(self, account: Account) -> bool:
        if account.id not in self._accounts:
            raise NotFoundError(f"Account {account.id} not found")
        self._accounts[account.id] = account
        return True

    async def delete_account(self, account_id: str) -> int:
        if account_id not in self._accounts:
            raise NotFoundError(f"Account {account_id} not found")
        del self._accounts[account_id]
        owned = [b.id for b in self._balances.values() if b.account_id == account_id]
        for balance_id in owned:
            del self._balances[balance_id]
        return len(owned)

    async def list_balances(
        self,
        account_id: Optional[str] = None,
        current_only: bool = False,
    ) -> list[Balance]:
        balances = list(self._balances.values())
        if account_id is not None:
            balances = [b for b in balances if b.account_id == account_id]
        if current_only:
            balances = [b for b in balances if b.is_current]
        return balances

    async def get_current_balance(self, account_id: str) -> Optional[Balance]:
        return self._find_current(account_id)

    async def record_balance(self, balance: Balance) -> Optional[Balance]:
        if balance.account_id not in self._accounts:
            raise NotFoundError(f"Account {balance.account_id} not found")
        if balance.id in self._balances:
            raise DuplicateError(f"Balance {balance.id} already exists")

        superseded = None
        if balance.is_current:
            previous = self._find_current(balance.account_id)
            if previous is not None:
                superseded = previous.model_copy(update={"is_current": False})
                self._balances[previous.id] = superseded
        self._balances[balance.id] = balance
        return superseded

    def _find_current(self, account_id: str) -> Optional[Balance]:
        for balance in self._balances.values():
            if balance.account_id == account_id and balance.is_current:
                return balance
        return None


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log held in process memory."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]


class InMemoryPreferenceStorage(PreferenceStorageInterface):
    """Preferences keyed by user, defaults until first saved."""

    def __init__(self):
        self._preferences: dict[str, UserPreferences] = {}
        self._notifications: dict[str, NotificationSettings] = {}

    async def get_preferences(self, user_id: str) -> UserPreferences:
        return self._preferences.get(user_id) or UserPreferences()

    async def save_preferences(self, user_id: str, preferences: UserPreferences) -> bool:
        self._preferences[user_id] = preferences
        return True

    async def get_notifications(self, user_id: str) -> NotificationSettings:
        return self._notifications.get(user_id) or NotificationSettings()

    async def save_notifications(self, user_id: str, notifications: NotificationSettings) -> bool:
        self._notifications[user_id] = notifications
        return True
