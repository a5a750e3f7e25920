"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the demo data in memory today
2. Swap in a real database later
3. Keep flows decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
Just the operations we need for accounts and balances.
"""

from abc import ABC, abstractmethod
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


class AccountStorageInterface(ABC):
    """
    Abstract interface for account and balance storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def save_account(self, account: Account) -> bool:
        """
        Save a new account.

        Raises:
            DuplicateError: If an account with the same ID exists
        """
        pass

    @abstractmethod
    async def get_account(self, account_id: str) -> Optional[Account]:
        """Retrieve an account by ID, or None if it doesn't exist."""
        pass

    @abstractmethod
    async def list_accounts(
        self,
        user_id: Optional[str] = None,
        account_type: Optional[AccountType] = None,
        category: Optional[AccountCategory] = None,
        is_active: Optional[bool] = None,
    ) -> list[Account]:
        """
        List accounts with optional filters.

        Args:
            user_id: Only accounts owned by this user
            account_type: Only accounts of this type
            category: Only accounts in this category
            is_active: Only active (True) or inactive (False) accounts

        Returns:
            Matching accounts in insertion order
        """
        pass

    @abstractmethod
    async def update_account(self, account: Account) -> bool:
        """
        Replace an existing account.

        Raises:
            NotFoundError: If the account doesn't exist
        """
        pass

    @abstractmethod
    async def delete_account(self, account_id: str) -> int:
        """
        Delete an account and all of its balances.

        Returns:
            Number of balances removed with it

        Raises:
            NotFoundError: If the account doesn't exist
        """
        pass

    @abstractmethod
    async def list_balances(
        self,
        account_id: Optional[str] = None,
        current_only: bool = False,
    ) -> list[Balance]:
        """
        List balances, optionally for one account or current ones only.
        """
        pass

    @abstractmethod
    async def get_current_balance(self, account_id: str) -> Optional[Balance]:
        """The account's current balance, or None if it has none."""
        pass

    @abstractmethod
    async def record_balance(self, balance: Balance) -> Optional[Balance]:
        """
        Store a balance snapshot.

        When the balance is current, the account's previous current balance
        is demoted in the same step.

        Returns:
            The balance that was superseded, if any

        Raises:
            NotFoundError: If the account doesn't exist
            DuplicateError: If a balance with the same ID exists
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event to the log."""
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """All events for a correlation ID, in chronological order."""
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """All events for a specific entity, in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """The most recent audit events (newest first)."""
        pass


class PreferenceStorageInterface(ABC):
    """
    Abstract interface for per-user preferences and notification settings.

    Users without a stored record get the defaults.
    """

    @abstractmethod
    async def get_preferences(self, user_id: str) -> UserPreferences:
        pass

    @abstractmethod
    async def save_preferences(self, user_id: str, preferences: UserPreferences) -> bool:
        pass

    @abstractmethod
    async def get_notifications(self, user_id: str) -> NotificationSettings:
        pass

    @abstractmethod
    async def save_notifications(self, user_id: str, notifications: NotificationSettings) -> bool:
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
