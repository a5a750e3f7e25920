"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements an in-memory backend, but designed to be swappable.
"""

from networth_tracker.services.storage.interface import (
    AccountStorageInterface,
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    PreferenceStorageInterface,
    StorageError,
)
from networth_tracker.services.storage.memory import (
    InMemoryAccountStorage,
    InMemoryAuditStorage,
    InMemoryPreferenceStorage,
)
from networth_tracker.services.storage.demo_data import (
    DEMO_USER_ID,
    build_demo_accounts,
    build_demo_balances,
    load_demo_data,
)

__all__ = [
    # Interfaces
    "AccountStorageInterface",
    "AuditStorageInterface",
    "PreferenceStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAccountStorage",
    "InMemoryAuditStorage",
    "InMemoryPreferenceStorage",
    # Demo data
    "DEMO_USER_ID",
    "build_demo_accounts",
    "build_demo_balances",
    "load_demo_data",
]
