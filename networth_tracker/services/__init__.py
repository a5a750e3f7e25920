"""Services package."""

from networth_tracker.services.export import (
    export_dataset,
    export_filename,
    history_frame,
    history_to_csv,
)
from networth_tracker.services.reports import (
    render_report,
    report_catalog,
    report_definition,
)
from networth_tracker.services.storage import (
    AccountStorageInterface,
    AuditStorageInterface,
    DuplicateError,
    InMemoryAccountStorage,
    InMemoryAuditStorage,
    NotFoundError,
    StorageError,
    load_demo_data,
)

__all__ = [
    # Export
    "export_dataset",
    "export_filename",
    "history_frame",
    "history_to_csv",
    # Reports
    "render_report",
    "report_catalog",
    "report_definition",
    # Storage services
    "AccountStorageInterface",
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryAccountStorage",
    "InMemoryAuditStorage",
    "NotFoundError",
    "StorageError",
    "load_demo_data",
]
