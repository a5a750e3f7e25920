"""
Export Service

Renders dashboard data for download.

- CSV: the net worth history, one row per point
- JSON: summary, account list and history together
"""

import json
from datetime import datetime
from typing import Union

import pandas as pd

from networth_tracker.models.account import AccountListItem, utc_now
from networth_tracker.models.net_worth import (
    ExportFormat,
    HistoryPoint,
    NetWorthSummary,
)


CSV_COLUMNS = ["Date", "Net Worth", "Assets", "Liabilities"]

MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.JSON: "application/json",
}


def history_frame(history: list[HistoryPoint]) -> pd.DataFrame:
    """History as a DataFrame with the export column names."""
    return pd.DataFrame(
        [
            {
                "Date": point.date.isoformat(),
                "Net Worth": point.net_worth,
                "Assets": point.total_assets,
                "Liabilities": point.total_liabilities,
            }
            for point in history
        ],
        columns=CSV_COLUMNS,
    )


def history_to_csv(history: list[HistoryPoint]) -> str:
    return history_frame(history).to_csv(index=False)


def dataset_to_json(
    summary: NetWorthSummary,
    accounts: list[AccountListItem],
    history: list[HistoryPoint],
    exported_at: datetime,
) -> str:
    payload = {
        "exported_at": exported_at.isoformat(),
        "summary": summary.model_dump(mode="json"),
        "accounts": [item.model_dump(mode="json") for item in accounts],
        "net_worth_history": [point.model_dump(mode="json") for point in history],
    }
    return json.dumps(payload, indent=2)


def export_dataset(
    export_format: Union[ExportFormat, str],
    summary: NetWorthSummary,
    accounts: list[AccountListItem],
    history: list[HistoryPoint],
    exported_at: datetime = None,
) -> str:
    """
    Render data in the requested format.

    Raises:
        UnknownExportFormatError: format is not csv or json
    """
    export_format = ExportFormat.parse(export_format)
    if export_format is ExportFormat.CSV:
        return history_to_csv(history)
    return dataset_to_json(summary, accounts, history, exported_at or utc_now())


def export_filename(export_format: Union[ExportFormat, str], exported_at: datetime) -> str:
    export_format = ExportFormat.parse(export_format)
    return f"net-worth-{exported_at:%Y-%m-%d}.{export_format.value}"
