"""
Report Service

The report catalog and the renderers behind it. Each report comes in
CSV (a flat table) or JSON (the same rows as objects).

- net-worth-summary: totals plus the asset and liability breakdowns
- account-details: one row per account with its current balance
- balance-history: the net worth history, one row per point
"""

import json
from datetime import datetime
from typing import Union

import pandas as pd

from networth_tracker.errors import UnknownExportFormatError
from networth_tracker.models.account import AccountListItem
from networth_tracker.models.net_worth import (
    AssetBreakdown,
    ExportFormat,
    HistoryPoint,
    LiabilityBreakdown,
    NetWorthSummary,
    ReportDefinition,
    ReportType,
)
from networth_tracker.services.export import history_frame


REPORT_CATALOG = (
    ReportDefinition(
        id=ReportType.NET_WORTH_SUMMARY,
        name="Net Worth Summary",
        description="Current net worth with asset and liability breakdowns",
        formats=[ExportFormat.CSV, ExportFormat.JSON],
    ),
    ReportDefinition(
        id=ReportType.ACCOUNT_DETAILS,
        name="Account Details",
        description="Every account with its current balance",
        formats=[ExportFormat.CSV, ExportFormat.JSON],
    ),
    ReportDefinition(
        id=ReportType.BALANCE_HISTORY,
        name="Balance History",
        description="Net worth, assets and liabilities over time",
        formats=[ExportFormat.CSV, ExportFormat.JSON],
    ),
)

ACCOUNT_COLUMNS = [
    "Name", "Institution", "Type", "Subtype", "Category",
    "Balance", "Manual", "Active", "Last Updated",
]

SUMMARY_COLUMNS = ["Section", "Item", "Amount"]


def report_catalog() -> list[ReportDefinition]:
    return list(REPORT_CATALOG)


def report_definition(report_type: Union[ReportType, str]) -> ReportDefinition:
    """
    Catalog entry for a report.

    Raises:
        UnknownReportError: not a report in the catalog
    """
    report_type = ReportType.parse(report_type)
    return next(entry for entry in REPORT_CATALOG if entry.id is report_type)


def resolve_format(
    definition: ReportDefinition,
    export_format: Union[ExportFormat, str],
) -> ExportFormat:
    """
    Parse a format and check the report offers it.

    Raises:
        UnknownExportFormatError: the report is not available in that format
    """
    offered = [f.value for f in definition.formats]
    try:
        export_format = ExportFormat.parse(export_format)
    except UnknownExportFormatError:
        raise UnknownExportFormatError(export_format, offered) from None
    if export_format not in definition.formats:
        raise UnknownExportFormatError(export_format.value, offered)
    return export_format


def summary_frame(
    summary: NetWorthSummary,
    assets: AssetBreakdown,
    liabilities: LiabilityBreakdown,
) -> pd.DataFrame:
    rows = [
        {"Section": "Totals", "Item": "Net Worth", "Amount": summary.current_net_worth},
        {"Section": "Totals", "Item": "Total Assets", "Amount": summary.total_assets},
        {"Section": "Totals", "Item": "Total Liabilities", "Amount": summary.total_liabilities},
    ]
    rows += [
        {"Section": "Assets", "Item": name, "Amount": amount}
        for name, amount in assets.as_dict().items()
    ]
    rows += [
        {"Section": "Liabilities", "Item": name, "Amount": amount}
        for name, amount in liabilities.as_dict().items()
    ]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def accounts_frame(accounts: list[AccountListItem]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Name": item.name,
                "Institution": item.institution_name or "",
                "Type": item.type.value,
                "Subtype": item.subtype,
                "Category": item.category.value,
                "Balance": item.balance,
                "Manual": item.is_manual,
                "Active": item.is_active,
                "Last Updated": item.last_updated.isoformat(),
            }
            for item in accounts
        ],
        columns=ACCOUNT_COLUMNS,
    )


def render_report(
    report_type: ReportType,
    export_format: ExportFormat,
    summary: NetWorthSummary,
    assets: AssetBreakdown,
    liabilities: LiabilityBreakdown,
    accounts: list[AccountListItem],
    history: list[HistoryPoint],
) -> tuple[str, int]:
    """
    Render a report.

    Returns:
        (content, row_count)
    """
    if report_type is ReportType.NET_WORTH_SUMMARY:
        if export_format is ExportFormat.JSON:
            payload = {
                "summary": summary.model_dump(mode="json"),
                "assets": assets.model_dump(mode="json"),
                "liabilities": liabilities.model_dump(mode="json"),
            }
            return json.dumps(payload, indent=2), 1
        frame = summary_frame(summary, assets, liabilities)
    elif report_type is ReportType.ACCOUNT_DETAILS:
        if export_format is ExportFormat.JSON:
            rows = [item.model_dump(mode="json") for item in accounts]
            return json.dumps(rows, indent=2), len(rows)
        frame = accounts_frame(accounts)
    else:
        if export_format is ExportFormat.JSON:
            rows = [point.model_dump(mode="json") for point in history]
            return json.dumps(rows, indent=2), len(rows)
        frame = history_frame(history)
    return frame.to_csv(index=False), len(frame)


def report_filename(
    report_type: ReportType,
    export_format: ExportFormat,
    generated_at: datetime,
) -> str:
    return f"{report_type.value}-{generated_at:%Y-%m-%d}.{export_format.value}"
