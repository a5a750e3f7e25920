"""Totals and breakdowns computed from accounts and their balances."""

from networth_tracker.aggregation.trends import analyze_trends, project_net_worth
from networth_tracker.aggregation.schedule import build_payment_schedule
from networth_tracker.aggregation.totals import (
    ASSET_TYPES,
    LIABILITY_TYPES,
    build_summary,
    classify_account,
    compute_asset_breakdown,
    compute_current_totals,
    compute_liability_breakdown,
    compute_totals_as_of,
    current_positions,
    latest_balances_as_of,
    liability_bucket,
)

__all__ = [
    "analyze_trends",
    "project_net_worth",
    "build_payment_schedule",
    "ASSET_TYPES",
    "LIABILITY_TYPES",
    "build_summary",
    "classify_account",
    "compute_asset_breakdown",
    "compute_current_totals",
    "compute_liability_breakdown",
    "compute_totals_as_of",
    "current_positions",
    "latest_balances_as_of",
    "liability_bucket",
]
