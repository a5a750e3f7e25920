"""
Trend Analysis and Projections

Statistics over a net worth history, and compounding projections from the
current net worth. Pure functions; the flows decide which history to feed.
"""

import statistics
from datetime import date, timedelta
from typing import Sequence

from networth_tracker.models.net_worth import (
    HistoryPoint,
    NetWorthProjections,
    ProjectionPoint,
    TrendAnalysis,
)


# Standard deviation of period-over-period change, in percent
LOW_VOLATILITY_PCT = 2.0
HIGH_VOLATILITY_PCT = 5.0

# Average change below this (in percent) counts as flat
FLAT_TREND_PCT = 0.1

# Label -> number of periods ahead
PROJECTION_HORIZONS = {
    "six_months": 6,
    "one_year": 12,
    "five_years": 60,
}


def period_changes(history: Sequence[HistoryPoint]) -> list[float]:
    """Percent change between consecutive points, skipping zero bases."""
    changes = []
    for previous, current in zip(history, history[1:]):
        if previous.net_worth != 0:
            changes.append(
                (current.net_worth - previous.net_worth) / abs(previous.net_worth) * 100
            )
    return changes


def volatility_label(volatility_pct: float) -> str:
    if volatility_pct < LOW_VOLATILITY_PCT:
        return "low"
    if volatility_pct < HIGH_VOLATILITY_PCT:
        return "medium"
    return "high"


def analyze_trends(history: Sequence[HistoryPoint]) -> TrendAnalysis:
    """
    Growth statistics over a monthly history.

    A history with fewer than two points reports zero growth, low
    volatility and a flat trend.
    """
    changes = period_changes(history)
    average = statistics.fmean(changes) if changes else 0.0
    spread = statistics.pstdev(changes) if len(changes) > 1 else 0.0

    first = history[0].net_worth if history else 0.0
    last = history[-1].net_worth if history else 0.0
    period_growth = (last - first) / abs(first) * 100 if first else 0.0

    if average > FLAT_TREND_PCT:
        trend = "upward"
    elif average < -FLAT_TREND_PCT:
        trend = "downward"
    else:
        trend = "flat"

    projected = {
        label: round(last * (1 + average / 100) ** periods, 2)
        for label, periods in PROJECTION_HORIZONS.items()
    }

    return TrendAnalysis(
        monthly_growth_rate=round(average, 2),
        period_growth=round(period_growth, 2),
        volatility=volatility_label(spread),
        volatility_pct=round(spread, 2),
        trend=trend,
        projected_net_worth=projected,
    )


def project_net_worth(
    current_net_worth: float,
    today: date,
    conservative_rate: float,
    moderate_rate: float,
    aggressive_rate: float,
    horizons_years: Sequence[int] = (1, 2),
) -> NetWorthProjections:
    """Compound the current net worth at three annual rates."""

    def scenario(rate: float) -> list[ProjectionPoint]:
        return [
            ProjectionPoint(
                date=today + timedelta(days=365 * years),
                value=round(current_net_worth * (1 + rate) ** years, 2),
            )
            for years in horizons_years
        ]

    return NetWorthProjections(
        conservative=scenario(conservative_rate),
        moderate=scenario(moderate_rate),
        aggressive=scenario(aggressive_rate),
    )
