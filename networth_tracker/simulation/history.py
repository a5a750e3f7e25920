"""
Historical Series Simulator

Produces a plausible net worth history that ends exactly on today's real
totals. Nothing is stored: each sample reseeds a SeededRandom from its own
date, so the same inputs always regenerate the same series.

Shape of each sample:
    trend     compound growth from a back-computed starting value
    seasonal  sine of the day of year
    cycle     slower sine across the whole series
    shock     normal noise scaled to the sampling interval

Monthly series also let liabilities drift down toward the target and add a
linear contribution accrual to assets that shrinks to zero at the final
sample. The final sample is always the exact targets on the exact end date.
"""

import math
from datetime import date, timedelta
from decimal import Decimal
from typing import Union

from networth_tracker.errors import InvalidDateRangeError, InvalidTargetError
from networth_tracker.models.net_worth import Granularity, HistoryPoint
from networth_tracker.simulation.constants import (
    CURRENCY_PRECISION,
    DAYS_PER_YEAR,
    LIABILITY_JITTER_STD_DEV,
)
from networth_tracker.simulation.seeded_random import SeededRandom


Amount = Union[float, int, Decimal]


def _clamp(value: float, bound: float) -> float:
    return max(-bound, min(bound, value))


class HistorySimulator:
    """
    Deterministic net worth history generator.

    Tuning comes from SimulationSettings; pass an instance to override the
    environment (tests do this).
    """

    def __init__(self, settings=None):
        if settings is None:
            # config.settings imports the simulation constants
            from networth_tracker.config.settings import get_settings
            settings = get_settings().simulation
        self._settings = settings

    @property
    def settings(self):
        return self._settings

    def generate(
        self,
        start: date,
        end: date,
        granularity: Union[Granularity, str],
        target_net_worth: Amount,
        target_liabilities: Amount = 0,
    ) -> list[HistoryPoint]:
        """
        Generate a chronological series from start to end.

        Args:
            start: First sample date
            end: Last sample date, always present in the output
            granularity: Sampling interval (daily, weekly, monthly, quarterly)
            target_net_worth: Net worth of the final sample
            target_liabilities: Liabilities of the final sample

        Returns:
            floor(days / interval) + 1 points, the last equal to the targets

        Raises:
            UnknownGranularityError: granularity is not supported
            InvalidDateRangeError: end is before start
            InvalidTargetError: target liabilities or assets are negative
        """
        granularity = Granularity.parse(granularity)
        if end < start:
            raise InvalidDateRangeError(start, end)

        target_nw = float(target_net_worth)
        target_liab = float(target_liabilities)
        if target_liab < 0:
            raise InvalidTargetError(
                f"Target liabilities cannot be negative: {target_liab}"
            )
        target_assets = target_nw + target_liab
        if target_assets < 0:
            raise InvalidTargetError(
                f"Target net worth {target_nw} with liabilities {target_liab} "
                f"implies negative assets"
            )

        final_point = HistoryPoint(
            date=end,
            net_worth=target_nw,
            total_assets=target_assets,
            total_liabilities=target_liab,
        )

        days = (end - start).days
        interval = granularity.interval_days
        count = days // interval
        if count == 0:
            return [final_point]

        s = self._settings
        years = days / DAYS_PER_YEAR
        start_net_worth = target_nw / (1 + s.annual_growth_rate) ** years
        step_volatility = s.annual_volatility * math.sqrt(interval / DAYS_PER_YEAR)
        is_monthly = granularity is Granularity.MONTHLY

        points = []
        for i in range(count):
            day = start + timedelta(days=i * interval)
            progress = i / count
            rng = SeededRandom.for_date(day)

            trend = start_net_worth * (1 + s.annual_growth_rate) ** (years * progress)
            scale = abs(trend)
            day_of_year = day.timetuple().tm_yday
            seasonal = math.sin(2 * math.pi * day_of_year / DAYS_PER_YEAR) * s.seasonal_amplitude
            cycle = (
                math.sin(2 * math.pi * progress * s.economic_cycle_frequency)
                * s.economic_cycle_amplitude
            )
            shock = rng.normal(0.0, step_volatility)
            net_worth = trend + (seasonal + cycle + shock) * scale

            remaining = count - i
            if is_monthly:
                jitter = _clamp(
                    rng.normal(0.0, LIABILITY_JITTER_STD_DEV),
                    s.liability_jitter_band,
                )
                liabilities = (
                    target_liab * (1 + s.liability_decay) ** remaining * (1 + jitter)
                )
                accrual = s.monthly_contribution_rate * target_assets * remaining
            else:
                liabilities = target_liab
                accrual = 0.0

            assets = round(max(0.0, net_worth + liabilities + accrual), CURRENCY_PRECISION)
            liabilities = round(liabilities, CURRENCY_PRECISION)
            points.append(HistoryPoint(
                date=day,
                net_worth=round(assets - liabilities, CURRENCY_PRECISION),
                total_assets=assets,
                total_liabilities=liabilities,
            ))

        points.append(final_point)
        return points


def generate_history(
    start: date,
    end: date,
    granularity: Union[Granularity, str],
    target_net_worth: Amount,
    target_liabilities: Amount = 0,
    settings=None,
) -> list[HistoryPoint]:
    """Generate a history series with a one-off simulator."""
    return HistorySimulator(settings).generate(
        start, end, granularity, target_net_worth, target_liabilities
    )

