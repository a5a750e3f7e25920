"""Tests for the historical series simulator."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from networth_tracker.config import SimulationSettings
from networth_tracker.errors import (
    InvalidDateRangeError,
    InvalidTargetError,
    UnknownGranularityError,
)
from networth_tracker.models.net_worth import Granularity
from networth_tracker.simulation import HistorySimulator, generate_history
from networth_tracker.simulation.constants import LIABILITY_JITTER_BAND


END = date(2024, 6, 15)
YEAR_START = END - timedelta(days=365)


@pytest.fixture
def simulator():
    return HistorySimulator(SimulationSettings())


@pytest.fixture
def flat_simulator():
    """Simulator with every perturbation switched off."""
    return HistorySimulator(SimulationSettings(
        annual_growth_rate=0.0,
        annual_volatility=0.0,
        seasonal_amplitude=0.0,
        economic_cycle_amplitude=0.0,
        liability_decay=0.0,
        liability_jitter_band=0.0,
        monthly_contribution_rate=0.0,
    ))


class TestSeriesShape:
    """Tests for point count, dates and endpoints."""

    def test_zero_day_range(self, simulator):
        """Test start == end yields one point equal to the targets."""
        history = simulator.generate(END, END, "monthly", 50000, 1000)
        assert len(history) == 1
        point = history[0]
        assert point.date == END
        assert point.net_worth == 50000
        assert point.total_assets == 51000
        assert point.total_liabilities == 1000

    def test_monthly_year_point_count(self, simulator):
        """Test a 365-day monthly series has floor(365/30)+1 points."""
        history = simulator.generate(YEAR_START, END, Granularity.MONTHLY, 100000)
        assert len(history) == 13

    @pytest.mark.parametrize("granularity,days,expected", [
        ("daily", 10, 11),
        ("weekly", 30, 5),
        ("monthly", 90, 4),
        ("quarterly", 365, 5),
    ])
    def test_point_counts(self, simulator, granularity, days, expected):
        """Test each granularity samples at its fixed interval."""
        history = simulator.generate(END - timedelta(days=days), END, granularity, 10000)
        assert len(history) == expected

    def test_range_shorter_than_interval(self, simulator):
        """Test a range shorter than one interval gives only the anchored point."""
        history = simulator.generate(END - timedelta(days=10), END, "monthly", 10000)
        assert len(history) == 1
        assert history[0].date == END

    def test_final_point_is_exact(self, simulator):
        """Test the last point equals the targets exactly on the end date."""
        history = simulator.generate(YEAR_START, END, "monthly", Decimal("258200.00"), Decimal("297500.00"))
        last = history[-1]
        assert last.date == END
        assert last.net_worth == 258200.0
        assert last.total_assets == 555700.0
        assert last.total_liabilities == 297500.0

    def test_dates_start_at_start_and_increase(self, simulator):
        """Test samples begin at start and are strictly chronological."""
        history = simulator.generate(YEAR_START, END, "weekly", 100000, 5000)
        assert history[0].date == YEAR_START
        dates = [point.date for point in history]
        assert all(a < b for a, b in zip(dates, dates[1:]))
        assert dates[1] - dates[0] == timedelta(days=7)


class TestDeterminism:
    """Tests for reproducibility."""

    def test_identical_inputs_identical_output(self, simulator):
        """Test the same inputs regenerate the same series."""
        first = simulator.generate(YEAR_START, END, "monthly", 100000, 20000)
        second = simulator.generate(YEAR_START, END, "monthly", 100000, 20000)
        assert first == second

    def test_function_matches_simulator(self, simulator):
        """Test generate_history is the simulator with the same settings."""
        settings = SimulationSettings()
        assert generate_history(YEAR_START, END, "weekly", 75000, settings=settings) == \
            simulator.generate(YEAR_START, END, "weekly", 75000)

    def test_samples_vary(self, simulator):
        """Test intermediate samples are perturbed rather than constant."""
        history = simulator.generate(YEAR_START, END, "monthly", 100000)
        values = {point.net_worth for point in history[:-1]}
        assert len(values) > 1


class TestInvariants:
    """Tests for non-negativity and the net worth identity."""

    @pytest.mark.parametrize("granularity", ["daily", "weekly", "monthly", "quarterly"])
    def test_non_negative_and_identity(self, simulator, granularity):
        """Test every point has non-negative sides and balances."""
        history = simulator.generate(END - timedelta(days=730), END, granularity, 2500, 40000)
        for point in history:
            assert point.total_assets >= 0
            assert point.total_liabilities >= 0
            assert point.net_worth == pytest.approx(
                point.total_assets - point.total_liabilities, abs=0.01
            )

    def test_non_monthly_liabilities_held_at_target(self, simulator):
        """Test liabilities don't drift outside monthly series."""
        history = simulator.generate(YEAR_START, END, "weekly", 100000, 1200)
        assert all(point.total_liabilities == 1200 for point in history)

    def test_monthly_liabilities_stay_in_band(self, simulator):
        """Test monthly liabilities drift within decay and jitter bounds."""
        settings = simulator.settings
        history = simulator.generate(YEAR_START, END, "monthly", 100000, 50000)
        count = len(history) - 1
        for i, point in enumerate(history[:-1]):
            drift = (1 + settings.liability_decay) ** (count - i)
            low = 50000 * drift * (1 - LIABILITY_JITTER_BAND) - 0.01
            high = 50000 * drift * (1 + LIABILITY_JITTER_BAND) + 0.01
            assert low <= point.total_liabilities <= high

    def test_flat_settings_hold_target(self, flat_simulator):
        """Test switching off every perturbation gives a flat series."""
        history = flat_simulator.generate(YEAR_START, END, "monthly", 100000, 2000)
        for point in history:
            assert point.net_worth == pytest.approx(100000)
            assert point.total_liabilities == pytest.approx(2000)

    def test_monthly_contribution_accrual_added_to_assets(self):
        """Test monthly assets carry a linear contribution that reaches zero at the end."""
        simulator = HistorySimulator(SimulationSettings(
            annual_growth_rate=0.0,
            annual_volatility=0.0,
            seasonal_amplitude=0.0,
            economic_cycle_amplitude=0.0,
            liability_decay=0.0,
            liability_jitter_band=0.0,
            monthly_contribution_rate=0.002,
        ))
        history = simulator.generate(YEAR_START, END, "monthly", 100000, 2000)
        count = len(history) - 1
        for i, point in enumerate(history):
            accrual = 0.002 * 102000 * (count - i)
            assert point.total_assets == pytest.approx(102000 + accrual, abs=0.01)
            assert point.total_liabilities == pytest.approx(2000)
        assert history[0].total_assets > history[-1].total_assets
        assert history[-1].total_assets == 102000

    def test_zero_target(self, simulator):
        """Test a zero target gives an all-zero series."""
        history = simulator.generate(YEAR_START, END, "monthly", 0)
        assert all(point.net_worth == 0 for point in history)
        assert all(point.total_assets == 0 for point in history)

    def test_negative_net_worth_allowed(self, simulator):
        """Test net worth may be negative when liabilities exceed assets."""
        history = simulator.generate(YEAR_START, END, "quarterly", -1000, 5000)
        assert history[-1].net_worth == -1000
        assert history[-1].total_assets == 4000


class TestErrors:
    """Tests for rejected inputs."""

    def test_end_before_start(self, simulator):
        """Test reversed ranges are rejected."""
        with pytest.raises(InvalidDateRangeError):
            simulator.generate(END, YEAR_START, "monthly", 1000)

    def test_unknown_granularity(self, simulator):
        """Test unknown granularities are rejected before any work."""
        with pytest.raises(UnknownGranularityError):
            simulator.generate(YEAR_START, END, "hourly", 1000)

    def test_negative_assets_target(self, simulator):
        """Test targets implying negative assets are rejected."""
        with pytest.raises(InvalidTargetError):
            simulator.generate(YEAR_START, END, "monthly", -500, 100)

    def test_negative_liabilities_target(self, simulator):
        """Test negative liability targets are rejected."""
        with pytest.raises(InvalidTargetError):
            simulator.generate(YEAR_START, END, "monthly", 500, -100)

    def test_errors_are_value_errors(self, simulator):
        """Test bad-input errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            simulator.generate(END, YEAR_START, "monthly", 1000)
