"""Tests for totals, breakdowns, summaries, trends and projections."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from networth_tracker.aggregation import (
    analyze_trends,
    build_summary,
    classify_account,
    compute_asset_breakdown,
    compute_current_totals,
    compute_liability_breakdown,
    compute_totals_as_of,
    liability_bucket,
    project_net_worth,
)
from networth_tracker.errors import OrphanBalanceError, UnknownAccountTypeError
from networth_tracker.models.account import (
    Account,
    AccountCategory,
    AccountType,
    Balance,
    BalanceSource,
)
from networth_tracker.models.net_worth import HistoryPoint
from networth_tracker.services.storage import build_demo_accounts, build_demo_balances


NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
TODAY = NOW.date()


def linked(account_id, account_type, category=AccountCategory.OTHER, subtype="other", **kwargs):
    return Account(
        id=account_id,
        user_id="user-1",
        linked_item_id="item-1",
        name=account_id,
        type=account_type,
        subtype=subtype,
        category=category,
        **kwargs,
    )


def balance(account_id, amount, is_current=True, on=TODAY, balance_id=None):
    return Balance(
        id=balance_id or f"bal-{account_id}-{on}-{is_current}",
        account_id=account_id,
        balance=Decimal(str(amount)),
        balance_date=on,
        is_current=is_current,
        source=BalanceSource.LINKED_FEED,
    )


@pytest.fixture
def demo():
    return build_demo_accounts(NOW), build_demo_balances(NOW)


class TestClassification:
    """Tests for asset/liability classification."""

    @pytest.mark.parametrize("account_type,side", [
        (AccountType.DEPOSITORY, "asset"),
        (AccountType.INVESTMENT, "asset"),
        (AccountType.MANUAL_ASSET, "asset"),
        (AccountType.WALLET, "asset"),
        (AccountType.CREDIT, "liability"),
        (AccountType.LOAN, "liability"),
        (AccountType.MANUAL_LIABILITY, "liability"),
    ])
    def test_every_type_classified(self, account_type, side):
        """Test every account type has a side."""
        assert classify_account(account_type) == side

    def test_classifies_strings(self):
        """Test string types are parsed, including the wallet alias."""
        assert classify_account("credit") == "liability"
        assert classify_account("solana_wallet") == "asset"

    def test_unknown_type_raises(self):
        """Test unknown type strings raise instead of defaulting."""
        with pytest.raises(UnknownAccountTypeError):
            classify_account("crypto")

    def test_liability_buckets(self):
        """Test liability accounts map to their breakdown bucket."""
        assert liability_bucket(linked("a", AccountType.CREDIT)) == "credit_cards"
        assert liability_bucket(linked("b", AccountType.LOAN, subtype="mortgage")) == "mortgages"
        assert liability_bucket(linked("c", AccountType.LOAN, subtype="student")) == "loans"
        manual = Account(
            user_id="user-1",
            name="IOU",
            type=AccountType.MANUAL_LIABILITY,
            subtype="personal",
            category=AccountCategory.OTHER,
            is_manual=True,
        )
        assert liability_bucket(manual) == "other"


class TestCurrentTotals:
    """Tests for totals over current balances."""

    def test_depository_minus_credit(self):
        """Test 5000 in checking and 1200 on a card is 3800 net worth."""
        accounts = [
            linked("checking", AccountType.DEPOSITORY, AccountCategory.CASH),
            linked("card", AccountType.CREDIT),
        ]
        balances = [balance("checking", 5000), balance("card", 1200)]
        totals = compute_current_totals(accounts, balances)
        assert totals.total_assets == Decimal("5000")
        assert totals.total_liabilities == Decimal("1200")
        assert totals.net_worth == Decimal("3800")

    def test_account_without_current_balance_is_zero(self):
        """Test accounts with no current balance contribute nothing."""
        accounts = [
            linked("checking", AccountType.DEPOSITORY, AccountCategory.CASH),
            linked("savings", AccountType.DEPOSITORY, AccountCategory.CASH),
        ]
        balances = [
            balance("checking", 5000),
            balance("savings", 9999, is_current=False, on=TODAY - timedelta(days=30)),
        ]
        totals = compute_current_totals(accounts, balances)
        assert totals.total_assets == Decimal("5000")

    def test_inactive_accounts_count(self):
        """Test inactive accounts still contribute their balance."""
        accounts = [linked("old", AccountType.DEPOSITORY, AccountCategory.CASH, is_active=False)]
        totals = compute_current_totals(accounts, [balance("old", 250)])
        assert totals.total_assets == Decimal("250")

    def test_empty_dataset(self):
        """Test no accounts gives zero totals."""
        totals = compute_current_totals([], [])
        assert totals.net_worth == Decimal("0")

    def test_orphan_current_balance_raises(self):
        """Test a current balance for an unknown account is an error."""
        with pytest.raises(OrphanBalanceError) as exc_info:
            compute_current_totals([], [balance("ghost", 100, balance_id="bal-ghost")])
        assert exc_info.value.account_id == "ghost"
        assert exc_info.value.balance_id == "bal-ghost"

    def test_orphan_historical_balance_ignored(self):
        """Test non-current orphan balances don't affect current totals."""
        accounts = [linked("checking", AccountType.DEPOSITORY, AccountCategory.CASH)]
        balances = [
            balance("checking", 100),
            balance("ghost", 100, is_current=False, on=TODAY - timedelta(days=5)),
        ]
        assert compute_current_totals(accounts, balances).total_assets == Decimal("100")

    def test_orphan_historical_balance_ignored_by_summary(self):
        """Test the summary agrees with current totals when an old balance is orphaned."""
        accounts = [linked("checking", AccountType.DEPOSITORY, AccountCategory.CASH)]
        balances = [
            balance("checking", 100),
            balance("ghost", 100, is_current=False, on=TODAY - timedelta(days=60)),
        ]
        summary = build_summary(accounts, balances, now=NOW)
        assert summary.current_net_worth == compute_current_totals(accounts, balances).net_worth
        assert summary.change_from_previous is None

    def test_orphan_current_balance_raises_as_of(self):
        """Test past-date totals still reject current balances of unknown accounts."""
        with pytest.raises(OrphanBalanceError):
            compute_totals_as_of([], [balance("ghost", 100)], TODAY)

    def test_demo_totals(self, demo):
        """Test the demo dataset totals."""
        totals = compute_current_totals(*demo)
        assert totals.total_assets == Decimal("555700")
        assert totals.total_liabilities == Decimal("297500")
        assert totals.net_worth == Decimal("258200")


class TestBreakdowns:
    """Tests for asset and liability breakdowns."""

    def test_demo_asset_breakdown(self, demo):
        """Test assets group by category."""
        breakdown = compute_asset_breakdown(*demo)
        assert breakdown.cash == Decimal("37500")
        assert breakdown.investments == Decimal("127500")
        assert breakdown.property == Decimal("350000")
        assert breakdown.vehicles == Decimal("28000")
        assert breakdown.precious_metals == Decimal("8500")
        assert breakdown.digital_assets == Decimal("4200")
        assert breakdown.other == Decimal("0")

    def test_demo_liability_breakdown(self, demo):
        """Test liabilities group into cards, mortgages, loans, other."""
        breakdown = compute_liability_breakdown(*demo)
        assert breakdown.credit_cards == Decimal("2500")
        assert breakdown.mortgages == Decimal("280000")
        assert breakdown.loans == Decimal("15000")
        assert breakdown.other == Decimal("0")

    def test_breakdowns_match_totals(self, demo):
        """Test breakdown totals equal the aggregate totals."""
        totals = compute_current_totals(*demo)
        assert compute_asset_breakdown(*demo).total == totals.total_assets
        assert compute_liability_breakdown(*demo).total == totals.total_liabilities

    def test_manual_liability_in_other(self):
        """Test manual liabilities count in totals and the other bucket."""
        accounts = [Account(
            id="iou",
            user_id="user-1",
            name="IOU",
            type=AccountType.MANUAL_LIABILITY,
            subtype="personal",
            category=AccountCategory.OTHER,
            is_manual=True,
        )]
        balances = [balance("iou", 300)]
        assert compute_current_totals(accounts, balances).total_liabilities == Decimal("300")
        assert compute_liability_breakdown(accounts, balances).other == Decimal("300")


class TestAsOfTotals:
    """Tests for totals at a past date."""

    def test_demo_month_ago(self, demo):
        """Test totals from the balances dated a month ago."""
        totals = compute_totals_as_of(*demo, TODAY - timedelta(days=30))
        assert totals.total_assets == Decimal("548100")
        assert totals.total_liabilities == Decimal("299700")

    def test_as_of_today_matches_current(self, demo):
        """Test as-of today picks the current balances."""
        assert compute_totals_as_of(*demo, TODAY) == compute_current_totals(*demo)

    def test_before_any_data(self, demo):
        """Test dates before every balance give zero."""
        totals = compute_totals_as_of(*demo, date(2000, 1, 1))
        assert totals.net_worth == Decimal("0")


class TestSummary:
    """Tests for the net worth summary."""

    def test_demo_summary(self, demo):
        """Test the summary carries totals and the month-over-month change."""
        summary = build_summary(*demo, now=NOW)
        assert summary.current_net_worth == Decimal("258200")
        assert summary.total_assets == Decimal("555700")
        assert summary.total_liabilities == Decimal("297500")
        change = summary.change_from_previous
        assert change.amount == Decimal("9800")
        assert change.percentage == pytest.approx(3.95, abs=0.01)
        assert change.period == "last month"
        assert summary.last_updated == NOW

    def test_summary_without_history(self):
        """Test no change block without balances old enough to compare."""
        accounts = [linked("checking", AccountType.DEPOSITORY, AccountCategory.CASH)]
        summary = build_summary(accounts, [balance("checking", 100)], now=NOW)
        assert summary.change_from_previous is None
        assert summary.current_net_worth == Decimal("100")

    def test_custom_window_label(self, demo):
        """Test non-monthly windows are labelled in days."""
        summary = build_summary(*demo, now=NOW, change_window_days=45)
        assert summary.change_from_previous is None
        summary = build_summary(*demo, now=NOW + timedelta(days=15), change_window_days=45)
        assert summary.change_from_previous.period == "last 45 days"


def series(values, start=date(2023, 6, 15)):
    return [
        HistoryPoint(
            date=start + timedelta(days=30 * i),
            net_worth=value,
            total_assets=value,
            total_liabilities=0.0,
        )
        for i, value in enumerate(values)
    ]


class TestTrends:
    """Tests for trend analysis."""

    def test_steady_growth(self):
        """Test 1% monthly growth is an upward, low-volatility trend."""
        analysis = analyze_trends(series([100000 * 1.01 ** i for i in range(13)]))
        assert analysis.monthly_growth_rate == pytest.approx(1.0, abs=0.01)
        assert analysis.period_growth == pytest.approx(12.68, abs=0.01)
        assert analysis.volatility == "low"
        assert analysis.trend == "upward"
        assert analysis.projected_net_worth["one_year"] > analysis.projected_net_worth["six_months"]

    def test_decline(self):
        """Test steady losses are a downward trend."""
        analysis = analyze_trends(series([100000 * 0.97 ** i for i in range(13)]))
        assert analysis.trend == "downward"
        assert analysis.monthly_growth_rate == pytest.approx(-3.0, abs=0.01)

    def test_volatile_series(self):
        """Test large swings are labelled high volatility."""
        analysis = analyze_trends(series([100000, 120000, 90000, 125000, 85000]))
        assert analysis.volatility == "high"

    def test_short_history(self):
        """Test fewer than two points is flat with no growth."""
        analysis = analyze_trends(series([5000]))
        assert analysis.trend == "flat"
        assert analysis.monthly_growth_rate == 0.0
        assert analysis.period_growth == 0.0


class TestProjections:
    """Tests for compounding projections."""

    def test_compounding(self):
        """Test each scenario compounds the current value yearly."""
        projections = project_net_worth(
            100000.0,
            date(2023, 1, 1),
            conservative_rate=0.04,
            moderate_rate=0.07,
            aggressive_rate=0.10,
            horizons_years=[1, 2],
        )
        assert [p.value for p in projections.conservative] == [104000.0, 108160.0]
        assert [p.value for p in projections.moderate] == [107000.0, 114490.0]
        assert [p.value for p in projections.aggressive] == [110000.0, 121000.0]
        assert projections.moderate[0].date == date(2024, 1, 1)
