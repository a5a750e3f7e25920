"""Tests for liability payment schedules."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from networth_tracker.aggregation import build_payment_schedule
from networth_tracker.aggregation.schedule import amortizing_payment
from networth_tracker.config import LiabilitySettings
from networth_tracker.errors import NotALiabilityError
from networth_tracker.models.account import (
    Account,
    AccountCategory,
    AccountType,
    Balance,
    BalanceSource,
)


TODAY = date(2024, 6, 15)


@pytest.fixture
def settings():
    return LiabilitySettings()


def linked(account_type, subtype, account_id="acc-x"):
    return Account(
        id=account_id,
        user_id="user-1",
        linked_item_id="item-1",
        name=subtype.title(),
        type=account_type,
        subtype=subtype,
        category=AccountCategory.OTHER,
    )


def current(amount, account_id="acc-x"):
    return Balance(
        account_id=account_id,
        balance=Decimal(amount),
        balance_date=TODAY,
        is_current=True,
        source=BalanceSource.LINKED_FEED,
    )


class TestCreditSchedule:
    """Tests for credit card minimum payments."""

    def test_minimum_payment_split(self, settings):
        """Test the first minimum payment is a month of interest plus 1% of the balance."""
        schedule = build_payment_schedule(
            linked(AccountType.CREDIT, "credit_card"), current("2500"), TODAY, settings
        )
        assert schedule.liability_type == "credit_cards"
        assert schedule.payment == Decimal("70.81")
        first = schedule.items[0]
        assert first.payment_type == "minimum"
        assert first.interest == Decimal("45.81")
        assert first.principal == Decimal("25.00")
        assert first.remaining_balance == Decimal("2475.00")
        assert first.date == TODAY + timedelta(days=30)
        assert len(schedule.items) == settings.schedule_payments

    def test_minimum_payment_floor(self, settings):
        """Test small balances pay at least the floor."""
        schedule = build_payment_schedule(
            linked(AccountType.CREDIT, "credit_card"), current("500"), TODAY, settings
        )
        assert schedule.payment == Decimal("25.00")
        assert schedule.items[0].principal == Decimal("15.84")

    def test_paid_off_early(self, settings):
        """Test the schedule stops once the balance is cleared."""
        schedule = build_payment_schedule(
            linked(AccountType.CREDIT, "credit_card"), current("20"), TODAY, settings
        )
        assert len(schedule.items) == 1
        assert schedule.items[0].amount == Decimal("20.37")
        assert schedule.items[0].remaining_balance == 0


class TestAmortizingSchedule:
    """Tests for loans, mortgages and manual liabilities."""

    def test_auto_loan(self, settings):
        """Test a 60-month loan at 7% pays a fixed 297.02."""
        schedule = build_payment_schedule(
            linked(AccountType.LOAN, "auto"), current("15000"), TODAY, settings
        )
        assert schedule.liability_type == "loans"
        assert schedule.payment == Decimal("297.02")
        first = schedule.items[0]
        assert first.payment_type == "scheduled"
        assert first.interest == Decimal("87.50")
        assert first.principal == Decimal("209.52")
        assert first.remaining_balance == Decimal("14790.48")

    def test_mortgage(self, settings):
        """Test a mortgage subtype amortizes over the mortgage term and rate."""
        schedule = build_payment_schedule(
            linked(AccountType.LOAN, "mortgage"), current("280000"), TODAY, settings
        )
        assert schedule.liability_type == "mortgages"
        assert schedule.annual_rate == settings.mortgage_apr
        assert schedule.payment == Decimal("1769.79")
        assert schedule.items[0].interest == Decimal("1516.67")

    def test_each_row_adds_up(self, settings):
        """Test every row is principal plus interest and the balance falls by principal."""
        schedule = build_payment_schedule(
            linked(AccountType.LOAN, "auto"), current("15000"), TODAY, settings, payments=24
        )
        remaining = schedule.balance
        for item in schedule.items:
            assert item.amount == item.principal + item.interest
            remaining -= item.principal
            assert item.remaining_balance == remaining
        assert schedule.total_principal == schedule.balance - schedule.items[-1].remaining_balance

    def test_zero_rate_manual_liability(self):
        """Test a zero-rate liability is repaid in equal slices within its term."""
        account = Account(
            user_id="user-1",
            name="Family loan",
            type=AccountType.MANUAL_LIABILITY,
            subtype="personal",
            category=AccountCategory.OTHER,
            is_manual=True,
        )
        settings = LiabilitySettings(other_apr=0.0, other_term_months=12)
        schedule = build_payment_schedule(
            account, current("1200", account.id), TODAY, settings, payments=24
        )
        assert schedule.liability_type == "other"
        assert schedule.payment == Decimal("100.00")
        assert len(schedule.items) == 12
        assert schedule.total_interest == 0
        assert schedule.items[-1].remaining_balance == 0

    def test_amortizing_payment_clears_principal(self):
        """Test the fixed payment repays the whole principal over the term."""
        assert amortizing_payment(Decimal("1000"), Decimal("0"), 4) == Decimal("250.00")


class TestScheduleEdges:
    """Tests for accounts without a schedule."""

    def test_no_current_balance(self, settings):
        """Test an account without a current balance gets an empty schedule."""
        schedule = build_payment_schedule(
            linked(AccountType.LOAN, "auto"), None, TODAY, settings
        )
        assert schedule.balance == 0
        assert schedule.payment == 0
        assert schedule.items == []

    def test_asset_rejected(self, settings):
        """Test asking for an asset's schedule raises."""
        with pytest.raises(NotALiabilityError) as exc:
            build_payment_schedule(
                linked(AccountType.DEPOSITORY, "checking"), current("100"), TODAY, settings
            )
        assert exc.value.account_type == "depository"
        assert isinstance(exc.value, ValueError)

    def test_env_override(self, monkeypatch):
        """Test rates are read from prefixed environment variables."""
        monkeypatch.setenv("NETWORTH_LIABILITY_LOAN_APR", "0.0")
        monkeypatch.setenv("NETWORTH_LIABILITY_LOAN_TERM_MONTHS", "10")
        schedule = build_payment_schedule(
            linked(AccountType.LOAN, "auto"), current("1000"), TODAY
        )
        assert schedule.payment == Decimal("100.00")
