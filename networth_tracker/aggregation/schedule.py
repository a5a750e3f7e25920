"""
Liability Payment Schedules

Splits the next payments on a liability into principal and interest.

RULES:
- Credit accounts pay a fixed minimum: one month of interest plus a share
  of the balance, never less than the configured floor
- Loans, mortgages and manual liabilities pay a fixed amortizing amount
  over the configured term
- Every amount is rounded to cents, half up
- The schedule stops early once the balance is paid off
"""

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from networth_tracker.aggregation.totals import LIABILITY_TYPES, liability_bucket
from networth_tracker.config.settings import LiabilitySettings
from networth_tracker.errors import NotALiabilityError
from networth_tracker.models.account import Account, AccountType, Balance
from networth_tracker.models.net_worth import PaymentSchedule, PaymentScheduleItem


CENT = Decimal("0.01")
PAYMENT_INTERVAL_DAYS = 30


def _cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def annual_rate_for(bucket: str, settings: LiabilitySettings) -> float:
    return {
        "credit_cards": settings.credit_card_apr,
        "mortgages": settings.mortgage_apr,
        "loans": settings.loan_apr,
        "other": settings.other_apr,
    }[bucket]


def term_months_for(bucket: str, settings: LiabilitySettings) -> int:
    return {
        "mortgages": settings.mortgage_term_months,
        "loans": settings.loan_term_months,
        "other": settings.other_term_months,
    }[bucket]


def amortizing_payment(principal: Decimal, monthly_rate: Decimal, months: int) -> Decimal:
    """
    Fixed payment that clears principal in `months` payments.

    With a zero rate this is an even split of the principal.
    """
    if monthly_rate == 0:
        return _cents(principal / months)
    factor = (1 + monthly_rate) ** months
    return _cents(principal * monthly_rate * factor / (factor - 1))


def minimum_payment(
    balance: Decimal,
    monthly_rate: Decimal,
    settings: LiabilitySettings,
) -> Decimal:
    """Credit card minimum: interest plus a share of the balance, with a floor."""
    payment = balance * monthly_rate + balance * Decimal(str(settings.credit_minimum_principal_rate))
    floor = Decimal(str(settings.minimum_payment_floor))
    return _cents(max(payment, floor))


def build_payment_schedule(
    account: Account,
    current_balance: Optional[Balance],
    today: date,
    settings: Optional[LiabilitySettings] = None,
    payments: Optional[int] = None,
) -> PaymentSchedule:
    """
    Upcoming payments for a liability account.

    An account without a current balance, or with nothing owed, gets an
    empty schedule.

    Raises:
        NotALiabilityError: the account is an asset
    """
    if account.type not in LIABILITY_TYPES:
        raise NotALiabilityError(account.id, account.type.value)

    settings = settings or LiabilitySettings()
    payments = payments or settings.schedule_payments

    bucket = liability_bucket(account)
    annual_rate = annual_rate_for(bucket, settings)
    monthly_rate = Decimal(str(annual_rate)) / 12

    balance = current_balance.balance if current_balance is not None else Decimal("0")
    balance = max(balance, Decimal("0"))

    if balance == 0:
        payment = Decimal("0")
    elif account.type is AccountType.CREDIT:
        payment = minimum_payment(balance, monthly_rate, settings)
    else:
        payment = amortizing_payment(balance, monthly_rate, term_months_for(bucket, settings))
    payment_type = "minimum" if account.type is AccountType.CREDIT else "scheduled"

    items = []
    remaining = balance
    for number in range(payments):
        if remaining <= 0:
            break
        interest = _cents(remaining * monthly_rate)
        principal = min(payment - interest, remaining)
        if principal <= 0:
            # Payment no longer covers interest; the balance would never shrink
            break
        remaining = remaining - principal
        items.append(PaymentScheduleItem(
            date=today + timedelta(days=PAYMENT_INTERVAL_DAYS * (number + 1)),
            amount=principal + interest,
            payment_type=payment_type,
            principal=principal,
            interest=interest,
            remaining_balance=remaining,
        ))

    return PaymentSchedule(
        account_id=account.id,
        account_name=account.name,
        liability_type=bucket,
        balance=balance,
        annual_rate=annual_rate,
        payment=payment,
        items=items,
    )
