"""
Error Taxonomy for Net Worth Tracker

The core performs no I/O, so the only failure-shaped conditions are bad
input: an enumeration value we don't recognise, or a degenerate request
(date range, target). Each one gets its own type so callers and tests can
tell "no data" apart from "bad input".

Storage errors live with the storage interface.
"""

from typing import Iterable


class NetWorthTrackerError(Exception):
    """Base exception for all net worth tracker errors."""
    pass


# =============================================================================
# ENUMERATION ERRORS
# =============================================================================

class InvalidEnumerationError(NetWorthTrackerError, ValueError):
    """A string did not match any member of a closed enumeration."""

    kind = "value"

    def __init__(self, value: object, allowed: Iterable[str]):
        self.value = value
        self.allowed = sorted(allowed)
        super().__init__(
            f"Unknown {self.kind}: {value!r}. Allowed: {', '.join(self.allowed)}"
        )


class UnknownGranularityError(InvalidEnumerationError):
    """Sampling granularity is not daily/weekly/monthly/quarterly."""
    kind = "granularity"


class UnknownPeriodError(InvalidEnumerationError):
    """History period is not one of the supported windows."""
    kind = "history period"


class UnknownAccountTypeError(InvalidEnumerationError):
    """Account type is not part of the account type enumeration."""
    kind = "account type"


class UnknownCategoryError(InvalidEnumerationError):
    """Account category is not part of the category enumeration."""
    kind = "account category"


class UnknownExportFormatError(InvalidEnumerationError):
    """Export format is not supported."""
    kind = "export format"


class UnknownReportError(InvalidEnumerationError):
    """Report id is not in the report catalog."""
    kind = "report"


# =============================================================================
# SIMULATION ERRORS
# =============================================================================

class InvalidDateRangeError(NetWorthTrackerError, ValueError):
    """End date falls before the start date."""

    def __init__(self, start, end):
        self.start = start
        self.end = end
        super().__init__(
            f"End date ({end}) cannot be before start date ({start})"
        )


class InvalidTargetError(NetWorthTrackerError, ValueError):
    """Target values would force negative assets or liabilities."""
    pass


# =============================================================================
# AGGREGATION ERRORS
# =============================================================================

class AggregationError(NetWorthTrackerError):
    """Base exception for aggregation failures."""
    pass


class OrphanBalanceError(AggregationError):
    """A current balance references an account that is not in the dataset."""

    def __init__(self, balance_id: str, account_id: str):
        self.balance_id = balance_id
        self.account_id = account_id
        super().__init__(
            f"Balance {balance_id} references unknown account {account_id}"
        )


class NotALiabilityError(AggregationError, ValueError):
    """A liability-only operation was asked for an asset account."""

    def __init__(self, account_id: str, account_type: str):
        self.account_id = account_id
        self.account_type = account_type
        super().__init__(
            f"Account {account_id} is a {account_type} account, not a liability"
        )
