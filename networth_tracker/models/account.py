"""
Core Data Models for Net Worth Tracker

These models define the schemas for every account and balance flowing
through the system. They are designed to:
1. Enforce type safety at runtime
2. Reject unknown enumeration values instead of guessing
3. Be serializable for storage, export and logging

DESIGN DECISION: Account types and categories are closed enumerations.
Adding one is a visible change that the aggregation layer must handle.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)

from networth_tracker.errors import UnknownAccountTypeError, UnknownCategoryError


def utc_now() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """
    How an account is held.

    Decides whether its balance counts as an asset or a liability.
    """
    DEPOSITORY = "depository"              # Bank accounts
    INVESTMENT = "investment"              # Brokerage, retirement
    LOAN = "loan"                          # Auto, student, mortgage
    CREDIT = "credit"                      # Credit cards
    MANUAL_ASSET = "manual_asset"          # Real estate, vehicles, metals
    MANUAL_LIABILITY = "manual_liability"  # Anything owed, entered by hand
    WALLET = "wallet"                      # On-chain wallet holdings

    @classmethod
    def _missing_(cls, value):
        # Older data calls wallets "solana_wallet"
        if value == "solana_wallet":
            return cls.WALLET
        return None

    @classmethod
    def parse(cls, value: str) -> "AccountType":
        """Parse a string, raising UnknownAccountTypeError if it doesn't match."""
        try:
            return cls(value)
        except ValueError:
            raise UnknownAccountTypeError(value, [m.value for m in cls]) from None


class AccountCategory(str, Enum):
    """Net worth category used for the asset breakdown."""
    CASH = "cash"
    INVESTMENT = "investment"
    PROPERTY = "property"
    VEHICLE = "vehicle"
    PRECIOUS_METAL = "precious_metal"
    DIGITAL_ASSET = "digital_asset"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> "AccountCategory":
        """Parse a string, raising UnknownCategoryError if it doesn't match."""
        try:
            return cls(value)
        except ValueError:
            raise UnknownCategoryError(value, [m.value for m in cls]) from None


class BalanceSource(str, Enum):
    """Where a balance snapshot came from."""
    LINKED_FEED = "plaid"         # Bank/brokerage aggregation feed
    MANUAL_ENTRY = "manual"       # Typed in by the user
    VALUATION_API = "kbb_api"     # Vehicle/property valuation service
    CHAIN_RPC = "solana_rpc"      # Wallet balance read from the chain


# Default category for each account type when the user doesn't pick one
DEFAULT_CATEGORY_FOR_TYPE: dict[AccountType, AccountCategory] = {
    AccountType.DEPOSITORY: AccountCategory.CASH,
    AccountType.INVESTMENT: AccountCategory.INVESTMENT,
    AccountType.LOAN: AccountCategory.OTHER,
    AccountType.CREDIT: AccountCategory.OTHER,
    AccountType.MANUAL_ASSET: AccountCategory.OTHER,
    AccountType.MANUAL_LIABILITY: AccountCategory.OTHER,
    AccountType.WALLET: AccountCategory.DIGITAL_ASSET,
}


# =============================================================================
# CORE ACCOUNT MODELS
# =============================================================================

class ManualAssetDetails(BaseModel):
    """Extra description for a manually entered asset."""
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="What the asset is"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=1000,
        description="How the value was estimated"
    )


class Account(BaseModel):
    """
    A trackable financial holding.

    CRITICAL: An account is either externally linked (linked_item_id set)
    or manual (is_manual True). Never both, never neither.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    # Identity
    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique account ID"
    )
    user_id: str = Field(
        ...,
        min_length=1,
        description="Owning user"
    )

    # Link to the external feed (linked accounts only)
    linked_item_id: Optional[str] = Field(
        default=None,
        description="Linked item (institution login or wallet) this account belongs to"
    )
    linked_account_id: Optional[str] = Field(
        default=None,
        description="Account ID on the linked feed's side"
    )

    # Display
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="User-friendly account name"
    )
    official_name: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Official name from the institution"
    )
    institution_name: Optional[str] = Field(
        default=None,
        max_length=200
    )
    mask: Optional[str] = Field(
        default=None,
        max_length=4,
        description="Last 4 digits of the account number"
    )

    # Classification
    type: AccountType
    subtype: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Free-form subtype (checking, mortgage, bitcoin, ...)"
    )
    category: AccountCategory

    # State
    is_manual: bool = False
    is_active: bool = True
    currency: Literal["USD"] = "USD"
    manual_asset_details: Optional[ManualAssetDetails] = None

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode='after')
    def validate_link_state(self) -> 'Account':
        """Exactly one of linked item / manual flag must be set."""
        if self.is_manual and self.linked_item_id:
            raise ValueError("Account cannot be both linked and manual")
        if not self.is_manual and not self.linked_item_id:
            raise ValueError("Account must be either linked or manual")
        if self.manual_asset_details and not self.is_manual:
            raise ValueError("Only manual accounts can carry manual asset details")
        return self


class Balance(BaseModel):
    """
    A point-in-time value for an account.

    At most one Balance per account has is_current=True. Storage
    enforces this when a new current balance is recorded.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_id,
        min_length=1
    )
    account_id: str = Field(
        ...,
        min_length=1,
        description="Account this balance belongs to"
    )
    balance: Decimal = Field(
        ...,
        decimal_places=2,
        description="Balance in account currency (amount owed for liabilities)"
    )
    available_balance: Optional[Decimal] = Field(
        default=None,
        decimal_places=2,
        description="Available balance (checking accounts)"
    )
    limit: Optional[Decimal] = Field(
        default=None,
        ge=0,
        decimal_places=2,
        description="Credit limit (credit accounts)"
    )
    balance_date: date = Field(
        ...,
        description="Calendar date the balance applies to"
    )
    is_current: bool = False
    source: BalanceSource
    created_at: datetime = Field(default_factory=utc_now)


class AccountListItem(BaseModel):
    """Flattened account row for tables and lists."""

    id: str
    name: str
    institution_name: Optional[str] = None
    type: AccountType
    subtype: str
    category: AccountCategory
    balance: Decimal = Decimal("0")
    is_manual: bool
    is_active: bool
    mask: Optional[str] = None
    last_updated: datetime

    @classmethod
    def from_account(
        cls,
        account: Account,
        current: Optional[Balance],
    ) -> "AccountListItem":
        """Build a list row; accounts without a current balance show zero."""
        return cls(
            id=account.id,
            name=account.name,
            institution_name=account.institution_name,
            type=account.type,
            subtype=account.subtype,
            category=account.category,
            balance=current.balance if current else Decimal("0"),
            is_manual=account.is_manual,
            is_active=account.is_active,
            mask=account.mask,
            last_updated=account.updated_at,
        )


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field or entity with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'orphan_balance', 'multiple_current', 'drift')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Account or balance the issue is about"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of the two-stage dataset validation.

    Stage 1: Schema validation (references, link state, currency)
    Stage 2: Integrity validation (current-balance uniqueness, sanity checks)
    """

    validated_at: datetime = Field(default_factory=utc_now)

    schema_valid: bool
    integrity_valid: bool
    is_valid: bool

    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
