"""
Core Data Models for Investment Manager

These models define the schemas for everything the dashboard keeps:
budget entries, accounts, catalog securities and portfolio holdings.

DESIGN DECISION: Every entity is a frozen pydantic model.
The store replaces models instead of mutating them, so any snapshot
handed to the view stays valid after later changes.

Numeric fields come from free-text form input. They are parsed
leniently and fall back to zero instead of raising, so a bad value
never blocks a save or a metric computation.
"""

import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


ZERO = Decimal("0")

# Leading numeric prefix, e.g. "12.5 USD" -> "12.5"
_NUMBER_PREFIX = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def parse_decimal(value: Any) -> Decimal:
    """
    Parse user-entered numeric text into a Decimal.

    Accepts Decimals, ints, floats and strings. Strings may carry
    surrounding whitespace or trailing garbage ("12abc" -> 12).
    Anything absent, unparsable or non-finite becomes 0.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        value = repr(value)

    match = _NUMBER_PREFIX.match(str(value).strip())
    if not match:
        return ZERO
    try:
        parsed = Decimal(match.group(0))
    except InvalidOperation:
        return ZERO
    return parsed if parsed.is_finite() else ZERO


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """Kinds of account a user can track."""
    CHECKING = "checking"
    SAVINGS = "savings"
    INVESTMENT = "investment"
    CREDIT = "credit"
    LOAN = "loan"
    OTHER = "other"


ACCOUNT_TYPE_LABELS: dict[AccountType, str] = {
    AccountType.CHECKING: "Checking",
    AccountType.SAVINGS: "Savings",
    AccountType.INVESTMENT: "Investment",
    AccountType.CREDIT: "Credit Card",
    AccountType.LOAN: "Loan",
    AccountType.OTHER: "Other",
}


class PayoutFrequency(str, Enum):
    """How often a security distributes dividends."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


class FrequencyFilter(str, Enum):
    """Payout frequency choices for the screener, including 'all'."""
    ALL = "all"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


# =============================================================================
# BUDGET MODELS
# =============================================================================

class BudgetEntry(BaseModel):
    """
    A single income or expense line.

    The amount is expected to be non-negative; the form layer checks
    this before the store is called.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: int = Field(..., description="Identifier, unique within its list")
    description: str = ""
    amount: Decimal = Field(default=ZERO, description="Amount of money")
    category: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, v: Any) -> Decimal:
        return parse_decimal(v)

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, v: Any) -> Any:
        return _blank_to_none(v)


class Budget(BaseModel):
    """
    Income and expense lists.

    Persisted together under one key, but each list keeps its own ids.
    """
    model_config = ConfigDict(frozen=True)

    income: tuple[BudgetEntry, ...] = ()
    expenses: tuple[BudgetEntry, ...] = ()


# =============================================================================
# ACCOUNT MODELS
# =============================================================================

class AccountRecord(BaseModel):
    """A bank, brokerage, credit or loan account with a signed balance."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: int
    name: str = ""
    type: AccountType = AccountType.CHECKING
    institution: Optional[str] = None
    balance: Decimal = Field(
        default=ZERO,
        description="Signed balance; negative for credit cards and loans"
    )

    @field_validator("balance", mode="before")
    @classmethod
    def parse_balance(cls, v: Any) -> Decimal:
        return parse_decimal(v)

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, v: Any) -> Any:
        """Unknown account types fall back to OTHER."""
        if isinstance(v, AccountType):
            return v
        try:
            return AccountType(str(v).strip().lower())
        except ValueError:
            return AccountType.OTHER

    @field_validator("institution", mode="before")
    @classmethod
    def normalize_institution(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @property
    def type_label(self) -> str:
        return ACCOUNT_TYPE_LABELS[self.type]


# =============================================================================
# SECURITY & PORTFOLIO MODELS
# =============================================================================

class Security(BaseModel):
    """
    A catalog entry for a dividend-paying instrument.

    `dividend_yield` is the annualised percentage. It is stored under
    the key "yield", which is a reserved word in Python.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ticker: str = Field(..., min_length=1, max_length=12)
    name: str
    dividend_yield: Decimal = Field(default=ZERO, alias="yield")
    price: Decimal = ZERO
    frequency: PayoutFrequency
    sector: str = ""

    @field_validator("dividend_yield", "price", mode="before")
    @classmethod
    def parse_numbers(cls, v: Any) -> Decimal:
        return parse_decimal(v)


class Holding(BaseModel):
    """
    A portfolio position: a snapshot of a Security plus a share count.

    CRITICAL: `price` is the price at acquisition time. It is never
    refreshed, so valuations always use the purchase-time price.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    ticker: str
    name: str
    dividend_yield: Decimal = Field(default=ZERO, alias="yield")
    price: Decimal = ZERO
    frequency: PayoutFrequency
    sector: str = ""
    shares: Decimal = ZERO
    purchase_price: Decimal = Field(default=ZERO, alias="purchasePrice")
    purchase_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="purchaseDate",
    )

    @field_validator(
        "dividend_yield", "price", "shares", "purchase_price", mode="before"
    )
    @classmethod
    def parse_numbers(cls, v: Any) -> Decimal:
        return parse_decimal(v)

    @classmethod
    def from_security(
        cls,
        security: Security,
        holding_id: int,
        shares: Decimal,
        purchased_at: Optional[datetime] = None,
    ) -> "Holding":
        """Snapshot a catalog security into a new position."""
        return cls(
            id=holding_id,
            ticker=security.ticker,
            name=security.name,
            dividend_yield=security.dividend_yield,
            price=security.price,
            frequency=security.frequency,
            sector=security.sector,
            shares=shares,
            purchase_price=security.price,
            purchase_date=purchased_at or datetime.now(timezone.utc),
        )


# =============================================================================
# SCREENER & METRICS MODELS
# =============================================================================

class ScreenFilters(BaseModel):
    """Screener parameters."""
    model_config = ConfigDict(frozen=True)

    min_yield: Decimal = Decimal("50")
    payout_frequency: FrequencyFilter = FrequencyFilter.ALL

    @field_validator("min_yield", mode="before")
    @classmethod
    def parse_min_yield(cls, v: Any) -> Decimal:
        return parse_decimal(v)


class DashboardMetrics(BaseModel):
    """
    Aggregate figures derived from the current state.

    Never persisted; recomputed on every read.
    """
    model_config = ConfigDict(frozen=True)

    total_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    net_cash_flow: Decimal = ZERO
    portfolio_value: Decimal = ZERO
    annual_dividend_income: Decimal = ZERO
    monthly_dividend_income: Decimal = ZERO
    total_account_balance: Decimal = ZERO
    total_net_worth: Decimal = ZERO
    account_count: int = 0
    holding_count: int = 0
