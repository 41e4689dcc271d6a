"""
Form Validation

DESIGN DECISION: Input is checked at the edge, before the store is
called. The store itself never rejects input: it parses leniently
and defaults to zero. These checks are what keep empty or nonsense
submissions out of the saved state.

Each check returns a list of ValidationIssue; an empty list means the
form can be submitted.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from investment_manager.models.validation import ValidationIssue


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_number(value: Any) -> Optional[Decimal]:
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def _required(field: str, value: Any, label: str) -> list[ValidationIssue]:
    if _is_blank(value):
        return [ValidationIssue(
            field=field,
            issue_type="missing",
            message=f"{label} is required",
        )]
    return []


def _numeric(field: str, value: Any, label: str) -> list[ValidationIssue]:
    if _is_blank(value):
        return _required(field, value, label)
    if _to_number(value) is None:
        return [ValidationIssue(
            field=field,
            issue_type="not_a_number",
            message=f"{label} must be a number",
            suggested_fix="Use digits with an optional decimal point, e.g. 1234.56",
        )]
    return []


def validate_budget_entry(description: Any, amount: Any) -> list[ValidationIssue]:
    """Description and a non-negative amount are required."""
    issues = _required("description", description, "Description")
    amount_issues = _numeric("amount", amount, "Amount")
    if not amount_issues and _to_number(amount) < 0:
        amount_issues.append(ValidationIssue(
            field="amount",
            issue_type="negative",
            message="Amount cannot be negative",
            suggested_fix="Record money going out as an expense instead",
        ))
    return issues + amount_issues


def validate_account(name: Any, balance: Any) -> list[ValidationIssue]:
    """Name and balance are required; the balance may be negative."""
    return _required("name", name, "Account name") + _numeric(
        "balance", balance, "Balance"
    )


def validate_balance_update(balance: Any) -> list[ValidationIssue]:
    return _numeric("balance", balance, "Balance")


def validate_share_count(shares: Any) -> list[ValidationIssue]:
    """Share count must be a number greater than zero."""
    issues = _numeric("shares", shares, "Shares")
    if not issues and _to_number(shares) <= 0:
        issues.append(ValidationIssue(
            field="shares",
            issue_type="not_positive",
            message="Shares must be greater than zero",
        ))
    return issues
