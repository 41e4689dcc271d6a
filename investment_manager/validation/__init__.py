"""Form validation package."""

from investment_manager.validation.forms import (
    validate_account,
    validate_balance_update,
    validate_budget_entry,
    validate_share_count,
)

__all__ = [
    "validate_account",
    "validate_balance_update",
    "validate_budget_entry",
    "validate_share_count",
]
