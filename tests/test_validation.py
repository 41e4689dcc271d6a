"""Tests for form validation."""

import pytest

from investment_manager.validation import (
    validate_account,
    validate_balance_update,
    validate_budget_entry,
    validate_share_count,
)


def issue_types(issues):
    return [(i.field, i.issue_type) for i in issues]


class TestBudgetEntryValidation:
    """Income and expense forms."""

    def test_valid_entry(self):
        assert validate_budget_entry("Salary", "3000.50") == []

    def test_missing_fields(self):
        assert issue_types(validate_budget_entry("  ", "")) == [
            ("description", "missing"),
            ("amount", "missing"),
        ]

    def test_non_numeric_amount(self):
        issues = validate_budget_entry("Rent", "twelve hundred")
        assert issue_types(issues) == [("amount", "not_a_number")]
        assert issues[0].suggested_fix

    def test_negative_amount(self):
        assert issue_types(validate_budget_entry("Refund", "-5")) == [("amount", "negative")]

    def test_zero_is_allowed(self):
        assert validate_budget_entry("Nothing", "0") == []


class TestAccountValidation:
    """Account and balance forms."""

    def test_negative_balance_is_allowed(self):
        assert validate_account("Visa", "-250.00") == []

    def test_name_required(self):
        assert issue_types(validate_account("", "10")) == [("name", "missing")]

    @pytest.mark.parametrize("balance", ["nan", "inf", "1,000"])
    def test_balance_update_rejects_non_finite_or_formatted(self, balance):
        assert issue_types(validate_balance_update(balance)) == [("balance", "not_a_number")]

    def test_balance_update_accepts_number(self):
        assert validate_balance_update(1234.56) == []


class TestShareCountValidation:
    """Shares for adding a holding."""

    @pytest.mark.parametrize("shares", ["1", "0.5", 10])
    def test_positive_counts(self, shares):
        assert validate_share_count(shares) == []

    @pytest.mark.parametrize("shares", ["0", "-1"])
    def test_not_positive(self, shares):
        assert issue_types(validate_share_count(shares)) == [("shares", "not_positive")]

    def test_missing(self):
        assert issue_types(validate_share_count(None)) == [("shares", "missing")]
