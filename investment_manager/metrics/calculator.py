"""
Derived Metrics Engine

Pure functions computing the dashboard figures from the current state.
Nothing here is cached or persisted: the collections are small, so
every read recomputes from scratch.

Numeric fields are already parsed to Decimal by the models (with
unparsable input stored as 0), so the sums need no extra guarding.
"""

from decimal import Decimal
from typing import Iterable, Sequence

from investment_manager.models.finance import (
    ZERO,
    AccountRecord,
    Budget,
    BudgetEntry,
    DashboardMetrics,
    Holding,
)


MONTHS_PER_YEAR = Decimal(12)


def sum_amounts(entries: Iterable[BudgetEntry]) -> Decimal:
    """Total of a list of budget entries."""
    return sum((entry.amount for entry in entries), ZERO)


def total_income(budget: Budget) -> Decimal:
    return sum_amounts(budget.income)


def total_expenses(budget: Budget) -> Decimal:
    return sum_amounts(budget.expenses)


def net_cash_flow(budget: Budget) -> Decimal:
    return total_income(budget) - total_expenses(budget)


def holding_value(holding: Holding) -> Decimal:
    """Position value at the price frozen when it was bought."""
    return holding.shares * holding.price


def holding_annual_dividend(holding: Holding) -> Decimal:
    return holding_value(holding) * holding.dividend_yield / 100


def portfolio_value(portfolio: Iterable[Holding]) -> Decimal:
    return sum((holding_value(h) for h in portfolio), ZERO)


def annual_dividend_income(portfolio: Iterable[Holding]) -> Decimal:
    return sum((holding_annual_dividend(h) for h in portfolio), ZERO)


def monthly_dividend_income(portfolio: Iterable[Holding]) -> Decimal:
    return annual_dividend_income(portfolio) / MONTHS_PER_YEAR


def total_account_balance(accounts: Iterable[AccountRecord]) -> Decimal:
    return sum((account.balance for account in accounts), ZERO)


def total_net_worth(
    accounts: Iterable[AccountRecord],
    portfolio: Iterable[Holding],
) -> Decimal:
    """Account balances plus portfolio value."""
    return total_account_balance(accounts) + portfolio_value(portfolio)


def top_holdings(
    portfolio: Sequence[Holding],
    limit: int = 5,
) -> list[tuple[Holding, Decimal]]:
    """
    The first `limit` holdings with their values.

    Holdings keep insertion order; this is what the dashboard card lists.
    """
    return [(h, holding_value(h)) for h in portfolio[:max(limit, 0)]]


def compute_metrics(
    budget: Budget,
    portfolio: Sequence[Holding],
    accounts: Sequence[AccountRecord],
) -> DashboardMetrics:
    """
    Compute every dashboard figure from a state snapshot.

    Args:
        budget: Income and expense lists
        portfolio: Current holdings
        accounts: Current accounts

    Returns:
        DashboardMetrics with totals, cash flow, dividends and net worth
    """
    income = total_income(budget)
    expenses = total_expenses(budget)
    value = portfolio_value(portfolio)
    annual = annual_dividend_income(portfolio)
    balance = total_account_balance(accounts)

    return DashboardMetrics(
        total_income=income,
        total_expenses=expenses,
        net_cash_flow=income - expenses,
        portfolio_value=value,
        annual_dividend_income=annual,
        monthly_dividend_income=annual / MONTHS_PER_YEAR,
        total_account_balance=balance,
        total_net_worth=balance + value,
        account_count=len(accounts),
        holding_count=len(portfolio),
    )
