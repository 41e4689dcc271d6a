"""Derived metrics package."""

from investment_manager.metrics.calculator import (
    annual_dividend_income,
    compute_metrics,
    holding_annual_dividend,
    holding_value,
    monthly_dividend_income,
    net_cash_flow,
    portfolio_value,
    sum_amounts,
    top_holdings,
    total_account_balance,
    total_expenses,
    total_income,
    total_net_worth,
)

__all__ = [
    "annual_dividend_income",
    "compute_metrics",
    "holding_annual_dividend",
    "holding_value",
    "monthly_dividend_income",
    "net_cash_flow",
    "portfolio_value",
    "sum_amounts",
    "top_holdings",
    "total_account_balance",
    "total_expenses",
    "total_income",
    "total_net_worth",
]
