"""Dashboard state package: the store, its writer and id generation."""

from investment_manager.state.ids import MonotonicIdGenerator
from investment_manager.state.store import (
    ACCOUNTS_KEY,
    BUDGET_KEY,
    PORTFOLIO_KEY,
    DashboardStore,
)
from investment_manager.state.writer import PersistenceWriter

__all__ = [
    "ACCOUNTS_KEY",
    "BUDGET_KEY",
    "PORTFOLIO_KEY",
    "DashboardStore",
    "MonotonicIdGenerator",
    "PersistenceWriter",
]
