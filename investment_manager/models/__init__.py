"""
Data Models Package

Pydantic models for the dashboard state, the screener and the audit trail.
"""

from investment_manager.models.finance import (
    ACCOUNT_TYPE_LABELS,
    AccountRecord,
    AccountType,
    Budget,
    BudgetEntry,
    DashboardMetrics,
    FrequencyFilter,
    Holding,
    PayoutFrequency,
    ScreenFilters,
    Security,
    parse_decimal,
)
from investment_manager.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from investment_manager.models.validation import ValidationIssue

__all__ = [
    # Finance models
    "ACCOUNT_TYPE_LABELS",
    "AccountRecord",
    "AccountType",
    "Budget",
    "BudgetEntry",
    "DashboardMetrics",
    "FrequencyFilter",
    "Holding",
    "PayoutFrequency",
    "ScreenFilters",
    "Security",
    "parse_decimal",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Validation
    "ValidationIssue",
]
