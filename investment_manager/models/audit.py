"""
Audit Models for Investment Manager

Every change to the dashboard state and every persistence outcome
produces an audit event. The events feed the structured log and the
recent-activity list shown in the UI.

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Budget
    INCOME_ADDED = "income_added"
    INCOME_DELETED = "income_deleted"
    EXPENSE_ADDED = "expense_added"
    EXPENSE_DELETED = "expense_deleted"

    # Portfolio
    HOLDING_ADDED = "holding_added"
    HOLDING_REJECTED = "holding_rejected"
    HOLDING_REMOVED = "holding_removed"

    # Accounts
    ACCOUNT_ADDED = "account_added"
    ACCOUNT_BALANCE_UPDATED = "account_balance_updated"
    ACCOUNT_DELETED = "account_deleted"

    # Persistence
    COLLECTION_LOADED = "collection_loaded"
    COLLECTION_LOAD_ABSENT = "collection_load_absent"
    COLLECTION_PERSISTED = "collection_persisted"
    PERSIST_FAILED = "persist_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


DESCRIPTION_MAX_LENGTH = 500


class AuditEvent(BaseModel):
    """
    A single audit event.

    `collection` names the storage key the event is about
    (e.g. 'budget-data'); `entity_id` is the entry, holding or
    account id when the event concerns one item.
    """

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    collection: Optional[str] = None
    entity_id: Optional[int] = None

    description: str = Field(..., max_length=DESCRIPTION_MAX_LENGTH)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    @field_validator("description", mode="before")
    @classmethod
    def clip_description(cls, v: Any) -> Any:
        """Descriptions embed user text; clip instead of rejecting."""
        if isinstance(v, str) and len(v) > DESCRIPTION_MAX_LENGTH:
            return v[:DESCRIPTION_MAX_LENGTH - 3] + "..."
        return v

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "collection": self.collection,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entry_added("budget-data", "income", 17, "2500")
        audit_logger.log(event)
    """

    @staticmethod
    def entry_added(
        collection: str,
        kind: str,
        entry_id: int,
        amount: str,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.INCOME_ADDED if kind == "income"
            else AuditEventType.EXPENSE_ADDED
        )
        return AuditEvent(
            event_type=event_type,
            collection=collection,
            entity_id=entry_id,
            description=f"{kind.capitalize()} entry added",
            details={"amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def entry_deleted(
        collection: str,
        kind: str,
        entry_id: int,
        found: bool,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.INCOME_DELETED if kind == "income"
            else AuditEventType.EXPENSE_DELETED
        )
        return AuditEvent(
            event_type=event_type,
            collection=collection,
            entity_id=entry_id,
            description=f"{kind.capitalize()} entry deleted" if found
            else f"{kind.capitalize()} entry not found, nothing deleted",
            details={"found": found},
            is_user_action=True,
        )

    @staticmethod
    def holding_added(
        collection: str,
        holding_id: int,
        ticker: str,
        shares: str,
        price: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HOLDING_ADDED,
            collection=collection,
            entity_id=holding_id,
            description=f"Added {shares} shares of {ticker}",
            details={"ticker": ticker, "shares": shares, "price": price},
            is_user_action=True,
        )

    @staticmethod
    def holding_rejected(
        collection: str,
        ticker: str,
        share_count: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HOLDING_REJECTED,
            severity=AuditSeverity.WARNING,
            collection=collection,
            description=f"Share count for {ticker} is not a positive number",
            details={"ticker": ticker, "share_count": share_count},
            is_user_action=True,
        )

    @staticmethod
    def holding_removed(
        collection: str,
        holding_id: int,
        found: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HOLDING_REMOVED,
            collection=collection,
            entity_id=holding_id,
            description="Holding removed" if found
            else "Holding not found, nothing removed",
            details={"found": found},
            is_user_action=True,
        )

    @staticmethod
    def account_added(
        collection: str,
        account_id: int,
        name: str,
        account_type: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_ADDED,
            collection=collection,
            entity_id=account_id,
            description=f"Account '{name}' added",
            details={"name": name, "type": account_type},
            is_user_action=True,
        )

    @staticmethod
    def account_balance_updated(
        collection: str,
        account_id: int,
        old_balance: Optional[str],
        new_balance: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_BALANCE_UPDATED,
            collection=collection,
            entity_id=account_id,
            description="Account balance updated" if old_balance is not None
            else "Account not found, balance not updated",
            details={"old_balance": old_balance, "new_balance": new_balance},
            is_user_action=True,
        )

    @staticmethod
    def account_deleted(
        collection: str,
        account_id: int,
        found: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_DELETED,
            collection=collection,
            entity_id=account_id,
            description="Account deleted" if found
            else "Account not found, nothing deleted",
            details={"found": found},
            is_user_action=True,
        )

    @staticmethod
    def collection_loaded(collection: str, item_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COLLECTION_LOADED,
            collection=collection,
            description=f"Loaded {collection}",
            details={"item_count": item_count},
        )

    @staticmethod
    def collection_load_absent(
        collection: str,
        reason: str,
        error_message: Optional[str] = None,
    ) -> AuditEvent:
        """No usable saved data; the collection starts empty."""
        return AuditEvent(
            event_type=AuditEventType.COLLECTION_LOAD_ABSENT,
            severity=AuditSeverity.WARNING if error_message
            else AuditSeverity.INFO,
            collection=collection,
            description=f"No saved data for {collection}, starting fresh",
            details={"reason": reason},
            error_message=error_message,
        )

    @staticmethod
    def collection_persisted(collection: str, version: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COLLECTION_PERSISTED,
            severity=AuditSeverity.DEBUG,
            collection=collection,
            description=f"Saved {collection}",
            details={"version": version},
        )

    @staticmethod
    def persist_failed(
        collection: str,
        version: int,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSIST_FAILED,
            severity=AuditSeverity.ERROR,
            collection=collection,
            description=f"Error saving {collection}",
            details={"version": version},
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            details=details or {},
            error_message=error_message,
        )
