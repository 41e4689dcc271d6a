"""
Domain State Store

Owns the three top-level collections (budget, portfolio, accounts)
and mediates every change to them.

Flow of a mutation:
1. Build the new collection value (models are frozen; nothing is
   modified in place)
2. Swap it in as the current state
3. Hand the serialized collection to the persistence writer
   (fire-and-forget; failures are logged, never raised)
4. Audit the change

DESIGN DECISION: The view validates form input before calling in.
The store does not re-validate, and no input problem is allowed to
raise past this boundary: numeric text falls back to 0 and an invalid
share count turns add_to_portfolio into a logged no-op.

One store may be shared by several threads (every Streamlit session
runs in its own), so each mutation holds the store lock from reading
the current collection until the new one is handed to the writer.
"""

import asyncio
import functools
import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from investment_manager.audit import AuditLogger
from investment_manager.catalog import SAMPLE_SECURITIES
from investment_manager.metrics import compute_metrics
from investment_manager.models.audit import AuditEventBuilder
from investment_manager.models.finance import (
    AccountRecord,
    AccountType,
    Budget,
    BudgetEntry,
    DashboardMetrics,
    Holding,
    ScreenFilters,
    Security,
    parse_decimal,
)
from investment_manager.screener import screen_securities
from investment_manager.services.storage import KeyValueStorageInterface
from investment_manager.state.ids import MonotonicIdGenerator
from investment_manager.state.writer import PersistenceWriter


BUDGET_KEY = "budget-data"
PORTFOLIO_KEY = "portfolio-data"
ACCOUNTS_KEY = "accounts-data"

_HOLDINGS = TypeAdapter(list[Holding])
_ACCOUNTS = TypeAdapter(list[AccountRecord])


def _synchronized(method):
    """Run a mutation with the store lock held."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


def serialize_budget(budget: Budget) -> str:
    return budget.model_dump_json(by_alias=True)


def serialize_portfolio(portfolio: Sequence[Holding]) -> str:
    return _HOLDINGS.dump_json(list(portfolio), by_alias=True).decode("utf-8")


def serialize_accounts(accounts: Sequence[AccountRecord]) -> str:
    return _ACCOUNTS.dump_json(list(accounts), by_alias=True).decode("utf-8")


def deserialize_budget(raw: str) -> Budget:
    return Budget.model_validate_json(raw)


def deserialize_portfolio(raw: str) -> tuple[Holding, ...]:
    return tuple(_HOLDINGS.validate_json(raw))


def deserialize_accounts(raw: str) -> tuple[AccountRecord, ...]:
    return tuple(_ACCOUNTS.validate_json(raw))


class DashboardStore:
    """
    In-memory dashboard state with write-through persistence.

    Snapshots returned by the properties are immutable (frozen models
    and tuples), so the view can hold on to them safely.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        securities: tuple[Security, ...] = SAMPLE_SECURITIES,
        default_filters: Optional[ScreenFilters] = None,
        id_generator: Optional[MonotonicIdGenerator] = None,
        writer: Optional[PersistenceWriter] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._writer = writer or PersistenceWriter(storage, self._audit_logger)
        self._ids = id_generator or MonotonicIdGenerator()
        self._securities = securities
        self._default_filters = default_filters or ScreenFilters()
        self._lock = threading.RLock()

        self._budget = Budget()
        self._portfolio: tuple[Holding, ...] = ()
        self._accounts: tuple[AccountRecord, ...] = ()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def storage(self) -> KeyValueStorageInterface:
        return self._storage

    @property
    def budget(self) -> Budget:
        return self._budget

    @property
    def portfolio(self) -> tuple[Holding, ...]:
        return self._portfolio

    @property
    def accounts(self) -> tuple[AccountRecord, ...]:
        return self._accounts

    @property
    def securities(self) -> tuple[Security, ...]:
        return self._securities

    @property
    def default_filters(self) -> ScreenFilters:
        return self._default_filters

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    def metrics(self) -> DashboardMetrics:
        """Recompute the dashboard figures from the current state."""
        return compute_metrics(self._budget, self._portfolio, self._accounts)

    def screen(self, filters: Optional[ScreenFilters] = None) -> list[Security]:
        """Screen the catalog; uses the default filters if none are given."""
        return screen_securities(self._securities, filters or self._default_filters)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """
        Load all three collections from storage.

        The reads run concurrently. A collection with no saved data,
        a failed read or an unreadable blob starts empty; that is a
        normal first-run state, not an error.
        """
        budget_raw, portfolio_raw, accounts_raw = await asyncio.gather(
            self._fetch(BUDGET_KEY),
            self._fetch(PORTFOLIO_KEY),
            self._fetch(ACCOUNTS_KEY),
        )

        budget = self._decode(BUDGET_KEY, budget_raw, deserialize_budget)
        if budget is not None:
            self._budget = budget
            self._audit_logger.log(AuditEventBuilder.collection_loaded(
                BUDGET_KEY, len(budget.income) + len(budget.expenses)
            ))

        portfolio = self._decode(PORTFOLIO_KEY, portfolio_raw, deserialize_portfolio)
        if portfolio is not None:
            self._portfolio = portfolio
            self._audit_logger.log(
                AuditEventBuilder.collection_loaded(PORTFOLIO_KEY, len(portfolio))
            )

        accounts = self._decode(ACCOUNTS_KEY, accounts_raw, deserialize_accounts)
        if accounts is not None:
            self._accounts = accounts
            self._audit_logger.log(
                AuditEventBuilder.collection_loaded(ACCOUNTS_KEY, len(accounts))
            )

        self._ids.observe(e.id for e in self._budget.income)
        self._ids.observe(e.id for e in self._budget.expenses)
        self._ids.observe(h.id for h in self._portfolio)
        self._ids.observe(a.id for a in self._accounts)

    async def _fetch(self, key: str) -> Optional[str]:
        try:
            raw = await self._storage.get(key)
        except Exception as e:
            self._audit_logger.log(AuditEventBuilder.collection_load_absent(
                key, reason="read_failed", error_message=str(e)
            ))
            return None
        if raw is None:
            self._audit_logger.log(
                AuditEventBuilder.collection_load_absent(key, reason="not_found")
            )
        return raw

    def _decode(self, key: str, raw: Optional[str], decoder: Any) -> Any:
        if raw is None:
            return None
        try:
            return decoder(raw)
        except (ValidationError, ValueError) as e:
            self._audit_logger.log(AuditEventBuilder.collection_load_absent(
                key, reason="unreadable", error_message=str(e)
            ))
            return None

    async def flush(self) -> None:
        """Wait for every scheduled save to be attempted."""
        await self._writer.flush()

    # ------------------------------------------------------------------
    # Budget
    # ------------------------------------------------------------------

    @_synchronized
    def add_income(
        self,
        description: str,
        amount: Any,
        category: Optional[str] = None,
    ) -> BudgetEntry:
        """Append an income entry and save the budget."""
        entry = self._new_entry(description, amount, category)
        self._set_budget(self._budget.model_copy(
            update={"income": self._budget.income + (entry,)}
        ))
        self._audit_logger.log(AuditEventBuilder.entry_added(
            BUDGET_KEY, "income", entry.id, str(entry.amount)
        ))
        return entry

    @_synchronized
    def add_expense(
        self,
        description: str,
        amount: Any,
        category: Optional[str] = None,
    ) -> BudgetEntry:
        """Append an expense entry and save the budget."""
        entry = self._new_entry(description, amount, category)
        self._set_budget(self._budget.model_copy(
            update={"expenses": self._budget.expenses + (entry,)}
        ))
        self._audit_logger.log(AuditEventBuilder.entry_added(
            BUDGET_KEY, "expense", entry.id, str(entry.amount)
        ))
        return entry

    @_synchronized
    def delete_income(self, entry_id: int) -> bool:
        remaining = tuple(e for e in self._budget.income if e.id != entry_id)
        found = len(remaining) != len(self._budget.income)
        self._set_budget(self._budget.model_copy(update={"income": remaining}))
        self._audit_logger.log(
            AuditEventBuilder.entry_deleted(BUDGET_KEY, "income", entry_id, found)
        )
        return found

    @_synchronized
    def delete_expense(self, entry_id: int) -> bool:
        remaining = tuple(e for e in self._budget.expenses if e.id != entry_id)
        found = len(remaining) != len(self._budget.expenses)
        self._set_budget(self._budget.model_copy(update={"expenses": remaining}))
        self._audit_logger.log(
            AuditEventBuilder.entry_deleted(BUDGET_KEY, "expense", entry_id, found)
        )
        return found

    def _new_entry(
        self,
        description: str,
        amount: Any,
        category: Optional[str],
    ) -> BudgetEntry:
        return BudgetEntry(
            id=self._ids.next_id(),
            description=description,
            amount=amount,
            category=category,
        )

    def _set_budget(self, budget: Budget) -> None:
        self._budget = budget
        self._writer.schedule(BUDGET_KEY, serialize_budget(budget))

    # ------------------------------------------------------------------
    # Portfolio
    # ------------------------------------------------------------------

    @_synchronized
    def add_to_portfolio(
        self,
        security: Security,
        share_count: Any,
    ) -> Optional[Holding]:
        """
        Buy a position in a catalog security at its current price.

        Returns the new holding, or None if the share count is not a
        positive number (nothing is changed in that case).
        """
        shares = parse_decimal(share_count)
        if shares <= 0:
            self._audit_logger.log(AuditEventBuilder.holding_rejected(
                PORTFOLIO_KEY, security.ticker, str(share_count)
            ))
            return None

        holding = Holding.from_security(
            security,
            holding_id=self._ids.next_id(),
            shares=shares,
            purchased_at=datetime.now(timezone.utc),
        )
        self._set_portfolio(self._portfolio + (holding,))
        self._audit_logger.log(AuditEventBuilder.holding_added(
            PORTFOLIO_KEY, holding.id, holding.ticker,
            str(holding.shares), str(holding.price),
        ))
        return holding

    @_synchronized
    def remove_from_portfolio(self, holding_id: int) -> bool:
        remaining = tuple(h for h in self._portfolio if h.id != holding_id)
        found = len(remaining) != len(self._portfolio)
        self._set_portfolio(remaining)
        self._audit_logger.log(
            AuditEventBuilder.holding_removed(PORTFOLIO_KEY, holding_id, found)
        )
        return found

    def _set_portfolio(self, portfolio: tuple[Holding, ...]) -> None:
        self._portfolio = portfolio
        self._writer.schedule(PORTFOLIO_KEY, serialize_portfolio(portfolio))

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    @_synchronized
    def add_account(
        self,
        name: str,
        account_type: Any = AccountType.CHECKING,
        balance: Any = None,
        institution: Optional[str] = None,
    ) -> AccountRecord:
        """Append an account and save the account list."""
        account = AccountRecord(
            id=self._ids.next_id(),
            name=name,
            type=account_type,
            institution=institution,
            balance=balance,
        )
        self._set_accounts(self._accounts + (account,))
        self._audit_logger.log(AuditEventBuilder.account_added(
            ACCOUNTS_KEY, account.id, account.name, account.type.value
        ))
        return account

    @_synchronized
    def update_account_balance(
        self,
        account_id: int,
        new_balance: Any,
    ) -> Optional[AccountRecord]:
        """
        Replace one account's balance; every other field is untouched.

        Returns the updated account, or None if no account has that id.
        """
        balance: Decimal = parse_decimal(new_balance)
        updated: Optional[AccountRecord] = None
        old_balance: Optional[str] = None
        accounts = []
        for account in self._accounts:
            if account.id == account_id:
                old_balance = str(account.balance)
                account = account.model_copy(update={"balance": balance})
                updated = account
            accounts.append(account)

        self._set_accounts(tuple(accounts))
        self._audit_logger.log(AuditEventBuilder.account_balance_updated(
            ACCOUNTS_KEY, account_id, old_balance, str(balance)
        ))
        return updated

    @_synchronized
    def delete_account(self, account_id: int) -> bool:
        remaining = tuple(a for a in self._accounts if a.id != account_id)
        found = len(remaining) != len(self._accounts)
        self._set_accounts(remaining)
        self._audit_logger.log(
            AuditEventBuilder.account_deleted(ACCOUNTS_KEY, account_id, found)
        )
        return found

    def _set_accounts(self, accounts: tuple[AccountRecord, ...]) -> None:
        self._accounts = accounts
        self._writer.schedule(ACCOUNTS_KEY, serialize_accounts(accounts))
