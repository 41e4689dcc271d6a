"""
Tests for the dashboard state store

The store is exercised both from plain synchronous code (saves are
written inline) and from inside an event loop (saves run as tasks
and are awaited with flush()).
"""

import asyncio
import json
import threading
from decimal import Decimal

import pytest

from investment_manager.audit import AuditLogger
from investment_manager.catalog import get_security
from investment_manager.models.audit import AuditEventType
from investment_manager.models.finance import AccountType, FrequencyFilter, ScreenFilters
from investment_manager.services.storage import (
    InMemoryKeyValueStorage,
    StorageError,
)
from investment_manager.state import (
    ACCOUNTS_KEY,
    BUDGET_KEY,
    PORTFOLIO_KEY,
    DashboardStore,
    MonotonicIdGenerator,
)


class FailingStorage(InMemoryKeyValueStorage):
    """Reads work, every write fails."""

    async def set(self, key: str, value: str) -> bool:
        raise StorageError("disk full")


class BrokenReadStorage(InMemoryKeyValueStorage):
    async def get(self, key: str):
        raise StorageError("unreachable")


def frozen_clock() -> int:
    return 1_700_000_000_000


def stored(storage: InMemoryKeyValueStorage, key: str):
    raw = asyncio.run(storage.get(key))
    return json.loads(raw) if raw is not None else None


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def store(storage) -> DashboardStore:
    return DashboardStore(storage, id_generator=MonotonicIdGenerator(frozen_clock))


class TestBudgetOperations:
    """Income and expense mutations."""

    def test_add_income_appends_and_totals(self, store):
        first = store.add_income("Salary", "3000")
        second = store.add_income("Bonus", "500.25", category="work")
        assert [e.id for e in store.budget.income] == [first.id, second.id]
        assert first.id != second.id
        assert store.metrics().total_income == Decimal("3500.25")

    def test_add_expense_does_not_touch_income(self, store):
        store.add_expense("Rent", "1200")
        assert store.budget.income == ()
        assert store.metrics().total_expenses == Decimal("1200")

    def test_rapid_inserts_get_unique_ids(self, store):
        ids = [store.add_expense(f"Item {i}", "1").id for i in range(50)]
        assert len(set(ids)) == 50

    def test_delete_income_keeps_order_of_others(self, store):
        a = store.add_income("A", "1")
        b = store.add_income("B", "2")
        c = store.add_income("C", "3")
        assert store.delete_income(b.id) is True
        assert [e.id for e in store.budget.income] == [a.id, c.id]
        assert store.budget.income[0] == a

    def test_delete_missing_entry_is_noop(self, store):
        store.add_expense("Rent", "1200")
        assert store.delete_expense(12345) is False
        assert len(store.budget.expenses) == 1

    def test_budget_is_persisted(self, store, storage):
        entry = store.add_income("Salary", "3000")
        saved = stored(storage, BUDGET_KEY)
        assert saved["income"][0]["id"] == entry.id
        assert saved["expenses"] == []


class TestPortfolioOperations:
    """Adding and removing holdings."""

    def test_add_to_portfolio_snapshots_security(self, store):
        security = get_security("SVOL")
        before = store.metrics().portfolio_value
        holding = store.add_to_portfolio(security, "10")

        assert holding.shares == Decimal("10")
        assert holding.price == security.price
        assert holding.purchase_price == security.price
        assert store.metrics().portfolio_value - before == 10 * security.price

    @pytest.mark.parametrize("shares", ["0", "-3", "abc", "", None])
    def test_invalid_share_count_is_ignored(self, store, shares):
        assert store.add_to_portfolio(get_security("QYLD"), shares) is None
        assert store.portfolio == ()
        events = store.audit_logger.recent_events(limit=1)
        assert events[0].event_type == AuditEventType.HOLDING_REJECTED

    def test_huge_share_count_is_accepted(self, store):
        holding = store.add_to_portfolio(get_security("QYLD"), "1" * 600)
        assert store.portfolio == (holding,)
        events = store.audit_logger.recent_events(limit=1)
        assert events[0].event_type == AuditEventType.HOLDING_ADDED

    def test_remove_from_portfolio(self, store, storage):
        keep = store.add_to_portfolio(get_security("QYLD"), "5")
        drop = store.add_to_portfolio(get_security("ULTY"), "2")
        assert store.remove_from_portfolio(drop.id) is True
        assert store.portfolio == (keep,)
        assert [h["ticker"] for h in stored(storage, PORTFOLIO_KEY)] == ["QYLD"]


class TestAccountOperations:
    """Accounts and balance updates."""

    def test_add_account(self, store):
        account = store.add_account("Everyday", "savings", "1500", "Big Bank")
        assert account.type == AccountType.SAVINGS
        assert account.institution == "Big Bank"
        assert store.metrics().total_account_balance == Decimal("1500")

    def test_update_balance_changes_only_that_account(self, store):
        checking = store.add_account("Checking", "checking", "100")
        savings = store.add_account("Savings", "savings", "200")
        store.add_to_portfolio(get_security("QYLD"), "10")

        updated = store.update_account_balance(checking.id, "1234.56")

        assert updated.balance == Decimal("1234.56")
        assert updated.name == checking.name
        assert updated.type == checking.type
        assert store.accounts[1] == savings
        metrics = store.metrics()
        assert metrics.total_account_balance == Decimal("1434.56")
        assert metrics.total_net_worth == Decimal("1434.56") + Decimal("178.50")

    def test_very_long_name_is_accepted(self, store):
        account = store.add_account("A" * 600, "checking", "10")
        assert store.accounts == (account,)
        events = store.audit_logger.recent_events(limit=1)
        assert events[0].event_type == AuditEventType.ACCOUNT_ADDED

    def test_update_missing_account_returns_none(self, store):
        store.add_account("Checking", "checking", "100")
        assert store.update_account_balance(999, "5") is None
        assert store.accounts[0].balance == Decimal("100")

    def test_delete_account(self, store, storage):
        account = store.add_account("Old", "other", "0")
        assert store.delete_account(account.id) is True
        assert store.accounts == ()
        assert stored(storage, ACCOUNTS_KEY) == []


class TestScreen:
    """Screener access through the store."""

    def test_screen_uses_default_filters(self, storage):
        store = DashboardStore(storage, default_filters=ScreenFilters(min_yield="55"))
        assert [s.ticker for s in store.screen()] == ["SVOL", "ULTY"]

    def test_screen_with_explicit_filters(self, store):
        filters = ScreenFilters(min_yield="0", payout_frequency=FrequencyFilter.QUARTERLY)
        assert [s.ticker for s in store.screen(filters)] == ["DIVO"]


class TestLoadAndRoundTrip:
    """Loading saved state."""

    def test_round_trip_through_storage(self, store, storage):
        store.add_income("Salary", "3000", "work")
        store.add_expense("Rent", "1200")
        store.add_to_portfolio(get_security("JEPI"), "3.5")
        store.add_account("Visa", "credit", "-99.99")

        reloaded = DashboardStore(storage)
        asyncio.run(reloaded.load())

        assert reloaded.budget == store.budget
        assert reloaded.portfolio == store.portfolio
        assert reloaded.accounts == store.accounts
        assert reloaded.metrics() == store.metrics()

    def test_load_with_no_saved_data_starts_empty(self, storage):
        store = DashboardStore(storage)
        asyncio.run(store.load())
        assert store.budget.income == ()
        assert store.portfolio == ()
        assert store.accounts == ()
        absent = [
            e for e in store.audit_logger.recent_events()
            if e.event_type == AuditEventType.COLLECTION_LOAD_ABSENT
        ]
        assert len(absent) == 3

    def test_load_failure_is_treated_as_empty(self):
        store = DashboardStore(BrokenReadStorage())
        asyncio.run(store.load())
        assert store.accounts == ()

    def test_corrupt_collection_does_not_affect_others(self, storage):
        asyncio.run(storage.set(PORTFOLIO_KEY, "{not json"))
        asyncio.run(storage.set(ACCOUNTS_KEY, json.dumps([
            {"id": 5, "name": "Checking", "type": "checking", "balance": 10}
        ])))
        store = DashboardStore(storage)
        asyncio.run(store.load())
        assert store.portfolio == ()
        assert store.accounts[0].balance == Decimal("10")

    def test_new_ids_are_above_loaded_ids(self, storage):
        far_future = 9_999_999_999_999
        asyncio.run(storage.set(ACCOUNTS_KEY, json.dumps([
            {"id": far_future, "name": "Checking", "type": "checking", "balance": "1"}
        ])))
        store = DashboardStore(storage)
        asyncio.run(store.load())
        assert store.add_account("New", "savings", "2").id > far_future


class TestPersistenceFailures:
    """Save failures never reach the caller."""

    def test_failed_save_keeps_memory_state(self):
        audit = AuditLogger()
        store = DashboardStore(FailingStorage(), audit_logger=audit)

        entry = store.add_income("Salary", "3000")

        assert store.budget.income == (entry,)
        failures = [
            e for e in audit.recent_events()
            if e.event_type == AuditEventType.PERSIST_FAILED
        ]
        assert len(failures) == 1
        assert failures[0].collection == BUDGET_KEY


class TestStoreInsideEventLoop:
    """Saves scheduled as background tasks."""

    def test_mutations_are_saved_after_flush(self, storage):
        async def scenario():
            store = DashboardStore(storage)
            await store.load()
            store.add_income("Salary", "3000")
            store.add_income("Bonus", "100")
            store.add_account("Checking", "checking", "50")
            await store.flush()
            return store

        store = asyncio.run(scenario())
        assert len(stored(storage, BUDGET_KEY)["income"]) == 2
        assert stored(storage, ACCOUNTS_KEY)[0]["id"] == store.accounts[0].id


class TestSharedStoreAcrossThreads:
    """One store used by several script threads at once."""

    def test_concurrent_mutations_are_not_lost(self, store, storage):
        def add_entries(prefix):
            for i in range(25):
                store.add_income(f"{prefix}-{i}", "1")

        threads = [
            threading.Thread(target=add_entries, args=(name,))
            for name in ("a", "b", "c", "d")
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store.budget.income) == 100
        assert len({e.id for e in store.budget.income}) == 100
        assert len(stored(storage, BUDGET_KEY)["income"]) == 100
