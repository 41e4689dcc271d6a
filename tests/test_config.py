"""Tests for settings loading and application wiring."""

from decimal import Decimal

import pytest

from investment_manager.config import get_settings, validate_all_settings
from investment_manager.models.audit import AuditEventType
from investment_manager.models.finance import FrequencyFilter
from investment_manager.orchestrator import create_app_components
from investment_manager.services.storage import (
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
)
from investment_manager.state import DashboardStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate every test from the developer's environment and .env file."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "STORAGE_BACKEND",
        "GOOGLE_SHEETS_CREDENTIALS_PATH",
        "GOOGLE_SHEETS_SPREADSHEET_ID",
        "SCREENER_DEFAULT_MIN_YIELD",
        "SCREENER_DEFAULT_PAYOUT_FREQUENCY",
        "LOG_LEVEL",
        "DEBUG_MODE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("LOG_JSON", "false")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Environment-driven configuration."""

    def test_defaults(self, tmp_path):
        settings = get_settings()
        assert settings.storage.backend == "json_file"
        assert settings.storage.data_dir == tmp_path / "data"
        assert settings.screener.default_min_yield == Decimal("50")
        assert settings.screener.default_payout_frequency == FrequencyFilter.ALL
        assert settings.app.log_level == "INFO"
        assert settings.app.debug_mode is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SCREENER_DEFAULT_MIN_YIELD", "60")
        monkeypatch.setenv("SCREENER_DEFAULT_PAYOUT_FREQUENCY", "monthly")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("DEBUG_MODE", "true")
        settings = get_settings()
        assert settings.screener.default_min_yield == Decimal("60")
        assert settings.screener.default_payout_frequency == FrequencyFilter.MONTHLY
        assert settings.app.log_level == "DEBUG"
        assert settings.app.debug_mode is True

    def test_validate_all_settings_reports_missing_sheets_config(self):
        results = validate_all_settings()
        assert results["storage"] is True
        assert results["screener"] is True
        assert results["app"] is True
        assert results["google_sheets"] is False
        assert "google_sheets_error" in results


class TestCreateAppComponents:
    """Store wiring from configuration."""

    def test_memory_backend(self):
        store = create_app_components(backend="memory")
        assert isinstance(store, DashboardStore)
        assert isinstance(store.storage, InMemoryKeyValueStorage)
        assert store.default_filters.min_yield == Decimal("50")

    def test_default_backend_is_json_files(self, tmp_path):
        store = create_app_components()
        assert isinstance(store.storage, JsonFileKeyValueStorage)
        assert store.storage.data_dir == tmp_path / "data"

    def test_unconfigured_sheets_falls_back_to_json_files(self):
        store = create_app_components(backend="google_sheets")
        assert isinstance(store.storage, JsonFileKeyValueStorage)
        events = store.audit_logger.recent_events()
        assert events[0].event_type == AuditEventType.SYSTEM_ERROR

    def test_screener_defaults_flow_into_store(self, monkeypatch):
        monkeypatch.setenv("SCREENER_DEFAULT_MIN_YIELD", "55")
        get_settings.cache_clear()
        store = create_app_components(backend="memory")
        assert [s.ticker for s in store.screen()] == ["SVOL", "ULTY"]
