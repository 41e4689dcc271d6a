"""
Application Wiring for Investment Manager

Builds the storage backend, the audit logger and the dashboard store
from configuration. The UI (and anything else that needs a ready store)
goes through create_app_components instead of wiring pieces by hand.
"""

from typing import Optional

import structlog

from investment_manager.audit import AuditLogger, configure_logging
from investment_manager.config import Settings, get_settings
from investment_manager.models.audit import AuditEventBuilder
from investment_manager.models.finance import ScreenFilters
from investment_manager.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStorage,
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    KeyValueStorageInterface,
)
from investment_manager.state import DashboardStore


logger = structlog.get_logger(__name__)


def create_storage(
    backend: str,
    settings: Settings,
    audit_logger: Optional[AuditLogger] = None,
) -> KeyValueStorageInterface:
    """
    Create the configured key-value backend.

    If Google Sheets is selected but not configured, falls back to
    local files so the dashboard still works.
    """
    if backend == "memory":
        return InMemoryKeyValueStorage()

    if backend == "google_sheets":
        try:
            client = GoogleSheetsClient(settings.google_sheets)
            return GoogleSheetsKeyValueStorage(client)
        except Exception as e:
            # Storage not configured - continue with local files
            logger.warning("google_sheets_unavailable", error=str(e))
            if audit_logger:
                audit_logger.log(AuditEventBuilder.system_error(
                    error_type="storage_not_configured",
                    error_message=str(e),
                    details={"fallback": "json_file"},
                ))

    return JsonFileKeyValueStorage(settings.storage.data_dir)


def create_app_components(
    backend: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> DashboardStore:
    """
    Factory function to create a ready-to-load dashboard store.

    Args:
        backend: Override the configured storage backend
                 ('memory', 'json_file' or 'google_sheets').
        settings: Settings to use instead of the cached global ones.

    Returns:
        A DashboardStore. Call `await store.load()` before use.
    """
    settings = settings or get_settings()
    app_settings = settings.app
    configure_logging(app_settings.log_level, app_settings.log_json)

    audit_logger = AuditLogger(history_size=app_settings.audit_history_size)
    storage = create_storage(
        backend or settings.storage.backend, settings, audit_logger
    )

    screener_settings = settings.screener
    default_filters = ScreenFilters(
        min_yield=screener_settings.default_min_yield,
        payout_frequency=screener_settings.default_payout_frequency,
    )

    logger.info(
        "dashboard_store_created",
        backend=type(storage).__name__,
        environment=app_settings.app_environment,
    )
    return DashboardStore(
        storage=storage,
        audit_logger=audit_logger,
        default_filters=default_filters,
    )
