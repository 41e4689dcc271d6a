"""Configuration package."""

from investment_manager.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    ScreenerSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "ScreenerSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
