"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets can be used as the key-value backend:
1. Users can inspect the raw saved data directly in Sheets
2. The same state is available from any machine with the credentials
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- One row per key, the whole collection serialized in one cell
- No transactions (each key is written independently anyway)
- Lookups scan the worksheet (fine for three keys)
"""

from datetime import datetime, timezone
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from investment_manager.config import GoogleSheetsSettings, get_settings
from investment_manager.services.storage.interface import (
    BackendUnavailableError,
    KeyValueStorageInterface,
    NotFoundError,
    StorageError,
)


# Column layout of the key-value worksheet
KEY_VALUE_COLUMNS = [
    "key",
    "value",
    "updated_at",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for connecting.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise BackendUnavailableError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise BackendUnavailableError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise NotFoundError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_key_value_sheet(self) -> gspread.Worksheet:
        """Get or create the key-value worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.worksheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.worksheet_name,
                rows=100,
                cols=len(KEY_VALUE_COLUMNS),
            )
            sheet.append_row(KEY_VALUE_COLUMNS)
        return sheet


class GoogleSheetsKeyValueStorage(KeyValueStorageInterface):
    """
    Google Sheets implementation of key-value storage.

    Each key is one row: [key, value, updated_at].
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    async def get(self, key: str) -> Optional[str]:
        """Return the value cell for a key, or None if the key has no row."""
        try:
            sheet = self._client.get_key_value_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header

            for row in all_rows:
                if row and row[0] == key:
                    return row[1] if len(row) > 1 else None

            return None
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read key {key}: {e}")

    async def set(self, key: str, value: str) -> bool:
        """Update the row for a key in place, or append a new one."""
        try:
            sheet = self._client.get_key_value_sheet()
            all_rows = sheet.get_all_values()
            now = datetime.now(timezone.utc).isoformat()

            for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is header
                if row and row[0] == key:
                    sheet.update(
                        range_name=f"B{idx}:C{idx}",
                        values=[[value, now]],
                        value_input_option="RAW",
                    )
                    return True

            sheet.append_row([key, value, now], value_input_option="RAW")
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write key {key}: {e}")
