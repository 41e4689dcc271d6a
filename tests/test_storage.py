"""Tests for the key-value storage backends (no real Google API calls)."""

import asyncio
from unittest.mock import MagicMock

import gspread
import pytest

from investment_manager.config import GoogleSheetsSettings
from investment_manager.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStorage,
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    NotFoundError,
    StorageError,
)
from investment_manager.services.storage.google_sheets import KEY_VALUE_COLUMNS


class TestInMemoryStorage:

    def test_get_missing_returns_none(self):
        assert asyncio.run(InMemoryKeyValueStorage().get("budget-data")) is None

    def test_set_then_get(self):
        storage = InMemoryKeyValueStorage()
        assert asyncio.run(storage.set("budget-data", "{}")) is True
        assert asyncio.run(storage.get("budget-data")) == "{}"


class TestJsonFileStorage:
    """Local one-file-per-key storage."""

    def test_missing_key_returns_none(self, tmp_path):
        storage = JsonFileKeyValueStorage(tmp_path)
        assert asyncio.run(storage.get("accounts-data")) is None

    def test_set_creates_directory_and_file(self, tmp_path):
        data_dir = tmp_path / "nested" / "data"
        storage = JsonFileKeyValueStorage(data_dir)
        asyncio.run(storage.set("accounts-data", '[{"id": 1}]'))
        assert (data_dir / "accounts-data.json").read_text() == '[{"id": 1}]'
        assert asyncio.run(storage.get("accounts-data")) == '[{"id": 1}]'

    def test_overwrite_leaves_no_temp_files(self, tmp_path):
        storage = JsonFileKeyValueStorage(tmp_path)
        asyncio.run(storage.set("budget-data", "old"))
        asyncio.run(storage.set("budget-data", "new"))
        assert asyncio.run(storage.get("budget-data")) == "new"
        assert [p.name for p in tmp_path.iterdir()] == ["budget-data.json"]

    @pytest.mark.parametrize("key", ["../escape", "", ".hidden", "a/b"])
    def test_rejects_unsafe_keys(self, tmp_path, key):
        storage = JsonFileKeyValueStorage(tmp_path)
        with pytest.raises(StorageError):
            asyncio.run(storage.set(key, "x"))


@pytest.fixture
def sheet():
    worksheet = MagicMock()
    worksheet.get_all_values.return_value = [
        KEY_VALUE_COLUMNS,
        ["budget-data", '{"income": [], "expenses": []}', "2024-01-01T00:00:00+00:00"],
    ]
    return worksheet


@pytest.fixture
def sheets_storage(sheet):
    client = MagicMock(spec=GoogleSheetsClient)
    client.get_key_value_sheet.return_value = sheet
    return GoogleSheetsKeyValueStorage(client)


class TestGoogleSheetsStorage:
    """Sheets backend against a mocked worksheet."""

    def test_get_existing_key(self, sheets_storage):
        value = asyncio.run(sheets_storage.get("budget-data"))
        assert value == '{"income": [], "expenses": []}'

    def test_get_missing_key(self, sheets_storage):
        assert asyncio.run(sheets_storage.get("portfolio-data")) is None

    def test_set_existing_key_updates_row(self, sheets_storage, sheet):
        value = '{"income": [{"id": 1, "amount": "=1+1"}]}'
        assert asyncio.run(sheets_storage.set("budget-data", value)) is True

        kwargs = sheet.update.call_args.kwargs
        assert kwargs["range_name"] == "B2:C2"
        assert kwargs["values"][0][0] == value
        assert kwargs["value_input_option"] == "RAW"
        sheet.update_cell.assert_not_called()
        sheet.append_row.assert_not_called()

    def test_set_new_key_appends_row(self, sheets_storage, sheet):
        asyncio.run(sheets_storage.set("accounts-data", "[]"))
        args, kwargs = sheet.append_row.call_args
        assert args[0][:2] == ["accounts-data", "[]"]
        assert kwargs["value_input_option"] == "RAW"

    def test_api_errors_become_storage_errors(self, sheets_storage, sheet):
        sheet.get_all_values.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(StorageError, match="quota exceeded"):
            asyncio.run(sheets_storage.get("budget-data"))


class TestGoogleSheetsClient:
    """Worksheet lookup and creation."""

    @pytest.fixture
    def settings(self, tmp_path):
        credentials = tmp_path / "creds.json"
        credentials.write_text("{}")
        return GoogleSheetsSettings(
            credentials_path=str(credentials),
            spreadsheet_id="sheet-123",
        )

    def test_creates_worksheet_with_header(self, settings):
        client = GoogleSheetsClient(settings)
        spreadsheet = MagicMock()
        spreadsheet.worksheet.side_effect = gspread.WorksheetNotFound("KeyValue")
        client._spreadsheet = spreadsheet

        sheet = client.get_key_value_sheet()

        spreadsheet.add_worksheet.assert_called_once()
        assert sheet is spreadsheet.add_worksheet.return_value
        sheet.append_row.assert_called_once_with(KEY_VALUE_COLUMNS)

    def test_missing_spreadsheet_raises_not_found(self, settings):
        client = GoogleSheetsClient(settings)
        gspread_client = MagicMock()
        gspread_client.open_by_key.side_effect = gspread.SpreadsheetNotFound()
        client._client = gspread_client

        with pytest.raises(NotFoundError):
            client.get_spreadsheet()
