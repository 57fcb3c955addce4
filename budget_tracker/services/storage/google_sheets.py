"""
Google Sheets Store Implementation

A worksheet used as a key-value table, one row per key:

    key | value_json | updated_at

Useful when the user wants to see their data in Sheets and keep it
backed up by Google without running a database.

TRADEOFFS:
- Each document lives in one cell, so it is capped by the Sheets
  cell limit (50,000 characters); fine for a personal ledger
- No transactions across keys, same as every other store
- Every call is a network round trip; connect and write are retried
"""

import json
from datetime import datetime, timezone
from typing import Any, Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from budget_tracker.config import GoogleSheetsSettings, get_settings
from budget_tracker.services.storage.interface import (
    ConnectionError,
    CorruptValueError,
    KeyValueStoreInterface,
    StorageError,
)


STORE_COLUMNS = [
    "key",
    "value_json",
    "updated_at",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.
    
    Handles authentication and provides retry logic for API calls.
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
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")
        
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
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet
    
    def get_store_sheet(self) -> gspread.Worksheet:
        """Get or create the key-value worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.store_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.store_sheet_name,
                rows=100,
                cols=len(STORE_COLUMNS),
            )
            sheet.append_row(STORE_COLUMNS)
        return sheet


class GoogleSheetsKeyValueStore(KeyValueStoreInterface):
    """
    Google Sheets implementation of the key-value store.
    
    Values are JSON-serialized into the second column.
    """
    
    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        key_prefix: str = "budget_",
    ):
        self._client = client or GoogleSheetsClient()
        self._prefix = key_prefix
    
    def _full_key(self, key: str) -> str:
        return f"{self._prefix}{key}"
    
    def _find_row(self, rows: list[list[str]], full_key: str) -> Optional[int]:
        """1-based sheet row index for a key (row 1 is the header)."""
        for idx, row in enumerate(rows[1:], start=2):
            if row and row[0] == full_key:
                return idx
        return None
    
    async def get(self, key: str) -> Optional[Any]:
        try:
            sheet = self._client.get_store_sheet()
            rows = sheet.get_all_values()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read '{key}': {e}")
        
        idx = self._find_row(rows, self._full_key(key))
        if idx is None:
            return None
        
        row = rows[idx - 1]
        blob = row[1] if len(row) > 1 else ""
        if not blob:
            return None
        try:
            return json.loads(blob)
        except json.JSONDecodeError as e:
            raise CorruptValueError(key, str(e))
    
    async def set(self, key: str, value: Any) -> bool:
        """Write a document, updating the key's row or appending a new one."""
        try:
            blob = json.dumps(value, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Failed to serialize '{key}': {e}")
        return await self._write_row(key, blob)
    
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _write_row(self, key: str, blob: str) -> bool:
        """Upsert one row; only this network part is retried."""
        full_key = self._full_key(key)
        row = [full_key, blob, datetime.now(timezone.utc).isoformat()]
        try:
            sheet = self._client.get_store_sheet()
            idx = self._find_row(sheet.get_all_values(), full_key)
            if idx is None:
                sheet.append_row(row, value_input_option="RAW")
            else:
                for col_idx, cell_value in enumerate(row, start=1):
                    sheet.update_cell(idx, col_idx, cell_value)
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write '{key}': {e}")
    
    async def delete(self, key: str) -> bool:
        try:
            sheet = self._client.get_store_sheet()
            idx = self._find_row(sheet.get_all_values(), self._full_key(key))
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete '{key}': {e}")
    
    async def keys(self) -> list[str]:
        try:
            sheet = self._client.get_store_sheet()
            rows = sheet.get_all_values()[1:]  # Skip header
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list keys: {e}")
        
        return [
            row[0][len(self._prefix):]
            for row in rows
            if row and row[0].startswith(self._prefix)
        ]
