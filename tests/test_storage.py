"""
Tests for the key-value stores.

The Google Sheets store runs against an in-process fake worksheet; no
network access is needed.
"""

import json
import pytest

from budget_tracker.config import StorageSettings
from budget_tracker.services.storage import (
    CorruptValueError,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    StorageError,
    create_store,
)
from budget_tracker.services.storage.google_sheets import (
    STORE_COLUMNS,
    GoogleSheetsKeyValueStore,
)


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the store."""
    
    def __init__(self):
        self.rows = [list(STORE_COLUMNS)]
    
    def get_all_values(self):
        return [list(row) for row in self.rows]
    
    def append_row(self, row, value_input_option=None):
        self.rows.append(list(row))
    
    def update_cell(self, row, col, value):
        self.rows[row - 1][col - 1] = value
    
    def delete_rows(self, index):
        del self.rows[index - 1]


class FakeSheetsClient:
    def __init__(self):
        self.sheet = FakeWorksheet()
        self.sheet_requests = 0
    
    def get_store_sheet(self):
        self.sheet_requests += 1
        return self.sheet


class TestInMemoryStore:
    """Tests for InMemoryKeyValueStore."""
    
    @pytest.mark.asyncio
    async def test_set_then_get(self):
        """Test values come back equal but not shared."""
        store = InMemoryKeyValueStore()
        value = {"totalBalance": 1.5, "currency": "USD"}
        
        assert await store.set("wallet", value) is True
        loaded = await store.get("wallet")
        
        assert loaded == value
        assert loaded is not value
    
    @pytest.mark.asyncio
    async def test_absent_key_is_none(self):
        """Test get on a missing key."""
        assert await InMemoryKeyValueStore().get("wallet") is None
    
    @pytest.mark.asyncio
    async def test_corrupt_blob_raises(self):
        """Test that a blob that is not JSON is reported as corrupt."""
        store = InMemoryKeyValueStore()
        store.put_raw("wallet", "{oops")
        
        with pytest.raises(CorruptValueError) as exc_info:
            await store.get("wallet")
        assert exc_info.value.key == "wallet"
    
    @pytest.mark.asyncio
    async def test_unserializable_value_raises(self):
        """Test that set refuses values json cannot encode."""
        with pytest.raises(StorageError):
            await InMemoryKeyValueStore().set("wallet", {"when": object()})
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("number", [float("inf"), float("-inf"), float("nan")])
    async def test_non_finite_numbers_are_refused(self, number):
        """Test that NaN and infinities never reach the stored blob."""
        store = InMemoryKeyValueStore()
        with pytest.raises(StorageError):
            await store.set("transactions", [{"amount": number}])
        assert store.get_raw("transactions") is None
    
    @pytest.mark.asyncio
    async def test_prefix_isolates_keys(self):
        """Test that raw keys carry the prefix and keys() strips it."""
        store = InMemoryKeyValueStore(key_prefix="test_")
        await store.set("settings", {})
        
        assert store._data.keys() == {"test_settings"}
        assert await store.keys() == ["settings"]
    
    @pytest.mark.asyncio
    async def test_delete(self):
        """Test delete reports whether the key existed."""
        store = InMemoryKeyValueStore()
        await store.set("categories", [])
        
        assert await store.delete("categories") is True
        assert await store.delete("categories") is False
        assert await store.get("categories") is None


class TestJsonFileStore:
    """Tests for JsonFileKeyValueStore."""
    
    @pytest.mark.asyncio
    async def test_one_file_per_key(self, tmp_path):
        """Test file naming and content."""
        store = JsonFileKeyValueStore(tmp_path)
        await store.set("transactions", [{"id": "1", "amount": 2.5}])
        
        path = tmp_path / "budget_transactions.json"
        assert path.exists()
        assert json.loads(path.read_text(encoding="utf-8")) == [{"id": "1", "amount": 2.5}]
    
    @pytest.mark.asyncio
    async def test_creates_data_dir(self, tmp_path):
        """Test the directory is created on first write."""
        store = JsonFileKeyValueStore(tmp_path / "nested" / "data")
        await store.set("wallet", {"totalBalance": 0})
        assert await store.get("wallet") == {"totalBalance": 0}
    
    @pytest.mark.asyncio
    async def test_overwrite_leaves_no_temp_files(self, tmp_path):
        """Test repeated writes leave exactly one file."""
        store = JsonFileKeyValueStore(tmp_path)
        for balance in (1, 2, 3):
            await store.set("wallet", {"totalBalance": balance})
        
        assert [p.name for p in tmp_path.iterdir()] == ["budget_wallet.json"]
        assert await store.get("wallet") == {"totalBalance": 3}
    
    @pytest.mark.asyncio
    async def test_missing_dir_reads_as_empty(self, tmp_path):
        """Test reads before any write."""
        store = JsonFileKeyValueStore(tmp_path / "missing")
        assert await store.get("wallet") is None
        assert await store.keys() == []
    
    @pytest.mark.asyncio
    async def test_corrupt_file_raises(self, tmp_path):
        """Test a truncated file is reported as corrupt."""
        (tmp_path / "budget_settings.json").write_text('{"currency": ', encoding="utf-8")
        
        with pytest.raises(CorruptValueError):
            await JsonFileKeyValueStore(tmp_path).get("settings")
    
    @pytest.mark.asyncio
    async def test_invalid_utf8_is_corrupt(self, tmp_path):
        """Test bytes that are not UTF-8 are reported as corrupt, not raised raw."""
        (tmp_path / "budget_wallet.json").write_bytes(b"\xff")
        
        with pytest.raises(CorruptValueError):
            await JsonFileKeyValueStore(tmp_path).get("wallet")
    
    @pytest.mark.asyncio
    async def test_non_finite_number_leaves_file_untouched(self, tmp_path):
        """Test a refused write keeps the previous document."""
        store = JsonFileKeyValueStore(tmp_path)
        await store.set("wallet", {"totalBalance": 1.0})
        
        with pytest.raises(StorageError):
            await store.set("wallet", {"totalBalance": float("inf")})
        
        assert await store.get("wallet") == {"totalBalance": 1.0}
        assert [p.name for p in tmp_path.iterdir()] == ["budget_wallet.json"]
    
    @pytest.mark.asyncio
    async def test_keys_and_delete(self, tmp_path):
        """Test listing and removing keys."""
        store = JsonFileKeyValueStore(tmp_path)
        await store.set("wallet", {})
        await store.set("settings", {})
        (tmp_path / "unrelated.json").write_text("{}", encoding="utf-8")
        
        assert await store.keys() == ["settings", "wallet"]
        assert await store.delete("wallet") is True
        assert await store.delete("wallet") is False
        assert await store.keys() == ["settings"]


class TestGoogleSheetsStore:
    """Tests for GoogleSheetsKeyValueStore against a fake worksheet."""
    
    @pytest.mark.asyncio
    async def test_set_appends_then_updates(self):
        """Test one row per key."""
        client = FakeSheetsClient()
        store = GoogleSheetsKeyValueStore(client=client)
        
        await store.set("wallet", {"totalBalance": 1})
        await store.set("wallet", {"totalBalance": 2})
        
        rows = client.sheet.rows
        assert len(rows) == 2
        assert rows[1][0] == "budget_wallet"
        assert json.loads(rows[1][1]) == {"totalBalance": 2}
        assert await store.get("wallet") == {"totalBalance": 2}
    
    @pytest.mark.asyncio
    async def test_absent_and_corrupt(self):
        """Test missing rows and unreadable cells."""
        client = FakeSheetsClient()
        store = GoogleSheetsKeyValueStore(client=client)
        assert await store.get("settings") is None
        
        client.sheet.rows.append(["budget_settings", "not json", ""])
        with pytest.raises(CorruptValueError):
            await store.get("settings")
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [{"when": object()}, {"amount": float("inf")}])
    async def test_unserializable_value_fails_without_retry(self, value):
        """Test serialization errors raise at once and never touch the sheet."""
        client = FakeSheetsClient()
        store = GoogleSheetsKeyValueStore(client=client)
        
        with pytest.raises(StorageError):
            await store.set("wallet", value)
        assert client.sheet_requests == 0
        assert client.sheet.rows == [list(STORE_COLUMNS)]
    
    @pytest.mark.asyncio
    async def test_keys_and_delete(self):
        """Test listing by prefix and deleting rows."""
        client = FakeSheetsClient()
        store = GoogleSheetsKeyValueStore(client=client)
        await store.set("wallet", {})
        await store.set("settings", {})
        client.sheet.rows.append(["other_app_key", "{}", ""])
        
        assert await store.keys() == ["wallet", "settings"]
        assert await store.delete("wallet") is True
        assert await store.delete("wallet") is False
        assert await store.keys() == ["settings"]


class TestCreateStore:
    """Tests for the store factory."""
    
    def test_memory_backend(self):
        """Test selecting the in-memory store."""
        store = create_store(StorageSettings(backend="memory"))
        assert isinstance(store, InMemoryKeyValueStore)
    
    @pytest.mark.asyncio
    async def test_json_file_backend(self, tmp_path):
        """Test the default backend writes under data_dir with the prefix."""
        store = create_store(StorageSettings(
            backend="json_file", data_dir=tmp_path, key_prefix="ledger_"
        ))
        assert isinstance(store, JsonFileKeyValueStore)
        
        await store.set("wallet", {})
        assert (tmp_path / "ledger_wallet.json").exists()
    
    def test_unknown_backend_rejected(self):
        """Test that settings refuse backends that don't exist."""
        with pytest.raises(ValueError):
            StorageSettings(backend="postgres")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
