"""Tests for record validation, the ledger service and its persistence."""

import json

import pytest

from app.core.errors import PersistenceError, RecordNotFoundError, RecordValidationError
from app.domain.records import new_record, parse_day
from app.repositories.kv_store import FileStore, InMemoryStore
from app.repositories.ledger_repository import LedgerRepository
from app.services.ledger_service import SAVE_FAILED_MESSAGE, LedgerService


class BrokenStore(InMemoryStore):
    """Reads work, every write fails."""

    def set(self, key, value):
        raise PersistenceError("Failed to save data. Please try again.")

    def delete(self, key):
        raise PersistenceError("Failed to delete")


class TestNewRecord:
    def test_valid_record(self):
        record = new_record("  Rice ", "20", 10, "50.5")
        assert record.product_name == "Rice"
        assert record.initial_qty == 20
        assert record.qty_sold == 10
        assert record.price_per_unit == 50.5
        assert record.total_sales == 505
        assert record.remaining_qty == 10
        assert len(record.id) == 32

    def test_ids_are_unique(self):
        assert new_record("A", 1, 1, 1).id != new_record("A", 1, 1, 1).id

    @pytest.mark.parametrize(
        "args, field, message",
        [
            (("", 1, 1, 1), "productName", "Product name is required"),
            (("   ", 1, 1, 1), "productName", "Product name is required"),
            (("A", "abc", 1, 1), "initialQty", "Initial quantity must be a valid positive number"),
            (("A", -1, 0, 1), "initialQty", "Initial quantity must be a valid positive number"),
            (("A", 5, None, 1), "qtySold", "Quantity sold must be a valid positive number"),
            (("A", 5, 1, "free"), "pricePerUnit", "Price per unit must be a valid positive number"),
            (("A", 5, 1, "nan"), "pricePerUnit", "Price per unit must be a valid positive number"),
            (("A", 5, 6, 1), "qtySold", "Quantity sold cannot exceed initial quantity"),
        ],
    )
    def test_rejections(self, args, field, message):
        with pytest.raises(RecordValidationError) as exc_info:
            new_record(*args)
        assert exc_info.value.field == field
        assert exc_info.value.message == message
        assert exc_info.value.status_code == 400

    def test_first_invalid_field_wins(self):
        with pytest.raises(RecordValidationError) as exc_info:
            new_record("", "bad", "bad", "bad")
        assert exc_info.value.field == "productName"

    def test_parse_day(self):
        assert parse_day(" 2024-01-05 ") == "2024-01-05"
        with pytest.raises(RecordValidationError):
            parse_day("2024-13-01")


class TestLedgerService:
    def test_add_and_read_back(self, ledger_service, store):
        outcome = ledger_service.add_record("2024-01-01", "Rice", 20, 10, 50)

        assert outcome.persisted
        assert outcome.warning is None
        assert ledger_service.get_day("2024-01-01") == [outcome.record]

        stored = json.loads(store.get("dailySalesData"))
        assert stored["2024-01-01"][0]["productName"] == "Rice"
        assert stored["2024-01-01"][0]["totalSales"] == 500

    def test_records_keep_insertion_order(self, ledger_service):
        ledger_service.add_record("2024-01-01", "First", 5, 1, 10)
        ledger_service.add_record("2024-01-01", "Second", 5, 1, 10)
        assert [r.product_name for r in ledger_service.get_day("2024-01-01")] == ["First", "Second"]

    def test_invalid_record_leaves_ledger_untouched(self, ledger_service, store):
        with pytest.raises(RecordValidationError):
            ledger_service.add_record("2024-01-01", "Rice", 1, 2, 50)
        assert ledger_service.ledger() == {}
        assert store.get("dailySalesData") is None

    def test_removing_last_record_drops_the_day(self, ledger_service, store):
        outcome = ledger_service.add_record("2024-01-01", "Rice", 20, 10, 50)
        ledger_service.remove_record("2024-01-01", outcome.record.id)

        assert ledger_service.available_dates() == []
        assert json.loads(store.get("dailySalesData")) == {}

    def test_remove_unknown_record(self, ledger_service):
        ledger_service.add_record("2024-01-01", "Rice", 20, 10, 50)
        with pytest.raises(RecordNotFoundError):
            ledger_service.remove_record("2024-01-01", "missing")

    def test_available_dates_newest_first(self, ledger_service):
        for day in ("2024-01-02", "2024-01-10", "2024-01-01"):
            ledger_service.add_record(day, "Rice", 1, 1, 1)
        assert ledger_service.available_dates() == ["2024-01-10", "2024-01-02", "2024-01-01"]

    def test_ledger_returns_a_copy(self, ledger_service):
        ledger_service.add_record("2024-01-01", "Rice", 1, 1, 1)
        snapshot = ledger_service.ledger()
        snapshot["2024-01-01"].clear()
        assert len(ledger_service.get_day("2024-01-01")) == 1

    def test_failed_save_keeps_in_memory_state(self):
        service = LedgerService(LedgerRepository(BrokenStore(), "dailySalesData"))
        outcome = service.add_record("2024-01-01", "Rice", 20, 10, 50)

        assert not outcome.persisted
        assert outcome.warning == SAVE_FAILED_MESSAGE
        assert [r.product_name for r in service.get_day("2024-01-01")] == ["Rice"]

    def test_failed_clear_still_empties_session(self):
        service = LedgerService(LedgerRepository(BrokenStore(), "dailySalesData"))
        service.add_record("2024-01-01", "Rice", 20, 10, 50)
        outcome = service.clear()

        assert not outcome.persisted
        assert service.ledger() == {}

    def test_reload_reads_from_store(self, ledger_service, store):
        ledger_service.add_record("2024-01-01", "Rice", 20, 10, 50)
        other = LedgerService(LedgerRepository(store, "dailySalesData"))
        assert list(other.ledger()) == ["2024-01-01"]


class TestLedgerRepository:
    def test_unreadable_payload_loads_empty(self):
        store = InMemoryStore({"dailySalesData": b"{not json"})
        assert LedgerRepository(store, "dailySalesData").load() == {}

    def test_derived_fields_are_recomputed(self):
        payload = {
            "2024-01-01": [
                {
                    "id": "x",
                    "productName": "Rice",
                    "initialQty": 10,
                    "qtySold": 4,
                    "pricePerUnit": 100,
                    "totalSales": 1,
                    "remainingQty": 99,
                }
            ],
            "2024-01-02": [],
        }
        store = InMemoryStore({"dailySalesData": json.dumps(payload).encode("utf-8")})
        ledger = LedgerRepository(store, "dailySalesData").load()

        assert list(ledger) == ["2024-01-01"]
        assert ledger["2024-01-01"][0].total_sales == 400
        assert ledger["2024-01-01"][0].remaining_qty == 6


class TestFileStore:
    def test_round_trip_and_delete(self, tmp_path):
        store = FileStore(tmp_path / "store")
        assert store.get("dailySalesData") is None

        store.set("dailySalesData", b"{}")
        assert store.get("dailySalesData") == b"{}"
        assert (tmp_path / "store" / "dailySalesData.json").exists()

        store.delete("dailySalesData")
        assert store.get("dailySalesData") is None
        store.delete("dailySalesData")

    def test_write_failure_raises_persistence_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = FileStore(blocker / "store")

        with pytest.raises(PersistenceError) as exc_info:
            store.set("dailySalesData", b"{}")
        assert exc_info.value.message == "Failed to save data. Please try again."


def stored_row(record_id, name="Rice", initial=10, sold=4, price=100):
    return {"id": record_id, "productName": name, "initialQty": initial, "qtySold": sold, "pricePerUnit": price}


class BackupRejectingStore(InMemoryStore):
    def set(self, key, value):
        if key.endswith(".backup"):
            raise PersistenceError("Failed to save data. Please try again.")
        super().set(key, value)


class TestDamagedLedger:
    def test_bad_row_only_drops_that_row(self):
        raw = json.dumps(
            {
                "2024-01-01": [stored_row("a"), stored_row("b", name="Beans")],
                "2024-01-02": [stored_row("c", sold="2.5")],
            }
        ).encode("utf-8")
        store = InMemoryStore({"dailySalesData": raw})
        service = LedgerService(LedgerRepository(store, "dailySalesData"))

        outcome = service.add_record("2024-01-03", "Salt", 5, 1, 10)

        assert outcome.persisted
        stored = json.loads(store.get("dailySalesData"))
        assert [r["id"] for r in stored["2024-01-01"]] == ["a", "b"]
        assert "2024-01-02" not in stored
        assert len(stored["2024-01-03"]) == 1
        assert store.get("dailySalesData.backup") == raw

    def test_invalid_date_keys_are_skipped(self):
        raw = json.dumps({"Jan 1 2024": [stored_row("a")], "2024-01-02": [stored_row("b")]}).encode("utf-8")
        store = InMemoryStore({"dailySalesData": raw})

        ledger = LedgerRepository(store, "dailySalesData").load()

        assert list(ledger) == ["2024-01-02"]
        assert store.get("dailySalesData.backup") == raw

    def test_clean_payload_is_not_backed_up(self):
        raw = json.dumps({"2024-01-02": [stored_row("b")]}).encode("utf-8")
        store = InMemoryStore({"dailySalesData": raw})

        LedgerRepository(store, "dailySalesData").load()

        assert store.get("dailySalesData.backup") is None

    def test_unreadable_payload_is_backed_up_before_saving(self):
        store = InMemoryStore({"dailySalesData": b"{not json"})
        service = LedgerService(LedgerRepository(store, "dailySalesData"))

        assert service.add_record("2024-01-03", "Salt", 5, 1, 10).persisted
        assert store.get("dailySalesData.backup") == b"{not json"

    def test_writes_are_refused_when_backup_fails(self):
        store = BackupRejectingStore({"dailySalesData": b"{not json"})
        service = LedgerService(LedgerRepository(store, "dailySalesData"))

        outcome = service.add_record("2024-01-03", "Salt", 5, 1, 10)

        assert service.load_error
        assert not outcome.persisted
        assert outcome.warning == SAVE_FAILED_MESSAGE
        assert store.get("dailySalesData") == b"{not json"
        assert [r.product_name for r in service.get_day("2024-01-03")] == ["Salt"]
