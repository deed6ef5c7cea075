"""Ledger business logic: recording and removing per-day sale records."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, List, Optional

from app.core.errors import PersistenceError, RecordNotFoundError
from app.core.logging import store_logger
from app.domain.models import Ledger, ProductSaleRecord
from app.domain.records import new_record, parse_day
from app.repositories.protocols import LedgerRepositoryProtocol

SAVE_FAILED_MESSAGE = "Failed to save data. Please try again."


@dataclass
class SaveOutcome:
    """Result of a ledger mutation; a failed save keeps the in-memory change."""

    persisted: bool = True
    warning: Optional[str] = None
    record: Optional[ProductSaleRecord] = None


class LedgerService:
    """
    Owns the session's in-memory ledger and writes it through the repository.

    Every mutation replaces the ledger mapping instead of editing it in place,
    then saves the whole ledger. When the store rejects the write the new state
    stays usable for the rest of the session and the caller gets a warning.
    """

    def __init__(self, repository: LedgerRepositoryProtocol):
        self.repository = repository
        self._lock = threading.RLock()
        self._ledger: Optional[Ledger] = None
        self.load_error: Optional[str] = None

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def _current(self) -> Ledger:
        if self._ledger is None:
            try:
                self._ledger = self.repository.load()
                self.load_error = None
            except PersistenceError as exc:
                store_logger.warning("Starting with an empty ledger", error=exc.message)
                self._ledger = {}
                self.load_error = exc.message
        return self._ledger

    def ledger(self) -> Ledger:
        with self._lock:
            return {day: list(records) for day, records in self._current().items()}

    def reload(self) -> Ledger:
        with self._lock:
            self._ledger = None
            return self.ledger()

    def get_day(self, day: str) -> List[ProductSaleRecord]:
        day = parse_day(day)
        with self._lock:
            return list(self._current().get(day, []))

    def available_dates(self) -> List[str]:
        with self._lock:
            return sorted(self._current().keys(), reverse=True)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _commit(self, updated: Ledger, record: Optional[ProductSaleRecord] = None) -> SaveOutcome:
        self._ledger = updated
        if self.load_error:
            # the stored document was never read; saving would replace it with a partial ledger
            store_logger.warning("Ledger not saved; stored data could not be loaded", error=self.load_error)
            return SaveOutcome(persisted=False, warning=SAVE_FAILED_MESSAGE, record=record)
        try:
            self.repository.save(updated)
        except PersistenceError as exc:
            store_logger.warning("Ledger save failed; keeping in-memory state", error=exc.message)
            return SaveOutcome(persisted=False, warning=SAVE_FAILED_MESSAGE, record=record)
        return SaveOutcome(record=record)

    def add_record(
        self,
        day: str,
        product_name: Optional[str],
        initial_qty: Any,
        qty_sold: Any,
        price_per_unit: Any,
    ) -> SaveOutcome:
        day = parse_day(day)
        # validation happens before the ledger is touched
        record = new_record(product_name, initial_qty, qty_sold, price_per_unit)
        with self._lock:
            current = self._current()
            updated = dict(current)
            updated[day] = [*current.get(day, []), record]
            outcome = self._commit(updated, record)
        store_logger.info("Record added", date=day, record_id=record.id, product=record.product_name)
        return outcome

    def remove_record(self, day: str, record_id: str) -> SaveOutcome:
        day = parse_day(day)
        with self._lock:
            current = self._current()
            records = current.get(day, [])
            remaining = [r for r in records if r.id != record_id]
            if len(remaining) == len(records):
                raise RecordNotFoundError(f"Record {record_id} not found on {day}")

            updated = dict(current)
            if remaining:
                updated[day] = remaining
            else:
                # a day without records is removed, never stored empty
                del updated[day]
            outcome = self._commit(updated)
        store_logger.info("Record removed", date=day, record_id=record_id)
        return outcome

    def clear(self) -> SaveOutcome:
        with self._lock:
            self._ledger = {}
            try:
                self.repository.clear()
            except PersistenceError as exc:
                store_logger.warning("Ledger clear failed; keeping in-memory state", error=exc.message)
                return SaveOutcome(persisted=False, warning=SAVE_FAILED_MESSAGE)
            self.load_error = None
        store_logger.info("Ledger cleared")
        return SaveOutcome()
