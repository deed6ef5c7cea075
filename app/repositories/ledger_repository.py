"""Ledger persistence: the whole date -> records mapping under one store key."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple

from app.core.config import settings
from app.core.errors import PersistenceError, RecordValidationError
from app.core.logging import store_logger
from app.domain.models import Ledger, ProductSaleRecord
from app.domain.records import new_record, parse_day
from app.repositories.protocols import KeyValueStore

BACKUP_SUFFIX = ".backup"


def ledger_to_payload(ledger: Ledger) -> Dict[str, List[Dict[str, Any]]]:
    return {day: [r.to_dict() for r in records] for day, records in ledger.items() if records}


def _record_from_row(row: Any) -> ProductSaleRecord:
    # stored rows go through the same checks as form input; derived fields are recomputed
    return new_record(
        row["productName"],
        row["initialQty"],
        row["qtySold"],
        row["pricePerUnit"],
        record_id=str(row["id"]),
    )


def parse_ledger_payload(payload: Any) -> Tuple[Ledger, int]:
    """
    Rebuilds a ledger from its JSON form, skipping what cannot be read.

    Date keys are normalized to ISO dates and rows are validated one by one.
    Returns the ledger and the number of skipped keys and rows. A payload that
    is not a JSON object raises ValueError.
    """
    if not isinstance(payload, dict):
        raise ValueError("Ledger payload must be a JSON object")

    ledger: Ledger = {}
    skipped = 0
    for key, rows in payload.items():
        try:
            day = parse_day(str(key))
        except RecordValidationError:
            store_logger.warning("Skipping ledger entry with invalid date", date=key)
            skipped += 1
            continue
        if not isinstance(rows, list):
            store_logger.warning("Skipping ledger entry that is not a list", date=key)
            skipped += 1
            continue

        for position, row in enumerate(rows):
            try:
                record = _record_from_row(row)
            except (RecordValidationError, KeyError, TypeError, AttributeError) as exc:
                store_logger.warning("Skipping unreadable ledger row", date=key, position=position, error=str(exc))
                skipped += 1
                continue
            ledger.setdefault(day, []).append(record)
    return ledger, skipped


class LedgerRepository:
    """
    Reads and writes the ledger as a single JSON document.

    When the stored document is partly or wholly unreadable, its raw bytes are
    copied to `<key>.backup` before anything is returned, so the next save
    cannot be the only copy of the data left.
    """

    def __init__(self, store: KeyValueStore, key: str | None = None):
        self.store = store
        self.key = key or settings.LEDGER_KEY

    @property
    def backup_key(self) -> str:
        return f"{self.key}{BACKUP_SUFFIX}"

    def _backup(self, raw: bytes, reason: str) -> None:
        try:
            self.store.set(self.backup_key, raw)
        except PersistenceError as exc:
            store_logger.error("Could not back up unreadable ledger", key=self.key, reason=reason)
            raise PersistenceError(
                "Stored sales data is unreadable and could not be backed up",
                {"error": exc.message},
            ) from exc
        store_logger.warning("Unreadable ledger data backed up", key=self.key, backup=self.backup_key, reason=reason)

    def load(self) -> Ledger:
        raw = self.store.get(self.key)
        if not raw:
            return {}
        try:
            ledger, skipped = parse_ledger_payload(json.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, ValueError) as exc:
            self._backup(raw, str(exc))
            return {}
        if skipped:
            self._backup(raw, f"{skipped} entries skipped")
        return ledger

    def save(self, ledger: Ledger) -> None:
        body = json.dumps(ledger_to_payload(ledger), ensure_ascii=False).encode("utf-8")
        self.store.set(self.key, body)
        store_logger.debug("Ledger saved", key=self.key, days=len(ledger), size=len(body))

    def clear(self) -> None:
        self.store.delete(self.key)
