"""Ledger endpoints: per-day sale records."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from app.domain.payloads import RecordIn
from app.domain.records import parse_day
from app.services.aggregation import compute_day_stats
from app.services.dependencies import get_ledger_service
from app.services.ledger_service import LedgerService, SaveOutcome


router = APIRouter(prefix="/sales", tags=["sales"])


# -----------------------------------------------------------------------------
# Response Models
# -----------------------------------------------------------------------------


class RecordOut(BaseModel):
    id: str
    productName: str
    initialQty: int
    qtySold: int
    pricePerUnit: float
    totalSales: float
    remainingQty: int


class DayStatsOut(BaseModel):
    date: str
    totalRevenue: float
    totalProducts: int
    totalUnitsSold: int
    topProduct: Optional[str] = None
    topProductRevenue: float
    topProductShare: float


class DayOut(BaseModel):
    date: str
    records: List[RecordOut]
    stats: DayStatsOut


class MutationOut(BaseModel):
    """Result of a write; `persisted` is false when the store rejected it."""
    persisted: bool
    warning: Optional[str] = None
    record: Optional[RecordOut] = None


def _mutation(outcome: SaveOutcome) -> MutationOut:
    return MutationOut(
        persisted=outcome.persisted,
        warning=outcome.warning,
        record=RecordOut(**outcome.record.to_dict()) if outcome.record else None,
    )


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.get("/dates", response_model=List[str])
def list_dates(service: LedgerService = Depends(get_ledger_service)):
    """Dates with at least one record, newest first."""
    return service.available_dates()


@router.get("/{day}", response_model=DayOut)
def get_day(day: str, service: LedgerService = Depends(get_ledger_service)):
    day = parse_day(day)
    records = service.get_day(day)
    return DayOut(
        date=day,
        records=[RecordOut(**r.to_dict()) for r in records],
        stats=DayStatsOut(**compute_day_stats(day, records).to_dict()),
    )


@router.post("/{day}/records", response_model=MutationOut, status_code=status.HTTP_201_CREATED)
def add_record(day: str, body: RecordIn, service: LedgerService = Depends(get_ledger_service)):
    outcome = service.add_record(
        day,
        body.product_name,
        body.initial_qty,
        body.qty_sold,
        body.price_per_unit,
    )
    return _mutation(outcome)


@router.delete("/{day}/records/{record_id}", response_model=MutationOut)
def remove_record(day: str, record_id: str, service: LedgerService = Depends(get_ledger_service)):
    return _mutation(service.remove_record(day, record_id))


@router.delete("", response_model=MutationOut)
def clear_ledger(service: LedgerService = Depends(get_ledger_service)):
    return _mutation(service.clear())
