"""Analytics endpoints computed from the stored ledger."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from app.core.cache import etag_json
from app.domain.filters import Period
from app.domain.models import DailySummary
from app.services.aggregation import (
    CHART_METRICS,
    build_chart_series,
    build_daily_summaries,
    build_product_rollups,
    build_recent_daily_series,
    compute_period_stats,
    filter_by_period,
)
from app.services.dependencies import get_ledger_service
from app.services.ledger_service import LedgerService


router = APIRouter(prefix="/analytics", tags=["analytics"])


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _period(value: str) -> Period:
    try:
        return Period.parse(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _filtered(service: LedgerService, period: Period) -> List[DailySummary]:
    return filter_by_period(build_daily_summaries(service.ledger()), period)


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.get("/summaries")
def get_summaries(
    request: Request,
    period: str = Query("all", description="all | 7days | 30days | 90days"),
    service: LedgerService = Depends(get_ledger_service),
):
    """Daily summaries inside the period, newest first."""
    selected = _period(period)
    summaries = _filtered(service, selected)
    return etag_json(request, {"period": selected.value, "summaries": [s.to_dict() for s in summaries]})


@router.get("/products")
def get_products(
    request: Request,
    limit: int = Query(0, ge=0, le=1000, description="0 returns every product"),
    service: LedgerService = Depends(get_ledger_service),
):
    """Cross-date product rollups by cumulative revenue."""
    rollups = build_product_rollups(service.ledger())
    if limit:
        rollups = rollups[:limit]
    return etag_json(request, {"products": [r.to_dict() for r in rollups]})


@router.get("/stats")
def get_stats(
    request: Request,
    period: str = Query("all", description="all | 7days | 30days | 90days"),
    service: LedgerService = Depends(get_ledger_service),
):
    """Totals, per-day averages and growth rate over the period."""
    selected = _period(period)
    stats = compute_period_stats(_filtered(service, selected))
    return etag_json(request, {"period": selected.value, **stats.to_dict()})


@router.get("/chart")
def get_chart(
    request: Request,
    period: str = Query("all", description="all | 7days | 30days | 90days"),
    metric: str = Query("revenue", description="revenue | units | products"),
    service: LedgerService = Depends(get_ledger_service),
):
    """Chronological series of one metric for the analytics chart."""
    selected = _period(period)
    if metric not in CHART_METRICS:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown metric '{metric}' (expected one of: {', '.join(CHART_METRICS)})",
        )
    points = build_chart_series(_filtered(service, selected), metric)  # type: ignore[arg-type]
    return etag_json(
        request,
        {"period": selected.value, "metric": metric, "points": [p.to_dict() for p in points]},
    )


@router.get("/recent")
def get_recent(
    request: Request,
    days: int = Query(7, ge=1, le=366),
    service: LedgerService = Depends(get_ledger_service),
):
    """Revenue and units for each of the last `days` days, zero-filled."""
    return etag_json(request, {"days": days, "series": build_recent_daily_series(service.ledger(), days)})
