"""
Aggregation engine.

Pure functions turning the date-keyed ledger into the derived views used by the
dashboard and the reports: daily summaries, product rollups, period filtering
and growth statistics. Nothing here touches storage or the clock unless the
caller omits `now`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Literal, Optional, Sequence

import pandas as pd

from app.domain.filters import Period, PeriodWindow
from app.domain.models import (
    DailySummary,
    DayStats,
    Ledger,
    PeriodStats,
    PeriodTotals,
    ProductRollup,
    ProductSaleRecord,
    SeriesPoint,
)
from app.services.formatting import format_short_date

ChartMetric = Literal["revenue", "units", "products"]


def _top_record(records: Iterable[ProductSaleRecord]) -> Optional[ProductSaleRecord]:
    """Highest total_sales; on ties the first record in insertion order wins."""
    top: Optional[ProductSaleRecord] = None
    for record in records:
        if top is None or record.total_sales > top.total_sales:
            top = record
    return top


# ------------------------------------------------------------------------------
# Daily summaries
# ------------------------------------------------------------------------------


def summarize_day(day: str, records: Sequence[ProductSaleRecord]) -> DailySummary:
    top = _top_record(records)
    return DailySummary(
        date=day,
        total_revenue=sum(r.total_sales for r in records),
        total_products=len(records),
        total_units_sold=sum(r.qty_sold for r in records),
        top_product=top.product_name if top else "",
        top_product_revenue=top.total_sales if top else 0,
    )


def build_daily_summaries(ledger: Ledger) -> List[DailySummary]:
    """One summary per ledger date, newest first."""
    summaries = [summarize_day(day, records) for day, records in ledger.items()]
    summaries.sort(key=lambda s: s.date, reverse=True)
    return summaries


# ------------------------------------------------------------------------------
# Product rollups
# ------------------------------------------------------------------------------


def _records_frame(ledger: Ledger) -> pd.DataFrame:
    rows = [
        {
            "date": day,
            "product_name": record.product_name,
            "revenue": record.total_sales,
            "units": record.qty_sold,
        }
        for day, records in ledger.items()
        for record in records
    ]
    return pd.DataFrame(rows, columns=["date", "product_name", "revenue", "units"])


def build_product_rollups(ledger: Ledger) -> List[ProductRollup]:
    """
    Folds every record into a rollup keyed by the exact product name.

    Sorted by cumulative revenue descending; equal revenues keep the order in
    which the products were first seen. `average_price` is None for a product
    with zero cumulative units.
    """
    frame = _records_frame(ledger)
    if frame.empty:
        return []

    grouped = (
        frame.groupby("product_name", sort=False)
        .agg(
            total_revenue=("revenue", "sum"),
            total_units_sold=("units", "sum"),
            appearances=("date", "nunique"),
            last_sold=("date", "max"),
        )
        .sort_values("total_revenue", ascending=False, kind="mergesort")
    )

    rollups: List[ProductRollup] = []
    for name, row in grouped.iterrows():
        revenue = float(row["total_revenue"])
        units = int(row["total_units_sold"])
        rollups.append(
            ProductRollup(
                product_name=str(name),
                total_revenue=revenue,
                total_units_sold=units,
                appearances=int(row["appearances"]),
                last_sold=str(row["last_sold"]),
                average_price=revenue / units if units else None,
            )
        )
    return rollups


# ------------------------------------------------------------------------------
# Period filtering and statistics
# ------------------------------------------------------------------------------


def filter_by_period(
    summaries: Sequence[DailySummary],
    period: Period | str,
    now: Optional[datetime] = None,
) -> List[DailySummary]:
    """
    Keeps the summaries dated on or after `now - N days`.

    `now` defaults to the wall clock at call time, so the same ledger can give
    different windows on different days.
    """
    period = Period.parse(period)
    if period is Period.ALL:
        return list(summaries)
    window = PeriodWindow(period=period, now=now or datetime.now())
    return [s for s in summaries if window.contains(s.date)]


def _mean_revenue(summaries: Sequence[DailySummary]) -> float:
    return sum(s.total_revenue for s in summaries) / (len(summaries) or 1)


def compute_period_stats(filtered: Sequence[DailySummary]) -> PeriodStats:
    """
    Totals, per-day averages and growth for a date-descending summary list.

    Growth compares the mean daily revenue of the earlier slice (`[mid:]`, the
    tail) with the later slice (`[:mid]`, the head), `mid = len // 2`. With an
    odd count the earlier slice gets the extra day. A zero earlier mean gives 0.
    """
    days = len(filtered)
    total = PeriodTotals(
        revenue=sum(s.total_revenue for s in filtered),
        products=sum(s.total_products for s in filtered),
        units=sum(s.total_units_sold for s in filtered),
    )
    divisor = days or 1
    avg_daily = PeriodTotals(
        revenue=total.revenue / divisor,
        products=total.products / divisor,
        units=total.units / divisor,
    )

    mid = days // 2
    earlier_avg = _mean_revenue(filtered[mid:])
    later_avg = _mean_revenue(filtered[:mid])
    growth = (later_avg - earlier_avg) / earlier_avg * 100 if earlier_avg > 0 else 0.0

    return PeriodStats(days=days, total=total, avg_daily=avg_daily, growth_rate=growth)


# ------------------------------------------------------------------------------
# Single-day view and chart series
# ------------------------------------------------------------------------------


def compute_day_stats(day: str, records: Sequence[ProductSaleRecord]) -> DayStats:
    summary = summarize_day(day, records)
    top = _top_record(records)
    share = (
        top.total_sales / summary.total_revenue * 100
        if top is not None and summary.total_revenue > 0
        else 0.0
    )
    return DayStats(
        date=day,
        total_revenue=summary.total_revenue,
        total_products=summary.total_products,
        total_units_sold=summary.total_units_sold,
        top_product=top.product_name if top else None,
        top_product_revenue=summary.top_product_revenue,
        top_product_share=share,
    )


_METRIC_FIELDS: Dict[str, str] = {
    "revenue": "total_revenue",
    "units": "total_units_sold",
    "products": "total_products",
}
CHART_METRICS = tuple(_METRIC_FIELDS)


def build_chart_series(summaries: Sequence[DailySummary], metric: ChartMetric = "revenue") -> List[SeriesPoint]:
    """Chronological (oldest first) series of one summary metric."""
    try:
        field = _METRIC_FIELDS[metric]
    except KeyError:
        raise ValueError(f"Unknown metric '{metric}' (expected one of: {', '.join(_METRIC_FIELDS)})") from None
    ordered = sorted(summaries, key=lambda s: s.date)
    return [
        SeriesPoint(label=format_short_date(s.date), value=getattr(s, field), date=s.date)
        for s in ordered
    ]


def build_recent_daily_series(
    ledger: Ledger,
    days: int = 7,
    now: Optional[datetime] = None,
) -> List[Dict[str, object]]:
    """
    Revenue and units for each of the last `days` calendar days ending today,
    oldest first, with zero for days that have no records.
    """
    if days < 1:
        raise ValueError("days must be at least 1")
    today = (now or datetime.now()).date()
    index = pd.date_range(end=pd.Timestamp(today), periods=days, freq="D")

    frame = _records_frame(ledger)
    if frame.empty:
        daily = pd.DataFrame({"revenue": 0.0, "units": 0}, index=index)
    else:
        frame["date"] = pd.to_datetime(frame["date"], errors="coerce")
        frame = frame.dropna(subset=["date"])
        daily = (
            frame.groupby("date")[["revenue", "units"]]
            .sum()
            .reindex(index, fill_value=0)
        )

    return [
        {
            "date": ts.date().isoformat(),
            "label": format_short_date(ts.date()),
            "revenue": float(row["revenue"]),
            "units": int(row["units"]),
        }
        for ts, row in daily.iterrows()
    ]


__all__ = [
    "CHART_METRICS",
    "build_chart_series",
    "build_daily_summaries",
    "build_product_rollups",
    "build_recent_daily_series",
    "compute_day_stats",
    "compute_period_stats",
    "filter_by_period",
    "summarize_day",
]
