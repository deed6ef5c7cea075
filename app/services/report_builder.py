"""
Report builder.

Turns already-aggregated payloads into self-contained HTML documents (inline
CSS, no external resources) that the export service hands to the renderer.
All user-supplied text goes through Jinja2 autoescaping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from app.domain.filters import period_label
from app.domain.models import DailySummary, ProductRollup, ProductSaleRecord
from app.services.aggregation import compute_period_stats
from app.services.formatting import (
    bar_width_pct,
    format_count,
    format_currency,
    format_long_date,
    format_numeric_date,
    format_percent,
    format_short_date,
    truncate_label,
)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

FOOTER_NAME = "Daily Sales Tracker"
TOP_PRODUCTS_LIMIT = 10
LABEL_LENGTH = 28


class ReportKind(str, Enum):
    DAILY = "daily"
    ANALYTICS = "analytics"


@dataclass
class DailyReportPayload:
    current_date: str
    products: Sequence[ProductSaleRecord] = field(default_factory=list)


@dataclass
class AnalyticsReportPayload:
    selected_period: str
    summaries: Sequence[DailySummary] = field(default_factory=list)
    top_products: Sequence[ProductRollup] = field(default_factory=list)


ReportPayload = Union[DailyReportPayload, AnalyticsReportPayload]


def _build_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )


_env = _build_environment()


def _chip(label: str, value: str) -> Dict[str, str]:
    return {"label": label, "value": value}


def _bar(label: str, value: float, max_value: float, display: str) -> Dict[str, Any]:
    return {
        "label": truncate_label(label, LABEL_LENGTH),
        "full_label": label,
        "pct": bar_width_pct(value, max_value),
        "value": display,
    }


def _generated_line(generated_at: datetime) -> str:
    return f"Generated: {format_long_date(generated_at)}"


# ------------------------------------------------------------------------------
# Single-day product report
# ------------------------------------------------------------------------------


def build_sales_report_html(
    current_date: str,
    products: Sequence[ProductSaleRecord],
    generated_at: Optional[datetime] = None,
) -> str:
    generated_at = generated_at or datetime.now()

    total_revenue = sum(p.total_sales for p in products)
    total_units = sum(p.qty_sold for p in products)
    avg_price = total_revenue / total_units if total_units > 0 else None
    max_revenue = max((p.total_sales for p in products), default=0)

    chips = [
        _chip("Revenue", format_currency(total_revenue)),
        _chip("Products", format_count(len(products))),
        _chip("Units", format_count(total_units)),
        _chip("Avg Price", format_currency(avg_price, decimals=2)),
    ]
    bars = [
        _bar(p.product_name, p.total_sales, max_revenue, format_currency(p.total_sales))
        for p in products
    ]
    rows = [
        {
            "name": p.product_name,
            "initial": format_count(p.initial_qty),
            "sold": format_count(p.qty_sold),
            "price": format_currency(p.price_per_unit, decimals=2),
            "total": format_currency(p.total_sales),
            "remaining": format_count(p.remaining_qty),
        }
        for p in products
    ]

    return _env.get_template("sales_report.html").render(
        title="Daily Sales Report",
        subtitle_lines=[format_long_date(current_date), _generated_line(generated_at)],
        chips=chips,
        bars=bars,
        rows=rows,
        app_name=FOOTER_NAME,
    )


# ------------------------------------------------------------------------------
# Multi-day analytics report
# ------------------------------------------------------------------------------


def build_analytics_report_html(
    selected_period: str,
    summaries: Sequence[DailySummary],
    top_products: Sequence[ProductRollup],
    generated_at: Optional[datetime] = None,
) -> str:
    generated_at = generated_at or datetime.now()

    stats = compute_period_stats(sorted(summaries, key=lambda s: s.date, reverse=True))
    max_day_revenue = max((d.total_revenue for d in summaries), default=0)
    shown_products = list(top_products[:TOP_PRODUCTS_LIMIT])
    max_product_revenue = max((p.total_revenue for p in shown_products), default=0)

    chips = [
        _chip("Total Revenue", format_currency(stats.total.revenue)),
        _chip("Days", format_count(stats.days)),
        _chip("Units", format_count(stats.total.units)),
        _chip("Avg Daily", format_currency(stats.avg_daily.revenue)),
        _chip("Growth", format_percent(stats.growth_rate)),
    ]
    day_bars = [
        _bar(format_short_date(d.date), d.total_revenue, max_day_revenue, format_currency(d.total_revenue))
        for d in summaries
    ]
    product_bars = [
        _bar(p.product_name, p.total_revenue, max_product_revenue, format_currency(p.total_revenue))
        for p in shown_products
    ]
    rows = [
        {
            "date": format_numeric_date(d.date),
            "revenue": format_currency(d.total_revenue),
            "products": format_count(d.total_products),
            "units": format_count(d.total_units_sold),
            "top_product": d.top_product,
            "top_revenue": format_currency(d.top_product_revenue),
        }
        for d in summaries
    ]

    return _env.get_template("analytics_report.html").render(
        title="Sales Analytics Report",
        subtitle_lines=[
            f"Period: {period_label(selected_period)} • {_generated_line(generated_at)}"
        ],
        chips=chips,
        day_bars=day_bars,
        product_bars=product_bars,
        rows=rows,
        app_name=FOOTER_NAME,
    )


def build_report(
    kind: ReportKind | str,
    payload: ReportPayload,
    generated_at: Optional[datetime] = None,
) -> str:
    """Dispatches to the builder for `kind`; the payload type must match."""
    kind = ReportKind(kind)
    if kind is ReportKind.DAILY:
        if not isinstance(payload, DailyReportPayload):
            raise TypeError("daily reports need a DailyReportPayload")
        return build_sales_report_html(payload.current_date, payload.products, generated_at)
    if not isinstance(payload, AnalyticsReportPayload):
        raise TypeError("analytics reports need an AnalyticsReportPayload")
    return build_analytics_report_html(
        payload.selected_period, payload.summaries, payload.top_products, generated_at
    )


__all__ = [
    "AnalyticsReportPayload",
    "DailyReportPayload",
    "ReportKind",
    "build_analytics_report_html",
    "build_report",
    "build_sales_report_html",
]
