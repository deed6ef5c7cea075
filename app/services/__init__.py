"""
Domain services kept apart from the routes.

Aggregation and report building are pure functions; LedgerService and
ExportService wrap the store and the renderer.
"""

from .aggregation import (  # noqa: F401
    build_chart_series,
    build_daily_summaries,
    build_product_rollups,
    build_recent_daily_series,
    compute_day_stats,
    compute_period_stats,
    filter_by_period,
)
from .export_service import ExportService, ExportedFile  # noqa: F401
from .ledger_service import LedgerService, SaveOutcome  # noqa: F401
from .report_builder import build_analytics_report_html, build_sales_report_html  # noqa: F401

__all__ = [
    "build_analytics_report_html",
    "build_chart_series",
    "build_daily_summaries",
    "build_product_rollups",
    "build_recent_daily_series",
    "build_sales_report_html",
    "compute_day_stats",
    "compute_period_stats",
    "ExportedFile",
    "ExportService",
    "filter_by_period",
    "LedgerService",
    "SaveOutcome",
]
