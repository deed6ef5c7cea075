"""
Domain models and filters.
Independent of storage and HTTP.
"""

from .models import (
    DailySummary,
    DayStats,
    Ledger,
    PeriodStats,
    PeriodTotals,
    ProductRollup,
    ProductSaleRecord,
    SeriesPoint,
)
from .filters import Period, PeriodWindow

__all__ = [
    "DailySummary",
    "DayStats",
    "Ledger",
    "Period",
    "PeriodStats",
    "PeriodTotals",
    "PeriodWindow",
    "ProductRollup",
    "ProductSaleRecord",
    "SeriesPoint",
]
