"""
Domain models.
Plain dataclasses for sale records and the views derived from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ProductSaleRecord:
    """One product line recorded for a given day."""

    id: str
    product_name: str
    initial_qty: int
    qty_sold: int
    price_per_unit: float

    @property
    def total_sales(self) -> float:
        return self.qty_sold * self.price_per_unit

    @property
    def remaining_qty(self) -> int:
        return self.initial_qty - self.qty_sold

    def to_dict(self) -> Dict[str, Any]:
        """camelCase wire form, derived fields included."""
        return {
            "id": self.id,
            "productName": self.product_name,
            "initialQty": self.initial_qty,
            "qtySold": self.qty_sold,
            "pricePerUnit": self.price_per_unit,
            "totalSales": self.total_sales,
            "remainingQty": self.remaining_qty,
        }


# date (ISO string) -> records in insertion order
Ledger = Dict[str, List[ProductSaleRecord]]


@dataclass
class DailySummary:
    """Aggregated figures for one ledger date."""

    date: str
    total_revenue: float
    total_products: int
    total_units_sold: int
    top_product: str
    top_product_revenue: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "totalRevenue": self.total_revenue,
            "totalProducts": self.total_products,
            "totalUnitsSold": self.total_units_sold,
            "topProduct": self.top_product,
            "topProductRevenue": self.top_product_revenue,
        }


@dataclass
class ProductRollup:
    """Cross-date totals for every record sharing one product name."""

    product_name: str
    total_revenue: float
    total_units_sold: int
    appearances: int
    last_sold: str
    # None when no units were sold
    average_price: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productName": self.product_name,
            "totalRevenue": self.total_revenue,
            "totalUnitsSold": self.total_units_sold,
            "averagePrice": self.average_price,
            "appearances": self.appearances,
            "lastSold": self.last_sold,
        }


@dataclass
class PeriodTotals:
    revenue: float = 0.0
    products: float = 0.0
    units: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"revenue": self.revenue, "products": self.products, "units": self.units}


@dataclass
class PeriodStats:
    """Totals, per-day averages and growth over a filtered window."""

    days: int
    total: PeriodTotals = field(default_factory=PeriodTotals)
    avg_daily: PeriodTotals = field(default_factory=PeriodTotals)
    growth_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "days": self.days,
            "total": self.total.to_dict(),
            "avgDaily": self.avg_daily.to_dict(),
            "growthRate": self.growth_rate,
        }


@dataclass
class DayStats:
    """Headline figures for the single-day view."""

    date: str
    total_revenue: float
    total_products: int
    total_units_sold: int
    top_product: Optional[str] = None
    top_product_revenue: float = 0.0
    top_product_share: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "totalRevenue": self.total_revenue,
            "totalProducts": self.total_products,
            "totalUnitsSold": self.total_units_sold,
            "topProduct": self.top_product,
            "topProductRevenue": self.top_product_revenue,
            "topProductShare": self.top_product_share,
        }


@dataclass
class SeriesPoint:
    """One point of a chart series."""

    label: str
    value: float
    date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "value": self.value, "date": self.date}
